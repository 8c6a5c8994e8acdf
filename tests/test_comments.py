import pytest

from docthis.comments import (
    find_existing_block,
    param_name,
    param_root,
    parse_comment,
    split_type,
    tag_key,
)
from docthis.errors import MalformedCommentError
from docthis.models import Position, Range, TagLine
from docthis.syntax import SourceText


def test_parse_comment_splits_description_and_tags():
    lines = [
        "  /**",
        "   * Adds two numbers.",
        "   *",
        "   * @param {number} a first",
        "   *   operand",
        "   * @return {number}",
        "   */",
    ]
    parsed = parse_comment(lines)
    assert parsed.description == ["Adds two numbers.", ""]
    assert [t.tag for t in parsed.tags] == ["param", "return"]
    assert parsed.tags[0].body == "{number} a first"
    assert parsed.tags[0].continuation == ["  operand"]


def test_parse_single_line_comment():
    parsed = parse_comment(["/** @type {string} */"])
    assert parsed.description == []
    assert parsed.tags == [TagLine(tag="type", body="{string}")]


def test_parse_comment_rejects_unbalanced_types():
    with pytest.raises(MalformedCommentError):
        parse_comment(["/**", " * @param {number a", " */"])


def test_split_type():
    assert split_type("{Map<string, {a: 1}>} m rest") == ("Map<string, {a: 1}>", "m rest")
    assert split_type("name text") == (None, "name text")
    with pytest.raises(ValueError):
        split_type("{oops")


@pytest.mark.parametrize(
    "body, name",
    [
        ("{number} a the a", "a"),
        ("[b=1] optional", "b"),
        ("{string} [c] maybe", "c"),
        ("{object} opts.key nested", "opts.key"),
        ("", None),
    ],
)
def test_param_name(body, name):
    assert param_name(body) == name


def test_param_root():
    assert param_root("opts.key") == "opts"
    assert param_root("items[].id") == "items"


def test_tag_key_uses_aliases():
    assert tag_key(TagLine(tag="arg", body="{x} a")) == ("param", "a")
    assert tag_key(TagLine(tag="return", body="{x}")) == ("returns", None)
    assert tag_key(TagLine(tag="exception", body="{TypeError} bad")) == ("throws", "TypeError")
    assert tag_key(TagLine(tag="typeparam", body="T")) == ("template", "T")
    assert tag_key(TagLine(tag="emits", body="changed")) == ("fires", "changed")
    assert tag_key(TagLine(tag="example", body="f()")) == ("example", None)


def test_find_existing_block_skips_blank_lines():
    src = SourceText("/**\n * Doc.\n */\n\nfunction f() {}\n")
    found = find_existing_block(src, 4)
    assert found is not None
    assert (found.first_line, found.last_line) == (0, 2)
    assert found.parsed.description == ["Doc."]
    assert found.range == Range(Position(0, 0), Position(2, 3))


@pytest.mark.parametrize(
    "code",
    [
        "/* plain */\nfunction f() {}\n",
        "// line\nfunction f() {}\n",
        "/**/\nfunction f() {}\n",
        "const x = 1;\nfunction f() {}\n",
    ],
)
def test_find_existing_block_ignores_other_comments(code):
    assert find_existing_block(SourceText(code), 1) is None


def test_find_existing_block_marks_malformed():
    src = SourceText("/**\n * @param {number a\n */\nfunction f(a) {}\n")
    found = find_existing_block(src, 3)
    assert found is not None
    assert found.parsed is None
