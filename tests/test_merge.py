from docthis.comments import ExistingComment, parse_comment
from docthis.merge import CommentPlanner
from docthis.models import CommentBlock, Position, TagLine


# ------------------------------------------------------------------ #
# helpers
# ------------------------------------------------------------------ #
def _block(*tags, indent=""):
    return CommentBlock(
        indent=indent,
        description=[""],
        tags=[TagLine(tag=t, body=b) for t, b in tags],
    )


def _merge(block, old_lines):
    return CommentPlanner().merge(block, parse_comment(old_lines)).lines()


# ------------------------------------------------------------------ #
# tests
# ------------------------------------------------------------------ #
def test_existing_text_wins_and_new_params_are_added():
    old = [
        "/**",
        " * Adds things.",
        " * @param {number} a first value",
        " * @example add(1, 2)",
        " */",
    ]
    new = _block(("param", "a"), ("param", "c"))
    assert _merge(new, old) == [
        "/**",
        " * Adds things.",
        " * @param {number} a first value",
        " * @example add(1, 2)",
        " * @param c",
        " */",
    ]


def test_stale_params_and_templates_are_removed():
    old = [
        "/**",
        " * @template T",
        " * @template U gone",
        " * @param {object} opts options",
        " * @param {string} opts.name nested",
        " * @param b removed",
        " * @param b.x removed too",
        " * @returns {number} the sum",
        " */",
    ]
    new = _block(("template", "T"), ("param", "opts"))
    assert _merge(new, old) == [
        "/**",
        " *",
        " * @template T",
        " * @param {object} opts options",
        " * @param {string} opts.name nested",
        " * @returns {number} the sum",
        " */",
    ]


def test_params_follow_the_new_order():
    old = ["/**", " * @param b second", " * @param a first", " */"]
    new = _block(("param", "a"), ("param", "b"))
    assert _merge(new, old) == ["/**", " *", " * @param a first", " * @param b second", " */"]


def test_aliases_match_rendered_tags():
    old = ["/**", " * Sum.", " * @arg x the x", " * @return {number} total", " */"]
    new = _block(("param", "{number} x"), ("returns", "{number}"))
    assert _merge(new, old) == [
        "/**",
        " * Sum.",
        " * @arg x the x",
        " * @return {number} total",
        " */",
    ]


def test_unknown_tags_keep_their_neighbour():
    old = [
        "/**",
        " * @see other",
        " * @param a",
        " * @since 1.2",
        " * @returns {string}",
        " */",
    ]
    new = _block(("async", ""), ("param", "a"), ("returns", "{string}"))
    assert _merge(new, old) == [
        "/**",
        " *",
        " * @see other",
        " * @async",
        " * @param a",
        " * @since 1.2",
        " * @returns {string}",
        " */",
    ]


def test_merge_is_idempotent():
    old = ["/**", " * Doc.", " * @param b gone", " * @example x()", " */"]
    new = _block(("param", "a"), ("returns", "{number}"))
    once = _merge(new, old)
    assert _merge(new, once) == once


def test_plan_inserts_replaces_and_skips():
    planner = CommentPlanner()
    block = _block(("param", "a"), indent="  ")

    [insert] = planner.plan(3, block)
    assert insert.is_insert
    assert insert.range.start == Position(3, 0)
    assert insert.text == "  /**\n   *\n   * @param a\n   */\n"

    lines = block.lines()
    same = ExistingComment(1, 4, lines, parse_comment(lines))
    assert planner.plan(5, block, same) == []

    broken = ExistingComment(1, 3, ["  /**", "   * @param {x", "   */"], None)
    [replace] = planner.plan(4, block, broken)
    assert replace.range.start == Position(1, 0)
    assert replace.range.end == Position(3, 5)
    assert replace.text == block.to_text()
