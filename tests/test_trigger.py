from docthis.models import Position, Range, TextChange
from docthis.syntax import SourceText
from docthis.trigger import is_comment_trigger, opener_position, stub_end_line


def _change(line: int, character: int, text: str) -> TextChange:
    pos = Position(line, character)
    return TextChange(range=Range(pos, pos), text=text)


def test_newline_after_opener_triggers():
    src = SourceText("  /**\n  \nfunction f() {}\n")
    assert is_comment_trigger(src, _change(0, 5, "\n  "))
    assert is_comment_trigger(src, _change(0, 5, "\r\n"))


def test_other_changes_do_not_trigger():
    src = SourceText("  /**\n\nfunction f() {}\n")
    assert not is_comment_trigger(src, _change(0, 5, "x"))
    assert not is_comment_trigger(src, _change(0, 4, "\n"))
    assert not is_comment_trigger(src, _change(0, 2, "\n"))
    assert not is_comment_trigger(SourceText("/*\n"), _change(0, 2, "\n"))


def test_opener_position():
    assert opener_position(_change(3, 7, "\n")) == Position(3, 4)


def test_stub_end_line():
    unterminated = SourceText("/**\n\nfunction f() {}\n")
    assert stub_end_line(unterminated, Position(0, 0)) == 1

    continued = SourceText("/**\n * \n * more\nfunction f() {}\n")
    assert stub_end_line(continued, Position(0, 0)) == 2

    closed = SourceText("/**\n * \n */\nfunction f() {}\n")
    assert stub_end_line(closed, Position(0, 0)) is None

    inline = SourceText("/** */\nfunction f() {}\n")
    assert stub_end_line(inline, Position(0, 0)) is None
