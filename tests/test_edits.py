import pytest

from docthis.edits import apply_edits, sort_edits
from docthis.models import EditOperation, Position, Range


def test_edits_are_applied_bottom_up():
    text = "a\nb\nc\n"
    edits = [
        EditOperation.insert(Position(2, 0), "// c\n"),
        EditOperation.insert(Position(0, 0), "// a\n"),
        EditOperation.replace(Range(Position(1, 0), Position(1, 1)), "B"),
    ]
    assert apply_edits(text, edits) == "// a\na\nB\n// c\nc\n"


def test_sort_edits_is_document_order():
    later = EditOperation.insert(Position(4, 0), "x")
    earlier = EditOperation.insert(Position(1, 2), "y")
    assert sort_edits([later, earlier]) == [earlier, later]


def test_overlapping_edits_are_rejected():
    text = "abcdef"
    edits = [
        EditOperation.replace(Range(Position(0, 0), Position(0, 3)), "x"),
        EditOperation.replace(Range(Position(0, 2), Position(0, 4)), "y"),
    ]
    with pytest.raises(ValueError):
        apply_edits(text, edits)


def test_crlf_positions():
    text = "one\r\ntwo\r\n"
    edits = [EditOperation.insert(Position(1, 0), "/** */\r\n")]
    assert apply_edits(text, edits) == "one\r\n/** */\r\ntwo\r\n"


def test_empty_batch_is_identity():
    assert apply_edits("x = 1\n", []) == "x = 1\n"
