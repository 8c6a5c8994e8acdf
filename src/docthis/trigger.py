from typing import Optional

from docthis.models import Position, TextChange
from docthis.syntax import SourceText

COMMENT_OPENER = "/**"


def _is_newline(text: str) -> bool:
    return text.startswith("\n") or text.startswith("\r\n")


def is_comment_trigger(source: SourceText, change: TextChange) -> bool:
    """
    True when *change* is a newline typed right after `/**`. *source* is the
    document after the change was applied.
    """
    if not _is_newline(change.text):
        return False
    end = change.range.end
    if end.character <= 2:
        return False
    line = source.line(change.range.start.line)
    return line[end.character - 3 : end.character] == COMMENT_OPENER


def opener_position(change: TextChange) -> Position:
    return Position(change.range.start.line, change.range.end.character - 3)


def stub_end_line(source: SourceText, opener: Position) -> Optional[int]:
    """
    Return the last line of an unterminated comment stub started at *opener*
    (the opener line, the line typed right after it and any following `*`
    lines), or None when the comment is properly closed.
    """
    rest = source.line(opener.line)[opener.character + len(COMMENT_OPENER) :]
    if "*/" in rest:
        return None
    last = opener.line
    for index in range(opener.line + 1, source.line_count):
        text = source.line(index).strip()
        if text.startswith("*"):
            if "*/" in text:
                return None
            last = index
        elif not text and index == opener.line + 1:
            last = index
        else:
            break
    return last
