from typing import List, Sequence, Tuple

from docthis.models import EditOperation
from docthis.syntax import SourceText


def sort_edits(edits: Sequence[EditOperation]) -> List[EditOperation]:
    """Document order; inserts at the same point keep their relative order."""
    return sorted(edits, key=lambda e: (e.range.start, e.range.end))


def apply_edits(text: str, edits: Sequence[EditOperation]) -> str:
    """
    Apply an edit batch computed against *text*. All positions refer to the
    original text, so the batch is applied from the bottom up. Overlapping
    edits are rejected before anything is applied.
    """
    source = SourceText(text)
    spans: List[Tuple[int, int, str]] = [
        (source.offset_at(e.range.start), source.offset_at(e.range.end), e.text)
        for e in sort_edits(edits)
    ]
    for prev, cur in zip(spans, spans[1:]):
        if cur[0] < prev[1]:
            raise ValueError(f"Overlapping edits at offsets {prev[:2]} and {cur[:2]}")
    out = text
    for start, end, new_text in reversed(spans):
        out = out[:start] + new_text + out[end:]
    return out
