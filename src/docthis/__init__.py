from docthis.edits import apply_edits
from docthis.engine import DocumentEngine
from docthis.errors import (
    DocThisError,
    InternalError,
    MalformedCommentError,
    UnsupportedConstructError,
    UnsupportedLanguageError,
)
from docthis.models import EditOperation, Position, Range, TextChange
from docthis.settings import DocThisSettings

__all__ = [
    "DocumentEngine",
    "DocThisSettings",
    "EditOperation",
    "Position",
    "Range",
    "TextChange",
    "apply_edits",
    "DocThisError",
    "InternalError",
    "MalformedCommentError",
    "UnsupportedConstructError",
    "UnsupportedLanguageError",
]
