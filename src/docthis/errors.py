from typing import Optional


class DocThisError(Exception):
    """Base class for all errors raised by the synthesis engine."""


class UnsupportedLanguageError(DocThisError):
    def __init__(self, language_id: str) -> None:
        super().__init__(
            f"Language '{language_id}' is not supported, only JavaScript and TypeScript are."
        )
        self.language_id = language_id


class UnsupportedConstructError(DocThisError):
    """
    The cursor or node resolves to nothing documentable. Public operations turn
    this into a silent no-op.
    """


class MalformedCommentError(DocThisError):
    def __init__(self, message: str, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line


class InternalError(DocThisError):
    """
    Wraps any unexpected exception raised while classifying, extracting,
    rendering or merging. The original exception is kept as ``cause``.
    """

    def __init__(self, action: str, cause: BaseException) -> None:
        super().__init__(f"'{action}' failed: {cause}")
        self.action = action
        self.cause = cause
