import inspect
from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional, Type

from docthis.models import Position, ProgrammingLanguage, Range


class SourceText:
    """
    Immutable view of a source string split into lines. Positions are
    (line, character) pairs in code points; offsets are code point indexes.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        # rows follow `\n` like the parse tree; a `\r` before it is part of the ending
        self.lines: List[str] = []
        self.endings: List[str] = []
        self._line_starts: List[int] = []
        raw = text.split("\n")
        offset = 0
        for index, line in enumerate(raw):
            ending = "\n" if index < len(raw) - 1 else ""
            if ending and line.endswith("\r"):
                line, ending = line[:-1], "\r\n"
            self._line_starts.append(offset)
            self.lines.append(line)
            self.endings.append(ending)
            offset += len(line) + len(ending)
        crlf = self.endings.count("\r\n")
        self.eol = "\r\n" if crlf and crlf >= self.endings.count("\n") else "\n"

    def eol_of(self, index: int) -> str:
        """Line ending of line *index*, or the dominant one if it has none."""
        if 0 <= index < len(self.endings) and self.endings[index]:
            return self.endings[index]
        return self.eol

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line(self, index: int) -> str:
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return ""

    def indent_of(self, index: int) -> str:
        line = self.line(index)
        return line[: len(line) - len(line.lstrip())]

    def is_blank(self, index: int) -> bool:
        return not self.line(index).strip()

    def starts_line(self, pos: Position) -> bool:
        """True if only whitespace precedes *pos* on its line."""
        return not self.line(pos.line)[: pos.character].strip()

    def offset_at(self, pos: Position) -> int:
        if pos.line >= len(self.lines):
            return len(self.text)
        line = self.lines[pos.line]
        return self._line_starts[pos.line] + min(pos.character, len(line))

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        lo, hi = 0, len(self._line_starts) - 1
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self._line_starts[mid] <= offset:
                lo = mid
            else:
                hi = mid - 1
        return Position(lo, offset - self._line_starts[lo])

    def text_in(self, rng: Range) -> str:
        return self.text[self.offset_at(rng.start) : self.offset_at(rng.end)]

    def end_position(self) -> Position:
        last = len(self.lines) - 1
        return Position(last, len(self.lines[last]))


class SyntaxNode(ABC):
    """
    Read-only view of one node of a parse tree. Concrete parsers adapt their
    own node type to this interface; nothing in the engine depends on a
    particular parser library.
    """

    @property
    @abstractmethod
    def kind(self) -> str: ...

    @property
    @abstractmethod
    def is_named(self) -> bool: ...

    @property
    @abstractmethod
    def range(self) -> Range: ...

    @property
    @abstractmethod
    def parent(self) -> Optional["SyntaxNode"]: ...

    @property
    @abstractmethod
    def children(self) -> List["SyntaxNode"]: ...

    @property
    @abstractmethod
    def text(self) -> str: ...

    @abstractmethod
    def fields(self, name: str) -> List["SyntaxNode"]: ...

    def field(self, name: str) -> Optional["SyntaxNode"]:
        found = self.fields(name)
        return found[0] if found else None

    @property
    def named_children(self) -> List["SyntaxNode"]:
        return [c for c in self.children if c.is_named and c.kind != "comment"]

    @property
    def start(self) -> Position:
        return self.range.start

    @property
    def end(self) -> Position:
        return self.range.end

    def has_token(self, *tokens: str) -> bool:
        """True if one of the anonymous direct children is one of *tokens*."""
        return any(not c.is_named and c.kind in tokens for c in self.children)

    def prev_named_sibling(self) -> Optional["SyntaxNode"]:
        parent = self.parent
        if parent is None:
            return None
        prev: Optional[SyntaxNode] = None
        for child in parent.children:
            if child == self:
                return prev
            if child.is_named and child.kind != "comment":
                prev = child
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SyntaxNode):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.range == other.range
            and self.is_named == other.is_named
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.range, self.is_named))

    def __repr__(self) -> str:
        return f"<{self.kind} {self.range!r}>"


class SyntaxTree:
    """
    One parse of one source snapshot. Must not be kept after the source has
    been edited.
    """

    def __init__(
        self, root: SyntaxNode, source: SourceText, language: ProgrammingLanguage
    ) -> None:
        self.root = root
        self.source = source
        self.language = language

    def find_node_at(self, pos: Position) -> SyntaxNode:
        """
        Return the deepest named node containing *pos*. A node ending exactly at
        *pos* is accepted when no node strictly contains it.
        """
        node = self.root
        while True:
            candidates = [c for c in node.children if c.is_named]
            nxt = next((c for c in candidates if c.range.contains(pos)), None)
            if nxt is None:
                nxt = next((c for c in candidates if c.range.end == pos), None)
            if nxt is None:
                return node
            node = nxt

    def ancestors(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        cur = node.parent
        while cur is not None:
            yield cur
            cur = cur.parent

    def children_of(self, node: SyntaxNode) -> List[SyntaxNode]:
        return node.named_children

    def walk(self) -> Iterator[SyntaxNode]:
        """Pre-order, document-order traversal of named nodes."""
        stack = [self.root]
        while stack:
            cur = stack.pop()
            yield cur
            stack.extend(reversed(cur.named_children))

    def text(self, rng: Range) -> str:
        return self.source.text_in(rng)


class AbstractSyntaxParser(ABC):
    """
    Produces a `SyntaxTree` for one JavaScript-family dialect. Concrete
    subclasses register themselves for the editor language ids they handle.
    """

    language: ProgrammingLanguage
    language_ids: List[str]

    def __init_subclass__(cls, **kw):
        super().__init_subclass__(**kw)
        if not inspect.isabstract(cls):
            if not getattr(cls, "language_ids", None):
                raise ValueError(f"{cls.__name__} missing `language_ids`")
            SyntaxParserRegistry.register_parser(cls)

    @abstractmethod
    def parse(self, text: str) -> SyntaxTree: ...


class SyntaxParserRegistry:
    """
    Registry mapping editor language ids to parser implementations.
    """

    _parsers: Dict[str, Type[AbstractSyntaxParser]] = {}

    @classmethod
    def register_parser(cls, parser: Type[AbstractSyntaxParser]) -> None:
        for language_id in parser.language_ids:
            cls._parsers[language_id] = parser

    @classmethod
    def get_parser(cls, language_id: str) -> Optional[Type[AbstractSyntaxParser]]:
        return cls._parsers.get(language_id)

    @classmethod
    def language_ids(cls) -> List[str]:
        return sorted(cls._parsers)


# Helpers
def node_text(node: Optional[SyntaxNode]) -> str:
    """
    Get text of the node, empty for missing nodes.
    """
    if node is None:
        return ""
    return node.text or ""


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())
