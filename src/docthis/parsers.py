from abc import abstractmethod
from typing import List, Optional

import tree_sitter as ts

from docthis.models import Position, Range
from docthis.syntax import AbstractSyntaxParser, SourceText, SyntaxNode, SyntaxTree


class _ByteIndex:
    """
    Converts tree-sitter points (row, byte column) into code point positions.
    """

    def __init__(self, data: bytes, tree: ts.Tree) -> None:
        self.tree = tree
        self._rows = data.split(b"\n")
        self._ascii = [r.isascii() for r in self._rows]

    def position(self, point) -> Position:
        row, col = point[0], point[1]
        if row >= len(self._rows) or self._ascii[row]:
            return Position(row, col)
        return Position(row, len(self._rows[row][:col].decode("utf-8", errors="replace")))


class TreeSitterNode(SyntaxNode):
    __slots__ = ("_node", "_index")

    def __init__(self, node: ts.Node, index: _ByteIndex) -> None:
        self._node = node
        self._index = index

    def _wrap(self, node: Optional[ts.Node]) -> Optional["TreeSitterNode"]:
        return TreeSitterNode(node, self._index) if node is not None else None

    @property
    def kind(self) -> str:
        return self._node.type

    @property
    def is_named(self) -> bool:
        return self._node.is_named

    @property
    def range(self) -> Range:
        return Range(
            self._index.position(self._node.start_point),
            self._index.position(self._node.end_point),
        )

    @property
    def parent(self) -> Optional[SyntaxNode]:
        return self._wrap(self._node.parent)

    @property
    def children(self) -> List[SyntaxNode]:
        return [TreeSitterNode(c, self._index) for c in self._node.children]

    @property
    def text(self) -> str:
        if not self._node.text:
            return ""
        return self._node.text.decode("utf-8")

    def fields(self, name: str) -> List[SyntaxNode]:
        return [
            TreeSitterNode(c, self._index)
            for c in self._node.children_by_field_name(name)
        ]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TreeSitterNode):
            return (
                self._node.start_byte == other._node.start_byte
                and self._node.end_byte == other._node.end_byte
                and self._node.type == other._node.type
            )
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash((self._node.start_byte, self._node.end_byte, self._node.type))


class TreeSitterSyntaxParser(AbstractSyntaxParser):
    """
    Base class for parsers backed by a tree-sitter grammar.
    """

    @abstractmethod
    def _get_parser(self) -> ts.Parser: ...

    def parse(self, text: str) -> SyntaxTree:
        source = SourceText(text)
        data = text.encode("utf-8")
        tree = self._get_parser().parse(data)
        index = _ByteIndex(data, tree)
        return SyntaxTree(TreeSitterNode(tree.root_node, index), source, self.language)
