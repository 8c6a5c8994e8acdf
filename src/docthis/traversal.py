from typing import Callable, List, Optional, Set

from docthis.classifier import Match, NodeClassifier
from docthis.comments import ExistingComment, find_existing_block
from docthis.errors import UnsupportedConstructError
from docthis.logger import logger
from docthis.models import EditOperation, Position, Range
from docthis.syntax import SyntaxNode, SyntaxTree

Synthesizer = Callable[
    [SyntaxTree, Match, Optional[ExistingComment]], List[EditOperation]
]


def _outside(node: SyntaxNode, bounds: Range) -> bool:
    return node.end.line < bounds.start.line or node.start.line > bounds.end.line


class TraversalController:
    """
    Walks a tree in document order and synthesizes one edit batch for every
    documentable node, optionally limited to a range of lines.
    """

    def __init__(self, classifier: NodeClassifier, synthesize: Synthesizer) -> None:
        self.classifier = classifier
        self.synthesize = synthesize

    def sweep(
        self,
        tree: SyntaxTree,
        bounds: Optional[Range] = None,
        overwrite_existing: bool = False,
    ) -> List[EditOperation]:
        source = tree.source
        seen: Set[Position] = set()
        edits: List[EditOperation] = []

        stack = [tree.root]
        while stack:
            node = stack.pop()
            if bounds is not None and node is not tree.root and _outside(node, bounds):
                continue
            stack.extend(reversed(node.named_children))

            match = self.classifier.match(node)
            if match is None or match.anchor_start in seen:
                continue
            seen.add(match.anchor_start)

            line = match.anchor_start.line
            if bounds is not None and not (bounds.start.line <= line <= bounds.end.line):
                continue
            if not source.starts_line(match.anchor_start):
                logger.debug("Skipping node that does not start its line", line=line + 1)
                continue

            existing = find_existing_block(source, line)
            if existing is not None and not overwrite_existing:
                logger.debug("Skipping documented node", line=line + 1, shape=match.shape.value)
                continue
            try:
                edits.extend(self.synthesize(tree, match, existing))
            except UnsupportedConstructError:
                logger.debug("Skipping unsupported node", node_type=node.kind, line=line + 1)

        return sorted(edits, key=lambda e: (e.range.start, e.range.end))
