from typing import Callable, List, Optional, TypeVar

import structlog
from devtools import pformat

import docthis.lang  # registers the tree-sitter parsers
from docthis.classifier import Match, NodeClassifier
from docthis.comments import ExistingComment, ParsedComment, find_existing_block
from docthis.errors import (
    DocThisError,
    InternalError,
    UnsupportedConstructError,
    UnsupportedLanguageError,
)
from docthis.extractor import SignatureExtractor
from docthis.logger import logger
from docthis.merge import CommentPlanner
from docthis.models import EditOperation, Position, Range, TextChange
from docthis.renderer import CommentRenderer
from docthis.settings import DocThisSettings
from docthis.syntax import (
    AbstractSyntaxParser,
    SourceText,
    SyntaxParserRegistry,
    SyntaxTree,
)
from docthis.traversal import TraversalController
from docthis.trigger import is_comment_trigger, opener_position, stub_end_line

T = TypeVar("T")


class DocumentEngine:
    """
    Editor-facing entry points. Every call parses the text it is given; no
    tree outlives a call.
    """

    def __init__(
        self,
        settings: Optional[DocThisSettings] = None,
        registry: type[SyntaxParserRegistry] = SyntaxParserRegistry,
    ) -> None:
        self.settings = settings or DocThisSettings()
        self.registry = registry
        self.classifier = NodeClassifier(self.settings.max_ancestor_depth)
        self.extractor = SignatureExtractor(self.settings.render)
        self.renderer = CommentRenderer(self.settings.render)
        self.planner = CommentPlanner()
        self.traversal = TraversalController(self.classifier, self.synthesize)

    # --- parsing ----------------------------------------------------
    def parser_for(self, language_id: str) -> AbstractSyntaxParser:
        parser_cls = self.registry.get_parser(language_id)
        if parser_cls is None:
            raise UnsupportedLanguageError(language_id)
        return parser_cls()

    def parse(self, text: str, language_id: str) -> SyntaxTree:
        return self.parser_for(language_id).parse(text)

    # --- operations -------------------------------------------------
    def synthesize(
        self,
        tree: SyntaxTree,
        match: Match,
        existing: Optional[ExistingComment] = None,
    ) -> List[EditOperation]:
        source = tree.source
        line = match.anchor_start.line
        descriptor = self.extractor.extract(match)
        block = self.renderer.render(
            descriptor,
            display_name=match.display_name,
            indent=source.indent_of(line),
            eol=source.eol_of(line),
        )
        return self.planner.plan(line, block, existing)

    def document_this(
        self, text: str, position: Position, language_id: str
    ) -> Optional[List[EditOperation]]:
        """
        Document the construct under *position*. Returns None when nothing
        documentable encloses it.
        """
        parser = self.parser_for(language_id)

        def _document() -> Optional[List[EditOperation]]:
            tree = parser.parse(text)
            match = self._resolve(tree, position)
            if match is None:
                logger.debug("Nothing to document", position=repr(position))
                return None
            existing = find_existing_block(tree.source, match.anchor_start.line)
            try:
                return self.synthesize(tree, match, existing)
            except UnsupportedConstructError:
                logger.debug("Unsupported construct", node_type=match.node.kind)
                return None

        return self._run("Document This", _document)

    def document_everything(
        self,
        text: str,
        language_id: str,
        bounds: Optional[Range] = None,
        overwrite_existing: Optional[bool] = None,
    ) -> List[EditOperation]:
        parser = self.parser_for(language_id)
        if overwrite_existing is None:
            overwrite_existing = self.settings.sweep.overwrite_existing
        action = "Document Everything" if bounds is None else "Document Visible"
        return self._run(
            action,
            lambda: self.traversal.sweep(parser.parse(text), bounds, overwrite_existing),
        )

    def trace_node(self, text: str, position: Position, language_id: str) -> str:
        """
        Describe the node under *position*, its ancestors and what would be
        documented there.
        """
        parser = self.parser_for(language_id)

        def _trace() -> str:
            tree = parser.parse(text)
            pos = self._normalize_position(tree, position)
            node = tree.find_node_at(pos)
            chain = [node, *tree.ancestors(node)]
            lines = [
                f"Position: {pos!r}",
                "Node: " + " < ".join(f"{n.kind} {n.range!r}" for n in chain),
            ]
            match = self._resolve(tree, position)
            if match is None:
                lines.append("Shape: unsupported")
                return "\n".join(lines)
            lines.append(f"Shape: {match.shape.value}")
            lines.append(f"Documented node: {match.node.kind} {match.node.range!r}")
            lines.append(f"Anchor: {match.anchor.kind} at {match.anchor_start!r}")
            if match.display_name:
                lines.append(f"Name: {match.display_name}")
            lines.append("Descriptor: " + pformat(self.extractor.extract(match)))
            return "\n".join(lines)

        return self._run("Trace Syntax Node", _trace)

    def handle_text_change(
        self, text: str, change: TextChange, language_id: str
    ) -> Optional[List[EditOperation]]:
        """
        React to an editor change. When a newline was typed right after `/**`,
        document the construct below the comment. *text* is the document after
        the change.
        """
        source = SourceText(text)
        if not is_comment_trigger(source, change):
            return None
        opener = opener_position(change)
        if not source.starts_line(opener):
            return None

        last = stub_end_line(source, opener)
        if last is None:
            return self.document_this(text, opener, language_id)

        masked = list(source.lines)
        for index in range(opener.line, last + 1):
            masked[index] = " " * len(masked[index])
        parser = self.parser_for(language_id)

        def _document() -> Optional[List[EditOperation]]:
            tree = parser.parse(
                "".join(line + end for line, end in zip(masked, source.endings))
            )
            code_line = last + 1
            while code_line < source.line_count and source.is_blank(code_line):
                code_line += 1
            if code_line >= source.line_count:
                return None
            match = self._resolve(tree, Position(code_line, 0))
            if match is None or match.anchor_start.line != code_line:
                logger.debug("No construct directly below comment", line=code_line + 1)
                return None
            stub = ExistingComment(
                first_line=opener.line,
                last_line=last,
                lines=source.lines[opener.line : last + 1],
                parsed=ParsedComment(),
            )
            try:
                return self.synthesize(tree, match, stub)
            except UnsupportedConstructError:
                return None

        return self._run("Document This", _document)

    # --- helpers ----------------------------------------------------
    def _resolve(self, tree: SyntaxTree, position: Position) -> Optional[Match]:
        pos = self._normalize_position(tree, position)
        node = tree.find_node_at(pos)
        return self.classifier.resolve(
            node, accept=lambda m: tree.source.starts_line(m.anchor_start)
        )

    def _normalize_position(self, tree: SyntaxTree, position: Position) -> Position:
        source = tree.source
        line = position.line
        while line < source.line_count - 1 and source.is_blank(line):
            line += 1
        indent = len(source.indent_of(line))
        pos = Position(line, max(position.character, indent))
        if line != position.line:
            pos = Position(line, indent)

        node = tree.find_node_at(pos)
        if node.kind == "comment":
            offset = source.offset_at(node.end)
            rest = source.text[offset:]
            offset += len(rest) - len(rest.lstrip())
            pos = source.position_at(offset)
        return pos

    def _run(self, action: str, fn: Callable[[], T]) -> T:
        try:
            with structlog.contextvars.bound_contextvars(action=action):
                return fn()
        except DocThisError:
            raise
        except Exception as ex:
            logger.warning("Operation failed", action=action, exc=ex)
            raise InternalError(action, ex) from ex
