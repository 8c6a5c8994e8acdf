from dataclasses import dataclass
from typing import Callable, Dict, Optional

from docthis.logger import logger
from docthis.models import DocumentableShape, MethodKind, Position
from docthis.syntax import SyntaxNode, node_text

FUNCTION_VALUE_KINDS = (
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
)
FUNCTION_DECLARATION_KINDS = (
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
)
CLASS_DECLARATION_KINDS = ("class_declaration", "abstract_class_declaration")
METHOD_KINDS = ("method_definition", "method_signature", "abstract_method_signature")
FIELD_KINDS = ("field_definition", "public_field_definition", "property_signature")
MODULE_KINDS = ("internal_module", "module")
DECLARATION_KINDS = ("lexical_declaration", "variable_declaration")
CLASS_KINDS = CLASS_DECLARATION_KINDS + ("class",)
CALLABLE_KINDS = FUNCTION_VALUE_KINDS + FUNCTION_DECLARATION_KINDS + METHOD_KINDS


@dataclass
class Match:
    """
    A documentable construct found in the tree.

    ``node`` is the construct itself, ``anchor`` the outermost statement that
    wraps it (the comment goes above the anchor) and ``function`` the node
    carrying the parameter list, when there is one.
    """

    shape: DocumentableShape
    node: SyntaxNode
    anchor: SyntaxNode
    anchor_start: Position
    function: Optional[SyntaxNode] = None
    method_kind: Optional[MethodKind] = None
    display_name: Optional[str] = None


def strip_quotes(name: str) -> str:
    if len(name) >= 2 and name[0] == name[-1] and name[0] in "\"'`":
        return name[1:-1]
    return name


def declared_name(node: Optional[SyntaxNode]) -> Optional[str]:
    if node is None:
        return None
    name_node = node.field("name") or node.field("property")
    name = node_text(name_node).strip()
    return strip_quotes(name) or None


def _assigned_name(assignment: SyntaxNode) -> Optional[str]:
    lhs = node_text(assignment.field("left")).strip()
    return lhs.split(".")[-1] or None


def method_kind_of(node: SyntaxNode) -> MethodKind:
    if node.has_token("get", "static get"):
        return MethodKind.GETTER
    if node.has_token("set"):
        return MethodKind.SETTER
    if declared_name(node) == "constructor":
        return MethodKind.CONSTRUCTOR
    return MethodKind.ORDINARY


class NodeClassifier:
    """
    Maps syntax nodes to documentable shapes. `match` looks at a single node
    only; `resolve` walks up the ancestors of the node under the cursor.
    """

    def __init__(self, max_ancestor_depth: int = 64) -> None:
        self.max_ancestor_depth = max_ancestor_depth
        self._handlers: Dict[str, Callable[[SyntaxNode], Optional[Match]]] = {
            "function_declaration": self._handle_function,
            "generator_function_declaration": self._handle_function,
            "function_signature": self._handle_function,
            "class_declaration": self._handle_class,
            "abstract_class_declaration": self._handle_class,
            "method_definition": self._handle_method,
            "method_signature": self._handle_method,
            "abstract_method_signature": self._handle_method,
            "field_definition": self._handle_field,
            "public_field_definition": self._handle_field,
            "property_signature": self._handle_field,
            "pair": self._handle_pair,
            "interface_declaration": self._handle_interface,
            "enum_declaration": self._handle_enum,
            "enum_assignment": self._handle_enum_member,
            "property_identifier": self._handle_enum_member,
            "internal_module": self._handle_module,
            "module": self._handle_module,
            "lexical_declaration": self._handle_declaration,
            "variable_declaration": self._handle_declaration,
            "variable_declarator": self._handle_declarator,
            "assignment_expression": self._handle_assignment,
            "expression_statement": self._handle_expression_statement,
            "export_statement": self._handle_export,
            "ambient_declaration": self._handle_ambient,
            "decorator": self._handle_decorator,
        }

    # --- public API -------------------------------------------------
    def classify(self, node: SyntaxNode) -> DocumentableShape:
        found = self.resolve(node)
        return found.shape if found else DocumentableShape.UNSUPPORTED

    def resolve(
        self,
        node: SyntaxNode,
        accept: Optional[Callable[[Match], bool]] = None,
    ) -> Optional[Match]:
        """
        Return the match for *node* or its nearest documentable ancestor.
        *accept* can reject a match (for example one that cannot be placed),
        in which case the walk continues upwards.
        """
        cur: Optional[SyntaxNode] = node
        depth = 0
        while cur is not None and depth <= self.max_ancestor_depth:
            found = self.match(cur)
            if found is not None:
                if accept is None or accept(found):
                    return found
                logger.debug(
                    "Rejected documentable node",
                    node_type=found.node.kind,
                    line=found.anchor_start.line + 1,
                )
            cur = cur.parent
            depth += 1
        return None

    def match(self, node: SyntaxNode) -> Optional[Match]:
        handler = self._handlers.get(node.kind)
        if handler is None:
            return None
        return handler(node)

    # --- helpers ----------------------------------------------------
    def _make_match(
        self,
        shape: DocumentableShape,
        node: SyntaxNode,
        *,
        function: Optional[SyntaxNode] = None,
        method_kind: Optional[MethodKind] = None,
        display_name: Optional[str] = None,
    ) -> Match:
        anchor = self._find_anchor(node)
        return Match(
            shape=shape,
            node=node,
            anchor=anchor,
            anchor_start=self._anchor_start(anchor),
            function=function,
            method_kind=method_kind,
            display_name=display_name,
        )

    def _find_anchor(self, node: SyntaxNode) -> SyntaxNode:
        cur = node
        while True:
            parent = cur.parent
            if parent is None:
                return cur
            if parent.kind == "variable_declarator" and cur == parent.field("value"):
                cur = parent
            elif parent.kind in DECLARATION_KINDS and cur.kind == "variable_declarator":
                cur = parent
            elif parent.kind == "assignment_expression" and cur == parent.field("right"):
                cur = parent
            elif parent.kind in (
                "export_statement",
                "ambient_declaration",
                "expression_statement",
            ):
                cur = parent
            else:
                return cur

    def _anchor_start(self, anchor: SyntaxNode) -> Position:
        # TypeScript keeps member decorators as siblings inside the class body
        start = anchor.start
        sib = anchor.prev_named_sibling()
        while sib is not None and sib.kind == "decorator":
            start = sib.start
            sib = sib.prev_named_sibling()
        return start

    # --- handlers ---------------------------------------------------
    def _handle_function(self, node: SyntaxNode) -> Optional[Match]:
        return self._make_match(
            DocumentableShape.FUNCTION,
            node,
            function=node,
            display_name=declared_name(node),
        )

    def _handle_class(self, node: SyntaxNode) -> Optional[Match]:
        return self._make_match(
            DocumentableShape.CLASS, node, display_name=declared_name(node)
        )

    def _handle_method(self, node: SyntaxNode) -> Optional[Match]:
        return self._make_match(
            DocumentableShape.METHOD,
            node,
            function=node,
            method_kind=method_kind_of(node),
            display_name=declared_name(node),
        )

    def _handle_field(self, node: SyntaxNode) -> Optional[Match]:
        value = node.field("value")
        if value is not None and value.kind in FUNCTION_VALUE_KINDS:
            return self._make_match(
                DocumentableShape.METHOD,
                node,
                function=value,
                method_kind=MethodKind.ORDINARY,
                display_name=declared_name(node),
            )
        return self._make_match(
            DocumentableShape.PROPERTY, node, display_name=declared_name(node)
        )

    def _handle_pair(self, node: SyntaxNode) -> Optional[Match]:
        value = node.field("value")
        if value is None or value.kind not in FUNCTION_VALUE_KINDS:
            return None
        key = strip_quotes(node_text(node.field("key")).strip())
        return self._make_match(
            DocumentableShape.METHOD,
            node,
            function=value,
            method_kind=MethodKind.ORDINARY,
            display_name=key or None,
        )

    def _handle_interface(self, node: SyntaxNode) -> Optional[Match]:
        return self._make_match(
            DocumentableShape.INTERFACE, node, display_name=declared_name(node)
        )

    def _handle_enum(self, node: SyntaxNode) -> Optional[Match]:
        return self._make_match(
            DocumentableShape.ENUM, node, display_name=declared_name(node)
        )

    def _handle_enum_member(self, node: SyntaxNode) -> Optional[Match]:
        parent = node.parent
        if parent is None or parent.kind != "enum_body":
            return None
        if node.kind == "enum_assignment":
            name = declared_name(node)
        else:
            name = strip_quotes(node_text(node).strip()) or None
        return self._make_match(DocumentableShape.ENUM_MEMBER, node, display_name=name)

    def _handle_module(self, node: SyntaxNode) -> Optional[Match]:
        return self._make_match(
            DocumentableShape.MODULE, node, display_name=declared_name(node)
        )

    def _handle_declaration(self, node: SyntaxNode) -> Optional[Match]:
        first = next(
            (c for c in node.named_children if c.kind == "variable_declarator"), None
        )
        if first is None:
            return None
        return self._handle_declarator(first)

    def _handle_declarator(self, node: SyntaxNode) -> Optional[Match]:
        value = node.field("value")
        if value is None:
            return None
        name = declared_name(node)
        if value.kind in FUNCTION_VALUE_KINDS:
            return self._make_match(
                DocumentableShape.VARIABLE_FUNCTION,
                node,
                function=value,
                display_name=name,
            )
        if value.kind == "class":
            return self._make_match(
                DocumentableShape.CLASS, value, display_name=declared_name(value) or name
            )
        return None

    def _handle_assignment(self, node: SyntaxNode) -> Optional[Match]:
        parent = node.parent
        if parent is None or parent.kind != "expression_statement":
            return None
        right = node.field("right")
        if right is None:
            return None
        if right.kind in FUNCTION_VALUE_KINDS:
            return self._make_match(
                DocumentableShape.FUNCTION,
                right,
                function=right,
                display_name=declared_name(right) or _assigned_name(node),
            )
        if right.kind == "class":
            return self._make_match(
                DocumentableShape.CLASS,
                right,
                display_name=declared_name(right) or _assigned_name(node),
            )
        return None

    def _handle_expression_statement(self, node: SyntaxNode) -> Optional[Match]:
        inner = next(iter(node.named_children), None)
        if inner is None:
            return None
        if inner.kind == "assignment_expression":
            return self._handle_assignment(inner)
        if inner.kind in MODULE_KINDS:
            return self._handle_module(inner)
        return None

    def _handle_export(self, node: SyntaxNode) -> Optional[Match]:
        inner = node.field("declaration") or node.field("value")
        if inner is None:
            return None
        if inner.kind in FUNCTION_VALUE_KINDS:
            return self._make_match(
                DocumentableShape.FUNCTION,
                inner,
                function=inner,
                display_name=declared_name(inner),
            )
        if inner.kind == "class":
            return self._make_match(
                DocumentableShape.CLASS, inner, display_name=declared_name(inner)
            )
        return self.match(inner)

    def _handle_ambient(self, node: SyntaxNode) -> Optional[Match]:
        inner = next(iter(node.named_children), None)
        return self.match(inner) if inner is not None else None

    def _handle_decorator(self, node: SyntaxNode) -> Optional[Match]:
        parent = node.parent
        if parent is None or parent.kind != "class_body":
            return None
        seen = False
        for sibling in parent.named_children:
            if sibling == node:
                seen = True
                continue
            if seen and sibling.kind != "decorator":
                return self.match(sibling)
        return None
