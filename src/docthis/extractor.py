from typing import Callable, Dict, List, Optional

from docthis.classifier import (
    CALLABLE_KINDS,
    CLASS_KINDS,
    Match,
    declared_name,
    strip_quotes,
)
from docthis.logger import logger
from docthis.models import (
    DocumentableShape,
    MethodKind,
    ParameterDescriptor,
    SignatureDescriptor,
)
from docthis.settings import RenderSettings
from docthis.syntax import SyntaxNode, collapse_whitespace, node_text

SYNTHETIC_PARAM_NAME = "args"

_DESTRUCTURING_KINDS = ("object_pattern", "array_pattern")


def type_text(annotation: Optional[SyntaxNode]) -> Optional[str]:
    """
    Return the type written in a `type_annotation` node, without the colon.
    """
    if annotation is None:
        return None
    if annotation.kind == "type_predicate_annotation":
        return "boolean"
    if annotation.kind == "asserts_annotation":
        return None
    txt = collapse_whitespace(node_text(annotation))
    if txt.startswith(":"):
        txt = txt[1:].strip()
    return txt or None


def _type_parameter_names(node: SyntaxNode) -> List[str]:
    params = node.field("type_parameters")
    if params is None:
        return []
    names: List[str] = []
    for tp in params.named_children:
        if tp.kind != "type_parameter":
            continue
        name_node = tp.field("name") or next(iter(tp.named_children), None)
        name = node_text(name_node).strip()
        if name:
            names.append(name)
    return names


def _walk_own_body(fn: SyntaxNode):
    """
    Yield the nodes of *fn*'s body without entering nested functions or classes.
    """
    body = fn.field("body")
    if body is None:
        return
    stack = [body]
    while stack:
        cur = stack.pop()
        yield cur
        for child in reversed(cur.named_children):
            if child.kind in CALLABLE_KINDS or child.kind in CLASS_KINDS:
                continue
            stack.append(child)


class SignatureExtractor:
    """
    Pulls the signature facts of a matched construct into a
    `SignatureDescriptor`. Purely syntactic: nothing is inferred from
    control flow or by type checking.
    """

    def __init__(self, settings: Optional[RenderSettings] = None) -> None:
        self.settings = settings or RenderSettings()
        self._handlers: Dict[
            DocumentableShape, Callable[[Match], SignatureDescriptor]
        ] = {
            DocumentableShape.FUNCTION: self._extract_callable,
            DocumentableShape.METHOD: self._extract_callable,
            DocumentableShape.VARIABLE_FUNCTION: self._extract_callable,
            DocumentableShape.CLASS: self._extract_class,
            DocumentableShape.INTERFACE: self._extract_interface,
            DocumentableShape.PROPERTY: self._extract_property,
            DocumentableShape.ENUM: self._extract_plain,
            DocumentableShape.ENUM_MEMBER: self._extract_plain,
            DocumentableShape.MODULE: self._extract_module,
        }

    def extract(self, match: Match) -> SignatureDescriptor:
        handler = self._handlers.get(match.shape)
        if handler is None:
            raise ValueError(f"No extraction rule for shape {match.shape.value}")
        descriptor = handler(match)
        logger.debug(
            "Extracted signature",
            shape=descriptor.shape.value,
            name=match.display_name,
            params=descriptor.parameter_names,
        )
        return descriptor

    # --- parameters -------------------------------------------------
    def extract_parameters(self, fn: SyntaxNode) -> List[ParameterDescriptor]:
        single = fn.field("parameter")
        if single is not None:
            return [ParameterDescriptor(name=node_text(single).strip())]
        params_node = fn.field("parameters")
        if params_node is None:
            return []
        params: List[ParameterDescriptor] = []
        for child in params_node.named_children:
            param = self._parameter(child)
            if param is not None:
                params.append(param)
        self._assign_synthetic_names(params)
        return params

    def _parameter(self, node: SyntaxNode) -> Optional[ParameterDescriptor]:
        pattern: Optional[SyntaxNode] = node
        declared_type: Optional[str] = None
        default: Optional[SyntaxNode] = None
        optional = node.kind == "optional_parameter"

        if node.kind in ("required_parameter", "optional_parameter"):
            pattern = node.field("pattern")
            declared_type = type_text(node.field("type"))
            default = node.field("value")
        elif node.kind == "assignment_pattern":
            pattern = node.field("left")
            default = node.field("right")

        if pattern is None or pattern.kind == "this":
            return None

        rest = False
        if pattern.kind == "rest_pattern":
            rest = True
            pattern = next(iter(pattern.named_children), None)
            if pattern is None:
                return None

        if pattern.kind == "assignment_pattern":
            default = pattern.field("right")
            pattern = pattern.field("left")
            if pattern is None:
                return None

        name = ""
        destructured = pattern.kind in _DESTRUCTURING_KINDS
        if destructured:
            name = self._reusable_pattern_name(pattern) or ""
        else:
            name = node_text(pattern).strip()

        default_text = collapse_whitespace(node_text(default)) if default else None
        return ParameterDescriptor(
            name=name,
            type=declared_type,
            optional=optional,
            has_default=default is not None,
            default=default_text or None,
            rest=rest,
            destructured=destructured,
        )

    def _reusable_pattern_name(self, pattern: SyntaxNode) -> Optional[str]:
        # `{ ...props }` is documented under the rest name
        members = pattern.named_children
        if pattern.kind == "object_pattern" and len(members) == 1:
            only = members[0]
            if only.kind == "rest_pattern":
                inner = next(iter(only.named_children), None)
                if inner is not None and inner.kind == "identifier":
                    return node_text(inner).strip() or None
        return None

    def _assign_synthetic_names(self, params: List[ParameterDescriptor]) -> None:
        """
        Name unnamed parameters `args`, `args1`, ... in source order. A suffix
        already taken by any declared parameter is skipped, even one declared
        later: `f({a}, [c], args)` gives `args1`, `args2`, `args`.
        """
        used = {p.name for p in params if p.name}
        index = 0
        seen: set[str] = set()
        for param in params:
            if param.name and not (param.destructured and param.name in seen):
                seen.add(param.name)
                continue
            while True:
                candidate = (
                    SYNTHETIC_PARAM_NAME
                    if index == 0
                    else f"{SYNTHETIC_PARAM_NAME}{index}"
                )
                index += 1
                if candidate not in used:
                    break
            param.name = candidate
            used.add(candidate)
            seen.add(candidate)

    # --- shared facts -----------------------------------------------
    def _decorators(self, match: Match) -> List[str]:
        found: List[SyntaxNode] = []
        found.extend(match.node.fields("decorator"))
        if match.anchor != match.node:
            found.extend(match.anchor.fields("decorator"))
        sib = match.anchor.prev_named_sibling()
        while sib is not None and sib.kind == "decorator":
            found.insert(0, sib)
            sib = sib.prev_named_sibling()
        out: List[str] = []
        for deco in found:
            txt = collapse_whitespace(node_text(deco)).lstrip("@")
            if txt and txt not in out:
                out.append(txt)
        return out

    def _owner(self, node: SyntaxNode) -> Optional[str]:
        container = node.parent
        if container is None:
            return None
        holder = container.parent
        if holder is None:
            return None
        if container.kind == "class_body":
            name = declared_name(holder)
            if name is None and holder.parent is not None:
                if holder.parent.kind == "variable_declarator":
                    name = declared_name(holder.parent)
            return name
        if container.kind in ("interface_body", "object_type", "enum_body"):
            return declared_name(holder)
        return None

    def _throws_and_events(self, fn: SyntaxNode) -> tuple[List[str], List[str]]:
        throws: List[str] = []
        events: List[str] = []
        for node in _walk_own_body(fn):
            if node.kind == "throw_statement":
                thrown = next(iter(node.named_children), None)
                if thrown is not None and thrown.kind == "new_expression":
                    ctor = node_text(thrown.field("constructor")).strip()
                    if ctor and ctor not in throws:
                        throws.append(ctor)
            elif node.kind == "call_expression":
                callee = node.field("function")
                if callee is None or callee.kind != "member_expression":
                    continue
                if node_text(callee.field("property")).strip() != "emit":
                    continue
                args = node.field("arguments")
                first = next(iter(args.named_children), None) if args else None
                if first is not None and first.kind == "string":
                    event = strip_quotes(node_text(first).strip())
                    if event and event not in events:
                        events.append(event)
        return throws, events

    def _heritage(self, node: SyntaxNode) -> tuple[List[str], List[str]]:
        extends: List[str] = []
        implements: List[str] = []
        for child in node.named_children:
            if child.kind == "class_heritage":
                for clause in child.named_children:
                    if clause.kind == "extends_clause":
                        txt = collapse_whitespace(node_text(clause))
                        if txt.startswith("extends"):
                            txt = txt[len("extends") :].strip()
                        if txt:
                            extends.append(txt)
                    elif clause.kind == "implements_clause":
                        implements.extend(
                            collapse_whitespace(node_text(t))
                            for t in clause.named_children
                        )
                    else:
                        # JavaScript: `extends <expression>`
                        extends.append(collapse_whitespace(node_text(clause)))
            elif child.kind in ("extends_type_clause", "extends_clause"):
                types = child.fields("type") or child.named_children
                extends.extend(collapse_whitespace(node_text(t)) for t in types)
        return extends, implements

    # --- handlers ---------------------------------------------------
    def _extract_callable(self, match: Match) -> SignatureDescriptor:
        fn = match.function or match.node
        node = match.node
        return_type = None
        if match.method_kind not in (MethodKind.CONSTRUCTOR, MethodKind.SETTER):
            return_type = type_text(fn.field("return_type"))
        throws, events = self._throws_and_events(fn)
        return SignatureDescriptor(
            shape=match.shape,
            method_kind=match.method_kind,
            parameters=self.extract_parameters(fn),
            return_type=return_type,
            type_parameters=_type_parameter_names(fn),
            is_async=fn.has_token("async"),
            is_generator=(
                fn.kind in ("generator_function", "generator_function_declaration")
                or fn.has_token("*")
            ),
            is_abstract=(
                node.kind == "abstract_method_signature" or node.has_token("abstract")
            ),
            is_static=node.has_token("static", "static get"),
            decorators=self._decorators(match),
            throws=throws,
            events=events,
            owner=(
                self._owner(node) if match.shape == DocumentableShape.METHOD else None
            ),
        )

    def _extract_class(self, match: Match) -> SignatureDescriptor:
        node = match.node
        extends, implements = self._heritage(node)
        params: List[ParameterDescriptor] = []
        if self.settings.class_constructor_params:
            ctor = self._find_constructor(node)
            if ctor is not None:
                params = self.extract_parameters(ctor)
        return SignatureDescriptor(
            shape=match.shape,
            parameters=params,
            type_parameters=_type_parameter_names(node),
            is_abstract=(
                node.kind == "abstract_class_declaration" or node.has_token("abstract")
            ),
            extends=extends,
            implements=implements,
            decorators=self._decorators(match),
        )

    def _find_constructor(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        body = node.field("body")
        if body is None:
            return None
        for member in body.named_children:
            if member.kind == "method_definition" and declared_name(member) == "constructor":
                return member
        return None

    def _extract_interface(self, match: Match) -> SignatureDescriptor:
        extends, _ = self._heritage(match.node)
        return SignatureDescriptor(
            shape=match.shape,
            type_parameters=_type_parameter_names(match.node),
            extends=extends,
        )

    def _extract_property(self, match: Match) -> SignatureDescriptor:
        node = match.node
        return SignatureDescriptor(
            shape=match.shape,
            value_type=type_text(node.field("type")),
            is_static=node.has_token("static"),
            is_abstract=node.has_token("abstract"),
            decorators=self._decorators(match),
            owner=self._owner(node),
        )

    def _extract_module(self, match: Match) -> SignatureDescriptor:
        name_node = match.node.field("name")
        return SignatureDescriptor(
            shape=match.shape,
            is_module=name_node is not None and name_node.kind == "string",
        )

    def _extract_plain(self, match: Match) -> SignatureDescriptor:
        owner = None
        if match.shape == DocumentableShape.ENUM_MEMBER:
            owner = self._owner(match.node)
        return SignatureDescriptor(shape=match.shape, owner=owner)
