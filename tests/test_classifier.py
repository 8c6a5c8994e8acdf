import pytest

from docthis.classifier import NodeClassifier
from docthis.engine import DocumentEngine
from docthis.models import DocumentableShape, MethodKind, Position


# ------------------------------------------------------------------ #
# helpers
# ------------------------------------------------------------------ #
def _parse(code: str, language_id: str = "javascript"):
    return DocumentEngine().parse(code, language_id)


def _first(tree, kind: str):
    return next(n for n in tree.walk() if n.kind == kind)


# ------------------------------------------------------------------ #
# tests
# ------------------------------------------------------------------ #
@pytest.mark.parametrize(
    "code, kind, shape",
    [
        ("function f() {}", "function_declaration", DocumentableShape.FUNCTION),
        ("function* g() {}", "generator_function_declaration", DocumentableShape.FUNCTION),
        ("const f = () => 1;", "arrow_function", DocumentableShape.VARIABLE_FUNCTION),
        ("let f = function () {};", "function_expression", DocumentableShape.VARIABLE_FUNCTION),
        ("obj.run = function () {};", "function_expression", DocumentableShape.FUNCTION),
        ("class A { m() {} }", "class_declaration", DocumentableShape.CLASS),
        ("class A { m() {} }", "method_definition", DocumentableShape.METHOD),
        ("class A { x = 1; }", "field_definition", DocumentableShape.PROPERTY),
        ("class A { x = () => 1; }", "field_definition", DocumentableShape.METHOD),
        ("const A = class {};", "class", DocumentableShape.CLASS),
        ("const o = { run: function (a) {} };", "pair", DocumentableShape.METHOD),
        ("const x = 1;", "number", DocumentableShape.UNSUPPORTED),
        ("foo(1);", "call_expression", DocumentableShape.UNSUPPORTED),
    ],
)
def test_classify_javascript(code, kind, shape):
    tree = _parse(code)
    assert NodeClassifier().classify(_first(tree, kind)) == shape


@pytest.mark.parametrize(
    "code, kind, shape",
    [
        ("interface I { a: string; }", "interface_declaration", DocumentableShape.INTERFACE),
        ("interface I { a: string; }", "property_signature", DocumentableShape.PROPERTY),
        ("interface I { m(): void; }", "method_signature", DocumentableShape.METHOD),
        ("enum E { A, B = 2 }", "enum_declaration", DocumentableShape.ENUM),
        ("enum E { A, B = 2 }", "enum_assignment", DocumentableShape.ENUM_MEMBER),
        ("declare namespace N {}", "internal_module", DocumentableShape.MODULE),
        ("abstract class A { abstract m(): void; }", "abstract_method_signature", DocumentableShape.METHOD),
        ("type T = string;", "type_alias_declaration", DocumentableShape.UNSUPPORTED),
    ],
)
def test_classify_typescript(code, kind, shape):
    tree = _parse(code, "typescript")
    assert NodeClassifier().classify(_first(tree, kind)) == shape


def test_anchor_climbs_to_export_statement():
    tree = _parse("\nexport const add = (a, b) => a + b;\n")
    match = NodeClassifier().resolve(_first(tree, "arrow_function"))
    assert match.shape == DocumentableShape.VARIABLE_FUNCTION
    assert match.anchor.kind == "export_statement"
    assert match.anchor_start == Position(1, 0)
    assert match.display_name == "add"
    assert match.function.kind == "arrow_function"


def test_assignment_display_name_uses_last_member():
    tree = _parse("module.exports.helper = function (value) {};")
    match = NodeClassifier().resolve(_first(tree, "function_expression"))
    assert match.display_name == "helper"
    assert match.anchor.kind == "expression_statement"


def test_method_kinds():
    code = "class A {\n  constructor() {}\n  get x() { return 1; }\n  set x(v) {}\n  run() {}\n}\n"
    tree = _parse(code)
    classifier = NodeClassifier()
    kinds = [
        classifier.match(n).method_kind
        for n in tree.walk()
        if n.kind == "method_definition"
    ]
    assert kinds == [
        MethodKind.CONSTRUCTOR,
        MethodKind.GETTER,
        MethodKind.SETTER,
        MethodKind.ORDINARY,
    ]


def test_decorator_extends_anchor_start():
    code = "class A {\n  @logged\n  run() {}\n}\n"
    tree = _parse(code, "typescript")
    match = NodeClassifier().resolve(_first(tree, "method_definition"))
    assert match.anchor_start == Position(1, 2)


def test_resolve_walks_up_from_body():
    code = "function outer(a) {\n  return a + 1;\n}\n"
    tree = _parse(code)
    node = tree.find_node_at(Position(1, 9))
    match = NodeClassifier().resolve(node)
    assert match.shape == DocumentableShape.FUNCTION
    assert match.display_name == "outer"


def test_resolve_honours_max_ancestor_depth():
    code = "function outer(a) {\n  return a + 1;\n}\n"
    tree = _parse(code)
    node = tree.find_node_at(Position(1, 9))
    assert NodeClassifier(max_ancestor_depth=1).resolve(node) is None


def test_resolve_skips_rejected_matches():
    code = "function outer() {\n  const inner = () => 1;\n}\n"
    tree = _parse(code)
    node = _first(tree, "arrow_function")
    match = NodeClassifier().resolve(
        node, accept=lambda m: m.shape != DocumentableShape.VARIABLE_FUNCTION
    )
    assert match.display_name == "outer"
