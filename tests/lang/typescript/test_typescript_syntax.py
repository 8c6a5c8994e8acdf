from pathlib import Path

import pytest

from docthis.edits import apply_edits
from docthis.engine import DocumentEngine
from docthis.lang.typescript import TsxSyntaxParser, TypeScriptSyntaxParser
from docthis.models import Position, ProgrammingLanguage
from docthis.syntax import SyntaxParserRegistry

SAMPLE = Path(__file__).parent / "samples" / "simple.ts"


# ------------------------------------------------------------------ #
# helpers
# ------------------------------------------------------------------ #
def _read_sample() -> str:
    return SAMPLE.read_text()


@pytest.fixture
def documented() -> str:
    text = _read_sample()
    edits = DocumentEngine().document_everything(text, "typescript")
    return apply_edits(text, edits)


# ------------------------------------------------------------------ #
# tests
# ------------------------------------------------------------------ #
def test_parsers_are_registered():
    assert SyntaxParserRegistry.get_parser("typescript") is TypeScriptSyntaxParser
    assert SyntaxParserRegistry.get_parser("typescriptreact") is TsxSyntaxParser
    assert TsxSyntaxParser().parse("const a = <div />;").language == ProgrammingLanguage.TSX


@pytest.mark.parametrize(
    "snippet",
    [
        "/**\n *\n * @interface Shape\n */\nexport interface Shape {",
        "  /**\n   *\n   * @type {string}\n   */\n  readonly name: string;\n",
        "  /**\n   *\n   * @returns {number}\n   */\n  area(): number;\n}",
        "/**\n *\n * @enum\n */\nexport enum Color {",
        "  /**\n   *\n   */\n  Red,",
        "  /**\n   *\n   */\n  Green = \"green\",",
        (
            "/**\n *\n * @class Base\n * @abstract\n * @implements {Shape}\n"
            " * @template T\n */\nexport abstract class Base<T> implements Shape {"
        ),
        "  /**\n   *\n   * @type {string}\n   */\n  readonly name: string = \"base\";",
        "  /**\n   *\n   * @param {number} id\n   */\n  protected constructor(",
        "  /**\n   *\n   * @abstract\n   * @returns {number}\n   */\n  abstract area(): number;",
        (
            "  /**\n   *\n   * @static\n   * @template U\n   * @param {U} value\n"
            "   * @returns {Base<U> | undefined}\n   */\n  static of<U>("
        ),
        "  /**\n   *\n   * @param {string} [prefix]\n   */\n  @logged\n  describe(",
        (
            "/**\n *\n * @async\n * @template T\n * @param {string} url\n * @param [retries=3]\n"
            " * @param {...string} rest\n * @returns {Promise<T[]>}\n * @throws {TypeError}\n"
            " */\nexport async function fetchAll"
        ),
        (
            "/**\n *\n * @param {unknown} value\n * @returns {boolean}\n */\n"
            "export const isShape"
        ),
        "/**\n *\n * @namespace Geometry\n */\ndeclare namespace Geometry {",
        (
            "  /**\n   *\n   * @param {number} a\n   * @param {number} b\n"
            "   * @returns {number}\n   */\n  function distance("
        ),
    ],
)
def test_sample_is_documented(documented, snippet):
    assert snippet in documented


def test_type_aliases_are_not_documented(documented):
    assert documented.endswith("}\n\ntype Alias = string;\n")


def test_sample_sweep_is_idempotent(documented):
    engine = DocumentEngine()
    assert engine.document_everything(documented, "typescript") == []
    assert engine.document_everything(documented, "typescript", overwrite_existing=True) == []


def test_document_this_on_decorated_member():
    text = _read_sample()
    line = text.splitlines().index("  describe(prefix?: string): void {")
    edits = DocumentEngine().document_this(text, Position(line, 4), "typescript")
    assert [e.range.start for e in edits] == [Position(line - 1, 0)]
