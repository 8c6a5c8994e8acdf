from docthis.lang.javascript import JavaScriptSyntaxParser
from docthis.lang.typescript import TsxSyntaxParser, TypeScriptSyntaxParser

__all__ = ["JavaScriptSyntaxParser", "TypeScriptSyntaxParser", "TsxSyntaxParser"]
