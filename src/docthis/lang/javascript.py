from typing import Optional

import tree_sitter as ts
import tree_sitter_javascript as tsjs

from docthis.models import ProgrammingLanguage
from docthis.parsers import TreeSitterSyntaxParser

JS_LANGUAGE = ts.Language(tsjs.language())
_parser: Optional[ts.Parser] = None


def _get_parser() -> ts.Parser:
    global _parser
    if _parser is None:
        _parser = ts.Parser(JS_LANGUAGE)
    return _parser


class JavaScriptSyntaxParser(TreeSitterSyntaxParser):
    # The JavaScript grammar parses JSX natively.
    language = ProgrammingLanguage.JAVASCRIPT
    language_ids = ["javascript", "javascriptreact"]

    def _get_parser(self) -> ts.Parser:
        return _get_parser()
