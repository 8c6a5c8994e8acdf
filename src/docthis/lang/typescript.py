from typing import Dict, Optional

import tree_sitter as ts
import tree_sitter_typescript as tsts

from docthis.models import ProgrammingLanguage
from docthis.parsers import TreeSitterSyntaxParser

TS_LANGUAGE = ts.Language(tsts.language_typescript())
TSX_LANGUAGE = ts.Language(tsts.language_tsx())
_parsers: Dict[ProgrammingLanguage, ts.Parser] = {}


def _get_parser(language: ProgrammingLanguage) -> ts.Parser:
    parser: Optional[ts.Parser] = _parsers.get(language)
    if parser is None:
        grammar = TSX_LANGUAGE if language == ProgrammingLanguage.TSX else TS_LANGUAGE
        parser = _parsers[language] = ts.Parser(grammar)
    return parser


class TypeScriptSyntaxParser(TreeSitterSyntaxParser):
    language = ProgrammingLanguage.TYPESCRIPT
    language_ids = ["typescript"]

    def _get_parser(self) -> ts.Parser:
        return _get_parser(self.language)


class TsxSyntaxParser(TreeSitterSyntaxParser):
    language = ProgrammingLanguage.TSX
    language_ids = ["typescriptreact"]

    def _get_parser(self) -> ts.Parser:
        return _get_parser(self.language)
