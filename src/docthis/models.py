from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ProgrammingLanguage(str, Enum):
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    TSX = "tsx"


class DocumentableShape(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    METHOD = "method"
    PROPERTY = "property"
    INTERFACE = "interface"
    ENUM = "enum"
    ENUM_MEMBER = "enum_member"
    MODULE = "module"
    VARIABLE_FUNCTION = "variable_function"  # const f = () => ...
    UNSUPPORTED = "unsupported"


class MethodKind(str, Enum):
    ORDINARY = "ordinary"
    GETTER = "getter"
    SETTER = "setter"
    CONSTRUCTOR = "constructor"


class DescriptionStyle(str, Enum):
    BLANK = "blank"  # leave an empty line for free text
    TAG = "tag"  # emit an empty @description tag


class ReturnsPolicy(str, Enum):
    TYPED = "typed"  # only when an explicit non-void annotation exists
    ALWAYS = "always"  # also bare @returns for untyped callables


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, order=True)
class Position:
    line: int  # 0-based
    character: int  # 0-based, in code points

    def __repr__(self) -> str:
        return f"{self.line}:{self.character}"


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def point(cls, pos: Position) -> "Range":
        return cls(pos, pos)

    @classmethod
    def lines(cls, first: int, last: int) -> "Range":
        return cls(Position(first, 0), Position(last, 0))

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, pos: Position) -> bool:
        return self.start <= pos < self.end

    def __repr__(self) -> str:
        return f"[{self.start!r}-{self.end!r}]"


# ---------------------------------------------------------------------------
# Signature facts
# ---------------------------------------------------------------------------


class ParameterDescriptor(BaseModel):
    name: str
    type: Optional[str] = None  # declared type text, None when untyped
    optional: bool = False
    has_default: bool = False
    default: Optional[str] = None
    rest: bool = False
    destructured: bool = False  # name is synthetic


class SignatureDescriptor(BaseModel):
    shape: DocumentableShape
    method_kind: Optional[MethodKind] = None

    parameters: List[ParameterDescriptor] = Field(default_factory=list)
    return_type: Optional[str] = None
    type_parameters: List[str] = Field(default_factory=list)
    value_type: Optional[str] = None  # PropertyLike @type

    is_async: bool = False
    is_generator: bool = False
    is_abstract: bool = False
    is_static: bool = False
    is_module: bool = False  # string-named `module "x"` declaration

    extends: List[str] = Field(default_factory=list)
    implements: List[str] = Field(default_factory=list)
    decorators: List[str] = Field(default_factory=list)
    throws: List[str] = Field(default_factory=list)
    events: List[str] = Field(default_factory=list)
    owner: Optional[str] = None

    @property
    def parameter_names(self) -> List[str]:
        return [p.name for p in self.parameters]


# ---------------------------------------------------------------------------
# Comments and edits
# ---------------------------------------------------------------------------


class TagLine(BaseModel):
    tag: str
    body: str = ""
    continuation: List[str] = Field(default_factory=list)

    def content_lines(self) -> List[str]:
        head = f"@{self.tag} {self.body}" if self.body else f"@{self.tag}"
        return [head, *self.continuation]


class CommentBlock(BaseModel):
    indent: str = ""
    description: List[str] = Field(default_factory=list)
    tags: List[TagLine] = Field(default_factory=list)
    eol: str = "\n"

    def lines(self) -> List[str]:
        out = [f"{self.indent}/**"]
        content = list(self.description)
        for tag in self.tags:
            content.extend(tag.content_lines())
        for line in content:
            out.append(f"{self.indent} * {line}" if line else f"{self.indent} *")
        out.append(f"{self.indent} */")
        return out

    def to_text(self) -> str:
        return self.eol.join(self.lines())


class EditOperation(BaseModel):
    range: Range
    text: str

    @property
    def is_insert(self) -> bool:
        return self.range.is_empty

    @classmethod
    def insert(cls, pos: Position, text: str) -> "EditOperation":
        return cls(range=Range.point(pos), text=text)

    @classmethod
    def replace(cls, rng: Range, text: str) -> "EditOperation":
        return cls(range=rng, text=text)


class TextChange(BaseModel):
    """A single content change reported by the host editor."""

    range: Range  # pre-change coordinates
    text: str
