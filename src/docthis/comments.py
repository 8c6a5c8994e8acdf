import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from docthis.errors import MalformedCommentError
from docthis.models import Position, Range, TagLine
from docthis.syntax import SourceText

TAG_ALIASES = {
    "return": "returns",
    "arg": "param",
    "argument": "param",
    "exception": "throws",
    "augments": "extends",
    "typeparam": "template",
    "constructor": "class",
    "emits": "fires",
    "desc": "description",
}

# Tags whose body starts with a `{type}` expression
_TYPED_TAGS = ("param", "returns", "type", "throws", "template", "extends", "implements")
# Tags identified by the first word or type of their body
_REFERENT_TAGS = ("throws", "fires", "extends", "implements")

_TAG_LINE = re.compile(r"^@([A-Za-z][\w-]*)(?:\s+(.*))?$")

TagKey = Tuple[str, Optional[str]]


@dataclass
class ParsedComment:
    description: List[str] = field(default_factory=list)
    tags: List[TagLine] = field(default_factory=list)


@dataclass
class ExistingComment:
    """A `/** ... */` block found directly above a node."""

    first_line: int
    last_line: int
    lines: List[str]
    parsed: Optional[ParsedComment] = None  # None when the block is malformed

    @property
    def range(self) -> Range:
        return Range(
            Position(self.first_line, 0),
            Position(self.last_line, len(self.lines[-1]) if self.lines else 0),
        )


def canonical_tag(tag: str) -> str:
    return TAG_ALIASES.get(tag, tag)


def split_type(body: str) -> Tuple[Optional[str], str]:
    """
    Split a leading `{type}` off *body*. Returns (type, remainder); type is
    None when the body has no type. Raises ValueError on unbalanced braces.
    """
    if not body.startswith("{"):
        return None, body
    depth = 0
    for i, ch in enumerate(body):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return body[1:i], body[i + 1 :].lstrip()
    raise ValueError(f"Unbalanced type expression in {body!r}")


def param_name(body: str) -> Optional[str]:
    """
    Name documented by a `@param` body: `{T} [name=1] text` gives `name`,
    `opts.key` stays dotted.
    """
    try:
        _, rest = split_type(body)
    except ValueError:
        return None
    rest = rest.strip()
    if rest.startswith("["):
        close = rest.find("]")
        inner = rest[1:close] if close > 0 else rest[1:]
        name = inner.split("=", 1)[0].strip()
    else:
        words = rest.split()
        name = words[0] if words else ""
    name = name.lstrip(".").rstrip(",")
    return name or None


def param_root(name: str) -> str:
    root = name.split(".", 1)[0]
    if root.endswith("[]"):
        root = root[:-2]
    return root


def tag_key(tag: TagLine) -> TagKey:
    name = canonical_tag(tag.tag)
    if name == "param":
        return name, param_name(tag.body)
    if name == "template":
        try:
            _, rest = split_type(tag.body)
        except ValueError:
            return name, None
        first = rest.replace(",", " ").split()
        return name, first[0] if first else None
    if name in _REFERENT_TAGS:
        try:
            type_part, rest = split_type(tag.body)
        except ValueError:
            return name, None
        if type_part is not None:
            return name, type_part.strip()
        words = rest.split()
        return name, words[0] if words else None
    return name, None


def _strip_decoration(raw: str, first: bool, last: bool) -> Optional[str]:
    text = raw.lstrip()
    if first:
        text = text[3:]
    if last:
        text = text.rstrip()
        if text.endswith("*/"):
            text = text[:-2]
        if not text.strip():
            return None
    if not first and text.startswith("*"):
        text = text[1:]
    if text.startswith(" "):
        text = text[1:]
    text = text.rstrip()
    if first and not text:
        return None
    return text


def parse_comment(lines: List[str]) -> ParsedComment:
    """
    Split the raw lines of a `/** ... */` block into free-text description
    lines and tag lines. Only tag names and raw bodies are read.
    """
    parsed = ParsedComment()
    current: Optional[TagLine] = None
    last = len(lines) - 1
    for i, raw in enumerate(lines):
        text = _strip_decoration(raw, i == 0, i == last)
        if text is None:
            continue
        m = _TAG_LINE.match(text)
        if m is not None:
            tag = TagLine(tag=m.group(1), body=(m.group(2) or "").strip())
            if canonical_tag(tag.tag) in _TYPED_TAGS:
                try:
                    split_type(tag.body)
                except ValueError as ex:
                    raise MalformedCommentError(str(ex), line=i) from ex
            parsed.tags.append(tag)
            current = tag
        elif text.startswith("@") and current is None and text[1:2].isspace():
            raise MalformedCommentError(f"Invalid tag line {text!r}", line=i)
        elif current is not None:
            current.continuation.append(text)
        else:
            parsed.description.append(text)
    return parsed


def find_existing_block(source: SourceText, line: int) -> Optional[ExistingComment]:
    """
    Return the JSDoc block that ends right above *line*, skipping only blank
    lines. Plain `/* */` and `//` comments are not JSDoc blocks.
    """
    end = line - 1
    while end >= 0 and source.is_blank(end):
        end -= 1
    if end < 0:
        return None
    closing = source.line(end).strip()
    if not closing.endswith("*/"):
        return None
    start = end
    if not closing.startswith("/*"):
        if not closing.startswith("*"):
            return None
        start = end - 1
        while start >= 0:
            text = source.line(start).strip()
            if text.startswith("/*"):
                break
            if "*/" in text:
                return None
            start -= 1
        if start < 0:
            return None
    opening = source.line(start).strip()
    if not opening.startswith("/**") or opening.startswith("/***") or opening == "/**/":
        return None

    lines = source.lines[start : end + 1]
    existing = ExistingComment(first_line=start, last_line=end, lines=list(lines))
    try:
        existing.parsed = parse_comment(existing.lines)
    except MalformedCommentError:
        existing.parsed = None
    return existing
