from typing import List, Optional

from docthis.errors import UnsupportedConstructError
from docthis.models import (
    CommentBlock,
    DescriptionStyle,
    DocumentableShape,
    MethodKind,
    ParameterDescriptor,
    ReturnsPolicy,
    SignatureDescriptor,
    TagLine,
)
from docthis.settings import RenderSettings

# Canonical position of each tag in a block. Lower ranks come first.
TAG_RANKS: dict[str, int] = {
    "description": 0,
    "class": 10,
    "interface": 10,
    "enum": 10,
    "namespace": 10,
    "module": 10,
    "memberof": 15,
    "abstract": 20,
    "static": 21,
    "async": 22,
    "generator": 23,
    "author": 25,
    "extends": 30,
    "implements": 31,
    "template": 40,
    "type": 45,
    "param": 50,
    "returns": 60,
    "throws": 70,
    "fires": 80,
}

CALLABLE_SHAPES = (
    DocumentableShape.FUNCTION,
    DocumentableShape.METHOD,
    DocumentableShape.VARIABLE_FUNCTION,
)
MEMBER_SHAPES = (
    DocumentableShape.METHOD,
    DocumentableShape.PROPERTY,
    DocumentableShape.ENUM_MEMBER,
)
_NO_RETURN_TYPES = ("void", "never")


def rest_element_type(type_text: str) -> str:
    """`number[]` and `Array<number>` become `number` for `{...number}`."""
    txt = type_text.strip()
    if txt.endswith("[]"):
        return txt[:-2].strip()
    if txt.startswith("Array<") and txt.endswith(">"):
        return txt[len("Array<") : -1].strip()
    return txt


class CommentRenderer:
    """
    Turns a signature descriptor into a comment block. Output depends only on
    the descriptor, the display name, the indentation and the settings.
    """

    def __init__(self, settings: Optional[RenderSettings] = None) -> None:
        self.settings = settings or RenderSettings()

    def render(
        self,
        descriptor: SignatureDescriptor,
        display_name: Optional[str] = None,
        indent: str = "",
        eol: str = "\n",
    ) -> CommentBlock:
        if descriptor.shape == DocumentableShape.UNSUPPORTED:
            raise UnsupportedConstructError("Cannot render an unsupported construct")

        s = self.settings
        block = CommentBlock(indent=indent, eol=eol)
        if s.description_style == DescriptionStyle.TAG:
            block.tags.append(TagLine(tag="description"))
        else:
            block.description.append("")

        tags = block.tags
        kind_tag = self._kind_tag(descriptor, display_name)
        if kind_tag is not None and s.include_kind_tags:
            tags.append(kind_tag)
        if s.include_member_of and descriptor.owner and descriptor.shape in MEMBER_SHAPES:
            tags.append(TagLine(tag="memberof", body=descriptor.owner))
        if s.include_modifier_tags:
            if descriptor.is_abstract:
                tags.append(TagLine(tag="abstract"))
            if descriptor.is_static:
                tags.append(TagLine(tag="static"))
            if descriptor.is_async:
                tags.append(TagLine(tag="async"))
            if descriptor.is_generator:
                tags.append(TagLine(tag="generator"))
        if s.include_author and s.author_name:
            tags.append(TagLine(tag="author", body=s.author_name))
        if s.include_heritage_tags:
            tags.extend(TagLine(tag="extends", body=f"{{{t}}}") for t in descriptor.extends)
            tags.extend(
                TagLine(tag="implements", body=f"{{{t}}}") for t in descriptor.implements
            )
        tags.extend(TagLine(tag="template", body=t) for t in descriptor.type_parameters)
        if descriptor.shape == DocumentableShape.PROPERTY and descriptor.value_type:
            if s.include_types:
                tags.append(TagLine(tag="type", body=f"{{{descriptor.value_type}}}"))
        tags.extend(self.render_param(p) for p in descriptor.parameters)
        returns = self._returns(descriptor)
        if returns is not None:
            tags.append(returns)
        if s.include_throws:
            tags.extend(TagLine(tag="throws", body=f"{{{t}}}") for t in descriptor.throws)
        if s.include_events:
            tags.extend(TagLine(tag="fires", body=e) for e in descriptor.events)
        return block

    def render_param(self, param: ParameterDescriptor) -> TagLine:
        name = param.name
        if param.has_default and param.default:
            name = f"[{param.name}={param.default}]"
        elif param.optional or param.has_default:
            name = f"[{param.name}]"
        type_text = param.type if self.settings.include_types else None
        if type_text and param.rest:
            type_text = "..." + rest_element_type(type_text)
        body = f"{{{type_text}}} {name}" if type_text else name
        return TagLine(tag="param", body=body)

    def _kind_tag(
        self, descriptor: SignatureDescriptor, display_name: Optional[str]
    ) -> Optional[TagLine]:
        name = display_name or ""
        if descriptor.shape == DocumentableShape.CLASS:
            return TagLine(tag="class", body=name)
        if descriptor.shape == DocumentableShape.INTERFACE:
            return TagLine(tag="interface", body=name)
        if descriptor.shape == DocumentableShape.ENUM:
            return TagLine(tag="enum")
        if descriptor.shape == DocumentableShape.MODULE:
            return TagLine(tag="module" if descriptor.is_module else "namespace", body=name)
        return None

    def _returns(self, descriptor: SignatureDescriptor) -> Optional[TagLine]:
        if descriptor.shape not in CALLABLE_SHAPES:
            return None
        if descriptor.method_kind in (MethodKind.CONSTRUCTOR, MethodKind.SETTER):
            return None
        tag = self.settings.returns_tag
        return_type = descriptor.return_type
        if return_type:
            if return_type.strip() in _NO_RETURN_TYPES:
                return None
            if self.settings.include_types:
                return TagLine(tag=tag, body=f"{{{return_type}}}")
            return TagLine(tag=tag)
        if self.settings.returns_policy == ReturnsPolicy.ALWAYS:
            return TagLine(tag=tag)
        return None
