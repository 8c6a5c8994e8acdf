from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docthis.models import DescriptionStyle, ReturnsPolicy


class RenderSettings(BaseModel):
    """Settings controlling which tags are rendered and how."""

    include_types: bool = Field(
        default=True,
        description="If True, type annotations are copied into `{Type}` tag fields.",
    )
    description_style: DescriptionStyle = Field(
        default=DescriptionStyle.BLANK,
        description=(
            'How the free-text placeholder is rendered: "blank" leaves an empty line, '
            '"tag" emits an empty @description tag.'
        ),
    )
    returns_tag: str = Field(
        default="returns",
        description='Tag name used for return values ("returns" or "return").',
    )
    returns_policy: ReturnsPolicy = Field(
        default=ReturnsPolicy.TYPED,
        description=(
            'When to emit a return tag: "typed" only for explicit non-void return '
            'annotations, "always" for every callable except constructors and setters.'
        ),
    )
    include_kind_tags: bool = Field(
        default=True,
        description="Emit @class, @interface, @enum, @namespace and @module tags.",
    )
    include_modifier_tags: bool = Field(
        default=True,
        description="Emit @abstract, @static, @async and @generator tags.",
    )
    include_heritage_tags: bool = Field(
        default=True, description="Emit @extends and @implements tags."
    )
    include_member_of: bool = Field(
        default=False,
        description="Emit @memberof for class, interface and enum members.",
    )
    include_throws: bool = Field(
        default=True,
        description="Emit @throws for `throw new X(...)` statements in the own body.",
    )
    include_events: bool = Field(
        default=True,
        description='Emit @fires for `.emit("event")` calls in the own body.',
    )
    include_author: bool = Field(default=False, description="Emit an @author tag.")
    author_name: str = Field(
        default="", description="Author name used when `include_author` is set."
    )
    class_constructor_params: bool = Field(
        default=False,
        description="Document constructor parameters on the class comment itself.",
    )


class SweepSettings(BaseModel):
    """Settings for whole-file and visible-range sweeps."""

    overwrite_existing: bool = Field(
        default=False,
        description=(
            "If True, nodes that already carry a JSDoc block are merged and refreshed "
            "during a sweep instead of being skipped."
        ),
    )


def _get_default_language_ids() -> dict[str, str]:
    return {
        ".js": "javascript",
        ".mjs": "javascript",
        ".cjs": "javascript",
        ".jsx": "javascriptreact",
        ".ts": "typescript",
        ".mts": "typescript",
        ".cts": "typescript",
        ".tsx": "typescriptreact",
    }


class DocThisSettings(BaseSettings):
    """Top-level settings for the synthesis engine."""

    model_config = SettingsConfigDict(env_prefix="DOCTHIS_", env_nested_delimiter="__")

    render: RenderSettings = Field(
        default_factory=RenderSettings,
        description="A `RenderSettings` object with tag rendering options.",
    )
    sweep: SweepSettings = Field(
        default_factory=SweepSettings,
        description="A `SweepSettings` object with sweep options.",
    )
    max_ancestor_depth: int = Field(
        default=64,
        description="Maximum number of ancestors visited when resolving the node under the cursor.",
    )
    language_ids: dict[str, str] = Field(
        default_factory=_get_default_language_ids,
        description="File extension to editor language id mapping used by the CLI.",
    )

    def language_for_path(self, path: str) -> Optional[str]:
        for ext, language_id in self.language_ids.items():
            if path.endswith(ext):
                return language_id
        return None
