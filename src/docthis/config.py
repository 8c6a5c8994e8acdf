from typing import Any, List, Optional, Type

from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from docthis.settings import DocThisSettings


class CliOption(BaseModel):
    """One flattened settings option, as listed by `docthis options`."""

    flag: str
    env_var: str
    description: str
    default_value: Any = None
    is_group: bool = False


def load_settings(
    env_file: Optional[str] = None,
    toml_file: Optional[str] = None,
    json_file: Optional[str] = None,
    **kwargs,
) -> DocThisSettings:
    """
    Build settings from keyword arguments, `DOCTHIS_*` environment variables,
    an optional dotenv file and an optional TOML or JSON file, in that order
    of precedence.
    """
    config_dict = SettingsConfigDict(
        env_prefix="DOCTHIS_",
        env_nested_delimiter="__",
        env_file=env_file,
        toml_file=toml_file,
        json_file=json_file,
    )

    class Settings(DocThisSettings):
        model_config = config_dict

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: Type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            sources: List[PydanticBaseSettingsSource] = [
                init_settings,
                env_settings,
                dotenv_settings,
            ]
            if toml_file:
                sources.append(TomlConfigSettingsSource(settings_cls))
            if json_file:
                sources.append(JsonConfigSettingsSource(settings_cls))
            sources.append(file_secret_settings)
            return tuple(sources)

    return Settings(**kwargs)


def iter_settings(model: Type[BaseModel], prefix: str = "DOCTHIS_") -> List[CliOption]:
    """
    Return a `CliOption` for every field of *model*, nested models flattened
    into dotted, kebab-case flags.
    """
    out: List[CliOption] = []

    def _walk(cls: Type[BaseModel], dotted: str = "") -> None:
        for name, field in cls.model_fields.items():
            path = f"{dotted}.{name}" if dotted else name
            ann = field.annotation
            is_group = isinstance(ann, type) and issubclass(ann, BaseModel)
            out.append(
                CliOption(
                    flag="--" + path.replace("_", "-"),
                    env_var=prefix + path.replace(".", "__").upper(),
                    description=field.description or "",
                    default_value=(
                        None
                        if is_group
                        else field.get_default(call_default_factory=True)
                    ),
                    is_group=is_group,
                )
            )
            if is_group:
                _walk(ann, path)

    _walk(model)
    return out
