import json

from docthis.config import iter_settings, load_settings
from docthis.models import DescriptionStyle, ReturnsPolicy
from docthis.settings import DocThisSettings


def test_defaults():
    settings = DocThisSettings()
    assert settings.render.include_types
    assert settings.render.returns_policy == ReturnsPolicy.TYPED
    assert not settings.sweep.overwrite_existing
    assert settings.language_for_path("src/app.tsx") == "typescriptreact"
    assert settings.language_for_path("lib/index.mjs") == "javascript"
    assert settings.language_for_path("main.py") is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DOCTHIS_RENDER__RETURNS_POLICY", "always")
    monkeypatch.setenv("DOCTHIS_SWEEP__OVERWRITE_EXISTING", "true")
    settings = load_settings()
    assert settings.render.returns_policy == ReturnsPolicy.ALWAYS
    assert settings.sweep.overwrite_existing


def test_toml_file(tmp_path):
    path = tmp_path / "docthis.toml"
    path.write_text('[render]\ndescription_style = "tag"\nreturns_tag = "return"\n')
    settings = load_settings(toml_file=str(path))
    assert settings.render.description_style == DescriptionStyle.TAG
    assert settings.render.returns_tag == "return"


def test_json_file_and_keyword_precedence(tmp_path):
    path = tmp_path / "docthis.json"
    path.write_text(json.dumps({"max_ancestor_depth": 8, "render": {"include_types": False}}))
    settings = load_settings(json_file=str(path), max_ancestor_depth=4)
    assert settings.max_ancestor_depth == 4
    assert not settings.render.include_types


def test_iter_settings_flattens_nested_models():
    options = {o.flag: o for o in iter_settings(DocThisSettings)}
    assert options["--render"].is_group
    opt = options["--render.include-types"]
    assert opt.env_var == "DOCTHIS_RENDER__INCLUDE_TYPES"
    assert opt.default_value is True
    assert options["--sweep.overwrite-existing"].default_value is False
    assert options["--language-ids"].default_value[".ts"] == "typescript"
