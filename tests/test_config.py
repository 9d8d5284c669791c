import json

import pytest

from recipe_normalizer.config import ENV_VARS, ImportSettings, load_config, validate_config
from recipe_normalizer.const import DEFAULT_MODEL, DEFAULT_UPLOADS_DIR
from recipe_normalizer.exceptions import ConfigError


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return tmp_path / "missing.env"


def test_defaults():
    settings = validate_config({})

    assert not settings.ai_enabled
    assert settings.ai_model == DEFAULT_MODEL
    assert settings.uploads_dir == DEFAULT_UPLOADS_DIR
    assert settings.store_videos
    assert '"@type":"recipe"' in settings.schema_indicators


def test_indicators_are_lowercased():
    settings = validate_config({"content_indicators": ["Zutaten", "ZUBEREITUNG"]})

    assert settings.content_indicators == ("zutaten", "zubereitung")


@pytest.mark.parametrize("raw", [
    {"ai_model": "gpt-2"},
    {"max_recipe_images": -1},
    {"units": {"pinch": {"system": "imperial"}}},
    {"surprise": True},
])
def test_invalid_config(raw):
    with pytest.raises(ConfigError):
        validate_config(raw)


def test_ai_and_video_availability():
    assert not ImportSettings(ai_enabled=True).ai_available
    assert ImportSettings(ai_enabled=True, ai_api_key="key").ai_available
    assert not ImportSettings(video_enabled=True).video_available
    assert ImportSettings(video_enabled=True, ai_enabled=True, ai_api_key="key").video_available


def test_load_config_from_environment(monkeypatch, clean_env):
    monkeypatch.setenv("RECIPE_AI_ENABLED", "true")
    monkeypatch.setenv("LANGEXTRACT_API_KEY", "from-langextract")
    monkeypatch.setenv("RECIPE_MAX_IMAGES", "4")

    settings = load_config(env_file=clean_env)

    assert settings.ai_enabled
    assert settings.ai_api_key == "from-langextract"
    assert settings.max_recipe_images == 4


def test_first_listed_env_var_wins(monkeypatch, clean_env):
    monkeypatch.setenv("RECIPE_AI_API_KEY", "primary")
    monkeypatch.setenv("LANGEXTRACT_API_KEY", "secondary")

    assert load_config(env_file=clean_env).ai_api_key == "primary"


def test_settings_file_overrides_environment(monkeypatch, clean_env, tmp_path):
    monkeypatch.setenv("RECIPE_UPLOADS_DIR", "/from/env")
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"uploads_dir": "/from/file", "units": {"pinch": {"short": "pn"}}}))

    settings = load_config(path, env_file=clean_env)

    assert settings.uploads_dir == "/from/file"
    assert settings.units["pinch"]["short"] == "pn"


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_unreadable_settings_file(clean_env, tmp_path, content):
    path = tmp_path / "settings.json"
    path.write_text(content)

    with pytest.raises(ConfigError):
        load_config(path, env_file=clean_env)


def test_missing_settings_file(clean_env, tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.json", env_file=clean_env)
