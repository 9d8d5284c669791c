"""
Configuration loading for the recipe normalizer.

Settings come from environment variables (optionally loaded from a .env
file) overlaid with an optional JSON settings file, and are validated with
a voluptuous schema before being frozen into ImportSettings.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import voluptuous as vol
from dotenv import load_dotenv

from .const import (
    AVAILABLE_MODELS,
    CONF_AI_API_KEY,
    CONF_AI_ENABLED,
    CONF_AI_MODEL,
    CONF_ALWAYS_USE_AI,
    CONF_CONTENT_INDICATORS,
    CONF_MAX_IMAGES,
    CONF_MAX_VIDEOS,
    CONF_SCHEMA_INDICATORS,
    CONF_STORE_VIDEOS,
    CONF_TRANSCRIPTION_API_KEY,
    CONF_TRANSCRIPTION_MODEL,
    CONF_UNITS,
    CONF_UPLOADS_DIR,
    CONF_VIDEO_ENABLED,
    CONF_VIDEO_MAX_SECONDS,
    CONF_VISION_MODEL,
    DEFAULT_CONTENT_INDICATORS,
    DEFAULT_MAX_IMAGES,
    DEFAULT_MAX_VIDEOS,
    DEFAULT_MODEL,
    DEFAULT_SCHEMA_INDICATORS,
    DEFAULT_TRANSCRIPTION_MODEL,
    DEFAULT_UPLOADS_DIR,
    DEFAULT_VIDEO_MAX_SECONDS,
    DEFAULT_VISION_MODEL,
)
from .exceptions import ConfigError
from .units import UnitDictionary

_LOGGER = logging.getLogger(__name__)

# Environment variable -> config key
ENV_VARS = {
    "RECIPE_AI_ENABLED": CONF_AI_ENABLED,
    "RECIPE_AI_API_KEY": CONF_AI_API_KEY,
    "LANGEXTRACT_API_KEY": CONF_AI_API_KEY,
    "RECIPE_AI_MODEL": CONF_AI_MODEL,
    "RECIPE_VISION_MODEL": CONF_VISION_MODEL,
    "RECIPE_ALWAYS_USE_AI": CONF_ALWAYS_USE_AI,
    "RECIPE_VIDEO_ENABLED": CONF_VIDEO_ENABLED,
    "RECIPE_VIDEO_MAX_SECONDS": CONF_VIDEO_MAX_SECONDS,
    "RECIPE_STORE_VIDEOS": CONF_STORE_VIDEOS,
    "OPENAI_API_KEY": CONF_TRANSCRIPTION_API_KEY,
    "RECIPE_TRANSCRIPTION_MODEL": CONF_TRANSCRIPTION_MODEL,
    "RECIPE_UPLOADS_DIR": CONF_UPLOADS_DIR,
    "RECIPE_MAX_IMAGES": CONF_MAX_IMAGES,
    "RECIPE_MAX_VIDEOS": CONF_MAX_VIDEOS,
}

UNIT_SCHEMA = vol.Schema(
    {
        vol.Optional("short"): vol.Any(None, str),
        vol.Optional("plural"): vol.Any(None, str),
        vol.Optional("alternates", default=list): [str],
        vol.Optional("system"): vol.Any(None, vol.In(["metric", "us"])),
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_AI_ENABLED, default=False): vol.Boolean(),
        vol.Optional(CONF_AI_API_KEY): vol.Any(None, str),
        vol.Optional(CONF_AI_MODEL, default=DEFAULT_MODEL): vol.In(AVAILABLE_MODELS),
        vol.Optional(CONF_VISION_MODEL, default=DEFAULT_VISION_MODEL): vol.In(AVAILABLE_MODELS),
        vol.Optional(CONF_ALWAYS_USE_AI, default=False): vol.Boolean(),
        vol.Optional(CONF_VIDEO_ENABLED, default=False): vol.Boolean(),
        vol.Optional(CONF_VIDEO_MAX_SECONDS, default=DEFAULT_VIDEO_MAX_SECONDS):
            vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(CONF_STORE_VIDEOS, default=True): vol.Boolean(),
        vol.Optional(CONF_TRANSCRIPTION_API_KEY): vol.Any(None, str),
        vol.Optional(CONF_TRANSCRIPTION_MODEL, default=DEFAULT_TRANSCRIPTION_MODEL): str,
        vol.Optional(CONF_UPLOADS_DIR, default=DEFAULT_UPLOADS_DIR): str,
        vol.Optional(CONF_MAX_IMAGES, default=DEFAULT_MAX_IMAGES):
            vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional(CONF_MAX_VIDEOS, default=DEFAULT_MAX_VIDEOS):
            vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional(CONF_SCHEMA_INDICATORS, default=list(DEFAULT_SCHEMA_INDICATORS)): [str],
        vol.Optional(CONF_CONTENT_INDICATORS, default=list(DEFAULT_CONTENT_INDICATORS)): [str],
        vol.Optional(CONF_UNITS, default=dict): {str: UNIT_SCHEMA},
    }
)


@dataclass(frozen=True)
class ImportSettings:
    """Validated, read-only import settings."""

    ai_enabled: bool = False
    ai_api_key: str | None = None
    ai_model: str = DEFAULT_MODEL
    vision_model: str = DEFAULT_VISION_MODEL
    always_use_ai: bool = False
    video_enabled: bool = False
    video_max_seconds: int = DEFAULT_VIDEO_MAX_SECONDS
    store_videos: bool = True
    transcription_api_key: str | None = None
    transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL
    uploads_dir: str = DEFAULT_UPLOADS_DIR
    max_recipe_images: int = DEFAULT_MAX_IMAGES
    max_recipe_videos: int = DEFAULT_MAX_VIDEOS
    schema_indicators: tuple[str, ...] = tuple(DEFAULT_SCHEMA_INDICATORS)
    content_indicators: tuple[str, ...] = tuple(DEFAULT_CONTENT_INDICATORS)
    units: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def ai_available(self) -> bool:
        """AI is usable only when enabled and an API key is set."""
        return self.ai_enabled and bool(self.ai_api_key)

    @property
    def video_available(self) -> bool:
        """Video parsing needs AI for the transcript step."""
        return self.video_enabled and self.ai_available

    def build_units(self) -> UnitDictionary:
        """Build the unit dictionary for these settings."""
        return UnitDictionary.from_config(self.units)


def validate_config(raw: dict[str, Any]) -> ImportSettings:
    """Validate a raw settings mapping.

    Raises:
        ConfigError: If the mapping does not match CONFIG_SCHEMA
    """
    try:
        data = CONFIG_SCHEMA(raw)
    except vol.Invalid as e:
        _LOGGER.error("Invalid configuration: %s", e)
        raise ConfigError(f"Invalid configuration: {e}") from e

    data[CONF_SCHEMA_INDICATORS] = tuple(s.lower() for s in data[CONF_SCHEMA_INDICATORS])
    data[CONF_CONTENT_INDICATORS] = tuple(s.lower() for s in data[CONF_CONTENT_INDICATORS])
    return ImportSettings(**data)


def _read_env() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_name, key in ENV_VARS.items():
        value = os.getenv(env_name)
        # The first variable listed for a key wins
        if value not in (None, "") and key not in values:
            values[key] = value
    return values


def load_config(path: str | Path | None = None, env_file: str | Path | None = None) -> ImportSettings:
    """Load settings from the environment and an optional JSON file.

    Values in the JSON file override environment variables.

    Args:
        path: Optional path to a JSON settings file
        env_file: Optional .env file; the default search is used when None

    Returns:
        Validated ImportSettings

    Raises:
        ConfigError: If the file cannot be read or the settings are invalid
    """
    load_dotenv(dotenv_path=env_file)
    raw = _read_env()

    if path is not None:
        try:
            file_data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
        if not isinstance(file_data, dict):
            raise ConfigError(f"Configuration file {path} must contain a JSON object")
        raw.update(file_data)

    settings = validate_config(raw)
    _LOGGER.debug("Loaded configuration (ai_enabled=%s, video_enabled=%s)",
                  settings.ai_enabled, settings.video_enabled)
    return settings
