"""Helpers shared by the archive importers."""
from __future__ import annotations

import base64
import binascii
import io
import logging
import math
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ..models.recipe import Ingredient, RecipeDTO, RecipeImage, Step, Tag
from ..parsers.ingredients import build_ingredients
from ..parsers.quantity import parse_ingredient_lines
from ..parsers.system import infer_system
from ..units import UnitDictionary

if TYPE_CHECKING:
    from ..storage import RecipeStorage

_LOGGER = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:\w+/[\w+.-]+;base64,", re.IGNORECASE)


@dataclass
class RecipeParseInput:
    """Fields an archive entry maps onto before the DTO is built."""

    name: str
    image: str | None = None
    url: str | None = None
    description: str | None = None
    servings: int | None = None
    prep_minutes: int | None = None
    cook_minutes: int | None = None
    total_minutes: int | None = None
    ingredients_text: str | None = None
    instructions_text: str | None = None
    categories: list[str] = field(default_factory=list)


def split_non_empty_lines(text: str | None) -> list[str]:
    """Split text on newlines, dropping blank lines."""
    if not text:
        return []
    return [line.strip() for line in re.split(r"\r?\n", text) if line.strip()]


def parse_servings(value: str | int | float | None) -> int | None:
    """Parse servings from a number or a string like '4 servings'.

    Numbers are rounded and never go below 1.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return max(1, round(value))

    match = re.search(r"\d+", str(value))
    return int(match.group()) if match else None


def base64_to_bytes(data: str) -> bytes:
    """Decode base64 image data.

    Surrounding quotes, whitespace and a data-URI prefix are removed, and
    leading junk before a JPEG ('/9j/') or PNG ('iVBOR') signature is
    skipped.

    Raises:
        ValueError: If the data is not valid base64
    """
    s = re.sub(r"\s+", "", data.strip().strip('"'))

    if _DATA_URI.match(s):
        s = s[s.index(",") + 1:]

    starts = [i for i in (s.find("/9j/"), s.find("iVBOR")) if i >= 0]
    if starts and min(starts) > 0:
        s = s[min(starts):]

    s += "=" * (-len(s) % 4)
    try:
        return base64.b64decode(s)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


def save_image(data: bytes | None, recipe_id: str, storage: RecipeStorage | None) -> str | None:
    """Save image bytes, returning None when there is nothing to save or saving fails."""
    if not data or storage is None:
        return None
    try:
        return storage.save_image_bytes(data, recipe_id)
    except (OSError, ValueError) as e:
        _LOGGER.warning("Failed to save image for recipe %s: %s", recipe_id, e)
        return None


def build_recipe_dto(parse_input: RecipeParseInput, recipe_id: str,
                     units: UnitDictionary) -> RecipeDTO:
    """Build a RecipeDTO from archive fields.

    Ingredient lines are parsed with the unit dictionary, instruction lines
    become steps and categories become tags.

    Raises:
        ValueError: If the name is missing or the result fails validation
    """
    name = (parse_input.name or "").strip()
    if not name:
        raise ValueError("Missing recipe name")

    parsed = parse_ingredient_lines(split_non_empty_lines(parse_input.ingredients_text), units)
    system_used = infer_system(parsed, units)
    ingredients: list[Ingredient] = build_ingredients(parsed, system_used)

    steps = [
        Step(step=line, system_used=system_used, order=i + 1)
        for i, line in enumerate(split_non_empty_lines(parse_input.instructions_text))
    ]

    tags = [Tag(name=c.strip()) for c in parse_input.categories or [] if c and c.strip()]

    return RecipeDTO(
        id=recipe_id,
        name=name,
        description=parse_input.description or None,
        url=parse_input.url or None,
        image=parse_input.image,
        servings=parse_input.servings,
        prep_minutes=parse_input.prep_minutes,
        cook_minutes=parse_input.cook_minutes,
        total_minutes=parse_input.total_minutes,
        system_used=system_used,
        recipe_ingredients=ingredients,
        steps=steps,
        images=[RecipeImage(image=parse_input.image, order=0)] if parse_input.image else [],
        tags=tags,
    )


def open_archive(source: str | Path | bytes | zipfile.ZipFile) -> zipfile.ZipFile:
    """Open a zip archive from a path, raw bytes, or an already open ZipFile.

    Raises:
        ValueError: If the source cannot be opened as a zip archive
    """
    if isinstance(source, zipfile.ZipFile):
        return source
    try:
        if isinstance(source, (bytes, bytearray)):
            return zipfile.ZipFile(io.BytesIO(source))
        return zipfile.ZipFile(source)
    except (zipfile.BadZipFile, OSError) as e:
        raise ValueError(f"Not a valid archive: {e}") from e


def archive_entries(archive: zipfile.ZipFile, extension: str) -> list[zipfile.ZipInfo]:
    """Entries whose name ends with ``extension`` (case-insensitive), in archive order."""
    return [
        info for info in archive.infolist()
        if not info.is_dir() and info.filename.lower().endswith(extension)
    ]
