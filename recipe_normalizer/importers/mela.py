"""
Mela recipe import.

A Mela export (.melarecipes) is a zip archive of .melarecipe entries, each a
JSON document. Images are embedded as base64 strings.
"""
from __future__ import annotations

import json
import logging
import uuid
import zipfile
from pathlib import Path
from typing import Any, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..const import MELA_EXTENSION
from ..models.recipe import ArchiveImportError, ArchiveImportResult, RecipeDTO
from ..parsers.duration import parse_human_duration
from ..units import UnitDictionary
from .helpers import (
    RecipeParseInput,
    archive_entries,
    base64_to_bytes,
    build_recipe_dto,
    open_archive,
    parse_servings,
    save_image,
)

if TYPE_CHECKING:
    from ..storage import RecipeStorage

_LOGGER = logging.getLogger(__name__)


class MelaRecipe(BaseModel):
    """A .melarecipe document. Only the fields used on import are typed."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    title: str | None = None
    text: str | None = None
    link: str | None = None
    images: list[str] | None = None
    ingredients: str | None = None
    instructions: str | None = None
    notes: str | None = None
    nutrition: str | None = None
    categories: list[str] | None = None
    prepTime: str | None = None
    cookTime: str | None = None
    totalTime: str | None = None
    yield_: str | int | float | None = Field(default=None, alias="yield")


def _read_entries(archive: zipfile.ZipFile) -> tuple[list[tuple[str, dict[str, Any]]], list[ArchiveImportError]]:
    entries = []
    errors = []
    for info in archive_entries(archive, MELA_EXTENSION):
        try:
            data = json.loads(archive.read(info).decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("recipe is not a JSON object")
        except (ValueError, UnicodeDecodeError, zipfile.BadZipFile) as e:
            _LOGGER.warning("Skipping corrupted .melarecipe file %s: %s", info.filename, e)
            errors.append(ArchiveImportError(file=info.filename, error=str(e)))
            continue
        entries.append((info.filename, data))
    return entries, errors


def parse_mela_archive(archive: str | Path | bytes | zipfile.ZipFile) -> list[dict[str, Any]]:
    """Read every .melarecipe entry of a Mela archive.

    Corrupted entries are logged and skipped.

    Returns:
        The decoded recipe documents, in archive order
    """
    entries, _ = _read_entries(open_archive(archive))
    return [data for _, data in entries]


def parse_mela_recipe_to_dto(data: dict[str, Any], storage: RecipeStorage | None,
                             units: UnitDictionary) -> RecipeDTO:
    """Map a Mela recipe document to a RecipeDTO with a fresh ID.

    The first embedded image, if any, is saved through ``storage``.

    Raises:
        ValueError: If the title is missing or the document is invalid
    """
    recipe = MelaRecipe.model_validate(data)
    title = (recipe.title or "").strip()
    if not title:
        raise ValueError("Missing title")

    recipe_id = str(uuid.uuid4())

    image = None
    if recipe.images:
        try:
            image = save_image(base64_to_bytes(recipe.images[0]), recipe_id, storage)
        except ValueError as e:
            _LOGGER.warning("Could not decode image of '%s': %s", title, e)

    return build_recipe_dto(
        RecipeParseInput(
            name=title,
            image=image,
            url=recipe.link,
            description=recipe.text,
            servings=parse_servings(recipe.yield_),
            prep_minutes=parse_human_duration(recipe.prepTime),
            cook_minutes=parse_human_duration(recipe.cookTime),
            total_minutes=parse_human_duration(recipe.totalTime),
            ingredients_text=recipe.ingredients,
            instructions_text=recipe.instructions,
            categories=recipe.categories or [],
        ),
        recipe_id,
        units,
    )


def import_mela_archive(source: str | Path | bytes | zipfile.ZipFile,
                        storage: RecipeStorage | None,
                        units: UnitDictionary) -> ArchiveImportResult:
    """Import every recipe of a Mela archive.

    Entries are processed one by one; a failing entry is recorded in
    ``errors`` and does not stop the batch.
    """
    entries, errors = _read_entries(open_archive(source))
    recipes = []
    for file_name, data in entries:
        try:
            recipes.append(parse_mela_recipe_to_dto(data, storage, units))
        except (ValueError, ValidationError) as e:
            _LOGGER.warning("Skipping Mela recipe %s: %s", file_name, e)
            errors.append(ArchiveImportError(file=file_name, error=str(e)))

    _LOGGER.info("Imported %d Mela recipes (%d failed)", len(recipes), len(errors))
    return ArchiveImportResult(recipes=recipes, errors=errors)
