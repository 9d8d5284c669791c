"""
Paprika recipe import.

A Paprika export (.paprikarecipes) is a zip archive whose .paprikarecipe
entries are each a gzip-compressed JSON document, not nested zips.
"""
from __future__ import annotations

import gzip
import json
import logging
import uuid
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ..const import PAPRIKA_EXTENSION
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


class PaprikaPhoto(BaseModel):
    data: str | None = None
    filename: str | None = None


class PaprikaRecipe(BaseModel):
    """A .paprikarecipe document.

    notes, rating, difficulty, photo_hash, uid, created and nutritional_info
    are accepted but not imported.
    """

    name: str
    description: str | None = None
    ingredients: str | None = None
    directions: str | None = None
    notes: str | None = None
    categories: list[str] | None = None
    rating: float | None = None
    prep_time: str | None = None
    cook_time: str | None = None
    total_time: str | None = None
    servings: str | int | float | None = None
    difficulty: str | None = None
    source: str | None = None
    source_url: str | None = None
    photo_hash: str | None = None
    photos: list[PaprikaPhoto] | None = None
    uid: str | None = None
    created: str | None = None
    nutritional_info: str | None = None


@dataclass
class PaprikaEntry:
    """A decoded archive entry with its first photo, if any."""

    recipe: PaprikaRecipe
    file_name: str
    image: bytes | None = None


def _decode_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> PaprikaEntry:
    raw = gzip.decompress(archive.read(info))
    recipe = PaprikaRecipe.model_validate(json.loads(raw.decode("utf-8")))

    image = None
    if recipe.photos and recipe.photos[0].data:
        try:
            image = base64_to_bytes(recipe.photos[0].data)
        except ValueError as e:
            _LOGGER.debug("Ignoring undecodable photo in %s: %s", info.filename, e)

    return PaprikaEntry(recipe=recipe, file_name=info.filename, image=image)


def _read_entries(archive: zipfile.ZipFile) -> tuple[list[PaprikaEntry], list[ArchiveImportError]]:
    entries = []
    errors = []
    for info in archive_entries(archive, PAPRIKA_EXTENSION):
        try:
            entries.append(_decode_entry(archive, info))
        except (OSError, EOFError, zlib.error, ValueError, zipfile.BadZipFile) as e:
            # gzip.BadGzipFile is an OSError; json and pydantic errors are ValueErrors
            _LOGGER.warning("Skipping corrupted .paprikarecipe file %s: %s", info.filename, e)
            errors.append(ArchiveImportError(file=info.filename, error=str(e)))
    return entries, errors


def extract_paprika_recipes(archive: str | Path | bytes | zipfile.ZipFile) -> list[PaprikaEntry]:
    """Decode every .paprikarecipe entry of a Paprika archive.

    Corrupted entries are logged and skipped.
    """
    entries, _ = _read_entries(open_archive(archive))
    return entries


def parse_paprika_recipe_to_dto(entry: PaprikaEntry, storage: RecipeStorage | None,
                                units: UnitDictionary) -> RecipeDTO:
    """Map a decoded Paprika entry to a RecipeDTO with a fresh ID.

    Raises:
        ValueError: If the name is missing
    """
    recipe = entry.recipe
    name = recipe.name.strip()
    if not name:
        raise ValueError("Missing recipe name")

    recipe_id = str(uuid.uuid4())

    return build_recipe_dto(
        RecipeParseInput(
            name=name,
            image=save_image(entry.image, recipe_id, storage),
            url=recipe.source_url or recipe.source,
            description=recipe.description,
            servings=parse_servings(recipe.servings),
            prep_minutes=parse_human_duration(recipe.prep_time),
            cook_minutes=parse_human_duration(recipe.cook_time),
            total_minutes=parse_human_duration(recipe.total_time),
            ingredients_text=recipe.ingredients,
            instructions_text=recipe.directions,
            categories=recipe.categories or [],
        ),
        recipe_id,
        units,
    )


def import_paprika_archive(source: str | Path | bytes | zipfile.ZipFile,
                           storage: RecipeStorage | None,
                           units: UnitDictionary) -> ArchiveImportResult:
    """Import every recipe of a Paprika archive.

    A failing entry is recorded in ``errors`` and does not stop the batch.
    """
    entries, errors = _read_entries(open_archive(source))
    recipes = []
    for entry in entries:
        try:
            recipes.append(parse_paprika_recipe_to_dto(entry, storage, units))
        except ValueError as e:
            _LOGGER.warning("Skipping Paprika recipe %s: %s", entry.file_name, e)
            errors.append(ArchiveImportError(file=entry.file_name, error=str(e)))

    _LOGGER.info("Imported %d Paprika recipes (%d failed)", len(recipes), len(errors))
    return ArchiveImportResult(recipes=recipes, errors=errors)
