"""Recipe metadata: name, description, servings and times."""
from __future__ import annotations

import html
import math
import re
from dataclasses import dataclass
from typing import Any

from .duration import parse_iso_duration

DEFAULT_RECIPE_NAME = "Untitled recipe"

_BRACKETED_NAME = re.compile(r"^\[\s*'(.+)'\s*\]$")


@dataclass(frozen=True)
class Metadata:
    """Scalar recipe fields read from a JSON-LD node."""

    name: str
    description: str | None = None
    servings: int | None = None
    prep_minutes: int | None = None
    cook_minutes: int | None = None
    total_minutes: int | None = None


def get_name(node: dict[str, Any]) -> str | None:
    """Read the recipe name from ``name`` or ``headline``.

    Arrays take their first element and a "['Name']" wrapper is removed.
    """
    raw = node.get("name")
    if raw is None:
        raw = node.get("headline")

    if isinstance(raw, list):
        first = raw[0] if raw else None
        name = html.unescape(str(first)) if first is not None else ""
        return name.strip() or None

    if isinstance(raw, str):
        name = html.unescape(_BRACKETED_NAME.sub(r"\1", raw.strip()))
        return name.strip() or None

    return None


def get_servings(recipe_yield: Any) -> int | None:
    """Read servings from recipeYield.

    Handles numbers, strings like '4 servings' or 'Makes 12', and arrays of
    either (the first usable value wins).
    """
    if recipe_yield is None:
        return None

    values = recipe_yield if isinstance(recipe_yield, list) else [recipe_yield]
    for value in values:
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)) and math.isfinite(value):
            return int(value)
        if isinstance(value, str):
            match = re.search(r"\d+", value)
            if match:
                return int(match.group())
    return None


def parse_metadata(node: dict[str, Any]) -> Metadata:
    """Parse the scalar metadata fields of a JSON-LD recipe node."""
    description = node.get("description")
    return Metadata(
        name=get_name(node) or DEFAULT_RECIPE_NAME,
        description=html.unescape(description).strip() or None if isinstance(description, str) else None,
        servings=get_servings(node.get("recipeYield")),
        prep_minutes=parse_iso_duration(node.get("prepTime")),
        cook_minutes=parse_iso_duration(node.get("cookTime")),
        total_minutes=parse_iso_duration(node.get("totalTime")),
    )
