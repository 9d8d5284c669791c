"""Ingredient normalization for Schema.org recipeIngredient fields."""
from __future__ import annotations

import html
import logging
from typing import Any

from ..models.recipe import Ingredient, MeasurementSystem
from ..units import UnitDictionary
from .quantity import ParsedLine, parse_ingredient_lines
from .system import infer_system

_LOGGER = logging.getLogger(__name__)


def normalize_ingredient_source(source: Any) -> list[str]:
    """Turn a recipeIngredient field into a list of decoded strings.

    Handles arrays of strings and a single string; None entries and empty
    strings are dropped.
    """
    if isinstance(source, list):
        decoded = (html.unescape(str(v)).strip() if v is not None else "" for v in source)
        return [v for v in decoded if v]

    if isinstance(source, str):
        decoded = html.unescape(source).strip()
        return [decoded] if decoded else []

    return []


def build_ingredients(parsed: list[ParsedLine],
                      system_used: MeasurementSystem | None) -> list[Ingredient]:
    """Build ordered Ingredient models from parsed lines."""
    return [
        Ingredient(
            ingredient_name=line.description,
            amount=line.quantity,
            unit=line.unit,
            system_used=system_used,
            order=i,
        )
        for i, line in enumerate(parsed)
    ]


def parse_ingredients(node: dict[str, Any], units: UnitDictionary
                      ) -> tuple[list[Ingredient], MeasurementSystem | None]:
    """Parse ingredients from a JSON-LD recipe node.

    Args:
        node: The JSON-LD recipe node
        units: Unit dictionary for quantity/unit parsing

    Returns:
        Tuple of (ingredients, inferred measurement system)
    """
    source = node.get("recipeIngredient")
    if source is None:
        source = node.get("ingredients")

    raw = normalize_ingredient_source(source)
    parsed = parse_ingredient_lines(raw, units)
    system_used = infer_system(parsed, units)

    _LOGGER.debug("Parsed %d ingredients (system: %s)", len(parsed), system_used)
    return build_ingredients(parsed, system_used), system_used
