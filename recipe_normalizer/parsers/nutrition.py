"""Nutrition parsing for Schema.org NutritionInformation."""
from __future__ import annotations

import math
import re
from typing import Any

from ..models.recipe import Nutrition

_LEADING_NUMBER = re.compile(r"^\d+(?:[.,]\d+)?")


def parse_nutrition_value(value: Any) -> float | None:
    """Parse a nutrition value like 300, '300 kcal', '25g' or '12,5 g'.

    Returns:
        The leading numeric value, or None if there is none
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value.strip())
        if match:
            parsed = float(match.group().replace(",", "."))
            return parsed if math.isfinite(parsed) else None
    return None


def _format_number(value: float | None) -> str | None:
    if value is None:
        return None
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _first_present(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def extract_nutrition(node: Any) -> Nutrition:
    """Extract nutrition from a JSON-LD recipe node.

    Reads ``node['nutrition']`` with the keys calories/calorieContent,
    fatContent/fat, carbohydrateContent/carbs and proteinContent/protein.
    Calories stay numeric; fat, carbs and protein become numeric strings.
    """
    if not isinstance(node, dict):
        return Nutrition()

    nutrition = node.get("nutrition")
    if not isinstance(nutrition, dict):
        return Nutrition()

    calories = parse_nutrition_value(_first_present(nutrition, "calories", "calorieContent"))
    fat = parse_nutrition_value(_first_present(nutrition, "fatContent", "fat"))
    carbs = parse_nutrition_value(_first_present(nutrition, "carbohydrateContent", "carbs"))
    protein = parse_nutrition_value(_first_present(nutrition, "proteinContent", "protein"))

    return Nutrition(
        calories=calories,
        fat=_format_number(fat),
        carbs=_format_number(carbs),
        protein=_format_number(protein),
    )
