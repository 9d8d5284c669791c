"""
Microdata Recipe Parser.

Pages without JSON-LD often still mark recipes up with itemscope /
itemprop attributes. extruct reads those into items with a ``type`` and a
``properties`` mapping; this module folds them into the JSON-LD shape so the
same normalizers apply.
"""
from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

import extruct

from ..models.recipe import RecipeDTO
from ..normalize import normalize_recipe_from_json
from .base_parser import BaseRecipeParser

if TYPE_CHECKING:
    from ..storage import RecipeStorage
    from ..units import UnitDictionary
    from ..video.processor import VideoClient

_LOGGER = logging.getLogger(__name__)


def _type_name(item_type: Any) -> str | list[str] | None:
    """'http://schema.org/Recipe' -> 'Recipe'."""
    if isinstance(item_type, list):
        names = [_type_name(t) for t in item_type]
        return [n for n in names if isinstance(n, str)]
    if isinstance(item_type, str):
        return item_type.rstrip("/").rsplit("/", 1)[-1]
    return None


def microdata_to_jsonld(value: Any) -> Any:
    """Convert an extruct microdata item (recursively) to JSON-LD shape."""
    if isinstance(value, list):
        return [microdata_to_jsonld(v) for v in value]

    if isinstance(value, dict) and "properties" in value:
        node: dict[str, Any] = {}
        type_name = _type_name(value.get("type"))
        if type_name:
            node["@type"] = type_name
        for key, prop in (value.get("properties") or {}).items():
            node[key] = microdata_to_jsonld(prop)
        # Some sites use the older 'ingredients' itemprop
        if "recipeIngredient" not in node and "ingredients" in node:
            node["recipeIngredient"] = node["ingredients"]
        return node

    return value


def _is_recipe_type(type_name: Any) -> bool:
    if isinstance(type_name, list):
        return any(_is_recipe_type(t) for t in type_name)
    return isinstance(type_name, str) and type_name.lower() == "recipe"


def extract_recipe_nodes_from_microdata(html: str, base_url: str | None = None) -> list[dict[str, Any]]:
    """Find Recipe items in page microdata, converted to JSON-LD shape."""
    try:
        data = extruct.extract(html, base_url=base_url, syntaxes=["microdata"])
    except (ValueError, TypeError) as e:
        _LOGGER.debug("Failed to read microdata: %s", e)
        return []

    nodes = []
    for item in data.get("microdata", []):
        node = microdata_to_jsonld(item)
        if isinstance(node, dict) and _is_recipe_type(node.get("@type")):
            nodes.append(node)

    _LOGGER.debug("Found %d Recipe items in microdata", len(nodes))
    return nodes


class MicrodataRecipeParser(BaseRecipeParser):
    """Parses recipe data from schema.org microdata."""

    def __init__(self, units: UnitDictionary, storage: RecipeStorage | None = None,
                 video_client: VideoClient | None = None, max_images: int | None = None,
                 max_videos: int | None = None) -> None:
        super().__init__(units, storage, video_client, max_images, max_videos)
        _LOGGER.debug("Initialized MicrodataRecipeParser")

    def parse_recipe(self, html: str, recipe_id: str | None = None,
                     url: str | None = None) -> RecipeDTO | None:
        nodes = extract_recipe_nodes_from_microdata(html, url)
        if not nodes:
            return None

        recipe = normalize_recipe_from_json(nodes[0], recipe_id, **self.normalize_options())
        if recipe is not None and url:
            recipe = recipe.model_copy(update={"url": url})
        return recipe
