"""
JSON-LD Recipe Parser.

This module finds Schema.org Recipe nodes in the ld+json scripts of a page
and normalizes them without any AI inference.
"""
from __future__ import annotations

import json
import logging
from typing import Any, TYPE_CHECKING

from bs4 import BeautifulSoup

from ..models.recipe import RecipeDTO
from ..normalize import normalize_recipe_from_json
from .base_parser import BaseRecipeParser

if TYPE_CHECKING:
    from ..storage import RecipeStorage
    from ..units import UnitDictionary
    from ..video.processor import VideoClient

_LOGGER = logging.getLogger(__name__)


def is_recipe(item: Any) -> bool:
    """Check if a JSON-LD item represents a Recipe."""
    if not isinstance(item, dict):
        return False
    item_type = item.get('@type')
    if isinstance(item_type, str):
        return item_type.lower() == 'recipe'
    if isinstance(item_type, list):
        return any(isinstance(t, str) and t.lower() == 'recipe' for t in item_type)
    return False


def _collect_recipes(data: Any, found: list[dict[str, Any]]) -> None:
    if isinstance(data, list):
        for item in data:
            _collect_recipes(item, found)
    elif isinstance(data, dict):
        if is_recipe(data):
            found.append(data)
        graph = data.get('@graph')
        if isinstance(graph, list):
            _collect_recipes(graph, found)


def extract_recipe_nodes_from_jsonld(html: str) -> list[dict[str, Any]]:
    """Find every Recipe node in the ld+json scripts of a page.

    Top-level objects, arrays and @graph containers are searched. Scripts
    that fail to parse are skipped.

    Args:
        html: Page HTML

    Returns:
        Recipe nodes in document order
    """
    soup = BeautifulSoup(html, features="html.parser")
    json_lds = soup.find_all('script', type='application/ld+json')
    _LOGGER.debug("Found %d JSON-LD scripts", len(json_lds))

    found: list[dict[str, Any]] = []
    for idx, json_ld in enumerate(json_lds):
        raw = json_ld.string or json_ld.get_text()
        if not raw or not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            _LOGGER.debug("Failed to parse JSON-LD script %d: %s", idx, e)
            continue
        _collect_recipes(data, found)

    _LOGGER.debug("Found %d Recipe nodes in JSON-LD", len(found))
    return found


class JSONLDRecipeParser(BaseRecipeParser):
    """Parses recipe data from structured JSON-LD.

    This parser handles pre-structured recipe data that follows the Schema.org
    Recipe format, requiring no AI inference.
    """

    def __init__(self, units: UnitDictionary, storage: RecipeStorage | None = None,
                 video_client: VideoClient | None = None, max_images: int | None = None,
                 max_videos: int | None = None) -> None:
        super().__init__(units, storage, video_client, max_images, max_videos)
        _LOGGER.debug("Initialized JSONLDRecipeParser")

    def parse_recipe(self, html: str, recipe_id: str | None = None,
                     url: str | None = None) -> RecipeDTO | None:
        """Normalize the first Recipe node of a page.

        Args:
            html: Page HTML
            recipe_id: Recipe ID for media storage
            url: Source URL, recorded on the result

        Returns:
            RecipeDTO, or None if the page has no Recipe node
        """
        nodes = extract_recipe_nodes_from_jsonld(html)
        if not nodes:
            return None

        recipe = normalize_recipe_from_json(nodes[0], recipe_id, **self.normalize_options())
        if recipe is not None and url:
            recipe = recipe.model_copy(update={"url": url})
        return recipe
