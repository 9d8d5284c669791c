"""
JSON-LD recipe normalization.

Turns a single Schema.org Recipe node into a RecipeDTO by running every
field normalizer over it. Every structured and AI import path ends here.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, TYPE_CHECKING

from .const import DEFAULT_MAX_IMAGES, DEFAULT_MAX_VIDEOS
from .models.recipe import RecipeDTO
from .parsers.images import parse_images
from .parsers.ingredients import parse_ingredients
from .parsers.metadata import parse_metadata
from .parsers.nutrition import extract_nutrition
from .parsers.steps import parse_steps
from .parsers.tags import parse_tags
from .parsers.videos import parse_videos
from .units import UnitDictionary

if TYPE_CHECKING:
    from .storage import RecipeStorage
    from .video.processor import VideoClient

_LOGGER = logging.getLogger(__name__)


def normalize_recipe_from_json(
    node: dict[str, Any] | None,
    recipe_id: str | None = None,
    *,
    units: UnitDictionary,
    storage: RecipeStorage | None = None,
    video_client: VideoClient | None = None,
    max_images: int = DEFAULT_MAX_IMAGES,
    max_videos: int = DEFAULT_MAX_VIDEOS,
) -> RecipeDTO | None:
    """Normalize a JSON-LD Recipe node into a RecipeDTO.

    Args:
        node: The JSON-LD Recipe node
        recipe_id: Recipe ID; a UUID is generated when None
        units: Unit dictionary for ingredient parsing
        storage: Storage for images and videos; None skips remote media
        video_client: Client used to download VideoObjects; None skips videos
        max_images: Maximum number of images to keep
        max_videos: Maximum number of VideoObjects to process

    Returns:
        The normalized recipe, or None if node is empty
    """
    if not node:
        return None

    effective_id = recipe_id or str(uuid.uuid4())
    _LOGGER.debug("Normalizing recipe %s from JSON-LD", effective_id)

    metadata = parse_metadata(node)
    ingredients, system_used = parse_ingredients(node, units)
    steps = parse_steps(node.get("recipeInstructions"), system_used)
    nutrition = extract_nutrition(node)
    images = parse_images(node.get("image"), effective_id, storage, max_images)
    videos = parse_videos(node.get("video"), effective_id, video_client, storage, max_videos)
    tags = parse_tags(node.get("keywords"))

    if videos:
        _LOGGER.debug("Parsed %d videos from JSON-LD", len(videos))

    return RecipeDTO(
        id=effective_id,
        name=metadata.name,
        description=metadata.description,
        url="",
        image=images.primary_image,
        servings=metadata.servings,
        prep_minutes=metadata.prep_minutes,
        cook_minutes=metadata.cook_minutes,
        total_minutes=metadata.total_minutes,
        calories=nutrition.calories,
        fat=nutrition.fat,
        carbs=nutrition.carbs,
        protein=nutrition.protein,
        system_used=system_used,
        recipe_ingredients=ingredients,
        steps=steps,
        images=images.images,
        videos=videos,
        tags=tags,
    )
