"""Image field normalization."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from ..const import DEFAULT_MAX_IMAGES, RECIPES_URL_PREFIX
from ..models.recipe import RecipeImage

if TYPE_CHECKING:
    from ..storage import RecipeStorage

_LOGGER = logging.getLogger(__name__)


@dataclass
class ImageParseResult:
    """Stored images plus the primary image (the first one)."""

    images: list[RecipeImage] = field(default_factory=list)
    primary_image: str | None = None


def is_local_path(value: Any) -> bool:
    """True for images already stored under /recipes/."""
    return isinstance(value, str) and value.startswith(RECIPES_URL_PREFIX)


def parse_images(image_field: Any, recipe_id: str, storage: RecipeStorage | None,
                 max_images: int = DEFAULT_MAX_IMAGES) -> ImageParseResult:
    """Resolve a JSON-LD image field to stored images.

    Local paths are kept as-is; remote URLs and ImageObjects are downloaded
    through ``storage``, capped so that local + downloaded <= max_images.

    Args:
        image_field: The image field (string, ImageObject, or list)
        recipe_id: Recipe the images belong to
        storage: Storage used for downloads; None skips remote images
        max_images: Maximum number of images

    Returns:
        ImageParseResult with dense 0-based order
    """
    if not image_field:
        return ImageParseResult()

    if is_local_path(image_field):
        stored = [image_field]
    else:
        entries = image_field if isinstance(image_field, list) else [image_field]
        stored = [e for e in entries if is_local_path(e)][:max_images]
        remote = [e for e in entries if not is_local_path(e)]

        if remote and storage is not None:
            stored.extend(storage.download_images(remote, recipe_id, max_images - len(stored)))
        elif remote:
            _LOGGER.debug("No storage configured, skipping %d remote images", len(remote))

    images = [RecipeImage(image=path, order=i) for i, path in enumerate(stored)]
    return ImageParseResult(images=images, primary_image=stored[0] if stored else None)
