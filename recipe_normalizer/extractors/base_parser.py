"""
Base Recipe Parser.

This module defines the interface shared by the structured page parsers.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

from ..const import DEFAULT_MAX_IMAGES, DEFAULT_MAX_VIDEOS
from ..models.recipe import RecipeDTO

if TYPE_CHECKING:
    from ..storage import RecipeStorage
    from ..units import UnitDictionary
    from ..video.processor import VideoClient


class BaseRecipeParser(ABC):
    """Abstract base class for structured recipe parsers.

    All recipe parsers must implement the parse_recipe method to convert
    page HTML into a RecipeDTO.
    """

    def __init__(self, units: UnitDictionary, storage: RecipeStorage | None = None,
                 video_client: VideoClient | None = None, max_images: int | None = None,
                 max_videos: int | None = None) -> None:
        self.units = units
        self.storage = storage
        self.video_client = video_client
        self.max_images = DEFAULT_MAX_IMAGES if max_images is None else max_images
        self.max_videos = DEFAULT_MAX_VIDEOS if max_videos is None else max_videos

    def normalize_options(self) -> dict[str, Any]:
        """Keyword arguments for normalize_recipe_from_json."""
        return {
            "units": self.units,
            "storage": self.storage,
            "video_client": self.video_client,
            "max_images": self.max_images,
            "max_videos": self.max_videos,
        }

    @abstractmethod
    def parse_recipe(self, html: str, recipe_id: str | None = None,
                     url: str | None = None) -> RecipeDTO | None:
        """Parse recipe information from page HTML.

        Args:
            html: The page HTML
            recipe_id: Recipe ID for media storage
            url: Source URL of the page

        Returns:
            A RecipeDTO, or None if the page carries no data for this parser
        """
