"""
Recipe Import Service.

This module orchestrates the import of recipes from URLs, deciding between
the video pipeline, structured data (JSON-LD, microdata) and AI extraction,
and exposes archive imports on the same service.
"""
from __future__ import annotations

import asyncio
import json
import logging
import uuid
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import requests

from ..ai.parser import AIRecipeParser, AIResult, extract_recipe_with_ai
from ..config import ImportSettings, load_config
from ..exceptions import (
    AIExtractionError,
    FeatureDisabledError,
    NotARecipePageError,
    RecipeParseError,
)
from ..extractors.base_parser import BaseRecipeParser
from ..extractors.jsonld import JSONLDRecipeParser, extract_recipe_nodes_from_jsonld
from ..extractors.microdata import MicrodataRecipeParser
from ..extractors.scraper import (
    create_session,
    extract_image_candidates,
    fetch_page,
    is_page_likely_recipe,
)
from ..importers.mela import import_mela_archive
from ..importers.paprika import import_paprika_archive
from ..models.recipe import ArchiveImportResult, ParseRecipeResult, RecipeDTO
from ..storage import RecipeStorage, collect_image_urls
from ..units import UnitDictionary
from ..video.processor import VideoClient, is_video_url, process_video_recipe

_LOGGER = logging.getLogger(__name__)

ARCHIVE_IMPORTERS: dict[str, Callable[..., ArchiveImportResult]] = {
    "mela": import_mela_archive,
    "paprika": import_paprika_archive,
}


def _jsonld_fragment(html: str, url: str) -> tuple[str, str | None] | None:
    """Serialize every Recipe node of a page for AI extraction, with a lead image URL."""
    nodes = extract_recipe_nodes_from_jsonld(html)
    if not nodes:
        return None
    images = (collect_image_urls([n.get("image") for n in nodes])
              or extract_image_candidates(html, url, 1))
    return json.dumps(nodes, ensure_ascii=False), images[0] if images else None


class RecipeImportService:
    """Imports recipes from URLs and archives.

    Collaborators are created from the settings unless given explicitly,
    which lets tests replace the page fetcher, the AI parser and the video
    client with fakes.
    """

    def __init__(
        self,
        settings: ImportSettings,
        *,
        units: UnitDictionary | None = None,
        storage: RecipeStorage | None = None,
        session: requests.Session | None = None,
        fetcher: Callable[[str], str] | None = None,
        ai_parser: AIRecipeParser | None = None,
        video_client: VideoClient | None = None,
    ) -> None:
        self.settings = settings
        self.units = units or settings.build_units()
        self.storage = storage or RecipeStorage(settings.uploads_dir)
        self._session = session
        self._fetcher = fetcher

        if ai_parser is None and settings.ai_available:
            ai_parser = AIRecipeParser(
                api_key=settings.ai_api_key,
                model=settings.ai_model,
                vision_model=settings.vision_model,
            )
        self.ai_parser = ai_parser if settings.ai_available else None

        if video_client is None and settings.video_enabled:
            video_client = VideoClient(
                transcription_api_key=settings.transcription_api_key,
                transcription_model=settings.transcription_model,
            )
        self.video_client = video_client if settings.video_enabled else None

    @classmethod
    def from_config(cls, path: str | Path | None = None, **kwargs: Any) -> RecipeImportService:
        """Create a service from environment variables and an optional JSON file."""
        return cls(load_config(path), **kwargs)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = create_session()
        return self._session

    def _fetch(self, url: str) -> str:
        if self._fetcher is not None:
            return self._fetcher(url)
        return fetch_page(url, self.session)

    def _structured_parsers(self) -> list[BaseRecipeParser]:
        options = {
            "units": self.units,
            "storage": self.storage,
            "video_client": self.video_client if self.settings.store_videos else None,
            "max_images": self.settings.max_recipe_images,
            "max_videos": self.settings.max_recipe_videos,
        }
        return [JSONLDRecipeParser(**options), MicrodataRecipeParser(**options)]

    async def parse_recipe_from_url(
        self,
        url: str,
        recipe_id: str | None = None,
        allergies: list[str] | None = None,
        force_ai: bool | None = None,
    ) -> ParseRecipeResult:
        """Import a recipe from a URL.

        Video URLs go through the transcript pipeline. Other pages are
        fetched and, unless AI-only import is requested, parsed from JSON-LD
        and microdata first, with AI extraction as the fallback.

        Args:
            url: Recipe page or video URL
            recipe_id: Recipe ID for media storage; generated when None
            allergies: Allergens to tag during AI extraction
            force_ai: Use AI only; falls back to the always_use_ai setting when None

        Returns:
            The recipe and whether AI produced it

        Raises:
            FeatureDisabledError: If video or AI-only import is requested but disabled
            VideoProcessingError: If the video pipeline fails
            RecipeFetchError: If the page cannot be fetched
            NotARecipePageError: If the page does not look like a recipe
            RecipeParseError: If every extraction path failed
        """
        recipe_id = recipe_id or str(uuid.uuid4())

        if is_video_url(url):
            return await self._parse_video(url, recipe_id, allergies)

        html = await asyncio.to_thread(self._fetch, url)

        if not is_page_likely_recipe(html, self.settings.schema_indicators,
                                     self.settings.content_indicators):
            _LOGGER.warning("Page %s does not look like a recipe", url)
            raise NotARecipePageError(url)

        use_ai_only = self.settings.always_use_ai if force_ai is None else force_ai
        if use_ai_only:
            if self.ai_parser is None:
                raise FeatureDisabledError("ai", "AI-only import requested but AI is not enabled.")
            result = await self._parse_with_ai(html, url, recipe_id, allergies)
            if not result.success or result.data is None:
                _LOGGER.error("AI-only import failed for %s: %s", url, result.error)
                raise RecipeParseError("AI extraction failed") from AIExtractionError(
                    result.code or "", result.error or "")
            return ParseRecipeResult(recipe=result.data, used_ai=True)

        recipe = await self._parse_structured(html, url, recipe_id)
        if recipe is not None:
            return ParseRecipeResult(recipe=recipe, used_ai=False)

        if self.ai_parser is not None:
            _LOGGER.info("Structured data missing or incomplete for %s, trying AI", url)
            result = await self._parse_with_ai(html, url, recipe_id, allergies)
            if result.success and result.data is not None:
                return ParseRecipeResult(recipe=result.data, used_ai=True)
            _LOGGER.warning("AI fallback failed for %s: %s", url, result.error)

        raise RecipeParseError("Cannot parse recipe.")

    async def _parse_video(self, url: str, recipe_id: str,
                           allergies: list[str] | None) -> ParseRecipeResult:
        if not self.settings.video_available or self.video_client is None:
            raise FeatureDisabledError("video", "Video recipe parsing is not enabled.")

        recipe = await asyncio.to_thread(
            process_video_recipe,
            url,
            recipe_id,
            client=self.video_client,
            parser=self.ai_parser,
            units=self.units,
            storage=self.storage,
            max_seconds=self.settings.video_max_seconds,
            store_video=self.settings.store_videos,
            allergies=allergies,
        )
        return ParseRecipeResult(recipe=recipe, used_ai=True)

    async def _parse_structured(self, html: str, url: str, recipe_id: str) -> RecipeDTO | None:
        for parser in self._structured_parsers():
            name = type(parser).__name__
            try:
                recipe = await asyncio.to_thread(parser.parse_recipe, html, recipe_id, url)
            except Exception as e:
                _LOGGER.warning("%s failed for %s: %s", name, url, e, exc_info=True)
                continue

            if recipe is None:
                _LOGGER.debug("%s found no recipe on %s", name, url)
            elif not recipe.has_content():
                _LOGGER.info("%s recipe on %s has no ingredients or steps, ignoring", name, url)
            else:
                _LOGGER.info("Parsed recipe '%s' from %s with %s", recipe.name, url, name)
                return recipe
        return None

    async def _parse_with_ai(self, html: str, url: str, recipe_id: str,
                             allergies: list[str] | None) -> AIResult:
        """Run AI extraction on the JSON-LD fragment first, then on the page HTML."""
        options: dict[str, Any] = {
            "units": self.units,
            "recipe_id": recipe_id,
            "url": url,
            "allergies": allergies,
            "storage": self.storage,
            "max_images": self.settings.max_recipe_images,
        }

        fragment = await asyncio.to_thread(_jsonld_fragment, html, url)
        if fragment is not None:
            text, image_url = fragment
            result = await asyncio.to_thread(
                extract_recipe_with_ai,
                self.ai_parser,
                text=text,
                image_url=image_url,
                **options,
            )
            if result.success:
                return result
            _LOGGER.info("AI extraction from JSON-LD failed for %s (%s), trying page HTML",
                         url, result.code)

        return await asyncio.to_thread(extract_recipe_with_ai, self.ai_parser, html=html, **options)

    async def import_archive(self, source: str | Path | bytes | zipfile.ZipFile,
                             kind: str) -> ArchiveImportResult:
        """Import a Mela or Paprika archive.

        Args:
            source: Archive path, bytes or open ZipFile
            kind: 'mela' or 'paprika'

        Raises:
            ValueError: If the kind is unknown or the archive is not a zip file
        """
        importer = ARCHIVE_IMPORTERS.get(kind.lower())
        if importer is None:
            raise ValueError(f"Unknown archive kind '{kind}', expected one of "
                             f"{', '.join(ARCHIVE_IMPORTERS)}")

        result = await asyncio.to_thread(importer, source, self.storage, self.units)
        _LOGGER.info("Imported %d recipes from %s archive (%d errors)",
                     result.imported, kind, len(result.errors))
        return result
