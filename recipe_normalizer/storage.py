"""
Media storage for imported recipes.

Images and videos are stored under ``{uploads_dir}/recipes/{recipe_id}/``
with a content hash as file name, and referenced from the recipe as
``/recipes/{recipe_id}/{filename}``. Saving the same bytes twice yields
the same path.
"""
from __future__ import annotations

import hashlib
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from .const import (
    DEFAULT_MAX_RESPONSE_SIZE,
    DEFAULT_TIMEOUT,
    RECIPES_SUBDIR,
    RECIPES_URL_PREFIX,
)

_LOGGER = logging.getLogger(__name__)

_IMAGE_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/avif": "avif",
}

_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class SavedVideo:
    """A video file placed in a recipe directory."""

    video: str
    duration: float | None = None


def sniff_image_extension(data: bytes, content_type: str | None = None) -> str:
    """Guess an image file extension from magic bytes, then content type."""
    if data.startswith(b"\xff\xd8\xff"):
        return "jpg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    if content_type:
        ext = _IMAGE_CONTENT_TYPES.get(content_type.split(";")[0].strip().lower())
        if ext:
            return ext
    return "jpg"


def collect_image_urls(field: Any) -> list[str]:
    """Collect image URLs from a JSON-LD image field.

    Accepts a URL string, an ImageObject dict (``url`` or ``contentUrl``), or a
    list of either. Duplicates are dropped, order is kept.
    """
    urls: list[str] = []

    def visit(value: Any) -> None:
        if isinstance(value, str):
            if value.strip():
                urls.append(value.strip())
        elif isinstance(value, list):
            for item in value:
                visit(item)
        elif isinstance(value, dict):
            visit(value.get("url") or value.get("contentUrl"))

    visit(field)
    return list(dict.fromkeys(urls))


class RecipeStorage:
    """Stores recipe media on disk under the uploads directory."""

    def __init__(self, uploads_dir: str | Path, session: requests.Session | None = None,
                 timeout: int = DEFAULT_TIMEOUT) -> None:
        self.root = Path(uploads_dir) / RECIPES_SUBDIR
        self.timeout = timeout
        self._session = session
        _LOGGER.debug("Initialized RecipeStorage at %s", self.root)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers["User-Agent"] = _USER_AGENT
        return self._session

    def recipe_dir(self, recipe_id: str) -> Path:
        """Directory holding the media of one recipe, created on demand."""
        path = self.root / recipe_id
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def web_path(recipe_id: str, filename: str) -> str:
        return f"{RECIPES_URL_PREFIX}{recipe_id}/{filename}"

    def save_image_bytes(self, data: bytes, recipe_id: str, content_type: str | None = None) -> str:
        """Save raw image bytes and return the web path.

        Raises:
            ValueError: If data is empty
        """
        if not data:
            raise ValueError("Image data is empty")

        digest = hashlib.sha256(data).hexdigest()[:16]
        filename = f"{digest}.{sniff_image_extension(data, content_type)}"
        target = self.recipe_dir(recipe_id) / filename
        if not target.exists():
            target.write_bytes(data)
            _LOGGER.debug("Saved image %s (%d bytes)", target, len(data))
        return self.web_path(recipe_id, filename)

    def download_image(self, url: str, recipe_id: str) -> str:
        """Download one remote image and return its web path.

        Raises:
            requests.exceptions.RequestException: If the download fails
            ValueError: If the response is not an image or is too large
        """
        with self.session.get(url, timeout=self.timeout, stream=True) as response:
            response.raise_for_status()

            content_type = response.headers.get("content-type", "").lower()
            if content_type and not content_type.startswith("image/"):
                raise ValueError(f"Invalid content type for image: {content_type}")

            content = bytearray()
            for chunk in response.iter_content(chunk_size=8192):
                content.extend(chunk)
                if len(content) > DEFAULT_MAX_RESPONSE_SIZE:
                    raise ValueError(
                        f"Image size exceeds maximum allowed size ({DEFAULT_MAX_RESPONSE_SIZE} bytes)")

        return self.save_image_bytes(bytes(content), recipe_id, content_type)

    def download_images(self, field: Any, recipe_id: str, max_images: int) -> list[str]:
        """Download images from a JSON-LD image field.

        Individual failures are logged and skipped.

        Args:
            field: The image field (string, ImageObject, or list)
            recipe_id: Recipe the images belong to
            max_images: Maximum number of images to keep

        Returns:
            Web paths of the stored images, in source order
        """
        if max_images <= 0:
            return []

        saved: list[str] = []
        for url in collect_image_urls(field):
            if len(saved) >= max_images:
                break
            try:
                path = self.download_image(url, recipe_id)
            except (requests.exceptions.RequestException, ValueError, OSError) as e:
                _LOGGER.warning("Failed to download image %s: %s", url, e)
                continue
            if path not in saved:
                saved.append(path)

        _LOGGER.debug("Downloaded %d images for recipe %s", len(saved), recipe_id)
        return saved

    def save_video_file(self, source: str | Path, recipe_id: str,
                        duration: float | None = None) -> SavedVideo:
        """Copy a video file into the recipe directory.

        The source file is left in place; callers clean up their temp files.
        """
        source = Path(source)
        digest = hashlib.sha256()
        with source.open("rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                digest.update(chunk)

        filename = f"{digest.hexdigest()[:16]}{source.suffix or '.mp4'}"
        target = self.recipe_dir(recipe_id) / filename
        if not target.exists():
            shutil.copyfile(source, target)
            _LOGGER.debug("Saved video %s", target)
        return SavedVideo(video=self.web_path(recipe_id, filename), duration=duration)
