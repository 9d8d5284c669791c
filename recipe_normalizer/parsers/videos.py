"""
VideoObject normalization.

Reads Schema.org VideoObject entries from a JSON-LD video field, downloads
each one through the video client and stores it next to the recipe images.
"""
from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TYPE_CHECKING

from ..const import DEFAULT_MAX_VIDEOS
from ..exceptions import VideoProcessingError
from ..models.recipe import RecipeVideo
from .duration import parse_duration_seconds

if TYPE_CHECKING:
    from ..storage import RecipeStorage
    from ..video.processor import VideoClient

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class VideoCandidate:
    """A VideoObject that carries at least one video URL."""

    content_url: str | None
    url: str | None
    thumbnail_url: Any = None
    duration: str | None = None
    name: str | None = None

    @property
    def video_url(self) -> str | None:
        return self.content_url or self.url


def extract_thumbnail_url(thumbnail_url: Any) -> str | None:
    """Return the thumbnail URL, or the first non-empty one from a list."""
    if isinstance(thumbnail_url, str):
        return thumbnail_url.strip() or None
    if isinstance(thumbnail_url, list):
        for url in thumbnail_url:
            if isinstance(url, str) and url.strip():
                return url.strip()
    return None


def _normalize_video_object(node: Any) -> VideoCandidate | None:
    if not isinstance(node, dict):
        return None

    node_type = node.get("@type", node.get("type"))
    if isinstance(node_type, list):
        type_str = ",".join(str(t) for t in node_type).lower()
    else:
        type_str = str(node_type).lower()
    if "videoobject" not in type_str:
        return None

    content_url = node.get("contentUrl") if isinstance(node.get("contentUrl"), str) else None
    url = node.get("url") if isinstance(node.get("url"), str) else None
    if not content_url and not url:
        return None

    name = node.get("name")
    return VideoCandidate(
        content_url=content_url,
        url=url,
        thumbnail_url=node.get("thumbnailUrl"),
        duration=node.get("duration") if isinstance(node.get("duration"), str) else None,
        name=html.unescape(name).strip() if isinstance(name, str) else None,
    )


def extract_video_candidates(video_field: Any) -> list[VideoCandidate]:
    """Collect VideoObject candidates from a single object or a list."""
    if not video_field:
        return []
    nodes = video_field if isinstance(video_field, list) else [video_field]
    return [c for c in (_normalize_video_object(n) for n in nodes) if c]


def _download_and_save(candidate: VideoCandidate, recipe_id: str, order: int,
                       client: VideoClient, storage: RecipeStorage) -> RecipeVideo | None:
    video_url = candidate.video_url
    duration = parse_duration_seconds(candidate.duration)
    downloaded: Path | None = None

    try:
        if not duration:
            try:
                duration = client.get_metadata(video_url).duration
            except VideoProcessingError as e:
                _LOGGER.debug("No metadata for %s: %s", video_url, e)

        downloaded = client.download_video(video_url)
        saved = storage.save_video_file(downloaded, recipe_id, duration)
        _LOGGER.info("Saved video %s for recipe %s", saved.video, recipe_id)

        return RecipeVideo(
            video=saved.video,
            thumbnail=extract_thumbnail_url(candidate.thumbnail_url),
            duration=saved.duration,
            order=order,
        )
    except (VideoProcessingError, OSError) as e:
        _LOGGER.warning("Failed to process video %s: %s", video_url, e)
        return None
    finally:
        client.cleanup(downloaded)


def parse_videos(video_field: Any, recipe_id: str, client: VideoClient | None,
                 storage: RecipeStorage | None,
                 max_videos: int = DEFAULT_MAX_VIDEOS) -> list[RecipeVideo]:
    """Download VideoObjects from a JSON-LD video field.

    Candidates are processed one at a time, at most ``max_videos`` of them.
    A failed candidate is skipped; the others keep their position as order.

    Args:
        video_field: The JSON-LD video field
        recipe_id: Recipe the videos belong to
        client: Video client used for downloads; None skips videos
        storage: Storage receiving the video files
        max_videos: Maximum number of candidates to process

    Returns:
        The stored videos
    """
    candidates = extract_video_candidates(video_field)
    if not candidates:
        return []
    if client is None or storage is None:
        _LOGGER.debug("Video downloads disabled, skipping %d candidates", len(candidates))
        return []

    _LOGGER.debug("Found %d VideoObject candidates", len(candidates))

    videos = []
    for i, candidate in enumerate(candidates[:max_videos]):
        parsed = _download_and_save(candidate, recipe_id, i, client, storage)
        if parsed:
            videos.append(parsed)
    return videos
