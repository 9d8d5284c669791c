"""
Video recipe processing.

Recipes shared as short videos (YouTube, Instagram reels, TikTok, ...) are
turned into recipes by downloading the audio track with yt-dlp,
transcribing it with the OpenAI Whisper API and running the transcript plus
video metadata through the AI extractor.
"""
from __future__ import annotations

import logging
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TYPE_CHECKING

import yt_dlp
from openai import OpenAI, OpenAIError

from ..const import DEFAULT_TRANSCRIPTION_MODEL, DEFAULT_VIDEO_MAX_SECONDS, VIDEO_URL_PATTERNS
from ..exceptions import VideoProcessingError
from ..models.recipe import RecipeDTO
from ..ai.parser import AIRecipeParser, extract_recipe_with_ai
from ..ai.prompts import build_video_text
from ..units import UnitDictionary

if TYPE_CHECKING:
    from ..storage import RecipeStorage

_LOGGER = logging.getLogger(__name__)

_VIDEO_URL_RES = [re.compile(p, re.IGNORECASE) for p in VIDEO_URL_PATTERNS]
_INSTAGRAM_RE = re.compile(r"^https?://(?:www\.)?instagram\.com/", re.IGNORECASE)


def is_video_url(url: str | None) -> bool:
    """True if the URL points at a supported video platform."""
    if not url:
        return False
    return any(p.search(url.strip()) for p in _VIDEO_URL_RES)


def is_instagram_url(url: str) -> bool:
    return bool(_INSTAGRAM_RE.search(url))


@dataclass(frozen=True)
class VideoMetadata:
    """Metadata reported by yt-dlp."""

    title: str | None = None
    description: str | None = None
    uploader: str | None = None
    duration: float | None = None
    thumbnail: str | None = None

    @property
    def is_image_post(self) -> bool:
        """Instagram image posts report no duration."""
        return not self.duration


def _friendly_download_error(error: Exception) -> str:
    message = str(error).lower()
    if "private" in message or "login" in message:
        return "The video is private and cannot be parsed."
    if "not available" in message or "removed" in message or "deleted" in message:
        return "The video is no longer available."
    return f"Unable to download video: {error}"


class VideoClient:
    """Thin wrapper around yt-dlp and the Whisper transcription API."""

    def __init__(self, transcription_api_key: str | None = None,
                 transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL,
                 temp_dir: str | Path | None = None) -> None:
        self.transcription_api_key = transcription_api_key
        self.transcription_model = transcription_model
        self.temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir()) / "recipe-normalizer"
        self._openai: OpenAI | None = None

    @property
    def openai_client(self) -> OpenAI:
        if self._openai is None:
            self._openai = OpenAI(api_key=self.transcription_api_key)
        return self._openai

    def _new_workdir(self) -> Path:
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix="video-", dir=self.temp_dir))

    def get_metadata(self, url: str) -> VideoMetadata:
        """Fetch video metadata without downloading.

        Raises:
            VideoProcessingError: If yt-dlp cannot read the URL
        """
        ydl_opts = {'quiet': True, 'no_warnings': True, 'skip_download': True}
        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info: dict[str, Any] = ydl.extract_info(url, download=False) or {}
        except yt_dlp.utils.DownloadError as e:
            raise VideoProcessingError(url, _friendly_download_error(e)) from e

        return VideoMetadata(
            title=info.get('title') or None,
            description=info.get('description') or None,
            uploader=info.get('uploader') or None,
            duration=info.get('duration'),
            thumbnail=info.get('thumbnail') or None,
        )

    def _download(self, url: str, ydl_opts: dict[str, Any]) -> Path:
        workdir = self._new_workdir()
        opts = {
            'quiet': True,
            'no_warnings': True,
            'outtmpl': str(workdir / 'download.%(ext)s'),
            **ydl_opts,
        }
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                ydl.download([url])
        except yt_dlp.utils.DownloadError as e:
            shutil.rmtree(workdir, ignore_errors=True)
            raise VideoProcessingError(url, _friendly_download_error(e)) from e

        files = sorted(workdir.glob('download.*'))
        if not files:
            shutil.rmtree(workdir, ignore_errors=True)
            raise VideoProcessingError(url, "Download produced no file")
        return files[0]

    def download_video(self, url: str) -> Path:
        """Download a video as mp4 into a temporary directory.

        Raises:
            VideoProcessingError: If the download fails
        """
        return self._download(url, {
            'format': 'bv*[ext=mp4]+ba[ext=m4a]/b[ext=mp4]/bv*+ba/b',
            'merge_output_format': 'mp4',
        })

    def download_audio(self, url: str) -> Path:
        """Download only the audio track as mp3 into a temporary directory.

        Raises:
            VideoProcessingError: If the download fails
        """
        return self._download(url, {
            'format': 'bestaudio/best',
            'postprocessors': [{
                'key': 'FFmpegExtractAudio',
                'preferredcodec': 'mp3',
                # Low bitrate is enough for transcription
                'preferredquality': '64',
            }],
        })

    def transcribe(self, audio_path: str | Path) -> str:
        """Transcribe an audio file with Whisper.

        Raises:
            VideoProcessingError: If transcription fails
        """
        audio_path = Path(audio_path)
        try:
            with audio_path.open("rb") as audio_file:
                transcript = self.openai_client.audio.transcriptions.create(
                    model=self.transcription_model,
                    file=audio_file,
                    response_format="text",
                )
        except (OSError, OpenAIError) as e:
            raise VideoProcessingError(str(audio_path), f"Failed to transcribe audio: {e}") from e

        text = transcript if isinstance(transcript, str) else getattr(transcript, "text", "")
        return (text or "").strip()

    @staticmethod
    def cleanup(path: Path | None) -> None:
        """Remove a temporary download and its work directory."""
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
            if path.parent.name.startswith("video-"):
                path.parent.rmdir()
            _LOGGER.debug("Cleaned up temp file %s", path)
        except OSError as e:
            _LOGGER.debug("Could not clean up %s: %s", path, e)


def _extract(parser: AIRecipeParser | None, text: str, metadata: VideoMetadata, url: str,
             recipe_id: str | None, allergies: list[str] | None, units: UnitDictionary,
             storage: RecipeStorage | None) -> RecipeDTO:
    result = extract_recipe_with_ai(
        parser,
        units=units,
        text=text,
        recipe_id=recipe_id,
        url=url,
        allergies=allergies,
        image_url=metadata.thumbnail,
        storage=storage,
    )
    if not result.success or result.data is None:
        raise VideoProcessingError(
            url,
            result.error or "No recipe found in video. The video may not contain a recipe "
                            "or the content was not clear enough to extract.")
    return result.data


def process_video_recipe(
    url: str,
    recipe_id: str | None,
    *,
    client: VideoClient,
    parser: AIRecipeParser | None,
    units: UnitDictionary,
    storage: RecipeStorage | None = None,
    max_seconds: int = DEFAULT_VIDEO_MAX_SECONDS,
    store_video: bool = False,
    allergies: list[str] | None = None,
) -> RecipeDTO:
    """Turn a video URL into a recipe.

    Instagram image posts (no duration) are extracted from their caption
    alone. Otherwise the video length is checked, the audio is transcribed
    and the transcript plus metadata go through the AI extractor. With
    ``store_video`` the full video is downloaded and kept with the recipe.
    Temporary audio is always removed.

    Raises:
        VideoProcessingError: If any stage fails
    """
    audio_path: Path | None = None
    video_path: Path | None = None

    try:
        _LOGGER.info("Starting video recipe processing for %s", url)
        metadata = client.get_metadata(url)
        _LOGGER.info("Video metadata retrieved for %s: '%s' (%s s)",
                     url, metadata.title, metadata.duration)

        if is_instagram_url(url) and metadata.is_image_post:
            _LOGGER.info("Detected Instagram image post, extracting from description")
            text = build_video_text("", metadata.title, metadata.description, metadata.uploader)
            return _extract(parser, text, metadata, url, recipe_id, allergies, units, storage)

        if metadata.duration and metadata.duration > max_seconds:
            raise VideoProcessingError(
                url, f"Video is too long ({round(metadata.duration)} s, maximum {max_seconds} s)")

        saved_video = None
        if store_video and storage is not None and recipe_id:
            video_path = client.download_video(url)
            saved_video = storage.save_video_file(video_path, recipe_id, metadata.duration)

        audio_path = client.download_audio(url)
        _LOGGER.info("Starting audio transcription for %s", url)
        transcript = client.transcribe(audio_path)
        _LOGGER.info("Audio transcribed for %s (%d characters)", url, len(transcript))

        text = build_video_text(transcript, metadata.title, metadata.description,
                                metadata.uploader, metadata.duration)
        recipe = _extract(parser, text, metadata, url, recipe_id, allergies, units, storage)

        if saved_video is not None:
            recipe = recipe.model_copy(update={"video_filename": Path(saved_video.video).name})
        return recipe

    except VideoProcessingError as e:
        _LOGGER.error("Failed to process video %s: %s", url, e.reason)
        if e.url != url:
            raise VideoProcessingError(url, e.reason) from e
        raise
    finally:
        client.cleanup(audio_path)
        client.cleanup(video_path)
