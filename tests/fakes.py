"""Test doubles for the network, AI and video collaborators."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import requests

from recipe_normalizer.exceptions import VideoProcessingError
from recipe_normalizer.video.processor import VideoMetadata

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16


class FakeResponse:
    def __init__(self, content: bytes = b"", status_code: int = 200,
                 headers: dict[str, str] | None = None) -> None:
        self.content = content
        self.status_code = status_code
        self.headers = headers or {}
        self.closed = False

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)

    def iter_content(self, chunk_size: int = 8192):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]


class FakeSession:
    """Serves canned responses by URL; unknown URLs get a 404."""

    def __init__(self, responses: dict[str, FakeResponse] | None = None) -> None:
        self.responses = responses or {}
        self.requested: list[str] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requested.append(url)
        return self.responses.get(url, FakeResponse(status_code=404))


def recipe_node(**overrides: Any) -> dict[str, Any]:
    node: dict[str, Any] = {
        "@type": "Recipe",
        "name": "Pancakes",
        "recipeIngredient": ["200 g flour", "2 eggs", "300 ml milk"],
        "recipeInstructions": [
            {"@type": "HowToStep", "text": "Whisk everything together."},
            {"@type": "HowToStep", "text": "Fry in a hot pan."},
        ],
    }
    node.update(overrides)
    return node


def jsonld_page(*nodes: dict[str, Any], body: str = "") -> str:
    scripts = "".join(
        f'<script type="application/ld+json">{json.dumps(n)}</script>' for n in nodes)
    return f"<html><head>{scripts}</head><body>{body}</body></html>"


class FakeAIParser:
    """Returns canned recipe nodes instead of calling a model."""

    def __init__(self, results: list[Any] | None = None, error: Exception | None = None) -> None:
        self.results = list(results) if results is not None else [recipe_node()]
        self.error = error
        self.calls: list[str] = []

    def _next(self) -> Any:
        if self.error is not None:
            raise self.error
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0] if self.results else None

    def extract_json(self, text: str, allergies: list[str] | None = None,
                     strict_allergies: bool = False, url: str | None = None) -> Any:
        self.calls.append(text)
        return self._next()

    def extract_json_from_images(self, images: list[bytes],
                                 allergies: list[str] | None = None) -> Any:
        self.calls.append(f"<{len(images)} images>")
        return self._next()


class FakeVideoClient:
    """Writes small files instead of downloading and returns a canned transcript."""

    def __init__(self, work_dir: Path, metadata: VideoMetadata | None = None,
                 transcript: str = "First boil the water, then steep the tea leaves.",
                 fail_download: bool = False) -> None:
        self.work_dir = Path(work_dir)
        self.work_dir.mkdir(parents=True, exist_ok=True)
        self.metadata = metadata or VideoMetadata(title="Tea", duration=60.0)
        self.transcript = transcript
        self.fail_download = fail_download
        self.calls: list[str] = []
        self.cleaned: list[Path] = []

    def get_metadata(self, url: str) -> VideoMetadata:
        self.calls.append("metadata")
        return self.metadata

    def _write(self, url: str, name: str, data: bytes) -> Path:
        if self.fail_download:
            raise VideoProcessingError(url, "The video is no longer available.")
        path = self.work_dir / f"{len(self.calls)}-{name}"
        path.write_bytes(data)
        return path

    def download_video(self, url: str) -> Path:
        self.calls.append("video")
        return self._write(url, "video.mp4", b"fake video " + url.encode())

    def download_audio(self, url: str) -> Path:
        self.calls.append("audio")
        return self._write(url, "audio.mp3", b"fake audio")

    def transcribe(self, audio_path: str | Path) -> str:
        self.calls.append("transcribe")
        return self.transcript

    def cleanup(self, path: Path | None) -> None:
        if path is not None:
            self.cleaned.append(path)
            path.unlink(missing_ok=True)
