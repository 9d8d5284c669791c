"""
Exception classes for recipe import.

Pure parsers never raise these; they are raised by extractors and the
import service when a path fails terminally.
"""
from __future__ import annotations


class RecipeImportError(Exception):
    """Base exception for recipe import."""


class ConfigError(RecipeImportError):
    """Raised when the import configuration is invalid."""


class RecipeFetchError(RecipeImportError):
    """Raised when a recipe page cannot be fetched."""

    def __init__(self, url: str, reason: str | None = None) -> None:
        self.url = url
        self.reason = reason
        message = "Cannot fetch recipe page."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NotARecipePageError(RecipeImportError):
    """Raised when a fetched page does not look like it contains a recipe."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__("Page does not appear to contain a recipe.")


class RecipeParseError(RecipeImportError):
    """Raised when every extraction path failed."""


class FeatureDisabledError(RecipeImportError):
    """Raised when a feature was requested explicitly but is disabled."""

    def __init__(self, feature: str, message: str) -> None:
        self.feature = feature
        super().__init__(message)


class VideoProcessingError(RecipeImportError):
    """Raised when the video pipeline fails for a URL."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to process video recipe: {reason}")


class AIExtractionError(RecipeImportError):
    """Raised when an AI extraction returns an error code."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        super().__init__(message)
