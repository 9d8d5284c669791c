"""Models package."""
from .recipe import (
    ArchiveImportError,
    ArchiveImportResult,
    Ingredient,
    Nutrition,
    ParseRecipeResult,
    RecipeDTO,
    RecipeImage,
    RecipeVideo,
    Step,
    Tag,
)

__all__ = [
    "ArchiveImportError",
    "ArchiveImportResult",
    "Ingredient",
    "Nutrition",
    "ParseRecipeResult",
    "RecipeDTO",
    "RecipeImage",
    "RecipeVideo",
    "Step",
    "Tag",
]
