"""
Recipe data models.

This module defines the Pydantic models for the canonical recipe shape that
every extractor (JSON-LD, microdata, archives, AI, video) produces.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

MeasurementSystem = Literal["metric", "us", "mixed"]


class Ingredient(BaseModel):
    """A parsed ingredient line.

    Attributes:
        ingredient_id: Link to a catalogue ingredient; always None on import
        ingredient_name: Description text without quantity and unit
        amount: Numeric quantity, None for "to taste" style entries
        unit: Canonical unit ID, e.g. 'cup', 'g', 'tsp'
        system_used: Measurement system inferred for the whole recipe
        order: 0-based position in the ingredient list
    """

    ingredient_id: str | None = None
    ingredient_name: str
    amount: float | None = None
    unit: str | None = None
    system_used: MeasurementSystem | None = None
    order: int = Field(ge=0)


class Step(BaseModel):
    """A recipe step.

    ``step`` is either a plain instruction, a '# Heading' section marker, or
    a '**Name:** Text' compound.
    """

    step: str
    system_used: MeasurementSystem | None = None
    order: int = Field(ge=1)


class RecipeImage(BaseModel):
    """An image stored under /recipes/{recipe_id}/."""

    image: str
    order: int = Field(ge=0)


class RecipeVideo(BaseModel):
    """A video stored under /recipes/{recipe_id}/."""

    video: str
    thumbnail: str | None = None
    duration: float | None = None
    order: int = Field(ge=0)


class Tag(BaseModel):
    """A recipe tag."""

    name: str


class Nutrition(BaseModel):
    """Nutrition values; fat, carbs and protein are kept as numeric strings."""

    calories: float | None = None
    fat: str | None = None
    carbs: str | None = None
    protein: str | None = None


def _check_dense(orders: list[int], start: int, field: str) -> None:
    if orders != list(range(start, start + len(orders))):
        raise ValueError(f"{field} order must be dense starting at {start}, got {orders}")


class RecipeDTO(BaseModel):
    """The canonical recipe produced by every import path."""

    id: str
    name: str = Field(min_length=1)
    description: str | None = None
    url: str | None = None
    image: str | None = None
    servings: int | None = None
    prep_minutes: int | None = None
    cook_minutes: int | None = None
    total_minutes: int | None = None
    calories: float | None = None
    fat: str | None = None
    carbs: str | None = None
    protein: str | None = None
    system_used: MeasurementSystem | None = None
    recipe_ingredients: list[Ingredient] = Field(default_factory=list)
    steps: list[Step] = Field(default_factory=list)
    images: list[RecipeImage] = Field(default_factory=list)
    videos: list[RecipeVideo] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    video_filename: str | None = None

    @model_validator(mode="after")
    def _orders_are_dense(self) -> RecipeDTO:
        _check_dense([i.order for i in self.recipe_ingredients], 0, "ingredient")
        _check_dense([s.order for s in self.steps], 1, "step")
        _check_dense([i.order for i in self.images], 0, "image")
        return self

    def has_content(self) -> bool:
        """True when the recipe has at least one ingredient and one step."""
        return bool(self.recipe_ingredients) and bool(self.steps)


class ParseRecipeResult(BaseModel):
    """A recipe plus the provenance of the path that produced it."""

    recipe: RecipeDTO
    used_ai: bool = False


class ArchiveImportError(BaseModel):
    """An archive entry that could not be imported."""

    file: str
    error: str


class ArchiveImportResult(BaseModel):
    """Outcome of importing a recipe archive."""

    recipes: list[RecipeDTO] = Field(default_factory=list)
    errors: list[ArchiveImportError] = Field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.recipes)
