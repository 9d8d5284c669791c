"""Services package."""
from .recipe_service import RecipeImportService
from .store_preferences import find_best_ingredient_store_preference

__all__ = ["RecipeImportService", "find_best_ingredient_store_preference"]
