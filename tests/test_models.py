import pytest
from pydantic import ValidationError

from recipe_normalizer.models.recipe import RecipeDTO, Step
from recipe_normalizer.normalize import normalize_recipe_from_json

from .fakes import recipe_node


def test_dump_and_validate_keeps_dense_orders(units):
    node = recipe_node(recipeInstructions=[
        {
            "@type": "HowToSection",
            "name": "Batter",
            "itemListElement": [
                {"@type": "HowToStep", "text": "Whisk everything together."},
                {"@type": "HowToStep", "text": "Rest for ten minutes."},
            ],
        },
        {"@type": "HowToStep", "text": "Fry in a hot pan."},
    ])
    recipe = normalize_recipe_from_json(node, "r1", units=units)

    restored = RecipeDTO.model_validate(recipe.model_dump())

    assert restored == recipe
    assert [i.order for i in restored.recipe_ingredients] == [0, 1, 2]
    assert [s.order for s in restored.steps] == [1, 2, 3, 4]
    assert restored.steps[0].step == "# Batter"


def test_step_order_gap_is_rejected():
    with pytest.raises(ValidationError, match="step order must be dense"):
        RecipeDTO(
            id="r1",
            name="Toast",
            steps=[Step(step="Slice.", order=1), Step(step="Toast.", order=3)],
        )


def test_ingredient_order_must_start_at_zero():
    data = {
        "id": "r1",
        "name": "Toast",
        "recipe_ingredients": [{"ingredient_name": "bread", "order": 1}],
    }

    with pytest.raises(ValidationError, match="ingredient order must be dense"):
        RecipeDTO.model_validate(data)
