import pytest

from recipe_normalizer.models.recipe import Tag
from recipe_normalizer.parsers.images import parse_images
from recipe_normalizer.parsers.ingredients import normalize_ingredient_source, parse_ingredients
from recipe_normalizer.parsers.metadata import DEFAULT_RECIPE_NAME, get_name, get_servings, parse_metadata
from recipe_normalizer.parsers.nutrition import extract_nutrition, parse_nutrition_value
from recipe_normalizer.parsers.tags import parse_tags, sort_tags_with_allergy_priority

from .fakes import PNG_BYTES, FakeResponse


def test_ingredient_source_accepts_list_or_string():
    assert normalize_ingredient_source(["1 cup &quot;00&quot; flour", None, " ", "salt"]) == [
        '1 cup "00" flour', "salt"]
    assert normalize_ingredient_source("2 eggs") == ["2 eggs"]
    assert normalize_ingredient_source({"not": "a list"}) == []


def test_parse_ingredients_orders_from_zero_and_tags_system(units):
    ingredients, system = parse_ingredients(
        {"recipeIngredient": ["200 g flour", "300 ml milk", "2 eggs"]}, units)

    assert system == "metric"
    assert [i.order for i in ingredients] == [0, 1, 2]
    assert ingredients[0].ingredient_name == "flour"
    assert ingredients[0].amount == 200.0
    assert ingredients[0].unit == "g"
    assert ingredients[2].unit is None
    assert all(i.system_used == "metric" for i in ingredients)
    assert all(i.ingredient_id is None for i in ingredients)


def test_parse_ingredients_falls_back_to_legacy_key(units):
    ingredients, _ = parse_ingredients({"ingredients": ["1 cup rice"]}, units)

    assert ingredients[0].unit == "cup"


@pytest.mark.parametrize("node, expected", [
    ({"name": "Soup &amp; Bread"}, "Soup & Bread"),
    ({"name": ["First", "Second"]}, "First"),
    ({"name": "['Wrapped']"}, "Wrapped"),
    ({"headline": "From headline"}, "From headline"),
    ({"name": "   "}, None),
    ({}, None),
])
def test_get_name(node, expected):
    assert get_name(node) == expected


@pytest.mark.parametrize("value, expected", [
    (4, 4),
    (4.0, 4),
    ("6 servings", 6),
    ("Makes 12", 12),
    (["Serves many", "8"], 8),
    ("a few", None),
    (True, None),
    (None, None),
])
def test_get_servings(value, expected):
    assert get_servings(value) == expected


def test_parse_metadata_defaults_name_and_keeps_missing_times():
    metadata = parse_metadata({"description": "  ", "prepTime": "PT10M"})

    assert metadata.name == DEFAULT_RECIPE_NAME
    assert metadata.description is None
    assert metadata.prep_minutes == 10
    assert metadata.cook_minutes is None
    assert metadata.total_minutes is None


@pytest.mark.parametrize("value, expected", [
    (300, 300.0),
    ("300 kcal", 300.0),
    ("12,5 g", 12.5),
    ("25g", 25.0),
    ("1,5. g", 1.5),
    ("2.5.1", 2.5),
    ("n/a", None),
    (float("nan"), None),
    (True, None),
    (None, None),
])
def test_parse_nutrition_value(value, expected):
    assert parse_nutrition_value(value) == expected


def test_extract_nutrition_uses_alternate_keys():
    nutrition = extract_nutrition({"nutrition": {
        "calorieContent": "450 calories",
        "fat": "12,5 g",
        "carbohydrateContent": "60 g",
        "proteinContent": 20,
    }})

    assert nutrition.calories == 450.0
    assert nutrition.fat == "12.5"
    assert nutrition.carbs == "60"
    assert nutrition.protein == "20"


def test_extract_nutrition_without_block():
    nutrition = extract_nutrition({"name": "x"})

    assert nutrition.calories is None
    assert nutrition.fat is None


def test_parse_tags():
    assert [t.name for t in parse_tags([" Soup", 3, " ", "Quick"])] == ["soup", "quick"]
    assert parse_tags(None) == []


def test_keyword_string_yields_no_tags():
    assert parse_tags("dinner, quick") == []
    assert parse_tags({"name": "dinner"}) == []


def test_allergen_tags_are_sorted_first():
    tags = [Tag(name=n) for n in ["dinner", "gluten", "quick", "dairy"]]

    result = sort_tags_with_allergy_priority(tags, ["Dairy", "gluten"])

    assert [t.name for t in result] == ["gluten", "dairy", "dinner", "quick"]


def test_local_images_are_kept_without_storage():
    result = parse_images("/recipes/abc/one.jpg", "abc", None)

    assert result.primary_image == "/recipes/abc/one.jpg"
    assert [(i.image, i.order) for i in result.images] == [("/recipes/abc/one.jpg", 0)]


def test_remote_images_are_skipped_without_storage():
    result = parse_images(["https://example.com/a.jpg"], "abc", None)

    assert result.images == []
    assert result.primary_image is None


def test_remote_images_are_downloaded_up_to_the_cap(storage, session):
    session.responses["https://example.com/a.png"] = FakeResponse(
        PNG_BYTES, headers={"content-type": "image/png"})
    session.responses["https://example.com/b.png"] = FakeResponse(
        PNG_BYTES + b"b", headers={"content-type": "image/png"})

    field = [
        "/recipes/r1/local.jpg",
        "https://example.com/missing.jpg",
        {"@type": "ImageObject", "url": "https://example.com/a.png"},
        "https://example.com/b.png",
    ]
    result = parse_images(field, "r1", storage, max_images=2)

    assert len(result.images) == 2
    assert result.images[0].image == "/recipes/r1/local.jpg"
    assert result.images[1].image.startswith("/recipes/r1/")
    assert result.images[1].image.endswith(".png")
    assert [i.order for i in result.images] == [0, 1]
    assert "https://example.com/b.png" not in session.requested
