import base64
import gzip
import io
import json
import uuid
import zipfile

import pytest

from recipe_normalizer.importers.helpers import (
    RecipeParseInput,
    base64_to_bytes,
    build_recipe_dto,
    open_archive,
    parse_servings,
    split_non_empty_lines,
)
from recipe_normalizer.importers.mela import (
    import_mela_archive,
    parse_mela_archive,
    parse_mela_recipe_to_dto,
)
from recipe_normalizer.importers.paprika import (
    extract_paprika_recipes,
    import_paprika_archive,
    parse_paprika_recipe_to_dto,
)

from .fakes import JPEG_BYTES, PNG_BYTES

TEA = {
    "title": "Tea",
    "ingredients": "1 cup water\n2 tsp tea leaves",
    "instructions": "Boil water\nSteep leaves",
}


def make_zip(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


def paprika_entry(recipe: dict) -> bytes:
    return gzip.compress(json.dumps(recipe).encode("utf-8"))


def test_split_non_empty_lines():
    assert split_non_empty_lines("a\r\n\n  b  \n") == ["a", "b"]
    assert split_non_empty_lines(None) == []


@pytest.mark.parametrize("value, expected", [
    (4, 4),
    (2.6, 3),
    (0.2, 1),
    ("4 servings", 4),
    ("some", None),
    (None, None),
])
def test_parse_servings(value, expected):
    assert parse_servings(value) == expected


def test_base64_to_bytes_strips_wrapping():
    encoded = base64.b64encode(JPEG_BYTES).decode()

    assert base64_to_bytes(f'"data:image/jpeg;base64,{encoded}"') == JPEG_BYTES
    assert base64_to_bytes("garbage" + encoded) == JPEG_BYTES
    assert base64_to_bytes(encoded.rstrip("=")) == JPEG_BYTES


def test_base64_to_bytes_rejects_invalid_data():
    with pytest.raises(ValueError):
        base64_to_bytes("a")


def test_build_recipe_dto_requires_a_name(units):
    with pytest.raises(ValueError, match="Missing recipe name"):
        build_recipe_dto(RecipeParseInput(name="  "), "r1", units)


def test_build_recipe_dto_maps_categories_to_tags(units):
    recipe = build_recipe_dto(
        RecipeParseInput(name="Toast", instructions_text="Toast bread", categories=["Breakfast ", ""]),
        "r1", units)

    assert [t.name for t in recipe.tags] == ["Breakfast"]
    assert recipe.steps[0].order == 1


def test_open_archive_rejects_non_zip():
    with pytest.raises(ValueError):
        open_archive(b"definitely not a zip")


def test_mela_tea_example(units):
    recipe = parse_mela_recipe_to_dto(TEA, None, units)

    assert recipe.name == "Tea"
    assert uuid.UUID(recipe.id)
    assert [(i.amount, i.unit) for i in recipe.recipe_ingredients] == [(1.0, "cup"), (2.0, "tsp")]
    assert [i.order for i in recipe.recipe_ingredients] == [0, 1]
    assert [(s.step, s.order) for s in recipe.steps] == [("Boil water", 1), ("Steep leaves", 2)]
    assert recipe.system_used == "us"


def test_mela_recipes_get_fresh_ids(units):
    first = parse_mela_recipe_to_dto(TEA, None, units)
    second = parse_mela_recipe_to_dto(TEA, None, units)

    assert first.id != second.id


def test_mela_fields_and_image(units, storage):
    data = dict(
        TEA,
        text="A calming drink",
        link="https://example.com/tea",
        images=[base64.b64encode(PNG_BYTES).decode()],
        categories=["Drinks"],
        prepTime="5 min",
        totalTime="1 hr 5 min",
    )
    data["yield"] = "2 cups"

    recipe = parse_mela_recipe_to_dto(data, storage, units)

    assert recipe.description == "A calming drink"
    assert recipe.url == "https://example.com/tea"
    assert recipe.servings == 2
    assert recipe.prep_minutes == 5
    assert recipe.total_minutes == 65
    assert recipe.image.startswith(f"/recipes/{recipe.id}/")
    assert recipe.image.endswith(".png")
    assert [(i.image, i.order) for i in recipe.images] == [(recipe.image, 0)]
    assert [t.name for t in recipe.tags] == ["Drinks"]


def test_mela_archive_skips_corrupted_entries(units):
    archive = make_zip({
        "tea.melarecipe": json.dumps(TEA).encode(),
        "broken.melarecipe": b"{not json",
        "untitled.melarecipe": json.dumps({"ingredients": "1 egg"}).encode(),
        "readme.txt": b"ignored",
    })

    assert [d.get("title") for d in parse_mela_archive(archive)] == ["Tea", None]

    result = import_mela_archive(archive, None, units)

    assert result.imported == 1
    assert result.recipes[0].name == "Tea"
    assert sorted(e.file for e in result.errors) == ["broken.melarecipe", "untitled.melarecipe"]


def test_paprika_corrupted_entry_is_skipped(units, caplog):
    archive = make_zip({
        "good.paprikarecipe": paprika_entry({
            "name": "Omelette",
            "ingredients": "3 eggs\n1 tbsp butter",
            "directions": "Beat eggs.\nCook in butter.",
            "servings": "2 servings",
            "prep_time": "5 min",
            "categories": ["Breakfast"],
            "source_url": "https://example.com/omelette",
        }),
        "bad.paprikarecipe": b"this is not gzip",
    })

    entries = extract_paprika_recipes(archive)

    assert len(entries) == 1
    assert entries[0].recipe.name == "Omelette"
    assert "bad.paprikarecipe" in caplog.text

    recipe = parse_paprika_recipe_to_dto(entries[0], None, units)
    assert recipe.servings == 2
    assert recipe.prep_minutes == 5
    assert recipe.url == "https://example.com/omelette"
    assert [s.order for s in recipe.steps] == [1, 2]
    assert recipe.recipe_ingredients[1].unit == "tbsp"


def test_paprika_photo_is_saved(units, storage):
    archive = make_zip({
        "pic.paprikarecipe": paprika_entry({
            "name": "Salad",
            "ingredients": "1 head lettuce",
            "directions": "Toss.",
            "photos": [{"filename": "a.jpg", "data": base64.b64encode(JPEG_BYTES).decode()}],
        }),
    })

    result = import_paprika_archive(archive, storage, units)

    assert result.errors == []
    recipe = result.recipes[0]
    assert recipe.image.startswith(f"/recipes/{recipe.id}/")
    assert recipe.image.endswith(".jpg")


def test_paprika_entry_without_name_is_reported(units):
    archive = make_zip({
        "noname.paprikarecipe": paprika_entry({"ingredients": "1 egg"}),
        "blank.paprikarecipe": paprika_entry({"name": "  ", "ingredients": "1 egg"}),
    })

    result = import_paprika_archive(archive, None, units)

    assert result.imported == 0
    assert sorted(e.file for e in result.errors) == ["blank.paprikarecipe", "noname.paprikarecipe"]


def test_mela_null_lists_are_tolerated(units):
    archive = make_zip({
        "tea.melarecipe": json.dumps(dict(TEA, images=None, categories=None)).encode(),
    })

    result = import_mela_archive(archive, None, units)

    assert result.errors == []
    assert result.recipes[0].name == "Tea"
    assert result.recipes[0].tags == []
    assert result.recipes[0].image is None


def test_paprika_null_lists_are_tolerated(units):
    archive = make_zip({
        "soup.paprikarecipe": paprika_entry({
            "name": "Soup",
            "ingredients": "1 l stock",
            "directions": "Heat.",
            "categories": None,
            "photos": None,
        }),
    })

    result = import_paprika_archive(archive, None, units)

    assert result.errors == []
    assert result.recipes[0].name == "Soup"
