import pytest

from recipe_normalizer.parsers.quantity import (
    ParsedLine,
    parse_ingredient_line,
    parse_ingredient_lines,
    parse_quantity,
)
from recipe_normalizer.parsers.system import infer_system
from recipe_normalizer.units import UnitDictionary


@pytest.mark.parametrize("text, expected", [
    ("2", 2.0),
    ("1/2", 0.5),
    ("1 1/2", 1.5),
    ("2.5", 2.5),
    ("½", 0.5),
    ("2½", 2.5),
    ("1/0", None),
    ("", None),
])
def test_parse_quantity(text, expected):
    assert parse_quantity(text) == expected


@pytest.mark.parametrize("line, quantity, unit, description", [
    ("1 1/2 cups flour, sifted", 1.5, "cup", "flour, sifted"),
    ("250g butter", 250.0, "g", "butter"),
    ("½ cup sugar", 0.5, "cup", "sugar"),
    ("2½ cups milk", 2.5, "cup", "milk"),
    ("2-3 tbsp olive oil", 2.0, "tbsp", "olive oil"),
    ("1,5 kg Mehl", 1.5, "kg", "Mehl"),
    ("1 tsp. salt", 1.0, "tsp", "salt"),
    ("1 cup of milk", 1.0, "cup", "milk"),
    ("2 large eggs", 2.0, None, "large eggs"),
    ("3 cloves garlic", 3.0, "clove", "garlic"),
    ("2 EL Zucker", 2.0, "tbsp", "Zucker"),
])
def test_parse_ingredient_line(units, line, quantity, unit, description):
    assert parse_ingredient_line(line, units) == ParsedLine(quantity, unit, description)


def test_unit_in_the_middle_is_moved_to_the_front(units):
    parsed = parse_ingredient_line("Add flour, 2 cups", units)

    assert parsed.quantity == 2.0
    assert parsed.unit == "cup"
    assert parsed.description == "Add flour"


def test_line_without_quantity_is_kept_whole(units):
    parsed = parse_ingredient_line("  salt to taste ", units)

    assert parsed == ParsedLine(None, None, "salt to taste")


def test_leading_unit_without_quantity_is_not_consumed(units):
    parsed = parse_ingredient_line("pinch of salt", units)

    assert parsed.quantity is None
    assert parsed.unit is None
    assert parsed.description == "pinch of salt"


def test_multiplied_can_sizes_keep_the_leading_count(units):
    parsed = parse_ingredient_line("2 x 400g cans tomatoes", units)

    assert parsed.quantity == 2.0
    assert parsed.unit is None
    assert parsed.description == "x 400g cans tomatoes"


def test_configured_units_are_recognised():
    units = UnitDictionary.from_config({"scoop": {"plural": "scoops", "alternates": ["messlöffel"]}})

    parsed = parse_ingredient_line("2 scoops protein powder", units)

    assert parsed.unit == "scoop"
    assert parsed.quantity == 2.0
    assert units.canonical("Messlöffel") == "scoop"


def test_parse_ingredient_lines_skips_blank_lines(units):
    parsed = parse_ingredient_lines(["1 cup water", "", None, "   ", "salt"], units)

    assert [p.description for p in parsed] == ["water", "salt"]


@pytest.mark.parametrize("lines, expected", [
    (["200 g flour", "300 ml milk", "1 cup sugar"], "mixed"),
    (["200 g flour", "300 ml milk", "1 l water", "1 cup sugar"], "metric"),
    (["1 cup flour", "2 tbsp sugar", "1 tsp salt"], "us"),
    (["1 pinch salt", "2 cloves garlic"], None),
    ([], None),
])
def test_infer_system(units, lines, expected):
    assert infer_system(parse_ingredient_lines(lines, units), units) == expected
