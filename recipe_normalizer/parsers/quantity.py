"""
Ingredient line parser.

Splits a free-text ingredient line such as "1 1/2 cups flour, sifted" into
quantity, canonical unit and description. Units are recognised from a
UnitDictionary passed in by the caller. When the quantity is not at the
start of the line ("Add flour, 2 cups") a second pass looks for a
number+unit token anywhere in the line and moves it to the front.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from collections.abc import Iterable

from ..units import UnitDictionary

_LOGGER = logging.getLogger(__name__)

# Map unicode fractions to their decimal values
FRACTION_VALUES = {
    '½': 0.5,
    '⅓': 1 / 3,
    '⅔': 2 / 3,
    '¼': 0.25,
    '¾': 0.75,
    '⅕': 0.2,
    '⅖': 0.4,
    '⅗': 0.6,
    '⅘': 0.8,
    '⅙': 1 / 6,
    '⅚': 5 / 6,
    '⅛': 0.125,
    '⅜': 0.375,
    '⅝': 0.625,
    '⅞': 0.875,
}

_FRACTION_CHARS = "".join(FRACTION_VALUES)

# "1 1/2", "1/2", "2½", "½", "2.5", "2"
_NUMBER = (
    rf"(?:\d+(?:\.\d+)?\s+\d+\s*/\s*\d+"
    rf"|\d+\s*/\s*\d+"
    rf"|\d+(?:\.\d+)?\s*[{_FRACTION_CHARS}]"
    rf"|[{_FRACTION_CHARS}]"
    rf"|\d+(?:\.\d+)?)"
)

_LEADING_QUANTITY = re.compile(
    rf"^\s*(?P<qty>{_NUMBER})(?:\s*(?:-|–|to)\s*(?P<upper>{_NUMBER}))?\s*(?P<rest>.*)$",
    re.IGNORECASE | re.DOTALL,
)

_DECIMAL_COMMA = re.compile(r"(\d),(\d)")


@dataclass(frozen=True)
class ParsedLine:
    """Result of parsing one ingredient line.

    Attributes:
        quantity: Numeric amount, or None for "to taste" style lines
        unit: Canonical unit ID from the dictionary, or None
        description: The rest of the line
    """

    quantity: float | None
    unit: str | None
    description: str


def _parse_fraction(fraction_str: str) -> float:
    """Parse a fraction string like '1/2' or '3/4'.

    Raises:
        ValueError: If the fraction string is invalid
        ZeroDivisionError: If denominator is zero
    """
    if '/' not in fraction_str:
        return float(fraction_str)

    parts = fraction_str.strip().split('/')
    if len(parts) != 2:
        raise ValueError(f"Invalid fraction format: {fraction_str}")

    numerator = float(parts[0].strip())
    denominator = float(parts[1].strip())

    if denominator == 0:
        raise ZeroDivisionError(
            f"Fraction has zero denominator: {fraction_str}")

    return numerator / denominator


def parse_quantity(quantity_str: str) -> float | None:
    """Parse a quantity string that may contain fractions.

    Args:
        quantity_str: String like '2', '1/2', '2 1/2', '2.5', '2½', '½'

    Returns:
        Parsed float value (rounded to 3 places) or None if parsing fails
    """
    text = quantity_str.strip()
    if not text:
        return None
    try:
        total = 0.0
        if text[-1] in FRACTION_VALUES:
            total += FRACTION_VALUES[text[-1]]
            text = text[:-1].strip()
        if text:
            text = re.sub(r"\s*/\s*", "/", text)
            total += sum(_parse_fraction(p) for p in text.split())
        return round(total, 3)
    except (ValueError, ZeroDivisionError) as e:
        _LOGGER.debug("Failed to parse quantity '%s': %s", quantity_str, e)
        return None


def _match_unit(rest: str, units: UnitDictionary) -> tuple[str | None, str]:
    """Match a unit spelling at the start of ``rest``.

    Returns:
        Tuple of (canonical unit ID or None, remaining text)
    """
    alternation = units.alternation()
    if not alternation:
        return None, rest

    match = re.match(rf"(?P<unit>{alternation})(?!\w)\.?\s*(?P<rest>.*)$",
                     rest, re.IGNORECASE | re.DOTALL)
    if not match:
        return None, rest

    return units.canonical(match.group("unit")), match.group("rest")


def _clean_description(text: str) -> str:
    text = re.sub(r"^of\s+", "", text.strip(), flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", text).strip()


def _parse_baseline(line: str, units: UnitDictionary) -> ParsedLine:
    """Position-sensitive parse: quantity first, then an optional unit."""
    match = _LEADING_QUANTITY.match(line)
    if not match:
        return ParsedLine(quantity=None, unit=None, description=_clean_description(line))

    quantity = parse_quantity(match.group("qty"))
    if quantity is None:
        return ParsedLine(quantity=None, unit=None, description=_clean_description(line))

    unit, rest = _match_unit(match.group("rest"), units)
    return ParsedLine(quantity=quantity, unit=unit, description=_clean_description(rest))


def _reorder_units_in_middle(line: str, units: UnitDictionary) -> str | None:
    """Move a number+unit token found anywhere in the line to the front.

    "Add flour, 2 cups" -> "2 cups Add flour"
    """
    alternation = units.alternation()
    if not alternation:
        return None

    pattern = re.compile(rf"\b(\d+(?:[.,]\d+)?)\s*({alternation})\b", re.IGNORECASE)
    match = pattern.search(line)
    if not match:
        return None

    qty, unit = match.group(1), match.group(2)
    rest = (line[:match.start()] + " " + line[match.end():]).strip()
    rest = re.sub(r"\s+", " ", rest).strip(" ,;")
    return f"{qty} {unit} {rest}".strip()


def parse_ingredient_line(text: str, units: UnitDictionary) -> ParsedLine:
    """Parse a single ingredient line into quantity, unit and description.

    Args:
        text: Raw ingredient line
        units: Unit dictionary used to recognise units

    Returns:
        ParsedLine; quantity is None when no amount could be found
    """
    line = _DECIMAL_COMMA.sub(r"\1.\2", str(text)).strip()
    parsed = _parse_baseline(line, units)

    if not parsed.quantity:
        reordered = _reorder_units_in_middle(line, units)
        if reordered:
            smart = _parse_baseline(reordered, units)
            if smart.quantity:
                _LOGGER.debug("Recovered quantity from '%s' via '%s'", line, reordered)
                parsed = smart

    return parsed


def parse_ingredient_lines(lines: Iterable[str | None], units: UnitDictionary) -> list[ParsedLine]:
    """Parse several ingredient lines, skipping empty ones."""
    return [parse_ingredient_line(line, units) for line in lines if line and str(line).strip()]
