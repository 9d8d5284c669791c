"""
Unit dictionary for ingredient parsing.

Each entry has a canonical ID plus the spellings it is recognised under
(short form, plural, alternates) and the measurement system it belongs to.
The dictionary is read-only once built and is passed explicitly to every
parser that needs it.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field

_LOGGER = logging.getLogger(__name__)

UnitSystem = Literal["metric", "us"]


class UnitDefinition(BaseModel):
    """A single unit of measure.

    Attributes:
        id: Canonical unit ID returned by the parser (e.g. 'tsp')
        short: Optional short form (e.g. 't')
        plural: Optional plural spelling (e.g. 'cups')
        alternates: Other accepted spellings (e.g. 'teaspoon', 'teaspoons')
        system: 'metric', 'us' or None for system-neutral units like 'pinch'
    """

    model_config = {"frozen": True}

    id: str
    short: str | None = None
    plural: str | None = None
    alternates: tuple[str, ...] = Field(default_factory=tuple)
    system: UnitSystem | None = None

    def spellings(self) -> set[str]:
        """Return every spelling of this unit, including the canonical ID."""
        names = {self.id}
        if self.short:
            names.add(self.short)
        if self.plural:
            names.add(self.plural)
        names.update(a for a in self.alternates if a)
        return names


def _unit(id: str, plural: str | None = None, *alternates: str,
          short: str | None = None, system: UnitSystem | None = None) -> UnitDefinition:
    return UnitDefinition(id=id, short=short, plural=plural,
                          alternates=tuple(alternates), system=system)


# Volume and weight tables follow the usual US / metric kitchen spellings.
DEFAULT_UNITS: tuple[UnitDefinition, ...] = (
    # US customary
    _unit("cup", "cups", "c.", system="us"),
    _unit("tbsp", "tbsps", "tablespoon", "tablespoons", "tbs", "tbl", "tbl.", "tbsp.", "tb",
          "el", "esslöffel", "spsk", "msk", system="us"),
    _unit("tsp", "tsps", "teaspoon", "teaspoons", "tsp.", "tl", "teelöffel", "tsk",
          system="us"),
    _unit("fl oz", None, "fluid ounce", "fluid ounces", "fl. oz", "fl. oz.", "floz",
          system="us"),
    _unit("oz", None, "ounce", "ounces", "oz.", system="us"),
    _unit("lb", "lbs", "pound", "pounds", "lb.", "lbs.", system="us"),
    _unit("pint", "pints", "pt", "pt.", system="us"),
    _unit("quart", "quarts", "qt", "qt.", system="us"),
    _unit("gallon", "gallons", "gal", "gal.", system="us"),
    _unit("stick", "sticks", system="us"),
    # Metric
    _unit("g", None, "gram", "grams", "gr", "gramm", system="metric"),
    _unit("kg", "kgs", "kilogram", "kilograms", "kilo", "kilos", system="metric"),
    _unit("mg", None, "milligram", "milligrams", system="metric"),
    _unit("ml", None, "milliliter", "milliliters", "millilitre", "millilitres",
          system="metric"),
    _unit("cl", None, "centiliter", "centiliters", "centilitre", "centilitres",
          system="metric"),
    _unit("dl", None, "deciliter", "deciliters", "decilitre", "decilitres",
          system="metric"),
    _unit("l", None, "liter", "liters", "litre", "litres", system="metric"),
    # System neutral
    _unit("pinch", "pinches", "knsp", "messerspitze", "prise"),
    _unit("dash", "dashes"),
    _unit("clove", "cloves"),
    _unit("piece", "pieces", "pc", "pcs"),
    _unit("slice", "slices"),
    _unit("can", "cans"),
    _unit("package", "packages", "pkg", "pack", "packs", "packet", "packets"),
    _unit("bunch", "bunches"),
    _unit("sprig", "sprigs"),
    _unit("handful", "handfuls"),
)


class UnitDictionary(Mapping[str, UnitDefinition]):
    """Read-only lookup table of units, keyed by canonical ID."""

    def __init__(self, units: Mapping[str, UnitDefinition] | None = None) -> None:
        self._units: dict[str, UnitDefinition] = dict(units or {})
        self._by_spelling: dict[str, str] = {}
        for unit_id, unit in self._units.items():
            for spelling in unit.spellings():
                # First definition wins when two units share a spelling
                self._by_spelling.setdefault(spelling.lower(), unit_id)
        self._pattern: str | None = None

    @classmethod
    def default(cls) -> UnitDictionary:
        """Build the dictionary of built-in kitchen units."""
        return cls({u.id: u for u in DEFAULT_UNITS})

    @classmethod
    def from_config(cls, config_units: Mapping[str, Mapping[str, Any]] | None,
                    include_defaults: bool = True) -> UnitDictionary:
        """Build a dictionary from configured units, merged over the defaults.

        Args:
            config_units: Mapping of canonical ID to {short, plural, alternates, system}
            include_defaults: Whether to start from the built-in units

        Returns:
            A new UnitDictionary
        """
        units = {u.id: u for u in DEFAULT_UNITS} if include_defaults else {}
        for unit_id, definition in (config_units or {}).items():
            definition = definition or {}
            units[unit_id] = UnitDefinition(
                id=unit_id,
                short=definition.get("short"),
                plural=definition.get("plural"),
                alternates=tuple(definition.get("alternates") or ()),
                system=definition.get("system"),
            )
        _LOGGER.debug("Built unit dictionary with %d units", len(units))
        return cls(units)

    def __getitem__(self, unit_id: str) -> UnitDefinition:
        return self._units[unit_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def canonical(self, spelling: str | None) -> str | None:
        """Return the canonical ID for a spelling, or None if unknown."""
        if not spelling:
            return None
        return self._by_spelling.get(spelling.strip().lower())

    def system_of(self, unit_id: str | None) -> UnitSystem | None:
        """Return the measurement system a canonical unit belongs to."""
        if not unit_id or unit_id not in self._units:
            return None
        return self._units[unit_id].system

    def all_spellings(self) -> list[str]:
        """Every known spelling, longest first."""
        return sorted(self._by_spelling, key=len, reverse=True)

    def alternation(self) -> str:
        """Regex alternation over all spellings, longest first, escaped."""
        if self._pattern is None:
            self._pattern = "|".join(re.escape(s) for s in self.all_spellings())
        return self._pattern
