"""Measurement system inference from parsed ingredients."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Literal

from ..units import UnitDictionary
from .quantity import ParsedLine

_LOGGER = logging.getLogger(__name__)

MeasurementSystem = Literal["metric", "us", "mixed"]


def infer_system(parsed: Iterable[ParsedLine], units: UnitDictionary) -> MeasurementSystem | None:
    """Classify a recipe as metric, US or mixed from its ingredient units.

    Units without a system tag (pinch, clove, ...) are ignored. When both
    systems appear and the smaller count is at least half the larger one the
    recipe is "mixed", otherwise the majority wins.

    Args:
        parsed: Parsed ingredient lines
        units: Unit dictionary providing the system tags

    Returns:
        "metric", "us", "mixed", or None if no unit could be classified
    """
    metric = 0
    us = 0
    for line in parsed:
        system = units.system_of(line.unit)
        if system == "metric":
            metric += 1
        elif system == "us":
            us += 1

    if not metric and not us:
        return None

    if metric and us and min(metric, us) * 2 >= max(metric, us):
        result: MeasurementSystem = "mixed"
    else:
        result = "metric" if metric > us else "us"

    _LOGGER.debug("Inferred measurement system %s (metric=%d, us=%d)", result, metric, us)
    return result
