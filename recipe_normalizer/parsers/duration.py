"""
Duration parsing.

Recipe times arrive either as ISO-8601 durations ("PT1H30M") from
structured data or as free text ("1 hr 30 min", "1:30") from archive
formats. Both parsers return whole minutes, or None when the value is
missing; None means "unspecified" and is never collapsed to zero.
"""
from __future__ import annotations

import re

_ISO_DURATION = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?", re.IGNORECASE)
_ISO_DURATION_SECONDS = re.compile(
    r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?$", re.IGNORECASE)

_COLON_TIME = re.compile(r"^(\d{1,2}):(\d{2})\s*(?:h|hr)?$", re.IGNORECASE)
# 'h' may be directly followed by digits for the compact "1h30m" form
_HOURS = re.compile(r"(\d+)\s*(?:hrs?|hours?|h)(?:\s|\d|$)", re.IGNORECASE)
# 'm' must not be followed by word characters ("medium", "mix")
_MINUTES = re.compile(r"(\d+)\s*(?:mins?|minutes?|m)(?!\w)", re.IGNORECASE)


def parse_iso_duration(value: str | None) -> int | None:
    """Convert an ISO-8601 duration like 'PT1H30M' to minutes.

    Returns:
        hours * 60 + minutes, or None if the value carries no hours or minutes
    """
    if not isinstance(value, str):
        return None
    match = _ISO_DURATION.search(value)
    if not match or (match.group(1) is None and match.group(2) is None):
        return None
    hours = int(match.group(1)) if match.group(1) else 0
    minutes = int(match.group(2)) if match.group(2) else 0
    return hours * 60 + minutes


def parse_human_duration(value: str | None) -> int | None:
    """Parse strings like '30 min', '1 hr 15 min', '1h30m', '1:30' or '1:00h'.

    Returns:
        Minutes, or None for empty, unparseable or non-positive input
    """
    if not value or not str(value).strip():
        return None

    lower = str(value).lower().strip()

    colon = _COLON_TIME.match(lower)
    if colon:
        total = int(colon.group(1)) * 60 + int(colon.group(2))
        return total if total > 0 else None

    hour_match = _HOURS.search(lower)
    min_match = _MINUTES.search(lower)

    hours = int(hour_match.group(1)) if hour_match else 0
    minutes = int(min_match.group(1)) if min_match else 0

    total = hours * 60 + minutes
    return total if total > 0 else None


def parse_duration_seconds(value: str | None) -> float | None:
    """Parse a video duration to seconds.

    Plain numeric strings are taken as seconds already; otherwise the value
    must be an ISO-8601 'PT#H#M#S' duration.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if not text.upper().startswith("P"):
        try:
            return float(text)
        except ValueError:
            return None

    match = _ISO_DURATION_SECONDS.match(text)
    if not match:
        return None
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = float(match.group(3) or 0)
    return hours * 3600 + minutes * 60 + seconds
