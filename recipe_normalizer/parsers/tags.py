"""Keyword to tag normalization."""
from __future__ import annotations

from typing import Any

from ..models.recipe import Tag


def parse_tags(keywords: Any) -> list[Tag]:
    """Convert JSON-LD keywords into lowercase tags.

    Only a list yields tags, one per non-blank string entry.
    """
    if not isinstance(keywords, list):
        return []

    return [Tag(name=k.strip().lower()) for k in keywords if isinstance(k, str) and k.strip()]


def sort_tags_with_allergy_priority(tags: list[Tag], allergies: list[str] | None) -> list[Tag]:
    """Move allergen tags to the front, keeping the original order within each group."""
    if not allergies:
        return list(tags)
    allergy_set = {a.lower() for a in allergies}
    allergens = [t for t in tags if t.name.lower() in allergy_set]
    others = [t for t in tags if t.name.lower() not in allergy_set]
    return allergens + others
