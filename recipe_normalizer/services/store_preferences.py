"""
Ingredient store preferences.

Remembers which store a household member buys an ingredient at, and finds
the best remembered store for a new grocery item by exact and then fuzzy
name matching across the household.
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable

from pydantic import BaseModel
from rapidfuzz import fuzz

from ..const import FUZZY_MIN_MATCH_LENGTH, FUZZY_THRESHOLD

_LOGGER = logging.getLogger(__name__)


def normalize_ingredient_name(name: str) -> str:
    """Lowercase, trim and collapse whitespace."""
    return re.sub(r"\s+", " ", name.lower().strip())


def normalize_ingredient_name_for_grouping(name: str | None) -> str:
    """Normalize a name for grouping, also dropping (...), [...] and {...} qualifiers.

    "Tomatoes (canned)" and "tomatoes" group together.
    """
    if not name:
        return ""
    name = re.sub(r"\s*\([^)]*\)\s*", " ", name)
    name = re.sub(r"\s*\[[^\]]*\]\s*", " ", name)
    name = re.sub(r"\s*\{[^}]*\}\s*", " ", name)
    return re.sub(r"\s+", " ", name).strip().lower()


class IngredientStorePreference(BaseModel):
    """A user's remembered store for a normalized ingredient name."""

    user_id: str
    normalized_name: str
    store_id: str


class FuzzyPreferenceMatch(BaseModel):
    """The best preference found for a search name.

    Attributes:
        preference: The matched preference
        score: 0 for a perfect match, higher is worse
        is_exact_match: Whether the normalized names were equal
        is_current_user: Whether the preference belongs to the searching user
    """

    preference: IngredientStorePreference
    score: float
    is_exact_match: bool
    is_current_user: bool


class PreferenceRepository(ABC):
    """Storage for ingredient store preferences."""

    @abstractmethod
    def get(self, user_id: str, normalized_name: str) -> IngredientStorePreference | None:
        """Return a user's preference for a name, if any."""

    @abstractmethod
    def list_for_users(self, user_ids: Iterable[str]) -> list[IngredientStorePreference]:
        """Return every preference of the given users."""

    @abstractmethod
    def upsert(self, user_id: str, normalized_name: str, store_id: str) -> IngredientStorePreference:
        """Create or replace a preference."""

    @abstractmethod
    def delete(self, user_id: str, normalized_name: str) -> None:
        """Remove a preference; missing preferences are ignored."""

    @abstractmethod
    def delete_for_store(self, store_id: str) -> int:
        """Remove every preference pointing at a store, returning how many were removed."""


class InMemoryPreferenceRepository(PreferenceRepository):
    """Preference repository backed by a dict, keyed by (user_id, normalized_name)."""

    def __init__(self, preferences: Iterable[IngredientStorePreference] = ()) -> None:
        self._items: dict[tuple[str, str], IngredientStorePreference] = {}
        for pref in preferences:
            self._items[(pref.user_id, pref.normalized_name)] = pref

    def get(self, user_id: str, normalized_name: str) -> IngredientStorePreference | None:
        return self._items.get((user_id, normalize_ingredient_name(normalized_name)))

    def list_for_users(self, user_ids: Iterable[str]) -> list[IngredientStorePreference]:
        wanted = set(user_ids)
        return [p for p in self._items.values() if p.user_id in wanted]

    def upsert(self, user_id: str, normalized_name: str, store_id: str) -> IngredientStorePreference:
        pref = IngredientStorePreference(
            user_id=user_id,
            normalized_name=normalize_ingredient_name(normalized_name),
            store_id=store_id,
        )
        self._items[(user_id, pref.normalized_name)] = pref
        return pref

    def delete(self, user_id: str, normalized_name: str) -> None:
        self._items.pop((user_id, normalize_ingredient_name(normalized_name)), None)

    def delete_for_store(self, store_id: str) -> int:
        keys = [k for k, p in self._items.items() if p.store_id == store_id]
        for key in keys:
            del self._items[key]
        return len(keys)


def fuzzy_distance(search: str, candidate: str) -> float:
    """Distance between two normalized names, 0 (identical) to 1 (unrelated)."""
    return round(1 - fuzz.WRatio(search, candidate) / 100, 4)


def find_best_ingredient_store_preference(
    current_user_id: str,
    user_ids: list[str],
    search_name: str,
    repository: PreferenceRepository,
    threshold: float = FUZZY_THRESHOLD,
) -> FuzzyPreferenceMatch | None:
    """Find the best store preference for an ingredient across a household.

    Priority order:
    1. Current user exact match
    2. Other household member exact match
    3. Current user fuzzy match (best score)
    4. Other household member fuzzy match (best score)

    Args:
        current_user_id: The user making the request
        user_ids: All household member IDs, including the current user
        search_name: Ingredient name to look up; normalized here
        repository: Preference storage
        threshold: Maximum fuzzy distance accepted

    Returns:
        The best match, or None when nothing is within the threshold
    """
    if not user_ids or not search_name.strip():
        return None

    normalized = normalize_ingredient_name(search_name)
    preferences = repository.list_for_users(user_ids)
    if not preferences:
        return None

    for is_current in (True, False):
        exact = next(
            (p for p in preferences
             if (p.user_id == current_user_id) == is_current and p.normalized_name == normalized),
            None,
        )
        if exact:
            return FuzzyPreferenceMatch(preference=exact, score=0.0, is_exact_match=True,
                                        is_current_user=is_current)

    if len(normalized) < FUZZY_MIN_MATCH_LENGTH:
        return None

    scored = [
        (fuzzy_distance(normalized, p.normalized_name), p)
        for p in preferences
        if len(p.normalized_name) >= FUZZY_MIN_MATCH_LENGTH
    ]
    scored = sorted((s for s in scored if s[0] <= threshold), key=lambda s: s[0])

    for is_current in (True, False):
        best = next(((score, p) for score, p in scored
                     if (p.user_id == current_user_id) == is_current), None)
        if best:
            _LOGGER.debug("Fuzzy store preference for '%s': '%s' (score %.3f)",
                          normalized, best[1].normalized_name, best[0])
            return FuzzyPreferenceMatch(preference=best[1], score=best[0],
                                        is_exact_match=False, is_current_user=is_current)

    return None
