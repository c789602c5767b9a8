"""
Name-based matching of canonical ingredients against an inventory snapshot.

1. exact case-insensitive name        -> confidence "high"
2. either name contains the other's first N characters -> confidence "medium"
3. otherwise up to three suggestions sharing a word longer than 3 characters

When several entries qualify, the first one in catalog order wins.
"""
from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional, Sequence

from .models import CanonicalIngredient, CatalogEntry, MatchResult

NAME_MATCH_PREFIX = 15
SYNC_MATCH_PREFIX = 20
MAX_SUGGESTIONS = 3

_WORD_SPLIT_RE = re.compile(r"[\s\-_]+")


def _words(name: str) -> list[str]:
    return [w for w in _WORD_SPLIT_RE.split(name.lower()) if len(w) > 3]


def find_entry(
    name: str,
    entries: Sequence[CatalogEntry],
    prefix_length: int = NAME_MATCH_PREFIX,
) -> tuple[Optional[CatalogEntry], Optional[str]]:
    """Return (entry, confidence) for the best match, or (None, None)."""
    wanted = name.lower()
    named = [e for e in entries if e.name]

    for entry in named:
        if entry.name.lower() == wanted:
            return entry, "high"

    for entry in named:
        existing = entry.name.lower()
        if wanted[:prefix_length] in existing or existing[:prefix_length] in wanted:
            return entry, "medium"

    return None, None


def suggest_similar(
    name: str,
    entries: Sequence[CatalogEntry],
    limit: int = MAX_SUGGESTIONS,
) -> tuple[CatalogEntry, ...]:
    """Catalog entries sharing at least one overlapping word with name."""
    wanted = _words(name)
    found: list[CatalogEntry] = []
    seen: set[str] = set()
    for entry in entries:
        if not entry.name or entry.id in seen:
            continue
        existing = _words(entry.name)
        if any(w in iw or iw in w for w in existing for iw in wanted):
            found.append(entry)
            seen.add(entry.id)
            if len(found) >= limit:
                break
    return tuple(found)


def match_ingredient(
    ingredient: CanonicalIngredient,
    entries: Sequence[CatalogEntry],
    prefix_length: int = NAME_MATCH_PREFIX,
) -> MatchResult:
    entry, confidence = find_entry(ingredient.name, entries, prefix_length)
    if entry is not None:
        return MatchResult(found=True, catalog_entry=entry, confidence=confidence)
    return MatchResult(found=False, suggestions=suggest_similar(ingredient.name, entries))


def match_ingredients(
    ingredients: Iterable[CanonicalIngredient],
    snapshots: Mapping[str, Sequence[CatalogEntry]],
    prefix_length: int = NAME_MATCH_PREFIX,
) -> dict[str, MatchResult]:
    """Match every ingredient against the snapshot of its own category, keyed by ingredient name."""
    return {
        ing.name: match_ingredient(ing, snapshots.get(ing.type, ()), prefix_length)
        for ing in ingredients
    }
