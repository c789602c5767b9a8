"""
Inventory reconciliation: match invoice ingredients to existing inventory and apply
stock adjustments.

Categories and items are processed sequentially. A failing item is recorded and the
batch continues; a category whose snapshot cannot be fetched is recorded as failed
and the other categories still run.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

import requests

from .brewfather import BrewfatherClient, CatalogError, error_message
from .matching import NAME_MATCH_PREFIX, SYNC_MATCH_PREFIX, find_entry, match_ingredients
from .models import (
    CanonicalIngredient,
    CatalogEntry,
    CategorySyncReport,
    IngredientType,
    MatchResult,
    SyncResult,
)

logger = logging.getLogger(__name__)

READ_ONLY_MESSAGE = (
    "API key has read-only permissions. Please generate a new API key with "
    "read/write permissions in Brewfather Settings -> API Keys."
)
NOT_FOUND_MESSAGE = (
    "Item not found in Brewfather inventory. Add it manually first, "
    "then run this tool to update quantities."
)


def group_by_type(ingredients: Iterable[CanonicalIngredient]) -> dict[IngredientType, list[CanonicalIngredient]]:
    """Group ingredients by category, categories in first-seen order."""
    groups: dict[IngredientType, list[CanonicalIngredient]] = {}
    for ing in ingredients:
        groups.setdefault(ing.type, []).append(ing)
    return groups


def fetch_snapshots(
    client: BrewfatherClient,
    categories: Iterable[IngredientType],
) -> dict[IngredientType, list[CatalogEntry]]:
    """Inventory snapshot per category. CatalogError propagates."""
    return {category: client.get_inventory(category) for category in dict.fromkeys(categories)}


def analyze_matches(
    client: BrewfatherClient,
    ingredients: Sequence[CanonicalIngredient],
    prefix_length: int = NAME_MATCH_PREFIX,
) -> dict[str, MatchResult]:
    """Match without writing anything."""
    snapshots = fetch_snapshots(client, (ing.type for ing in ingredients))
    return match_ingredients(ingredients, snapshots, prefix_length)


def sync_ingredient(
    client: BrewfatherClient,
    category: IngredientType,
    ingredient: CanonicalIngredient,
    entries: Sequence[CatalogEntry],
    prefix_length: int = SYNC_MATCH_PREFIX,
    cost_unit: str = "GBP",
) -> SyncResult:
    entry, _ = find_entry(ingredient.name, entries, prefix_length)
    if entry is None:
        return SyncResult(name=ingredient.name, success=False, action="not_found", error=NOT_FOUND_MESSAGE)

    current = entry.current_amount
    delta = ingredient.amount or 0
    logger.info("%s: current %s %s, adding +%s", ingredient.name, current, ingredient.unit, delta)
    try:
        body = client.adjust_inventory(category, entry.id, delta, cost=ingredient.cost, cost_unit=cost_unit)
    except requests.RequestException as exc:
        logger.warning("Failed to update %s %s: %s", category, ingredient.name, exc)
        return SyncResult(name=ingredient.name, success=False, action="error", error=error_message(exc))

    if body == "Updated":
        return SyncResult(
            name=ingredient.name,
            success=True,
            action="adjusted",
            id=entry.id,
            current_amount=current,
            adjusted_by=delta,
            new_amount=round(current + delta, 4),
            unit=ingredient.unit,
        )
    if body == "Nothing to update":
        return SyncResult(name=ingredient.name, success=False, action="error", error=READ_ONLY_MESSAGE)
    return SyncResult(
        name=ingredient.name,
        success=False,
        action="error",
        error=f"Unexpected API response: {body!r} for {entry.id}",
    )


def sync_category(
    client: BrewfatherClient,
    category: IngredientType,
    ingredients: Sequence[CanonicalIngredient],
    prefix_length: int = SYNC_MATCH_PREFIX,
    cost_unit: str = "GBP",
) -> CategorySyncReport:
    """Update one category. Raises CatalogError if the snapshot cannot be fetched."""
    entries = client.get_inventory(category)
    results = tuple(
        sync_ingredient(client, category, ing, entries, prefix_length, cost_unit)
        for ing in ingredients
    )
    return CategorySyncReport(category=category, results=results)


def sync_ingredients(
    client: BrewfatherClient,
    ingredients: Iterable[CanonicalIngredient],
    prefix_length: int = SYNC_MATCH_PREFIX,
    cost_unit: str = "GBP",
) -> list[CategorySyncReport]:
    reports: list[CategorySyncReport] = []
    for category, items in group_by_type(ingredients).items():
        logger.info("Updating %d %s ingredient(s)", len(items), category)
        try:
            reports.append(sync_category(client, category, items, prefix_length, cost_unit))
        except CatalogError as exc:
            logger.error("Error updating %s ingredients: %s", category, exc)
            reports.append(CategorySyncReport(category=category, error=str(exc)))
    return reports


def summarize(reports: Iterable[CategorySyncReport]) -> dict[str, dict[str, int]]:
    """Per-category counts of successful / not found / errored items."""
    return {
        r.category: {"successful": r.successful, "not_found": r.not_found, "errors": r.errors}
        for r in reports
    }
