"""
Brewfather v2 inventory API client.

Only the endpoints the sync needs:
  GET   /inventory/{category}        snapshot of existing items
  PATCH /inventory/{category}/{id}   stock adjustment, body is the string "Updated" on success
  GET   /recipes                     connectivity check
"""
from __future__ import annotations

import json
import logging
import math
from typing import Optional

import requests

from .config import DEFAULT_BASE_URL, Settings
from .models import CatalogEntry, IngredientType

logger = logging.getLogger(__name__)

CATEGORY_PATHS: dict[str, str] = {
    "fermentable": "fermentables",
    "hop": "hops",
    "yeast": "yeasts",
    "misc": "miscs",
}

CANONICAL_UNITS: dict[str, str] = {
    "fermentable": "kg",
    "hop": "g",
    "yeast": "pkg",
    "misc": "g",
}


class ConfigError(Exception):
    """Missing or invalid credentials."""


class CatalogError(Exception):
    """An inventory snapshot could not be fetched."""


def error_message(exc: Exception) -> str:
    """Prefer the API's own error message over the transport's."""
    resp = getattr(exc, "response", None)
    if resp is not None:
        try:
            data = resp.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
    return str(exc)


def response_body(resp: requests.Response) -> str:
    """Response body as text; a JSON-encoded string is unwrapped."""
    try:
        data = resp.json()
    except ValueError:
        return (resp.text or "").strip()
    return data if isinstance(data, str) else json.dumps(data)


def catalog_entry_from_record(record: dict, category: IngredientType) -> CatalogEntry:
    raw = record.get("inventory")
    try:
        amount = float(raw) if raw is not None else 0.0
    except (TypeError, ValueError):
        amount = 0.0
    if math.isnan(amount):
        amount = 0.0
    return CatalogEntry(
        id=str(record.get("_id") or ""),
        name=str(record.get("name") or ""),
        current_amount=amount,
        unit=CANONICAL_UNITS[category],
    )


class BrewfatherClient:
    def __init__(
        self,
        user_id: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not user_id or not api_key:
            raise ConfigError("Brewfather User ID and API Key are required")
        self.base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.auth = (user_id, api_key)

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "BrewfatherClient":
        return cls(settings.user_id, settings.api_key, settings.base_url, session=session)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def get_inventory(self, category: IngredientType) -> list[CatalogEntry]:
        """Snapshot of one inventory category. Raises CatalogError on any failure."""
        path = CATEGORY_PATHS[category]
        try:
            resp = self._session.get(self._url(f"/inventory/{path}"))
            resp.raise_for_status()
            records = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise CatalogError(f"Failed to get {path}: {error_message(exc)}") from exc
        if not isinstance(records, list):
            raise CatalogError(f"Failed to get {path}: unexpected response {records!r}")

        entries = [catalog_entry_from_record(r, category) for r in records if isinstance(r, dict)]
        logger.debug("Fetched %d %s from inventory", len(entries), path)
        return entries

    def adjust_inventory(
        self,
        category: IngredientType,
        entry_id: str,
        delta: float,
        cost: Optional[float] = None,
        cost_unit: str = "GBP",
    ) -> str:
        """
        Adjust stock of one item by delta. Returns the response body,
        "Updated" on success or "Nothing to update" when the write was rejected.
        """
        body: dict = {"inventory_adjust": delta}
        if cost:
            body["cost"] = cost
            body["costUnit"] = cost_unit
        path = CATEGORY_PATHS[category]
        logger.debug("PATCH /inventory/%s/%s %s", path, entry_id, body)
        resp = self._session.patch(self._url(f"/inventory/{path}/{entry_id}"), json=body)
        resp.raise_for_status()
        return response_body(resp)

    def test_connection(self) -> tuple[bool, str]:
        try:
            resp = self._session.get(self._url("/recipes"))
            resp.raise_for_status()
        except requests.RequestException as exc:
            return False, f"Connection failed: {error_message(exc)}"
        return True, "Connection successful"
