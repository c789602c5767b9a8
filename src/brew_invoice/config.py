"""
Runtime settings read from the environment (and a local .env file).
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .parsers import VendorTemplate

load_dotenv()

DEFAULT_BASE_URL = "https://api.brewfather.app/v2"


@dataclass(frozen=True)
class Settings:
    user_id: str = ""
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    cost_unit: str = "GBP"
    supplier: str = "Malt Miller"
    first_item_anchor: Optional[str] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.user_id and self.api_key)

    def template(self) -> VendorTemplate:
        return VendorTemplate(supplier=self.supplier, first_item_anchor=self.first_item_anchor)


def load_settings() -> Settings:
    """Settings from BREWFATHER_* / INVOICE_* environment variables."""
    return Settings(
        user_id=os.getenv("BREWFATHER_USER_ID", "").strip(),
        api_key=os.getenv("BREWFATHER_API_KEY", "").strip(),
        base_url=os.getenv("BREWFATHER_BASE_URL") or DEFAULT_BASE_URL,
        cost_unit=os.getenv("BREWFATHER_COST_UNIT") or "GBP",
        supplier=os.getenv("INVOICE_SUPPLIER") or "Malt Miller",
        first_item_anchor=os.getenv("INVOICE_FIRST_ITEM_ANCHOR") or None,
    )
