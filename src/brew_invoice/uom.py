"""
Unit of measure normalization for brewing ingredients.

Policy:
1. Mass units (KG, G, LB, OZ) convert exactly into the canonical unit of the category.
2. Anything else (EACH, PKT, SACHET, L, ML, unknown strings) passes through unchanged:
   the quantity is treated as already being in the target unit.
3. Cost per unit is 0 whenever the amount is 0 or the line price is falsy.
"""
from __future__ import annotations

import re
from typing import Optional

from .models import Unit

# Factors into kilograms / grams
KG_FACTORS = {
    "kg": 1.0,
    "g": 0.001,
    "lb": 0.453592,
    "oz": 0.0283495,
}

GRAM_FACTORS = {
    "g": 1.0,
    "kg": 1000.0,
    "lb": 453.592,
    "oz": 28.3495,
}

# Normalize raw unit string to one of the invoice units
UNIT_ALIASES: dict[str, Unit] = {
    "kg": "kg", "kgs": "kg", "kilo": "kg", "kilos": "kg",
    "g": "g", "gm": "g", "gram": "g", "grams": "g",
    "l": "L", "litre": "L", "liter": "L",
    "ml": "ml",
    "each": "each", "ea": "each",
    "pkt": "pkt", "packet": "pkt",
    "sachet": "sachet", "sachets": "sachet",
    "lb": "lb", "lbs": "lb",
    "oz": "oz",
}

UNIT_PATTERN = r"kg|g|L|ml|each|pkt|sachets?"

QTY_UNIT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(kg|g|l|ml|pkt|sachets?)\b", re.IGNORECASE)


def normalize_unit(raw: Optional[str]) -> Unit:
    """Map a raw unit token to the invoice unit set. Unknown tokens become 'each'."""
    key = (raw or "").strip().lower()
    return UNIT_ALIASES.get(key, "each")


def to_kg(quantity: Optional[float], unit: Optional[str]) -> float:
    if not quantity:
        return 0.0
    factor = KG_FACTORS.get((unit or "").strip().lower())
    if factor is None:
        return quantity
    return quantity * factor


def to_grams(quantity: Optional[float], unit: Optional[str]) -> float:
    if not quantity:
        return 0.0
    factor = GRAM_FACTORS.get((unit or "").strip().lower())
    if factor is None:
        return quantity
    return quantity * factor


def cost_per_unit(total_price: Optional[float], amount: Optional[float]) -> float:
    """
    Price per canonical unit, rounded to 4 decimals.
    Returns 0 instead of dividing by zero.
    """
    if not total_price or not amount:
        return 0.0
    return round(total_price / amount, 4)


def parse_quantity_from_text(text: str | None) -> Optional[tuple[float, Unit, str]]:
    """
    Find an embedded quantity+unit such as '100g' or '1.5 kg'.
    Returns (quantity, unit, matched_text) or None.
    """
    if not text:
        return None
    m = QTY_UNIT_RE.search(text)
    if not m:
        return None
    return float(m.group(1)), normalize_unit(m.group(2)), m.group(0)
