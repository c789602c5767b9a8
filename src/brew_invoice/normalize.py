"""
Map classified invoice lines to canonical ingredient records.

Each category has a fixed canonical unit (fermentable kg, hop g, yeast pkg or g, misc g);
cost is the line total divided by the canonical amount.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

from .classify import classify, is_clarifier, is_water_mineral
from .models import CanonicalIngredient, Fermentable, Hop, Misc, RawLineItem, Yeast
from .uom import cost_per_unit, to_grams, to_kg

DEFAULT_SUPPLIER = "Malt Miller"

# (keywords, sub_type, color) checked in order; Base/2 otherwise
FERMENTABLE_STYLES = (
    (("crystal", "caramel"), "Crystal", None),
    (("chocolate", "brown"), "Roasted", 400),
    (("black", "roasted", "patent"), "Roasted", 500),
    (("wheat", "weizen"), "Wheat", 3),
    (("munich", "vienna", "amber", "biscuit", "victory", "aromatic"), "Specialty", 10),
)
CRYSTAL_DEFAULT_COLOR = 60

ORIGINS = (
    ("new zealand", "New Zealand"),
    ("german", "German"),
    ("english", "English"),
    ("american", "American"),
    ("uk", "UK"),
    ("usa", "USA"),
    ("czech", "Czech"),
    ("belgian", "Belgian"),
    ("australian", "Australian"),
    ("slovenian", "Slovenian"),
    ("french", "French"),
)

YEAST_LABS = (
    ("wyeast", "Wyeast"),
    ("white labs", "White Labs"),
    ("fermentis", "Fermentis"),
    ("lallemand", "Lallemand"),
)

COLOR_RE = re.compile(r"\b(\d+)\s*(?:l|ebc|lovibond)\b", re.IGNORECASE)
ALPHA_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%?\s*(?:alpha|aa)\b", re.IGNORECASE)
PRODUCT_ID_RE = re.compile(r"(?:WLP|US-|BE-|S-|Wyeast\s+)\d+|K-97", re.IGNORECASE)


def extract_color(name: str) -> Optional[int]:
    m = COLOR_RE.search(name)
    return int(m.group(1)) if m else None


def extract_alpha(name: str) -> Optional[float]:
    m = ALPHA_RE.search(name)
    return float(m.group(1)) if m else None


def extract_origin(name: str) -> str:
    lower = name.lower()
    for keyword, origin in ORIGINS:
        if re.search(rf"\b{re.escape(keyword)}\b", lower):
            return origin
    return "Unknown"


def extract_product_id(name: str) -> str:
    """Lab product code such as WLP001, US-05 or Wyeast 1056; empty if none."""
    m = PRODUCT_ID_RE.search(name)
    return m.group(0) if m else ""


def is_yeast_nutrient(name: str) -> bool:
    lower = name.lower()
    return any(kw in lower for kw in ("nutrient", "energizer", "dap"))


def _notes(item: RawLineItem) -> str:
    return f"Imported from invoice. Original: {item.raw_line or item.name}"


def normalize_fermentable(item: RawLineItem, supplier: str = DEFAULT_SUPPLIER) -> Fermentable:
    name = item.name.lower()
    sub_type, color = "Base", 2
    for keywords, style, style_color in FERMENTABLE_STYLES:
        if any(kw in name for kw in keywords):
            sub_type = style
            color = style_color if style_color is not None else (extract_color(name) or CRYSTAL_DEFAULT_COLOR)
            break

    amount = to_kg(item.quantity, item.unit)
    return Fermentable(
        name=item.name,
        sub_type=sub_type,
        color=color,
        amount=amount,
        cost=cost_per_unit(item.price, amount),
        supplier=supplier,
        origin=extract_origin(item.name),
        notes=_notes(item),
    )


def normalize_hop(item: RawLineItem, supplier: str = DEFAULT_SUPPLIER) -> Hop:
    name = item.name.lower()
    form = "Pellet"
    if "leaf" in name or "whole" in name:
        form = "Leaf"
    elif "extract" in name:
        form = "Extract"

    alpha = extract_alpha(item.name)
    amount = to_grams(item.quantity, item.unit)
    return Hop(
        name=item.name,
        sub_type=form,
        form=form,
        alpha=alpha if alpha else 5.0,
        amount=amount,
        cost=cost_per_unit(item.price, amount),
        supplier=supplier,
        origin=extract_origin(item.name),
        notes=_notes(item),
    )


def normalize_yeast(item: RawLineItem, supplier: str = DEFAULT_SUPPLIER) -> Yeast:
    name = item.name.lower()
    form = "Liquid" if "liquid" in name else "Dry"

    sub_type = "Ale"
    if "lager" in name:
        sub_type = "Lager"
    elif "wheat" in name or "weizen" in name:
        sub_type = "Wheat"
    elif "wild" in name or "brett" in name:
        sub_type = "Wild"

    laboratory = next((lab for kw, lab in YEAST_LABS if kw in name), "Unknown")

    if is_yeast_nutrient(name):
        unit = "g"
        amount = to_grams(item.quantity or 1, item.unit)
    else:
        unit = "pkg"
        amount = item.quantity or 1

    return Yeast(
        name=item.name,
        sub_type=sub_type,
        form=form,
        laboratory=laboratory,
        product_id=extract_product_id(item.name),
        amount=amount,
        unit=unit,
        cost=cost_per_unit(item.price, amount),
        supplier=supplier,
        origin=extract_origin(item.name),
        notes=_notes(item),
    )


def normalize_misc(item: RawLineItem, supplier: str = DEFAULT_SUPPLIER) -> Misc:
    name = item.name.lower()
    sub_type, use = "Other", "Boil"
    if is_water_mineral(name) or "acid" in name:
        sub_type, use = "Water Agent", "Mash"
    elif is_clarifier(name):
        sub_type, use = "Fining", "Secondary"
    elif "nutrient" in name:
        sub_type, use = "Yeast Nutrient", "Primary"

    amount = to_grams(item.quantity, item.unit)
    return Misc(
        name=item.name,
        sub_type=sub_type,
        use=use,
        amount=amount,
        cost=cost_per_unit(item.price, amount),
        supplier=supplier,
        origin=extract_origin(item.name),
        notes=_notes(item),
    )


NORMALIZERS = {
    "fermentable": normalize_fermentable,
    "hop": normalize_hop,
    "yeast": normalize_yeast,
    "misc": normalize_misc,
}


def normalize(item: RawLineItem, supplier: str = DEFAULT_SUPPLIER) -> CanonicalIngredient:
    """Classify a raw line and build its canonical ingredient."""
    return NORMALIZERS[classify(item.name)](item, supplier)


def normalize_items(items: Iterable[RawLineItem], supplier: str = DEFAULT_SUPPLIER) -> list[CanonicalIngredient]:
    return [normalize(item, supplier) for item in items]
