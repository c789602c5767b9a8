"""
Ingredient classification by keyword containment.

Priority order, first match wins: fermentable -> hop -> yeast -> water agent / fining -> misc.
Every name gets a category; unrecognised items fall through to misc.
"""
from __future__ import annotations

import logging

from .models import IngredientType

logger = logging.getLogger(__name__)

# Equipment that shares words with fermentables ("Grain Bag", "Kettle Liner")
FERMENTABLE_EXCLUDE = (
    "bag", "liner", "kettle", "equipment", "thermometer", "hydrometer",
    "bottle", "cap", "cork", "tube", "valve", "clamp", "bucket",
)

FERMENTABLE_KEYWORDS = (
    "malt", "grain", "wheat", "barley", "oats", "rye", "corn", "rice",
    "pale", "pilsner", "munich", "vienna", "crystal", "caramel",
    "chocolate", "black", "roasted", "smoked", "amber", "base",
    "maris otter", "golden promise", "cara", "special",
)

HOP_KEYWORDS = (
    "hop", "hops", "pellet", "pellets", "leaf",
    "admiral", "amarillo", "cascade", "centennial", "chinook", "citra", "columbus",
    "fuggle", "golding", "hallertau", "kent", "liberty", "magnum", "northern",
    "nugget", "perle", "saaz", "simcoe", "sterling", "tettnang", "willamette",
)

YEAST_KEYWORDS = (
    "yeast", "saccharomyces", "brettanomyces", "lactobacillus",
    "wyeast", "white labs", "fermentis", "lallemand", "mangrove",
    "nutrient", "energizer", "dap",
)

WATER_MINERAL_KEYWORDS = (
    "gypsum", "calcium", "magnesium", "sodium", "chloride", "sulfate",
    "acid", "phosphoric", "lactic", "citric", "campden",
    "potassium", "metabisulfite", "salt",
)

CLARIFIER_KEYWORDS = (
    "irish moss", "whirlfloc", "protofloc", "clarity", "fining",
    "gelatin", "isinglass", "bentonite",
)


def _contains_any(name: str, keywords: tuple[str, ...]) -> bool:
    return any(kw in name for kw in keywords)


def is_fermentable(name: str) -> bool:
    name = name.lower()
    if _contains_any(name, FERMENTABLE_EXCLUDE):
        return False
    return _contains_any(name, FERMENTABLE_KEYWORDS)


def is_hop(name: str) -> bool:
    return _contains_any(name.lower(), HOP_KEYWORDS)


def is_yeast(name: str) -> bool:
    return _contains_any(name.lower(), YEAST_KEYWORDS)


def is_water_mineral(name: str) -> bool:
    return _contains_any(name.lower(), WATER_MINERAL_KEYWORDS)


def is_clarifier(name: str) -> bool:
    return _contains_any(name.lower(), CLARIFIER_KEYWORDS)


def classify(name: str | None) -> IngredientType:
    """Return the ingredient category for an item name. Never fails."""
    name = (name or "").lower()
    if is_fermentable(name):
        return "fermentable"
    if is_hop(name):
        return "hop"
    if is_yeast(name):
        return "yeast"
    if is_water_mineral(name) or is_clarifier(name):
        return "misc"
    logger.debug("Could not categorize ingredient %r, treating as misc", name)
    return "misc"
