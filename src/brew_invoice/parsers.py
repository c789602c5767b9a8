"""
Invoice line parser for positionally laid out invoice text (Malt Miller layout by default).

The extracted text has no reliable column delimiters, so items are recovered heuristically.
Strategies run in order and the first one that yields items wins:

1. tabular   - anchored on the column header; every item is followed by a fixed group of
               currency amounts (unit price, VAT, line total).
2. line_scan - line-by-line scan; a line with an ingredient keyword or quantity opens an item,
               the next line carrying a price closes it.

Parsing never raises: missing metadata is None, no items is an empty tuple.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from .models import InvoiceDocument, RawLineItem
from .uom import UNIT_PATTERN, normalize_unit, parse_quantity_from_text

logger = logging.getLogger(__name__)


class VendorTemplate(BaseModel):
    """Layout markers of one vendor's invoice."""
    model_config = ConfigDict(frozen=True)

    supplier: str = "Malt Miller"
    header_marker: str = "Product Quantity Weight Price VAT Line Total"
    trailer_marker: Optional[str] = "Subtotal"
    # Where the first item's description starts. None (or not found) means right after the header.
    first_item_anchor: Optional[str] = None
    amounts_per_item: int = 3


MALT_MILLER = VendorTemplate()

CURRENCY_RE = re.compile(r"£\s*(\d+(?:,\d{3})*\.\d{2})")

# "<count> <weight><unit>" at the end of an item description, e.g. "2 12.5kg"
TRAILING_QTY_RE = re.compile(
    rf"(?<!\S)(\d+)\s+(\d*\.?\d+)\s*({UNIT_PATTERN})\s*$",
    re.IGNORECASE,
)

# Product code, commodity code and country of origin columns
CODE_TOKEN_PATTERNS = (
    re.compile(r"^[A-Z]{2,}-\d+-\d+$"),
    re.compile(r"^\d{7,}$"),
    re.compile(r"^[A-Z]{1,3}$"),
)

INVOICE_NUMBER_RE = re.compile(r"Invoice Number:\s*(\d+)", re.IGNORECASE)
INVOICE_DATE_RE = re.compile(r"Invoice Date:\s*([^\n]+)", re.IGNORECASE)
DATE_TOKEN_RE = re.compile(
    r"^(?:\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"
    r"|\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}(?:st|nd|rd|th)?\s+[A-Za-z]{3,9},?\s+\d{4}"
    r"|[A-Za-z]{3,9}\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4})"
)

_AMOUNT = r"£\s*(\d+(?:,\d{3})*\.\d{2})"
TOTAL_PATTERNS = (
    re.compile(rf"\bTotal\s+{_AMOUNT}", re.IGNORECASE),
    re.compile(rf"\bGrand Total[:\s]*{_AMOUNT}", re.IGNORECASE),
    re.compile(rf"\bFinal Total[:\s]*{_AMOUNT}", re.IGNORECASE),
)

SKIP_LINE_PATTERNS = (
    re.compile(r"^(invoice|date|total|subtotal|vat|delivery|payment)", re.IGNORECASE),
    re.compile(r"^(the malt miller|address|tel|email)", re.IGNORECASE),
    re.compile(r"^(page \d+|\d+/\d+)$", re.IGNORECASE),
    re.compile(r"^£?\d+\.\d{2}$"),
    re.compile(r"^\d+$"),
    re.compile(r"^thank you", re.IGNORECASE),
)

LINE_KEYWORDS = (
    # Malts
    "malt", "grain", "wheat", "barley", "oats", "rye", "corn", "rice",
    "pale", "pilsner", "munich", "vienna", "crystal", "caramel",
    "chocolate", "black", "roasted", "smoked", "amber",
    # Hops
    "hop", "hops", "pellet", "pellets", "leaf",
    "cascade", "centennial", "chinook", "citra", "columbus",
    "fuggle", "golding", "hallertau", "saaz", "tettnang",
    # Yeast
    "yeast", "saccharomyces", "brettanomyces", "lactobacillus",
    "wyeast", "white labs", "fermentis", "lallemand",
    "nutrient", "energizer",
    # Water treatment and finings
    "gypsum", "calcium", "magnesium", "sodium", "chloride", "sulfate",
    "acid", "phosphoric", "lactic", "citric",
    "irish moss", "whirlfloc", "protofloc", "clarity",
    "campden", "potassium", "metabisulfite",
)


def _parse_amount(s: str) -> float:
    return float(s.replace(",", ""))


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _strip_trailing_codes(text: str) -> str:
    tokens = text.split()
    while tokens and any(p.match(tokens[-1]) for p in CODE_TOKEN_PATTERNS):
        tokens.pop()
    return " ".join(tokens)


def parse_item_text(item_text: str, line_total: float) -> Optional[RawLineItem]:
    """
    Parse one item description such as
    "Maris Otter Pale Malt EQU-11-022 3923299000 GB 2 12.5kg".
    Returns None when no usable name remains.
    """
    if not item_text or len(item_text.strip()) < 3:
        return None

    text = item_text.strip()
    quantity = 1.0
    unit = "each"

    m = TRAILING_QTY_RE.search(text)
    if m:
        count = int(m.group(1))
        weight = float(m.group(2))
        unit = normalize_unit(m.group(3))
        if unit in ("kg", "g"):
            if weight > 0:
                quantity = count * weight
            else:
                # "2 0.0kg" marks goods sold by count
                quantity = float(count)
                unit = "each"
        else:
            quantity = float(count)
        text = text[: m.start()].strip()

    name = _collapse(_strip_trailing_codes(text))
    if len(name) < 3:
        return None
    if quantity <= 0:
        quantity = 1.0

    return RawLineItem(
        name=name,
        quantity=quantity,
        unit=unit,
        price=line_total,
        raw_line=item_text.strip(),
    )


def parse_tabular_items(text: str, template: VendorTemplate = MALT_MILLER) -> tuple[RawLineItem, ...]:
    """Strategy A: items delimited by groups of currency amounts after the column header."""
    header_at = text.find(template.header_marker)
    if header_at == -1:
        return ()

    section_start = header_at + len(template.header_marker)
    section_end = len(text)
    if template.trailer_marker:
        trailer_at = text.find(template.trailer_marker, section_start)
        if trailer_at != -1:
            section_end = trailer_at
    section = text[section_start:section_end]

    first_start = 0
    if template.first_item_anchor:
        anchor_at = section.find(template.first_item_anchor)
        if anchor_at != -1:
            first_start = anchor_at

    amounts = list(CURRENCY_RE.finditer(section))
    size = template.amounts_per_item
    items: list[RawLineItem] = []
    for i in range(0, len(amounts) - size + 1, size):
        group = amounts[i:i + size]
        start = first_start if i == 0 else amounts[i - 1].end()
        span = section[start:group[0].start()].strip()
        if len(span) < 3:
            logger.debug("Skipping short item span %r", span)
            continue
        item = parse_item_text(span, _parse_amount(group[-1].group(1)))
        if item:
            items.append(item)
    return tuple(items)


def is_header_footer_line(line: str) -> bool:
    return any(p.search(line) for p in SKIP_LINE_PATTERNS)


def looks_like_ingredient(line: str) -> bool:
    lower = line.lower()
    return any(kw in lower for kw in LINE_KEYWORDS) or parse_quantity_from_text(line) is not None


def _open_line_item(line: str) -> dict:
    name = CURRENCY_RE.sub(" ", line)
    quantity, unit = 1.0, "each"
    found = parse_quantity_from_text(name)
    if found:
        quantity, unit, matched = found
        name = name.replace(matched, " ", 1)
    return {
        "name": _collapse(name) or line,
        "quantity": quantity if quantity > 0 else 1.0,
        "unit": unit,
        "raw_line": line,
    }


def parse_line_items(text: str, template: VendorTemplate = MALT_MILLER) -> tuple[RawLineItem, ...]:
    """Strategy B: scan lines, open items on ingredient lines, close them on price lines."""
    items: list[RawLineItem] = []
    current: Optional[dict] = None

    for raw in text.split("\n"):
        line = raw.strip()
        if not line or is_header_footer_line(line):
            continue

        price_match = CURRENCY_RE.search(line)
        if price_match and current is not None:
            items.append(RawLineItem(**current, price=_parse_amount(price_match.group(1))))
            current = None
        elif looks_like_ingredient(line):
            if current is not None:
                items.append(RawLineItem(**current))
            current = _open_line_item(line)
            if price_match:
                items.append(RawLineItem(**current, price=_parse_amount(price_match.group(1))))
                current = None

    if current is not None:
        items.append(RawLineItem(**current))
    return tuple(items)


Strategy = Callable[[str, VendorTemplate], tuple[RawLineItem, ...]]

STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("tabular", parse_tabular_items),
    ("line_scan", parse_line_items),
)


def extract_line_items(
    text: str,
    template: VendorTemplate = MALT_MILLER,
    strategies: tuple[tuple[str, Strategy], ...] = STRATEGIES,
) -> tuple[Optional[str], tuple[RawLineItem, ...]]:
    """Run strategies in order; return (strategy_name, items) of the first non-empty result."""
    for name, strategy in strategies:
        items = strategy(text, template)
        if items:
            logger.debug("Strategy %s found %d item(s)", name, len(items))
            return name, items
    logger.debug("No strategy found any items")
    return None, ()


def _parse_date(text: str) -> Optional[str]:
    m = INVOICE_DATE_RE.search(text)
    if not m:
        return None
    rest = m.group(1).strip()
    token = DATE_TOKEN_RE.match(rest)
    return token.group(0) if token else (rest or None)


def parse_metadata(text: str) -> dict:
    """Invoice number, date and total; each None when absent."""
    number = INVOICE_NUMBER_RE.search(text)
    total = None
    for pattern in TOTAL_PATTERNS:
        m = pattern.search(text)
        if m:
            total = _parse_amount(m.group(1))
            break
    return {
        "invoice_number": number.group(1) if number else None,
        "date": _parse_date(text),
        "total": total,
    }


def parse_invoice_text(text: str | None, template: VendorTemplate = MALT_MILLER) -> InvoiceDocument:
    """Parse extracted invoice text into an InvoiceDocument."""
    text = text or ""
    parser_name, items = extract_line_items(text, template)
    return InvoiceDocument(
        **parse_metadata(text),
        items=items,
        raw_text=text,
        parser=parser_name,
    )
