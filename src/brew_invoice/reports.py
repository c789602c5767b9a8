"""
JSON / CSV reports of a parsed invoice and its canonical ingredients.
"""
from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from .models import CanonicalIngredient, InvoiceDocument

INVOICE_CSV_HEADERS = [
    "Type", "Name", "Quantity", "Unit",
    "Cost per Unit (£)", "Total Cost (£)", "Supplier", "Notes",
]
BREWFATHER_CSV_HEADERS = ["Type", "Name", "Amount", "Unit", "Cost", "Cost Unit", "Supplier"]


def _line_cost(ing: CanonicalIngredient) -> float:
    return (ing.cost or 0) * (ing.amount or 0)


def build_summary(ingredients: Sequence[CanonicalIngredient]) -> dict:
    summary: dict = {"total_items": len(ingredients), "total_cost": 0.0, "by_type": {}}
    for ing in ingredients:
        line_cost = _line_cost(ing)
        group = summary["by_type"].setdefault(ing.type, {"count": 0, "total_cost": 0.0, "items": []})
        group["count"] += 1
        group["total_cost"] += line_cost
        group["items"].append({
            "name": ing.name,
            "amount": ing.amount,
            "unit": ing.unit,
            "cost_per_unit": ing.cost,
            "total_cost": line_cost,
        })
        summary["total_cost"] += line_cost
    return summary


def build_report(
    invoice: InvoiceDocument,
    ingredients: Sequence[CanonicalIngredient],
    now: Optional[datetime] = None,
) -> dict:
    now = now or datetime.now(timezone.utc)
    return {
        "invoice": {
            "number": invoice.invoice_number,
            "date": invoice.date,
            "total": invoice.total,
            "parser": invoice.parser,
        },
        "ingredients": [ing.model_dump() for ing in ingredients],
        "summary": build_summary(ingredients),
        "timestamp": now.isoformat(),
    }


def _csv_text(rows: list[list]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue()


def invoice_csv(invoice: InvoiceDocument, ingredients: Sequence[CanonicalIngredient], supplier: str = "Malt Miller") -> str:
    rows = [INVOICE_CSV_HEADERS]
    for ing in ingredients:
        rows.append([
            ing.type,
            ing.name,
            ing.amount or 0,
            ing.unit,
            f"{ing.cost or 0:.4f}",
            f"{_line_cost(ing):.2f}",
            ing.supplier or supplier,
            ing.notes,
        ])
    title = f"# {supplier} Invoice {invoice.invoice_number} - {invoice.date}\n"
    return title + _csv_text(rows)


def brewfather_csv(ingredients: Sequence[CanonicalIngredient], cost_unit: str = "GBP", supplier: str = "Malt Miller") -> str:
    rows = [BREWFATHER_CSV_HEADERS]
    for ing in ingredients:
        rows.append([ing.type, ing.name, ing.amount or 0, ing.unit, ing.cost or 0, cost_unit, ing.supplier or supplier])
    return _csv_text(rows)


def save_report(
    invoice: InvoiceDocument,
    ingredients: Sequence[CanonicalIngredient],
    output_dir: str | Path = ".",
    supplier: str = "Malt Miller",
    cost_unit: str = "GBP",
    now: Optional[datetime] = None,
) -> dict:
    """Write the JSON report and both CSVs. Returns their paths and the report."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    report = build_report(invoice, ingredients, now)
    day = report["timestamp"][:10]
    number = invoice.invoice_number or "unknown"
    slug = supplier.lower().replace(" ", "-")

    json_path = output_path / f"{slug}-{number}-{day}.json"
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    csv_path = output_path / f"{slug}-{number}-{day}.csv"
    csv_path.write_text(invoice_csv(invoice, ingredients, supplier), encoding="utf-8")

    brewfather_path = output_path / f"brewfather-inventory-{number}-{day}.csv"
    brewfather_path.write_text(brewfather_csv(ingredients, cost_unit, supplier), encoding="utf-8")

    return {
        "json_path": json_path,
        "csv_path": csv_path,
        "brewfather_path": brewfather_path,
        "report": report,
    }


def format_summary(report: dict) -> str:
    inv = report["invoice"]
    summary = report["summary"]
    lines = [
        "INVENTORY REPORT",
        "================",
        f"Invoice: {inv['number']} ({inv['date']})",
        f"Total Items: {summary['total_items']}",
        f"Total Cost: £{summary['total_cost']:.2f}",
        "",
        "By Category:",
    ]
    for type_, data in summary["by_type"].items():
        lines.append(f"\n{type_.upper()} ({data['count']} items - £{data['total_cost']:.2f}):")
        for item in data["items"]:
            lines.append(f"  • {item['name']}")
            lines.append(
                f"    {item['amount']} {item['unit']} @ £{item['cost_per_unit']:.4f}/{item['unit']}"
                f" = £{item['total_cost']:.2f}"
            )
    return "\n".join(lines)
