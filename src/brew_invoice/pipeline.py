"""
End-to-end pipeline: PDF -> extract text -> parse lines -> classify/normalize -> (match -> sync).
Each stage is a pure transformation of the previous stage's value; only extraction and
the inventory calls touch the outside world.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from .extract import extract_text_from_pdf
from .models import ProcessedInvoice
from .normalize import normalize_items
from .parsers import MALT_MILLER, VendorTemplate, parse_invoice_text
from .reports import save_report

logger = logging.getLogger(__name__)


def process_text(
    text: str,
    source_file: str = "<text>",
    template: VendorTemplate = MALT_MILLER,
) -> ProcessedInvoice:
    """Parse already-extracted invoice text and normalize its items."""
    invoice = parse_invoice_text(text, template)
    ingredients = normalize_items(invoice.items, supplier=template.supplier)
    if not invoice.items:
        logger.warning("No items found in %s", source_file)
    return ProcessedInvoice(
        source_file=source_file,
        invoice=invoice,
        ingredients=ingredients,
        raw_metadata={"parser": invoice.parser or "none"},
    )


def process_invoice_pdf(
    pdf_path: str | Path,
    template: VendorTemplate = MALT_MILLER,
) -> ProcessedInvoice:
    """
    Process a single invoice PDF and return the structured result.
    Raises ExtractionError when the PDF cannot be read.
    """
    path = Path(pdf_path)
    text = extract_text_from_pdf(path)
    result = process_text(text, source_file=path.name, template=template)
    logger.info("Extracted %d item(s) from %s", len(result.invoice.items), path.name)
    return result


def _process_one(
    pdf_path: Path,
    output_path: Path,
    template: VendorTemplate,
    cost_unit: str,
) -> ProcessedInvoice:
    """Process one PDF and write its reports; failures are recorded, not raised."""
    try:
        result = process_invoice_pdf(pdf_path, template)
        files = save_report(
            result.invoice,
            result.ingredients,
            output_path,
            supplier=template.supplier,
            cost_unit=cost_unit,
        )
        reports = {k: str(v) for k, v in files.items() if k.endswith("_path")}
        return result.model_copy(update={"raw_metadata": {**result.raw_metadata, "reports": reports}})
    except Exception as e:
        logger.error("Failed to process %s: %s", pdf_path.name, e)
        result = ProcessedInvoice(source_file=pdf_path.name, raw_metadata={"error": str(e)})
        out_file = output_path / f"{pdf_path.stem}_error.json"
        with open(out_file, "w", encoding="utf-8") as f:
            json.dump({"source_file": pdf_path.name, "error": str(e)}, f, indent=2)
        return result


def run_on_folder(
    input_dir: str | Path,
    output_dir: str | Path,
    template: VendorTemplate = MALT_MILLER,
    cost_unit: str = "GBP",
) -> list[ProcessedInvoice]:
    """Process all PDFs in input_dir and write reports per invoice to output_dir."""
    input_path = Path(input_dir)
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    if not input_path.exists():
        input_path.mkdir(parents=True, exist_ok=True)
        return []

    return [_process_one(p, output_path, template, cost_unit) for p in find_pdfs(input_path)]


def find_pdfs(input_dir: str | Path) -> list[Path]:
    input_path = Path(input_dir)
    if not input_path.exists():
        return []
    return sorted(p for p in input_path.iterdir() if p.suffix.lower() == ".pdf")

