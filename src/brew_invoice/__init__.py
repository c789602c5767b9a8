"""
Brewing invoice sync: PDF invoice -> line items -> canonical ingredients -> Brewfather inventory.
"""

from .pipeline import process_invoice_pdf, process_text, run_on_folder
from .models import CanonicalIngredient, InvoiceDocument, MatchResult, RawLineItem

__all__ = [
    "process_invoice_pdf",
    "process_text",
    "run_on_folder",
    "CanonicalIngredient",
    "InvoiceDocument",
    "MatchResult",
    "RawLineItem",
]
