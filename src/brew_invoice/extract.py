"""
PDF text extraction.
Uses pdfplumber to read each page's text fragments in content-stream order and flattens
them into a single blob: fragments separated by spaces, pages separated by newlines.
No attempt is made to reconstruct columns.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import pdfplumber

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when a PDF cannot be opened or its text stream cannot be decoded."""


def _clean_fragment(fragment: str | None) -> str:
    return re.sub(r"[ \t\r\f\v]+", " ", fragment or "").strip()


def join_page_fragments(pages: Iterable[Iterable[str]]) -> str:
    """Concatenate fragments per page in encounter order; one line per page."""
    lines: list[str] = []
    for fragments in pages:
        parts = [_clean_fragment(f) for f in fragments]
        lines.append(" ".join(p for p in parts if p))
    return "\n".join(lines)


def _page_fragments(page) -> list[str]:
    words = page.extract_words(use_text_flow=True, keep_blank_chars=True)
    return [w.get("text", "") for w in words]


def extract_text_from_pdf(path: str | Path) -> str:
    """
    Extract the text stream of a PDF as a single normalized string.
    Raises ExtractionError if the file is missing or cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise ExtractionError(f"PDF not found: {path}")
    if path.suffix.lower() != ".pdf":
        raise ExtractionError(f"Not a PDF file: {path.name}")

    try:
        with pdfplumber.open(path) as pdf:
            pages = [_page_fragments(page) for page in pdf.pages]
    except Exception as exc:
        raise ExtractionError(f"Failed to parse PDF {path.name}: {exc}") from exc

    text = join_page_fragments(pages)
    logger.debug("Extracted %d characters from %d page(s) of %s", len(text), len(pages), path.name)
    return text
