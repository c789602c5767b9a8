from __future__ import annotations

import json
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path

import streamlit as st

from brew_invoice.brewfather import BrewfatherClient, CatalogError, ConfigError
from brew_invoice.config import load_settings
from brew_invoice.extract import ExtractionError
from brew_invoice.models import ProcessedInvoice
from brew_invoice.pipeline import process_invoice_pdf
from brew_invoice.reports import brewfather_csv
from brew_invoice.sync import analyze_matches, summarize, sync_ingredients


@dataclass(frozen=True)
class _ParsedUpload:
    filename: str
    result: dict


def _client() -> BrewfatherClient | None:
    try:
        return BrewfatherClient.from_settings(load_settings())
    except ConfigError:
        return None


def _ingredient_rows(result: dict) -> list[dict]:
    return [
        {
            "type": ing["type"],
            "name": ing["name"],
            "sub_type": ing["sub_type"],
            "amount": ing["amount"],
            "unit": ing["unit"],
            "cost_per_unit": ing["cost"],
            "origin": ing.get("origin"),
        }
        for ing in result.get("ingredients") or []
    ]


settings = load_settings()

st.set_page_config(
    page_title="Brew Invoice Sync",
    page_icon="🍺",
    layout="wide",
)

st.title("Brewing Invoice → Brewfather Inventory")
st.caption("Upload supplier invoice PDFs → extract ingredients → match and sync with Brewfather.")

with st.sidebar:
    st.header("Brewfather")
    if settings.has_credentials:
        st.success("Credentials detected in environment.")
        if st.button("Test connection"):
            ok, message = BrewfatherClient.from_settings(settings).test_connection()
            (st.success if ok else st.error)(message)
    else:
        st.warning(
            "No `BREWFATHER_USER_ID` / `BREWFATHER_API_KEY` found. "
            "Parsing works offline; matching and sync are disabled."
        )
    st.divider()
    st.caption(f"Supplier template: {settings.supplier}")

uploads = st.file_uploader(
    "Upload supplier invoice PDFs",
    type=["pdf"],
    accept_multiple_files=True,
)

col_a, col_b, _ = st.columns([1, 1, 2])
with col_a:
    run_btn = st.button("Parse invoices", type="primary", disabled=not uploads)
with col_b:
    clear_btn = st.button("Clear results")

if clear_btn:
    st.session_state.pop("parsed_uploads", None)
    st.rerun()

if run_btn and uploads:
    parsed_uploads: list[_ParsedUpload] = []
    with st.spinner(f"Parsing {len(uploads)} PDF(s)…"):
        for upload in uploads:
            with tempfile.TemporaryDirectory() as tmp_dir:
                pdf_path = Path(tmp_dir) / upload.name
                pdf_path.write_bytes(upload.getvalue())
                try:
                    r = process_invoice_pdf(pdf_path, settings.template())
                    parsed_uploads.append(_ParsedUpload(filename=upload.name, result=r.model_dump()))
                except ExtractionError as e:
                    parsed_uploads.append(
                        _ParsedUpload(
                            filename=upload.name,
                            result={"source_file": upload.name, "ingredients": [], "raw_metadata": {"error": str(e)}},
                        )
                    )
    st.session_state["parsed_uploads"] = [asdict(x) for x in parsed_uploads]

raw = st.session_state.get("parsed_uploads") or []
results: list[_ParsedUpload] = [_ParsedUpload(**x) for x in raw]  # type: ignore[arg-type]

if not results:
    st.info("Upload PDFs and click **Parse invoices** to see results.")
    st.stop()

tabs = st.tabs([f"{i + 1}. {r.filename}" for i, r in enumerate(results)])
for tab, inv in zip(tabs, results):
    with tab:
        meta = inv.result.get("raw_metadata") or {}
        if meta.get("error"):
            st.error(f"Pipeline error: {meta['error']}")
            continue

        processed = ProcessedInvoice.model_validate(inv.result)
        doc = processed.invoice
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Invoice", doc.invoice_number or "—")
        c2.metric("Date", doc.date or "—")
        c3.metric("Total", f"£{doc.total:.2f}" if doc.total is not None else "—")
        c4.metric("Ingredients", len(processed.ingredients))
        st.caption(f"Parser: `{meta.get('parser', 'unknown')}`")

        st.subheader("Ingredients")
        st.dataframe(_ingredient_rows(inv.result), use_container_width=True, hide_index=True)

        client = _client()
        m_col, s_col = st.columns(2)
        with m_col:
            if st.button("Analyze matches", key=f"match_{inv.filename}", disabled=client is None):
                try:
                    matches = analyze_matches(client, processed.ingredients)
                except CatalogError as e:
                    st.error(str(e))
                else:
                    st.dataframe(
                        [
                            {
                                "ingredient": name,
                                "found": m.found,
                                "confidence": m.confidence,
                                "brewfather": m.catalog_entry.name if m.catalog_entry else None,
                                "current_stock": m.catalog_entry.current_amount if m.catalog_entry else None,
                                "suggestions": ", ".join(s.name for s in m.suggestions),
                            }
                            for name, m in matches.items()
                        ],
                        use_container_width=True,
                        hide_index=True,
                    )
        with s_col:
            if st.button("Sync to Brewfather", key=f"sync_{inv.filename}", disabled=client is None):
                reports = sync_ingredients(client, processed.ingredients, cost_unit=settings.cost_unit)
                st.json(summarize(reports))
                for report in reports:
                    if report.error:
                        st.error(f"{report.category}: {report.error}")
                    st.dataframe(
                        [r.model_dump() for r in report.results],
                        use_container_width=True,
                        hide_index=True,
                    )

        st.subheader("Parsed invoice")
        st.json(inv.result)

        st.download_button(
            "Download invoice JSON",
            data=json.dumps(inv.result, indent=2, ensure_ascii=False).encode("utf-8"),
            file_name=f"{Path(inv.filename).stem}_invoice.json",
            mime="application/json",
            key=f"json_{inv.filename}",
        )
        st.download_button(
            "Download Brewfather CSV",
            data=brewfather_csv(processed.ingredients, settings.cost_unit, settings.supplier).encode("utf-8"),
            file_name=f"{Path(inv.filename).stem}_brewfather.csv",
            mime="text/csv",
            key=f"csv_{inv.filename}",
        )
