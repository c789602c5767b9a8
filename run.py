#!/usr/bin/env python3
"""
Brewing invoice sync - CLI entry point.

Usage:
  python run.py extract                     # Parse ./input PDFs, write reports to ./output
  python run.py extract --input Invoices --output ./reports
  python run.py test                        # Check Brewfather credentials
  python run.py list                        # List Brewfather inventory
  python run.py match                       # Show how invoice items match the inventory
  python run.py sync                        # Add invoice quantities to the inventory

Credentials come from BREWFATHER_USER_ID / BREWFATHER_API_KEY (environment or .env).
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from brew_invoice.brewfather import BrewfatherClient
from brew_invoice.config import Settings, load_settings
from brew_invoice.models import CategorySyncReport, ProcessedInvoice
from brew_invoice.pipeline import find_pdfs, process_invoice_pdf, run_on_folder
from brew_invoice.reports import build_report, format_summary
from brew_invoice.sync import analyze_matches, summarize, sync_ingredients


def _client(settings: Settings) -> BrewfatherClient:
    return BrewfatherClient.from_settings(settings)


def _parse_inputs(input_path: Path, settings: Settings) -> list[ProcessedInvoice]:
    pdfs = find_pdfs(input_path)
    if not pdfs:
        print(f"No PDF files found in {input_path.absolute()}")
        return []
    print(f"Found {len(pdfs)} PDF file(s): {', '.join(p.name for p in pdfs)}\n")
    return [process_invoice_pdf(p, settings.template()) for p in pdfs]


def cmd_extract(args: argparse.Namespace, settings: Settings) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        input_path.mkdir(parents=True, exist_ok=True)
        print(f"Created input directory: {input_path.absolute()}. Add PDFs and run again.")
        return 0

    results = run_on_folder(input_path, args.output, settings.template(), settings.cost_unit)
    for r in results:
        if r.raw_metadata.get("error"):
            print(f"  - {r.source_file}: ERROR {r.raw_metadata['error']}")
            continue
        print(format_summary(build_report(r.invoice, r.ingredients)))
        print(f"  - {r.source_file}: {len(r.ingredients)} ingredient(s), parser {r.raw_metadata.get('parser')}")
    print(f"Processed {len(results)} invoice(s). Output in: {Path(args.output).absolute()}")
    return 0


def cmd_test(args: argparse.Namespace, settings: Settings) -> int:
    ok, message = _client(settings).test_connection()
    print(message)
    return 0 if ok else 1


def cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    client = _client(settings)
    for category in ("fermentable", "hop", "yeast", "misc"):
        entries = client.get_inventory(category)
        print(f"{category.upper()}S ({len(entries)} items):")
        print("-" * 40)
        if not entries:
            print("  No items found\n")
            continue
        for e in entries:
            print(f"  • {e.name}")
            print(f"    Stock: {e.current_amount} {e.unit}")
        print("")
    return 0


def cmd_match(args: argparse.Namespace, settings: Settings) -> int:
    client = _client(settings)
    for result in _parse_inputs(Path(args.input), settings):
        if not result.ingredients:
            print(f"No items found in {result.source_file}")
            continue
        matches = analyze_matches(client, result.ingredients)
        exact = partial = missing = 0
        print(f"INGREDIENT MATCHING RESULTS: {result.source_file}")
        print("=" * 60)
        for ing in result.ingredients:
            match = matches[ing.name]
            if match.found:
                entry = match.catalog_entry
                label = "EXACT MATCH" if match.confidence == "high" else "PARTIAL MATCH"
                print(f"{label}: {ing.name}")
                print(f"   -> Brewfather: {entry.name}")
                print(f"   -> Current stock: {entry.current_amount} {entry.unit}")
                print(f"   -> Will add: {ing.amount} {ing.unit}")
                if match.confidence == "high":
                    exact += 1
                else:
                    print("   -> Please verify this is the correct item")
                    partial += 1
            else:
                print(f"NO MATCH: {ing.name} ({ing.type}, {ing.amount} {ing.unit})")
                if match.suggestions:
                    print("   -> Similar items in Brewfather:")
                    for s in match.suggestions:
                        print(f"     • {s.name}")
                else:
                    print("   -> No similar items found in Brewfather")
                missing += 1
            print("")
        print(f"Exact matches: {exact}")
        print(f"Partial matches: {partial} (verify before updating)")
        print(f"No matches: {missing} (add to Brewfather manually first)\n")
    return 0


def _print_sync_reports(reports: list[CategorySyncReport]) -> None:
    print("\nSYNC RESULTS SUMMARY:\n")
    for report in reports:
        name = report.category.upper()
        if report.error:
            print(f"{name} - Failed: {report.error}")
        for r in report.results:
            if r.success:
                print(f"   {name} • {r.name}: {r.current_amount} -> {r.new_amount} {r.unit} (+{r.adjusted_by} {r.unit})")
            elif r.action == "not_found":
                print(f"   {name} • {r.name}: not found in Brewfather")
            else:
                print(f"   {name} • {r.name}: {r.error}")
    for category, counts in summarize(reports).items():
        print(f"{category}: {counts['successful']} updated, {counts['not_found']} not found, {counts['errors']} error(s)")


def cmd_sync(args: argparse.Namespace, settings: Settings) -> int:
    client = _client(settings)
    for result in _parse_inputs(Path(args.input), settings):
        print(f"Processing: {result.source_file} ({len(result.ingredients)} ingredient(s))")
        reports = sync_ingredients(client, result.ingredients, cost_unit=settings.cost_unit)
        _print_sync_reports(reports)
    return 0


COMMANDS = {
    "extract": cmd_extract,
    "test": cmd_test,
    "list": cmd_list,
    "match": cmd_match,
    "sync": cmd_sync,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Parse brewing supply invoices and sync them with Brewfather inventory."
    )
    parser.add_argument("command", choices=sorted(COMMANDS), help="Action to run")
    parser.add_argument(
        "--input",
        "-i",
        type=str,
        default="./input",
        help="Input directory containing PDF invoices (default: ./input)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="./output",
        help="Output directory for reports (default: ./output)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return COMMANDS[args.command](args, load_settings())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
