"""Tests for invoice text parsing."""

import pytest

from brew_invoice.models import RawLineItem
from brew_invoice.parsers import (
    MALT_MILLER,
    VendorTemplate,
    extract_line_items,
    parse_invoice_text,
    parse_item_text,
    parse_line_items,
    parse_metadata,
    parse_tabular_items,
)

HEADER = "Product Quantity Weight Price VAT Line Total"


class TestParseItemText:
    def test_strips_codes_and_multiplies_count_by_weight(self):
        item = parse_item_text("Maris Otter Pale Malt EQU-11-022 3923299000 GB 2 12.5kg", 21.0)
        assert item == RawLineItem(
            name="Maris Otter Pale Malt",
            quantity=25,
            unit="kg",
            price=21.0,
            raw_line="Maris Otter Pale Malt EQU-11-022 3923299000 GB 2 12.5kg",
        )

    def test_zero_weight_means_sold_by_count(self):
        item = parse_item_text("Whirlfloc Tablets WF-01-001 3 0.0kg", 4.5)
        assert item.name == "Whirlfloc Tablets"
        assert item.quantity == 3
        assert item.unit == "each"

    def test_count_with_non_mass_unit(self):
        item = parse_item_text("Lactic Acid 80% 2 100ml", 5.0)
        assert item.quantity == 2
        assert item.unit == "ml"

    def test_without_quantity_defaults_to_one_each(self):
        item = parse_item_text("Brewing Salts Pack", 3.0)
        assert item.quantity == 1
        assert item.unit == "each"

    def test_codes_inside_the_name_are_kept(self):
        item = parse_item_text("Crystal Malt EBC 150 EQU-11-030 GB 1 1kg", 3.0)
        assert item.name == "Crystal Malt EBC 150"

    @pytest.mark.parametrize("text", ["", "  ", "ab", "GB 1 1kg"])
    def test_unusable_text_returns_none(self, text):
        assert parse_item_text(text, 1.0) is None


class TestTabularStrategy:
    def test_parses_both_items(self, invoice_text):
        items = parse_tabular_items(invoice_text)
        assert [i.name for i in items] == ["Maris Otter Pale Malt", "Chinook Hop Pellets"]
        assert items[0].quantity == 25
        assert items[0].price == 21.0
        assert items[1].quantity == pytest.approx(0.1)
        assert items[1].unit == "kg"
        assert items[1].price == 6.0

    def test_item_count_is_amount_groups(self):
        text = (
            f"{HEADER} Pale Malt 1 1kg £1.00 £0.20 £1.20 "
            "Crystal Malt 1 1kg £2.00 £0.40 £2.40 Gift note £9.99"
        )
        items = parse_tabular_items(text)
        assert len(items) == 2
        assert [i.price for i in items] == [1.20, 2.40]

    def test_line_total_is_last_amount_of_group(self):
        text = f"{HEADER} Munich Malt 2 1kg £5.00 £1.00 £1,234.56"
        (item,) = parse_tabular_items(text)
        assert item.price == 1234.56

    def test_no_header_gives_nothing(self):
        assert parse_tabular_items("Pale Malt 1 1kg £1.00 £0.20 £1.20") == ()

    def test_short_span_is_skipped(self):
        text = f"{HEADER} ab £1.00 £0.20 £1.20 Vienna Malt 1 1kg £2.00 £0.40 £2.40"
        items = parse_tabular_items(text)
        assert [i.name for i in items] == ["Vienna Malt"]

    def test_first_item_anchor(self):
        template = VendorTemplate(first_item_anchor="Large Grain Bag")
        text = f"{HEADER} Order ref 998 Large Grain Bag GB-01-002 1 0.0kg £4.00 £0.80 £4.80"
        (item,) = parse_tabular_items(text, template)
        assert item.name == "Large Grain Bag"

    def test_missing_anchor_starts_after_header(self):
        template = VendorTemplate(first_item_anchor="Not On This Invoice")
        text = f"{HEADER} Pale Malt 1 1kg £1.00 £0.20 £1.20"
        (item,) = parse_tabular_items(text, template)
        assert item.name == "Pale Malt"


class TestLineScanStrategy:
    def test_opens_on_keyword_and_closes_on_price(self):
        text = "Gypsum 100g\nQty 1 £2.50\nThank you for your order"
        (item,) = parse_line_items(text)
        assert item.name == "Gypsum"
        assert item.quantity == 100
        assert item.unit == "g"
        assert item.price == 2.50

    def test_price_on_the_same_line(self):
        (item,) = parse_line_items("Irish Moss 50g £1.99")
        assert item.name == "Irish Moss"
        assert item.price == 1.99

    def test_unclosed_item_is_kept_without_price(self):
        items = parse_line_items("Cascade Hops 100g\nCitra Hops 50g\n")
        assert [i.name for i in items] == ["Cascade Hops", "Citra Hops"]
        assert all(i.price == 0 for i in items)

    def test_skips_header_and_footer_lines(self):
        assert parse_line_items("Invoice 123\nSubtotal £4.00\nPage 1\n12.50") == ()


class TestStrategyRunner:
    def test_first_non_empty_strategy_wins(self, invoice_text):
        name, items = extract_line_items(invoice_text)
        assert name == "tabular"
        assert len(items) == 2

    def test_falls_back_to_line_scan(self):
        name, items = extract_line_items("Gypsum 100g £1.50")
        assert name == "line_scan"
        assert items[0].name == "Gypsum"

    def test_custom_strategies(self):
        item = RawLineItem(name="Fixed")
        strategies = (("empty", lambda t, tpl: ()), ("fixed", lambda t, tpl: (item,)))
        assert extract_line_items("anything", MALT_MILLER, strategies) == ("fixed", (item,))

    def test_nothing_found(self):
        assert extract_line_items("Hello there\nnothing useful") == (None, ())


class TestMetadata:
    def test_extracts_number_date_total(self, invoice_text):
        assert parse_metadata(invoice_text) == {
            "invoice_number": "12345",
            "date": "15/03/2024",
            "total": 27.0,
        }

    def test_subtotal_is_not_total(self):
        assert parse_metadata("Subtotal £10.00")["total"] is None

    def test_grand_total(self):
        assert parse_metadata("Grand Total: £1,050.00")["total"] == 1050.0

    def test_textual_date(self):
        assert parse_metadata("Invoice Date: 3rd March 2024 Ref 7")["date"] == "3rd March 2024"

    def test_absent_fields_are_none(self):
        assert parse_metadata("") == {"invoice_number": None, "date": None, "total": None}


class TestParseInvoiceText:
    def test_full_invoice(self, invoice_text):
        doc = parse_invoice_text(invoice_text)
        assert doc.invoice_number == "12345"
        assert doc.total == 27.0
        assert doc.parser == "tabular"
        assert len(doc.items) == 2
        assert doc.raw_text == invoice_text

    def test_unrecognisable_text_is_not_an_error(self):
        doc = parse_invoice_text("Hello there\nnothing useful")
        assert doc.items == ()
        assert doc.invoice_number is None
        assert doc.parser is None

    def test_none_text(self):
        doc = parse_invoice_text(None)
        assert doc.items == ()
        assert doc.raw_text == ""

    def test_parsing_is_deterministic(self, invoice_text):
        assert parse_invoice_text(invoice_text) == parse_invoice_text(invoice_text)
