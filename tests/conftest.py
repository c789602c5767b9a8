"""Shared invoice text fixtures."""

import pytest

INVOICE_TEXT = (
    "The Malt Miller Invoice Number: 12345 Invoice Date: 15/03/2024 Payment Method: Card\n"
    "Product Quantity Weight Price VAT Line Total "
    "Maris Otter Pale Malt EQU-11-022 3923299000 GB 2 12.5kg £18.00 £3.00 £21.00 "
    "Chinook Hop Pellets HOP-22-001 1211000000 US 1 0.1kg £5.00 £1.00 £6.00 "
    "Subtotal £27.00 Delivery £0.00 Total £27.00"
)


@pytest.fixture
def invoice_text() -> str:
    return INVOICE_TEXT
