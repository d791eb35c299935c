# tests/test_invoice_calculator.py

from decimal import Decimal

from gst_billing.business_logic.entities.tax_configuration import TaxConfiguration
from gst_billing.business_logic.invoice_calculator import (
    calculate_totals, calculate_tax_component, quantity_summary
)

from conftest import make_line

GST_12 = TaxConfiguration(enabled=True, rate=Decimal("12"))
NO_GST = TaxConfiguration(enabled=False, rate=Decimal("12"))


def _items():
    return [
        make_line("1", "Sugar", rate="100", quantity="2", packing="1 kg"),
        make_line("2", "Tea", rate="50.5", quantity="1", unit="Pkt", packing="500 gm"),
    ]


def test_totals_with_gst_split_into_equal_halves():
    totals = calculate_totals(_items(), GST_12)

    assert totals.subtotal == Decimal("250.5")
    # 250.5 x 6% = 15.03 per half
    assert totals.cgst_amount == Decimal("15")
    assert totals.sgst_amount == Decimal("15")
    assert totals.tax_amount == Decimal("30")
    assert totals.grand_total == Decimal("280.5")
    assert totals.amount_in_words == "Two Hundred and Eighty One Only"


def test_totals_without_gst():
    totals = calculate_totals(_items(), NO_GST)

    assert totals.cgst_amount == Decimal("0")
    assert totals.sgst_amount == Decimal("0")
    assert totals.grand_total == totals.subtotal == Decimal("250.5")


def test_each_half_is_rounded_on_its_own():
    tax = TaxConfiguration(enabled=True, rate=Decimal("5"))
    # 100 x 2.5% = 2.5 rounds up to 3 on each side
    assert calculate_tax_component(Decimal("100"), tax) == Decimal("3")
    totals = calculate_totals([make_line(rate="100", quantity="1")], tax)
    assert totals.cgst_amount == totals.sgst_amount == Decimal("3")
    assert totals.grand_total == Decimal("106")


def test_weight_and_quantity_totals():
    totals = calculate_totals(_items(), GST_12)

    assert totals.total_quantity == Decimal("3")
    assert totals.total_weight_grams == Decimal("2500")
    assert totals.weight_display == "2 Kg 500 Gm"
    assert quantity_summary(totals) == "2 Kg 500 Gm"


def test_rows_without_readable_packing_add_no_weight():
    items = [make_line("1", "Soap", rate="35", quantity="3", unit="Pcs", packing=None),
             make_line("2", "Gift Box", rate="10", quantity="1", unit="Pcs", packing="assorted")]
    totals = calculate_totals(items, NO_GST)

    assert totals.total_weight_grams == Decimal("0")
    assert totals.weight_display == "-"
    assert quantity_summary(totals) == "4"


def test_empty_cart():
    totals = calculate_totals([], GST_12)

    assert totals.subtotal == Decimal("0")
    assert totals.grand_total == Decimal("0")
    assert totals.amount_in_words == "Zero"


def test_calculation_is_deterministic():
    assert calculate_totals(_items(), GST_12) == calculate_totals(_items(), GST_12)
