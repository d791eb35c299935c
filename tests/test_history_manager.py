# tests/test_history_manager.py

from datetime import date
from decimal import Decimal

from gst_billing.business_logic import history_manager
from gst_billing.constants import CSV_HEADERS

from conftest import make_invoice, make_line


def _history():
    return [
        make_invoice("2", customer_name="Ram Traders", invoice_date="10/02/2024"),
        make_invoice("10", customer_name="Shyam Stores", invoice_date="01/03/2024"),
        make_invoice("1", customer_name="Gopal & Sons", invoice_date="15/01/2024"),
        make_invoice("OLD-3", customer_name="Ramesh", invoice_date="sometime last year"),
    ]


def test_sort_newest_number_first_non_numeric_last():
    ordered = history_manager.sort_invoices(_history())
    assert [inv.id for inv in ordered] == ["10", "2", "1", "OLD-3"]


def test_search_matches_customer_or_bill_number_case_insensitively():
    hits = history_manager.filter_invoices(_history(), "RAM")
    assert {inv.id for inv in hits} == {"2", "OLD-3"}

    assert [inv.id for inv in history_manager.filter_invoices(_history(), "10")] == ["10"]
    assert len(history_manager.filter_invoices(_history(), "  ")) == 4


def test_date_range_is_inclusive_and_keeps_unreadable_dates():
    hits = history_manager.filter_invoices(_history(), start_date=date(2024, 2, 10), end_date=date(2024, 3, 1))
    assert {inv.id for inv in hits} == {"2", "10", "OLD-3"}


def test_open_ended_range():
    hits = history_manager.filter_invoices(_history(), end_date=date(2024, 1, 31))
    assert {inv.id for inv in hits} == {"1", "OLD-3"}


def test_query_filters_then_sorts():
    result = history_manager.query_invoices(_history(), "s", start_date=date(2024, 1, 1))
    assert [inv.id for inv in result] == ["10", "2", "1", "OLD-3"]


def test_items_description():
    invoice = make_invoice("1", items=[
        make_line("1", "Sugar", quantity="2", unit="Kg", packing="1 kg"),
        make_line("2", "Soap", quantity="1.5", unit="Pcs"),
    ])
    assert history_manager.items_description(invoice) == "Sugar 1 kg (2 Kg), Soap (1.5 Pcs)"


def test_export_csv_layout():
    invoice = make_invoice("7", customer_name='Shah, "A" Traders', customer_city="Surat",
                           items=[make_line("1", "Sugar", rate="100.25", quantity="2")])

    text = history_manager.export_csv([invoice])
    lines = text.split("\n")

    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1] == '7,05/03/2024,"Shah, ""A"" Traders",Surat,Sugar (2 Kg),200.5'
    assert text.endswith("\n")


def test_export_keeps_fractional_quantities():
    invoice = make_invoice("8", items=[make_line("1", "Saffron", rate="1000", quantity="0.125", unit="Gm")])

    rows = history_manager.read_csv(history_manager.export_csv([invoice]))

    assert rows[0]["Items"] == "Saffron (0.125 Gm)"
    assert Decimal(rows[0]["Total Amount"]) == Decimal("125")


def test_export_can_be_read_back():
    invoices = history_manager.sort_invoices(_history())

    rows = history_manager.read_csv(history_manager.export_csv(invoices))

    assert [row["Bill No"] for row in rows] == [inv.id for inv in invoices]
    assert rows[2]["Customer Name"] == "Gopal & Sons"
    assert Decimal(rows[0]["Total Amount"]) == invoices[0].total


def test_export_of_nothing_is_only_the_header():
    assert history_manager.export_csv([]) == ",".join(CSV_HEADERS) + "\n"


def test_export_file_name():
    assert history_manager.export_file_name(date(2024, 3, 5)) == "invoices_export_2024-03-05.csv"
