# tests/test_analytics_manager.py

import json
from datetime import date
from decimal import Decimal

import pytest

from gst_billing.business_logic.analytics_manager import (
    AnalyticsManager, compute_sales_stats, build_insight_request,
    build_insight_prompt, parse_insight_response
)
from gst_billing.business_logic.exceptions import ValidationError

from conftest import make_invoice, make_line


class StaticInvoiceManager:
    def __init__(self, invoices):
        self.invoices = invoices

    def get_all_invoices(self):
        return list(self.invoices)


def _sales():
    return [
        make_invoice("1", invoice_date="01/03/2024", items=[
            make_line("1", "Sugar", rate="42", quantity="10"),
            make_line("2", "Tea", rate="120.5", quantity="1", unit="Pkt"),
        ]),
        make_invoice("2", invoice_date="2024-03-02", items=[
            make_line("1", "Tea", rate="120.5", quantity="2", unit="Pkt"),
        ]),
        make_invoice("3", invoice_date="not a date", items=[
            make_line("1", "Soap", rate="35", quantity="1", unit="Pcs"),
        ]),
    ]


def test_sales_stats_totals():
    stats = compute_sales_stats(_sales())

    assert stats.total_revenue == Decimal("816.5")
    assert stats.bill_count == 3
    assert stats.average_bill_value.quantize(Decimal("0.01")) == Decimal("272.17")
    assert stats.top_product_name == "Sugar"
    assert stats.top_product_value == Decimal("420")
    assert [(p.name, p.value) for p in stats.top_products] == [
        ("Sugar", Decimal("420")), ("Tea", Decimal("361.5")), ("Soap", Decimal("35"))]


def test_daily_revenue_skips_unreadable_dates_only_in_the_chart():
    stats = compute_sales_stats(_sales())

    assert [(p.day, p.revenue) for p in stats.daily_revenue] == [
        (date(2024, 3, 1), Decimal("540.5")),
        (date(2024, 3, 2), Decimal("241")),
    ]


def test_daily_revenue_keeps_last_ten_days_in_order():
    invoices = [make_invoice(str(n), invoice_date=f"{n:02d}/01/2024") for n in range(12, 0, -1)]

    days = [p.day.day for p in compute_sales_stats(invoices).daily_revenue]

    assert days == list(range(3, 13))


def test_top_products_limited_to_five():
    invoices = [make_invoice("1", items=[
        make_line(str(n), f"Item {n}", rate=str(n), quantity="1") for n in range(1, 8)])]

    top = compute_sales_stats(invoices).top_products

    assert [p.name for p in top] == ["Item 7", "Item 6", "Item 5", "Item 4", "Item 3"]


def test_stats_of_no_sales():
    stats = compute_sales_stats([])

    assert stats.bill_count == 0
    assert stats.total_revenue == Decimal("0")
    assert stats.average_bill_value == Decimal("0")
    assert stats.top_product_name == "N/A"
    assert stats.daily_revenue == ()


def test_insight_request_needs_data():
    with pytest.raises(ValidationError):
        build_insight_request([])


def test_insight_request_payload():
    request = build_insight_request(_sales())

    assert request["metrics"] == {
        "total_revenue": 816.5,
        "number_of_bills": 3,
        "average_bill_value": pytest.approx(272.1667, rel=1e-4),
        "top_selling_product_by_revenue": "Sugar",
    }
    first = request["transactions"][0]
    assert first == {"date": "01/03/2024", "total": 540.5, "customer": "Ram Traders",
                     "city": "Surat", "items": "Sugar (10 Kg), Tea (1 Pkt)"}
    assert request["response_schema"]["required"] == [
        "business_health", "top_performing_product_insight",
        "customer_behavior_insight", "actionable_tips"]


def test_insight_prompt_is_deterministic():
    prompt = build_insight_prompt(build_insight_request(_sales()))

    assert prompt == build_insight_prompt(build_insight_request(_sales()))
    assert '"total_revenue": 816.5' in prompt
    assert "actionable_tips" in prompt


def test_parse_insight_response():
    insight = parse_insight_response(json.dumps({
        "business_health": "Stable",
        "top_performing_product_insight": "Sugar leads",
        "customer_behavior_insight": "Repeat buyers",
        "actionable_tips": ["Stock more tea", "Offer combos"],
    }))

    assert insight.business_health == "Stable"
    assert insight.actionable_tips == ("Stock more tea", "Offer combos")


def test_parse_insight_response_accepts_single_tip():
    insight = parse_insight_response('{"actionable_tips": "Open on Sundays"}')
    assert insight.actionable_tips == ("Open on Sundays",)
    assert insight.business_health == ""


@pytest.mark.parametrize("text", ["", "   ", "not json", "[1, 2]", '{"actionable_tips": 5}'])
def test_parse_insight_response_rejects_malformed(text):
    with pytest.raises(ValidationError):
        parse_insight_response(text)


def test_analytics_manager_reads_saved_bills():
    manager = AnalyticsManager(StaticInvoiceManager(_sales()))

    assert manager.get_sales_stats().bill_count == 3
    assert "Here is the raw transaction data" in manager.get_insight_prompt()


def test_analytics_manager_requires_invoice_manager():
    with pytest.raises(ValueError):
        AnalyticsManager(None)
