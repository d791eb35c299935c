# gst_billing/business_logic/analytics_manager.py

import json
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from .entities.invoice_entity import InvoiceEntity
from .exceptions import ValidationError
from gst_billing.constants import (
    ANALYTICS_DAILY_WINDOW, ANALYTICS_TOP_PRODUCTS, ANALYTICS_NO_PRODUCT, INSIGHT_RESPONSE_FIELDS
)
from gst_billing.utils.date_converter import parse_any_date
from gst_billing.utils.money import format_quantity

if TYPE_CHECKING:
    from .invoice_manager import InvoiceManager

import logging
logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class DailyRevenue:
    date_text: str   # the date exactly as written on the bills
    day: date
    revenue: Decimal


@dataclass(frozen=True)
class ProductShare:
    name: str
    value: Decimal


@dataclass(frozen=True)
class SalesStats:
    total_revenue: Decimal
    bill_count: int
    average_bill_value: Decimal
    top_product_name: str
    top_product_value: Decimal
    daily_revenue: Tuple[DailyRevenue, ...] = field(default_factory=tuple)
    top_products: Tuple[ProductShare, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BusinessInsight:
    business_health: str
    top_performing_product_insight: str
    customer_behavior_insight: str
    actionable_tips: Tuple[str, ...] = field(default_factory=tuple)


def _product_revenue(invoices: Sequence[InvoiceEntity]) -> List[Tuple[str, Decimal]]:
    """Revenue per product name, highest first; ties keep first-seen order."""
    totals: Dict[str, Decimal] = {}
    for inv in invoices:
        for item in inv.items:
            totals[item.name] = totals.get(item.name, ZERO) + item.amount
    return sorted(totals.items(), key=lambda pair: pair[1], reverse=True)


def _daily_revenue(invoices: Sequence[InvoiceEntity]) -> Tuple[DailyRevenue, ...]:
    by_date: Dict[str, Decimal] = {}
    for inv in invoices:
        if inv.invoice_date:
            by_date[inv.invoice_date] = by_date.get(inv.invoice_date, ZERO) + inv.total

    points = []
    for date_text, revenue in by_date.items():
        day = parse_any_date(date_text)
        if day is None:
            logger.warning(f"Analytics: unreadable bill date '{date_text}' left out of the daily chart.")
            continue
        points.append(DailyRevenue(date_text=date_text, day=day, revenue=revenue))
    points.sort(key=lambda p: p.day)
    return tuple(points[-ANALYTICS_DAILY_WINDOW:])


def compute_sales_stats(invoices: Sequence[InvoiceEntity]) -> SalesStats:
    total_revenue = sum((inv.total for inv in invoices), ZERO)
    bill_count = len(invoices)
    average = total_revenue / bill_count if bill_count else ZERO
    ranked = _product_revenue(invoices)
    top_name, top_value = ranked[0] if ranked else (ANALYTICS_NO_PRODUCT, ZERO)

    return SalesStats(
        total_revenue=total_revenue,
        bill_count=bill_count,
        average_bill_value=average,
        top_product_name=top_name,
        top_product_value=top_value,
        daily_revenue=_daily_revenue(invoices),
        top_products=tuple(ProductShare(name, value) for name, value in ranked[:ANALYTICS_TOP_PRODUCTS]),
    )


def _json_number(value: Decimal):
    return int(value) if value == value.to_integral_value() else float(value)


def build_insight_request(invoices: Sequence[InvoiceEntity], stats: Optional[SalesStats] = None) -> Dict[str, Any]:
    """
    The data handed to a text-generation service for a written summary:
    pre-computed metrics, one entry per bill and the expected answer shape.
    """
    if not invoices:
        raise ValidationError("Not enough data to generate insights. Create some bills first.")
    stats = stats or compute_sales_stats(invoices)

    transactions = [{
        "date": inv.invoice_date,
        "total": _json_number(inv.total),
        "customer": inv.customer_name,
        "city": inv.customer_city,
        "items": ", ".join(f"{i.name} ({format_quantity(i.quantity)} {i.unit})" for i in inv.items),
    } for inv in invoices]

    return {
        "metrics": {
            "total_revenue": _json_number(stats.total_revenue),
            "number_of_bills": stats.bill_count,
            "average_bill_value": _json_number(stats.average_bill_value),
            "top_selling_product_by_revenue": stats.top_product_name,
        },
        "transactions": transactions,
        "response_schema": {
            "type": "object",
            "properties": {
                "business_health": {"type": "string"},
                "top_performing_product_insight": {"type": "string"},
                "customer_behavior_insight": {"type": "string"},
                "actionable_tips": {"type": "array", "items": {"type": "string"}},
            },
            "required": list(INSIGHT_RESPONSE_FIELDS),
        },
    }


def build_insight_prompt(request: Dict[str, Any]) -> str:
    metrics = json.dumps(request["metrics"], sort_keys=True)
    transactions = json.dumps(request["transactions"], sort_keys=True)
    return (
        "You are a business analyst assistant.\n\n"
        f"Here are the key calculated metrics for the business:\n{metrics}\n\n"
        f"Here is the raw transaction data:\n{transactions}\n\n"
        "Please analyze this data, focusing on total revenue, the volume of bills, "
        "the average bill value and the top selling products.\n"
        "Respond in JSON with the keys: " + ", ".join(INSIGHT_RESPONSE_FIELDS) + ". "
        "\"actionable_tips\" is an array of 3 data-driven tips."
    )


def parse_insight_response(text: str) -> BusinessInsight:
    if not text or not text.strip():
        raise ValidationError("The insight response was empty.")
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ValidationError(f"The insight response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("The insight response must be a JSON object.")

    tips = data.get("actionable_tips") or []
    if isinstance(tips, str):
        tips = [tips]
    if not isinstance(tips, list):
        raise ValidationError("'actionable_tips' must be a list of strings.")
    return BusinessInsight(
        business_health=str(data.get("business_health") or ""),
        top_performing_product_insight=str(data.get("top_performing_product_insight") or ""),
        customer_behavior_insight=str(data.get("customer_behavior_insight") or ""),
        actionable_tips=tuple(str(tip) for tip in tips),
    )


class AnalyticsManager:
    def __init__(self, invoice_manager: 'InvoiceManager'):
        if invoice_manager is None:
            raise ValueError("invoice_manager cannot be None")
        self.invoice_manager = invoice_manager

    def get_sales_stats(self) -> SalesStats:
        stats = compute_sales_stats(self.invoice_manager.get_all_invoices())
        logger.debug(f"Sales stats: {stats.bill_count} bills, revenue {stats.total_revenue}.")
        return stats

    def get_insight_prompt(self) -> str:
        invoices = self.invoice_manager.get_all_invoices()
        request = build_insight_request(invoices, compute_sales_stats(invoices))
        return build_insight_prompt(request)
