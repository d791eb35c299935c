# gst_billing/business_logic/invoice_calculator.py

from typing import Iterable, Sequence
from decimal import Decimal

from .entities.line_item_entity import LineItemEntity
from .entities.tax_configuration import TaxConfiguration
from .entities.invoice_totals import InvoiceTotals
from gst_billing.utils.money import (
    round_half_up, amount_in_words, parse_packing_grams, format_weight, format_quantity
)

import logging
logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def calculate_subtotal(items: Iterable[LineItemEntity]) -> Decimal:
    return sum((item.quantity * item.rate for item in items), ZERO)


def calculate_tax_component(subtotal: Decimal, tax: TaxConfiguration) -> Decimal:
    """One of the two GST halves, rounded to whole currency units."""
    if not tax.enabled:
        return ZERO
    return round_half_up(subtotal * tax.half_rate / 100)


def calculate_weight_grams(items: Iterable[LineItemEntity]) -> Decimal:
    """Sums packing weight x quantity. Rows whose packing can't be read add nothing."""
    total = ZERO
    for item in items:
        grams = parse_packing_grams(item.packing)
        if grams is not None:
            total += grams * item.quantity
    return total


def calculate_totals(items: Sequence[LineItemEntity], tax: TaxConfiguration) -> InvoiceTotals:
    """
    Derives every figure printed on a bill from its rows and the tax snapshot.

    Pure: the same rows and tax configuration always give the same result.
    CGST and SGST are each rounded on their own rather than halving a rounded
    total, so the two always match.
    """
    subtotal = calculate_subtotal(items)
    cgst = calculate_tax_component(subtotal, tax)
    sgst = calculate_tax_component(subtotal, tax)
    grand_total = subtotal + cgst + sgst
    weight_grams = calculate_weight_grams(items)

    totals = InvoiceTotals(
        subtotal=subtotal,
        cgst_amount=cgst,
        sgst_amount=sgst,
        grand_total=grand_total,
        total_quantity=sum((item.quantity for item in items), ZERO),
        total_weight_grams=weight_grams,
        weight_display=format_weight(weight_grams),
        amount_in_words=amount_in_words(round_half_up(grand_total)),
    )
    logger.debug(f"Calculated totals for {len(items)} items: subtotal={subtotal}, "
                 f"cgst={cgst}, sgst={sgst}, grand_total={grand_total}")
    return totals


def quantity_summary(totals: InvoiceTotals) -> str:
    """Weight text when any row has a readable packing, otherwise the plain quantity sum."""
    if totals.has_weight:
        return totals.weight_display
    return format_quantity(totals.total_quantity)
