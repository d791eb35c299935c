# gst_billing/business_logic/history_manager.py

import csv
import io
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from .entities.invoice_entity import InvoiceEntity
from gst_billing.constants import CSV_HEADERS, ISO_DATE_FORMAT
from gst_billing.utils.date_converter import parse_bill_date
from gst_billing.utils.money import format_amount, format_quantity

import logging
logger = logging.getLogger(__name__)


def _matches_search(invoice: InvoiceEntity, term: str) -> bool:
    if not term:
        return True
    return term in invoice.customer_name.lower() or term in str(invoice.id).lower()


def _within_range(invoice: InvoiceEntity, start_date: Optional[date], end_date: Optional[date]) -> bool:
    if start_date is None and end_date is None:
        return True
    bill_date = parse_bill_date(invoice.invoice_date)
    if bill_date is None:
        # a date we cannot read never hides a bill
        return True
    if start_date is not None and bill_date < start_date:
        return False
    if end_date is not None and bill_date > end_date:
        return False
    return True


def filter_invoices(invoices: Iterable[InvoiceEntity],
                    search_term: str = "",
                    start_date: Optional[date] = None,
                    end_date: Optional[date] = None) -> List[InvoiceEntity]:
    """
    Keeps bills whose customer name or bill number contains search_term
    (case-insensitive) and whose date lies in [start_date, end_date].
    """
    term = (search_term or "").strip().lower()
    return [inv for inv in invoices
            if _matches_search(inv, term) and _within_range(inv, start_date, end_date)]


def _sort_key(invoice: InvoiceEntity):
    number = invoice.numeric_id
    if number is None:
        return (1, 0)
    return (0, -number)


def sort_invoices(invoices: Iterable[InvoiceEntity]) -> List[InvoiceEntity]:
    """Newest bill number first. Non-numeric bill numbers go last in their original order."""
    return sorted(invoices, key=_sort_key)


def query_invoices(invoices: Iterable[InvoiceEntity],
                   search_term: str = "",
                   start_date: Optional[date] = None,
                   end_date: Optional[date] = None) -> List[InvoiceEntity]:
    result = sort_invoices(filter_invoices(invoices, search_term, start_date, end_date))
    logger.debug(f"History query '{search_term}' {start_date}..{end_date}: {len(result)} bills.")
    return result


def items_description(invoice: InvoiceEntity) -> str:
    parts = []
    for item in invoice.items:
        packing = f" {item.packing}" if item.packing else ""
        parts.append(f"{item.name}{packing} ({format_quantity(item.quantity)} {item.unit})")
    return ", ".join(parts)


def export_csv(invoices: Sequence[InvoiceEntity]) -> str:
    """One row per bill under the fixed export header. Fields are quoted as needed, quotes doubled."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for inv in invoices:
        writer.writerow([
            inv.id,
            inv.invoice_date,
            inv.customer_name,
            inv.customer_city,
            items_description(inv),
            format_amount(inv.total),
        ])
    logger.info(f"Exported {len(invoices)} bills to CSV.")
    return buffer.getvalue()


def read_csv(text: str) -> List[Dict[str, str]]:
    """Reads an export back as dicts keyed by the header columns."""
    reader = csv.DictReader(io.StringIO(text))
    return [dict(row) for row in reader]


def export_file_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"invoices_export_{today.strftime(ISO_DATE_FORMAT)}.csv"
