# gst_billing/utils/date_converter.py

from datetime import date, datetime
from typing import Optional, Union

from gst_billing.constants import DATE_FORMAT


def to_bill_date_str(value: Optional[date]) -> str:
    """Formats a date the way bills carry it: DD/MM/YYYY."""
    if value is None:
        return "-"
    if not isinstance(value, (date, datetime)):
        return str(value)
    return value.strftime(DATE_FORMAT)


def parse_bill_date(text: Optional[str]) -> Optional[date]:
    """Parses a day-first DD/MM/YYYY string. Returns None when it cannot be read."""
    if not isinstance(text, str) or not text:
        return None
    try:
        parts = [int(p.strip()) for p in text.split('/')]
        if len(parts) != 3:
            return None
        day, month, year = parts
        return date(year, month, day)
    except (ValueError, TypeError):
        return None


def parse_any_date(text: Optional[str]) -> Optional[date]:
    """
    Lenient parse used by analytics: DD/MM/YYYY, YYYY-MM-DD or DD-MM-YYYY.
    """
    if not isinstance(text, str) or not text.strip():
        return None
    text = text.strip()
    if '/' in text:
        return parse_bill_date(text)
    if '-' in text:
        parts = [p.strip() for p in text.split('-')]
        if len(parts) != 3:
            return None
        try:
            if len(parts[0]) == 4:
                year, month, day = map(int, parts)
            else:
                day, month, year = map(int, parts)
            return date(year, month, day)
        except (ValueError, TypeError):
            return None
    return None


def from_qdate(q_date: 'QDate') -> date:
    """Converts a PyQt QDate to a standard date."""
    return q_date.toPyDate()


def to_qdate(g_date: Optional[Union[date, datetime]]) -> 'QDate':
    """Converts a standard date to a PyQt QDate (today when None)."""
    from PyQt5.QtCore import QDate
    if g_date is None:
        return QDate.currentDate()
    return QDate(g_date.year, g_date.month, g_date.day)
