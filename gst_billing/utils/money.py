# gst_billing/utils/money.py

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from gst_billing.constants import (
    AMOUNT_IN_WORDS_ZERO, AMOUNT_IN_WORDS_SUFFIX, AMOUNT_IN_WORDS_OVERFLOW,
    AMOUNT_IN_WORDS_MAX_DIGITS, PACKING_PATTERN, THOUSAND_BASE_UNITS, WEIGHT_SENTINEL
)

Number = Union[Decimal, int, float, str]

_ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
         "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
         "Seventeen", "Eighteen", "Nineteen"]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

_PACKING_RE = re.compile(PACKING_PATTERN)


def to_decimal(value: Number) -> Decimal:
    """Converts user/DB input to a finite Decimal. Floats go through str() to keep their printed value."""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"'{value}' is not a valid number.") from e
    if not result.is_finite():
        raise ValueError(f"'{value}' is not a finite number.")
    return result


def round_half_up(value: Number) -> Decimal:
    """Rounds to the nearest whole currency unit, halves away from zero."""
    return to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def format_amount(value: Number) -> str:
    """Plain text for an amount: no exponent, no trailing zeros (500, 302.5)."""
    dec = to_decimal(value)
    if dec == dec.to_integral_value():
        return str(dec.quantize(Decimal("1")))
    text = format(dec.normalize(), "f")
    return text


def _two_digit_words(n: int) -> str:
    if n < 20:
        return _ONES[n]
    tens, ones = divmod(n, 10)
    return f"{_TENS[tens]} {_ONES[ones]}".strip()


def amount_in_words(amount: Number) -> str:
    """
    Spells a whole amount in the Indian numbering system.

    The value is read as nine zero-padded digits grouped 2-2-2-1-2:
    crore, lakh, thousand, hundred and the last two digits.
    """
    whole = int(round_half_up(amount))
    if whole < 0:
        raise ValueError("Amount in words is only defined for non-negative amounts.")
    if whole == 0:
        return AMOUNT_IN_WORDS_ZERO
    if len(str(whole)) > AMOUNT_IN_WORDS_MAX_DIGITS:
        return AMOUNT_IN_WORDS_OVERFLOW

    crore = whole // 10_000_000
    lakh = (whole // 100_000) % 100
    thousand = (whole // 1000) % 100
    hundred = (whole // 100) % 10
    rest = whole % 100

    parts = []
    for value, label in ((crore, "Crore"), (lakh, "Lakh"), (thousand, "Thousand"), (hundred, "Hundred")):
        if value:
            parts.append(f"{_two_digit_words(value)} {label}")
    if rest:
        if parts:
            parts.append("and")
        parts.append(_two_digit_words(rest))
    parts.append(AMOUNT_IN_WORDS_SUFFIX)
    return " ".join(parts)


def parse_packing_grams(packing: Optional[str]) -> Optional[Decimal]:
    """
    Reads a packing label such as "1 kg", "500gm" or "1.5 Ltr" as base units
    (grams / millilitres). Returns None when the label does not start with a
    recognised quantity.
    """
    if not packing:
        return None
    match = _PACKING_RE.match(packing.strip().lower())
    if not match:
        return None
    value = Decimal(match.group(1))
    if match.group(3) in THOUSAND_BASE_UNITS:
        value *= 1000
    return value


def format_weight(total_grams: Number) -> str:
    grams = int(round_half_up(total_grams))
    if grams <= 0:
        return WEIGHT_SENTINEL
    kg, gm = divmod(grams, 1000)
    parts = []
    if kg > 0:
        parts.append(f"{kg} Kg")
    if gm > 0:
        parts.append(f"{gm} Gm")
    return " ".join(parts)


def format_quantity(value: Number) -> str:
    # printed exactly as entered, trailing zeros dropped (0.125, 1.5, 2)
    return format_amount(value)
