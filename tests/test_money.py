# tests/test_money.py

from decimal import Decimal

import pytest

from gst_billing.utils.money import (
    to_decimal, round_half_up, format_amount, amount_in_words,
    parse_packing_grams, format_weight, format_quantity
)


def test_to_decimal_keeps_printed_float_value():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(" 12.50 ") == Decimal("12.50")


@pytest.mark.parametrize("bad", ["abc", "", "NaN", "Infinity"])
def test_to_decimal_rejects_non_numbers(bad):
    with pytest.raises(ValueError):
        to_decimal(bad)


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up("2.5") == Decimal("3")
    assert round_half_up("2.49") == Decimal("2")
    assert round_half_up("-2.5") == Decimal("-3")


def test_format_amount_drops_trailing_zeros():
    assert format_amount(Decimal("500.00")) == "500"
    assert format_amount("302.50") == "302.5"
    assert format_amount(Decimal("1E+3")) == "1000"


@pytest.mark.parametrize("amount, words", [
    (0, "Zero"),
    (Decimal("0.4"), "Zero"),
    (5, "Five Only"),
    (100, "One Hundred Only"),
    (115, "One Hundred and Fifteen Only"),
    (1234567, "Twelve Lakh Thirty Four Thousand Five Hundred and Sixty Seven Only"),
    (Decimal("280.5"), "Two Hundred and Eighty One Only"),
    (10_000_000, "One Crore Only"),
    (999_999_999, "Ninety Nine Crore Ninety Nine Lakh Ninety Nine Thousand Nine Hundred "
                  "and Ninety Nine Only"),
])
def test_amount_in_words_indian_grouping(amount, words):
    assert amount_in_words(amount) == words


def test_amount_in_words_overflow_marker():
    assert amount_in_words(1_000_000_000) == "Overflow"


def test_amount_in_words_rejects_negative():
    with pytest.raises(ValueError):
        amount_in_words(-1)


@pytest.mark.parametrize("packing, grams", [
    ("1 kg", Decimal("1000")),
    ("500gm", Decimal("500")),
    ("250 G", Decimal("250")),
    ("1.5 Ltr", Decimal("1500")),
    ("200 ml", Decimal("200")),
    ("2 L bottle", Decimal("2000")),
])
def test_parse_packing_grams_reads_leading_quantity(packing, grams):
    assert parse_packing_grams(packing) == grams


@pytest.mark.parametrize("packing", [None, "", "box of 6", "kg 1", "Dozen"])
def test_parse_packing_grams_unreadable_labels(packing):
    assert parse_packing_grams(packing) is None


def test_format_weight():
    assert format_weight(2500) == "2 Kg 500 Gm"
    assert format_weight(2000) == "2 Kg"
    assert format_weight(250) == "250 Gm"
    assert format_weight(0) == "-"


def test_format_quantity_keeps_every_entered_decimal():
    assert format_quantity(Decimal("1.500")) == "1.5"
    assert format_quantity(2) == "2"
    assert format_quantity(Decimal("0.125")) == "0.125"
    assert format_quantity("1.250") == "1.25"
