"""Tests for amount parsing and currency rounding."""

import pytest
from decimal import Decimal

from factorybooks.utils.amount_parser import parse_amount
from factorybooks.utils.money import round_currency, to_decimal


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("$123.45", Decimal("123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("-50", Decimal("-50.00")),
        ("(75.10)", Decimal("-75.10")),
        ("1500 EGP", Decimal("1500.00")),
        ("usd 20", Decimal("20.00")),
        ("10.005", Decimal("10.01")),
    ],
)
def test_parse_amount(text, expected):
    """Test the supported amount formats."""
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12..3", "NaN", "Infinity"])
def test_parse_invalid_amount(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_round_currency_half_up():
    """Test that rounding is half up, not banker's rounding."""
    assert round_currency("0.125") == Decimal("0.13")
    assert round_currency("0.135") == Decimal("0.14")
    assert round_currency("-0.125") == Decimal("-0.13")
    assert round_currency(10) == Decimal("10.00")


def test_to_decimal_avoids_float_artifacts():
    assert to_decimal(0.1) == Decimal("0.1")


@pytest.mark.parametrize("value", [None, True, "x", float("nan"), Decimal("Infinity")])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        to_decimal(value)
