from decimal import Decimal

import pytest

from sweetspot_engine.core.money import Money, format_currency, parse_currency
from sweetspot_engine.errors import InvalidInputError


def test_format_rupiah():
    assert format_currency(1_000_000) == "Rp1.000.000"
    assert format_currency(250000, "idr") == "Rp250.000"


def test_format_other_currencies():
    assert format_currency(1234567, "USD") == "$1,234,567"
    assert format_currency(1234567, "EUR") == "€1.234.567"
    assert format_currency(1500, "CHF") == "CHF 1,500"


def test_rounds_half_up_to_whole_units():
    assert format_currency(2.5, "USD") == "$3"
    assert format_currency(1999.49, "USD") == "$1,999"
    assert Money.of("0.5", "IDR").whole_units() == 1


def test_negative_or_nan_rejected():
    with pytest.raises(InvalidInputError):
        format_currency(-1)
    with pytest.raises(InvalidInputError):
        Money.of(float("nan"))


def test_money_value_object():
    price = Money.of(100000, "idr")
    assert price.amount == Decimal("100000")
    assert price.currency == "IDR"
    assert str(price) == "Rp100.000"


def test_parse_currency():
    assert parse_currency("Rp1,000,000") == 1000000
    assert parse_currency("Rp1.000.000") == 1000000
    assert parse_currency("Rp") == 0
    assert parse_currency("") == 0


@pytest.mark.parametrize("text", ["Rp49.50", "$12.99", "Rp1.000,5"])
def test_parse_currency_rejects_fractional_amounts(text):
    with pytest.raises(InvalidInputError):
        parse_currency(text)
