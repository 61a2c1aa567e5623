"""Tests for the Money value object."""

from __future__ import annotations

from decimal import Decimal

import pytest

from shared.domain.value_objects import Money


def test_minor_unit_conversion_round_trips():
    money = Money(Decimal("50.00"))

    assert money.minor_units == 5000
    assert Money.from_minor_units(money.minor_units) == money


def test_amounts_are_quantized_half_up():
    assert Money("10.005").amount == Decimal("10.01")
    assert Money(12.3).amount == Decimal("12.30")


def test_from_minor_units_accepts_strings_and_none():
    assert Money.from_minor_units("1234").amount == Decimal("12.34")
    assert Money.from_minor_units(None).amount == Decimal("0.00")


@pytest.mark.parametrize("value", ["-1", "NaN", "abc"])
def test_invalid_amounts_are_rejected(value):
    with pytest.raises(ValueError):
        Money(value)


def test_other_currencies_are_rejected():
    with pytest.raises(ValueError):
        Money("1.00", "USD")


def test_display():
    total = Money("1001.00")

    assert str(total) == "GHS 1,001.00"
