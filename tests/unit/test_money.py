"""Unit tests for decimal money handling"""

import pytest
from decimal import Decimal
from fintrack.domain.exceptions import ValidationError
from fintrack.domain.money import (
    from_cents,
    split_evenly,
    sum_money,
    to_cents,
    to_money,
    to_positive_money,
)


def test_to_money_quantizes_half_up():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money("10.004") == Decimal("10.00")
    assert to_money(7) == Decimal("7.00")
    assert to_money(Decimal("0.1")) == Decimal("0.10")


@pytest.mark.parametrize("value", [1.5, True, "abc", "NaN", "Infinity", None])
def test_to_money_rejects_non_decimal_input(value):
    """Floats, booleans and non-numeric values never become amounts"""
    with pytest.raises(ValidationError):
        to_money(value)


def test_to_positive_money_rejects_zero_and_negative():
    with pytest.raises(ValidationError, match="amount must be positive"):
        to_positive_money("0.00")
    with pytest.raises(ValidationError, match="limit must be positive"):
        to_positive_money("-5", "limit")
    # Rounds to zero
    with pytest.raises(ValidationError):
        to_positive_money("0.004")


def test_cents_conversion():
    assert to_cents(Decimal("33.34")) == 3334
    assert from_cents(3334) == Decimal("33.34")
    assert from_cents(0) == Decimal("0.00")


def test_sum_money_of_nothing_is_zero():
    assert sum_money([]) == Decimal("0.00")
    assert sum_money([Decimal("0.10"), Decimal("0.20")]) == Decimal("0.30")


def test_split_evenly_gives_leftover_cents_to_first_leg():
    assert split_evenly(Decimal("100.00"), 3) == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert split_evenly(Decimal("100.02"), 4) == [
        Decimal("25.02"),
        Decimal("25.00"),
        Decimal("25.00"),
        Decimal("25.00"),
    ]


def test_split_evenly_conserves_total():
    for total in ["0.07", "1.00", "99.99", "1234.56"]:
        for count in range(1, 13):
            legs = split_evenly(Decimal(total), count)
            assert len(legs) == count
            assert sum(legs) == Decimal(total)


def test_split_evenly_rejects_zero_count():
    with pytest.raises(ValidationError):
        split_evenly(Decimal("10.00"), 0)
