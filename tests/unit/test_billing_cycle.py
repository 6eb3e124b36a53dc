"""Unit tests for invoice period resolution"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from fintrack.domain.billing_cycle import (
    next_cycle,
    period_key,
    previous_cycle,
    resolve_cycle,
    validate_billing_days,
)
from fintrack.domain.exceptions import InvalidCardConfigError
from fintrack.domain.models import Card, InvoicePeriod
from fintrack.utils.date_utils import generate_date_range, last_day_of_month


def make_card(closing_day: int, due_day: int = 15) -> Card:
    if due_day == closing_day:
        due_day = closing_day % 28 + 1
    return Card(id="card-1", name="Test", limit=Decimal("1000.00"), closing_day=closing_day, due_day=due_day)


# Seventeen months spanning the 2024 leap day
DAYS = generate_date_range(date(2023, 11, 1), date(2025, 3, 31))


@pytest.mark.parametrize("closing_day", range(2, 32))
def test_period_contains_reference_and_ends_day_before_closing(closing_day):
    """For every day, the resolved period contains it and ends on C-1 (clamped)"""
    card = make_card(closing_day)
    for day in DAYS:
        period = resolve_cycle(card, day)
        assert period.start <= day <= period.end, (closing_day, day, period)
        expected_end_day = min(closing_day - 1, last_day_of_month(period.end.year, period.end.month))
        assert period.end.day == expected_end_day


def test_closing_day_one_is_the_calendar_month():
    card = make_card(1)
    assert resolve_cycle(card, date(2024, 2, 14)) == InvoicePeriod(
        start=date(2024, 2, 1),
        end=date(2024, 2, 29),
        due_date=date(2024, 3, 15),
    )


@pytest.mark.parametrize("closing_day", range(1, 29))
def test_consecutive_periods_are_contiguous_without_clamping(closing_day):
    card = make_card(closing_day)
    period = resolve_cycle(card, date(2024, 1, 15))
    for _ in range(14):
        following = next_cycle(card, period)
        assert following.start == period.end + timedelta(days=1)
        assert previous_cycle(card, following) == period
        period = following


def test_closing_day_five_scenario():
    """Purchase on the 3rd is billed in the period ending the 4th; on the 10th, the next one"""
    card = make_card(5, 15)

    early = resolve_cycle(card, date(2025, 3, 3))
    assert early == InvoicePeriod(date(2025, 2, 5), date(2025, 3, 4), date(2025, 4, 15))

    late = resolve_cycle(card, date(2025, 3, 10))
    assert late == InvoicePeriod(date(2025, 3, 5), date(2025, 4, 4), date(2025, 5, 15))


def test_closing_day_31_clamps_into_february():
    card = make_card(31, 10)
    assert resolve_cycle(card, date(2024, 1, 31)) == InvoicePeriod(
        date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 10)
    )
    assert resolve_cycle(card, date(2025, 2, 28)).end == date(2025, 2, 28)
    assert resolve_cycle(card, date(2025, 3, 31)) == InvoicePeriod(
        date(2025, 3, 31), date(2025, 4, 30), date(2025, 5, 10)
    )


def test_due_date_is_clamped_to_month_length():
    card = make_card(5, 31)
    # Period ends Jan 4, so it is due in February
    assert resolve_cycle(card, date(2025, 1, 2)).due_date == date(2025, 2, 28)
    assert resolve_cycle(card, date(2024, 1, 2)).due_date == date(2024, 2, 29)


def test_period_crossing_year_end():
    card = make_card(20, 5)
    period = resolve_cycle(card, date(2024, 12, 25))
    assert period == InvoicePeriod(date(2024, 12, 20), date(2025, 1, 19), date(2025, 2, 5))


def test_resolve_cycle_is_deterministic():
    card = make_card(17, 3)
    assert resolve_cycle(card, date(2025, 6, 1)) == resolve_cycle(card, date(2025, 6, 1))


def test_period_key_is_card_and_end():
    card = make_card(5)
    key = period_key(card, resolve_cycle(card, date(2025, 3, 10)))
    assert key.card_id == "card-1"
    assert key.period_end == date(2025, 4, 4)


@pytest.mark.parametrize(
    "closing_day, due_day",
    [(0, 10), (32, 10), (10, 0), (10, 32), (10, 10)],
)
def test_validate_billing_days_rejects_bad_configuration(closing_day, due_day):
    with pytest.raises(InvalidCardConfigError):
        validate_billing_days(closing_day, due_day)


def test_validate_billing_days_accepts_edges():
    validate_billing_days(1, 31)
    validate_billing_days(31, 1)
