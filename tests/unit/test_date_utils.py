"""Unit tests for calendar arithmetic"""

from datetime import date
from fintrack.utils.date_utils import (
    add_months,
    clamp_day,
    generate_date_range,
    last_day_of_month,
    shift_month,
)


def test_last_day_of_month_handles_leap_years():
    assert last_day_of_month(2024, 2) == 29
    assert last_day_of_month(2025, 2) == 28
    assert last_day_of_month(1900, 2) == 28
    assert last_day_of_month(2000, 2) == 29
    assert last_day_of_month(2025, 4) == 30


def test_clamp_day_pulls_back_to_month_end():
    assert clamp_day(2025, 4, 31) == date(2025, 4, 30)
    assert clamp_day(2024, 2, 30) == date(2024, 2, 29)
    assert clamp_day(2025, 1, 15) == date(2025, 1, 15)


def test_shift_month_crosses_year_boundaries():
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2025, 1, -1) == (2024, 12)
    assert shift_month(2025, 3, 24) == (2027, 3)
    assert shift_month(2025, 3, -15) == (2023, 12)


def test_add_months_clamps_from_origin_day():
    """Jan 31 → Feb 29 in a leap year, but the day after still targets 31"""
    origin = date(2024, 1, 31)
    assert add_months(origin, 1) == date(2024, 2, 29)
    assert add_months(origin, 2) == date(2024, 3, 31)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)


def test_add_months_with_explicit_day():
    assert add_months(date(2025, 1, 10), 1, day=31) == date(2025, 2, 28)


def test_generate_date_range_is_inclusive():
    days = generate_date_range(date(2024, 2, 27), date(2024, 3, 1))
    assert days == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
