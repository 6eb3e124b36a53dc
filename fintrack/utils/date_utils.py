"""Calendar arithmetic for day-granular billing cycles"""

import calendar
from datetime import date, timedelta
from typing import List


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in the given month (28-31)"""
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, pulling the day back to the month's last valid day"""
    return date(year, month, min(day, last_day_of_month(year, month)))


def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    """Move a (year, month) pair by a signed number of months"""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def add_months(from_date: date, months: int, day: int | None = None) -> date:
    """
    Move a date by whole calendar months, clamping to the target month's length.

    Args:
        from_date: Origin date
        months: Months to add (negative to subtract)
        day: Day-of-month to use in the target month (default: from_date.day)

    Example:
        add_months(date(2024, 1, 31), 1) → 2024-02-29
    """
    year, month = shift_month(from_date.year, from_date.month, months)
    return clamp_day(year, month, from_date.day if day is None else day)


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]
