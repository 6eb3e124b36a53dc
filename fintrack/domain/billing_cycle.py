"""Billing cycle resolver - maps a card's closing day to invoice periods"""

from datetime import date, timedelta

from fintrack.domain.exceptions import InvalidCardConfigError
from fintrack.domain.models import Card, InvoicePeriod, PeriodKey
from fintrack.utils.date_utils import clamp_day, last_day_of_month, shift_month


def validate_billing_days(closing_day: int, due_day: int) -> None:
    """
    Raises:
        InvalidCardConfigError: If either day is outside 1-31 or they are equal
    """
    for label, day in (("closing day", closing_day), ("due day", due_day)):
        if not isinstance(day, int) or isinstance(day, bool) or not 1 <= day <= 31:
            raise InvalidCardConfigError(f"{label} must be between 1 and 31, got {day!r}")
    if closing_day == due_day:
        raise InvalidCardConfigError("closing day must differ from due day")


def _due_date(end: date, due_day: int) -> date:
    year, month = shift_month(end.year, end.month, 1)
    return clamp_day(year, month, due_day)


def _cycle_starting_in(card: Card, year: int, month: int) -> InvoicePeriod:
    """Cycle whose start falls in the given month"""
    if card.closing_day == 1:
        start = date(year, month, 1)
        end = date(year, month, last_day_of_month(year, month))
    else:
        start = clamp_day(year, month, card.closing_day)
        next_year, next_month = shift_month(year, month, 1)
        end = clamp_day(next_year, next_month, card.closing_day - 1)
    return InvoicePeriod(start=start, end=end, due_date=_due_date(end, card.due_day))


def resolve_cycle(card: Card, reference_date: date) -> InvoicePeriod:
    """
    Compute the invoice period containing `reference_date`.

    Rules:
    - closing day 1: the calendar month of the reference date
    - closing day C: [C of month M, C-1 of month M+1], both clamped to month
      length, where M is the reference month when reference.day >= C and the
      previous month otherwise
    - due date: the card's due day in the month after the period end, clamped

    Example (closing day 5, due day 15):
        2025-03-03 → [2025-02-05, 2025-03-04], due 2025-04-15
        2025-03-10 → [2025-03-05, 2025-04-04], due 2025-05-15
    """
    if card.closing_day == 1 or reference_date.day >= card.closing_day:
        year, month = reference_date.year, reference_date.month
    else:
        year, month = shift_month(reference_date.year, reference_date.month, -1)

    period = _cycle_starting_in(card, year, month)

    # Clamping can push a nominal start past the reference; use the cycle before it
    if period.start > reference_date:
        year, month = shift_month(year, month, -1)
        period = _cycle_starting_in(card, year, month)

    return period


def previous_cycle(card: Card, period: InvoicePeriod) -> InvoicePeriod:
    return resolve_cycle(card, period.start - timedelta(days=1))


def next_cycle(card: Card, period: InvoicePeriod) -> InvoicePeriod:
    return resolve_cycle(card, period.end + timedelta(days=1))


def period_key(card: Card, period: InvoicePeriod) -> PeriodKey:
    return PeriodKey(card_id=card.id, period_end=period.end)
