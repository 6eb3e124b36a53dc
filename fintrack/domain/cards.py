"""Card configuration rules and portfolio summary"""

from decimal import Decimal
from typing import Iterable

from fintrack.domain.billing_cycle import validate_billing_days
from fintrack.domain.exceptions import ValidationError
from fintrack.domain.models import AvailableCredit, Card, CardsSummary
from fintrack.domain.money import CENT, ZERO, sum_money, to_positive_money


def validate_card(card: Card) -> Card:
    """
    Check a card's configuration and normalize its limit to cents.

    Raises:
        ValidationError: If the name is blank or the limit is not positive
        InvalidCardConfigError: If closing/due days are invalid
    """
    if not card.name or not card.name.strip():
        raise ValidationError("Card name is required")
    card.limit = to_positive_money(card.limit, "limit")
    validate_billing_days(card.closing_day, card.due_day)
    return card


def summarize_cards(cards_with_credit: Iterable[tuple[Card, AvailableCredit]]) -> CardsSummary:
    """
    Portfolio totals across cards.

    Usage percentage = used / limit * 100, rounded to cents (0 with no limit).
    """
    pairs = list(cards_with_credit)
    total_limit = sum_money(card.limit for card, _ in pairs)
    total_used = sum_money(credit.used for _, credit in pairs)
    total_available = sum_money(credit.available for _, credit in pairs)

    usage = ZERO
    if total_limit > ZERO:
        usage = (total_used / total_limit * Decimal(100)).quantize(CENT)

    return CardsSummary(
        total_cards=len(pairs),
        active_cards=sum(1 for card, _ in pairs if card.is_active),
        blocked_cards=sum(1 for card, _ in pairs if card.is_blocked),
        total_limit=total_limit,
        total_used=total_used,
        total_available=total_available,
        usage_percentage=usage,
    )
