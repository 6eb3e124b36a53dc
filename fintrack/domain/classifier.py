"""Purchase classifier - assigns purchases and installment legs to invoice periods"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List

from fintrack.domain.billing_cycle import period_key, resolve_cycle
from fintrack.domain.models import Card, PeriodKey, Purchase


def classify(purchase_date: date, card: Card) -> PeriodKey:
    """Key of the invoice period whose [start, end] contains the purchase date"""
    return period_key(card, resolve_cycle(card, purchase_date))


def group_by_period(purchases: Iterable[Purchase], card: Card) -> Dict[PeriodKey, List[Purchase]]:
    """
    Group card purchases by invoice period.

    Installment legs are classified one by one on their own dates, so two legs
    that clamping puts in the same cycle land in the same group.
    """
    groups: Dict[PeriodKey, List[Purchase]] = defaultdict(list)
    for purchase in purchases:
        if purchase.card_id != card.id:
            continue
        groups[classify(purchase.transaction_date, card)].append(purchase)
    return dict(groups)
