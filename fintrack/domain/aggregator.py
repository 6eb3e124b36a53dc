"""Invoice aggregator - totals every charge that belongs to an invoice period"""

from datetime import timedelta
from decimal import Decimal
from typing import List

from fintrack.domain.billing_cycle import period_key
from fintrack.domain.classifier import classify
from fintrack.domain.models import (
    Aggregation,
    Card,
    InvoicePeriod,
    Subscription,
    SubscriptionCharge,
)
from fintrack.domain.money import sum_money
from fintrack.domain.repository import LedgerRepository
from fintrack.utils.date_utils import clamp_day


def subscription_charge(subscription: Subscription, card: Card, period: InvoicePeriod) -> SubscriptionCharge | None:
    """
    Place a subscription's billing day inside the period, if it belongs there.

    The billing day is tried in the period's start month and end month (the
    same month when the closing day is 1). The first candidate that classifies
    into the period wins, so a subscription is billed at most once per period.
    """
    if not subscription.is_active or not subscription.is_card_billed or subscription.card_id != card.id:
        return None

    key = period_key(card, period)
    months = [(period.start.year, period.start.month), (period.end.year, period.end.month)]
    for year, month in dict.fromkeys(months):
        billing_date = clamp_day(year, month, subscription.billing_day)
        if subscription.start_date is not None and billing_date < subscription.start_date:
            continue
        if classify(billing_date, card) == key:
            return SubscriptionCharge(
                subscription_id=subscription.id,
                billing_date=billing_date,
                amount=subscription.amount,
            )
    return None


def aggregate(repo: LedgerRepository, card: Card, period: InvoicePeriod) -> Aggregation:
    """
    Recompute everything billed in one invoice period from scratch.

    Total = purchase legs classified into the period + card-billed subscription
    charges placed in the period. Never patched incrementally; calling it twice
    with unchanged records yields the same total to the cent.
    """
    key = period_key(card, period)

    # Range query is a pre-filter only: clamped periods can share a nominal day
    legs = [
        purchase
        for purchase in repo.purchases_in_range(card.id, period.start, period.end)
        if classify(purchase.transaction_date, card) == key
    ]
    legs.sort(key=lambda p: (p.transaction_date, p.id))

    charges: List[SubscriptionCharge] = []
    for subscription in repo.list_subscriptions(card.id):
        charge = subscription_charge(subscription, card, period)
        if charge is not None:
            charges.append(charge)
    charges.sort(key=lambda c: (c.billing_date, c.subscription_id))

    total = sum_money([p.amount for p in legs] + [c.amount for c in charges])

    return Aggregation(
        key=key,
        period=period,
        legs=legs,
        subscription_charges=charges,
        total=total,
    )


def reserved_after(repo: LedgerRepository, card: Card, period: InvoicePeriod) -> Decimal:
    """
    Credit held by card purchases dated after the period.

    These are future installment legs (and post-dated purchases); they belong to
    later invoices but already reserve the card's limit.
    """
    future = repo.purchases_in_range(card.id, period.end + timedelta(days=1), None)
    return sum_money(p.amount for p in future)
