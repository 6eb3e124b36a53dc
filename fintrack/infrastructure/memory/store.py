"""In-memory record store - default backend and the one unit tests run against"""

import copy
import threading
from datetime import date
from typing import Dict, List, Optional

from fintrack.domain.models import Card, InstallmentPlan, Invoice, Purchase, Subscription
from fintrack.domain.repository import LedgerRepository


class InMemoryLedgerRepository(LedgerRepository):
    """
    Dict-backed repository.

    Records are copied on the way in and out so callers never share mutable
    state with the store.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._cards: Dict[str, Card] = {}
        self._purchases: Dict[str, Purchase] = {}
        self._plans: Dict[str, InstallmentPlan] = {}
        self._invoices: Dict[str, Invoice] = {}
        self._subscriptions: Dict[str, Subscription] = {}

    @staticmethod
    def _copy(record):
        return copy.deepcopy(record)

    # Cards

    def add_card(self, card: Card) -> Card:
        with self._lock:
            self._cards[card.id] = self._copy(card)
            return self._copy(card)

    def get_card(self, card_id: str) -> Optional[Card]:
        with self._lock:
            card = self._cards.get(card_id)
            return self._copy(card) if card else None

    def list_cards(self) -> List[Card]:
        with self._lock:
            return [self._copy(c) for c in self._cards.values()]

    def update_card(self, card: Card) -> Card:
        return self.add_card(card)

    def delete_card(self, card_id: str) -> bool:
        with self._lock:
            # Invoices go with their card
            for invoice_id in [i.id for i in self._invoices.values() if i.card_id == card_id]:
                del self._invoices[invoice_id]
            return self._cards.pop(card_id, None) is not None

    # Purchases

    def add_purchase(self, purchase: Purchase) -> Purchase:
        with self._lock:
            self._purchases[purchase.id] = self._copy(purchase)
            return self._copy(purchase)

    def get_purchase(self, purchase_id: str) -> Optional[Purchase]:
        with self._lock:
            purchase = self._purchases.get(purchase_id)
            return self._copy(purchase) if purchase else None

    def update_purchase(self, purchase: Purchase) -> Purchase:
        return self.add_purchase(purchase)

    def delete_purchase(self, purchase_id: str) -> bool:
        with self._lock:
            return self._purchases.pop(purchase_id, None) is not None

    def list_purchases_by_card(self, card_id: str) -> List[Purchase]:
        with self._lock:
            purchases = [p for p in self._purchases.values() if p.card_id == card_id]
            return [self._copy(p) for p in sorted(purchases, key=lambda p: (p.transaction_date, p.id))]

    def list_purchases_by_plan(self, plan_id: str) -> List[Purchase]:
        with self._lock:
            legs = [p for p in self._purchases.values() if p.plan_id == plan_id]
            return [self._copy(p) for p in sorted(legs, key=lambda p: p.installment_index or 0)]

    def purchases_in_range(self, card_id: str, start: date, end: Optional[date] = None) -> List[Purchase]:
        with self._lock:
            return [
                self._copy(p)
                for p in self._purchases.values()
                if p.card_id == card_id
                and p.transaction_date >= start
                and (end is None or p.transaction_date <= end)
            ]

    # Installment plans

    def add_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        with self._lock:
            stored = self._copy(plan)
            stored.legs = []
            self._plans[plan.id] = stored
            for leg in plan.legs:
                self._purchases[leg.id] = self._copy(leg)
            return self.get_plan(plan.id)

    def get_plan(self, plan_id: str) -> Optional[InstallmentPlan]:
        with self._lock:
            plan = self._plans.get(plan_id)
            if plan is None:
                return None
            result = self._copy(plan)
            result.legs = self.list_purchases_by_plan(plan_id)
            return result

    def delete_plan(self, plan_id: str) -> List[str]:
        with self._lock:
            leg_ids = [p.id for p in self.list_purchases_by_plan(plan_id)]
            for leg_id in leg_ids:
                del self._purchases[leg_id]
            self._plans.pop(plan_id, None)
            return leg_ids

    # Invoices

    def add_invoice(self, invoice: Invoice) -> Invoice:
        with self._lock:
            self._invoices[invoice.id] = self._copy(invoice)
            return self._copy(invoice)

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        with self._lock:
            invoice = self._invoices.get(invoice_id)
            return self._copy(invoice) if invoice else None

    def get_invoice_by_period(self, card_id: str, period_end: date) -> Optional[Invoice]:
        with self._lock:
            for invoice in self._invoices.values():
                if invoice.card_id == card_id and invoice.period_end == period_end:
                    return self._copy(invoice)
            return None

    def update_invoice(self, invoice: Invoice) -> Invoice:
        return self.add_invoice(invoice)

    def list_invoices(self, card_id: str) -> List[Invoice]:
        with self._lock:
            invoices = [i for i in self._invoices.values() if i.card_id == card_id]
            return [self._copy(i) for i in sorted(invoices, key=lambda i: i.period_end)]

    # Subscriptions

    def add_subscription(self, subscription: Subscription) -> Subscription:
        with self._lock:
            self._subscriptions[subscription.id] = self._copy(subscription)
            return self._copy(subscription)

    def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        with self._lock:
            subscription = self._subscriptions.get(subscription_id)
            return self._copy(subscription) if subscription else None

    def update_subscription(self, subscription: Subscription) -> Subscription:
        return self.add_subscription(subscription)

    def delete_subscription(self, subscription_id: str) -> bool:
        with self._lock:
            return self._subscriptions.pop(subscription_id, None) is not None

    def list_subscriptions(self, card_id: Optional[str] = None) -> List[Subscription]:
        with self._lock:
            return [
                self._copy(s)
                for s in self._subscriptions.values()
                if card_id is None or s.card_id == card_id
            ]
