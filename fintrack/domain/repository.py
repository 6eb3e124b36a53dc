"""
Record store interface used by the billing engine.

The engine never holds state of its own: every operation receives a
repository and reads/writes cards, purchases, plans, invoices and
subscriptions through it. Implementations live under
fintrack.infrastructure (in-memory dicts and SQLAlchemy).
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from fintrack.domain.models import Card, InstallmentPlan, Invoice, Purchase, Subscription


class LedgerRepository(ABC):
    """Keyed CRUD plus date-range queries over ledger records"""

    # Cards

    @abstractmethod
    def add_card(self, card: Card) -> Card:
        pass

    @abstractmethod
    def get_card(self, card_id: str) -> Optional[Card]:
        pass

    @abstractmethod
    def list_cards(self) -> List[Card]:
        pass

    @abstractmethod
    def update_card(self, card: Card) -> Card:
        pass

    @abstractmethod
    def delete_card(self, card_id: str) -> bool:
        pass

    # Purchases

    @abstractmethod
    def add_purchase(self, purchase: Purchase) -> Purchase:
        pass

    @abstractmethod
    def get_purchase(self, purchase_id: str) -> Optional[Purchase]:
        pass

    @abstractmethod
    def update_purchase(self, purchase: Purchase) -> Purchase:
        pass

    @abstractmethod
    def delete_purchase(self, purchase_id: str) -> bool:
        pass

    @abstractmethod
    def list_purchases_by_card(self, card_id: str) -> List[Purchase]:
        pass

    @abstractmethod
    def list_purchases_by_plan(self, plan_id: str) -> List[Purchase]:
        """Legs of a plan ordered by installment index"""
        pass

    @abstractmethod
    def purchases_in_range(self, card_id: str, start: date, end: Optional[date] = None) -> List[Purchase]:
        """
        Card purchases dated within [start, end] (inclusive).

        Args:
            end: Upper bound, or None for no upper bound
        """
        pass

    # Installment plans

    @abstractmethod
    def add_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        """Persist a plan together with all of its legs"""
        pass

    @abstractmethod
    def get_plan(self, plan_id: str) -> Optional[InstallmentPlan]:
        pass

    @abstractmethod
    def delete_plan(self, plan_id: str) -> List[str]:
        """Delete a plan and its legs, returning the deleted leg ids"""
        pass

    # Invoices

    @abstractmethod
    def add_invoice(self, invoice: Invoice) -> Invoice:
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        pass

    @abstractmethod
    def get_invoice_by_period(self, card_id: str, period_end: date) -> Optional[Invoice]:
        pass

    @abstractmethod
    def update_invoice(self, invoice: Invoice) -> Invoice:
        pass

    @abstractmethod
    def list_invoices(self, card_id: str) -> List[Invoice]:
        pass

    # Subscriptions

    @abstractmethod
    def add_subscription(self, subscription: Subscription) -> Subscription:
        pass

    @abstractmethod
    def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        pass

    @abstractmethod
    def update_subscription(self, subscription: Subscription) -> Subscription:
        pass

    @abstractmethod
    def delete_subscription(self, subscription_id: str) -> bool:
        pass

    @abstractmethod
    def list_subscriptions(self, card_id: Optional[str] = None) -> List[Subscription]:
        pass

    # Unit of work

    def commit(self) -> None:
        """Make pending writes durable (no-op for stores without transactions)"""

    def rollback(self) -> None:
        """Discard pending writes (no-op for stores without transactions)"""
