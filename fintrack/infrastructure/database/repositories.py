"""Data access layer for ledger entities backed by SQLAlchemy"""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from fintrack.domain.models import (
    Card,
    InstallmentPlan,
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    Purchase,
    Subscription,
)
from fintrack.domain.money import from_cents, to_cents
from fintrack.domain.repository import LedgerRepository
from fintrack.infrastructure.database.models import (
    CardRecord,
    InstallmentPlanRecord,
    InvoiceRecord,
    PurchaseRecord,
    SubscriptionRecord,
)


def _card(record: CardRecord) -> Card:
    return Card(
        id=record.id,
        name=record.name,
        limit=from_cents(record.limit_cents),
        closing_day=record.closing_day,
        due_day=record.due_day,
        is_active=record.is_active,
        is_blocked=record.is_blocked,
    )


def _purchase(record: PurchaseRecord) -> Purchase:
    return Purchase(
        id=record.id,
        amount=from_cents(record.amount_cents),
        transaction_date=record.transaction_date,
        card_id=record.card_id,
        description=record.description,
        plan_id=record.plan_id,
        installment_index=record.installment_index,
        installment_count=record.installment_count,
    )


def _invoice(record: InvoiceRecord) -> Invoice:
    return Invoice(
        id=record.id,
        card_id=record.card_id,
        period_start=record.period_start,
        period_end=record.period_end,
        due_date=record.due_date,
        total=from_cents(record.total_cents),
        paid_amount=from_cents(record.paid_cents),
        status=InvoiceStatus(record.status),
    )


def _subscription(record: SubscriptionRecord) -> Subscription:
    return Subscription(
        id=record.id,
        name=record.name,
        amount=from_cents(record.amount_cents),
        billing_day=record.billing_day,
        payment_method=PaymentMethod(record.payment_method),
        card_id=record.card_id,
        is_active=record.is_active,
        start_date=record.start_date,
    )


class SqlLedgerRepository(LedgerRepository):
    """
    Repository over a SQLAlchemy session.

    Writes are flushed, not committed: `LedgerService` commits each operation
    while it still holds the card lock, and rolls back when it fails.
    """

    def __init__(self, db: Session):
        self.db = db

    # Cards

    def add_card(self, card: Card) -> Card:
        record = CardRecord(id=card.id)
        self._fill_card(record, card)
        self.db.add(record)
        self.db.flush()
        return _card(record)

    @staticmethod
    def _fill_card(record: CardRecord, card: Card) -> None:
        record.name = card.name
        record.limit_cents = to_cents(card.limit)
        record.closing_day = card.closing_day
        record.due_day = card.due_day
        record.is_active = card.is_active
        record.is_blocked = card.is_blocked

    def get_card(self, card_id: str) -> Optional[Card]:
        record = self.db.get(CardRecord, card_id)
        return _card(record) if record else None

    def list_cards(self) -> List[Card]:
        return [_card(r) for r in self.db.query(CardRecord).order_by(CardRecord.created_at).all()]

    def update_card(self, card: Card) -> Card:
        record = self.db.get(CardRecord, card.id)
        if record is None:
            return self.add_card(card)
        self._fill_card(record, card)
        self.db.flush()
        return _card(record)

    def delete_card(self, card_id: str) -> bool:
        # Invoices go with their card; SQLite does not enforce ON DELETE CASCADE by default
        self.db.query(InvoiceRecord).filter(InvoiceRecord.card_id == card_id).delete()
        deleted =self.db.query(CardRecord).filter(CardRecord.id == card_id).delete()
        self.db.flush()
        return deleted > 0

    # Purchases

    @staticmethod
    def _purchase_record(purchase: Purchase) -> PurchaseRecord:
        return PurchaseRecord(
            id=purchase.id,
            card_id=purchase.card_id,
            amount_cents=to_cents(purchase.amount),
            transaction_date=purchase.transaction_date,
            description=purchase.description,
            plan_id=purchase.plan_id,
            installment_index=purchase.installment_index,
            installment_count=purchase.installment_count,
        )

    def add_purchase(self, purchase: Purchase) -> Purchase:
        record = self._purchase_record(purchase)
        self.db.add(record)
        self.db.flush()
        return _purchase(record)

    def get_purchase(self, purchase_id: str) -> Optional[Purchase]:
        record = self.db.get(PurchaseRecord, purchase_id)
        return _purchase(record) if record else None

    def update_purchase(self, purchase: Purchase) -> Purchase:
        record = self.db.get(PurchaseRecord, purchase.id)
        if record is None:
            return self.add_purchase(purchase)
        record.card_id = purchase.card_id
        record.amount_cents = to_cents(purchase.amount)
        record.transaction_date = purchase.transaction_date
        record.description = purchase.description
        record.plan_id = purchase.plan_id
        record.installment_index = purchase.installment_index
        record.installment_count = purchase.installment_count
        self.db.flush()
        return _purchase(record)

    def delete_purchase(self, purchase_id: str) -> bool:
        deleted = self.db.query(PurchaseRecord).filter(PurchaseRecord.id == purchase_id).delete()
        self.db.flush()
        return deleted > 0

    def list_purchases_by_card(self, card_id: str) -> List[Purchase]:
        return [
            _purchase(r)
            for r in self.db.query(PurchaseRecord)
            .filter(PurchaseRecord.card_id == card_id)
            .order_by(PurchaseRecord.transaction_date, PurchaseRecord.id)
            .all()
        ]

    def list_purchases_by_plan(self, plan_id: str) -> List[Purchase]:
        return [
            _purchase(r)
            for r in self.db.query(PurchaseRecord)
            .filter(PurchaseRecord.plan_id == plan_id)
            .order_by(PurchaseRecord.installment_index)
            .all()
        ]

    def purchases_in_range(self, card_id: str, start: date, end: Optional[date] = None) -> List[Purchase]:
        query = self.db.query(PurchaseRecord).filter(
            PurchaseRecord.card_id == card_id,
            PurchaseRecord.transaction_date >= start,
        )
        if end is not None:
            query = query.filter(PurchaseRecord.transaction_date <= end)
        return [_purchase(r) for r in query.all()]

    # Installment plans

    def add_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        """Create plan with all of its legs"""
        db_plan = InstallmentPlanRecord(
            id=plan.id,
            card_id=plan.card_id,
            total_cents=to_cents(plan.total),
            installment_count=plan.installment_count,
            purchase_date=plan.purchase_date,
            description=plan.description,
        )
        self.db.add(db_plan)
        self.db.flush()

        for leg in plan.legs:
            self.db.add(self._purchase_record(leg))
        self.db.flush()

        return self.get_plan(plan.id)

    def get_plan(self, plan_id: str) -> Optional[InstallmentPlan]:
        record = self.db.get(InstallmentPlanRecord, plan_id)
        if record is None:
            return None
        return InstallmentPlan(
            id=record.id,
            total=from_cents(record.total_cents),
            installment_count=record.installment_count,
            purchase_date=record.purchase_date,
            card_id=record.card_id,
            description=record.description,
            legs=self.list_purchases_by_plan(record.id),
        )

    def delete_plan(self, plan_id: str) -> List[str]:
        record = self.db.get(InstallmentPlanRecord, plan_id)
        if record is None:
            return []
        leg_ids = [leg.id for leg in record.legs]
        self.db.delete(record)
        self.db.flush()
        return leg_ids

    # Invoices

    def add_invoice(self, invoice: Invoice) -> Invoice:
        record = InvoiceRecord(id=invoice.id, card_id=invoice.card_id)
        self._fill_invoice(record, invoice)
        self.db.add(record)
        self.db.flush()
        return _invoice(record)

    @staticmethod
    def _fill_invoice(record: InvoiceRecord, invoice: Invoice) -> None:
        record.period_start = invoice.period_start
        record.period_end = invoice.period_end
        record.due_date = invoice.due_date
        record.total_cents = to_cents(invoice.total)
        record.paid_cents = to_cents(invoice.paid_amount)
        record.status = invoice.status.value

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        record = self.db.get(InvoiceRecord, invoice_id)
        return _invoice(record) if record else None

    def get_invoice_by_period(self, card_id: str, period_end: date) -> Optional[Invoice]:
        record = (
            self.db.query(InvoiceRecord)
            .filter(InvoiceRecord.card_id == card_id, InvoiceRecord.period_end == period_end)
            .first()
        )
        return _invoice(record) if record else None

    def update_invoice(self, invoice: Invoice) -> Invoice:
        record = self.db.get(InvoiceRecord, invoice.id)
        if record is None:
            return self.add_invoice(invoice)
        self._fill_invoice(record, invoice)
        self.db.flush()
        return _invoice(record)

    def list_invoices(self, card_id: str) -> List[Invoice]:
        return [
            _invoice(r)
            for r in self.db.query(InvoiceRecord)
            .filter(InvoiceRecord.card_id == card_id)
            .order_by(InvoiceRecord.period_end)
            .all()
        ]

    # Subscriptions

    @staticmethod
    def _fill_subscription(record: SubscriptionRecord, subscription: Subscription) -> None:
        record.card_id = subscription.card_id
        record.name = subscription.name
        record.amount_cents = to_cents(subscription.amount)
        record.billing_day = subscription.billing_day
        record.payment_method = subscription.payment_method.value
        record.is_active = subscription.is_active
        record.start_date = subscription.start_date

    def add_subscription(self, subscription: Subscription) -> Subscription:
        record = SubscriptionRecord(id=subscription.id)
        self._fill_subscription(record, subscription)
        self.db.add(record)
        self.db.flush()
        return _subscription(record)

    def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        record = self.db.get(SubscriptionRecord, subscription_id)
        return _subscription(record) if record else None

    def update_subscription(self, subscription: Subscription) -> Subscription:
        record = self.db.get(SubscriptionRecord, subscription.id)
        if record is None:
            return self.add_subscription(subscription)
        self._fill_subscription(record, subscription)
        self.db.flush()
        return _subscription(record)

    def delete_subscription(self, subscription_id: str) -> bool:
        deleted = self.db.query(SubscriptionRecord).filter(SubscriptionRecord.id == subscription_id).delete()
        self.db.flush()
        return deleted > 0

    def list_subscriptions(self, card_id: Optional[str] = None) -> List[Subscription]:
        query = self.db.query(SubscriptionRecord)
        if card_id is not None:
            query = query.filter(SubscriptionRecord.card_id == card_id)
        return [_subscription(r) for r in query.order_by(SubscriptionRecord.created_at).all()]

    # Unit of work

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
