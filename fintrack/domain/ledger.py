"""
Ledger operations consumed by the request layer.

Every operation goes through the single implementation of cycle resolution,
classification, aggregation, credit and payment rules in this package. Card
state changes run under the card's lock so that "check credit -> write ->
recompute invoices -> commit" is observed as one step.
"""

import uuid
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Callable, Iterator, List, Optional

from fintrack.domain.aggregator import aggregate
from fintrack.domain.billing_cycle import resolve_cycle
from fintrack.domain.cards import summarize_cards, validate_card
from fintrack.domain.credit import authorize_purchase, available_credit, check_purchase
from fintrack.domain.exceptions import (
    CardInUseError,
    InsufficientCreditError,
    InvalidCardConfigError,
    NotFoundError,
    ValidationError,
)
from fintrack.domain.installments import generate_installment_plan
from fintrack.domain.models import (
    Aggregation,
    AvailableCredit,
    Card,
    CardsSummary,
    InstallmentPlan,
    Invoice,
    PaymentMethod,
    Purchase,
    PurchaseCheck,
    PurchaseDeletion,
    Subscription,
)
from fintrack.domain.money import ZERO, sum_money, to_positive_money
from fintrack.domain.payments import apply_payment, derive_status, settle_recomputed
from fintrack.domain.repository import LedgerRepository
from fintrack.infrastructure.locks import CardLockRegistry, card_locks
from fintrack.infrastructure.observability.logging import (
    log_invoice_recomputed,
    log_payment,
    log_purchase,
    log_purchase_deleted,
)
from fintrack.infrastructure.observability.metrics import (
    invoice_recompute_counter,
    record_payment,
    record_purchase,
)


class LedgerService:
    """Card, purchase, invoice and subscription operations over a repository"""

    def __init__(
        self,
        repo: LedgerRepository,
        clock: Callable[[], date] = date.today,
        locks: CardLockRegistry | None = None,
    ):
        self.repo = repo
        self.clock = clock
        self.locks = locks or card_locks

    @contextmanager
    def _unit_of_work(self, card_id: Optional[str]) -> Iterator[None]:
        """
        Hold the card's lock for one operation and settle its writes before
        releasing it: commit on success, roll back on any error.

        Another request on the same card only acquires the lock once this
        operation's writes are visible to it.
        """
        with self.locks.hold(card_id):
            try:
                yield
            except Exception:
                self.repo.rollback()
                raise
            self.repo.commit()

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def _require_card(self, card_id: str) -> Card:
        card = self.repo.get_card(card_id)
        if card is None:
            raise NotFoundError("Card", card_id)
        return card

    def create_card(
        self,
        name: str,
        limit: Decimal,
        closing_day: int,
        due_day: int,
        is_active: bool = True,
        is_blocked: bool = False,
    ) -> Card:
        card = validate_card(
            Card(
                id=str(uuid.uuid4()),
                name=name,
                limit=limit,
                closing_day=closing_day,
                due_day=due_day,
                is_active=is_active,
                is_blocked=is_blocked,
            )
        )
        with self._unit_of_work(card.id):
            return self.repo.add_card(card)

    def get_card(self, card_id: str) -> Card:
        return self._require_card(card_id)

    def list_cards(self) -> List[Card]:
        return self.repo.list_cards()

    def update_card(
        self,
        card_id: str,
        name: Optional[str] = None,
        limit: Optional[Decimal] = None,
        closing_day: Optional[int] = None,
        due_day: Optional[int] = None,
    ) -> Card:
        """
        Change a card's name, limit or billing days.

        Raises:
            InvalidCardConfigError: If billing days change after invoices exist
        """
        with self._unit_of_work(card_id):
            card = self._require_card(card_id)

            days_changed = (closing_day is not None and closing_day != card.closing_day) or (
                due_day is not None and due_day != card.due_day
            )
            if days_changed and self.repo.list_invoices(card_id):
                raise InvalidCardConfigError("closing and due days cannot change once the card has invoices")

            if name is not None:
                card.name = name
            if limit is not None:
                card.limit = limit
            if closing_day is not None:
                card.closing_day = closing_day
            if due_day is not None:
                card.due_day = due_day

            return self.repo.update_card(validate_card(card))

    def delete_card(self, card_id: str) -> None:
        """
        Raises:
            CardInUseError: If purchases or subscriptions still reference the card
        """
        with self._unit_of_work(card_id):
            self._require_card(card_id)
            if self.repo.list_purchases_by_card(card_id) or self.repo.list_subscriptions(card_id):
                raise CardInUseError("Cannot delete a card with purchases or subscriptions")
            self.repo.delete_card(card_id)

    def toggle_card_blocked(self, card_id: str, blocked: bool) -> Card:
        with self._unit_of_work(card_id):
            card = self._require_card(card_id)
            card.is_blocked = blocked
            return self.repo.update_card(card)

    def toggle_card_active(self, card_id: str, active: bool) -> Card:
        with self._unit_of_work(card_id):
            card = self._require_card(card_id)
            card.is_active = active
            return self.repo.update_card(card)

    def cards_summary(self) -> CardsSummary:
        today = self.clock()
        return summarize_cards(
            (card, available_credit(self.repo, card, today)) for card in self.repo.list_cards()
        )

    # ------------------------------------------------------------------
    # Credit
    # ------------------------------------------------------------------

    def get_available_credit(self, card_id: str) -> AvailableCredit:
        card = self._require_card(card_id)
        return available_credit(self.repo, card, self.clock())

    def check_purchase(self, card_id: str, amount: Decimal) -> PurchaseCheck:
        card = self._require_card(card_id)
        amount = to_positive_money(amount)
        return check_purchase(card, amount, available_credit(self.repo, card, self.clock()))

    def _authorize(self, card: Card, amount: Decimal, installment_count: int) -> None:
        credit = available_credit(self.repo, card, self.clock())
        try:
            authorize_purchase(card, amount, credit)
        except InsufficientCreditError as e:
            record_purchase(False, amount, installment_count)
            log_purchase(card.id, amount, installment_count, False, e.available, str(e))
            raise

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------

    def _require_purchase(self, purchase_id: str) -> Purchase:
        purchase = self.repo.get_purchase(purchase_id)
        if purchase is None:
            raise NotFoundError("Purchase", purchase_id)
        return purchase

    def create_purchase(
        self,
        amount: Decimal,
        transaction_date: date,
        card_id: Optional[str] = None,
        installment_count: Optional[int] = None,
        description: str = "",
    ) -> Purchase | InstallmentPlan:
        """
        Record a purchase, splitting it into an installment plan when asked.

        Card purchases are authorized against available credit before anything
        is written; an installment plan is authorized against its total.

        Raises:
            ValidationError: On a non-positive amount or installment count below 1
            NotFoundError: If the card does not exist
            InsufficientCreditError: If the card cannot take the amount
        """
        amount = to_positive_money(amount)
        count = 1 if installment_count is None else installment_count
        if count < 1:
            raise ValidationError(f"Installment count must be at least 1, got {count}")

        with self._unit_of_work(card_id):
            card = self._require_card(card_id) if card_id is not None else None
            if card is not None:
                self._authorize(card, amount, count)

            if count > 1:
                plan = generate_installment_plan(amount, count, transaction_date, card_id, description)
                result: Purchase | InstallmentPlan = self.repo.add_plan(plan)
            else:
                result = self.repo.add_purchase(
                    Purchase(
                        id=str(uuid.uuid4()),
                        amount=amount,
                        transaction_date=transaction_date,
                        card_id=card_id,
                        description=description,
                    )
                )

            if card is not None:
                self._recompute_invoices(card)
                record_purchase(True, amount, count)
                log_purchase(card.id, amount, count, True)

            return result

    def get_purchase(self, purchase_id: str) -> Purchase:
        return self._require_purchase(purchase_id)

    def get_plan(self, plan_id: str) -> InstallmentPlan:
        plan = self.repo.get_plan(plan_id)
        if plan is None:
            raise NotFoundError("Installment plan", plan_id)
        return plan

    def update_purchase(
        self,
        purchase_id: str,
        amount: Optional[Decimal] = None,
        transaction_date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> Purchase | InstallmentPlan:
        """
        Edit a purchase retroactively.

        For an installment leg the edit applies to the whole plan: `amount` is
        the new plan total, `transaction_date` the new origin date, and the plan
        is re-split with the same leg ids. Only the increase over the old amount
        is checked against available credit.
        """
        purchase = self._require_purchase(purchase_id)

        with self._unit_of_work(purchase.card_id):
            purchase = self._require_purchase(purchase_id)
            card = self.repo.get_card(purchase.card_id) if purchase.card_id else None

            if purchase.plan_id is not None:
                plan = self.get_plan(purchase.plan_id)
                new_total = to_positive_money(amount) if amount is not None else plan.total
                if card is not None and new_total > plan.total:
                    self._authorize(card, new_total - plan.total, plan.installment_count)

                replacement = generate_installment_plan(
                    new_total,
                    plan.installment_count,
                    transaction_date or plan.purchase_date,
                    plan.card_id,
                    plan.description if description is None else description,
                    plan_id=plan.id,
                )
                for new_leg, old_leg in zip(replacement.legs, plan.legs):
                    new_leg.id = old_leg.id

                self.repo.delete_plan(plan.id)
                result: Purchase | InstallmentPlan = self.repo.add_plan(replacement)
            else:
                new_amount = to_positive_money(amount) if amount is not None else purchase.amount
                if card is not None and new_amount > purchase.amount:
                    self._authorize(card, new_amount - purchase.amount, 1)

                purchase.amount = new_amount
                if transaction_date is not None:
                    purchase.transaction_date = transaction_date
                if description is not None:
                    purchase.description = description
                result = self.repo.update_purchase(purchase)

            if card is not None:
                self._recompute_invoices(card)
            return result

    def delete_purchase(self, purchase_id: str) -> PurchaseDeletion:
        """
        Delete a purchase; a leg of an installment plan takes the whole plan with it.

        The released credit is the sum of every deleted leg (zero for purchases
        not charged to a card).
        """
        purchase = self._require_purchase(purchase_id)

        with self._unit_of_work(purchase.card_id):
            purchase = self._require_purchase(purchase_id)

            if purchase.plan_id is not None:
                legs = self.repo.list_purchases_by_plan(purchase.plan_id)
                deleted_ids = self.repo.delete_plan(purchase.plan_id)
                amount = sum_money(leg.amount for leg in legs)
            else:
                self.repo.delete_purchase(purchase.id)
                deleted_ids = [purchase.id]
                amount = purchase.amount

            released = ZERO
            if purchase.card_id is not None:
                released = amount
                card = self.repo.get_card(purchase.card_id)
                if card is not None:
                    self._recompute_invoices(card)

            log_purchase_deleted(purchase.card_id, deleted_ids, released)
            return PurchaseDeletion(purchase_ids=deleted_ids, released=released)

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def _require_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.repo.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def _refresh_invoice(self, card: Card, invoice: Invoice) -> Invoice:
        """Recompute an invoice's total from its charges and store it"""
        total = aggregate(self.repo, card, invoice.period).total
        updated = settle_recomputed(invoice, total, self.clock())
        self.repo.update_invoice(updated)

        invoice_recompute_counter.inc()
        log_invoice_recomputed(card.id, updated.id, updated.total, updated.paid_amount, updated.status.value)
        return updated

    def _recompute_invoices(self, card: Card) -> None:
        """Invalidate and recompute every stored invoice of the card"""
        for invoice in self.repo.list_invoices(card.id):
            self._refresh_invoice(card, invoice)

    def get_invoice(self, card_id: str, reference_date: Optional[date] = None) -> Invoice:
        """Invoice of the period containing `reference_date` (default today), created on first request"""
        with self._unit_of_work(card_id):
            card = self._require_card(card_id)
            today = self.clock()
            period = resolve_cycle(card, reference_date or today)

            invoice = self.repo.get_invoice_by_period(card.id, period.end)
            if invoice is None:
                invoice = self.repo.add_invoice(
                    Invoice(
                        id=str(uuid.uuid4()),
                        card_id=card.id,
                        period_start=period.start,
                        period_end=period.end,
                        due_date=period.due_date,
                        status=derive_status(ZERO, ZERO, period.end, period.due_date, today),
                    )
                )
            return self._refresh_invoice(card, invoice)

    def get_invoice_by_id(self, invoice_id: str) -> Invoice:
        invoice = self._require_invoice(invoice_id)
        with self._unit_of_work(invoice.card_id):
            card = self._require_card(invoice.card_id)
            return self._refresh_invoice(card, self._require_invoice(invoice_id))

    def list_invoices(self, card_id: str) -> List[Invoice]:
        """Every stored invoice of the card, with totals and status as of today"""
        with self._unit_of_work(card_id):
            card = self._require_card(card_id)
            return [self._refresh_invoice(card, invoice) for invoice in self.repo.list_invoices(card_id)]

    def get_invoice_charges(self, invoice_id: str) -> Aggregation:
        invoice = self._require_invoice(invoice_id)
        card = self._require_card(invoice.card_id)
        return aggregate(self.repo, card, invoice.period)

    def pay_invoice(self, invoice_id: str, amount: Decimal) -> Invoice:
        """
        Pay (part of) an invoice against its freshly recomputed balance.

        Raises:
            ValidationError: If the amount is not positive
            OverpaymentError: If the amount exceeds the remaining balance
        """
        invoice = self._require_invoice(invoice_id)

        with self._unit_of_work(invoice.card_id):
            card = self._require_card(invoice.card_id)
            invoice = self._refresh_invoice(card, self._require_invoice(invoice_id))

            updated = self.repo.update_invoice(apply_payment(invoice, amount, self.clock()))

            record_payment(updated.status.value)
            log_payment(card.id, updated.id, updated.paid_amount - invoice.paid_amount, updated.status.value)
            return updated

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def _require_subscription(self, subscription_id: str) -> Subscription:
        subscription = self.repo.get_subscription(subscription_id)
        if subscription is None:
            raise NotFoundError("Subscription", subscription_id)
        return subscription

    @staticmethod
    def _validate_billing_day(billing_day: int) -> None:
        if not 1 <= billing_day <= 31:
            raise ValidationError(f"billing day must be between 1 and 31, got {billing_day}")

    def create_subscription(
        self,
        name: str,
        amount: Decimal,
        billing_day: int,
        payment_method: PaymentMethod,
        card_id: Optional[str] = None,
        is_active: bool = True,
        start_date: Optional[date] = None,
    ) -> Subscription:
        """
        Raises:
            ValidationError: On a bad amount/billing day, or a card reference
                that does not match the payment method
        """
        if not name or not name.strip():
            raise ValidationError("Subscription name is required")
        amount = to_positive_money(amount)
        self._validate_billing_day(billing_day)
        try:
            payment_method = PaymentMethod(payment_method)
        except ValueError as e:
            raise ValidationError(f"Unknown payment method: {payment_method!r}") from e
        if payment_method == PaymentMethod.CREDIT_CARD and card_id is None:
            raise ValidationError("Credit card subscriptions need a card")
        if payment_method != PaymentMethod.CREDIT_CARD and card_id is not None:
            raise ValidationError(f"{payment_method.value} subscriptions cannot reference a card")

        with self._unit_of_work(card_id):
            card = self._require_card(card_id) if card_id is not None else None
            subscription = self.repo.add_subscription(
                Subscription(
                    id=str(uuid.uuid4()),
                    name=name,
                    amount=amount,
                    billing_day=billing_day,
                    payment_method=payment_method,
                    card_id=card_id,
                    is_active=is_active,
                    start_date=start_date or self.clock(),
                )
            )
            if card is not None:
                self._recompute_invoices(card)
            return subscription

    def get_subscription(self, subscription_id: str) -> Subscription:
        return self._require_subscription(subscription_id)

    def list_subscriptions(self, card_id: Optional[str] = None) -> List[Subscription]:
        return self.repo.list_subscriptions(card_id)

    def update_subscription(
        self,
        subscription_id: str,
        name: Optional[str] = None,
        amount: Optional[Decimal] = None,
        billing_day: Optional[int] = None,
        is_active: Optional[bool] = None,
        start_date: Optional[date] = None,
    ) -> Subscription:
        subscription = self._require_subscription(subscription_id)

        with self._unit_of_work(subscription.card_id):
            subscription = self._require_subscription(subscription_id)
            if name is not None:
                subscription.name = name
            if amount is not None:
                subscription.amount = to_positive_money(amount)
            if billing_day is not None:
                self._validate_billing_day(billing_day)
                subscription.billing_day = billing_day
            if is_active is not None:
                subscription.is_active = is_active
            if start_date is not None:
                subscription.start_date = start_date

            updated = self.repo.update_subscription(subscription)
            self._recompute_for(updated.card_id)
            return updated

    def delete_subscription(self, subscription_id: str) -> None:
        subscription = self._require_subscription(subscription_id)

        with self._unit_of_work(subscription.card_id):
            self.repo.delete_subscription(subscription_id)
            self._recompute_for(subscription.card_id)

    def _recompute_for(self, card_id: Optional[str]) -> None:
        if card_id is None:
            return
        card = self.repo.get_card(card_id)
        if card is not None:
            self._recompute_invoices(card)
