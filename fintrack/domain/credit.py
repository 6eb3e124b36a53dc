"""Available-credit calculator - core business logic for purchase authorization"""

from datetime import date
from decimal import Decimal
from typing import Tuple

from fintrack.domain.aggregator import aggregate, reserved_after
from fintrack.domain.billing_cycle import previous_cycle, resolve_cycle
from fintrack.domain.exceptions import CardUnavailableError, InsufficientCreditError
from fintrack.domain.models import AvailableCredit, Card, InvoicePeriod, InvoiceStatus, PurchaseCheck
from fintrack.domain.money import ZERO
from fintrack.domain.repository import LedgerRepository


def invoice_figures(repo: LedgerRepository, card: Card, period: InvoicePeriod) -> Tuple[Decimal, Decimal]:
    """
    Freshly aggregated total and paid amount for a period.

    Paid amount comes from the stored invoice (if one was ever created) and
    counts as zero when nothing is billed in the period.
    """
    total = aggregate(repo, card, period).total
    invoice = repo.get_invoice_by_period(card.id, period.end)
    paid = invoice.paid_amount if invoice is not None and total > ZERO else ZERO
    return total, paid


def available_credit(repo: LedgerRepository, card: Card, today: date) -> AvailableCredit:
    """
    Compute spendable credit on a card as of `today`.

    The billing period is the one containing today, unless the period right
    before it has closed with an unpaid balance:

    - closed period, remaining > 0: status closed, available 0 until paid
    - closed period settled, nothing outstanding now: status paid, a fresh cycle
    - otherwise: status open, available = limit - remaining - reserved

    `reserved` is credit held by purchases dated after the evaluated period
    (future installment legs). Available always stays within [0, limit].
    """
    current = resolve_cycle(card, today)
    previous = previous_cycle(card, current)

    previous_total, previous_paid = invoice_figures(repo, card, previous)
    previous_remaining = max(ZERO, previous_total - previous_paid)

    if previous_remaining > ZERO:
        reserved = reserved_after(repo, card, previous)
        return AvailableCredit(
            card_id=card.id,
            limit=card.limit,
            available=ZERO,
            used=previous_remaining + reserved,
            invoice_status=InvoiceStatus.CLOSED,
            invoice_total=previous_total,
            paid_amount=previous_paid,
            remaining=previous_remaining,
            reserved=reserved,
            period=previous,
        )

    total, paid = invoice_figures(repo, card, current)
    remaining = max(ZERO, total - paid)
    reserved = reserved_after(repo, card, current)

    if previous_total > ZERO and remaining == ZERO:
        return AvailableCredit(
            card_id=card.id,
            limit=card.limit,
            available=max(ZERO, card.limit - reserved),
            used=reserved,
            invoice_status=InvoiceStatus.PAID,
            invoice_total=previous_total,
            paid_amount=previous_paid,
            remaining=ZERO,
            reserved=reserved,
            period=previous,
        )

    used = remaining + reserved
    return AvailableCredit(
        card_id=card.id,
        limit=card.limit,
        available=max(ZERO, card.limit - used),
        used=used,
        invoice_status=InvoiceStatus.OPEN,
        invoice_total=total,
        paid_amount=paid,
        remaining=remaining,
        reserved=reserved,
        period=current,
    )


def check_purchase(card: Card, amount: Decimal, credit: AvailableCredit) -> PurchaseCheck:
    """Decide whether a purchase fits, without raising"""
    if card.is_blocked:
        return PurchaseCheck(can_purchase=False, available=ZERO, reason="Card is blocked")
    if not card.is_active:
        return PurchaseCheck(can_purchase=False, available=ZERO, reason="Card is inactive")
    if credit.invoice_status == InvoiceStatus.CLOSED:
        return PurchaseCheck(
            can_purchase=False,
            available=ZERO,
            reason="Invoice closed with an unpaid balance; credit is available after payment",
        )
    if amount > credit.available:
        return PurchaseCheck(
            can_purchase=False,
            available=credit.available,
            reason=f"Amount {amount} exceeds available credit {credit.available}",
        )
    return PurchaseCheck(can_purchase=True, available=credit.available)


def authorize_purchase(card: Card, amount: Decimal, credit: AvailableCredit) -> None:
    """
    Raises:
        CardUnavailableError: If the card is blocked or inactive
        InsufficientCreditError: If the amount exceeds available credit
    """
    check = check_purchase(card, amount, credit)
    if check.can_purchase:
        return
    if not card.accepts_purchases:
        raise CardUnavailableError(check.reason)
    raise InsufficientCreditError(check.available, check.reason)
