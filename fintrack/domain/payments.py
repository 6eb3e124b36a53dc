"""Payment applicator and invoice status rules"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from fintrack.domain.exceptions import OverpaymentError
from fintrack.domain.models import Invoice, InvoiceStatus
from fintrack.domain.money import ZERO, to_positive_money


def derive_status(total: Decimal, paid_amount: Decimal, period_end: date, due_date: date, today: date) -> InvoiceStatus:
    """
    Status of an invoice given its figures and the current day.

    Precedence: paid > partial > overdue > closed > open.
    """
    remaining = max(ZERO, total - paid_amount)
    if total > ZERO and remaining == ZERO:
        return InvoiceStatus.PAID
    if paid_amount > ZERO:
        return InvoiceStatus.PARTIAL
    if today > due_date and remaining > ZERO:
        return InvoiceStatus.OVERDUE
    if today > period_end:
        return InvoiceStatus.CLOSED
    return InvoiceStatus.OPEN


def apply_payment(invoice: Invoice, amount: Decimal, today: date) -> Invoice:
    """
    Apply a payment to an invoice and return the updated invoice.

    Raises:
        ValidationError: If the amount is not positive
        OverpaymentError: If the amount exceeds the remaining balance
    """
    amount = to_positive_money(amount)
    remaining = invoice.remaining
    if amount > remaining:
        raise OverpaymentError(amount, remaining)

    paid_amount = invoice.paid_amount + amount
    return replace(
        invoice,
        paid_amount=paid_amount,
        status=derive_status(invoice.total, paid_amount, invoice.period_end, invoice.due_date, today),
    )


def settle_recomputed(invoice: Invoice, total: Decimal, today: date) -> Invoice:
    """
    Apply a freshly aggregated total to an invoice.

    A payment cannot outlive its debt: when the total drops to zero the paid
    amount is forced back to zero and the status returns to its baseline.
    """
    paid_amount = invoice.paid_amount if total > ZERO else ZERO
    return replace(
        invoice,
        total=total,
        paid_amount=paid_amount,
        status=derive_status(total, paid_amount, invoice.period_end, invoice.due_date, today),
    )
