"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from fintrack.domain.money import ZERO


class InvoiceStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    PAID = "paid"
    PARTIAL = "partial"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT = "debit"
    CASH = "cash"
    PIX = "pix"
    TRANSFER = "transfer"


@dataclass
class Card:
    """Credit card with its billing configuration"""

    id: str
    name: str
    limit: Decimal
    closing_day: int
    due_day: int
    is_active: bool = True
    is_blocked: bool = False

    @property
    def accepts_purchases(self) -> bool:
        return self.is_active and not self.is_blocked


@dataclass
class Purchase:
    """Single purchase, or one leg of an installment plan"""

    id: str
    amount: Decimal
    transaction_date: date
    card_id: Optional[str] = None  # None for cash/debit purchases
    description: str = ""
    plan_id: Optional[str] = None
    installment_index: Optional[int] = None  # 1-based
    installment_count: Optional[int] = None


@dataclass
class InstallmentPlan:
    """Purchase split into monthly legs"""

    id: str
    total: Decimal
    installment_count: int
    purchase_date: date
    card_id: Optional[str] = None
    description: str = ""
    legs: List[Purchase] = field(default_factory=list)


@dataclass(frozen=True)
class InvoicePeriod:
    """Billing cycle [start, end] (both inclusive) and its due date"""

    start: date
    end: date
    due_date: date


@dataclass(frozen=True)
class PeriodKey:
    """Identity of an invoice period: owning card plus period end date"""

    card_id: str
    period_end: date


@dataclass
class Invoice:
    """Monthly statement for one card and one period"""

    id: str
    card_id: str
    period_start: date
    period_end: date
    due_date: date
    total: Decimal = ZERO
    paid_amount: Decimal = ZERO
    status: InvoiceStatus = InvoiceStatus.OPEN

    @property
    def remaining(self) -> Decimal:
        return max(ZERO, self.total - self.paid_amount)

    @property
    def period(self) -> InvoicePeriod:
        return InvoicePeriod(self.period_start, self.period_end, self.due_date)


@dataclass
class Subscription:
    """Recurring monthly charge"""

    id: str
    name: str
    amount: Decimal
    billing_day: int
    payment_method: PaymentMethod
    card_id: Optional[str] = None
    is_active: bool = True
    start_date: Optional[date] = None  # charges dated before this are not billed

    @property
    def is_card_billed(self) -> bool:
        return self.payment_method == PaymentMethod.CREDIT_CARD and self.card_id is not None


@dataclass(frozen=True)
class SubscriptionCharge:
    """A subscription's charge placed on a concrete billing date"""

    subscription_id: str
    billing_date: date
    amount: Decimal


@dataclass
class Aggregation:
    """Everything billed in one invoice period"""

    key: PeriodKey
    period: InvoicePeriod
    legs: List[Purchase]
    subscription_charges: List[SubscriptionCharge]
    total: Decimal


@dataclass
class AvailableCredit:
    """Spendable headroom on a card at a given day"""

    card_id: str
    limit: Decimal
    available: Decimal
    used: Decimal
    invoice_status: InvoiceStatus
    invoice_total: Decimal
    paid_amount: Decimal
    remaining: Decimal
    reserved: Decimal  # legs dated after the evaluated period
    period: InvoicePeriod


@dataclass
class PurchaseCheck:
    """Non-raising answer to "can this card take this purchase?" """

    can_purchase: bool
    available: Decimal
    reason: Optional[str] = None


@dataclass
class PurchaseDeletion:
    """Outcome of deleting a purchase or a whole installment plan"""

    purchase_ids: List[str]
    released: Decimal


@dataclass
class CardsSummary:
    total_cards: int
    active_cards: int
    blocked_cards: int
    total_limit: Decimal
    total_used: Decimal
    total_available: Decimal
    usage_percentage: Decimal
