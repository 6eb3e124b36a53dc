"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fintrack.domain.models import InvoiceStatus, PaymentMethod


class ResponseModel(BaseModel):
    """Responses are built straight from domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


# Cards


class CardCreateRequest(BaseModel):
    """Request body for POST /v1/cards"""

    name: str = Field(..., min_length=1, description="Display name")
    limit: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2, description="Credit limit")
    closing_day: int = Field(..., description="Day of month the invoice closes (1-31)")
    due_day: int = Field(..., description="Day of month the invoice is due (1-31)")
    is_active: bool = True
    is_blocked: bool = False


class CardUpdateRequest(BaseModel):
    """Request body for PATCH /v1/cards/{card_id}"""

    name: Optional[str] = Field(None, min_length=1)
    limit: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    closing_day: Optional[int] = None
    due_day: Optional[int] = None


class CardBlockedRequest(BaseModel):
    blocked: bool


class CardActiveRequest(BaseModel):
    active: bool


class CardResponse(ResponseModel):
    id: str
    name: str
    limit: Decimal
    closing_day: int
    due_day: int
    is_active: bool
    is_blocked: bool


class CardsSummaryResponse(ResponseModel):
    """Response for GET /v1/cards/summary"""

    total_cards: int
    active_cards: int
    blocked_cards: int
    total_limit: Decimal
    total_used: Decimal
    total_available: Decimal
    usage_percentage: Decimal


class PeriodSchema(ResponseModel):
    """Invoice period, both ends inclusive"""

    start: date
    end: date
    due_date: date


class AvailableCreditResponse(ResponseModel):
    """Response for GET /v1/cards/{card_id}/available-credit"""

    card_id: str
    limit: Decimal
    available: Decimal
    used: Decimal
    invoice_status: InvoiceStatus
    invoice_total: Decimal
    paid_amount: Decimal
    remaining: Decimal
    reserved: Decimal
    period: PeriodSchema


class PurchaseCheckRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)


class PurchaseCheckResponse(ResponseModel):
    can_purchase: bool
    available: Decimal
    reason: Optional[str] = None


# Purchases


class PurchaseCreateRequest(BaseModel):
    """Request body for POST /v1/purchases"""

    card_id: Optional[str] = Field(None, description="Card charged; omit for cash/debit purchases")
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2, description="Total purchase amount")
    transaction_date: date
    installment_count: Optional[int] = Field(None, ge=1, description="Split into monthly installments")
    description: str = ""


class PurchaseUpdateRequest(BaseModel):
    """Request body for PATCH /v1/purchases/{purchase_id}; for installment legs amount is the plan total"""

    amount: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    transaction_date: Optional[date] = None
    description: Optional[str] = None


class PurchaseResponse(ResponseModel):
    id: str
    card_id: Optional[str]
    amount: Decimal
    transaction_date: date
    description: str
    plan_id: Optional[str] = None
    installment_index: Optional[int] = None
    installment_count: Optional[int] = None


class InstallmentPlanResponse(ResponseModel):
    id: str
    card_id: Optional[str]
    total: Decimal
    installment_count: int
    purchase_date: date
    description: str
    legs: List[PurchaseResponse]


class PurchaseCreateResponse(BaseModel):
    """Exactly one of purchase/plan is set"""

    purchase: Optional[PurchaseResponse] = None
    plan: Optional[InstallmentPlanResponse] = None


class PurchaseDeletionResponse(ResponseModel):
    purchase_ids: List[str]
    released: Decimal


# Invoices


class InvoiceResponse(ResponseModel):
    id: str
    card_id: str
    period_start: date
    period_end: date
    due_date: date
    total: Decimal
    paid_amount: Decimal
    remaining: Decimal
    status: InvoiceStatus


class SubscriptionChargeSchema(ResponseModel):
    subscription_id: str
    billing_date: date
    amount: Decimal


class InvoiceChargesResponse(ResponseModel):
    """Response for GET /v1/invoices/{invoice_id}/charges"""

    period: PeriodSchema
    legs: List[PurchaseResponse]
    subscription_charges: List[SubscriptionChargeSchema]
    total: Decimal


class PaymentRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)


# Subscriptions


class SubscriptionCreateRequest(BaseModel):
    """Request body for POST /v1/subscriptions"""

    name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    billing_day: int = Field(..., ge=1, le=31)
    payment_method: PaymentMethod
    card_id: Optional[str] = None
    is_active: bool = True
    start_date: Optional[date] = None


class SubscriptionUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    billing_day: Optional[int] = Field(None, ge=1, le=31)
    is_active: Optional[bool] = None
    start_date: Optional[date] = None


class SubscriptionResponse(ResponseModel):
    id: str
    name: str
    amount: Decimal
    billing_day: int
    payment_method: PaymentMethod
    card_id: Optional[str]
    is_active: bool
    start_date: Optional[date]
