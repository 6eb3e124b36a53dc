"""/v1/cards - card configuration, credit and invoices"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from fintrack.api.dependencies import get_ledger_service
from fintrack.api.v1.schemas import (
    AvailableCreditResponse,
    CardActiveRequest,
    CardBlockedRequest,
    CardCreateRequest,
    CardResponse,
    CardsSummaryResponse,
    CardUpdateRequest,
    InvoiceResponse,
    PurchaseCheckRequest,
    PurchaseCheckResponse,
)
from fintrack.domain.ledger import LedgerService

router = APIRouter()


@router.post("/cards", response_model=CardResponse, status_code=201)
def create_card(request_body: CardCreateRequest, service: LedgerService = Depends(get_ledger_service)):
    """Register a credit card"""
    card = service.create_card(**request_body.model_dump())
    return CardResponse.model_validate(card)


@router.get("/cards", response_model=List[CardResponse])
def list_cards(service: LedgerService = Depends(get_ledger_service)):
    return [CardResponse.model_validate(card) for card in service.list_cards()]


@router.get("/cards/summary", response_model=CardsSummaryResponse)
def cards_summary(service: LedgerService = Depends(get_ledger_service)):
    """Limit, usage and availability totals across every card"""
    return CardsSummaryResponse.model_validate(service.cards_summary())


@router.get("/cards/{card_id}", response_model=CardResponse)
def get_card(card_id: str, service: LedgerService = Depends(get_ledger_service)):
    return CardResponse.model_validate(service.get_card(card_id))


@router.patch("/cards/{card_id}", response_model=CardResponse)
def update_card(
    card_id: str,
    request_body: CardUpdateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    card = service.update_card(card_id, **request_body.model_dump(exclude_unset=True))
    return CardResponse.model_validate(card)


@router.delete("/cards/{card_id}", status_code=204)
def delete_card(card_id: str, service: LedgerService = Depends(get_ledger_service)):
    """Delete a card that has no purchases or subscriptions"""
    service.delete_card(card_id)
    return Response(status_code=204)


@router.put("/cards/{card_id}/blocked", response_model=CardResponse)
def set_card_blocked(
    card_id: str,
    request_body: CardBlockedRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    card = service.toggle_card_blocked(card_id, request_body.blocked)
    return CardResponse.model_validate(card)


@router.put("/cards/{card_id}/active", response_model=CardResponse)
def set_card_active(
    card_id: str,
    request_body: CardActiveRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    card = service.toggle_card_active(card_id, request_body.active)
    return CardResponse.model_validate(card)


@router.get("/cards/{card_id}/available-credit", response_model=AvailableCreditResponse)
def get_available_credit(card_id: str, service: LedgerService = Depends(get_ledger_service)):
    """
    Spendable credit right now.

    Returns:
        Available amount plus the billing invoice's status, total, paid and remaining
    """
    return AvailableCreditResponse.model_validate(service.get_available_credit(card_id))


@router.post("/cards/{card_id}/purchase-check", response_model=PurchaseCheckResponse)
def check_purchase(
    card_id: str,
    request_body: PurchaseCheckRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """Ask whether a purchase would be authorized, without recording it"""
    return PurchaseCheckResponse.model_validate(service.check_purchase(card_id, request_body.amount))


@router.get("/cards/{card_id}/invoice", response_model=InvoiceResponse)
def get_invoice(
    card_id: str,
    reference_date: Optional[date] = Query(None, description="Any day inside the wanted period (default today)"),
    service: LedgerService = Depends(get_ledger_service),
):
    """Invoice for the period containing reference_date, created on first request"""
    invoice = service.get_invoice(card_id, reference_date)
    return InvoiceResponse.model_validate(invoice)


@router.get("/cards/{card_id}/invoices", response_model=List[InvoiceResponse])
def list_invoices(card_id: str, service: LedgerService = Depends(get_ledger_service)):
    return [InvoiceResponse.model_validate(invoice) for invoice in service.list_invoices(card_id)]
