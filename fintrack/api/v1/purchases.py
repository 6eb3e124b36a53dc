"""/v1/purchases - record, edit and delete purchases and installment plans"""

from fastapi import APIRouter, Depends

from fintrack.api.dependencies import get_ledger_service
from fintrack.api.v1.schemas import (
    InstallmentPlanResponse,
    PurchaseCreateRequest,
    PurchaseCreateResponse,
    PurchaseDeletionResponse,
    PurchaseResponse,
    PurchaseUpdateRequest,
)
from fintrack.domain.ledger import LedgerService
from fintrack.domain.models import InstallmentPlan, Purchase

router = APIRouter()


def _created(result: Purchase | InstallmentPlan) -> PurchaseCreateResponse:
    if isinstance(result, InstallmentPlan):
        return PurchaseCreateResponse(plan=InstallmentPlanResponse.model_validate(result))
    return PurchaseCreateResponse(purchase=PurchaseResponse.model_validate(result))


@router.post("/purchases", response_model=PurchaseCreateResponse, status_code=201)
def create_purchase(request_body: PurchaseCreateRequest, service: LedgerService = Depends(get_ledger_service)):
    """
    Record a purchase, optionally split into monthly installments.

    Flow:
    1. Authorize against the card's available credit (card purchases only)
    2. Create the purchase, or the plan with all of its legs
    3. Recompute the card's invoices
    """
    result = service.create_purchase(
        amount=request_body.amount,
        transaction_date=request_body.transaction_date,
        card_id=request_body.card_id,
        installment_count=request_body.installment_count,
        description=request_body.description,
    )
    return _created(result)


@router.get("/purchases/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(purchase_id: str, service: LedgerService = Depends(get_ledger_service)):
    return PurchaseResponse.model_validate(service.get_purchase(purchase_id))


@router.get("/plans/{plan_id}", response_model=InstallmentPlanResponse)
def get_plan(plan_id: str, service: LedgerService = Depends(get_ledger_service)):
    """Installment plan with its leg schedule"""
    return InstallmentPlanResponse.model_validate(service.get_plan(plan_id))


@router.patch("/purchases/{purchase_id}", response_model=PurchaseCreateResponse)
def update_purchase(
    purchase_id: str,
    request_body: PurchaseUpdateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    result = service.update_purchase(purchase_id, **request_body.model_dump(exclude_unset=True))
    return _created(result)


@router.delete("/purchases/{purchase_id}", response_model=PurchaseDeletionResponse)
def delete_purchase(purchase_id: str, service: LedgerService = Depends(get_ledger_service)):
    """Delete a purchase; deleting an installment leg deletes the whole plan"""
    deletion = service.delete_purchase(purchase_id)
    return PurchaseDeletionResponse.model_validate(deletion)
