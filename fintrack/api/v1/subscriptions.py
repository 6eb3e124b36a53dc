"""/v1/subscriptions - recurring charges"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from fintrack.api.dependencies import get_ledger_service
from fintrack.api.v1.schemas import (
    SubscriptionCreateRequest,
    SubscriptionResponse,
    SubscriptionUpdateRequest,
)
from fintrack.domain.ledger import LedgerService

router = APIRouter()


@router.post("/subscriptions", response_model=SubscriptionResponse, status_code=201)
def create_subscription(
    request_body: SubscriptionCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    subscription = service.create_subscription(**request_body.model_dump())
    return SubscriptionResponse.model_validate(subscription)


@router.get("/subscriptions", response_model=List[SubscriptionResponse])
def list_subscriptions(
    card_id: Optional[str] = Query(None, description="Only subscriptions billed to this card"),
    service: LedgerService = Depends(get_ledger_service),
):
    return [SubscriptionResponse.model_validate(s) for s in service.list_subscriptions(card_id)]


@router.get("/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription(subscription_id: str, service: LedgerService = Depends(get_ledger_service)):
    return SubscriptionResponse.model_validate(service.get_subscription(subscription_id))


@router.patch("/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
def update_subscription(
    subscription_id: str,
    request_body: SubscriptionUpdateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    subscription = service.update_subscription(subscription_id, **request_body.model_dump(exclude_unset=True))
    return SubscriptionResponse.model_validate(subscription)


@router.delete("/subscriptions/{subscription_id}", status_code=204)
def delete_subscription(subscription_id: str, service: LedgerService = Depends(get_ledger_service)):
    service.delete_subscription(subscription_id)
    return Response(status_code=204)
