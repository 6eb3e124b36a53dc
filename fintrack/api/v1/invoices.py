"""/v1/invoices - invoice details and payments"""

from fastapi import APIRouter, Depends

from fintrack.api.dependencies import get_ledger_service
from fintrack.api.v1.schemas import InvoiceChargesResponse, InvoiceResponse, PaymentRequest
from fintrack.domain.ledger import LedgerService

router = APIRouter()


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: str, service: LedgerService = Depends(get_ledger_service)):
    invoice = service.get_invoice_by_id(invoice_id)
    return InvoiceResponse.model_validate(invoice)


@router.get("/invoices/{invoice_id}/charges", response_model=InvoiceChargesResponse)
def get_invoice_charges(invoice_id: str, service: LedgerService = Depends(get_ledger_service)):
    """Purchase legs and subscription charges billed on the invoice"""
    return InvoiceChargesResponse.model_validate(service.get_invoice_charges(invoice_id))


@router.post("/invoices/{invoice_id}/payments", response_model=InvoiceResponse)
def pay_invoice(
    invoice_id: str,
    request_body: PaymentRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Pay (part of) an invoice.

    Returns:
        Updated invoice; 400 when the amount exceeds the remaining balance
    """
    invoice = service.pay_invoice(invoice_id, request_body.amount)
    return InvoiceResponse.model_validate(invoice)
