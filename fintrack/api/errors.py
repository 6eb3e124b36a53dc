"""Map domain exceptions to HTTP responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fintrack.api.dependencies import get_request_id
from fintrack.domain.exceptions import (
    CardInUseError,
    DomainException,
    InsufficientCreditError,
    NotFoundError,
    OverpaymentError,
    ValidationError,
)


def _error(request: Request, status_code: int, exc: Exception, **fields) -> JSONResponse:
    logging.warning(
        f"Request rejected: {exc}",
        extra={"request_id": get_request_id(request), "error": type(exc).__name__, "status": status_code},
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc), **fields})


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers; the most specific exception class wins"""

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return _error(request, 422, exc)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return _error(request, 404, exc)

    @app.exception_handler(InsufficientCreditError)
    async def insufficient_credit(request: Request, exc: InsufficientCreditError):
        return _error(request, 400, exc, available=str(exc.available))

    @app.exception_handler(OverpaymentError)
    async def overpayment(request: Request, exc: OverpaymentError):
        return _error(request, 400, exc, remaining=str(exc.remaining))

    @app.exception_handler(CardInUseError)
    async def card_in_use(request: Request, exc: CardInUseError):
        return _error(request, 409, exc)

    @app.exception_handler(DomainException)
    async def domain_error(request: Request, exc: DomainException):
        return _error(request, 400, exc)
