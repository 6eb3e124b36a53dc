"""Domain-specific exceptions"""

from decimal import Decimal


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Request data is malformed or missing required fields"""

    pass


class InvalidCardConfigError(ValidationError):
    """Closing/due day out of range, or closing day equals due day"""

    pass


class NotFoundError(DomainException):
    """Unknown card, purchase, invoice or subscription id"""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class InsufficientCreditError(DomainException):
    """Purchase amount exceeds the card's available credit"""

    def __init__(self, available: Decimal, message: str | None = None):
        super().__init__(message or f"Insufficient credit: available {available}")
        self.available = available


class CardUnavailableError(InsufficientCreditError):
    """Card is blocked or inactive, so nothing is available to spend"""

    def __init__(self, reason: str):
        super().__init__(Decimal("0.00"), reason)


class OverpaymentError(DomainException):
    """Payment exceeds the invoice's remaining balance"""

    def __init__(self, amount: Decimal, remaining: Decimal):
        super().__init__(f"Payment of {amount} exceeds remaining invoice balance of {remaining}")
        self.amount = amount
        self.remaining = remaining


class CardInUseError(DomainException):
    """Card still has purchases or subscriptions attached"""

    pass
