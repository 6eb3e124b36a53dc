"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from fintrack.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_purchase(
    card_id: Optional[str],
    amount: Decimal,
    installment_count: int,
    authorized: bool,
    available: Optional[Decimal] = None,
    reason: Optional[str] = None,
) -> None:
    """Log structured purchase authorization outcome"""
    logging.info(
        "Purchase authorized" if authorized else "Purchase declined",
        extra={
            "step": "purchase",
            "card_id": card_id,
            "amount": str(amount),
            "installment_count": installment_count,
            "outcome": "authorized" if authorized else "declined",
            "available": str(available) if available is not None else None,
            "reason": reason,
        },
    )


def log_purchase_deleted(card_id: Optional[str], purchase_ids: list[str], released: Decimal) -> None:
    logging.info(
        "Purchase deleted",
        extra={
            "step": "purchase_deleted",
            "card_id": card_id,
            "purchase_count": len(purchase_ids),
            "released": str(released),
        },
    )


def log_invoice_recomputed(card_id: str, invoice_id: str, total: Decimal, paid_amount: Decimal, status: str) -> None:
    logging.debug(
        "Invoice recomputed",
        extra={
            "step": "invoice_recompute",
            "card_id": card_id,
            "invoice_id": invoice_id,
            "total": str(total),
            "paid_amount": str(paid_amount),
            "status": status,
        },
    )


def log_payment(card_id: str, invoice_id: str, amount: Decimal, status: str) -> None:
    logging.info(
        "Invoice payment applied",
        extra={
            "step": "payment",
            "card_id": card_id,
            "invoice_id": invoice_id,
            "amount": str(amount),
            "status": status,
        },
    )
