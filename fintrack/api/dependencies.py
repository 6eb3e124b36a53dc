"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Callable, Iterator

from fastapi import Depends, Request

from fintrack.config import settings
from fintrack.domain.ledger import LedgerService
from fintrack.domain.repository import LedgerRepository
from fintrack.infrastructure.database.repositories import SqlLedgerRepository
from fintrack.infrastructure.database.session import SessionLocal
from fintrack.infrastructure.memory.store import InMemoryLedgerRepository

# Process-wide store for the "memory" backend
memory_repository = InMemoryLedgerRepository()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_repository() -> Iterator[LedgerRepository]:
    """Provide the configured record store, one SQL session per request"""
    if settings.storage_backend != "sql":
        yield memory_repository
        return

    db = SessionLocal()
    try:
        yield SqlLedgerRepository(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_clock() -> Callable[[], date]:
    """Provide the source of "today" for billing decisions"""
    return date.today


def get_ledger_service(
    repo: LedgerRepository = Depends(get_repository),
    clock: Callable[[], date] = Depends(get_clock),
) -> LedgerService:
    """Provide a ledger service bound to this request's store"""
    return LedgerService(repo, clock=clock)
