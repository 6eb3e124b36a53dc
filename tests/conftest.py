"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from fintrack.api.dependencies import get_clock, get_repository
from fintrack.api.main import create_app
from fintrack.domain.ledger import LedgerService
from fintrack.domain.models import Card
from fintrack.infrastructure.locks import CardLockRegistry
from fintrack.infrastructure.memory.store import InMemoryLedgerRepository


class FixedClock:
    """Settable stand-in for date.today"""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to 2025-03-10; tests move it forward to close periods"""
    return FixedClock(date(2025, 3, 10))


@pytest.fixture
def repo() -> InMemoryLedgerRepository:
    return InMemoryLedgerRepository()


@pytest.fixture
def service(repo: InMemoryLedgerRepository, clock: FixedClock) -> LedgerService:
    """Ledger service with its own lock registry so tests never share locks"""
    return LedgerService(repo, clock=clock, locks=CardLockRegistry())


@pytest.fixture
def card(service: LedgerService) -> Card:
    """Card with limit 1000.00, closing day 5, due day 15"""
    return service.create_card(name="Visa", limit=Decimal("1000.00"), closing_day=5, due_day=15)


@pytest.fixture
def client(repo: InMemoryLedgerRepository, clock: FixedClock) -> Generator[TestClient, None, None]:
    """Create FastAPI test client bound to an isolated in-memory store"""
    app = create_app()

    def override_get_repository():
        yield repo

    app.dependency_overrides[get_repository] = override_get_repository
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
