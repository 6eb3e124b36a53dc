"""Integration tests for the SQLAlchemy-backed ledger store"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from fintrack.domain.exceptions import InsufficientCreditError, OverpaymentError
from fintrack.domain.ledger import LedgerService
from fintrack.domain.models import InvoiceStatus, PaymentMethod, Purchase
from fintrack.infrastructure.database.models import Base, InvoiceRecord, PurchaseRecord
from fintrack.infrastructure.database.repositories import SqlLedgerRepository
from fintrack.infrastructure.database.session import engine_options
from fintrack.infrastructure.locks import CardLockRegistry


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """In-memory SQLite database shared by every connection of the test"""
    engine = create_engine("sqlite://", poolclass=StaticPool, **engine_options("sqlite://"))
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sql_service(db: Session, clock) -> LedgerService:
    return LedgerService(SqlLedgerRepository(db), clock=clock, locks=CardLockRegistry())


def test_engine_options_per_backend():
    assert engine_options("sqlite:///./fintrack.db") == {"connect_args": {"check_same_thread": False}}
    assert engine_options("postgresql://localhost/fintrack")["pool_pre_ping"] is True


def test_amounts_stored_as_cents(sql_service: LedgerService, db: Session):
    card = sql_service.create_card(name="Visa", limit=Decimal("1000.00"), closing_day=5, due_day=15)
    purchase = sql_service.create_purchase(Decimal("12.34"), date(2025, 3, 10), card_id=card.id)

    assert db.get(PurchaseRecord, purchase.id).amount_cents == 1234
    assert sql_service.get_purchase(purchase.id).amount == Decimal("12.34")
    assert sql_service.get_card(card.id).limit == Decimal("1000.00")


def test_installment_plan_round_trip(sql_service: LedgerService, db: Session):
    card = sql_service.create_card(name="Visa", limit=Decimal("1000.00"), closing_day=5, due_day=15)
    plan = sql_service.create_purchase(Decimal("100.00"), date(2025, 3, 10), card_id=card.id, installment_count=3)

    stored = sql_service.get_plan(plan.id)
    assert [leg.amount for leg in stored.legs] == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sql_service.get_available_credit(card.id).available == Decimal("900.00")

    updated = sql_service.update_purchase(plan.legs[0].id, amount=Decimal("120.00"))
    assert [leg.id for leg in updated.legs] == [leg.id for leg in plan.legs]
    assert [leg.amount for leg in updated.legs] == [Decimal("40.00")] * 3

    deletion = sql_service.delete_purchase(plan.legs[1].id)
    assert deletion.released == Decimal("120.00")
    assert db.query(PurchaseRecord).count() == 0
    assert sql_service.get_available_credit(card.id).available == Decimal("1000.00")


def test_invoice_payment_cycle(sql_service: LedgerService, clock):
    card = sql_service.create_card(name="Visa", limit=Decimal("1000.00"), closing_day=5, due_day=15)
    sql_service.create_purchase(Decimal("1000.00"), date(2025, 3, 10), card_id=card.id)
    invoice = sql_service.get_invoice(card.id)

    clock.today = date(2025, 4, 10)
    assert sql_service.get_available_credit(card.id).available == Decimal("0.00")

    with pytest.raises(OverpaymentError):
        sql_service.pay_invoice(invoice.id, Decimal("1000.01"))

    paid = sql_service.pay_invoice(invoice.id, Decimal("1000.00"))

    assert paid.status == InvoiceStatus.PAID
    assert sql_service.get_available_credit(card.id).available == Decimal("1000.00")
    assert sql_service.list_invoices(card.id)[0].paid_amount == Decimal("1000.00")


def test_failed_operation_rolls_back_pending_writes(sql_service: LedgerService):
    card = sql_service.create_card(name="Visa", limit=Decimal("1000.00"), closing_day=5, due_day=15)
    sql_service.repo.add_purchase(
        Purchase(id="pending", amount=Decimal("10.00"), transaction_date=date(2025, 3, 10), card_id=card.id)
    )

    with pytest.raises(InsufficientCreditError):
        sql_service.create_purchase(Decimal("995.00"), date(2025, 3, 10), card_id=card.id)

    assert sql_service.repo.list_purchases_by_card(card.id) == []


def test_purchase_committed_before_card_lock_is_released(tmp_path, clock):
    """A second session taking the card lock must see the first session's purchase"""
    url = f"sqlite:///{tmp_path / 'ledger.db'}"
    engine = create_engine(url, **engine_options(url))
    Base.metadata.create_all(bind=engine)
    make_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    locks = CardLockRegistry()
    first_db, second_db = make_session(), make_session()
    try:
        first = LedgerService(SqlLedgerRepository(first_db), clock=clock, locks=locks)
        second = LedgerService(SqlLedgerRepository(second_db), clock=clock, locks=locks)

        card = first.create_card(name="Visa", limit=Decimal("1000.00"), closing_day=5, due_day=15)
        first.create_purchase(Decimal("600.00"), date(2025, 3, 10), card_id=card.id)

        check = second.check_purchase(card.id, Decimal("600.00"))
        assert check.can_purchase is False
        assert check.available == Decimal("400.00")
        with pytest.raises(InsufficientCreditError):
            second.create_purchase(Decimal("600.00"), date(2025, 3, 10), card_id=card.id)
    finally:
        first_db.close()
        second_db.close()
        engine.dispose()


def test_list_invoices_refreshes_status(sql_service: LedgerService, clock):
    card = sql_service.create_card(name="Visa", limit=Decimal("1000.00"), closing_day=5, due_day=15)
    sql_service.create_purchase(Decimal("50.00"), date(2025, 3, 10), card_id=card.id)
    sql_service.get_invoice(card.id)

    clock.today = date(2025, 5, 20)

    assert [invoice.status for invoice in sql_service.list_invoices(card.id)] == [InvoiceStatus.OVERDUE]


def test_subscriptions_and_card_deletion(sql_service: LedgerService, db: Session):
    card = sql_service.create_card(name="Visa", limit=Decimal("1000.00"), closing_day=5, due_day=15)
    subscription = sql_service.create_subscription(
        name="Streaming", amount=Decimal("39.90"), billing_day=20, payment_method=PaymentMethod.CREDIT_CARD, card_id=card.id
    )
    assert sql_service.get_invoice(card.id).total == Decimal("39.90")
    assert sql_service.get_subscription(subscription.id).payment_method == PaymentMethod.CREDIT_CARD

    sql_service.delete_subscription(subscription.id)
    sql_service.delete_card(card.id)

    assert sql_service.list_cards() == []
    assert db.query(InvoiceRecord).count() == 0
