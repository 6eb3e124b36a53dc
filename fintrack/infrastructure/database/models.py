"""SQLAlchemy ORM models for the ledger tables (amounts stored as integer cents)"""

import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class CardRecord(Base):
    """Credit card and its billing configuration"""

    __tablename__ = "card"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    limit_cents = Column(BigInteger, nullable=False)
    closing_day = Column(Integer, nullable=False)
    due_day = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_blocked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class InstallmentPlanRecord(Base):
    """Purchase split into monthly legs"""

    __tablename__ = "installment_plan"

    id = Column(String(36), primary_key=True, default=_new_id)
    card_id = Column(String(36), ForeignKey("card.id"), nullable=True, index=True)
    total_cents = Column(BigInteger, nullable=False)
    installment_count = Column(Integer, nullable=False)
    purchase_date = Column(Date, nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    legs = relationship(
        "PurchaseRecord",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PurchaseRecord.installment_index",
    )


class PurchaseRecord(Base):
    """Single purchase or installment leg"""

    __tablename__ = "purchase"

    id = Column(String(36), primary_key=True, default=_new_id)
    card_id = Column(String(36), ForeignKey("card.id"), nullable=True, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    transaction_date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    plan_id = Column(String(36), ForeignKey("installment_plan.id", ondelete="CASCADE"), nullable=True, index=True)
    installment_index = Column(Integer, nullable=True)
    installment_count = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    plan = relationship("InstallmentPlanRecord", back_populates="legs")


class InvoiceRecord(Base):
    """Statement for one card and one billing period"""

    __tablename__ = "invoice"
    __table_args__ = (UniqueConstraint("card_id", "period_end", name="uq_invoice_card_period"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    card_id = Column(String(36), ForeignKey("card.id", ondelete="CASCADE"), nullable=False, index=True)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    total_cents = Column(BigInteger, nullable=False, default=0)
    paid_cents = Column(BigInteger, nullable=False, default=0)
    status = Column(Text, nullable=False, default="open")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SubscriptionRecord(Base):
    """Recurring monthly charge"""

    __tablename__ = "subscription"

    id = Column(String(36), primary_key=True, default=_new_id)
    card_id = Column(String(36), ForeignKey("card.id"), nullable=True, index=True)
    name = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    billing_day = Column(Integer, nullable=False)
    payment_method = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    start_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
