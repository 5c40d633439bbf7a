"""Savings target and allocation ledger models."""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from celengan.core.database import Base
from celengan.utils.datetime_utils import utc_now_lambda


class SavingsTarget(Base):
    """Savings goal with an optional monthly contribution plan."""

    __tablename__ = "savings_targets"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(200), nullable=False)
    target_amount = Column(Numeric(15, 2), nullable=False)
    # Starts at initial_investment, only allocations move it afterwards
    current_amount = Column(Numeric(15, 2), default=Decimal("0.00"), nullable=False)
    target_date = Column(Date, nullable=False)

    # Plan
    initial_investment = Column(Numeric(15, 2), default=Decimal("0.00"), nullable=False)
    monthly_contribution = Column(Numeric(15, 2), default=Decimal("0.00"), nullable=False)  # 0 = no plan
    allocation_percentage = Column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    is_allocated = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    user = relationship("User", back_populates="savings_targets")
    allocations = relationship(
        "Allocation",
        back_populates="target",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Allocation.created_at.desc()",
    )

    __table_args__ = (Index("ix_savings_targets_user_date", "user_id", "target_date"),)


class Allocation(Base):
    """
    Portion of an income transaction routed to a savings target.

    Append-only: amount is fixed at creation and the row disappears only
    when its target or transaction is deleted.
    """

    __tablename__ = "allocations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    target_id = Column(
        UUID(as_uuid=True),
        ForeignKey("savings_targets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    transaction_id = Column(
        UUID(as_uuid=True),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    amount = Column(Numeric(15, 2), nullable=False)
    percentage = Column(Numeric(5, 2), nullable=False)
    created_at = Column(DateTime, default=utc_now_lambda, nullable=False, index=True)

    target = relationship("SavingsTarget", back_populates="allocations")
    transaction = relationship("Transaction", back_populates="allocation")
