"""Transaction and category models."""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from celengan.core.database import Base
from celengan.utils.datetime_utils import utc_now_lambda


class TransactionType(str, enum.Enum):
    """Direction of money flow. Categories carry the same type as their transactions."""

    INCOME = "income"
    EXPENSE = "expense"


class Category(Base):
    """User-defined income or expense category."""

    __tablename__ = "categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(100), nullable=False)
    type = Column(SQLEnum(TransactionType, name="transaction_type"), nullable=False)
    color = Column(String(7), nullable=False, default="#6b7280")  # Hex color code
    icon = Column(String(16), nullable=False, default="📦")

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    user = relationship("User", back_populates="categories")
    transactions = relationship("Transaction", back_populates="category")

    __table_args__ = (Index("ix_categories_user_type", "user_id", "type"),)


class Transaction(Base):
    """A single income or expense entry."""

    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # NO ACTION: checked at statement end, so a user delete can cascade to both sides.
    # Deleting a category in use is refused by CategoryService.
    category_id = Column(
        UUID(as_uuid=True),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )

    type = Column(SQLEnum(TransactionType, name="transaction_type"), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)  # Always positive, type gives the sign
    description = Column(Text, nullable=True)
    date = Column(DateTime, default=utc_now_lambda, nullable=False, index=True)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    user = relationship("User", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    allocation = relationship(
        "Allocation",
        back_populates="transaction",
        uselist=False,
        cascade="all, delete",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_user_type_date", "user_id", "type", "date"),
    )
