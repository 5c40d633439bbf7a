"""User model."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from celengan.core.database import Base
from celengan.utils.datetime_utils import utc_now_lambda


class User(Base):
    """Account owner. Every other entity is scoped to exactly one user."""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    image = Column(Text, nullable=True)  # Avatar URL

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utc_now_lambda, nullable=False)
    updated_at = Column(DateTime, default=utc_now_lambda, onupdate=utc_now_lambda, nullable=False)

    # Rows are removed by ON DELETE CASCADE
    categories = relationship("Category", back_populates="user", passive_deletes=True)
    transactions = relationship("Transaction", back_populates="user", passive_deletes=True)
    savings_targets = relationship("SavingsTarget", back_populates="user", passive_deletes=True)
