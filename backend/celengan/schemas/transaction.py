"""Transaction and category schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from celengan.models.transaction import TransactionType
from celengan.utils.datetime_utils import to_naive_utc


def _validate_hex_color(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lstrip("#")
    if len(v) != 6:
        raise ValueError("Color must be a 6-digit hex code (e.g., #FF5733)")
    try:
        int(v, 16)
    except ValueError:
        raise ValueError("Color must be a valid hex code")
    return f"#{v.lower()}"


def _validate_category_name(v: str) -> str:
    v = v.strip()

    if not v:
        raise ValueError("Category name cannot be empty")

    if len(v) > 100:
        raise ValueError("Category name must be 100 characters or less")

    # No markup in names
    if "<" in v or ">" in v:
        raise ValueError("Category name cannot contain < or > characters")

    return v


class CategoryCreate(BaseModel):
    """Category creation schema."""

    name: str
    type: TransactionType
    color: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=16)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate category name."""
        return _validate_category_name(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        return _validate_hex_color(v)


class CategoryUpdate(BaseModel):
    """Category update schema. Type is fixed once transactions reference it."""

    name: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=16)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_category_name(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        return _validate_hex_color(v)


class CategoryResponse(BaseModel):
    """Category response schema."""

    id: UUID
    name: str
    type: TransactionType
    color: str
    icon: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CategorySummary(BaseModel):
    """Category summary for transaction display."""

    id: UUID
    name: str
    type: TransactionType
    color: str
    icon: str

    model_config = {"from_attributes": True}


class TransactionCreate(BaseModel):
    """
    Transaction creation schema.

    Income transactions may route a share of their amount to a savings
    target via ``target_id`` and ``allocation_percentage``.
    """

    type: TransactionType
    amount: Decimal = Field(gt=0)
    category_id: UUID
    description: Optional[str] = None
    date: Optional[datetime] = None
    target_id: Optional[UUID] = None
    allocation_percentage: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=2)

    @field_validator("date")
    @classmethod
    def date_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Dates are stored as naive UTC."""
        return to_naive_utc(v)

    @model_validator(mode="after")
    def validate_allocation(self) -> "TransactionCreate":
        """Only income can be allocated to a target."""
        if (
            self.type == TransactionType.EXPENSE
            and self.target_id is not None
            and self.allocation_percentage
        ):
            raise ValueError("Only income transactions can be allocated to a savings target")
        return self


class TransactionUpdate(BaseModel):
    """Transaction update schema. Allocations are never recomputed."""

    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    category_id: Optional[UUID] = None
    description: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def date_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class TransactionResponse(BaseModel):
    """Transaction response schema."""

    id: UUID
    type: TransactionType
    amount: Decimal
    description: Optional[str] = None
    date: datetime
    category_id: UUID
    category: Optional[CategorySummary] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TransactionListResponse(BaseModel):
    """Transaction list wrapper."""

    transactions: List[TransactionResponse]
    total: int
