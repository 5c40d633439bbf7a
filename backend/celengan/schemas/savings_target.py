"""Savings target and allocation schemas."""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from celengan.schemas.transaction import CategorySummary
from celengan.services.target_metrics_service import SpeedStatus, TargetMetrics, TargetStatus


class SavingsTargetBase(BaseModel):
    """Base savings target schema."""

    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(gt=0)
    target_date: date
    monthly_contribution: Decimal = Field(default=Decimal("0"), ge=0)
    allocation_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class SavingsTargetCreate(SavingsTargetBase):
    """Schema for creating a savings target. current_amount starts at initial_investment."""

    allocation_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=2)
    initial_investment: Decimal = Field(default=Decimal("0"), ge=0)
    is_allocated: bool = False


class SavingsTargetUpdate(BaseModel):
    """
    Schema for updating a savings target.

    current_amount is not editable: it only grows through allocations.
    Changing initial_investment edits the plan only.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    target_amount: Optional[Decimal] = Field(None, gt=0)
    target_date: Optional[date] = None
    initial_investment: Optional[Decimal] = Field(None, ge=0)
    monthly_contribution: Optional[Decimal] = Field(None, ge=0)
    allocation_percentage: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=2)
    is_allocated: Optional[bool] = None


class SavingsTargetResponse(SavingsTargetBase):
    """Schema for savings target response."""

    id: UUID
    current_amount: Decimal
    initial_investment: Decimal
    is_allocated: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TargetMetricsResponse(BaseModel):
    """Calculated metrics. Unreachable ETAs are reported as null."""

    progress_percent: float
    remaining_amount: Decimal
    avg_monthly_saving: Decimal
    eta_in_months: Optional[int]
    do_nothing_eta: Optional[int]
    speed_status: SpeedStatus
    target_status: TargetStatus
    is_on_track: bool

    @classmethod
    def from_metrics(cls, metrics: TargetMetrics) -> "TargetMetricsResponse":
        def _eta(value: float) -> Optional[int]:
            return None if math.isinf(value) else int(value)

        return cls(
            progress_percent=round(metrics.progress_percent, 2),
            remaining_amount=metrics.remaining_amount,
            avg_monthly_saving=metrics.avg_monthly_saving.quantize(Decimal("0.01")),
            eta_in_months=_eta(metrics.eta_in_months),
            do_nothing_eta=_eta(metrics.do_nothing_eta),
            speed_status=metrics.speed_status,
            target_status=metrics.target_status,
            is_on_track=metrics.is_on_track,
        )


class MiniChallengeResponse(BaseModel):
    title: str
    description: str
    target_amount: Decimal
    reward: str
    days: int

    model_config = {"from_attributes": True}


class SavingsTargetWithMetrics(SavingsTargetResponse):
    """Target plus its metrics, as listed on the targets page and dashboard."""

    metrics: TargetMetricsResponse
    eta_text: str

    @classmethod
    def from_target(
        cls, target, metrics: TargetMetrics, eta_text: str
    ) -> "SavingsTargetWithMetrics":
        base = SavingsTargetResponse.model_validate(target).model_dump()
        return cls(**base, metrics=TargetMetricsResponse.from_metrics(metrics), eta_text=eta_text)


class TargetInsightResponse(BaseModel):
    """Everything the target detail card shows."""

    target_id: UUID
    name: str
    metrics: TargetMetricsResponse
    eta_text: str
    insight: str
    speed_copy: Dict[str, str]
    status_copy: Dict[str, str]
    mini_challenge: Optional[MiniChallengeResponse] = None
    current_month_allocation: Decimal
    monthly_achievement_percent: float


class AllocationTransaction(BaseModel):
    id: UUID
    date: datetime
    description: Optional[str] = None
    amount: Decimal
    category: CategorySummary

    model_config = {"from_attributes": True}


class AllocationResponse(BaseModel):
    """Allocation history entry with the funding transaction."""

    id: UUID
    target_id: UUID
    amount: Decimal
    percentage: Decimal
    created_at: datetime
    transaction: AllocationTransaction

    model_config = {"from_attributes": True}


class AllocationListResponse(BaseModel):
    allocations: List[AllocationResponse]
