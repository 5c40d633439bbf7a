"""Savings targets API endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.dependencies import get_current_user, get_db
from celengan.models.savings_target import SavingsTarget
from celengan.models.user import User
from celengan.schemas.savings_target import (
    AllocationListResponse,
    AllocationResponse,
    MiniChallengeResponse,
    SavingsTargetCreate,
    SavingsTargetUpdate,
    SavingsTargetWithMetrics,
    TargetInsightResponse,
    TargetMetricsResponse,
)
from celengan.services.savings_target_service import savings_target_service
from celengan.services.target_insight_service import target_insight_service
from celengan.services.target_metrics_service import target_metrics_service

router = APIRouter()


def _with_metrics(target: SavingsTarget) -> SavingsTargetWithMetrics:
    metrics = target_metrics_service.calculate_target_metrics(target, target.allocations)
    return SavingsTargetWithMetrics.from_target(
        target, metrics, target_insight_service.get_eta_text(metrics.eta_in_months)
    )


@router.post("/", response_model=SavingsTargetWithMetrics, status_code=201)
async def create_target(
    target_data: SavingsTargetCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new savings target."""
    target = await savings_target_service.create_target(
        db=db,
        user=current_user,
        **target_data.model_dump(),
    )
    return _with_metrics(target)


@router.get("/", response_model=List[SavingsTargetWithMetrics])
async def list_targets(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List savings targets by nearest target date, each with its metrics."""
    targets = await savings_target_service.get_targets(db=db, user=current_user)
    return [_with_metrics(target) for target in targets]


@router.get("/{target_id}", response_model=SavingsTargetWithMetrics)
async def get_target(
    target_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific savings target."""
    target = await savings_target_service.get_target(db, target_id, current_user)

    if not target:
        raise HTTPException(status_code=404, detail="Savings target not found")

    return _with_metrics(target)


@router.put("/{target_id}", response_model=SavingsTargetWithMetrics)
async def update_target(
    target_id: UUID,
    target_data: SavingsTargetUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a savings target's details or plan."""
    target = await savings_target_service.update_target(
        db=db,
        target_id=target_id,
        user=current_user,
        **target_data.model_dump(exclude_unset=True),
    )

    if not target:
        raise HTTPException(status_code=404, detail="Savings target not found")

    return _with_metrics(target)


@router.delete("/{target_id}", status_code=204)
async def delete_target(
    target_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a savings target and its allocation history."""
    deleted = await savings_target_service.delete_target(db, target_id, current_user)

    if not deleted:
        raise HTTPException(status_code=404, detail="Savings target not found")


@router.get("/{target_id}/metrics", response_model=TargetInsightResponse)
async def get_target_insight(
    target_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Metrics, status copy, brutal insight and a mini challenge for one target."""
    target = await savings_target_service.get_target(db, target_id, current_user)

    if not target:
        raise HTTPException(status_code=404, detail="Savings target not found")

    metrics = target_metrics_service.calculate_target_metrics(target, target.allocations)
    challenge = target_insight_service.generate_mini_challenge(target, metrics)

    return TargetInsightResponse(
        target_id=target.id,
        name=target.name,
        metrics=TargetMetricsResponse.from_metrics(metrics),
        eta_text=target_insight_service.get_eta_text(metrics.eta_in_months),
        insight=target_insight_service.get_brutal_insight(metrics, target),
        speed_copy=target_insight_service.get_speed_copy(metrics.speed_status),
        status_copy=target_insight_service.get_status_copy(metrics.target_status),
        mini_challenge=MiniChallengeResponse.model_validate(challenge) if challenge else None,
        current_month_allocation=target_metrics_service.get_current_month_allocation(
            target.allocations
        ),
        monthly_achievement_percent=round(
            target_metrics_service.get_monthly_achievement_percent(target, target.allocations), 2
        ),
    )


@router.get("/{target_id}/allocations", response_model=AllocationListResponse)
async def list_allocations(
    target_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Allocation history for a target, newest first."""
    target = await savings_target_service.get_target(db, target_id, current_user)

    if not target:
        raise HTTPException(status_code=404, detail="Savings target not found")

    allocations = await savings_target_service.get_allocations(db, target_id, current_user)
    return AllocationListResponse(
        allocations=[AllocationResponse.model_validate(a) for a in allocations]
    )
