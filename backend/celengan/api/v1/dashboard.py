"""Dashboard API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.dependencies import get_current_user, get_db
from celengan.models.user import User
from celengan.schemas.dashboard import DashboardSummary
from celengan.schemas.savings_target import SavingsTargetWithMetrics
from celengan.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/", response_model=DashboardSummary)
async def get_dashboard(
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Dashboard summary: totals, savings health, momentum, growth stage and
    reward/weakness cards. ``month`` and ``year`` together narrow the totals
    to one calendar month.
    """
    dashboard_service = DashboardService(db)
    try:
        summary = await dashboard_service.get_summary(current_user, month=month, year=year)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    summary["savings_targets"] = [
        SavingsTargetWithMetrics.from_target(item["target"], item["metrics"], item["eta_text"])
        for item in summary["savings_targets"]
    ]
    return summary
