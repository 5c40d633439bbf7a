"""Dashboard schemas."""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel

from celengan.schemas.savings_target import SavingsTargetWithMetrics
from celengan.schemas.transaction import TransactionResponse


class CategoryExpense(BaseModel):
    """Expense total for one category."""

    category_id: Optional[str] = None
    category: str
    amount: Decimal
    color: str
    icon: str


class SavingsHistoryPoint(BaseModel):
    day: date
    amount: Decimal


class Momentum(BaseModel):
    trend: Literal["accelerating", "stable", "slowing"]
    change_percent: float
    first_week: Decimal
    last_week: Decimal


class StageInfo(BaseModel):
    id: str
    name: str
    emoji: str
    range_start: float
    range_end: Optional[float] = None  # None for the open-ended last stage
    color: str
    theme: str
    advice: str
    focus: str


class StageProgress(BaseModel):
    current: StageInfo
    next: Optional[StageInfo] = None
    progress_percent: float


class DashboardCard(BaseModel):
    """Reward or weakness card."""

    id: str
    title: str
    message: str


class SavingsHealth(BaseModel):
    savings_rate: float
    label: str


class DashboardSummary(BaseModel):
    """Dashboard summary response."""

    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    total_savings: Decimal
    debt_ratio: float
    savings_health: SavingsHealth
    expense_by_category: List[CategoryExpense]
    savings_targets: List[SavingsTargetWithMetrics]
    savings_history: List[SavingsHistoryPoint]
    growth_7d: Decimal
    growth_30d: Decimal
    momentum: Momentum
    stage: StageProgress
    rewards: List[DashboardCard]
    weaknesses: List[DashboardCard]
    recent_transactions: List[TransactionResponse]
