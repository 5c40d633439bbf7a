"""Dashboard service for financial summary calculations."""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from celengan.config import settings
from celengan.models.savings_target import SavingsTarget
from celengan.models.transaction import Category, Transaction, TransactionType
from celengan.models.user import User
from celengan.services.savings_target_service import SavingsTargetService
from celengan.services.stage_service import Stage, StageService
from celengan.services.target_insight_service import TargetInsightService
from celengan.services.target_metrics_service import TargetMetricsService
from celengan.utils.datetime_utils import last_n_days, month_window, utc_now

logger = logging.getLogger(__name__)

HISTORY_DAYS = 30
WEEK_DAYS = 7
MOMENTUM_THRESHOLD = 20.0

UNALLOCATED_FUNDS_THRESHOLD = Decimal("50000")

FALLBACK_CATEGORY_NAME = "Other"


class DashboardService:
    """Service for calculating dashboard metrics."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_totals(
        self, user_id: UUID, window: Optional[Tuple[datetime, datetime]] = None
    ) -> Tuple[Decimal, Decimal]:
        """Total income and total expense within the window (or all time)."""
        query = select(
            func.coalesce(
                func.sum(case((Transaction.type == TransactionType.INCOME, Transaction.amount))), 0
            ).label("income"),
            func.coalesce(
                func.sum(case((Transaction.type == TransactionType.EXPENSE, Transaction.amount))), 0
            ).label("expense"),
        ).where(Transaction.user_id == user_id)

        if window:
            query = query.where(Transaction.date >= window[0], Transaction.date < window[1])

        row = (await self.db.execute(query)).one()
        return Decimal(str(row.income)), Decimal(str(row.expense))

    async def get_expense_by_category(
        self, user_id: UUID, window: Optional[Tuple[datetime, datetime]] = None
    ) -> List[Dict]:
        """Expense totals per category, largest first."""
        query = (
            select(
                Transaction.category_id,
                Category.name,
                Category.color,
                Category.icon,
                func.sum(Transaction.amount).label("total"),
            )
            .outerjoin(Category, Transaction.category_id == Category.id)
            .where(
                Transaction.user_id == user_id,
                Transaction.type == TransactionType.EXPENSE,
            )
            .group_by(Transaction.category_id, Category.name, Category.color, Category.icon)
        )

        if window:
            query = query.where(Transaction.date >= window[0], Transaction.date < window[1])

        rows = (await self.db.execute(query)).all()

        breakdown = [
            {
                "category_id": str(row.category_id) if row.category_id else None,
                "category": row.name or FALLBACK_CATEGORY_NAME,
                "amount": Decimal(str(row.total or 0)),
                "color": row.color or settings.DEFAULT_CATEGORY_COLOR,
                "icon": row.icon or settings.DEFAULT_CATEGORY_ICON,
            }
            for row in rows
        ]
        breakdown.sort(key=lambda item: item["amount"], reverse=True)
        return breakdown

    async def get_daily_net(self, user_id: UUID, since: date) -> Dict[date, Decimal]:
        """Income minus expense per calendar day, from ``since`` onwards."""
        result = await self.db.execute(
            select(Transaction.date, Transaction.type, Transaction.amount).where(
                Transaction.user_id == user_id,
                Transaction.date >= datetime.combine(since, datetime.min.time()),
            )
        )

        daily: Dict[date, Decimal] = defaultdict(lambda: Decimal("0"))
        for txn_date, txn_type, amount in result.all():
            sign = 1 if txn_type == TransactionType.INCOME else -1
            daily[txn_date.date()] += sign * Decimal(str(amount))
        return dict(daily)

    async def get_recent_transactions(
        self,
        user_id: UUID,
        window: Optional[Tuple[datetime, datetime]] = None,
        limit: int = 5,
    ) -> List[Transaction]:
        query = (
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .options(selectinload(Transaction.category))
            .order_by(Transaction.date.desc())
            .limit(limit)
        )
        if window:
            query = query.where(Transaction.date >= window[0], Transaction.date < window[1])
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Pure calculations
    # ------------------------------------------------------------------

    @staticmethod
    def build_savings_history(
        daily_net: Dict[date, Decimal], today: date, days: int = HISTORY_DAYS
    ) -> List[Dict]:
        """One point per day ending today; losing days are floored at zero."""
        return [
            {"day": day, "amount": max(Decimal("0"), daily_net.get(day, Decimal("0")))}
            for day in last_n_days(today, days)
        ]

    @staticmethod
    def sum_last(history: List[Dict], days: int) -> Decimal:
        return sum((point["amount"] for point in history[-days:]), Decimal("0"))

    @staticmethod
    def calculate_momentum_change(first_week: Decimal, last_week: Decimal) -> float:
        """Percent change from the first to the last week of the series."""
        if first_week > 0:
            return float((last_week - first_week) / first_week * 100)
        return 100.0 if last_week > 0 else 0.0

    @staticmethod
    def classify_momentum(change: float) -> str:
        """Exactly ±20% counts as stable."""
        if change > MOMENTUM_THRESHOLD:
            return "accelerating"
        if change < -MOMENTUM_THRESHOLD:
            return "slowing"
        return "stable"

    @staticmethod
    def get_momentum(history: List[Dict]) -> Dict:
        first_week = sum((point["amount"] for point in history[:WEEK_DAYS]), Decimal("0"))
        last_week = DashboardService.sum_last(history, WEEK_DAYS)
        change = DashboardService.calculate_momentum_change(first_week, last_week)
        return {
            "trend": DashboardService.classify_momentum(change),
            "change_percent": round(change, 2),
            "first_week": first_week,
            "last_week": last_week,
        }

    @staticmethod
    def calculate_savings_rate(income: Decimal, expense: Decimal) -> float:
        if income <= 0:
            return 0.0
        return float((income - expense) / income * 100)

    @staticmethod
    def get_savings_health_label(savings_rate: float) -> str:
        if savings_rate >= 30:
            return "Very good"
        if savings_rate >= 20:
            return "Good"
        if savings_rate >= 10:
            return "Fair"
        return "Needs evaluation"

    @staticmethod
    def calculate_total_savings(targets: List[SavingsTarget], balance: Decimal) -> Decimal:
        """The larger of what sits in targets and the net balance, never negative."""
        in_targets = sum((Decimal(str(t.current_amount)) for t in targets), Decimal("0"))
        return max(in_targets, balance, Decimal("0"))

    @staticmethod
    def serialize_stage(stage: Stage) -> Dict:
        start, end = stage.range
        return {
            "id": stage.id,
            "name": stage.name,
            "emoji": stage.emoji,
            "range_start": start,
            "range_end": None if end == float("inf") else end,
            "color": stage.color,
            "theme": stage.theme,
            "advice": stage.advice,
            "focus": stage.focus,
        }

    @staticmethod
    def get_stage_progress(total_savings: Decimal) -> Dict:
        current = StageService.get_current_stage(total_savings)
        next_stage = StageService.get_next_stage(current)
        return {
            "current": DashboardService.serialize_stage(current),
            "next": DashboardService.serialize_stage(next_stage) if next_stage else None,
            "progress_percent": round(
                StageService.get_progress_to_next_stage(total_savings, current), 2
            ),
        }

    @staticmethod
    def build_cards(
        growth_7d: Decimal,
        growth_30d: Decimal,
        momentum_trend: str,
        savings_rate: float,
        income: Decimal,
        unallocated: Decimal,
        has_allocated_target: bool,
    ) -> Tuple[List[Dict], List[Dict]]:
        """Reward and weakness cards shown under the hero section."""
        rewards: List[Dict] = []
        weaknesses: List[Dict] = []

        if growth_30d > 0:
            rewards.append(
                {
                    "id": "consistent_saver",
                    "title": "Consistent saver",
                    "message": "Your savings grew over the last 30 days.",
                }
            )
        if momentum_trend == "accelerating" and growth_7d > 0:
            rewards.append(
                {
                    "id": "momentum_builder",
                    "title": "Momentum builder",
                    "message": "You saved more this week than at the start of the month.",
                }
            )
        if savings_rate >= 20:
            rewards.append(
                {
                    "id": "high_savings_rate",
                    "title": "High savings rate",
                    "message": f"You keep {savings_rate:.0f}% of your income.",
                }
            )
        elif savings_rate >= 15:
            rewards.append(
                {
                    "id": "getting_closer",
                    "title": "Getting closer",
                    "message": "A little more and your savings rate reaches 20%.",
                }
            )

        if unallocated > UNALLOCATED_FUNDS_THRESHOLD and not has_allocated_target:
            weaknesses.append(
                {
                    "id": "unallocated_funds",
                    "title": "Unallocated funds",
                    "message": "Money is sitting idle. Route it to a savings target.",
                }
            )
        if income > 0 and savings_rate < 10:
            weaknesses.append(
                {
                    "id": "low_savings_rate",
                    "title": "Low savings rate",
                    "message": "You save less than 10% of your income.",
                }
            )

        return rewards, weaknesses

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    async def get_summary(
        self,
        user: User,
        month: Optional[int] = None,
        year: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Dict:
        """
        Build the full dashboard payload.

        Raises:
            ValueError: If month is outside 1..12
        """
        now = now or utc_now()
        window = month_window(month, year)

        income, expense = await self.get_totals(user.id, window)
        balance = income - expense

        targets = await SavingsTargetService.get_targets(self.db, user)
        total_savings = self.calculate_total_savings(targets, balance)

        today = now.date()
        history_start = today - timedelta(days=HISTORY_DAYS - 1)
        history = self.build_savings_history(await self.get_daily_net(user.id, history_start), today)
        growth_7d = self.sum_last(history, WEEK_DAYS)
        growth_30d = self.sum_last(history, HISTORY_DAYS)
        momentum = self.get_momentum(history)

        savings_rate = self.calculate_savings_rate(income, expense)

        target_payloads = []
        allocated_this_month = Decimal("0")
        for target in targets:
            metrics = TargetMetricsService.calculate_target_metrics(target, target.allocations, now)
            allocated_this_month += TargetMetricsService.get_current_month_allocation(
                target.allocations, now
            )
            target_payloads.append(
                {
                    "target": target,
                    "metrics": metrics,
                    "eta_text": TargetInsightService.get_eta_text(metrics.eta_in_months),
                }
            )

        rewards, weaknesses = self.build_cards(
            growth_7d=growth_7d,
            growth_30d=growth_30d,
            momentum_trend=momentum["trend"],
            savings_rate=savings_rate,
            income=income,
            unallocated=balance - allocated_this_month,
            has_allocated_target=any(t.is_allocated for t in targets),
        )

        logger.debug(
            "Dashboard summary for user %s: income=%s expense=%s momentum=%s",
            user.id,
            income,
            expense,
            momentum["trend"],
        )

        return {
            "total_income": income,
            "total_expense": expense,
            "balance": balance,
            "total_savings": total_savings,
            # Debts are not tracked
            "debt_ratio": 0.0,
            "savings_health": {
                "savings_rate": round(savings_rate, 2),
                "label": self.get_savings_health_label(savings_rate),
            },
            "expense_by_category": await self.get_expense_by_category(user.id, window),
            "savings_targets": target_payloads,
            "savings_history": history,
            "growth_7d": growth_7d,
            "growth_30d": growth_30d,
            "momentum": momentum,
            "stage": self.get_stage_progress(total_savings),
            "rewards": rewards,
            "weaknesses": weaknesses,
            "recent_transactions": await self.get_recent_transactions(user.id, window),
        }
