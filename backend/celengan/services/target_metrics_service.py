"""Savings target metrics: progress, pace, ETA and health classification.

Everything here is pure and synchronous. Functions take any object exposing
``target_amount``, ``current_amount`` and ``monthly_contribution`` (ORM rows,
schemas or mocks) plus allocation records exposing ``amount`` and
``created_at``. Divisions are guarded so no numeric input raises.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional

from celengan.utils.datetime_utils import months_ago, start_of_month, utc_now

# Sentinel for "never, at the current pace"
ETA_INFINITE = math.inf

AVERAGE_WINDOW_MONTHS = 3

FAST_RATIO = Decimal("1")
NORMAL_RATIO = Decimal("0.7")
ON_TRACK_RATIO = Decimal("0.8")

HEALTHY_MAX_MONTHS = 12
WARNING_MAX_MONTHS = 18


class SpeedStatus(str, Enum):
    """Recent saving pace compared to the planned monthly contribution."""

    FAST = "fast"
    NORMAL = "normal"
    SLOW = "slow"


class TargetStatus(str, Enum):
    """Health of a target, derived from its ETA only."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class TargetMetrics:
    """Computed snapshot of a savings target."""

    progress_percent: float
    remaining_amount: Decimal
    avg_monthly_saving: Decimal
    eta_in_months: float
    do_nothing_eta: float
    speed_status: SpeedStatus
    target_status: TargetStatus
    is_on_track: bool


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats, strings and None to Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class TargetMetricsService:
    """Pure calculations over a savings target and its allocation history."""

    @staticmethod
    def get_progress_percent(current_amount: Any, target_amount: Any) -> float:
        """Percentage of the target reached, clamped to [0, 100]."""
        current = to_decimal(current_amount)
        target = to_decimal(target_amount)
        if target <= 0:
            return 0.0
        percent = current / target * 100
        return float(min(Decimal("100"), max(Decimal("0"), percent)))

    @staticmethod
    def get_remaining_amount(current_amount: Any, target_amount: Any) -> Decimal:
        """Amount still missing, never negative."""
        return max(Decimal("0"), to_decimal(target_amount) - to_decimal(current_amount))

    @staticmethod
    def get_avg_monthly_saving(
        allocations: Iterable[Any], now: Optional[datetime] = None
    ) -> Decimal:
        """
        Average monthly saving over the trailing three calendar months.

        The sum is always divided by 3, not by the number of months with
        activity, so sparse saving lowers the average.
        """
        now = now or utc_now()
        cutoff = months_ago(now, AVERAGE_WINDOW_MONTHS)
        total = sum(
            (to_decimal(a.amount) for a in allocations if a.created_at >= cutoff),
            Decimal("0"),
        )
        if total == 0:
            return Decimal("0")
        return total / AVERAGE_WINDOW_MONTHS

    @staticmethod
    def get_eta_in_months(remaining_amount: Any, avg_monthly_saving: Any) -> float:
        """Whole months to finish at the observed pace, or ETA_INFINITE."""
        avg = to_decimal(avg_monthly_saving)
        if avg <= 0:
            return ETA_INFINITE
        return math.ceil(to_decimal(remaining_amount) / avg)

    @staticmethod
    def get_do_nothing_eta(remaining_amount: Any, monthly_contribution: Any) -> float:
        """Whole months to finish using only the planned contribution."""
        planned = to_decimal(monthly_contribution)
        if planned <= 0:
            return ETA_INFINITE
        return math.ceil(to_decimal(remaining_amount) / planned)

    @staticmethod
    def get_speed_status(avg_monthly_saving: Any, monthly_contribution: Any) -> SpeedStatus:
        avg = to_decimal(avg_monthly_saving)
        planned = to_decimal(monthly_contribution)

        # Without a plan there is nothing to compare against
        if planned <= 0:
            return SpeedStatus.NORMAL
        if avg >= planned * FAST_RATIO:
            return SpeedStatus.FAST
        if avg >= planned * NORMAL_RATIO:
            return SpeedStatus.NORMAL
        return SpeedStatus.SLOW

    @staticmethod
    def get_target_status(eta_in_months: float) -> TargetStatus:
        if math.isinf(eta_in_months):
            return TargetStatus.CRITICAL
        if eta_in_months <= HEALTHY_MAX_MONTHS:
            return TargetStatus.HEALTHY
        if eta_in_months <= WARNING_MAX_MONTHS:
            return TargetStatus.WARNING
        return TargetStatus.CRITICAL

    @staticmethod
    def get_current_month_allocation(
        allocations: Iterable[Any], now: Optional[datetime] = None
    ) -> Decimal:
        """Sum allocated since the first day of the current calendar month."""
        month_start = start_of_month(now or utc_now())
        return sum(
            (to_decimal(a.amount) for a in allocations if a.created_at >= month_start),
            Decimal("0"),
        )

    @staticmethod
    def get_phase_contribution(current: Any, phase_target: Any) -> float:
        """Share of a phase goal covered by ``current``, clamped to [0, 100]."""
        return TargetMetricsService.get_progress_percent(current, phase_target)

    @staticmethod
    def get_monthly_achievement_percent(
        target: Any, allocations: Iterable[Any], now: Optional[datetime] = None
    ) -> float:
        """This month's allocations as a share of the monthly plan."""
        this_month = TargetMetricsService.get_current_month_allocation(allocations, now)
        return TargetMetricsService.get_progress_percent(this_month, target.monthly_contribution)

    @staticmethod
    def calculate_target_metrics(
        target: Any, allocations: Iterable[Any], now: Optional[datetime] = None
    ) -> TargetMetrics:
        """
        Compute the full metrics snapshot for a target.

        Args:
            target: Object with target_amount, current_amount, monthly_contribution
            allocations: Allocation records with amount and created_at
            now: Reference moment (defaults to current UTC time)

        Returns:
            TargetMetrics
        """
        svc = TargetMetricsService
        allocations = list(allocations)
        planned = to_decimal(target.monthly_contribution)

        remaining = svc.get_remaining_amount(target.current_amount, target.target_amount)
        avg = svc.get_avg_monthly_saving(allocations, now)
        eta = svc.get_eta_in_months(remaining, avg)

        return TargetMetrics(
            progress_percent=svc.get_progress_percent(target.current_amount, target.target_amount),
            remaining_amount=remaining,
            avg_monthly_saving=avg,
            eta_in_months=eta,
            do_nothing_eta=svc.get_do_nothing_eta(remaining, planned),
            speed_status=svc.get_speed_status(avg, planned),
            target_status=svc.get_target_status(eta),
            is_on_track=avg >= planned * ON_TRACK_RATIO,
        )


target_metrics_service = TargetMetricsService()
