"""Human-readable status texts, copy lookups and mini challenges for savings targets."""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from celengan.services.target_metrics_service import (
    SpeedStatus,
    TargetMetrics,
    TargetStatus,
    to_decimal,
)
from celengan.utils.currency import format_currency

# Gap above which the "add a little more" nudge is shown
GAP_NUDGE_THRESHOLD = Decimal("50000")
NUDGE_AMOUNT = Decimal("50000")
NUDGE_MONTHS = 3

RELAXED_ETA_MONTHS = 24
AHEAD_OF_SCHEDULE_MONTHS = 3


SPEED_COPY: Dict[SpeedStatus, Dict[str, str]] = {
    SpeedStatus.FAST: {
        "text": "Faster than planned. Nice.",
        "emoji": "⚡",
        "color": "text-green-500",
    },
    SpeedStatus.NORMAL: {
        "text": "Still on plan.",
        "emoji": "➖",
        "color": "text-yellow-500",
    },
    SpeedStatus.SLOW: {
        "text": "Too relaxed. The clock keeps ticking.",
        "emoji": "🐌",
        "color": "text-red-500",
    },
}

STATUS_COPY: Dict[TargetStatus, Dict[str, str]] = {
    TargetStatus.HEALTHY: {
        "text": "Healthy",
        "subtext": "This target is on track. Don't slow down.",
        "emoji": "🟢",
        "color": "bg-green-500",
    },
    TargetStatus.WARNING: {
        "text": "At risk",
        "subtext": "Still moving, but starting to slow down.",
        "emoji": "🟡",
        "color": "bg-yellow-500",
    },
    TargetStatus.CRITICAL: {
        "text": "Dying",
        "subtext": "At this pace the target will slip far past its date.",
        "emoji": "🔴",
        "color": "bg-red-500",
    },
}


@dataclass(frozen=True)
class MiniChallenge:
    """A small, concrete deposit the user can make right now."""

    title: str
    description: str
    target_amount: Decimal
    reward: str
    days: int


# Checked in order, the first affordable one wins
MINI_CHALLENGES = (
    MiniChallenge(
        title="7-Day Sprint",
        description="Add Rp200.000 within 7 days",
        target_amount=Decimal("200000"),
        reward="+5 Consistency Score",
        days=7,
    ),
    MiniChallenge(
        title="100k Deposit",
        description="Deposit Rp100.000 now",
        target_amount=Decimal("100000"),
        reward="+2 Momentum Points",
        days=1,
    ),
    MiniChallenge(
        title="50k Boost",
        description="Deposit Rp50.000 today",
        target_amount=Decimal("50000"),
        reward="+1 Consistency Score",
        days=3,
    ),
)


class TargetInsightService:
    """Deterministic presentation logic on top of TargetMetrics."""

    @staticmethod
    def get_brutal_insight(metrics: TargetMetrics, target: Any) -> str:
        """
        Pick the single most relevant insight for a target.

        Branches are evaluated in priority order and the first match wins.
        """
        status = metrics.target_status
        speed = metrics.speed_status

        if status == TargetStatus.CRITICAL:
            if speed == SpeedStatus.SLOW:
                return "The problem isn't your income, it's that your consistency dropped hard."
            if metrics.eta_in_months > RELAXED_ETA_MONTHS:
                return (
                    "This target isn't failing, you're just too relaxed. "
                    "Two years from now will look exactly the same."
                )
            return (
                "If this target is missed it won't be bad luck, "
                "it'll be because you gave up first."
            )

        if status == TargetStatus.WARNING:
            if speed == SpeedStatus.SLOW:
                return "You're below your monthly pace. Speed up or get ready to be late."
            return "Not bad, but there's still a gap you need to close soon."

        if speed == SpeedStatus.FAST:
            months_saved = TargetInsightService.get_months_saved(metrics)
            if months_saved >= AHEAD_OF_SCHEDULE_MONTHS:
                return f"You're {months_saved} months ahead of plan. Keep it up!"
            return "Good pace, don't ease off now."

        gap = to_decimal(target.monthly_contribution) - metrics.avg_monthly_saving
        if gap > GAP_NUDGE_THRESHOLD:
            return (
                f"Add {format_currency(NUDGE_AMOUNT)}/month to finish "
                f"{NUDGE_MONTHS} months sooner."
            )
        if gap > 0:
            return f"Still {format_currency(gap)}/month short of the plan."
        return "This target is healthy. Keep going!"

    @staticmethod
    def get_months_saved(metrics: TargetMetrics) -> int:
        """Months gained by the actual pace over the planned one; 0 if either ETA is infinite."""
        if math.isinf(metrics.do_nothing_eta) or math.isinf(metrics.eta_in_months):
            return 0
        return round(metrics.do_nothing_eta - metrics.eta_in_months)

    @staticmethod
    def get_speed_copy(speed: SpeedStatus) -> Dict[str, str]:
        return SPEED_COPY[SpeedStatus(speed)]

    @staticmethod
    def get_status_copy(status: TargetStatus) -> Dict[str, str]:
        return STATUS_COPY[TargetStatus(status)]

    @staticmethod
    def get_eta_text(eta_in_months: float) -> str:
        if math.isinf(eta_in_months):
            return "∞"
        if eta_in_months < 1:
            return "less than 1 month"
        if eta_in_months == 1:
            return "1 month"
        months = int(eta_in_months) if float(eta_in_months).is_integer() else eta_in_months
        return f"{months} months"

    @staticmethod
    def generate_mini_challenge(target: Any, metrics: TargetMetrics) -> Optional[MiniChallenge]:
        """First challenge affordable within the remaining amount, if any."""
        remaining = metrics.remaining_amount
        if remaining <= 0:
            return None
        for challenge in MINI_CHALLENGES:
            if challenge.target_amount <= remaining:
                return challenge
        return None


target_insight_service = TargetInsightService()
