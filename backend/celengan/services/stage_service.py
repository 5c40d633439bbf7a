"""Savings stages: gamified levels keyed on total savings."""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Tuple

from celengan.services.target_metrics_service import to_decimal


@dataclass(frozen=True)
class Stage:
    """A savings level covering the half-open range [start, end)."""

    id: str
    name: str
    emoji: str
    range: Tuple[float, float]
    color: str
    theme: str
    advice: str
    focus: str


STAGES = (
    Stage(
        id="worm",
        name="Worm",
        emoji="🐛",
        range=(0, 1_000_000),
        color="from-stone-500 to-stone-600",
        theme="stone",
        advice="Be aware and frugal",
        focus="Build good habits and start saving a little at a time",
    ),
    Stage(
        id="ant",
        name="Ant",
        emoji="🐜",
        range=(1_000_000, 5_000_000),
        color="from-green-500 to-green-600",
        theme="green",
        advice="Consistent, bit by bit",
        focus="Keep saving consistently and keep spending under control",
    ),
    Stage(
        id="turtle",
        name="Turtle",
        emoji="🐢",
        range=(5_000_000, 20_000_000),
        color="from-yellow-500 to-yellow-600",
        theme="yellow",
        advice="Slow but steady",
        focus="Focus on stability and gradual growth",
    ),
    Stage(
        id="wolf",
        name="Wolf",
        emoji="🐺",
        range=(20_000_000, 50_000_000),
        color="from-blue-500 to-blue-600",
        theme="blue",
        advice="Diversify and control risk",
        focus="Start diversifying investments and manage risk well",
    ),
    Stage(
        id="eagle",
        name="Eagle",
        emoji="🦅",
        range=(50_000_000, 100_000_000),
        color="from-indigo-500 to-indigo-600",
        theme="indigo",
        advice="Unlock financial freedom",
        focus="Head for financial freedom with a solid portfolio",
    ),
    Stage(
        id="lion",
        name="Lion",
        emoji="🦁",
        range=(100_000_000, 1_000_000_000),
        color="from-purple-500 to-purple-600",
        theme="purple",
        advice="Money works for you",
        focus="Let your money work for you through passive investments",
    ),
    Stage(
        id="dragon",
        name="Dragon",
        emoji="🐉",
        range=(1_000_000_000, math.inf),
        color="from-slate-500 to-slate-600",
        theme="slate",
        advice="Protect capital, don't chase",
        focus="Protect your capital and build a financial legacy",
    ),
)


class StageService:
    """Lookups over the fixed STAGES table."""

    @staticmethod
    def get_current_stage(total_savings: Any) -> Stage:
        total = float(to_decimal(total_savings))
        for stage in STAGES:
            start, end = stage.range
            if start <= total < end:
                return stage
        # Negative totals fall back to the first stage
        return STAGES[0]

    @staticmethod
    def get_next_stage(stage: Stage) -> Optional[Stage]:
        index = next(i for i, s in enumerate(STAGES) if s.id == stage.id)
        if index < len(STAGES) - 1:
            return STAGES[index + 1]
        return None

    @staticmethod
    def get_progress_to_next_stage(total_savings: Any, stage: Stage) -> float:
        """Percent of the way from this stage's start to the next stage's start."""
        next_stage = StageService.get_next_stage(stage)
        if next_stage is None:
            return 100.0

        start = Decimal(str(stage.range[0]))
        span = Decimal(str(next_stage.range[0])) - start
        progress = (to_decimal(total_savings) - start) / span * 100
        return float(min(Decimal("100"), max(Decimal("0"), progress)))


stage_service = StageService()
