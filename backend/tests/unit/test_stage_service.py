"""Unit tests for savings stages."""

from decimal import Decimal

import pytest

from celengan.services.stage_service import STAGES, StageService


@pytest.mark.unit
class TestStageService:
    """Stage lookup and progress."""

    @pytest.mark.parametrize(
        "total,expected",
        [
            (0, "worm"),
            (999_999, "worm"),
            (1_000_000, "ant"),
            (4_999_999, "ant"),
            (5_000_000, "turtle"),
            (20_000_000, "wolf"),
            (50_000_000, "eagle"),
            (100_000_000, "lion"),
            (1_000_000_000, "dragon"),
            (50_000_000_000, "dragon"),
        ],
    )
    def test_current_stage_ranges_are_half_open(self, total, expected):
        assert StageService.get_current_stage(Decimal(total)).id == expected

    def test_negative_total_falls_back_to_first_stage(self):
        assert StageService.get_current_stage(Decimal("-100")).id == "worm"

    def test_next_stage(self):
        assert StageService.get_next_stage(STAGES[0]).id == "ant"

    def test_last_stage_has_no_next(self):
        assert StageService.get_next_stage(STAGES[-1]) is None

    def test_progress_to_next_stage(self):
        turtle = StageService.get_current_stage(12_500_000)
        assert StageService.get_progress_to_next_stage(12_500_000, turtle) == 50.0

    def test_progress_at_stage_start_is_zero(self):
        ant = StageService.get_current_stage(1_000_000)
        assert StageService.get_progress_to_next_stage(1_000_000, ant) == 0.0

    def test_progress_on_last_stage_is_complete(self):
        dragon = STAGES[-1]
        assert StageService.get_progress_to_next_stage(2_000_000_000, dragon) == 100.0

    def test_every_stage_has_copy(self):
        for stage in STAGES:
            assert stage.emoji
            assert stage.advice
            assert stage.focus
