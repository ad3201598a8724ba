"""Tests for the integer scoring ladder and confidence boost."""

import pytest

from gridstake.config.params import ScoreBand, ScoringParams
from gridstake.scoring.accuracy import (
    absolute_error,
    base_score,
    confidence_boost,
    cycle_of,
    relative_error_bp,
    score_forecast,
)


class TestCycle:

    @pytest.mark.parametrize("ts, cycle", [(0, 0), (143, 0), (144, 1), (1440, 10), (1583, 10), (1584, 11)])
    def test_cycle_of(self, ts, cycle):
        assert cycle_of(ts) == cycle

    def test_custom_length(self):
        assert cycle_of(100, cycle_length=10) == 10


class TestRelativeError:

    def test_absolute_error_is_symmetric(self):
        assert absolute_error(10, 4) == absolute_error(4, 10) == 6

    def test_floors_basis_points(self):
        assert relative_error_bp(1, 3) == 6666

    def test_zero_actual_is_zero_error(self):
        assert relative_error_bp(5000, 0) == 0

    def test_exact_match(self):
        assert relative_error_bp(5000, 5000) == 0

    def test_overshoot_above_scale(self):
        assert relative_error_bp(30, 10) == 20_000


class TestLadder:

    @pytest.mark.parametrize("error_bp, score", [
        (0, 100),
        (499, 100),
        (500, 90),
        (999, 90),
        (1000, 75),
        (2499, 75),
        (2500, 50),
        (4999, 50),
        (5000, 0),
        (20_000, 0),
    ])
    def test_base_score_boundaries(self, error_bp, score):
        assert base_score(error_bp) == score

    @pytest.mark.parametrize("confidence, boost", [(100, 10), (71, 10), (70, 5), (41, 5), (40, 0), (1, 0)])
    def test_confidence_boost_boundaries(self, confidence, boost):
        assert confidence_boost(confidence) == boost

    def test_custom_ladder(self):
        params = ScoringParams(score_bands=[ScoreBand(min_error_bp=100, score=1)], perfect_score=7)
        assert base_score(100, params) == 1
        assert base_score(99, params) == 7


class TestScoreForecast:

    def test_perfect_forecast_high_confidence(self):
        breakdown = score_forecast(5000, 5000, 90)
        assert breakdown.error_bp == 0
        assert breakdown.base_score == 100
        assert breakdown.confidence_boost == 10
        assert breakdown.final_score == 110

    def test_ten_percent_off_medium_confidence(self):
        breakdown = score_forecast(5500, 5000, 50)
        assert breakdown.absolute_error == 500
        assert breakdown.error_bp == 1000
        assert breakdown.final_score == 80

    def test_wild_miss_still_gets_boost(self):
        assert score_forecast(20_000, 5000, 80).final_score == 10
