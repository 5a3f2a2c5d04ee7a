"""Tests for forecast confidence scoring."""

import pytest

from riskforward.forecast.confidence import (
    band_from_score,
    compute_forecast_confidence,
    depth_score,
    stability_score,
    volatility_penalty,
)
from riskforward.models import ConfidenceBand


class TestComponents:
    def test_depth_lookup(self):
        assert [depth_score(n) for n in range(0, 9)] == [0, 10, 25, 40, 55, 65, 80, 85, 85]

    def test_monotonic_stability(self):
        assert stability_score([1, 2, 3, 4]) == 100
        assert stability_score([4, 3, 3, 1]) == 100

    def test_mixed_stability(self):
        # deltas +, -, + : majority 2 of 3
        assert stability_score([1, 3, 2, 4]) == 67

    def test_volatility_penalty(self):
        assert volatility_penalty([10, 20, 30]) == 0
        assert volatility_penalty([50, 30, 55, 25, 60]) == 100

    def test_band_boundaries(self):
        assert band_from_score(39) == ConfidenceBand.low
        assert band_from_score(40) == ConfidenceBand.medium
        assert band_from_score(69) == ConfidenceBand.medium
        assert band_from_score(70) == ConfidenceBand.high


class TestOrdering:
    def test_monotone_beats_flip_flop(self, make_history):
        monotone = compute_forecast_confidence(make_history([20, 30, 40, 50, 60]))
        flip_flop = compute_forecast_confidence(make_history([50, 30, 55, 25, 60]))
        assert monotone.score > flip_flop.score
        assert monotone.score == 88
        assert flip_flop.score == 43

    def test_longer_well_behaved_history_is_not_worse(self, make_history):
        scores = [
            compute_forecast_confidence(make_history(h)).score
            for h in ([40, 50], [35, 42, 48, 55], [30, 38, 45, 52, 58, 65])
        ]
        assert scores == sorted(scores)
        assert scores[:2] == [74, 83]

    def test_scores_are_bounded_integers(self, make_history):
        histories = [[0, 100, 0, 100, 0, 100], [50, 50], [100] * 10, [0, 1], [99, 3, 77]]
        for h in histories:
            result = compute_forecast_confidence(make_history(h))
            assert isinstance(result.score, int)
            assert 0 <= result.score <= 100


class TestInsufficientHistory:
    @pytest.mark.parametrize("scores", [[], [55]])
    def test_fixed_low_score(self, make_history, scores):
        result = compute_forecast_confidence(make_history(scores))
        assert result.score == 15
        assert result.band == ConfidenceBand.low
        assert result.insufficient_history

    def test_non_finite_scores_ignored(self, make_history):
        result = compute_forecast_confidence(make_history([float("nan"), 40]))
        assert result.insufficient_history


class TestBreakdown:
    def test_absent_by_default(self, make_history):
        assert compute_forecast_confidence(make_history([1, 2, 3])).breakdown is None

    def test_window_capped_at_six(self, make_history):
        result = compute_forecast_confidence(make_history(list(range(10))), include_breakdown=True)
        assert result.breakdown.window == 6
        assert result.breakdown.depth_score == 80
        assert result.breakdown.stability_score == 100

    def test_insufficient_breakdown(self, make_history):
        result = compute_forecast_confidence(make_history([42]), include_breakdown=True)
        assert result.breakdown.window == 1
        assert result.breakdown.depth_score == 10
