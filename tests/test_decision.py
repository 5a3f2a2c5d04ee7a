"""Tests for composite decision scoring, ranking and alert tags."""

import math

import pytest

from riskforward.decision import (
    AlertTag,
    DecisionInputs,
    DecisionThresholds,
    ScoredRisk,
    ScoreWeights,
    compute_composite_score,
    compute_decision_metrics,
    decision_inputs_from_history,
    derive_alert_tags,
    rank_risks,
    score_risks,
)
from riskforward.decision.portfolio import coefficient_of_variation
from riskforward.decision.score import resolve_weights
from riskforward.forecast import ScoreHistoryLookup, SnapshotHistory
from riskforward.forecast.history import load_snapshots
from riskforward.models import Risk


class TestCompositeScore:
    def test_quiet_risk_scores_zero(self):
        result = compute_composite_score(DecisionInputs(risk_id="a"))
        assert result.score == pytest.approx(0.0, abs=1e-9)

    def test_weighted_components(self):
        result = compute_composite_score(
            DecisionInputs(risk_id="a", velocity=4, volatility=0.4, stability_score=50)
        )
        assert result.breakdown.velocity == pytest.approx(35 * math.tanh(1))
        assert result.breakdown.volatility == pytest.approx(17.5)
        assert result.breakdown.instability == pytest.approx(15.0)
        assert result.score == pytest.approx(35 * math.tanh(1) + 32.5)

    def test_breakdown_sums_to_total(self):
        result = compute_composite_score(
            DecisionInputs(risk_id="a", trigger_rate=0.7, velocity=2, volatility=0.3, stability_score=40),
            ScoreWeights(velocity=0.2, volatility=0.2, stability=0.2),
        )
        b = result.breakdown
        assert b.total == pytest.approx(b.trigger + b.velocity + b.volatility + b.instability)
        assert result.score == b.total

    def test_saturates_at_hundred(self):
        result = compute_composite_score(
            DecisionInputs(risk_id="a", velocity=100, volatility=5, stability_score=0)
        )
        assert result.score == pytest.approx(100.0)

    def test_falling_velocity_adds_nothing(self):
        result = compute_composite_score(DecisionInputs(risk_id="a", velocity=-6))
        assert result.breakdown.velocity == 0.0

    def test_trigger_weight_is_remainder(self):
        result = compute_composite_score(
            DecisionInputs(risk_id="a", trigger_rate=0.5),
            ScoreWeights(velocity=0.2, volatility=0.2, stability=0.2),
        )
        assert result.breakdown.trigger == pytest.approx(20.0)

    def test_overweight_is_rescaled(self):
        w = resolve_weights(ScoreWeights(velocity=1, volatility=1, stability=2))
        assert w == {"trigger": 0.0, "velocity": 0.25, "volatility": 0.25, "stability": 0.5}

    def test_non_finite_inputs_never_produce_nan(self):
        result = compute_composite_score(DecisionInputs(
            risk_id="a", trigger_rate=float("nan"), velocity=float("nan"),
            volatility=float("inf"), stability_score=float("nan"),
        ))
        assert math.isfinite(result.score)
        assert result.score == pytest.approx(0.0, abs=1e-9)


def _scored(risk_id, score, **kwargs):
    return ScoredRisk(risk_id=risk_id, composite_score=score, **kwargs)


class TestRanking:
    def test_highest_score_first(self):
        ranked = rank_risks([_scored("a", 10), _scored("b", 70), _scored("c", 40)])
        assert [(r.risk_id, r.rank) for r in ranked] == [("b", 1), ("c", 2), ("a", 3)]

    def test_tie_breaks_on_trigger_rate_then_stability(self):
        ranked = rank_risks([
            _scored("low-trigger", 50, trigger_rate=0.2),
            _scored("stable", 50, trigger_rate=0.6, stability_score=90),
            _scored("unstable", 50, trigger_rate=0.6, stability_score=20),
        ])
        assert [r.risk_id for r in ranked] == ["unstable", "stable", "low-trigger"]

    def test_tie_breaks_on_title_then_id(self):
        ranked = rank_risks([
            _scored("z", 50, title="beta"),
            _scored("y", 50, title="Alpha"),
            _scored("B", 50, title="alpha"),
        ])
        assert [r.risk_id for r in ranked] == ["B", "y", "z"]

    def test_missing_stability_counts_as_stable(self):
        ranked = rank_risks([_scored("none", 50), _scored("shaky", 50, stability_score=99)])
        assert [r.risk_id for r in ranked] == ["shaky", "none"]

    def test_deterministic(self):
        risks = [_scored(str(i), i % 3) for i in range(10)]
        assert rank_risks(risks) == rank_risks(list(reversed(risks)))

    def test_empty(self):
        assert rank_risks([]) == []


class TestAlertTags:
    def test_all_pressure_tags(self):
        risk = _scored("r", 85, velocity=4, volatility=0.5, stability_score=20)
        assert derive_alert_tags(risk) == [
            AlertTag.critical, AlertTag.accelerating, AlertTag.volatile, AlertTag.unstable,
        ]

    def test_quiet_risk_has_no_tags(self):
        assert derive_alert_tags(_scored("r", 10)) == []

    def test_improving_needs_known_negative_velocity(self):
        assert derive_alert_tags(_scored("r", 10, velocity=-1, stability_score=80)) == [AlertTag.improving]
        assert derive_alert_tags(_scored("r", 10, stability_score=80)) == []

    @pytest.mark.parametrize("history, emerging", [
        ([0.1, 0.35], True),
        ([0.3, 0.35], False),
        ([0.02, 0.15], False),
        ([], False),
    ])
    def test_emerging(self, history, emerging):
        tags = derive_alert_tags(_scored("r", 10, trigger_rate_history=history))
        assert (AlertTag.emerging in tags) is emerging

    def test_zero_threshold_disables_rule(self):
        thresholds = DecisionThresholds(critical_score_above=0)
        assert AlertTag.critical not in derive_alert_tags(_scored("r", 99), thresholds)

    def test_no_duplicates(self):
        tags = derive_alert_tags(_scored("r", 100, velocity=8, volatility=2, stability_score=0,
                                         trigger_rate_history=[0.0, 0.9]))
        assert len(tags) == len(set(tags))


class TestDecisionInputs:
    def test_from_history(self, make_history):
        inputs = decision_inputs_from_history(Risk(id="R1", probability=0.3), make_history([50, 52, 54, 56]))
        assert inputs.trigger_rate == pytest.approx(0.3)
        assert inputs.velocity == pytest.approx(2.0)
        assert inputs.stability_score == 100
        assert inputs.volatility == pytest.approx(coefficient_of_variation([50, 52, 54, 56]))

    def test_short_history(self, make_history):
        inputs = decision_inputs_from_history(Risk(id="R1"), make_history([40]))
        assert inputs.trigger_rate == 0.5
        assert inputs.velocity == 0.0
        assert inputs.volatility == 0.0
        assert inputs.stability_score is None

    def test_coefficient_of_variation(self):
        assert coefficient_of_variation([10, 10, 10]) == 0.0
        assert coefficient_of_variation([0, 0]) == 0.0
        assert coefficient_of_variation([5, 15]) == pytest.approx(0.5)


class TestPortfolioDecision:
    @pytest.fixture
    def store(self, make_history):
        store = SnapshotHistory()
        load_snapshots(store, make_history([40, 46, 52, 58, 64], risk_id="rising"))
        load_snapshots(store, make_history([30, 30, 30], risk_id="flat"))
        return store

    def test_rising_risk_ranks_first(self, store):
        risks = [Risk(id="flat", title="Flat"), Risk(id="rising", title="Rising")]
        result = compute_decision_metrics(risks, store)
        assert list(result.metrics_by_id) == ["flat", "rising"]
        assert [r.risk_id for r in result.ranked] == ["rising", "flat"]
        assert result.metrics_by_id["rising"].rank == 1
        assert AlertTag.accelerating in result.metrics_by_id["rising"].alert_tags
        assert result.metrics_by_id["flat"].alert_tags == []

    def test_trigger_rate_history_drives_emerging(self, store):
        risks = [Risk(id="flat")]
        result = compute_decision_metrics(risks, store, trigger_rate_history={"flat": [0.05, 0.4]})
        assert result.metrics_by_id["flat"].alert_tags == [AlertTag.emerging]

    def test_score_history_lookup(self):
        risks = [Risk(id="R1", score_history=[
            {"timestamp": "2026-01-01", "composite_score": 20},
            {"timestamp": "2026-02-01", "composite_score": 35},
        ])]
        result = compute_decision_metrics(risks, ScoreHistoryLookup.from_risks(risks))
        assert result.metrics_by_id["R1"].composite_score > 0

    def test_score_risks_attaches_breakdown(self):
        result = score_risks([DecisionInputs(risk_id="a", velocity=4), DecisionInputs(risk_id="b")])
        assert result.metrics_by_id["a"].breakdown.velocity > 0
        assert result.ranked[0].risk_id == "a"
