"""Tests for momentum, forward projection and mitigation stress forecasts."""

import pytest

from riskforward.exposure.mitigation import compute_mitigation_adjustment
from riskforward.forecast import (
    ScoreHistoryLookup,
    SnapshotHistory,
    build_mitigation_stress_forecast,
    build_risk_forecast,
    compute_momentum,
    compute_scenario_comparison,
    project_forward,
    run_forward_projection,
)
from riskforward.forecast.history import load_snapshots
from riskforward.forecast.projector import resolve_mitigation_strength
from riskforward.forecast.thresholds import EscalationThresholds
from riskforward.governance import validate_scenario_ordering
from riskforward.models import MitigationProfile, ProjectionProfile, Risk, RiskSnapshot, ScoreHistoryEntry

# Momentum 3 per cycle, current score 70
RISING = [58, 61, 64, 67, 70]


class TestMomentum:
    def test_slope_over_cycles(self, make_history):
        assert compute_momentum(make_history(RISING)).momentum_per_cycle == pytest.approx(3.0)

    def test_uses_last_five_points(self, make_history):
        result = compute_momentum(make_history([0, 0, 0, 10, 12, 14, 16, 18]))
        assert result.momentum_per_cycle == pytest.approx(2.0)

    def test_clamped(self, make_history):
        assert compute_momentum(make_history([0, 50])).momentum_per_cycle == 8.0
        assert compute_momentum(make_history([50, 0])).momentum_per_cycle == -8.0

    def test_confidence(self, make_history):
        # std of 58..70 step 3 is sqrt(18)
        result = compute_momentum(make_history(RISING))
        assert result.confidence == pytest.approx(1 - 18 ** 0.5 / 15)

    def test_short_history_is_zero(self, make_history):
        assert compute_momentum(make_history([42])).momentum_per_cycle == 0.0
        assert compute_momentum([]).confidence == 0.0

    def test_same_cycle_is_zero(self):
        history = [RiskSnapshot(risk_id="R", cycle_index=3, composite_score=s) for s in (10, 40)]
        assert compute_momentum(history).momentum_per_cycle == 0.0


class TestProjectForward:
    def test_decayed_momentum_accumulates(self):
        points = project_forward(50, 4, 0.8, horizon=3)
        assert [p.step for p in points] == [1, 2, 3]
        assert points[0].projected_score == pytest.approx(54.0)
        assert points[1].projected_score == pytest.approx(57.4)
        assert points[2].projected_delta_from_now == pytest.approx(4 + 3.4 + 2.89)
        assert points[0].confidence == pytest.approx(0.8 * 0.92)

    def test_scores_stay_in_bounds(self):
        up = project_forward(98, 8, 1.0, horizon=10)
        down = project_forward(3, -8, 1.0, horizon=10)
        assert all(0 <= p.projected_score <= 100 for p in up + down)
        assert up[-1].projected_score == 100.0
        assert down[-1].projected_score == 0.0

    def test_drift_converges(self):
        points = project_forward(0, 8, 1.0, horizon=200)
        assert points[-1].projected_score == pytest.approx(8 / (1 - 0.85), rel=1e-6)

    def test_confidence_decays(self):
        points = project_forward(50, 1, 1.0, horizon=5)
        confidences = [p.confidence for p in points]
        assert confidences == sorted(confidences, reverse=True)

    def test_non_finite_inputs(self):
        points = project_forward(float("nan"), float("inf"), float("nan"), horizon=3)
        assert all(p.projected_score == 0.0 and p.confidence == 0.0 for p in points)

    def test_nan_decay_never_pins_score_to_ceiling(self):
        points = project_forward(40, 1, 0.8, horizon=3, momentum_decay=float("nan"))
        assert points[0].projected_score == pytest.approx(41.0)
        assert all(p.projected_score < 80 for p in points)

    def test_zero_horizon(self):
        assert project_forward(50, 2, 0.5, horizon=0) == []


class TestRiskForecast:
    def test_time_to_critical(self, make_history):
        history = make_history(RISING)
        forecast = build_risk_forecast("R1", history[-1], history)
        assert forecast.time_to_critical == 5
        assert forecast.crosses_critical_within_window
        assert forecast.projected_critical

    def test_ttc_ordering_across_profiles(self, make_history):
        history = make_history(RISING)
        ttc = {p: build_risk_forecast("R1", history[-1], history, profile=p).time_to_critical
               for p in ProjectionProfile}
        assert ttc[ProjectionProfile.conservative] is None
        assert ttc[ProjectionProfile.neutral] == 5
        assert ttc[ProjectionProfile.aggressive] == 4

    def test_stored_momentum_wins(self, make_history):
        history = make_history([50, 50])
        latest = history[-1].model_copy(update={"momentum": 6.0})
        forecast = build_risk_forecast("R1", latest, history)
        assert forecast.points[0].projected_score == pytest.approx(56.0)

    def test_already_critical_is_not_projected_critical(self, make_history):
        history = make_history([85, 85])
        forecast = build_risk_forecast("R1", history[-1], history)
        assert forecast.time_to_critical == 1
        assert forecast.crosses_critical_within_window
        assert not forecast.projected_critical

    def test_critical_now_but_falling(self, make_history):
        history = make_history([95, 85])
        forecast = build_risk_forecast("R1", history[-1], history)
        assert forecast.time_to_critical is None
        assert forecast.crosses_critical_within_window
        assert not forecast.projected_critical

    def test_no_history(self):
        forecast = build_risk_forecast("R1", None, [])
        assert all(p.projected_score == 0.0 for p in forecast.points)
        assert forecast.time_to_critical is None
        assert not forecast.crosses_critical_within_window

    def test_custom_thresholds(self, make_history):
        history = make_history(RISING)
        forecast = build_risk_forecast("R1", history[-1], history, thresholds=EscalationThresholds(critical_min=72))
        assert forecast.time_to_critical == 1


class TestMitigationStressForecast:
    def test_effective_mitigation(self, make_history):
        history = make_history(RISING)
        f = build_mitigation_stress_forecast("R1", history[-1], history, mitigation_strength=0.5)
        assert f.time_to_critical_baseline == 5
        assert f.time_to_critical_mitigated is None
        assert not f.mitigation_insufficient

    def test_no_mitigation_is_insufficient(self, make_history):
        history = make_history(RISING)
        f = build_mitigation_stress_forecast("R1", history[-1], history, mitigation_strength=None)
        assert f.mitigated_forecast == f.baseline_forecast
        assert f.mitigation_insufficient

    def test_confidence_and_signals_attached(self, make_history):
        history = make_history(RISING)
        f = build_mitigation_stress_forecast("R1", history[-1], history, include_breakdown=True)
        assert f.forecast_confidence == 88
        assert f.confidence_band.value == "high"
        assert f.confidence_breakdown.window == 5
        assert f.scenario_ttc.neutral == 5
        assert f.scenario_ttc.aggressive == 4
        assert f.scenario_ttc.conservative is None
        assert 0 <= f.instability.index <= 100
        assert f.fragility is not None
        assert not f.insufficient_history

    def test_imminent_breach_suppresses_early_warning(self, make_history):
        history = make_history(RISING)
        f = build_mitigation_stress_forecast("R1", history[-1], history)
        assert not f.early_warning
        assert f.early_warning_reason == []

    def test_insufficient_history(self):
        f = build_mitigation_stress_forecast("R1", None, [])
        assert f.insufficient_history
        assert f.forecast_confidence == 15
        assert "LowHistory" in f.instability.flags

    def test_previous_instability_sets_trend(self, make_history):
        history = make_history(RISING)
        f = build_mitigation_stress_forecast("R1", history[-1], history, previous_instability=0.0)
        assert f.instability.trend is not None
        assert f.fragility.eii_delta == pytest.approx(f.instability.index)


class TestMitigationStrength:
    def test_explicit_strength(self):
        assert resolve_mitigation_strength(Risk(id="R", mitigation_strength=0.4)) == 0.4

    def test_clamped(self):
        assert resolve_mitigation_strength(Risk(id="R", mitigation_strength=7)) == 1.0

    def test_active_profile_effectiveness(self):
        risk = Risk(id="R", mitigation_profile=MitigationProfile(status="active", effectiveness=0.3))
        assert resolve_mitigation_strength(risk) == 0.3

    def test_planned_profile_ignored(self):
        risk = Risk(id="R", mitigation_profile=MitigationProfile(status="planned", effectiveness=0.3))
        assert resolve_mitigation_strength(risk) == 0.0

    def test_active_profile_without_effectiveness_matches_exposure(self):
        risk = Risk(id="R", mitigation_profile=MitigationProfile(status="active"))
        adjustment = compute_mitigation_adjustment(risk, month_index=0)
        assert resolve_mitigation_strength(risk) == 0.5
        assert adjustment.prob_multiplier == pytest.approx(1 - resolve_mitigation_strength(risk) / 2)


@pytest.fixture
def history_store(make_history):
    store = SnapshotHistory()
    load_snapshots(store, make_history(RISING, risk_id="R1"))
    load_snapshots(store, make_history([20, 22, 21, 23], risk_id="R2"))
    load_snapshots(store, make_history([85, 86], risk_id="R3"))
    return store


@pytest.fixture
def projection_risks():
    return [
        Risk(id="R1", mitigation_strength=0.2),
        Risk(id="R2"),
        Risk(id="R3", mitigation_strength=0.9),
        Risk(id="R4"),
    ]


class TestRunForwardProjection:
    def test_default_profile_equals_neutral(self, projection_risks, history_store):
        default = run_forward_projection(projection_risks, history_store)
        neutral = run_forward_projection(projection_risks, history_store, profile="neutral")
        assert default == neutral
        assert default.forward_pressure == neutral.forward_pressure
        assert default.projection_profile_used is ProjectionProfile.neutral

    def test_forecasts_keyed_in_input_order(self, projection_risks, history_store):
        result = run_forward_projection(projection_risks, history_store)
        assert list(result.risk_forecasts_by_id) == ["R1", "R2", "R3", "R4"]

    def test_pressure_counts(self, projection_risks, history_store):
        pressure = run_forward_projection(projection_risks, history_store).forward_pressure
        assert pressure.total_risks == 4
        assert pressure.projected_critical_count == 1
        assert pressure.pct_projected_critical == pytest.approx(0.25)
        assert pressure.pressure_class.value == "High"

    def test_thread_pool_gives_identical_result(self, projection_risks, history_store):
        serial = run_forward_projection(projection_risks, history_store, profile="aggressive")
        pooled = run_forward_projection(projection_risks, history_store, profile="aggressive", max_workers=3)
        assert serial == pooled

    def test_horizon_from_settings(self, projection_risks, history_store, monkeypatch):
        monkeypatch.setenv("RISKFORWARD_FORECAST_HORIZON", "8")
        result = run_forward_projection(projection_risks, history_store)
        assert result.risk_forecasts_by_id["R1"].baseline_forecast.horizon == 8

    def test_scenario_ordering_holds(self, projection_risks, history_store):
        result = run_forward_projection(projection_risks, history_store)
        snapshots = [f.scenario_ttc.model_dump() for f in result.risk_forecasts_by_id.values()]
        assert validate_scenario_ordering(snapshots).valid

    def test_previous_instability_by_id(self, projection_risks, history_store):
        result = run_forward_projection(projection_risks, history_store, previous_instability={"R2": 90})
        assert result.risk_forecasts_by_id["R2"].instability.trend.value == "Falling"
        assert result.risk_forecasts_by_id["R1"].instability.trend is None

    def test_score_history_lookup(self):
        risks = [Risk(id="R1", score_history=[
            ScoreHistoryEntry(timestamp=f"2026-0{i + 1}-01", composite_score=s) for i, s in enumerate(RISING)
        ])]
        result = run_forward_projection(risks, ScoreHistoryLookup.from_risks(risks))
        assert result.risk_forecasts_by_id["R1"].time_to_critical_baseline == 5


class TestScenarioComparison:
    def test_per_profile_summary(self, projection_risks, history_store):
        comparison = compute_scenario_comparison(projection_risks, history_store)
        assert comparison.conservative.projected_critical_count == 0
        assert comparison.neutral.projected_critical_count == 1
        assert comparison.aggressive.projected_critical_count == 1
        assert comparison.aggressive.median_ttc <= comparison.neutral.median_ttc

    def test_median_includes_already_critical(self, projection_risks, history_store):
        # R1 crosses at step 5, R3 is critical from step 1
        comparison = compute_scenario_comparison(projection_risks, history_store)
        assert comparison.neutral.median_ttc == pytest.approx(3.0)
