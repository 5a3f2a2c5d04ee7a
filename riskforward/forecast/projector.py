"""Bounded forward projection of risk composite scores.

Projection Model
----------------
Starting from the current score, each review cycle advances the score by the
current momentum, then decays the momentum::

    score_k    = clamp(score_{k-1} + m_{k-1}, 0, 100)
    m_k        = m_{k-1} * momentum_decay
    conf_k     = conf_{k-1} * confidence_decay

so the cumulative drift after ``k`` cycles is ``m * (1 - d^k) / (1 - d)``, a
geometric series that converges and cannot run away. The projection profile
only selects ``momentum_decay`` and ``confidence_decay``; omitting the
profile is exactly the neutral profile.

A mitigated forecast repeats the projection with momentum scaled by
``1 - mitigation_strength``. Each mitigation forecast also carries the
forecast confidence, baseline time-to-critical under every profile and the
governance signals derived from them (instability, fragility, early
warning).
"""

from __future__ import annotations

import logging
import statistics
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional, Sequence

from riskforward.exposure.validate import DEFAULT_MITIGATION_EFFECTIVENESS
from riskforward.forecast.confidence import MAX_WINDOW, compute_forecast_confidence, stability_score
from riskforward.forecast.history import HistoryLookup
from riskforward.forecast.models import (
    ForecastPoint,
    ForwardProjectionResult,
    RiskForecast,
    RiskMitigationForecast,
    ScenarioComparison,
    ScenarioSummary,
    ScenarioTTC,
)
from riskforward.forecast.momentum import compute_momentum
from riskforward.forecast.pressure import compute_portfolio_forward_pressure
from riskforward.forecast.profiles import (
    NEUTRAL_CONFIDENCE_DECAY,
    NEUTRAL_MOMENTUM_DECAY,
    ProjectionParams,
    get_projection_params,
)
from riskforward.forecast.thresholds import (
    DEFAULT_THRESHOLDS,
    EscalationThresholds,
    is_currently_critical,
    thresholds_from_settings,
    time_to_band,
)
from riskforward.governance.early_warning import compute_early_warning
from riskforward.governance.instability import (
    calc_fragility,
    calc_instability_index,
    calc_scenario_delta_summary,
    instability_inputs_from_history,
)
from riskforward.models import (
    EscalationBand,
    MitigationStatus,
    ProjectionProfile,
    Risk,
    RiskSnapshot,
    resolve_scenario,
)
from riskforward.settings import get_settings
from riskforward.utils import clamp, clamp01, is_finite_number, safe_num

logger = logging.getLogger(__name__)

DEFAULT_HORIZON = 5
CLAMP_MIN = 0.0
CLAMP_MAX = 100.0


def project_forward(
    current_score: float,
    momentum_per_cycle: float,
    confidence: float,
    horizon: int = DEFAULT_HORIZON,
    momentum_decay: float = NEUTRAL_MOMENTUM_DECAY,
    confidence_decay: float = NEUTRAL_CONFIDENCE_DECAY,
) -> list[ForecastPoint]:
    """One ``ForecastPoint`` per step 1..horizon; scores never leave [0, 100]."""
    start = clamp(current_score, CLAMP_MIN, CLAMP_MAX) if is_finite_number(current_score) else 0.0
    momentum = momentum_per_cycle if is_finite_number(momentum_per_cycle) else 0.0
    conf = clamp01(confidence)

    points = []
    score = start
    for step in range(1, max(0, int(horizon)) + 1):
        score = clamp(score + momentum, CLAMP_MIN, CLAMP_MAX)
        momentum *= momentum_decay
        conf *= confidence_decay
        points.append(ForecastPoint(
            step=step,
            projected_score=score,
            projected_delta_from_now=score - start,
            confidence=conf,
        ))
    return points


def _forecast_from_momentum(
    risk_id: str,
    current_score: float,
    momentum: float,
    confidence: float,
    horizon: int,
    params: ProjectionParams,
    thresholds: EscalationThresholds,
) -> RiskForecast:
    points = project_forward(
        current_score,
        momentum,
        confidence,
        horizon=horizon,
        momentum_decay=params.momentum_decay,
        confidence_decay=params.confidence_decay,
    )
    ttc = time_to_band(points, EscalationBand.critical, thresholds)
    critical_now = is_currently_critical(current_score, thresholds)
    return RiskForecast(
        risk_id=risk_id,
        horizon=horizon,
        points=points,
        time_to_critical=ttc,
        crosses_critical_within_window=critical_now or ttc is not None,
        projected_critical=not critical_now and ttc is not None,
    )


def _starting_state(
    latest: Optional[RiskSnapshot],
    history: Sequence[RiskSnapshot],
) -> tuple[float, float, float]:
    """Current score, momentum and momentum confidence.

    A momentum stored on the latest snapshot wins over one recomputed from
    history; a missing snapshot starts from score 0.
    """
    current = latest.composite_score if latest is not None and is_finite_number(latest.composite_score) else 0.0
    computed = compute_momentum(history)
    momentum = computed.momentum_per_cycle
    if latest is not None and is_finite_number(latest.momentum):
        momentum = latest.momentum
    return current, momentum, computed.confidence


def build_risk_forecast(
    risk_id: str,
    latest: Optional[RiskSnapshot],
    history: Sequence[RiskSnapshot],
    profile: ProjectionProfile | str | None = None,
    horizon: int = DEFAULT_HORIZON,
    thresholds: EscalationThresholds = DEFAULT_THRESHOLDS,
) -> RiskForecast:
    current, momentum, confidence = _starting_state(latest, history)
    return _forecast_from_momentum(
        risk_id, current, momentum, confidence, horizon, get_projection_params(profile), thresholds
    )


def resolve_mitigation_strength(risk: Risk) -> float:
    """Fraction of momentum removed by ongoing mitigation, in [0, 1].

    An explicit ``mitigation_strength`` wins; otherwise an active or completed
    mitigation contributes its effectiveness (0.5 when unset, as in the
    exposure engine); otherwise 0.
    """
    if is_finite_number(risk.mitigation_strength):
        return clamp01(risk.mitigation_strength)
    profile = risk.mitigation_profile
    if profile is not None and profile.status in (MitigationStatus.active.value, MitigationStatus.completed.value):
        return clamp01(safe_num(profile.effectiveness, DEFAULT_MITIGATION_EFFECTIVENESS))
    return 0.0


def build_mitigation_stress_forecast(
    risk_id: str,
    latest: Optional[RiskSnapshot],
    history: Sequence[RiskSnapshot],
    mitigation_strength: Optional[float] = None,
    profile: ProjectionProfile | str | None = None,
    horizon: int = DEFAULT_HORIZON,
    thresholds: EscalationThresholds = DEFAULT_THRESHOLDS,
    previous_instability: Optional[float] = None,
    include_breakdown: bool = False,
) -> RiskMitigationForecast:
    """Baseline and mitigated forecasts for one risk with governance signals.

    Args:
        risk_id: Risk identifier.
        latest: Most recent snapshot, or None.
        history: Snapshots oldest first.
        mitigation_strength: 0..1; missing or invalid means no mitigation.
        profile: Projection profile; None is neutral.
        horizon: Review cycles to project.
        thresholds: Escalation bands.
        previous_instability: EII from the previous run, for trend and fragility.
        include_breakdown: Attach the confidence component breakdown.
    """
    profile = resolve_scenario(profile)
    current, momentum, momentum_confidence = _starting_state(latest, history)
    strength = clamp01(mitigation_strength)

    baseline = _forecast_from_momentum(
        risk_id, current, momentum, momentum_confidence, horizon, get_projection_params(profile), thresholds
    )
    mitigated = _forecast_from_momentum(
        risk_id, current, momentum * (1 - strength), momentum_confidence, horizon,
        get_projection_params(profile), thresholds,
    )

    confidence = compute_forecast_confidence(history, include_breakdown=include_breakdown)

    ttc_by_profile = {}
    for p in ProjectionProfile:
        if p == profile:
            ttc_by_profile[p.value] = baseline.time_to_critical
        else:
            ttc_by_profile[p.value] = _forecast_from_momentum(
                risk_id, current, momentum, momentum_confidence, horizon, get_projection_params(p), thresholds
            ).time_to_critical
    scenario_ttc = ScenarioTTC(**ttc_by_profile)
    spread = calc_scenario_delta_summary(scenario_ttc.conservative, scenario_ttc.neutral, scenario_ttc.aggressive)

    scores = [s.composite_score for s in history if is_finite_number(s.composite_score)]
    inputs = instability_inputs_from_history(
        history,
        momentum_per_cycle=momentum,
        forecast_confidence=confidence.score,
        stability_score=stability_score(scores[-MAX_WINDOW:]),
        scenario_spread=spread.normalized_spread,
    )
    instability = calc_instability_index(inputs, previous_index=previous_instability)
    fragility = calc_fragility(
        instability.index,
        previous_eii=previous_instability,
        confidence_penalty=instability.breakdown.confidence_penalty,
    )
    warning = compute_early_warning(instability.index, baseline.time_to_critical, inputs.confidence)

    return RiskMitigationForecast(
        risk_id=risk_id,
        baseline_forecast=baseline,
        mitigated_forecast=mitigated,
        mitigation_insufficient=mitigated.time_to_critical is not None,
        time_to_critical_baseline=baseline.time_to_critical,
        time_to_critical_mitigated=mitigated.time_to_critical,
        forecast_confidence=confidence.score,
        confidence_band=confidence.band,
        confidence_breakdown=confidence.breakdown,
        projection_profile_used=profile,
        insufficient_history=len(history) < 2,
        scenario_ttc=scenario_ttc,
        instability=instability,
        fragility=fragility,
        early_warning=warning.early_warning,
        early_warning_reason=warning.reasons,
    )


def run_forward_projection(
    risks: Sequence[Risk],
    history: HistoryLookup,
    profile: ProjectionProfile | str | None = None,
    horizon: Optional[int] = None,
    previous_instability: Optional[Mapping[str, float]] = None,
    thresholds: Optional[EscalationThresholds] = None,
    max_workers: Optional[int] = None,
) -> ForwardProjectionResult:
    """Forecast every risk and aggregate portfolio forward pressure.

    Args:
        risks: Risks to project; ``mitigation_strength`` (or an active
            mitigation profile) drives the mitigated forecast.
        history: Any object with ``get_latest_snapshot`` / ``get_risk_history``.
        profile: Projection profile; None is neutral, field for field.
        horizon: Review cycles; defaults to ``forecast_horizon`` from settings.
        previous_instability: Previous EII per risk id.
        thresholds: Escalation bands; defaults to the settings bands.
        max_workers: Fan per-risk forecasts out over a thread pool.

    Returns:
        ForwardProjectionResult keyed by risk id, in input order.
    """
    profile = resolve_scenario(profile)
    settings = get_settings()
    horizon = settings.forecast_horizon if horizon is None else horizon
    thresholds = thresholds or thresholds_from_settings(settings)
    previous_instability = previous_instability or {}

    def forecast(risk: Risk) -> RiskMitigationForecast:
        return build_mitigation_stress_forecast(
            risk.id,
            history.get_latest_snapshot(risk.id),
            history.get_risk_history(risk.id),
            mitigation_strength=resolve_mitigation_strength(risk),
            profile=profile,
            horizon=horizon,
            thresholds=thresholds,
            previous_instability=previous_instability.get(risk.id),
        )

    if max_workers and len(risks) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            forecasts = list(pool.map(forecast, risks))
    else:
        forecasts = [forecast(r) for r in risks]

    pressure = compute_portfolio_forward_pressure(forecasts, profile)
    logger.info(
        "Forward projection (%s): %d risks, %d projected critical, pressure %s",
        profile.value, pressure.total_risks, pressure.projected_critical_count, pressure.pressure_class.value,
    )
    return ForwardProjectionResult(
        risk_forecasts_by_id={f.risk_id: f for f in forecasts},
        forward_pressure=pressure,
        projection_profile_used=profile,
    )


def compute_scenario_comparison(
    risks: Sequence[Risk],
    history: HistoryLookup,
    horizon: Optional[int] = None,
    thresholds: Optional[EscalationThresholds] = None,
) -> ScenarioComparison:
    """Run the projection under every profile and summarise each run."""
    summaries = {}
    for profile in ProjectionProfile:
        result = run_forward_projection(risks, history, profile=profile, horizon=horizon, thresholds=thresholds)
        ttcs = [
            f.baseline_forecast.time_to_critical
            for f in result.risk_forecasts_by_id.values()
            if f.baseline_forecast.time_to_critical is not None
        ]
        summaries[profile.value] = ScenarioSummary(
            forward_pressure=result.forward_pressure,
            projected_critical_count=result.forward_pressure.projected_critical_count,
            median_ttc=statistics.median(ttcs) if ttcs else None,
        )
    return ScenarioComparison(**summaries)
