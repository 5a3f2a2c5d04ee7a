"""Portfolio forward pressure: how much of the register is heading for critical."""

from __future__ import annotations

from typing import Sequence

from riskforward.forecast.models import (
    PortfolioForwardPressure,
    RiskMitigationForecast,
    WeightedForwardPressure,
)
from riskforward.models import PressureClass, ProjectionProfile, resolve_scenario
from riskforward.utils import clamp01, is_finite_number

PRESSURE_LOW_MAX = 0.10
PRESSURE_MODERATE_MAX = 0.20
PRESSURE_HIGH_MAX = 0.35

DEFAULT_CONFIDENCE_WEIGHT = 0.5


def _safe_pct(count: float, total: int) -> float:
    if total <= 0 or not is_finite_number(count):
        return 0.0
    return max(0.0, count) / total


def pressure_class_from_pct(pct: float) -> PressureClass:
    if not is_finite_number(pct) or pct < PRESSURE_LOW_MAX:
        return PressureClass.low
    if pct <= PRESSURE_MODERATE_MAX:
        return PressureClass.moderate
    if pct <= PRESSURE_HIGH_MAX:
        return PressureClass.high
    return PressureClass.severe


def confidence_weight(forecast: RiskMitigationForecast) -> float:
    if forecast.forecast_confidence is None:
        return DEFAULT_CONFIDENCE_WEIGHT
    return clamp01(forecast.forecast_confidence / 100)


def compute_portfolio_forward_pressure(
    forecasts: Sequence[RiskMitigationForecast],
    profile: ProjectionProfile | str | None = None,
) -> PortfolioForwardPressure:
    """Aggregate per-risk forecasts into raw and confidence-weighted pressure.

    The weighted variant counts each risk at ``clamp01(confidence / 100)``
    (0.5 when confidence is unknown) over the same denominator, so it never
    exceeds the raw percentage and equals it only at full confidence. An
    empty portfolio yields zeros and ``Low``.
    """
    total = len(forecasts)
    projected_critical = 0
    insufficient = 0
    weighted_critical = 0.0
    weighted_insufficient = 0.0

    for f in forecasts:
        w = confidence_weight(f)
        if f.baseline_forecast.projected_critical:
            projected_critical += 1
            weighted_critical += w
        if f.mitigation_insufficient:
            insufficient += 1
            weighted_insufficient += w

    pct_critical = _safe_pct(projected_critical, total)
    weighted_pct_critical = _safe_pct(weighted_critical, total)

    return PortfolioForwardPressure(
        total_risks=total,
        projected_critical_count=projected_critical,
        mitigation_insufficient_count=insufficient,
        pct_projected_critical=pct_critical,
        pct_mitigation_insufficient=_safe_pct(insufficient, total),
        pressure_class=pressure_class_from_pct(pct_critical),
        weighted=WeightedForwardPressure(
            projected_critical_count=weighted_critical,
            mitigation_insufficient_count=weighted_insufficient,
            pct_projected_critical=weighted_pct_critical,
            pct_mitigation_insufficient=_safe_pct(weighted_insufficient, total),
            pressure_class=pressure_class_from_pct(weighted_pct_critical),
        ),
        projection_profile_used=resolve_scenario(profile),
    )
