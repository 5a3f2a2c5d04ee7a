"""Pydantic v2 result types for forward score projection."""

from __future__ import annotations

from pydantic import BaseModel, Field

from riskforward.governance.models import FragilityResult, InstabilityResult
from riskforward.models import ConfidenceBand, PressureClass, ProjectionProfile


class ForecastPoint(BaseModel):
    step: int
    projected_score: float
    projected_delta_from_now: float
    confidence: float


class RiskForecast(BaseModel):
    risk_id: str
    horizon: int
    points: list[ForecastPoint] = Field(default_factory=list)
    # First 1-based step in the critical band, None if never within the horizon
    time_to_critical: int | None = None
    crosses_critical_within_window: bool = False
    # Sub-critical now, critical at some projected step
    projected_critical: bool = False


class ConfidenceBreakdown(BaseModel):
    depth_score: float
    stability_score: float
    volatility_penalty: float
    window: int


class ForecastConfidence(BaseModel):
    score: int
    band: ConfidenceBand
    insufficient_history: bool = False
    breakdown: ConfidenceBreakdown | None = None


class ScenarioTTC(BaseModel):
    """Baseline time-to-critical under each projection profile."""

    conservative: int | None = None
    neutral: int | None = None
    aggressive: int | None = None


class RiskMitigationForecast(BaseModel):
    """Baseline vs mitigated forecast for one risk, plus governance signals."""

    risk_id: str
    baseline_forecast: RiskForecast
    mitigated_forecast: RiskForecast
    mitigation_insufficient: bool
    time_to_critical_baseline: int | None = None
    time_to_critical_mitigated: int | None = None

    forecast_confidence: int | None = None
    confidence_band: ConfidenceBand | None = None
    confidence_breakdown: ConfidenceBreakdown | None = None
    projection_profile_used: ProjectionProfile = ProjectionProfile.neutral
    insufficient_history: bool = False

    scenario_ttc: ScenarioTTC | None = None
    instability: InstabilityResult | None = None
    fragility: FragilityResult | None = None
    early_warning: bool = False
    early_warning_reason: list[str] = Field(default_factory=list)


class WeightedForwardPressure(BaseModel):
    """Confidence-weighted counts; each risk contributes ``clamp01(confidence / 100)``."""

    projected_critical_count: float
    mitigation_insufficient_count: float
    pct_projected_critical: float
    pct_mitigation_insufficient: float
    pressure_class: PressureClass


class PortfolioForwardPressure(BaseModel):
    total_risks: int
    projected_critical_count: int
    mitigation_insufficient_count: int
    pct_projected_critical: float
    pct_mitigation_insufficient: float
    pressure_class: PressureClass
    weighted: WeightedForwardPressure | None = None
    projection_profile_used: ProjectionProfile = ProjectionProfile.neutral


class ForwardProjectionResult(BaseModel):
    risk_forecasts_by_id: dict[str, RiskMitigationForecast]
    forward_pressure: PortfolioForwardPressure
    projection_profile_used: ProjectionProfile


class ScenarioSummary(BaseModel):
    forward_pressure: PortfolioForwardPressure
    projected_critical_count: int
    median_ttc: float | None = None


class ScenarioComparison(BaseModel):
    conservative: ScenarioSummary
    neutral: ScenarioSummary
    aggressive: ScenarioSummary
