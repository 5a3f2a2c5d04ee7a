"""Pydantic v2 result types for the forward exposure engine."""

from pydantic import BaseModel, Field


class AdjustedRiskParams(BaseModel):
    probability: float
    base_cost_impact: float
    escalation_persistence: float
    sensitivity: float


class MitigationAdjustment(BaseModel):
    prob_multiplier: float = 1.0
    impact_multiplier: float = 1.0


class ScenarioMultipliers(BaseModel):
    probability: float
    impact: float
    persistence: float
    sensitivity: float


class ExposureCurveDebug(BaseModel):
    adjusted_params: AdjustedRiskParams
    time_weights: list[float]
    mitigation_by_month: list[MitigationAdjustment]
    effective_multipliers: ScenarioMultipliers


class RiskExposureCurve(BaseModel):
    monthly_exposure: list[float]
    total: float
    debug: ExposureCurveDebug | None = None


class TopDriver(BaseModel):
    risk_id: str
    category: str
    total: float


class Concentration(BaseModel):
    """top3_share and hhi (sum of squared shares), both in [0, 1]."""
    top3_share: float = 0.0
    hhi: float = 0.0


class RiskCurveSummary(BaseModel):
    risk_id: str
    total: float
    monthly_exposure: list[float]


class PortfolioExposure(BaseModel):
    monthly_total: list[float]
    total: float
    by_category: dict[str, float] = Field(default_factory=dict)
    top_drivers: list[TopDriver] = Field(default_factory=list)
    concentration: Concentration = Field(default_factory=Concentration)
    # Diagnostic mode only
    warnings: list[str] | None = None
    risk_curves: list[RiskCurveSummary] | None = None
