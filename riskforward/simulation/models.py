"""Pydantic v2 result types for Monte Carlo simulation, run deltas and mitigation optimisation."""

from typing import Literal

from pydantic import BaseModel, Field


class DistributionSummary(BaseModel):
    mean: float = 0.0
    p50: float = 0.0
    p80: float = 0.0
    p90: float = 0.0
    min: float = 0.0
    max: float = 0.0
    std: float = 0.0


class RiskSimulationSummary(BaseModel):
    risk_id: str
    title: str = ""
    category: str = "other"
    probability: float
    expected_cost: float
    expected_days: float
    sim_mean_cost: float
    sim_mean_days: float


class SimulationResult(BaseModel):
    iterations: int
    seed: int | None = None
    scenario: str | None = None
    cost: DistributionSummary = Field(default_factory=DistributionSummary)
    schedule: DistributionSummary = Field(default_factory=DistributionSummary)
    cost_samples: list[float] = Field(default_factory=list)
    schedule_samples: list[float] = Field(default_factory=list)
    risks: list[RiskSimulationSummary] = Field(default_factory=list)

    @property
    def percentiles(self) -> dict[str, float]:
        """Cost P50/P80/P90."""
        return {"p50": self.cost.p50, "p80": self.cost.p80, "p90": self.cost.p90}

    @property
    def mean(self) -> float:
        return self.cost.mean


class SimulationRiskDelta(BaseModel):
    risk_id: str
    title: str = ""
    category: str = "other"
    prev_expected_cost: float
    curr_expected_cost: float
    delta_cost: float
    delta_cost_pct: float
    prev_expected_days: float
    curr_expected_days: float
    delta_days: float
    delta_days_pct: float
    direction: Literal["up", "down", "flat"]


class SimulationDelta(BaseModel):
    portfolio_delta_cost: float
    portfolio_delta_cost_pct: float
    portfolio_delta_days: float
    portfolio_delta_days_pct: float
    risk_deltas: list[SimulationRiskDelta]


class MitigationCurvePoint(BaseModel):
    incremental_spend: float
    cumulative_spend: float
    marginal_benefit: float
    cumulative_benefit: float
    benefit_per_dollar: float


class SpendBand(BaseModel):
    start: float
    end: float


class MitigationOptimisationRisk(BaseModel):
    risk_id: str
    risk_name: str
    materiality_weight: float
    leverage_score: float
    best_roi_band: SpendBand
    top_band_benefit_per_dollar: float
    explanation: str
    curve: list[MitigationCurvePoint]


class BudgetAllocation(BaseModel):
    risk_id: str
    risk_name: str
    band: SpendBand
    spend: float
    marginal_benefit: float
    benefit_per_dollar: float


class BudgetPlan(BaseModel):
    budget_cap: float
    total_projected_benefit: float
    allocations: list[BudgetAllocation]


class MitigationOptimisationResult(BaseModel):
    neutral_p80: float
    ranked: list[MitigationOptimisationRisk]
    spend_steps_used: list[float]
    used_fallback_materiality_count: int
    used_default_mitigation_params_count: int
    budget_plan: BudgetPlan | None = None
