"""Pydantic v2 types for composite decision scoring, ranking and alert tags."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class AlertTag(str, Enum):
    critical = "CRITICAL"
    accelerating = "ACCELERATING"
    volatile = "VOLATILE"
    unstable = "UNSTABLE"
    emerging = "EMERGING"
    improving = "IMPROVING"


class ScoreWeights(BaseModel):
    """Component weights; the trigger-rate weight is whatever remains of 1."""

    velocity: float = 0.35
    volatility: float = 0.35
    stability: float = 0.30


class DecisionThresholds(BaseModel):
    """Alert rule thresholds. A zero (or 100 for stability) disables a rule."""

    critical_score_above: float = 80.0
    # Score points per review cycle
    accelerating_velocity_min: float = 3.0
    # Coefficient of variation of composite scores
    volatile_coeff_above: float = 0.4
    unstable_stability_below: float = 30.0
    improving_stability_above: float = 75.0
    emerging_min_rate: float = 0.2
    emerging_min_rise: float = 0.1


class DecisionInputs(BaseModel):
    """Per-risk metrics feeding the composite score.

    Missing numbers count as 0, except ``stability_score`` which counts as
    100 (fully stable).
    """

    risk_id: str
    title: str = ""
    trigger_rate: float | None = None
    velocity: float | None = None
    volatility: float | None = None
    stability_score: float | None = None
    trigger_rate_history: list[float] | None = None


class CompositeScoreBreakdown(BaseModel):
    trigger: float
    velocity: float
    volatility: float
    instability: float
    total: float


class CompositeScoreResult(BaseModel):
    score: float
    breakdown: CompositeScoreBreakdown


class ScoredRisk(DecisionInputs):
    composite_score: float


class RankedRisk(BaseModel):
    risk_id: str
    title: str = ""
    composite_score: float
    rank: int


class DecisionMetrics(BaseModel):
    risk_id: str
    composite_score: float
    rank: int
    alert_tags: list[AlertTag] = Field(default_factory=list)
    breakdown: CompositeScoreBreakdown | None = None


class DecisionResult(BaseModel):
    metrics_by_id: dict[str, DecisionMetrics]
    ranked: list[RankedRisk]
