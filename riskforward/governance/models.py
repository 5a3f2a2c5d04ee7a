"""Pydantic v2 types for the escalation instability index (EII) and derived signals."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class InstabilityLevel(str, Enum):
    low = "Low"
    moderate = "Moderate"
    high = "High"
    critical = "Critical"


class ScenarioName(str, Enum):
    """Display-side scenario name used by the lens and the recommendation."""
    conservative = "Conservative"
    neutral = "Neutral"
    aggressive = "Aggressive"


class LensMode(str, Enum):
    manual = "Manual"
    auto = "Auto"


class InstabilityTrend(str, Enum):
    rising = "Rising"
    falling = "Falling"
    stable = "Stable"


class FragilityLevel(str, Enum):
    stable = "Stable"
    watch = "Watch"
    structurally_fragile = "Structurally Fragile"


class InstabilityInputs(BaseModel):
    velocity: float = 0.0
    volatility: float = 0.0
    momentum_stability: float = Field(default=0.0, ge=0.0, le=1.0)
    scenario_sensitivity: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    history_depth: int = 0


class InstabilityBreakdown(BaseModel):
    velocity_score: float
    volatility_score: float
    sensitivity_score: float
    confidence_penalty: float
    momentum_penalty: float
    weights: dict[str, float]


class InstabilityResult(BaseModel):
    index: int = Field(ge=0, le=100)
    level: InstabilityLevel
    breakdown: InstabilityBreakdown
    recommended_scenario: ScenarioName
    rationale: list[str] = Field(default_factory=list)
    flags: list[str] = Field(default_factory=list)
    # Set only when a previous index is known
    trend: InstabilityTrend | None = None


class ScenarioDeltaSummary(BaseModel):
    neutral_to_conservative: float
    neutral_to_aggressive: float
    spread: float
    normalized_spread: float


class FragilityResult(BaseModel):
    score: int = Field(ge=0, le=100)
    level: FragilityLevel
    eii_delta: float | None = None


class EarlyWarningResult(BaseModel):
    early_warning: bool
    reasons: list[str] = Field(default_factory=list)


class DriverContributor(BaseModel):
    risk_id: str
    title: str
    eii: int
    level: InstabilityLevel


class InstabilityDrivers(BaseModel):
    high_volatility_count: int = 0
    low_confidence_count: int = 0
    high_sensitivity_count: int = 0
    high_velocity_count: int = 0
    top_contributors: list[DriverContributor] = Field(default_factory=list)


class ScenarioOrderingCheck(BaseModel):
    valid: bool
    flag: str | None = None
    violations: list[int] = Field(default_factory=list)
