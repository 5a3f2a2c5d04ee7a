"""Pydantic v2 models for risk register inputs shared by every engine.

Numeric fields are deliberately permissive (no range validation): malformed
values reach the engine sanitizers, which clamp and default instead of
raising. Closed vocabularies are ``str`` enums.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, Field


class Scenario(str, Enum):
    """Scenario / projection profile lens.

    Shared by the exposure engine (multiplier table), the Monte Carlo
    simulator and the forward projector (decay parameters).
    """
    conservative = "conservative"
    neutral = "neutral"
    aggressive = "aggressive"


# Projection code reads better with its own name for the same vocabulary.
ProjectionProfile = Scenario


class MitigationStatus(str, Enum):
    none = "none"
    planned = "planned"
    active = "active"
    completed = "completed"


class TimeProfileKind(str, Enum):
    front = "front"
    mid = "mid"
    back = "back"


class PressureClass(str, Enum):
    low = "Low"
    moderate = "Moderate"
    high = "High"
    severe = "Severe"


class ConfidenceBand(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class EscalationBand(str, Enum):
    normal = "normal"
    watch = "watch"
    high = "high"
    critical = "critical"


E = TypeVar("E", bound=Enum)


def coerce_enum(value: object, enum_cls: type[E], default: E) -> E:
    """Map a raw value onto ``enum_cls``; unknown values fall back to ``default``."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


def resolve_scenario(value: Scenario | str | None) -> Scenario:
    """Resolve a caller-supplied scenario name; ``None`` means neutral.

    Unknown names are a programmer error and raise ``ValueError``.
    """
    if value is None:
        return Scenario.neutral
    return Scenario(value)


class MitigationProfile(BaseModel):
    status: str = MitigationStatus.none.value
    effectiveness: float | None = None
    confidence: float | None = None
    reduces: float | None = None
    lag_months: float | None = None


class ScoreHistoryEntry(BaseModel):
    timestamp: float | str
    composite_score: float


class Risk(BaseModel):
    """A register entry as supplied by the external risk store."""

    id: str
    title: str = ""
    category: str | None = "other"

    probability: float | None = None
    base_cost_impact: float | None = None
    schedule_impact_days: float | None = None
    sensitivity: float | None = None
    escalation_persistence: float | None = None

    time_profile: str | list[float] | None = None
    mitigation_profile: MitigationProfile | None = None
    # Fraction (0..1) of score momentum removed by ongoing mitigation
    mitigation_strength: float | None = None

    # Monte Carlo impact ranges; missing bounds derive from the most-likely value
    cost_min: float | None = None
    cost_most_likely: float | None = None
    cost_max: float | None = None
    schedule_min_days: float | None = None
    schedule_max_days: float | None = None

    score_history: list[ScoreHistoryEntry] = Field(default_factory=list)


class RiskSnapshot(BaseModel):
    """Composite score of one risk at one review cycle."""

    risk_id: str
    cycle_index: int
    timestamp: str = ""
    composite_score: float
    momentum: float | None = None
