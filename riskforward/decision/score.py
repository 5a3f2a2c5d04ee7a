"""Composite decision score (0-100, higher is more concerning).

Four normalized components, each in [0, 1]:

- trigger: trigger rate (probability of the risk firing)
- velocity: ``tanh(velocity / 4)``, negative velocity counts as 0
- volatility: coefficient of variation over a 0.8 cap
- instability: ``(100 - stability_score) / 100``

The velocity, volatility and stability weights are configured; the trigger
weight is ``1 - (velocity + volatility + stability)``. When the three exceed
1 they are rescaled to sum to 1 and the trigger weight is 0.
"""

import math

from riskforward.decision.models import (
    CompositeScoreBreakdown,
    CompositeScoreResult,
    DecisionInputs,
    ScoreWeights,
)
from riskforward.utils import clamp, clamp01, finite_or_zero, safe_num

# Score points per cycle at which velocity reaches tanh(1) ~ 0.76
VELOCITY_SCALE = 4.0
VOLATILITY_CAP = 0.8
DEFAULT_WEIGHTS = ScoreWeights()


def normalize_trigger_rate(trigger_rate: float | None) -> float:
    return clamp01(trigger_rate)


def normalize_instability(stability_score: float | None) -> float:
    return clamp((100 - safe_num(stability_score, 100.0)) / 100, 0.0, 1.0)


def normalize_volatility(volatility: float | None) -> float:
    return clamp(safe_num(volatility, 0.0) / VOLATILITY_CAP, 0.0, 1.0)


def normalize_velocity(velocity: float | None) -> float:
    return clamp(math.tanh(safe_num(velocity, 0.0) / VELOCITY_SCALE), 0.0, 1.0)


def resolve_weights(weights: ScoreWeights | None = None) -> dict[str, float]:
    w = weights or DEFAULT_WEIGHTS
    velocity = max(0.0, safe_num(w.velocity, 0.0))
    volatility = max(0.0, safe_num(w.volatility, 0.0))
    stability = max(0.0, safe_num(w.stability, 0.0))
    configured = velocity + volatility + stability
    trigger = 1 - configured
    if trigger < 0:
        return {
            "trigger": 0.0,
            "velocity": velocity / configured,
            "volatility": volatility / configured,
            "stability": stability / configured,
        }
    return {"trigger": trigger, "velocity": velocity, "volatility": volatility, "stability": stability}


def compute_composite_score(
    inputs: DecisionInputs,
    weights: ScoreWeights | None = None,
) -> CompositeScoreResult:
    """Weighted 0-100 composite score with its per-component breakdown.

    Never returns NaN: malformed inputs fall back to their defaults.
    """
    w = resolve_weights(weights)

    trigger = clamp(normalize_trigger_rate(inputs.trigger_rate) * w["trigger"] * 100, 0.0, 100.0)
    velocity = clamp(normalize_velocity(inputs.velocity) * w["velocity"] * 100, 0.0, 100.0)
    volatility = clamp(normalize_volatility(inputs.volatility) * w["volatility"] * 100, 0.0, 100.0)
    instability = clamp(normalize_instability(inputs.stability_score) * w["stability"] * 100, 0.0, 100.0)
    total = clamp(finite_or_zero(trigger + velocity + volatility + instability), 0.0, 100.0)

    return CompositeScoreResult(
        score=total,
        breakdown=CompositeScoreBreakdown(
            trigger=finite_or_zero(trigger),
            velocity=finite_or_zero(velocity),
            volatility=finite_or_zero(volatility),
            instability=finite_or_zero(instability),
            total=total,
        ),
    )
