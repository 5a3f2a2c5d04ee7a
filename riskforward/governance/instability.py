"""Escalation Instability Index (EII) and structural fragility.

The EII is a weighted sum of five normalized components, each in [0, 1]:

=====================  ======  ============================================
Component              Weight  Source
=====================  ======  ============================================
velocity score          0.25   ``|velocity| / 10`` (score points per cycle)
volatility score        0.20   ``volatility / 5`` (std dev of score deltas)
scenario sensitivity    0.25   normalized TTC spread across profiles
confidence penalty      0.20   ``1 - confidence``
momentum penalty        0.10   ``1 - momentum_stability``
=====================  ======  ============================================

scaled to an integer 0-100. Every component moves the index in one
direction only, so a calm, well-evidenced history can never outscore a
volatile one.
"""

import logging
import math
from typing import Optional, Sequence

from riskforward.governance.models import (
    FragilityLevel,
    FragilityResult,
    InstabilityBreakdown,
    InstabilityInputs,
    InstabilityLevel,
    InstabilityResult,
    InstabilityTrend,
    ScenarioDeltaSummary,
    ScenarioName,
)
from riskforward.models import RiskSnapshot
from riskforward.utils import clamp, clamp01, is_finite_number

logger = logging.getLogger(__name__)

# A profile that never reaches critical inside the horizon counts as this many cycles
TTC_NULL_PLACEHOLDER = 90

VELOCITY_REASONABLE_MAX = 10.0
VOLATILITY_REASONABLE_MAX = 5.0

WEIGHTS = {
    "velocity": 0.25,
    "volatility": 0.20,
    "sensitivity": 0.25,
    "confidence_penalty": 0.20,
    "momentum_penalty": 0.10,
}

LOW_CONFIDENCE = 0.45
HIGH_CONFIDENCE = 0.65
HIGH_SCENARIO_SPREAD = 0.7
MIN_HISTORY_DEPTH = 2
TREND_THRESHOLD = 5

EII_DELTA_MIN = -20.0
EII_DELTA_MAX = 20.0


def normalize01(value: float, low: float, high: float) -> float:
    """Map ``value`` from [low, high] onto [0, 1], clamped."""
    if high <= low or not is_finite_number(value):
        return 0.0
    return clamp((value - low) / (high - low), 0.0, 1.0)


def calc_scenario_delta_summary(
    conservative: Optional[int],
    neutral: Optional[int],
    aggressive: Optional[int],
) -> ScenarioDeltaSummary:
    """How far the three profile TTCs sit apart; ``None`` counts as 90 cycles."""
    c = TTC_NULL_PLACEHOLDER if conservative is None else conservative
    n = TTC_NULL_PLACEHOLDER if neutral is None else neutral
    a = TTC_NULL_PLACEHOLDER if aggressive is None else aggressive
    spread = abs(c - a)
    return ScenarioDeltaSummary(
        neutral_to_conservative=abs(n - c),
        neutral_to_aggressive=abs(n - a),
        spread=spread,
        normalized_spread=normalize01(spread, 0, TTC_NULL_PLACEHOLDER),
    )


def _level(index: int) -> InstabilityLevel:
    if index <= 24:
        return InstabilityLevel.low
    if index <= 49:
        return InstabilityLevel.moderate
    if index <= 74:
        return InstabilityLevel.high
    return InstabilityLevel.critical


def _trend(delta: float) -> InstabilityTrend:
    if delta > TREND_THRESHOLD:
        return InstabilityTrend.rising
    if delta < -TREND_THRESHOLD:
        return InstabilityTrend.falling
    return InstabilityTrend.stable


def calc_instability_index(
    inputs: InstabilityInputs,
    previous_index: Optional[float] = None,
) -> InstabilityResult:
    """Compute the EII, its level, recommended scenario lens and flags.

    Args:
        inputs: Normalized velocity, volatility, stability, sensitivity and
            confidence for one risk.
        previous_index: EII from the previous run; when given, ``trend`` is
            set from the difference.

    Returns:
        InstabilityResult with the component breakdown.
    """
    velocity_score = normalize01(abs(inputs.velocity), 0, VELOCITY_REASONABLE_MAX)
    volatility_score = normalize01(inputs.volatility, 0, VOLATILITY_REASONABLE_MAX)
    sensitivity_score = clamp01(inputs.scenario_sensitivity)
    confidence = clamp01(inputs.confidence)
    confidence_penalty = 1 - confidence
    momentum_penalty = 1 - clamp01(inputs.momentum_stability)

    raw = (
        WEIGHTS["velocity"] * velocity_score
        + WEIGHTS["volatility"] * volatility_score
        + WEIGHTS["sensitivity"] * sensitivity_score
        + WEIGHTS["confidence_penalty"] * confidence_penalty
        + WEIGHTS["momentum_penalty"] * momentum_penalty
    )
    index = int(clamp(round(raw * 100), 0, 100))

    if confidence < LOW_CONFIDENCE or volatility_score > 0.7:
        recommended = ScenarioName.conservative
        rationale = ["Conservative: low confidence or high volatility."]
    elif velocity_score > 0.7 and sensitivity_score > 0.6 and confidence > HIGH_CONFIDENCE:
        recommended = ScenarioName.aggressive
        rationale = ["Aggressive: high velocity, high sensitivity, and sufficient confidence."]
    else:
        recommended = ScenarioName.neutral
        rationale = ["Neutral: default scenario."]

    flags = []
    if inputs.history_depth < MIN_HISTORY_DEPTH:
        flags.append("LowHistory")
    if confidence < LOW_CONFIDENCE:
        flags.append("LowConfidence")
    if sensitivity_score > HIGH_SCENARIO_SPREAD:
        flags.append("HighScenarioSpread")

    trend = None
    if previous_index is not None and is_finite_number(previous_index):
        trend = _trend(index - previous_index)

    return InstabilityResult(
        index=index,
        level=_level(index),
        breakdown=InstabilityBreakdown(
            velocity_score=velocity_score,
            volatility_score=volatility_score,
            sensitivity_score=sensitivity_score,
            confidence_penalty=confidence_penalty,
            momentum_penalty=momentum_penalty,
            weights=dict(WEIGHTS),
        ),
        recommended_scenario=recommended,
        rationale=rationale,
        flags=flags,
        trend=trend,
    )


def calc_fragility(
    current_eii: float,
    previous_eii: Optional[float] = None,
    confidence_penalty: float = 0.0,
) -> FragilityResult:
    """Separate persistent structural fragility from a one-off instability spike.

    ``0.6 * current + 0.3 * 20 * norm(delta, -20, 20) + 0.1 * 100 * penalty``,
    clamped to [0, 100]. Without a previous value the delta is 0.
    """
    has_previous = previous_eii is not None and is_finite_number(previous_eii)
    eii_delta = current_eii - previous_eii if has_previous else 0.0
    delta_norm = normalize01(eii_delta, EII_DELTA_MIN, EII_DELTA_MAX)
    raw = current_eii * 0.6 + delta_norm * 20 * 0.3 + clamp01(confidence_penalty) * 100 * 0.1
    score = int(clamp(round(raw), 0, 100))

    if score <= 39:
        level = FragilityLevel.stable
    elif score <= 69:
        level = FragilityLevel.watch
    else:
        level = FragilityLevel.structurally_fragile

    return FragilityResult(score=score, level=level, eii_delta=eii_delta if has_previous else None)


def instability_inputs_from_history(
    history: Sequence[RiskSnapshot],
    momentum_per_cycle: float,
    forecast_confidence: int,
    stability_score: float,
    scenario_spread: float,
    window: int = 6,
) -> InstabilityInputs:
    """Assemble EII inputs from a risk's snapshot history and its forecast.

    Velocity is the momentum the projector used; volatility is the population
    std dev of score deltas over the trailing ``window`` snapshots; stability
    and confidence arrive on 0-100 scales and are rescaled to [0, 1].
    """
    scores = [s.composite_score for s in history[-window:] if is_finite_number(s.composite_score)]
    deltas = [b - a for a, b in zip(scores, scores[1:])]
    if deltas:
        mean = sum(deltas) / len(deltas)
        volatility = math.sqrt(sum((d - mean) ** 2 for d in deltas) / len(deltas))
    else:
        volatility = 0.0

    return InstabilityInputs(
        velocity=momentum_per_cycle if is_finite_number(momentum_per_cycle) else 0.0,
        volatility=volatility,
        momentum_stability=clamp01(stability_score / 100),
        scenario_sensitivity=clamp01(scenario_spread),
        confidence=clamp01(forecast_confidence / 100),
        history_depth=len(history),
    )
