"""
Forecast confidence score (0-100) derived only from snapshot history.

Three components over the trailing window (at most 6 snapshots):
- depth: more snapshots, more confidence (lookup, saturating at 85)
- stability: share of step deltas moving in the majority direction
- volatility: population std dev of step deltas, x10, capped at 100

Combined as ``0.35 * depth + 0.40 * stability + 0.25 * (100 - volatility)``,
clamped and rounded. Confidence is context for a forecast; it never changes
the projected scores.
"""

import logging
import math
from typing import Sequence

from riskforward.forecast.models import ConfidenceBreakdown, ForecastConfidence
from riskforward.models import ConfidenceBand, RiskSnapshot
from riskforward.utils import clamp, is_finite_number

logger = logging.getLogger(__name__)

MAX_WINDOW = 6
DEPTH_MAP = {1: 10, 2: 25, 3: 40, 4: 55, 5: 65, 6: 80}
DEPTH_MAX = 85
INSUFFICIENT_HISTORY_SCORE = 15

WEIGHT_DEPTH = 0.35
WEIGHT_STABILITY = 0.40
WEIGHT_VOLATILITY = 0.25


def band_from_score(score: float) -> ConfidenceBand:
    if score < 40:
        return ConfidenceBand.low
    if score < 70:
        return ConfidenceBand.medium
    return ConfidenceBand.high


def depth_score(window_size: int) -> int:
    if window_size <= 0:
        return 0
    if window_size > max(DEPTH_MAP):
        return DEPTH_MAX
    return DEPTH_MAP[window_size]


def _deltas(scores: Sequence[float]) -> list[float]:
    return [b - a for a, b in zip(scores, scores[1:])]


def stability_score(scores: Sequence[float]) -> int:
    """100 when every step moves the same way (flat steps agree with both)."""
    deltas = _deltas(scores)
    if not deltas:
        return 0
    if all(d >= 0 for d in deltas) or all(d <= 0 for d in deltas):
        return 100
    positive = sum(1 for d in deltas if d > 0)
    negative = sum(1 for d in deltas if d < 0)
    return round(100 * max(positive, negative) / len(deltas))


def volatility_penalty(scores: Sequence[float]) -> int:
    deltas = _deltas(scores)
    if not deltas:
        return 0
    mean = sum(deltas) / len(deltas)
    std = math.sqrt(sum((d - mean) ** 2 for d in deltas) / len(deltas))
    return round(min(100.0, std * 10))


def compute_forecast_confidence(
    history: Sequence[RiskSnapshot],
    include_breakdown: bool = False,
) -> ForecastConfidence:
    """
    Score how far a risk's history can be trusted to extrapolate.

    Args:
        history: Snapshots oldest first; non-finite scores are ignored
        include_breakdown: Attach component scores to the result

    Returns:
        ForecastConfidence with an integer score in [0, 100] and its band.
        Fewer than two snapshots score 15 and are flagged insufficient.
    """
    scores = [s.composite_score for s in history if is_finite_number(s.composite_score)]

    if len(scores) < 2:
        breakdown = None
        if include_breakdown:
            breakdown = ConfidenceBreakdown(
                depth_score=depth_score(len(scores)),
                stability_score=0,
                volatility_penalty=0,
                window=len(scores),
            )
        return ForecastConfidence(
            score=INSUFFICIENT_HISTORY_SCORE,
            band=band_from_score(INSUFFICIENT_HISTORY_SCORE),
            insufficient_history=True,
            breakdown=breakdown,
        )

    window = scores[-MAX_WINDOW:]
    depth = depth_score(len(window))
    stability = stability_score(window)
    penalty = volatility_penalty(window)
    raw = WEIGHT_DEPTH * depth + WEIGHT_STABILITY * stability + WEIGHT_VOLATILITY * (100 - penalty)
    score = int(round(clamp(raw, 0.0, 100.0)))

    breakdown = None
    if include_breakdown:
        breakdown = ConfidenceBreakdown(
            depth_score=depth,
            stability_score=stability,
            volatility_penalty=penalty,
            window=len(window),
        )
        logger.debug("Forecast confidence %d (depth=%d stability=%d volatility=%d)", score, depth, stability, penalty)

    return ForecastConfidence(score=score, band=band_from_score(score), breakdown=breakdown)
