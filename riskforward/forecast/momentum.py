"""Score momentum from snapshot history."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from riskforward.models import RiskSnapshot
from riskforward.utils import clamp, is_finite_number

MOMENTUM_CLAMP = 8.0
MAX_POINTS_FOR_MOMENTUM = 5
VARIANCE_SCALE = 15.0


@dataclass(frozen=True)
class MomentumResult:
    momentum_per_cycle: float
    confidence: float


def compute_momentum(history: Sequence[RiskSnapshot]) -> MomentumResult:
    """Average score change per review cycle over the last five snapshots.

    Momentum is ``(last - first) / cycle_span`` clamped to [-8, 8]. Confidence
    grows with point count and shrinks with score dispersion:
    ``min(1, (n - 1) / 4) * (1 - min(1, std / 15))``. Fewer than two usable
    points give zero momentum and zero confidence.
    """
    points = [s for s in history if is_finite_number(s.composite_score)][-MAX_POINTS_FOR_MOMENTUM:]
    if len(points) < 2:
        return MomentumResult(momentum_per_cycle=0.0, confidence=0.0)

    n = len(points)
    first, last = points[0], points[-1]
    cycle_span = last.cycle_index - first.cycle_index
    momentum = (last.composite_score - first.composite_score) / cycle_span if cycle_span != 0 else 0.0

    scores = [p.composite_score for p in points]
    mean = sum(scores) / n
    std = math.sqrt(sum((s - mean) ** 2 for s in scores) / n)
    variance_penalty = min(1.0, std / VARIANCE_SCALE)
    confidence = clamp(min(1.0, (n - 1) / 4) * (1 - variance_penalty), 0.0, 1.0)

    return MomentumResult(
        momentum_per_cycle=clamp(momentum, -MOMENTUM_CLAMP, MOMENTUM_CLAMP),
        confidence=confidence,
    )
