"""Portfolio decision metrics: composite score, rank and alert tags per risk."""

from __future__ import annotations

import logging
import math
from typing import Mapping, Optional, Sequence

from riskforward.decision.alerts import derive_alert_tags
from riskforward.decision.models import (
    DecisionInputs,
    DecisionMetrics,
    DecisionResult,
    DecisionThresholds,
    ScoredRisk,
    ScoreWeights,
)
from riskforward.decision.rank import rank_risks
from riskforward.decision.score import compute_composite_score
from riskforward.exposure.validate import sanitize_risk_for_exposure
from riskforward.forecast.confidence import MAX_WINDOW, stability_score
from riskforward.forecast.history import HistoryLookup
from riskforward.forecast.momentum import compute_momentum
from riskforward.models import Risk, RiskSnapshot
from riskforward.utils import is_finite_number

logger = logging.getLogger(__name__)


def coefficient_of_variation(scores: Sequence[float]) -> float:
    """Population std dev over mean; 0 for fewer than two points or a zero mean."""
    if len(scores) < 2:
        return 0.0
    mean = sum(scores) / len(scores)
    if mean == 0:
        return 0.0
    std = math.sqrt(sum((s - mean) ** 2 for s in scores) / len(scores))
    return abs(std / mean)


def decision_inputs_from_history(
    risk: Risk,
    history: Sequence[RiskSnapshot],
    trigger_rate_history: Optional[Sequence[float]] = None,
) -> DecisionInputs:
    """Derive decision metrics from a risk and its snapshot history.

    Trigger rate is the sanitized probability, velocity is score momentum per
    cycle, and volatility and stability come from the trailing six scores.
    Stability is left unset (treated as stable) below two snapshots.
    """
    clean, _ = sanitize_risk_for_exposure(risk)
    scores = [s.composite_score for s in history if is_finite_number(s.composite_score)][-MAX_WINDOW:]
    return DecisionInputs(
        risk_id=risk.id,
        title=risk.title,
        trigger_rate=clean.probability,
        velocity=compute_momentum(history).momentum_per_cycle,
        volatility=coefficient_of_variation(scores),
        stability_score=stability_score(scores) if len(scores) >= 2 else None,
        trigger_rate_history=list(trigger_rate_history) if trigger_rate_history is not None else None,
    )


def score_risks(
    inputs: Sequence[DecisionInputs],
    weights: ScoreWeights | None = None,
    thresholds: DecisionThresholds | None = None,
) -> DecisionResult:
    """Score, rank and tag every risk; ``metrics_by_id`` keeps input order."""
    scored = []
    breakdowns = {}
    for item in inputs:
        result = compute_composite_score(item, weights)
        scored.append(ScoredRisk(**item.model_dump(), composite_score=result.score))
        breakdowns[item.risk_id] = result.breakdown

    ranked = rank_risks(scored)
    ranks = {r.risk_id: r.rank for r in ranked}

    metrics = {
        s.risk_id: DecisionMetrics(
            risk_id=s.risk_id,
            composite_score=s.composite_score,
            rank=ranks[s.risk_id],
            alert_tags=derive_alert_tags(s, thresholds),
            breakdown=breakdowns[s.risk_id],
        )
        for s in scored
    }
    logger.debug("Decision scoring: %d risks", len(scored))
    return DecisionResult(metrics_by_id=metrics, ranked=ranked)


def compute_decision_metrics(
    risks: Sequence[Risk],
    history: HistoryLookup,
    weights: ScoreWeights | None = None,
    thresholds: DecisionThresholds | None = None,
    trigger_rate_history: Optional[Mapping[str, Sequence[float]]] = None,
) -> DecisionResult:
    """Composite score, rank and alert tags for each risk in a register."""
    trigger_rate_history = trigger_rate_history or {}
    inputs = [
        decision_inputs_from_history(r, history.get_risk_history(r.id), trigger_rate_history.get(r.id))
        for r in risks
    ]
    return score_risks(inputs, weights, thresholds)
