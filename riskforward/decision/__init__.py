"""Decision layer: composite concern score, deterministic ranking and alert tags."""

from riskforward.decision.alerts import derive_alert_tags
from riskforward.decision.models import (
    AlertTag,
    DecisionInputs,
    DecisionThresholds,
    ScoredRisk,
    ScoreWeights,
)
from riskforward.decision.portfolio import (
    compute_decision_metrics,
    decision_inputs_from_history,
    score_risks,
)
from riskforward.decision.rank import rank_risks
from riskforward.decision.score import compute_composite_score

__all__ = [
    "AlertTag",
    "DecisionInputs",
    "DecisionThresholds",
    "ScoreWeights",
    "ScoredRisk",
    "compute_composite_score",
    "compute_decision_metrics",
    "decision_inputs_from_history",
    "derive_alert_tags",
    "rank_risks",
    "score_risks",
]
