"""Deterministic portfolio ranking by composite score."""

from typing import Sequence

from riskforward.decision.models import RankedRisk, ScoredRisk
from riskforward.utils import safe_num


def _rank_key(risk: ScoredRisk) -> tuple:
    return (
        -safe_num(risk.composite_score, 0.0),
        -safe_num(risk.trigger_rate, 0.0),
        -safe_num(risk.velocity, 0.0),
        -safe_num(risk.volatility, 0.0),
        safe_num(risk.stability_score, 100.0),
        (risk.title or "").casefold(),
        risk.risk_id.casefold(),
    )


def rank_risks(risks: Sequence[ScoredRisk]) -> list[RankedRisk]:
    """Most concerning first, ranks 1..n.

    Ties fall through trigger rate, velocity and volatility (higher first),
    stability (lower first), then title and risk id (case-insensitive).
    Equal keys keep input order.
    """
    ordered = sorted(risks, key=_rank_key)
    return [
        RankedRisk(risk_id=r.risk_id, title=r.title, composite_score=r.composite_score, rank=i)
        for i, r in enumerate(ordered, 1)
    ]
