"""Mitigation spend optimisation against the neutral P80 cost.

Each risk gets a diminishing-returns benefit curve

    benefit(spend) = neutral_p80 * w * max_reduction * (1 - exp(-k * spend))

where ``w`` is the risk's materiality weight (its share of simulated expected
cost), ``max_reduction`` comes from the mitigation profile and ``k`` is
scaled by mitigation confidence. Risks are ranked by leverage (benefit per
dollar in the first spend band times materiality), and an optional budget is
allocated greedily to the spend bands with the best benefit per dollar.
"""

from __future__ import annotations

import logging
import math

from riskforward.exposure.validate import sanitize_risk_for_exposure
from riskforward.models import Risk
from riskforward.simulation.models import (
    BudgetAllocation,
    BudgetPlan,
    MitigationCurvePoint,
    MitigationOptimisationResult,
    MitigationOptimisationRisk,
    SimulationResult,
    SpendBand,
)
from riskforward.utils import clamp01, is_finite_number

logger = logging.getLogger(__name__)

DEFAULT_SPEND_STEPS = (0.0, 25_000.0, 50_000.0, 100_000.0, 200_000.0)
DEFAULT_MAX_REDUCTION = 0.25
BASE_K = 1 / 100_000


def _materiality_weights(
    risks: list[Risk],
    neutral_result: SimulationResult | None,
) -> tuple[list[float], int]:
    """Share of expected cost per risk, plus how many risks used the p*c fallback."""
    if neutral_result is not None and neutral_result.risks:
        by_id = {r.risk_id: r.expected_cost for r in neutral_result.risks}
        if all(r.id in by_id for r in risks):
            total = sum(by_id[r.id] for r in risks)
            if total > 0:
                return [by_id[r.id] / total for r in risks], 0

    materialities = []
    for risk in risks:
        clean, _ = sanitize_risk_for_exposure(risk)
        materialities.append(clean.probability * clean.base_cost_impact)
    total = sum(materialities)
    if total <= 0:
        n = len(risks)
        return [1 / n if n else 0.0 for _ in risks], len(risks)
    return [m / total for m in materialities], len(risks)


def _reduction(spend: float, max_reduction: float, k: float) -> float:
    if spend <= 0:
        return 0.0
    return max_reduction * (1 - math.exp(-k * spend))


def compute_mitigation_optimisation(
    risks: list[Risk],
    neutral_result: SimulationResult | None = None,
    spend_steps: list[float] | tuple[float, ...] = DEFAULT_SPEND_STEPS,
    budget_cap: float | None = None,
) -> MitigationOptimisationResult:
    """Rank risks by mitigation leverage and optionally allocate a budget.

    Parameters
    ----------
    risks : list[Risk]
        Portfolio risks.
    neutral_result : SimulationResult | None
        Neutral-scenario Monte Carlo run; supplies the P80 baseline and the
        expected-cost materiality weights. Without it the baseline is 0.
    spend_steps : sequence of float
        Cumulative spend levels (ascending, starting at 0).
    budget_cap : float | None
        When positive, builds a greedy allocation plan under this cap.
    """
    steps = [float(s) for s in spend_steps]
    neutral_p80 = neutral_result.cost.p80 if neutral_result is not None else 0.0
    weights, fallback_count = _materiality_weights(risks, neutral_result)

    default_params_count = 0
    results: list[MitigationOptimisationRisk] = []
    for risk, w in zip(risks, weights):
        profile = risk.mitigation_profile
        notes: list[str] = []
        if profile is not None and is_finite_number(profile.effectiveness):
            max_reduction = clamp01(profile.effectiveness)
        elif is_finite_number(risk.mitigation_strength):
            max_reduction = clamp01(risk.mitigation_strength)
        else:
            max_reduction = DEFAULT_MAX_REDUCTION
            default_params_count += 1
            notes.append(f"default max reduction {DEFAULT_MAX_REDUCTION}")

        confidence = profile.confidence if profile is not None else None
        if is_finite_number(confidence):
            k = BASE_K * (0.8 + 0.4 * clamp01(confidence))
        else:
            k = BASE_K
            notes.append("default k")

        curve: list[MitigationCurvePoint] = []
        prev_cumulative = 0.0
        for i, spend in enumerate(steps):
            incremental = 0.0 if i == 0 else spend - steps[i - 1]
            cumulative_benefit = neutral_p80 * w * _reduction(spend, max_reduction, k)
            marginal = cumulative_benefit - prev_cumulative
            curve.append(MitigationCurvePoint(
                incremental_spend=incremental,
                cumulative_spend=spend,
                marginal_benefit=marginal,
                cumulative_benefit=cumulative_benefit,
                benefit_per_dollar=marginal / incremental if incremental > 0 else 0.0,
            ))
            prev_cumulative = cumulative_benefit

        first_band = next((p for p in curve if p.incremental_spend > 0), None)
        top_band_bpd = first_band.benefit_per_dollar if first_band is not None else 0.0
        best_idx = 0
        for i, point in enumerate(curve):
            if point.benefit_per_dollar > curve[best_idx].benefit_per_dollar:
                best_idx = i
        best_band = SpendBand(
            start=0.0 if best_idx == 0 else steps[best_idx - 1],
            end=steps[best_idx] if steps else 0.0,
        )

        explanation = (
            f"Materiality weight {w:.3f}; best ROI band ${best_band.start:,.0f}-${best_band.end:,.0f} "
            f"(${top_band_bpd:.2f} benefit per dollar)."
        )
        if notes:
            explanation += f" {'; '.join(notes)}."

        results.append(MitigationOptimisationRisk(
            risk_id=risk.id,
            risk_name=risk.title or risk.id,
            materiality_weight=w,
            leverage_score=top_band_bpd * w,
            best_roi_band=best_band,
            top_band_benefit_per_dollar=top_band_bpd,
            explanation=explanation,
            curve=curve,
        ))

    ranked = sorted(results, key=lambda r: (-r.leverage_score, -r.materiality_weight, r.risk_name))

    budget_plan = None
    if budget_cap is not None and budget_cap > 0:
        budget_plan = _allocate_budget(ranked, budget_cap)

    logger.debug("Mitigation optimisation: %d risks, neutral P80=%.2f", len(risks), neutral_p80)
    return MitigationOptimisationResult(
        neutral_p80=neutral_p80,
        ranked=ranked,
        spend_steps_used=steps,
        used_fallback_materiality_count=fallback_count,
        used_default_mitigation_params_count=default_params_count,
        budget_plan=budget_plan,
    )


def _allocate_budget(ranked: list[MitigationOptimisationRisk], budget_cap: float) -> BudgetPlan:
    """Greedy fill: best benefit-per-dollar bands first, skipping bands that do not fit."""
    bands: list[BudgetAllocation] = []
    for r in ranked:
        for prev, point in zip(r.curve, r.curve[1:]):
            if point.incremental_spend > 0 and point.benefit_per_dollar > 0:
                bands.append(BudgetAllocation(
                    risk_id=r.risk_id,
                    risk_name=r.risk_name,
                    band=SpendBand(start=prev.cumulative_spend, end=point.cumulative_spend),
                    spend=point.incremental_spend,
                    marginal_benefit=point.marginal_benefit,
                    benefit_per_dollar=point.benefit_per_dollar,
                ))
    bands.sort(key=lambda b: -b.benefit_per_dollar)

    remaining = budget_cap
    allocations = []
    for band in bands:
        if remaining <= 0:
            break
        if band.spend <= remaining:
            allocations.append(band)
            remaining -= band.spend

    return BudgetPlan(
        budget_cap=budget_cap,
        total_projected_benefit=sum(a.marginal_benefit for a in allocations),
        allocations=allocations,
    )
