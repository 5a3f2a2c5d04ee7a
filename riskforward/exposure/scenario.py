"""Scenario multipliers applied to risk parameters (pure, deterministic).

Every multiplier is gated by the risk's own sensitivity:

    effective(m, s) = 1 + (m - 1) * clamp(s, 0, 1)

so a risk with sensitivity 0 is scenario-invariant and all three scenarios
collapse to identical parameters. Inputs are defaulted and clamped; the
input risk is never mutated.
"""

from riskforward.exposure.models import AdjustedRiskParams, ScenarioMultipliers
from riskforward.exposure.validate import (
    DEFAULT_BASE_COST_IMPACT,
    DEFAULT_ESCALATION_PERSISTENCE,
    DEFAULT_PROBABILITY,
    DEFAULT_SENSITIVITY,
)
from riskforward.models import Risk, Scenario, resolve_scenario
from riskforward.utils import clamp01, clamp_non_negative, safe_num

# conservative < 1, neutral = 1, aggressive > 1
SCENARIO_MULTIPLIERS: dict[Scenario, ScenarioMultipliers] = {
    Scenario.conservative: ScenarioMultipliers(probability=0.85, impact=0.85, persistence=0.9, sensitivity=0.9),
    Scenario.neutral: ScenarioMultipliers(probability=1.0, impact=1.0, persistence=1.0, sensitivity=1.0),
    Scenario.aggressive: ScenarioMultipliers(probability=1.15, impact=1.15, persistence=1.1, sensitivity=1.1),
}


def effective_multiplier(m: float, sensitivity: float) -> float:
    """Sensitivity-gated multiplier: 1 at sensitivity 0, ``m`` at sensitivity 1."""
    s = clamp01(sensitivity)
    return 1 + (m - 1) * s


def effective_multipliers(risk: Risk, scenario: Scenario | str | None) -> ScenarioMultipliers:
    """The four gated multipliers a scenario applies to ``risk``."""
    m = SCENARIO_MULTIPLIERS[resolve_scenario(scenario)]
    s = clamp01(safe_num(risk.sensitivity, DEFAULT_SENSITIVITY))
    return ScenarioMultipliers(
        probability=effective_multiplier(m.probability, s),
        impact=effective_multiplier(m.impact, s),
        persistence=effective_multiplier(m.persistence, s),
        sensitivity=effective_multiplier(m.sensitivity, s),
    )


def apply_scenario(risk: Risk, scenario: Scenario | str | None) -> AdjustedRiskParams:
    """Adjusted probability, impact, persistence and sensitivity under ``scenario``.

    All 0..1 outputs are re-clamped and the impact stays non-negative, so a
    scenario can never push a parameter out of its domain.
    """
    eff = effective_multipliers(risk, scenario)

    probability = clamp01(safe_num(risk.probability, DEFAULT_PROBABILITY))
    impact = clamp_non_negative(risk.base_cost_impact, DEFAULT_BASE_COST_IMPACT)
    persistence = clamp01(safe_num(risk.escalation_persistence, DEFAULT_ESCALATION_PERSISTENCE))
    sensitivity = clamp01(safe_num(risk.sensitivity, DEFAULT_SENSITIVITY))

    return AdjustedRiskParams(
        probability=clamp01(probability * eff.probability),
        base_cost_impact=max(0.0, impact * eff.impact),
        escalation_persistence=clamp01(persistence * eff.persistence),
        sensitivity=clamp01(sensitivity * eff.sensitivity),
    )


def apply_scenario_to_risk(risk: Risk, scenario: Scenario | str | None) -> Risk:
    """Return a new ``Risk`` carrying scenario-adjusted inputs.

    Used by both the exposure engine and the Monte Carlo simulator so the two
    agree on what a scenario means. Explicit cost range bounds are scaled by
    the same gated impact multiplier as ``base_cost_impact``.
    """
    adjusted = apply_scenario(risk, scenario)
    impact_multiplier = effective_multipliers(risk, scenario).impact

    def _scaled(value: float | None) -> float | None:
        return None if value is None else value * impact_multiplier

    return risk.model_copy(update={
        "probability": adjusted.probability,
        "base_cost_impact": adjusted.base_cost_impact,
        "escalation_persistence": adjusted.escalation_persistence,
        "sensitivity": adjusted.sensitivity,
        "cost_min": _scaled(risk.cost_min),
        "cost_most_likely": _scaled(risk.cost_most_likely),
        "cost_max": _scaled(risk.cost_max),
    })
