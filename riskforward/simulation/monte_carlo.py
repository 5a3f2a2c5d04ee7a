"""Monte Carlo simulation of portfolio cost and schedule outcomes.

Each iteration draws a Bernoulli trial per risk on its (optionally
scenario-adjusted) probability. A risk that fires contributes one cost draw
and one schedule draw from a triangular distribution over its
(min, most-likely, max) range; fired contributions are summed into one
portfolio cost sample and one portfolio schedule sample.

Triangular Distribution Rationale
----------------------------------
Risk registers record a minimum, most-likely and maximum impact and nothing
else. The triangular distribution uses exactly those three numbers, allows
skew, and is bounded, so a sampled impact never falls outside the range the
register owner signed off. Missing bounds default to +/- ``cost_spread_pct``
around the most-likely value.

PRNG stream order
-----------------
A single ``numpy.random.default_rng(seed)`` generator is consumed in one
fixed order: for each risk, in input order, ``iterations`` uniform fire
draws, then ``iterations`` cost draws, then ``iterations`` schedule draws.
A degenerate range (min == max) is a constant and consumes no draws. The
same seed and inputs therefore give bit-identical percentiles, and the
``neutral`` scenario reproduces the scenario-less call exactly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from riskforward.exposure.scenario import apply_scenario_to_risk
from riskforward.exposure.validate import sanitize_risk_for_exposure
from riskforward.models import Risk, Scenario
from riskforward.simulation.models import (
    DistributionSummary,
    RiskSimulationSummary,
    SimulationResult,
)
from riskforward.utils import clamp, clamp_non_negative, finite_or_zero, is_finite_number

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 10_000
DEFAULT_SEED = 42
DEFAULT_COST_SPREAD_PCT = 0.2
PERCENTILES = (50, 80, 90)


@dataclass(frozen=True)
class ImpactRange:
    low: float
    mode: float
    high: float


@dataclass(frozen=True)
class SimulationInputs:
    probability: float
    cost: ImpactRange
    schedule: ImpactRange


def _impact_range(
    most_likely: float | None,
    low: float | None,
    high: float | None,
    spread: float,
) -> ImpactRange:
    """Clamp to 0 <= low <= mode <= high, deriving missing bounds from the spread."""
    mode = clamp_non_negative(most_likely, 0.0)
    lo = clamp_non_negative(low, mode * (1 - spread))
    hi = clamp_non_negative(high, mode * (1 + spread))
    lo = min(lo, mode)
    hi = max(hi, mode)
    return ImpactRange(low=lo, mode=mode, high=hi)


def simulation_inputs(
    risk: Risk,
    scenario: Scenario | str | None = None,
    cost_spread_pct: float = DEFAULT_COST_SPREAD_PCT,
) -> SimulationInputs:
    """Probability and impact ranges the simulator samples for ``risk``.

    The risk is sanitized with the exposure engine's defaults; a scenario is
    then applied through ``apply_scenario_to_risk`` so simulation and
    exposure agree on scenario semantics.
    """
    clean, _ = sanitize_risk_for_exposure(risk)
    if scenario is not None:
        clean = apply_scenario_to_risk(clean, scenario)

    spread = clamp(cost_spread_pct, 0.0, 1.0) if is_finite_number(cost_spread_pct) else DEFAULT_COST_SPREAD_PCT
    cost_ml = clean.cost_most_likely if is_finite_number(clean.cost_most_likely) else clean.base_cost_impact
    return SimulationInputs(
        probability=clean.probability,
        cost=_impact_range(cost_ml, clean.cost_min, clean.cost_max, spread),
        schedule=_impact_range(
            clean.schedule_impact_days, clean.schedule_min_days, clean.schedule_max_days, spread
        ),
    )


def _draw(rng: np.random.Generator, impact: ImpactRange, n: int) -> np.ndarray:
    if impact.low == impact.high:
        return np.full(n, impact.mode)
    return rng.triangular(impact.low, impact.mode, impact.high, size=n)


def summarize_samples(samples: np.ndarray) -> DistributionSummary:
    """Mean, interpolated P50/P80/P90, extremes and standard deviation."""
    if samples.size == 0:
        return DistributionSummary()
    p50, p80, p90 = np.percentile(samples, PERCENTILES)
    return DistributionSummary(
        mean=finite_or_zero(float(np.mean(samples))),
        p50=finite_or_zero(float(p50)),
        p80=finite_or_zero(float(p80)),
        p90=finite_or_zero(float(p90)),
        min=finite_or_zero(float(np.min(samples))),
        max=finite_or_zero(float(np.max(samples))),
        std=finite_or_zero(float(np.std(samples))),
    )


def _retain(samples: np.ndarray, sample_limit: int | None) -> list[float]:
    """All samples in draw order, or ``sample_limit`` evenly spaced order statistics."""
    if sample_limit is None or sample_limit >= samples.size:
        return samples.tolist()
    if sample_limit <= 0:
        return []
    ordered = np.sort(samples)
    idx = np.linspace(0, samples.size - 1, sample_limit).round().astype(int)
    return ordered[idx].tolist()


def simulate_portfolio(
    risks: list[Risk],
    iterations: int = DEFAULT_ITERATIONS,
    seed: int | None = DEFAULT_SEED,
    scenario: Scenario | str | None = None,
    cost_spread_pct: float = DEFAULT_COST_SPREAD_PCT,
    sample_limit: int | None = None,
) -> SimulationResult:
    """Run a seeded Monte Carlo simulation over a risk portfolio.

    Parameters
    ----------
    risks : list[Risk]
        Portfolio risks. Malformed fields are sanitized, never raised on.
    iterations : int
        Number of portfolio draws. Non-positive values yield an empty result.
    seed : int | None
        PRNG seed. An explicit seed makes the run fully reproducible.
    scenario : Scenario | str | None
        Optional scenario lens. ``None`` skips scenario application.
    cost_spread_pct : float
        Fractional spread used when a risk has no explicit min/max bound.
    sample_limit : int | None
        Retain at most this many representative samples per distribution.

    Returns
    -------
    SimulationResult with cost and schedule summaries, retained samples and
    per-risk expected vs simulated means.
    """
    n = max(0, int(iterations)) if is_finite_number(iterations) else 0
    rng = np.random.default_rng(seed)

    cost_totals = np.zeros(n)
    schedule_totals = np.zeros(n)
    per_risk: list[RiskSimulationSummary] = []

    for risk in risks:
        inputs = simulation_inputs(risk, scenario, cost_spread_pct)

        fires = rng.random(n) < inputs.probability
        cost = np.where(fires, _draw(rng, inputs.cost, n), 0.0)
        schedule = np.where(fires, _draw(rng, inputs.schedule, n), 0.0)
        cost_totals += cost
        schedule_totals += schedule

        per_risk.append(RiskSimulationSummary(
            risk_id=risk.id,
            title=risk.title,
            category=risk.category or "other",
            probability=inputs.probability,
            expected_cost=inputs.probability * inputs.cost.mode,
            expected_days=inputs.probability * inputs.schedule.mode,
            sim_mean_cost=finite_or_zero(float(cost.mean())) if n else 0.0,
            sim_mean_days=finite_or_zero(float(schedule.mean())) if n else 0.0,
        ))

    cost_totals = np.nan_to_num(cost_totals, nan=0.0, posinf=0.0, neginf=0.0)
    schedule_totals = np.nan_to_num(schedule_totals, nan=0.0, posinf=0.0, neginf=0.0)

    result = SimulationResult(
        iterations=n,
        seed=seed,
        scenario=Scenario(scenario).value if scenario is not None else None,
        cost=summarize_samples(cost_totals),
        schedule=summarize_samples(schedule_totals),
        cost_samples=_retain(cost_totals, sample_limit),
        schedule_samples=_retain(schedule_totals, sample_limit),
        risks=per_risk,
    )
    logger.info(
        "Monte Carlo: %d risks x %d iterations (seed=%s, scenario=%s) -> P50=%.2f P80=%.2f P90=%.2f",
        len(risks), n, seed, result.scenario, result.cost.p50, result.cost.p80, result.cost.p90,
    )
    return result
