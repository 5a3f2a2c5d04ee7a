"""Run-over-run comparison of two Monte Carlo results."""

from riskforward.simulation.models import SimulationDelta, SimulationResult, SimulationRiskDelta

FLAT_THRESHOLD_PCT = 0.05


def _safe_pct(delta: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return delta / previous


def calculate_delta(previous: SimulationResult, current: SimulationResult) -> SimulationDelta:
    """Compare two simulation runs, matching risks by id.

    Per-risk cost deltas use the simulated mean cost; a risk absent from the
    previous run is compared against zero. Direction is ``flat`` when the
    relative cost change is under 5%.
    """
    prev_by_id = {r.risk_id: r for r in previous.risks}

    portfolio_delta_cost = current.cost.mean - previous.cost.mean
    portfolio_delta_days = current.schedule.mean - previous.schedule.mean

    risk_deltas = []
    for curr in current.risks:
        prev = prev_by_id.get(curr.risk_id)
        prev_cost = prev.sim_mean_cost if prev is not None else 0.0
        prev_days = prev.expected_days if prev is not None else 0.0
        delta_cost = curr.sim_mean_cost - prev_cost
        delta_cost_pct = _safe_pct(delta_cost, prev_cost)
        delta_days = curr.expected_days - prev_days

        if abs(delta_cost_pct) < FLAT_THRESHOLD_PCT:
            direction = "flat"
        else:
            direction = "up" if delta_cost > 0 else "down"

        risk_deltas.append(SimulationRiskDelta(
            risk_id=curr.risk_id,
            title=curr.title,
            category=curr.category,
            prev_expected_cost=prev_cost,
            curr_expected_cost=curr.sim_mean_cost,
            delta_cost=delta_cost,
            delta_cost_pct=delta_cost_pct,
            prev_expected_days=prev_days,
            curr_expected_days=curr.expected_days,
            delta_days=delta_days,
            delta_days_pct=_safe_pct(delta_days, prev_days),
            direction=direction,
        ))

    return SimulationDelta(
        portfolio_delta_cost=portfolio_delta_cost,
        portfolio_delta_cost_pct=_safe_pct(portfolio_delta_cost, previous.cost.mean),
        portfolio_delta_days=portfolio_delta_days,
        portfolio_delta_days_pct=_safe_pct(portfolio_delta_days, previous.schedule.mean),
        risk_deltas=risk_deltas,
    )
