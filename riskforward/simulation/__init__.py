"""Portfolio Monte Carlo simulation, run-over-run deltas and mitigation spend optimisation."""

from riskforward.simulation.delta import calculate_delta
from riskforward.simulation.monte_carlo import simulate_portfolio, simulation_inputs
from riskforward.simulation.optimisation import compute_mitigation_optimisation

__all__ = [
    "calculate_delta",
    "compute_mitigation_optimisation",
    "simulate_portfolio",
    "simulation_inputs",
]
