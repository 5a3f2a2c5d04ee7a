"""Forward exposure engine - scenario, mitigation lag, time weights, risk curves and portfolio aggregation."""

from riskforward.exposure.curve import compute_risk_exposure_curve
from riskforward.exposure.mitigation import compute_mitigation_adjustment
from riskforward.exposure.portfolio import compute_portfolio_exposure
from riskforward.exposure.scenario import (
    SCENARIO_MULTIPLIERS,
    apply_scenario,
    apply_scenario_to_risk,
    effective_multiplier,
)
from riskforward.exposure.time_weights import build_time_weights
from riskforward.exposure.validate import sanitize_risk_for_exposure

__all__ = [
    "SCENARIO_MULTIPLIERS",
    "apply_scenario",
    "apply_scenario_to_risk",
    "build_time_weights",
    "compute_mitigation_adjustment",
    "compute_portfolio_exposure",
    "compute_risk_exposure_curve",
    "effective_multiplier",
    "sanitize_risk_for_exposure",
]
