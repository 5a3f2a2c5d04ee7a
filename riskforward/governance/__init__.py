"""Governance signals: instability index, fragility, early warning and portfolio drivers."""

from riskforward.governance.drivers import (
    calculate_instability_drivers,
    scenario_name_to_profile,
    select_scenario_for_risk,
    validate_scenario_ordering,
)
from riskforward.governance.early_warning import compute_early_warning
from riskforward.governance.instability import (
    calc_fragility,
    calc_instability_index,
    calc_scenario_delta_summary,
    instability_inputs_from_history,
)

__all__ = [
    "calc_fragility",
    "calc_instability_index",
    "calc_scenario_delta_summary",
    "calculate_instability_drivers",
    "compute_early_warning",
    "instability_inputs_from_history",
    "scenario_name_to_profile",
    "select_scenario_for_risk",
    "validate_scenario_ordering",
]
