"""Forward score projection - momentum, profiles, confidence, mitigation stress and portfolio pressure."""

from riskforward.forecast.confidence import compute_forecast_confidence
from riskforward.forecast.history import HistoryLookup, ScoreHistoryLookup, SnapshotHistory
from riskforward.forecast.momentum import compute_momentum
from riskforward.forecast.pressure import compute_portfolio_forward_pressure
from riskforward.forecast.profiles import (
    ProjectionParams,
    get_projection_params,
    load_profiles,
    use_profiles,
    validate_profile_params,
)
from riskforward.forecast.projector import (
    build_mitigation_stress_forecast,
    build_risk_forecast,
    compute_scenario_comparison,
    project_forward,
    run_forward_projection,
)
from riskforward.forecast.thresholds import (
    EscalationThresholds,
    crosses_band_within,
    get_band,
    is_currently_critical,
    time_to_band,
)

__all__ = [
    "EscalationThresholds",
    "HistoryLookup",
    "ProjectionParams",
    "ScoreHistoryLookup",
    "SnapshotHistory",
    "build_mitigation_stress_forecast",
    "build_risk_forecast",
    "compute_forecast_confidence",
    "compute_momentum",
    "compute_portfolio_forward_pressure",
    "compute_scenario_comparison",
    "crosses_band_within",
    "get_band",
    "get_projection_params",
    "is_currently_critical",
    "load_profiles",
    "project_forward",
    "run_forward_projection",
    "time_to_band",
    "use_profiles",
    "validate_profile_params",
]
