"""Single-risk monthly exposure curve (pure, deterministic)."""

from riskforward.exposure.mitigation import compute_mitigation_adjustment
from riskforward.exposure.models import ExposureCurveDebug, RiskExposureCurve
from riskforward.exposure.scenario import apply_scenario, effective_multipliers
from riskforward.exposure.time_weights import build_time_weights
from riskforward.models import Risk, Scenario
from riskforward.utils import finite_or_zero


def compute_risk_exposure_curve(
    risk: Risk,
    scenario: Scenario | str | None,
    horizon_months: int,
    include_debug: bool = False,
) -> RiskExposureCurve:
    """Monthly exposure for one risk under a scenario.

    exposure[m] = adjusted_probability * adjusted_impact * time_weight[m]
                  * mitigation_prob_multiplier[m] * mitigation_impact_multiplier[m]

    Non-finite months are coerced to 0 before accumulation.
    """
    adjusted = apply_scenario(risk, scenario)
    weights = build_time_weights(risk, horizon_months)

    monthly: list[float] = []
    mitigation_by_month = []
    for m, w in enumerate(weights):
        adj = compute_mitigation_adjustment(risk, m)
        mitigation_by_month.append(adj)
        exposure = (
            adjusted.probability
            * adjusted.base_cost_impact
            * w
            * adj.prob_multiplier
            * adj.impact_multiplier
        )
        monthly.append(finite_or_zero(exposure))

    curve = RiskExposureCurve(monthly_exposure=monthly, total=finite_or_zero(sum(monthly)))
    if include_debug:
        curve.debug = ExposureCurveDebug(
            adjusted_params=adjusted,
            time_weights=weights,
            mitigation_by_month=mitigation_by_month,
            effective_multipliers=effective_multipliers(risk, scenario),
        )
    return curve
