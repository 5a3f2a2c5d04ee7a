"""Month-indexed mitigation multipliers (pure, deterministic)."""

from riskforward.exposure.models import MitigationAdjustment
from riskforward.exposure.validate import DEFAULT_MITIGATION_EFFECTIVENESS
from riskforward.models import MitigationStatus, Risk, coerce_enum
from riskforward.utils import clamp, clamp01, clamp_non_negative_int, is_finite_number, safe_num

_APPLYING_STATUSES = (MitigationStatus.active, MitigationStatus.completed)


def compute_mitigation_adjustment(risk: Risk, month_index: int) -> MitigationAdjustment:
    """Probability and impact multipliers for ``month_index`` (0-based).

    Neutral (1, 1) when there is no profile, the mitigation is not active or
    completed, or the lag has not yet elapsed. Afterwards impact is reduced by
    ``reduces * effectiveness`` and probability by ``effectiveness / 2``.
    """
    profile = risk.mitigation_profile
    if profile is None:
        return MitigationAdjustment()

    status = coerce_enum(profile.status, MitigationStatus, MitigationStatus.none)
    lag_months = clamp_non_negative_int(profile.lag_months, 0)
    if status not in _APPLYING_STATUSES or month_index < lag_months:
        return MitigationAdjustment()

    effectiveness = clamp01(safe_num(profile.effectiveness, DEFAULT_MITIGATION_EFFECTIVENESS))
    reduces = clamp01(safe_num(profile.reduces, 0.0))
    impact_multiplier = clamp(1 - reduces * effectiveness, 0.0, 1.0)
    prob_multiplier = clamp(1 - effectiveness * 0.5, 0.0, 1.0)
    return MitigationAdjustment(
        prob_multiplier=prob_multiplier if is_finite_number(prob_multiplier) else 1.0,
        impact_multiplier=impact_multiplier if is_finite_number(impact_multiplier) else 1.0,
    )
