"""Input sanitation for the forward exposure engine.

Clamps 0..1 fields, fills missing values with defaults, normalizes custom
time weights and mitigation profiles. Never raises; problems are reported as
warning strings.
"""

import logging

from riskforward.models import (
    MitigationProfile,
    MitigationStatus,
    Risk,
    TimeProfileKind,
    coerce_enum,
)
from riskforward.utils import (
    clamp01,
    clamp_non_negative,
    clamp_non_negative_int,
    is_finite_number,
    safe_num,
)

logger = logging.getLogger(__name__)

DEFAULT_PROBABILITY = 0.5
DEFAULT_BASE_COST_IMPACT = 100_000.0
DEFAULT_ESCALATION_PERSISTENCE = 0.5
DEFAULT_SENSITIVITY = 0.5
DEFAULT_MITIGATION_EFFECTIVENESS = 0.5
DEFAULT_MITIGATION_CONFIDENCE = 0.5
DEFAULT_CATEGORY = "other"


def _changed(raw, clean) -> bool:
    return raw is not None and (not is_finite_number(raw) or raw != clean)


def sanitize_mitigation_profile(profile: MitigationProfile) -> tuple[MitigationProfile, bool]:
    """Return a clamped copy of ``profile`` and whether anything changed."""
    status = coerce_enum(profile.status, MitigationStatus, MitigationStatus.none)
    clean = MitigationProfile(
        status=status.value,
        effectiveness=clamp01(safe_num(profile.effectiveness, DEFAULT_MITIGATION_EFFECTIVENESS)),
        confidence=clamp01(safe_num(profile.confidence, DEFAULT_MITIGATION_CONFIDENCE)),
        reduces=clamp01(safe_num(profile.reduces, 0.0)),
        lag_months=clamp_non_negative_int(profile.lag_months, 0),
    )
    changed = (
        profile.status != clean.status
        or profile.effectiveness != clean.effectiveness
        or profile.confidence != clean.confidence
        or profile.reduces != clean.reduces
        or profile.lag_months != clean.lag_months
    )
    return clean, changed


def sanitize_risk_for_exposure(risk: Risk) -> tuple[Risk, list[str]]:
    """Sanitize a risk for exposure computation.

    Returns a new ``Risk`` (the input is never mutated) and a list of
    human-readable warnings describing each correction.
    """
    warnings: list[str] = []
    rid = risk.id or "unknown"

    probability = clamp01(safe_num(risk.probability, DEFAULT_PROBABILITY))
    if _changed(risk.probability, probability):
        warnings.append(f"[{rid}] probability clamped to 0..1")

    base_cost_impact = clamp_non_negative(risk.base_cost_impact, DEFAULT_BASE_COST_IMPACT)
    if _changed(risk.base_cost_impact, base_cost_impact):
        warnings.append(f"[{rid}] base_cost_impact clamped to non-negative")

    persistence = clamp01(safe_num(risk.escalation_persistence, DEFAULT_ESCALATION_PERSISTENCE))
    if _changed(risk.escalation_persistence, persistence):
        warnings.append(f"[{rid}] escalation_persistence clamped to 0..1")

    sensitivity = clamp01(safe_num(risk.sensitivity, DEFAULT_SENSITIVITY))
    if _changed(risk.sensitivity, sensitivity):
        warnings.append(f"[{rid}] sensitivity clamped to 0..1")

    time_profile = risk.time_profile
    if isinstance(time_profile, list) and time_profile:
        safe = [max(0.0, v) if is_finite_number(v) else 0.0 for v in time_profile]
        total = sum(safe)
        if total <= 0:
            time_profile = TimeProfileKind.mid.value
            warnings.append(f'[{rid}] time_profile array had non-positive sum, defaulted to "mid"')
        else:
            time_profile = [v / total for v in safe]
    elif time_profile is None or (isinstance(time_profile, list) and not time_profile):
        time_profile = TimeProfileKind.mid.value
    elif coerce_enum(time_profile, TimeProfileKind, None) is None:
        time_profile = TimeProfileKind.mid.value
        warnings.append(f'[{rid}] time_profile invalid, defaulted to "mid"')

    mitigation_profile = risk.mitigation_profile
    if mitigation_profile is not None:
        mitigation_profile, changed = sanitize_mitigation_profile(mitigation_profile)
        if changed:
            warnings.append(f"[{rid}] mitigation_profile fields clamped/defaulted")

    category = risk.category if isinstance(risk.category, str) and risk.category else DEFAULT_CATEGORY

    for message in warnings:
        logger.debug(message)

    sanitized = risk.model_copy(update={
        "category": category,
        "probability": probability,
        "base_cost_impact": base_cost_impact,
        "escalation_persistence": persistence,
        "sensitivity": sensitivity,
        "time_profile": time_profile,
        "mitigation_profile": mitigation_profile,
    })
    return sanitized, warnings
