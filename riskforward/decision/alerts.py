"""Rule-based alert tags for a scored risk."""

from riskforward.decision.models import AlertTag, DecisionThresholds, ScoredRisk
from riskforward.utils import is_finite_number, safe_num

DEFAULT_THRESHOLDS = DecisionThresholds()


def derive_alert_tags(risk: ScoredRisk, thresholds: DecisionThresholds | None = None) -> list[AlertTag]:
    """Tags in a fixed order, each at most once.

    ``IMPROVING`` needs a known negative velocity; ``EMERGING`` needs a trigger
    rate history whose last value is at least ``emerging_min_rate`` and has
    risen by at least ``emerging_min_rise`` since the first.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    tags: list[AlertTag] = []

    def add(tag: AlertTag) -> None:
        if tag not in tags:
            tags.append(tag)

    score = safe_num(risk.composite_score, 0.0)
    velocity = safe_num(risk.velocity, 0.0)
    volatility = safe_num(risk.volatility, 0.0)
    stability = safe_num(risk.stability_score, 100.0)

    if t.critical_score_above > 0 and score >= t.critical_score_above:
        add(AlertTag.critical)
    if t.accelerating_velocity_min > 0 and velocity >= t.accelerating_velocity_min:
        add(AlertTag.accelerating)
    if t.volatile_coeff_above > 0 and volatility >= t.volatile_coeff_above:
        add(AlertTag.volatile)
    if t.unstable_stability_below < 100 and stability <= t.unstable_stability_below:
        add(AlertTag.unstable)
    if (
        t.improving_stability_above > 0
        and stability >= t.improving_stability_above
        and is_finite_number(risk.velocity)
        and risk.velocity < 0
    ):
        add(AlertTag.improving)

    history = risk.trigger_rate_history
    if history:
        first = safe_num(history[0], 0.0)
        last = safe_num(history[-1], 0.0)
        if last >= t.emerging_min_rate and last - first >= t.emerging_min_rise:
            add(AlertTag.emerging)

    return tags
