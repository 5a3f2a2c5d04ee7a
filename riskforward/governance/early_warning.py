"""Early warning: elevated instability that has not yet shown up as an imminent breach."""

from typing import Optional

from riskforward.governance.models import EarlyWarningResult
from riskforward.utils import clamp01

IMMINENT_TTC = 21
HIGH_EII = 60
ELEVATED_EII = 50
LOW_CONFIDENCE = 0.45


def compute_early_warning(
    index: float,
    time_to_critical: Optional[int],
    confidence: float,
) -> EarlyWarningResult:
    """Flag a risk whose instability warrants attention ahead of the projector.

    Fires when ``index >= 60`` with no imminent breach, or when ``index >= 50``
    on low (< 0.45) confidence. A time-to-critical of 21 cycles or fewer is
    already surfaced by the forecast itself, so the warning is suppressed.
    """
    if time_to_critical is not None and time_to_critical <= IMMINENT_TTC:
        return EarlyWarningResult(early_warning=False)

    reasons = []
    if index >= HIGH_EII:
        reasons.append(f"EII >= {HIGH_EII} with no imminent breach (TTC > {IMMINENT_TTC} or no critical crossing).")
    if index >= ELEVATED_EII and clamp01(confidence) < LOW_CONFIDENCE:
        reasons.append(f"EII >= {ELEVATED_EII} with low confidence (< {LOW_CONFIDENCE:.0%}).")

    return EarlyWarningResult(early_warning=bool(reasons), reasons=reasons)
