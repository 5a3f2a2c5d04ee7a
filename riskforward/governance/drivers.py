"""Portfolio-level instability drivers, scenario ordering checks and lens selection."""

import logging
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from riskforward.governance.instability import TTC_NULL_PLACEHOLDER
from riskforward.governance.models import (
    DriverContributor,
    InstabilityDrivers,
    InstabilityResult,
    LensMode,
    ScenarioName,
    ScenarioOrderingCheck,
)
from riskforward.models import Scenario

logger = logging.getLogger(__name__)

VOLATILITY_THRESHOLD = 0.6
CONFIDENCE_PENALTY_THRESHOLD = 0.5
SENSITIVITY_THRESHOLD = 0.6
VELOCITY_THRESHOLD = 0.6
TOP_CONTRIBUTORS = 5

AUTO_SCENARIO_FALLBACK = ScenarioName.neutral

_NAME_TO_PROFILE = {
    ScenarioName.conservative: Scenario.conservative,
    ScenarioName.neutral: Scenario.neutral,
    ScenarioName.aggressive: Scenario.aggressive,
}


class HasInstability(Protocol):
    risk_id: str
    instability: Optional[InstabilityResult]


def calculate_instability_drivers(
    forecasts: Iterable[HasInstability],
    titles: Optional[Mapping[str, str]] = None,
) -> InstabilityDrivers:
    """Count risks over each component threshold and list the top five by EII.

    Forecasts without an instability result are skipped. Ties keep input order.
    """
    titles = titles or {}
    scored = [f for f in forecasts if f.instability is not None]

    drivers = InstabilityDrivers()
    for f in scored:
        b = f.instability.breakdown
        if b.volatility_score > VOLATILITY_THRESHOLD:
            drivers.high_volatility_count += 1
        if b.confidence_penalty > CONFIDENCE_PENALTY_THRESHOLD:
            drivers.low_confidence_count += 1
        if b.sensitivity_score > SENSITIVITY_THRESHOLD:
            drivers.high_sensitivity_count += 1
        if b.velocity_score > VELOCITY_THRESHOLD:
            drivers.high_velocity_count += 1

    top = sorted(scored, key=lambda f: -f.instability.index)[:TOP_CONTRIBUTORS]
    drivers.top_contributors = [
        DriverContributor(
            risk_id=f.risk_id,
            title=titles.get(f.risk_id, f.risk_id),
            eii=f.instability.index,
            level=f.instability.level,
        )
        for f in top
    ]
    return drivers


def _comparable(ttc: Optional[int]) -> int:
    return TTC_NULL_PLACEHOLDER if ttc is None else ttc


def validate_scenario_ordering(
    snapshots: Sequence[Mapping[str, Optional[int]]],
) -> ScenarioOrderingCheck:
    """Check ``conservative >= neutral >= aggressive`` TTC for every snapshot.

    Each snapshot maps profile name to TTC (``None`` = never, compared as 90).
    Violations are logged and reported, never raised.
    """
    violations = []
    for i, snap in enumerate(snapshots):
        c = _comparable(snap.get("conservative"))
        n = _comparable(snap.get("neutral"))
        a = _comparable(snap.get("aggressive"))
        ordered = c >= n >= a
        between = min(c, a) <= n <= max(c, a)
        if not (ordered and between):
            violations.append(i)
            logger.warning(
                "Scenario ordering violation at index %d: conservative=%s neutral=%s aggressive=%s",
                i, snap.get("conservative"), snap.get("neutral"), snap.get("aggressive"),
            )

    if violations:
        return ScenarioOrderingCheck(valid=False, flag="ScenarioOrderingViolation", violations=violations)
    return ScenarioOrderingCheck(valid=True)


def select_scenario_for_risk(
    forecast: HasInstability,
    lens_mode: LensMode | str,
    manual_scenario: ScenarioName | str = ScenarioName.neutral,
) -> ScenarioName:
    """Scenario to display for a risk: the manual choice, or the EII recommendation."""
    if LensMode(lens_mode) == LensMode.manual:
        return ScenarioName(manual_scenario)
    if forecast.instability is not None:
        return forecast.instability.recommended_scenario
    return AUTO_SCENARIO_FALLBACK


def scenario_name_to_profile(name: ScenarioName | str) -> Scenario:
    return _NAME_TO_PROFILE[ScenarioName(name)]
