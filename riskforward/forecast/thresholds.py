"""Escalation score bands for forward projection.

Default bands on the 0-100 composite score: normal < 50, watch 50-64,
high 65-79, critical >= 80. Band boundaries are configurable through
settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from riskforward.forecast.models import ForecastPoint
from riskforward.models import EscalationBand
from riskforward.settings import RiskForwardSettings, get_settings
from riskforward.utils import is_finite_number


@dataclass(frozen=True)
class EscalationThresholds:
    watch_min: float = 50.0
    high_min: float = 65.0
    critical_min: float = 80.0

    def get_band(self, score: float) -> EscalationBand:
        if not is_finite_number(score):
            return EscalationBand.normal
        if score >= self.critical_min:
            return EscalationBand.critical
        if score >= self.high_min:
            return EscalationBand.high
        if score >= self.watch_min:
            return EscalationBand.watch
        return EscalationBand.normal


DEFAULT_THRESHOLDS = EscalationThresholds()


def thresholds_from_settings(settings: RiskForwardSettings | None = None) -> EscalationThresholds:
    settings = settings or get_settings()
    return EscalationThresholds(
        watch_min=settings.watch_threshold,
        high_min=settings.high_threshold,
        critical_min=settings.critical_threshold,
    )


def get_band(score: float, thresholds: EscalationThresholds = DEFAULT_THRESHOLDS) -> EscalationBand:
    return thresholds.get_band(score)


def time_to_band(
    points: Sequence[ForecastPoint],
    band: EscalationBand | str,
    thresholds: EscalationThresholds = DEFAULT_THRESHOLDS,
) -> int | None:
    """First step (1-based) whose projected score is in ``band``, else None."""
    band = EscalationBand(band)
    for p in points:
        if thresholds.get_band(p.projected_score) == band:
            return p.step
    return None


def crosses_band_within(
    points: Sequence[ForecastPoint],
    band: EscalationBand | str,
    thresholds: EscalationThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    return time_to_band(points, band, thresholds) is not None


def is_currently_critical(
    score_or_band: float | EscalationBand | str,
    thresholds: EscalationThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    if isinstance(score_or_band, (EscalationBand, str)):
        return EscalationBand(score_or_band) == EscalationBand.critical
    return thresholds.get_band(score_or_band) == EscalationBand.critical
