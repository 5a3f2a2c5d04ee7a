"""Portfolio-level forward exposure (pure, deterministic).

Sums per-risk exposure curves into monthly totals, a category breakdown,
ranked top drivers and concentration measures. Every risk is sanitized
before aggregation; sanitation warnings are only returned in diagnostic
mode.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from riskforward.exposure.curve import compute_risk_exposure_curve
from riskforward.exposure.models import (
    Concentration,
    PortfolioExposure,
    RiskCurveSummary,
    RiskExposureCurve,
    TopDriver,
)
from riskforward.exposure.validate import DEFAULT_CATEGORY, sanitize_risk_for_exposure
from riskforward.models import Risk, Scenario, resolve_scenario
from riskforward.utils import clamp, finite_or_zero, is_finite_number

logger = logging.getLogger(__name__)

DEFAULT_TOP_DRIVERS_N = 10
TOP_N_CONCENTRATION = 3


def _concentration_from_shares(shares: list[float]) -> Concentration:
    shares = sorted((s for s in shares if is_finite_number(s) and s > 0), reverse=True)
    top3 = clamp(sum(shares[:TOP_N_CONCENTRATION]), 0.0, 1.0)
    hhi = clamp(sum(s * s for s in shares), 0.0, 1.0)
    return Concentration(top3_share=finite_or_zero(top3), hhi=finite_or_zero(hhi))


def compute_concentration(
    total: float,
    by_category: dict[str, float],
    risk_totals: list[float],
) -> Concentration:
    """Top-3 share and HHI, by category when categories carry exposure, else by risk.

    Both are 0 when the portfolio total is not positive.
    """
    if not is_finite_number(total) or total <= 0:
        return Concentration()

    category_values = [v for v in by_category.values() if is_finite_number(v) and v > 0]
    if category_values:
        return _concentration_from_shares([v / total for v in category_values])
    return _concentration_from_shares(
        [t / total if is_finite_number(t) else 0.0 for t in risk_totals]
    )


def compute_portfolio_exposure(
    risks: list[Risk],
    scenario: Scenario | str | None,
    horizon_months: int,
    top_n: int = DEFAULT_TOP_DRIVERS_N,
    include_debug: bool = False,
    max_workers: int | None = None,
) -> PortfolioExposure:
    """Aggregate exposure across ``risks`` for one scenario and horizon.

    ``monthly_total[m]`` is the sum of every risk's month-``m`` exposure and
    ``total`` equals both ``sum(monthly_total)`` and the sum of curve totals
    (within floating tolerance). Top drivers are ordered by total exposure,
    descending, with ties kept in input order.

    When ``max_workers`` is given, per-risk curves are computed on a thread
    pool; ``Executor.map`` preserves input order so results are unchanged.
    """
    scenario = resolve_scenario(scenario)
    horizon = max(0, int(horizon_months))

    sanitized: list[Risk] = []
    warnings: list[str] = []
    for risk in risks:
        clean, risk_warnings = sanitize_risk_for_exposure(risk)
        sanitized.append(clean)
        warnings.extend(risk_warnings)

    def _curve(risk: Risk) -> RiskExposureCurve:
        return compute_risk_exposure_curve(risk, scenario, horizon)

    if max_workers and len(sanitized) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            curves = list(pool.map(_curve, sanitized))
    else:
        curves = [_curve(r) for r in sanitized]

    monthly_total = [0.0] * horizon
    for curve in curves:
        for m, value in enumerate(curve.monthly_exposure[:horizon]):
            monthly_total[m] += value
    monthly_total = [finite_or_zero(v) for v in monthly_total]

    total = finite_or_zero(sum(curve.total for curve in curves))

    by_category: dict[str, float] = {}
    for risk, curve in zip(sanitized, curves):
        category = risk.category or DEFAULT_CATEGORY
        by_category[category] = by_category.get(category, 0.0) + finite_or_zero(curve.total)

    # sorted() is stable, so equal totals keep input order
    ranked = sorted(zip(sanitized, curves), key=lambda pair: -pair[1].total)
    top_drivers = [
        TopDriver(risk_id=risk.id, category=risk.category or DEFAULT_CATEGORY, total=curve.total)
        for risk, curve in ranked[:max(0, top_n)]
    ]

    result = PortfolioExposure(
        monthly_total=monthly_total,
        total=total,
        by_category=by_category,
        top_drivers=top_drivers,
        concentration=compute_concentration(total, by_category, [c.total for c in curves]),
    )

    if include_debug:
        result.warnings = warnings
        result.risk_curves = [
            RiskCurveSummary(risk_id=risk.id, total=curve.total, monthly_exposure=curve.monthly_exposure)
            for risk, curve in zip(sanitized, curves)
        ]

    logger.debug(
        "Portfolio exposure: %d risks, scenario=%s, horizon=%d, total=%.2f",
        len(risks), scenario.value, horizon, total,
    )
    return result
