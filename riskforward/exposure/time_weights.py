"""Normalized per-month time weights over an exposure horizon."""

from riskforward.models import Risk, TimeProfileKind, coerce_enum
from riskforward.utils import is_finite_number


def build_time_weights(risk: Risk, horizon_months: int) -> list[float]:
    """Return ``horizon_months`` non-negative weights summing to 1.

    A custom array profile is truncated or zero-padded to the horizon and then
    normalized. Named profiles, with ``x = (2m + 1) / 2n``:

    - front: ``1 - x`` (heavier early months)
    - back:  ``x`` (heavier late months)
    - mid:   ``4 (1 - x) x`` (parabolic bump peaking mid-horizon)

    Unknown or missing profiles are treated as ``mid``.
    """
    n = int(horizon_months) if is_finite_number(horizon_months) else 0
    if n <= 0:
        return []

    raw = risk.time_profile
    if isinstance(raw, list) and raw:
        window = list(raw[:n]) + [0.0] * max(0, n - len(raw))
        return _normalize(window)

    kind = coerce_enum(raw, TimeProfileKind, TimeProfileKind.mid)
    return _normalize(_named_profile_weights(kind, n))


def _normalize(values: list[float]) -> list[float]:
    """Scale to unit sum; non-finite or negative entries count as 0.

    A non-positive total falls back to uniform weights.
    """
    if not values:
        return []
    safe = [max(0.0, v) if is_finite_number(v) else 0.0 for v in values]
    total = sum(safe)
    if total <= 0 or not is_finite_number(total):
        return [1.0 / len(values)] * len(values)
    return [v / total if is_finite_number(v / total) else 0.0 for v in safe]


def _named_profile_weights(kind: TimeProfileKind, n: int) -> list[float]:
    xs = [(2 * m + 1) / (2 * n) for m in range(n)]
    if kind is TimeProfileKind.front:
        return [1 - x for x in xs]
    if kind is TimeProfileKind.back:
        return list(xs)
    return [4 * (1 - x) * x for x in xs]
