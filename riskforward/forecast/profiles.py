"""Projection profiles: decay parameters for conservative / neutral / aggressive.

A profile changes only how long score drift persists (``momentum_decay``) and
how fast per-point confidence fades (``confidence_decay``). Conservative
fades sooner, aggressive persists longer. Every non-neutral value must lie
within [0.5x, 1.5x] of the neutral value; anything outside is a
configuration error and is rejected when the table is loaded, never at
projection time.

Override file format (YAML)::

    conservative:
      momentum_decay: 0.78
      confidence_decay: 0.88
    aggressive:
      momentum_decay: 0.91
      confidence_decay: 0.95
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from riskforward.models import ProjectionProfile, resolve_scenario
from riskforward.utils import ProfileConfigurationError, is_finite_number, read_structured

logger = logging.getLogger(__name__)

NEUTRAL_MOMENTUM_DECAY = 0.85
NEUTRAL_CONFIDENCE_DECAY = 0.92

DECAY_MULTIPLIER_MIN = 0.5
DECAY_MULTIPLIER_MAX = 1.5


class ProjectionParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    momentum_decay: float
    confidence_decay: float


ProfileRegistry = dict[ProjectionProfile, ProjectionParams]


def _check_bound(value: float, neutral: float, name: str, profile: ProjectionProfile) -> None:
    low = neutral * DECAY_MULTIPLIER_MIN
    high = neutral * DECAY_MULTIPLIER_MAX
    if not is_finite_number(value) or value < low or value > high:
        msg = (
            f'Profile "{profile.value}" {name} {value} is outside safe bounds '
            f"[{low:.3f}, {high:.3f}] (0.5x-1.5x of neutral {neutral})"
        )
        logger.error(msg)
        raise ProfileConfigurationError(msg)


def validate_profile_params(config: Mapping[ProjectionProfile, ProjectionParams]) -> ProfileRegistry:
    """Validate a full profile table against the neutral entry.

    Raises:
        ProfileConfigurationError: a profile is missing, a neutral decay is
            not a finite value in (0, 1], or a non-neutral decay falls
            outside [0.5x, 1.5x] of neutral.
    """
    missing = [p.value for p in ProjectionProfile if p not in config]
    if missing:
        raise ProfileConfigurationError(f"Missing projection profiles: {', '.join(missing)}")

    neutral = config[ProjectionProfile.neutral]
    for name in ("momentum_decay", "confidence_decay"):
        value = getattr(neutral, name)
        if not is_finite_number(value) or not 0 < value <= 1:
            msg = f'Profile "neutral" {name} {value} must be a finite value in (0, 1]'
            logger.error(msg)
            raise ProfileConfigurationError(msg)

    for profile in (ProjectionProfile.conservative, ProjectionProfile.aggressive):
        params = config[profile]
        _check_bound(params.momentum_decay, neutral.momentum_decay, "momentum_decay", profile)
        _check_bound(params.confidence_decay, neutral.confidence_decay, "confidence_decay", profile)
    return dict(config)


BUILTIN_PROFILES: ProfileRegistry = validate_profile_params({
    ProjectionProfile.neutral: ProjectionParams(
        momentum_decay=NEUTRAL_MOMENTUM_DECAY,
        confidence_decay=NEUTRAL_CONFIDENCE_DECAY,
    ),
    ProjectionProfile.conservative: ProjectionParams(momentum_decay=0.78, confidence_decay=0.88),
    ProjectionProfile.aggressive: ProjectionParams(momentum_decay=0.91, confidence_decay=0.95),
})

_active_profiles: ProfileRegistry = dict(BUILTIN_PROFILES)


def load_profiles(path: str | Path) -> ProfileRegistry:
    """Load profile overrides from YAML/JSON on top of the built-in table.

    The merged table is validated before it is returned; nothing is
    installed globally (see ``use_profiles``).
    """
    raw = read_structured(path)
    if not isinstance(raw, dict):
        raise ProfileConfigurationError(f"Profile file {path} must contain a mapping")

    merged = dict(BUILTIN_PROFILES)
    for name, values in raw.items():
        try:
            profile = ProjectionProfile(name)
        except ValueError as e:
            raise ProfileConfigurationError(f"Unknown projection profile {name!r} in {path}") from e
        base = merged[profile].model_dump()
        try:
            merged[profile] = ProjectionParams(**{**base, **(values or {})})
        except (TypeError, ValidationError) as e:
            raise ProfileConfigurationError(f"Invalid parameters for profile {name!r}: {e}") from e

    registry = validate_profile_params(merged)
    logger.info("Loaded projection profiles from %s", path)
    return registry


def use_profiles(registry: ProfileRegistry | None) -> None:
    """Install a validated profile table; ``None`` restores the built-ins."""
    global _active_profiles
    _active_profiles = dict(BUILTIN_PROFILES) if registry is None else validate_profile_params(registry)


def get_projection_params(
    profile: ProjectionProfile | str | None = None,
    registry: ProfileRegistry | None = None,
) -> ProjectionParams:
    """Decay parameters for ``profile``; ``None`` means neutral."""
    table = registry if registry is not None else _active_profiles
    return table[resolve_scenario(profile)]
