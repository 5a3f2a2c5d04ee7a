"""
Utility functions for riskforward

Provides logging setup, numeric guards, file loading and the exception hierarchy
"""

import json
import logging
import math
from pathlib import Path
from typing import Any, Optional

import yaml


# ═══════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging for riskforward"""
    level = getattr(logging, log_level.upper())

    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def get_logger(name: str) -> logging.Logger:
    """Get logger instance for module"""
    return logging.getLogger(name)


# ═══════════════════════════════════════════════════════════════════
# NUMERIC GUARDS
# ═══════════════════════════════════════════════════════════════════

def is_finite_number(x: Any) -> bool:
    """True for real, finite numbers (bools excluded)."""
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return False
    return math.isfinite(x)


def safe_num(x: Any, default: float) -> float:
    """Return x as float, or default if x is missing or not finite."""
    if not is_finite_number(x):
        return default
    return float(x)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp to [low, high]; NaN becomes ``low``."""
    if isinstance(value, float) and math.isnan(value):
        return low
    return max(low, min(high, value))


def clamp01(x: Any) -> float:
    """Clamp to [0, 1]; non-finite input becomes 0."""
    if not is_finite_number(x):
        return 0.0
    return clamp(float(x), 0.0, 1.0)


def clamp_non_negative(x: Any, default: float) -> float:
    n = safe_num(x, default)
    return 0.0 if n < 0 else n


def clamp_non_negative_int(x: Any, default: int) -> int:
    """Non-negative integer (e.g. lag months); floors fractional input."""
    n = safe_num(x, default)
    i = math.floor(n)
    return 0 if i < 0 else int(i)


def finite_or_zero(x: float) -> float:
    return float(x) if is_finite_number(x) else 0.0


# ═══════════════════════════════════════════════════════════════════
# FILE I/O
# ═══════════════════════════════════════════════════════════════════

def read_structured(file_path: str | Path) -> dict:
    """Read a YAML or JSON document into a dict."""
    file_path = Path(file_path)
    with open(file_path, "r", encoding="utf-8") as f:
        if file_path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f) or {}


# ═══════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════

class RiskForwardError(Exception):
    """Base exception for riskforward"""
    pass


class ProfileConfigurationError(RiskForwardError, ValueError):
    """Projection profile decay parameters outside the safe band"""
    pass
