"""riskforward configuration settings using Pydantic.

Loads settings from:
1. Environment variables (RISKFORWARD_ prefix, .env)
2. An optional YAML file
3. Default values
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from riskforward.utils import read_structured


class RiskForwardSettings(BaseSettings):
    """Central configuration for the risk engine."""

    model_config = SettingsConfigDict(
        env_prefix="RISKFORWARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # --- Forward projection ---
    forecast_horizon: int = Field(default=5, ge=1, description="Review cycles projected forward")
    history_max_snapshots: int = Field(default=10, ge=1)

    # --- Escalation bands (composite score 0-100) ---
    watch_threshold: float = 50.0
    high_threshold: float = 65.0
    critical_threshold: float = 80.0

    # --- Forward exposure ---
    exposure_horizon_months: int = Field(default=12, ge=1)
    top_drivers: int = Field(default=10, ge=0)

    # --- Monte Carlo ---
    mc_iterations: int = Field(default=10_000, ge=0)
    mc_seed: int | None = 42
    mc_cost_spread_pct: float = Field(default=0.2, ge=0.0, le=1.0)
    mc_sample_limit: int | None = None

    # --- Projection profiles override (YAML) ---
    profiles_path: Path | None = None

    log_level: str = "INFO"

    @field_validator("critical_threshold")
    @classmethod
    def _critical_in_range(cls, v: float) -> float:
        if not 0 < v <= 100:
            raise ValueError("critical_threshold must be in (0, 100]")
        return v

    @model_validator(mode="after")
    def _bands_ordered(self) -> "RiskForwardSettings":
        if not self.watch_threshold < self.high_threshold < self.critical_threshold:
            raise ValueError(
                "escalation thresholds must satisfy watch < high < critical, got "
                f"{self.watch_threshold} / {self.high_threshold} / {self.critical_threshold}"
            )
        return self

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "RiskForwardSettings":
        """Load configuration from YAML file"""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            return cls()
        return cls(**read_structured(yaml_path))


_settings: Optional[RiskForwardSettings] = None


def get_settings() -> RiskForwardSettings:
    """Get or create global settings instance"""
    global _settings
    if _settings is None:
        _settings = RiskForwardSettings()
    return _settings


def reload_settings(yaml_path: Optional[str | Path] = None) -> RiskForwardSettings:
    """Reload settings, optionally from a YAML file"""
    global _settings
    _settings = RiskForwardSettings.from_yaml(yaml_path) if yaml_path else RiskForwardSettings()
    return _settings
