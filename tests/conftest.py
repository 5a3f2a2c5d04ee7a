"""Shared test fixtures for riskforward test suite."""

import pytest

from riskforward import settings as settings_module
from riskforward.forecast.profiles import use_profiles
from riskforward.models import MitigationProfile, Risk, RiskSnapshot


@pytest.fixture(autouse=True)
def reset_global_config():
    """Each test starts from default settings and the built-in profile table."""
    settings_module._settings = None
    use_profiles(None)
    yield
    settings_module._settings = None
    use_profiles(None)


@pytest.fixture
def make_history():
    """Build a snapshot list from composite scores (cycle index = position)."""
    def _make(scores, risk_id="R1"):
        return [
            RiskSnapshot(risk_id=risk_id, cycle_index=i, composite_score=s)
            for i, s in enumerate(scores)
        ]
    return _make


@pytest.fixture
def sample_risk():
    """A well-formed risk with an active, lagged mitigation."""
    return Risk(
        id="R-001",
        title="Ground conditions",
        category="geotechnical",
        probability=0.5,
        base_cost_impact=200_000,
        schedule_impact_days=30,
        sensitivity=0.8,
        escalation_persistence=0.6,
        time_profile="mid",
        mitigation_profile=MitigationProfile(
            status="active", effectiveness=0.6, confidence=0.7, reduces=0.5, lag_months=3
        ),
    )


@pytest.fixture
def sample_portfolio():
    """Three risks across two categories."""
    return [
        Risk(id="R-001", title="Ground conditions", category="geotechnical",
             probability=0.5, base_cost_impact=200_000, sensitivity=0.8, time_profile="front"),
        Risk(id="R-002", title="Supplier insolvency", category="commercial",
             probability=0.15, base_cost_impact=500_000, sensitivity=0.5, time_profile="back"),
        Risk(id="R-003", title="Permit delay", category="commercial",
             probability=0.7, base_cost_impact=50_000, sensitivity=0.3, time_profile=[1, 2, 3, 2, 1]),
    ]


@pytest.fixture
def register_file(tmp_path):
    """A YAML register with score history, as read by the CLI."""
    path = tmp_path / "register.yaml"
    path.write_text(
        """
risks:
  - id: R-001
    title: Ground conditions
    category: geotechnical
    probability: 0.5
    base_cost_impact: 200000
    schedule_impact_days: 30
    sensitivity: 0.8
    mitigation_strength: 0.5
    score_history:
      - {timestamp: "2026-01-01", composite_score: 52}
      - {timestamp: "2026-02-01", composite_score: 58}
      - {timestamp: "2026-03-01", composite_score: 63}
      - {timestamp: "2026-04-01", composite_score: 69}
      - {timestamp: "2026-05-01", composite_score: 74}
  - id: R-002
    title: Supplier insolvency
    category: commercial
    probability: 0.2
    base_cost_impact: 500000
    score_history:
      - {timestamp: "2026-04-01", composite_score: 30}
      - {timestamp: "2026-05-01", composite_score: 31}
""",
        encoding="utf-8",
    )
    return path
