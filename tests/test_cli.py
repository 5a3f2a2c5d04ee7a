"""Tests for the riskforward command line interface."""

import json

import pytest
from click.testing import CliRunner

from riskforward.cli import load_register, main
from riskforward.utils import RiskForwardError


@pytest.fixture
def runner():
    return CliRunner()


class TestLoadRegister:
    def test_parses_risks(self, register_file):
        risks = load_register(register_file)
        assert [r.id for r in risks] == ["R-001", "R-002"]
        assert len(risks[0].score_history) == 5

    def test_missing_risks_list(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("project: demo\n", encoding="utf-8")
        with pytest.raises(RiskForwardError):
            load_register(path)


class TestForecastCommand:
    def test_forecast(self, runner, register_file):
        result = runner.invoke(main, ["forecast", str(register_file)])
        assert result.exit_code == 0, result.output
        assert "Forward pressure" in result.output
        assert "Projected critical: 1/2" in result.output

    def test_forecast_output_json(self, runner, register_file, tmp_path):
        out = tmp_path / "out" / "forecast.json"
        result = runner.invoke(main, ["forecast", str(register_file), "--profile", "aggressive", "-o", str(out)])
        assert result.exit_code == 0, result.output
        payload = json.loads(out.read_text())
        assert payload["projection_profile_used"] == "aggressive"
        assert set(payload["risk_forecasts_by_id"]) == {"R-001", "R-002"}

    def test_compare(self, runner, register_file):
        result = runner.invoke(main, ["compare", str(register_file)])
        assert result.exit_code == 0, result.output
        assert "Scenario Comparison" in result.output

    def test_rank(self, runner, register_file):
        result = runner.invoke(main, ["rank", str(register_file)])
        assert result.exit_code == 0, result.output
        assert "Decision Ranking" in result.output
        assert "ACCELERATING" in result.output

    def test_bad_register_fails(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("project: demo\n", encoding="utf-8")
        result = runner.invoke(main, ["forecast", str(path)])
        assert result.exit_code != 0
        assert isinstance(result.exception, RiskForwardError)


class TestSimulationCommands:
    def test_simulate(self, runner, register_file, tmp_path):
        out = tmp_path / "sim.json"
        result = runner.invoke(main, ["simulate", str(register_file), "-n", "500", "--seed", "7", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "P80" in result.output
        payload = json.loads(out.read_text())
        assert payload["iterations"] == 500
        assert payload["seed"] == 7

    def test_optimise_with_budget(self, runner, register_file, monkeypatch):
        monkeypatch.setenv("RISKFORWARD_MC_ITERATIONS", "500")
        result = runner.invoke(main, ["optimise", str(register_file), "--budget", "50000"])
        assert result.exit_code == 0, result.output
        assert "Neutral P80" in result.output
        assert "Budget plan" in result.output


class TestExposureCommand:
    def test_exposure(self, runner, register_file, tmp_path):
        out = tmp_path / "exposure.json"
        result = runner.invoke(main, ["exposure", str(register_file), "--horizon", "6", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "Total exposure" in result.output
        assert len(json.loads(out.read_text())["monthly_total"]) == 6

    def test_zero_horizon_is_respected(self, runner, register_file, tmp_path):
        out = tmp_path / "exposure.json"
        result = runner.invoke(main, ["exposure", str(register_file), "--horizon", "0", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "0 months" in result.output
        payload = json.loads(out.read_text())
        assert payload["monthly_total"] == []
        assert payload["total"] == 0.0


class TestStatusCommand:
    def test_status(self, runner):
        result = runner.invoke(main, ["status"])
        assert result.exit_code == 0, result.output
        assert "Configuration" in result.output

    def test_config_file(self, runner, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("forecast_horizon: 3\n", encoding="utf-8")
        result = runner.invoke(main, ["--config", str(config), "status"])
        assert result.exit_code == 0, result.output
