"""Tests for the deliverability-sim CLI commands."""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

DEMO_SCENARIO = Path(__file__).parents[3] / "scenarios" / "demo_game.yaml"


class TestCliBasics:
    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def app(self):
        from deliverability_simulator.cli.main import app
        return app

    def test_version(self, runner, app):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "Deliverability Simulator" in result.output

    def test_commands_listed_in_help(self, runner, app):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("simulate", "validate-config", "rules"):
            assert command in result.output


class TestSimulateCommand:
    """Tests for deliverability-sim simulate."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def app(self):
        from deliverability_simulator.cli.main import app
        return app

    @pytest.fixture
    def scenario_file(self, tmp_path):
        scenario = {
            "room_code": "CLI001",
            "rounds": 2,
            "teams": [
                {
                    "name": "SendWave",
                    "tech_stack": ["spf", "dkim", "dmarc"],
                    "clients": [{"id": "c1", "type": "premium_brand"}],
                },
                {
                    "name": "BlastCo",
                    "clients": [{"id": "c1", "type": "aggressive_marketer"}],
                },
            ],
        }
        path = tmp_path / "scenario.yaml"
        path.write_text(yaml.dump(scenario))
        return path

    def test_quiet_run_outputs_json(self, runner, app, scenario_file):
        result = runner.invoke(app, ["simulate", "--config", str(scenario_file), "--quiet"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["room_code"] == "CLI001"
        assert data["rounds_played"] == 2
        assert len(data["history"]) == 2
        assert data["final_scores"]["winner"]["teams"] == ["SendWave"]

    def test_rounds_override_and_no_history(self, runner, app, scenario_file):
        result = runner.invoke(
            app,
            ["simulate", "-c", str(scenario_file), "--rounds", "1", "--no-history", "--quiet"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["rounds_played"] == 1
        assert "history" not in data

    def test_no_score(self, runner, app, scenario_file):
        result = runner.invoke(
            app, ["simulate", "-c", str(scenario_file), "--no-score", "--quiet"]
        )

        assert result.exit_code == 0, result.output
        assert "final_scores" not in json.loads(result.stdout)

    def test_demo_scenario_runs_verbose(self, runner, app):
        result = runner.invoke(app, ["simulate", "-c", str(DEMO_SCENARIO), "--verbose"])
        assert result.exit_code == 0, result.output

    def test_quiet_and_verbose_conflict(self, runner, app, scenario_file):
        result = runner.invoke(
            app, ["simulate", "-c", str(scenario_file), "--quiet", "--verbose"]
        )
        assert result.exit_code == 1

    def test_unknown_tech_fails(self, runner, app, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            yaml.dump(
                {
                    "room_code": "BAD",
                    "teams": [
                        {
                            "name": "T",
                            "tech_stack": ["bimi"],
                            "clients": [{"id": "c1", "type": "premium_brand"}],
                        }
                    ],
                }
            )
        )

        result = runner.invoke(app, ["simulate", "-c", str(path), "--quiet"])

        assert result.exit_code == 1

    def test_invalid_scenario_fails(self, runner, app, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"room_code": "BAD", "teams": []}))

        result = runner.invoke(app, ["simulate", "-c", str(path), "--quiet"])

        assert result.exit_code == 1


class TestValidateConfigCommand:
    """Tests for deliverability-sim validate-config."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def app(self):
        from deliverability_simulator.cli.main import app
        return app

    def test_demo_scenario_is_valid(self, runner, app):
        result = runner.invoke(app, ["validate-config", str(DEMO_SCENARIO), "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["teams"] == ["SendWave", "BlastCo"]

    def test_reports_unknown_references(self, runner, app, tmp_path):
        path = tmp_path / "refs.yaml"
        path.write_text(
            yaml.dump(
                {
                    "room_code": "REFS",
                    "teams": [
                        {
                            "name": "T",
                            "tech_stack": ["bimi"],
                            "clients": [{"id": "c1", "type": "crypto_promoter"}],
                        }
                    ],
                    "destinations": [
                        {"name": "zmail", "owned_tools": ["honeypot"]},
                    ],
                }
            )
        )

        result = runner.invoke(app, ["validate-config", str(path), "--format", "json"])

        assert result.exit_code == 1
        errors = json.loads(result.stdout)["errors"]
        assert len(errors) == 3
        assert any("bimi" in e for e in errors)
        assert any("crypto_promoter" in e for e in errors)
        assert any("honeypot" in e for e in errors)

    def test_reports_destinations_missing_from_rules(self, runner, app, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            yaml.dump(
                {
                    "room_code": "CUSTOM",
                    "teams": [
                        {"name": "T", "clients": [{"id": "c1", "type": "premium_brand"}]}
                    ],
                    "destinations": [{"name": "gmail"}, {"name": "zmail"}],
                }
            )
        )

        result = runner.invoke(app, ["validate-config", str(path), "--format", "json"])

        assert result.exit_code == 1
        errors = json.loads(result.stdout)["errors"]
        assert errors == ["Destination gmail: Unknown destination: gmail"]

    def test_missing_file(self, runner, app, tmp_path):
        result = runner.invoke(
            app, ["validate-config", str(tmp_path / "missing.yaml"), "--format", "json"]
        )

        assert result.exit_code == 1
        assert json.loads(result.stdout)["valid"] is False


class TestRulesCommand:
    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def app(self):
        from deliverability_simulator.cli.main import app
        return app

    def test_prints_default_rules(self, runner, app):
        result = runner.invoke(app, ["rules"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["default_reputation"] == 70
        assert [d["name"] for d in data["destinations"]] == ["zmail", "intake", "yagle"]

    def test_output_round_trips_as_rules_file(self, runner, app, tmp_path):
        result = runner.invoke(app, ["rules", "--format", "yaml"])
        assert result.exit_code == 0

        path = tmp_path / "rules.yaml"
        path.write_text(result.stdout)
        reloaded = runner.invoke(app, ["rules", "--rules", str(path)])

        assert reloaded.exit_code == 0
        assert json.loads(reloaded.stdout)["delivery"]["compliance_round"] == 3
