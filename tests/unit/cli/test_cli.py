"""Unit tests for the qledger command line."""

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from qledger.cli.main import cli

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def system_config_file(tmp_path: Path) -> Path:
    """Quiet logging so command output holds only tables."""
    path = tmp_path / "qledger.yaml"
    path.write_text(yaml.safe_dump({"logging": {"level": "ERROR", "enable_file": False}}))
    return path


@pytest.fixture
def scenario_file(tmp_path: Path) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "scenario_id": "cli_demo",
                "initial_capital": 1000,
                "fee": 10,
                "data": {"prices": {"NYSE:KO": {"2020-01-02": 25}}},
                "steps": [{"date": "2020-01-02", "action": "buy", "orders": {"NYSE:KO": 50}}],
            }
        )
    )
    return path


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    exchange_dir = tmp_path / "equities" / "NYSE"
    exchange_dir.mkdir(parents=True)
    (exchange_dir / "KO.csv").write_text(
        "Date,Open,High,Low,Close,Adj Close,Volume\n2020-01-02,54.32,54.85,54.01,54.69,49.90,11867700\n"
    )
    return tmp_path / "equities"


# ============================================================================
# Tests
# ============================================================================


class TestRunCommand:
    """Tests for `qledger run`."""

    def test_run_prints_final_ledger(self, runner, scenario_file, system_config_file):
        result = runner.invoke(cli, ["run", str(scenario_file), "--config", str(system_config_file)])

        assert result.exit_code == 0, result.output
        assert "Initial Ledger" in result.output
        assert "clamped" in result.output
        assert "Final Ledger" in result.output
        assert "15.00" in result.output

    def test_quiet_prints_only_final_ledger(self, runner, scenario_file, system_config_file):
        result = runner.invoke(cli, ["run", str(scenario_file), "-c", str(system_config_file), "-q"])

        assert result.exit_code == 0, result.output
        assert "Initial Ledger" not in result.output
        assert "Final Ledger" in result.output

    def test_invalid_scenario_exits_with_error(self, runner, tmp_path, system_config_file):
        bad = tmp_path / "bad.yaml"
        bad.write_text("scenario_id: only")

        result = runner.invoke(cli, ["run", str(bad), "-c", str(system_config_file)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_scenario_rejected_by_click(self, runner, tmp_path):
        result = runner.invoke(cli, ["run", str(tmp_path / "missing.yaml")])

        assert result.exit_code != 0


class TestPriceCommand:
    """Tests for `qledger price`."""

    def test_price_lookup(self, runner, data_root):
        result = runner.invoke(cli, ["price", "NYSE:KO", "2020-01-02", "--data-root", str(data_root)])

        assert result.exit_code == 0, result.output
        assert "54.69" in result.output

    def test_price_missing_on_date(self, runner, data_root):
        result = runner.invoke(cli, ["price", "NYSE:KO", "2020-01-03", "--data-root", str(data_root)])

        assert result.exit_code == 0, result.output
        assert "not available" in result.output

    def test_unknown_instrument(self, runner, data_root):
        result = runner.invoke(cli, ["price", "NYSE:XYZ", "2020-01-02", "--data-root", str(data_root)])

        assert result.exit_code == 1
        assert "NYSE:XYZ" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "qledger" in result.output


class TestRunCommandConfigErrors:
    """Tests for `qledger run` with a broken system config."""

    def test_bad_flag_in_system_config_exits_with_error(self, runner, tmp_path, scenario_file):
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("execution:\n  round_dividends: sometimes\n")

        result = runner.invoke(cli, ["run", str(scenario_file), "-c", str(config_path)])

        assert result.exit_code == 1
        assert "sometimes" in result.output
