"""
Tests for the upsprobe command line.

The fetcher is patched so each test controls the telemetry the check sees.
"""
import pytest
from unittest.mock import AsyncMock, patch

from upsprobe.cli.main import app
from upsprobe.ups.errors import SnmpAuthError, SnmpTimeoutError
from upsprobe.ups.evaluator import TRANSPORT_FAILURE_MESSAGE
from upsprobe.ups.models import CheckCategory


@pytest.fixture
def fetch(make_variables):
    """Patch TelemetryFetcher.fetch; tests set return_value or side_effect."""
    with patch("upsprobe.cli.main.TelemetryFetcher.fetch", new_callable=AsyncMock) as mock_fetch:
        yield mock_fetch


class TestUsage:

    def test_help_exits_unknown(self, cli_runner):
        result = cli_runner.invoke(app, ['--help'])
        assert result.exit_code == 3
        assert "Usage:" in result.output
        assert "-s, --check" in result.output

    def test_missing_host(self, cli_runner):
        result = cli_runner.invoke(app, ['-s', 'battery'])
        assert result.exit_code == 3
        assert "UNKNOWN:" in result.output
        assert "'-h'" in result.output

    def test_missing_check(self, cli_runner):
        result = cli_runner.invoke(app, ['-h', 'ups.example'])
        assert result.exit_code == 3
        assert "UNKNOWN:" in result.output

    def test_invalid_check(self, cli_runner):
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'humidity'])
        assert result.exit_code == 3

    def test_inverted_thresholds(self, cli_runner, fetch):
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'battery', '-A', '30', '-B', '40'])
        assert result.exit_code == 3
        assert "UNKNOWN: Invalid thresholds" in result.output
        fetch.assert_not_awaited()

    def test_inverted_voltage_thresholds(self, cli_runner, fetch):
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'input', '-G', '100', '-H', '110'])
        assert result.exit_code == 3
        assert "voltage bounds" in result.output


class TestChecks:

    def test_battery_ok(self, cli_runner, fetch, make_variables):
        fetch.return_value = make_variables(
            upsBatteryStatus=2, upsEstimatedChargeRemaining=80, upsBatteryVoltage=240,
        )
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'battery'])
        assert result.exit_code == 0
        assert "OK: battery status Normal\\ncharge 80%\\nvoltage 24.0V | charge=80%;@~:70;@~:40 battery_voltage=24.0V" in result.output
        fetch.assert_awaited_once_with(CheckCategory.BATTERY)

    def test_battery_thresholds_from_options(self, cli_runner, fetch, make_variables):
        fetch.return_value = make_variables(
            upsBatteryStatus=2, upsEstimatedChargeRemaining=80, upsBatteryVoltage=240,
        )
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'battery', '-A', '90', '-B', '85'])
        assert result.exit_code == 2
        assert result.output.startswith("CRITICAL:")

    def test_thresholds_from_environment(self, cli_runner, fetch, make_variables, monkeypatch):
        monkeypatch.setenv("UPSPROBE_LOAD_WARNING", "20")
        fetch.return_value = make_variables(upsOutputPercentLoad=25)
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'load'])
        assert result.exit_code == 1
        assert "WARNING: output load 25%" in result.output

    def test_input_voltage_critical(self, cli_runner, fetch, make_variables):
        fetch.return_value = make_variables(upsInputVoltage=105)
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'input'])
        assert result.exit_code == 2

    def test_check_name_is_case_insensitive(self, cli_runner, fetch, make_variables):
        fetch.return_value = make_variables(upsOutputSource=3)
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'STATUS'])
        assert result.exit_code == 0
        assert "OK: output source Normal" in result.output

    def test_no_perfdata(self, cli_runner, fetch, make_variables):
        fetch.return_value = make_variables(upsBatteryTemperature=30)
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'temperature', '--no-perfdata'])
        assert result.exit_code == 0
        assert "|" not in result.output

    def test_verbose_lists_variables(self, cli_runner, fetch, make_variables):
        fetch.return_value = make_variables(upsBatteryTemperature=30)
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'temperature', '-v'])
        assert result.exit_code == 0
        assert "upsBatteryTemperature" in result.output

    @pytest.mark.parametrize("category", [c.value for c in CheckCategory])
    def test_transport_timeout_is_critical_for_every_check(self, cli_runner, fetch, category):
        fetch.side_effect = SnmpTimeoutError("no response from ups.example:161 within 15s")
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', category])
        assert result.exit_code == 2
        assert f"CRITICAL: {TRANSPORT_FAILURE_MESSAGE}" in result.output

    def test_auth_failure_is_critical(self, cli_runner, fetch):
        fetch.side_effect = SnmpAuthError("authorizationError at ?")
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'status'])
        assert result.exit_code == 2
        assert "authorizationError" in result.output

    def test_unexpected_error_is_unknown(self, cli_runner, fetch):
        fetch.side_effect = RuntimeError("engine exploded")
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'status'])
        assert result.exit_code == 3
        assert "UNKNOWN: internal error: engine exploded" in result.output


class TestConnectionOptions:

    def test_options_reach_fetcher(self, cli_runner, make_variables):
        with patch("upsprobe.cli.main.TelemetryFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch = AsyncMock(return_value=make_variables(upsOutputPercentLoad=10))
            result = cli_runner.invoke(app, [
                '-h', 'ups.example', '-c', 'private', '-p', '1161', '-t', '3', '-s', 'load',
            ])
        assert result.exit_code == 0
        fetcher_cls.assert_called_once_with(host='ups.example', port=1161, community='private', timeout=3.0)

    def test_defaults_come_from_settings(self, cli_runner, make_variables, monkeypatch):
        monkeypatch.setenv("UPSPROBE_COMMUNITY", "from-env")
        with patch("upsprobe.cli.main.TelemetryFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch = AsyncMock(return_value=make_variables(upsOutputPercentLoad=10))
            result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'load'])
        assert result.exit_code == 0
        fetcher_cls.assert_called_once_with(host='ups.example', port=161, community='from-env', timeout=15.0)

    def test_invalid_port(self, cli_runner):
        result = cli_runner.invoke(app, ['-h', 'ups.example', '-s', 'load', '-p', '70000'])
        assert result.exit_code == 3
