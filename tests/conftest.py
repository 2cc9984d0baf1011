import os

import pytest
from click.testing import CliRunner

from upsprobe.ups.mib import VARIABLES
from upsprobe.ups.models import TelemetryVariable


# Skip integration tests unless explicitly enabled
def pytest_addoption(parser):
    parser.addoption("--integration", action="store_true", default=False, help="Run integration tests")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


@pytest.fixture
def make_variables():
    """Build a variable mapping from MIB object names to raw values."""
    def _make(**raw_values):
        variables = {}
        for name, raw in raw_values.items():
            spec = VARIABLES[name]
            variables[name] = TelemetryVariable(
                name=spec.name,
                oid=spec.oid,
                label=spec.label,
                raw=None if raw is None else str(raw),
                decoding=spec.decoding,
                unit=spec.unit,
            )
        return variables
    return _make


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep UPSPROBE_* variables from the developer environment out of tests."""
    for key in list(os.environ):
        if key.startswith("UPSPROBE_") and not key.startswith("UPSPROBE_TEST_"):
            monkeypatch.delenv(key, raising=False)
