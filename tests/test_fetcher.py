"""
Tests for the telemetry fetcher.
"""

import pytest
from unittest.mock import AsyncMock

from upsprobe.ups.errors import (
    SnmpAuthError,
    SnmpResponseError,
    SnmpTimeoutError,
    SnmpUnreachableError,
    TransportError,
)
from upsprobe.ups.fetcher import TelemetryFetcher
from upsprobe.ups.mib import VARIABLES
from upsprobe.ups.models import CheckCategory, Decoding


class FakeAdapter:
    """Records the configuration and request, returns a canned envelope."""
    name = "fake"

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.config = None
        self.request = None
        self.timeout_s = None
        self.closed = False

    async def prepare(self, instance_cfg):
        self.config = instance_cfg

    async def call(self, request, *, timeout_s=None):
        self.request = request
        self.timeout_s = timeout_s
        if self.exc:
            raise self.exc
        return self.response

    async def close(self):
        self.closed = True


def _ok(data):
    return {"ok": True, "status": 0, "data": data, "raw": data, "latency_ms": 3, "error_kind": None}


def _failed(kind, message):
    return {"ok": False, "status": None, "data": {"error": message}, "raw": message,
            "latency_ms": 15000, "error_kind": kind}


@pytest.mark.asyncio
async def test_fetch_builds_variables_for_category():
    adapter = FakeAdapter(_ok({
        VARIABLES["upsEstimatedChargeRemaining"].oid: "80",
        VARIABLES["upsBatteryVoltage"].oid: "240",
        VARIABLES["upsBatteryStatus"].oid: "2",
    }))
    fetcher = TelemetryFetcher("ups.example", port=1161, community="private", timeout=5, adapter=adapter)

    variables = await fetcher.fetch(CheckCategory.BATTERY)

    assert set(variables) == {
        "upsBatteryStatus", "upsEstimatedChargeRemaining",
        "upsBatteryVoltage", "upsEstimatedMinutesRemaining",
    }
    assert variables["upsEstimatedChargeRemaining"].raw == "80"
    assert variables["upsBatteryVoltage"].decoding == Decoding.TENTHS
    assert variables["upsEstimatedMinutesRemaining"].raw is None
    assert adapter.config == {"host": "ups.example", "port": 1161, "community": "private", "timeout_s": 5}
    assert adapter.timeout_s == 5
    assert adapter.closed


@pytest.mark.asyncio
async def test_fetch_requests_only_category_oids():
    adapter = FakeAdapter(_ok({}))
    await TelemetryFetcher("ups.example", adapter=adapter).fetch(CheckCategory.LOAD)
    assert adapter.request == {"op": "get", "oids": ["1.3.6.1.2.1.33.1.4.4.1.5.1"]}


@pytest.mark.asyncio
async def test_empty_string_is_kept_distinct_from_absent():
    adapter = FakeAdapter(_ok({VARIABLES["sysName"].oid: ""}))
    variables = await TelemetryFetcher("ups.example", adapter=adapter).fetch(CheckCategory.INFO)
    assert variables["sysName"].raw == ""
    assert variables["sysContact"].raw is None


@pytest.mark.asyncio
@pytest.mark.parametrize("kind, error_cls", [
    ("timeout", SnmpTimeoutError),
    ("auth", SnmpAuthError),
    ("unreachable", SnmpUnreachableError),
    ("response", SnmpResponseError),
    (None, SnmpResponseError),
])
async def test_failed_request_raises_transport_error(kind, error_cls):
    adapter = FakeAdapter(_failed(kind, "request failed"))
    fetcher = TelemetryFetcher("ups.example", adapter=adapter)
    with pytest.raises(error_cls, match="request failed"):
        await fetcher.fetch(CheckCategory.STATUS)
    assert issubclass(error_cls, TransportError)


@pytest.mark.asyncio
async def test_malformed_data_raises_response_error():
    adapter = FakeAdapter(_ok(["not", "a", "mapping"]))
    with pytest.raises(SnmpResponseError, match="Malformed"):
        await TelemetryFetcher("ups.example", adapter=adapter).fetch(CheckCategory.STATUS)


@pytest.mark.asyncio
async def test_adapter_closed_when_call_raises():
    adapter = FakeAdapter(exc=ValueError("boom"))
    adapter.close = AsyncMock()
    with pytest.raises(ValueError):
        await TelemetryFetcher("ups.example", adapter=adapter).fetch(CheckCategory.STATUS)
    adapter.close.assert_awaited_once()
