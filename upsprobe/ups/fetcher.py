"""
Telemetry fetcher for SNMP-managed UPS devices.

This module turns one SNMP GET into decoded TelemetryVariable values for a
check category. The evaluator never sees protocol objects, only the
variables built here.
"""

import logging
from typing import Any, Dict, Optional

from ..transports.base import TransportAdapter
from ..transports.snmp_adapter import (
    ERROR_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNREACHABLE,
    SnmpAdapter,
)
from .errors import (
    SnmpAuthError,
    SnmpResponseError,
    SnmpTimeoutError,
    SnmpUnreachableError,
    TransportError,
)
from .mib import variables_for
from .models import CheckCategory, TelemetryVariable

logger = logging.getLogger(__name__)

_ERRORS = {
    ERROR_TIMEOUT: SnmpTimeoutError,
    ERROR_AUTH: SnmpAuthError,
    ERROR_UNREACHABLE: SnmpUnreachableError,
}


class TelemetryFetcher:
    """
    Fetches the variables a check category needs from one UPS.
    """

    def __init__(
        self,
        host: str,
        port: int = 161,
        community: str = "public",
        timeout: float = 15.0,
        adapter: Optional[TransportAdapter] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            host: The UPS hostname or IP address.
            port: The SNMP agent port.
            community: The SNMP v2c community string.
            timeout: Seconds to wait for the response.
            adapter: Transport to use; an SnmpAdapter when omitted.
        """
        self.host = host
        self.port = port
        self.community = community
        self.timeout = timeout
        self.adapter = adapter or SnmpAdapter()

    async def fetch(self, category: CheckCategory) -> Dict[str, TelemetryVariable]:
        """
        Query the device for the variables of a category.

        Every variable of the category is present in the returned mapping;
        those the device did not return have ``raw=None``.

        Raises:
            TransportError: If the device could not be queried.
        """
        specs = variables_for(category)
        logger.debug("Fetching %d variables for %s check from %s:%s",
                     len(specs), category.value, self.host, self.port)

        await self.adapter.prepare({
            "host": self.host,
            "port": self.port,
            "community": self.community,
            "timeout_s": self.timeout,
        })
        try:
            response = await self.adapter.call(
                {"op": "get", "oids": [spec.oid for spec in specs]},
                timeout_s=self.timeout,
            )
        finally:
            await self.adapter.close()

        if not response.get("ok"):
            raise self._error(response)

        values: Dict[str, Any] = response.get("data") or {}
        if not isinstance(values, dict):
            raise SnmpResponseError(f"Malformed SNMP response from {self.host}")

        variables = {
            spec.name: TelemetryVariable(
                name=spec.name,
                oid=spec.oid,
                label=spec.label,
                raw=None if values.get(spec.oid) is None else str(values[spec.oid]),
                decoding=spec.decoding,
                unit=spec.unit,
            )
            for spec in specs
        }
        absent = [name for name, var in variables.items() if not var.present]
        logger.info("SNMP get ok from %s in %sms (%d returned, %d absent)",
                    self.host, response.get("latency_ms"), len(variables) - len(absent), len(absent))
        if absent:
            logger.debug("Variables not returned: %s", ", ".join(absent))
        return variables

    def _error(self, response: Dict[str, Any]) -> TransportError:
        data = response.get("data")
        detail = data.get("error") if isinstance(data, dict) else None
        error_cls = _ERRORS.get(response.get("error_kind"), SnmpResponseError)
        logger.warning("SNMP request to %s:%s failed: %s", self.host, self.port, detail)
        return error_cls(detail or f"SNMP request to {self.host} failed")
