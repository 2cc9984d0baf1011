"""
SNMP Transport Adapter using pysnmp.

Supports SNMP v2c community authentication and a single GET operation.
Uses the pysnmp asyncio high-level API under an anyio deadline. Requests are
never retried.
"""
from typing import Dict, Any, List, Optional
import time
import anyio

from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    get_cmd,
)
from pysnmp.proto.errind import RequestTimedOut
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

ERROR_TIMEOUT = "timeout"
ERROR_AUTH = "auth"
ERROR_UNREACHABLE = "unreachable"
ERROR_RESPONSE = "response"

# error-status values that mean the community was not allowed to read
_AUTH_STATUSES = {"authorizationError", "noAccess"}

_ABSENT = (NoSuchObject, NoSuchInstance, EndOfMibView)


def _result(ok: bool, data: Dict[str, Any], raw: Any, start: float,
            error_kind: Optional[str] = None) -> Dict[str, Any]:
    latency_ms = int((time.monotonic() - start) * 1000)
    return {
        "ok": ok,
        "status": 0 if ok else None,
        "data": data,
        "raw": raw,
        "latency_ms": latency_ms,
        "error_kind": error_kind,
    }


class SnmpAdapter:
    name: str = "snmp"

    def __init__(self) -> None:
        self._config: Dict[str, Any] = {}

    async def prepare(self, instance_cfg: Dict[str, Any]) -> None:
        # Support nested block or top-level
        self._config = instance_cfg.get("snmp", instance_cfg)

    def _make_auth(self) -> CommunityData:
        community = self._config.get("community") or "public"
        return CommunityData(community, mpModel=1)

    async def call(self, request: Dict[str, Any], *, timeout_s: Optional[float] = None) -> Dict[str, Any]:
        host = self._config.get("host")
        port = int(self._config.get("port", 161))
        if not host:
            raise ValueError("SNMP 'host' is required in config.")
        timeout = float(timeout_s or self._config.get("timeout_s", 15.0))

        op = (request.get("op") or "get").lower()
        if op != "get":
            raise ValueError(f"Unsupported SNMP op: {op}")
        oids = request.get("oids") or request.get("oid")
        if isinstance(oids, str):
            oids = [oids]
        if not isinstance(oids, list) or not oids:
            raise ValueError("SNMP request requires 'oid' or 'oids' list.")
        var_binds = [ObjectType(ObjectIdentity(oid)) for oid in oids]

        engine = SnmpEngine()
        start = time.monotonic()
        try:
            with anyio.fail_after(timeout):
                try:
                    target = await UdpTransportTarget.create((host, port), timeout=timeout, retries=0)
                except (PySnmpError, OSError) as e:
                    return _result(False, {"error": str(e)}, str(e), start, ERROR_UNREACHABLE)

                errorIndication, errorStatus, errorIndex, varBinds = await get_cmd(
                    engine, self._make_auth(), target, ContextData(), *var_binds, lookupMib=False
                )
        except TimeoutError:
            msg = f"no response from {host}:{port} within {timeout:g}s"
            return _result(False, {"error": msg}, msg, start, ERROR_TIMEOUT)
        finally:
            engine.close_dispatcher()

        if errorIndication:
            msg = str(errorIndication)
            kind = ERROR_TIMEOUT if isinstance(errorIndication, RequestTimedOut) else ERROR_RESPONSE
            return _result(False, {"error": msg}, msg, start, kind)
        if errorStatus:
            status_name = errorStatus.prettyPrint()
            index = int(errorIndex or 0)
            # agents may report an index past the returned var-binds
            where = varBinds[index - 1][0] if 0 < index <= len(varBinds) else "?"
            msg = f"{status_name} at {where}"
            kind = ERROR_AUTH if status_name in _AUTH_STATUSES else ERROR_RESPONSE
            return _result(False, {"error": msg}, msg, start, kind)

        data: Dict[str, str] = {}
        missing: List[str] = []
        for name, val in varBinds:
            oid = str(name).lstrip(".")
            if isinstance(val, _ABSENT):
                missing.append(oid)
                continue
            data[oid] = val.prettyPrint()
        return _result(True, data, {"values": data, "missing": missing}, start)

    async def close(self) -> None:
        return None
