"""
Base interface for transport adapters.
"""
from typing import Protocol, Any, Dict, Optional


class TransportAdapter(Protocol):
    """
    Protocol for a transport adapter.

    A transport adapter performs a single request-response exchange with a
    device and returns a normalized result envelope.
    """
    name: str

    async def prepare(self, instance_cfg: Dict[str, Any]) -> None:
        """
        Configure the adapter with connection details before use.

        Args:
            instance_cfg: Host, port, credentials and timeout for the device.
        """
        ...

    async def call(self, request: Dict[str, Any], *, timeout_s: Optional[float] = None) -> Dict[str, Any]:
        """
        Executes a request-response operation.

        Args:
            request: The request payload, specific to the transport.
            timeout_s: An optional timeout in seconds for the operation.

        Returns:
            A dictionary with the normalized result:
            {
                "ok": bool,
                "status": int | None,
                "data": Any,
                "raw": Any,
                "latency_ms": int,
                "error_kind": str | None
            }
        """
        ...

    async def close(self) -> None:
        """
        Closes the transport and releases any resources.
        """
        ...
