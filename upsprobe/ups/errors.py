"""
Exception hierarchy for the UPS probe.

Transport failures come from the SNMP fetch, data errors from decoding a
variable the device did (or did not) return, and configuration errors from
threshold validation at startup.
"""


class ProbeError(Exception):
    """Base exception for probe errors."""
    pass


class TransportError(ProbeError):
    """The device could not be queried."""
    pass


class SnmpTimeoutError(TransportError):
    """No response arrived before the deadline."""
    pass


class SnmpAuthError(TransportError):
    """The agent rejected the community or denied access to a variable."""
    pass


class SnmpUnreachableError(TransportError):
    """The host could not be resolved or the socket could not be used."""
    pass


class SnmpResponseError(TransportError):
    """The agent answered with an error status or a malformed reply."""
    pass


class DataError(ProbeError):
    """A variable needed by a check is unusable."""

    def __init__(self, variable: str, message: str):
        super().__init__(message)
        self.variable = variable


class MissingDataError(DataError):
    """The device answered but did not return the variable."""

    def __init__(self, variable: str):
        super().__init__(variable, f"no {variable} data received")


class UnparseableDataError(DataError):
    """The returned value does not match the variable's decoding rule."""

    def __init__(self, variable: str, raw: str):
        super().__init__(variable, f"unparseable {variable} value '{raw}'")
        self.raw = raw


class ConfigurationError(ProbeError):
    """Thresholds or invocation options are logically invalid."""
    pass
