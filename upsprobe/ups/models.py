"""
Data models for UPS checks.

This module defines the severity scale, the check categories, the decoded
telemetry variables handed over by the fetcher, the threshold models, and
the immutable result of one evaluation.
"""

from enum import Enum, IntEnum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import MissingDataError, UnparseableDataError


class Severity(IntEnum):
    """
    Check outcome, ordered from best to worst.

    The integer value is the exit code expected by Nagios-compatible
    monitoring frameworks.
    """
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @classmethod
    def worst(cls, *severities: "Severity") -> "Severity":
        """Combine sub-findings; the most severe one wins."""
        return cls(max(severities, default=cls.OK))


class CheckCategory(str, Enum):
    """Check selected once per invocation."""
    INFO = "info"
    STATUS = "status"
    BATTERY = "battery"
    TEMPERATURE = "temperature"
    INPUT = "input"
    OUTPUT = "output"
    LOAD = "load"


class Direction(str, Enum):
    """Which side of a bound represents a worse device condition."""
    LOW = "low"
    HIGH = "high"


class Decoding(str, Enum):
    """How the raw text of a variable is turned into a value."""
    TEXT = "text"
    INTEGER = "integer"
    TENTHS = "tenths"
    ENUM = "enum"


class TelemetryVariable(BaseModel):
    """
    A single scalar reading returned by the device.

    ``raw`` is None when the agent did not return the variable, which is
    different from returning an empty string.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="MIB object name, e.g. upsBatteryVoltage")
    oid: str = Field(description="Numeric OID that was queried")
    label: str = Field(description="Human readable field name used in messages")
    raw: Optional[str] = Field(default=None, description="Value as returned by the agent")
    decoding: Decoding = Decoding.TEXT
    unit: str = ""

    @property
    def present(self) -> bool:
        return self.raw is not None

    def as_text(self) -> str:
        if self.raw is None:
            raise MissingDataError(self.label)
        return self.raw.strip()

    def as_int(self) -> int:
        """Return the value as an integer, raising a data error otherwise."""
        text = self.as_text()
        try:
            return int(text)
        except ValueError:
            raise UnparseableDataError(self.label, self.raw) from None


class Bounds(BaseModel):
    """A warning/critical pair for one metric."""
    model_config = ConfigDict(frozen=True)

    warning: float
    critical: float
    direction: Direction

    @model_validator(mode="after")
    def _check_order(self) -> "Bounds":
        if self.direction is Direction.LOW and not self.critical < self.warning:
            raise ValueError(
                f"critical bound {self.critical:g} must be below warning bound {self.warning:g}"
            )
        if self.direction is Direction.HIGH and not self.critical > self.warning:
            raise ValueError(
                f"critical bound {self.critical:g} must be above warning bound {self.warning:g}"
            )
        return self


class VoltageBounds(BaseModel):
    """Two-sided bounds for input and output voltage."""
    model_config = ConfigDict(frozen=True)

    low_warning: float
    low_critical: float
    high_warning: float
    high_critical: float

    @model_validator(mode="after")
    def _check_order(self) -> "VoltageBounds":
        if not (self.low_critical < self.low_warning < self.high_warning < self.high_critical):
            raise ValueError(
                "voltage bounds must satisfy low critical < low warning < high warning < high critical, "
                f"got {self.low_critical:g} / {self.low_warning:g} / {self.high_warning:g} / {self.high_critical:g}"
            )
        return self

    @property
    def low(self) -> Bounds:
        return Bounds(warning=self.low_warning, critical=self.low_critical, direction=Direction.LOW)

    @property
    def high(self) -> Bounds:
        return Bounds(warning=self.high_warning, critical=self.high_critical, direction=Direction.HIGH)


class ThresholdSet(BaseModel):
    """All thresholds used by the numeric checks."""
    model_config = ConfigDict(frozen=True)

    charge: Bounds = Bounds(warning=70, critical=40, direction=Direction.LOW)
    temperature: Bounds = Bounds(warning=50, critical=60, direction=Direction.HIGH)
    load: Bounds = Bounds(warning=75, critical=85, direction=Direction.HIGH)
    voltage: VoltageBounds = VoltageBounds(
        low_warning=115, low_critical=110, high_warning=125, high_critical=130
    )


class PerfDatum(BaseModel):
    """One Nagios performance data item."""
    model_config = ConfigDict(frozen=True)

    label: str
    value: float
    unit: str = ""
    warning: str = ""
    critical: str = ""
    decimals: Optional[int] = None

    def render(self) -> str:
        value = _format_number(self.value) if self.decimals is None else f"{self.value:.{self.decimals}f}"
        text = f"{self.label}={value}{self.unit}"
        if self.warning or self.critical:
            text += f";{self.warning};{self.critical}"
        return text


class EvaluationResult(BaseModel):
    """The outcome of one check: a severity and the message lines explaining it."""
    model_config = ConfigDict(frozen=True)

    severity: Severity
    lines: Tuple[str, ...]
    perfdata: Tuple[PerfDatum, ...] = ()

    @property
    def exit_code(self) -> int:
        return int(self.severity)

    def render(self, with_perfdata: bool = True) -> str:
        """
        Render the single output line.

        Lines are joined with a literal ``\\n`` marker so the result stays on
        one physical line; performance data follows a ``|`` separator.
        """
        text = f"{self.severity.name}: " + "\\n".join(self.lines)
        if with_perfdata and self.perfdata:
            text += " | " + " ".join(item.render() for item in self.perfdata)
        return text


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"
