"""
Check evaluation engine.

Each check category has one rule that turns the decoded telemetry and the
configured thresholds into an EvaluationResult. Rules are pure: the same
inputs always give the same result, and nothing is shared between calls.

Every numeric comparison goes through bounded_classify, whose bands are
inclusive on the worse side: a value equal to the warning bound is WARNING
and a value equal to the critical bound is CRITICAL, in both directions.
"""

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .errors import DataError, MissingDataError, TransportError, UnparseableDataError
from .mib import BATTERY_STATUS, CATEGORY_VARIABLES, OUTPUT_SOURCE, VARIABLES
from .models import (
    Bounds,
    CheckCategory,
    Decoding,
    Direction,
    EvaluationResult,
    PerfDatum,
    Severity,
    TelemetryVariable,
    ThresholdSet,
    VoltageBounds,
)

logger = logging.getLogger(__name__)

TRANSPORT_FAILURE_MESSAGE = "problem with SNMP request; check credentials/host reachability"

Variables = Mapping[str, TelemetryVariable]
CheckRule = Callable[[Variables, ThresholdSet], EvaluationResult]

RULES: Dict[CheckCategory, CheckRule] = {}

# upsOutputSource codes that are not WARNING
OUTPUT_SOURCE_SEVERITY: Dict[int, Severity] = {
    3: Severity.OK,
    5: Severity.CRITICAL,
}


def rule(category: CheckCategory) -> Callable[[CheckRule], CheckRule]:
    """Register the evaluation rule for a category."""
    def decorator(func: CheckRule) -> CheckRule:
        RULES[category] = func
        return func
    return decorator


# ===== Shared helpers =====

def bounded_classify(value: float, bounds: Bounds) -> Severity:
    """
    Classify a value against a warning/critical pair.

    For Direction.HIGH: CRITICAL if value >= critical, WARNING if
    warning <= value < critical, OK otherwise. For Direction.LOW the bands
    are mirrored: CRITICAL if value <= critical, WARNING if
    critical < value <= warning, OK otherwise.
    """
    if bounds.direction is Direction.HIGH:
        if value >= bounds.critical:
            return Severity.CRITICAL
        if value >= bounds.warning:
            return Severity.WARNING
        return Severity.OK

    if value <= bounds.critical:
        return Severity.CRITICAL
    if value <= bounds.warning:
        return Severity.WARNING
    return Severity.OK


def classify_voltage(value: float, bounds: VoltageBounds) -> Severity:
    """Two-sided classification: the worse of the low side and the high side."""
    return Severity.worst(bounded_classify(value, bounds.low), bounded_classify(value, bounds.high))


def decode_tenths(value: int) -> str:
    """Render an integer counted in tenths of a unit with one decimal place."""
    sign = "-" if value < 0 else ""
    whole, tenth = divmod(abs(value), 10)
    return f"{sign}{whole}.{tenth}"


def decode_enum(variable: TelemetryVariable, table: Mapping[int, str]) -> str:
    """Look up the label of an enumerated variable; unknown codes are data errors."""
    code = variable.as_int()
    if code not in table:
        raise UnparseableDataError(variable.label, variable.raw)
    return table[code]


def render_value(variable: TelemetryVariable) -> str:
    """Decode a variable for display, including its unit."""
    if variable.decoding is Decoding.TENTHS:
        return f"{decode_tenths(variable.as_int())}{variable.unit}"
    if variable.decoding is Decoding.INTEGER:
        return f"{variable.as_int()}{variable.unit}"
    return variable.as_text()


def _variable(variables: Variables, name: str) -> TelemetryVariable:
    """Return the named variable, or an absent one if the mapping lacks it."""
    found = variables.get(name)
    if found is not None:
        return found
    spec = VARIABLES[name]
    return TelemetryVariable(
        name=spec.name, oid=spec.oid, label=spec.label, decoding=spec.decoding, unit=spec.unit
    )


def _alert_range(bound: float, direction: Direction) -> str:
    """Nagios range that alerts on the bound itself and everything worse."""
    if direction is Direction.LOW:
        return f"@~:{bound:g}"
    return f"@{bound:g}:"


def _perf(label: str, value: float, unit: str, bounds: Optional[Bounds] = None,
          decimals: Optional[int] = None) -> PerfDatum:
    if bounds is None:
        return PerfDatum(label=label, value=value, unit=unit, decimals=decimals)
    return PerfDatum(
        label=label, value=value, unit=unit, decimals=decimals,
        warning=_alert_range(bounds.warning, bounds.direction),
        critical=_alert_range(bounds.critical, bounds.direction),
    )


def _voltage_perf(label: str, value: float, bounds: VoltageBounds) -> List[PerfDatum]:
    # one datum per side; a Nagios range cannot alert inclusively on both ends
    return [_perf(f"{label}_{side}", value, "", side_bounds)
            for side, side_bounds in (("low", bounds.low), ("high", bounds.high))]


def _data_problem(error: DataError) -> EvaluationResult:
    return EvaluationResult(severity=Severity.WARNING, lines=(str(error),))


def transport_failure(error: Optional[TransportError] = None) -> EvaluationResult:
    """Uniform result for any failure to query the device."""
    lines: List[str] = [TRANSPORT_FAILURE_MESSAGE]
    if error is not None and str(error):
        lines.append(str(error))
    return EvaluationResult(severity=Severity.CRITICAL, lines=tuple(lines))


# ===== Rules =====

@rule(CheckCategory.INFO)
def check_info(variables: Variables, thresholds: ThresholdSet) -> EvaluationResult:
    """Describe the device. Purely informational."""
    lines = []
    for name in CATEGORY_VARIABLES[CheckCategory.INFO]:
        variable = _variable(variables, name)
        if not variable.present or not variable.as_text():
            continue
        if variable.decoding is Decoding.ENUM:
            try:
                text = decode_enum(variable, OUTPUT_SOURCE)
            except UnparseableDataError:
                text = f"unknown code {variable.as_text()}"
        else:
            text = variable.as_text()
        lines.append(f"{variable.label}: {text}")

    if not lines:
        return EvaluationResult(severity=Severity.WARNING, lines=("no information returned",))
    return EvaluationResult(severity=Severity.OK, lines=tuple(lines))


@rule(CheckCategory.STATUS)
def check_status(variables: Variables, thresholds: ThresholdSet) -> EvaluationResult:
    variable = _variable(variables, "upsOutputSource")
    try:
        label = decode_enum(variable, OUTPUT_SOURCE)
    except MissingDataError:
        return EvaluationResult(severity=Severity.WARNING, lines=("no output source status returned",))
    except UnparseableDataError as e:
        return _data_problem(e)

    severity = OUTPUT_SOURCE_SEVERITY.get(variable.as_int(), Severity.WARNING)
    return EvaluationResult(severity=severity, lines=(f"output source {label}",))


@rule(CheckCategory.BATTERY)
def check_battery(variables: Variables, thresholds: ThresholdSet) -> EvaluationResult:
    """
    Battery health from the estimated charge.

    The battery status code is descriptive only; runtime is reported when
    the agent provides it.
    """
    try:
        charge = _variable(variables, "upsEstimatedChargeRemaining").as_int()
        voltage = _variable(variables, "upsBatteryVoltage").as_int()
    except MissingDataError:
        return EvaluationResult(severity=Severity.WARNING, lines=("no battery information returned",))
    except UnparseableDataError as e:
        return _data_problem(e)

    findings = [bounded_classify(charge, thresholds.charge)]

    status = _variable(variables, "upsBatteryStatus")
    try:
        status_line = f"battery status {decode_enum(status, BATTERY_STATUS)}"
    except MissingDataError:
        status_line = "battery status unavailable"
    except UnparseableDataError as e:
        status_line = str(e)
        findings.append(Severity.WARNING)

    lines = [status_line, f"charge {charge}%", f"voltage {decode_tenths(voltage)}V"]
    perfdata = [
        _perf("charge", charge, "%", thresholds.charge),
        _perf("battery_voltage", voltage / 10, "V", decimals=1),
    ]

    runtime = _variable(variables, "upsEstimatedMinutesRemaining")
    if runtime.present:
        try:
            minutes = runtime.as_int()
        except UnparseableDataError as e:
            lines.append(str(e))
            findings.append(Severity.WARNING)
        else:
            lines.append(f"{minutes} minutes remaining")
            perfdata.append(_perf("runtime", minutes, "min"))

    return EvaluationResult(
        severity=Severity.worst(*findings), lines=tuple(lines), perfdata=tuple(perfdata)
    )


def _single_metric(variable: TelemetryVariable, bounds: Bounds, perf_label: str,
                   describe: str) -> EvaluationResult:
    try:
        value = variable.as_int()
    except DataError as e:
        return _data_problem(e)
    return EvaluationResult(
        severity=bounded_classify(value, bounds),
        lines=(f"{describe} {value}{variable.unit}",),
        perfdata=(_perf(perf_label, value, "", bounds),),
    )


@rule(CheckCategory.TEMPERATURE)
def check_temperature(variables: Variables, thresholds: ThresholdSet) -> EvaluationResult:
    variable = _variable(variables, "upsBatteryTemperature")
    return _single_metric(variable, thresholds.temperature, "temperature", "battery temperature")


@rule(CheckCategory.LOAD)
def check_load(variables: Variables, thresholds: ThresholdSet) -> EvaluationResult:
    variable = _variable(variables, "upsOutputPercentLoad")
    return _single_metric(variable, thresholds.load, "load", "output load")


def _check_power_line(side: str, names: Sequence[str], variables: Variables,
                      thresholds: ThresholdSet) -> EvaluationResult:
    """
    Shared rule for the input and output lines.

    ``names`` lists the voltage variable first, followed by the informational
    ones (current, power, frequency). Only the voltage affects severity,
    unless an informational value cannot be decoded.
    """
    voltage_name, *info_names = names
    try:
        voltage = _variable(variables, voltage_name).as_int()
    except MissingDataError:
        return EvaluationResult(severity=Severity.WARNING, lines=(f"no {side} voltage data received",))
    except UnparseableDataError as e:
        return _data_problem(e)

    findings = [classify_voltage(voltage, thresholds.voltage)]
    lines = [f"{side} voltage {voltage}V"]
    perfdata = _voltage_perf(f"{side}_voltage", voltage, thresholds.voltage)

    for name in info_names:
        variable = _variable(variables, name)
        try:
            lines.append(f"{side} {variable.label} {render_value(variable)}")
        except MissingDataError as e:
            lines.append(str(e))
        except UnparseableDataError as e:
            lines.append(str(e))
            findings.append(Severity.WARNING)

    return EvaluationResult(
        severity=Severity.worst(*findings), lines=tuple(lines), perfdata=tuple(perfdata)
    )


@rule(CheckCategory.INPUT)
def check_input(variables: Variables, thresholds: ThresholdSet) -> EvaluationResult:
    return _check_power_line("input", CATEGORY_VARIABLES[CheckCategory.INPUT], variables, thresholds)


@rule(CheckCategory.OUTPUT)
def check_output(variables: Variables, thresholds: ThresholdSet) -> EvaluationResult:
    return _check_power_line("output", CATEGORY_VARIABLES[CheckCategory.OUTPUT], variables, thresholds)


def evaluate(category: CheckCategory, variables: Variables,
             thresholds: Optional[ThresholdSet] = None) -> EvaluationResult:
    """
    Classify the device condition for one check category.

    Args:
        category: The check to run.
        variables: Decoded telemetry keyed by MIB object name.
        thresholds: Threshold overrides; built-in defaults when omitted.

    Returns:
        The EvaluationResult for this invocation.
    """
    category = CheckCategory(category)
    check = RULES.get(category)
    if check is None:
        raise ValueError(f"No evaluation rule for category: {category.value}")
    result = check(variables, thresholds or ThresholdSet())
    logger.debug("Evaluated %s check: %s", category.value, result.severity.name)
    return result
