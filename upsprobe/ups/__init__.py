"""
UPS check package.

This package provides the telemetry fetcher and the check evaluation engine:
- Pydantic models for severities, telemetry, thresholds and results
- The SNMP variable catalog per check category
- The evaluation rules for every check category
"""

from .models import (
    Severity, CheckCategory, Direction, TelemetryVariable, Bounds,
    VoltageBounds, ThresholdSet, EvaluationResult
)
from .evaluator import evaluate, bounded_classify, classify_voltage, transport_failure
from .fetcher import TelemetryFetcher

__all__ = [
    "Severity", "CheckCategory", "Direction", "TelemetryVariable", "Bounds",
    "VoltageBounds", "ThresholdSet", "EvaluationResult", "evaluate",
    "bounded_classify", "classify_voltage", "transport_failure", "TelemetryFetcher"
]
