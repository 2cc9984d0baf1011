"""
Configuration management for upsprobe.

This module uses Pydantic's BaseSettings to read SNMP defaults and check
thresholds from environment variables (or a .env file). Command line options
override these values for a single invocation.
"""
from typing import Any, Dict, Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from upsprobe.ups.errors import ConfigurationError
from upsprobe.ups.models import Bounds, Direction, ThresholdSet, VoltageBounds


class Settings(BaseSettings):
    """
    Probe settings.

    These settings are loaded from UPSPROBE_* environment variables.
    """

    # SNMP
    COMMUNITY: str = "public"
    PORT: int = 161
    TIMEOUT: float = 15.0

    # Battery charge (%), lower is worse
    CHARGE_WARNING: float = 70
    CHARGE_CRITICAL: float = 40

    # Battery temperature (C), higher is worse
    TEMPERATURE_WARNING: float = 50
    TEMPERATURE_CRITICAL: float = 60

    # Output load (%), higher is worse
    LOAD_WARNING: float = 75
    LOAD_CRITICAL: float = 85

    # Input/output voltage (V), two-sided
    VOLTAGE_LOW_WARNING: float = 115
    VOLTAGE_LOW_CRITICAL: float = 110
    VOLTAGE_HIGH_WARNING: float = 125
    VOLTAGE_HIGH_CRITICAL: float = 130

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_prefix="UPSPROBE_",
        extra="ignore",
    )

    def thresholds(self, overrides: Optional[Dict[str, Any]] = None) -> ThresholdSet:
        """
        Build the ThresholdSet, applying per-invocation overrides.

        Args:
            overrides: Setting names mapped to values; None values are ignored.

        Raises:
            ConfigurationError: If any pair of bounds is inverted or equal.
        """
        values = self.model_dump()
        values.update({key: value for key, value in (overrides or {}).items() if value is not None})
        try:
            return ThresholdSet(
                charge=Bounds(
                    warning=values["CHARGE_WARNING"],
                    critical=values["CHARGE_CRITICAL"],
                    direction=Direction.LOW,
                ),
                temperature=Bounds(
                    warning=values["TEMPERATURE_WARNING"],
                    critical=values["TEMPERATURE_CRITICAL"],
                    direction=Direction.HIGH,
                ),
                load=Bounds(
                    warning=values["LOAD_WARNING"],
                    critical=values["LOAD_CRITICAL"],
                    direction=Direction.HIGH,
                ),
                voltage=VoltageBounds(
                    low_warning=values["VOLTAGE_LOW_WARNING"],
                    low_critical=values["VOLTAGE_LOW_CRITICAL"],
                    high_warning=values["VOLTAGE_HIGH_WARNING"],
                    high_critical=values["VOLTAGE_HIGH_CRITICAL"],
                ),
            )
        except ValidationError as e:
            messages = "; ".join(error["msg"].removeprefix("Value error, ") for error in e.errors())
            raise ConfigurationError(f"Invalid thresholds: {messages}") from e


def get_settings() -> Settings:
    """Load settings, turning validation problems into a ConfigurationError."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid UPSPROBE_* environment configuration: {e}") from e
