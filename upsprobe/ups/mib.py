"""
Catalog of the SNMP variables queried by each check.

OIDs come from the MIB-II system group and the UPS-MIB (RFC 1628). Table
columns are read for the first line (index .1) only.
"""

from dataclasses import dataclass
from typing import Dict, List

from .models import CheckCategory, Decoding

SYSTEM = "1.3.6.1.2.1.1"
UPS_MIB = "1.3.6.1.2.1.33.1"


@dataclass(frozen=True)
class VariableSpec:
    name: str
    oid: str
    label: str
    decoding: Decoding = Decoding.TEXT
    unit: str = ""


VARIABLES: Dict[str, VariableSpec] = {
    spec.name: spec
    for spec in [
        VariableSpec("sysName", f"{SYSTEM}.5.0", "name"),
        VariableSpec("sysContact", f"{SYSTEM}.4.0", "contact"),
        VariableSpec("sysLocation", f"{SYSTEM}.6.0", "location"),
        VariableSpec("upsIdentName", f"{UPS_MIB}.1.5.0", "UPS name"),
        VariableSpec("upsIdentUPSSoftwareVersion", f"{UPS_MIB}.1.3.0", "firmware version"),
        VariableSpec("upsBatteryStatus", f"{UPS_MIB}.2.1.0", "battery status", Decoding.ENUM),
        VariableSpec("upsEstimatedMinutesRemaining", f"{UPS_MIB}.2.3.0", "runtime", Decoding.INTEGER, "min"),
        VariableSpec("upsEstimatedChargeRemaining", f"{UPS_MIB}.2.4.0", "battery charge", Decoding.INTEGER, "%"),
        VariableSpec("upsBatteryVoltage", f"{UPS_MIB}.2.5.0", "battery voltage", Decoding.TENTHS, "V"),
        VariableSpec("upsBatteryTemperature", f"{UPS_MIB}.2.7.0", "temperature", Decoding.INTEGER, "C"),
        VariableSpec("upsInputFrequency", f"{UPS_MIB}.3.3.1.2.1", "frequency", Decoding.TENTHS, "Hz"),
        VariableSpec("upsInputVoltage", f"{UPS_MIB}.3.3.1.3.1", "voltage", Decoding.INTEGER, "V"),
        VariableSpec("upsInputCurrent", f"{UPS_MIB}.3.3.1.4.1", "current", Decoding.TENTHS, "A"),
        VariableSpec("upsInputTruePower", f"{UPS_MIB}.3.3.1.5.1", "power", Decoding.INTEGER, "W"),
        VariableSpec("upsOutputSource", f"{UPS_MIB}.4.1.0", "output source", Decoding.ENUM),
        VariableSpec("upsOutputFrequency", f"{UPS_MIB}.4.2.0", "frequency", Decoding.TENTHS, "Hz"),
        VariableSpec("upsOutputVoltage", f"{UPS_MIB}.4.4.1.2.1", "voltage", Decoding.INTEGER, "V"),
        VariableSpec("upsOutputCurrent", f"{UPS_MIB}.4.4.1.3.1", "current", Decoding.TENTHS, "A"),
        VariableSpec("upsOutputPower", f"{UPS_MIB}.4.4.1.4.1", "power", Decoding.INTEGER, "W"),
        VariableSpec("upsOutputPercentLoad", f"{UPS_MIB}.4.4.1.5.1", "load", Decoding.INTEGER, "%"),
    ]
}

CATEGORY_VARIABLES: Dict[CheckCategory, List[str]] = {
    CheckCategory.INFO: [
        "sysName", "upsIdentName", "sysLocation", "sysContact",
        "upsIdentUPSSoftwareVersion", "upsOutputSource",
    ],
    CheckCategory.STATUS: ["upsOutputSource"],
    CheckCategory.BATTERY: [
        "upsBatteryStatus", "upsEstimatedChargeRemaining",
        "upsBatteryVoltage", "upsEstimatedMinutesRemaining",
    ],
    CheckCategory.TEMPERATURE: ["upsBatteryTemperature"],
    CheckCategory.INPUT: [
        "upsInputVoltage", "upsInputCurrent", "upsInputTruePower", "upsInputFrequency",
    ],
    CheckCategory.OUTPUT: [
        "upsOutputVoltage", "upsOutputCurrent", "upsOutputPower", "upsOutputFrequency",
    ],
    CheckCategory.LOAD: ["upsOutputPercentLoad"],
}

# upsOutputSource
OUTPUT_SOURCE: Dict[int, str] = {
    1: "Other",
    2: "None",
    3: "Normal",
    4: "Bypass",
    5: "Battery",
    6: "Booster",
    7: "Reducer",
}

# upsBatteryStatus
BATTERY_STATUS: Dict[int, str] = {
    1: "Unknown",
    2: "Normal",
    3: "Low",
    4: "Depleted",
}


def variables_for(category: CheckCategory) -> List[VariableSpec]:
    """Return the variable specs fetched for a check category."""
    return [VARIABLES[name] for name in CATEGORY_VARIABLES[category]]
