"""
Pool Balance - Water Test Reading

Parses the flat test-sheet record into an immutable WaterReading.
"""

import math
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from poolbalance.core.config import DEFAULT_TDS
from poolbalance.core.decorators import InvalidInputError

logger = logging.getLogger(__name__)

# Physical pH range. Pool water normally reads 6.4 - 8.4, but readings
# outside that band are real (acid overdose, fill water) and are kept so the
# dosing advice can correct them.
PH_FLOOR = 0.0
PH_CEILING = 14.0

# Form key -> WaterReading field
REQUIRED_FIELDS = {
    "capacity": "pool_volume_gallons",
    "ph": "ph",
    "alkalinity": "alkalinity",
    "calcium": "calcium_hardness",
    "temperature": "temperature_f",
    "cyanuric": "cyanuric_acid",
    "freechlorine": "free_chlorine",
}


@dataclass(frozen=True)
class WaterReading:
    """One water test. All concentrations in ppm."""
    ph: float
    free_chlorine: float
    alkalinity: float
    calcium_hardness: float
    cyanuric_acid: float
    temperature_f: float
    pool_volume_gallons: float
    total_chlorine: Optional[float] = None
    total_dissolved_solids: float = DEFAULT_TDS
    salt_level: Optional[float] = None
    target_salt_level: Optional[float] = None

    @property
    def combined_chlorine(self) -> float:
        if self.total_chlorine is None:
            return 0.0
        return max(self.total_chlorine - self.free_chlorine, 0.0)


def to_number(value) -> Optional[float]:
    """Returns a finite float, or None when the value is blank / unusable"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_reading(form: Dict) -> WaterReading:
    """
    Builds a WaterReading from a flat form record.

    Required: capacity, ph, alkalinity, calcium, temperature, cyanuric,
    freechlorine. Optional: totalchlorine, tds, salt-current, salt-desired.

    Raises InvalidInputError (one aggregate message) when a required field
    is absent, non-numeric, negative, or the capacity is not positive.
    pH is clamped to the physical 0 - 14 scale, not to the usual pool band.
    """
    values = {}
    bad_fields = []

    for key, attr in REQUIRED_FIELDS.items():
        number = to_number(form.get(key))
        if number is None or number < 0:
            bad_fields.append(key)
            continue
        values[attr] = number

    optional = {
        "totalchlorine": "total_chlorine",
        "tds": "total_dissolved_solids",
        "salt-current": "salt_level",
        "salt-desired": "target_salt_level",
    }
    for key, attr in optional.items():
        raw = form.get(key)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue
        number = to_number(raw)
        if number is None or number < 0:
            bad_fields.append(key)
            continue
        values[attr] = number

    if values.get("pool_volume_gallons") == 0:
        bad_fields.append("capacity")

    if bad_fields:
        logger.warning(f"Rejected reading, unusable fields: {bad_fields}")
        raise InvalidInputError(payload={"fields": bad_fields})

    ph = values["ph"]
    clamped = min(max(ph, PH_FLOOR), PH_CEILING)
    if clamped != ph:
        logger.warning(f"pH {ph} outside physical range, clamped to {clamped}")
        values["ph"] = clamped

    return WaterReading(**values)
