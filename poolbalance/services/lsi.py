"""
Pool Balance - Langelier Saturation Index

LSI = pH + calcium factor + alkalinity factor + temperature factor - TDS factor

Factors come from the standard pool-industry step tables. Alkalinity is
corrected for cyanurate alkalinity (CYA / 3) before lookup.
"""

import logging
from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

# (threshold, factor) pairs, ascending by threshold
ALKALINITY_FACTORS = [
    (5, 0.7), (25, 1.4), (50, 1.7), (75, 1.9), (100, 2.0), (125, 2.1),
    (150, 2.2), (200, 2.3), (250, 2.4), (300, 2.5), (400, 2.6), (800, 2.9),
    (1000, 3.0),
]

CALCIUM_FACTORS = [
    (5, 0.3), (25, 1.0), (50, 1.3), (75, 1.5), (100, 1.6), (125, 1.7),
    (150, 1.8), (200, 1.9), (250, 2.0), (300, 2.1), (400, 2.2), (800, 2.5),
    (1000, 2.6),
]

# Degrees Fahrenheit
TEMPERATURE_FACTORS = [
    (32, 0.1), (37, 0.1), (46, 0.2), (53, 0.3), (60, 0.4), (66, 0.5),
    (76, 0.6), (84, 0.7), (94, 0.8), (104, 0.9), (128, 1.0),
]

TDS_FACTORS = [
    (800, 12.1), (1500, 12.2), (2900, 12.3), (5500, 12.4), (float("inf"), 12.5),
]

# Six-band status classification
VERY_CORROSIVE = "Very Corrosive"
CORROSIVE = "Corrosive"
SLIGHTLY_CORROSIVE = "Slightly Corrosive"
BALANCED = "Balanced"
SLIGHTLY_SCALE_FORMING = "Slightly Scale Forming"
SCALE_FORMING = "Scale Forming"

# Scale view spans -1.0 (corrosive) to +1.0 (scaling)
SCALE_MIN = -1.0
SCALE_MAX = 1.0

# Decimal places the index is reported and classified at
LSI_PRECISION = 2


def lookup_factor(value: float, table: List[Tuple[float, float]]) -> float:
    """
    Ceiling-bucket lookup: factor of the first entry whose threshold is >= value,
    or the last factor when the value is above every threshold.
    """
    for threshold, factor in table:
        if value <= threshold:
            return factor
    return table[-1][1]


def tds_factor(tds: float) -> float:
    return lookup_factor(tds, TDS_FACTORS)


def corrected_alkalinity(alkalinity: float, cya: float) -> float:
    """Carbonate alkalinity: total alkalinity less a third of the CYA, floored at 0"""
    return max(0.0, alkalinity - cya / 3)


@dataclass
class LSIFactors:
    """Inputs and looked-up factors behind one LSI value"""
    ph: float
    alkalinity: float
    corrected_alkalinity: float
    alkalinity_factor: float
    calcium: float
    calcium_factor: float
    temperature_f: float
    temperature_factor: float
    tds: float
    tds_factor: float
    cya: float
    lsi: float = 0.0


@dataclass
class LSIResult:
    lsi: float
    status: str
    factors: LSIFactors


@dataclass
class LSIScaleBand:
    """Position and colour band on the -1.0..+1.0 LSI scale"""
    label: str
    color: str
    position_percent: float


def calculate_lsi_factors(
    ph: float,
    temp_f: float,
    calcium: float,
    alkalinity: float,
    cya: float = 0.0,
    tds: float = 1000.0
) -> LSIFactors:
    corrected = corrected_alkalinity(alkalinity, cya)

    factors = LSIFactors(
        ph=ph,
        alkalinity=alkalinity,
        corrected_alkalinity=corrected,
        alkalinity_factor=lookup_factor(corrected, ALKALINITY_FACTORS),
        calcium=calcium,
        calcium_factor=lookup_factor(calcium, CALCIUM_FACTORS),
        temperature_f=temp_f,
        temperature_factor=lookup_factor(temp_f, TEMPERATURE_FACTORS),
        tds=tds,
        tds_factor=tds_factor(tds),
        cya=cya,
    )
    # Stored and classified at display precision
    factors.lsi = round(
        ph
        + factors.calcium_factor
        + factors.alkalinity_factor
        + factors.temperature_factor
        - factors.tds_factor,
        LSI_PRECISION,
    )
    logger.debug(f"LSI factors: {asdict(factors)}")
    return factors


def classify_lsi(lsi: float) -> str:
    """
    Six-band status used for the water balance verdict.
    Balanced is the closed interval [-0.05, 0.3].
    """
    if lsi < -0.5:
        return VERY_CORROSIVE
    if lsi < -0.2:
        return CORROSIVE
    if lsi < -0.05:
        return SLIGHTLY_CORROSIVE
    if lsi <= 0.3:
        return BALANCED
    if lsi <= 0.5:
        return SLIGHTLY_SCALE_FORMING
    return SCALE_FORMING


def lsi_scale_band(lsi: float) -> LSIScaleBand:
    """
    Band shown on the LSI scale graphic. Cut points sit at -0.3, 0 and +0.3
    and intentionally differ from classify_lsi.
    """
    if lsi < -0.3:
        label, color = "Corrosive", "#d32f2f"
    elif lsi < 0.0:
        label, color = "Caution", "#fbc02d"
    elif lsi <= 0.3:
        label, color = "Balanced", "#388e3c"
    else:
        label, color = "Scaling", "#1976d2"

    percent = (lsi - SCALE_MIN) / (SCALE_MAX - SCALE_MIN) * 100
    return LSIScaleBand(label, color, max(0.0, min(100.0, percent)))


def compute_lsi(reading, cya_override: Optional[float] = None) -> LSIResult:
    """
    LSI and status for a WaterReading. cya_override replaces the tested CYA
    (e.g. to preview the index after a stabilizer dose).
    """
    cya = reading.cyanuric_acid if cya_override is None else cya_override
    factors = calculate_lsi_factors(
        ph=reading.ph,
        temp_f=reading.temperature_f,
        calcium=reading.calcium_hardness,
        alkalinity=reading.alkalinity,
        cya=cya,
        tds=reading.total_dissolved_solids,
    )
    return LSIResult(lsi=factors.lsi, status=classify_lsi(factors.lsi), factors=factors)
