"""
Pool Balance - Parameter Dose Guides

Quick-reference doses from the current reading to a handful of common
targets, with the ideal / acceptable ranges shown next to each parameter.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from poolbalance.services.dosing import (
    Dose,
    sodium_bicarbonate_guide_lbs,
    calcium_chloride_lbs,
    acid_dose_pool_factor,
    soda_ash_dose,
)

ALKALINITY_TARGETS = [80, 100, 120]
ALKALINITY_ACCEPTABLE = (60, 140)
ALKALINITY_IDEAL = (80, 120)

CALCIUM_TARGETS = [300, 400, 500]
CALCIUM_ACCEPTABLE = (200, 800)
CALCIUM_IDEAL = (300, 500)

PH_ACID_TARGETS = [7.8, 7.6, 7.4, 7.2]
PH_SODA_ASH_TARGETS = [7.2, 7.4, 7.6, 7.8]


@dataclass
class GuideRow:
    target: float
    amount: float
    unit: str
    text: Optional[str] = None


@dataclass
class DoseGuide:
    parameter: str
    current: float
    acceptable_range: Optional[tuple] = None
    ideal_range: Optional[tuple] = None
    rows: List[GuideRow] = field(default_factory=list)


def alkalinity_guide(current_alk, gallons) -> DoseGuide:
    guide = DoseGuide("alkalinity", current_alk, ALKALINITY_ACCEPTABLE, ALKALINITY_IDEAL)
    for target in ALKALINITY_TARGETS:
        lbs = sodium_bicarbonate_guide_lbs(target - current_alk, gallons) if target > current_alk else 0.0
        text = f"{lbs:.2f} lbs sodium bicarbonate" if lbs > 0 else None
        guide.rows.append(GuideRow(target, lbs, "lbs", text))
    return guide


def calcium_guide(current_ch, gallons) -> DoseGuide:
    guide = DoseGuide("calcium", current_ch, CALCIUM_ACCEPTABLE, CALCIUM_IDEAL)
    for target in CALCIUM_TARGETS:
        lbs = calcium_chloride_lbs(target - current_ch, gallons) if target > current_ch else 0.0
        text = f"{lbs:.2f} lbs calcium chloride" if lbs > 0 else None
        guide.rows.append(GuideRow(target, lbs, "lbs", text))
    return guide


def ph_guide(current_ph, gallons, alkalinity, ph_range=None) -> DoseGuide:
    """Acid rows for targets below the reading, soda ash rows for targets above"""
    acceptable = (ph_range.min, ph_range.max) if ph_range is not None else None
    guide = DoseGuide("ph", current_ph, acceptable, None)

    def _row(target, dose: Optional[Dose]):
        if dose:
            guide.rows.append(GuideRow(target, dose.amount, dose.unit, dose.text))

    for target in PH_ACID_TARGETS:
        if current_ph > target:
            _row(target, acid_dose_pool_factor(current_ph, target, gallons, alkalinity))
    for target in PH_SODA_ASH_TARGETS:
        if current_ph < target:
            _row(target, soda_ash_dose(current_ph, target, gallons))
    return guide
