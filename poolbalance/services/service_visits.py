"""
Pool Balance - Service Visit Scheduler

Splits the water balance work for a commercial pool route into what to add
at today's visit and what to leave for the next visits, using each
jurisdiction's golden numbers and (for Florida) its low-level thresholds.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from poolbalance.services.dosing import (
    MIN_DOSE,
    MURIATIC_ACID,
    acid_dose_pool_factor,
    sodium_bicarbonate_lbs,
    calcium_chloride_lbs,
    stabilizer_oz,
    soda_ash_oz,
    format_oz_or_lbs,
)
from poolbalance.services.lsi import corrected_alkalinity

logger = logging.getLogger(__name__)

# Generic (non-threshold) rules
CRITICAL_PH_MIN = 7.2
CRITICAL_PH_MAX = 7.8
LOW_PH_FOR_ALK_FIRST = 7.5
LOW_ALK_FOR_ALK_FIRST = 80
ALK_BAND = (80, 140)
LOW_CALCIUM = 200
CYA_SLACK = 10
PH_TOLERANCE = 0.01

ACID_WAIT_NOTE = "Wait at least 15 minutes and circulate water before adding any other chemicals."
ADD_ACID_FIRST = "(Add immediately after testing.)"


@dataclass
class ServiceAdvice:
    parameter: str
    text: str

    @property
    def is_acid(self) -> bool:
        return MURIATIC_ACID in self.text


@dataclass
class VisitSchedule:
    jurisdiction: str
    targets: Dict[str, float]
    adjust_now: List[ServiceAdvice] = field(default_factory=list)
    next_visit: List[ServiceAdvice] = field(default_factory=list)
    summary: List[str] = field(default_factory=list)
    acid_wait_note: Optional[str] = None


def dosing_advice(value, target, gallons, parameter, alkalinity, thresholds=None) -> str:
    """
    One sentence of dosing advice, or "" when nothing should be added.
    With thresholds, a parameter is only dosed once it falls below its
    jurisdiction threshold.
    """
    diff = target - value

    if parameter in ("alkalinity", "calcium", "cya"):
        if thresholds is None:
            wanted = diff > 0
        elif parameter == "cya":
            wanted = value <= thresholds["cya"]
        else:
            wanted = value < thresholds[parameter]
        if not wanted:
            return ""

    if parameter == "alkalinity":
        lbs = sodium_bicarbonate_lbs(diff, gallons)
        if lbs >= MIN_DOSE:
            return f"Add {lbs:.2f} lbs of sodium bicarbonate to raise alkalinity to {target:g} ppm."

    elif parameter == "calcium":
        lbs = calcium_chloride_lbs(diff, gallons)
        if lbs >= MIN_DOSE:
            return f"Add {lbs:.2f} lbs of calcium chloride to raise calcium hardness to {target:g} ppm."

    elif parameter == "cya":
        oz = stabilizer_oz(diff, gallons)
        if oz >= MIN_DOSE:
            return f"Add {format_oz_or_lbs(oz)} of cyanuric acid (stabilizer) to raise CYA to {target:g} ppm."

    elif parameter == "ph":
        if thresholds is not None and abs(diff) < PH_TOLERANCE:
            return ""
        if diff > 0:
            oz = soda_ash_oz(diff, gallons)
            if oz >= MIN_DOSE:
                return f"Add {format_oz_or_lbs(oz)} of soda ash to raise pH to {target:g}."
        elif diff < 0:
            acid = acid_dose_pool_factor(value, target, gallons, alkalinity)
            if acid:
                return f"Add {acid.text} to lower pH to {target:g}."

    return ""


def _needs(parameter, value, golden, thresholds):
    """Whether a non-critical parameter is low enough to schedule"""
    if parameter == "alkalinity":
        if thresholds:
            return value < thresholds["alkalinity"]
        return value < ALK_BAND[0] or value > ALK_BAND[1]
    if parameter == "cya":
        if thresholds:
            return value <= thresholds["cya"]
        return value < golden.cya - CYA_SLACK
    if parameter == "calcium":
        if thresholds:
            return value < thresholds["calcium"]
        return value < LOW_CALCIUM
    return False


def schedule_service_visits(reading, jurisdiction, pool_volume: Optional[float] = None) -> VisitSchedule:
    """
    Args:
        reading: WaterReading
        jurisdiction: Jurisdiction (golden numbers and optional thresholds)
        pool_volume: gallons; defaults to the reading's volume

    Returns:
        VisitSchedule with today's advice (adjust_now) and deferred advice
        (next_visit). Up to three visit slots are planned; slot 0 is today.
    """
    gallons = pool_volume if pool_volume is not None else reading.pool_volume_gallons
    golden = jurisdiction.golden
    thresholds = jurisdiction.low_thresholds
    ph = reading.ph
    cya = reading.cyanuric_acid
    calcium = reading.calcium_hardness
    corrected_alk = corrected_alkalinity(reading.alkalinity, cya)

    advice = {
        "ph": dosing_advice(ph, golden.ph, gallons, "ph", reading.alkalinity, thresholds),
        "alkalinity": dosing_advice(corrected_alk, golden.alkalinity, gallons, "alkalinity", reading.alkalinity, thresholds),
        "cya": dosing_advice(cya, golden.cya, gallons, "cya", reading.alkalinity, thresholds),
        "calcium": dosing_advice(calcium, golden.calcium, gallons, "calcium", reading.alkalinity, thresholds),
    }

    slots = [[], [], []]
    if ph < LOW_PH_FOR_ALK_FIRST and corrected_alk <= LOW_ALK_FOR_ALK_FIRST and advice["alkalinity"]:
        # Low alkalinity with low pH: bicarb first, it lifts both
        slots[0].append("alkalinity")
        later = [p for p, v in (("cya", cya), ("calcium", calcium)) if _needs(p, v, golden, thresholds)]
        for i, parameter in enumerate(later):
            slots[i + 1].append(parameter)
    else:
        non_critical = [
            p for p, v in (("alkalinity", corrected_alk), ("cya", cya), ("calcium", calcium))
            if _needs(p, v, golden, thresholds)
        ]
        if ph < CRITICAL_PH_MIN or ph > CRITICAL_PH_MAX:
            slots[0].append("ph")
        for i, parameter in enumerate(non_critical):
            slots[i].append(parameter)

    schedule = VisitSchedule(
        jurisdiction=jurisdiction.name,
        targets={"alkalinity": golden.alkalinity, "calcium": golden.calcium, "cya": golden.cya, "ph": golden.ph},
    )
    for idx, parameters in enumerate(slots):
        bucket = schedule.adjust_now if idx == 0 else schedule.next_visit
        for parameter in parameters:
            if advice[parameter]:
                bucket.append(ServiceAdvice(parameter, advice[parameter]))

    logger.debug(
        f"Visit schedule ({jurisdiction.name}): now={[a.parameter for a in schedule.adjust_now]}, "
        f"next={[a.parameter for a in schedule.next_visit]}"
    )
    return schedule


def build_visit_summary(schedule: VisitSchedule, salt=None, weekly_chlorine=None) -> VisitSchedule:
    """
    Orders today's chemicals: acid first (never together with chlorine),
    then salt, the other balancing chemicals and finally the sanitizer.
    """
    summary = []
    for item in schedule.adjust_now:
        if item.is_acid:
            summary.append(f"{item.text} {ADD_ACID_FIRST}")

    if salt is not None:
        summary.append(salt.text)

    for item in schedule.adjust_now:
        if not item.is_acid:
            summary.append(item.text)

    if weekly_chlorine is not None and weekly_chlorine.text:
        summary.append(f"Add {weekly_chlorine.text}.")

    schedule.summary = summary
    schedule.acid_wait_note = ACID_WAIT_NOTE if any(a.is_acid for a in schedule.adjust_now) else None
    return schedule
