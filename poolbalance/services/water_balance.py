"""
Pool Balance - Water Balance Sequencer

Builds the ordered adjustment plan that takes a pool from its tested
chemistry to its golden numbers.

Order is fixed: alkalinity, calcium, CYA, pH. Bicarbonate raises pH and
stabilizer lowers it, so the anticipated pH is carried from step to step
and secondary acid / soda ash doses are suggested where needed.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from poolbalance.services.dosing import (
    Dose,
    describe,
    acid_dose,
    soda_ash_dose,
    alkalinity_dose,
    calcium_dose,
    cya_dose,
    acid_dose_for_alkalinity,
    split_dose,
)
from poolbalance.services.lsi import compute_lsi

logger = logging.getLogger(__name__)

# Overrides for badly out-of-balance water (ppm)
SUPER_HIGH_ALKALINITY = 180
SUPER_HIGH_CALCIUM = 600
HIGH_CALCIUM = 400
ALK_PRIORITY_CALCIUM_LIMIT = 500
STAGED_ALKALINITY_TARGET = 100
STAGED_ALKALINITY_DAYS = 3
HIGH_CALCIUM_PH_TARGET = 7.2
SCALING_LSI = 0.5

# Empirical pH side effects, per 10 ppm
PH_RISE_PER_10PPM_BICARB = 0.03
PH_DROP_PER_10PPM_CYA = 0.07

WATER_BALANCE_KEYS = ("alkalinity", "calcium", "cya")

LABELS = {
    "alkalinity": "Total Alkalinity",
    "calcium": "Calcium Hardness",
    "cya": "Cyanuric Acid",
    "ph": "pH",
}

STAGED_ALKALINITY_NOTE = (
    "Alkalinity is extremely high. Lower alkalinity in stages over 3 days "
    "before adjusting other parameters."
)
HIGH_CALCIUM_NOTE = "Calcium is extremely high. Lower pH target to 7.2 for LSI balance."
SCALING_NOTE = "LSI is in extreme scaling condition (>0.5). Prioritize lowering alkalinity and pH."


@dataclass
class DosingStep:
    parameter: str
    label: str
    current_value: float
    target_value: float
    dose: Optional[Dose] = None
    dose_description: str = ""
    anticipated_ph: Optional[float] = None
    anticipated_ph_shift: Optional[float] = None
    secondary_acid_dose: Optional[Dose] = None
    secondary_soda_ash_dose: Optional[Dose] = None
    note: Optional[str] = None

    def __post_init__(self):
        if not self.dose_description:
            self.dose_description = describe(self.dose)

    @property
    def needs_adjustment(self) -> bool:
        return self.dose is not None


@dataclass
class DosingPlan:
    steps: List[DosingStep] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    target_ph: Optional[float] = None
    lsi: Optional[float] = None
    staged: bool = False  # extreme-alkalinity override, everything else deferred


@dataclass
class PhAdjustment:
    chemical: str  # "acid" or "soda_ash"
    dose: Dose
    from_ph: float
    to_ph: float
    wait_note: Optional[str] = None


@dataclass
class TodayPlan:
    water_balance_step: Optional[DosingStep] = None
    ph_adjustments: List[PhAdjustment] = field(default_factory=list)
    deferred: List[str] = field(default_factory=list)
    shock: Optional[object] = None
    all_clear: bool = False
    message: str = ""


@dataclass
class DayPlanEntry:
    day: int
    parameter: str
    label: str


def estimate_ph_rise_from_bicarb(alkalinity_increase: float) -> float:
    return (alkalinity_increase / 10) * PH_RISE_PER_10PPM_BICARB


def estimate_ph_drop_from_cya(cya_increase: float) -> float:
    return (cya_increase / 10) * PH_DROP_PER_10PPM_CYA


def plan_dosing(reading, targets, pool_volume: Optional[float] = None) -> DosingPlan:
    """
    Ordered dosing steps for a reading.

    Args:
        reading: WaterReading
        targets: GoldenNumbers (already merged with any per-call overrides)
        pool_volume: gallons; defaults to the reading's volume

    Returns:
        DosingPlan with one step per parameter (alkalinity, calcium, CYA, pH),
        or a single staged alkalinity step when alkalinity is extremely high.
    """
    gallons = pool_volume if pool_volume is not None else reading.pool_volume_gallons
    alk = reading.alkalinity
    calcium = reading.calcium_hardness
    cya = reading.cyanuric_acid
    ph = reading.ph

    target_ph = targets.ph
    lsi = compute_lsi(reading).lsi
    plan = DosingPlan(lsi=lsi)

    # 1. Extreme alkalinity dominates; stage it and defer everything else
    if alk > SUPER_HIGH_ALKALINITY and calcium < ALK_PRIORITY_CALCIUM_LIMIT:
        total = acid_dose_for_alkalinity(alk, STAGED_ALKALINITY_TARGET, gallons)
        plan.steps.append(DosingStep(
            parameter="alkalinity",
            label=LABELS["alkalinity"],
            current_value=alk,
            target_value=STAGED_ALKALINITY_TARGET,
            dose=split_dose(total, STAGED_ALKALINITY_DAYS),
            note=STAGED_ALKALINITY_NOTE,
        ))
        plan.notes.append(STAGED_ALKALINITY_NOTE)
        plan.target_ph = target_ph
        plan.staged = True
        logger.info(f"Alkalinity {alk} ppm: staged acid plan, other adjustments deferred")
        return plan

    # 2. Very hard water pulls LSI up; aim pH lower to compensate
    if calcium > SUPER_HIGH_CALCIUM or (alk > SUPER_HIGH_ALKALINITY and calcium > HIGH_CALCIUM):
        target_ph = HIGH_CALCIUM_PH_TARGET
        plan.notes.append(HIGH_CALCIUM_NOTE)

    # 3. Scaling warning only, steps unchanged
    if lsi > SCALING_LSI and (alk > targets.alkalinity or ph > target_ph):
        plan.notes.append(SCALING_NOTE)

    plan.target_ph = target_ph

    # --- Alkalinity ---
    alk_step = DosingStep(
        parameter="alkalinity",
        label=LABELS["alkalinity"],
        current_value=alk,
        target_value=targets.alkalinity,
        dose=alkalinity_dose(alk, targets.alkalinity, gallons),
    )
    anticipated_ph = ph
    if alk_step.dose:
        increase = targets.alkalinity - alk
        rise = estimate_ph_rise_from_bicarb(increase)
        anticipated_ph = round(ph + rise, 2)
        alk_step.anticipated_ph = anticipated_ph
        alk_step.anticipated_ph_shift = round(rise, 2)

        note = (
            f"Adding sodium bicarbonate to raise alkalinity by {increase:g} ppm is expected to raise pH "
            f"from {ph:g} to approximately {anticipated_ph:g}."
        )
        if anticipated_ph > target_ph:
            alk_step.secondary_acid_dose = acid_dose(anticipated_ph, target_ph, gallons, targets.alkalinity)
            note += (
                f" After the bicarb is fully dispersed, wait 15 - 30 minutes, test pH and add acid as needed "
                f"to bring pH down to {target_ph:g}. Recommended acid dose: "
                f"{describe(alk_step.secondary_acid_dose)}."
            )
        elif anticipated_ph < target_ph:
            alk_step.secondary_soda_ash_dose = soda_ash_dose(anticipated_ph, target_ph, gallons)
        alk_step.note = note
        plan.notes.append(note)
    plan.steps.append(alk_step)

    # --- Calcium hardness ---
    plan.steps.append(DosingStep(
        parameter="calcium",
        label=LABELS["calcium"],
        current_value=calcium,
        target_value=targets.calcium,
        dose=calcium_dose(calcium, targets.calcium, gallons),
    ))

    # --- CYA (pH drop chains off the post-bicarb pH) ---
    cya_step = DosingStep(
        parameter="cya",
        label=LABELS["cya"],
        current_value=cya,
        target_value=targets.cya,
        dose=cya_dose(cya, targets.cya, gallons),
    )
    if cya_step.dose:
        increase = targets.cya - cya
        drop = estimate_ph_drop_from_cya(increase)
        after_cya = round(anticipated_ph - drop, 2)
        cya_step.anticipated_ph = after_cya
        cya_step.anticipated_ph_shift = -round(drop, 2)

        note = (
            f"Adding cyanuric acid to raise CYA by {increase:g} ppm is expected to lower pH "
            f"from {anticipated_ph:g} to approximately {after_cya:g}."
        )
        if after_cya < target_ph:
            cya_step.secondary_soda_ash_dose = soda_ash_dose(after_cya, target_ph, gallons)
            note += (
                f" After the CYA is fully dispersed, wait 15 - 30 minutes, test pH and add soda ash as needed "
                f"to bring pH up to {target_ph:g}. Recommended soda ash dose: "
                f"{describe(cya_step.secondary_soda_ash_dose)}."
            )
        cya_step.note = note
        plan.notes.append(note)
    plan.steps.append(cya_step)

    # --- pH ---
    ph_dose = None
    if ph > target_ph:
        ph_dose = acid_dose(ph, target_ph, gallons, alk)
    elif ph < target_ph:
        ph_dose = soda_ash_dose(ph, target_ph, gallons)
    plan.steps.append(DosingStep(
        parameter="ph",
        label=LABELS["ph"],
        current_value=ph,
        target_value=target_ph,
        dose=ph_dose,
    ))

    logger.debug(f"Dosing plan: {[(s.parameter, s.dose_description) for s in plan.steps]}")
    return plan


def _ph_adjustment(step: DosingStep, after: Optional[str] = None) -> PhAdjustment:
    chemical = "acid" if step.current_value > step.target_value else "soda_ash"
    wait = f"Wait 15 - 30 minutes before adjusting pH after adding {after}." if after else None
    return PhAdjustment(chemical, step.dose, step.current_value, step.target_value, wait)


def summarize_today(plan: DosingPlan, breakpoint=None) -> TodayPlan:
    """
    What to add at today's visit: the first water balance adjustment with its
    paired pH correction. Remaining out-of-range parameters are deferred to
    later visits.
    """
    today = TodayPlan()

    pending = [
        s for s in plan.steps
        if s.parameter in WATER_BALANCE_KEYS and s.dose and s.current_value != s.target_value
    ]
    ph_step = next((s for s in plan.steps if s.parameter == "ph" and s.dose), None)
    target_ph = plan.target_ph

    first = pending[0] if pending else None
    today.water_balance_step = first
    today.deferred = [s.label for s in pending[1:]]

    if first and first.parameter == "alkalinity":
        if first.secondary_acid_dose:
            today.ph_adjustments.append(PhAdjustment(
                "acid", first.secondary_acid_dose, first.anticipated_ph, target_ph,
                "Wait 15 - 30 minutes to adjust pH after adding sodium bicarbonate.",
            ))
        if first.secondary_soda_ash_dose:
            today.ph_adjustments.append(PhAdjustment(
                "soda_ash", first.secondary_soda_ash_dose, first.anticipated_ph, target_ph,
                "Wait 15 - 30 minutes before adjusting pH after adding sodium bicarbonate.",
            ))
    elif first and first.parameter == "calcium":
        if ph_step:
            today.ph_adjustments.append(_ph_adjustment(ph_step, "calcium chloride"))
    elif first and first.parameter == "cya":
        if first.secondary_soda_ash_dose:
            today.ph_adjustments.append(PhAdjustment(
                "soda_ash", first.secondary_soda_ash_dose, first.anticipated_ph, target_ph,
                "Wait 15 - 30 minutes before adjusting pH after adding cyanuric acid.",
            ))
    elif ph_step:
        today.ph_adjustments.append(_ph_adjustment(ph_step))

    if breakpoint is not None and breakpoint.shock_needed:
        today.shock = breakpoint

    if not first and not ph_step and today.shock is None:
        today.all_clear = True
        today.message = "All parameters are within target range. No chemical additions needed today."
    elif today.deferred:
        today.message = (
            f"Other parameters ({', '.join(today.deferred)}) should be adjusted in subsequent visits. "
            "Retest the water before making adjustments."
        )

    return today


def day_by_day(plan: DosingPlan) -> List[DayPlanEntry]:
    """Out-of-range water balance parameters, one per day, in plan order"""
    out_of_range = [
        s for s in plan.steps
        if s.parameter in WATER_BALANCE_KEYS and s.current_value != s.target_value
    ]
    return [DayPlanEntry(i + 1, s.parameter, s.label) for i, s in enumerate(out_of_range)]
