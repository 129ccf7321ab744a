"""
Pool Balance - Chlorine Calculators

Breakpoint chlorination (shock), weekly maintenance dose with seasonal UV
loss, and the manual chlorine addition table.
"""

import math
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from poolbalance.services.dosing import FL_OZ_PER_GALLON, OZ_PER_LB, MIN_DOSE, format_lbs_oz

logger = logging.getLogger(__name__)

# Combined chlorine levels (ppm) that call for breakpoint chlorination
SHOCK_WITHIN_72H_CC = 0.6
SHOCK_IMMEDIATE_CC = 1.6
# Breakpoint target is 10x combined chlorine
BREAKPOINT_MULTIPLIER = 10
# lbs of 100% chlorine per 10,000 gal per 1 ppm
CHLORINE_LBS_PER_PPM = 0.0834

# Minimum FC as a fraction of CYA
MIN_FC_CYA_RATIO = 0.05
UV_LOSS_DAYS = 6

# ppm/day of FC lost to sunlight, by calendar month (1 = January)
UV_LOSS_BY_MONTH = {
    11: 1.5, 12: 1.5, 1: 1.5,
    2: 2.0, 3: 2.0,
    4: 2.5, 5: 2.5, 9: 2.5, 10: 2.5,
    6: 3.0, 7: 3.0, 8: 3.0,
}

# 12.5% liquid chlorine weighs about 10 lbs per gallon
LIQUID_LBS_PER_GALLON = 10
# Weekly maintenance conversions: gallons of 12% per ppm per 10k gal,
# oz of cal-hypo per ppm per 10k gal
LIQUID_PPM_PER_GALLON_10K = 12
CAL_HYPO_OZ_PER_PPM_10K = 2.0

DOSE_TABLE_INCREMENT = 0.5

SHOCK_NONE = "none"
SHOCK_WITHIN_72H = "within_72_hours"
SHOCK_IMMEDIATE = "immediate"

RECOMMENDATIONS = {
    SHOCK_IMMEDIATE: (
        "YES - Immediate breakpoint chlorination (shocking) is recommended because combined chlorine "
        "exceeds 1.6 ppm. Dosing at night after the pool closes for the day will be the most effective. "
        "Be sure to backwash right before shocking the pool and again before reopening. Free chlorine "
        "level must be below the state maximum before reopening to swimmers."
    ),
    SHOCK_WITHIN_72H: (
        "YES - Breakpoint chlorination (shock) should be performed within 72 hours right after pool "
        "closes for the day, as combined chlorine exceeds 0.6 ppm. Be sure to backwash right before "
        "shocking the pool and again before reopening. Free chlorine level must be below the state "
        "maximum before reopening to swimmers."
    ),
    SHOCK_NONE: "NO - The pool does not need to be brought to breakpoint (aka shocked) this week.",
}

_SIXTEENTHS = {
    1: "1/16", 2: "1/8", 3: "3/16", 4: "1/4", 5: "5/16", 6: "3/8", 7: "7/16", 8: "1/2",
    9: "9/16", 10: "5/8", 11: "11/16", 12: "3/4", 13: "13/16", 14: "7/8", 15: "15/16",
}


@dataclass
class BreakpointResult:
    combined_chlorine: float
    breakpoint_target: float
    ppm_needed: float
    dose_lbs: float
    dose_text: str
    level: str
    recommendation: str

    @property
    def shock_needed(self) -> bool:
        return self.level != SHOCK_NONE


@dataclass
class WeeklyChlorineDose:
    month: int
    min_fc: float
    loss_factor: float
    uv_loss: float
    calculated_dose: float
    to_be_dosed: float
    product_id: str
    amount: float  # gallons for liquid, ounces for cal-hypo
    unit: str
    text: Optional[str]


@dataclass
class DoseTableRow:
    target_fc: float
    dose_lbs: float
    dose_text: Optional[str]


@dataclass
class ChlorineDoseTable:
    product_id: str
    min_fc: float
    max_fc: float
    rows: List[DoseTableRow] = field(default_factory=list)


# ============================================
# FORMATTING
# ============================================

def _round_half_up(value):
    return math.floor(value + 0.5)


def to_mixed_fraction(value: float, unit: str) -> str:
    """Rounds to the nearest sixteenth, e.g. 1.5 -> '1 1/2 gallons'"""
    sixteenths = _round_half_up(value * 16)
    whole, frac = divmod(sixteenths, 16)
    frac_str = _SIXTEENTHS.get(frac, "")
    if whole > 0 and frac_str:
        return f"{whole} {frac_str} {unit}"
    if whole > 0:
        return f"{whole} {unit}"
    if frac_str:
        return f"{frac_str} {unit}"
    return f"0 {unit}"


def format_chlorine_dose(lbs: float, pool_type: str, product_kind: str) -> str:
    """Human dose text for a weight of chlorine product"""
    if product_kind == "liquid":
        gallons = lbs / LIQUID_LBS_PER_GALLON
        fl_oz = gallons * FL_OZ_PER_GALLON
        if pool_type != "pool":
            return f"Dose {fl_oz:.1f} fl oz"
        if 0 < gallons < 1:
            return f"Dose approximately {to_mixed_fraction(gallons, 'gallon')} (exact is {fl_oz:.0f} fl. oz)"
        return f"Dose {to_mixed_fraction(gallons, 'gallon' if gallons == 1 else 'gallons')}"

    if product_kind == "cal-hypo":
        if pool_type != "pool":
            return f"Dose {format_lbs_oz(lbs * OZ_PER_LB)}"
        if 0 < lbs < 1:
            return f"Dose approximately {to_mixed_fraction(lbs, 'lb')} (exact is {lbs * OZ_PER_LB:.0f} oz)"
        return f"Dose {to_mixed_fraction(lbs, 'lb' if lbs == 1 else 'lbs')}"

    return f"Dose {lbs:.2f} lbs"


# ============================================
# BREAKPOINT CHLORINATION
# ============================================

def shock_level(combined_chlorine: float) -> str:
    if combined_chlorine >= SHOCK_IMMEDIATE_CC:
        return SHOCK_IMMEDIATE
    if combined_chlorine >= SHOCK_WITHIN_72H_CC:
        return SHOCK_WITHIN_72H
    return SHOCK_NONE


def breakpoint_chlorination(
    free_chlorine: float,
    total_chlorine: float,
    pool_volume: float,
    product,
    pool_type: str = "pool"
) -> BreakpointResult:
    """
    Shock recommendation and the dose needed to reach breakpoint
    (10x combined chlorine, less the FC already present).
    """
    # Reported value and shock level share one rounded figure
    combined = round(max(total_chlorine - free_chlorine, 0.0), 2)
    target = combined * BREAKPOINT_MULTIPLIER
    ppm_needed = max(target - free_chlorine, 0.0)

    dose_lbs = 0.0
    dose_text = ""
    if ppm_needed > 0:
        dose_lbs = (ppm_needed * pool_volume * CHLORINE_LBS_PER_PPM) / (10000 * product.concentration)
        dose_text = format_chlorine_dose(dose_lbs, pool_type, product.kind)

    level = shock_level(combined)
    logger.debug(f"Breakpoint: CC={combined:.2f} ppm, need {ppm_needed:.2f} ppm, level={level}")

    return BreakpointResult(
        combined_chlorine=combined,
        breakpoint_target=round(target, 2),
        ppm_needed=round(ppm_needed, 2),
        dose_lbs=dose_lbs,
        dose_text=dose_text,
        level=level,
        recommendation=RECOMMENDATIONS[level],
    )


# ============================================
# WEEKLY MAINTENANCE DOSE
# ============================================

def uv_loss_factor(month: int) -> float:
    if month not in UV_LOSS_BY_MONTH:
        raise ValueError(f"Invalid calendar month: {month}")
    return UV_LOSS_BY_MONTH[month]


def weekly_chlorine_dose(free_chlorine: float, cya: float, pool_volume: float, product, month: int) -> WeeklyChlorineDose:
    """
    FC to add for the coming week: the CYA-relative minimum plus six days of
    seasonal UV loss, less the FC already in the water.
    """
    min_fc = cya * MIN_FC_CYA_RATIO
    loss_factor = uv_loss_factor(month)
    uv_loss = loss_factor * UV_LOSS_DAYS
    calculated = min_fc + uv_loss
    to_be_dosed = max(calculated - free_chlorine, 0.0)

    if product.kind == "liquid":
        gallons = (to_be_dosed * pool_volume) / (LIQUID_PPM_PER_GALLON_10K * 10000)
        amount, unit = gallons, "gal"
        text = f"{gallons:.2f} gal ({gallons * FL_OZ_PER_GALLON:.0f} fl oz) of {product.name.lower()}"
    else:
        ounces = to_be_dosed * CAL_HYPO_OZ_PER_PPM_10K * (pool_volume / 10000)
        amount, unit = ounces, "oz"
        text = f"{format_lbs_oz(ounces)} of granular {product.name.lower()}"

    if to_be_dosed <= MIN_DOSE:
        text = None

    return WeeklyChlorineDose(
        month=month,
        min_fc=min_fc,
        loss_factor=loss_factor,
        uv_loss=uv_loss,
        calculated_dose=calculated,
        to_be_dosed=to_be_dosed,
        product_id=product.id,
        amount=amount,
        unit=unit,
        text=text,
    )


# ============================================
# MANUAL CHLORINE ADDITION TABLE
# ============================================

def chlorine_dose_table(
    current_fc: float,
    cya: float,
    pool_volume: float,
    fc_range,
    product,
    pool_type: str = "pool",
    increment: float = DOSE_TABLE_INCREMENT
) -> ChlorineDoseTable:
    """
    Dose to reach each target FC from the code minimum (raised to the CYA
    floor when that is higher) up to the code maximum.
    """
    min_fc = fc_range.min or 0.0
    if fc_range.cya_ratio:
        min_fc = max(min_fc, cya * fc_range.cya_ratio)
    max_fc = fc_range.max if fc_range.max is not None else min_fc

    table = ChlorineDoseTable(product_id=product.id, min_fc=min_fc, max_fc=max_fc)
    if max_fc < min_fc:
        return table

    steps = int(math.floor((max_fc - min_fc) / increment + 1e-9))
    for i in range(steps + 1):
        target = min_fc + i * increment
        dose_lbs = 0.0
        if target > current_fc:
            dose_lbs = ((target - current_fc) * pool_volume * CHLORINE_LBS_PER_PPM / 10000) / product.concentration
        text = format_chlorine_dose(dose_lbs, pool_type, product.kind) if dose_lbs > 0 else None
        table.rows.append(DoseTableRow(round(target, 2), dose_lbs, text))

    return table
