"""
Pool Balance - Dose Formula Library

Chemical dose formulas for a pool of a given volume (US gallons).
Rates are the usual per-10,000-gallon label rates.

Raw formulas (*_lbs, *_oz, *_fl_oz) return plain numbers. Dose builders
(*_dose) return a Dose, or None when no dose is needed.
"""

import math
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

NO_DOSE_NEEDED = "No dose needed"

# Anything smaller than this (in the dose's own unit) is treated as zero
MIN_DOSE = 0.01

GALLONS_BASIS = 10000

# Sodium bicarbonate, lbs per 10,000 gal per 10 ppm TA
BICARB_LBS_PER_10PPM = 1.5
# Rate printed by the alkalinity detail guide. Differs from the dosing rate
# and is kept as its own variant until one is confirmed.
BICARB_GUIDE_LBS_PER_10PPM = 1.4

CALCIUM_CHLORIDE_LBS_PER_10PPM = 1.25
STABILIZER_OZ_PER_10PPM = 13

# Muriatic acid (31.45%), fl oz per 0.1 pH drop per 10,000 gal at TA 100
ACID_FL_OZ_PER_TENTH_PH = 1.3
# Older pool-factor rule: fl oz per 1.0 pH drop per 10,000 gal at TA 100
ACID_POOL_FACTOR_FL_OZ = 76
# Muriatic acid to lower TA, gallons per 10,000 gal per 10 ppm
ACID_GAL_PER_10PPM_ALK = 0.2

# Soda ash, oz per 0.2 pH rise per 10,000 gal
SODA_ASH_OZ_PER_FIFTH_PH = 6

# Salt: 183 lbs raises 1,000 ppm in 10,000 gal
SALT_LBS_PER_1000PPM = 183
SALT_BAG_LBS = 40

FL_OZ_PER_GALLON = 128
OZ_PER_LB = 16

MURIATIC_ACID = "muriatic acid (31.45%)"


@dataclass
class Dose:
    chemical: str
    amount: float  # in `unit`
    unit: str
    text: str


@dataclass
class SaltDose:
    ppm_needed: float
    lbs: float
    bags: int
    text: str


def _volume_factor(gallons):
    return gallons / GALLONS_BASIS


# ============================================
# RAW FORMULAS
# ============================================

def acid_fl_oz(ph_drop, gallons, alkalinity):
    """fl oz = 1.3 x (TA / 100) x (pH drop / 0.1) x (gal / 10,000)"""
    return ACID_FL_OZ_PER_TENTH_PH * (alkalinity / 100) * (ph_drop / 0.1) * _volume_factor(gallons)


def acid_fl_oz_pool_factor(ph_drop, gallons, alkalinity):
    """fl oz = pH drop x 76 x (gal / 10,000) x (TA / 100)"""
    return ph_drop * ACID_POOL_FACTOR_FL_OZ * _volume_factor(gallons) * (alkalinity / 100)


def soda_ash_oz(ph_rise, gallons):
    return (ph_rise / 0.2) * SODA_ASH_OZ_PER_FIFTH_PH * _volume_factor(gallons)


def sodium_bicarbonate_lbs(ppm_rise, gallons):
    return (ppm_rise / 10) * BICARB_LBS_PER_10PPM * _volume_factor(gallons)


def sodium_bicarbonate_guide_lbs(ppm_rise, gallons):
    """Display-guide variant (1.4 lbs per 10 ppm)"""
    return (ppm_rise / 10) * BICARB_GUIDE_LBS_PER_10PPM * _volume_factor(gallons)


def calcium_chloride_lbs(ppm_rise, gallons):
    return (ppm_rise / 10) * CALCIUM_CHLORIDE_LBS_PER_10PPM * _volume_factor(gallons)


def stabilizer_oz(ppm_rise, gallons):
    return (ppm_rise / 10) * STABILIZER_OZ_PER_10PPM * _volume_factor(gallons)


def acid_gallons_for_alkalinity(ppm_drop, gallons):
    return (ppm_drop / 10) * ACID_GAL_PER_10PPM_ALK * _volume_factor(gallons)


def salt_lbs(ppm_rise, gallons):
    return (ppm_rise * gallons * SALT_LBS_PER_1000PPM) / (1000 * GALLONS_BASIS)


# ============================================
# FORMATTING
# ============================================

def format_acid(fl_oz):
    if fl_oz < FL_OZ_PER_GALLON:
        return f"{fl_oz:.1f} fl oz {MURIATIC_ACID}"
    return f"{fl_oz / FL_OZ_PER_GALLON:.2f} gal ({fl_oz:.1f} fl oz) {MURIATIC_ACID}"


def format_oz_as_lbs(oz, chemical):
    """Ounces below a pound, otherwise pounds with the exact ounces"""
    if oz < OZ_PER_LB:
        return f"{oz:.1f} oz {chemical}"
    return f"{oz / OZ_PER_LB:.2f} lbs ({oz:.1f} oz) {chemical}"


def format_lbs_oz(ounces):
    """Whole pounds plus remaining ounces, e.g. '2 lbs 3.50 oz'"""
    lbs = math.floor(ounces / OZ_PER_LB)
    oz = ounces % OZ_PER_LB
    parts = []
    if lbs > 0:
        parts.append(f"{lbs} lb{'s' if lbs > 1 else ''}")
    if oz > 0 or lbs == 0:
        parts.append(f"{oz:.2f} oz")
    return " ".join(parts)


def format_oz_or_lbs(amount_oz):
    """Short form used by the service-visit advice"""
    if amount_oz > OZ_PER_LB:
        return f"{amount_oz / OZ_PER_LB:.2f} lbs"
    return f"{amount_oz:.2f} oz"


def describe(dose: Optional[Dose]) -> str:
    return dose.text if dose else NO_DOSE_NEEDED


# ============================================
# DOSE BUILDERS
# ============================================

def acid_dose(current_ph, target_ph, gallons, alkalinity) -> Optional[Dose]:
    """Muriatic acid to lower pH"""
    if current_ph <= target_ph:
        return None
    fl_oz = acid_fl_oz(current_ph - target_ph, gallons, alkalinity)
    if fl_oz < MIN_DOSE:
        return None
    return Dose("muriatic_acid", fl_oz, "fl oz", format_acid(fl_oz))


def acid_dose_pool_factor(current_ph, target_ph, gallons, alkalinity) -> Optional[Dose]:
    """Muriatic acid to lower pH, pool-factor (76) variant"""
    if current_ph <= target_ph:
        return None
    fl_oz = acid_fl_oz_pool_factor(current_ph - target_ph, gallons, alkalinity)
    if fl_oz < MIN_DOSE:
        return None
    return Dose("muriatic_acid", fl_oz, "fl oz", format_acid(fl_oz))


def soda_ash_dose(current_ph, target_ph, gallons) -> Optional[Dose]:
    """Soda ash to raise pH"""
    if current_ph >= target_ph:
        return None
    oz = soda_ash_oz(target_ph - current_ph, gallons)
    if oz < MIN_DOSE:
        return None
    return Dose("soda_ash", oz, "oz", format_oz_as_lbs(oz, "soda ash"))


def alkalinity_dose(current, target, gallons) -> Optional[Dose]:
    """Sodium bicarbonate to raise total alkalinity"""
    if target <= current:
        return None
    lbs = sodium_bicarbonate_lbs(target - current, gallons)
    if lbs < MIN_DOSE:
        return None
    return Dose("sodium_bicarbonate", lbs, "lbs", f"{lbs:.2f} lbs sodium bicarbonate")


def calcium_dose(current, target, gallons) -> Optional[Dose]:
    """Calcium chloride to raise calcium hardness"""
    if target <= current:
        return None
    lbs = calcium_chloride_lbs(target - current, gallons)
    if lbs < MIN_DOSE:
        return None
    return Dose("calcium_chloride", lbs, "lbs", f"{lbs:.2f} lbs calcium chloride")


def cya_dose(current, target, gallons) -> Optional[Dose]:
    """Stabilizer (cyanuric acid) to raise CYA"""
    if target <= current:
        return None
    oz = stabilizer_oz(target - current, gallons)
    if oz < MIN_DOSE:
        return None
    return Dose("stabilizer", oz, "oz", format_oz_as_lbs(oz, "stabilizer"))


def acid_dose_for_alkalinity(current_alk, target_alk, gallons) -> Optional[Dose]:
    """Muriatic acid to lower total alkalinity"""
    if current_alk <= target_alk:
        return None
    gal = acid_gallons_for_alkalinity(current_alk - target_alk, gallons)
    if gal < MIN_DOSE:
        return None
    fl_oz = gal * FL_OZ_PER_GALLON
    if gal < 1:
        text = f"{fl_oz:.1f} fl oz {MURIATIC_ACID}"
    else:
        text = f"{gal:.2f} gal ({fl_oz:.1f} fl oz) {MURIATIC_ACID}"
    return Dose("muriatic_acid", fl_oz, "fl oz", text)


def split_dose(dose: Optional[Dose], days: int) -> Optional[Dose]:
    """Spreads a dose evenly over several days"""
    if not dose:
        return None
    return Dose(
        dose.chemical,
        dose.amount / days,
        dose.unit,
        f"Add 1/{days} of total dose ({dose.text}) per day for {days} days",
    )


def salt_dose(current, target, gallons) -> Optional[SaltDose]:
    """Pool salt to reach a target salt level, in 40 lb bags"""
    if target is None or current is None or target <= current:
        return None
    ppm_needed = target - current
    lbs = salt_lbs(ppm_needed, gallons)
    if lbs < MIN_DOSE:
        return None
    bags = math.ceil(lbs / SALT_BAG_LBS)
    text = f"Add {lbs:.2f} lbs of pool salt ({bags} x {SALT_BAG_LBS} lb bags) to reach your desired salt level."
    logger.debug(f"Salt dose: {ppm_needed} ppm -> {lbs:.2f} lbs ({bags} bags)")
    return SaltDose(ppm_needed, lbs, bags, text)
