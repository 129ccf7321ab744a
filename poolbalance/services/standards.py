"""
Pool Balance - Static Chemistry Tables

Commercial pool code ranges by jurisdiction and pool type, golden-number
dosing targets, and the chlorine products the calculators can dose with.
All tables are built once at import and never mutated.
"""

import logging
from dataclasses import dataclass, asdict, field
from typing import Dict, Optional

from poolbalance.core.decorators import ConfigurationError

logger = logging.getLogger(__name__)

POOL_TYPES = ("pool", "spa")


@dataclass(frozen=True)
class ParameterRange:
    """Acceptable range for one parameter. A bound of None is never violated."""
    min: Optional[float] = None
    max: Optional[float] = None
    cya_ratio: Optional[float] = None  # FC floor as a fraction of CYA

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class JurisdictionStandard:
    free_chlorine: ParameterRange
    ph: ParameterRange
    alkalinity: ParameterRange
    cya: ParameterRange
    calcium: ParameterRange


@dataclass(frozen=True)
class GoldenNumbers:
    alkalinity: float
    calcium: float
    cya: float
    ph: float

    def merged(self, overrides: Optional[Dict[str, float]] = None) -> "GoldenNumbers":
        """Returns a copy with any provided override targets applied"""
        if not overrides:
            return self
        values = asdict(self)
        for key, value in overrides.items():
            if key in values and value is not None:
                values[key] = float(value)
        return GoldenNumbers(**values)


@dataclass(frozen=True)
class ChlorineProduct:
    id: str
    name: str
    kind: str  # "liquid" or "cal-hypo"
    concentration: float


@dataclass(frozen=True)
class Jurisdiction:
    name: str
    pool: JurisdictionStandard
    spa: JurisdictionStandard
    golden: GoldenNumbers
    default_chlorine_product: str
    # Service-visit thresholds; None means the generic rules apply
    low_thresholds: Optional[Dict[str, float]] = field(default=None)


def _standard(fc_min, fc_max, ph=(7.2, 7.8), cya_max=100):
    return JurisdictionStandard(
        free_chlorine=ParameterRange(fc_min, fc_max, cya_ratio=0.05),
        ph=ParameterRange(*ph),
        alkalinity=ParameterRange(60, 180),
        cya=ParameterRange(0, cya_max),
        calcium=ParameterRange(150, 1000),
    )


JURISDICTIONS = {
    "arizona": Jurisdiction(
        name="Arizona",
        pool=_standard(1.0, 5.0),
        spa=_standard(3.0, 5.0),
        golden=GoldenNumbers(alkalinity=120, calcium=400, cya=80, ph=7.5),
        default_chlorine_product="cal_hypo_73",
    ),
    "florida": Jurisdiction(
        name="Florida",
        pool=_standard(1.0, 10.0, ph=(7.0, 7.8)),
        spa=_standard(2.0, 5.0, ph=(7.0, 7.8), cya_max=40),
        golden=GoldenNumbers(alkalinity=80, calcium=300, cya=50, ph=7.6),
        default_chlorine_product="liquid_12_5",
        low_thresholds={"alkalinity": 60, "calcium": 200, "cya": 30},
    ),
    "texas": Jurisdiction(
        name="Texas",
        pool=_standard(1.0, 6.0),
        spa=_standard(1.0, 6.0),
        golden=GoldenNumbers(alkalinity=120, calcium=400, cya=80, ph=7.5),
        default_chlorine_product="cal_hypo_73",
    ),
}

# Dosing targets used by the water balance sequencer
GOLDEN_NUMBERS = {
    "pool": GoldenNumbers(alkalinity=100, calcium=300, cya=50, ph=7.6),
    "spa": GoldenNumbers(alkalinity=80, calcium=300, cya=0, ph=7.5),
}

CHLORINE_PRODUCTS = {
    "liquid_10": ChlorineProduct("liquid_10", "Liquid Chlorine (10%)", "liquid", 0.10),
    "liquid_12_5": ChlorineProduct("liquid_12_5", "Liquid Chlorine (12.5%)", "liquid", 0.125),
    "cal_hypo_68": ChlorineProduct("cal_hypo_68", "Calcium Hypochlorite (68%)", "cal-hypo", 0.68),
    "cal_hypo_73": ChlorineProduct("cal_hypo_73", "Calcium Hypochlorite (73%)", "cal-hypo", 0.73),
}


def get_jurisdiction(name: str) -> Jurisdiction:
    j = JURISDICTIONS.get(str(name or "").strip().lower())
    if not j:
        logger.warning(f"Unknown jurisdiction requested: {name!r}")
        raise ConfigurationError(f"No pool standards configured for jurisdiction: {name}")
    return j


def _check_pool_type(pool_type: str) -> str:
    key = str(pool_type or "").strip().lower()
    if key not in POOL_TYPES:
        logger.warning(f"Unknown pool type requested: {pool_type!r}")
        raise ConfigurationError(f"Unknown pool type: {pool_type}")
    return key


def get_standard(jurisdiction: str, pool_type: str) -> JurisdictionStandard:
    """Looks up the code ranges for a (jurisdiction, pool type) pair"""
    j = get_jurisdiction(jurisdiction)
    return getattr(j, _check_pool_type(pool_type))


def get_golden_numbers(pool_type: str, overrides: Optional[Dict[str, float]] = None) -> GoldenNumbers:
    return GOLDEN_NUMBERS[_check_pool_type(pool_type)].merged(overrides)


def get_chlorine_product(product_id: Optional[str], jurisdiction: Optional[str] = None) -> ChlorineProduct:
    """
    Resolves a chlorine product by id. Without an id the jurisdiction's
    default product is used.
    """
    if not product_id:
        if not jurisdiction:
            raise ConfigurationError("No chlorine product selected")
        product_id = get_jurisdiction(jurisdiction).default_chlorine_product

    product = CHLORINE_PRODUCTS.get(str(product_id).strip().lower())
    if not product:
        logger.warning(f"Unknown chlorine product requested: {product_id!r}")
        raise ConfigurationError(f"Unknown chlorine product: {product_id}")
    return product


def get_all_standards():
    return {
        key: {
            "name": j.name,
            "pool": asdict(j.pool),
            "spa": asdict(j.spa),
            "golden_numbers": asdict(j.golden),
            "default_chlorine_product": j.default_chlorine_product,
        }
        for key, j in JURISDICTIONS.items()
    }


def get_all_chlorine_products():
    return [asdict(p) for p in CHLORINE_PRODUCTS.values()]
