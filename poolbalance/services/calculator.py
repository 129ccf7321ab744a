"""
Pool Balance - Calculation Entry Point

Takes the flat test-sheet record and returns the full structured report:
LSI, code compliance, the water balance plan, chlorine / shock advice and
salt dose. Presentation is left to the caller.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import date
from typing import Dict, List, Optional

from poolbalance.core.decorators import InvalidInputError
from poolbalance.services import standards
from poolbalance.services.reading import WaterReading, parse_reading, to_number
from poolbalance.services.lsi import LSIResult, LSIScaleBand, compute_lsi, lsi_scale_band
from poolbalance.services.compliance import ComplianceReport, evaluate_compliance
from poolbalance.services.water_balance import (
    DosingPlan,
    TodayPlan,
    DayPlanEntry,
    plan_dosing,
    summarize_today,
    day_by_day,
)
from poolbalance.services.chlorine import (
    BreakpointResult,
    WeeklyChlorineDose,
    ChlorineDoseTable,
    breakpoint_chlorination,
    weekly_chlorine_dose,
    chlorine_dose_table,
)
from poolbalance.services.dosing import SaltDose, salt_dose
from poolbalance.services.service_visits import VisitSchedule, schedule_service_visits, build_visit_summary
from poolbalance.services.dose_guides import DoseGuide, alkalinity_guide, calcium_guide, ph_guide

logger = logging.getLogger(__name__)

TARGET_KEYS = ("alkalinity", "calcium", "cya", "ph")


@dataclass
class PoolReport:
    jurisdiction: str
    pool_type: str
    chlorine_product: str
    month: int
    reading: WaterReading
    targets: Dict[str, float]
    lsi: LSIResult
    lsi_scale: LSIScaleBand
    compliance: ComplianceReport
    dosing_plan: DosingPlan
    today: TodayPlan
    day_plan: List[DayPlanEntry]
    breakpoint: BreakpointResult
    weekly_chlorine: WeeklyChlorineDose
    chlorine_dose_table: ChlorineDoseTable
    salt: Optional[SaltDose]
    service_visits: VisitSchedule
    dose_guides: List[DoseGuide]

    def to_dict(self):
        return asdict(self)


def _parse_targets(raw) -> Optional[Dict[str, float]]:
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise InvalidInputError(payload={"fields": ["targets"]})
    overrides = {}
    for key in TARGET_KEYS:
        if raw.get(key) in (None, ""):
            continue
        number = to_number(raw.get(key))
        if number is None or number < 0:
            raise InvalidInputError(payload={"fields": [f"targets.{key}"]})
        overrides[key] = number
    return overrides


def _parse_month(raw) -> int:
    if raw in (None, ""):
        return date.today().month
    number = to_number(raw)
    if number is None or number != int(number) or not 1 <= number <= 12:
        raise InvalidInputError(payload={"fields": ["month"]})
    return int(number)


def calculate_pool_report(form: Dict, month: Optional[int] = None) -> PoolReport:
    """
    Runs every calculator for one water test.

    Args:
        form: flat record (state, pool_type, capacity, ph, alkalinity, calcium,
              temperature, tds, cyanuric, freechlorine, totalchlorine,
              salt-current, salt-desired, chlorine_type, targets, month)
        month: calendar month for seasonal UV loss; overrides form["month"],
               defaults to the current month

    Raises:
        ConfigurationError: unknown jurisdiction, pool type or chlorine product
        InvalidInputError: missing or unusable readings
    """
    jurisdiction = standards.get_jurisdiction(form.get("state"))
    pool_type = str(form.get("pool_type") or "pool").strip().lower()
    standard = standards.get_standard(jurisdiction.name, pool_type)
    product = standards.get_chlorine_product(form.get("chlorine_type"), jurisdiction.name)

    reading = parse_reading(form)
    targets = standards.get_golden_numbers(pool_type, _parse_targets(form.get("targets")))
    month = month if month is not None else _parse_month(form.get("month"))

    gallons = reading.pool_volume_gallons
    total_chlorine = reading.total_chlorine if reading.total_chlorine is not None else reading.free_chlorine

    lsi = compute_lsi(reading)
    plan = plan_dosing(reading, targets, gallons)
    breakpoint = breakpoint_chlorination(reading.free_chlorine, total_chlorine, gallons, product, pool_type)
    weekly = weekly_chlorine_dose(reading.free_chlorine, reading.cyanuric_acid, gallons, product, month)

    salt = None
    if reading.target_salt_level:
        salt = salt_dose(reading.salt_level or 0.0, reading.target_salt_level, gallons)

    visits = build_visit_summary(schedule_service_visits(reading, jurisdiction, gallons), salt, weekly)

    report = PoolReport(
        jurisdiction=jurisdiction.name,
        pool_type=pool_type,
        chlorine_product=product.id,
        month=month,
        reading=reading,
        targets=asdict(targets),
        lsi=lsi,
        lsi_scale=lsi_scale_band(lsi.lsi),
        compliance=evaluate_compliance(reading, standard),
        dosing_plan=plan,
        today=summarize_today(plan, breakpoint),
        day_plan=day_by_day(plan),
        breakpoint=breakpoint,
        weekly_chlorine=weekly,
        chlorine_dose_table=chlorine_dose_table(
            reading.free_chlorine, reading.cyanuric_acid, gallons, standard.free_chlorine, product, pool_type
        ),
        salt=salt,
        service_visits=visits,
        dose_guides=[
            ph_guide(reading.ph, gallons, reading.alkalinity, standard.ph),
            alkalinity_guide(reading.alkalinity, gallons),
            calcium_guide(reading.calcium_hardness, gallons),
        ],
    )

    logger.info(
        f"Calculated {jurisdiction.name}/{pool_type}: LSI {lsi.lsi:.2f} ({lsi.status}), "
        f"{sum(1 for s in plan.steps if s.needs_adjustment)} dosing step(s)"
    )
    return report
