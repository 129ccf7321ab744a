"""
Pool Balance - State Code Compliance

Compares a reading against the jurisdiction's acceptable ranges.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

# (label, standard attribute, reading attribute, unit)
CHECKED_PARAMETERS = [
    ("Free Chlorine", "free_chlorine", "free_chlorine", "ppm"),
    ("pH", "ph", "ph", ""),
    ("Alkalinity", "alkalinity", "alkalinity", "ppm"),
    ("Cyanuric Acid", "cya", "cyanuric_acid", "ppm"),
    ("Calcium Hardness", "calcium", "calcium_hardness", "ppm"),
]


@dataclass
class ComplianceRow:
    parameter: str
    current: float
    min: Optional[float]
    max: Optional[float]
    compliant: bool


@dataclass
class ComplianceReport:
    rows: List[ComplianceRow] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def compliant(self) -> bool:
        return all(r.compliant for r in self.rows) and not self.warnings


def _units(unit):
    return f" {unit}" if unit else ""


def _range_warnings(label, value, rng, unit):
    # pH and alkalinity read as one "out of range" line when both bounds exist
    if label in ("pH", "Alkalinity") and rng.min is not None and rng.max is not None:
        if not rng.contains(value):
            return [f"{label} is out of range ({rng.min} - {rng.max}{_units(unit)})."]
        return []

    warnings = []
    if rng.min is not None and value < rng.min:
        warnings.append(f"{label} is below minimum ({rng.min}{_units(unit)}).")
    if rng.max is not None and value > rng.max:
        warnings.append(f"{label} is above maximum ({rng.max}{_units(unit)}).")
    return warnings


def evaluate_compliance(reading, standard) -> ComplianceReport:
    """
    One row per regulated parameter plus free-text warnings, including the
    CYA-relative free chlorine floor.
    """
    report = ComplianceReport()

    for label, std_attr, reading_attr, unit in CHECKED_PARAMETERS:
        rng = getattr(standard, std_attr)
        value = getattr(reading, reading_attr)
        report.rows.append(ComplianceRow(
            parameter=label,
            current=value,
            min=rng.min,
            max=rng.max,
            compliant=rng.contains(value),
        ))
        report.warnings.extend(_range_warnings(label, value, rng, unit))

        if std_attr == "free_chlorine" and rng.cya_ratio:
            floor = reading.cyanuric_acid * rng.cya_ratio
            if value < floor:
                report.warnings.append(
                    f"Free Chlorine is below {rng.cya_ratio * 100:g}% of CYA (min required: {floor:.2f} ppm)."
                )

    if report.warnings:
        logger.info(f"Compliance: {len(report.warnings)} warning(s)")
    return report
