"""Salary calculation."""

from payroll_processor.calculators.line_builder import BreakdownLineBuilder
from payroll_processor.calculators.structure_resolver import SalaryStructureResolver
from payroll_processor.calculators.types import (
    BreakdownLine,
    CalculationKind,
    ComponentInfo,
    ComponentKind,
    PayslipBreakdown,
    ResolvedSalary,
    StructureLine,
)
from payroll_processor.calculators.work_calendar import month_display, working_days_in_month

__all__ = [
    "BreakdownLine",
    "BreakdownLineBuilder",
    "CalculationKind",
    "ComponentInfo",
    "ComponentKind",
    "PayslipBreakdown",
    "ResolvedSalary",
    "SalaryStructureResolver",
    "StructureLine",
    "month_display",
    "working_days_in_month",
]
