"""ORM models."""

from payroll_processor.models.base import Base, TimestampMixin
from payroll_processor.models.employee import AttendanceLog, Employee, EmployeeJobHistory
from payroll_processor.models.payroll import (
    PayrollRun,
    Payslip,
    PayslipLine,
    SalaryComponent,
    SalaryStructure,
    SalaryStructureLine,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "AttendanceLog",
    "Employee",
    "EmployeeJobHistory",
    "PayrollRun",
    "Payslip",
    "PayslipLine",
    "SalaryComponent",
    "SalaryStructure",
    "SalaryStructureLine",
]
