"""Business services."""

from payroll_processor.services.component_service import SalaryComponentService
from payroll_processor.services.payroll_inputs import (
    AttendanceSummary,
    EmployeeAssignment,
    PayrollInputs,
    SqlPayrollInputs,
    StructureDefinition,
)
from payroll_processor.services.payroll_run_service import (
    PayrollRunService,
    RunDetails,
    RunSummary,
)
from payroll_processor.services.payslip_service import PayslipService
from payroll_processor.services.state_machine import PayrollRunStateMachine, PayrollRunStatus
from payroll_processor.services.structure_service import SalaryStructureService, StructureDetails

__all__ = [
    "AttendanceSummary",
    "EmployeeAssignment",
    "PayrollInputs",
    "PayrollRunService",
    "PayrollRunStateMachine",
    "PayrollRunStatus",
    "PayslipService",
    "RunDetails",
    "RunSummary",
    "SalaryComponentService",
    "SalaryStructureService",
    "SqlPayrollInputs",
    "StructureDetails",
]
