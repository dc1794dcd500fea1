"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from payroll_processor.calculators.types import CalculationKind, ComponentKind, StructureLine
from payroll_processor.models import Payslip
from payroll_processor.services import RunDetails, RunSummary, StructureDetails

CODE_PATTERN = r"^[A-Z0-9_-]+$"
NAME_PATTERN = r"^[a-zA-Z0-9\s\-_.&'()]+$"


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None


# ============================================================================
# Salary component schemas
# ============================================================================


class SalaryComponentCreate(BaseModel):
    """Schema for creating a salary component."""

    code: str = Field(min_length=2, max_length=50, pattern=CODE_PATTERN)
    name: str = Field(min_length=2, max_length=200, pattern=NAME_PATTERN)
    kind: ComponentKind
    is_taxable: bool = False


class SalaryComponentUpdate(BaseModel):
    """Schema for updating a salary component; omitted fields are unchanged."""

    code: str | None = Field(default=None, min_length=2, max_length=50, pattern=CODE_PATTERN)
    name: str | None = Field(default=None, min_length=2, max_length=200, pattern=NAME_PATTERN)
    kind: ComponentKind | None = None
    is_taxable: bool | None = None
    is_active: bool | None = None


class SalaryComponentResponse(BaseModel):
    """Schema for salary component response."""

    model_config = ConfigDict(from_attributes=True)

    salary_component_id: UUID
    tenant_id: UUID
    code: str
    name: str
    kind: ComponentKind
    is_taxable: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None


# ============================================================================
# Salary structure schemas
# ============================================================================


class StructureLineInput(BaseModel):
    """One component entry of a structure.

    For percentage lines ``amount`` is the percent of the fixed-earnings base.
    """

    component_id: UUID
    amount: Decimal
    calculation_kind: CalculationKind = CalculationKind.FIXED

    def to_line(self) -> StructureLine:
        return StructureLine(
            component_id=self.component_id,
            amount=self.amount,
            calculation_kind=self.calculation_kind,
        )


class SalaryStructureCreate(BaseModel):
    """Schema for creating a salary structure."""

    name: str = Field(min_length=2, max_length=200, pattern=NAME_PATTERN)
    lines: list[StructureLineInput]


class SalaryStructureUpdate(BaseModel):
    """Schema for updating a salary structure; omitted fields are unchanged."""

    name: str | None = Field(default=None, min_length=2, max_length=200, pattern=NAME_PATTERN)
    lines: list[StructureLineInput] | None = None


class StructureLineResponse(BaseModel):
    """Structure line with its component resolved."""

    position: int
    component_id: UUID
    component_code: str
    component_name: str
    component_kind: ComponentKind
    component_is_active: bool
    amount: Decimal
    calculation_kind: CalculationKind


class SalaryStructureResponse(BaseModel):
    """Schema for salary structure response."""

    salary_structure_id: UUID
    tenant_id: UUID
    name: str
    lines: list[StructureLineResponse]
    total_monthly_gross: Decimal
    employees_using_count: int
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_details(cls, details: StructureDetails) -> SalaryStructureResponse:
        structure = details.structure
        return cls(
            salary_structure_id=structure.salary_structure_id,
            tenant_id=structure.tenant_id,
            name=structure.name,
            lines=[
                StructureLineResponse(
                    position=line.position,
                    component_id=line.salary_component_id,
                    component_code=line.component.code,
                    component_name=line.component.name,
                    component_kind=ComponentKind(line.component.kind),
                    component_is_active=line.component.is_active,
                    amount=line.amount,
                    calculation_kind=CalculationKind(line.calculation_kind),
                )
                for line in structure.lines
            ],
            total_monthly_gross=details.total_monthly_gross,
            employees_using_count=details.employees_using_count,
            created_at=structure.created_at,
            updated_at=structure.updated_at,
        )


class GrossSalaryResponse(BaseModel):
    """Pro-rated gross salary of a structure."""

    salary_structure_id: UUID
    working_days: int
    present_days: int
    gross_salary: Decimal


# ============================================================================
# Payroll run schemas
# ============================================================================


class PayrollRunCreate(BaseModel):
    """Schema for creating a payroll run."""

    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2020, le=2100)


class PayrollRunResponse(BaseModel):
    """Schema for payroll run response, including payslip aggregates."""

    payroll_run_id: UUID
    tenant_id: UUID
    month: int
    year: int
    month_year_display: str
    status: str
    processed_at: datetime | None = None
    total_employees: int
    processed_payslips: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_details(cls, details: RunDetails) -> PayrollRunResponse:
        run = details.run
        return cls(
            payroll_run_id=run.payroll_run_id,
            tenant_id=run.tenant_id,
            month=run.month,
            year=run.year,
            month_year_display=details.month_year_display,
            status=run.status,
            processed_at=run.processed_at,
            total_employees=details.total_employees,
            processed_payslips=details.processed_payslips,
            total_gross=details.total_gross,
            total_deductions=details.total_deductions,
            total_net=details.total_net,
            created_at=run.created_at,
            updated_at=run.updated_at,
        )


class RunSummaryResponse(BaseModel):
    """Result of processing a payroll run."""

    run_id: UUID
    processed_count: int
    skipped_count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal

    @classmethod
    def from_summary(cls, summary: RunSummary) -> RunSummaryResponse:
        return cls(
            run_id=summary.run_id,
            processed_count=summary.processed_count,
            skipped_count=summary.skipped_count,
            total_gross=summary.total_gross,
            total_deductions=summary.total_deductions,
            total_net=summary.total_net,
        )


# ============================================================================
# Payslip schemas
# ============================================================================


class PayslipLineResponse(BaseModel):
    """Resolved earning or deduction line."""

    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    amount: Decimal
    calculation_note: str | None = None


class PayslipBreakdownResponse(BaseModel):
    """Ordered earnings and deductions."""

    earnings: list[PayslipLineResponse]
    deductions: list[PayslipLineResponse]


class PayslipResponse(BaseModel):
    """Schema for payslip response."""

    payslip_id: UUID
    payroll_run_id: UUID
    employee_id: UUID
    employee_code: str
    employee_name: str
    month: int
    year: int
    working_days: int
    present_days: int
    gross_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    breakdown: PayslipBreakdownResponse
    created_at: datetime

    @classmethod
    def from_payslip(cls, payslip: Payslip) -> PayslipResponse:
        breakdown = payslip.to_breakdown()
        return cls(
            payslip_id=payslip.payslip_id,
            payroll_run_id=payslip.payroll_run_id,
            employee_id=payslip.employee_id,
            employee_code=payslip.employee.employee_code,
            employee_name=payslip.employee.full_name,
            month=payslip.payroll_run.month,
            year=payslip.payroll_run.year,
            working_days=payslip.working_days,
            present_days=payslip.present_days,
            gross_earnings=payslip.gross_earnings,
            total_deductions=payslip.total_deductions,
            net_pay=payslip.net_pay,
            breakdown=PayslipBreakdownResponse(
                earnings=[PayslipLineResponse.model_validate(line) for line in breakdown.earnings],
                deductions=[
                    PayslipLineResponse.model_validate(line) for line in breakdown.deductions
                ],
            ),
            created_at=payslip.created_at,
        )
