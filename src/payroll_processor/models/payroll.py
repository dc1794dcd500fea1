"""Salary catalog, structure, payroll run and payslip models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_processor.calculators.types import (
    BreakdownLine,
    CalculationKind,
    ComponentInfo,
    ComponentKind,
    PayslipBreakdown,
    StructureLine,
)
from payroll_processor.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from payroll_processor.models.employee import Employee


# ===== Component Catalog =====


class SalaryComponent(Base, TimestampMixin):
    """Earning or deduction definition, e.g. BASIC, HRA, TAX."""

    __tablename__ = "salary_component"

    salary_component_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    kind: Mapped[str] = mapped_column(String, nullable=False)
    is_taxable: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="salary_component_tenant_code_unique"),
        CheckConstraint(
            "kind IN ('earning', 'deduction')",
            name="salary_component_kind_check",
        ),
    )

    def to_info(self) -> ComponentInfo:
        """Detach into the plain value object the resolver consumes."""
        return ComponentInfo(
            component_id=self.salary_component_id,
            code=self.code,
            name=self.name,
            kind=ComponentKind(self.kind),
            is_active=self.is_active,
        )


# ===== Salary Structures =====


class SalaryStructure(Base, TimestampMixin):
    """Named salary template made of ordered component lines."""

    __tablename__ = "salary_structure"

    salary_structure_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    lines: Mapped[list[SalaryStructureLine]] = relationship(
        back_populates="salary_structure",
        order_by="SalaryStructureLine.position",
        cascade="all, delete-orphan",
    )

    def to_lines(self) -> list[StructureLine]:
        return [line.to_structure_line() for line in self.lines]


class SalaryStructureLine(Base):
    """One component entry within a salary structure."""

    __tablename__ = "salary_structure_line"

    structure_line_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    salary_structure_id: Mapped[UUID] = mapped_column(
        ForeignKey("salary_structure.salary_structure_id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    salary_component_id: Mapped[UUID] = mapped_column(
        ForeignKey("salary_component.salary_component_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    calculation_kind: Mapped[str] = mapped_column(
        String, nullable=False, default=CalculationKind.FIXED.value
    )

    __table_args__ = (
        UniqueConstraint("salary_structure_id", "position", name="structure_line_position_unique"),
        CheckConstraint(
            "calculation_kind IN ('fixed', 'percentage')",
            name="structure_line_calculation_kind_check",
        ),
        CheckConstraint("amount >= 0", name="structure_line_amount_check"),
    )

    # Relationships
    salary_structure: Mapped[SalaryStructure] = relationship(back_populates="lines")
    component: Mapped[SalaryComponent] = relationship()

    def to_structure_line(self) -> StructureLine:
        return StructureLine(
            component_id=self.salary_component_id,
            amount=Decimal(self.amount),
            calculation_kind=CalculationKind(self.calculation_kind),
        )


# ===== Payroll Run & Immutable Results =====


class PayrollRun(Base, TimestampMixin):
    """One payroll cycle for one tenant and one calendar month."""

    __tablename__ = "payroll_run"

    payroll_run_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Active employees considered when the run completed, skipped ones included
    total_employees: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "month", "year", name="payroll_run_tenant_period_unique"),
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_run_month_check"),
        CheckConstraint(
            "status IN ('draft', 'processing', 'completed')",
            name="payroll_run_status_check",
        ),
    )

    # Relationships
    payslips: Mapped[list[Payslip]] = relationship(
        back_populates="payroll_run",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Payslip(Base, TimestampMixin):
    """Computed pay for one employee within one run. Never updated."""

    __tablename__ = "payslip"

    payslip_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    payroll_run_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_run.payroll_run_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    working_days: Mapped[int] = mapped_column(Integer, nullable=False)
    present_days: Mapped[int] = mapped_column(Integer, nullable=False)
    gross_earnings: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("payroll_run_id", "employee_id", name="payslip_run_employee_unique"),
        CheckConstraint(
            "present_days >= 0 AND present_days <= working_days",
            name="payslip_present_days_check",
        ),
        CheckConstraint("net_pay >= 0", name="payslip_net_pay_check"),
    )

    # Relationships
    payroll_run: Mapped[PayrollRun] = relationship(back_populates="payslips")
    employee: Mapped[Employee] = relationship()
    lines: Mapped[list[PayslipLine]] = relationship(
        back_populates="payslip",
        order_by="PayslipLine.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_breakdown(self) -> PayslipBreakdown:
        """Rebuild the earnings/deductions breakdown from stored lines."""
        breakdown = PayslipBreakdown()
        for line in self.lines:
            item = BreakdownLine(
                code=line.code,
                name=line.name,
                amount=Decimal(line.amount),
                calculation_note=line.calculation_note,
            )
            if line.line_type == ComponentKind.EARNING.value:
                breakdown.earnings.append(item)
            else:
                breakdown.deductions.append(item)
        return breakdown


class PayslipLine(Base):
    """Resolved earning or deduction line of a payslip."""

    __tablename__ = "payslip_line"

    payslip_line_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payslip_id: Mapped[UUID] = mapped_column(
        ForeignKey("payslip.payslip_id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    line_type: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    calculation_note: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("payslip_id", "position", name="payslip_line_position_unique"),
        CheckConstraint(
            "line_type IN ('earning', 'deduction')",
            name="payslip_line_type_check",
        ),
        CheckConstraint("amount >= 0", name="payslip_line_amount_check"),
    )

    # Relationships
    payslip: Mapped[Payslip] = relationship(back_populates="lines")
