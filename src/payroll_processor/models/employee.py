"""Employee, job history and attendance models.

These tables belong to the surrounding HR system. The payroll processor only
reads them to learn who is on the roster, which salary structure each
employee is currently on, and how many days they were present.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_processor.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from payroll_processor.models.payroll import SalaryStructure


class Employee(Base, TimestampMixin):
    """Employee record."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    employee_code: Mapped[str] = mapped_column(String, nullable=False)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        UniqueConstraint("tenant_id", "employee_code", name="employee_tenant_code_unique"),
        CheckConstraint(
            "status IN ('active', 'inactive', 'terminated')",
            name="employee_status_check",
        ),
    )

    # Relationships
    job_history: Mapped[list[EmployeeJobHistory]] = relationship(back_populates="employee")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class EmployeeJobHistory(Base, TimestampMixin):
    """Effective-dated job assignment, carrying the salary structure pointer.

    The current assignment is the row with no ``valid_to``; if several are
    open, the latest ``valid_from`` wins.
    """

    __tablename__ = "employee_job_history"

    job_history_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    salary_structure_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("salary_structure.salary_structure_id", ondelete="RESTRICT"),
        nullable=True,
    )
    valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    valid_to: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "valid_to IS NULL OR valid_to >= valid_from",
            name="employee_job_history_dates_check",
        ),
        Index("ix_employee_job_history_employee", "employee_id", "valid_to"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="job_history")
    salary_structure: Mapped[SalaryStructure | None] = relationship()


class AttendanceLog(Base, TimestampMixin):
    """One day of attendance for one employee."""

    __tablename__ = "attendance_log"

    attendance_log_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="present")

    __table_args__ = (
        UniqueConstraint("employee_id", "attendance_date", name="attendance_log_employee_date_unique"),
        CheckConstraint(
            "status IN ('present', 'absent', 'half_day', 'on_leave')",
            name="attendance_log_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship()
