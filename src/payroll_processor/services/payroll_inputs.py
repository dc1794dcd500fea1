"""Read-side access to the collaborators the payroll run depends on.

Everything returned here is a plain value object, so the resolver never
touches the ORM and never triggers hidden I/O.
"""

from __future__ import annotations

from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_processor.calculators.types import ComponentInfo, StructureLine
from payroll_processor.models import (
    AttendanceLog,
    Employee,
    EmployeeJobHistory,
    SalaryComponent,
    SalaryStructure,
)

PRESENT_STATUSES = ("present", "half_day")


@dataclass(frozen=True)
class EmployeeAssignment:
    """Active employee with their currently effective structure, if any."""

    employee_id: UUID
    employee_code: str
    current_structure_id: UUID | None


@dataclass(frozen=True)
class AttendanceSummary:
    """Attendance counts for one employee-month.

    ``recorded_days`` counts records of any status; ``present_days`` counts
    Present and HalfDay records only.
    """

    recorded_days: int
    present_days: int


@dataclass(frozen=True)
class StructureDefinition:
    """Salary structure detached from the session."""

    structure_id: UUID
    name: str
    lines: tuple[StructureLine, ...]


class PayrollInputs(Protocol):
    """Data the payroll run consumes from the surrounding HR system."""

    async def get_active_employees(self, tenant_id: UUID) -> list[EmployeeAssignment]: ...

    async def get_attendance_summary(
        self, tenant_id: UUID, employee_id: UUID, month: int, year: int
    ) -> AttendanceSummary: ...

    async def get_salary_structure(
        self, tenant_id: UUID, structure_id: UUID
    ) -> StructureDefinition | None: ...

    async def get_salary_components(
        self, tenant_id: UUID, component_ids: Iterable[UUID]
    ) -> dict[UUID, ComponentInfo]: ...


class SqlPayrollInputs:
    """PayrollInputs backed by the relational store."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_employees(self, tenant_id: UUID) -> list[EmployeeAssignment]:
        """Active employees ordered by code, with their current structure.

        The current assignment is the job history row with no ``valid_to``;
        the latest ``valid_from`` wins when several are open.
        """
        employees = (
            await self.session.execute(
                select(Employee)
                .where(
                    and_(
                        Employee.tenant_id == tenant_id,
                        Employee.status == "active",
                    )
                )
                .order_by(Employee.employee_code)
            )
        ).scalars().all()

        if not employees:
            return []

        history = (
            await self.session.execute(
                select(EmployeeJobHistory)
                .where(
                    and_(
                        EmployeeJobHistory.tenant_id == tenant_id,
                        EmployeeJobHistory.employee_id.in_([e.employee_id for e in employees]),
                        EmployeeJobHistory.valid_to.is_(None),
                    )
                )
                .order_by(EmployeeJobHistory.valid_from.desc())
            )
        ).scalars().all()

        current: dict[UUID, UUID | None] = {}
        for row in history:
            # Rows arrive newest first; keep the first one seen per employee
            current.setdefault(row.employee_id, row.salary_structure_id)

        return [
            EmployeeAssignment(
                employee_id=e.employee_id,
                employee_code=e.employee_code,
                current_structure_id=current.get(e.employee_id),
            )
            for e in employees
        ]

    async def get_attendance_summary(
        self, tenant_id: UUID, employee_id: UUID, month: int, year: int
    ) -> AttendanceSummary:
        start = date(year, month, 1)
        end = date(year, month, monthrange(year, month)[1])

        rows = (
            await self.session.execute(
                select(AttendanceLog.status, func.count())
                .where(
                    and_(
                        AttendanceLog.tenant_id == tenant_id,
                        AttendanceLog.employee_id == employee_id,
                        AttendanceLog.attendance_date >= start,
                        AttendanceLog.attendance_date <= end,
                    )
                )
                .group_by(AttendanceLog.status)
            )
        ).all()

        recorded = sum(count for _, count in rows)
        present = sum(count for status, count in rows if status in PRESENT_STATUSES)
        return AttendanceSummary(recorded_days=recorded, present_days=present)

    async def get_salary_structure(
        self, tenant_id: UUID, structure_id: UUID
    ) -> StructureDefinition | None:
        structure = (
            await self.session.execute(
                select(SalaryStructure)
                .options(selectinload(SalaryStructure.lines))
                .where(
                    and_(
                        SalaryStructure.tenant_id == tenant_id,
                        SalaryStructure.salary_structure_id == structure_id,
                    )
                )
            )
        ).scalar_one_or_none()

        if structure is None:
            return None

        return StructureDefinition(
            structure_id=structure.salary_structure_id,
            name=structure.name,
            lines=tuple(structure.to_lines()),
        )

    async def get_salary_components(
        self, tenant_id: UUID, component_ids: Iterable[UUID]
    ) -> dict[UUID, ComponentInfo]:
        ids = list(set(component_ids))
        if not ids:
            return {}

        components = (
            await self.session.execute(
                select(SalaryComponent).where(
                    and_(
                        SalaryComponent.tenant_id == tenant_id,
                        SalaryComponent.salary_component_id.in_(ids),
                    )
                )
            )
        ).scalars().all()

        return {c.salary_component_id: c.to_info() for c in components}
