"""Salary structure management and gross salary calculation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_processor.calculators.line_builder import BreakdownLineBuilder
from payroll_processor.calculators.structure_resolver import SalaryStructureResolver
from payroll_processor.calculators.types import ComponentKind, StructureLine
from payroll_processor.errors import StructureInUseError, StructureNotFoundError
from payroll_processor.models import (
    EmployeeJobHistory,
    SalaryStructure,
    SalaryStructureLine,
)
from payroll_processor.models.base import utcnow
from payroll_processor.services.payroll_inputs import SqlPayrollInputs

logger = logging.getLogger(__name__)


@dataclass
class StructureDetails:
    """A structure together with its derived figures."""

    structure: SalaryStructure
    total_monthly_gross: Decimal
    employees_using_count: int


class SalaryStructureService:
    """Service for salary structures.

    Lines are validated eagerly on every save: the structure must have at
    least one line, and every line must cite an existing, active component
    of the same tenant. A structure cannot be deleted while any employee's
    job history points at it.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.inputs = SqlPayrollInputs(session)

    async def get_structure(
        self, tenant_id: UUID, structure_id: UUID
    ) -> SalaryStructure | None:
        result = await self.session.execute(
            select(SalaryStructure)
            .options(
                selectinload(SalaryStructure.lines).selectinload(SalaryStructureLine.component)
            )
            .where(
                and_(
                    SalaryStructure.tenant_id == tenant_id,
                    SalaryStructure.salary_structure_id == structure_id,
                )
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_structure_details(
        self, tenant_id: UUID, structure_id: UUID
    ) -> StructureDetails | None:
        structure = await self.get_structure(tenant_id, structure_id)
        if structure is None:
            return None
        return await self._details(tenant_id, structure)

    async def list_structures(self, tenant_id: UUID) -> list[StructureDetails]:
        """List structures ordered by name."""
        result = await self.session.execute(
            select(SalaryStructure)
            .options(
                selectinload(SalaryStructure.lines).selectinload(SalaryStructureLine.component)
            )
            .where(SalaryStructure.tenant_id == tenant_id)
            .order_by(SalaryStructure.name)
            .execution_options(populate_existing=True)
        )
        return [await self._details(tenant_id, s) for s in result.scalars().all()]

    async def create_structure(
        self,
        tenant_id: UUID,
        name: str,
        lines: Sequence[StructureLine],
    ) -> SalaryStructure:
        """Create a structure after validating its lines.

        Raises:
            EmptyStructureError, InvalidArgumentError,
            InvalidComponentReferenceError, InactiveComponentError
        """
        await self.validate_lines(tenant_id, lines, name)

        structure = SalaryStructure(tenant_id=tenant_id, name=name)
        structure.lines = self._build_lines(lines)
        self.session.add(structure)
        await self.session.flush()

        logger.info(
            "Created salary structure '%s' with %d line(s) for tenant %s",
            name,
            len(lines),
            tenant_id,
        )
        return await self.get_structure(tenant_id, structure.salary_structure_id)

    async def update_structure(
        self,
        tenant_id: UUID,
        structure_id: UUID,
        name: str | None = None,
        lines: Sequence[StructureLine] | None = None,
    ) -> SalaryStructure:
        """Rename a structure and/or replace its lines.

        Raises:
            StructureNotFoundError: No such structure for the tenant
            EmptyStructureError, InvalidArgumentError,
            InvalidComponentReferenceError, InactiveComponentError
        """
        structure = await self.get_structure(tenant_id, structure_id)
        if structure is None:
            raise StructureNotFoundError(structure_id)

        if lines is not None:
            await self.validate_lines(tenant_id, lines, name or structure.name)
            # Old rows must be gone before new positions are inserted
            structure.lines.clear()
            await self.session.flush()
            structure.lines.extend(self._build_lines(lines))

        if name is not None:
            structure.name = name
        structure.updated_at = utcnow()
        await self.session.flush()

        return await self.get_structure(tenant_id, structure_id)

    async def delete_structure(self, tenant_id: UUID, structure_id: UUID) -> bool:
        """Delete a structure.

        Returns False if the structure does not exist.

        Raises:
            StructureInUseError: Employees still reference the structure
        """
        structure = await self.get_structure(tenant_id, structure_id)
        if structure is None:
            return False

        employee_count = await self.count_employees_using(tenant_id, structure_id)
        if employee_count > 0:
            raise StructureInUseError(structure_id, employee_count)

        await self.session.delete(structure)
        await self.session.flush()

        logger.info("Deleted salary structure '%s' for tenant %s", structure.name, tenant_id)
        return True

    async def calculate_gross_salary(
        self,
        tenant_id: UUID,
        structure_id: UUID,
        working_days: int,
        present_days: int,
    ) -> Decimal:
        """Pro-rated gross salary of a structure for the given attendance.

        Raises:
            InvalidArgumentError: Impossible working/present day counts
            StructureNotFoundError: No such structure for the tenant
            InvalidComponentReferenceError, InactiveComponentError
        """
        SalaryStructureResolver.validate_days(working_days, present_days)

        definition = await self.inputs.get_salary_structure(tenant_id, structure_id)
        if definition is None:
            raise StructureNotFoundError(structure_id)

        components = await self.inputs.get_salary_components(
            tenant_id, [line.component_id for line in definition.lines]
        )
        resolved = SalaryStructureResolver.resolve(
            definition.lines, components, working_days, present_days
        )
        return resolved.gross_pro_rated

    async def validate_lines(
        self,
        tenant_id: UUID,
        lines: Sequence[StructureLine],
        structure_name: str | None = None,
    ) -> None:
        components = await self.inputs.get_salary_components(
            tenant_id, [line.component_id for line in lines]
        )
        SalaryStructureResolver.validate_lines(lines, components, structure_name)

    async def count_employees_using(self, tenant_id: UUID, structure_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count(EmployeeJobHistory.employee_id.distinct())).where(
                and_(
                    EmployeeJobHistory.tenant_id == tenant_id,
                    EmployeeJobHistory.salary_structure_id == structure_id,
                )
            )
        )
        return int(result.scalar_one())

    async def _details(self, tenant_id: UUID, structure: SalaryStructure) -> StructureDetails:
        return StructureDetails(
            structure=structure,
            total_monthly_gross=self.monthly_gross(structure),
            employees_using_count=await self.count_employees_using(
                tenant_id, structure.salary_structure_id
            ),
        )

    @staticmethod
    def monthly_gross(structure: SalaryStructure) -> Decimal:
        """Unprorated monthly gross, including percentage earnings.

        Computed without the active-component check so that structures
        citing since-deactivated components can still be listed.
        """
        components = {line.salary_component_id: line.component.to_info() for line in structure.lines}
        lines = structure.to_lines()
        base = SalaryStructureResolver.fixed_earnings_base(lines, components)
        total = Decimal("0")
        for line in lines:
            if components[line.component_id].kind == ComponentKind.EARNING:
                total += BreakdownLineBuilder.monthly_amount(
                    line.amount, line.calculation_kind, base
                )
        return BreakdownLineBuilder.round_to_cents(total)

    @staticmethod
    def _build_lines(lines: Sequence[StructureLine]) -> list[SalaryStructureLine]:
        return [
            SalaryStructureLine(
                position=position,
                salary_component_id=line.component_id,
                amount=line.amount,
                calculation_kind=line.calculation_kind.value,
            )
            for position, line in enumerate(lines, start=1)
        ]
