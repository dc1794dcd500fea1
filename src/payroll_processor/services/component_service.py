"""Salary component catalog management."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_processor.calculators.types import ComponentKind
from payroll_processor.errors import (
    ComponentInUseError,
    ComponentNotFoundError,
    DuplicateComponentCodeError,
)
from payroll_processor.models import (
    EmployeeJobHistory,
    SalaryComponent,
    SalaryStructure,
    SalaryStructureLine,
)
from payroll_processor.models.base import utcnow

logger = logging.getLogger(__name__)


class SalaryComponentService:
    """Service for the per-tenant catalog of earnings and deductions.

    Components are never hard-deleted: deleting one deactivates it, and
    that is refused while any salary structure still lists it. Once a
    component sits in a structure that is assigned to an employee, its code
    and kind are frozen so past payslips keep their meaning.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_component(
        self, tenant_id: UUID, component_id: UUID
    ) -> SalaryComponent | None:
        result = await self.session.execute(
            select(SalaryComponent).where(
                and_(
                    SalaryComponent.tenant_id == tenant_id,
                    SalaryComponent.salary_component_id == component_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def list_components(
        self,
        tenant_id: UUID,
        include_inactive: bool = False,
        kind: ComponentKind | str | None = None,
    ) -> list[SalaryComponent]:
        """List components ordered by kind, then name."""
        query = select(SalaryComponent).where(SalaryComponent.tenant_id == tenant_id)
        if not include_inactive:
            query = query.where(SalaryComponent.is_active.is_(True))
        if kind is not None:
            query = query.where(SalaryComponent.kind == ComponentKind(kind).value)

        result = await self.session.execute(
            query.order_by(SalaryComponent.kind, SalaryComponent.name)
        )
        return list(result.scalars().all())

    async def create_component(
        self,
        tenant_id: UUID,
        code: str,
        name: str,
        kind: ComponentKind | str,
        is_taxable: bool = False,
    ) -> SalaryComponent:
        """Create a component.

        Raises:
            DuplicateComponentCodeError: Code already used within the tenant
        """
        await self._ensure_code_available(tenant_id, code)

        component = SalaryComponent(
            tenant_id=tenant_id,
            code=code,
            name=name,
            kind=ComponentKind(kind).value,
            is_taxable=is_taxable,
            is_active=True,
        )
        self.session.add(component)
        await self.session.flush()

        logger.info("Created salary component %s for tenant %s", code, tenant_id)
        return component

    async def update_component(
        self,
        tenant_id: UUID,
        component_id: UUID,
        code: str | None = None,
        name: str | None = None,
        kind: ComponentKind | str | None = None,
        is_taxable: bool | None = None,
        is_active: bool | None = None,
    ) -> SalaryComponent:
        """Update a component in place.

        Raises:
            ComponentNotFoundError: No such component for the tenant
            DuplicateComponentCodeError: New code already used
            ComponentInUseError: Code or kind change on a component that is
                part of a structure assigned to an employee
        """
        component = await self.get_component(tenant_id, component_id)
        if component is None:
            raise ComponentNotFoundError(component_id)

        new_kind = ComponentKind(kind).value if kind is not None else None
        code_changed = code is not None and code != component.code
        kind_changed = new_kind is not None and new_kind != component.kind

        if code_changed or kind_changed:
            if await self.count_assigned_employees(tenant_id, component_id) > 0:
                raise ComponentInUseError(
                    component_id,
                    component.code,
                    "is used by a salary structure assigned to employees; "
                    "its code and kind cannot be changed",
                )
        if code_changed:
            await self._ensure_code_available(tenant_id, code)
            component.code = code
        if new_kind is not None:
            component.kind = new_kind
        if name is not None:
            component.name = name
        if is_taxable is not None:
            component.is_taxable = is_taxable
        if is_active is not None:
            component.is_active = is_active

        component.updated_at = utcnow()
        await self.session.flush()
        return component

    async def delete_component(self, tenant_id: UUID, component_id: UUID) -> bool:
        """Deactivate a component.

        Returns False if the component does not exist.

        Raises:
            ComponentInUseError: Component is listed in any salary structure
        """
        component = await self.get_component(tenant_id, component_id)
        if component is None:
            return False

        structure_count = await self.count_structures_using(tenant_id, component_id)
        if structure_count > 0:
            raise ComponentInUseError(
                component_id,
                component.code,
                f"is used in {structure_count} salary structure(s) and cannot be deleted",
            )

        component.is_active = False
        component.updated_at = utcnow()
        await self.session.flush()

        logger.info("Deactivated salary component %s for tenant %s", component.code, tenant_id)
        return True

    async def count_structures_using(self, tenant_id: UUID, component_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count(SalaryStructureLine.salary_structure_id.distinct()))
            .select_from(SalaryStructureLine)
            .join(
                SalaryStructure,
                SalaryStructure.salary_structure_id == SalaryStructureLine.salary_structure_id,
            )
            .where(
                and_(
                    SalaryStructureLine.salary_component_id == component_id,
                    SalaryStructure.tenant_id == tenant_id,
                )
            )
        )
        return int(result.scalar_one())

    async def count_assigned_employees(self, tenant_id: UUID, component_id: UUID) -> int:
        """Employees whose job history points at a structure listing the component."""
        result = await self.session.execute(
            select(func.count(EmployeeJobHistory.employee_id.distinct()))
            .select_from(EmployeeJobHistory)
            .join(
                SalaryStructureLine,
                SalaryStructureLine.salary_structure_id == EmployeeJobHistory.salary_structure_id,
            )
            .where(
                and_(
                    EmployeeJobHistory.tenant_id == tenant_id,
                    SalaryStructureLine.salary_component_id == component_id,
                )
            )
        )
        return int(result.scalar_one())

    async def _ensure_code_available(self, tenant_id: UUID, code: str) -> None:
        result = await self.session.execute(
            select(SalaryComponent.salary_component_id).where(
                and_(
                    SalaryComponent.tenant_id == tenant_id,
                    SalaryComponent.code == code,
                )
            )
        )
        if result.first() is not None:
            raise DuplicateComponentCodeError(code)
