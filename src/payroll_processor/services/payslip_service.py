"""Read access to persisted payslips."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_processor.errors import RunNotFoundError
from payroll_processor.models import Employee, PayrollRun, Payslip


class PayslipService:
    """Payslips are written only by run processing and never updated, so
    this service is read-only."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _with_relations(query):
        return query.options(
            selectinload(Payslip.lines),
            selectinload(Payslip.employee),
            selectinload(Payslip.payroll_run),
        ).execution_options(populate_existing=True)

    async def get_payslip(self, tenant_id: UUID, payslip_id: UUID) -> Payslip | None:
        result = await self.session.execute(
            self._with_relations(
                select(Payslip).where(
                    and_(Payslip.tenant_id == tenant_id, Payslip.payslip_id == payslip_id)
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_payslips_by_run(self, tenant_id: UUID, run_id: UUID) -> list[Payslip]:
        """Payslips of a run ordered by employee code.

        Raises:
            RunNotFoundError: No such run for the tenant
        """
        run_exists = await self.session.execute(
            select(PayrollRun.payroll_run_id).where(
                and_(PayrollRun.tenant_id == tenant_id, PayrollRun.payroll_run_id == run_id)
            )
        )
        if run_exists.first() is None:
            raise RunNotFoundError(run_id)

        result = await self.session.execute(
            self._with_relations(
                select(Payslip)
                .join(Employee, Employee.employee_id == Payslip.employee_id)
                .where(and_(Payslip.tenant_id == tenant_id, Payslip.payroll_run_id == run_id))
                .order_by(Employee.employee_code)
            )
        )
        return list(result.scalars().all())

    async def get_payslips_by_employee(
        self, tenant_id: UUID, employee_id: UUID, year: int | None = None
    ) -> list[Payslip]:
        """An employee's payslips, newest period first."""
        query = (
            select(Payslip)
            .join(PayrollRun, PayrollRun.payroll_run_id == Payslip.payroll_run_id)
            .where(and_(Payslip.tenant_id == tenant_id, Payslip.employee_id == employee_id))
        )
        if year is not None:
            query = query.where(PayrollRun.year == year)

        result = await self.session.execute(
            self._with_relations(query.order_by(PayrollRun.year.desc(), PayrollRun.month.desc()))
        )
        return list(result.scalars().all())
