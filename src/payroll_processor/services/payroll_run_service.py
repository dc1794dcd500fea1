"""Payroll run service - orchestrates run lifecycle and processing."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_processor.calculators.line_builder import BreakdownLineBuilder
from payroll_processor.calculators.structure_resolver import SalaryStructureResolver
from payroll_processor.calculators.types import ComponentInfo, ComponentKind, ResolvedSalary
from payroll_processor.calculators.work_calendar import month_display, working_days_in_month
from payroll_processor.config import AttendanceFallback, get_settings
from payroll_processor.errors import (
    DuplicateRunError,
    InvalidArgumentError,
    InvalidStateTransitionError,
    PayrollError,
    PayrollProcessingError,
    PayrollRunCancelledError,
    RunNotFoundError,
)
from payroll_processor.models import PayrollRun, Payslip, PayslipLine
from payroll_processor.models.base import utcnow
from payroll_processor.services.payroll_inputs import (
    EmployeeAssignment,
    PayrollInputs,
    SqlPayrollInputs,
    StructureDefinition,
)
from payroll_processor.services.state_machine import PayrollRunStateMachine, PayrollRunStatus

logger = logging.getLogger(__name__)

MIN_YEAR = 2020
MAX_YEAR = 2100


@dataclass
class RunSummary:
    """Outcome of one processing pass."""

    run_id: UUID
    processed_count: int
    skipped_count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal


@dataclass
class RunDetails:
    """A run with aggregates derived from its payslips."""

    run: PayrollRun
    month_year_display: str
    total_employees: int
    processed_payslips: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal

    @classmethod
    def from_run(cls, run: PayrollRun) -> RunDetails:
        payslips = run.payslips
        return cls(
            run=run,
            month_year_display=month_display(run.month, run.year),
            total_employees=run.total_employees,
            processed_payslips=len(payslips),
            total_gross=_total(p.gross_earnings for p in payslips),
            total_deductions=_total(p.total_deductions for p in payslips),
            total_net=_total(p.net_pay for p in payslips),
        )


def _total(amounts) -> Decimal:
    return BreakdownLineBuilder.round_to_cents(sum(amounts, Decimal("0")))


class PayrollRunService:
    """Service for managing the payroll run lifecycle.

    Operations:
    - create_run: Open a draft run for a tenant's calendar month
    - process_run: Compute and persist one payslip per active employee
    - delete_run: Remove a run that is still in draft
    - get_run / list_runs: Read runs with payslip aggregates

    The run's status column is the single point of serialization. Every
    status change is a conditional UPDATE guarded by the expected current
    status, so two concurrent ``process_run`` calls cannot both leave draft.

    Transactions: ``create_run`` and ``delete_run`` only flush and leave the
    commit to the caller. ``process_run`` commits on its own, because the
    draft → processing flip must be durable before any employee is touched.
    """

    def __init__(
        self,
        session: AsyncSession,
        inputs: PayrollInputs | None = None,
        attendance_fallback: AttendanceFallback | None = None,
    ):
        self.session = session
        self.inputs = inputs if inputs is not None else SqlPayrollInputs(session)
        self.attendance_fallback = (
            attendance_fallback
            if attendance_fallback is not None
            else get_settings().attendance_fallback
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _load_run(
        self, tenant_id: UUID, run_id: UUID, load_payslips: bool = False
    ) -> PayrollRun | None:
        query = select(PayrollRun).where(
            and_(PayrollRun.tenant_id == tenant_id, PayrollRun.payroll_run_id == run_id)
        )
        if load_payslips:
            query = query.options(selectinload(PayrollRun.payslips))
        result = await self.session.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def get_run(self, tenant_id: UUID, run_id: UUID) -> RunDetails | None:
        """Load a run with its aggregates, or None if it does not exist."""
        run = await self._load_run(tenant_id, run_id, load_payslips=True)
        if run is None:
            return None
        return RunDetails.from_run(run)

    async def list_runs(self, tenant_id: UUID, year: int | None = None) -> list[RunDetails]:
        """List runs newest period first, optionally for a single year."""
        query = select(PayrollRun).where(PayrollRun.tenant_id == tenant_id)
        if year is not None:
            query = query.where(PayrollRun.year == year)

        result = await self.session.execute(
            query.options(selectinload(PayrollRun.payslips))
            .order_by(PayrollRun.year.desc(), PayrollRun.month.desc())
            .execution_options(populate_existing=True)
        )
        return [RunDetails.from_run(run) for run in result.scalars().all()]

    # ------------------------------------------------------------------
    # Create / delete
    # ------------------------------------------------------------------

    async def create_run(self, tenant_id: UUID, month: int, year: int) -> PayrollRun:
        """Create a draft run for (tenant, month, year).

        Raises:
            InvalidArgumentError: Month outside 1-12 or year outside 2020-2100
            DuplicateRunError: A run already exists for the period
        """
        if not 1 <= month <= 12:
            raise InvalidArgumentError("month", "Month must be between 1 and 12")
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise InvalidArgumentError(
                "year", f"Year must be between {MIN_YEAR} and {MAX_YEAR}"
            )

        period = month_display(month, year)
        existing = await self.session.execute(
            select(PayrollRun.payroll_run_id).where(
                and_(
                    PayrollRun.tenant_id == tenant_id,
                    PayrollRun.month == month,
                    PayrollRun.year == year,
                )
            )
        )
        if existing.first() is not None:
            raise DuplicateRunError(tenant_id, month, year, period)

        run = PayrollRun(
            tenant_id=tenant_id,
            month=month,
            year=year,
            status=PayrollRunStatus.DRAFT.value,
        )
        self.session.add(run)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent create for the same period
            await self.session.rollback()
            raise DuplicateRunError(tenant_id, month, year, period) from exc

        logger.info("Created payroll run %s for %s (tenant %s)", run.payroll_run_id, period, tenant_id)
        return run

    async def delete_run(self, tenant_id: UUID, run_id: UUID) -> bool:
        """Delete a draft run.

        Returns False if the run does not exist.

        Raises:
            InvalidStateTransitionError: Run is not in draft
        """
        run = await self._load_run(tenant_id, run_id)
        if run is None:
            return False

        period = month_display(run.month, run.year)
        PayrollRunStateMachine.validate_delete(run.status, run_id, period)

        result = await self.session.execute(
            delete(PayrollRun).where(
                and_(
                    PayrollRun.tenant_id == tenant_id,
                    PayrollRun.payroll_run_id == run_id,
                    PayrollRun.status == PayrollRunStatus.DRAFT.value,
                )
            )
        )
        if result.rowcount == 0:
            current = await self._load_run(tenant_id, run_id)
            if current is None:
                return False
            PayrollRunStateMachine.validate_delete(current.status, run_id, period)

        logger.info("Deleted payroll run %s for %s (tenant %s)", run_id, period, tenant_id)
        return True

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def _transition(
        self, run_id: UUID, from_status: PayrollRunStatus, to_status: PayrollRunStatus, **values
    ) -> bool:
        """Conditionally move a run between statuses; True if this call won."""
        PayrollRunStateMachine.validate_transition(from_status, to_status)
        result = await self.session.execute(
            update(PayrollRun)
            .where(
                PayrollRun.payroll_run_id == run_id,
                PayrollRun.status == from_status.value,
            )
            .values(status=to_status.value, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def process_run(
        self,
        tenant_id: UUID,
        run_id: UUID,
        cancel_event: asyncio.Event | None = None,
    ) -> RunSummary:
        """Process a draft run end to end.

        Args:
            tenant_id: Tenant owning the run
            run_id: The run to process
            cancel_event: Checked once per employee; when set, processing
                stops and the run is reverted to draft

        Returns:
            RunSummary with processed/skipped counts and totals

        Raises:
            RunNotFoundError: No such run for the tenant
            InvalidStateTransitionError: Run is not in draft
            PayrollRunCancelledError: cancel_event was set mid-run
            PayrollError: A validation error hit mid-run (for example a
                component deactivated after assignment); raised unchanged
                once the run is back in draft
            PayrollProcessingError: Anything else failed mid-run; the run is
                back in draft with no payslips and the cause is chained.
                ``reverted`` is False if the revert itself failed
        """
        run = await self._load_run(tenant_id, run_id)
        if run is None:
            raise RunNotFoundError(run_id)

        month, year = run.month, run.year
        period = month_display(month, year)
        PayrollRunStateMachine.validate_transition(
            run.status, PayrollRunStatus.PROCESSING, run_id, period
        )

        claimed = await self._transition(
            run_id, PayrollRunStatus.DRAFT, PayrollRunStatus.PROCESSING
        )
        if not claimed:
            await self.session.rollback()
            current = await self._load_run(tenant_id, run_id)
            if current is None:
                raise RunNotFoundError(run_id)
            raise InvalidStateTransitionError(
                current.status,
                PayrollRunStatus.PROCESSING.value,
                "status changed concurrently",
                run_id,
                period,
            )
        await self.session.commit()
        logger.info("Processing payroll run %s for %s (tenant %s)", run_id, period, tenant_id)

        try:
            summary = await self._process_employees(
                tenant_id, run_id, month, year, period, cancel_event
            )
            completed = await self._transition(
                run_id,
                PayrollRunStatus.PROCESSING,
                PayrollRunStatus.COMPLETED,
                processed_at=utcnow(),
                total_employees=summary.processed_count + summary.skipped_count,
            )
            if not completed:
                raise InvalidStateTransitionError(
                    PayrollRunStatus.PROCESSING.value,
                    PayrollRunStatus.COMPLETED.value,
                    "status changed during processing",
                    run_id,
                    period,
                )
            await self.session.commit()
        except PayrollRunCancelledError as exc:
            logger.warning("Payroll run %s for %s cancelled; reverting to draft", run_id, period)
            if not await self._revert_to_draft(run_id, period):
                raise PayrollRunCancelledError(run_id, period, reverted=False) from exc
            raise
        except asyncio.CancelledError:
            logger.warning("Payroll run %s for %s interrupted; reverting to draft", run_id, period)
            await self._revert_to_draft(run_id, period)
            raise
        except PayrollError as exc:
            # Validation and state errors reach the caller as-is
            logger.warning(
                "Payroll run %s for %s rejected (%s); reverting to draft",
                run_id,
                period,
                exc.error_code,
            )
            if not await self._revert_to_draft(run_id, period):
                raise PayrollProcessingError(run_id, period, exc.message, reverted=False) from exc
            raise
        except Exception as exc:
            logger.exception("Payroll run %s for %s failed; reverting to draft", run_id, period)
            reverted = await self._revert_to_draft(run_id, period)
            raise PayrollProcessingError(run_id, period, str(exc), reverted=reverted) from exc

        logger.info(
            "Completed payroll run %s for %s: %d payslip(s), %d skipped, net %s",
            run_id,
            period,
            summary.processed_count,
            summary.skipped_count,
            summary.total_net,
        )
        return summary

    async def _process_employees(
        self,
        tenant_id: UUID,
        run_id: UUID,
        month: int,
        year: int,
        period: str,
        cancel_event: asyncio.Event | None,
    ) -> RunSummary:
        working_days = working_days_in_month(year, month)
        employees = await self.inputs.get_active_employees(tenant_id)

        structures: dict[UUID, tuple[StructureDefinition | None, dict[UUID, ComponentInfo]]] = {}
        processed = skipped = 0
        total_gross = total_deductions = total_net = Decimal("0")

        for employee in employees:
            if cancel_event is not None and cancel_event.is_set():
                raise PayrollRunCancelledError(run_id, period)

            if employee.current_structure_id is None:
                logger.warning(
                    "Skipping employee %s in run %s: no salary structure assigned",
                    employee.employee_code,
                    run_id,
                )
                skipped += 1
                continue

            if employee.current_structure_id not in structures:
                definition = await self.inputs.get_salary_structure(
                    tenant_id, employee.current_structure_id
                )
                components: dict[UUID, ComponentInfo] = {}
                if definition is not None:
                    components = await self.inputs.get_salary_components(
                        tenant_id, [line.component_id for line in definition.lines]
                    )
                structures[employee.current_structure_id] = (definition, components)

            definition, components = structures[employee.current_structure_id]
            if definition is None:
                logger.warning(
                    "Skipping employee %s in run %s: salary structure %s not found",
                    employee.employee_code,
                    run_id,
                    employee.current_structure_id,
                )
                skipped += 1
                continue

            present_days = await self._present_days(
                tenant_id, employee, month, year, working_days
            )
            if present_days is None:
                logger.warning(
                    "Skipping employee %s in run %s: no attendance records for %s",
                    employee.employee_code,
                    run_id,
                    period,
                )
                skipped += 1
                continue

            resolved = SalaryStructureResolver.resolve(
                definition.lines, components, working_days, present_days
            )
            payslip = self._build_payslip(
                tenant_id, run_id, employee, working_days, present_days, resolved
            )
            self.session.add(payslip)
            await self.session.flush()

            processed += 1
            total_gross += payslip.gross_earnings
            total_deductions += payslip.total_deductions
            total_net += payslip.net_pay

        return RunSummary(
            run_id=run_id,
            processed_count=processed,
            skipped_count=skipped,
            total_gross=BreakdownLineBuilder.round_to_cents(total_gross),
            total_deductions=BreakdownLineBuilder.round_to_cents(total_deductions),
            total_net=BreakdownLineBuilder.round_to_cents(total_net),
        )

    async def _present_days(
        self,
        tenant_id: UUID,
        employee: EmployeeAssignment,
        month: int,
        year: int,
        working_days: int,
    ) -> int | None:
        """Present days for an employee-month; None means skip the employee."""
        summary = await self.inputs.get_attendance_summary(
            tenant_id, employee.employee_id, month, year
        )

        if summary.recorded_days == 0:
            if self.attendance_fallback == AttendanceFallback.FULL_ATTENDANCE:
                return working_days
            if self.attendance_fallback == AttendanceFallback.ZERO_ATTENDANCE:
                return 0
            return None

        if summary.present_days > working_days:
            logger.warning(
                "Employee %s has %d present day(s) but %d working day(s); clamping",
                employee.employee_code,
                summary.present_days,
                working_days,
            )
            return working_days
        return summary.present_days

    @staticmethod
    def _build_payslip(
        tenant_id: UUID,
        run_id: UUID,
        employee: EmployeeAssignment,
        working_days: int,
        present_days: int,
        resolved: ResolvedSalary,
    ) -> Payslip:
        net_pay = BreakdownLineBuilder.calculate_net_pay(
            resolved.gross_pro_rated, resolved.total_deductions
        )

        lines: list[PayslipLine] = []
        buckets = (
            (ComponentKind.EARNING, resolved.breakdown.earnings),
            (ComponentKind.DEDUCTION, resolved.breakdown.deductions),
        )
        for kind, bucket in buckets:
            for line in bucket:
                lines.append(
                    PayslipLine(
                        position=len(lines) + 1,
                        line_type=kind.value,
                        code=line.code,
                        name=line.name,
                        amount=line.amount,
                        calculation_note=line.calculation_note,
                    )
                )

        return Payslip(
            tenant_id=tenant_id,
            payroll_run_id=run_id,
            employee_id=employee.employee_id,
            working_days=working_days,
            present_days=present_days,
            gross_earnings=resolved.gross_pro_rated,
            total_deductions=resolved.total_deductions,
            net_pay=net_pay,
            lines=lines,
        )

    async def _revert_to_draft(self, run_id: UUID, period: str) -> bool:
        """Discard every payslip of the run and put it back in draft.

        Returns False when the revert itself failed and the run is left in
        processing.
        """
        try:
            await self.session.rollback()
            payslip_ids = select(Payslip.payslip_id).where(Payslip.payroll_run_id == run_id)
            await self.session.execute(
                delete(PayslipLine)
                .where(PayslipLine.payslip_id.in_(payslip_ids))
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(
                delete(Payslip)
                .where(Payslip.payroll_run_id == run_id)
                .execution_options(synchronize_session=False)
            )
            await self._transition(run_id, PayrollRunStatus.PROCESSING, PayrollRunStatus.DRAFT)
            await self.session.commit()
        except Exception:
            # Run stays visibly stuck in processing
            logger.exception("Could not revert payroll run %s for %s to draft", run_id, period)
            await self.session.rollback()
            return False

        logger.info("Reverted payroll run %s for %s to draft", run_id, period)
        return True
