"""Payroll run API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query, status

from payroll_processor.api.dependencies import DbSession, PayslipReader, RunService, TenantId
from payroll_processor.api.schemas import (
    ErrorResponse,
    PayrollRunCreate,
    PayrollRunResponse,
    PayslipResponse,
    RunSummaryResponse,
)

router = APIRouter(prefix="/payroll-runs", tags=["payroll-runs"])


async def _run_response(service: RunService, tenant_id: UUID, run_id: UUID) -> PayrollRunResponse:
    details = await service.get_run(tenant_id, run_id)
    if details is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payroll run not found",
        )
    return PayrollRunResponse.from_details(details)


@router.post(
    "",
    response_model=PayrollRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_payroll_run(
    db: DbSession,
    tenant_id: TenantId,
    service: RunService,
    payload: PayrollRunCreate,
) -> PayrollRunResponse:
    """Create a draft payroll run for a calendar month."""
    run = await service.create_run(tenant_id, payload.month, payload.year)
    await db.commit()
    return await _run_response(service, tenant_id, run.payroll_run_id)


@router.get("", response_model=list[PayrollRunResponse])
async def list_payroll_runs(
    tenant_id: TenantId,
    service: RunService,
    year: Annotated[int | None, Query(ge=2020, le=2100)] = None,
) -> list[PayrollRunResponse]:
    """List payroll runs, newest period first."""
    runs = await service.list_runs(tenant_id, year)
    return [PayrollRunResponse.from_details(details) for details in runs]


@router.get(
    "/{run_id}",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_run(
    tenant_id: TenantId,
    service: RunService,
    run_id: Annotated[UUID, Path()],
) -> PayrollRunResponse:
    """Get a payroll run with its totals."""
    return await _run_response(service, tenant_id, run_id)


@router.post(
    "/{run_id}/process",
    response_model=RunSummaryResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def process_payroll_run(
    tenant_id: TenantId,
    service: RunService,
    run_id: Annotated[UUID, Path()],
) -> RunSummaryResponse:
    """Generate payslips for every active employee and complete the run."""
    summary = await service.process_run(tenant_id, run_id)
    return RunSummaryResponse.from_summary(summary)


@router.delete(
    "/{run_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_payroll_run(
    db: DbSession,
    tenant_id: TenantId,
    service: RunService,
    run_id: Annotated[UUID, Path()],
) -> None:
    """Delete a payroll run that is still in draft."""
    deleted = await service.delete_run(tenant_id, run_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payroll run not found",
        )
    await db.commit()


@router.get(
    "/{run_id}/payslips",
    response_model=list[PayslipResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_run_payslips(
    tenant_id: TenantId,
    payslips: PayslipReader,
    run_id: Annotated[UUID, Path()],
) -> list[PayslipResponse]:
    """List the payslips of a run, ordered by employee code."""
    items = await payslips.get_payslips_by_run(tenant_id, run_id)
    return [PayslipResponse.from_payslip(p) for p in items]
