"""Payslip API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query, status

from payroll_processor.api.dependencies import PayslipReader, TenantId
from payroll_processor.api.schemas import ErrorResponse, PayslipResponse

router = APIRouter(tags=["payslips"])


@router.get(
    "/payslips/{payslip_id}",
    response_model=PayslipResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payslip(
    tenant_id: TenantId,
    payslips: PayslipReader,
    payslip_id: Annotated[UUID, Path()],
) -> PayslipResponse:
    """Get a single payslip with its breakdown."""
    payslip = await payslips.get_payslip(tenant_id, payslip_id)
    if payslip is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payslip not found",
        )
    return PayslipResponse.from_payslip(payslip)


@router.get("/employees/{employee_id}/payslips", response_model=list[PayslipResponse])
async def list_employee_payslips(
    tenant_id: TenantId,
    payslips: PayslipReader,
    employee_id: Annotated[UUID, Path()],
    year: Annotated[int | None, Query(ge=2020, le=2100)] = None,
) -> list[PayslipResponse]:
    """List an employee's payslips, newest period first."""
    items = await payslips.get_payslips_by_employee(tenant_id, employee_id, year)
    return [PayslipResponse.from_payslip(p) for p in items]
