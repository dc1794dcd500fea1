"""Salary structure API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query, status

from payroll_processor.api.dependencies import DbSession, StructureService, TenantId
from payroll_processor.api.schemas import (
    ErrorResponse,
    GrossSalaryResponse,
    SalaryStructureCreate,
    SalaryStructureResponse,
    SalaryStructureUpdate,
)

router = APIRouter(prefix="/salary-structures", tags=["salary-structures"])


async def _structure_response(
    service: StructureService, tenant_id: UUID, structure_id: UUID
) -> SalaryStructureResponse:
    details = await service.get_structure_details(tenant_id, structure_id)
    if details is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salary structure not found",
        )
    return SalaryStructureResponse.from_details(details)


@router.post(
    "",
    response_model=SalaryStructureResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_salary_structure(
    db: DbSession,
    tenant_id: TenantId,
    service: StructureService,
    payload: SalaryStructureCreate,
) -> SalaryStructureResponse:
    """Create a structure; every line must cite an active component."""
    structure = await service.create_structure(
        tenant_id, payload.name, [line.to_line() for line in payload.lines]
    )
    await db.commit()
    return await _structure_response(service, tenant_id, structure.salary_structure_id)


@router.get("", response_model=list[SalaryStructureResponse])
async def list_salary_structures(
    tenant_id: TenantId,
    service: StructureService,
) -> list[SalaryStructureResponse]:
    """List structures ordered by name."""
    structures = await service.list_structures(tenant_id)
    return [SalaryStructureResponse.from_details(details) for details in structures]


@router.get(
    "/{structure_id}",
    response_model=SalaryStructureResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_salary_structure(
    tenant_id: TenantId,
    service: StructureService,
    structure_id: Annotated[UUID, Path()],
) -> SalaryStructureResponse:
    """Get a structure with resolved components and monthly gross."""
    return await _structure_response(service, tenant_id, structure_id)


@router.put(
    "/{structure_id}",
    response_model=SalaryStructureResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_salary_structure(
    db: DbSession,
    tenant_id: TenantId,
    service: StructureService,
    structure_id: Annotated[UUID, Path()],
    payload: SalaryStructureUpdate,
) -> SalaryStructureResponse:
    """Rename a structure and/or replace its lines."""
    lines = [line.to_line() for line in payload.lines] if payload.lines is not None else None
    await service.update_structure(tenant_id, structure_id, name=payload.name, lines=lines)
    await db.commit()
    return await _structure_response(service, tenant_id, structure_id)


@router.delete(
    "/{structure_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_salary_structure(
    db: DbSession,
    tenant_id: TenantId,
    service: StructureService,
    structure_id: Annotated[UUID, Path()],
) -> None:
    """Delete a structure no employee is assigned to."""
    deleted = await service.delete_structure(tenant_id, structure_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salary structure not found",
        )
    await db.commit()


@router.get(
    "/{structure_id}/gross",
    response_model=GrossSalaryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def calculate_gross_salary(
    tenant_id: TenantId,
    service: StructureService,
    structure_id: Annotated[UUID, Path()],
    working_days: Annotated[int, Query()],
    present_days: Annotated[int, Query()],
) -> GrossSalaryResponse:
    """Pro-rated gross salary for the given working and present days."""
    gross = await service.calculate_gross_salary(
        tenant_id, structure_id, working_days, present_days
    )
    return GrossSalaryResponse(
        salary_structure_id=structure_id,
        working_days=working_days,
        present_days=present_days,
        gross_salary=gross,
    )
