"""Salary component API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query, status

from payroll_processor.api.dependencies import ComponentService, DbSession, TenantId
from payroll_processor.api.schemas import (
    ErrorResponse,
    SalaryComponentCreate,
    SalaryComponentResponse,
    SalaryComponentUpdate,
)
from payroll_processor.calculators.types import ComponentKind

router = APIRouter(prefix="/salary-components", tags=["salary-components"])


@router.post(
    "",
    response_model=SalaryComponentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_salary_component(
    db: DbSession,
    tenant_id: TenantId,
    service: ComponentService,
    payload: SalaryComponentCreate,
) -> SalaryComponentResponse:
    """Create an earning or deduction component."""
    component = await service.create_component(
        tenant_id,
        code=payload.code,
        name=payload.name,
        kind=payload.kind,
        is_taxable=payload.is_taxable,
    )
    await db.commit()
    return SalaryComponentResponse.model_validate(component)


@router.get("", response_model=list[SalaryComponentResponse])
async def list_salary_components(
    tenant_id: TenantId,
    service: ComponentService,
    include_inactive: bool = False,
    kind: Annotated[ComponentKind | None, Query()] = None,
) -> list[SalaryComponentResponse]:
    """List components ordered by kind, then name."""
    components = await service.list_components(tenant_id, include_inactive, kind)
    return [SalaryComponentResponse.model_validate(c) for c in components]


@router.get(
    "/{component_id}",
    response_model=SalaryComponentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_salary_component(
    tenant_id: TenantId,
    service: ComponentService,
    component_id: Annotated[UUID, Path()],
) -> SalaryComponentResponse:
    """Get a component."""
    component = await service.get_component(tenant_id, component_id)
    if component is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salary component not found",
        )
    return SalaryComponentResponse.model_validate(component)


@router.patch(
    "/{component_id}",
    response_model=SalaryComponentResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_salary_component(
    db: DbSession,
    tenant_id: TenantId,
    service: ComponentService,
    component_id: Annotated[UUID, Path()],
    payload: SalaryComponentUpdate,
) -> SalaryComponentResponse:
    """Update a component; code and kind are frozen once in use."""
    component = await service.update_component(
        tenant_id,
        component_id,
        code=payload.code,
        name=payload.name,
        kind=payload.kind,
        is_taxable=payload.is_taxable,
        is_active=payload.is_active,
    )
    await db.commit()
    return SalaryComponentResponse.model_validate(component)


@router.delete(
    "/{component_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_salary_component(
    db: DbSession,
    tenant_id: TenantId,
    service: ComponentService,
    component_id: Annotated[UUID, Path()],
) -> None:
    """Deactivate a component that no structure uses."""
    deleted = await service.delete_component(tenant_id, component_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Salary component not found",
        )
    await db.commit()
