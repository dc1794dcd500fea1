"""FastAPI dependencies: session, tenant and services."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_processor.database import init_db
from payroll_processor.services import (
    PayrollRunService,
    PayslipService,
    SalaryComponentService,
    SalaryStructureService,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; routes commit explicitly."""
    _, session_factory = init_db()
    async with session_factory() as session:
        yield session


async def get_tenant_id(
    x_tenant_id: Annotated[str | None, Header()] = None
) -> UUID:
    """Tenant is always explicit, taken from the X-Tenant-ID header."""
    if not x_tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID header is required",
        )
    try:
        return UUID(x_tenant_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Tenant-ID format",
        )


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
TenantId = Annotated[UUID, Depends(get_tenant_id)]


def get_payroll_run_service(db: DbSession) -> PayrollRunService:
    return PayrollRunService(db)


def get_component_service(db: DbSession) -> SalaryComponentService:
    return SalaryComponentService(db)


def get_structure_service(db: DbSession) -> SalaryStructureService:
    return SalaryStructureService(db)


def get_payslip_service(db: DbSession) -> PayslipService:
    return PayslipService(db)


RunService = Annotated[PayrollRunService, Depends(get_payroll_run_service)]
ComponentService = Annotated[SalaryComponentService, Depends(get_component_service)]
StructureService = Annotated[SalaryStructureService, Depends(get_structure_service)]
PayslipReader = Annotated[PayslipService, Depends(get_payslip_service)]
