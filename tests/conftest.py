"""Pytest fixtures for payroll processor tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from payroll_processor.calculators.types import CalculationKind, StructureLine
from payroll_processor.database import create_schema, make_session_factory
from payroll_processor.models import (
    AttendanceLog,
    Employee,
    EmployeeJobHistory,
    SalaryComponent,
    SalaryStructure,
    SalaryStructureLine,
)

# In-memory SQLite shared across the engine's single connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_tenant_id() -> UUID:
    return uuid4()


class PayrollSeeder:
    """Writes collaborator and catalog rows straight through the ORM."""

    def __init__(self, session: AsyncSession, tenant_id: UUID):
        self.session = session
        self.tenant_id = tenant_id

    async def component(
        self,
        code: str,
        kind: str = "earning",
        name: str | None = None,
        is_active: bool = True,
    ) -> SalaryComponent:
        component = SalaryComponent(
            tenant_id=self.tenant_id,
            code=code,
            name=name or code.title(),
            kind=kind,
            is_active=is_active,
        )
        self.session.add(component)
        await self.session.flush()
        return component

    async def structure(
        self,
        name: str,
        lines: Iterable[tuple[SalaryComponent, str, CalculationKind]],
    ) -> SalaryStructure:
        structure = SalaryStructure(tenant_id=self.tenant_id, name=name)
        structure.lines = [
            SalaryStructureLine(
                position=position,
                salary_component_id=component.salary_component_id,
                amount=Decimal(amount),
                calculation_kind=kind.value,
            )
            for position, (component, amount, kind) in enumerate(lines, start=1)
        ]
        self.session.add(structure)
        await self.session.flush()
        return structure

    async def employee(
        self,
        code: str,
        structure: SalaryStructure | None = None,
        status: str = "active",
        valid_from: date = date(2025, 1, 1),
    ) -> Employee:
        employee = Employee(
            tenant_id=self.tenant_id,
            employee_code=code,
            first_name=code.title(),
            last_name="Tester",
            status=status,
        )
        self.session.add(employee)
        await self.session.flush()

        if structure is not None:
            await self.assign(employee, structure, valid_from)
        return employee

    async def assign(
        self,
        employee: Employee,
        structure: SalaryStructure | None,
        valid_from: date,
        valid_to: date | None = None,
    ) -> EmployeeJobHistory:
        history = EmployeeJobHistory(
            tenant_id=self.tenant_id,
            employee_id=employee.employee_id,
            salary_structure_id=structure.salary_structure_id if structure else None,
            valid_from=valid_from,
            valid_to=valid_to,
        )
        self.session.add(history)
        await self.session.flush()
        return history

    async def attendance(
        self, employee: Employee, days: Iterable[date], status: str = "present"
    ) -> None:
        self.session.add_all(
            AttendanceLog(
                tenant_id=self.tenant_id,
                employee_id=employee.employee_id,
                attendance_date=day,
                status=status,
            )
            for day in days
        )
        await self.session.flush()


@pytest.fixture
def seeder(session: AsyncSession, tenant_id: UUID) -> PayrollSeeder:
    return PayrollSeeder(session, tenant_id)


@pytest_asyncio.fixture
async def components(seeder: PayrollSeeder) -> dict[str, SalaryComponent]:
    """Basic/HRA earnings and Tax/PF deductions."""
    return {
        "BASIC": await seeder.component("BASIC", "earning", "Basic Salary"),
        "HRA": await seeder.component("HRA", "earning", "House Rent Allowance"),
        "TAX": await seeder.component("TAX", "deduction", "Income Tax"),
        "PF": await seeder.component("PF", "deduction", "Provident Fund"),
    }


@pytest_asyncio.fixture
async def standard_structure(
    seeder: PayrollSeeder, components: dict[str, SalaryComponent]
) -> SalaryStructure:
    """Basic 5000 fixed earning with a 10% tax deduction."""
    return await seeder.structure(
        "Standard",
        [
            (components["BASIC"], "5000", CalculationKind.FIXED),
            (components["TAX"], "10", CalculationKind.PERCENTAGE),
        ],
    )


@pytest.fixture
def make_line():
    """Build a StructureLine for a seeded component."""

    def _make(
        component: SalaryComponent, amount: str, kind: CalculationKind = CalculationKind.FIXED
    ) -> StructureLine:
        return StructureLine(
            component_id=component.salary_component_id,
            amount=Decimal(amount),
            calculation_kind=kind,
        )

    return _make
