"""Tests for the relational payroll inputs."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_processor.calculators.types import CalculationKind, ComponentKind
from payroll_processor.services.payroll_inputs import SqlPayrollInputs

pytestmark = pytest.mark.asyncio


class TestActiveEmployees:
    async def test_current_structure_resolution(
        self, session, tenant_id, seeder, components, standard_structure
    ):
        senior = await seeder.structure(
            "Senior", [(components["BASIC"], "8000", CalculationKind.FIXED)]
        )
        promoted = await seeder.employee("E001", standard_structure, valid_from=date(2024, 1, 1))
        await seeder.assign(promoted, senior, date(2025, 6, 1))
        unassigned = await seeder.employee("E002")
        await seeder.employee("E003", status="inactive")

        employees = await SqlPayrollInputs(session).get_active_employees(tenant_id)

        assert [e.employee_code for e in employees] == ["E001", "E002"]
        assert employees[0].current_structure_id == senior.salary_structure_id
        assert employees[1].employee_id == unassigned.employee_id
        assert employees[1].current_structure_id is None

    async def test_no_employees(self, session, tenant_id):
        assert await SqlPayrollInputs(session).get_active_employees(tenant_id) == []


class TestAttendanceSummary:
    async def test_counts_within_month_only(self, session, tenant_id, seeder):
        employee = await seeder.employee("E001")
        await seeder.attendance(employee, [date(2026, 1, 5), date(2026, 1, 6)])
        await seeder.attendance(employee, [date(2026, 1, 7)], status="half_day")
        await seeder.attendance(employee, [date(2026, 1, 8)], status="absent")
        await seeder.attendance(employee, [date(2026, 1, 9)], status="on_leave")
        await seeder.attendance(employee, [date(2025, 12, 31), date(2026, 2, 1)])

        summary = await SqlPayrollInputs(session).get_attendance_summary(
            tenant_id, employee.employee_id, 1, 2026
        )

        assert summary.recorded_days == 5
        assert summary.present_days == 3

    async def test_no_records(self, session, tenant_id, seeder):
        employee = await seeder.employee("E001")

        summary = await SqlPayrollInputs(session).get_attendance_summary(
            tenant_id, employee.employee_id, 1, 2026
        )

        assert (summary.recorded_days, summary.present_days) == (0, 0)


class TestStructuresAndComponents:
    async def test_structure_definition(self, session, tenant_id, components, standard_structure):
        definition = await SqlPayrollInputs(session).get_salary_structure(
            tenant_id, standard_structure.salary_structure_id
        )

        assert definition.name == "Standard"
        assert [line.component_id for line in definition.lines] == [
            components["BASIC"].salary_component_id,
            components["TAX"].salary_component_id,
        ]
        assert definition.lines[1].calculation_kind == CalculationKind.PERCENTAGE
        assert definition.lines[1].amount == Decimal("10")

    async def test_missing_structure(self, session, tenant_id):
        assert await SqlPayrollInputs(session).get_salary_structure(tenant_id, uuid4()) is None

    async def test_components_by_id(self, session, tenant_id, other_tenant_id, components):
        inputs = SqlPayrollInputs(session)
        ids = [components["BASIC"].salary_component_id, components["TAX"].salary_component_id]

        found = await inputs.get_salary_components(tenant_id, ids + [uuid4()])
        foreign = await inputs.get_salary_components(other_tenant_id, ids)

        assert {info.code for info in found.values()} == {"BASIC", "TAX"}
        assert found[ids[1]].kind == ComponentKind.DEDUCTION
        assert foreign == {}
        assert await inputs.get_salary_components(tenant_id, []) == {}
