"""Tests for salary structure resolution."""

from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_processor.calculators.structure_resolver import SalaryStructureResolver
from payroll_processor.calculators.types import (
    CalculationKind,
    ComponentInfo,
    ComponentKind,
    StructureLine,
)
from payroll_processor.errors import (
    EmptyStructureError,
    InactiveComponentError,
    InvalidArgumentError,
    InvalidComponentReferenceError,
)


def component(code: str, kind: ComponentKind, is_active: bool = True) -> ComponentInfo:
    return ComponentInfo(
        component_id=uuid4(),
        code=code,
        name=code.title(),
        kind=kind,
        is_active=is_active,
    )


BASIC = component("BASIC", ComponentKind.EARNING)
HRA = component("HRA", ComponentKind.EARNING)
BONUS = component("BONUS", ComponentKind.EARNING)
TAX = component("TAX", ComponentKind.DEDUCTION)
PF = component("PF", ComponentKind.DEDUCTION)
CATALOG = {c.component_id: c for c in (BASIC, HRA, BONUS, TAX, PF)}


def fixed(c: ComponentInfo, amount: str) -> StructureLine:
    return StructureLine(c.component_id, Decimal(amount), CalculationKind.FIXED)


def percent(c: ComponentInfo, amount: str) -> StructureLine:
    return StructureLine(c.component_id, Decimal(amount), CalculationKind.PERCENTAGE)


class TestDayValidation:
    """Working/present day arguments are checked before anything else."""

    @pytest.mark.parametrize("present", [0, 5, 22])
    def test_zero_working_days_rejected(self, present):
        with pytest.raises(InvalidArgumentError) as exc_info:
            SalaryStructureResolver.resolve([fixed(BASIC, "5000")], CATALOG, 0, present)

        assert exc_info.value.argument == "working_days"
        assert "greater than 0" in exc_info.value.message

    def test_present_exceeding_working_rejected(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            SalaryStructureResolver.resolve([fixed(BASIC, "5000")], CATALOG, 22, 25)

        assert exc_info.value.argument == "present_days"
        assert "cannot exceed working days" in exc_info.value.message

    def test_negative_present_rejected(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            SalaryStructureResolver.resolve([fixed(BASIC, "5000")], CATALOG, 22, -1)

        assert "cannot be negative" in exc_info.value.message


class TestLineValidation:
    """Structure lines are validated against the catalog."""

    def test_empty_structure(self):
        with pytest.raises(EmptyStructureError):
            SalaryStructureResolver.validate_lines([], CATALOG)

    def test_unknown_component_named_in_error(self):
        missing = uuid4()
        lines = [fixed(BASIC, "5000"), StructureLine(missing, Decimal("100"))]

        with pytest.raises(InvalidComponentReferenceError) as exc_info:
            SalaryStructureResolver.validate_lines(lines, CATALOG)

        assert exc_info.value.component_ids == [missing]
        assert str(missing) in exc_info.value.message

    def test_inactive_component_named_by_code(self):
        legacy = component("LEGACY", ComponentKind.EARNING, is_active=False)
        catalog = {**CATALOG, legacy.component_id: legacy}

        with pytest.raises(InactiveComponentError) as exc_info:
            SalaryStructureResolver.validate_lines(
                [fixed(BASIC, "5000"), fixed(legacy, "100")], catalog
            )

        assert exc_info.value.codes == ["LEGACY"]
        assert "LEGACY" in exc_info.value.message

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidArgumentError):
            SalaryStructureResolver.validate_lines([fixed(BASIC, "-1")], CATALOG)

    def test_unknown_reported_before_inactive(self):
        legacy = component("LEGACY", ComponentKind.EARNING, is_active=False)
        catalog = {**CATALOG, legacy.component_id: legacy}
        lines = [fixed(legacy, "100"), StructureLine(uuid4(), Decimal("1"))]

        with pytest.raises(InvalidComponentReferenceError):
            SalaryStructureResolver.validate_lines(lines, catalog)

    def test_resolve_revalidates_lines(self):
        legacy = component("LEGACY", ComponentKind.EARNING, is_active=False)
        catalog = {**CATALOG, legacy.component_id: legacy}

        with pytest.raises(InactiveComponentError):
            SalaryStructureResolver.resolve([fixed(legacy, "100")], catalog, 22, 22)


class TestResolve:
    """Two-pass resolution and pro-rating."""

    def test_full_attendance_pays_fixed_amounts(self):
        lines = [fixed(BASIC, "5000"), fixed(HRA, "2000")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 22, 22)

        assert result.gross_pro_rated == Decimal("7000.00")
        assert result.gross_monthly == Decimal("7000.00")
        assert [line.amount for line in result.breakdown.earnings] == [
            Decimal("5000.00"),
            Decimal("2000.00"),
        ]

    def test_zero_present_days_pays_nothing(self):
        lines = [fixed(BASIC, "5000"), percent(HRA, "40"), percent(TAX, "10")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 22, 0)

        assert result.gross_pro_rated == Decimal("0.00")
        assert result.total_deductions == Decimal("0.00")
        assert all(line.amount == 0 for line in result.breakdown.earnings)

    def test_percentage_earning_uses_fixed_base(self):
        lines = [fixed(BASIC, "5000"), percent(HRA, "40")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 22, 22)

        assert result.fixed_earnings_base == Decimal("5000")
        assert result.gross_pro_rated == Decimal("7000.00")
        assert result.breakdown.earnings[1].amount == Decimal("2000.00")

    def test_percentage_is_not_compounded(self):
        """A percentage earning does not feed into another percentage line."""
        lines = [fixed(BASIC, "1000"), percent(HRA, "50"), percent(BONUS, "10")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 20, 20)

        assert result.breakdown.earnings[2].amount == Decimal("100.00")
        assert result.gross_pro_rated == Decimal("1600.00")

    def test_percentage_deduction_uses_fixed_earnings_base(self):
        lines = [fixed(BASIC, "5000"), percent(HRA, "40"), percent(TAX, "10")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 22, 22)

        # 10% of the 5000 fixed base, not of the 7000 gross
        assert result.total_deductions == Decimal("500.00")

    def test_fixed_deduction_not_in_base(self):
        lines = [fixed(BASIC, "3000"), fixed(PF, "200"), percent(HRA, "10")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 22, 22)

        assert result.fixed_earnings_base == Decimal("3000")
        assert result.breakdown.earnings[1].amount == Decimal("300.00")
        assert result.total_deductions == Decimal("200.00")

    def test_pro_rating_rounds_each_line(self):
        lines = [fixed(BASIC, "5000"), fixed(HRA, "1000")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 22, 20)

        # 5000 * 20 / 22 = 4545.4545..., 1000 * 20 / 22 = 909.0909...
        assert result.breakdown.earnings[0].amount == Decimal("4545.45")
        assert result.breakdown.earnings[1].amount == Decimal("909.09")
        assert result.gross_pro_rated == Decimal("5454.54")

    def test_half_up_rounding(self):
        lines = [fixed(BASIC, "0.25")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 2, 1)

        # 0.125 rounds half up
        assert result.gross_pro_rated == Decimal("0.13")

    def test_lines_bucketed_in_structure_order(self):
        lines = [percent(TAX, "5"), fixed(BASIC, "1000"), fixed(PF, "50"), fixed(HRA, "100")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 22, 22)

        assert [line.code for line in result.breakdown.earnings] == ["BASIC", "HRA"]
        assert [line.code for line in result.breakdown.deductions] == ["TAX", "PF"]

    def test_minimal_structure(self):
        result = SalaryStructureResolver.resolve([fixed(BASIC, "1234.56")], CATALOG, 21, 21)

        assert result.gross_pro_rated == Decimal("1234.56")
        assert result.breakdown.deductions == []
        assert result.total_deductions == Decimal("0.00")

    def test_calculation_notes(self):
        lines = [fixed(BASIC, "5000"), percent(HRA, "40")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 22, 20)

        assert result.breakdown.earnings[0].calculation_note == (
            "(5,000.00 / 22 days) × 20 days"
        )
        assert result.breakdown.earnings[1].calculation_note == (
            "40% of 5,000.00 = 2,000.00, pro-rated: (2,000.00 / 22) × 20"
        )

    def test_resolve_does_not_compute_net(self):
        lines = [fixed(BASIC, "100"), fixed(PF, "500")]

        result = SalaryStructureResolver.resolve(lines, CATALOG, 10, 10)

        assert result.gross_pro_rated == Decimal("100.00")
        assert result.total_deductions == Decimal("500.00")
        assert not hasattr(result, "net_pay")
