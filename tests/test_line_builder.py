"""Tests for breakdown line builder."""

from decimal import Decimal
from uuid import uuid4

from payroll_processor.calculators.line_builder import BreakdownLineBuilder
from payroll_processor.calculators.types import (
    BreakdownLine,
    CalculationKind,
    ComponentInfo,
    ComponentKind,
    PayslipBreakdown,
)


class TestBreakdownLineBuilder:
    """Test breakdown line builder functionality."""

    def test_round_to_cents(self):
        """Test rounding to 2 decimal places."""
        assert BreakdownLineBuilder.round_to_cents(Decimal("10.124")) == Decimal("10.12")

        # Half-up rounding
        assert BreakdownLineBuilder.round_to_cents(Decimal("10.125")) == Decimal("10.13")
        assert BreakdownLineBuilder.round_to_cents(Decimal("10.135")) == Decimal("10.14")
        assert BreakdownLineBuilder.round_to_cents(Decimal("2.5")) == Decimal("2.50")

    def test_monthly_amount_fixed(self):
        monthly = BreakdownLineBuilder.monthly_amount(
            Decimal("1500"), CalculationKind.FIXED, Decimal("9999")
        )
        assert monthly == Decimal("1500")

    def test_monthly_amount_percentage(self):
        monthly = BreakdownLineBuilder.monthly_amount(
            Decimal("12.5"), CalculationKind.PERCENTAGE, Decimal("4000")
        )
        assert monthly == Decimal("500")

    def test_pro_rate(self):
        assert BreakdownLineBuilder.pro_rate(Decimal("2200"), 22, 11) == Decimal("1100.00")
        assert BreakdownLineBuilder.pro_rate(Decimal("1000"), 3, 1) == Decimal("333.33")
        assert BreakdownLineBuilder.pro_rate(Decimal("1000"), 3, 2) == Decimal("666.67")

    def test_pro_rate_full_attendance_is_exact(self):
        assert BreakdownLineBuilder.pro_rate(Decimal("1234.56"), 23, 23) == Decimal("1234.56")

    def test_create_line(self):
        """Test resolving a structure line into a breakdown line."""
        component = ComponentInfo(
            component_id=uuid4(),
            code="HRA",
            name="House Rent Allowance",
            kind=ComponentKind.EARNING,
        )

        line = BreakdownLineBuilder.create_line(
            component,
            Decimal("20"),
            CalculationKind.PERCENTAGE,
            fixed_earnings_base=Decimal("10000"),
            working_days=20,
            present_days=15,
        )

        assert line.code == "HRA"
        assert line.name == "House Rent Allowance"
        assert line.amount == Decimal("1500.00")
        assert line.calculation_note == (
            "20% of 10,000.00 = 2,000.00, pro-rated: (2,000.00 / 20) × 15"
        )

    def test_describe_fractional_percentage(self):
        note = BreakdownLineBuilder.describe(
            Decimal("12.5000"),
            CalculationKind.PERCENTAGE,
            Decimal("4000"),
            Decimal("500"),
            21,
            21,
        )
        assert note.startswith("12.5% of 4,000.00 = 500.00")

    def test_sum_lines(self):
        lines = [
            BreakdownLine(code="A", name="A", amount=Decimal("100.10")),
            BreakdownLine(code="B", name="B", amount=Decimal("0.05")),
        ]
        assert BreakdownLineBuilder.sum_lines(lines) == Decimal("100.15")
        assert BreakdownLineBuilder.sum_lines([]) == Decimal("0.00")

    def test_calculate_net_pay(self):
        assert BreakdownLineBuilder.calculate_net_pay(
            Decimal("5000.00"), Decimal("500.00")
        ) == Decimal("4500.00")

    def test_calculate_net_pay_floors_at_zero(self):
        """Deductions larger than gross never produce negative pay."""
        assert BreakdownLineBuilder.calculate_net_pay(
            Decimal("100.00"), Decimal("250.00")
        ) == Decimal("0.00")

    def test_validate_line_signs(self):
        """Test sign validation for breakdown lines."""
        valid_lines = [
            BreakdownLine(code="BASIC", name="Basic", amount=Decimal("1000.00")),
            BreakdownLine(code="TAX", name="Tax", amount=Decimal("0.00")),
        ]
        assert BreakdownLineBuilder.validate_line_signs(valid_lines) == []

        invalid_lines = [
            BreakdownLine(code="BASIC", name="Basic", amount=Decimal("-1000.00")),
            BreakdownLine(code="TAX", name="Tax", amount=Decimal("-1.00")),
        ]
        errors = BreakdownLineBuilder.validate_line_signs(invalid_lines)
        assert len(errors) == 2
        assert "BASIC" in errors[0]


class TestPayslipBreakdown:
    """Test breakdown serialization."""

    def test_to_dict(self):
        breakdown = PayslipBreakdown(
            earnings=[BreakdownLine("BASIC", "Basic", Decimal("5000.00"), "note")],
            deductions=[BreakdownLine("TAX", "Tax", Decimal("500.00"))],
        )

        assert breakdown.to_dict() == {
            "earnings": [
                {"code": "BASIC", "name": "Basic", "amount": "5000.00", "calculation_note": "note"}
            ],
            "deductions": [
                {"code": "TAX", "name": "Tax", "amount": "500.00", "calculation_note": None}
            ],
        }
