"""Breakdown line construction and money arithmetic."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from payroll_processor.calculators.types import BreakdownLine, CalculationKind, ComponentInfo


class BreakdownLineBuilder:
    """Builds resolved breakdown lines.

    Sign conventions:
    - All line amounts are stored non-negative; the bucket (earnings or
      deductions) carries the sign.

    Rounding:
    - Monthly amounts are kept at full precision
    - Each pro-rated line is rounded to 2 decimals, ROUND_HALF_UP
    - Totals are sums of already rounded lines, so no drift line is needed
    """

    OUTPUT_PRECISION = Decimal("0.01")  # 2 decimal places for persistence
    ZERO = Decimal("0.00")
    HUNDRED = Decimal("100")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(BreakdownLineBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def monthly_amount(
        amount: Decimal, calculation_kind: CalculationKind, fixed_earnings_base: Decimal
    ) -> Decimal:
        """Unprorated monthly value of a structure line."""
        if calculation_kind == CalculationKind.PERCENTAGE:
            return fixed_earnings_base * amount / BreakdownLineBuilder.HUNDRED
        return amount

    @staticmethod
    def pro_rate(monthly: Decimal, working_days: int, present_days: int) -> Decimal:
        """Scale a monthly amount by present/working days and round to cents.

        Multiplies before dividing so that full attendance returns the
        monthly amount exactly.
        """
        return BreakdownLineBuilder.round_to_cents(
            monthly * Decimal(present_days) / Decimal(working_days)
        )

    @staticmethod
    def describe(
        amount: Decimal,
        calculation_kind: CalculationKind,
        fixed_earnings_base: Decimal,
        monthly: Decimal,
        working_days: int,
        present_days: int,
    ) -> str:
        """Human-readable note explaining how a line amount was derived."""
        if calculation_kind == CalculationKind.PERCENTAGE:
            return (
                f"{amount.normalize():f}% of {fixed_earnings_base:,.2f} = {monthly:,.2f}, "
                f"pro-rated: ({monthly:,.2f} / {working_days}) × {present_days}"
            )
        return f"({monthly:,.2f} / {working_days} days) × {present_days} days"

    @staticmethod
    def create_line(
        component: ComponentInfo,
        amount: Decimal,
        calculation_kind: CalculationKind,
        fixed_earnings_base: Decimal,
        working_days: int,
        present_days: int,
    ) -> BreakdownLine:
        """Resolve one structure line into a pro-rated breakdown line."""
        monthly = BreakdownLineBuilder.monthly_amount(amount, calculation_kind, fixed_earnings_base)
        return BreakdownLine(
            code=component.code,
            name=component.name,
            amount=BreakdownLineBuilder.pro_rate(monthly, working_days, present_days),
            calculation_note=BreakdownLineBuilder.describe(
                amount,
                calculation_kind,
                fixed_earnings_base,
                monthly,
                working_days,
                present_days,
            ),
        )

    @staticmethod
    def sum_lines(lines: Iterable[BreakdownLine]) -> Decimal:
        """Sum line amounts, always returning a 2-decimal value."""
        total = sum((line.amount for line in lines), BreakdownLineBuilder.ZERO)
        return BreakdownLineBuilder.round_to_cents(total)

    @staticmethod
    def calculate_net_pay(gross: Decimal, total_deductions: Decimal) -> Decimal:
        """Net pay, floored at zero."""
        net = BreakdownLineBuilder.round_to_cents(gross - total_deductions)
        return max(BreakdownLineBuilder.ZERO, net)

    @staticmethod
    def validate_line_signs(lines: Iterable[BreakdownLine]) -> list[str]:
        """Validate that no line carries a negative amount.

        Returns list of error messages (empty if valid).
        """
        errors: list[str] = []
        for line in lines:
            if line.amount < 0:
                errors.append(f"Line {line.code} has negative amount: {line.amount}")
        return errors
