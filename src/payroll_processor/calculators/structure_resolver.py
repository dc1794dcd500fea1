"""Salary structure resolution with pro-rata scaling."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from uuid import UUID

from payroll_processor.calculators.line_builder import BreakdownLineBuilder
from payroll_processor.calculators.types import (
    CalculationKind,
    ComponentInfo,
    ComponentKind,
    PayslipBreakdown,
    ResolvedSalary,
    StructureLine,
)
from payroll_processor.errors import (
    EmptyStructureError,
    InactiveComponentError,
    InvalidArgumentError,
    InvalidComponentReferenceError,
)


class SalaryStructureResolver:
    """Resolves a salary structure into a monetary breakdown.

    Resolution is two-pass because percentage lines are defined relative to
    the fixed-earnings base rather than to gross:

    1. Sum the amounts of FIXED earning lines (the fixed-earnings base)
    2. Resolve every line to a monthly amount, pro-rate it by
       present/working days and bucket it by component kind

    The resolver is a pure function of its arguments. Callers fetch the
    structure lines and the referenced components up front.
    """

    @staticmethod
    def validate_days(working_days: int, present_days: int) -> None:
        """Raise InvalidArgumentError for impossible day counts."""
        if working_days <= 0:
            raise InvalidArgumentError("working_days", "Working days must be greater than 0")
        if present_days < 0:
            raise InvalidArgumentError("present_days", "Present days cannot be negative")
        if present_days > working_days:
            raise InvalidArgumentError(
                "present_days",
                f"Present days cannot exceed working days ({present_days} > {working_days})",
            )

    @staticmethod
    def validate_lines(
        lines: Sequence[StructureLine],
        components: Mapping[UUID, ComponentInfo],
        structure_name: str | None = None,
    ) -> None:
        """Validate structure lines against the component catalog.

        Raises:
            EmptyStructureError: No lines at all
            InvalidArgumentError: A line carries a negative amount
            InvalidComponentReferenceError: Lines cite unknown component ids
            InactiveComponentError: Lines cite deactivated components
        """
        if not lines:
            raise EmptyStructureError(structure_name)

        for line in lines:
            if line.amount < 0:
                raise InvalidArgumentError(
                    "amount",
                    f"Component amount cannot be negative (component {line.component_id})",
                )

        missing: list[UUID] = []
        for line in lines:
            if line.component_id not in components and line.component_id not in missing:
                missing.append(line.component_id)
        if missing:
            raise InvalidComponentReferenceError(missing)

        inactive: list[str] = []
        for line in lines:
            component = components[line.component_id]
            if not component.is_active and component.code not in inactive:
                inactive.append(component.code)
        if inactive:
            raise InactiveComponentError(inactive)

    @staticmethod
    def fixed_earnings_base(
        lines: Sequence[StructureLine], components: Mapping[UUID, ComponentInfo]
    ) -> Decimal:
        """Sum of FIXED earning line amounts."""
        base = Decimal("0")
        for line in lines:
            component = components[line.component_id]
            if (
                component.kind == ComponentKind.EARNING
                and line.calculation_kind == CalculationKind.FIXED
            ):
                base += line.amount
        return base

    @classmethod
    def resolve(
        cls,
        lines: Sequence[StructureLine],
        components: Mapping[UUID, ComponentInfo],
        working_days: int,
        present_days: int,
    ) -> ResolvedSalary:
        """Resolve structure lines for one employee-month.

        Args:
            lines: Ordered structure lines
            components: Catalog entries keyed by component id
            working_days: Working days in the month (> 0)
            present_days: Days present (0 <= present_days <= working_days)

        Returns:
            ResolvedSalary with gross (monthly and pro-rated), total
            deductions and the ordered breakdown. Net pay is left to the
            caller.
        """
        cls.validate_days(working_days, present_days)
        cls.validate_lines(lines, components)

        base = cls.fixed_earnings_base(lines, components)
        breakdown = PayslipBreakdown()
        gross_monthly = Decimal("0")

        for line in lines:
            component = components[line.component_id]
            resolved = BreakdownLineBuilder.create_line(
                component,
                line.amount,
                line.calculation_kind,
                base,
                working_days,
                present_days,
            )
            if component.kind == ComponentKind.EARNING:
                gross_monthly += BreakdownLineBuilder.monthly_amount(
                    line.amount, line.calculation_kind, base
                )
                breakdown.earnings.append(resolved)
            else:
                breakdown.deductions.append(resolved)

        return ResolvedSalary(
            gross_monthly=BreakdownLineBuilder.round_to_cents(gross_monthly),
            gross_pro_rated=BreakdownLineBuilder.sum_lines(breakdown.earnings),
            total_deductions=BreakdownLineBuilder.sum_lines(breakdown.deductions),
            fixed_earnings_base=base,
            breakdown=breakdown,
        )
