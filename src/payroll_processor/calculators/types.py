"""Type definitions for the salary calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import UUID


class ComponentKind(str, Enum):
    """Whether a component adds to or subtracts from pay."""

    EARNING = "earning"
    DEDUCTION = "deduction"


class CalculationKind(str, Enum):
    """How a structure line's amount is interpreted."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"


@dataclass(frozen=True)
class StructureLine:
    """One component entry within a salary structure.

    For FIXED lines ``amount`` is a monthly currency amount; for PERCENTAGE
    lines it is a percent of the fixed-earnings base (40 means 40%).
    """

    component_id: UUID
    amount: Decimal
    calculation_kind: CalculationKind = CalculationKind.FIXED


@dataclass(frozen=True)
class ComponentInfo:
    """Catalog entry as seen by the resolver."""

    component_id: UUID
    code: str
    name: str
    kind: ComponentKind
    is_active: bool = True


@dataclass
class BreakdownLine:
    """A resolved earning or deduction line."""

    code: str
    name: str
    amount: Decimal
    calculation_note: str | None = None


@dataclass
class PayslipBreakdown:
    """Ordered earnings and deductions of one payslip."""

    earnings: list[BreakdownLine] = field(default_factory=list)
    deductions: list[BreakdownLine] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict[str, str | None]]]:
        """Return a JSON-friendly representation (amounts as strings)."""

        def _line(line: BreakdownLine) -> dict[str, str | None]:
            return {
                "code": line.code,
                "name": line.name,
                "amount": str(line.amount),
                "calculation_note": line.calculation_note,
            }

        return {
            "earnings": [_line(line) for line in self.earnings],
            "deductions": [_line(line) for line in self.deductions],
        }


@dataclass
class ResolvedSalary:
    """Result of resolving a structure for one employee-month."""

    gross_monthly: Decimal
    gross_pro_rated: Decimal
    total_deductions: Decimal
    fixed_earnings_base: Decimal
    breakdown: PayslipBreakdown
