"""Domain errors raised by the payroll processor.

Every error carries a human-readable message, a stable ``error_code``, the
HTTP status the API should answer with, and a ``details`` dict naming the
entities involved so an administrator can act on it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from uuid import UUID


class PayrollError(Exception):
    """Base class for all payroll processor errors."""

    status_code: int = 400
    error_code: str = "PAYROLL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ===== Validation =====


class InvalidArgumentError(PayrollError):
    """Caller supplied an out-of-range argument (days, month, amount)."""

    error_code = "INVALID_ARGUMENT"

    def __init__(self, argument: str, message: str):
        self.argument = argument
        super().__init__(message, {"argument": argument})


class InvalidComponentReferenceError(PayrollError):
    """A structure line cites a component id that does not exist."""

    error_code = "INVALID_COMPONENT_REFERENCE"

    def __init__(self, component_ids: Iterable[UUID]):
        self.component_ids = list(component_ids)
        ids = ", ".join(str(cid) for cid in self.component_ids)
        super().__init__(
            f"Invalid component reference(s): {ids}",
            {"component_ids": [str(cid) for cid in self.component_ids]},
        )


class InactiveComponentError(PayrollError):
    """A structure line cites a deactivated component."""

    error_code = "INACTIVE_COMPONENT"

    def __init__(self, codes: Iterable[str]):
        self.codes = list(codes)
        super().__init__(
            f"Cannot use inactive component(s): {', '.join(self.codes)}",
            {"codes": self.codes},
        )


class EmptyStructureError(PayrollError):
    """A salary structure was submitted without any lines."""

    error_code = "EMPTY_STRUCTURE"

    def __init__(self, structure_name: str | None = None):
        self.structure_name = structure_name
        msg = "Salary structure must have at least one component"
        if structure_name:
            msg += f" ('{structure_name}')"
        super().__init__(msg, {"structure_name": structure_name})


class DuplicateComponentCodeError(PayrollError):
    """Component code already used within the tenant."""

    status_code = 409
    error_code = "DUPLICATE_COMPONENT_CODE"

    def __init__(self, code: str):
        self.code = code
        super().__init__(
            f"Salary component with code '{code}' already exists",
            {"code": code},
        )


# ===== State machine =====


class DuplicateRunError(PayrollError):
    """A run already exists for the tenant/month/year."""

    status_code = 409
    error_code = "DUPLICATE_RUN"

    def __init__(self, tenant_id: UUID, month: int, year: int, period_display: str):
        self.tenant_id = tenant_id
        self.month = month
        self.year = year
        super().__init__(
            f"Payroll run already exists for {period_display}",
            {"tenant_id": str(tenant_id), "month": month, "year": year},
        )


class InvalidStateTransitionError(PayrollError):
    """Raised when an invalid run status transition is attempted."""

    status_code = 409
    error_code = "INVALID_STATE_TRANSITION"

    def __init__(
        self,
        from_status: str,
        to_status: str,
        reason: str | None = None,
        run_id: UUID | None = None,
        period_display: str | None = None,
    ):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        self.run_id = run_id
        self.period_display = period_display
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if period_display:
            msg += f" for payroll run {period_display}"
        if reason:
            msg += f": {reason}"
        details: dict[str, Any] = {
            "from_status": from_status,
            "to_status": to_status,
            "reason": reason,
        }
        if run_id is not None:
            details["run_id"] = str(run_id)
        if period_display is not None:
            details["period"] = period_display
        super().__init__(msg, details)


# ===== Lookups =====


class RunNotFoundError(PayrollError):
    status_code = 404
    error_code = "RUN_NOT_FOUND"

    def __init__(self, run_id: UUID):
        self.run_id = run_id
        super().__init__(f"Payroll run {run_id} not found", {"run_id": str(run_id)})


class StructureNotFoundError(PayrollError):
    status_code = 404
    error_code = "STRUCTURE_NOT_FOUND"

    def __init__(self, structure_id: UUID):
        self.structure_id = structure_id
        super().__init__(
            f"Salary structure {structure_id} not found",
            {"structure_id": str(structure_id)},
        )


class ComponentNotFoundError(PayrollError):
    status_code = 404
    error_code = "COMPONENT_NOT_FOUND"

    def __init__(self, component_id: UUID):
        self.component_id = component_id
        super().__init__(
            f"Salary component {component_id} not found",
            {"component_id": str(component_id)},
        )


# ===== Referential rules =====


class StructureInUseError(PayrollError):
    """Structure is still referenced by employees."""

    status_code = 409
    error_code = "STRUCTURE_IN_USE"

    def __init__(self, structure_id: UUID, employee_count: int):
        self.structure_id = structure_id
        self.employee_count = employee_count
        plural = "s" if employee_count > 1 else ""
        super().__init__(
            "Cannot delete salary structure that is assigned to "
            f"{employee_count} employee{plural}",
            {"structure_id": str(structure_id), "employee_count": employee_count},
        )


class ComponentInUseError(PayrollError):
    """Component is referenced and the requested change would alter history."""

    status_code = 409
    error_code = "COMPONENT_IN_USE"

    def __init__(self, component_id: UUID, code: str, reason: str):
        self.component_id = component_id
        self.code = code
        super().__init__(
            f"Salary component '{code}' {reason}",
            {"component_id": str(component_id), "code": code},
        )


# ===== Processing =====


class PayrollProcessingError(PayrollError):
    """A run failed part-way through and was reverted to draft."""

    status_code = 500
    error_code = "PAYROLL_PROCESSING_FAILED"

    def __init__(
        self, run_id: UUID, period_display: str, reason: str, reverted: bool = True
    ):
        self.run_id = run_id
        self.period_display = period_display
        self.reverted = reverted
        outcome = (
            "was reverted to draft"
            if reverted
            else "could not be reverted and is still processing"
        )
        super().__init__(
            f"Processing of payroll run for {period_display} failed and {outcome}: {reason}",
            {"run_id": str(run_id), "period": period_display, "reverted": reverted},
        )


class PayrollRunCancelledError(PayrollProcessingError):
    """Processing was cancelled; the run was reverted to draft."""

    status_code = 409
    error_code = "PAYROLL_RUN_CANCELLED"

    def __init__(self, run_id: UUID, period_display: str, reverted: bool = True):
        super().__init__(run_id, period_display, "cancelled", reverted=reverted)
