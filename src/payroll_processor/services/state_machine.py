"""Payroll run state machine with transition validation."""

from __future__ import annotations

from enum import Enum
from uuid import UUID

from payroll_processor.errors import InvalidStateTransitionError


class PayrollRunStatus(str, Enum):
    """Payroll run status values."""

    DRAFT = "draft"
    PROCESSING = "processing"
    COMPLETED = "completed"


def _value(status: str) -> str:
    return status.value if isinstance(status, PayrollRunStatus) else status


class PayrollRunStateMachine:
    """State machine for payroll run status transitions.

    Allowed transitions:
    - draft → processing
    - processing → completed
    - processing → draft (error recovery only)

    ``completed`` is terminal; a run can only be deleted while in draft.
    """

    # Define valid transitions: {from_status: [allowed_to_statuses]}
    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollRunStatus.DRAFT: [PayrollRunStatus.PROCESSING],
        PayrollRunStatus.PROCESSING: [PayrollRunStatus.COMPLETED, PayrollRunStatus.DRAFT],
        PayrollRunStatus.COMPLETED: [],  # Terminal state
    }

    # Statuses from which a run may be deleted
    DELETABLE = {PayrollRunStatus.DRAFT}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(
        cls,
        from_status: str,
        to_status: str,
        run_id: UUID | None = None,
        period_display: str | None = None,
    ) -> None:
        """Validate a transition, raising InvalidStateTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            reason = None
            if from_status == PayrollRunStatus.COMPLETED:
                reason = "completed runs cannot be reprocessed"
            elif from_status == PayrollRunStatus.PROCESSING:
                reason = "run is already being processed"
            raise InvalidStateTransitionError(
                _value(from_status), _value(to_status), reason, run_id, period_display
            )

    @classmethod
    def can_delete(cls, status: str) -> bool:
        """Check if a run in this status may be deleted."""
        return status in cls.DELETABLE

    @classmethod
    def validate_delete(
        cls, status: str, run_id: UUID | None = None, period_display: str | None = None
    ) -> None:
        """Raise InvalidStateTransitionError unless the run is deletable."""
        if not cls.can_delete(status):
            raise InvalidStateTransitionError(
                _value(status),
                "deleted",
                "only draft payroll runs can be deleted",
                run_id,
                period_display,
            )

    @classmethod
    def is_revert(cls, from_status: str, to_status: str) -> bool:
        """Check if this transition is the processing → draft recovery edge."""
        return from_status == PayrollRunStatus.PROCESSING and to_status == PayrollRunStatus.DRAFT

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
