"""Employment record state machine with transition validation."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from staffing_payroll.enums import EmploymentStatus
from staffing_payroll.errors import InvalidStateError, ValidationError


class EmploymentStateMachine:
    """State machine for a single employment history record.

    Allowed transitions:
    - ACTIVE → INACTIVE (terminate, requires leaving date)
    - INACTIVE → ACTIVE (reactivate, only when the employee has no other
      ACTIVE record)

    An employee with no ACTIVE record is in the NO_EMPLOYMENT state and may
    be assigned again.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        EmploymentStatus.ACTIVE: [EmploymentStatus.INACTIVE],
        EmploymentStatus.INACTIVE: [EmploymentStatus.ACTIVE],
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(EmploymentStatus(from_status), [])
        return EmploymentStatus(to_status) in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Raise InvalidStateError if the transition is not allowed."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidStateError(
                f"Invalid employment transition from '{from_status}' to '{to_status}'",
                field="status",
            )

    @staticmethod
    def validate_leaving_date(joining_date: date, leaving_date: date | None) -> None:
        """Leaving date is required on deactivation and cannot precede joining."""
        if leaving_date is None:
            raise ValidationError(
                "Leaving date is required to end an employment", field="leaving_date"
            )
        if leaving_date < joining_date:
            raise ValidationError(
                f"Leaving date {leaving_date.isoformat()} is before joining date "
                f"{joining_date.isoformat()}",
                field="leaving_date",
            )

    @staticmethod
    def active_count(statuses: Iterable[str]) -> int:
        """Number of ACTIVE statuses."""
        return sum(1 for s in statuses if EmploymentStatus(s) == EmploymentStatus.ACTIVE)
