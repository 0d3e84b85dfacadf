"""Domain errors raised by the rules engine.

Every error carries a human-readable reason plus the field or record at
fault so the calling layer can point the administrator at the problem.
"""

from __future__ import annotations

from datetime import date
from typing import Any


class PayrollRulesError(Exception):
    """Base class for all rules-engine errors."""

    code = "RULES_ERROR"

    def __init__(
        self,
        reason: str,
        field: str | None = None,
        record_id: Any | None = None,
    ):
        self.reason = reason
        self.field = field
        self.record_id = record_id
        super().__init__(reason)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "code": self.code,
            "detail": self.reason,
            "field": self.field,
            "record_id": str(self.record_id) if self.record_id is not None else None,
        }


class ValidationError(PayrollRulesError):
    """Malformed input; rejected before any state change."""

    code = "VALIDATION_ERROR"


class ConflictError(PayrollRulesError):
    """Operation would break single-active employment or rate interval rules."""

    code = "CONFLICT"


class InvalidStateError(PayrollRulesError):
    """Target record is not in a state that allows the operation."""

    code = "INVALID_STATE"


class NotFoundError(PayrollRulesError):
    """Referenced entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, record_id: Any, field: str | None = None):
        self.entity = entity
        super().__init__(f"{entity} {record_id} not found", field=field, record_id=record_id)


class UnresolvedRateError(PayrollRulesError):
    """No rate schedule covers the requested category and date.

    Business condition, not a system fault: callers choose whether to block
    payslip generation or proceed with a manual override.
    """

    code = "UNRESOLVED_RATE"

    def __init__(self, category: str, sub_category: str | None, as_of_date: date):
        self.category = category
        self.sub_category = sub_category
        self.as_of_date = as_of_date
        label = f"{category}/{sub_category}" if sub_category else category
        super().__init__(
            f"No rate schedule for {label} as of {as_of_date.isoformat()}",
            field="sub_category",
        )
