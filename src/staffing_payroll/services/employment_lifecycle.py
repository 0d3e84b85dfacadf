"""Employment lifecycle rules over an employee's history records.

The manager is pure: it receives the employee's full history as values and
returns the record to write. ``EmploymentService`` persists the result in
one transaction; the store's partial unique index backs the same rule.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Sequence
from uuid import UUID, uuid4

from staffing_payroll.enums import EmploymentStatus, SalaryType
from staffing_payroll.errors import ConflictError, NotFoundError, ValidationError
from staffing_payroll.services.state_machine import EmploymentStateMachine


@dataclass(frozen=True)
class EmploymentRecord:
    """Value form of one employment history record."""

    employment_id: UUID
    employee_id: UUID
    company_id: UUID
    designation: str
    department: str
    salary: Decimal
    joining_date: date
    salary_type: SalaryType = SalaryType.PER_MONTH
    leaving_date: date | None = None
    status: EmploymentStatus = EmploymentStatus.ACTIVE
    reason: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == EmploymentStatus.ACTIVE


class EmploymentLifecycleManager:
    """Enforces at most one ACTIVE employment per employee.

    Operations:
    - assign: new ACTIVE record; ConflictError if one is already ACTIVE
    - terminate: ACTIVE → INACTIVE with a leaving date
    - update: edit fields; status flips follow the same rules
    """

    UPDATABLE_FIELDS = frozenset(
        {
            "company_id",
            "designation",
            "department",
            "salary",
            "salary_type",
            "joining_date",
            "leaving_date",
            "status",
            "reason",
        }
    )

    REQUIRED_FIELDS = UPDATABLE_FIELDS - {"leaving_date", "reason"}

    @staticmethod
    def current(history: Sequence[EmploymentRecord]) -> EmploymentRecord | None:
        """The ACTIVE record, if any."""
        active = [r for r in history if r.is_active]
        return active[0] if active else None

    @classmethod
    def assign(
        cls,
        history: Sequence[EmploymentRecord],
        employee_id: UUID,
        company_id: UUID,
        designation: str,
        department: str,
        salary: Decimal,
        joining_date: date,
        salary_type: SalaryType = SalaryType.PER_MONTH,
        employment_id: UUID | None = None,
    ) -> EmploymentRecord:
        """Create a new ACTIVE record for ``employee_id``."""
        cls._check_history_owner(history, employee_id)
        cls._validate_salary(salary)
        if not designation or not department:
            raise ValidationError(
                "Designation and department are required",
                field="designation" if not designation else "department",
            )

        active = cls.current(history)
        if active is not None:
            raise ConflictError(
                f"Employee {employee_id} already has an active employment "
                f"{active.employment_id}; terminate it first",
                field="status",
                record_id=active.employment_id,
            )

        return EmploymentRecord(
            employment_id=employment_id or uuid4(),
            employee_id=employee_id,
            company_id=company_id,
            designation=designation,
            department=department,
            salary=Decimal(str(salary)),
            salary_type=SalaryType(salary_type),
            joining_date=joining_date,
            status=EmploymentStatus.ACTIVE,
        )

    @classmethod
    def terminate(
        cls,
        history: Sequence[EmploymentRecord],
        employment_id: UUID,
        leaving_date: date,
        reason: str | None = None,
    ) -> EmploymentRecord:
        """End an ACTIVE employment."""
        record = cls._find(history, employment_id)
        EmploymentStateMachine.validate_transition(record.status, EmploymentStatus.INACTIVE)
        EmploymentStateMachine.validate_leaving_date(record.joining_date, leaving_date)
        return replace(
            record,
            status=EmploymentStatus.INACTIVE,
            leaving_date=leaving_date,
            reason=reason if reason is not None else record.reason,
        )

    @classmethod
    def update(
        cls,
        history: Sequence[EmploymentRecord],
        employment_id: UUID,
        changes: Mapping[str, Any],
    ) -> EmploymentRecord:
        """Edit a record; a status flip is validated like terminate/assign."""
        unknown = set(changes) - cls.UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update employment fields: {sorted(unknown)}", field=sorted(unknown)[0]
            )
        for key in sorted(cls.REQUIRED_FIELDS & set(changes)):
            value = changes[key]
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Employment {key} is required", field=key)
        record = cls._find(history, employment_id)

        values = dict(changes)
        try:
            if "status" in values:
                values["status"] = EmploymentStatus(values["status"])
            if "salary_type" in values:
                values["salary_type"] = SalaryType(values["salary_type"])
        except ValueError as e:
            raise ValidationError(str(e), field="status") from e
        if "salary" in values:
            cls._validate_salary(values["salary"])
            values["salary"] = Decimal(str(values["salary"]))
        updated = replace(record, **values)

        if updated.status != record.status:
            EmploymentStateMachine.validate_transition(record.status, updated.status)
            if updated.status == EmploymentStatus.ACTIVE:
                others = [r for r in history if r.is_active and r.employment_id != employment_id]
                if others:
                    raise ConflictError(
                        f"Employee {record.employee_id} already has an active employment "
                        f"{others[0].employment_id}",
                        field="status",
                        record_id=others[0].employment_id,
                    )
                if "leaving_date" not in changes:
                    updated = replace(updated, leaving_date=None)

        if updated.status == EmploymentStatus.INACTIVE:
            EmploymentStateMachine.validate_leaving_date(updated.joining_date, updated.leaving_date)
        elif updated.leaving_date is not None and updated.leaving_date < updated.joining_date:
            raise ValidationError(
                "Leaving date cannot be before joining date", field="leaving_date"
            )
        return updated

    @staticmethod
    def apply(
        history: Sequence[EmploymentRecord], record: EmploymentRecord
    ) -> tuple[EmploymentRecord, ...]:
        """History with ``record`` inserted or replacing its previous version."""
        replaced = False
        result: list[EmploymentRecord] = []
        for r in history:
            if r.employment_id == record.employment_id:
                result.append(record)
                replaced = True
            else:
                result.append(r)
        if not replaced:
            result.append(record)
        return tuple(result)

    @staticmethod
    def _find(history: Sequence[EmploymentRecord], employment_id: UUID) -> EmploymentRecord:
        for r in history:
            if r.employment_id == employment_id:
                return r
        raise NotFoundError("Employment", employment_id, field="employment_id")

    @staticmethod
    def _check_history_owner(history: Sequence[EmploymentRecord], employee_id: UUID) -> None:
        for r in history:
            if r.employee_id != employee_id:
                raise ValidationError(
                    f"Employment {r.employment_id} does not belong to employee {employee_id}",
                    field="employee_id",
                    record_id=r.employment_id,
                )

    @staticmethod
    def _validate_salary(salary: Any) -> None:
        try:
            amount = Decimal(str(salary))
        except ArithmeticError:
            raise ValidationError(f"Salary must be a number, got {salary!r}", field="salary")
        if not amount.is_finite() or amount < 0:
            raise ValidationError("Salary must be a non-negative amount", field="salary")
