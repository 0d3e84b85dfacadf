"""Tests for employment lifecycle rules.

Includes a hypothesis state machine that drives random sequences of
assign/terminate/update calls and checks that an employee never holds
more than one ACTIVE employment.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from hypothesis import settings, strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, precondition, rule

from staffing_payroll.enums import EmploymentStatus, SalaryType
from staffing_payroll.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PayrollRulesError,
    ValidationError,
)
from staffing_payroll.services.employment_lifecycle import (
    EmploymentLifecycleManager,
    EmploymentRecord,
)

EMPLOYEE_ID = uuid4()
COMPANY_A = uuid4()
COMPANY_B = uuid4()


def assign(history, company_id=COMPANY_A, joining=date(2024, 1, 1), **kwargs):
    return EmploymentLifecycleManager.assign(
        history,
        employee_id=EMPLOYEE_ID,
        company_id=company_id,
        designation=kwargs.pop("designation", "Security Guard"),
        department=kwargs.pop("department", "Security"),
        salary=kwargs.pop("salary", Decimal("500")),
        joining_date=joining,
        **kwargs,
    )


class TestAssign:
    """Test assigning an employee to a company."""

    def test_assign_with_empty_history(self):
        record = assign([])

        assert record.status == EmploymentStatus.ACTIVE
        assert record.employee_id == EMPLOYEE_ID
        assert record.company_id == COMPANY_A
        assert record.leaving_date is None

    def test_assign_while_active_conflicts(self):
        """Second assignment names the ACTIVE record to terminate first."""
        active = assign([])

        with pytest.raises(ConflictError) as exc_info:
            assign([active], company_id=COMPANY_B)

        assert exc_info.value.record_id == active.employment_id

    def test_assign_after_terminate(self):
        first = assign([])
        ended = EmploymentLifecycleManager.terminate([first], first.employment_id, date(2024, 3, 31))
        history = EmploymentLifecycleManager.apply([first], ended)

        second = assign(list(history), company_id=COMPANY_B, joining=date(2024, 4, 1))

        assert second.status == EmploymentStatus.ACTIVE
        assert EmploymentLifecycleManager.current(
            EmploymentLifecycleManager.apply(history, second)
        ) == second

    def test_assign_rejects_negative_salary(self):
        with pytest.raises(ValidationError) as exc_info:
            assign([], salary=Decimal("-1"))
        assert exc_info.value.field == "salary"

    def test_assign_requires_designation(self):
        with pytest.raises(ValidationError):
            assign([], designation="")

    def test_assign_rejects_foreign_history(self):
        foreign = EmploymentRecord(
            employment_id=uuid4(),
            employee_id=uuid4(),
            company_id=COMPANY_A,
            designation="Guard",
            department="Security",
            salary=Decimal("500"),
            joining_date=date(2024, 1, 1),
        )
        with pytest.raises(ValidationError):
            assign([foreign])

    def test_salary_type_is_kept(self):
        record = assign([], salary_type=SalaryType.PER_DAY)
        assert record.salary_type == SalaryType.PER_DAY


class TestTerminate:
    """Test ending an employment."""

    def test_terminate_sets_leaving_date(self):
        active = assign([])

        ended = EmploymentLifecycleManager.terminate(
            [active], active.employment_id, date(2024, 2, 29), reason="Contract ended"
        )

        assert ended.status == EmploymentStatus.INACTIVE
        assert ended.leaving_date == date(2024, 2, 29)
        assert ended.reason == "Contract ended"
        # Input record untouched
        assert active.status == EmploymentStatus.ACTIVE

    def test_terminate_inactive_rejected(self):
        active = assign([])
        ended = EmploymentLifecycleManager.terminate([active], active.employment_id, date(2024, 2, 1))

        with pytest.raises(InvalidStateError):
            EmploymentLifecycleManager.terminate([ended], ended.employment_id, date(2024, 3, 1))

    def test_terminate_before_joining_rejected(self):
        active = assign([], joining=date(2024, 5, 1))
        with pytest.raises(ValidationError):
            EmploymentLifecycleManager.terminate([active], active.employment_id, date(2024, 4, 30))

    def test_terminate_unknown_record(self):
        with pytest.raises(NotFoundError):
            EmploymentLifecycleManager.terminate([], uuid4(), date(2024, 4, 30))


class TestUpdate:
    """Test editing an employment record."""

    def test_update_designation(self):
        active = assign([])
        updated = EmploymentLifecycleManager.update(
            [active], active.employment_id, {"designation": "Supervisor", "salary": "650"}
        )
        assert updated.designation == "Supervisor"
        assert updated.salary == Decimal("650")
        assert updated.status == EmploymentStatus.ACTIVE

    def test_update_to_inactive_requires_leaving_date(self):
        active = assign([])
        with pytest.raises(ValidationError):
            EmploymentLifecycleManager.update([active], active.employment_id, {"status": "INACTIVE"})

    def test_reactivate_while_other_active_conflicts(self):
        old = assign([])
        old = EmploymentLifecycleManager.terminate([old], old.employment_id, date(2024, 3, 31))
        current = assign([old], company_id=COMPANY_B, joining=date(2024, 4, 1))

        with pytest.raises(ConflictError) as exc_info:
            EmploymentLifecycleManager.update(
                [old, current], old.employment_id, {"status": "ACTIVE"}
            )
        assert exc_info.value.record_id == current.employment_id

    def test_reactivate_clears_leaving_date(self):
        old = assign([])
        old = EmploymentLifecycleManager.terminate([old], old.employment_id, date(2024, 3, 31))

        reactivated = EmploymentLifecycleManager.update([old], old.employment_id, {"status": "ACTIVE"})

        assert reactivated.status == EmploymentStatus.ACTIVE
        assert reactivated.leaving_date is None

    def test_unknown_field_rejected(self):
        active = assign([])
        with pytest.raises(ValidationError):
            EmploymentLifecycleManager.update([active], active.employment_id, {"employee_id": uuid4()})

    def test_bad_status_value_rejected(self):
        active = assign([])
        with pytest.raises(ValidationError):
            EmploymentLifecycleManager.update([active], active.employment_id, {"status": "ON_LEAVE"})

    def test_null_joining_date_rejected(self):
        ended = assign([])
        ended = EmploymentLifecycleManager.terminate([ended], ended.employment_id, date(2024, 3, 31))

        with pytest.raises(ValidationError) as exc_info:
            EmploymentLifecycleManager.update([ended], ended.employment_id, {"joining_date": None})
        assert exc_info.value.field == "joining_date"

    @pytest.mark.parametrize("key", ["designation", "department"])
    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_required_text_rejected(self, key, value):
        """Edits hold the same required fields as assign."""
        active = assign([])
        with pytest.raises(ValidationError) as exc_info:
            EmploymentLifecycleManager.update([active], active.employment_id, {key: value})
        assert exc_info.value.field == key

    def test_reason_can_be_cleared(self):
        active = assign([])
        ended = EmploymentLifecycleManager.terminate(
            [active], active.employment_id, date(2024, 3, 31), reason="Transfer"
        )
        updated = EmploymentLifecycleManager.update([ended], ended.employment_id, {"reason": None})
        assert updated.reason is None


class EmploymentHistoryMachine(RuleBasedStateMachine):
    """Random operation sequences never produce two ACTIVE records."""

    def __init__(self):
        super().__init__()
        self.history: tuple[EmploymentRecord, ...] = ()
        self.day = date(2024, 1, 1)

    def _next_day(self, gap: int) -> date:
        self.day = self.day + timedelta(days=gap)
        return self.day

    def _apply(self, op):
        try:
            record = op()
        except PayrollRulesError:
            return
        self.history = EmploymentLifecycleManager.apply(self.history, record)

    @rule(gap=st.integers(min_value=0, max_value=30), company=st.sampled_from([COMPANY_A, COMPANY_B]))
    def assign_employee(self, gap, company):
        joining = self._next_day(gap)
        self._apply(lambda: assign(list(self.history), company_id=company, joining=joining))

    @precondition(lambda self: len(self.history) > 0)
    @rule(index=st.integers(min_value=0, max_value=20), gap=st.integers(min_value=0, max_value=30))
    def terminate_record(self, index, gap):
        target = self.history[index % len(self.history)]
        leaving = self._next_day(gap)
        self._apply(
            lambda: EmploymentLifecycleManager.terminate(
                self.history, target.employment_id, leaving
            )
        )

    @precondition(lambda self: len(self.history) > 0)
    @rule(index=st.integers(min_value=0, max_value=20), status=st.sampled_from(["ACTIVE", "INACTIVE"]))
    def flip_status(self, index, status):
        target = self.history[index % len(self.history)]
        changes = {"status": status}
        if status == "INACTIVE":
            changes["leaving_date"] = self._next_day(1)
        self._apply(
            lambda: EmploymentLifecycleManager.update(self.history, target.employment_id, changes)
        )

    @invariant()
    def at_most_one_active(self):
        assert sum(1 for r in self.history if r.is_active) <= 1

    @invariant()
    def inactive_records_have_leaving_date(self):
        for r in self.history:
            if not r.is_active:
                assert r.leaving_date is not None
                assert r.leaving_date >= r.joining_date


EmploymentHistoryMachine.TestCase.settings = settings(max_examples=50, stateful_step_count=25, deadline=None)
TestEmploymentHistoryInvariants = EmploymentHistoryMachine.TestCase
