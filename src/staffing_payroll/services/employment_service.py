"""Employment assignment service - persists lifecycle decisions."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staffing_payroll.enums import (
    CompanyStatus,
    EmployeeStatus,
    EmploymentStatus,
    SalaryCategory,
    SalaryType,
)
from staffing_payroll.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from staffing_payroll.models import Company, Employee, EmploymentHistory
from staffing_payroll.services.employment_lifecycle import (
    EmploymentLifecycleManager,
    EmploymentRecord,
)

logger = logging.getLogger(__name__)

# Postgres reports the index name, SQLite the indexed column.
ACTIVE_CONFLICT_MARKERS = (
    "employment_one_active_per_employee",
    "UNIQUE constraint failed: employment_history.employee_id",
)


class EmploymentService:
    """Service for employment history operations.

    Each operation runs as one unit of work:
    1. Lock the employee row (SELECT ... FOR UPDATE on Postgres)
    2. Load the employee's full history
    3. Let ``EmploymentLifecycleManager`` decide the write
    4. Flush; the partial unique index on ACTIVE records rejects any
       concurrent writer that slipped past step 1
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def assign(
        self,
        employee_id: UUID,
        company_id: UUID,
        designation: str,
        department: str,
        joining_date: date,
        salary: Decimal | None = None,
        salary_type: SalaryType | str | None = None,
    ) -> EmploymentHistory:
        """Assign an employee to a company as a new ACTIVE employment."""
        employee = await self._lock_employee(employee_id)
        if employee.status != EmployeeStatus.ACTIVE:
            raise InvalidStateError(
                f"Employee {employee_id} is {employee.status} and cannot be assigned",
                field="employee_id",
                record_id=employee_id,
            )
        company = await self.session.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company", company_id, field="company_id")
        if company.status != CompanyStatus.ACTIVE:
            raise InvalidStateError(
                f"Company {company.name} is {company.status} and cannot receive assignments",
                field="company_id",
                record_id=company_id,
            )

        default_salary, default_type = self._salary_snapshot(employee)
        history = await self._history(employee_id)
        record = EmploymentLifecycleManager.assign(
            [self._to_record(row) for row in history],
            employee_id=employee_id,
            company_id=company_id,
            designation=designation,
            department=department,
            salary=salary if salary is not None else default_salary,
            joining_date=joining_date,
            salary_type=salary_type or default_type,
        )

        row = EmploymentHistory(
            employment_id=record.employment_id,
            employee_id=record.employee_id,
            company_id=record.company_id,
            designation=record.designation,
            department=record.department,
            salary=record.salary,
            salary_type=record.salary_type.value,
            joining_date=record.joining_date,
            status=record.status.value,
        )
        self.session.add(row)
        await self._flush(employee_id)
        logger.info(
            "Assigned employee %s to company %s (employment %s)",
            employee_id,
            company_id,
            row.employment_id,
        )
        return row

    async def terminate(
        self,
        employment_id: UUID,
        leaving_date: date,
        reason: str | None = None,
    ) -> EmploymentHistory:
        """Mark an ACTIVE employment INACTIVE as of ``leaving_date``."""
        row = await self._get_row(employment_id)
        await self._lock_employee(row.employee_id)
        history = await self._history(row.employee_id)
        record = EmploymentLifecycleManager.terminate(
            [self._to_record(r) for r in history], employment_id, leaving_date, reason
        )
        self._apply(row, record)
        await self._flush(row.employee_id)
        logger.info("Terminated employment %s on %s", employment_id, leaving_date)
        return row

    async def update(self, employment_id: UUID, changes: Mapping[str, Any]) -> EmploymentHistory:
        """Edit an employment record, including ACTIVE/INACTIVE flips."""
        row = await self._get_row(employment_id)
        await self._lock_employee(row.employee_id)
        if "company_id" in changes:
            company = await self.session.get(Company, changes["company_id"])
            if company is None:
                raise NotFoundError("Company", changes["company_id"], field="company_id")
        history = await self._history(row.employee_id)
        record = EmploymentLifecycleManager.update(
            [self._to_record(r) for r in history], employment_id, changes
        )
        self._apply(row, record)
        await self._flush(row.employee_id)
        logger.info("Updated employment %s: %s", employment_id, sorted(changes))
        return row

    async def terminate_employee(
        self,
        employee_id: UUID,
        relieving_date: date,
        reason: str | None = None,
    ) -> Employee:
        """Mark the employee INACTIVE and end their current employment."""
        employee = await self._lock_employee(employee_id)
        current = await self.get_current(employee_id)
        if current is not None:
            await self.terminate(current.employment_id, relieving_date, reason)
        employee.status = EmployeeStatus.INACTIVE.value
        employee.relieving_date = relieving_date
        await self.session.flush()
        logger.info("Employee %s relieved on %s", employee_id, relieving_date)
        return employee

    async def get_current(self, employee_id: UUID) -> EmploymentHistory | None:
        """The employee's ACTIVE employment, if any."""
        result = await self.session.execute(
            select(EmploymentHistory).where(
                EmploymentHistory.employee_id == employee_id,
                EmploymentHistory.status == EmploymentStatus.ACTIVE.value,
            )
        )
        return result.scalar_one_or_none()

    async def list_history(self, employee_id: UUID) -> list[EmploymentHistory]:
        """All employment records of an employee, oldest first."""
        if await self.session.get(Employee, employee_id) is None:
            raise NotFoundError("Employee", employee_id, field="employee_id")
        return await self._history(employee_id)

    async def _lock_employee(self, employee_id: UUID) -> Employee:
        result = await self.session.execute(
            select(Employee).where(Employee.employee_id == employee_id).with_for_update()
        )
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFoundError("Employee", employee_id, field="employee_id")
        return employee

    async def _history(self, employee_id: UUID) -> list[EmploymentHistory]:
        result = await self.session.execute(
            select(EmploymentHistory)
            .where(EmploymentHistory.employee_id == employee_id)
            .order_by(EmploymentHistory.joining_date, EmploymentHistory.created_at)
        )
        return list(result.scalars().all())

    async def _get_row(self, employment_id: UUID) -> EmploymentHistory:
        row = await self.session.get(EmploymentHistory, employment_id)
        if row is None:
            raise NotFoundError("Employment", employment_id, field="employment_id")
        return row

    async def _flush(self, employee_id: UUID) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            message = str(e.orig)
            if not any(marker in message for marker in ACTIVE_CONFLICT_MARKERS):
                logger.warning("Employment write for employee %s rejected: %s", employee_id, message)
                raise ValidationError(
                    f"Employment record rejected by the store: {message}",
                    record_id=employee_id,
                ) from e
            logger.warning("Concurrent employment write rejected for employee %s", employee_id)
            raise ConflictError(
                f"Employee {employee_id} already has an active employment",
                field="status",
                record_id=employee_id,
            ) from e

    @staticmethod
    def _salary_snapshot(employee: Employee) -> tuple[Decimal, SalaryType]:
        if SalaryCategory(employee.category).is_rate_based:
            return employee.salary_per_day or Decimal("0"), SalaryType.PER_DAY
        return employee.monthly_salary or Decimal("0"), SalaryType.PER_MONTH

    @staticmethod
    def _to_record(row: EmploymentHistory) -> EmploymentRecord:
        return EmploymentRecord(
            employment_id=row.employment_id,
            employee_id=row.employee_id,
            company_id=row.company_id,
            designation=row.designation,
            department=row.department,
            salary=Decimal(row.salary),
            salary_type=SalaryType(row.salary_type),
            joining_date=row.joining_date,
            leaving_date=row.leaving_date,
            status=EmploymentStatus(row.status),
            reason=row.reason,
        )

    @staticmethod
    def _apply(row: EmploymentHistory, record: EmploymentRecord) -> None:
        row.company_id = record.company_id
        row.designation = record.designation
        row.department = record.department
        row.salary = record.salary
        row.salary_type = record.salary_type.value
        row.joining_date = record.joining_date
        row.leaving_date = record.leaving_date
        row.status = record.status.value
        row.reason = record.reason
