"""Employee pay-basis validation and persistence."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from staffing_payroll.enums import SalaryCategory, SalarySubCategory
from staffing_payroll.errors import NotFoundError, ValidationError
from staffing_payroll.models import Employee

logger = logging.getLogger(__name__)


def _amount(value: Any, field: str) -> Decimal | None:
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field} must be greater than 0", field=field)
    return amount


def validate_pay_basis(
    category: SalaryCategory | str,
    sub_category: SalarySubCategory | str | None,
    salary_per_day: Any,
    monthly_salary: Any,
) -> tuple[SalaryCategory, SalarySubCategory | None, Decimal | None, Decimal | None]:
    """Check the category rules and return normalized values.

    CENTRAL/STATE need a sub-category and a per-day rate; SPECIALIZED needs
    a monthly salary and carries neither of the others.
    """
    try:
        category = SalaryCategory(category)
        sub = SalarySubCategory(sub_category) if sub_category else None
    except ValueError as e:
        raise ValidationError(str(e), field="category") from e

    per_day = _amount(salary_per_day, "salary_per_day")
    monthly = _amount(monthly_salary, "monthly_salary")

    if category.is_rate_based:
        if sub is None:
            raise ValidationError(
                f"{category.value} employees require a sub-category", field="sub_category"
            )
        if per_day is None:
            raise ValidationError(
                f"{category.value} employees require a per-day rate", field="salary_per_day"
            )
        return category, sub, per_day, None

    if monthly is None:
        raise ValidationError(
            "SPECIALIZED employees require a monthly salary", field="monthly_salary"
        )
    return category, None, None, monthly


class EmployeeService:
    """Creates and edits employees while keeping the pay-basis rules."""

    PAY_BASIS_FIELDS = ("category", "sub_category", "salary_per_day", "monthly_salary")

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id, field="employee_id")
        return employee

    async def create_employee(
        self,
        first_name: str,
        last_name: str,
        category: SalaryCategory | str,
        onboarding_date: date,
        sub_category: SalarySubCategory | str | None = None,
        salary_per_day: Any = None,
        monthly_salary: Any = None,
        pf_enabled: bool = False,
        esic_enabled: bool = False,
        **details: Any,
    ) -> Employee:
        """Create an employee after validating the pay basis."""
        if not first_name or not last_name:
            raise ValidationError("First and last name are required", field="first_name")
        cat, sub, per_day, monthly = validate_pay_basis(
            category, sub_category, salary_per_day, monthly_salary
        )
        employee = Employee(
            first_name=first_name,
            last_name=last_name,
            category=cat.value,
            sub_category=sub.value if sub else None,
            salary_per_day=per_day,
            monthly_salary=monthly,
            pf_enabled=pf_enabled,
            esic_enabled=esic_enabled,
            onboarding_date=onboarding_date,
            **details,
        )
        self.session.add(employee)
        await self.session.flush()
        logger.info("Created employee %s (%s)", employee.employee_id, cat.value)
        return employee

    async def update_employee(self, employee_id: UUID, **changes: Any) -> Employee:
        """Edit an employee; pay-basis changes are re-validated as a whole."""
        employee = await self.get_employee(employee_id)
        for name_field in ("first_name", "last_name"):
            if name_field in changes and not changes[name_field]:
                raise ValidationError(f"{name_field} must not be empty", field=name_field)
        if any(k in changes for k in self.PAY_BASIS_FIELDS):
            merged = {k: changes.get(k, getattr(employee, k)) for k in self.PAY_BASIS_FIELDS}
            cat, sub, per_day, monthly = validate_pay_basis(**merged)
            changes.update(
                category=cat.value,
                sub_category=sub.value if sub else None,
                salary_per_day=per_day,
                monthly_salary=monthly,
            )
        for key, value in changes.items():
            if not hasattr(Employee, key) or key == "employee_id":
                raise ValidationError(f"Unknown employee field '{key}'", field=key)
            setattr(employee, key, value)
        await self.session.flush()
        return employee
