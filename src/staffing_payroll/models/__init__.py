"""ORM models."""

from staffing_payroll.models.base import Base, TimestampMixin
from staffing_payroll.models.company import Company
from staffing_payroll.models.employee import Employee, EmploymentHistory
from staffing_payroll.models.rates import SalaryRateSchedule

__all__ = [
    "Base",
    "TimestampMixin",
    "Company",
    "Employee",
    "EmploymentHistory",
    "SalaryRateSchedule",
]
