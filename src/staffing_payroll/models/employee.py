"""Employee and employment history models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffing_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from staffing_payroll.models.company import Company


class Employee(Base, TimestampMixin):
    """Employee identity and pay basis."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    father_name: Mapped[str | None] = mapped_column(String, nullable=True)
    category: Mapped[str] = mapped_column(String, nullable=False)
    sub_category: Mapped[str | None] = mapped_column(String, nullable=True)
    salary_per_day: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    monthly_salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    pf_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    esic_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pf_uan_number: Mapped[str | None] = mapped_column(String, nullable=True)
    esic_number: Mapped[str | None] = mapped_column(String, nullable=True)
    onboarding_date: Mapped[date] = mapped_column(Date, nullable=False)
    relieving_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="ACTIVE")

    __table_args__ = (
        CheckConstraint(
            "category IN ('CENTRAL', 'STATE', 'SPECIALIZED')",
            name="employee_category_check",
        ),
        CheckConstraint(
            "sub_category IS NULL OR sub_category IN "
            "('SKILLED', 'UNSKILLED', 'HIGHSKILLED', 'SEMISKILLED')",
            name="employee_sub_category_check",
        ),
        CheckConstraint(
            "(category = 'SPECIALIZED' AND monthly_salary IS NOT NULL) OR "
            "(category IN ('CENTRAL', 'STATE') AND sub_category IS NOT NULL "
            "AND salary_per_day IS NOT NULL)",
            name="employee_pay_basis_check",
        ),
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="employee_status_check"),
    )

    # Relationships
    employments: Mapped[list[EmploymentHistory]] = relationship(
        back_populates="employee",
        order_by="EmploymentHistory.joining_date",
    )

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class EmploymentHistory(Base, TimestampMixin):
    """One assignment of an employee to a company.

    Records are never deleted; termination flips status to INACTIVE.
    """

    __tablename__ = "employment_history"

    employment_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="RESTRICT"),
        nullable=False,
    )
    designation: Mapped[str] = mapped_column(String, nullable=False)
    department: Mapped[str] = mapped_column(String, nullable=False)
    salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    salary_type: Mapped[str] = mapped_column(String, nullable=False, default="PER_MONTH")
    joining_date: Mapped[date] = mapped_column(Date, nullable=False)
    leaving_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="ACTIVE")
    reason: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="employment_status_check"),
        CheckConstraint(
            "salary_type IN ('PER_DAY', 'PER_MONTH')",
            name="employment_salary_type_check",
        ),
        CheckConstraint("salary >= 0", name="employment_salary_check"),
        CheckConstraint(
            "leaving_date IS NULL OR leaving_date >= joining_date",
            name="employment_dates_check",
        ),
        CheckConstraint(
            "status = 'ACTIVE' OR leaving_date IS NOT NULL",
            name="employment_inactive_leaving_date_check",
        ),
        # At most one ACTIVE record per employee, enforced by the store.
        Index(
            "employment_one_active_per_employee",
            "employee_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="employments")
    company: Mapped[Company] = relationship(back_populates="employments")

    def is_active_on(self, as_of_date: date) -> bool:
        """Check if the assignment covers a given date."""
        if self.joining_date > as_of_date:
            return False
        if self.leaving_date is not None and self.leaving_date < as_of_date:
            return False
        return True
