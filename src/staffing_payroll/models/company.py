"""Company model."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Date, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffing_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from staffing_payroll.models.employee import EmploymentHistory


class Company(Base, TimestampMixin):
    """Legal employer carrying its own salary template."""

    __tablename__ = "company"

    company_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    contact_person_name: Mapped[str | None] = mapped_column(String, nullable=True)
    contact_person_number: Mapped[str | None] = mapped_column(String, nullable=True)
    onboarding_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="ACTIVE")
    salary_template: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=dict,
    )

    __table_args__ = (
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="company_status_check"),
    )

    # Relationships
    employments: Mapped[list[EmploymentHistory]] = relationship(back_populates="company")
