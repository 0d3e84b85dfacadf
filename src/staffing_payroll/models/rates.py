"""Salary rate schedule model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, Index, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column

from staffing_payroll.models.base import Base, TimestampMixin


class SalaryRateSchedule(Base, TimestampMixin):
    """Per-day wage for a (category, sub_category) over a date interval.

    ``effective_to`` is the last covered day; NULL means open-ended.
    """

    __tablename__ = "salary_rate_schedule"

    schedule_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    category: Mapped[str] = mapped_column(String, nullable=False)
    sub_category: Mapped[str] = mapped_column(String, nullable=False)
    rate_per_day: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("category IN ('CENTRAL', 'STATE')", name="rate_schedule_category_check"),
        CheckConstraint("rate_per_day > 0", name="rate_schedule_rate_positive"),
        CheckConstraint(
            "effective_to IS NULL OR effective_to >= effective_from",
            name="rate_schedule_dates_check",
        ),
        # One open interval per pair.
        Index(
            "rate_schedule_one_open_interval",
            "category",
            "sub_category",
            unique=True,
            postgresql_where=text("effective_to IS NULL AND is_active"),
            sqlite_where=text("effective_to IS NULL AND is_active = 1"),
        ),
        Index("rate_schedule_lookup", "category", "sub_category", "effective_from"),
    )

    def is_active_on(self, as_of_date: date) -> bool:
        """Check if the schedule covers a given date."""
        if self.effective_from > as_of_date:
            return False
        if self.effective_to is not None and self.effective_to < as_of_date:
            return False
        return True
