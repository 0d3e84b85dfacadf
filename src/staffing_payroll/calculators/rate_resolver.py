"""Per-day wage resolution from time-partitioned rate schedules."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Protocol, Sequence

from staffing_payroll.enums import SalaryCategory, SalarySubCategory
from staffing_payroll.errors import ConflictError, UnresolvedRateError, ValidationError


class RateScheduleLike(Protocol):
    """Anything shaped like a rate schedule record (ORM row or plain value)."""

    category: str
    sub_category: str
    rate_per_day: Decimal
    effective_from: date
    effective_to: date | None
    is_active: bool


def _value(v: object) -> str:
    return getattr(v, "value", v)  # type: ignore[return-value]


def covers(schedule: RateScheduleLike, as_of_date: date) -> bool:
    """``effective_from`` and ``effective_to`` are both covered days."""
    if schedule.effective_from > as_of_date:
        return False
    return schedule.effective_to is None or as_of_date <= schedule.effective_to


def intervals_overlap(
    a_from: date, a_to: date | None, b_from: date, b_to: date | None
) -> bool:
    """Check whether two closed date intervals (None = open end) intersect."""
    a_end = a_to or date.max
    b_end = b_to or date.max
    return a_from <= b_end and b_from <= a_end


class RateScheduleResolver:
    """Resolves the wage rate for a category/sub-category on a date.

    Selection:
    1. Keep active schedules of the requested pair
    2. Keep those whose interval covers ``as_of_date``
    3. Prefer the open-ended schedule (only ambiguous on bad data),
       then the latest ``effective_from``
    """

    @staticmethod
    def resolve(
        schedules: Iterable[RateScheduleLike],
        category: SalaryCategory | str,
        sub_category: SalarySubCategory | str,
        as_of_date: date,
    ) -> RateScheduleLike | None:
        """Return the covering schedule, or None. Never raises for not-found."""
        category = _value(category)
        sub_category = _value(sub_category)
        candidates = [
            s
            for s in schedules
            if _value(s.category) == category
            and _value(s.sub_category) == sub_category
            and s.is_active
            and covers(s, as_of_date)
        ]
        if not candidates:
            return None
        candidates.sort(key=lambda s: (s.effective_to is None, s.effective_from), reverse=True)
        return candidates[0]

    @classmethod
    def require(
        cls,
        schedules: Iterable[RateScheduleLike],
        category: SalaryCategory | str,
        sub_category: SalarySubCategory | str,
        as_of_date: date,
    ) -> RateScheduleLike:
        """Like ``resolve`` but raise UnresolvedRateError when nothing covers the date."""
        found = cls.resolve(schedules, category, sub_category, as_of_date)
        if found is None:
            raise UnresolvedRateError(_value(category), _value(sub_category), as_of_date)
        return found


class RateSchedulePlanner:
    """Validates schedule writes against the non-overlap invariant.

    Pure: takes the existing schedules of one pair and returns what must
    change. The caller applies the plan inside a single transaction.
    """

    @staticmethod
    def validate_values(
        category: SalaryCategory | str,
        rate_per_day: Decimal,
        effective_from: date,
        effective_to: date | None,
    ) -> None:
        if _value(category) not in (SalaryCategory.CENTRAL.value, SalaryCategory.STATE.value):
            raise ValidationError(
                "Rate schedules apply to CENTRAL and STATE categories only", field="category"
            )
        if rate_per_day is None or Decimal(rate_per_day) <= 0:
            raise ValidationError("Rate per day must be greater than 0", field="rate_per_day")
        if effective_to is not None and effective_to < effective_from:
            raise ValidationError(
                "effective_to must not be before effective_from", field="effective_to"
            )

    @classmethod
    def plan_create(
        cls,
        existing: Sequence[RateScheduleLike],
        category: SalaryCategory | str,
        rate_per_day: Decimal,
        effective_from: date,
        effective_to: date | None,
    ) -> tuple[RateScheduleLike | None, date | None]:
        """Plan a new schedule for the pair of ``existing``.

        Returns ``(open_schedule_to_close, close_on)``; both None when no
        prior open interval needs closing. A closed interval ending before
        the open one starts is a backfill and closes nothing. Raises
        ConflictError when the new interval would overlap a schedule that
        cannot be closed.
        """
        cls.validate_values(category, rate_per_day, effective_from, effective_to)
        active = [s for s in existing if s.is_active]

        to_close: RateScheduleLike | None = None
        close_on: date | None = None
        open_ones = [s for s in active if s.effective_to is None]
        for prior in open_ones:
            if effective_to is not None and effective_to < prior.effective_from:
                # Backfill ending before the open interval starts.
                continue
            if prior.effective_from < effective_from:
                to_close = prior
                close_on = effective_from - timedelta(days=1)
            else:
                raise ConflictError(
                    f"Open rate schedule starting {prior.effective_from.isoformat()} "
                    f"already covers {effective_from.isoformat()}",
                    field="effective_from",
                    record_id=getattr(prior, "schedule_id", None),
                )

        for other in active:
            other_to = close_on if other is to_close else other.effective_to
            if intervals_overlap(effective_from, effective_to, other.effective_from, other_to):
                raise ConflictError(
                    f"Rate schedule overlaps existing interval "
                    f"{other.effective_from.isoformat()}..{_fmt(other_to)}",
                    field="effective_from",
                    record_id=getattr(other, "schedule_id", None),
                )
        return to_close, close_on

    @classmethod
    def check_update(
        cls,
        existing: Sequence[RateScheduleLike],
        target: RateScheduleLike,
        category: SalaryCategory | str,
        rate_per_day: Decimal,
        effective_from: date,
        effective_to: date | None,
        is_active: bool,
    ) -> None:
        """Validate an edit of ``target`` against its siblings."""
        cls.validate_values(category, rate_per_day, effective_from, effective_to)
        if not is_active:
            return
        for other in existing:
            if other is target or not other.is_active:
                continue
            if effective_to is None and other.effective_to is None:
                raise ConflictError(
                    "Another open-ended rate schedule already exists",
                    field="effective_to",
                    record_id=getattr(other, "schedule_id", None),
                )
            if intervals_overlap(
                effective_from, effective_to, other.effective_from, other.effective_to
            ):
                raise ConflictError(
                    f"Rate schedule overlaps existing interval "
                    f"{other.effective_from.isoformat()}..{_fmt(other.effective_to)}",
                    field="effective_from",
                    record_id=getattr(other, "schedule_id", None),
                )


def _fmt(d: date | None) -> str:
    return d.isoformat() if d else "open"
