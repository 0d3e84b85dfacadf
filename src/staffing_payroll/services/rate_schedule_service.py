"""Rate schedule persistence and lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staffing_payroll.calculators.rate_resolver import RateSchedulePlanner, RateScheduleResolver
from staffing_payroll.enums import SalaryCategory, SalarySubCategory
from staffing_payroll.errors import ConflictError, NotFoundError, ValidationError
from staffing_payroll.models import SalaryRateSchedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulePage:
    """One page of rate schedules."""

    items: list[SalaryRateSchedule]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


def _pair(category: Any, sub_category: Any) -> tuple[SalaryCategory, SalarySubCategory]:
    try:
        cat = SalaryCategory(category)
    except ValueError as e:
        raise ValidationError(str(e), field="category") from e
    try:
        sub = SalarySubCategory(sub_category)
    except ValueError as e:
        raise ValidationError(str(e), field="sub_category") from e
    return cat, sub


class RateScheduleService:
    """Service for salary rate schedules.

    Writes hold the non-overlap invariant per (category, sub_category):
    creating a schedule closes the pair's prior open interval on the day
    before the new one starts, in the same transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_schedule(self, schedule_id: UUID) -> SalaryRateSchedule:
        schedule = await self.session.get(SalaryRateSchedule, schedule_id)
        if schedule is None:
            raise NotFoundError("Rate schedule", schedule_id, field="schedule_id")
        return schedule

    async def create_schedule(
        self,
        category: SalaryCategory | str,
        sub_category: SalarySubCategory | str,
        rate_per_day: Decimal,
        effective_from: date,
        effective_to: date | None = None,
    ) -> SalaryRateSchedule:
        """Insert a schedule, closing the pair's prior open interval."""
        cat, sub = _pair(category, sub_category)
        rate = self._rate(rate_per_day)
        existing = await self._pair_schedules(cat, sub, lock=True)
        to_close, close_on = RateSchedulePlanner.plan_create(
            existing, cat, rate, effective_from, effective_to
        )

        if to_close is not None:
            to_close.effective_to = close_on
            # Close first so the open-interval index never sees two rows.
            await self._flush(cat, sub)
            logger.info(
                "Closed rate schedule %s for %s/%s on %s",
                to_close.schedule_id,
                cat.value,
                sub.value,
                close_on,
            )

        schedule = SalaryRateSchedule(
            category=cat.value,
            sub_category=sub.value,
            rate_per_day=rate,
            effective_from=effective_from,
            effective_to=effective_to,
            is_active=True,
        )
        self.session.add(schedule)
        await self._flush(cat, sub)
        logger.info(
            "Created rate schedule %s: %s/%s %s from %s",
            schedule.schedule_id,
            cat.value,
            sub.value,
            rate,
            effective_from,
        )
        return schedule

    async def update_schedule(self, schedule_id: UUID, **changes: Any) -> SalaryRateSchedule:
        """Edit a schedule; the result must not overlap its siblings."""
        allowed = {"category", "sub_category", "rate_per_day", "effective_from", "effective_to", "is_active"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(
                f"Cannot update rate schedule fields: {sorted(unknown)}", field=sorted(unknown)[0]
            )
        schedule = await self.get_schedule(schedule_id)
        cat, sub = _pair(
            changes.get("category", schedule.category),
            changes.get("sub_category", schedule.sub_category),
        )
        rate = self._rate(changes.get("rate_per_day", schedule.rate_per_day))
        effective_from = changes.get("effective_from", schedule.effective_from)
        effective_to = changes.get("effective_to", schedule.effective_to)
        is_active = bool(changes.get("is_active", schedule.is_active))

        siblings = await self._pair_schedules(cat, sub, lock=True)
        RateSchedulePlanner.check_update(
            siblings, schedule, cat, rate, effective_from, effective_to, is_active
        )

        schedule.category = cat.value
        schedule.sub_category = sub.value
        schedule.rate_per_day = rate
        schedule.effective_from = effective_from
        schedule.effective_to = effective_to
        schedule.is_active = is_active
        await self._flush(cat, sub)
        logger.info("Updated rate schedule %s: %s", schedule_id, sorted(changes))
        return schedule

    async def delete_schedule(self, schedule_id: UUID) -> None:
        """Remove a schedule. Neighbouring intervals are left as they are."""
        schedule = await self.get_schedule(schedule_id)
        await self.session.delete(schedule)
        await self.session.flush()
        logger.info("Deleted rate schedule %s", schedule_id)

    async def list_schedules(
        self,
        category: SalaryCategory | str | None = None,
        sub_category: SalarySubCategory | str | None = None,
        is_active: bool | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> SchedulePage:
        """Filtered listing, newest ``effective_from`` first."""
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive", field="page")
        stmt = select(SalaryRateSchedule)
        try:
            if category is not None:
                stmt = stmt.where(SalaryRateSchedule.category == SalaryCategory(category).value)
            if sub_category is not None:
                stmt = stmt.where(
                    SalaryRateSchedule.sub_category == SalarySubCategory(sub_category).value
                )
        except ValueError as e:
            raise ValidationError(str(e), field="category") from e
        if is_active is not None:
            stmt = stmt.where(SalaryRateSchedule.is_active == is_active)

        total = await self.session.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await self.session.execute(
            stmt.order_by(
                SalaryRateSchedule.effective_from.desc(),
                SalaryRateSchedule.category,
                SalaryRateSchedule.sub_category,
            )
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return SchedulePage(
            items=list(result.scalars().all()), total=total or 0, page=page, limit=limit
        )

    async def get_active_rate(
        self,
        category: SalaryCategory | str,
        sub_category: SalarySubCategory | str,
        as_of_date: date | None = None,
    ) -> SalaryRateSchedule | None:
        """The schedule covering ``as_of_date`` (default today), or None."""
        cat, sub = _pair(category, sub_category)
        as_of = as_of_date or date.today()
        schedules = await self._pair_schedules(cat, sub)
        return RateScheduleResolver.resolve(schedules, cat, sub, as_of)

    async def require_rate(
        self,
        category: SalaryCategory | str,
        sub_category: SalarySubCategory | str,
        as_of_date: date,
    ) -> SalaryRateSchedule:
        """Like ``get_active_rate`` but raise UnresolvedRateError on a gap."""
        cat, sub = _pair(category, sub_category)
        schedules = await self._pair_schedules(cat, sub)
        return RateScheduleResolver.require(schedules, cat, sub, as_of_date)

    async def _pair_schedules(
        self, category: SalaryCategory, sub_category: SalarySubCategory, lock: bool = False
    ) -> list[SalaryRateSchedule]:
        stmt = (
            select(SalaryRateSchedule)
            .where(
                SalaryRateSchedule.category == category.value,
                SalaryRateSchedule.sub_category == sub_category.value,
            )
            .order_by(SalaryRateSchedule.effective_from)
        )
        if lock:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _flush(self, category: SalaryCategory, sub_category: SalarySubCategory) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                "Rate schedule write rejected for %s/%s", category.value, sub_category.value
            )
            raise ConflictError(
                f"An open rate schedule already exists for {category.value}/{sub_category.value}",
                field="effective_to",
            ) from e

    @staticmethod
    def _rate(value: Any) -> Decimal:
        try:
            rate = Decimal(str(value))
        except ArithmeticError:
            raise ValidationError(f"Rate per day must be a number, got {value!r}", field="rate_per_day")
        if not rate.is_finite() or rate <= 0:
            raise ValidationError("Rate per day must be greater than 0", field="rate_per_day")
        return rate
