"""Rate schedule API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from staffing_payroll.api.dependencies import DbSession
from staffing_payroll.api.schemas import (
    ErrorResponse,
    RateScheduleCreate,
    RateScheduleListResponse,
    RateScheduleResponse,
    RateScheduleUpdate,
)
from staffing_payroll.enums import SalaryCategory, SalarySubCategory
from staffing_payroll.errors import UnresolvedRateError
from staffing_payroll.services.rate_schedule_service import RateScheduleService

router = APIRouter(prefix="/rate-schedules", tags=["rate-schedules"])


@router.post(
    "",
    response_model=RateScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_rate_schedule(
    db: DbSession,
    payload: RateScheduleCreate,
) -> RateScheduleResponse:
    """Create a schedule; the pair's prior open schedule is closed the day before."""
    schedule = await RateScheduleService(db).create_schedule(
        category=payload.category,
        sub_category=payload.sub_category,
        rate_per_day=payload.rate_per_day,
        effective_from=payload.effective_from,
        effective_to=payload.effective_to,
    )
    await db.commit()
    await db.refresh(schedule)
    return RateScheduleResponse.model_validate(schedule)


@router.get("", response_model=RateScheduleListResponse)
async def list_rate_schedules(
    db: DbSession,
    category: SalaryCategory | None = None,
    sub_category: SalarySubCategory | None = None,
    is_active: bool | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> RateScheduleListResponse:
    """List rate schedules with optional filters."""
    result = await RateScheduleService(db).list_schedules(
        category=category,
        sub_category=sub_category,
        is_active=is_active,
        page=page,
        limit=limit,
    )
    return RateScheduleListResponse(
        items=[RateScheduleResponse.model_validate(s) for s in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
        has_next_page=result.has_next_page,
        has_prev_page=result.has_prev_page,
    )


@router.get(
    "/active",
    response_model=RateScheduleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_active_rate(
    db: DbSession,
    category: SalaryCategory,
    sub_category: SalarySubCategory,
    as_of_date: date | None = None,
) -> RateScheduleResponse:
    """Resolve the schedule covering a date (default today)."""
    as_of = as_of_date or date.today()
    schedule = await RateScheduleService(db).get_active_rate(category, sub_category, as_of)
    if schedule is None:
        raise UnresolvedRateError(category.value, sub_category.value, as_of)
    return RateScheduleResponse.model_validate(schedule)


@router.get(
    "/{schedule_id}",
    response_model=RateScheduleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_rate_schedule(
    db: DbSession,
    schedule_id: Annotated[UUID, Path()],
) -> RateScheduleResponse:
    """Get a specific rate schedule by ID."""
    schedule = await RateScheduleService(db).get_schedule(schedule_id)
    return RateScheduleResponse.model_validate(schedule)


@router.patch(
    "/{schedule_id}",
    response_model=RateScheduleResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_rate_schedule(
    db: DbSession,
    schedule_id: Annotated[UUID, Path()],
    payload: RateScheduleUpdate,
) -> RateScheduleResponse:
    """Edit a rate schedule."""
    schedule = await RateScheduleService(db).update_schedule(
        schedule_id, **payload.model_dump(exclude_unset=True)
    )
    await db.commit()
    await db.refresh(schedule)
    return RateScheduleResponse.model_validate(schedule)


@router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_rate_schedule(
    db: DbSession,
    schedule_id: Annotated[UUID, Path()],
) -> Response:
    """Delete a rate schedule."""
    await RateScheduleService(db).delete_schedule(schedule_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
