"""Employee and employment API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from staffing_payroll.api.dependencies import DbSession
from staffing_payroll.api.schemas import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeTerminate,
    EmployeeUpdate,
    EmploymentAssign,
    EmploymentResponse,
    EmploymentTerminate,
    EmploymentUpdate,
    ErrorResponse,
)
from staffing_payroll.errors import NotFoundError
from staffing_payroll.services.employee_service import EmployeeService
from staffing_payroll.services.employment_service import EmploymentService

router = APIRouter(tags=["employees"])


# ============================================================================
# Employees
# ============================================================================


@router.post(
    "/employees",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_employee(db: DbSession, payload: EmployeeCreate) -> EmployeeResponse:
    """Onboard an employee."""
    employee = await EmployeeService(db).create_employee(**payload.model_dump())
    await db.commit()
    await db.refresh(employee)
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(
    db: DbSession, employee_id: Annotated[UUID, Path()]
) -> EmployeeResponse:
    employee = await EmployeeService(db).get_employee(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.patch(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession, employee_id: Annotated[UUID, Path()], payload: EmployeeUpdate
) -> EmployeeResponse:
    """Edit an employee; pay-basis fields are validated together."""
    employee = await EmployeeService(db).update_employee(
        employee_id, **payload.model_dump(exclude_unset=True)
    )
    await db.commit()
    await db.refresh(employee)
    return EmployeeResponse.model_validate(employee)


@router.post(
    "/employees/{employee_id}/terminate",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def terminate_employee(
    db: DbSession, employee_id: Annotated[UUID, Path()], payload: EmployeeTerminate
) -> EmployeeResponse:
    """Relieve an employee and end their current employment."""
    employee = await EmploymentService(db).terminate_employee(
        employee_id, payload.relieving_date, payload.reason
    )
    await db.commit()
    await db.refresh(employee)
    return EmployeeResponse.model_validate(employee)


# ============================================================================
# Employment history
# ============================================================================


@router.post(
    "/employees/{employee_id}/employments",
    response_model=EmploymentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def assign_employment(
    db: DbSession, employee_id: Annotated[UUID, Path()], payload: EmploymentAssign
) -> EmploymentResponse:
    """Assign the employee to a company."""
    employment = await EmploymentService(db).assign(employee_id, **payload.model_dump())
    await db.commit()
    await db.refresh(employment)
    return EmploymentResponse.model_validate(employment)


@router.get(
    "/employees/{employee_id}/employments",
    response_model=list[EmploymentResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_employment_history(
    db: DbSession, employee_id: Annotated[UUID, Path()]
) -> list[EmploymentResponse]:
    """Full employment history, oldest first."""
    history = await EmploymentService(db).list_history(employee_id)
    return [EmploymentResponse.model_validate(e) for e in history]


@router.get(
    "/employees/{employee_id}/employments/current",
    response_model=EmploymentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_current_employment(
    db: DbSession, employee_id: Annotated[UUID, Path()]
) -> EmploymentResponse:
    """The employee's ACTIVE employment."""
    employment = await EmploymentService(db).get_current(employee_id)
    if employment is None:
        raise NotFoundError("Active employment for employee", employee_id, field="employee_id")
    return EmploymentResponse.model_validate(employment)


@router.post(
    "/employments/{employment_id}/terminate",
    response_model=EmploymentResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def terminate_employment(
    db: DbSession, employment_id: Annotated[UUID, Path()], payload: EmploymentTerminate
) -> EmploymentResponse:
    """End an ACTIVE employment."""
    employment = await EmploymentService(db).terminate(
        employment_id, payload.leaving_date, payload.reason
    )
    await db.commit()
    await db.refresh(employment)
    return EmploymentResponse.model_validate(employment)


@router.patch(
    "/employments/{employment_id}",
    response_model=EmploymentResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_employment(
    db: DbSession, employment_id: Annotated[UUID, Path()], payload: EmploymentUpdate
) -> EmploymentResponse:
    """Edit an employment record."""
    employment = await EmploymentService(db).update(
        employment_id, payload.model_dump(exclude_unset=True)
    )
    await db.commit()
    await db.refresh(employment)
    return EmploymentResponse.model_validate(employment)
