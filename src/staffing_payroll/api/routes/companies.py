"""Company and salary template API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from staffing_payroll.api.dependencies import DbSession
from staffing_payroll.api.schemas import (
    CompanyCreate,
    CompanyResponse,
    CustomFieldCreate,
    CustomFieldUpdate,
    ErrorResponse,
    FieldDefault,
    FieldToggle,
    TemplateResponse,
)
from staffing_payroll.services.company_service import CompanyService
from staffing_payroll.templates import SalaryTemplateConfig

router = APIRouter(prefix="/companies", tags=["companies"])


def _template(config: SalaryTemplateConfig) -> TemplateResponse:
    return TemplateResponse(**config.to_dict())


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_company(db: DbSession, payload: CompanyCreate) -> CompanyResponse:
    """Onboard a company with the default salary template."""
    company = await CompanyService(db).create_company(**payload.model_dump())
    await db.commit()
    await db.refresh(company)
    return CompanyResponse.model_validate(company)


@router.get(
    "/{company_id}",
    response_model=CompanyResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_company(db: DbSession, company_id: Annotated[UUID, Path()]) -> CompanyResponse:
    company = await CompanyService(db).get_company(company_id)
    return CompanyResponse.model_validate(company)


@router.post(
    "/{company_id}/terminate",
    response_model=CompanyResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def terminate_company(
    db: DbSession, company_id: Annotated[UUID, Path()]
) -> CompanyResponse:
    """Mark the company INACTIVE; no new assignments are accepted."""
    company = await CompanyService(db).terminate_company(company_id)
    await db.commit()
    await db.refresh(company)
    return CompanyResponse.model_validate(company)


# ============================================================================
# Salary template
# ============================================================================


@router.get(
    "/{company_id}/template",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_template(db: DbSession, company_id: Annotated[UUID, Path()]) -> TemplateResponse:
    return _template(await CompanyService(db).get_template(company_id))


@router.put(
    "/{company_id}/template",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def replace_template(
    db: DbSession, company_id: Annotated[UUID, Path()], payload: TemplateResponse
) -> TemplateResponse:
    """Replace the whole template; it must pass validation."""
    config = SalaryTemplateConfig.from_dict(payload.model_dump())
    saved = await CompanyService(db).save_template(company_id, config)
    await db.commit()
    return _template(saved)


@router.post(
    "/{company_id}/template/default",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}},
)
async def reset_template(db: DbSession, company_id: Annotated[UUID, Path()]) -> TemplateResponse:
    """Replace the template with the default one."""
    saved = await CompanyService(db).reset_template(company_id)
    await db.commit()
    return _template(saved)


@router.put(
    "/{company_id}/template/fields/{key}/enabled",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def toggle_field(
    db: DbSession,
    company_id: Annotated[UUID, Path()],
    key: Annotated[str, Path()],
    payload: FieldToggle,
) -> TemplateResponse:
    """Enable or disable a field. Mandatory fields cannot be disabled."""
    saved = await CompanyService(db).toggle_field(company_id, key, payload.enabled)
    await db.commit()
    return _template(saved)


@router.put(
    "/{company_id}/template/fields/{key}/default",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def set_field_default(
    db: DbSession,
    company_id: Annotated[UUID, Path()],
    key: Annotated[str, Path()],
    payload: FieldDefault,
) -> TemplateResponse:
    saved = await CompanyService(db).set_field_default(company_id, key, payload.value)
    await db.commit()
    return _template(saved)


@router.post(
    "/{company_id}/template/custom-fields",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def add_custom_field(
    db: DbSession, company_id: Annotated[UUID, Path()], payload: CustomFieldCreate
) -> TemplateResponse:
    """Add a custom field; the key is generated when omitted."""
    attributes = payload.model_dump(
        exclude={"key", "label", "type", "purpose"}, exclude_none=True
    )
    saved = await CompanyService(db).add_custom_field(
        company_id,
        key=payload.key,
        label=payload.label,
        field_type=payload.type,
        purpose=payload.purpose,
        **attributes,
    )
    await db.commit()
    return _template(saved)


@router.patch(
    "/{company_id}/template/custom-fields/{key}",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_custom_field(
    db: DbSession,
    company_id: Annotated[UUID, Path()],
    key: Annotated[str, Path()],
    payload: CustomFieldUpdate,
) -> TemplateResponse:
    saved = await CompanyService(db).update_custom_field(
        company_id, key, **payload.model_dump(exclude_unset=True)
    )
    await db.commit()
    return _template(saved)


@router.delete(
    "/{company_id}/template/custom-fields/{key}",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def remove_custom_field(
    db: DbSession,
    company_id: Annotated[UUID, Path()],
    key: Annotated[str, Path()],
) -> TemplateResponse:
    """Remove a custom field; other fields can only be disabled."""
    saved = await CompanyService(db).remove_custom_field(company_id, key)
    await db.commit()
    return _template(saved)
