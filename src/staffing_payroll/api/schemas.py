"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from staffing_payroll.enums import (
    FieldPurpose,
    FieldType,
    SalaryCategory,
    SalarySubCategory,
    SalaryType,
)


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeCreate(BaseModel):
    """Schema for onboarding an employee."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    father_name: str | None = None
    category: SalaryCategory
    sub_category: SalarySubCategory | None = None
    salary_per_day: Decimal | None = None
    monthly_salary: Decimal | None = None
    pf_enabled: bool = False
    esic_enabled: bool = False
    pf_uan_number: str | None = None
    esic_number: str | None = None
    onboarding_date: date


class EmployeeUpdate(BaseModel):
    """Schema for editing an employee; only sent fields change."""

    first_name: str | None = None
    last_name: str | None = None
    father_name: str | None = None
    category: SalaryCategory | None = None
    sub_category: SalarySubCategory | None = None
    salary_per_day: Decimal | None = None
    monthly_salary: Decimal | None = None
    pf_enabled: bool | None = None
    esic_enabled: bool | None = None
    pf_uan_number: str | None = None
    esic_number: str | None = None


class EmployeeResponse(BaseModel):
    """Schema for employee response."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    first_name: str
    last_name: str
    father_name: str | None = None
    category: str
    sub_category: str | None = None
    salary_per_day: Decimal | None = None
    monthly_salary: Decimal | None = None
    pf_enabled: bool
    esic_enabled: bool
    pf_uan_number: str | None = None
    esic_number: str | None = None
    onboarding_date: date
    relieving_date: date | None = None
    status: str


class EmployeeTerminate(BaseModel):
    """Schema for relieving an employee."""

    relieving_date: date
    reason: str | None = None


# ============================================================================
# Employment schemas
# ============================================================================


class EmploymentAssign(BaseModel):
    """Schema for assigning an employee to a company."""

    company_id: UUID
    designation: str = Field(min_length=1)
    department: str = Field(min_length=1)
    joining_date: date
    salary: Decimal | None = Field(default=None, ge=0)
    salary_type: SalaryType | None = None


class EmploymentTerminate(BaseModel):
    """Schema for ending an employment."""

    leaving_date: date
    reason: str | None = None


class EmploymentUpdate(BaseModel):
    """Schema for editing an employment record."""

    company_id: UUID | None = None
    designation: str | None = None
    department: str | None = None
    salary: Decimal | None = Field(default=None, ge=0)
    salary_type: SalaryType | None = None
    joining_date: date | None = None
    leaving_date: date | None = None
    status: str | None = None
    reason: str | None = None


class EmploymentResponse(BaseModel):
    """Schema for employment history response."""

    model_config = ConfigDict(from_attributes=True)

    employment_id: UUID
    employee_id: UUID
    company_id: UUID
    designation: str
    department: str
    salary: Decimal
    salary_type: str
    joining_date: date
    leaving_date: date | None = None
    status: str
    reason: str | None = None
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Rate schedule schemas
# ============================================================================


class RateScheduleCreate(BaseModel):
    """Schema for creating a rate schedule."""

    category: SalaryCategory
    sub_category: SalarySubCategory
    rate_per_day: Decimal = Field(gt=0)
    effective_from: date
    effective_to: date | None = None


class RateScheduleUpdate(BaseModel):
    """Schema for editing a rate schedule."""

    category: SalaryCategory | None = None
    sub_category: SalarySubCategory | None = None
    rate_per_day: Decimal | None = Field(default=None, gt=0)
    effective_from: date | None = None
    effective_to: date | None = None
    is_active: bool | None = None


class RateScheduleResponse(BaseModel):
    """Schema for rate schedule response."""

    model_config = ConfigDict(from_attributes=True)

    schedule_id: UUID
    category: str
    sub_category: str
    rate_per_day: Decimal
    effective_from: date
    effective_to: date | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class RateScheduleListResponse(BaseModel):
    """Schema for listing rate schedules."""

    items: list[RateScheduleResponse]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


# ============================================================================
# Company and template schemas
# ============================================================================


class CompanyCreate(BaseModel):
    """Schema for onboarding a company."""

    name: str = Field(min_length=1)
    address: str | None = None
    contact_person_name: str | None = None
    contact_person_number: str | None = None
    onboarding_date: date


class CompanyResponse(BaseModel):
    """Schema for company response."""

    model_config = ConfigDict(from_attributes=True)

    company_id: UUID
    name: str
    address: str | None = None
    contact_person_name: str | None = None
    contact_person_number: str | None = None
    onboarding_date: date
    status: str
    created_at: datetime
    updated_at: datetime


class TemplateResponse(BaseModel):
    """Stored form of a salary template."""

    mandatory_fields: list[dict[str, Any]]
    optional_fields: list[dict[str, Any]]
    custom_fields: list[dict[str, Any]]


class FieldToggle(BaseModel):
    enabled: bool


class FieldDefault(BaseModel):
    value: Any = None


class CustomFieldCreate(BaseModel):
    """Schema for adding a custom template field."""

    key: str | None = None
    label: str | None = None
    type: FieldType = FieldType.TEXT
    purpose: FieldPurpose = FieldPurpose.INFORMATION
    description: str | None = None
    requires_admin_input: bool = False
    default_value: Any = None
    options: list[str] | None = None


class CustomFieldUpdate(BaseModel):
    """Schema for editing a custom template field."""

    label: str | None = None
    description: str | None = None
    enabled: bool | None = None
    requires_admin_input: bool | None = None


# ============================================================================
# Payslip schemas
# ============================================================================


class PayslipRequest(BaseModel):
    """Schema for computing one employee's payslip."""

    employee_id: UUID
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    days_worked: Decimal | None = Field(default=None, ge=0)
    inputs: dict[str, Any] = Field(default_factory=dict)


class PayslipLineResponse(BaseModel):
    key: str
    label: str
    line_type: str
    bucket: str
    amount: Decimal


class PayslipResponse(BaseModel):
    """Schema for a computed payslip."""

    employee_id: UUID
    company_id: UUID
    employment_id: UUID
    period: str
    basic: Decimal
    allowance: Decimal
    other_allowance: Decimal
    other_earning: Decimal
    gross_earning: Decimal
    epf_contribution: Decimal
    esic_contribution: Decimal
    advance: Decimal
    other_deduction: Decimal
    gross_deduction: Decimal
    net_pay: Decimal
    lines: list[PayslipLineResponse]
    information: dict[str, str]
    warnings: list[str]
    fingerprint: str


class CompanyPayrollRequest(BaseModel):
    """Schema for computing a month's payslips for a whole company."""

    company_id: UUID
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    days_worked: dict[UUID, Decimal] = Field(default_factory=dict)
    inputs: dict[UUID, dict[str, Any]] = Field(default_factory=dict)


class PayslipFailureResponse(BaseModel):
    employee_id: UUID
    code: str
    detail: str
    field: str | None = None


class CompanyPayrollResponse(BaseModel):
    """Schema for a company's computed payroll."""

    company_id: UUID
    period: str
    payslips: list[PayslipResponse]
    failures: list[PayslipFailureResponse]
    total_gross: Decimal
    total_deduction: Decimal
    total_net: Decimal


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    field: str | None = None
    record_id: str | None = None
