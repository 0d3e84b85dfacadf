"""Company persistence and salary template editing."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staffing_payroll.config import get_settings
from staffing_payroll.enums import CompanyStatus, EmploymentStatus, FieldPurpose, FieldType
from staffing_payroll.errors import InvalidStateError, NotFoundError, ValidationError
from staffing_payroll.models import Company, EmploymentHistory
from staffing_payroll.templates import (
    SalaryTemplateConfig,
    SalaryTemplateEngine,
    default_salary_template,
)

logger = logging.getLogger(__name__)


class CompanyService:
    """Service for companies and their salary templates.

    Template edits load the stored config, apply one pure
    ``SalaryTemplateEngine`` operation and store the result only if it
    passes validation; a rejected edit leaves the stored template as it was.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_company(
        self,
        name: str,
        onboarding_date: date,
        salary_template: SalaryTemplateConfig | None = None,
        **details: Any,
    ) -> Company:
        """Create a company, with the default template unless one is given."""
        if not name:
            raise ValidationError("Company name is required", field="name")
        config = salary_template or default_salary_template(get_settings().default_basic_duty)
        SalaryTemplateEngine.ensure_valid(config)
        company = Company(
            name=name,
            onboarding_date=onboarding_date,
            status=CompanyStatus.ACTIVE.value,
            salary_template=config.to_dict(),
            **details,
        )
        self.session.add(company)
        await self.session.flush()
        logger.info("Created company %s (%s)", company.company_id, name)
        return company

    async def get_company(self, company_id: UUID) -> Company:
        company = await self.session.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company", company_id, field="company_id")
        return company

    async def terminate_company(self, company_id: UUID) -> Company:
        """Mark the company INACTIVE. Existing employments are kept."""
        company = await self.get_company(company_id)
        if company.status == CompanyStatus.INACTIVE:
            raise InvalidStateError(
                f"Company {company.name} is already INACTIVE",
                field="status",
                record_id=company_id,
            )
        company.status = CompanyStatus.INACTIVE.value
        await self.session.flush()
        active = await self.session.scalar(
            select(func.count())
            .select_from(EmploymentHistory)
            .where(
                EmploymentHistory.company_id == company_id,
                EmploymentHistory.status == EmploymentStatus.ACTIVE.value,
            )
        )
        logger.info(
            "Terminated company %s; %s active employments remain", company_id, active or 0
        )
        return company

    async def get_template(self, company_id: UUID) -> SalaryTemplateConfig:
        company = await self.get_company(company_id)
        return SalaryTemplateConfig.from_dict(company.salary_template)

    async def save_template(
        self, company_id: UUID, config: SalaryTemplateConfig
    ) -> SalaryTemplateConfig:
        """Replace the whole template after validating it."""
        company = await self.get_company(company_id)
        SalaryTemplateEngine.ensure_valid(config)
        company.salary_template = config.to_dict()
        await self.session.flush()
        logger.info("Saved salary template for company %s", company_id)
        return config

    async def reset_template(self, company_id: UUID, basic_duty: int | None = None) -> SalaryTemplateConfig:
        """Replace the template with the default one."""
        duty = basic_duty or get_settings().default_basic_duty
        return await self.save_template(company_id, default_salary_template(duty))

    async def toggle_field(self, company_id: UUID, key: str, enabled: bool) -> SalaryTemplateConfig:
        return await self._edit(
            company_id, lambda c: SalaryTemplateEngine.toggle(c, key, enabled)
        )

    async def set_field_default(self, company_id: UUID, key: str, value: Any) -> SalaryTemplateConfig:
        return await self._edit(
            company_id, lambda c: SalaryTemplateEngine.set_default_value(c, key, value)
        )

    async def add_custom_field(
        self,
        company_id: UUID,
        key: str | None = None,
        label: str | None = None,
        field_type: FieldType = FieldType.TEXT,
        purpose: FieldPurpose = FieldPurpose.INFORMATION,
        **attributes: Any,
    ) -> SalaryTemplateConfig:
        return await self._edit(
            company_id,
            lambda c: SalaryTemplateEngine.add_custom_field(
                c, key, label, field_type, purpose, **attributes
            ),
        )

    async def update_custom_field(
        self, company_id: UUID, key: str, **changes: Any
    ) -> SalaryTemplateConfig:
        return await self._edit(
            company_id, lambda c: SalaryTemplateEngine.update_custom_field(c, key, **changes)
        )

    async def remove_custom_field(self, company_id: UUID, key: str) -> SalaryTemplateConfig:
        return await self._edit(
            company_id, lambda c: SalaryTemplateEngine.remove_custom_field(c, key)
        )

    async def _edit(
        self,
        company_id: UUID,
        operation: Callable[[SalaryTemplateConfig], SalaryTemplateConfig],
    ) -> SalaryTemplateConfig:
        current = await self.get_template(company_id)
        try:
            updated = operation(current)
        except ValidationError as e:
            logger.warning("Template edit rejected for company %s: %s", company_id, e.reason)
            raise
        if updated is current:
            return current
        return await self.save_template(company_id, updated)
