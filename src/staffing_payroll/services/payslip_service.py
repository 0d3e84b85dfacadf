"""Payslip generation for one employee, or a whole company, for a month."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffing_payroll.calculators import (
    EmployeeWage,
    PayPeriod,
    Payslip,
    PayslipComputer,
    PayslipLineBuilder,
    StatutoryCalculator,
)
from staffing_payroll.config import get_settings
from staffing_payroll.enums import (
    DeductionKind,
    EmploymentStatus,
    SalaryCategory,
    SalarySubCategory,
    SalaryType,
)
from staffing_payroll.errors import NotFoundError, PayrollRulesError, ValidationError
from staffing_payroll.models import Company, Employee, EmploymentHistory
from staffing_payroll.services.employment_service import EmploymentService
from staffing_payroll.services.rate_schedule_service import RateScheduleService
from staffing_payroll.templates import SalaryTemplateConfig, SalaryTemplateEngine, SalaryTemplateField
from staffing_payroll.templates.defaults import (
    BASIC_DUTY_KEY,
    MONTHLY_PAY_KEY,
    WAGES_PER_DAY_KEY,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayslipResult:
    """Computed payslip plus the context it was computed in."""

    employee_id: UUID
    company_id: UUID
    employment_id: UUID
    payslip: Payslip
    fingerprint: str


@dataclass(frozen=True)
class PayslipFailure:
    """An employee whose payslip could not be computed."""

    employee_id: UUID
    error: PayrollRulesError


@dataclass(frozen=True)
class CompanyPayrollResult:
    """Payslips for every active employee of a company for one month.

    Employees that fail are listed in ``failures``; the rest still compute.
    """

    company_id: UUID
    year: int
    month: int
    payslips: list[PayslipResult]
    failures: list[PayslipFailure]

    @property
    def total_gross(self) -> Decimal:
        return sum((r.payslip.gross_earning for r in self.payslips), Decimal("0.00"))

    @property
    def total_deduction(self) -> Decimal:
        return sum((r.payslip.gross_deduction for r in self.payslips), Decimal("0.00"))

    @property
    def total_net(self) -> Decimal:
        return sum((r.payslip.net_pay for r in self.payslips), Decimal("0.00"))


class PayslipService:
    """Gathers employee, employment, template and rate data for a payslip.

    Flow:
    1. Load the employee and their ACTIVE employment
    2. Load the employing company's enabled template fields
    3. Resolve the wage: CENTRAL/STATE from the rate schedule covering the
       period end, SPECIALIZED from the monthly salary
    4. Fill employee details and statutory PF/ESIC as period inputs;
       explicit admin inputs always win
    5. Run ``PayslipComputer``
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        settings = get_settings()
        self.computer = PayslipComputer(basic_pay_tolerance=settings.basic_pay_tolerance)
        self.statutory = StatutoryCalculator(
            pf_rate=settings.pf_rate,
            esic_rate=settings.esic_rate,
            wage_ceiling=settings.statutory_wage_ceiling,
        )
        self.default_basic_duty = settings.default_basic_duty

    async def compute(
        self,
        employee_id: UUID,
        year: int,
        month: int,
        days_worked: Decimal | None = None,
        inputs: Mapping[str, Any] | None = None,
    ) -> PayslipResult:
        """Compute the payslip; nothing is written."""
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id, field="employee_id")
        employment = await EmploymentService(self.session).get_current(employee_id)
        if employment is None:
            raise NotFoundError("Active employment for employee", employee_id, field="employee_id")
        company = await self.session.get(Company, employment.company_id)
        if company is None:
            raise NotFoundError("Company", employment.company_id, field="company_id")

        config = SalaryTemplateConfig.from_dict(company.salary_template)
        fields = SalaryTemplateEngine.enabled_fields(config)
        period = PayPeriod(year, month, days_worked=days_worked, inputs=inputs or {})

        wage = await self._resolve_wage(employee, employment, period)
        period = period.with_inputs(
            self._employee_inputs(employee, employment, company, wage, fields, period)
        )

        earnings = self.computer.compute_earnings(fields, wage, period)
        contributions = self.statutory.contributions(
            earnings, employee.pf_enabled, employee.esic_enabled
        )
        period = period.with_inputs(
            self._statutory_inputs(fields, contributions.pf, contributions.esic)
        )

        payslip = self.computer.compute(fields, wage, period)
        fingerprint = PayslipLineBuilder.compute_fingerprint(payslip)
        for warning in payslip.warnings:
            logger.warning("Payslip %s for employee %s: %s", period.label, employee_id, warning)
        logger.info(
            "Computed payslip %s for employee %s: net %s", period.label, employee_id, payslip.net_pay
        )
        return PayslipResult(
            employee_id=employee_id,
            company_id=company.company_id,
            employment_id=employment.employment_id,
            payslip=payslip,
            fingerprint=fingerprint,
        )

    async def compute_company(
        self,
        company_id: UUID,
        year: int,
        month: int,
        days_worked_by_employee: Mapping[UUID, Decimal] | None = None,
        inputs_by_employee: Mapping[UUID, Mapping[str, Any]] | None = None,
    ) -> CompanyPayrollResult:
        """Compute payslips for every ACTIVE employment at the company.

        Admin inputs and attendance are keyed by employee id and must only
        name employees currently assigned to the company.
        """
        company = await self.session.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company", company_id, field="company_id")
        period = PayPeriod(year, month)
        days_worked_by_employee = days_worked_by_employee or {}
        inputs_by_employee = inputs_by_employee or {}

        result = await self.session.execute(
            select(EmploymentHistory.employee_id)
            .where(
                EmploymentHistory.company_id == company_id,
                EmploymentHistory.status == EmploymentStatus.ACTIVE.value,
            )
            .order_by(EmploymentHistory.joining_date, EmploymentHistory.employee_id)
        )
        employee_ids = list(result.scalars().all())

        strangers = (set(days_worked_by_employee) | set(inputs_by_employee)) - set(employee_ids)
        if strangers:
            stranger = sorted(strangers, key=str)[0]
            raise ValidationError(
                f"Employee {stranger} has no active employment at company {company_id}",
                field="employee_id",
                record_id=stranger,
            )

        payslips: list[PayslipResult] = []
        failures: list[PayslipFailure] = []
        for employee_id in employee_ids:
            try:
                payslips.append(
                    await self.compute(
                        employee_id,
                        year,
                        month,
                        days_worked=days_worked_by_employee.get(employee_id),
                        inputs=inputs_by_employee.get(employee_id),
                    )
                )
            except PayrollRulesError as e:
                logger.warning("Payslip %s for employee %s failed: %s", period.label, employee_id, e)
                failures.append(PayslipFailure(employee_id=employee_id, error=e))

        logger.info(
            "Computed payroll %s for company %s: %d payslips, %d failures",
            period.label,
            company_id,
            len(payslips),
            len(failures),
        )
        return CompanyPayrollResult(
            company_id=company_id,
            year=year,
            month=month,
            payslips=payslips,
            failures=failures,
        )

    async def _resolve_wage(
        self, employee: Employee, employment: EmploymentHistory, period: PayPeriod
    ) -> EmployeeWage:
        category = SalaryCategory(employee.category)
        if category.is_rate_based:
            if not employee.sub_category:
                raise ValidationError(
                    f"{category.value} employee {employee.employee_id} has no sub-category",
                    field="sub_category",
                )
            schedule = await RateScheduleService(self.session).require_rate(
                category, employee.sub_category, period.end
            )
            return EmployeeWage(
                category=category,
                sub_category=SalarySubCategory(employee.sub_category),
                rate_per_day=Decimal(schedule.rate_per_day),
            )

        if SalaryType(employment.salary_type) == SalaryType.PER_MONTH and employment.salary:
            monthly = Decimal(employment.salary)
        elif employee.monthly_salary is not None:
            monthly = Decimal(employee.monthly_salary)
        else:
            raise ValidationError(
                f"Employee {employee.employee_id} has no monthly salary", field="monthly_salary"
            )
        return EmployeeWage(category=category, monthly_salary=monthly)

    def _employee_inputs(
        self,
        employee: Employee,
        employment: EmploymentHistory,
        company: Company,
        wage: EmployeeWage,
        fields: list[SalaryTemplateField],
        period: PayPeriod,
    ) -> dict[str, Any]:
        """Values the template shows but the admin does not type in."""
        duty = self._basic_duty(fields, period)
        values: dict[str, Any] = {
            "companyName": company.name,
            "employeeName": employee.full_name,
            "designation": employment.designation,
            "fatherName": employee.father_name,
            "uanNumber": employee.pf_uan_number,
            WAGES_PER_DAY_KEY: PayslipLineBuilder.round_to_paise(wage.wages_per_day(duty)),
            MONTHLY_PAY_KEY: PayslipLineBuilder.round_to_paise(wage.monthly_pay(duty)),
        }
        keys = {f.key for f in fields}
        return {k: v for k, v in values.items() if k in keys and v is not None}

    def _basic_duty(self, fields: list[SalaryTemplateField], period: PayPeriod) -> int:
        duty_field = next((f for f in fields if f.key == BASIC_DUTY_KEY), None)
        raw = period.inputs.get(BASIC_DUTY_KEY)
        if raw is not None and duty_field is not None:
            raw = duty_field.coerce(raw)
        elif raw is None and duty_field is not None:
            raw = duty_field.default_value
        if raw is None:
            return self.default_basic_duty
        try:
            return int(Decimal(str(raw)))
        except (ArithmeticError, ValueError) as e:
            raise ValidationError(
                f"Basic duty must be a day count, got {raw!r}", field=BASIC_DUTY_KEY
            ) from e

    @staticmethod
    def _statutory_inputs(
        fields: list[SalaryTemplateField], pf: Decimal, esic: Decimal
    ) -> dict[str, Decimal]:
        amounts = {DeductionKind.PF: pf, DeductionKind.ESIC: esic}
        return {
            f.key: amounts[f.deduction_kind]
            for f in fields
            if f.deduction_kind in amounts
        }
