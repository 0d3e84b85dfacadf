"""Standard salary template given to new companies."""

from __future__ import annotations

from decimal import Decimal

from staffing_payroll.enums import DeductionKind, FieldCategory, FieldPurpose
from staffing_payroll.templates.fields import (
    NumberField,
    SalaryTemplateConfig,
    SelectField,
    TextField,
)

BASIC_DUTY_OPTIONS = tuple(str(days) for days in range(26, 32))

# Keys the payslip service fills from employee and wage data.
BASIC_DUTY_KEY = "basicDuty"
WAGES_PER_DAY_KEY = "wagesPerDay"
MONTHLY_PAY_KEY = "monthlyPay"


def default_salary_template(basic_duty: int = 30) -> SalaryTemplateConfig:
    """Build the default template: identity columns, pay totals, PF/ESIC/LWF, bonus, advance."""
    mandatory = FieldCategory.MANDATORY_NO_RULES
    return SalaryTemplateConfig(
        mandatory_fields=(
            NumberField("serialNumber", "S.No", mandatory, FieldPurpose.INFORMATION),
            TextField("companyName", "Company Name", mandatory, FieldPurpose.INFORMATION),
            TextField("employeeName", "Employee Name", mandatory, FieldPurpose.INFORMATION),
            TextField("designation", "Designation", mandatory, FieldPurpose.INFORMATION),
            NumberField(MONTHLY_PAY_KEY, "Monthly Pay", mandatory, FieldPurpose.CALCULATION),
            SelectField(
                BASIC_DUTY_KEY,
                "Basic Duty",
                FieldCategory.MANDATORY_WITH_RULES,
                FieldPurpose.CALCULATION,
                options=BASIC_DUTY_OPTIONS,
                default_value=str(basic_duty),
            ),
            NumberField(
                "basicPay",
                "Basic Pay",
                FieldCategory.MANDATORY_WITH_RULES,
                FieldPurpose.CALCULATION,
                is_basic_pay=True,
                min_value=Decimal("0"),
            ),
            NumberField("grossSalary", "Gross Salary", mandatory, FieldPurpose.CALCULATION),
            NumberField("totalDeduction", "Total Deduction", mandatory, FieldPurpose.CALCULATION),
            NumberField("netSalary", "Net Salary", mandatory, FieldPurpose.CALCULATION),
        ),
        optional_fields=(
            NumberField(
                "pf",
                "PF (12%)",
                FieldCategory.OPTIONAL,
                FieldPurpose.DEDUCTION,
                deduction_kind=DeductionKind.PF,
                min_value=Decimal("0"),
            ),
            NumberField(
                "esic",
                "ESIC (0.75%)",
                FieldCategory.OPTIONAL,
                FieldPurpose.DEDUCTION,
                deduction_kind=DeductionKind.ESIC,
                min_value=Decimal("0"),
            ),
            TextField("fatherName", "Father Name", FieldCategory.OPTIONAL, FieldPurpose.INFORMATION),
            TextField("uanNumber", "UAN No.", FieldCategory.OPTIONAL, FieldPurpose.INFORMATION),
            NumberField(
                WAGES_PER_DAY_KEY, "Wages Per Day", FieldCategory.OPTIONAL, FieldPurpose.CALCULATION
            ),
            NumberField(
                "lwf",
                "LWF",
                FieldCategory.OPTIONAL,
                FieldPurpose.DEDUCTION,
                deduction_kind=DeductionKind.OTHER,
                default_value=Decimal("10"),
                min_value=Decimal("0"),
            ),
        ),
        custom_fields=(
            NumberField(
                "bonus",
                "Bonus",
                FieldCategory.CUSTOM,
                FieldPurpose.ALLOWANCE,
                requires_admin_input=True,
                description=(
                    "Monthly bonus based on performance, attendance or company policy. "
                    "Entered per employee every month."
                ),
                default_value=Decimal("0"),
                min_value=Decimal("0"),
            ),
            NumberField(
                "advanceTaken",
                "Advance Taken",
                FieldCategory.CUSTOM,
                FieldPurpose.DEDUCTION,
                deduction_kind=DeductionKind.ADVANCE,
                requires_admin_input=True,
                description="Salary advance to recover from this month's pay.",
                default_value=Decimal("0"),
                min_value=Decimal("0"),
            ),
        ),
    )
