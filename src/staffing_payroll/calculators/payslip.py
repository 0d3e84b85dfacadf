"""Payslip computation from enabled template fields."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Sequence

from staffing_payroll.calculators.line_builder import PayslipLineBuilder
from staffing_payroll.calculators.types import (
    Deductions,
    Earnings,
    EmployeeWage,
    LineType,
    PayPeriod,
    Payslip,
    PayslipLine,
)
from staffing_payroll.enums import DeductionKind, EarningKind, FieldPurpose
from staffing_payroll.errors import ValidationError
from staffing_payroll.templates.defaults import BASIC_DUTY_KEY
from staffing_payroll.templates.engine import SalaryTemplateEngine
from staffing_payroll.templates.fields import NumberField, SalaryTemplateField

_EARNING_BUCKETS = {
    EarningKind.ALLOWANCE: "allowance",
    EarningKind.OTHER_ALLOWANCE: "other_allowance",
    EarningKind.OTHER: "other",
}

_DEDUCTION_BUCKETS = {
    DeductionKind.PF: "epf_contribution",
    DeductionKind.ESIC: "esic_contribution",
    DeductionKind.ADVANCE: "advance",
    DeductionKind.OTHER: "other",
}


@dataclass(frozen=True)
class _Partition:
    information: list[SalaryTemplateField]
    calculation: list[SalaryTemplateField]
    allowance: list[SalaryTemplateField]
    deduction: list[SalaryTemplateField]


class PayslipComputer:
    """Turns enabled template fields, a wage and a period into a payslip.

    Pipeline (stable order):
    1) Partition fields by purpose
    2) Resolve basic pay from the canonical basic-pay field; for rate-based
       categories cross-check it against rate x days worked when attendance
       is available, otherwise derive it from attendance
    3) Sum ALLOWANCE fields into their earnings buckets
    4) Sum DEDUCTION fields into their deduction buckets
    5) net = gross earning - gross deduction (never clamped)

    ``compute`` is a pure function of its arguments.
    """

    def __init__(self, basic_pay_tolerance: Decimal = Decimal("1.00")):
        self.basic_pay_tolerance = basic_pay_tolerance

    def compute(
        self,
        enabled_fields: Sequence[SalaryTemplateField],
        wage: EmployeeWage,
        period: PayPeriod,
    ) -> Payslip:
        """Compute the payslip for one employee and period."""
        parts = self._partition(enabled_fields)
        lines: list[PayslipLine] = []
        warnings: list[str] = []

        basic_line = self._resolve_basic(parts, wage, period, warnings)
        lines.append(basic_line)

        for f in parts.allowance:
            amount = self._required_amount(f, period)
            bucket = _EARNING_BUCKETS[f.earning_kind or EarningKind.ALLOWANCE]
            lines.append(PayslipLineBuilder.create_earning_line(f.key, f.label, bucket, amount))

        for f in parts.deduction:
            amount = self._required_amount(f, period)
            bucket = _DEDUCTION_BUCKETS[f.deduction_kind or DeductionKind.OTHER]
            lines.append(PayslipLineBuilder.create_deduction_line(f.key, f.label, bucket, amount))

        errors = PayslipLineBuilder.validate_line_amounts(lines)
        if errors:
            raise ValidationError("; ".join(errors), field="amount")

        earned = PayslipLineBuilder.sum_by_bucket(lines, LineType.EARNING)
        deducted = PayslipLineBuilder.sum_by_bucket(lines, LineType.DEDUCTION)
        zero = Decimal("0.00")

        return Payslip(
            period=period.label,
            earnings=Earnings(
                basic=basic_line.amount,
                allowance=earned.get("allowance", zero),
                other_allowance=earned.get("other_allowance", zero),
                other=earned.get("other", zero),
            ),
            deductions=Deductions(
                epf_contribution=deducted.get("epf_contribution", zero),
                esic_contribution=deducted.get("esic_contribution", zero),
                advance=deducted.get("advance", zero),
                other=deducted.get("other", zero),
            ),
            lines=tuple(lines),
            information=self._information(parts.information, period),
            warnings=tuple(warnings),
        )

    def compute_earnings(
        self,
        enabled_fields: Sequence[SalaryTemplateField],
        wage: EmployeeWage,
        period: PayPeriod,
    ) -> Earnings:
        """Earnings half of the pipeline; deduction inputs are not needed."""
        parts = self._partition(enabled_fields)
        basic_line = self._resolve_basic(parts, wage, period, [])
        totals: dict[str, Decimal] = {}
        for f in parts.allowance:
            bucket = _EARNING_BUCKETS[f.earning_kind or EarningKind.ALLOWANCE]
            amount = PayslipLineBuilder.round_to_paise(self._required_amount(f, period))
            totals[bucket] = totals.get(bucket, Decimal("0.00")) + amount
        return Earnings(basic=basic_line.amount, **totals)

    @staticmethod
    def _partition(fields: Sequence[SalaryTemplateField]) -> _Partition:
        by_purpose: dict[FieldPurpose, list[SalaryTemplateField]] = {p: [] for p in FieldPurpose}
        for f in fields:
            if f.enabled:
                by_purpose[f.purpose].append(f)
        return _Partition(
            information=by_purpose[FieldPurpose.INFORMATION],
            calculation=by_purpose[FieldPurpose.CALCULATION],
            allowance=by_purpose[FieldPurpose.ALLOWANCE],
            deduction=by_purpose[FieldPurpose.DEDUCTION],
        )

    def _resolve_basic(
        self,
        parts: _Partition,
        wage: EmployeeWage,
        period: PayPeriod,
        warnings: list[str],
    ) -> PayslipLine:
        basic_field = SalaryTemplateEngine.basic_pay_field(parts.calculation)
        template_value = self._field_value(basic_field, period)

        if template_value is not None:
            basic = Decimal(template_value)
            if wage.category.is_rate_based and period.days_worked is not None:
                derived = self._derived_basic(parts.calculation, wage, period)
                if abs(basic - derived) > self.basic_pay_tolerance:
                    warnings.append(
                        f"Basic pay {basic} differs from rate x days worked "
                        f"({wage.rate_per_day} x {period.days_worked} = {derived})"
                    )
        elif period.days_worked is not None:
            basic = self._derived_basic(parts.calculation, wage, period)
        else:
            raise ValidationError(
                f"No value for basic pay field '{basic_field.key}' and no attendance "
                "to derive it from",
                field=basic_field.key,
            )
        return PayslipLineBuilder.create_basic_line(basic_field.key, basic_field.label, basic)

    @staticmethod
    def _derived_basic(
        calculation: Sequence[SalaryTemplateField],
        wage: EmployeeWage,
        period: PayPeriod,
    ) -> Decimal:
        """Wages per day x days worked."""
        if wage.category.is_rate_based:
            return PayslipLineBuilder.round_to_paise(wage.rate_per_day * period.days_worked)
        duty_field = next((f for f in calculation if f.key == BASIC_DUTY_KEY), None)
        duty = PayslipComputer._field_value(duty_field, period) if duty_field else None
        if duty is None:
            raise ValidationError(
                "Basic duty is required to derive a monthly salaried basic pay",
                field=BASIC_DUTY_KEY,
            )
        try:
            days = int(Decimal(str(duty)))
        except (ArithmeticError, ValueError) as e:
            raise ValidationError(
                f"Basic duty must be a day count, got {duty!r}", field=BASIC_DUTY_KEY
            ) from e
        per_day = wage.wages_per_day(days)
        return PayslipLineBuilder.round_to_paise(per_day * period.days_worked)

    @staticmethod
    def _field_value(f: SalaryTemplateField, period: PayPeriod) -> Any:
        """Per-period input if given, else the template default (may be None)."""
        if f.key in period.inputs and period.inputs[f.key] is not None:
            return f.coerce(period.inputs[f.key])
        return f.default_value

    @classmethod
    def _required_amount(cls, f: SalaryTemplateField, period: PayPeriod) -> Decimal:
        if not isinstance(f, NumberField):
            raise ValidationError(
                f"{f.purpose.value} field '{f.key}' must be NUMBER, not {f.type.value}",
                field=f.key,
            )
        value = cls._field_value(f, period)
        if value is None:
            raise ValidationError(
                f"No value for {f.purpose.value.lower()} field '{f.label}'", field=f.key
            )
        if value < 0:
            raise ValidationError(f"Field '{f.label}' cannot be negative", field=f.key)
        return value

    @classmethod
    def _information(
        cls, fields: Sequence[SalaryTemplateField], period: PayPeriod
    ) -> tuple[tuple[str, str], ...]:
        items: list[tuple[str, str]] = []
        for f in fields:
            value = cls._field_value(f, period)
            if value is not None:
                items.append((f.key, str(value)))
        return tuple(items)
