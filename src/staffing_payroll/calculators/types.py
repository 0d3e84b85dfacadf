"""Type definitions for the payslip calculation pipeline."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from staffing_payroll.enums import SalaryCategory, SalarySubCategory
from staffing_payroll.errors import ValidationError


class LineType(str, Enum):
    """Payslip line item types."""

    BASIC = "BASIC"
    EARNING = "EARNING"
    DEDUCTION = "DEDUCTION"


@dataclass(frozen=True)
class EmployeeWage:
    """Resolved pay basis for one employee in one period.

    CENTRAL/STATE employees carry the per-day rate from the rate schedule;
    SPECIALIZED employees carry a monthly salary.
    """

    category: SalaryCategory
    sub_category: SalarySubCategory | None = None
    rate_per_day: Decimal | None = None
    monthly_salary: Decimal | None = None

    def __post_init__(self) -> None:
        if self.category.is_rate_based:
            if self.rate_per_day is None or self.rate_per_day <= 0:
                raise ValidationError(
                    f"{self.category.value} wage requires a positive rate per day",
                    field="rate_per_day",
                )
        elif self.monthly_salary is None or self.monthly_salary < 0:
            raise ValidationError(
                "SPECIALIZED wage requires a monthly salary", field="monthly_salary"
            )

    def wages_per_day(self, basic_duty: int) -> Decimal:
        """Per-day wage; monthly salary is spread over the basic duty days."""
        if self.category.is_rate_based:
            return self.rate_per_day  # type: ignore[return-value]
        if basic_duty <= 0:
            raise ValidationError("Basic duty must be a positive day count", field="basicDuty")
        return self.monthly_salary / Decimal(basic_duty)  # type: ignore[operator]

    def monthly_pay(self, basic_duty: int) -> Decimal:
        """Full-month pay at the basic duty day count."""
        if self.category.is_rate_based:
            return self.rate_per_day * Decimal(basic_duty)  # type: ignore[operator]
        return self.monthly_salary  # type: ignore[return-value]


@dataclass(frozen=True)
class PayPeriod:
    """One monthly pay period and the per-employee inputs for it.

    ``days_worked`` comes from the attendance service and is optional.
    ``inputs`` holds per-employee values keyed by template field key; they
    override the template defaults.
    """

    year: int
    month: int
    days_worked: Decimal | None = None
    inputs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Invalid month {self.month}", field="month")
        if self.days_worked is not None:
            days = Decimal(str(self.days_worked))
            if days < 0:
                raise ValidationError("Days worked cannot be negative", field="days_worked")
            object.__setattr__(self, "days_worked", days)
        object.__setattr__(self, "inputs", dict(self.inputs))

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, self.days_in_month)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def with_inputs(self, extra: Mapping[str, Any]) -> PayPeriod:
        """New period whose inputs add ``extra`` without overriding existing keys."""
        merged = dict(extra)
        merged.update(self.inputs)
        return PayPeriod(
            year=self.year,
            month=self.month,
            days_worked=self.days_worked,
            inputs=merged,
        )


@dataclass(frozen=True)
class PayslipLine:
    """One template field's contribution to the payslip."""

    key: str
    label: str
    line_type: LineType
    bucket: str
    amount: Decimal

    def to_canonical_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "line_type": self.line_type.value,
            "bucket": self.bucket,
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class Earnings:
    basic: Decimal
    allowance: Decimal = Decimal("0.00")
    other_allowance: Decimal = Decimal("0.00")
    other: Decimal = Decimal("0.00")

    @property
    def gross_earning(self) -> Decimal:
        return self.basic + self.allowance + self.other_allowance + self.other


@dataclass(frozen=True)
class Deductions:
    epf_contribution: Decimal = Decimal("0.00")
    esic_contribution: Decimal = Decimal("0.00")
    advance: Decimal = Decimal("0.00")
    other: Decimal = Decimal("0.00")

    @property
    def gross_deduction(self) -> Decimal:
        return self.epf_contribution + self.esic_contribution + self.advance + self.other


@dataclass(frozen=True)
class Payslip:
    """Computed pay for one employee and period. Never mutated."""

    period: str
    earnings: Earnings
    deductions: Deductions
    lines: tuple[PayslipLine, ...] = ()
    information: tuple[tuple[str, str], ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def gross_earning(self) -> Decimal:
        return self.earnings.gross_earning

    @property
    def gross_deduction(self) -> Decimal:
        return self.deductions.gross_deduction

    @property
    def net_pay(self) -> Decimal:
        """May be negative; surfaced so misconfigured deductions are visible."""
        return self.gross_earning - self.gross_deduction

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "period": self.period,
            "earnings": {
                "basic": str(self.earnings.basic),
                "allowance": str(self.earnings.allowance),
                "other_allowance": str(self.earnings.other_allowance),
                "other": str(self.earnings.other),
                "gross_earning": str(self.gross_earning),
            },
            "deductions": {
                "epf_contribution": str(self.deductions.epf_contribution),
                "esic_contribution": str(self.deductions.esic_contribution),
                "advance": str(self.deductions.advance),
                "other": str(self.deductions.other),
                "gross_deduction": str(self.gross_deduction),
            },
            "net_pay": str(self.net_pay),
            "lines": [line.to_canonical_dict() for line in self.lines],
            "information": [list(item) for item in self.information],
            "warnings": list(self.warnings),
        }
