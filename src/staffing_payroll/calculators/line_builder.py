"""Payslip line builder with deterministic hashing."""

from __future__ import annotations

import hashlib
import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from staffing_payroll.calculators.types import LineType, Payslip, PayslipLine


class PayslipLineBuilder:
    """Builds payslip lines and totals.

    Conventions:
    - All line amounts are non-negative; DEDUCTION lines are subtracted
      when netting, never stored negative.
    - INR to 2 decimals, half-up, applied per line before summing so that
      totals always equal the sum of printed lines.
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def round_to_paise(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places."""
        return amount.quantize(PayslipLineBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def create_basic_line(key: str, label: str, amount: Decimal) -> PayslipLine:
        return PayslipLine(
            key=key,
            label=label,
            line_type=LineType.BASIC,
            bucket="basic",
            amount=PayslipLineBuilder.round_to_paise(amount),
        )

    @staticmethod
    def create_earning_line(key: str, label: str, bucket: str, amount: Decimal) -> PayslipLine:
        return PayslipLine(
            key=key,
            label=label,
            line_type=LineType.EARNING,
            bucket=bucket,
            amount=PayslipLineBuilder.round_to_paise(amount),
        )

    @staticmethod
    def create_deduction_line(key: str, label: str, bucket: str, amount: Decimal) -> PayslipLine:
        return PayslipLine(
            key=key,
            label=label,
            line_type=LineType.DEDUCTION,
            bucket=bucket,
            amount=PayslipLineBuilder.round_to_paise(amount),
        )

    @staticmethod
    def sum_by_bucket(lines: Iterable[PayslipLine], line_type: LineType) -> dict[str, Decimal]:
        """Sum line amounts of one type by bucket."""
        totals: dict[str, Decimal] = {}
        for line in lines:
            if line.line_type == line_type:
                totals[line.bucket] = totals.get(line.bucket, Decimal("0.00")) + line.amount
        return totals

    @staticmethod
    def validate_line_amounts(lines: Iterable[PayslipLine]) -> list[str]:
        """Return error messages for negative line amounts (empty if valid)."""
        errors: list[str] = []
        for line in lines:
            if line.amount < 0:
                errors.append(
                    f"Field '{line.key}' ({line.line_type.value}) has negative amount {line.amount}"
                )
        return errors

    @staticmethod
    def compute_fingerprint(payslip: Payslip) -> str:
        """Deterministic hash of a payslip; identical inputs give identical hashes."""
        canonical = payslip.to_canonical_dict()
        json_str = json.dumps(canonical, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]
