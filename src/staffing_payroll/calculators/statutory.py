"""Statutory PF and ESIC contributions."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from staffing_payroll.calculators.line_builder import PayslipLineBuilder
from staffing_payroll.calculators.types import Earnings


@dataclass(frozen=True)
class StatutoryContributions:
    pf: Decimal
    esic: Decimal


class StatutoryCalculator:
    """Employee PF/ESIC shares.

    - PF: ``pf_rate`` of basic pay
    - ESIC: ``esic_rate`` of gross earning
    - Both are zero when the employee is not enrolled or when gross earning
      is above the wage ceiling
    """

    def __init__(
        self,
        pf_rate: Decimal = Decimal("0.12"),
        esic_rate: Decimal = Decimal("0.0075"),
        wage_ceiling: Decimal = Decimal("15000"),
    ):
        self.pf_rate = pf_rate
        self.esic_rate = esic_rate
        self.wage_ceiling = wage_ceiling

    def contributions(
        self,
        earnings: Earnings,
        pf_enabled: bool,
        esic_enabled: bool,
    ) -> StatutoryContributions:
        zero = Decimal("0.00")
        if earnings.gross_earning > self.wage_ceiling:
            return StatutoryContributions(pf=zero, esic=zero)
        pf = PayslipLineBuilder.round_to_paise(earnings.basic * self.pf_rate) if pf_enabled else zero
        esic = (
            PayslipLineBuilder.round_to_paise(earnings.gross_earning * self.esic_rate)
            if esic_enabled
            else zero
        )
        return StatutoryContributions(pf=pf, esic=esic)
