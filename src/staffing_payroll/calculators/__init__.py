"""Payslip calculation engine."""

from staffing_payroll.calculators.line_builder import PayslipLineBuilder
from staffing_payroll.calculators.payslip import PayslipComputer
from staffing_payroll.calculators.rate_resolver import RateSchedulePlanner, RateScheduleResolver
from staffing_payroll.calculators.statutory import StatutoryCalculator
from staffing_payroll.calculators.types import EmployeeWage, PayPeriod, Payslip

__all__ = [
    "EmployeeWage",
    "PayPeriod",
    "Payslip",
    "PayslipComputer",
    "PayslipLineBuilder",
    "RateSchedulePlanner",
    "RateScheduleResolver",
    "StatutoryCalculator",
]
