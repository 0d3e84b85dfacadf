"""Salary template fields, defaults and editing engine."""

from staffing_payroll.templates.defaults import default_salary_template
from staffing_payroll.templates.engine import SalaryTemplateEngine
from staffing_payroll.templates.fields import (
    NumberField,
    SalaryTemplateConfig,
    SalaryTemplateField,
    SelectField,
    TextField,
)

__all__ = [
    "NumberField",
    "SalaryTemplateConfig",
    "SalaryTemplateEngine",
    "SalaryTemplateField",
    "SelectField",
    "TextField",
    "default_salary_template",
]
