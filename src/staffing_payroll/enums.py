"""Enumerations shared by models, calculators and services."""

from __future__ import annotations

from enum import Enum


class SalaryCategory(str, Enum):
    """Pay basis of an employee."""

    CENTRAL = "CENTRAL"
    STATE = "STATE"
    SPECIALIZED = "SPECIALIZED"

    @property
    def is_rate_based(self) -> bool:
        """CENTRAL and STATE are paid per day from a rate schedule."""
        return self in (SalaryCategory.CENTRAL, SalaryCategory.STATE)


class SalarySubCategory(str, Enum):
    """Skill tier for rate-based categories."""

    SKILLED = "SKILLED"
    UNSKILLED = "UNSKILLED"
    HIGHSKILLED = "HIGHSKILLED"
    SEMISKILLED = "SEMISKILLED"


class SalaryType(str, Enum):
    """How the salary snapshot on an employment record is expressed."""

    PER_DAY = "PER_DAY"
    PER_MONTH = "PER_MONTH"


class EmploymentStatus(str, Enum):
    """Employment history record status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class EmployeeStatus(str, Enum):
    """Employee status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class CompanyStatus(str, Enum):
    """Company status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class FieldType(str, Enum):
    """Data type of a salary template field."""

    TEXT = "TEXT"
    NUMBER = "NUMBER"
    SELECT = "SELECT"


class FieldCategory(str, Enum):
    """Which collection of the template a field belongs to."""

    MANDATORY_WITH_RULES = "MANDATORY_WITH_RULES"
    MANDATORY_NO_RULES = "MANDATORY_NO_RULES"
    OPTIONAL = "OPTIONAL"
    CUSTOM = "CUSTOM"

    @property
    def is_mandatory(self) -> bool:
        return self in (FieldCategory.MANDATORY_WITH_RULES, FieldCategory.MANDATORY_NO_RULES)


class FieldPurpose(str, Enum):
    """What a template field feeds into."""

    INFORMATION = "INFORMATION"
    CALCULATION = "CALCULATION"
    ALLOWANCE = "ALLOWANCE"
    DEDUCTION = "DEDUCTION"


class EarningKind(str, Enum):
    """Payslip earnings bucket for an ALLOWANCE field."""

    ALLOWANCE = "ALLOWANCE"
    OTHER_ALLOWANCE = "OTHER_ALLOWANCE"
    OTHER = "OTHER"


class DeductionKind(str, Enum):
    """Payslip deductions bucket for a DEDUCTION field."""

    PF = "PF"
    ESIC = "ESIC"
    ADVANCE = "ADVANCE"
    OTHER = "OTHER"
