"""Staffing payroll services."""

from staffing_payroll.services.company_service import CompanyService
from staffing_payroll.services.employee_service import EmployeeService
from staffing_payroll.services.employment_lifecycle import (
    EmploymentLifecycleManager,
    EmploymentRecord,
)
from staffing_payroll.services.employment_service import EmploymentService
from staffing_payroll.services.payslip_service import (
    CompanyPayrollResult,
    PayslipFailure,
    PayslipResult,
    PayslipService,
)
from staffing_payroll.services.rate_schedule_service import RateScheduleService, SchedulePage
from staffing_payroll.services.state_machine import EmploymentStateMachine

__all__ = [
    "CompanyPayrollResult",
    "CompanyService",
    "EmployeeService",
    "EmploymentLifecycleManager",
    "EmploymentRecord",
    "EmploymentService",
    "EmploymentStateMachine",
    "PayslipFailure",
    "PayslipResult",
    "PayslipService",
    "RateScheduleService",
    "SchedulePage",
]
