"""API routes."""

from staffing_payroll.api.routes.companies import router as companies_router
from staffing_payroll.api.routes.employees import router as employees_router
from staffing_payroll.api.routes.health import router as health_router
from staffing_payroll.api.routes.payslips import router as payslips_router
from staffing_payroll.api.routes.rate_schedules import router as rate_schedules_router

__all__ = [
    "companies_router",
    "employees_router",
    "health_router",
    "payslips_router",
    "rate_schedules_router",
]
