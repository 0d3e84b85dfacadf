"""Payslip API endpoints."""

from fastapi import APIRouter

from staffing_payroll.api.dependencies import DbSession
from staffing_payroll.api.schemas import (
    CompanyPayrollRequest,
    CompanyPayrollResponse,
    ErrorResponse,
    PayslipFailureResponse,
    PayslipLineResponse,
    PayslipRequest,
    PayslipResponse,
)
from staffing_payroll.services.payslip_service import PayslipResult, PayslipService

router = APIRouter(prefix="/payslips", tags=["payslips"])


def _payslip(result: PayslipResult) -> PayslipResponse:
    payslip = result.payslip
    return PayslipResponse(
        employee_id=result.employee_id,
        company_id=result.company_id,
        employment_id=result.employment_id,
        period=payslip.period,
        basic=payslip.earnings.basic,
        allowance=payslip.earnings.allowance,
        other_allowance=payslip.earnings.other_allowance,
        other_earning=payslip.earnings.other,
        gross_earning=payslip.gross_earning,
        epf_contribution=payslip.deductions.epf_contribution,
        esic_contribution=payslip.deductions.esic_contribution,
        advance=payslip.deductions.advance,
        other_deduction=payslip.deductions.other,
        gross_deduction=payslip.gross_deduction,
        net_pay=payslip.net_pay,
        lines=[
            PayslipLineResponse(
                key=line.key,
                label=line.label,
                line_type=line.line_type.value,
                bucket=line.bucket,
                amount=line.amount,
            )
            for line in payslip.lines
        ],
        information=dict(payslip.information),
        warnings=list(payslip.warnings),
        fingerprint=result.fingerprint,
    )


@router.post(
    "/compute",
    response_model=PayslipResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def compute_payslip(db: DbSession, payload: PayslipRequest) -> PayslipResponse:
    """Compute a payslip. Deterministic and side-effect free."""
    result = await PayslipService(db).compute(
        employee_id=payload.employee_id,
        year=payload.year,
        month=payload.month,
        days_worked=payload.days_worked,
        inputs=payload.inputs,
    )
    return _payslip(result)


@router.post(
    "/compute-company",
    response_model=CompanyPayrollResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def compute_company_payroll(
    db: DbSession, payload: CompanyPayrollRequest
) -> CompanyPayrollResponse:
    """Compute payslips for every active employee of a company.

    Employees that cannot be computed are returned under ``failures``.
    """
    result = await PayslipService(db).compute_company(
        company_id=payload.company_id,
        year=payload.year,
        month=payload.month,
        days_worked_by_employee=payload.days_worked,
        inputs_by_employee=payload.inputs,
    )
    return CompanyPayrollResponse(
        company_id=result.company_id,
        period=f"{result.year:04d}-{result.month:02d}",
        payslips=[_payslip(r) for r in result.payslips],
        failures=[
            PayslipFailureResponse(
                employee_id=f.employee_id,
                code=f.error.code,
                detail=f.error.reason,
                field=f.error.field,
            )
            for f in result.failures
        ],
        total_gross=result.total_gross,
        total_deduction=result.total_deduction,
        total_net=result.total_net,
    )
