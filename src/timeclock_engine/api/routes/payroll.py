"""Payroll API endpoints."""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Query

from timeclock_engine.api.dependencies import AppClock, AppSettings, DbSession, OrganizationId
from timeclock_engine.api.schemas import (
    EarningsResponse,
    EmployeePayrollResponse,
    ErrorResponse,
    PayPeriodResponse,
    PayrollSummaryResponse,
    UserEarningsResponse,
)
from timeclock_engine.calculators.pay_period import format_currency, format_hours
from timeclock_engine.services.payroll_service import PayrollService

router = APIRouter(prefix="/payroll", tags=["payroll"])

PeriodSelector = Literal["current", "previous"]


@router.get(
    "/earnings",
    response_model=UserEarningsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_earnings(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    organization_id: OrganizationId,
    user_id: UUID,
    period: Annotated[PeriodSelector, Query()] = "current",
) -> UserEarningsResponse:
    """Earnings for one user in the current or previous pay period."""
    service = PayrollService(db, clock, settings)
    payroll_settings = await service.load_payroll_settings(organization_id)
    pay_period = service.resolve_period(payroll_settings, previous=period == "previous")

    earnings = await service.get_earnings_for_period(
        user_id, pay_period, payroll_settings, organization_id=organization_id
    )

    return UserEarningsResponse(
        user_id=user_id,
        period=PayPeriodResponse.model_validate(pay_period),
        earnings=EarningsResponse.model_validate(earnings),
        total_pay_display=format_currency(earnings.total_pay),
        total_hours_display=format_hours(earnings.total_hours),
    )


@router.get(
    "/summary",
    response_model=PayrollSummaryResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_summary(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    organization_id: OrganizationId,
    period: Annotated[PeriodSelector, Query()] = "current",
) -> PayrollSummaryResponse:
    """Per-employee hours and pay for the organization."""
    service = PayrollService(db, clock, settings)
    summary = await service.get_payroll_summary(
        organization_id, previous=period == "previous"
    )

    return PayrollSummaryResponse(
        organization_id=summary.organization_id,
        period=PayPeriodResponse.model_validate(summary.period),
        employees=[EmployeePayrollResponse.model_validate(e) for e in summary.employees],
        total_hours=summary.total_hours,
        total_pay=summary.total_pay,
    )
