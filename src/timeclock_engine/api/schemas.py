"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Time clock schemas
# ============================================================================


class ClockInRequest(BaseModel):
    """Schema for clocking in."""

    job_id: UUID | None = None


class ClockOutRequest(BaseModel):
    """Schema for clocking out."""

    notes: str | None = Field(default=None, max_length=2000)


class ForgotClockOutRequest(BaseModel):
    """Schema for correcting a forgotten clock-out."""

    corrected_end: datetime
    note: str | None = Field(default=None, max_length=2000)


class TimeEntryResponse(BaseModel):
    """Schema for time entry response."""

    model_config = ConfigDict(from_attributes=True)

    time_entry_id: UUID
    user_id: UUID
    organization_id: UUID
    job_id: UUID | None = None
    clock_in: datetime
    clock_out: datetime | None = None
    break_start: datetime | None = None
    break_end: datetime | None = None
    state: str
    work_accum_seconds: int
    last_state_change_at: datetime | None = None
    cap_minutes: int
    flag_status: str
    over_cap_at: datetime | None = None
    wrong_recorded_net_seconds: int | None = None
    correction_note: str | None = None
    correction_applied_at: datetime | None = None
    wrong_time_exceeded_cap: bool = False
    duration_hours: Decimal | None = None
    notes: str | None = None


class EntryStatusResponse(BaseModel):
    """Live net time and cap position of an open entry."""

    model_config = ConfigDict(from_attributes=True)

    as_of: datetime
    net_work_seconds: int
    effective_net_work_seconds: int
    cap_seconds: int
    approaching_cap: bool
    over_cap: bool
    projected_over_cap_at: datetime | None = None


class TimeClockStatusResponse(BaseModel):
    """Schema for the current time clock status."""

    clocked_in: bool
    entry: TimeEntryResponse | None = None
    status: EntryStatusResponse | None = None


class TimeEntryListResponse(BaseModel):
    """Schema for listing time entries."""

    items: list[TimeEntryResponse]
    total: int


# ============================================================================
# Payroll schemas
# ============================================================================


class PayPeriodResponse(BaseModel):
    """Schema for a pay period."""

    model_config = ConfigDict(from_attributes=True)

    start: date
    end: date
    label: str


class EarningsResponse(BaseModel):
    """Schema for an earnings breakdown."""

    model_config = ConfigDict(from_attributes=True)

    regular_hours: Decimal
    overtime_hours: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal
    total_pay: Decimal
    total_hours: Decimal


class UserEarningsResponse(BaseModel):
    """Schema for one user's earnings in a pay period."""

    user_id: UUID
    period: PayPeriodResponse
    earnings: EarningsResponse
    total_pay_display: str
    total_hours_display: str


class EmployeePayrollResponse(BaseModel):
    """Schema for one employee's payroll summary row."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    entries_count: int
    total_hours: Decimal
    earnings: EarningsResponse
    job_ids: list[UUID] = []


class PayrollSummaryResponse(BaseModel):
    """Schema for the organization payroll summary."""

    organization_id: UUID
    period: PayPeriodResponse
    employees: list[EmployeePayrollResponse]
    total_hours: Decimal
    total_pay: Decimal


# ============================================================================
# Cron schemas
# ============================================================================


class SoftCapSweepResponse(BaseModel):
    """Schema for a soft cap evaluation run."""

    model_config = ConfigDict(from_attributes=True)

    processed: int
    flagged: int
    approaching: int
    evaluated_at: datetime


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
