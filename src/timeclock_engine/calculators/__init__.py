"""Time accounting and payroll calculations."""

from timeclock_engine.calculators import pay_period, soft_cap
from timeclock_engine.calculators.types import (
    EarningsBreakdown,
    FlagStatus,
    OvertimeType,
    PayPeriod,
    PayPeriodType,
    PayrollSettings,
    SettledHours,
    TimeEntryState,
)

__all__ = [
    "pay_period",
    "soft_cap",
    "EarningsBreakdown",
    "FlagStatus",
    "OvertimeType",
    "PayPeriod",
    "PayPeriodType",
    "PayrollSettings",
    "SettledHours",
    "TimeEntryState",
]
