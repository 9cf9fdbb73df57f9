"""Business services for the time clock engine."""

from timeclock_engine.services.payroll_service import (
    EmployeePayrollSummary,
    PayrollService,
    PayrollSummary,
)
from timeclock_engine.services.results import (
    ActionError,
    ActionResult,
    Actor,
    EntryStatus,
    ErrorCode,
    ErrorKind,
    SweepResult,
)
from timeclock_engine.services.state_machine import (
    CorrectionValidationError,
    InvalidTransitionError,
    PreconditionViolation,
    TimeClockError,
    TimeEntryAction,
    TimeEntryStateMachine,
)
from timeclock_engine.services.time_clock_service import TimeClockService
from timeclock_engine.services.time_entry_store import TimeEntryStore

__all__ = [
    "ActionError",
    "ActionResult",
    "Actor",
    "CorrectionValidationError",
    "EmployeePayrollSummary",
    "EntryStatus",
    "ErrorCode",
    "ErrorKind",
    "InvalidTransitionError",
    "PayrollService",
    "PayrollSummary",
    "PreconditionViolation",
    "SweepResult",
    "TimeClockError",
    "TimeClockService",
    "TimeEntryAction",
    "TimeEntryStateMachine",
    "TimeEntryStore",
]
