"""Time entry state machine with transition and precondition validation."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from timeclock_engine.calculators.types import TimeEntryState
from timeclock_engine.services.results import ActionError, ErrorCode, ErrorKind

if TYPE_CHECKING:
    from timeclock_engine.models import TimeEntry


class TimeEntryAction(str, Enum):
    """Requests that drive a time entry through its states."""

    CLOCK_IN = "clock_in"
    START_BREAK = "start_break"
    END_BREAK = "end_break"
    CLOCK_OUT = "clock_out"
    CORRECT_FORGOT_CLOCK_OUT = "correct_forgot_clock_out"


class TimeClockError(Exception):
    """Base for rejected time clock requests."""

    kind: ErrorKind = ErrorKind.PRECONDITION_VIOLATION

    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)

    def to_error(self) -> ActionError:
        return ActionError(kind=self.kind, code=self.code, message=self.message)


class PreconditionViolation(TimeClockError):
    """Raised when a request is invalid for the entry's current state."""

    kind = ErrorKind.PRECONDITION_VIOLATION


class CorrectionValidationError(TimeClockError):
    """Raised when a forgot-clock-out correction has an unusable end time."""

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str):
        super().__init__(ErrorCode.INVALID_CORRECTION, message)


class InvalidTransitionError(PreconditionViolation):
    """Raised when a state change is not in the transition graph."""

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            ErrorCode.INVALID_TRANSITION,
            f"Invalid transition from '{from_state}' to '{to_state}'",
        )


class TimeEntryStateMachine:
    """State machine for time entry phases.

    Allowed transitions:
    - WORKING → ON_BREAK
    - ON_BREAK → WORKING
    - WORKING → CLOCKED_OUT
    - ON_BREAK → CLOCKED_OUT (trailing break is not paid)
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        TimeEntryState.WORKING: [TimeEntryState.ON_BREAK, TimeEntryState.CLOCKED_OUT],
        TimeEntryState.ON_BREAK: [TimeEntryState.WORKING, TimeEntryState.CLOCKED_OUT],
        TimeEntryState.CLOCKED_OUT: [],  # Terminal state
    }

    ACTION_TARGETS: dict[TimeEntryAction, str] = {
        TimeEntryAction.START_BREAK: TimeEntryState.ON_BREAK,
        TimeEntryAction.END_BREAK: TimeEntryState.WORKING,
        TimeEntryAction.CLOCK_OUT: TimeEntryState.CLOCKED_OUT,
        TimeEntryAction.CORRECT_FORGOT_CLOCK_OUT: TimeEntryState.CLOCKED_OUT,
    }

    @classmethod
    def can_transition(cls, from_state: str, to_state: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_state, [])
        return to_state in allowed

    @classmethod
    def validate_transition(cls, from_state: str, to_state: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_state, to_state):
            raise InvalidTransitionError(from_state, to_state)

    @classmethod
    def get_next_states(cls, current_state: str) -> list[str]:
        """Get list of valid next states from current state."""
        return cls.VALID_TRANSITIONS.get(current_state, [])

    @classmethod
    def is_terminal(cls, state: str) -> bool:
        return not cls.VALID_TRANSITIONS.get(state, [])

    @classmethod
    def validate_action(cls, open_entry: TimeEntry | None, action: str) -> None:
        """Check that ``action`` may run against the user's open entry.

        Raises PreconditionViolation with the user-facing reason otherwise.
        """
        action = TimeEntryAction(action)
        if action == TimeEntryAction.CLOCK_IN:
            if open_entry is not None:
                raise PreconditionViolation(ErrorCode.ALREADY_CLOCKED_IN, "Already clocked in")
            return

        if open_entry is None or cls.is_terminal(open_entry.state):
            raise PreconditionViolation(ErrorCode.NOT_CLOCKED_IN, "Not clocked in")

        if action == TimeEntryAction.START_BREAK and open_entry.state == TimeEntryState.ON_BREAK:
            raise PreconditionViolation(ErrorCode.ALREADY_ON_BREAK, "Already on break")

        if action == TimeEntryAction.END_BREAK and open_entry.state != TimeEntryState.ON_BREAK:
            raise PreconditionViolation(ErrorCode.NOT_ON_BREAK, "Not on break")

        cls.validate_transition(open_entry.state, cls.ACTION_TARGETS[action])

    @classmethod
    def validate_correction(
        cls, entry: TimeEntry, corrected_end: datetime, now: datetime
    ) -> None:
        """Corrected end must be aware, after clock-in and before now."""
        if corrected_end.tzinfo is None:
            raise CorrectionValidationError("Corrected end time must include a time zone")
        if corrected_end <= entry.clock_in:
            raise CorrectionValidationError("Corrected end time must be after clock in")
        if corrected_end >= now:
            raise CorrectionValidationError("Corrected end time must be in the past")
