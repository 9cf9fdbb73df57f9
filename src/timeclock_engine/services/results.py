"""Explicit success/failure results returned by service entry points."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from timeclock_engine.models import TimeEntry


class ErrorKind(str, Enum):
    """Category of a rejected request."""

    PRECONDITION_VIOLATION = "precondition_violation"
    VALIDATION_ERROR = "validation_error"
    NOT_AUTHENTICATED = "not_authenticated"


class ErrorCode(str, Enum):
    """Stable machine-readable reason for a rejected request."""

    NOT_AUTHENTICATED = "not_authenticated"
    NO_ORGANIZATION = "no_organization"
    ALREADY_CLOCKED_IN = "already_clocked_in"
    NOT_CLOCKED_IN = "not_clocked_in"
    ALREADY_ON_BREAK = "already_on_break"
    NOT_ON_BREAK = "not_on_break"
    INVALID_TRANSITION = "invalid_transition"
    INVALID_CORRECTION = "invalid_correction"


@dataclass(frozen=True)
class ActionError:
    """Why a request was rejected."""

    kind: ErrorKind
    code: ErrorCode
    message: str


@dataclass(frozen=True)
class Actor:
    """Identity resolved by the authentication layer."""

    user_id: UUID | None
    organization_id: UUID | None = None


@dataclass(frozen=True)
class EntryStatus:
    """Live projection of an open entry at a given instant."""

    as_of: datetime
    net_work_seconds: int
    effective_net_work_seconds: int
    cap_seconds: int
    approaching_cap: bool
    over_cap: bool
    projected_over_cap_at: datetime | None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a time clock request.

    Exactly one of ``error`` or the payload fields is meaningful.
    """

    entry: TimeEntry | None = None
    entries: tuple[TimeEntry, ...] = ()
    status: EntryStatus | None = None
    error: ActionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: ActionError) -> ActionResult:
        return cls(error=error)


@dataclass(frozen=True)
class SweepResult:
    """Counts from one soft cap evaluation pass over open entries."""

    processed: int
    flagged: int
    approaching: int = 0


NOT_AUTHENTICATED = ActionError(
    kind=ErrorKind.NOT_AUTHENTICATED,
    code=ErrorCode.NOT_AUTHENTICATED,
    message="Not authenticated",
)

NO_ORGANIZATION = ActionError(
    kind=ErrorKind.NOT_AUTHENTICATED,
    code=ErrorCode.NO_ORGANIZATION,
    message="User not associated with an organization",
)
