"""Type definitions for time accounting and payroll calculation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from enum import Enum
from zoneinfo import ZoneInfo


class TimeEntryState(str, Enum):
    """Phase of a time entry."""

    WORKING = "WORKING"
    ON_BREAK = "ON_BREAK"
    CLOCKED_OUT = "CLOCKED_OUT"


class FlagStatus(str, Enum):
    """Review flag attached to a time entry."""

    NONE = "NONE"
    OVER_CAP = "OVER_CAP"
    EDIT_REQUEST_PENDING = "EDIT_REQUEST_PENDING"
    RESOLVED = "RESOLVED"
    FORGOT_CLOCK_OUT = "FORGOT_CLOCK_OUT"


class PayPeriodType(str, Enum):
    """Pay period cadence."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"


class OvertimeType(str, Enum):
    """Overtime rule."""

    WEEKLY40 = "weekly40"
    DAILY8 = "daily8"


@dataclass(frozen=True)
class PayrollSettings:
    """Organization payroll configuration (read-only input)."""

    pay_period_type: str = PayPeriodType.WEEKLY.value
    pay_day: str | None = "friday"
    pay_period_start_date: date | None = None  # bi-weekly anchor
    overtime_enabled: bool = False
    overtime_type: str | None = OvertimeType.WEEKLY40.value
    overtime_rate: Decimal | None = Decimal("1.5")
    timezone: str = "UTC"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class PayPeriod:
    """A pay period as inclusive calendar dates in the organization's time zone."""

    start: date
    end: date
    label: str

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def bounds(self, tz: ZoneInfo | None = None) -> tuple[datetime, datetime]:
        """Return ``[start, end)`` as UTC instants for querying entries."""
        zone = tz or timezone.utc
        starts_at = datetime.combine(self.start, time.min, tzinfo=zone)
        ends_at = datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=zone)
        return starts_at.astimezone(timezone.utc), ends_at.astimezone(timezone.utc)


@dataclass(frozen=True)
class EarningsBreakdown:
    """Regular/overtime split of hours and pay, rounded to cents."""

    regular_hours: Decimal
    overtime_hours: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal
    total_pay: Decimal

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours


@dataclass(frozen=True)
class SettledHours:
    """Hours attributed to an entry, keyed by its clock-in instant."""

    clock_in: datetime
    duration_hours: Decimal | float | None
