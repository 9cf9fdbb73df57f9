"""ORM models."""

from timeclock_engine.models.base import Base, TimestampMixin, UTCDateTime
from timeclock_engine.models.payroll import OrganizationSettings, PayRate
from timeclock_engine.models.time_entry import TimeEntry

__all__ = [
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    "OrganizationSettings",
    "PayRate",
    "TimeEntry",
]
