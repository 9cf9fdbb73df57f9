"""Time entry model: one attendance record per clock-in."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from timeclock_engine.calculators.soft_cap import DEFAULT_CAP_MINUTES
from timeclock_engine.calculators.types import FlagStatus, TimeEntryState
from timeclock_engine.models.base import Base, TimestampMixin


class TimeEntry(Base, TimestampMixin):
    """Clock-in record with soft cap accounting fields.

    ``work_accum_seconds`` only holds settled segments; see
    ``timeclock_engine.calculators.soft_cap`` for the "as of now" value.
    """

    __tablename__ = "time_entry"

    time_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(nullable=False)
    organization_id: Mapped[UUID] = mapped_column(nullable=False)
    job_id: Mapped[UUID | None] = mapped_column(nullable=True)

    clock_in: Mapped[datetime] = mapped_column(nullable=False)
    clock_out: Mapped[datetime | None] = mapped_column(nullable=True)

    # Legacy single-break markers, display only
    break_start: Mapped[datetime | None] = mapped_column(nullable=True)
    break_end: Mapped[datetime | None] = mapped_column(nullable=True)

    state: Mapped[str] = mapped_column(
        String, nullable=False, default=TimeEntryState.WORKING.value
    )
    work_accum_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_state_change_at: Mapped[datetime | None] = mapped_column(nullable=True)
    cap_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_CAP_MINUTES
    )
    flag_status: Mapped[str] = mapped_column(
        String, nullable=False, default=FlagStatus.NONE.value
    )
    over_cap_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Forgot-clock-out audit; the snapshot is written once and never recomputed
    wrong_recorded_net_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    correction_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    correction_applied_at: Mapped[datetime | None] = mapped_column(nullable=True)

    duration_hours: Mapped[Decimal | None] = mapped_column(Numeric(12, 6), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "state IN ('WORKING', 'ON_BREAK', 'CLOCKED_OUT')",
            name="time_entry_state_check",
        ),
        CheckConstraint(
            "flag_status IN ('NONE', 'OVER_CAP', 'EDIT_REQUEST_PENDING', 'RESOLVED', 'FORGOT_CLOCK_OUT')",
            name="time_entry_flag_status_check",
        ),
        CheckConstraint("work_accum_seconds >= 0", name="time_entry_accum_check"),
        CheckConstraint("cap_minutes > 0", name="time_entry_cap_check"),
        CheckConstraint(
            "clock_out IS NULL OR clock_out >= clock_in",
            name="time_entry_dates_check",
        ),
        # At most one open entry per user
        Index(
            "time_entry_one_open_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("clock_out IS NULL"),
            sqlite_where=text("clock_out IS NULL"),
        ),
        Index("time_entry_org_clock_in_idx", "organization_id", "clock_in"),
    )

    __mapper_args__ = {"eager_defaults": True}

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    @property
    def wrong_time_exceeded_cap(self) -> bool:
        """Whether the frozen forgot-clock-out snapshot was past the cap."""
        if self.wrong_recorded_net_seconds is None:
            return False
        return self.wrong_recorded_net_seconds >= self.cap_minutes * 60
