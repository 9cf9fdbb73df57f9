"""Time clock service - entry points for clock and break requests."""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock_engine.calculators import soft_cap
from timeclock_engine.calculators.types import FlagStatus, TimeEntryState
from timeclock_engine.clock import Clock
from timeclock_engine.config import Settings, get_settings
from timeclock_engine.models import OrganizationSettings, TimeEntry
from timeclock_engine.services.results import (
    NO_ORGANIZATION,
    NOT_AUTHENTICATED,
    ActionResult,
    Actor,
    EntryStatus,
    ErrorCode,
    SweepResult,
)
from timeclock_engine.services.state_machine import (
    PreconditionViolation,
    TimeClockError,
    TimeEntryAction,
    TimeEntryStateMachine,
)
from timeclock_engine.services.time_entry_store import TimeEntryStore

logger = logging.getLogger(__name__)


class TimeClockService:
    """Service for the time entry lifecycle.

    Operations:
    - clock_in / clock_out: open and close the user's entry
    - start_break / end_break: pause and resume net work accrual
    - correct_forgot_clock_out: close a stale entry at a corrected time
    - evaluate_soft_cap_for_open_entries: periodic OVER_CAP sweep

    Business-rule violations come back as failed ``ActionResult`` values
    and leave the entry untouched. Persistence errors propagate.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock,
        settings: Settings | None = None,
    ):
        self.session = session
        self.clock = clock
        self.settings = settings or get_settings()
        self.store = TimeEntryStore(session)

    async def clock_in(self, actor: Actor | None, job_id: UUID | None = None) -> ActionResult:
        """Open a new WORKING entry for the user."""
        if actor is None or actor.user_id is None:
            return ActionResult.failure(NOT_AUTHENTICATED)
        if actor.organization_id is None:
            return ActionResult.failure(NO_ORGANIZATION)

        open_entry = await self.store.find_open_entry_for_user(actor.user_id)
        try:
            TimeEntryStateMachine.validate_action(open_entry, TimeEntryAction.CLOCK_IN)
        except PreconditionViolation as e:
            return _rejected(e)

        now = self.clock.now()
        cap_minutes = await self._cap_minutes_for(actor.organization_id)

        try:
            entry = await self.store.create_entry(
                user_id=actor.user_id,
                organization_id=actor.organization_id,
                job_id=job_id,
                clock_in=now,
                **soft_cap.initial_cap_fields(now, cap_minutes),
            )
        except IntegrityError:
            # Lost a race with a concurrent clock-in for the same user
            await self.session.rollback()
            logger.warning("Concurrent clock-in rejected for user %s", actor.user_id)
            return _rejected(
                PreconditionViolation(ErrorCode.ALREADY_CLOCKED_IN, "Already clocked in")
            )

        logger.info("User %s clocked in (entry %s)", actor.user_id, entry.time_entry_id)
        return ActionResult(entry=entry)

    async def start_break(self, actor: Actor | None) -> ActionResult:
        """Settle work time and put the open entry on break."""
        if actor is None or actor.user_id is None:
            return ActionResult.failure(NOT_AUTHENTICATED)

        entry = await self.store.find_open_entry_for_user(actor.user_id)
        try:
            TimeEntryStateMachine.validate_action(entry, TimeEntryAction.START_BREAK)
        except PreconditionViolation as e:
            return _rejected(e)

        now = self.clock.now()
        soft_cap.start_break(entry, now)
        await self.store.update_entry(entry, break_start=now, break_end=None)

        logger.info(
            "User %s started break (entry %s, %ds worked)",
            actor.user_id,
            entry.time_entry_id,
            entry.work_accum_seconds,
        )
        return ActionResult(entry=entry)

    async def end_break(self, actor: Actor | None) -> ActionResult:
        """Resume work on the open entry."""
        if actor is None or actor.user_id is None:
            return ActionResult.failure(NOT_AUTHENTICATED)

        entry = await self.store.find_open_entry_for_user(actor.user_id)
        try:
            TimeEntryStateMachine.validate_action(entry, TimeEntryAction.END_BREAK)
        except PreconditionViolation as e:
            return _rejected(e)

        now = self.clock.now()
        soft_cap.end_break(entry, now)
        await self.store.update_entry(entry, break_end=now)

        logger.info("User %s ended break (entry %s)", actor.user_id, entry.time_entry_id)
        return ActionResult(entry=entry)

    async def clock_out(self, actor: Actor | None, notes: str | None = None) -> ActionResult:
        """Settle, flag if over the cap, and close the open entry."""
        if actor is None or actor.user_id is None:
            return ActionResult.failure(NOT_AUTHENTICATED)

        entry = await self.store.find_open_entry_for_user(actor.user_id)
        try:
            TimeEntryStateMachine.validate_action(entry, TimeEntryAction.CLOCK_OUT)
        except PreconditionViolation as e:
            return _rejected(e)

        now = self.clock.now()
        was_on_break = entry.state == TimeEntryState.ON_BREAK
        was_flagged = entry.flag_status == FlagStatus.OVER_CAP

        soft_cap.clock_out(entry, now)

        fields: dict[str, object] = {
            "clock_out": now,
            "duration_hours": soft_cap.duration_hours_from_accumulator(entry),
            "notes": notes,
        }
        if was_on_break:
            fields["break_end"] = now
        await self.store.update_entry(entry, **fields)

        if not was_flagged and entry.flag_status == FlagStatus.OVER_CAP:
            logger.warning(
                "Entry %s for user %s closed over the %d minute cap (crossed at %s)",
                entry.time_entry_id,
                actor.user_id,
                entry.cap_minutes,
                entry.over_cap_at,
            )
        logger.info(
            "User %s clocked out (entry %s, %s hours)",
            actor.user_id,
            entry.time_entry_id,
            entry.duration_hours,
        )
        return ActionResult(entry=entry)

    async def correct_forgot_clock_out(
        self,
        actor: Actor | None,
        corrected_end: datetime,
        note: str | None = None,
    ) -> ActionResult:
        """Close a stale open entry at the time the user actually stopped.

        The net seconds a plain clock-out would have recorded right now are
        frozen in ``wrong_recorded_net_seconds``. The corrected net time is read
        from the accumulator as it stood before that settle.
        """
        if actor is None or actor.user_id is None:
            return ActionResult.failure(NOT_AUTHENTICATED)

        entry = await self.store.find_open_entry_for_user(actor.user_id)
        now = self.clock.now()
        try:
            TimeEntryStateMachine.validate_action(
                entry, TimeEntryAction.CORRECT_FORGOT_CLOCK_OUT
            )
            TimeEntryStateMachine.validate_correction(entry, corrected_end, now)
        except TimeClockError as e:
            return _rejected(e)

        corrected_seconds = soft_cap.corrected_work_seconds(
            entry,
            entry.clock_in,
            corrected_end,
            entry.break_start,
            entry.break_end,
        )

        soft_cap.settle_work(entry, now)
        if entry.wrong_recorded_net_seconds is None:
            entry.wrong_recorded_net_seconds = entry.work_accum_seconds

        break_end = entry.break_end
        if entry.break_start is not None and break_end is None:
            # An unfinished break ends with the shift
            break_end = max(entry.break_start, corrected_end)

        await self.store.update_entry(
            entry,
            work_accum_seconds=corrected_seconds,
            duration_hours=soft_cap.seconds_to_hours(corrected_seconds),
            clock_out=corrected_end,
            break_end=break_end,
            state=TimeEntryState.CLOCKED_OUT.value,
            last_state_change_at=corrected_end,
            flag_status=FlagStatus.FORGOT_CLOCK_OUT.value,
            correction_note=note,
            correction_applied_at=now,
        )

        if entry.wrong_time_exceeded_cap:
            # Only FORGOT_CLOCK_OUT is kept as the flag; the snapshot still shows the overrun
            logger.warning(
                "Corrected entry %s had %ds recorded, past its %d minute cap",
                entry.time_entry_id,
                entry.wrong_recorded_net_seconds,
                entry.cap_minutes,
            )
        logger.info(
            "User %s corrected forgotten clock-out (entry %s, %ds wrong, %ds corrected)",
            actor.user_id,
            entry.time_entry_id,
            entry.wrong_recorded_net_seconds,
            corrected_seconds,
        )
        return ActionResult(entry=entry)

    async def evaluate_soft_cap_for_open_entries(self) -> SweepResult:
        """Flag every open entry whose net work has reached its cap.

        Entries stay open; flagged and approaching counts are reported so a
        scheduler can notify.
        """
        now = self.clock.now()
        entries = await self.store.list_open_entries()

        processed = 0
        flagged = 0
        approaching = 0

        for entry in entries:
            processed += 1
            was_flagged = entry.flag_status == FlagStatus.OVER_CAP

            soft_cap.apply_soft_cap_flag(entry, now)

            if not was_flagged and entry.flag_status == FlagStatus.OVER_CAP:
                flagged += 1
                logger.warning(
                    "Open entry %s for user %s flagged over cap (crossed at %s)",
                    entry.time_entry_id,
                    entry.user_id,
                    entry.over_cap_at,
                )
            elif soft_cap.is_approaching_cap(entry, now, self.settings.cap_reminder_minutes):
                approaching += 1

        await self.session.flush()

        logger.info(
            "Soft cap sweep processed %d open entries, flagged %d, approaching %d",
            processed,
            flagged,
            approaching,
        )
        return SweepResult(processed=processed, flagged=flagged, approaching=approaching)

    async def get_current_status(self, actor: Actor | None) -> ActionResult:
        """The user's open entry (if any) with live net and cap figures."""
        if actor is None or actor.user_id is None:
            return ActionResult.failure(NOT_AUTHENTICATED)

        entry = await self.store.find_open_entry_for_user(actor.user_id, for_update=False)
        if entry is None:
            return ActionResult()

        return ActionResult(
            entry=entry,
            status=describe_entry(entry, self.clock.now(), self.settings.cap_reminder_minutes),
        )

    async def get_recent_entries(self, actor: Actor | None, limit: int = 10) -> ActionResult:
        """The user's most recent entries, newest first."""
        if actor is None or actor.user_id is None:
            return ActionResult.failure(NOT_AUTHENTICATED)

        entries = await self.store.list_recent_entries(actor.user_id, limit=limit)
        return ActionResult(entries=tuple(entries))

    async def _cap_minutes_for(self, organization_id: UUID) -> int:
        org_settings = await self.session.get(OrganizationSettings, organization_id)
        if org_settings is not None and org_settings.soft_cap_minutes:
            return org_settings.soft_cap_minutes
        return self.settings.default_cap_minutes


def describe_entry(entry: TimeEntry, now: datetime, reminder_minutes: int) -> EntryStatus:
    """Project an entry's net time and cap position at ``now``."""
    return EntryStatus(
        as_of=now,
        net_work_seconds=soft_cap.net_work_seconds(entry, now),
        effective_net_work_seconds=soft_cap.effective_net_work_seconds(entry, now),
        cap_seconds=soft_cap.cap_seconds(entry),
        approaching_cap=soft_cap.is_approaching_cap(entry, now, reminder_minutes),
        over_cap=soft_cap.is_over_cap(entry, now),
        projected_over_cap_at=soft_cap.compute_over_cap_at(entry),
    )


def _rejected(error: TimeClockError) -> ActionResult:
    return ActionResult.failure(error.to_error())
