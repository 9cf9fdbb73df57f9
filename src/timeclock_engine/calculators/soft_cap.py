"""Soft cap accounting for time entries.

Net work time (breaks excluded) is tracked with an accumulator that holds
the seconds of every *settled* work segment, plus ``last_state_change_at``
marking where the current, unsettled segment began. The "as of now" value
is always the accumulator plus the open segment if the entry is working.

Entries crossing the cap (960 minutes by default) are flagged ``OVER_CAP``
but never closed automatically. Payroll reads ``effective_net_work_seconds``,
which clamps flagged entries at the cap.

Seconds are floored, never rounded, so no unworked time is ever credited.

All functions take ``now`` explicitly. Functions documented as mutating
update the entry in place and return it; callers own the entry for the
duration of one transaction.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol, TypeVar

from timeclock_engine.calculators.types import FlagStatus, TimeEntryState

DEFAULT_CAP_MINUTES = 960
CAP_REMINDER_OFFSET_MINUTES = 30

SECONDS_PER_HOUR = Decimal(3600)
HOURS_PRECISION = Decimal("0.000001")

_ONE_SECOND = timedelta(seconds=1)


class CapTrackedEntry(Protocol):
    """Fields of a time entry read and written by the soft cap functions."""

    state: str
    work_accum_seconds: int
    last_state_change_at: datetime | None
    cap_minutes: int
    flag_status: str
    over_cap_at: datetime | None


E = TypeVar("E", bound=CapTrackedEntry)


def _elapsed_seconds(since: datetime, now: datetime) -> int:
    return max((now - since) // _ONE_SECOND, 0)


def seconds_to_hours(seconds: int) -> Decimal:
    return (Decimal(seconds) / SECONDS_PER_HOUR).quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


def settle_work(entry: E, now: datetime) -> E:
    """Commit the open work segment into the accumulator (mutating).

    Adds time only while WORKING; ``last_state_change_at`` moves to ``now``
    in every state.
    """
    if entry.state == TimeEntryState.WORKING and entry.last_state_change_at is not None:
        entry.work_accum_seconds += _elapsed_seconds(entry.last_state_change_at, now)
    entry.last_state_change_at = now
    return entry


def net_work_seconds(entry: CapTrackedEntry, now: datetime) -> int:
    """Net work seconds as of ``now`` without settling anything."""
    if entry.state == TimeEntryState.WORKING and entry.last_state_change_at is not None:
        return entry.work_accum_seconds + _elapsed_seconds(entry.last_state_change_at, now)
    return entry.work_accum_seconds


def net_work_hours(entry: CapTrackedEntry, now: datetime) -> Decimal:
    return seconds_to_hours(net_work_seconds(entry, now))


def cap_seconds(entry: CapTrackedEntry) -> int:
    return entry.cap_minutes * 60


def compute_over_cap_at(entry: CapTrackedEntry) -> datetime | None:
    """Instant the cap is (or was) reached by the current work segment.

    Outside a WORKING segment the stored ``over_cap_at`` is returned as is.
    """
    if entry.state != TimeEntryState.WORKING or entry.last_state_change_at is None:
        return entry.over_cap_at

    remaining = cap_seconds(entry) - entry.work_accum_seconds
    if remaining <= 0:
        # Already past the cap when this segment started
        return entry.last_state_change_at
    return entry.last_state_change_at + timedelta(seconds=remaining)


def apply_soft_cap_flag(entry: E, now: datetime) -> E:
    """Flag the entry OVER_CAP once net work reaches the cap (mutating).

    ``over_cap_at`` is recorded the first time only. Re-applying to an
    already flagged entry changes nothing.
    """
    net = net_work_seconds(entry, now)
    cap = cap_seconds(entry)

    if net >= cap and entry.flag_status != FlagStatus.OVER_CAP:
        entry.flag_status = FlagStatus.OVER_CAP.value

        if entry.over_cap_at is None:
            if entry.state == TimeEntryState.WORKING and entry.last_state_change_at is not None:
                entry.over_cap_at = now - timedelta(seconds=net - cap)
            else:
                entry.over_cap_at = compute_over_cap_at(entry) or now

    return entry


def effective_net_work_seconds(entry: CapTrackedEntry, now: datetime) -> int:
    """Payroll-facing net seconds: clamped at the cap when flagged OVER_CAP."""
    net = net_work_seconds(entry, now)
    if entry.flag_status == FlagStatus.OVER_CAP:
        return min(net, cap_seconds(entry))
    return net


def effective_net_work_hours(entry: CapTrackedEntry, now: datetime) -> Decimal:
    return seconds_to_hours(effective_net_work_seconds(entry, now))


def is_approaching_cap(
    entry: CapTrackedEntry,
    now: datetime,
    reminder_minutes: int = CAP_REMINDER_OFFSET_MINUTES,
) -> bool:
    """True within ``reminder_minutes`` of the cap, unless already flagged."""
    if entry.flag_status == FlagStatus.OVER_CAP:
        return False

    net = net_work_seconds(entry, now)
    cap = cap_seconds(entry)
    return cap - reminder_minutes * 60 <= net < cap


def is_over_cap(entry: CapTrackedEntry, now: datetime) -> bool:
    return net_work_seconds(entry, now) >= cap_seconds(entry)


def initial_cap_fields(
    clock_in: datetime, cap_minutes: int = DEFAULT_CAP_MINUTES
) -> dict[str, Any]:
    """Accounting fields for a freshly clocked-in entry."""
    return {
        "state": TimeEntryState.WORKING.value,
        "work_accum_seconds": 0,
        "last_state_change_at": clock_in,
        "cap_minutes": cap_minutes,
        "flag_status": FlagStatus.NONE.value,
        "over_cap_at": None,
    }


def start_break(entry: E, now: datetime) -> E:
    """Settle work and switch to ON_BREAK (mutating)."""
    settle_work(entry, now)
    entry.state = TimeEntryState.ON_BREAK.value
    entry.last_state_change_at = now
    return entry


def end_break(entry: E, now: datetime) -> E:
    """Resume WORKING (mutating). Break time is never settled."""
    entry.state = TimeEntryState.WORKING.value
    entry.last_state_change_at = now
    return entry


def clock_out(entry: E, now: datetime) -> E:
    """Settle, apply the cap flag and close the entry (mutating).

    A trailing break is excluded because only WORKING segments settle.
    """
    if entry.state == TimeEntryState.WORKING:
        settle_work(entry, now)

    apply_soft_cap_flag(entry, now)

    entry.state = TimeEntryState.CLOCKED_OUT.value
    return entry


def duration_hours_from_accumulator(entry: CapTrackedEntry) -> Decimal:
    """Net hours recorded in the accumulator (closed entries)."""
    return seconds_to_hours(entry.work_accum_seconds)


def corrected_net_seconds(
    clock_in: datetime,
    corrected_end: datetime,
    break_start: datetime | None = None,
    break_end: datetime | None = None,
) -> int:
    """Net seconds from clock-in to a corrected end, less the recorded break.

    The break is clipped to ``[clock_in, corrected_end]``; a break with no
    recorded end runs until ``corrected_end``.
    """
    gross = _elapsed_seconds(clock_in, corrected_end)

    break_seconds = 0
    if break_start is not None:
        start = max(break_start, clock_in)
        end = min(break_end or corrected_end, corrected_end)
        break_seconds = _elapsed_seconds(start, end)

    return max(gross - break_seconds, 0)


def corrected_work_seconds(
    entry: CapTrackedEntry,
    clock_in: datetime,
    corrected_end: datetime,
    break_start: datetime | None = None,
    break_end: datetime | None = None,
) -> int:
    """Net seconds the entry would hold had it closed at ``corrected_end``.

    Reads the accumulator, so it must run before the entry is settled at
    the current time. Only a corrected end earlier than the last transition
    falls back to the recorded break, clamped at the accumulator.
    """
    last_change = entry.last_state_change_at
    if last_change is not None and corrected_end >= last_change:
        if entry.state == TimeEntryState.WORKING:
            return entry.work_accum_seconds + _elapsed_seconds(last_change, corrected_end)
        return entry.work_accum_seconds

    rebuilt = corrected_net_seconds(clock_in, corrected_end, break_start, break_end)
    return min(rebuilt, entry.work_accum_seconds)
