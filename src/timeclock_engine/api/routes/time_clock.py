"""Time clock API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from timeclock_engine.api.dependencies import AppClock, AppSettings, CurrentActor, DbSession
from timeclock_engine.api.errors import ActionRejected
from timeclock_engine.api.schemas import (
    ClockInRequest,
    ClockOutRequest,
    EntryStatusResponse,
    ErrorResponse,
    ForgotClockOutRequest,
    TimeClockStatusResponse,
    TimeEntryListResponse,
    TimeEntryResponse,
)
from timeclock_engine.services.results import ActionResult
from timeclock_engine.services.time_clock_service import TimeClockService

router = APIRouter(prefix="/time-clock", tags=["time-clock"])

_REJECTIONS = {
    401: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _unwrap(result: ActionResult) -> ActionResult:
    if not result.ok:
        raise ActionRejected(result.error)
    return result


def _entry_response(result: ActionResult) -> TimeEntryResponse:
    return TimeEntryResponse.model_validate(_unwrap(result).entry)


# ============================================================================
# Transitions
# ============================================================================


@router.post(
    "/clock-in",
    response_model=TimeEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_REJECTIONS,
)
async def clock_in(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    actor: CurrentActor,
    payload: ClockInRequest | None = None,
) -> TimeEntryResponse:
    """Open a new entry for the current user."""
    service = TimeClockService(db, clock, settings)
    job_id = payload.job_id if payload else None
    return _entry_response(await service.clock_in(actor, job_id=job_id))


@router.post("/clock-out", response_model=TimeEntryResponse, responses=_REJECTIONS)
async def clock_out(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    actor: CurrentActor,
    payload: ClockOutRequest | None = None,
) -> TimeEntryResponse:
    """Close the current user's open entry."""
    service = TimeClockService(db, clock, settings)
    notes = payload.notes if payload else None
    return _entry_response(await service.clock_out(actor, notes=notes))


@router.post("/breaks/start", response_model=TimeEntryResponse, responses=_REJECTIONS)
async def start_break(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    actor: CurrentActor,
) -> TimeEntryResponse:
    """Put the current user's open entry on break."""
    service = TimeClockService(db, clock, settings)
    return _entry_response(await service.start_break(actor))


@router.post("/breaks/end", response_model=TimeEntryResponse, responses=_REJECTIONS)
async def end_break(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    actor: CurrentActor,
) -> TimeEntryResponse:
    """Resume work on the current user's open entry."""
    service = TimeClockService(db, clock, settings)
    return _entry_response(await service.end_break(actor))


@router.post(
    "/forgot-clock-out",
    response_model=TimeEntryResponse,
    responses={**_REJECTIONS, 422: {"model": ErrorResponse}},
)
async def correct_forgot_clock_out(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    actor: CurrentActor,
    payload: ForgotClockOutRequest,
) -> TimeEntryResponse:
    """Close a stale open entry at the time the user actually stopped."""
    service = TimeClockService(db, clock, settings)
    result = await service.correct_forgot_clock_out(
        actor, payload.corrected_end, note=payload.note
    )
    return _entry_response(result)


# ============================================================================
# Reads
# ============================================================================


@router.get(
    "/status",
    response_model=TimeClockStatusResponse,
    responses={401: {"model": ErrorResponse}},
)
async def get_status(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    actor: CurrentActor,
) -> TimeClockStatusResponse:
    """Current user's open entry with live net time and cap position."""
    service = TimeClockService(db, clock, settings)
    result = _unwrap(await service.get_current_status(actor))

    if result.entry is None:
        return TimeClockStatusResponse(clocked_in=False)

    return TimeClockStatusResponse(
        clocked_in=True,
        entry=TimeEntryResponse.model_validate(result.entry),
        status=EntryStatusResponse.model_validate(result.status),
    )


@router.get(
    "/entries",
    response_model=TimeEntryListResponse,
    responses={401: {"model": ErrorResponse}},
)
async def list_entries(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    actor: CurrentActor,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> TimeEntryListResponse:
    """Current user's most recent entries, newest first."""
    service = TimeClockService(db, clock, settings)
    result = _unwrap(await service.get_recent_entries(actor, limit=limit))

    return TimeEntryListResponse(
        items=[TimeEntryResponse.model_validate(e) for e in result.entries],
        total=len(result.entries),
    )
