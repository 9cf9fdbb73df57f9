"""Scheduler-facing endpoints."""

import hmac
import logging
from typing import Annotated

from fastapi import APIRouter, Header, HTTPException, status

from timeclock_engine.api.dependencies import AppClock, AppSettings, DbSession
from timeclock_engine.api.schemas import ErrorResponse, SoftCapSweepResponse
from timeclock_engine.config import Settings
from timeclock_engine.services.time_clock_service import TimeClockService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


def _check_cron_secret(settings: Settings, authorization: str | None) -> None:
    """Require ``Bearer <CRON_SECRET>`` when a secret is configured."""
    if not settings.cron_secret:
        return
    expected = f"Bearer {settings.cron_secret}"
    if authorization is None or not hmac.compare_digest(authorization, expected):
        logger.warning("Rejected cron request with missing or wrong secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


@router.api_route(
    "/soft-cap-evaluation",
    methods=["GET", "POST"],
    response_model=SoftCapSweepResponse,
    responses={401: {"model": ErrorResponse}},
)
async def soft_cap_evaluation(
    db: DbSession,
    clock: AppClock,
    settings: AppSettings,
    authorization: Annotated[str | None, Header()] = None,
) -> SoftCapSweepResponse:
    """Flag open entries that have reached their soft cap."""
    _check_cron_secret(settings, authorization)

    service = TimeClockService(db, clock, settings)
    result = await service.evaluate_soft_cap_for_open_entries()

    return SoftCapSweepResponse(
        processed=result.processed,
        flagged=result.flagged,
        approaching=result.approaching,
        evaluated_at=clock.now(),
    )
