"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock_engine.clock import Clock, SystemClock
from timeclock_engine.config import Settings, get_settings
from timeclock_engine.database import init_db
from timeclock_engine.services.results import Actor

_system_clock = SystemClock()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session, committed when the handler succeeds."""
    _, session_factory = init_db()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_clock() -> Clock:
    return _system_clock


def get_app_settings() -> Settings:
    return get_settings()


def _parse_uuid_header(value: str | None, header: str) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header} format",
        )


async def get_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_organization_id: Annotated[str | None, Header()] = None,
) -> Actor:
    """Identity forwarded by the upstream auth layer.

    A missing user id is not rejected here; services refuse it and the
    route turns that into a 401.
    """
    return Actor(
        user_id=_parse_uuid_header(x_user_id, "X-User-ID"),
        organization_id=_parse_uuid_header(x_organization_id, "X-Organization-ID"),
    )


async def get_organization_id(
    x_organization_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Extract organization ID from header."""
    organization_id = _parse_uuid_header(x_organization_id, "X-Organization-ID")
    if organization_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Organization-ID header is required",
        )
    return organization_id


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
AppClock = Annotated[Clock, Depends(get_clock)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
CurrentActor = Annotated[Actor, Depends(get_actor)]
OrganizationId = Annotated[UUID, Depends(get_organization_id)]
