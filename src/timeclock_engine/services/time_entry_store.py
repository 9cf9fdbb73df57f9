"""Persistence for time entries."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock_engine.models import TimeEntry


class TimeEntryStore:
    """Reads and writes time entries within the caller's transaction.

    Transitions lock the user's open row (``FOR UPDATE``), and the partial
    unique index on open entries rejects a concurrent second clock-in.
    Nothing here commits; the request or job that owns the session does.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_open_entry_for_user(
        self, user_id: UUID, for_update: bool = True
    ) -> TimeEntry | None:
        """Load the user's open entry, locking it for the transition."""
        query = select(TimeEntry).where(
            TimeEntry.user_id == user_id,
            TimeEntry.clock_out.is_(None),
        )
        if for_update:
            query = query.with_for_update()

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create_entry(self, **fields: Any) -> TimeEntry:
        """Insert a new entry and flush so constraint violations surface now."""
        entry = TimeEntry(**fields)
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def update_entry(self, entry: TimeEntry, **fields: Any) -> TimeEntry:
        """Apply field changes to an owned entry and flush."""
        for name, value in fields.items():
            setattr(entry, name, value)
        await self.session.flush()
        return entry

    async def get_entry(self, time_entry_id: UUID) -> TimeEntry | None:
        return await self.session.get(TimeEntry, time_entry_id)

    async def list_open_entries(self, organization_id: UUID | None = None) -> list[TimeEntry]:
        """Open entries, skipping rows another transaction is mid-transition on."""
        query = select(TimeEntry).where(TimeEntry.clock_out.is_(None))
        if organization_id is not None:
            query = query.where(TimeEntry.organization_id == organization_id)
        query = query.order_by(TimeEntry.clock_in).with_for_update(skip_locked=True)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_settled_entries(
        self,
        starts_at: datetime,
        ends_at: datetime,
        organization_id: UUID | None = None,
        user_id: UUID | None = None,
    ) -> list[TimeEntry]:
        """Closed entries whose clock-in falls in ``[starts_at, ends_at)``."""
        query = select(TimeEntry).where(
            TimeEntry.clock_out.is_not(None),
            TimeEntry.clock_in >= starts_at,
            TimeEntry.clock_in < ends_at,
        )
        if organization_id is not None:
            query = query.where(TimeEntry.organization_id == organization_id)
        if user_id is not None:
            query = query.where(TimeEntry.user_id == user_id)

        result = await self.session.execute(query.order_by(TimeEntry.clock_in))
        return list(result.scalars().all())

    async def list_recent_entries(
        self,
        user_id: UUID,
        since: datetime | None = None,
        limit: int = 10,
    ) -> list[TimeEntry]:
        """The user's latest entries, newest first."""
        query = select(TimeEntry).where(TimeEntry.user_id == user_id)
        if since is not None:
            query = query.where(TimeEntry.clock_in >= since)

        result = await self.session.execute(
            query.order_by(TimeEntry.clock_in.desc()).limit(limit)
        )
        return list(result.scalars().all())
