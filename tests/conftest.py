"""Pytest fixtures for time clock engine tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Callable
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from timeclock_engine.calculators import soft_cap
from timeclock_engine.calculators.types import FlagStatus, TimeEntryState
from timeclock_engine.clock import FakeClock
from timeclock_engine.config import Settings
from timeclock_engine.models import Base, OrganizationSettings, PayRate, TimeEntry
from timeclock_engine.services.results import Actor

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Monday 2024-01-08 08:00 UTC; the weekly Friday pay period is Jan 6 - Jan 12
MONDAY_8AM = datetime(2024, 1, 8, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of the environment."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="DEBUG",
        cron_secret=None,
        default_cap_minutes=960,
        cap_reminder_minutes=30,
        default_timezone="UTC",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(MONDAY_8AM)


@pytest_asyncio.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def organization_id() -> UUID:
    return uuid4()


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def actor(user_id: UUID, organization_id: UUID) -> Actor:
    return Actor(user_id=user_id, organization_id=organization_id)


@pytest.fixture
def add_closed_entry(
    session: AsyncSession, organization_id: UUID
) -> Callable[..., object]:
    """Persist a settled entry with ``hours`` of net work."""

    async def _add(
        user_id: UUID,
        clock_in: datetime,
        hours: float | Decimal,
        flag_status: FlagStatus = FlagStatus.NONE,
        job_id: UUID | None = None,
        cap_minutes: int = 960,
    ) -> TimeEntry:
        seconds = int(Decimal(str(hours)) * 3600)
        clock_out = clock_in + timedelta(seconds=seconds)
        entry = TimeEntry(
            user_id=user_id,
            organization_id=organization_id,
            job_id=job_id,
            clock_in=clock_in,
            clock_out=clock_out,
            state=TimeEntryState.CLOCKED_OUT.value,
            work_accum_seconds=seconds,
            last_state_change_at=clock_out,
            cap_minutes=cap_minutes,
            flag_status=flag_status.value,
            duration_hours=soft_cap.seconds_to_hours(seconds),
        )
        session.add(entry)
        await session.flush()
        return entry

    return _add


@pytest_asyncio.fixture
async def weekly_org(session: AsyncSession, organization_id: UUID) -> OrganizationSettings:
    """Weekly Friday pay periods, overtime disabled."""
    org_settings = OrganizationSettings(
        organization_id=organization_id,
        pay_period_type="weekly",
        pay_day="friday",
        overtime_enabled=False,
        overtime_type="weekly40",
        overtime_rate=Decimal("1.5"),
        timezone="UTC",
    )
    session.add(org_settings)
    await session.flush()
    return org_settings


@pytest_asyncio.fixture
async def hourly_rate(
    session: AsyncSession, user_id: UUID, organization_id: UUID
) -> PayRate:
    """$20.00/hr for the default user since the start of 2024."""
    rate = PayRate(
        user_id=user_id,
        organization_id=organization_id,
        hourly_rate=Decimal("20.00"),
        start_date=date(2024, 1, 1),
    )
    session.add(rate)
    await session.flush()
    return rate
