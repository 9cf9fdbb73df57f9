"""Integration test fixtures: the FastAPI app over the test session."""

from __future__ import annotations

from dataclasses import replace
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock_engine.api.app import create_app
from timeclock_engine.api.dependencies import get_app_settings, get_clock, get_db_session


@pytest_asyncio.fixture
async def app(session: AsyncSession, clock, test_settings):
    """App wired to the test session, fake clock and fixed settings."""
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield session
        await session.flush()

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_app_settings] = lambda: test_settings
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def secured_client(app, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """Client for an app whose cron route requires a secret."""
    secured = replace(test_settings, cron_secret="s3cret")
    app.dependency_overrides[get_app_settings] = lambda: secured
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
