"""Tests for pay rate resolver."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from timeclock_engine.calculators.rate_resolver import RateNotFoundError, RateResolver
from timeclock_engine.models import PayRate


class TestRateResolver:
    """Test effective-dated rate resolution."""

    @pytest.mark.asyncio
    async def test_resolve_rate_for_user_simple(self, session, user_id, hourly_rate):
        """Test resolving a single open-ended rate."""
        resolver = RateResolver(session)

        rate = await resolver.resolve_rate_for_user(
            user_id=user_id,
            as_of_date=date(2024, 1, 15),
        )

        assert rate == Decimal("20.00")

    @pytest.mark.asyncio
    async def test_resolve_rate_not_found(self, session):
        """Test error when no rate found."""
        resolver = RateResolver(session)
        fake_user_id = uuid4()

        with pytest.raises(RateNotFoundError) as exc_info:
            await resolver.resolve_rate_for_user(
                user_id=fake_user_id,
                as_of_date=date(2024, 1, 15),
            )

        assert exc_info.value.user_id == fake_user_id
        assert exc_info.value.as_of_date == date(2024, 1, 15)

    @pytest.mark.asyncio
    async def test_resolve_rate_respects_effective_dates(
        self, session, user_id, organization_id, hourly_rate
    ):
        """Test that rate resolution respects effective dates."""
        resolver = RateResolver(session)

        # Add a future raise
        session.add(
            PayRate(
                user_id=user_id,
                organization_id=organization_id,
                hourly_rate=Decimal("24.00"),
                start_date=date(2024, 7, 1),
            )
        )
        await session.flush()

        before = await resolver.resolve_rate_for_user(user_id, date(2024, 6, 30))
        after = await resolver.resolve_rate_for_user(user_id, date(2024, 7, 1))

        assert before == Decimal("20.00")
        assert after == Decimal("24.00")

    @pytest.mark.asyncio
    async def test_ended_rate_not_used(self, session, user_id, organization_id):
        session.add(
            PayRate(
                user_id=user_id,
                organization_id=organization_id,
                hourly_rate=Decimal("18.00"),
                start_date=date(2023, 1, 1),
                end_date=date(2023, 12, 31),
            )
        )
        await session.flush()
        resolver = RateResolver(session)

        assert await resolver.resolve_rate_for_user(user_id, date(2023, 12, 31)) == Decimal("18.00")
        with pytest.raises(RateNotFoundError):
            await resolver.resolve_rate_for_user(user_id, date(2024, 1, 1))

    def test_is_active_on(self):
        rate = PayRate(
            hourly_rate=Decimal("20"),
            start_date=date(2024, 1, 1),
            end_date=date(2024, 3, 31),
        )

        assert rate.is_active_on(date(2023, 12, 31)) is False
        assert rate.is_active_on(date(2024, 1, 1)) is True
        assert rate.is_active_on(date(2024, 3, 31)) is True
        assert rate.is_active_on(date(2024, 4, 1)) is False
