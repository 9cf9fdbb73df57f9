"""Hourly pay rate resolution."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock_engine.models import PayRate


class RateNotFoundError(Exception):
    """Raised when no rate is effective for a user on a date."""

    def __init__(self, user_id: UUID, as_of_date: date):
        self.user_id = user_id
        self.as_of_date = as_of_date
        super().__init__(f"No pay rate found for user {user_id} on {as_of_date}")


class RateResolver:
    """Resolves the hourly rate effective on a date.

    When rates overlap, the one with the latest start date wins.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def resolve_rate_for_user(self, user_id: UUID, as_of_date: date) -> Decimal:
        """Resolve the hourly rate for a user.

        Raises:
            RateNotFoundError: If no rate is effective on ``as_of_date``
        """
        result = await self.session.execute(
            select(PayRate)
            .where(
                PayRate.user_id == user_id,
                PayRate.start_date <= as_of_date,
                or_(PayRate.end_date.is_(None), PayRate.end_date >= as_of_date),
            )
            .order_by(PayRate.start_date.desc())
            .limit(1)
        )
        rate = result.scalar_one_or_none()
        if rate is None:
            raise RateNotFoundError(user_id, as_of_date)
        return rate.hourly_rate
