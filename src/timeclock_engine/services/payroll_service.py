"""Payroll service - earnings per pay period from settled time entries."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from timeclock_engine.calculators import pay_period as pay_period_calc
from timeclock_engine.calculators import soft_cap
from timeclock_engine.calculators.rate_resolver import RateNotFoundError, RateResolver
from timeclock_engine.calculators.types import (
    EarningsBreakdown,
    PayPeriod,
    PayrollSettings,
    SettledHours,
)
from timeclock_engine.clock import Clock
from timeclock_engine.config import Settings, get_settings
from timeclock_engine.models import OrganizationSettings, TimeEntry
from timeclock_engine.services.time_entry_store import TimeEntryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeePayrollSummary:
    """One employee's totals for a pay period."""

    user_id: UUID
    entries_count: int
    total_hours: Decimal
    earnings: EarningsBreakdown
    job_ids: tuple[UUID, ...] = ()


@dataclass(frozen=True)
class PayrollSummary:
    """Organization totals for a pay period."""

    organization_id: UUID
    period: PayPeriod
    employees: tuple[EmployeePayrollSummary, ...] = field(default_factory=tuple)

    @property
    def total_hours(self) -> Decimal:
        return sum((e.total_hours for e in self.employees), Decimal("0"))

    @property
    def total_pay(self) -> Decimal:
        return sum((e.earnings.total_pay for e in self.employees), Decimal("0"))


class PayrollService:
    """Prices settled hours for pay periods.

    Hours come from closed entries whose clock-in falls inside the period
    (in the organization's time zone). Entries flagged OVER_CAP contribute
    at most their cap.
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
        self.rate_resolver = RateResolver(session)

    async def load_payroll_settings(self, organization_id: UUID) -> PayrollSettings:
        """Organization payroll settings, or defaults when none are stored."""
        org_settings = await self.session.get(OrganizationSettings, organization_id)
        if org_settings is None:
            return PayrollSettings(timezone=self.settings.default_timezone)
        return org_settings.to_payroll_settings(self.settings.default_timezone)

    def resolve_period(
        self, payroll_settings: PayrollSettings, previous: bool = False
    ) -> PayPeriod:
        if previous:
            return pay_period_calc.get_previous_pay_period(payroll_settings, self.clock)
        return pay_period_calc.get_current_pay_period(payroll_settings, self.clock)

    async def get_earnings_for_period(
        self,
        user_id: UUID,
        period: PayPeriod,
        payroll_settings: PayrollSettings,
        organization_id: UUID | None = None,
    ) -> EarningsBreakdown:
        """Earnings for one user's settled entries in ``period``."""
        starts_at, ends_at = period.bounds(payroll_settings.tzinfo)
        entries = await self.store.list_settled_entries(
            starts_at, ends_at, organization_id=organization_id, user_id=user_id
        )
        return await self._price_entries(user_id, entries, period, payroll_settings)

    async def get_payroll_summary(
        self, organization_id: UUID, previous: bool = False
    ) -> PayrollSummary:
        """Per-employee hours and pay for the organization's pay period."""
        payroll_settings = await self.load_payroll_settings(organization_id)
        period = self.resolve_period(payroll_settings, previous=previous)
        starts_at, ends_at = period.bounds(payroll_settings.tzinfo)

        entries = await self.store.list_settled_entries(
            starts_at, ends_at, organization_id=organization_id
        )

        by_user: dict[UUID, list[TimeEntry]] = defaultdict(list)
        for entry in entries:
            by_user[entry.user_id].append(entry)

        employees = []
        for user_id, user_entries in by_user.items():
            earnings = await self._price_entries(user_id, user_entries, period, payroll_settings)
            job_ids = tuple(dict.fromkeys(e.job_id for e in user_entries if e.job_id is not None))
            employees.append(
                EmployeePayrollSummary(
                    user_id=user_id,
                    entries_count=len(user_entries),
                    total_hours=earnings.total_hours,
                    earnings=earnings,
                    job_ids=job_ids,
                )
            )

        employees.sort(key=lambda e: str(e.user_id))
        logger.info(
            "Payroll summary for organization %s (%s): %d employees",
            organization_id,
            period.label,
            len(employees),
        )
        return PayrollSummary(
            organization_id=organization_id,
            period=period,
            employees=tuple(employees),
        )

    async def _price_entries(
        self,
        user_id: UUID,
        entries: list[TimeEntry],
        period: PayPeriod,
        payroll_settings: PayrollSettings,
    ) -> EarningsBreakdown:
        settled = [settled_hours(entry) for entry in entries]
        hours_by_day = pay_period_calc.group_entries_by_day(settled, payroll_settings.tzinfo)
        total_hours = sum(hours_by_day.values(), Decimal("0"))

        try:
            hourly_rate = await self.rate_resolver.resolve_rate_for_user(user_id, period.end)
        except RateNotFoundError as e:
            logger.warning("%s; pricing %s hours at zero", e, total_hours)
            hourly_rate = Decimal("0")

        return pay_period_calc.calculate_earnings(
            total_hours,
            hourly_rate,
            payroll_settings,
            entries_by_day=hours_by_day,
        )


def settled_hours(entry: TimeEntry) -> SettledHours:
    """Payroll hours for a closed entry, clamped at the cap when flagged."""
    seconds = soft_cap.effective_net_work_seconds(entry, entry.clock_out or entry.clock_in)
    return SettledHours(clock_in=entry.clock_in, duration_hours=soft_cap.seconds_to_hours(seconds))
