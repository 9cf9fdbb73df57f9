"""Pay period boundaries and earnings with overtime."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Protocol
from zoneinfo import ZoneInfo

from timeclock_engine.calculators.types import (
    EarningsBreakdown,
    OvertimeType,
    PayPeriod,
    PayPeriodType,
    PayrollSettings,
)

if TYPE_CHECKING:
    from timeclock_engine.clock import Clock

logger = logging.getLogger(__name__)

# Python weekday numbers (Monday = 0)
DAY_NUMBERS: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}
DEFAULT_PAY_DAY = DAY_NUMBERS["friday"]

# A Friday; bi-weekly periods end on even week offsets from it
DEFAULT_BIWEEKLY_ANCHOR = date(2024, 1, 5)

WEEKLY_OVERTIME_THRESHOLD = Decimal("40")
DAILY_OVERTIME_THRESHOLD = Decimal("8")
DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")

CENTS = Decimal("0.01")


class HoursSource(Protocol):
    clock_in: datetime
    duration_hours: Decimal | float | None


def pay_day_number(pay_day: str | None) -> int:
    """Weekday number for a pay day name, Friday when unset or unknown."""
    if not pay_day:
        return DEFAULT_PAY_DAY
    return DAY_NUMBERS.get(pay_day.lower(), DEFAULT_PAY_DAY)


def _local_date(instant: datetime, settings: PayrollSettings) -> date:
    return instant.astimezone(settings.tzinfo).date()


def _anchor_date(settings: PayrollSettings) -> date:
    anchor = settings.pay_period_start_date or DEFAULT_BIWEEKLY_ANCHOR
    if isinstance(anchor, datetime):
        return _local_date(anchor, settings)
    return anchor


def _format_label(start: date, end: date) -> str:
    return f"{start:%b} {start.day} - {end:%b} {end.day}"


def get_pay_period_for_date(day: date | datetime, settings: PayrollSettings) -> PayPeriod:
    """Pay period containing ``day``.

    The period ends on the first pay day on or after ``day``. Bi-weekly
    periods push that end one more week out when it falls an odd number of
    weeks from the anchor, so consecutive periods alternate cleanly whether
    the anchor is in the past or the future.
    """
    if isinstance(day, datetime):
        day = _local_date(day, settings)

    pay_day = pay_day_number(settings.pay_day)
    period_end = day + timedelta(days=(pay_day - day.weekday()) % 7)

    if settings.pay_period_type == PayPeriodType.BIWEEKLY:
        weeks_since_anchor = (period_end - _anchor_date(settings)).days // 7
        if weeks_since_anchor % 2 != 0:
            period_end += timedelta(days=7)
        period_start = period_end - timedelta(days=13)
    else:
        period_start = period_end - timedelta(days=6)

    return PayPeriod(
        start=period_start,
        end=period_end,
        label=_format_label(period_start, period_end),
    )


def get_current_pay_period(settings: PayrollSettings, clock: Clock) -> PayPeriod:
    return get_pay_period_for_date(clock.now(), settings)


def get_previous_pay_period(settings: PayrollSettings, clock: Clock) -> PayPeriod:
    current = get_current_pay_period(settings, clock)
    return get_pay_period_for_date(current.start - timedelta(days=1), settings)


def _to_decimal(value: Decimal | float | int | None) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def split_daily_overtime(
    hours_by_day: Mapping[date, Decimal],
    daily_threshold: Decimal = DAILY_OVERTIME_THRESHOLD,
) -> tuple[Decimal, Decimal]:
    """Return (regular, overtime) with overtime past the threshold each day."""
    regular = Decimal("0")
    overtime = Decimal("0")

    for hours in hours_by_day.values():
        if hours <= daily_threshold:
            regular += hours
        else:
            regular += daily_threshold
            overtime += hours - daily_threshold

    return regular, overtime


def calculate_earnings(
    total_hours: Decimal | float,
    hourly_rate: Decimal | float | None,
    settings: PayrollSettings,
    entries_by_day: Mapping[date, Decimal] | None = None,
) -> EarningsBreakdown:
    """Split hours into regular/overtime and price them.

    ``daily8`` needs ``entries_by_day``; without it every hour is regular.
    Outputs are rounded half-up to two places.
    """
    rate = _to_decimal(hourly_rate) or Decimal("0")
    multiplier = _to_decimal(settings.overtime_rate) or DEFAULT_OVERTIME_MULTIPLIER

    regular_hours = _to_decimal(total_hours) or Decimal("0")
    overtime_hours = Decimal("0")

    if settings.overtime_enabled and settings.overtime_type:
        if settings.overtime_type == OvertimeType.DAILY8:
            if entries_by_day is None:
                logger.warning("daily8 overtime requested without per-day hours; all hours regular")
            else:
                regular_hours, overtime_hours = split_daily_overtime(entries_by_day)
        elif settings.overtime_type == OvertimeType.WEEKLY40:
            if regular_hours > WEEKLY_OVERTIME_THRESHOLD:
                overtime_hours = regular_hours - WEEKLY_OVERTIME_THRESHOLD
                regular_hours = WEEKLY_OVERTIME_THRESHOLD

    regular_pay = regular_hours * rate
    overtime_pay = overtime_hours * rate * multiplier

    return EarningsBreakdown(
        regular_hours=_cents(regular_hours),
        overtime_hours=_cents(overtime_hours),
        regular_pay=_cents(regular_pay),
        overtime_pay=_cents(overtime_pay),
        total_pay=_cents(regular_pay + overtime_pay),
    )


def group_entries_by_day(
    entries: Iterable[HoursSource],
    tz: ZoneInfo | None = None,
) -> dict[date, Decimal]:
    """Sum each entry's hours under the calendar date of its clock-in.

    Pass ``tz`` to bucket by the organization's local date; otherwise the
    clock-in's own offset decides the date.
    """
    by_day: dict[date, Decimal] = {}

    for entry in entries:
        clock_in = entry.clock_in.astimezone(tz) if tz else entry.clock_in
        day = clock_in.date()
        hours = _to_decimal(entry.duration_hours) or Decimal("0")
        by_day[day] = by_day.get(day, Decimal("0")) + hours

    return by_day


def format_currency(amount: Decimal | float) -> str:
    """Format as US dollars, e.g. ``$1,234.50``."""
    value = _cents(_to_decimal(amount) or Decimal("0"))
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_hours(hours: Decimal | float) -> str:
    """Format fractional hours as ``7h 30m`` (``8h`` when whole)."""
    value = float(hours)
    whole = math.floor(value)
    minutes = round((value - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    if minutes == 0:
        return f"{whole}h"
    return f"{whole}h {minutes}m"
