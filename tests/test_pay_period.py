"""Tests for pay period boundaries."""

from datetime import date, datetime, timedelta, timezone

import pytest
from hypothesis import given, settings, strategies as st

from timeclock_engine.calculators.pay_period import (
    DEFAULT_BIWEEKLY_ANCHOR,
    get_current_pay_period,
    get_pay_period_for_date,
    get_previous_pay_period,
    pay_day_number,
)
from timeclock_engine.calculators.types import PayPeriod, PayrollSettings
from timeclock_engine.clock import FakeClock

WEEKLY = PayrollSettings(pay_period_type="weekly", pay_day="friday")
BIWEEKLY = PayrollSettings(pay_period_type="biweekly", pay_day="friday")


class TestPayDayNumber:
    def test_known_days(self):
        assert pay_day_number("monday") == 0
        assert pay_day_number("Friday") == 4
        assert pay_day_number("sunday") == 6

    def test_unset_or_unknown_defaults_to_friday(self):
        assert pay_day_number(None) == 4
        assert pay_day_number("") == 4
        assert pay_day_number("payday") == 4


class TestWeeklyPeriods:
    def test_midweek_date_ends_on_that_weeks_friday(self):
        """Wednesday Jan 10 2024 falls in Sat Jan 6 - Fri Jan 12."""
        period = get_pay_period_for_date(date(2024, 1, 10), WEEKLY)

        assert period.end == date(2024, 1, 12)
        assert period.start == date(2024, 1, 6)
        assert period.start.weekday() == 5
        assert period.label == "Jan 6 - Jan 12"

    def test_pay_day_itself_closes_the_period(self):
        period = get_pay_period_for_date(date(2024, 1, 12), WEEKLY)

        assert period.end == date(2024, 1, 12)

    def test_day_after_pay_day_starts_next_period(self):
        period = get_pay_period_for_date(date(2024, 1, 13), WEEKLY)

        assert period.start == date(2024, 1, 13)
        assert period.end == date(2024, 1, 19)

    def test_label_spanning_months(self):
        period = get_pay_period_for_date(date(2024, 1, 30), WEEKLY)

        assert period.label == "Jan 27 - Feb 2"

    def test_other_pay_day(self):
        monday = PayrollSettings(pay_day="monday")
        period = get_pay_period_for_date(date(2024, 1, 10), monday)

        assert period.end == date(2024, 1, 15)
        assert period.start == date(2024, 1, 9)

    def test_datetime_uses_organization_local_date(self):
        """Sat 02:00 UTC is still Friday evening in Los Angeles."""
        la = PayrollSettings(pay_day="friday", timezone="America/Los_Angeles")
        instant = datetime(2024, 1, 13, 2, 0, tzinfo=timezone.utc)

        assert get_pay_period_for_date(instant, la).end == date(2024, 1, 12)
        assert get_pay_period_for_date(instant, WEEKLY).end == date(2024, 1, 19)


class TestBiweeklyPeriods:
    """Bi-weekly periods end an even number of weeks from the anchor."""

    def test_default_anchor_period(self):
        period = get_pay_period_for_date(date(2024, 1, 3), BIWEEKLY)

        assert period.end == DEFAULT_BIWEEKLY_ANCHOR
        assert period.start == date(2023, 12, 23)

    def test_odd_week_pushes_end_out(self):
        period = get_pay_period_for_date(date(2024, 1, 10), BIWEEKLY)

        assert period.start == date(2024, 1, 6)
        assert period.end == date(2024, 1, 19)

    def test_both_weeks_share_a_period(self):
        first_week = get_pay_period_for_date(date(2024, 1, 8), BIWEEKLY)
        second_week = get_pay_period_for_date(date(2024, 1, 17), BIWEEKLY)

        assert first_week == second_week

    def test_dates_fourteen_days_apart_are_adjacent(self):
        first = get_pay_period_for_date(date(2024, 1, 10), BIWEEKLY)
        second = get_pay_period_for_date(date(2024, 1, 24), BIWEEKLY)

        assert second.start == first.end + timedelta(days=1)
        assert second.end == date(2024, 2, 2)

    def test_anchor_in_the_future(self):
        anchored = PayrollSettings(
            pay_period_type="biweekly",
            pay_day="friday",
            pay_period_start_date=date(2030, 1, 4),
        )

        period = get_pay_period_for_date(date(2024, 1, 10), anchored)

        assert (anchored.pay_period_start_date - period.end).days % 14 == 0
        assert period.contains(date(2024, 1, 10))
        assert (period.end - period.start).days == 13

    def test_anchor_far_in_the_past(self):
        anchored = PayrollSettings(
            pay_period_type="biweekly",
            pay_day="friday",
            pay_period_start_date=date(1990, 1, 5),
        )

        period = get_pay_period_for_date(date(2024, 1, 10), anchored)

        assert (period.end - anchored.pay_period_start_date).days % 14 == 0
        assert period.contains(date(2024, 1, 10))

    def test_anchor_off_pay_day_still_gives_fourteen_day_periods(self):
        anchored = PayrollSettings(
            pay_period_type="biweekly",
            pay_day="friday",
            pay_period_start_date=date(2024, 1, 1),
        )

        first = get_pay_period_for_date(date(2024, 1, 10), anchored)
        second = get_pay_period_for_date(date(2024, 1, 24), anchored)

        assert first.end.weekday() == 4
        assert (first.end - first.start).days == 13
        assert second.start == first.end + timedelta(days=1)

    @given(
        anchor_weeks=st.integers(min_value=-2000, max_value=2000),
        offset_days=st.integers(min_value=-5000, max_value=5000),
    )
    @settings(max_examples=200, deadline=None)
    def test_alternation_holds_for_any_anchor(self, anchor_weeks, offset_days):
        anchor = DEFAULT_BIWEEKLY_ANCHOR + timedelta(weeks=anchor_weeks)
        anchored = PayrollSettings(
            pay_period_type="biweekly",
            pay_day="friday",
            pay_period_start_date=anchor,
        )
        day = date(2024, 6, 1) + timedelta(days=offset_days)

        period = get_pay_period_for_date(day, anchored)
        later = get_pay_period_for_date(day + timedelta(days=14), anchored)

        assert period.contains(day)
        assert period.end.weekday() == 4
        assert (period.end - period.start).days == 13
        assert (period.end - anchor).days % 14 == 0
        assert later.start == period.end + timedelta(days=1)


class TestCurrentAndPrevious:
    def test_current_and_previous_from_clock(self):
        clock = FakeClock(datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc))

        current = get_current_pay_period(WEEKLY, clock)
        previous = get_previous_pay_period(WEEKLY, clock)

        assert current == PayPeriod(date(2024, 1, 6), date(2024, 1, 12), "Jan 6 - Jan 12")
        assert previous.end == date(2024, 1, 5)
        assert previous.start == date(2023, 12, 30)

    def test_previous_biweekly_is_fourteen_days_back(self):
        clock = FakeClock(datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc))

        previous = get_previous_pay_period(BIWEEKLY, clock)

        assert previous.start == date(2023, 12, 23)
        assert previous.end == date(2024, 1, 5)


class TestPeriodBounds:
    def test_utc_bounds(self):
        period = PayPeriod(date(2024, 1, 6), date(2024, 1, 12), "Jan 6 - Jan 12")

        starts_at, ends_at = period.bounds()

        assert starts_at == datetime(2024, 1, 6, tzinfo=timezone.utc)
        assert ends_at == datetime(2024, 1, 13, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        ("tz_name", "start_hour"),
        [("America/Los_Angeles", 8), ("Asia/Tokyo", -9)],
    )
    def test_local_bounds_converted_to_utc(self, tz_name, start_hour):
        period = PayPeriod(date(2024, 1, 6), date(2024, 1, 12), "Jan 6 - Jan 12")
        tz = PayrollSettings(timezone=tz_name).tzinfo

        starts_at, ends_at = period.bounds(tz)

        midnight = datetime(2024, 1, 6, tzinfo=timezone.utc)
        assert starts_at == midnight + timedelta(hours=start_hour)
        assert ends_at - starts_at == timedelta(days=7)
        assert starts_at.tzinfo == timezone.utc
