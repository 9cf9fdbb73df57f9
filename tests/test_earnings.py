"""Tests for earnings, overtime and display formatting."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from timeclock_engine.calculators.pay_period import (
    calculate_earnings,
    format_currency,
    format_hours,
    group_entries_by_day,
    split_daily_overtime,
)
from timeclock_engine.calculators.types import PayrollSettings, SettledHours

NO_OVERTIME = PayrollSettings(overtime_enabled=False)
WEEKLY40 = PayrollSettings(overtime_enabled=True, overtime_type="weekly40")
DAILY8 = PayrollSettings(overtime_enabled=True, overtime_type="daily8")


class TestCalculateEarnings:
    """Regular/overtime split and pricing."""

    def test_weekly40_overtime(self):
        """45 hours at $20 with 1.5x: 40h/$800 regular, 5h/$150 overtime."""
        earnings = calculate_earnings(Decimal("45"), Decimal("20"), WEEKLY40)

        assert earnings.regular_hours == Decimal("40.00")
        assert earnings.overtime_hours == Decimal("5.00")
        assert earnings.regular_pay == Decimal("800.00")
        assert earnings.overtime_pay == Decimal("150.00")
        assert earnings.total_pay == Decimal("950.00")
        assert earnings.total_hours == Decimal("45.00")

    def test_weekly40_at_threshold_has_no_overtime(self):
        earnings = calculate_earnings(Decimal("40"), Decimal("20"), WEEKLY40)

        assert earnings.overtime_hours == Decimal("0.00")
        assert earnings.total_pay == Decimal("800.00")

    def test_daily8_overtime(self):
        """Mon 10h, Tue 6h: 14h regular, 2h overtime."""
        by_day = {date(2024, 1, 8): Decimal("10"), date(2024, 1, 9): Decimal("6")}

        earnings = calculate_earnings(Decimal("16"), Decimal("10"), DAILY8, by_day)

        assert earnings.regular_hours == Decimal("14.00")
        assert earnings.overtime_hours == Decimal("2.00")
        assert earnings.regular_pay == Decimal("140.00")
        assert earnings.overtime_pay == Decimal("30.00")
        assert earnings.total_pay == Decimal("170.00")

    def test_daily8_without_per_day_hours_is_all_regular(self):
        earnings = calculate_earnings(Decimal("16"), Decimal("10"), DAILY8)

        assert earnings.regular_hours == Decimal("16.00")
        assert earnings.overtime_hours == Decimal("0.00")

    def test_overtime_disabled(self):
        earnings = calculate_earnings(Decimal("50"), Decimal("20"), NO_OVERTIME)

        assert earnings.regular_hours == Decimal("50.00")
        assert earnings.overtime_pay == Decimal("0.00")
        assert earnings.total_pay == Decimal("1000.00")

    def test_custom_multiplier(self):
        double_time = PayrollSettings(
            overtime_enabled=True, overtime_type="weekly40", overtime_rate=Decimal("2")
        )

        earnings = calculate_earnings(Decimal("42"), Decimal("15"), double_time)

        assert earnings.overtime_pay == Decimal("60.00")

    def test_missing_multiplier_defaults_to_time_and_a_half(self):
        unset = PayrollSettings(overtime_enabled=True, overtime_type="weekly40", overtime_rate=None)

        earnings = calculate_earnings(Decimal("41"), Decimal("10"), unset)

        assert earnings.overtime_pay == Decimal("15.00")

    def test_missing_rate_prices_at_zero(self):
        earnings = calculate_earnings(Decimal("8"), None, NO_OVERTIME)

        assert earnings.regular_hours == Decimal("8.00")
        assert earnings.total_pay == Decimal("0.00")

    def test_rounds_half_up_to_cents(self):
        earnings = calculate_earnings(Decimal("1.005"), Decimal("1"), NO_OVERTIME)

        assert earnings.regular_hours == Decimal("1.01")
        assert earnings.regular_pay == Decimal("1.01")

    def test_accepts_floats(self):
        earnings = calculate_earnings(7.5, 20.0, NO_OVERTIME)

        assert earnings.total_pay == Decimal("150.00")


class TestSplitDailyOvertime:
    def test_split_per_day(self):
        regular, overtime = split_daily_overtime(
            {
                date(2024, 1, 8): Decimal("10"),
                date(2024, 1, 9): Decimal("6"),
                date(2024, 1, 10): Decimal("8"),
            }
        )

        assert regular == Decimal("22")
        assert overtime == Decimal("2")


class TestGroupEntriesByDay:
    def test_sums_hours_per_clock_in_date(self):
        monday = datetime(2024, 1, 8, 8, 0, tzinfo=timezone.utc)
        entries = [
            SettledHours(monday, Decimal("4")),
            SettledHours(monday + timedelta(hours=5), Decimal("3.5")),
            SettledHours(monday + timedelta(days=1), 6.0),
            SettledHours(monday + timedelta(days=2), None),
        ]

        by_day = group_entries_by_day(entries)

        assert by_day == {
            date(2024, 1, 8): Decimal("7.5"),
            date(2024, 1, 9): Decimal("6.0"),
            date(2024, 1, 10): Decimal("0"),
        }

    def test_buckets_by_organization_time_zone(self):
        late_shift = SettledHours(datetime(2024, 1, 9, 3, 0, tzinfo=timezone.utc), Decimal("5"))

        assert group_entries_by_day([late_shift]) == {date(2024, 1, 9): Decimal("5")}
        assert group_entries_by_day([late_shift], ZoneInfo("America/New_York")) == {
            date(2024, 1, 8): Decimal("5")
        }


class TestFormatting:
    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (Decimal("1234.5"), "$1,234.50"),
            (Decimal("0"), "$0.00"),
            (Decimal("-5"), "-$5.00"),
            (Decimal("999999.995"), "$1,000,000.00"),
            (12.3, "$12.30"),
        ],
    )
    def test_format_currency(self, amount, expected):
        assert format_currency(amount) == expected

    @pytest.mark.parametrize(
        ("hours", "expected"),
        [
            (Decimal("7.5"), "7h 30m"),
            (Decimal("8"), "8h"),
            (Decimal("0.25"), "0h 15m"),
            (Decimal("7.999"), "8h"),
            (0, "0h"),
        ],
    )
    def test_format_hours(self, hours, expected):
        assert format_hours(hours) == expected
