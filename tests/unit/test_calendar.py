"""Tests for calendar arithmetic per time unit."""

from datetime import datetime

import pytest

from calstat.core import calendar
from calstat.core.calendar import (
    begin_of,
    end_of,
    format_key,
    generate_time_period,
    label,
    monday_of_first_week_of_month,
    offset,
    sunday_of_last_week_of_month,
    week_of_month,
)
from calstat.core.errors import UnsupportedUnitError
from calstat.core.time_units import TimeUnit


class TestBeginOf:
    def test_year(self):
        assert begin_of(TimeUnit.YEAR, datetime(2024, 7, 9, 13, 5)) == datetime(2024, 1, 1)

    def test_quarter(self):
        assert begin_of(TimeUnit.QUARTER, datetime(2024, 8, 20, 10)) == datetime(2024, 7, 1)
        assert begin_of(TimeUnit.QUARTER, datetime(2024, 12, 31)) == datetime(2024, 10, 1)

    def test_month(self):
        assert begin_of(TimeUnit.MONTH, datetime(2024, 2, 29, 23, 59)) == datetime(2024, 2, 1)

    def test_day_and_day_of_week(self):
        t = datetime(2024, 3, 13, 8, 30, 15, 123)
        assert begin_of(TimeUnit.DAY, t) == datetime(2024, 3, 13)
        assert begin_of(TimeUnit.DAY_OF_WEEK, t) == datetime(2024, 3, 13)

    def test_week_is_iso_monday(self):
        # Sunday belongs to the week starting the previous Monday
        assert begin_of(TimeUnit.WEEK, datetime(2024, 3, 17, 12)) == datetime(2024, 3, 11)

    def test_hour(self):
        assert begin_of(TimeUnit.HOUR, datetime(2024, 3, 13, 8, 30, 15, 5)) == datetime(2024, 3, 13, 8)

    def test_week_of_month_clipped_to_month_start(self):
        # 2024-05-01 is a Wednesday; its ISO week starts in April
        assert begin_of(TimeUnit.WEEK_OF_MONTH, datetime(2024, 5, 3)) == datetime(2024, 5, 1)
        assert begin_of(TimeUnit.WEEK_OF_MONTH, datetime(2024, 5, 9)) == datetime(2024, 5, 6)


class TestEndOf:
    def test_month_end_leap_year(self):
        assert end_of(TimeUnit.MONTH, datetime(2024, 2, 10)) == datetime(2024, 2, 29, 23, 59, 59, 999999)

    def test_month_end_common_year(self):
        assert end_of(TimeUnit.MONTH, datetime(2023, 2, 10)) == datetime(2023, 2, 28, 23, 59, 59, 999999)

    def test_truncated_end(self):
        assert end_of(TimeUnit.MONTH, datetime(2024, 4, 2), truncate=True) == datetime(2024, 4, 30, 23, 59, 59)
        assert end_of(TimeUnit.HOUR, datetime(2024, 4, 2, 7, 15), truncate=True) == datetime(2024, 4, 2, 7, 59, 59)

    def test_quarter_and_year(self):
        assert end_of(TimeUnit.QUARTER, datetime(2024, 5, 5)) == datetime(2024, 6, 30, 23, 59, 59, 999999)
        assert end_of(TimeUnit.YEAR, datetime(2024, 5, 5)) == datetime(2024, 12, 31, 23, 59, 59, 999999)

    def test_week_ends_on_sunday(self):
        assert end_of(TimeUnit.WEEK, datetime(2024, 3, 11)) == datetime(2024, 3, 17, 23, 59, 59, 999999)

    def test_week_of_month_clipped_to_month_end(self):
        # 2024-05-31 is a Friday; its ISO week ends in June
        assert end_of(TimeUnit.WEEK_OF_MONTH, datetime(2024, 5, 28)) == datetime(2024, 5, 31, 23, 59, 59, 999999)

    def test_end_never_before_begin(self):
        t = datetime(2024, 11, 17, 22, 10)
        for unit in TimeUnit:
            assert begin_of(unit, t) <= t <= end_of(unit, t)


class TestOffset:
    def test_month_then_begin(self):
        shifted = offset(datetime(2018, 1, 20, 10, 20, 16), 1, TimeUnit.MONTH)
        assert begin_of(TimeUnit.MONTH, shifted) == datetime(2018, 2, 1)

    def test_month_clamps_day(self):
        assert offset(datetime(2024, 1, 31), 1, TimeUnit.MONTH) == datetime(2024, 2, 29)
        assert offset(datetime(2023, 3, 31), -1, TimeUnit.MONTH) == datetime(2023, 2, 28)

    def test_quarter_is_three_months(self):
        assert offset(datetime(2024, 11, 15), 1, TimeUnit.QUARTER) == datetime(2025, 2, 15)

    def test_year_from_leap_day(self):
        assert offset(datetime(2024, 2, 29), 1, TimeUnit.YEAR) == datetime(2025, 2, 28)

    def test_hour_day_and_week(self):
        t = datetime(2024, 3, 31, 23, 30)
        assert offset(t, 1, TimeUnit.HOUR) == datetime(2024, 4, 1, 0, 30)
        assert offset(t, -31, TimeUnit.DAY) == datetime(2024, 2, 29, 23, 30)
        assert offset(t, 2, TimeUnit.WEEK) == datetime(2024, 4, 14, 23, 30)

    def test_day_of_week_stays_in_week(self):
        wednesday = datetime(2024, 3, 13, 9)
        assert offset(wednesday, 2, TimeUnit.DAY_OF_WEEK) == datetime(2024, 3, 15, 9)
        assert offset(wednesday, 10, TimeUnit.DAY_OF_WEEK) == datetime(2024, 3, 17, 9)
        assert offset(wednesday, -2, TimeUnit.DAY_OF_WEEK) == datetime(2024, 3, 11, 9)
        assert offset(wednesday, -10, TimeUnit.DAY_OF_WEEK) == datetime(2024, 3, 11, 9)

    def test_week_of_month_stays_in_month(self):
        t = datetime(2024, 5, 22, 9)
        assert offset(t, 1, TimeUnit.WEEK_OF_MONTH) == datetime(2024, 5, 29, 9)
        assert offset(t, 3, TimeUnit.WEEK_OF_MONTH) == datetime(2024, 5, 31, 23, 59, 59, 999999)
        assert offset(t, -5, TimeUnit.WEEK_OF_MONTH) == datetime(2024, 5, 1)
        assert offset(t, 0, TimeUnit.WEEK_OF_MONTH) == t


class TestLabelsAndKeys:
    @pytest.mark.parametrize(
        ("unit", "t", "expected"),
        [
            (TimeUnit.YEAR, datetime(2024, 5, 1), "2024年"),
            (TimeUnit.QUARTER, datetime(2024, 5, 1), "2季度"),
            (TimeUnit.MONTH, datetime(2024, 5, 1), "5月"),
            (TimeUnit.DAY, datetime(2024, 5, 7), "7日"),
            (TimeUnit.DAY_OF_WEEK, datetime(2024, 5, 6), "周一"),
            (TimeUnit.DAY_OF_WEEK, datetime(2024, 5, 12), "周日"),
            (TimeUnit.HOUR, datetime(2024, 5, 1, 14), "14时"),
            (TimeUnit.WEEK_OF_MONTH, datetime(2024, 5, 1), "5月第1周"),
            (TimeUnit.WEEK_OF_MONTH, datetime(2024, 5, 6), "5月第2周"),
            (TimeUnit.WEEK, datetime(2024, 5, 27), "5月第5周"),
        ],
    )
    def test_label(self, unit, t, expected):
        assert label(unit, t) == expected

    @pytest.mark.parametrize(
        ("unit", "expected"),
        [
            (TimeUnit.YEAR, "2024"),
            (TimeUnit.QUARTER, "2024-3"),
            (TimeUnit.MONTH, "2024-08"),
            (TimeUnit.DAY, "2024-08-05"),
            (TimeUnit.WEEK, "2024-08-05"),
            (TimeUnit.HOUR, "2024-08-05 07"),
        ],
    )
    def test_format_key(self, unit, expected):
        assert format_key(unit, datetime(2024, 8, 5, 7, 45)) == expected


class TestWeekOfMonthHelpers:
    def test_first_week_starts_at_first_of_month(self):
        assert monday_of_first_week_of_month(datetime(2024, 5, 20)) == datetime(2024, 5, 1)
        # 2024-04-01 is a Monday
        assert monday_of_first_week_of_month(datetime(2024, 4, 20)) == datetime(2024, 4, 1)

    def test_last_week_ends_at_last_day(self):
        assert sunday_of_last_week_of_month(datetime(2024, 5, 2)) == datetime(2024, 5, 31, 23, 59, 59, 999999)
        assert sunday_of_last_week_of_month(datetime(2024, 6, 2), truncate=True) == datetime(2024, 6, 30, 23, 59, 59)

    def test_week_of_month_index(self):
        assert week_of_month(datetime(2024, 5, 5)) == 1
        assert week_of_month(datetime(2024, 5, 6)) == 2
        assert week_of_month(datetime(2024, 5, 31)) == 5
        assert week_of_month(datetime(2024, 4, 1)) == 1


class TestGenerateTimePeriod:
    def test_current_period(self):
        begin, end = generate_time_period(TimeUnit.MONTH, 0, datetime(2024, 3, 15, 10))
        assert begin == datetime(2024, 3, 1)
        assert end == datetime(2024, 3, 31, 23, 59, 59, 999999)

    def test_past_periods(self):
        begin, end = generate_time_period(TimeUnit.MONTH, -2, datetime(2024, 3, 15))
        assert begin == datetime(2024, 1, 1)
        assert end == datetime(2024, 3, 31, 23, 59, 59, 999999)

    def test_future_periods(self):
        begin, end = generate_time_period(TimeUnit.QUARTER, 1, datetime(2024, 11, 2))
        assert begin == datetime(2024, 10, 1)
        assert end == datetime(2025, 3, 31, 23, 59, 59, 999999)

    def test_defaults_to_now(self):
        begin, end = generate_time_period(TimeUnit.DAY)
        assert begin <= datetime.now() <= end


class TestHelpers:
    def test_leap_years(self):
        assert calendar.is_leap_year(2024)
        assert calendar.is_leap_year(2000)
        assert not calendar.is_leap_year(1900)
        assert not calendar.is_leap_year(2023)

    def test_is_between_closed_interval(self):
        begin, end = datetime(2024, 1, 1), datetime(2024, 1, 2)
        assert calendar.is_between(begin, begin, end)
        assert calendar.is_between(end, begin, end)
        assert not calendar.is_between(datetime(2024, 1, 3), begin, end)
        assert not calendar.is_between(None, begin, end)

    def test_unknown_unit_rejected(self):
        with pytest.raises(UnsupportedUnitError):
            begin_of("fortnight", datetime(2024, 1, 1))
