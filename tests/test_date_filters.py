"""Tests for turning filter parameters into date bounds."""

from datetime import date, datetime, time

import pytest
from werkzeug.datastructures import MultiDict

from date_filters import (
    DateRange,
    date_filter_from_args,
    resolve_date_range,
    resolve_period,
    week_range,
)


class TestResolveDateRange:
    """Tests for resolve_date_range."""

    def test_month_covers_whole_month(self):
        r = resolve_date_range("month", month="2", year="2024")
        assert r == DateRange(datetime(2024, 2, 1), datetime(2024, 2, 29, 23, 59, 59))

    def test_year_covers_whole_year(self):
        r = resolve_date_range("year", year=2023)
        assert r.start == datetime(2023, 1, 1)
        assert r.end == datetime(2023, 12, 31, 23, 59, 59)

    def test_week_one_of_year_starting_wednesday_begins_previous_december(self):
        """Jan 1 2020 is a Wednesday, so week 1 starts on Monday Dec 30 2019."""
        r = resolve_date_range("week", week="1", year="2020")
        assert r.start == datetime(2019, 12, 30)
        assert r.end == datetime(2020, 1, 5, 23, 59, 59)
        assert r.start.weekday() == 0

    def test_week_with_sunday_anchor_moves_forward(self):
        """Jan 1 2023 is a Sunday; the window starts the next day."""
        r = week_range(2023, 1)
        assert r.start == datetime(2023, 1, 2)
        assert r.end == datetime(2023, 1, 8, 23, 59, 59)

    def test_later_week_is_monday_aligned(self):
        r = week_range(2020, 2)
        assert r.start == datetime(2020, 1, 6)
        assert (r.end.date() - r.start.date()).days == 6

    @pytest.mark.parametrize("filter_type", ["range", "custom"])
    def test_explicit_range_extends_end_to_end_of_day(self, filter_type):
        r = resolve_date_range(filter_type, start_date="2024-01-10", end_date="2024-01-20")
        assert r.start == datetime(2024, 1, 10)
        assert r.end == datetime.combine(date(2024, 1, 20), time(23, 59, 59))

    @pytest.mark.parametrize("kwargs", [
        {"filter_type": None},
        {"filter_type": "all", "year": "2024"},
        {"filter_type": "month", "year": "2024"},
        {"filter_type": "month", "month": "3"},
        {"filter_type": "week", "week": "10"},
        {"filter_type": "year"},
        {"filter_type": "range", "start_date": "2024-01-01"},
        {"filter_type": "month", "month": "abc", "year": "2024"},
        {"filter_type": "month", "month": "13", "year": "2024"},
        {"filter_type": "bogus", "year": "2024"},
    ])
    def test_missing_or_bad_parameters_mean_no_restriction(self, kwargs):
        assert resolve_date_range(**kwargs) is None

    def test_reads_query_string_names(self):
        args = MultiDict({"filterType": "month", "month": "7", "year": "2022"})
        r = date_filter_from_args(args)
        assert r.start == datetime(2022, 7, 1)
        assert r.end == datetime(2022, 7, 31, 23, 59, 59)


class TestResolvePeriod:
    """Tests for the summary's relative periods."""

    TODAY = date(2024, 3, 14)  # a Thursday

    def test_week_starts_on_monday(self):
        r = resolve_period("week", today=self.TODAY)
        assert r.start == datetime(2024, 3, 11)
        assert r.end.date() == self.TODAY

    def test_month_is_default(self):
        assert resolve_period(None, today=self.TODAY).start == datetime(2024, 3, 1)
        assert resolve_period("month", today=self.TODAY).start == datetime(2024, 3, 1)

    def test_year(self):
        assert resolve_period("year", today=self.TODAY).start == datetime(2024, 1, 1)

    def test_custom_uses_given_dates(self):
        r = resolve_period("custom", "2023-05-01", "2023-05-31", today=self.TODAY)
        assert r.start == datetime(2023, 5, 1)
        assert r.end.date() == date(2023, 5, 31)
        assert r.end.time() == time.max

    def test_custom_without_dates_falls_back_to_month(self):
        r = resolve_period("custom", "2023-05-01", None, today=self.TODAY)
        assert r.start == datetime(2024, 3, 1)

    @pytest.mark.parametrize("period", ["decade", "", "WEEK"])
    def test_unknown_period_is_month(self, period):
        assert resolve_period(period, today=self.TODAY).start == datetime(2024, 3, 1)
