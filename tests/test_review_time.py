"""
Tests for timestamp parsing and display labels.
"""

from datetime import datetime, timedelta, timezone

import pytest

from staypulse.reviews.review_models import ReviewContractError
from staypulse.reviews.review_time import (
    format_date_label,
    format_relative_time,
    parse_timestamp,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    return moment.isoformat()


class TestParseTimestamp:

    def test_trailing_z(self):
        parsed = parse_timestamp("2024-03-05T10:00:00Z")
        assert parsed == datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-03-05 10:00:00").tzinfo == timezone.utc

    def test_offset_converted_to_utc(self):
        parsed = parse_timestamp("2024-03-05T12:00:00+02:00")
        assert parsed.hour == 10
        assert parsed.utcoffset() == timedelta(0)

    @pytest.mark.parametrize("value", ["", None, "not a date", "05/03/2024"])
    def test_invalid(self, value):
        with pytest.raises(ReviewContractError):
            parse_timestamp(value)


class TestFormatDateLabel:

    def test_label(self):
        assert format_date_label(datetime(2024, 3, 5, tzinfo=timezone.utc)) == "Mar 5, 2024"

    def test_label_uses_utc_date(self):
        moment = parse_timestamp("2024-12-31T23:30:00-02:00")
        assert format_date_label(moment) == "Jan 1, 2025"


class TestFormatRelativeTime:

    def test_missing(self):
        assert format_relative_time(None, NOW) == "n/a"

    def test_days_ago(self):
        assert format_relative_time(iso(NOW - timedelta(days=3)), NOW) == "3 days ago"

    def test_yesterday(self):
        assert format_relative_time(iso(NOW - timedelta(days=1)), NOW) == "yesterday"

    def test_future_hours(self):
        assert format_relative_time(iso(NOW + timedelta(hours=2)), NOW) == "in 2 hours"

    def test_last_month(self):
        assert format_relative_time(iso(NOW - timedelta(days=35)), NOW) == "last month"

    def test_years(self):
        assert format_relative_time(iso(NOW - timedelta(days=800)), NOW) == "2 years ago"

    def test_seconds(self):
        assert format_relative_time(iso(NOW - timedelta(seconds=10)), NOW) == "this minute"
