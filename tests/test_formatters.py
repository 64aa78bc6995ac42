"""Tests for display formatters (dates, timestamps, truncation)."""

from __future__ import annotations

from datetime import date, datetime, timezone

from activity_feed.formatters import (
    format_date,
    format_datetime,
    format_timestamp,
    parse_datetime,
    truncate,
)


class TestParseDatetime:
    def test_empty_values(self):
        assert parse_datetime(None) is None
        assert parse_datetime("") is None

    def test_garbage(self):
        assert parse_datetime("not a date") is None

    def test_zulu_suffix(self):
        dt = parse_datetime("2025-03-05T14:07:00Z")
        assert dt is not None
        assert dt.hour == 14

    def test_naive_taken_as_utc(self):
        dt = parse_datetime("2025-03-05T14:07:00")
        assert dt.utcoffset().total_seconds() == 0


class TestFormatDate:
    def test_iso_date(self):
        assert format_date("2025-03-05") == "Mar 5, 2025"

    def test_date_object(self):
        assert format_date(date(2024, 12, 31)) == "Dec 31, 2024"

    def test_unparseable(self):
        assert format_date("someday") is None


class TestFormatDatetime:
    def test_24h_clock(self):
        assert format_datetime("2025-03-05T14:07:00+00:00") == "Mar 5, 2025 14:07"

    def test_single_digit_hour(self):
        assert format_datetime("2025-03-05T09:05:00+00:00") == "Mar 5, 2025 9:05"


class TestFormatTimestamp:
    def test_afternoon(self):
        assert format_timestamp(datetime(2025, 3, 5, 14, 7, tzinfo=timezone.utc)) == "Mar 5, 2025 2:07 PM"

    def test_midnight_is_twelve(self):
        assert format_timestamp("2025-03-05T00:30:00Z") == "Mar 5, 2025 12:30 AM"

    def test_none(self):
        assert format_timestamp(None) is None


class TestTruncate:
    def test_at_limit_untouched(self):
        assert truncate("a" * 40) == "a" * 40

    def test_over_limit(self):
        assert truncate("a" * 41) == "a" * 40 + "..."

    def test_custom_limit(self):
        assert truncate("abcdef", limit=3) == "abc..."
