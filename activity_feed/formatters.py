"""Display formatting for dates, timestamps and long text.

Formats follow the feed's English UI:
    date       -> "Mar 5, 2025"
    datetime   -> "Mar 5, 2025 14:07"
    timestamp  -> "Mar 5, 2025 2:07 PM"
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from activity_feed.config import settings

ELLIPSIS = "..."


def _display_tz() -> ZoneInfo | timezone:
    try:
        return ZoneInfo(settings.feed.display_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 string, date or datetime into an aware datetime.

    Naive values are taken as UTC. Calendar dates ("2025-03-05") carry no
    instant and are never shifted across timezones.
    Returns None for empty or unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=_display_tz())
    else:
        raw = str(value).strip()
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
        if len(raw) == 10:
            return parsed.replace(tzinfo=_display_tz())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(_display_tz())


def format_date(value: Any) -> str | None:
    """Format as "MMM d, yyyy"; None when the value is not a date."""
    dt = parse_datetime(value)
    if dt is None:
        return None
    return f"{dt:%b} {dt.day}, {dt.year}"


def format_datetime(value: Any) -> str | None:
    """Format as "MMM d, yyyy H:mm" (24h clock)."""
    dt = parse_datetime(value)
    if dt is None:
        return None
    return f"{dt:%b} {dt.day}, {dt.year} {dt.hour}:{dt:%M}"


def format_timestamp(value: Any) -> str | None:
    """Format as "MMM d, yyyy h:mm a" (12h clock), used for feed timestamps."""
    dt = parse_datetime(value)
    if dt is None:
        return None
    hour = dt.hour % 12 or 12
    return f"{dt:%b} {dt.day}, {dt.year} {hour}:{dt:%M} {dt:%p}"


def truncate(text: str, limit: int | None = None) -> str:
    """Cut text longer than ``limit`` characters and append an ellipsis."""
    if limit is None:
        limit = settings.feed.feed_truncate_length
    if len(text) > limit:
        return f"{text[:limit]}{ELLIPSIS}"
    return text
