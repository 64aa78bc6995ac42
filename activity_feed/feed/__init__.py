"""Paged, filterable activity feed state."""

from activity_feed.feed.controller import (
    EMPTY_FILTERED_MESSAGE,
    EMPTY_MESSAGE,
    FETCH_ERROR_MESSAGE,
    ActivityFeed,
)

__all__ = [
    "EMPTY_FILTERED_MESSAGE",
    "EMPTY_MESSAGE",
    "FETCH_ERROR_MESSAGE",
    "ActivityFeed",
]
