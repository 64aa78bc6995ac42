"""Filter taxonomy and pure table-selection helpers."""

from activity_feed.filters.taxonomy import (
    ALL_TABLES,
    FILTER_GROUPS,
    FilterGroup,
    group_for,
    group_state,
    is_group_fully_selected,
    is_group_partially_selected,
    ordered,
    toggle_group,
    toggle_table,
)

__all__ = [
    "ALL_TABLES",
    "FILTER_GROUPS",
    "FilterGroup",
    "group_for",
    "group_state",
    "is_group_fully_selected",
    "is_group_partially_selected",
    "ordered",
    "toggle_group",
    "toggle_table",
]
