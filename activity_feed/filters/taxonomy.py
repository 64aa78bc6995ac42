"""Filter taxonomy: the ten audited tables grouped into five user-facing categories.

Static data plus pure selection math. Group state (none / some / all) is
always derived from the table selection, never stored alongside it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from activity_feed.models.enums import EntityKind, SelectionState

Selection = frozenset[EntityKind]


@dataclass(frozen=True)
class FilterGroup:
    """A named bucket of related tables."""

    name: str
    tables: tuple[EntityKind, ...]
    icon_key: str
    color: str

    @property
    def member_tables(self) -> frozenset[EntityKind]:
        return frozenset(self.tables)


FILTER_GROUPS: tuple[FilterGroup, ...] = (
    FilterGroup("Projects", (EntityKind.PROJECTS,), "info-circle", "sky"),
    FilterGroup("Tasks", (EntityKind.TASKS, EntityKind.ASSIGNMENTS), "tasks", "orange"),
    FilterGroup(
        "Team",
        (EntityKind.PROJECT_MEMBERS, EntityKind.PENDING_PROJECT_INVITATIONS),
        "user-check",
        "teal",
    ),
    FilterGroup(
        "Content",
        (EntityKind.FILES, EntityKind.COMMENTS, EntityKind.MILESTONES),
        "file",
        "emerald",
    ),
    FilterGroup("Organization", (EntityKind.TASK_LABELS, EntityKind.USERS), "tag", "pink"),
)

ALL_TABLES: Selection = frozenset(EntityKind)


def group_for(table: EntityKind) -> FilterGroup:
    """The single group a table belongs to."""
    for group in FILTER_GROUPS:
        if table in group.tables:
            return group
    msg = f"Table {table.value} belongs to no filter group"
    raise LookupError(msg)


def is_group_fully_selected(group: FilterGroup, selection: Iterable[EntityKind]) -> bool:
    return group.member_tables <= frozenset(selection)


def is_group_partially_selected(group: FilterGroup, selection: Iterable[EntityKind]) -> bool:
    """At least one member selected (so fully selected implies partially selected)."""
    return not group.member_tables.isdisjoint(selection)


def group_state(group: FilterGroup, selection: Iterable[EntityKind]) -> SelectionState:
    """Tri-state indicator for a group checkbox."""
    selected = frozenset(selection)
    if is_group_fully_selected(group, selected):
        return SelectionState.ALL
    if is_group_partially_selected(group, selected):
        return SelectionState.SOME
    return SelectionState.NONE


def toggle_table(selection: Iterable[EntityKind], table: EntityKind) -> Selection:
    return frozenset(selection) ^ {table}


def toggle_group(selection: Iterable[EntityKind], tables: Iterable[EntityKind]) -> Selection:
    """Deselect every member if all are selected, otherwise select them all."""
    selected = frozenset(selection)
    members = frozenset(tables)
    if members <= selected:
        return selected - members
    return selected | members


def ordered(selection: Iterable[EntityKind]) -> list[EntityKind]:
    """Selection in canonical EntityKind order, for stable query params."""
    selected = frozenset(selection)
    return [kind for kind in EntityKind if kind in selected]
