"""Static per-entity display data: labels, icon keys and color tokens."""

from __future__ import annotations

from activity_feed.models.enums import EntityKind, Operation

# Singular display labels, also used for filter checkboxes and chips
ENTITY_DISPLAY_NAMES: dict[EntityKind, str] = {
    EntityKind.PROJECTS: "Project",
    EntityKind.TASKS: "Task",
    EntityKind.PROJECT_MEMBERS: "Project Member",
    EntityKind.FILES: "File",
    EntityKind.ASSIGNMENTS: "Task Assignment",
    EntityKind.PENDING_PROJECT_INVITATIONS: "Project Invitation",
    EntityKind.COMMENTS: "Comment",
    EntityKind.MILESTONES: "Milestone",
    EntityKind.TASK_LABELS: "Task Label",
    EntityKind.USERS: "User",
}

ENTITY_ICONS: dict[EntityKind, str] = {
    EntityKind.PROJECTS: "info-circle",
    EntityKind.TASKS: "tasks",
    EntityKind.PROJECT_MEMBERS: "user-plus",
    EntityKind.FILES: "file",
    EntityKind.ASSIGNMENTS: "user-check",
    EntityKind.PENDING_PROJECT_INVITATIONS: "envelope",
    EntityKind.COMMENTS: "comment",
    EntityKind.MILESTONES: "flag",
    EntityKind.TASK_LABELS: "tag",
    EntityKind.USERS: "user",
}

ENTITY_COLORS: dict[EntityKind, str] = {
    EntityKind.PROJECTS: "sky",
    EntityKind.TASKS: "orange",
    EntityKind.PROJECT_MEMBERS: "teal",
    EntityKind.FILES: "emerald",
    EntityKind.ASSIGNMENTS: "indigo",
    EntityKind.PENDING_PROJECT_INVITATIONS: "purple",
    EntityKind.COMMENTS: "amber",
    EntityKind.MILESTONES: "fuchsia",
    EntityKind.TASK_LABELS: "pink",
    EntityKind.USERS: "gray",
}

_USER_ICONS: dict[Operation, str] = {
    Operation.INSERT: "user-check",
    Operation.UPDATE: "user-edit",
    Operation.DELETE: "user-slash",
}

DEFAULT_ICON = "info-circle"
DEFAULT_COLOR = "gray"


def display_name(table_name: str) -> str:
    """Singular label for a table; unknown tables show their raw name."""
    kind = EntityKind.parse(table_name)
    return ENTITY_DISPLAY_NAMES[kind] if kind else table_name


def icon_for(kind: EntityKind | None, operation: Operation | None) -> str:
    if kind is None:
        return DEFAULT_ICON
    if kind is EntityKind.PROJECT_MEMBERS:
        return "user-plus" if operation is Operation.INSERT else "user-minus"
    if kind is EntityKind.USERS:
        return _USER_ICONS.get(operation, "user")
    return ENTITY_ICONS[kind]


def color_for(kind: EntityKind | None) -> str:
    return ENTITY_COLORS[kind] if kind else DEFAULT_COLOR
