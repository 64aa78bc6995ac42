"""Domain enums shared by schemas, describers, resolvers and the feed controller.

All enums use the str mixin so values serialize straight into query params and JSON.
"""

from __future__ import annotations

from enum import Enum


class EntityKind(str, Enum):
    """The ten audited tables the activity log can describe."""

    PROJECTS = "projects"
    TASKS = "tasks"
    PROJECT_MEMBERS = "project_members"
    FILES = "files"
    ASSIGNMENTS = "assignments"
    PENDING_PROJECT_INVITATIONS = "pending_project_invitations"
    COMMENTS = "comments"
    MILESTONES = "milestones"
    TASK_LABELS = "task_labels"
    USERS = "users"

    @classmethod
    def parse(cls, value: str | None) -> EntityKind | None:
        """Return the kind for a raw table name, or None for unknown tables."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Operation(str, Enum):
    """Row operation recorded by the audit trigger."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: str | None) -> Operation | None:
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class LinkKind(str, Enum):
    """Navigation targets a description can point at."""

    PROJECT = "project"
    TASK = "task"
    MILESTONE = "milestone"
    FILE = "file"
    LABEL = "label"
    PROFILE = "profile"


class SegmentKind(str, Enum):
    """Pieces of a description template."""

    TEXT = "text"                    # literal sentence text
    PLAIN_TEXT = "plain_text"        # emphasised name without a link
    PROJECT_LINK = "project_link"
    TASK_LINK = "task_link"
    MILESTONE_LINK = "milestone_link"
    FILE_LINK = "file_link"
    LABEL_LINK = "label_link"
    PROFILE_LINK = "profile_link"


class SelectionState(str, Enum):
    """Tri-state indicator for a filter group."""

    NONE = "none"
    SOME = "some"
    ALL = "all"
