"""Link resolver: canonical navigation targets derived from a log record.

Lookup order for every identifying field:
    1. the side-loaded related snapshot(s)
    2. new_data, then old_data (delete records only carry old_data)

Hard rule: no Link is built without its own id AND the enclosing project id
(plus the task id for task-scoped targets). A missing piece yields None and
the caller renders plain text instead of a dead link.
"""

from __future__ import annotations

from typing import Any

from activity_feed.models.enums import EntityKind, LinkKind
from activity_feed.schemas.description import Link
from activity_feed.schemas.log import LogRecord

PROFILE_PATH = "/profile"

# Relations that carry task context, in lookup order.
_TASK_RELATIONS: tuple[EntityKind, ...] = (
    EntityKind.ASSIGNMENTS,
    EntityKind.TASKS,
    EntityKind.TASK_LABELS,
    EntityKind.COMMENTS,
    EntityKind.FILES,
)


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _own_then(record: LogRecord, relations: tuple[EntityKind, ...]) -> tuple[EntityKind, ...]:
    """Put the record's own relation first so its context wins."""
    own = record.kind
    if own in relations:
        return (own, *(k for k in relations if k is not own))
    return relations


# ── Field derivation ─────────────────────────────────────────────────


def project_id(record: LogRecord) -> str | None:
    own = record.kind
    from_relations = _first(
        record.related_field(EntityKind.PROJECTS, "id"),
        record.related_field(own, "project_id") if own else None,
    )
    if from_relations:
        return str(from_relations)
    if own is EntityKind.PROJECTS:
        raw = record.field("id")
    else:
        raw = record.field("project_id")
    return str(raw) if raw else None


def project_name(record: LogRecord) -> str | None:
    name = record.related_field(EntityKind.PROJECTS, "name")
    if name:
        return name
    if record.kind is EntityKind.PROJECTS:
        return record.field("name")
    return None


def task_id(record: LogRecord) -> str | None:
    relations = _own_then(record, _TASK_RELATIONS)
    value = _first(*(record.related_field(k, "task_id") for k in relations))
    if value is None:
        value = record.field("id") if record.kind is EntityKind.TASKS else record.field("task_id")
    return str(value) if value else None


def task_title(record: LogRecord) -> str | None:
    relations = _own_then(record, _TASK_RELATIONS)
    value = _first(*(record.related_field(k, "task_title") for k in relations))
    if value is None:
        value = record.field("title") if record.kind is EntityKind.TASKS else record.field("task_title")
    return value


def milestone_id(record: LogRecord) -> str | None:
    value = record.related_field(EntityKind.MILESTONES, "id")
    if value is None and record.kind is EntityKind.MILESTONES:
        value = record.field("id")
    return str(value) if value else None


def milestone_title(record: LogRecord) -> str | None:
    value = _first(
        record.related_field(EntityKind.MILESTONES, "title"),
        record.related_field(EntityKind.MILESTONES, "name"),
    )
    if value is None and record.kind is EntityKind.MILESTONES:
        value = _first(record.field("name"), record.field("title"))
    return value


def _file_field(record: LogRecord, related_key: str, raw_key: str) -> Any:
    value = record.related_field(EntityKind.FILES, related_key)
    if value is None and record.kind is EntityKind.FILES:
        value = record.field(raw_key)
    return value


def file_title(record: LogRecord) -> str | None:
    return _file_field(record, "title", "file_name")


# ── Resolution ───────────────────────────────────────────────────────


def resolve_project(record: LogRecord) -> Link | None:
    """``/projects/{id}`` labelled with the project name."""
    pid = project_id(record)
    name = project_name(record)
    if not pid or not name:
        return None
    return Link(kind=LinkKind.PROJECT, path=f"/projects/{pid}", label=name)


def resolve_task(record: LogRecord) -> Link | None:
    """``/projects/{project}/tasks/{task}``."""
    pid = project_id(record)
    tid = task_id(record)
    title = task_title(record)
    if not pid or not tid or not title:
        return None
    return Link(kind=LinkKind.TASK, path=f"/projects/{pid}/tasks/{tid}", label=title)


def resolve_parent_task(record: LogRecord) -> Link | None:
    """Link to the parent of a subtask; None for top-level tasks."""
    parent_id = _first(
        record.related_field(EntityKind.TASKS, "parent_task_id"),
        record.field("parent_task_id") if record.kind is EntityKind.TASKS else None,
    )
    pid = project_id(record)
    if not parent_id or not pid:
        return None
    title = record.related_field(EntityKind.TASKS, "parent_task_title") or "Parent Task"
    return Link(kind=LinkKind.TASK, path=f"/projects/{pid}/tasks/{parent_id}", label=title)


def resolve_milestone(record: LogRecord) -> Link | None:
    """``/projects/{project}/milestones/{milestone}``."""
    pid = project_id(record)
    mid = milestone_id(record)
    title = milestone_title(record)
    if not pid or not mid or not title:
        return None
    return Link(kind=LinkKind.MILESTONE, path=f"/projects/{pid}/milestones/{mid}", label=title)


def resolve_file(record: LogRecord) -> Link | None:
    """Task page for task attachments, the project's files tab otherwise."""
    fid = _file_field(record, "id", "id")
    pid = _first(_file_field(record, "project_id", "project_id"), project_id(record))
    if not fid or not pid:
        return None
    tid = _file_field(record, "task_id", "task_id")
    path = f"/projects/{pid}/tasks/{tid}" if tid else f"/projects/{pid}?files"
    return Link(kind=LinkKind.FILE, path=path, label=file_title(record) or "Unnamed File")


def resolve_label(record: LogRecord) -> Link | None:
    """The project's label manager."""
    label_id = _first(
        record.related_field(EntityKind.TASK_LABELS, "label_id"),
        record.field("label_id") if record.kind is EntityKind.TASK_LABELS else None,
    )
    pid = _first(record.related_field(EntityKind.TASK_LABELS, "project_id"), project_id(record))
    if not label_id or not pid:
        return None
    name = record.related_field(EntityKind.TASK_LABELS, "label_name") or "Unnamed Label"
    return Link(kind=LinkKind.LABEL, path=f"/projects/{pid}/tasks?labels", label=name)


def profile_link(label: str) -> Link:
    """The viewer's own profile page; always resolvable."""
    return Link(kind=LinkKind.PROFILE, path=PROFILE_PATH, label=label)
