"""Wire schemas for the project-management log API.

The API returns change-log rows joined with the actor (``changed_by_*``)
and side-loads per-table context under ad hoc keys. Parsing moves that
context into ``LogRecord.related_entities`` keyed by EntityKind.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from activity_feed.models.enums import EntityKind
from activity_feed.schemas.log import Actor, LogRecord, Snapshot

logger = logging.getLogger(__name__)

# API side-load key -> relation kind
RELATION_KEYS: dict[str, EntityKind] = {
    "assignment": EntityKind.ASSIGNMENTS,
    "comment": EntityKind.COMMENTS,
    "milestone": EntityKind.MILESTONES,
    "file": EntityKind.FILES,
    "projectMember": EntityKind.PROJECT_MEMBERS,
    "task_label": EntityKind.TASK_LABELS,
    "task": EntityKind.TASKS,
    "user": EntityKind.USERS,
}


class LogPage(BaseModel):
    """One fetched page: records in server order plus the server's has-more flag."""

    records: list[LogRecord]
    has_more: bool


def _snapshot(value: Any) -> Snapshot | None:
    return value if isinstance(value, dict) else None


def _project_relation(raw: dict[str, Any]) -> Snapshot | None:
    """Related project from the flat ``projectName`` the API attaches."""
    name = raw.get("projectName") or raw.get("project_name")
    if not name:
        return None
    new, old = _snapshot(raw.get("new_data")) or {}, _snapshot(raw.get("old_data")) or {}
    key = "id" if str(raw.get("table_name", "")).lower() == EntityKind.PROJECTS.value else "project_id"
    project_id = raw.get("project_id") or new.get(key) or old.get(key)
    return {"id": project_id, "name": name}


def parse_log_record(raw: Any) -> LogRecord:
    """Build a LogRecord from one API row.

    Never raises: a row that fails validation becomes a placeholder record
    (keeping its id when present) so it still takes a slot in the feed.
    """
    if not isinstance(raw, dict):
        logger.warning("Skipping non-object log row: %r", type(raw).__name__)
        return LogRecord()

    related: dict[EntityKind, Snapshot | None] = {
        kind: _snapshot(raw.get(key)) for key, kind in RELATION_KEYS.items() if key in raw
    }
    related[EntityKind.PROJECTS] = _project_relation(raw)

    try:
        return LogRecord(
            id=raw.get("id"),
            table_name=raw.get("table_name"),
            operation=raw.get("operation"),
            old_data=_snapshot(raw.get("old_data")),
            new_data=_snapshot(raw.get("new_data")),
            actor=Actor(name=raw.get("changed_by_name"), email=raw.get("changed_by_email")),
            created_at=raw.get("created_at"),
            related_entities=related,
        )
    except ValidationError:
        logger.warning("Invalid log row %s, keeping placeholder", raw.get("id"), exc_info=True)
        return LogRecord(id=raw.get("id"), table_name=raw.get("table_name"), operation=raw.get("operation"))


def parse_log_page(payload: Any) -> LogPage:
    """Parse the ``data`` element of the API envelope: ``[records, hasMore]``.

    Raises:
        ValueError: If the payload is not a two-element [list, bool] pair.
    """
    if not isinstance(payload, list | tuple) or len(payload) != 2:
        msg = f"Unexpected log page payload: {type(payload).__name__}"
        raise ValueError(msg)
    rows, has_more = payload
    if not isinstance(rows, list):
        msg = "Log page records must be a list"
        raise ValueError(msg)
    return LogPage(records=[parse_log_record(row) for row in rows], has_more=bool(has_more))
