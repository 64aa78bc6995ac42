"""Secondary detail line shown under some feed entries."""

from __future__ import annotations

from activity_feed.formatters import format_timestamp
from activity_feed.models.enums import EntityKind, Operation
from activity_feed.resolvers.identity import YOU, is_viewer
from activity_feed.schemas.log import Identity, LogRecord


def _assignment_detail(record: LogRecord, viewer: Identity | None) -> str | None:
    assigned_at = format_timestamp(record.new("assigned_at"))
    if assigned_at is None:
        return None
    if is_viewer(viewer, email=record.related_field(EntityKind.ASSIGNMENTS, "assigned_by_email")):
        by = YOU
    else:
        by = record.related_field(EntityKind.ASSIGNMENTS, "assigned_by_name") or "Unknown"
    return f"Assigned by {by} on {assigned_at}"


def _invitation_detail(record: LogRecord, viewer: Identity | None) -> str:
    role = record.field("role") or "member"
    if is_viewer(viewer, email=record.actor.email):
        by = YOU
    else:
        by = record.new("inviter_name") or record.actor.name or "Unknown"
    return f"Invited as {role} by {by}"


def _member_detail(record: LogRecord, viewer: Identity | None) -> str | None:
    op = record.op
    if op is Operation.INSERT:
        return f"Joined as {record.field('role') or 'member'}"
    if op is Operation.UPDATE and record.old("role") != record.new("role") and record.new("role"):
        return f"Upgraded role to {record.new('role')}"
    return None


def extra_detail(record: LogRecord, viewer: Identity | None) -> str | None:
    """Who-assigned / invited-as / role line, or None when a kind has none."""
    kind = record.kind
    if kind is EntityKind.ASSIGNMENTS:
        return _assignment_detail(record, viewer)
    if kind is EntityKind.PENDING_PROJECT_INVITATIONS:
        return _invitation_detail(record, viewer)
    if kind is EntityKind.PROJECT_MEMBERS:
        return _member_detail(record, viewer)
    return None
