"""Per-entity describe rules.

Each function takes a LogRecord and the viewer and returns a Description.
Pure Python, deterministic: no I/O, no shared state. Dispatch is by
EntityKind through ENTITY_RULES, then by operation inside each rule, with a
"Modified ..." branch for any operation that isn't insert/update/delete.

The Field Differ only runs in update branches; insert and delete have
nothing to compare against.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from activity_feed.describers.entities import display_name
from activity_feed.diffing import FieldSpec, Normalization, diff_fields
from activity_feed.models.enums import EntityKind, Operation, SegmentKind
from activity_feed.resolvers import links
from activity_feed.resolvers.identity import is_viewer, possessive, pronoun
from activity_feed.schemas.description import ChangeField, Description, Link, Segment
from activity_feed.schemas.log import Identity, LogRecord

Describer = Callable[[LogRecord, Identity | None], Description]


class MalformedRecordError(Exception):
    """Raised when a record lacks data its rule cannot do without."""

    def __init__(self, message: str, record_id: str) -> None:
        super().__init__(message)
        self.record_id = record_id


@dataclass(frozen=True)
class EntityRule:
    """Describe function plus the columns its update branch diffs."""

    kind: EntityKind
    field_specs: tuple[FieldSpec, ...]
    describe: Describer


# ── Field specs ──────────────────────────────────────────────────────

PROJECT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("name", "name", Normalization.TEXT),
    FieldSpec("description", "description", Normalization.TEXT),
)

TASK_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("title", "title"),
    FieldSpec("description", "description"),
    FieldSpec("status", "status"),
    FieldSpec("priority", "priority"),
    FieldSpec("due_date", "due date", Normalization.DATE),
    FieldSpec("milestone_id", "milestone"),
    FieldSpec("attachments_count", "attachments", Normalization.COUNT),
)

PROJECT_MEMBER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("role", "role"),
    FieldSpec("status", "status"),
)

COMMENT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("comment", "text", Normalization.TEXT),
)

MILESTONE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("name", "name"),
    FieldSpec("description", "description"),
    FieldSpec("due_date", "due date", Normalization.DATE),
    FieldSpec("all_tasks_count", "total tasks", Normalization.COUNT),
    FieldSpec("completed_tasks_count", "completed tasks", Normalization.COUNT),
)

USER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("name", "name"),
    FieldSpec("email", "email"),
    FieldSpec("premium_start_date", "premium start date", Normalization.DATETIME),
    FieldSpec("premium_end_date", "premium end date", Normalization.DATETIME),
)


# ── Template helpers ─────────────────────────────────────────────────


def _text(value: str) -> Segment:
    return Segment(kind=SegmentKind.TEXT, text=value)


def _plain(value: str) -> Segment:
    return Segment(kind=SegmentKind.PLAIN_TEXT, text=value)


def _link(kind: SegmentKind, link: Link | None, fallback: str) -> Segment:
    """Link placeholder; degrades to plain text when the target didn't resolve."""
    if link is None:
        return Segment(kind=kind, text=fallback)
    return Segment(kind=kind, text=link.label, link=link)


def _sentence(*parts: str | Segment) -> list[Segment]:
    return [_text(p) if isinstance(p, str) else p for p in parts]


def _project(record: LogRecord) -> Segment:
    return _link(
        SegmentKind.PROJECT_LINK,
        links.resolve_project(record),
        links.project_name(record) or "unknown project",
    )


def _task(record: LogRecord) -> Segment:
    return _link(
        SegmentKind.TASK_LINK,
        links.resolve_task(record),
        links.task_title(record) or "unknown task",
    )


def _milestone(record: LogRecord) -> Segment:
    return _link(
        SegmentKind.MILESTONE_LINK,
        links.resolve_milestone(record),
        links.milestone_title(record) or "unknown milestone",
    )


def _file(record: LogRecord) -> Segment:
    return _link(SegmentKind.FILE_LINK, links.resolve_file(record), links.file_title(record) or "Unnamed File")


def _label(record: LogRecord) -> Segment:
    name = record.related_field(EntityKind.TASK_LABELS, "label_name") or "Unnamed Label"
    return _link(SegmentKind.LABEL_LINK, links.resolve_label(record), name)


def _profile(label: str) -> Segment:
    return _link(SegmentKind.PROFILE_LINK, links.profile_link(label), label)


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _update(
    record: LogRecord,
    specs: tuple[FieldSpec, ...],
    sentence: list[Segment],
    *,
    unchanged: list[Segment] | None = None,
    **extra: Any,
) -> Description:
    """Update branch: sentence + change list, or the no-field-list variant."""
    changes: list[ChangeField] = diff_fields(record.old_data, record.new_data, specs)
    if not changes:
        return Description(sentence=unchanged or sentence, **extra)
    return Description(sentence=sentence, changes=changes, **extra)


# ── assignments ──────────────────────────────────────────────────────


def describe_assignment(record: LogRecord, viewer: Identity | None) -> Description:
    user_id = _first(record.related_field(EntityKind.ASSIGNMENTS, "user_id"), record.field("user_id"))
    user_email = record.related_field(EntityKind.ASSIGNMENTS, "user_email")
    is_you = is_viewer(viewer, user_id=user_id, email=user_email)
    subject = "you" if is_you else (record.related_field(EntityKind.ASSIGNMENTS, "user_name") or "Unknown User")

    op = record.op
    if op is Operation.INSERT:
        if is_you:
            sentence = _sentence("You were assigned to task ", _task(record), " in project ", _project(record))
        else:
            sentence = _sentence(
                "Assigned ", _plain(subject), " to task ", _task(record), " in project ", _project(record),
            )
    elif op is Operation.DELETE:
        if is_you:
            sentence = _sentence("You were unassigned from task ", _task(record), " in project ", _project(record))
        else:
            sentence = _sentence(
                "Unassigned ", _plain(subject), " from task ", _task(record), " in project ", _project(record),
            )
    else:
        sentence = _sentence("Modified assignment for ", _plain(subject))

    return Description(sentence=sentence, subject=subject)


# ── pending_project_invitations ──────────────────────────────────────


def describe_invitation(record: LogRecord, viewer: Identity | None) -> Description:
    # Invitees may not be registered yet, so match on email only
    email = record.field("email")
    is_you = is_viewer(viewer, email=email)
    subject = "you" if is_you else (email or "Unknown Email")

    op = record.op
    if op is Operation.INSERT:
        if is_you:
            sentence = _sentence("You were invited to project ", _project(record))
        else:
            sentence = _sentence("Sent invitation to ", _plain(subject), " for project ", _project(record))
    elif op is Operation.DELETE:
        if is_you:
            sentence = _sentence("Your invitation to project ", _project(record), " was cancelled")
        else:
            sentence = _sentence("Cancelled invitation to ", _plain(subject), " for project ", _project(record))
    else:
        sentence = _sentence("Modified invitation for ", _plain(subject))

    return Description(sentence=sentence, subject=subject)


# ── comments ─────────────────────────────────────────────────────────


def describe_comment(record: LogRecord, viewer: Identity | None) -> Description:
    op = record.op
    if op is Operation.INSERT:
        return Description(sentence=_sentence(
            "Wrote a comment on task ", _task(record), " in project ", _project(record),
        ))
    if op is Operation.UPDATE:
        return _update(
            record,
            COMMENT_FIELDS,
            _sentence("Updated comment on task ", _task(record), " in project ", _project(record)),
            unchanged=_sentence("Updated a comment on task ", _task(record), " in project ", _project(record)),
        )
    if op is Operation.DELETE:
        return Description(sentence=_sentence(
            "Deleted a comment from task ", _task(record), " in project ", _project(record),
        ))
    return Description(sentence=_sentence("Modified comment in project ", _project(record)))


# ── milestones ───────────────────────────────────────────────────────


def describe_milestone(record: LogRecord, viewer: Identity | None) -> Description:
    op = record.op
    if op is Operation.INSERT:
        return Description(sentence=_sentence(
            "Created milestone ", _milestone(record), " in project ", _project(record),
        ))
    if op is Operation.UPDATE:
        return _update(
            record,
            MILESTONE_FIELDS,
            _sentence("Updated milestone ", _milestone(record), " in project ", _project(record)),
        )
    if op is Operation.DELETE:
        title = links.milestone_title(record) or "unknown milestone"
        return Description(sentence=_sentence(
            "Deleted milestone ", _plain(title), " from project ", _project(record),
        ))
    return Description(sentence=_sentence(
        "Modified milestone ", _milestone(record), " in project ", _project(record),
    ))


# ── files ────────────────────────────────────────────────────────────


def describe_file(record: LogRecord, viewer: Identity | None) -> Description:
    # Attachments live on a task, everything else on the project
    if record.field("task_id") is not None:
        context = ("task", _task(record))
    else:
        context = ("project", _project(record))
    noun, target = context

    op = record.op
    if op is Operation.INSERT:
        sentence = _sentence("Uploaded file ", _file(record), f" to {noun} ", target)
    elif op is Operation.UPDATE:
        sentence = _sentence("Updated file ", _file(record), f" to {noun} ", target)
    elif op is Operation.DELETE:
        sentence = _sentence("Deleted file ", _file(record), f" from {noun} ", target)
    else:
        sentence = _sentence("Modified file ", _file(record))
    return Description(sentence=sentence)


# ── project_members ──────────────────────────────────────────────────


def describe_project_member(record: LogRecord, viewer: Identity | None) -> Description:
    # Membership identity lives in the side-loaded relation, not the changed columns
    member = record.related(EntityKind.PROJECT_MEMBERS)
    op = record.op
    if member is None and op in (Operation.INSERT, Operation.DELETE):
        raise MalformedRecordError("project_members record without related member", record.id)
    member = member or {}

    user_name = member.get("user_name") or "a member"
    user_email = member.get("user_email")
    member_label = f"{user_name} ({user_email})" if user_email else user_name
    is_you = is_viewer(viewer, user_id=member.get("user_id"), email=user_email)
    subject = "you" if is_you else user_name

    if op is Operation.INSERT:
        if is_you:
            sentence = _sentence("You joined project ", _project(record))
        else:
            inviter_is_you = is_viewer(
                viewer,
                user_id=member.get("inviter_user_id"),
                email=member.get("inviter_user_email"),
            )
            inviter = "You" if inviter_is_you else (member.get("inviter_user_name") or "Someone")
            sentence = _sentence(f"{inviter} invited ", _plain(member_label), " to project ", _project(record))
        return Description(sentence=sentence, subject=subject)

    if op is Operation.DELETE:
        return Description(
            sentence=_sentence("Removed ", _plain(member_label), " from project ", _project(record)),
            subject=subject,
        )

    if op is Operation.UPDATE:
        return _update(
            record,
            PROJECT_MEMBER_FIELDS,
            _sentence("Updated ", _plain(user_name), "'s membership in project ", _project(record)),
            subject=subject,
        )

    return Description(
        sentence=_sentence("Modified ", _plain(user_name), "'s membership in project ", _project(record)),
        subject=subject,
    )


# ── task_labels ──────────────────────────────────────────────────────


def describe_task_label(record: LogRecord, viewer: Identity | None) -> Description:
    # Label associations are atomic: no field diff
    op = record.op
    if op is Operation.INSERT:
        sentence = _sentence(
            "Added label ", _label(record), " to task ", _task(record), " in project ", _project(record),
        )
    elif op is Operation.DELETE:
        sentence = _sentence(
            "Removed label ", _label(record), " from task ", _task(record), " in project ", _project(record),
        )
    else:
        sentence = _sentence(
            "Modified label ", _label(record), " on task ", _task(record), " in project ", _project(record),
        )
    return Description(sentence=sentence)


# ── projects ─────────────────────────────────────────────────────────


def describe_project(record: LogRecord, viewer: Identity | None) -> Description:
    op = record.op
    if op is Operation.INSERT:
        return Description(sentence=_sentence("Created project ", _project(record)))
    if op is Operation.UPDATE:
        return _update(record, PROJECT_FIELDS, _sentence("Updated project ", _project(record)))
    if op is Operation.DELETE:
        return Description(sentence=_sentence("Deleted project ", _project(record)))
    return Description(sentence=_sentence("Modified project ", _project(record)))


# ── tasks ────────────────────────────────────────────────────────────


def parent_task_connection(record: LogRecord) -> list[Segment] | None:
    """"Part of: <parent>" fragment for subtasks, None for top-level tasks."""
    parent_id = _first(
        record.related_field(EntityKind.TASKS, "parent_task_id"),
        record.field("parent_task_id"),
    )
    if not parent_id:
        return None
    fallback = record.related_field(EntityKind.TASKS, "parent_task_title") or "Parent Task"
    return _sentence("Part of: ", _link(SegmentKind.TASK_LINK, links.resolve_parent_task(record), fallback))


def _milestone_renderer(record: LogRecord) -> Callable[[Any], str]:
    """Display a milestone id as its name using the side-loaded task relation."""
    current_id = _first(record.related_field(EntityKind.TASKS, "milestone_id"), record.new("milestone_id"))
    current_name = record.related_field(EntityKind.TASKS, "milestone_name")
    previous_name = record.related_field(EntityKind.TASKS, "old_milestone_name")

    def render(value: Any) -> str:
        if value in (None, ""):
            return "none"
        if current_name and current_id is not None and str(value) == str(current_id):
            return current_name
        if previous_name and str(value) == str(record.old("milestone_id")):
            return previous_name
        return "unknown milestone"

    return render


def task_field_specs(record: LogRecord) -> tuple[FieldSpec, ...]:
    """TASK_FIELDS with the milestone column bound to this record's names."""
    render = _milestone_renderer(record)
    return tuple(
        replace(spec, render=render) if spec.column == "milestone_id" else spec
        for spec in TASK_FIELDS
    )


def _describe_task_sentence(record: LogRecord, noun: str) -> Description:
    op = record.op
    if op is Operation.INSERT:
        return Description(sentence=_sentence(f"Added {noun} ", _task(record), " to project ", _project(record)))
    if op is Operation.UPDATE:
        return _update(
            record,
            task_field_specs(record),
            _sentence(f"Updated {noun} ", _task(record), " in project ", _project(record)),
        )
    if op is Operation.DELETE:
        title = _first(record.old("title"), links.task_title(record)) or "unknown task"
        return Description(sentence=_sentence(f"Deleted {noun} ", _plain(title), " from project ", _project(record)))
    return Description(sentence=_sentence(f"Modified {noun} ", _task(record), " in project ", _project(record)))


def describe_task(record: LogRecord, viewer: Identity | None) -> Description:
    connection = parent_task_connection(record)
    noun = "subtask" if connection else "task"
    description = _describe_task_sentence(record, noun)
    if connection is None:
        return description
    return description.model_copy(update={"connection": connection})


# ── users ────────────────────────────────────────────────────────────


def _flipped(record: LogRecord, column: str) -> bool:
    return bool(record.old(column)) != bool(record.new(column))


def describe_user(record: LogRecord, viewer: Identity | None) -> Description:
    email = _first(record.related_field(EntityKind.USERS, "email"), record.field("email"))
    you = pronoun(viewer, email=email)
    your = possessive(viewer, email=email)
    subject = you.lower()

    op = record.op
    # First match wins, independent of the generic field diff
    if op is Operation.INSERT:
        sentence = _sentence(f"{you} created an ", _profile("account"))
    elif op is Operation.DELETE:
        sentence = _sentence(f"{you} deleted ", _profile(f"{your} account"))
    elif op is not Operation.UPDATE:
        sentence = _sentence(f"{you} modified {your} ", _profile("profile"))
    elif _flipped(record, "is_premium"):
        if record.new("is_premium"):
            sentence = _sentence(f"{you} upgraded to ", _profile("Premium"))
        else:
            sentence = _sentence(f"{you} downgraded to ", _profile("Free plan"))
    elif _flipped(record, "user_cancelled_premium"):
        verb = "cancelled" if record.new("user_cancelled_premium") else "reactivated"
        sentence = _sentence(f"{you} {verb} {your} ", _profile("Premium"), " subscription")
    else:
        return _update(
            record,
            USER_FIELDS,
            _sentence(f"{you} updated {your} ", _profile("profile")),
            subject=subject,
        )

    return Description(sentence=sentence, subject=subject)


# ── default / unknown tables ─────────────────────────────────────────


def item_name(record: LogRecord) -> str:
    """Best human name for a record: relation name, then name/title columns, then "item"."""
    relation = record.related(record.kind) if record.kind else None
    return _first(
        (relation or {}).get("name"),
        (relation or {}).get("title"),
        record.new("name"),
        record.old("name"),
        record.new("title"),
        record.old("title"),
    ) or "item"


def describe_generic(record: LogRecord, viewer: Identity | None) -> Description:
    """Fallback for unknown tables and records a specific rule can't handle."""
    item_type = display_name(record.table_name) or "record"
    name = item_name(record)

    op = record.op
    if op is Operation.INSERT:
        sentence = _sentence(f'Added {item_type} "{name}" to project ', _project(record))
    elif op is Operation.UPDATE:
        sentence = _sentence(f'Updated {item_type} "{name}" in project ', _project(record))
    elif op is Operation.DELETE:
        sentence = _sentence(f'Deleted {item_type} "{name}" from project ', _project(record))
    else:
        sentence = _sentence(f"Modified {item_type} in project ", _project(record))
    return Description(sentence=sentence)


# ── Registry ─────────────────────────────────────────────────────────

ENTITY_RULES: dict[EntityKind, EntityRule] = {
    EntityKind.PROJECTS: EntityRule(EntityKind.PROJECTS, PROJECT_FIELDS, describe_project),
    EntityKind.TASKS: EntityRule(EntityKind.TASKS, TASK_FIELDS, describe_task),
    EntityKind.PROJECT_MEMBERS: EntityRule(EntityKind.PROJECT_MEMBERS, PROJECT_MEMBER_FIELDS, describe_project_member),
    EntityKind.FILES: EntityRule(EntityKind.FILES, (), describe_file),
    EntityKind.ASSIGNMENTS: EntityRule(EntityKind.ASSIGNMENTS, (), describe_assignment),
    EntityKind.PENDING_PROJECT_INVITATIONS: EntityRule(
        EntityKind.PENDING_PROJECT_INVITATIONS, (), describe_invitation,
    ),
    EntityKind.COMMENTS: EntityRule(EntityKind.COMMENTS, COMMENT_FIELDS, describe_comment),
    EntityKind.MILESTONES: EntityRule(EntityKind.MILESTONES, MILESTONE_FIELDS, describe_milestone),
    EntityKind.TASK_LABELS: EntityRule(EntityKind.TASK_LABELS, (), describe_task_label),
    EntityKind.USERS: EntityRule(EntityKind.USERS, USER_FIELDS, describe_user),
}
