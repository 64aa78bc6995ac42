"""Identity resolver: "You" / "They" / a literal name, relative to the viewer.

Registered users are matched by id when both ids are known. Pending invitees
have no id until they register, so anything carrying only an email is matched
by email.
"""

from __future__ import annotations

from activity_feed.models.enums import EntityKind
from activity_feed.schemas.log import Identity, LogRecord

YOU = "You"
THEY = "They"
UNKNOWN_USER = "Unknown user"

# Tables whose records may lack a direct actor; attribution falls back to the inviter.
_INVITER_FALLBACK_KINDS = frozenset({EntityKind.PROJECT_MEMBERS, EntityKind.PENDING_PROJECT_INVITATIONS})


def is_viewer(viewer: Identity | None, user_id: object = None, email: str | None = None) -> bool:
    """Whether a subject (by id and/or email) is the current viewer."""
    if viewer is None:
        return False
    if user_id is not None and viewer.id is not None:
        return str(user_id) == viewer.id
    if email and viewer.email:
        return email.strip().lower() == viewer.email.strip().lower()
    return False


def display_name(
    viewer: Identity | None,
    *,
    user_id: object = None,
    email: str | None = None,
    name: str | None = None,
) -> str:
    """"You" for the viewer, "Name (email)" when both are known, else "Unknown user"."""
    if is_viewer(viewer, user_id=user_id, email=email):
        return YOU
    if name and email:
        return f"{name} ({email})"
    return UNKNOWN_USER


def pronoun(viewer: Identity | None, *, user_id: object = None, email: str | None = None) -> str:
    """Subject pronoun: "You" for the viewer, "They" for anyone else."""
    return YOU if is_viewer(viewer, user_id=user_id, email=email) else THEY


def possessive(viewer: Identity | None, *, user_id: object = None, email: str | None = None) -> str:
    return "your" if is_viewer(viewer, user_id=user_id, email=email) else "their"


def changed_by_display(record: LogRecord, viewer: Identity | None) -> str:
    """Attribution line for who made the change.

    ``users`` records are attributed to the account itself. Member and
    invitation records without a ``changed_by`` join fall back to the
    inviter fields of the related member snapshot.
    """
    if record.kind is EntityKind.USERS:
        user_email = record.related_field(EntityKind.USERS, "email") or record.field("email")
        if is_viewer(viewer, email=user_email):
            return YOU
        return display_name(
            viewer,
            email=user_email,
            name=record.related_field(EntityKind.USERS, "name") or record.field("name"),
        )

    name = record.actor.name
    email = record.actor.email
    if (not name or not email) and record.kind in _INVITER_FALLBACK_KINDS:
        name = record.related_field(EntityKind.PROJECT_MEMBERS, "inviter_user_name")
        email = record.related_field(EntityKind.PROJECT_MEMBERS, "inviter_user_email")

    return display_name(viewer, email=email, name=name)
