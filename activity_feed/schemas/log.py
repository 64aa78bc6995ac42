"""Pydantic schemas for raw audit-trail records and the viewing identity.

LogRecords are produced by the external log API and never mutated here.
Side-loaded context (names, titles, ids the join tables don't carry) lives in
``related_entities`` keyed by EntityKind, with None marking an absent relation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from activity_feed.models.enums import EntityKind, Operation

# Open column -> scalar mapping; no schema enforced at this layer.
Snapshot = dict[str, Any]


class Identity(BaseModel):
    """The signed-in viewer, used for "is this me" comparisons."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    email: str | None = None
    name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str | None:
        return None if v is None else str(v)


class Actor(BaseModel):
    """Who made the change, as joined by the API (``changed_by_*``)."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    email: str | None = None


class LogRecord(BaseModel):
    """One audit-trail entry for a single table mutation."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    table_name: str = ""
    operation: str = ""
    old_data: Snapshot | None = None
    new_data: Snapshot | None = None
    actor: Actor = Field(default_factory=Actor)
    created_at: datetime | None = None
    related_entities: dict[EntityKind, Snapshot | None] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("operation", "table_name", mode="before")
    @classmethod
    def normalize_token(cls, v: Any) -> str:
        """Lower-case and strip; the API sends INSERT/UPDATE/DELETE."""
        return "" if v is None else str(v).strip().lower()

    @field_validator("created_at", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> Any:
        if v is None or isinstance(v, datetime):
            return v
        try:
            return datetime.fromisoformat(str(v).replace("Z", "+00:00"))
        except ValueError:
            return None

    # ── Typed accessors ──────────────────────────────────────────────

    @property
    def kind(self) -> EntityKind | None:
        return EntityKind.parse(self.table_name)

    @property
    def op(self) -> Operation | None:
        return Operation.parse(self.operation)

    @property
    def is_malformed(self) -> bool:
        """True when neither snapshot is present."""
        return self.old_data is None and self.new_data is None

    def related(self, kind: EntityKind) -> Snapshot | None:
        """Side-loaded snapshot for ``kind``, or None when absent."""
        return self.related_entities.get(kind)

    def field(self, name: str) -> Any:
        """Most recent value of a column: new_data first, then old_data.

        Delete records only carry old_data, so they resolve from it.
        """
        for snapshot in (self.new_data, self.old_data):
            if snapshot:
                value = snapshot.get(name)
                if value not in (None, ""):
                    return value
        return None

    def related_field(self, kind: EntityKind, name: str) -> Any:
        snapshot = self.related(kind)
        if not snapshot:
            return None
        value = snapshot.get(name)
        return None if value == "" else value

    def old(self, name: str) -> Any:
        return (self.old_data or {}).get(name)

    def new(self, name: str) -> Any:
        return (self.new_data or {}).get(name)
