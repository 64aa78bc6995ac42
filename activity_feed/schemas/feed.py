"""Pydantic schemas for what the feed exposes upward to the UI layer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from activity_feed.models.enums import EntityKind
from activity_feed.schemas.description import Description
from activity_feed.schemas.log import LogRecord


class FeedItem(BaseModel):
    """One renderable feed entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    icon_key: str
    color_class: str
    description: Description
    actor_display: str
    timestamp: str | None = None   # "MMM d, yyyy h:mm a"
    extra_detail: str | None = None


class FeedState(BaseModel):
    """Snapshot of the feed controller's state."""

    records: list[LogRecord] = Field(default_factory=list)
    has_more: bool = True
    loading: bool = False
    loading_more: bool = False
    error: str | None = None
    limit: int = 20
    selected_tables: frozenset[EntityKind] = Field(default_factory=frozenset)
