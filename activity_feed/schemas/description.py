"""Render-agnostic description schemas.

A Description is a template sentence (literal text plus typed placeholders)
and an ordered list of field changes. The UI decides how links look; the
engine only decides where they point.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from activity_feed.models.enums import LinkKind, SegmentKind

EMPTY_VALUE = "(empty)"


class Link(BaseModel):
    """A resolved navigation target."""

    model_config = ConfigDict(frozen=True)

    kind: LinkKind
    path: str
    label: str


class Segment(BaseModel):
    """One piece of a template sentence.

    ``link`` is only set on link placeholders whose target resolved; an
    unresolved placeholder keeps ``link=None`` and renders ``text`` as plain text.
    """

    model_config = ConfigDict(frozen=True)

    kind: SegmentKind
    text: str
    link: Link | None = None

    @property
    def is_link(self) -> bool:
        return self.link is not None


class ChangeField(BaseModel):
    """One field-level before -> after difference."""

    model_config = ConfigDict(frozen=True)

    field: str
    old_value: Any = EMPTY_VALUE
    new_value: Any = EMPTY_VALUE


class Description(BaseModel):
    """Structured, human-readable account of one log record."""

    model_config = ConfigDict(frozen=True)

    sentence: list[Segment]
    changes: list[ChangeField] = Field(default_factory=list)
    connection: list[Segment] | None = None  # e.g. "Part of: <parent task>"
    subject: str | None = None               # who the sentence is about, when it has one

    def render_text(self) -> str:
        """Flatten to plain text (links render as their label)."""
        text = _join(self.sentence)
        if self.changes:
            lines = [f"{text}:"]
            lines.extend(f"  - {c.field}: {c.old_value} -> {c.new_value}" for c in self.changes)
            text = "\n".join(lines)
        if self.connection:
            text = f"{text}\n  {_join(self.connection)}"
        return text

    @property
    def links(self) -> list[Link]:
        segments = [*self.sentence, *(self.connection or [])]
        return [s.link for s in segments if s.link is not None]


def _join(segments: list[Segment]) -> str:
    return "".join(s.text for s in segments).strip()
