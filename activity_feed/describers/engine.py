"""Describer engine: dispatches a record to its entity rule and assembles feed items.

Never raises. An unknown table, a record without snapshots, or any failure
inside a rule degrades to the generic description so the record still
occupies its slot in the feed.
"""

from __future__ import annotations

import logging

from activity_feed.describers.details import extra_detail
from activity_feed.describers.entities import color_for, icon_for
from activity_feed.describers.rules import ENTITY_RULES, MalformedRecordError, describe_generic
from activity_feed.formatters import format_timestamp
from activity_feed.models.enums import SegmentKind
from activity_feed.resolvers.identity import changed_by_display
from activity_feed.schemas.description import Description, Segment
from activity_feed.schemas.feed import FeedItem
from activity_feed.schemas.log import Identity, LogRecord

logger = logging.getLogger(__name__)


def _last_resort(record: LogRecord) -> Description:
    return Description(sentence=[Segment(kind=SegmentKind.TEXT, text=f"Modified {record.table_name or 'record'}")])


def _generic(record: LogRecord, viewer: Identity | None) -> Description:
    try:
        return describe_generic(record, viewer)
    except Exception:
        logger.exception("Generic description failed for log %s", record.id)
        return _last_resort(record)


def describe(record: LogRecord, viewer: Identity | None) -> Description:
    """Turn a log record into a structured description for ``viewer``."""
    kind = record.kind
    if kind is None:
        logger.debug("Unknown table %r on log %s, using generic description", record.table_name, record.id)
        return _generic(record, viewer)
    if record.is_malformed:
        logger.warning("Log %s (%s) has no snapshots, using generic description", record.id, record.table_name)
        return _generic(record, viewer)

    rule = ENTITY_RULES[kind]
    try:
        return rule.describe(record, viewer)
    except MalformedRecordError as exc:
        logger.warning("Malformed log %s (%s): %s", exc.record_id, record.table_name, exc)
    except Exception:
        logger.exception("Describe rule for %s failed on log %s", kind.value, record.id)
    return _generic(record, viewer)


def build_feed_item(record: LogRecord, viewer: Identity | None) -> FeedItem:
    """Everything the UI needs to render one entry."""
    try:
        detail = extra_detail(record, viewer)
    except Exception:
        logger.exception("Extra detail failed for log %s", record.id)
        detail = None

    return FeedItem(
        id=record.id,
        icon_key=icon_for(record.kind, record.op),
        color_class=color_for(record.kind),
        description=describe(record, viewer),
        actor_display=changed_by_display(record, viewer),
        timestamp=format_timestamp(record.created_at),
        extra_detail=detail,
    )


def build_feed(records: list[LogRecord], viewer: Identity | None) -> list[FeedItem]:
    """Feed items in server order, one per record."""
    return [build_feed_item(record, viewer) for record in records]
