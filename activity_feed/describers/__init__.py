"""Entity describer: per-table, per-operation rules that turn log records into descriptions."""

from activity_feed.describers.engine import build_feed, build_feed_item, describe
from activity_feed.describers.entities import ENTITY_DISPLAY_NAMES, display_name
from activity_feed.describers.rules import ENTITY_RULES, EntityRule, MalformedRecordError

__all__ = [
    "describe",
    "build_feed",
    "build_feed_item",
    "display_name",
    "ENTITY_DISPLAY_NAMES",
    "ENTITY_RULES",
    "EntityRule",
    "MalformedRecordError",
]
