"""Field differ: ordered, normalized before -> after changes between snapshots."""

from activity_feed.diffing.differ import FieldSpec, Normalization, diff_fields

__all__ = [
    "diff_fields",
    "FieldSpec",
    "Normalization",
]
