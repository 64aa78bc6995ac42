"""Field differ: snapshot vs snapshot -> ordered list of ChangeFields.

Pure Python, deterministic. Output order follows the FieldSpec list, never
the key order of the snapshots, so identical inputs always produce identical
descriptions.

Comparison runs on normalized values BEFORE any display substitution:
    - missing / None / blank string  -> "no value" (all equal to each other)
    - dates                          -> formatted day (or minute), so two
                                        representations of one instant are equal
    - counts                         -> numbers (numeric strings coerced)
    - everything else                -> loose equality (5 == "5")
Only after a pair is known to differ are the display values produced:
"(empty)" / "none" substitution and truncation of long text on both sides.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from activity_feed.formatters import format_date, format_datetime, truncate
from activity_feed.schemas.description import EMPTY_VALUE, ChangeField
from activity_feed.schemas.log import Snapshot

NO_DATE = "none"


class Normalization(str, Enum):
    """How a column is compared and displayed."""

    PLAIN = "plain"
    TEXT = "text"            # long text, truncated for display
    DATE = "date"            # MMM d, yyyy
    DATETIME = "datetime"    # MMM d, yyyy H:mm
    COUNT = "count"          # raw number


@dataclass(frozen=True)
class FieldSpec:
    """One column that matters for an entity, and how to treat it.

    ``render`` overrides the display value of a changed side (it receives the
    raw column value, possibly None). It never takes part in comparison.
    """

    column: str
    label: str
    normalization: Normalization = Normalization.PLAIN
    render: Callable[[Any], Any] | None = None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_number(value: Any) -> Any:
    if isinstance(value, bool) or isinstance(value, int | float):
        return value
    try:
        text = str(value).strip()
        return int(text) if text.lstrip("-").isdigit() else float(text)
    except ValueError:
        return value


def _normalize(value: Any, normalization: Normalization) -> Any:
    """Comparison key for a raw column value. None means "no value"."""
    if _is_blank(value):
        return None
    if normalization is Normalization.DATE:
        return format_date(value) or str(value)
    if normalization is Normalization.DATETIME:
        return format_datetime(value) or str(value)
    if normalization is Normalization.COUNT:
        return _to_number(value)
    return value


def _loose_equal(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return a is None and b is None
    if type(a) is type(b):
        return a == b
    if isinstance(a, bool) or isinstance(b, bool):
        return str(a).lower() == str(b).lower()
    try:
        return float(a) == float(b)
    except (TypeError, ValueError):
        return str(a) == str(b)


def _display(value: Any, spec: FieldSpec) -> Any:
    if spec.render is not None:
        return spec.render(value)
    normalized = _normalize(value, spec.normalization)
    if spec.normalization in (Normalization.DATE, Normalization.DATETIME):
        return NO_DATE if normalized is None else normalized
    if normalized is None:
        return EMPTY_VALUE
    if spec.normalization is Normalization.TEXT:
        return truncate(str(normalized))
    return normalized


def diff_fields(
    old: Snapshot | None,
    new: Snapshot | None,
    field_specs: list[FieldSpec] | tuple[FieldSpec, ...],
) -> list[ChangeField]:
    """Compare two snapshots column by column.

    Args:
        old: Before-snapshot (None treated as empty).
        new: After-snapshot (None treated as empty).
        field_specs: Columns that matter, in display order.

    Returns:
        One ChangeField per differing column, in ``field_specs`` order.
        Empty when none of the listed columns changed.
    """
    old = old or {}
    new = new or {}
    changes: list[ChangeField] = []

    for spec in field_specs:
        before = old.get(spec.column)
        after = new.get(spec.column)
        if _loose_equal(_normalize(before, spec.normalization), _normalize(after, spec.normalization)):
            continue
        changes.append(ChangeField(
            field=spec.label,
            old_value=_display(before, spec),
            new_value=_display(after, spec),
        ))

    return changes
