"""Tests for the field differ.

Covers:
- Only differing listed columns are reported, in FieldSpec order
- Blank / None / missing values compare equal and display as "(empty)"
- Loose equality (5 vs "5") and count coercion
- Dates compared by formatted day, displayed as "MMM d, yyyy" or "none"
- Long text truncated on both sides after comparison
- Render overrides never take part in comparison
"""

from __future__ import annotations

from activity_feed.diffing import FieldSpec, Normalization, diff_fields
from activity_feed.schemas.description import EMPTY_VALUE

SPECS = (
    FieldSpec("title", "title"),
    FieldSpec("status", "status"),
    FieldSpec("due_date", "due date", Normalization.DATE),
    FieldSpec("count", "attachments", Normalization.COUNT),
    FieldSpec("body", "text", Normalization.TEXT),
)


class TestMinimality:
    def test_identical_snapshots_produce_no_changes(self):
        snapshot = {"title": "A", "status": "open", "due_date": "2025-03-05", "count": 2, "body": "x"}
        assert diff_fields(snapshot, dict(snapshot), SPECS) == []

    def test_untracked_columns_ignored(self):
        assert diff_fields({"title": "A", "updated_at": "1"}, {"title": "A", "updated_at": "2"}, SPECS) == []

    def test_one_change_reported(self):
        changes = diff_fields({"title": "A", "status": "open"}, {"title": "A", "status": "done"}, SPECS)
        assert len(changes) == 1
        assert changes[0].field == "status"
        assert changes[0].old_value == "open"
        assert changes[0].new_value == "done"


class TestDeterminism:
    def test_order_follows_specs_not_snapshot_keys(self):
        old = {"status": "open", "title": "A"}
        new = {"status": "done", "title": "B"}
        changes = diff_fields(old, new, SPECS)
        assert [c.field for c in changes] == ["title", "status"]

    def test_repeated_calls_identical(self):
        old = {"title": "A", "count": 1}
        new = {"title": "B", "count": 3}
        assert diff_fields(old, new, SPECS) == diff_fields(old, new, SPECS)


class TestEmptyValues:
    def test_none_and_blank_are_equal(self):
        assert diff_fields({"status": None}, {"status": ""}, SPECS) == []
        assert diff_fields({}, {"status": "   "}, SPECS) == []

    def test_cleared_value_displays_empty(self):
        changes = diff_fields({"status": "open"}, {"status": None}, SPECS)
        assert changes[0].old_value == "open"
        assert changes[0].new_value == EMPTY_VALUE

    def test_none_snapshots_treated_as_empty(self):
        changes = diff_fields(None, {"title": "New"}, SPECS)
        assert changes[0].old_value == EMPTY_VALUE
        assert changes[0].new_value == "New"


class TestLooseEquality:
    def test_numeric_string_equals_number(self):
        assert diff_fields({"status": 5}, {"status": "5"}, SPECS) == []

    def test_count_coerces_strings(self):
        assert diff_fields({"count": "3"}, {"count": 3}, SPECS) == []

    def test_count_change_shows_numbers(self):
        changes = diff_fields({"count": "2"}, {"count": 4}, SPECS)
        assert changes[0].field == "attachments"
        assert changes[0].old_value == 2
        assert changes[0].new_value == 4


class TestDates:
    def test_same_day_different_representation_equal(self):
        assert diff_fields({"due_date": "2025-03-05"}, {"due_date": "2025-03-05T00:00:00"}, SPECS) == []

    def test_changed_date_formatted(self):
        changes = diff_fields({"due_date": "2025-03-05"}, {"due_date": "2025-04-10"}, SPECS)
        assert changes[0].old_value == "Mar 5, 2025"
        assert changes[0].new_value == "Apr 10, 2025"

    def test_cleared_date_displays_none(self):
        changes = diff_fields({"due_date": "2025-03-05"}, {"due_date": None}, SPECS)
        assert changes[0].new_value == "none"

    def test_unparseable_date_shown_verbatim(self):
        changes = diff_fields({"due_date": "soon"}, {"due_date": "2025-03-05"}, SPECS)
        assert changes[0].old_value == "soon"


class TestTruncation:
    def test_long_text_truncated_both_sides(self):
        old = "a" * 50
        new = "b" * 45
        changes = diff_fields({"body": old}, {"body": new}, SPECS)
        assert changes[0].old_value == "a" * 40 + "..."
        assert changes[0].new_value == "b" * 40 + "..."

    def test_short_text_untouched(self):
        changes = diff_fields({"body": "short"}, {"body": "shorter"}, SPECS)
        assert changes[0].new_value == "shorter"

    def test_comparison_uses_full_text(self):
        # Same 40-char prefix, different tails: still a change
        prefix = "x" * 40
        changes = diff_fields({"body": prefix + "1"}, {"body": prefix + "2"}, SPECS)
        assert len(changes) == 1


class TestRenderOverride:
    def test_render_applied_only_to_display(self):
        spec = (FieldSpec("milestone_id", "milestone", render=lambda v: f"M-{v}" if v else "none"),)
        assert diff_fields({"milestone_id": 1}, {"milestone_id": "1"}, spec) == []
        changes = diff_fields({"milestone_id": None}, {"milestone_id": 2}, spec)
        assert changes[0].old_value == "none"
        assert changes[0].new_value == "M-2"
