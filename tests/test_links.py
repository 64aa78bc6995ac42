"""Tests for the link resolver.

Every Link must carry its own id and the enclosing project id; anything
missing degrades to plain text instead of a dead link.
"""

from __future__ import annotations

from activity_feed.describers import describe
from activity_feed.models.enums import EntityKind, LinkKind
from activity_feed.resolvers import links
from activity_feed.schemas.log import LogRecord


def _record(table: str, operation: str = "insert", new: dict | None = None, related: dict | None = None):
    return LogRecord(table_name=table, operation=operation, new_data=new, related_entities=related or {})


class TestProjectLinks:
    def test_from_related_project(self):
        record = _record("comments", related={EntityKind.PROJECTS: {"id": 7, "name": "Apollo"}})
        link = links.resolve_project(record)
        assert link.kind is LinkKind.PROJECT
        assert link.path == "/projects/7"
        assert link.label == "Apollo"

    def test_missing_id_is_not_linked(self):
        record = _record("comments", new={"comment": "x"}, related={EntityKind.PROJECTS: {"id": None, "name": "Apollo"}})
        assert links.resolve_project(record) is None
        segment = describe(record, None).sentence[-1]
        assert segment.text == "Apollo"
        assert segment.link is None

    def test_missing_name_is_not_linked(self):
        record = _record("tasks", new={"id": "t1", "project_id": "p1", "title": "T"})
        assert links.resolve_project(record) is None

    def test_projects_table_uses_own_id(self):
        record = _record("projects", new={"id": "p9", "name": "Zeus", "project_id": "other"})
        assert links.resolve_project(record).path == "/projects/p9"


class TestTaskLinks:
    def test_requires_project(self):
        record = _record("tasks", new={"id": "t1", "title": "T"})
        assert links.resolve_task(record) is None

    def test_requires_task_id(self):
        record = _record("comments", new={"project_id": "p1"}, related={EntityKind.COMMENTS: {"task_title": "T"}})
        assert links.resolve_task(record) is None

    def test_own_relation_wins(self):
        record = _record(
            "comments",
            new={"project_id": "p1"},
            related={
                EntityKind.COMMENTS: {"task_id": "c-task", "task_title": "From comment"},
                EntityKind.ASSIGNMENTS: {"task_id": "a-task", "task_title": "From assignment"},
            },
        )
        link = links.resolve_task(record)
        assert link.path == "/projects/p1/tasks/c-task"
        assert link.label == "From comment"

    def test_delete_resolves_from_old_data(self):
        record = LogRecord(
            table_name="tasks",
            operation="delete",
            old_data={"id": "t1", "title": "Gone", "project_id": "p1"},
            related_entities={EntityKind.PROJECTS: {"id": "p1", "name": "Apollo"}},
        )
        assert links.resolve_task(record).path == "/projects/p1/tasks/t1"


class TestOtherLinks:
    def test_milestone_requires_project(self):
        record = _record("milestones", new={"id": "m1", "name": "Beta"})
        assert links.resolve_milestone(record) is None

    def test_file_without_id(self):
        record = _record("files", new={"project_id": "p1", "file_name": "a.png"})
        assert links.resolve_file(record) is None

    def test_label_requires_label_id(self):
        record = _record(
            "task_labels",
            new={"task_id": "t1"},
            related={EntityKind.TASK_LABELS: {"label_name": "bug", "project_id": "p1"}},
        )
        assert links.resolve_label(record) is None

    def test_parent_task_default_label(self):
        record = _record("tasks", new={"id": "t2", "project_id": "p1", "parent_task_id": "t1"})
        link = links.resolve_parent_task(record)
        assert link.label == "Parent Task"
        assert link.path == "/projects/p1/tasks/t1"

    def test_profile_always_resolves(self):
        assert links.profile_link("profile").path == "/profile"
