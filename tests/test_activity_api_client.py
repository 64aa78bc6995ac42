"""Tests for the activity log API client and wire parsing.

Covers:
- Log page: envelope unwrapped, rows parsed into LogRecords, has-more flag
- Query params: limit always, tables in canonical order only when filtered
- Side-loaded relations keyed by EntityKind, projectName -> related project
- Bad rows become placeholders instead of failing the page
- Timeout / HTTP errors / malformed payloads -> ActivityFetchError
- Viewer profile: anonymous without token or on 401
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from activity_feed.integrations.activity_api.client import ActivityApiClient, ActivityFetchError
from activity_feed.integrations.activity_api.schemas import parse_log_page, parse_log_record
from activity_feed.models.enums import EntityKind, Operation

# ── Helpers ──────────────────────────────────────────────────────────


def _make_response(payload, status_code: int = 200) -> MagicMock:
    """Build a mock httpx.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.raise_for_status = MagicMock()  # no-op for 200
    return resp


def _make_error_response(status_code: int) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.raise_for_status = MagicMock(
        side_effect=httpx.HTTPStatusError("error", request=MagicMock(), response=resp),
    )
    return resp


def _patch_http(mock_client_cls, get: AsyncMock) -> AsyncMock:
    mock_http = AsyncMock()
    mock_http.get = get
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=mock_http)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return mock_http


PROJECT_ROW = {
    "id": 101,
    "table_name": "PROJECTS",
    "operation": "INSERT",
    "old_data": None,
    "new_data": {"id": "p1", "name": "Apollo"},
    "changed_by_name": "Alice",
    "changed_by_email": "alice@example.com",
    "created_at": "2025-03-05T14:07:00Z",
    "projectName": "Apollo",
}

ASSIGNMENT_ROW = {
    "id": 102,
    "table_name": "assignments",
    "operation": "DELETE",
    "old_data": {"task_id": "t1", "user_id": "u2", "project_id": "p1"},
    "new_data": None,
    "created_at": "2025-03-05T15:00:00Z",
    "assignment": {"task_id": "t1", "task_title": "Fix bug", "user_name": "Bob"},
    "projectName": "Apollo",
}


# ── Client: log pages ────────────────────────────────────────────────


class TestFetchLogPage:
    @pytest.mark.asyncio()
    async def test_parses_envelope(self):
        payload = {"status": "success", "message": "ok", "data": [[PROJECT_ROW, ASSIGNMENT_ROW], True]}
        client = ActivityApiClient(token="test-token", base_url="http://api.test/api")

        with patch("httpx.AsyncClient") as mock_client_cls:
            mock_http = _patch_http(mock_client_cls, AsyncMock(return_value=_make_response(payload)))
            records, has_more = await client.fetch_log_page([], 20)

        assert has_more is True
        assert [r.id for r in records] == ["101", "102"]
        project, assignment = records
        assert project.kind is EntityKind.PROJECTS
        assert project.op is Operation.INSERT
        assert project.actor.name == "Alice"
        assert project.related(EntityKind.PROJECTS) == {"id": "p1", "name": "Apollo"}
        assert assignment.related(EntityKind.PROJECTS) == {"id": "p1", "name": "Apollo"}
        assert assignment.related(EntityKind.ASSIGNMENTS)["task_title"] == "Fix bug"

        call = mock_http.get.call_args
        assert call.args[0] == "http://api.test/api/all-filtered-logs"
        assert call.kwargs["params"] == {"limit": 20}
        assert call.kwargs["headers"] == {"Authorization": "Bearer test-token"}

    @pytest.mark.asyncio()
    async def test_tables_sent_in_canonical_order(self):
        payload = {"data": [[], False]}
        client = ActivityApiClient(token="test-token")

        with patch("httpx.AsyncClient") as mock_client_cls:
            mock_http = _patch_http(mock_client_cls, AsyncMock(return_value=_make_response(payload)))
            records, has_more = await client.fetch_log_page([EntityKind.USERS, EntityKind.PROJECTS], 40)

        assert records == []
        assert has_more is False
        assert mock_http.get.call_args.kwargs["params"] == {"limit": 40, "tables": ["projects", "users"]}

    @pytest.mark.asyncio()
    async def test_timeout(self):
        client = ActivityApiClient(token="test-token")

        with patch("httpx.AsyncClient") as mock_client_cls:
            _patch_http(mock_client_cls, AsyncMock(side_effect=httpx.TimeoutException("timeout")))
            with pytest.raises(ActivityFetchError):
                await client.fetch_log_page([], 20)

    @pytest.mark.asyncio()
    async def test_http_error_keeps_status(self):
        client = ActivityApiClient(token="test-token")

        with patch("httpx.AsyncClient") as mock_client_cls:
            _patch_http(mock_client_cls, AsyncMock(return_value=_make_error_response(500)))
            with pytest.raises(ActivityFetchError) as exc_info:
                await client.fetch_log_page([], 20)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio()
    async def test_malformed_payload(self):
        client = ActivityApiClient(token="test-token")

        with patch("httpx.AsyncClient") as mock_client_cls:
            _patch_http(mock_client_cls, AsyncMock(return_value=_make_response({"data": {"rows": []}})))
            with pytest.raises(ActivityFetchError):
                await client.fetch_log_page([], 20)


# ── Client: viewer ───────────────────────────────────────────────────


class TestFetchViewer:
    @pytest.mark.asyncio()
    async def test_no_token_skips_http(self):
        client = ActivityApiClient(token="")

        with patch("httpx.AsyncClient") as mock_client_cls:
            viewer = await client.fetch_viewer()

        assert viewer is None
        mock_client_cls.assert_not_called()

    @pytest.mark.asyncio()
    async def test_profile(self):
        payload = {"status": "success", "data": {"id": 7, "email": "me@example.com", "name": "Me"}}
        client = ActivityApiClient(token="test-token")

        with patch("httpx.AsyncClient") as mock_client_cls:
            _patch_http(mock_client_cls, AsyncMock(return_value=_make_response(payload)))
            viewer = await client.fetch_viewer()

        assert viewer.id == "7"
        assert viewer.email == "me@example.com"

    @pytest.mark.asyncio()
    async def test_unauthorized_is_anonymous(self):
        client = ActivityApiClient(token="expired")

        with patch("httpx.AsyncClient") as mock_client_cls:
            _patch_http(mock_client_cls, AsyncMock(return_value=_make_error_response(401)))
            viewer = await client.fetch_viewer()

        assert viewer is None

    @pytest.mark.asyncio()
    async def test_server_error_propagates(self):
        client = ActivityApiClient(token="test-token")

        with patch("httpx.AsyncClient") as mock_client_cls:
            _patch_http(mock_client_cls, AsyncMock(return_value=_make_error_response(503)))
            with pytest.raises(ActivityFetchError):
                await client.fetch_viewer()


# ── Wire parsing ─────────────────────────────────────────────────────


class TestWireParsing:
    def test_non_object_row_becomes_placeholder(self):
        record = parse_log_record("garbage")
        assert record.id == ""
        assert record.is_malformed

    def test_invalid_row_keeps_slot(self):
        record = parse_log_record({"id": 7, "table_name": "tasks", "operation": "update", "changed_by_name": 123})
        assert record.id == "7"
        assert record.kind is EntityKind.TASKS
        assert record.is_malformed

    def test_unparseable_timestamp_is_none(self):
        record = parse_log_record({**PROJECT_ROW, "created_at": "yesterday"})
        assert record.created_at is None

    def test_no_project_name(self):
        record = parse_log_record({"id": 1, "table_name": "users", "operation": "update", "new_data": {}})
        assert record.related(EntityKind.PROJECTS) is None

    def test_page_shape_validated(self):
        with pytest.raises(ValueError):
            parse_log_page({"records": []})
        with pytest.raises(ValueError):
            parse_log_page(["not-a-list", True])

    def test_page_keeps_server_order(self):
        page = parse_log_page([[ASSIGNMENT_ROW, PROJECT_ROW], 0])
        assert [r.id for r in page.records] == ["102", "101"]
        assert page.has_more is False
