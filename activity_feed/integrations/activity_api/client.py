"""Async httpx client for the project-management REST API (activity log + viewer profile)."""

from __future__ import annotations

import logging

import httpx

from activity_feed.config import settings
from activity_feed.filters import ordered
from activity_feed.integrations.activity_api.schemas import LogPage, parse_log_page
from activity_feed.models.enums import EntityKind
from activity_feed.schemas.log import Identity, LogRecord

logger = logging.getLogger(__name__)

_LOGS_PATH = "/all-filtered-logs"
_PROFILE_PATH = "/user/profile"


class ActivityFetchError(Exception):
    """Raised when a log page cannot be fetched or decoded."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ActivityApiClient:
    """Thin async wrapper around the log and profile endpoints.

    Endpoints:
        GET {base_url}/all-filtered-logs?tables=..&limit=..
        GET {base_url}/user/profile
    Auth: ``Authorization: Bearer <token>``
    Envelope: ``{"status", "message", "data"}``
    """

    def __init__(self, token: str | None = None, base_url: str | None = None) -> None:
        self._base_url = (base_url or settings.api.activity_api_url).rstrip("/")
        self._token = token if token is not None else settings.api.activity_api_token
        self._timeout = httpx.Timeout(
            settings.api.activity_api_timeout,
            connect=settings.api.activity_api_connect_timeout,
        )

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def fetch_log_page(self, tables: list[EntityKind], limit: int) -> tuple[list[LogRecord], bool]:
        """Fetch the first ``limit`` log rows, optionally restricted to ``tables``.

        An empty ``tables`` list means no filter. ``limit`` caps the whole page;
        there is no offset, every call starts from the newest row.

        Raises:
            ActivityFetchError: On transport errors, non-2xx responses or bad payloads.
        """
        params: dict[str, object] = {"limit": limit}
        if tables:
            params["tables"] = [kind.value for kind in ordered(tables)]

        logger.debug("Fetching activity log: limit=%s tables=%s", limit, params.get("tables", "all"))
        payload = await self._get(_LOGS_PATH, params=params)

        try:
            page: LogPage = parse_log_page(payload.get("data") if isinstance(payload, dict) else None)
        except ValueError as exc:
            raise ActivityFetchError(str(exc)) from exc

        logger.info("Fetched %s log records (has_more=%s)", len(page.records), page.has_more)
        return page.records, page.has_more

    async def fetch_viewer(self) -> Identity | None:
        """Current user profile, or None when the token is missing or rejected."""
        if not self._token:
            logger.debug("No API token configured, viewer is anonymous")
            return None
        try:
            payload = await self._get(_PROFILE_PATH)
        except ActivityFetchError as exc:
            if exc.status_code in (401, 403):
                logger.info("Profile request rejected (%s), viewer is anonymous", exc.status_code)
                return None
            raise

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            return None
        return Identity(id=data.get("id"), email=data.get("email"), name=data.get("name"))

    async def _get(self, path: str, params: dict[str, object] | None = None) -> object:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{self._base_url}{path}", params=params, headers=self._headers)
                response.raise_for_status()
                return response.json()

        except httpx.TimeoutException as exc:
            logger.warning("Activity API timeout on %s", path)
            raise ActivityFetchError(f"Timeout calling {path}") from exc

        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Activity API HTTP error %s on %s", status, path)
            raise ActivityFetchError(f"HTTP {status} from {path}", status_code=status) from exc

        except httpx.HTTPError as exc:
            logger.warning("Activity API transport error on %s: %s", path, exc)
            raise ActivityFetchError(f"Transport error calling {path}") from exc

        except ValueError as exc:
            # response.json() on a non-JSON body
            raise ActivityFetchError(f"Undecodable response from {path}") from exc
