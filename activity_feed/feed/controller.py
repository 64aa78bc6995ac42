"""Feed controller: fetches, pages and filters the activity log for one viewer.

Paging is a flat limit increase, not a cursor: every fetch asks the server
for rows 0..limit and the response replaces the in-memory list wholesale.
Changing the table filter invalidates what "more" means, so it always
resets to the first page.

Every fetch is tagged with a monotonically increasing generation; a response
(or failure) that arrives after a newer fetch was issued is discarded.

A failed fetch is terminal for this controller instance: no retries, and
further loads are ignored until a new controller is constructed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from activity_feed.config import settings
from activity_feed.describers import build_feed
from activity_feed.filters import (
    ALL_TABLES,
    FILTER_GROUPS,
    group_state,
    ordered,
    toggle_group,
    toggle_table,
)
from activity_feed.models.enums import EntityKind, SelectionState
from activity_feed.schemas.description import Link
from activity_feed.schemas.feed import FeedItem, FeedState
from activity_feed.schemas.log import Identity, LogRecord

logger = logging.getLogger(__name__)

# Type aliases for the external collaborators
FetchPage = Callable[[list[EntityKind], int], Awaitable[tuple[list[LogRecord], bool]]]
IdentityProvider = Callable[[], Identity | None]
Navigate = Callable[[str], None]

FETCH_ERROR_MESSAGE = "Failed to load activity logs"
EMPTY_FILTERED_MESSAGE = (
    "No logs match your current filters. Try adjusting your filters or reset to see all activities."
)
EMPTY_MESSAGE = "There are no activity logs to display at this time."


class ActivityFeed:
    """Owns the record list and table selection for one feed instance."""

    def __init__(
        self,
        fetch_page: FetchPage,
        identity_provider: IdentityProvider,
        navigate: Navigate | None = None,
        *,
        page_size: int | None = None,
        debounce_seconds: float | None = None,
    ) -> None:
        self._fetch_page = fetch_page
        self._identity_provider = identity_provider
        self._navigate = navigate
        self._page_size = page_size or settings.feed.feed_page_size
        self._debounce_seconds = (
            settings.feed.feed_debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self.state = FeedState(limit=self._page_size)
        self._generation = 0
        self._debounce_task: asyncio.Task[None] | None = None
        self._reload_tasks: set[asyncio.Task[None]] = set()

    # ── Derived views ────────────────────────────────────────────────

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def viewer(self) -> Identity | None:
        return self._identity_provider()

    @property
    def items(self) -> list[FeedItem]:
        """Renderable entries for the current records."""
        return build_feed(self.state.records, self.viewer)

    @property
    def is_busy(self) -> bool:
        return self.state.loading or self.state.loading_more

    @property
    def can_load_more(self) -> bool:
        return self.state.has_more and not self.is_busy and self.state.error is None

    @property
    def can_show_less(self) -> bool:
        return not self.state.has_more and self.state.limit > self._page_size and bool(self.state.records)

    @property
    def group_states(self) -> dict[str, SelectionState]:
        """Checkbox state per filter group name."""
        return {group.name: group_state(group, self.state.selected_tables) for group in FILTER_GROUPS}

    @property
    def empty_message(self) -> str | None:
        """Message for an empty feed; None while there is something to show."""
        if self.state.records or self.is_busy or self.state.error:
            return None
        return EMPTY_FILTERED_MESSAGE if self.state.selected_tables else EMPTY_MESSAGE

    # ── Loading ──────────────────────────────────────────────────────

    async def start(self) -> None:
        """Initial load of the first page."""
        await self.load(self._page_size, reset=True)

    async def load(
        self,
        limit: int,
        selected_tables: Iterable[EntityKind] | None = None,
        reset: bool = False,
    ) -> None:
        """Fetch rows 0..limit for the current (or given) table selection.

        Args:
            limit: Absolute row cap for the whole page.
            selected_tables: Replace the selection first; None keeps it.
            reset: Clear the list and show the full-page loading state.
        """
        if self.state.error is not None:
            logger.debug("Feed is in error state, ignoring load(limit=%s)", limit)
            return
        if self._identity_provider() is None:
            logger.debug("No authenticated viewer, not fetching activity log")
            return

        if selected_tables is not None:
            self.state.selected_tables = frozenset(selected_tables)

        self._generation += 1
        generation = self._generation
        if reset:
            self.state.loading = True
            self.state.records = []
        else:
            self.state.loading_more = True

        tables = ordered(self.state.selected_tables)
        logger.debug("Loading activity log: generation=%s limit=%s tables=%s", generation, limit, tables)

        try:
            records, has_more = await self._fetch_page(tables, limit)
        except Exception:
            if generation != self._generation:
                logger.debug("Ignoring failure of stale request (generation %s)", generation)
                return
            logger.exception("Failed to load activity log (limit=%s)", limit)
            self.state.error = FETCH_ERROR_MESSAGE
            self._clear_busy()
            return

        if generation != self._generation:
            logger.debug(
                "Discarding stale log page: generation %s, latest %s",
                generation,
                self._generation,
            )
            return

        self.state.records = list(records)
        self.state.has_more = has_more
        self.state.limit = limit
        self._clear_busy()
        logger.info("Activity feed loaded %s records (limit=%s, has_more=%s)", len(records), limit, has_more)

    async def load_more(self) -> None:
        """Grow the page by one page size against the same selection."""
        if not self.can_load_more:
            logger.debug("load_more ignored (busy=%s, has_more=%s)", self.is_busy, self.state.has_more)
            return
        await self.load(self.state.limit + self._page_size)

    async def show_less(self) -> None:
        """Shrink back to the first page without clearing the list first."""
        if self.is_busy:
            return
        await self.load(self._page_size)

    def _clear_busy(self) -> None:
        self.state.loading = False
        self.state.loading_more = False

    # ── Filter selection ─────────────────────────────────────────────

    def toggle_table_filter(self, table: EntityKind) -> None:
        self._set_selection(toggle_table(self.state.selected_tables, table))

    def toggle_group_filter(self, tables: Iterable[EntityKind]) -> None:
        self._set_selection(toggle_group(self.state.selected_tables, tables))

    def select_all(self) -> None:
        self._set_selection(ALL_TABLES)

    def clear_all(self) -> None:
        self._set_selection(frozenset())

    def _set_selection(self, selection: frozenset[EntityKind]) -> None:
        if selection == self.state.selected_tables:
            return
        self.state.selected_tables = selection
        self._schedule_reload()

    def _schedule_reload(self) -> None:
        """Debounce: restart the delay so rapid toggles end in a single reset fetch."""
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
            logger.debug("Pending filter reload superseded")
        task = asyncio.get_running_loop().create_task(self._debounced_reload())
        self._debounce_task = task
        self._reload_tasks.add(task)
        task.add_done_callback(self._reload_tasks.discard)

    async def _debounced_reload(self) -> None:
        await asyncio.sleep(self._debounce_seconds)
        # Past the delay the fetch runs to completion; newer requests make it stale instead
        self._debounce_task = None
        await self.load(self._page_size, reset=True)

    async def settle(self) -> None:
        """Wait for scheduled filter reloads (and their fetches) to finish."""
        while self._reload_tasks:
            await asyncio.gather(*self._reload_tasks, return_exceptions=True)
            # let done-callbacks drop finished tasks from the set
            await asyncio.sleep(0)

    # ── Navigation ───────────────────────────────────────────────────

    def follow(self, link: Link) -> None:
        """Navigate to a resolved link target."""
        if self._navigate is None:
            logger.debug("No navigator attached, ignoring link to %s", link.path)
            return
        self._navigate(link.path)
