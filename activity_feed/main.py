"""Console entry point: fetch the activity log and print it as text.

Usage:
    python -m activity_feed.main [--table TABLE ...] [--limit N] [--more N]

Reads the API base URL and bearer token from the environment (.env).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import structlog

from activity_feed.config import settings
from activity_feed.feed import ActivityFeed
from activity_feed.integrations.activity_api.client import ActivityApiClient
from activity_feed.models.enums import EntityKind
from activity_feed.schemas.feed import FeedItem

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    stream=sys.stderr,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the project activity log")
    parser.add_argument(
        "--table",
        action="append",
        default=[],
        choices=[kind.value for kind in EntityKind],
        help="Only show changes to this table (repeatable)",
    )
    parser.add_argument("--limit", type=int, default=settings.feed.feed_page_size, help="Rows to fetch")
    parser.add_argument("--more", type=int, default=0, help="Extra load-more pages to fetch")
    return parser.parse_args(argv)


def format_item(item: FeedItem) -> str:
    """Plain-text block for one feed entry."""
    header = f"[{item.icon_key}] {item.actor_display}"
    if item.timestamp:
        header = f"{header} · {item.timestamp}"
    lines = [header, item.description.render_text()]
    if item.extra_detail:
        lines.append(item.extra_detail)
    return "\n".join(lines)


async def run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    client = ActivityApiClient()

    viewer = await client.fetch_viewer()
    if viewer is None:
        logger.error("Not signed in: set ACTIVITY_API_TOKEN to a valid token")
        return 1
    logger.info("Signed in as %s (env=%s)", viewer.email or viewer.id, settings.environment)

    feed = ActivityFeed(client.fetch_log_page, lambda: viewer, page_size=args.limit)
    await feed.load(args.limit, selected_tables=[EntityKind(t) for t in args.table], reset=True)
    for _ in range(args.more):
        if not feed.can_load_more:
            break
        await feed.load_more()

    if feed.state.error:
        print(feed.state.error, file=sys.stderr)
        return 1
    if feed.empty_message:
        print(feed.empty_message)
        return 0

    print("\n\n".join(format_item(item) for item in feed.items))
    return 0


def main() -> None:
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
