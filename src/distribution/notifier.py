"""Content distribution strategies.

Dashboards learn about new content items in one of two ways, chosen at startup:

- push: every connected dashboard holds a Server-Sent Events stream and each new item is put
  on its queue immediately. Dashboards that are not connected miss the item (at-most-once).
- pull: nothing is pushed. Dashboards poll the snapshot endpoint and diff it against the
  snapshot timestamp they saw last. This is the only option where no persistent connection
  can be held (serverless hosting).
"""

import asyncio
from datetime import UTC, datetime
from typing import Any, Protocol

from src.content.models import ContentItem
from src.content.store import SNAPSHOT_LIMIT, ContentStore
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SUBSCRIBER_QUEUE_SIZE = 100


class ContentNotifier(Protocol):
    """Capability for announcing a newly stored content item to dashboards."""

    mode: str

    async def notify(self, item: ContentItem) -> None: ...


class PushNotifier:
    """Fans new items out to every connected subscriber queue."""

    mode = "push"

    def __init__(self, max_queue_size: int = DEFAULT_SUBSCRIBER_QUEUE_SIZE):
        self.max_queue_size = max_queue_size
        self._subscribers: set[asyncio.Queue[ContentItem]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[ContentItem]:
        queue: asyncio.Queue[ContentItem] = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.add(queue)
        logger.info("Dashboard connected", subscribers=len(self._subscribers))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[ContentItem]) -> None:
        self._subscribers.discard(queue)
        logger.info("Dashboard disconnected", subscribers=len(self._subscribers))

    async def notify(self, item: ContentItem) -> None:
        # Iterate a copy, subscribers may disconnect while we deliver
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(item)
            except asyncio.QueueFull:
                logger.warning("Dropping content item for slow dashboard", content_id=item.id)
        logger.debug("Pushed content item", content_id=item.id, subscribers=len(self._subscribers))


class PullNotifier:
    """Leaves distribution to polling clients; notify only records the event."""

    mode = "pull"

    async def notify(self, item: ContentItem) -> None:
        logger.debug("Content item available for polling", content_id=item.id)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with a trailing Z, matching how content item timestamps serialize."""
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def build_snapshot(store: ContentStore, limit: int = SNAPSHOT_LIMIT) -> dict[str, Any]:
    """Build the pull-mode snapshot: the newest items plus the server time as the poll cursor.

    The cursor is taken before the items are copied; no await separates the two, so an item
    inserted afterwards always carries a later timestamp than the cursor.
    """
    taken_at = datetime.now(UTC)
    items = store.recent(limit)
    return {
        "content": [item.to_payload() for item in items],
        "timestamp": format_timestamp(taken_at),
    }


def build_notifier(mode: str) -> PushNotifier | PullNotifier:
    if mode == "push":
        return PushNotifier()
    if mode == "pull":
        return PullNotifier()
    raise ValueError(f"Unknown distribution mode: {mode}")
