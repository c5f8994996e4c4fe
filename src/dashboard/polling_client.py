"""Polling client for gateways running in pull distribution mode.

The client fetches `GET /webhook?getContent=true` on a fixed interval. The snapshot's own
`timestamp` is the cursor: after each successful poll the cursor moves to the server time the
snapshot reports (not to the newest item), so client clock skew never touches the cursor.
Items strictly newer than the cursor are new. The first poll has no cursor and treats every
returned item as new.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
from typing import Any

import httpx

from src.content.models import ContentItem
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
SNAPSHOT_PATH = "/webhook"

ContentCallback = Callable[[ContentItem], Any]


class PollingState(StrEnum):
    IDLE = "idle"
    POLLING = "polling"


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


class ContentPollingClient:
    """Polls the snapshot endpoint and hands new content items to subscribed callbacks."""

    def __init__(
        self,
        base_url: str,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        snapshot_path: str = SNAPSHOT_PATH,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.interval = interval
        self.snapshot_path = snapshot_path
        self.state = PollingState.IDLE
        self.last_fetch_time: datetime | None = None
        self._callbacks: list[ContentCallback] = []
        self._task: asyncio.Task[None] | None = None
        self._http_client = http_client or httpx.AsyncClient(base_url=base_url)
        self._owns_client = http_client is None

    def subscribe(self, callback: ContentCallback) -> None:
        """Register a callback and start polling if this client is idle.

        Must be called from within a running event loop.
        """
        self._callbacks.append(callback)
        if self.state == PollingState.IDLE:
            self._start()

    def is_active(self) -> bool:
        return self.state == PollingState.POLLING

    def _start(self) -> None:
        self.state = PollingState.POLLING
        self._task = asyncio.create_task(self._run())
        logger.info("Started polling for new content", interval=self.interval)

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Unexpected polling failure")
            await asyncio.sleep(self.interval)

    async def poll_once(self) -> list[ContentItem]:
        """Fetch one snapshot, emit the new items and advance the cursor.

        Fetch failures are logged and leave the cursor where it was.
        """
        try:
            response = await self._http_client.get(
                self.snapshot_path, params={"getContent": "true"}
            )
            response.raise_for_status()
            snapshot = response.json()
            if not isinstance(snapshot, dict):
                raise ValueError("Snapshot response is not a JSON object")
            items = [ContentItem.model_validate(raw) for raw in snapshot.get("content") or []]
            snapshot_time = parse_timestamp(snapshot["timestamp"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("Polling error", error=str(e))
            return []

        if self.last_fetch_time is None:
            new_items = items
            logger.info("Loaded existing content items", count=len(new_items))
        else:
            new_items = [item for item in items if item.timestamp > self.last_fetch_time]
            if new_items:
                logger.info("Found new content items", count=len(new_items))

        for item in new_items:
            self._emit(item)

        self.last_fetch_time = snapshot_time
        return new_items

    def _emit(self, item: ContentItem) -> None:
        for callback in list(self._callbacks):
            try:
                callback(item)
            except Exception:
                logger.exception("Error in content callback", content_id=item.id)

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self.state = PollingState.IDLE
        logger.info("Stopped polling for content")

    async def cleanup(self) -> None:
        """Stop polling, drop all callbacks and release the HTTP client if we created it."""
        await self.stop()
        self._callbacks = []
        if self._owns_client:
            await self._http_client.aclose()
