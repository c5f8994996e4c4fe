"""In-memory content and image registries.

Both stores live for the lifetime of the process and are created once in the gateway lifespan.
Every mutation is a single dict operation, so no locking is needed on a single event loop;
readers that iterate (list, recent) work on a copy so concurrent inserts cannot reorder
what they are looking at.
"""

from __future__ import annotations

from src.content.models import ContentItem, StoredImage

SNAPSHOT_LIMIT = 20


class ContentStore:
    """Registry of content items keyed by item id."""

    def __init__(self) -> None:
        self._items: dict[str, ContentItem] = {}

    def put(self, item_id: str, item: ContentItem) -> None:
        self._items[item_id] = item

    def add(self, item: ContentItem) -> ContentItem:
        self.put(item.id, item)
        return item

    def get(self, item_id: str) -> ContentItem | None:
        return self._items.get(item_id)

    def list(self) -> list[ContentItem]:
        return list(self._items.values())

    def delete(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    def recent(self, limit: int = SNAPSHOT_LIMIT) -> list[ContentItem]:
        """Return up to `limit` of the most recently created items, newest first."""
        items = self.list()
        items.sort(key=lambda item: item.timestamp, reverse=True)
        return items[:limit]

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items


class ImageStore:
    """Registry of raw image bytes keyed by image id (never a content item id)."""

    def __init__(self) -> None:
        self._images: dict[str, StoredImage] = {}

    def put(self, image_id: str, image: StoredImage) -> None:
        self._images[image_id] = image

    def get(self, image_id: str) -> StoredImage | None:
        return self._images.get(image_id)

    def list(self) -> list[StoredImage]:
        return list(self._images.values())

    def delete(self, image_id: str) -> None:
        self._images.pop(image_id, None)

    def __len__(self) -> int:
        return len(self._images)
