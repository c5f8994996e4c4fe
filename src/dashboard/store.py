"""Dashboard-side state: the moderation queue as the dashboard currently sees it."""

from src.content.models import ContentItem, ContentStatus


class DashboardStore:
    """Newest-first list of content items with moderation actions.

    Moderation decisions live only here; the gateway never learns about them.
    """

    def __init__(self) -> None:
        self._items: list[ContentItem] = []

    @property
    def items(self) -> list[ContentItem]:
        return list(self._items)

    def add_item(self, item: ContentItem) -> bool:
        """Prepend an item. Returns False if an item with the same id is already held."""
        if any(existing.id == item.id for existing in self._items):
            return False
        self._items.insert(0, item)
        return True

    def update_status(self, item_id: str, status: ContentStatus | str) -> bool:
        status = ContentStatus(status)
        for index, item in enumerate(self._items):
            if item.id == item_id:
                self._items[index] = item.model_copy(update={"status": status})
                return True
        return False

    def approve(self, item_id: str) -> bool:
        return self.update_status(item_id, ContentStatus.APPROVED)

    def reject(self, item_id: str) -> bool:
        return self.update_status(item_id, ContentStatus.REJECTED)

    def delete_item(self, item_id: str) -> bool:
        remaining = [item for item in self._items if item.id != item_id]
        removed = len(remaining) != len(self._items)
        self._items = remaining
        return removed

    def stats(self) -> dict[str, int]:
        counts = {status: 0 for status in ContentStatus}
        for item in self._items:
            counts[item.status] += 1
        return {
            "total": len(self._items),
            "pending": counts[ContentStatus.PENDING],
            "approved": counts[ContentStatus.APPROVED],
            "rejected": counts[ContentStatus.REJECTED],
        }
