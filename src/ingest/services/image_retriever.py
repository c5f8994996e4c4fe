"""Retrieval of image message content into the in-memory image store."""

import uuid

from src.clients.line import LineContentClient, LineContentError
from src.content.models import StoredImage
from src.content.store import ImageStore
from src.ingest.errors import ImageFetchFailed
from src.utils.logging import get_logger

logger = get_logger(__name__)

IMAGE_PATH_PREFIX = "/image"


def image_path(image_id: str) -> str:
    """Path under which the gateway serves a stored image."""
    return f"{IMAGE_PATH_PREFIX}/{image_id}"


class ImageRetriever:
    """Downloads image messages from LINE and stores them for serving by reference.

    The image store grows without eviction; it only lives as long as the process.
    """

    def __init__(self, client: LineContentClient | None, image_store: ImageStore):
        self.client = client
        self.image_store = image_store

    async def retrieve(self, message_id: str | None) -> str:
        """Fetch and store the image for `message_id`, returning its serving path.

        Raises:
            ImageFetchFailed: If the image cannot be downloaded
        """
        if self.client is None:
            raise ImageFetchFailed("LINE_CHANNEL_ACCESS_TOKEN is not set")
        if not message_id:
            raise ImageFetchFailed("Image message has no id")

        try:
            content = await self.client.get_message_content(message_id)
        except LineContentError as e:
            raise ImageFetchFailed(str(e)) from e

        image_id = str(uuid.uuid4())
        self.image_store.put(image_id, StoredImage(data=content.data, content_type=content.content_type))
        logger.info(
            "Stored image from LINE",
            message_id=message_id,
            image_id=image_id,
            content_type=content.content_type,
            size=len(content.data),
        )
        return image_path(image_id)

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


def build_image_retriever(access_token: str | None, image_store: ImageStore) -> ImageRetriever:
    client = LineContentClient(access_token) if access_token else None
    return ImageRetriever(client=client, image_store=image_store)
