"""
LINE Messaging API client for downloading message content.
"""

from dataclasses import dataclass

import httpx

from src.utils.logging import get_logger

logger = get_logger(__name__)

LINE_DATA_API_URL = "https://api-data.line.me/v2/bot"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class MessageContent:
    data: bytes
    content_type: str


class LineContentError(Exception):
    """Raised when message content cannot be downloaded."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LineContentClient:
    """A client for the LINE content endpoint (images, video and audio sent by users)."""

    def __init__(
        self,
        access_token: str,
        base_url: str = LINE_DATA_API_URL,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not access_token:
            raise ValueError("LINE channel access token is required and cannot be empty")

        self.base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._http_client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None

    async def get_message_content(self, message_id: str) -> MessageContent:
        """Download the binary content of a message.

        Raises:
            LineContentError: On a non-2xx response or a transport failure
        """
        url = f"{self.base_url}/message/{message_id}/content"

        try:
            response = await self._http_client.get(url, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error(f"LINE content request error: {e}", message_id=message_id)
            raise LineContentError(f"Request to LINE content API failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"LINE content API HTTP error: {response.status_code}",
                message_id=message_id,
                reason=response.reason_phrase,
            )
            raise LineContentError(
                f"Failed to fetch image: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        return MessageContent(
            data=response.content,
            content_type=response.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._http_client.aclose()
