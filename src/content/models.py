"""Content item models shared by the gateway, the distribution channel and the dashboard client."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ContentStatus(StrEnum):
    """Moderation status of a content item."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class TextContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str


class ImageContent(BaseModel):
    """Image content; image_url is None when the image could not be retrieved."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    image_url: str | None = Field(alias="imageUrl")


Content = TextContent | ImageContent


class ContentItem(BaseModel):
    """One moderation-queue entry derived from one inbound message.

    Serialized with camelCase aliases (originalContent, processedContent, sourceId) because
    that is the shape dashboards consume.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    status: ContentStatus = ContentStatus.PENDING
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    original_content: Content = Field(alias="originalContent")
    processed_content: Content = Field(alias="processedContent")
    degraded: bool = False
    source_id: str | None = Field(default=None, alias="sourceId")

    @model_validator(mode="after")
    def _check_content_variants(self) -> "ContentItem":
        if type(self.original_content) is not type(self.processed_content):
            raise ValueError("originalContent and processedContent must be the same content type")
        return self

    @property
    def is_text(self) -> bool:
        return isinstance(self.original_content, TextContent)

    def to_payload(self) -> dict:
        """JSON-ready dict in the dashboard wire format."""
        return self.model_dump(by_alias=True, mode="json")


@dataclass(frozen=True)
class StoredImage:
    """Binary image payload plus its declared content type."""

    data: bytes
    content_type: str
