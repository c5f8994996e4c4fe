"""Tests for content item models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from src.content.models import ContentItem, ContentStatus, ImageContent, TextContent


class TestContentItem:
    def test_defaults(self):
        item = ContentItem(
            original_content=TextContent(text="hi"), processed_content=TextContent(text="hi!")
        )

        assert item.status == ContentStatus.PENDING
        assert item.degraded is False
        assert item.source_id is None
        assert item.timestamp.tzinfo is not None

    def test_ids_are_unique(self):
        ids = {
            ContentItem(
                original_content=TextContent(text="x"), processed_content=TextContent(text="x")
            ).id
            for _ in range(50)
        }
        assert len(ids) == 50

    def test_rejects_mismatched_content_variants(self):
        with pytest.raises(ValidationError):
            ContentItem(
                original_content=TextContent(text="hi"),
                processed_content=ImageContent(image_url="/image/1"),
            )

    def test_payload_uses_dashboard_field_names(self):
        item = ContentItem(
            original_content=ImageContent(image_url=None),
            processed_content=ImageContent(image_url=None),
            degraded=True,
            source_id="U1",
        )

        payload = item.to_payload()

        assert payload["originalContent"] == {"imageUrl": None}
        assert payload["processedContent"] == {"imageUrl": None}
        assert payload["status"] == "Pending"
        assert payload["sourceId"] == "U1"
        assert payload["degraded"] is True
        assert isinstance(payload["timestamp"], str)

    def test_payload_round_trips_through_validation(self):
        item = ContentItem(
            original_content=TextContent(text="hello"),
            processed_content=TextContent(text="(AI Disabled) hello"),
        )

        restored = ContentItem.model_validate(item.to_payload())

        assert restored.id == item.id
        assert isinstance(restored.original_content, TextContent)
        assert restored.processed_content.text == "(AI Disabled) hello"
        assert isinstance(restored.timestamp, datetime)
        assert restored.timestamp == item.timestamp

    def test_image_payload_validates_as_image_content(self):
        restored = ContentItem.model_validate(
            {
                "id": "abc",
                "status": "Approved",
                "timestamp": "2024-05-01T10:00:00Z",
                "originalContent": {"imageUrl": "/image/1"},
                "processedContent": {"imageUrl": "/image/1"},
            }
        )

        assert isinstance(restored.original_content, ImageContent)
        assert restored.status == ContentStatus.APPROVED
        assert restored.is_text is False
