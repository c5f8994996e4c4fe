"""Extraction of normalized message events from LINE webhook payloads."""

import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from src.ingest.errors import MalformedPayload
from src.utils.logging import get_logger

logger = get_logger(__name__)


class MessageKind(StrEnum):
    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class MessageEvent:
    """A single message event, normalized from the LINE payload."""

    source_id: str | None
    message_id: str | None
    kind: MessageKind
    text: str | None = None
    image_ref: str | None = None


def parse_payload(body: bytes) -> dict[str, Any]:
    """Parse the raw webhook body.

    Raises:
        MalformedPayload: If the body is not a JSON object
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Failed to parse webhook body", error=str(e))
        raise MalformedPayload() from e

    if not isinstance(payload, dict):
        raise MalformedPayload("Webhook payload must be a JSON object")
    return payload


def extract_message_events(payload: dict[str, Any]) -> list[MessageEvent]:
    """Turn a parsed webhook payload into message events.

    Non-message events, events without a message object and message kinds other than
    text and image are skipped.

    Raises:
        MalformedPayload: If `events` is present but not a list
    """
    events = payload.get("events", [])
    if not isinstance(events, list):
        raise MalformedPayload("Webhook payload 'events' must be a list")

    extracted: list[MessageEvent] = []
    for index, event in enumerate(events):
        if not isinstance(event, dict) or event.get("type") != "message":
            continue

        message = event.get("message")
        if not isinstance(message, dict):
            logger.warning("Skipping message event without a message object", event_index=index)
            continue

        source = event.get("source")
        source_id = source.get("userId") if isinstance(source, dict) else None
        message_id = message.get("id")

        match message.get("type"):
            case MessageKind.TEXT:
                extracted.append(
                    MessageEvent(
                        source_id=source_id,
                        message_id=message_id,
                        kind=MessageKind.TEXT,
                        text=str(message.get("text") or ""),
                    )
                )
            case MessageKind.IMAGE:
                extracted.append(
                    MessageEvent(
                        source_id=source_id,
                        message_id=message_id,
                        kind=MessageKind.IMAGE,
                        image_ref=message_id,
                    )
                )
            case other:
                logger.info("Skipping unsupported message type", message_type=other)

    return extracted
