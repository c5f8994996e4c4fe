"""Transport-agnostic webhook ingestion pipeline.

`ingest_webhook` takes the raw body, the request headers and the pipeline config and does the
whole job: signature check, event extraction, per-event enrichment, store insert and
notification. HTTP adapters only translate requests and responses around it.

Events within one delivery are processed concurrently and independently. Each event builds its
own ContentItem inside its own coroutine, so enrichment results can never be attached to the
wrong item, and one failing event does not stop the others. There is no deduplication:
a redelivered webhook creates new items.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from src.content.models import ContentItem, ImageContent, TextContent
from src.content.store import ContentStore, ImageStore
from src.distribution.notifier import ContentNotifier
from src.ingest.errors import ImageFetchFailed, MalformedPayload, UnsupportedTestType
from src.ingest.extractor import MessageEvent, MessageKind, extract_message_events, parse_payload
from src.ingest.gatekeeper.verification import LineWebhookVerifier
from src.ingest.services.image_retriever import ImageRetriever
from src.ingest.services.text_enricher import TextEnricher
from src.utils.config import (
    get_distribution_mode,
    get_line_channel_access_token,
    get_line_channel_secret,
    get_openai_api_key,
)
from src.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    channel_secret: str | None = None
    channel_access_token: str | None = None
    openai_api_key: str | None = None
    distribution_mode: str = "push"

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        return cls(
            channel_secret=get_line_channel_secret(),
            channel_access_token=get_line_channel_access_token(),
            openai_api_key=get_openai_api_key(),
            distribution_mode=get_distribution_mode(),
        )

    def credential_flags(self) -> dict[str, bool]:
        """Which credentials are configured, without exposing their values."""
        return {
            "hasLineSecret": bool(self.channel_secret),
            "hasLineToken": bool(self.channel_access_token),
            "hasAiKey": bool(self.openai_api_key),
        }


@dataclass
class PipelineServices:
    """Process-wide collaborators, created once at startup and shared by every request."""

    content_store: ContentStore
    image_store: ImageStore
    text_enricher: TextEnricher
    image_retriever: ImageRetriever
    notifier: ContentNotifier

    async def close(self) -> None:
        await self.text_enricher.close()
        await self.image_retriever.close()


@dataclass
class IngestResult:
    items: list[ContentItem] = field(default_factory=list)
    signature_skipped: bool = False
    verification_ping: bool = False
    failed_events: int = 0


async def ingest_webhook(
    raw_body: bytes,
    headers: dict[str, str],
    config: PipelineConfig,
    services: PipelineServices,
) -> IngestResult:
    """Verify, parse and process one webhook delivery.

    Raises:
        MissingSignature: Secret configured but no x-line-signature header
        InvalidSignature: Signature does not match the body
        MalformedPayload: Body is not a valid webhook payload
    """
    verification = LineWebhookVerifier(config.channel_secret).verify(headers, raw_body)
    if verification.verification_ping:
        return IngestResult(verification_ping=True)

    events = extract_message_events(parse_payload(raw_body))
    result = IngestResult(signature_skipped=verification.skipped)
    if not events:
        logger.info("Webhook contained no message events")
        return result

    outcomes = await asyncio.gather(
        *(_process_event(event, services) for event in events), return_exceptions=True
    )
    for event, outcome in zip(events, outcomes, strict=True):
        if isinstance(outcome, ContentItem):
            result.items.append(outcome)
        elif isinstance(outcome, Exception):
            result.failed_events += 1
            logger.error(
                "Failed to process message event",
                message_id=event.message_id,
                kind=event.kind,
                exc_info=outcome,
            )
        else:
            raise outcome

    logger.info(
        "Processed webhook events",
        created=len(result.items),
        failed=result.failed_events,
        signature_skipped=result.signature_skipped,
    )
    return result


async def _process_event(event: MessageEvent, services: PipelineServices) -> ContentItem:
    with LogContext(message_id=event.message_id, kind=str(event.kind)):
        if event.kind == MessageKind.TEXT:
            text = event.text or ""
            enrichment = await services.text_enricher.enrich(text)
            item = ContentItem(
                original_content=TextContent(text=text),
                processed_content=TextContent(text=enrichment.text),
                degraded=enrichment.degraded,
                source_id=event.source_id,
            )
        else:
            degraded = False
            try:
                image_url = await services.image_retriever.retrieve(event.image_ref)
            except ImageFetchFailed as e:
                logger.warning("Error fetching image from LINE", error=e.message)
                image_url = None
                degraded = True
            item = ContentItem(
                original_content=ImageContent(image_url=image_url),
                processed_content=ImageContent(image_url=image_url),
                degraded=degraded,
                source_id=event.source_id,
            )

        return await _store_and_notify(item, services)


async def create_test_item(payload: dict[str, Any], services: PipelineServices) -> ContentItem:
    """Create an item from a manual test payload `{type, text?, imageUrl?}`.

    Text is enriched like a real message; image URLs pass through untouched.

    Raises:
        UnsupportedTestType: If `type` is neither "text" nor "image"
        MalformedPayload: If an image payload carries a non-string `imageUrl`
    """
    match payload.get("type"):
        case "text":
            text = str(payload.get("text") or "")
            enrichment = await services.text_enricher.enrich(text)
            item = ContentItem(
                original_content=TextContent(text=text),
                processed_content=TextContent(text=enrichment.text),
                degraded=enrichment.degraded,
            )
        case "image":
            image_url = payload.get("imageUrl")
            if image_url is not None and not isinstance(image_url, str):
                raise MalformedPayload("imageUrl must be a string")
            item = ContentItem(
                original_content=ImageContent(image_url=image_url),
                processed_content=ImageContent(image_url=image_url),
            )
        case _:
            raise UnsupportedTestType()

    return await _store_and_notify(item, services)


async def _store_and_notify(item: ContentItem, services: PipelineServices) -> ContentItem:
    services.content_store.add(item)
    try:
        await services.notifier.notify(item)
    except Exception:
        logger.exception("Failed to notify dashboards", content_id=item.id)
    logger.info("Stored content item", content_id=item.id, degraded=item.degraded)
    return item
