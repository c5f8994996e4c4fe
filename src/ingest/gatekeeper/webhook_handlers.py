"""Webhook handler functions for the gateway service.

Handlers adapt FastAPI requests to the ingestion pipeline and back. Pipeline errors are raised
as ContentGatewayError subclasses and rendered by the app-level exception handler.
"""

import asyncio
import json
import uuid
from collections.abc import AsyncIterator

from fastapi import Request, Response

from src.distribution.notifier import PushNotifier, build_snapshot
from src.ingest.errors import ContentGatewayError, InternalError, MalformedPayload, NotFound
from src.ingest.gatekeeper.models import ManualWebhookResponse, SnapshotResponse, WebhookResponse
from src.ingest.pipeline import PipelineConfig, PipelineServices, create_test_item, ingest_webhook
from src.utils.logging import add_log_context, clear_log_context, get_logger

logger = get_logger(__name__)

SSE_KEEPALIVE_SECONDS = 15.0
NEW_CONTENT_EVENT = "newContent"


def get_pipeline_config(request: Request) -> PipelineConfig:
    return request.app.state.pipeline_config


def get_pipeline_services(request: Request) -> PipelineServices:
    return request.app.state.pipeline_services


async def handle_line_webhook(request: Request) -> WebhookResponse:
    """Handle a LINE webhook delivery."""
    clear_log_context()
    add_log_context(request_id=str(uuid.uuid4()))

    body = await request.body()
    headers = dict(request.headers)
    logger.info("Received LINE webhook", payload_size=len(body))

    try:
        result = await ingest_webhook(
            body, headers, get_pipeline_config(request), get_pipeline_services(request)
        )
    except ContentGatewayError:
        raise
    except Exception as e:
        logger.exception("Unexpected error processing LINE webhook")
        raise InternalError() from e

    if result.verification_ping:
        logger.info("Answered LINE webhook verification ping")
    return WebhookResponse(success=True)


async def handle_manual_webhook(request: Request) -> ManualWebhookResponse:
    """Create a content item from a `{type, text?, imageUrl?}` body without signature checks."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedPayload() from e
    if not isinstance(payload, dict):
        raise MalformedPayload("Test webhook body must be a JSON object")

    item = await create_test_item(payload, get_pipeline_services(request))
    logger.info("Created content via test webhook", content_id=item.id)
    return ManualWebhookResponse(success=True, item=item.to_payload())


def handle_image(request: Request, image_id: str) -> Response:
    image = get_pipeline_services(request).image_store.get(image_id)
    if image is None:
        raise NotFound("Image not found")
    return Response(content=image.data, media_type=image.content_type)


def handle_snapshot(request: Request, get_content: bool) -> SnapshotResponse:
    """Return the pull-mode snapshot of recent content items."""
    services = get_pipeline_services(request)
    if not get_content or services.notifier.mode != "pull":
        raise NotFound()
    return SnapshotResponse(**build_snapshot(services.content_store))


def format_sse_event(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


async def content_event_stream(
    request: Request, notifier: PushNotifier, keepalive_seconds: float = SSE_KEEPALIVE_SECONDS
) -> AsyncIterator[str]:
    """Yield Server-Sent Events for every content item created while the client is connected."""
    queue = notifier.subscribe()
    try:
        yield ": connected\n\n"
        while not await request.is_disconnected():
            try:
                item = await asyncio.wait_for(queue.get(), timeout=keepalive_seconds)
            except TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield format_sse_event(NEW_CONTENT_EVENT, item.to_payload())
    finally:
        notifier.unsubscribe(queue)
