"""Route definitions for the gateway service."""

from fastapi import APIRouter, Query, Request
from starlette.responses import StreamingResponse

from src.distribution.notifier import PushNotifier
from src.ingest.errors import NotFound
from src.ingest.gatekeeper.models import (
    ErrorResponse,
    ManualWebhookResponse,
    SnapshotResponse,
    WebhookResponse,
)
from src.ingest.gatekeeper.webhook_handlers import (
    content_event_stream,
    get_pipeline_services,
    handle_image,
    handle_line_webhook,
    handle_manual_webhook,
    handle_snapshot,
)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/webhook", response_model=WebhookResponse, responses=ERROR_RESPONSES)
async def line_webhook(request: Request):
    """Process a LINE webhook (signature protected)."""
    return await handle_line_webhook(request)


@router.get("/webhook", response_model=SnapshotResponse, responses=ERROR_RESPONSES)
async def content_snapshot(request: Request, get_content: bool = Query(False, alias="getContent")):
    """Pull mode: up to 20 most recent content items plus the server time cursor."""
    return handle_snapshot(request, get_content)


@router.post("/test-webhook", response_model=ManualWebhookResponse, responses=ERROR_RESPONSES)
async def test_webhook(request: Request):
    """Create a content item by hand, bypassing signature validation."""
    return await handle_manual_webhook(request)


@router.get("/image/{image_id}", responses=ERROR_RESPONSES)
async def get_image(request: Request, image_id: str):
    """Serve a stored image with its recorded content type."""
    return handle_image(request, image_id)


@router.get("/events", responses=ERROR_RESPONSES)
async def content_events(request: Request):
    """Push mode: Server-Sent Events stream of newly created content items."""
    notifier = get_pipeline_services(request).notifier
    if not isinstance(notifier, PushNotifier):
        raise NotFound()

    return StreamingResponse(
        content_event_stream(request, notifier),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
