"""Pydantic models for the gateway HTTP surface."""

from typing import Any, Literal

from pydantic import BaseModel


class WebhookResponse(BaseModel):
    """Webhook response model."""

    success: bool


class ManualWebhookResponse(BaseModel):
    success: bool
    item: dict[str, Any]


class SnapshotResponse(BaseModel):
    content: list[dict[str, Any]]
    timestamp: str


class HealthEnv(BaseModel):
    hasLineSecret: bool
    hasLineToken: bool
    hasAiKey: bool
    clientUrl: str | None = None
    distributionMode: Literal["push", "pull"]


class HealthResponse(BaseModel):
    ok: bool
    env: HealthEnv
    contentCount: int


class ErrorResponse(BaseModel):
    error: str
