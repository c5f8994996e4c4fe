"""Generative rewriting of inbound message text.

Enrichment is best effort. Without a provider credential, or when the provider call fails,
the original text comes back with a visible marker and `degraded=True`, so the moderator
still gets an item to judge instead of a dropped event.
"""

from dataclasses import dataclass
from typing import Literal

from src.clients.openai import OpenAIClient
from src.ingest.errors import AIProviderError
from src.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCT_STORY_PROMPT = 'Transform the following text into a compelling product story: "{text}"'
AI_DISABLED_MARKER = "(AI Disabled)"
AI_ERROR_MARKER = "(AI Error)"

DegradedReason = Literal["disabled", "error"]


@dataclass(frozen=True)
class EnrichmentResult:
    text: str
    degraded: bool = False
    reason: DegradedReason | None = None


class TextEnricher:
    """Rewrites raw message text through the configured chat model."""

    def __init__(self, client: OpenAIClient | None):
        self.client = client

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def enrich(self, text: str) -> EnrichmentResult:
        """Rewrite `text` as a product story. Never raises."""
        if self.client is None:
            logger.warning("OPENAI_API_KEY is not set, returning original text")
            return EnrichmentResult(
                text=f"{AI_DISABLED_MARKER} {text}", degraded=True, reason="disabled"
            )

        try:
            rewritten = await self._call_provider(text)
        except AIProviderError as e:
            logger.error("Error processing text with AI", error=e.message, exc_info=e.__cause__)
            return EnrichmentResult(text=f"{AI_ERROR_MARKER} {text}", degraded=True, reason="error")

        return EnrichmentResult(text=rewritten)

    async def _call_provider(self, text: str) -> str:
        assert self.client is not None
        try:
            return await self.client.complete(PRODUCT_STORY_PROMPT.format(text=text))
        except Exception as e:
            raise AIProviderError(f"{type(e).__name__}: {e}") from e

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


def build_text_enricher(api_key: str | None) -> TextEnricher:
    """Create an enricher, disabled when no API key is configured."""
    if not api_key:
        return TextEnricher(client=None)
    return TextEnricher(client=OpenAIClient(api_key=api_key))
