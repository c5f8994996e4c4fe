"""Tests for AI text enrichment and its fallbacks."""

from unittest.mock import AsyncMock, patch

import pytest

from src.ingest.services.text_enricher import (
    PRODUCT_STORY_PROMPT,
    TextEnricher,
    build_text_enricher,
)
from tests.fakes import make_ai_client


class TestTextEnricher:
    @pytest.mark.asyncio
    async def test_disabled_without_client(self):
        enricher = TextEnricher(client=None)

        result = await enricher.enrich("hello")

        assert enricher.enabled is False
        assert result.text == "(AI Disabled) hello"
        assert result.degraded is True
        assert result.reason == "disabled"

    @pytest.mark.asyncio
    async def test_returns_model_output(self):
        client = make_ai_client("Meet the hello of tomorrow")
        enricher = TextEnricher(client=client)

        result = await enricher.enrich("hello")

        assert result.text == "Meet the hello of tomorrow"
        assert result.degraded is False
        assert result.reason is None
        client.complete.assert_awaited_once_with(PRODUCT_STORY_PROMPT.format(text="hello"))

    @pytest.mark.asyncio
    async def test_prompt_quotes_the_original_text(self):
        client = make_ai_client()
        await TextEnricher(client=client).enrich("fresh mangoes")

        prompt = client.complete.await_args.args[0]
        assert prompt == (
            'Transform the following text into a compelling product story: "fresh mangoes"'
        )

    @pytest.mark.asyncio
    async def test_provider_error_falls_back_to_marked_text(self):
        client = make_ai_client()
        client.complete = AsyncMock(side_effect=RuntimeError("quota exceeded"))

        result = await TextEnricher(client=client).enrich("hello")

        assert result.text == "(AI Error) hello"
        assert result.degraded is True
        assert result.reason == "error"

    @pytest.mark.asyncio
    async def test_close_closes_client(self):
        client = make_ai_client()
        await TextEnricher(client=client).close()
        client.close.assert_awaited_once()


class TestBuildTextEnricher:
    def test_without_api_key_is_disabled(self):
        assert build_text_enricher(None).enabled is False
        assert build_text_enricher("").enabled is False

    def test_with_api_key_creates_client(self):
        with patch("src.ingest.services.text_enricher.OpenAIClient") as mock_client_class:
            enricher = build_text_enricher("sk-test")

        mock_client_class.assert_called_once_with(api_key="sk-test")
        assert enricher.enabled is True
