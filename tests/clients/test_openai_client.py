"""Tests for the OpenAI-compatible completion client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from src.clients.openai import OpenAIClient


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("OPENAI_MODEL", raising=False)
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    return OpenAIClient(api_key="sk-test")


class TestOpenAIClient:
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            OpenAIClient()

    def test_reads_model_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "gemini-2.0-flash")

        assert OpenAIClient(api_key="sk-test").model == "gemini-2.0-flash"

    @pytest.mark.asyncio
    async def test_complete_sends_single_user_message(self, client):
        create = AsyncMock(return_value=_completion("A story"))
        client.async_client.chat.completions.create = create

        assert await client.complete("Tell a story") == "A story"

        create.assert_awaited_once_with(
            model="gpt-4o-mini",
            messages=[{"role": "user", "content": "Tell a story"}],
        )

    @pytest.mark.asyncio
    async def test_empty_completion_raises(self, client):
        client.async_client.chat.completions.create = AsyncMock(return_value=_completion(None))

        with pytest.raises(ValueError, match="Empty completion"):
            await client.complete("Tell a story")
