"""Tests for LINE image retrieval."""

import httpx
import pytest

from src.clients.line import DEFAULT_CONTENT_TYPE, LineContentClient, LineContentError
from src.content.store import ImageStore
from src.ingest.errors import ImageFetchFailed
from src.ingest.services.image_retriever import ImageRetriever, build_image_retriever
from tests.fakes import PNG_BYTES, make_line_client


class TestLineContentClient:
    @pytest.mark.asyncio
    async def test_sends_bearer_token_to_content_endpoint(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"data", headers={"content-type": "image/jpeg"})

        client = make_line_client(handler)

        content = await client.get_message_content("12345")

        assert content.data == b"data"
        assert content.content_type == "image/jpeg"
        assert str(seen[0].url) == "https://api-data.line.me/v2/bot/message/12345/content"
        assert seen[0].headers["authorization"] == "Bearer test-access-token"

    @pytest.mark.asyncio
    async def test_missing_content_type_defaults_to_octet_stream(self):
        client = make_line_client(lambda request: httpx.Response(200, content=b"raw"))

        content = await client.get_message_content("1")

        assert content.content_type == DEFAULT_CONTENT_TYPE

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self):
        client = make_line_client(lambda request: httpx.Response(401, text="Unauthorized"))

        with pytest.raises(LineContentError) as exc_info:
            await client.get_message_content("1")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_line_client(handler)

        with pytest.raises(LineContentError):
            await client.get_message_content("1")

    def test_requires_access_token(self):
        with pytest.raises(ValueError):
            LineContentClient("")


class TestImageRetriever:
    @pytest.mark.asyncio
    async def test_stores_image_and_returns_path(self):
        image_store = ImageStore()
        retriever = ImageRetriever(client=make_line_client(), image_store=image_store)

        path = await retriever.retrieve("img-1")

        assert path.startswith("/image/")
        image_id = path.removeprefix("/image/")
        stored = image_store.get(image_id)
        assert stored is not None
        assert stored.data == PNG_BYTES
        assert stored.content_type == "image/png"

    @pytest.mark.asyncio
    async def test_each_retrieval_gets_a_new_image_id(self):
        image_store = ImageStore()
        retriever = ImageRetriever(client=make_line_client(), image_store=image_store)

        first = await retriever.retrieve("img-1")
        second = await retriever.retrieve("img-1")

        assert first != second
        assert len(image_store) == 2

    @pytest.mark.asyncio
    async def test_not_found_raises_image_fetch_failed(self):
        image_store = ImageStore()
        retriever = ImageRetriever(client=make_line_client(), image_store=image_store)

        with pytest.raises(ImageFetchFailed):
            await retriever.retrieve("missing-1")

        assert len(image_store) == 0

    @pytest.mark.asyncio
    async def test_without_access_token_raises_image_fetch_failed(self):
        retriever = build_image_retriever(None, ImageStore())

        with pytest.raises(ImageFetchFailed):
            await retriever.retrieve("img-1")

    @pytest.mark.asyncio
    async def test_without_message_id_raises_image_fetch_failed(self):
        retriever = ImageRetriever(client=make_line_client(), image_store=ImageStore())

        with pytest.raises(ImageFetchFailed):
            await retriever.retrieve(None)
