"""
Tests for OpenAIEmbeddingProvider using an httpx mock transport.
"""

import json

import httpx
import pytest

from codectx.embeddings import OpenAIEmbeddingProvider
from codectx.shared.domain.exceptions import EmbeddingProviderError


def _provider(handler, api_key="sk-test"):
    return OpenAIEmbeddingProvider(
        api_key=api_key,
        model="test-model",
        base_url="https://embeddings.test/v1/",
        transport=httpx.MockTransport(handler),
    )


class TestOpenAIEmbeddingProvider:
    """Test request shape and response handling."""

    @pytest.mark.asyncio
    async def test_success_sorted_by_index(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "data": [
                        {"index": 1, "embedding": [0.0, 1.0]},
                        {"index": 0, "embedding": [1.0, 0.0]},
                    ],
                    "usage": {"total_tokens": 4},
                },
            )

        vectors = await _provider(handler).embed_batch_async(["first", "second"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        assert seen["url"] == "https://embeddings.test/v1/embeddings"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "test-model"
        assert seen["body"]["input"] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_single_text_sent_as_string(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": [0.5]}]})

        assert await _provider(handler).embed_batch_async(["only"]) == [[0.5]]
        assert seen["body"]["input"] == "only"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        provider = _provider(lambda request: httpx.Response(429, json={"error": "rate limited"}))

        with pytest.raises(EmbeddingProviderError) as exc_info:
            await provider.embed_batch_async(["x"])
        assert exc_info.value.context["status_code"] == 429

    @pytest.mark.asyncio
    async def test_wrong_count(self):
        provider = _provider(lambda request: httpx.Response(200, json={"data": []}))

        with pytest.raises(EmbeddingProviderError):
            await provider.embed_batch_async(["x"])

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(EmbeddingProviderError):
            await _provider(handler).embed_batch_async(["x"])

    @pytest.mark.asyncio
    async def test_missing_key(self):
        provider = _provider(lambda request: httpx.Response(200), api_key=None)

        assert provider.is_configured is False
        with pytest.raises(EmbeddingProviderError):
            await provider.embed_batch_async(["x"])
