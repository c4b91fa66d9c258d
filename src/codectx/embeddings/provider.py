"""
Remote embedding provider (OpenAI-compatible /embeddings endpoint).
"""

from typing import Protocol, runtime_checkable

import httpx

from codectx.shared.domain.exceptions import EmbeddingProviderError
from codectx.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that can turn a batch of texts into vectors."""

    @property
    def model(self) -> str: ...

    async def embed_batch_async(self, texts: list[str]) -> list[list[float]]: ...


class OpenAIEmbeddingProvider:
    """
    Client for OpenAI-compatible embedding endpoints.

    Every failure (missing key, transport error, non-2xx status, malformed
    body) is raised as EmbeddingProviderError so the generator can fall back.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def embed_batch_async(self, texts: list[str]) -> list[list[float]]:
        if not self._api_key:
            raise EmbeddingProviderError("Embedding API key not configured")
        if not texts:
            return []

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self._model,
            "input": texts if len(texts) > 1 else texts[0],
            "encoding_format": "float",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self._base_url}/embeddings", headers=headers, json=payload)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            raise EmbeddingProviderError(
                f"Embedding request failed with status {e.response.status_code}",
                {"status_code": e.response.status_code, "model": self._model},
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise EmbeddingProviderError(f"Embedding request failed: {e}", {"model": self._model}) from e

        return self._parse_response(result, expected=len(texts))

    def _parse_response(self, result: object, expected: int) -> list[list[float]]:
        data = result.get("data") if isinstance(result, dict) else None
        if not isinstance(data, list) or len(data) != expected:
            raise EmbeddingProviderError(
                "Invalid embedding response format",
                {"expected": expected, "received": len(data) if isinstance(data, list) else None},
            )

        try:
            ordered = sorted(data, key=lambda item: item.get("index", 0))
            vectors = [[float(x) for x in item["embedding"]] for item in ordered]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise EmbeddingProviderError(f"Invalid embedding response format: {e}") from e

        if any(not vector for vector in vectors):
            raise EmbeddingProviderError("Embedding response contained an empty vector")

        usage = result.get("usage") or {}
        logger.debug("embedding_batch_received", count=len(vectors), total_tokens=usage.get("total_tokens"))
        return vectors
