"""
Embedding generator.

Remote provider first, deterministic fallback always available. Provider calls
are bounded by a timeout and guarded by a circuit breaker; any provider
failure is logged and downgraded, never surfaced to callers.
"""

from __future__ import annotations

from codectx.embeddings.fallback import fallback_embedding, preprocess_text
from codectx.embeddings.models import FallbackEmbedding, RemoteEmbedding
from codectx.embeddings.provider import EmbeddingProvider, OpenAIEmbeddingProvider
from codectx.shared.domain.exceptions import EmbeddingProviderError, OperationTimeoutError
from codectx.shared.infrastructure.config import EmbeddingConfig, Settings, settings as default_settings
from codectx.shared.infrastructure.logging import get_logger
from codectx.shared.infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerOpen,
    with_timeout_async,
)
from codectx.shared.infrastructure.ttl_cache import TTLCache
from codectx.shared.utils import cache_key

logger = get_logger(__name__)

EmbeddingResult = RemoteEmbedding | FallbackEmbedding

_PROVIDER_FAILURES = (EmbeddingProviderError, OperationTimeoutError, CircuitBreakerOpen)


class EmbeddingGenerator:
    """
    Converts text into embeddings.

    Only remote results are cached (key: sha256 of normalized text + model id);
    fallback vectors are cheap and recomputed, so a recovered provider takes
    over as soon as the cache misses.

    Examples:
        >>> generator = EmbeddingGenerator(EmbeddingConfig())
        >>> embedding = await generator.embed_async("def add(a, b): return a + b")
        >>> embedding.source
        'fallback'
    """

    def __init__(
        self,
        config: EmbeddingConfig | None = None,
        app_settings: Settings | None = None,
        provider: EmbeddingProvider | None = None,
        cache: TTLCache | None = None,
    ):
        self.config = config or EmbeddingConfig()
        app_settings = app_settings or default_settings

        self.model = self.config.model or app_settings.embedding_model
        self.timeout_seconds = self.config.timeout_seconds or app_settings.embedding_timeout_seconds

        if provider is None:
            api_key = self.config.api_key or app_settings.embedding_api_key
            if api_key:
                provider = OpenAIEmbeddingProvider(
                    api_key=api_key,
                    model=self.model,
                    base_url=self.config.base_url or app_settings.embedding_base_url,
                    timeout_seconds=self.timeout_seconds,
                )
            else:
                logger.info("embedding_provider_not_configured", fallback_dimensions=self.config.fallback_dimensions)
        else:
            self.model = provider.model

        self._provider = provider
        self._cache = cache or TTLCache(maxsize=self.config.cache_size, ttl=self.config.cache_ttl_seconds)
        self._breaker = CircuitBreaker(
            "embedding_provider",
            CircuitBreakerConfig(
                failure_threshold=self.config.failure_threshold,
                timeout_duration=self.config.cooldown_seconds,
            ),
        )
        self.stats = {"remote": 0, "fallback": 0, "cache_hits": 0}

    @property
    def has_provider(self) -> bool:
        return self._provider is not None

    async def embed_async(self, text: str, timeout_seconds: float | None = None) -> EmbeddingResult:
        """
        Embed one text. Always returns an embedding.

        *timeout_seconds* tightens the provider deadline for this call only;
        it never extends the configured one.
        """
        normalized = preprocess_text(text, self.config.max_text_chars)
        key = cache_key(normalized, self.model)

        cached = self._cache.get(key)
        if cached is not None:
            self.stats["cache_hits"] += 1
            return cached

        if self._provider is None or not normalized:
            return self._fallback(normalized)

        try:
            vectors = await self._call_provider([normalized], timeout_seconds)
        except _PROVIDER_FAILURES as e:
            logger.warning(
                "embedding_generation_failed_using_fallback",
                error=str(e),
                error_type=type(e).__name__,
                text_length=len(normalized),
            )
            return self._fallback(normalized)

        embedding = RemoteEmbedding(vector=vectors[0], model=self.model)
        self._cache.set(key, embedding)
        self.stats["remote"] += 1
        return embedding

    async def embed_batch_async(self, texts: list[str]) -> list[EmbeddingResult]:
        """
        Embed many texts, preserving order.

        Cache misses are sent in groups of ``batch_size``; a failed group is
        retried item by item, each item falling back independently.
        """
        normalized = [preprocess_text(t, self.config.max_text_chars) for t in texts]
        results: list[EmbeddingResult | None] = [None] * len(texts)
        pending: list[int] = []

        for i, text in enumerate(normalized):
            cached = self._cache.get(cache_key(text, self.model))
            if cached is not None:
                self.stats["cache_hits"] += 1
                results[i] = cached
            elif self._provider is None or not text:
                results[i] = self._fallback(text)
            else:
                pending.append(i)

        if pending and not self._breaker.allows_calls:
            logger.warning(
                "embedding_circuit_open_using_fallback",
                texts=len(pending),
                retry_after=round(self._breaker.retry_after(), 1),
            )
            for i in pending:
                results[i] = self._fallback(normalized[i])
            pending = []

        batch_size = self.config.batch_size
        for start in range(0, len(pending), batch_size):
            batch = pending[start : start + batch_size]
            try:
                vectors = await self._call_provider([normalized[i] for i in batch])
            except _PROVIDER_FAILURES as e:
                logger.warning(
                    "embedding_batch_failed_processing_individually",
                    error=str(e),
                    error_type=type(e).__name__,
                    batch_size=len(batch),
                )
                for i in batch:
                    results[i] = await self.embed_async(normalized[i])
                continue

            for i, vector in zip(batch, vectors):
                embedding = RemoteEmbedding(vector=vector, model=self.model)
                self._cache.set(cache_key(normalized[i], self.model), embedding)
                self.stats["remote"] += 1
                results[i] = embedding

        return results  # type: ignore[return-value]

    async def _call_provider(self, texts: list[str], timeout_seconds: float | None = None) -> list[list[float]]:
        deadline = self.timeout_seconds if timeout_seconds is None else min(self.timeout_seconds, timeout_seconds)
        async with self._breaker:
            vectors = await with_timeout_async(
                self._provider.embed_batch_async(texts),
                deadline,
                "embedding_provider",
            )
        if len(vectors) != len(texts):
            raise EmbeddingProviderError(
                "Provider returned wrong number of vectors",
                {"expected": len(texts), "received": len(vectors)},
            )
        return vectors

    def _fallback(self, normalized: str) -> FallbackEmbedding:
        self.stats["fallback"] += 1
        return fallback_embedding(normalized, self.config.fallback_dimensions)
