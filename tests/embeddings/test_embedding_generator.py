"""
Tests for EmbeddingGenerator fallback, batching and caching.
"""

import asyncio

import pytest

from codectx.embeddings import EmbeddingGenerator, fallback_vector, preprocess_text
from codectx.shared.domain.exceptions import EmbeddingProviderError
from codectx.shared.infrastructure.config import EmbeddingConfig


class FakeProvider:
    """Provider returning [len(text), 1.0]; can fail whole batches."""

    model = "fake-model"

    def __init__(self, fail_batches: bool = False, fail_always: bool = False):
        self.fail_batches = fail_batches
        self.fail_always = fail_always
        self.calls: list[list[str]] = []

    async def embed_batch_async(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.fail_always or (self.fail_batches and len(texts) > 1):
            raise EmbeddingProviderError("provider down")
        return [[float(len(text)), 1.0] for text in texts]


class HangingProvider:
    """Provider that never answers within a test's lifetime."""

    model = "slow-model"

    async def embed_batch_async(self, texts: list[str]) -> list[list[float]]:
        await asyncio.sleep(60)
        return [[1.0] for _ in texts]


class TestEmbeddingGenerator:
    """Test remote-first embedding with fallback."""

    @pytest.mark.asyncio
    async def test_no_provider_uses_fallback(self, app_settings):
        generator = EmbeddingGenerator(EmbeddingConfig(), app_settings)

        embedding = await generator.embed_async("def add(a, b):   return a + b")

        assert generator.has_provider is False
        assert embedding.source == "fallback"
        assert embedding.vector == fallback_vector(preprocess_text("def add(a, b):   return a + b"))

    @pytest.mark.asyncio
    async def test_remote_result_cached(self, app_settings):
        provider = FakeProvider()
        generator = EmbeddingGenerator(EmbeddingConfig(), app_settings, provider=provider)

        first = await generator.embed_async("hello")
        second = await generator.embed_async("  hello  ")

        assert first.source == "remote"
        assert first.model == "fake-model"
        assert second.vector == first.vector
        assert len(provider.calls) == 1
        assert generator.stats["cache_hits"] == 1

    @pytest.mark.asyncio
    async def test_provider_failure_falls_back(self, app_settings):
        generator = EmbeddingGenerator(EmbeddingConfig(), app_settings, provider=FakeProvider(fail_always=True))

        embedding = await generator.embed_async("hello")

        assert embedding.source == "fallback"
        assert generator.stats["fallback"] == 1

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self, app_settings):
        provider = FakeProvider()
        generator = EmbeddingGenerator(EmbeddingConfig(batch_size=2), app_settings, provider=provider)

        results = await generator.embed_batch_async(["a", "bb", "ccc"])

        assert [r.vector[0] for r in results] == [1.0, 2.0, 3.0]
        assert provider.calls == [["a", "bb"], ["ccc"]]

    @pytest.mark.asyncio
    async def test_failed_batch_retried_individually(self, app_settings):
        provider = FakeProvider(fail_batches=True)
        generator = EmbeddingGenerator(EmbeddingConfig(), app_settings, provider=provider)

        results = await generator.embed_batch_async(["a", "bb"])

        assert [r.source for r in results] == ["remote", "remote"]
        assert provider.calls == [["a", "bb"], ["a"], ["bb"]]

    @pytest.mark.asyncio
    async def test_empty_text_never_reaches_provider(self, app_settings):
        provider = FakeProvider()
        generator = EmbeddingGenerator(EmbeddingConfig(), app_settings, provider=provider)

        results = await generator.embed_batch_async(["   ", "x"])

        assert results[0].source == "fallback"
        assert results[1].source == "remote"
        assert provider.calls == [["x"]]

    @pytest.mark.asyncio
    async def test_open_breaker_falls_back_without_calling(self, app_settings):
        provider = FakeProvider(fail_always=True)
        generator = EmbeddingGenerator(
            EmbeddingConfig(failure_threshold=1, cooldown_seconds=60), app_settings, provider=provider
        )

        await generator.embed_async("one")
        embedding = await generator.embed_async("two")

        assert embedding.source == "fallback"
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_provider_timeout_falls_back(self, app_settings):
        generator = EmbeddingGenerator(EmbeddingConfig(timeout_seconds=0.05), app_settings, provider=HangingProvider())

        embedding = await generator.embed_async("hello")
        batch = await generator.embed_batch_async(["a", "bb"])

        assert embedding.source == "fallback"
        assert [r.source for r in batch] == ["fallback", "fallback"]

    @pytest.mark.asyncio
    async def test_call_deadline_only_tightens(self, app_settings):
        """Test a per-call deadline shorter than the configured one applies."""
        generator = EmbeddingGenerator(EmbeddingConfig(timeout_seconds=30), app_settings, provider=HangingProvider())

        embedding = await asyncio.wait_for(generator.embed_async("hello", timeout_seconds=0.05), timeout=5)

        assert embedding.source == "fallback"
        assert generator.timeout_seconds == 30

    @pytest.mark.asyncio
    async def test_open_breaker_sends_whole_batch_to_fallback(self, app_settings):
        provider = FakeProvider(fail_always=True)
        generator = EmbeddingGenerator(
            EmbeddingConfig(failure_threshold=1, cooldown_seconds=60), app_settings, provider=provider
        )
        await generator.embed_async("one")

        results = await generator.embed_batch_async(["a", "bb", "ccc"])

        assert [r.source for r in results] == ["fallback"] * 3
        assert len(provider.calls) == 1
