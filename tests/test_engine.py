"""
Tests for the ContextEngine facade.
"""

import pytest
import pytest_asyncio

from codectx import ContextEngine, RetrievalOptions
from codectx.shared.infrastructure.config import EngineConfig

OWNER = "alice"


@pytest_asyncio.fixture
async def engine(store, app_settings, js_workspace):
    context_engine = ContextEngine(EngineConfig(), app_settings, store=store)
    await context_engine.index_workspace_async(OWNER, js_workspace)
    return context_engine


class FailingGateway:
    async def complete_async(self, prompt, context, model_id):
        raise RuntimeError("model unavailable")


class TestAsk:
    """Test ask_async end to end with a fake gateway."""

    @pytest.mark.asyncio
    async def test_prompt_sent_with_context(self, engine, fake_gateway):
        result = await engine.ask_async(OWNER, "where is add used?", fake_gateway, "test-model", "src/b.js")

        assert result.response.text == "answer"
        call = fake_gateway.calls[0]
        assert call["prompt"] == "where is add used?"
        assert call["model_id"] == "test-model"
        assert call["context"].startswith("[Current File]: src/b.js (javascript)")
        assert "[Dependencies]:\n  - ./a -> src/a.js" in call["context"]

        assert result.context_used.type == "intelligent_context"
        assert result.context_used.files_referenced >= 2
        assert result.context_used.dependencies_included == 1
        assert result.context_used.token_count > 0
        assert result.degraded_sections == []

    @pytest.mark.asyncio
    async def test_retrieval_failure_still_asks(self, engine, fake_gateway, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("index corrupt")

        monkeypatch.setattr(engine.retriever, "retrieve_async", broken)
        result = await engine.ask_async(OWNER, "hello", fake_gateway, "test-model")

        assert fake_gateway.calls[0]["context"] == ""
        assert result.degraded_sections == ["all"]
        assert result.context_used.files_referenced == 0

    @pytest.mark.asyncio
    async def test_gateway_errors_propagate(self, engine):
        with pytest.raises(RuntimeError, match="model unavailable"):
            await engine.ask_async(OWNER, "hello", FailingGateway(), "test-model")

    @pytest.mark.asyncio
    async def test_options_passed_through(self, engine, fake_gateway):
        result = await engine.ask_async(
            OWNER, "add", fake_gateway, "m", "src/b.js", RetrievalOptions(max_tokens=1)
        )
        assert result.context_used.dependencies_included == 0


class TestForWorkspace:
    def test_reads_workspace_config(self, tmp_path, app_settings, write_files):
        write_files(tmp_path, {".codectx/config.yaml": "retrieval:\n  maxRelatedFiles: 1\n  similarTopK: 4\n"})

        engine = ContextEngine.for_workspace(tmp_path, app_settings)
        try:
            assert engine.config.retrieval.max_related_files == 1
            assert engine.config.retrieval.similar_top_k == 4
            assert engine.retriever.config.max_related_files == 1
        finally:
            engine.close()

    def test_defaults_without_config(self, tmp_path, app_settings):
        engine = ContextEngine.for_workspace(tmp_path, app_settings)
        try:
            assert engine.config.retrieval.max_related_files == 10
            assert engine.embeddings.has_provider is False
        finally:
            engine.close()
