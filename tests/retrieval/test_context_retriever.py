"""
Tests for ContextRetriever over an indexed workspace.
"""

import asyncio

import pytest
import pytest_asyncio

from codectx.engine import ContextEngine
from codectx.graph import Relationship
from codectx.retrieval import FocusArea, RetrievalOptions, estimate_bundle_tokens
from codectx.shared.infrastructure.config import EngineConfig, RetrievalConfig

OWNER = "alice"


class HangingProvider:
    model = "slow-model"

    async def embed_batch_async(self, texts: list[str]) -> list[list[float]]:
        await asyncio.sleep(60)
        return [[1.0] for _ in texts]


@pytest_asyncio.fixture
async def indexed_engine(store, app_settings, js_workspace):
    engine = ContextEngine(EngineConfig(), app_settings, store=store)
    await engine.index_workspace_async(OWNER, js_workspace)
    return engine


class TestRetrieveContext:
    """Test bundle assembly for the b.js -> a.js workspace."""

    @pytest.mark.asyncio
    async def test_current_file_and_dependencies(self, indexed_engine):
        bundle = await indexed_engine.retrieve_context_async(OWNER, "sum the items", "src/b.js")

        assert bundle.current_file.relative_path == "src/b.js"
        assert bundle.current_file.content_preview.startswith("import { add } from './a';")

        assert [(r.relative_path, r.relationship) for r in bundle.related_files] == [
            ("src/a.js", Relationship.IMPORTS_FROM)
        ]
        assert len(bundle.dependencies) == 1
        dependency = bundle.dependencies[0]
        assert dependency.module == "./a"
        assert dependency.relative_path == "src/a.js"
        assert dependency.exports == ["add", "subtract"]
        assert dependency.key_functions == ["add", "subtract"]

        assert bundle.degraded_sections == []
        assert bundle.project_context.total_files == 4

    @pytest.mark.asyncio
    async def test_similar_code_excludes_current_and_test_files(self, indexed_engine):
        bundle = await indexed_engine.retrieve_context_async(OWNER, "add two numbers", "src/b.js")

        assert bundle.similar_code
        paths = {e.relative_path for e in bundle.similar_code}
        assert "src/b.js" not in paths
        assert "tests/a.test.js" not in paths
        relevances = [e.relevance for e in bundle.similar_code]
        assert relevances == sorted(relevances, reverse=True)

    @pytest.mark.asyncio
    async def test_tests_hidden_unless_requested(self, indexed_engine):
        hidden = await indexed_engine.retrieve_context_async(OWNER, "add", "src/a.js")
        shown = await indexed_engine.retrieve_context_async(
            OWNER, "add", "src/a.js", RetrievalOptions(include_tests=True)
        )

        assert [r.relative_path for r in hidden.related_files] == ["src/b.js"]
        assert {r.relative_path for r in shown.related_files} == {"src/b.js", "tests/a.test.js"}
        assert all(r.relationship == Relationship.IMPORTS_TO for r in shown.related_files)

    @pytest.mark.asyncio
    async def test_testing_focus_puts_tests_first(self, indexed_engine):
        bundle = await indexed_engine.retrieve_context_async(
            OWNER, "how is add tested", "src/a.js", RetrievalOptions(focus_area=FocusArea.TESTING)
        )

        assert bundle.related_files[0].relative_path == "tests/a.test.js"

    @pytest.mark.asyncio
    async def test_without_current_file(self, indexed_engine):
        bundle = await indexed_engine.retrieve_context_async(OWNER, "subtract")

        assert bundle.current_file is None
        assert bundle.related_files == []
        assert bundle.dependencies == []
        assert bundle.similar_code

    @pytest.mark.asyncio
    async def test_unknown_owner_gets_empty_bundle(self, indexed_engine):
        bundle = await indexed_engine.retrieve_context_async("bob", "add", "src/b.js")

        assert bundle.current_file is None
        assert bundle.similar_code == []
        assert bundle.project_context.total_files == 0
        assert bundle.total_tokens == 0


class TestTokenBudget:
    @pytest.mark.asyncio
    async def test_total_tokens_matches_formatted_bundle(self, indexed_engine):
        bundle = await indexed_engine.retrieve_context_async(OWNER, "add", "src/b.js")

        assert bundle.total_tokens == estimate_bundle_tokens(bundle)
        assert bundle.total_tokens <= 8000

    @pytest.mark.asyncio
    async def test_tight_budget_prunes_similar_code_first(self, indexed_engine):
        full = await indexed_engine.retrieve_context_async(OWNER, "add", "src/b.js")
        without_similar = full.model_copy(deep=True)
        without_similar.similar_code = []
        budget = estimate_bundle_tokens(without_similar)

        bundle = await indexed_engine.retrieve_context_async(
            OWNER, "add", "src/b.js", RetrievalOptions(max_tokens=budget)
        )

        assert bundle.similar_code == []
        assert len(bundle.related_files) == 1
        assert len(bundle.dependencies) == 1
        assert bundle.total_tokens <= budget

    @pytest.mark.asyncio
    async def test_configured_default_budget_applies(self, indexed_engine):
        full = await indexed_engine.retrieve_context_async(OWNER, "add", "src/b.js")
        without_similar = full.model_copy(deep=True)
        without_similar.similar_code = []
        indexed_engine.retriever.config.default_max_tokens = estimate_bundle_tokens(without_similar)

        bundle = await indexed_engine.retrieve_context_async(OWNER, "add", "src/b.js")

        assert bundle.similar_code == []
        assert len(bundle.dependencies) == 1


class TestDegradation:
    """A failing or slow sub-step empties its section only."""

    @pytest.mark.asyncio
    async def test_failing_step(self, indexed_engine, monkeypatch):
        def broken(owner_id):
            raise RuntimeError("statistics unavailable")

        monkeypatch.setattr(indexed_engine.store, "workspace_statistics", broken)
        bundle = await indexed_engine.retrieve_context_async(OWNER, "add", "src/b.js")

        assert bundle.degraded_sections == ["project_context"]
        assert bundle.project_context is None
        assert bundle.current_file is not None
        assert len(bundle.dependencies) == 1

    @pytest.mark.asyncio
    async def test_slow_step_times_out(self, store, app_settings, js_workspace, monkeypatch):
        config = EngineConfig(retrieval=RetrievalConfig(step_timeout_seconds=0.2))
        engine = ContextEngine(config, app_settings, store=store)
        await engine.index_workspace_async(OWNER, js_workspace)

        async def slow(text, timeout_seconds=None):
            await asyncio.sleep(10)

        monkeypatch.setattr(engine.embeddings, "embed_async", slow)
        bundle = await engine.retrieve_context_async(OWNER, "add", "src/b.js")

        assert bundle.degraded_sections == ["similar_code"]
        assert bundle.similar_code == []
        assert bundle.current_file is not None

    @pytest.mark.asyncio
    async def test_hanging_provider_falls_back_within_step(self, store, app_settings, js_workspace):
        """Test the query embedding falls back before the step deadline passes."""
        await ContextEngine(EngineConfig(), app_settings, store=store).index_workspace_async(OWNER, js_workspace)

        config = EngineConfig(retrieval=RetrievalConfig(step_timeout_seconds=0.4))
        engine = ContextEngine(config, app_settings, store=store, embedding_provider=HangingProvider())
        assert engine.embeddings.timeout_seconds > config.retrieval.step_timeout_seconds

        bundle = await engine.retrieve_context_async(OWNER, "add two numbers", "src/b.js")

        assert bundle.degraded_sections == []
        assert bundle.similar_code
        assert engine.embeddings.stats["fallback"] == 1

class TestInvalidation:
    @pytest.mark.asyncio
    async def test_reindex_refreshes_cached_views(self, indexed_engine, js_workspace):
        before = await indexed_engine.retrieve_context_async(OWNER, "add", "src/b.js")
        assert before.project_context.total_files == 4

        (js_workspace / "src" / "c.js").write_text("import { add } from './a';\nexport const twice = (x) => add(x, x);\n")
        await indexed_engine.index_workspace_async(OWNER, js_workspace)

        after = await indexed_engine.retrieve_context_async(OWNER, "add", "src/a.js")
        assert after.project_context.total_files == 5
        assert {r.relative_path for r in after.related_files} == {"src/b.js", "src/c.js"}
