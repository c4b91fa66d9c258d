"""
Context Retrieval Orchestrator

Read path: Index Store (+ Dependency Graph Builder) -> focus reweighting ->
token-budget pruning -> ContextBundle.

Sub-steps run concurrently, each under its own timeout. A step that fails or
times out leaves its section empty and is listed in degraded_sections; it
never aborts the retrieval.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Awaitable, Callable

from codectx.embeddings import EmbeddingGenerator
from codectx.graph import DependencyGraphBuilder, RelatedFile, Relationship
from codectx.index.models import SimilarityFilters
from codectx.index.store import IndexStore
from codectx.retrieval.budget import prune_to_budget
from codectx.retrieval.focus import apply_focus
from codectx.retrieval.models import (
    ContextBundle,
    CurrentFileContext,
    DependencyContext,
    ProjectContext,
    RetrievalOptions,
    SimilarCodeEntry,
)
from codectx.shared.domain.exceptions import RetrievalTimeout
from codectx.shared.infrastructure.config import RetrievalConfig
from codectx.shared.infrastructure.logging import get_logger
from codectx.shared.infrastructure.resilience import with_timeout_async
from codectx.shared.infrastructure.ttl_cache import TTLCache

logger = get_logger(__name__)

SECTION_CURRENT_FILE = "current_file"
SECTION_SIMILAR_CODE = "similar_code"
SECTION_DEPENDENCIES = "dependencies"
SECTION_RELATED_FILES = "related_files"
SECTION_PROJECT_CONTEXT = "project_context"


class ContextRetriever:
    """
    Assembles a token-bounded ContextBundle for a query.

    Examples:
        >>> retriever = ContextRetriever(store, embeddings, graph)
        >>> bundle = await retriever.retrieve_async("alice", "where is add used?", "src/b.js")
        >>> bundle.context_used().files_referenced
        2
    """

    def __init__(
        self,
        store: IndexStore,
        embeddings: EmbeddingGenerator,
        graph: DependencyGraphBuilder,
        config: RetrievalConfig | None = None,
    ):
        self.store = store
        self.embeddings = embeddings
        self.graph = graph
        self.config = config or RetrievalConfig()
        self._file_cache = TTLCache(maxsize=2000, ttl=self.config.file_context_ttl_seconds)
        self._project_cache = TTLCache(maxsize=500, ttl=self.config.project_context_ttl_seconds)

    async def retrieve_async(
        self,
        owner_id: str,
        query_text: str,
        current_file: str | None = None,
        options: RetrievalOptions | None = None,
    ) -> ContextBundle:
        options = options or RetrievalOptions()
        degraded: list[str] = []

        current, similar, dependencies, related, project = await asyncio.gather(
            self._step(SECTION_CURRENT_FILE, self._current_file_context(owner_id, current_file), None, degraded),
            self._step(SECTION_SIMILAR_CODE, self._similar_code(owner_id, query_text, current_file, options), [], degraded),
            self._step(SECTION_DEPENDENCIES, self._dependency_context(owner_id, current_file), [], degraded),
            self._step(SECTION_RELATED_FILES, self._related_files(owner_id, current_file), [], degraded),
            self._step(SECTION_PROJECT_CONTEXT, self._project_context(owner_id), None, degraded),
        )

        bundle = ContextBundle(
            current_file=current,
            similar_code=similar,
            dependencies=dependencies,
            related_files=related,
            project_context=project,
            degraded_sections=degraded,
        )
        apply_focus(bundle, options.focus_area, options.include_tests, self.config.focus_boost)
        max_tokens = options.max_tokens or self.config.default_max_tokens
        prune_to_budget(bundle, max_tokens, self.config.chars_per_token)

        logger.info(
            "context_retrieved",
            owner_id=owner_id,
            current_file=current_file,
            focus=options.focus_area.value,
            similar=len(bundle.similar_code),
            related=len(bundle.related_files),
            dependencies=len(bundle.dependencies),
            tokens=bundle.total_tokens,
            degraded=degraded,
        )
        return bundle

    def invalidate(self, owner_id: str, file_path: str | None = None) -> None:
        """Drop every cached view for *owner_id*; called when its index changes."""
        self._file_cache.invalidate_prefix(_owner_prefix(owner_id))
        self._project_cache.invalidate(_owner_prefix(owner_id))
        self.graph.invalidate(owner_id, file_path)

    async def _step(self, section: str, coro: Awaitable[Any], default: Any, degraded: list[str]) -> Any:
        try:
            return await with_timeout_async(
                coro,
                self.config.step_timeout_seconds,
                f"retrieval_{section}",
                error_cls=RetrievalTimeout,
            )
        except Exception as e:
            logger.warning("retrieval_step_degraded", section=section, error=str(e), error_type=type(e).__name__)
            degraded.append(section)
            return default

    async def _blocking(self, func: Callable, *args, **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    # =========================================================================
    # Sub-steps
    # =========================================================================

    async def _current_file_context(self, owner_id: str, current_file: str | None) -> CurrentFileContext | None:
        if not current_file:
            return None

        key = _owner_prefix(owner_id) + current_file
        cached = self._file_cache.get(key)
        if cached is not None:
            return cached

        records = await self._blocking(self.store.query_by_file, owner_id, current_file)
        if not records:
            return None

        context = CurrentFileContext.from_indexed_file(records[0], self.config.content_preview_chars)
        self._file_cache.set(key, context)
        return context

    async def _similar_code(
        self,
        owner_id: str,
        query_text: str,
        current_file: str | None,
        options: RetrievalOptions,
    ) -> list[SimilarCodeEntry]:
        # The provider gets only part of the step deadline; the rest is for the store query
        embedding = await self.embeddings.embed_async(
            query_text,
            timeout_seconds=self.config.step_timeout_seconds * self.config.query_embedding_timeout_ratio,
        )
        chunks = await self._blocking(
            self.store.query_similar,
            owner_id,
            embedding.vector,
            SimilarityFilters(
                workspace_path=options.workspace_path,
                exclude_file=current_file,
                embedding_model=embedding.model,
            ),
            top_k=self.config.similar_top_k,
            min_similarity=self.config.min_similarity,
            fallback_weight=self.config.fallback_weight,
        )
        return [SimilarCodeEntry.from_similar_chunk(chunk) for chunk in chunks]

    async def _dependency_context(self, owner_id: str, current_file: str | None) -> list[DependencyContext]:
        """Resolved imports_from files with their exports and first few functions."""
        if not current_file:
            return []

        records = await self._blocking(self.store.query_by_file, owner_id, current_file)
        if not records:
            return []
        imports = records[0].imports

        dependencies: list[DependencyContext] = []
        for related in await self._blocking(self.graph.related_files, owner_id, current_file):
            if related.relationship != Relationship.IMPORTS_FROM:
                continue
            targets = await self._blocking(self.store.query_by_file, owner_id, related.file_path)
            if not targets:
                continue
            target = targets[0]
            module = next(
                (ref.module for ref in imports if set(ref.names).intersection(related.symbols)),
                related.relative_path,
            )
            dependencies.append(
                DependencyContext(
                    module=module,
                    file_path=target.file_path,
                    relative_path=target.relative_path,
                    exports=target.exports,
                    key_functions=target.key_functions(self.config.key_functions_per_dependency),
                )
            )
        return dependencies

    async def _related_files(self, owner_id: str, current_file: str | None) -> list[RelatedFile]:
        if not current_file:
            return []
        related = await self._blocking(self.graph.related_files, owner_id, current_file)
        return related[: self.config.max_related_files]

    async def _project_context(self, owner_id: str) -> ProjectContext:
        key = _owner_prefix(owner_id)
        cached = self._project_cache.get(key)
        if cached is not None:
            return cached.model_copy(deep=True)

        stats = await self._blocking(self.store.workspace_statistics, owner_id)
        context = ProjectContext(
            total_files=stats.total_files,
            total_lines=stats.total_lines,
            languages=stats.languages,
            frameworks=stats.frameworks,
            workspaces=stats.workspaces,
        )
        self._project_cache.set(key, context)
        return context.model_copy(deep=True)


def _owner_prefix(owner_id: str) -> str:
    return f"{owner_id}\x00"
