"""
Context engine facade.

Wires settings, store, analyzer, embedding generator, indexer, dependency
graph and retriever into the three inbound operations: index a workspace,
retrieve context, and ask a language model with that context.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import Field

from codectx.analyzer import CodeAnalyzer, CodeChunker
from codectx.embeddings import EmbeddingGenerator, EmbeddingProvider
from codectx.gateway import GatewayResponse, LanguageModelGateway
from codectx.graph import DependencyGraphBuilder
from codectx.index import IndexingStats, IndexStore, SQLiteIndexStore, WorkspaceIndexer
from codectx.retrieval import ContextBundle, ContextRetriever, ContextUsed, RetrievalOptions, format_context
from codectx.shared.domain.base_model import BaseDomainModel
from codectx.shared.infrastructure.config import EngineConfig, Settings, load_engine_config, settings as default_settings
from codectx.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class AskResult(BaseDomainModel):
    response: GatewayResponse
    context_used: ContextUsed = Field(default_factory=ContextUsed)
    degraded_sections: list[str] = Field(default_factory=list)


class ContextEngine:
    """
    Entry point for editor integrations.

    Examples:
        >>> engine = ContextEngine.for_workspace("/path/to/project")
        >>> await engine.index_workspace_async("alice", "/path/to/project")
        >>> bundle = await engine.retrieve_context_async("alice", "how is add tested?")
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        app_settings: Settings | None = None,
        store: IndexStore | None = None,
        embedding_provider: EmbeddingProvider | None = None,
    ):
        self.config = config or EngineConfig()
        self.settings = app_settings or default_settings

        self.store = store or SQLiteIndexStore(self.settings.database_path)
        self.analyzer = CodeAnalyzer(self.config.analyzer)
        self.chunker = CodeChunker(self.config.analyzer)
        self.embeddings = EmbeddingGenerator(self.config.embeddings, self.settings, provider=embedding_provider)
        self.indexer = WorkspaceIndexer(
            self.store,
            self.analyzer,
            self.chunker,
            self.embeddings,
            scanner_config=self.config.scanner,
            config=self.config.indexing,
        )
        self.graph = DependencyGraphBuilder(self.store, self.config.retrieval)
        self.retriever = ContextRetriever(self.store, self.embeddings, self.graph, self.config.retrieval)
        self.indexer.on_file_changed(self.retriever.invalidate)

        logger.info(
            "context_engine_initialized",
            store=type(self.store).__name__,
            remote_embeddings=self.embeddings.has_provider,
        )

    @classmethod
    def for_workspace(cls, root: str | Path, app_settings: Settings | None = None, **kwargs) -> "ContextEngine":
        """Build an engine using the workspace's .codectx/config.yaml, if any."""
        return cls(config=load_engine_config(project_root=Path(root)), app_settings=app_settings, **kwargs)

    async def index_workspace_async(
        self,
        owner_id: str,
        root: str | Path,
        force_reindex: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> IndexingStats:
        """
        Raises:
            WorkspaceRootError: If root does not exist or is not a directory
        """
        return await self.indexer.index_workspace_async(owner_id, root, force_reindex, cancel_event)

    async def retrieve_context_async(
        self,
        owner_id: str,
        query: str,
        current_file: str | None = None,
        options: RetrievalOptions | None = None,
    ) -> ContextBundle:
        return await self.retriever.retrieve_async(owner_id, query, current_file, options)

    async def ask_async(
        self,
        owner_id: str,
        prompt: str,
        gateway: LanguageModelGateway,
        model_id: str,
        current_file: str | None = None,
        options: RetrievalOptions | None = None,
    ) -> AskResult:
        """
        Retrieve context for *prompt* and send both to *gateway*.

        A retrieval failure downgrades to an empty context; gateway errors
        propagate to the caller unchanged.
        """
        try:
            bundle = await self.retriever.retrieve_async(owner_id, prompt, current_file, options)
        except Exception as e:
            logger.error("context_retrieval_failed_asking_without_context", owner_id=owner_id, error=str(e))
            bundle = ContextBundle(degraded_sections=["all"])

        response = await gateway.complete_async(prompt, format_context(bundle), model_id)
        return AskResult(
            response=response,
            context_used=bundle.context_used(),
            degraded_sections=bundle.degraded_sections,
        )

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close:
            close()
