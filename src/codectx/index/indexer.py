"""
Workspace indexer.

Write path: Scanner -> Analyzer -> Chunker -> Embedding Generator -> Index Store.
Files are processed concurrently under a semaphore; one file failing never
aborts the workspace.
"""

from __future__ import annotations

import asyncio
import functools
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from codectx.analyzer import CodeAnalyzer, CodeChunker
from codectx.embeddings import EmbeddingGenerator
from codectx.index.models import CodeChunk, IndexedFile, IndexingError, IndexingStats, UpsertOutcome
from codectx.index.store import IndexStore
from codectx.scanner import WorkspaceScanner, analyze_project_structure
from codectx.shared.infrastructure.config import IndexingConfig, ScannerConfig
from codectx.shared.infrastructure.logging import get_logger
from codectx.shared.infrastructure.resilience import with_timeout_async
from codectx.shared.utils import content_hash

logger = get_logger(__name__)

FileChangedCallback = Callable[[str, str], None]


class WorkspaceIndexer:
    """
    Index every supported file under a workspace root.

    Unchanged files are skipped by a hash precheck before analysis. The per-file
    deadline covers reading, analysis and embedding; the store write always runs
    to completion. Stale entries are swept after all upserts finished unless the
    run was cancelled, and entries under paths the scan could not read are kept.

    Examples:
        >>> indexer = WorkspaceIndexer(store, CodeAnalyzer(), CodeChunker(), EmbeddingGenerator())
        >>> stats = await indexer.index_workspace_async("alice", "/path/to/project")
        >>> stats.files_updated
        12
    """

    def __init__(
        self,
        store: IndexStore,
        analyzer: CodeAnalyzer,
        chunker: CodeChunker,
        embeddings: EmbeddingGenerator,
        scanner_config: ScannerConfig | None = None,
        config: IndexingConfig | None = None,
    ):
        self.store = store
        self.analyzer = analyzer
        self.chunker = chunker
        self.embeddings = embeddings
        self.scanner_config = scanner_config or ScannerConfig()
        self.config = config or IndexingConfig()
        self._callbacks: list[FileChangedCallback] = []

    def on_file_changed(self, callback: FileChangedCallback) -> None:
        """Register callback(owner_id, file_path), fired after a file is written or swept."""
        self._callbacks.append(callback)

    async def index_workspace_async(
        self,
        owner_id: str,
        root: str | Path,
        force_reindex: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> IndexingStats:
        """
        Index (or reindex) the workspace at *root* for *owner_id*.

        Raises:
            WorkspaceRootError: If root does not exist or is not a directory
        """
        scanner = WorkspaceScanner(self.scanner_config)
        walk = scanner.scan(root)
        workspace = str(Path(root).expanduser().resolve())

        loop = asyncio.get_running_loop()
        files: list[Path] = await loop.run_in_executor(None, list, walk)

        logger.info(
            "workspace_indexing_started",
            owner_id=owner_id,
            workspace=workspace,
            files=len(files),
            force=force_reindex,
        )

        stats = IndexingStats()
        stats.errors.extend(IndexingError(file=e.path, error=e.error) for e in scanner.errors)
        semaphore = asyncio.Semaphore(self.config.concurrency)

        async def process(path: Path) -> None:
            async with semaphore:
                if cancel_event is not None and cancel_event.is_set():
                    stats.cancelled = True
                    return
                stats.files_processed += 1
                try:
                    prepared = await with_timeout_async(
                        self._prepare_file(owner_id, workspace, path, force_reindex, stats),
                        self.config.file_timeout_seconds,
                        "index_file",
                    )
                    if prepared is not None:
                        await self._store_file(prepared, force_reindex, stats)
                except Exception as e:
                    logger.warning("file_indexing_failed", file=str(path), error=str(e), error_type=type(e).__name__)
                    stats.errors.append(IndexingError(file=str(path), error=str(e)))

        await asyncio.gather(*(process(path) for path in files))

        if stats.cancelled:
            logger.info("workspace_indexing_cancelled", owner_id=owner_id, workspace=workspace)
        else:
            stats.files_deleted = await self._sweep(owner_id, workspace, files, [e.path for e in scanner.errors])

        try:
            structure = await loop.run_in_executor(None, analyze_project_structure, workspace)
            await loop.run_in_executor(None, self.store.save_workspace_structure, owner_id, workspace, structure)
        except Exception as e:
            logger.warning("workspace_structure_not_saved", workspace=workspace, error=str(e))

        logger.info(
            "workspace_indexing_completed",
            owner_id=owner_id,
            workspace=workspace,
            processed=stats.files_processed,
            updated=stats.files_updated,
            skipped=stats.files_skipped,
            deleted=stats.files_deleted,
            errors=len(stats.errors),
        )
        return stats

    async def _prepare_file(
        self,
        owner_id: str,
        workspace: str,
        path: Path,
        force: bool,
        stats: IndexingStats,
    ) -> tuple[IndexedFile, list[CodeChunk]] | None:
        """Read, analyze and embed *path*. Returns None when the stored hash already matches."""
        loop = asyncio.get_running_loop()
        raw = await loop.run_in_executor(None, path.read_bytes)
        content = raw.decode("utf-8", errors="replace")
        file_hash = content_hash(content)

        if not force:
            stored_hash = await loop.run_in_executor(None, self.store.get_file_hash, owner_id, workspace, str(path))
            if stored_hash == file_hash:
                logger.debug("file_unchanged_skipping_index", file=str(path))
                stats.files_skipped += 1
                return None

        analysis = await loop.run_in_executor(None, self.analyzer.analyze, path, content)
        drafts = self.chunker.chunk(path, content, analysis)
        embeddings = await self.embeddings.embed_batch_async([d.embedding_text for d in drafts])
        chunks = [CodeChunk.from_draft(draft, embedding) for draft, embedding in zip(drafts, embeddings)]

        record = IndexedFile.from_analysis(
            owner_id=owner_id,
            workspace_path=workspace,
            file_path=path,
            content=content,
            content_hash=file_hash,
            analysis=analysis,
            file_modified_at=datetime.fromtimestamp(os.path.getmtime(path), tz=timezone.utc),
        )

        return record, chunks

    async def _store_file(self, prepared: tuple[IndexedFile, list[CodeChunk]], force: bool, stats: IndexingStats) -> None:
        record, chunks = prepared
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(
            None, functools.partial(self.store.upsert, record, chunks, force=force)
        )
        if outcome == UpsertOutcome.UNCHANGED:
            stats.files_skipped += 1
            return

        stats.files_updated += 1
        stats.embeddings_created += len(chunks)
        self._notify(record.owner_id, record.file_path)

    async def _sweep(self, owner_id: str, workspace: str, files: list[Path], unreadable: list[str]) -> int:
        """
        Delete stored files that the scan no longer found.

        Stored files under an unreadable path count as live: the scan could
        not tell whether they still exist.
        """
        loop = asyncio.get_running_loop()
        stored = [f.file_path for f in await loop.run_in_executor(None, self.store.list_files, owner_id, workspace)]

        live = {str(path) for path in files}
        kept = [p for p in stored if p not in live and _under_any(p, unreadable)]
        if kept:
            logger.warning("stale_sweep_kept_unreadable", workspace=workspace, kept=len(kept), unreadable=len(unreadable))
        live.update(kept)

        deleted = await loop.run_in_executor(None, self.store.sweep, owner_id, workspace, live)
        for gone in set(stored).difference(live):
            self._notify(owner_id, gone)
        return deleted

    def _notify(self, owner_id: str, file_path: str) -> None:
        for callback in self._callbacks:
            try:
                callback(owner_id, file_path)
            except Exception as e:
                logger.warning("file_changed_callback_failed", file=file_path, error=str(e))


def _under_any(path: str, roots: list[str]) -> bool:
    return any(path == root or path.startswith(root.rstrip(os.sep) + os.sep) for root in roots)
