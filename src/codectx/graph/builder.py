"""
Dependency Graph Builder

Derives file-to-file edges from the imports and exports stored in the index.
Resolution is by symbol name only: a file that imports ``add`` is linked to
every file exporting ``add`` (up to a per-symbol candidate cap), whether or
not its import path actually points there.
"""

from __future__ import annotations

from codectx.graph.models import DependencyEdge, RelatedFile, Relationship
from codectx.index.models import FileSummary
from codectx.index.store import IndexStore
from codectx.shared.infrastructure.config import RetrievalConfig
from codectx.shared.infrastructure.logging import get_logger
from codectx.shared.infrastructure.ttl_cache import TTLCache

logger = get_logger(__name__)

KEY_EXPORTS_LIMIT = 5


class DependencyGraphBuilder:
    """
    Computes related files on demand and caches them per (owner, file).

    Examples:
        >>> graph = DependencyGraphBuilder(store)
        >>> [(r.relative_path, r.relationship.value) for r in graph.related_files("alice", "src/b.js")]
        [('src/a.js', 'imports_from')]
    """

    def __init__(self, store: IndexStore, config: RetrievalConfig | None = None, cache: TTLCache | None = None):
        self.store = store
        self.config = config or RetrievalConfig()
        self._cache = cache or TTLCache(maxsize=5000, ttl=self.config.dependency_cache_ttl_seconds)

    def related_files(self, owner_id: str, file_path: str) -> list[RelatedFile]:
        """
        Files linked to *file_path*: imports_from entries first, then imports_to.

        Returns an empty list when the file is not indexed. Callers get copies;
        the cached entries are never handed out.
        """
        key = _cache_key(owner_id, file_path)
        cached = self._cache.get(key)
        if cached is not None:
            return _copies(cached)

        records = self.store.query_by_file(owner_id, file_path)
        if not records:
            return []
        record = records[0]
        limit = self.config.max_candidates_per_symbol

        related: dict[tuple[str, Relationship], RelatedFile] = {}
        for name in record.imported_names:
            for summary in self._candidates(self.store.find_exporters(owner_id, name, limit + 1), record.file_path, limit):
                _link(related, summary, Relationship.IMPORTS_FROM, name)

        for name in dict.fromkeys(record.exports):
            for summary in self._candidates(self.store.find_importers(owner_id, name, limit + 1), record.file_path, limit):
                _link(related, summary, Relationship.IMPORTS_TO, name)

        result = list(related.values())
        self._cache.set(key, result)
        logger.debug("related_files_resolved", owner_id=owner_id, file=file_path, related=len(result))
        return _copies(result)

    def edges_for(self, owner_id: str, file_path: str) -> list[DependencyEdge]:
        """One edge per (related file, symbol), sourced at *file_path*."""
        records = self.store.query_by_file(owner_id, file_path)
        source = records[0].file_path if records else file_path
        return [
            DependencyEdge(
                source_file=source,
                target_file=related.file_path,
                symbol=symbol,
                relationship=related.relationship,
            )
            for related in self.related_files(owner_id, file_path)
            for symbol in related.symbols
        ]

    def invalidate(self, owner_id: str, file_path: str | None = None) -> int:
        """
        Drop cached results for *owner_id*.

        Every cached file of the owner is dropped even when *file_path* is
        given, since a changed export affects its importers' entries too.
        """
        dropped = self._cache.invalidate_prefix(_cache_key(owner_id, ""))
        if dropped:
            logger.debug("dependency_cache_invalidated", owner_id=owner_id, file=file_path, entries=dropped)
        return dropped

    @staticmethod
    def _candidates(summaries: list[FileSummary], own_path: str, limit: int) -> list[FileSummary]:
        return [s for s in summaries if s.file_path != own_path][:limit]


def _cache_key(owner_id: str, file_path: str) -> str:
    return f"deps\x00{owner_id}\x00{file_path}"


def _copies(related: list[RelatedFile]) -> list[RelatedFile]:
    return [r.model_copy(deep=True) for r in related]


def _link(related: dict, summary: FileSummary, relationship: Relationship, symbol: str) -> None:
    entry = related.get((summary.file_path, relationship))
    if entry is None:
        entry = RelatedFile(
            file_path=summary.file_path,
            relative_path=summary.relative_path,
            relationship=relationship,
            language=summary.language,
            key_exports=summary.exports[:KEY_EXPORTS_LIMIT],
        )
        related[(summary.file_path, relationship)] = entry
    if symbol not in entry.symbols:
        entry.symbols.append(symbol)
