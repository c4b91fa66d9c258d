"""
Persistent index: file records, embedded chunks and the workspace indexer.
"""

from codectx.index.indexer import WorkspaceIndexer
from codectx.index.models import (
    CodeChunk,
    FileSummary,
    IndexedFile,
    IndexingError,
    IndexingStats,
    LanguageStat,
    SimilarChunk,
    SimilarityFilters,
    UpsertOutcome,
    WorkspaceRecord,
    WorkspaceStatistics,
)
from codectx.index.store import IndexStore, SQLiteIndexStore

__all__ = [
    "IndexStore",
    "SQLiteIndexStore",
    "WorkspaceIndexer",
    "IndexedFile",
    "CodeChunk",
    "UpsertOutcome",
    "SimilarityFilters",
    "SimilarChunk",
    "FileSummary",
    "IndexingError",
    "IndexingStats",
    "LanguageStat",
    "WorkspaceRecord",
    "WorkspaceStatistics",
]
