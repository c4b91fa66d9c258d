"""
Index domain models.

IndexedFile and CodeChunk are the persisted records; the rest are query
results and run statistics handed back to the indexer and retriever.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import Field

from codectx.analyzer.models import (
    AnalysisResult,
    ChunkDraft,
    ChunkMetadata,
    ChunkType,
    ClassInfo,
    ComplexityMetrics,
    Dependency,
    FileMetadata,
    FunctionInfo,
    ImportRef,
    Symbol,
)
from codectx.embeddings.models import Embedding
from codectx.scanner.models import ProjectStructure
from codectx.shared.domain.base_model import BaseDomainModel
from codectx.shared.languages import Language


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IndexedFile(BaseDomainModel):
    """
    One indexed file, unique per (owner_id, workspace_path, file_path).

    A record whose content_hash differs from the file's current hash is stale
    and must be reprocessed before being trusted.
    """

    owner_id: str
    workspace_path: str
    file_path: str
    relative_path: str
    file_name: str
    file_extension: str
    language: Language
    content: str
    content_hash: str
    file_size: int = 0
    line_count: int = 0
    symbols: list[Symbol] = Field(default_factory=list)
    functions: list[FunctionInfo] = Field(default_factory=list)
    classes: list[ClassInfo] = Field(default_factory=list)
    imports: list[ImportRef] = Field(default_factory=list)
    exports: list[str] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)
    complexity: ComplexityMetrics = Field(default_factory=ComplexityMetrics)
    metadata: FileMetadata = Field(default_factory=FileMetadata)
    file_modified_at: datetime | None = None
    indexed_at: datetime = Field(default_factory=utc_now)
    generation: int = 0

    @classmethod
    def from_analysis(
        cls,
        owner_id: str,
        workspace_path: str | Path,
        file_path: str | Path,
        content: str,
        content_hash: str,
        analysis: AnalysisResult,
        file_modified_at: datetime | None = None,
    ) -> "IndexedFile":
        path = Path(file_path)
        workspace = Path(workspace_path)
        try:
            relative = path.relative_to(workspace).as_posix()
        except ValueError:
            relative = path.name

        return cls(
            owner_id=owner_id,
            workspace_path=str(workspace),
            file_path=str(path),
            relative_path=relative,
            file_name=path.name,
            file_extension=path.suffix.lower().lstrip("."),
            language=analysis.language,
            content=content,
            content_hash=content_hash,
            file_size=analysis.size_bytes,
            line_count=analysis.line_count,
            symbols=analysis.symbols,
            functions=analysis.functions,
            classes=analysis.classes,
            imports=analysis.imports,
            exports=analysis.exports,
            dependencies=analysis.dependencies,
            complexity=analysis.complexity,
            metadata=analysis.metadata,
            file_modified_at=file_modified_at,
        )

    def is_stale(self, current_hash: str) -> bool:
        return self.content_hash != current_hash

    @property
    def imported_names(self) -> list[str]:
        seen: dict[str, None] = {}
        for ref in self.imports:
            for name in ref.names:
                seen.setdefault(name, None)
        return list(seen)

    def key_functions(self, limit: int = 3) -> list[str]:
        """Names of the first *limit* functions, in source order."""
        return [f.name for f in self.functions[:limit]]


class CodeChunk(BaseDomainModel):
    """An embedded chunk owned by exactly one IndexedFile."""

    chunk_type: ChunkType
    name: str
    start_line: int
    end_line: int
    content: str
    content_hash: str
    embedding: Embedding
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)

    @classmethod
    def from_draft(cls, draft: ChunkDraft, embedding) -> "CodeChunk":
        return cls(
            chunk_type=draft.chunk_type,
            name=draft.name,
            start_line=draft.start_line,
            end_line=draft.end_line,
            content=draft.content,
            content_hash=draft.content_hash,
            embedding=embedding,
            metadata=draft.metadata,
        )


class UpsertOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class SimilarityFilters(BaseDomainModel):
    """
    Optional restrictions for similarity queries.

    exclude_file matches absolute or relative path. embedding_model keeps only
    chunks embedded by that model.
    """

    workspace_path: str | None = None
    language: Language | None = None
    chunk_type: ChunkType | None = None
    exclude_file: str | None = None
    embedding_model: str | None = None


class SimilarChunk(BaseDomainModel):
    """A chunk ranked against a query vector."""

    file_path: str
    relative_path: str
    workspace_path: str
    language: Language
    chunk_type: ChunkType
    name: str
    start_line: int
    end_line: int
    content: str
    similarity: float
    embedding_source: str
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)
    indexed_at: datetime


class FileSummary(BaseDomainModel):
    """Lightweight view of an IndexedFile used by the graph and statistics."""

    file_path: str
    relative_path: str
    workspace_path: str
    language: Language
    line_count: int = 0
    exports: list[str] = Field(default_factory=list)
    key_functions: list[str] = Field(default_factory=list)
    framework: str | None = None
    indexed_at: datetime


class IndexingError(BaseDomainModel):
    file: str
    error: str


class IndexingStats(BaseDomainModel):
    """Outcome of one workspace indexing run."""

    files_processed: int = 0
    files_updated: int = 0
    files_skipped: int = 0
    embeddings_created: int = 0
    files_deleted: int = 0
    cancelled: bool = False
    errors: list[IndexingError] = Field(default_factory=list)


class LanguageStat(BaseDomainModel):
    language: str
    file_count: int
    average_lines: float


class WorkspaceRecord(BaseDomainModel):
    workspace_path: str
    structure: ProjectStructure = Field(default_factory=ProjectStructure)
    last_indexed_at: datetime | None = None


class WorkspaceStatistics(BaseDomainModel):
    """Aggregate view over everything an owner has indexed."""

    total_files: int = 0
    total_lines: int = 0
    languages: list[LanguageStat] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    workspaces: list[WorkspaceRecord] = Field(default_factory=list)
