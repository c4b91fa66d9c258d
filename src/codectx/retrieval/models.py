"""
Retrieval models: request options and the ContextBundle sections.
"""

from enum import Enum

from pydantic import Field

from codectx.analyzer.models import (
    ChunkMetadata,
    ChunkType,
    ClassInfo,
    ComplexityMetrics,
    FileMetadata,
    FunctionInfo,
    ImportRef,
    Symbol,
)
from codectx.graph.models import RelatedFile
from codectx.index.models import IndexedFile, LanguageStat, SimilarChunk, WorkspaceRecord
from codectx.shared.domain.base_model import BaseDomainModel
from codectx.shared.languages import Language

CONTEXT_TYPE = "intelligent_context"


class FocusArea(str, Enum):
    GENERAL = "general"
    DEBUGGING = "debugging"
    REFACTORING = "refactoring"
    TESTING = "testing"


class RetrievalOptions(BaseDomainModel):
    """
    Per-query options.

    max_tokens bounds the formatted context, estimated at a fixed
    characters-per-token ratio. When unset, the retriever's
    ``default_max_tokens`` applies.
    """

    max_tokens: int | None = Field(default=None, ge=1)
    focus_area: FocusArea = FocusArea.GENERAL
    include_tests: bool = False
    workspace_path: str | None = None


class CurrentFileContext(BaseDomainModel):
    file_path: str
    relative_path: str
    language: Language
    symbols: list[Symbol] = Field(default_factory=list)
    functions: list[FunctionInfo] = Field(default_factory=list)
    classes: list[ClassInfo] = Field(default_factory=list)
    imports: list[ImportRef] = Field(default_factory=list)
    exports: list[str] = Field(default_factory=list)
    complexity: ComplexityMetrics = Field(default_factory=ComplexityMetrics)
    metadata: FileMetadata = Field(default_factory=FileMetadata)
    content_preview: str = ""

    @classmethod
    def from_indexed_file(cls, record: IndexedFile, preview_chars: int = 500) -> "CurrentFileContext":
        preview = record.content
        if len(preview) > preview_chars:
            preview = preview[:preview_chars] + "..."
        return cls(
            file_path=record.file_path,
            relative_path=record.relative_path,
            language=record.language,
            symbols=record.symbols,
            functions=record.functions,
            classes=record.classes,
            imports=record.imports,
            exports=record.exports,
            complexity=record.complexity,
            metadata=record.metadata,
            content_preview=preview,
        )


class DependencyContext(BaseDomainModel):
    """A local dependency of the current file and what it offers."""

    type: str = "local_dependency"
    module: str
    file_path: str
    relative_path: str
    exports: list[str] = Field(default_factory=list)
    key_functions: list[str] = Field(default_factory=list)


class SimilarCodeEntry(BaseDomainModel):
    """
    A similar chunk. similarity_score is the raw store score; relevance is
    the score after focus reweighting and decides the order.
    """

    file_path: str
    relative_path: str
    chunk_type: ChunkType
    name: str
    start_line: int
    end_line: int
    content: str
    similarity_score: float
    relevance: float
    embedding_source: str
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)

    @classmethod
    def from_similar_chunk(cls, chunk: SimilarChunk) -> "SimilarCodeEntry":
        return cls(
            file_path=chunk.file_path,
            relative_path=chunk.relative_path,
            chunk_type=chunk.chunk_type,
            name=chunk.name,
            start_line=chunk.start_line,
            end_line=chunk.end_line,
            content=chunk.content,
            similarity_score=chunk.similarity,
            relevance=chunk.similarity,
            embedding_source=chunk.embedding_source,
            metadata=chunk.metadata,
        )


class ProjectContext(BaseDomainModel):
    total_files: int = 0
    total_lines: int = 0
    languages: list[LanguageStat] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    workspaces: list[WorkspaceRecord] = Field(default_factory=list)


class ContextUsed(BaseDomainModel):
    type: str = CONTEXT_TYPE
    files_referenced: int = 0
    dependencies_included: int = 0
    token_count: int = 0


class ContextBundle(BaseDomainModel):
    """
    Context assembled for one query.

    total_tokens is the estimate for the formatted bundle. degraded_sections
    names sections left empty because their sub-step failed or timed out.
    """

    current_file: CurrentFileContext | None = None
    related_files: list[RelatedFile] = Field(default_factory=list)
    dependencies: list[DependencyContext] = Field(default_factory=list)
    similar_code: list[SimilarCodeEntry] = Field(default_factory=list)
    project_context: ProjectContext | None = None
    total_tokens: int = 0
    degraded_sections: list[str] = Field(default_factory=list)

    def files_referenced(self) -> list[str]:
        """Distinct file paths appearing anywhere in the bundle, in section order."""
        paths: dict[str, None] = {}
        if self.current_file:
            paths.setdefault(self.current_file.file_path, None)
        for entry in [*self.related_files, *self.dependencies, *self.similar_code]:
            paths.setdefault(entry.file_path, None)
        return list(paths)

    def context_used(self) -> ContextUsed:
        return ContextUsed(
            files_referenced=len(self.files_referenced()),
            dependencies_included=len(self.dependencies),
            token_count=self.total_tokens,
        )
