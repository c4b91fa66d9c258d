"""
Analyzer domain models.

Everything the analyzer extracts from one file. AnalysisResult is persisted
as part of the IndexedFile record, so all models serialize to camelCase JSON.
"""

from enum import Enum

from pydantic import Field

from codectx.shared.domain.base_model import BaseDomainModel
from codectx.shared.languages import Language


class SymbolKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    IMPORT = "import"
    EXPORT = "export"


class DependencyType(str, Enum):
    LOCAL = "local"
    EXTERNAL = "external"


class Symbol(BaseDomainModel):
    """A named declaration found at a 1-based line."""

    name: str
    kind: SymbolKind
    line: int


class ImportRef(BaseDomainModel):
    """
    One import statement.

    names holds the symbols the statement binds from the module
    (``from .a import add`` -> module ".a", names ["add"]). It is empty for
    whole-module imports.
    """

    module: str
    names: list[str] = Field(default_factory=list)
    line: int


class Dependency(BaseDomainModel):
    module: str
    type: DependencyType
    line: int


class FunctionInfo(BaseDomainModel):
    """A function or method span with its own cyclomatic complexity."""

    name: str
    start_line: int
    end_line: int
    complexity: int = 1


class ClassInfo(BaseDomainModel):
    name: str
    start_line: int
    end_line: int
    methods: list[str] = Field(default_factory=list)


class ComplexityMetrics(BaseDomainModel):
    total_lines: int = 0
    code_lines: int = 0
    comment_lines: int = 0
    cyclomatic_complexity: int = 1
    maintainability_index: float = 100.0
    comment_ratio: float = 0.0


class Comment(BaseDomainModel):
    content: str
    line: int


class Todo(BaseDomainModel):
    """A TODO/FIXME/HACK/NOTE/BUG marker."""

    marker: str
    description: str
    line: int


class PatternHit(BaseDomainModel):
    """
    A detected heuristic pattern.

    Design patterns carry a confidence (indicator hit rate, 0..1); keyword
    clusters (security, performance, diagnostic) carry an occurrence count.
    """

    pattern: str
    confidence: float | None = None
    occurrences: int | None = None


class ApiEndpoint(BaseDomainModel):
    method: str
    path: str
    line: int


class DatabaseQuery(BaseDomainModel):
    query: str
    line: int


class FileMetadata(BaseDomainModel):
    """Heuristic findings for one file."""

    framework: str | None = None
    design_patterns: list[PatternHit] = Field(default_factory=list)
    security_patterns: list[PatternHit] = Field(default_factory=list)
    performance_patterns: list[PatternHit] = Field(default_factory=list)
    diagnostic_patterns: list[PatternHit] = Field(default_factory=list)
    api_endpoints: list[ApiEndpoint] = Field(default_factory=list)
    database_queries: list[DatabaseQuery] = Field(default_factory=list)
    todos: list[Todo] = Field(default_factory=list)

    def pattern_names(self) -> set[str]:
        """Names of every design and diagnostic pattern detected."""
        return {hit.pattern for hit in self.design_patterns + self.diagnostic_patterns}


class AnalysisResult(BaseDomainModel):
    """Complete static analysis of one file."""

    file_path: str
    language: Language
    line_count: int = 0
    size_bytes: int = 0
    symbols: list[Symbol] = Field(default_factory=list)
    imports: list[ImportRef] = Field(default_factory=list)
    exports: list[str] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)
    functions: list[FunctionInfo] = Field(default_factory=list)
    classes: list[ClassInfo] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    complexity: ComplexityMetrics = Field(default_factory=ComplexityMetrics)
    metadata: FileMetadata = Field(default_factory=FileMetadata)

    @classmethod
    def empty(cls, file_path: str, language: Language, content: str = "") -> "AnalysisResult":
        """A valid result with no symbol or complexity data."""
        return cls(
            file_path=file_path,
            language=language,
            line_count=_count_lines(content),
            size_bytes=len(content.encode("utf-8", errors="surrogatepass")),
        )

    @property
    def local_dependencies(self) -> list[Dependency]:
        return [d for d in self.dependencies if d.type == DependencyType.LOCAL]

    @property
    def imported_names(self) -> list[str]:
        """Distinct symbol names imported by this file, in first-seen order."""
        seen: dict[str, None] = {}
        for ref in self.imports:
            for name in ref.names:
                seen.setdefault(name, None)
        return list(seen)


def _count_lines(content: str) -> int:
    if not content:
        return 0
    return content.count("\n") + 1


class ChunkType(str, Enum):
    FILE = "file"
    FUNCTION = "function"
    CLASS = "class"


class ChunkMetadata(BaseDomainModel):
    """Per-chunk signals used by focus reweighting."""

    language: Language = Language.TEXT
    complexity: int = 1
    design_patterns: list[str] = Field(default_factory=list)
    diagnostic_patterns: list[str] = Field(default_factory=list)
    methods: list[str] = Field(default_factory=list)


class ChunkDraft(BaseDomainModel):
    """
    A chunk before embedding.

    content is the bounded copy that gets stored; embedding_text is what gets
    embedded (the whole file for file chunks, the bounded span otherwise).
    """

    chunk_type: ChunkType
    name: str
    start_line: int
    end_line: int
    content: str
    content_hash: str
    embedding_text: str
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)
