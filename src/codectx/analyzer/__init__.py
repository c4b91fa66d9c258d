"""
Language & pattern analysis.

CodeAnalyzer extracts symbols, imports/exports, spans, complexity and
heuristic metadata; CodeChunker turns the result into embeddable chunks.
"""

from codectx.analyzer.analyzer import CodeAnalyzer
from codectx.analyzer.chunker import CodeChunker
from codectx.analyzer.models import (
    AnalysisResult,
    ChunkDraft,
    ChunkMetadata,
    ChunkType,
    ClassInfo,
    Comment,
    ComplexityMetrics,
    Dependency,
    DependencyType,
    FileMetadata,
    FunctionInfo,
    ImportRef,
    PatternHit,
    Symbol,
    SymbolKind,
    Todo,
)
from codectx.analyzer.patterns import PatternSet, pattern_set_for

__all__ = [
    "CodeAnalyzer",
    "CodeChunker",
    "AnalysisResult",
    "ChunkDraft",
    "ChunkMetadata",
    "ChunkType",
    "ClassInfo",
    "Comment",
    "ComplexityMetrics",
    "Dependency",
    "DependencyType",
    "FileMetadata",
    "FunctionInfo",
    "ImportRef",
    "PatternHit",
    "Symbol",
    "SymbolKind",
    "Todo",
    "PatternSet",
    "pattern_set_for",
]
