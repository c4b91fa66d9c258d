"""
Code chunker.

Splits an analyzed file into embeddable chunks: one whole-file chunk plus one
chunk per function span and per class span.
"""

from pathlib import Path

from codectx.analyzer.complexity import cyclomatic_complexity
from codectx.analyzer.heuristics import detect_design_patterns, detect_diagnostic_patterns
from codectx.analyzer.models import AnalysisResult, ChunkDraft, ChunkMetadata, ChunkType
from codectx.shared.infrastructure.config import AnalyzerConfig
from codectx.shared.utils import content_hash


class CodeChunker:
    """
    Builds ChunkDrafts from an AnalysisResult.

    File chunks store the first ``file_chunk_chars`` characters but embed the
    whole file; symbol chunks store and embed their span, capped at
    ``max_chunk_chars``.
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self.config = config or AnalyzerConfig()

    def chunk(self, path: str | Path, content: str, analysis: AnalysisResult) -> list[ChunkDraft]:
        lines = content.split("\n")
        language = analysis.language
        file_meta = analysis.metadata

        chunks = [
            ChunkDraft(
                chunk_type=ChunkType.FILE,
                name=Path(path).name,
                start_line=1,
                end_line=max(1, len(lines)),
                content=content[: self.config.file_chunk_chars],
                content_hash=content_hash(content),
                embedding_text=content,
                metadata=ChunkMetadata(
                    language=language,
                    complexity=analysis.complexity.cyclomatic_complexity,
                    design_patterns=[hit.pattern for hit in file_meta.design_patterns],
                    diagnostic_patterns=[hit.pattern for hit in file_meta.diagnostic_patterns],
                ),
            )
        ]

        for function in analysis.functions:
            body = self._span(lines, function.start_line, function.end_line)
            if not body.strip():
                continue
            chunks.append(
                ChunkDraft(
                    chunk_type=ChunkType.FUNCTION,
                    name=function.name,
                    start_line=function.start_line,
                    end_line=function.end_line,
                    content=body,
                    content_hash=content_hash(body),
                    embedding_text=body,
                    metadata=self._span_metadata(body, language, function.complexity),
                )
            )

        for cls in analysis.classes:
            body = self._span(lines, cls.start_line, cls.end_line)
            if not body.strip():
                continue
            metadata = self._span_metadata(body, language, cyclomatic_complexity(body))
            metadata.methods = list(cls.methods)
            chunks.append(
                ChunkDraft(
                    chunk_type=ChunkType.CLASS,
                    name=cls.name,
                    start_line=cls.start_line,
                    end_line=cls.end_line,
                    content=body,
                    content_hash=content_hash(body),
                    embedding_text=body,
                    metadata=metadata,
                )
            )

        return chunks

    def _span(self, lines: list[str], start_line: int, end_line: int) -> str:
        return "\n".join(lines[start_line - 1 : end_line])[: self.config.max_chunk_chars]

    def _span_metadata(self, body: str, language, complexity: int) -> ChunkMetadata:
        return ChunkMetadata(
            language=language,
            complexity=complexity,
            design_patterns=[h.pattern for h in detect_design_patterns(body, self.config.design_pattern_min_hits)],
            diagnostic_patterns=[
                h.pattern for h in detect_diagnostic_patterns(body, self.config.diagnostic_min_occurrences)
            ],
        )
