"""
Tests for CodeChunker.
"""

from codectx.analyzer import ChunkType, CodeAnalyzer, CodeChunker
from codectx.analyzer.heuristics import ERROR_HANDLING
from codectx.shared.infrastructure.config import AnalyzerConfig
from codectx.shared.utils import content_hash

SOURCE = '''import logging

logger = logging.getLogger(__name__)


def load(path):
    try:
        return open(path).read()
    except OSError:
        logger.error("cannot read %s", path)
        raise


class Loader:
    def run(self):
        return load("x")
'''


class TestCodeChunker:
    """Test chunk boundaries and metadata."""

    def _chunk(self, config=None):
        config = config or AnalyzerConfig()
        analysis = CodeAnalyzer(config).analyze("pkg/loader.py", SOURCE)
        return CodeChunker(config).chunk("pkg/loader.py", SOURCE, analysis)

    def test_file_chunk_first(self):
        chunks = self._chunk()
        file_chunk = chunks[0]

        assert file_chunk.chunk_type == ChunkType.FILE
        assert file_chunk.name == "loader.py"
        assert file_chunk.start_line == 1
        assert file_chunk.content_hash == content_hash(SOURCE)

    def test_file_chunk_content_bounded_but_embeds_whole_file(self):
        chunks = self._chunk(AnalyzerConfig(file_chunk_chars=20))
        file_chunk = chunks[0]

        assert file_chunk.content == SOURCE[:20]
        assert file_chunk.embedding_text == SOURCE

    def test_function_and_class_chunks(self):
        chunks = self._chunk()
        kinds = [(c.chunk_type, c.name) for c in chunks[1:]]

        assert (ChunkType.FUNCTION, "load") in kinds
        assert (ChunkType.FUNCTION, "run") in kinds
        assert (ChunkType.CLASS, "Loader") in kinds

    def test_function_chunk_metadata(self):
        load = next(c for c in self._chunk() if c.name == "load")

        assert load.content.startswith("def load(path):")
        assert ERROR_HANDLING in load.metadata.diagnostic_patterns
        assert load.metadata.complexity == 3

    def test_class_chunk_lists_methods(self):
        loader = next(c for c in self._chunk() if c.chunk_type == ChunkType.CLASS)
        assert loader.metadata.methods == ["run"]

    def test_symbol_chunks_capped(self):
        chunks = self._chunk(AnalyzerConfig(max_chunk_chars=10))
        assert all(len(c.content) <= 10 for c in chunks[1:])
