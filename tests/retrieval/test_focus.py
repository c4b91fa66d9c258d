"""
Tests for focus reweighting and test-file filtering.
"""

from codectx.analyzer import ChunkMetadata, ChunkType
from codectx.analyzer.heuristics import ERROR_HANDLING
from codectx.graph import RelatedFile, Relationship
from codectx.retrieval import ContextBundle, FocusArea
from codectx.retrieval.focus import apply_focus, is_test_path
from codectx.retrieval.models import SimilarCodeEntry


def _entry(relative: str, score: float, **metadata) -> SimilarCodeEntry:
    return SimilarCodeEntry(
        file_path=f"/ws/{relative}",
        relative_path=relative,
        chunk_type=ChunkType.FUNCTION,
        name="fn",
        start_line=1,
        end_line=2,
        content="fn()",
        similarity_score=score,
        relevance=score,
        embedding_source="remote",
        metadata=ChunkMetadata(**metadata),
    )


def _related(relative: str) -> RelatedFile:
    return RelatedFile(file_path=f"/ws/{relative}", relative_path=relative, relationship=Relationship.IMPORTS_TO)


class TestIsTestPath:
    def test_conventions(self):
        assert is_test_path("src/math.test.js")
        assert is_test_path("src/math.spec.ts")
        assert is_test_path("tests/helpers.py")
        assert is_test_path("app/__tests__/cart.js")
        assert is_test_path("pkg/test_cart.py")
        assert is_test_path("server/handler_test.go")

    def test_lookalikes(self):
        assert not is_test_path("src/contest.py")
        assert not is_test_path("src/testing_utils.js")
        assert not is_test_path("src/latest/index.js")


class TestApplyFocus:
    """Test reordering per focus area."""

    def test_general_keeps_score_order_and_drops_tests(self):
        bundle = ContextBundle(
            similar_code=[_entry("src/a.js", 0.5), _entry("src/a.test.js", 0.9), _entry("src/b.js", 0.7)],
            related_files=[_related("tests/a.test.js"), _related("src/b.js")],
        )

        apply_focus(bundle, FocusArea.GENERAL, include_tests=False)

        assert [e.relative_path for e in bundle.similar_code] == ["src/b.js", "src/a.js"]
        assert [r.relative_path for r in bundle.related_files] == ["src/b.js"]

    def test_include_tests_keeps_them(self):
        bundle = ContextBundle(similar_code=[_entry("src/a.test.js", 0.9)])
        apply_focus(bundle, FocusArea.GENERAL, include_tests=True)
        assert len(bundle.similar_code) == 1

    def test_debugging_boosts_diagnostic_chunks(self):
        bundle = ContextBundle(
            similar_code=[_entry("src/plain.js", 0.8), _entry("src/guarded.js", 0.7, diagnostic_patterns=[ERROR_HANDLING])]
        )

        apply_focus(bundle, FocusArea.DEBUGGING, include_tests=False, boost=1.25)

        assert [e.relative_path for e in bundle.similar_code] == ["src/guarded.js", "src/plain.js"]
        assert bundle.similar_code[0].relevance == 0.7 * 1.25
        assert bundle.similar_code[0].similarity_score == 0.7

    def test_refactoring_boosts_complex_chunks(self):
        bundle = ContextBundle(similar_code=[_entry("src/simple.js", 0.6), _entry("src/tangled.js", 0.55, complexity=14)])

        apply_focus(bundle, FocusArea.REFACTORING, include_tests=False)

        assert bundle.similar_code[0].relative_path == "src/tangled.js"

    def test_negative_scores_not_boosted(self):
        bundle = ContextBundle(similar_code=[_entry("src/x.js", -0.2, complexity=20)])
        apply_focus(bundle, FocusArea.REFACTORING, include_tests=False)
        assert bundle.similar_code[0].relevance == -0.2

    def test_testing_focus_promotes_tests(self):
        bundle = ContextBundle(
            similar_code=[_entry("src/a.js", 0.8), _entry("tests/a.test.js", 0.7)],
            related_files=[_related("src/b.js"), _related("tests/a.test.js")],
        )

        apply_focus(bundle, FocusArea.TESTING, include_tests=False)

        assert [r.relative_path for r in bundle.related_files] == ["tests/a.test.js", "src/b.js"]
        assert bundle.similar_code[0].relative_path == "tests/a.test.js"
