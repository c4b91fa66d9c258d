"""
Focus-area reweighting and test-file filtering.
"""

import re

from codectx.analyzer.heuristics import ERROR_HANDLING, LOGGING
from codectx.retrieval.models import ContextBundle, FocusArea, SimilarCodeEntry

# =============================================================================
# PRE-COMPILED PATTERNS
# =============================================================================

# Matched against "/" + relative path, so "tests/x.py" hits "/tests/"
_TEST_PATH_PATTERNS = (
    re.compile(r"\.(?:test|spec)\.[^/]+$"),
    re.compile(r"/tests?/"),
    re.compile(r"__tests__"),
    re.compile(r"/test_[^/]*\.py$"),
    re.compile(r"_test\.(?:py|go)$"),
)

DEBUGGING_PATTERNS = frozenset({ERROR_HANDLING, LOGGING})
REFACTORING_COMPLEXITY_THRESHOLD = 10


def is_test_path(relative_path: str) -> bool:
    """
    True when the path follows a common test-file convention.

    Examples:
        >>> is_test_path("src/math.test.js")
        True
        >>> is_test_path("tests/test_math.py")
        True
        >>> is_test_path("src/contest.py")
        False
    """
    path = "/" + relative_path.replace("\\", "/").lstrip("/")
    return any(pattern.search(path) for pattern in _TEST_PATH_PATTERNS)


def _boosted(entry: SimilarCodeEntry, boost: float) -> float:
    # Boosting a negative score would push it further down
    return entry.similarity_score * boost if entry.similarity_score > 0 else entry.similarity_score


def _is_focus_match(entry: SimilarCodeEntry, focus: FocusArea) -> bool:
    meta = entry.metadata
    if focus == FocusArea.DEBUGGING:
        return bool(DEBUGGING_PATTERNS.intersection(meta.diagnostic_patterns))
    if focus == FocusArea.REFACTORING:
        return meta.complexity >= REFACTORING_COMPLEXITY_THRESHOLD or bool(meta.design_patterns)
    if focus == FocusArea.TESTING:
        return is_test_path(entry.relative_path)
    return False


def apply_focus(bundle: ContextBundle, focus: FocusArea, include_tests: bool, boost: float = 1.25) -> ContextBundle:
    """
    Reorder sections for *focus*, then drop test entries unless included.

    Similar code is re-ranked by relevance (boosted similarity). For the
    testing focus, test files also move to the front of related_files and
    tests are always included. Sorting is stable, so ties keep store order.
    """
    for entry in bundle.similar_code:
        entry.relevance = _boosted(entry, boost) if _is_focus_match(entry, focus) else entry.similarity_score
    bundle.similar_code.sort(key=lambda e: e.relevance, reverse=True)

    if focus == FocusArea.TESTING:
        include_tests = True
        bundle.related_files.sort(key=lambda r: not is_test_path(r.relative_path))

    if not include_tests:
        bundle.related_files = [r for r in bundle.related_files if not is_test_path(r.relative_path)]
        bundle.similar_code = [e for e in bundle.similar_code if not is_test_path(e.relative_path)]

    return bundle
