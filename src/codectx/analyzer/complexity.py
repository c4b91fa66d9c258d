"""
Complexity metrics.

Cyclomatic complexity is approximated by keyword counting and the
maintainability index by the classic logarithmic formula, both over raw text,
so they work for every language with a pattern set.
"""

import math
import re

from codectx.analyzer.models import ComplexityMetrics

# Branching and looping keywords, matched as whole words
COMPLEXITY_KEYWORDS = (
    "if", "else", "elif", "elseif", "while", "for", "foreach",
    "switch", "case", "catch", "try", "except",
)

_COMPLEXITY_PATTERN = re.compile(r"\b(?:" + "|".join(COMPLEXITY_KEYWORDS) + r")\b")


def cyclomatic_complexity(text: str) -> int:
    """1 + number of branching/looping keyword occurrences in *text*."""
    return 1 + len(_COMPLEXITY_PATTERN.findall(text))


def maintainability_index(complexity: int, code_lines: int) -> float:
    """
    171 - 5.2*ln(L) - 0.23*CC - 16.2*ln(L), clamped to [0, 100].

    Returns 100.0 when there are no code lines.
    """
    if code_lines <= 0:
        return 100.0

    mi = 171 - 5.2 * math.log(code_lines) - 0.23 * complexity - 16.2 * math.log(code_lines)
    return max(0.0, min(100.0, mi))


def compute_metrics(content: str, comment_line_count: int) -> ComplexityMetrics:
    """
    Build file-level metrics.

    Args:
        content: Full file content
        comment_line_count: Lines that are entirely comment (from the analyzer)
    """
    lines = content.split("\n") if content else []
    non_empty = sum(1 for line in lines if line.strip())
    code_lines = max(0, non_empty - comment_line_count)
    complexity = cyclomatic_complexity(content)

    return ComplexityMetrics(
        total_lines=len(lines),
        code_lines=code_lines,
        comment_lines=comment_line_count,
        cyclomatic_complexity=complexity,
        maintainability_index=round(maintainability_index(complexity, code_lines), 2),
        comment_ratio=round(comment_line_count / non_empty, 4) if non_empty else 0.0,
    )
