"""
Token estimation utilities.

The engine budgets context with a fixed characters-per-token ratio. This is an
approximation of real tokenizer output, not an exact count: it is cheap,
deterministic and language-model agnostic.
"""

from __future__ import annotations

import math

DEFAULT_CHARS_PER_TOKEN = 4


def estimate_tokens(text: str, chars_per_token: int = DEFAULT_CHARS_PER_TOKEN) -> int:
    """
    Estimate token count as ceil(len(text) / chars_per_token).

    Returns 0 for empty text.
    """
    if not text:
        return 0
    if chars_per_token <= 0:
        raise ValueError(f"chars_per_token must be > 0, got {chars_per_token}")
    return math.ceil(len(text) / chars_per_token)

