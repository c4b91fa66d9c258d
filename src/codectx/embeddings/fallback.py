"""
Deterministic fallback embedding.

A cheap feature-hash vector built from surface statistics of the text. It is
far weaker than a learned embedding but identical text always produces a
bit-identical vector, so similarity search keeps working offline.

Layout (before L2 normalization):
    [0..2]     length, word count, line count (each saturating at 1.0)
    [10..12]   JavaScript / Python / PHP indicator counts / 10
    [20..29]   relative frequency of a e i o u t n s r l
    [50..54]   density of { ( [ " ' per 100 characters
    [100..199] bytes of the SHA-256 hex digest mapped to [-0.5, 0.5]
"""

import hashlib
import re

import numpy as np

from codectx.embeddings.models import FallbackEmbedding

DEFAULT_DIMENSIONS = 384

JS_INDICATORS = ("function", "const", "let", "var", "=>", "console.log")
PYTHON_INDICATORS = ("def ", "import ", "class ", "if __name__", "print(")
PHP_INDICATORS = ("<?php", "function ", "class ", "$", "->")

COMMON_CHARS = "aeioutnsrl"
STRUCTURE_CHARS = "{([\"'"

_WORD = re.compile(r"[A-Za-z'-]+")
_WHITESPACE = re.compile(r"\s+")


def preprocess_text(text: str, max_chars: int = 8000) -> str:
    """Collapse whitespace runs to one space, cap length, trim."""
    text = _WHITESPACE.sub(" ", text)
    if len(text) > max_chars:
        text = text[:max_chars]
    return text.strip()


def _count_indicators(lowered: str, indicators: tuple[str, ...]) -> int:
    return sum(lowered.count(indicator.lower()) for indicator in indicators)


def fallback_vector(text: str, dimensions: int = DEFAULT_DIMENSIONS) -> list[float]:
    """Compute the normalized feature-hash vector for *text*."""
    if dimensions < 200:
        raise ValueError(f"fallback embedding needs at least 200 dimensions, got {dimensions}")

    vector = np.zeros(dimensions, dtype=np.float64)
    length = len(text)
    denominator = max(length, 1)
    lowered = text.lower()

    vector[0] = min(length / 1000, 1.0)
    vector[1] = min(len(_WORD.findall(text)) / 100, 1.0)
    vector[2] = min((text.count("\n") + 1) / 50, 1.0)

    vector[10] = _count_indicators(lowered, JS_INDICATORS) / 10
    vector[11] = _count_indicators(lowered, PYTHON_INDICATORS) / 10
    vector[12] = _count_indicators(lowered, PHP_INDICATORS) / 10

    for i, char in enumerate(COMMON_CHARS):
        vector[20 + i] = lowered.count(char) / denominator

    for i, char in enumerate(STRUCTURE_CHARS):
        vector[50 + i] = text.count(char) / denominator * 100

    digest = hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest()
    for i in range(100, 200):
        offset = (i - 100) % 64
        vector[i] = int(digest[offset : offset + 2], 16) / 255 - 0.5

    norm = np.linalg.norm(vector)
    if norm > 0:
        vector = vector / norm
    return vector.tolist()


def fallback_embedding(text: str, dimensions: int = DEFAULT_DIMENSIONS) -> FallbackEmbedding:
    return FallbackEmbedding(vector=fallback_vector(text, dimensions))
