"""
Tests for the deterministic fallback embedding.
"""

import math

import pytest

from codectx.embeddings import FALLBACK_MODEL_ID, fallback_embedding, fallback_vector, preprocess_text


class TestFallbackVector:
    """Test determinism and layout."""

    def test_identical_text_identical_vector(self):
        text = "function add(a, b) { return a + b; }"
        assert fallback_vector(text) == fallback_vector(text)

    def test_different_text_different_vector(self):
        assert fallback_vector("def add(a, b): pass") != fallback_vector("def sub(a, b): pass")

    def test_normalized(self):
        vector = fallback_vector("class Cart { checkout() {} }")
        assert len(vector) == 384
        assert math.isclose(sum(x * x for x in vector), 1.0, rel_tol=1e-9)

    def test_custom_dimensions(self):
        assert len(fallback_vector("x", dimensions=256)) == 256

    def test_rejects_small_dimensions(self):
        with pytest.raises(ValueError):
            fallback_vector("x", dimensions=128)

    def test_tagged_as_fallback(self):
        embedding = fallback_embedding("x")
        assert embedding.source == "fallback"
        assert embedding.is_fallback is True
        assert embedding.model == FALLBACK_MODEL_ID


class TestPreprocessText:
    def test_collapses_whitespace(self):
        assert preprocess_text("  a\n\n\tb   c  ") == "a b c"

    def test_caps_length(self):
        assert preprocess_text("abcdef", max_chars=3) == "abc"
