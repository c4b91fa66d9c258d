"""
Tests for cosine similarity.
"""

import math

from codectx.embeddings import cosine_similarity, fallback_vector


class TestCosineSimilarity:
    def test_self_similarity_is_one(self):
        vector = fallback_vector("def add(a, b): return a + b")
        assert math.isclose(cosine_similarity(vector, vector), 1.0, rel_tol=1e-9)

    def test_symmetric(self):
        a = [0.3, -1.2, 4.0]
        b = [2.0, 0.5, -0.1]
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_opposite_vectors(self):
        assert math.isclose(cosine_similarity([1.0, 2.0], [-1.0, -2.0]), -1.0)

    def test_zero_vector(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0

    def test_empty_vector(self):
        assert cosine_similarity([], [1.0]) == 0.0

    def test_range(self):
        for text in ("a", "function x() {}", "SELECT * FROM users"):
            value = cosine_similarity(fallback_vector(text), fallback_vector("class Cart"))
            assert -1.0 <= value <= 1.0
