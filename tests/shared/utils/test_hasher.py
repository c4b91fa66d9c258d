"""
Tests for codectx.shared.utils.hasher
"""

import hashlib

from codectx.shared.utils import cache_key, content_hash


class TestContentHash:
    """Test raw content hashing used for change detection."""

    def test_matches_sha256_hex(self):
        """Hash is the plain SHA-256 hex digest of the UTF-8 content."""
        content = "def foo():\n    pass\n"
        assert content_hash(content) == hashlib.sha256(content.encode("utf-8")).hexdigest()

    def test_whitespace_changes_hash(self):
        """Raw hashing is not normalized: any byte change is a change."""
        assert content_hash("a = 1\n") != content_hash("a = 1\n\n")

    def test_unicode_content(self):
        """Non-ASCII content hashes without errors."""
        assert len(content_hash("naïve = '日本'")) == 64


class TestCacheKey:
    """Test composite cache keys."""

    def test_deterministic(self):
        assert cache_key("text", "model") == cache_key("text", "model")

    def test_model_is_part_of_key(self):
        assert cache_key("text", "model-a") != cache_key("text", "model-b")
