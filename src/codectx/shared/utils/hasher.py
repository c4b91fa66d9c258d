"""
Content Hasher Utility.

Digests used for change detection (raw file content), chunk identity and
embedding cache keys.
"""

import hashlib


def content_hash(content: str) -> str:
    """Calculate the SHA-256 hex digest of raw content."""
    return hashlib.sha256(content.encode("utf-8", errors="surrogatepass")).hexdigest()


def cache_key(*parts: str) -> str:
    """SHA-256 over the concatenation of *parts*, used as a cache key."""
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode("utf-8", errors="surrogatepass"))
    return digest.hexdigest()
