"""
Thread-safe TTL + LRU Cache.

A bounded, dict-like container where every entry carries its own expiry.
Reads promote the accessed entry to most recently used; expired entries are
treated as absent and dropped on access. When an insertion would exceed
*maxsize*, the least-recently-used entry is discarded.

Used for the embedding cache, the per-file context cache, the workspace
statistics cache and the dependency-edge cache. Keys are strings so that all
entries of one owner can be invalidated by prefix after a reindex.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Callable

_MISSING = object()


class TTLCache:
    """
    A bounded, thread-safe LRU cache with per-entry time-to-live.

    Parameters
    ----------
    maxsize : int
        Maximum number of entries. Must be >= 1.
    ttl : float
        Default time-to-live in seconds for new entries.
    clock : callable
        Monotonic time source, injectable for tests.

    Examples
    --------
    >>> cache = TTLCache(maxsize=2, ttl=60)
    >>> cache.set("a", 1)
    >>> cache.get("a")
    1
    >>> cache.invalidate_prefix("a")
    1
    >>> cache.get("a") is None
    True
    """

    __slots__ = ("_maxsize", "_ttl", "_clock", "_data", "_lock")

    def __init__(self, maxsize: int = 1000, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic) -> None:
        if maxsize < 1:
            raise ValueError(f"maxsize must be >= 1, got {maxsize}")
        if ttl <= 0:
            raise ValueError(f"ttl must be > 0, got {ttl}")
        self._maxsize = maxsize
        self._ttl = ttl
        self._clock = clock
        self._data: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for *key* (promoting it), else *default*."""
        with self._lock:
            entry = self._data.get(key, _MISSING)
            if entry is _MISSING:
                return default
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._data[key]
                return default
            self._data.move_to_end(key)
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key* for *ttl* seconds (default TTL if None)."""
        expires_at = self._clock() + (ttl if ttl is not None else self._ttl)
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
            self._data[key] = (expires_at, value)
            while len(self._data) > self._maxsize:
                self._data.popitem(last=False)

    def __contains__(self, key: object) -> bool:
        return self.get(key, _MISSING) is not _MISSING  # type: ignore[arg-type]

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns True if it was present."""
        with self._lock:
            return self._data.pop(key, _MISSING) is not _MISSING

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with *prefix*. Returns the count."""
        with self._lock:
            doomed = [k for k in self._data if k.startswith(prefix)]
            for k in doomed:
                del self._data[k]
            return len(doomed)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def ttl(self) -> float:
        return self._ttl

    def __repr__(self) -> str:
        with self._lock:
            return f"TTLCache(maxsize={self._maxsize}, ttl={self._ttl}, len={len(self._data)})"
