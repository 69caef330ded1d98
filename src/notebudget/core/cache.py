"""Ephemeral in-memory cache for optimized prompts.

This module provides:
- PromptCache: thread-safe LRU cache keyed by a content hash
- make_cache_key(): build a key from a namespace and the hashed inputs

Nothing is persisted; the cache lives as long as its owner.

[invariant:typing] All types are explicit; mypy --strict compliant.
"""

from __future__ import annotations

import hashlib
import threading
from typing import Final

MAX_CACHE_ENTRIES: Final[int] = 128
HASH_PREFIX_LENGTH: Final[int] = 16


def make_cache_key(namespace: str, *parts: object) -> str:
    """Build a cache key from a namespace and a SHA-256 prefix of the parts."""
    digest = hashlib.sha256()
    for part in parts:
        digest.update(str(part).encode("utf-8"))
        digest.update(b"\x00")
    return f"{namespace}_{digest.hexdigest()[:HASH_PREFIX_LENGTH]}"


class PromptCache:
    """LRU cache for prompt strings.

    Thread-safe for concurrent access. A cache built with `max_entries=0`
    stores nothing.

    Usage:
        cache = PromptCache()
        key = make_cache_key("article", prompt, content_length)
        cached = cache.get(key)
        if cached is None:
            cached = expensive(prompt)
            cache.put(key, cached)
    """

    def __init__(self, max_entries: int = MAX_CACHE_ENTRIES) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must be non-negative")
        self._cache: dict[str, str] = {}
        self._max_entries = max_entries
        self._access_order: list[str] = []
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> str | None:
        with self._lock:
            value = self._cache.get(key)
            if value is None:
                self._misses += 1
                return None
            self._hits += 1
            self._touch_unlocked(key)
            return value

    def put(self, key: str, value: str) -> None:
        if self._max_entries == 0:
            return
        with self._lock:
            if key not in self._cache:
                while len(self._cache) >= self._max_entries:
                    self._evict_lru_unlocked()
            self._cache[key] = value
            self._touch_unlocked(key)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)
            if key in self._access_order:
                self._access_order.remove(key)

    def clear(self) -> None:
        """Remove all entries and reset statistics."""
        with self._lock:
            self._cache.clear()
            self._access_order.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._cache),
                "max_entries": self._max_entries,
                "hits": self._hits,
                "misses": self._misses,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _touch_unlocked(self, key: str) -> None:
        """Update LRU access order. Must hold lock."""
        if key in self._access_order:
            self._access_order.remove(key)
        self._access_order.append(key)

    def _evict_lru_unlocked(self) -> None:
        """Remove least recently used entry. Must hold lock."""
        if self._access_order:
            oldest = self._access_order.pop(0)
            self._cache.pop(oldest, None)


__all__ = [
    "MAX_CACHE_ENTRIES",
    "PromptCache",
    "make_cache_key",
]
