"""TTL cache for registry lookups (version lists and dependency sets)."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with TTL."""

    value: T
    expires_at: float
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self) -> bool:
        """Check if this entry has expired."""
        return time.monotonic() > self.expires_at


class TTLCache:
    """In-memory TTL cache owned by a single provider instance.

    Keys are any hashable value; a provider typically uses
    ``("versions", name)`` and ``("requires", name, version)``.
    """

    def __init__(self, default_ttl: float = 600, max_entries: int = 10000):
        """Initialize the cache.

        Args:
            default_ttl: Default time-to-live in seconds.
            max_entries: Soft upper bound; the oldest tenth is evicted past it.
        """
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._cache: Dict[Hashable, CacheEntry[Any]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value, or `default` when absent or expired."""
        entry = self._cache.get(key)
        if entry is None:
            self.misses += 1
            return default
        if entry.is_expired():
            del self._cache[key]
            self.misses += 1
            return default
        self.hits += 1
        return entry.value

    def __contains__(self, key: Hashable) -> bool:
        entry = self._cache.get(key)
        return entry is not None and not entry.is_expired()

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        """Cache a value.

        Args:
            key: Cache key.
            value: Value to store.
            ttl: Optional TTL override in seconds.
        """
        effective_ttl = ttl if ttl is not None else self._default_ttl
        self._cache[key] = CacheEntry(value=value, expires_at=time.monotonic() + effective_ttl)

        if len(self._cache) > self._max_entries:
            self._evict_oldest(max(1, self._max_entries // 10))

    def get_or_set(self, key: Hashable, factory, ttl: Optional[float] = None) -> Any:
        """Return the cached value, computing and storing it on a miss.

        Exceptions raised by `factory` propagate and nothing is cached.
        """
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = factory()
            self.set(key, value, ttl)
        return value

    def invalidate(self, key: Hashable) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cached entries."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        expired_count = sum(1 for e in self._cache.values() if e.is_expired())
        return {
            "total_entries": len(self._cache),
            "expired_entries": expired_count,
            "hits": self.hits,
            "misses": self.misses,
            "default_ttl": self._default_ttl,
        }

    def _evict_oldest(self, count: int) -> None:
        """Evict the oldest entries."""
        sorted_keys = sorted(self._cache.keys(), key=lambda k: self._cache[k].created_at)
        for key in sorted_keys[:count]:
            del self._cache[key]
