# gridengine/cache/store.py
"""Thread-safe in-process cache with absolute and sliding expiration."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class CacheEntry:
    """A cached value with its expiry policy.

    ``expires_at`` is the absolute deadline. When ``sliding`` is set the entry
    also expires if it is not read for ``sliding`` seconds; every read pushes
    ``sliding_deadline`` forward, but never past ``expires_at``.
    """

    key: Hashable
    value: Any
    expires_at: Optional[float] = None
    sliding: Optional[float] = None
    sliding_deadline: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        if self.expires_at is not None and now >= self.expires_at:
            return True
        if self.sliding_deadline is not None and now >= self.sliding_deadline:
            return True
        return False

    def touch(self, now: float) -> None:
        if self.sliding is not None:
            self.sliding_deadline = now + self.sliding


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    removals: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return (self.hits / total * 100) if total else 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "removals": self.removals,
            "expirations": self.expirations,
            "hit_rate": round(self.hit_rate, 2),
        }


class MemoryCache:
    """Key/value store shared by every cache tier.

    Reads and writes are serialised by a re-entrant lock. ``get_or_create``
    computes a missing value outside the lock, so two threads may both
    compute the same key; the last one to insert wins.

    Removal is by exact key only. There is no prefix or pattern removal.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._lock = threading.RLock()
        self._clock = clock
        self.stats = CacheStats()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING, touch=False) is not _MISSING

    def get(self, key: Hashable, default: Any = None, touch: bool = True) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats.misses += 1
                return default
            if entry.is_expired(now):
                del self._entries[key]
                self.stats.expirations += 1
                self.stats.misses += 1
                return default
            if touch:
                entry.touch(now)
            self.stats.hits += 1
            return entry.value

    def set(
        self,
        key: Hashable,
        value: Any,
        ttl: Optional[float] = None,
        sliding: Optional[float] = None,
    ) -> None:
        """Store ``value``. ``ttl`` and ``sliding`` are in seconds; ``None`` disables each."""
        now = self._clock()
        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=now + ttl if ttl is not None else None,
            sliding=sliding,
            sliding_deadline=now + sliding if sliding is not None else None,
        )
        with self._lock:
            self._entries[key] = entry
            self.stats.sets += 1

    def get_or_create(
        self,
        key: Hashable,
        factory: Callable[[], Any],
        ttl: Optional[float] = None,
        sliding: Optional[float] = None,
    ) -> Any:
        """Read-through populate. ``factory`` errors propagate and nothing is cached."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = factory()
        self.set(key, value, ttl=ttl, sliding=sliding)
        return value

    def remove(self, key: Hashable) -> bool:
        """Remove one key. Removing an absent key is a no-op that returns False."""
        with self._lock:
            if self._entries.pop(key, None) is None:
                return False
            self.stats.removals += 1
            return True

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for k in expired:
                del self._entries[k]
            self.stats.expirations += len(expired)
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_default_cache: Optional[MemoryCache] = None
_default_lock = threading.Lock()


def get_cache() -> MemoryCache:
    """Process-wide cache instance."""
    global _default_cache
    if _default_cache is None:
        with _default_lock:
            if _default_cache is None:
                _default_cache = MemoryCache()
    return _default_cache
