"""
Result caching for the analyzers.

ResultCache memoises whole analysis results under a content fingerprint
with a fixed time-to-live. BoundedMemo is the small slope sub-cache that
is simply cleared when it grows past its limit (not an LRU).
"""

import logging
import time
from dataclasses import dataclass
from threading import Lock, RLock
from typing import Any, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A computed value plus its monotonic creation time."""

    key: str
    value: Any
    created_at: float

    def is_expired(self, now: float, ttl: float) -> bool:
        return now - self.created_at > ttl


class ResultCache:
    """
    TTL memoisation keyed by a series fingerprint.

    Concurrent callers asking for the same key wait for a single
    computation; different keys compute in parallel. A computation that
    raises (including cancellation) stores nothing.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        name: str = "results",
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Default lifetime of an entry
            name: Name for logging
            clock: Monotonic time source, injectable for tests
        """
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = RLock()
        self._key_locks: Dict[str, Lock] = {}
        self._key_lock_users: Dict[str, int] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str, ttl: Optional[float] = None) -> Optional[Any]:
        """Live value for ``key`` or None."""
        entry = self._lookup(key, self._ttl(ttl))
        return entry.value if entry is not None else None

    def get_or_compute(self, key: str, ttl: Optional[float], compute_fn: Callable[[], Any]) -> Any:
        """
        Return the live value for ``key``, computing and storing it on a miss.

        Args:
            key: Content fingerprint of the input series
            ttl: Lifetime in seconds; None uses the cache default
            compute_fn: Zero-argument callable producing the value

        Returns:
            Cached or freshly computed value
        """
        ttl = self._ttl(ttl)
        entry = self._lookup(key, ttl)
        if entry is not None:
            self._record_hit(key)
            return entry.value

        key_lock = self._acquire_key_lock(key)
        try:
            with key_lock:
                # Another caller may have finished while we waited
                entry = self._lookup(key, ttl)
                if entry is not None:
                    self._record_hit(key)
                    return entry.value

                with self._lock:
                    self.misses += 1
                logger.debug(f"Cache '{self.name}' miss for {key[:12]}")
                value = compute_fn()
                self._store(key, value, ttl)
                return value
        finally:
            self._release_key_lock(key)

    def invalidate(self, key: str) -> bool:
        """Drop ``key``; returns True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self._lookup(key, self.ttl_seconds) is not None

    def _ttl(self, ttl: Optional[float]) -> float:
        return self.ttl_seconds if ttl is None else ttl

    def _lookup(self, key: str, ttl: float) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock(), ttl):
                del self._entries[key]
                return None
            return entry

    def _store(self, key: str, value: Any, ttl: float):
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now, ttl)]
            for k in expired:
                del self._entries[k]
            self._entries[key] = CacheEntry(key=key, value=value, created_at=now)

    def _acquire_key_lock(self, key: str) -> Lock:
        """Shared lock for ``key``; every caller holding it is counted."""
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = Lock()
                self._key_locks[key] = lock
                self._key_lock_users[key] = 0
            self._key_lock_users[key] += 1
            return lock

    def _release_key_lock(self, key: str):
        with self._lock:
            self._key_lock_users[key] -= 1
            if self._key_lock_users[key] == 0:
                del self._key_lock_users[key]
                del self._key_locks[key]

    def _record_hit(self, key: str):
        with self._lock:
            self.hits += 1
        logger.debug(f"Cache '{self.name}' hit for {key[:12]}")


class BoundedMemo:
    """Plain memo table that empties itself once it exceeds ``max_entries``."""

    def __init__(self, max_entries: int = 100):
        self.max_entries = max_entries
        self._values: Dict[Hashable, Any] = {}
        self._lock = RLock()

    def get_or_compute(self, key: Hashable, compute_fn: Callable[[], Any]) -> Any:
        with self._lock:
            if key in self._values:
                return self._values[key]
        value = compute_fn()
        with self._lock:
            self._values[key] = value
            if len(self._values) > self.max_entries:
                self._values.clear()
        return value

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
