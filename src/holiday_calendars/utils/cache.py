"""In-process cache with per-entry expiry.

Sync gating and init-setup rate limiting both go through this cache, so it
is the one piece of process-wide mutable state the package keeps.
"""

import copy
import logging
import threading
import time
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):
    """Protocol for the cache collaborator."""

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss."""
        ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        ...

    def delete(self, key: str) -> bool:
        """Remove ``key``; True if it was present."""
        ...


class TimedCache:
    """Thread-safe key/value cache with time-based expiration."""

    def __init__(
        self,
        name: str = "default",
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            name: Name used in log messages
            ttl_seconds: Default time-to-live for entries
            clock: Monotonic time source, injectable for tests
        """
        self.name = name
        self.default_ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            # Callers mutate what they get back; keep stored values isolated.
            return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + (ttl if ttl is not None else self.default_ttl)
        with self._lock:
            self._entries[key] = (copy.deepcopy(value), expires_at)
        logger.debug(f"Cache {self.name}: stored {key}")

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_cache: Optional[TimedCache] = None
_cache_lock = threading.Lock()


def get_cache() -> TimedCache:
    """Return the process-wide cache, creating it on first use."""
    global _cache
    with _cache_lock:
        if _cache is None:
            _cache = TimedCache(name="holiday_calendars")
        return _cache


def reset_cache() -> None:
    """Drop every entry of the process-wide cache."""
    get_cache().clear()
