"""Bounded in-memory TTL store for analysis results."""

import logging
import threading
import time
from typing import Any, Callable, Generic, Hashable, List, Optional, Tuple, TypeVar

from cachetools import FIFOCache

from .constants import CacheConstants

logger = logging.getLogger(__name__)

V = TypeVar("V")


class BoundedTTLCache(Generic[V]):
    """Fixed-capacity map with per-entry expiry.

    Eviction is FIFO by insertion time: once the size exceeds ``max_entries``
    the oldest inserted entry goes first. Reads never reorder entries.
    Overwriting a key re-stamps it and makes it the newest entry.
    """

    def __init__(self, ttl_seconds: float = CacheConstants.CACHE_TTL_SECONDS,
                 max_entries: int = CacheConstants.CACHE_MAX_ENTRIES,
                 clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # key -> (value, inserted_at)
        self._entries: "FIFOCache[Hashable, Tuple[V, float]]" = FIFOCache(maxsize=max_entries)
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[V]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, inserted_at = entry
            if self._clock() - inserted_at >= self.ttl_seconds:
                del self._entries[key]
                logger.debug(f"Cache expired: {str(key)[:CacheConstants.CACHE_KEY_LENGTH]}")
                return None
            return value

    def put(self, key: Hashable, value: V) -> None:
        """Insert or overwrite; FIFOCache evicts the oldest entry when full."""
        with self._lock:
            # Drop first so iteration order matches eviction order
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                logger.debug(f"Cache evicting: {str(oldest)[:CacheConstants.CACHE_KEY_LENGTH]}")
            self._entries[key] = (value, self._clock())

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> List[Hashable]:
        """Keys from oldest to newest insertion, including expired ones."""
        with self._lock:
            return list(self._entries.keys())

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
