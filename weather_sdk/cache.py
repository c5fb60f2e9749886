"""
Cache implementation for weather data with TTL freshness and LRU eviction.
"""
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from utils.metrics import cache_eviction_counter

from .config import MAX_CACHE_SIZE
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    """Cache slot for a city name: surrounding whitespace dropped, case folded."""
    return key.strip().casefold()


@dataclass(frozen=True)
class CacheEntry:
    """A fetched payload together with the time the fetch completed."""

    payload: Any
    fetched_at: float

    def is_fresh(self, ttl_seconds: float, now: Optional[float] = None) -> bool:
        """True while the entry is younger than ``ttl_seconds``.

        An entry exactly ``ttl_seconds`` old is already stale.
        """
        if now is None:
            now = time.time()
        return now - self.fetched_at < ttl_seconds


class BoundedFreshCache:
    """
    Fixed-capacity mapping from normalized city name to CacheEntry.

    Entries are kept in access order (least recently used first); both
    lookups and writes count as access. Freshness is never checked here,
    callers decide with ``CacheEntry.is_fresh``. The original spelling of
    each key is kept so the refresh loop can re-query the upstream with it.
    """

    def __init__(self, capacity: int = MAX_CACHE_SIZE):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._lock = threading.Lock()
        # Both maps always hold the same keys; only touched under _lock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._display_names: Dict[str, str] = {}

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """Get the entry for ``key``, fresh or stale, marking it recently used."""
        normalized = normalize_key(key)
        with self._lock:
            entry = self._entries.get(normalized)
            if entry is not None:
                self._entries.move_to_end(normalized)
            return entry

    def put(self, key: str, original_key: str, entry: CacheEntry) -> None:
        """Store ``entry`` under ``key``, evicting the LRU key if a new key needs room."""
        normalized = normalize_key(key)
        if not normalized:
            raise InvalidArgumentError("Cache key cannot be empty")

        with self._lock:
            if normalized not in self._entries and len(self._entries) >= self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                del self._display_names[evicted]
                cache_eviction_counter.inc()
                logger.debug(f"Evicted least recently used city '{evicted}'")

            self._entries[normalized] = entry
            self._entries.move_to_end(normalized)
            self._display_names[normalized] = original_key

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return normalize_key(key) in self._entries

    def snapshot_keys(self) -> List[str]:
        """Copy of the normalized keys, least recently used first."""
        with self._lock:
            return list(self._entries)

    def original_key_of(self, normalized_key: str) -> Optional[str]:
        with self._lock:
            return self._display_names.get(normalized_key)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
            self._display_names.clear()
