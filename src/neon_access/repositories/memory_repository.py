"""In-memory implementation of CacheStore.

Entries live in a plain dict guarded by a lock, so concurrent readers,
writers and the background sweep never see a half-updated store. Expiry
is evaluated lazily on read and during ``sweep()``, never eagerly.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any, TypeVar

from neon_access.config import settings
from neon_access.entities import CacheEntryEntity

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InMemoryCacheRepository:
    """Dictionary-backed response cache with per-entry TTL.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        store = InMemoryCacheRepository.create(default_ttl=60)
        store.set("sites", [{"siteCode": "SRER"}])
        store.get("sites", list)  # [{"siteCode": "SRER"}]
        ```
    """

    def __init__(
        self,
        default_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory store.

        Args:
            default_ttl: TTL in seconds when ``set`` gets none. Defaults to settings.
            clock: Source of the current time in seconds.
        """
        self._entries: dict[str, CacheEntryEntity] = {}
        self._lock = threading.Lock()
        self._default_ttl = settings.cache_ttl if default_ttl is None else default_ttl
        self._clock = clock
        self._hits = 0
        self._misses = 0

    @classmethod
    def create(
        cls,
        default_ttl: float | None = None,
    ) -> "InMemoryCacheRepository":
        """Factory method to create InMemoryCacheRepository with defaults.

        Args:
            default_ttl: Default TTL in seconds. If None, uses settings.

        Returns:
            Configured InMemoryCacheRepository
        """
        return cls(default_ttl=default_ttl)

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def get(self, key: str, expected: type[T] | None = None) -> T | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                logger.debug("Cache MISS: %s", key)
                return None

            if not entry.is_valid(now):
                del self._entries[key]
                self._misses += 1
                logger.debug("Cache MISS (expired): %s", key)
                return None

            if expected is not None and not isinstance(entry.value, expected):
                # Stored under the wrong shape; drop it so the caller refetches
                del self._entries[key]
                self._misses += 1
                logger.warning(
                    "Cache entry %s has type %s, expected %s; discarded",
                    key,
                    type(entry.value).__name__,
                    expected.__name__,
                )
                return None

            self._hits += 1
            logger.debug("Cache HIT: %s", key)
            return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        entry = CacheEntryEntity(
            value=value,
            stored_at=self._clock(),
            ttl=ttl if ttl is not None else self._default_ttl,
        )
        with self._lock:
            self._entries[key] = entry
        logger.debug("Cached: %s (TTL: %ss)", key, entry.ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cache entries", count)
        return count

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if not entry.is_valid(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "total_entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total if total else 0.0,
                "default_ttl": self._default_ttl,
            }
