"""Periodic removal of expired cache entries.

Entries written once and never read again would otherwise stay in the
store forever, because expiry is only checked lazily on read. The sweeper
is an explicitly owned asyncio task: ``start()`` at process startup,
``stop()`` at shutdown.
"""

import asyncio
import logging

from neon_access.config import settings
from neon_access.protocols import CacheStore

logger = logging.getLogger(__name__)


class CacheSweeper:
    """Run ``CacheStore.sweep()`` on a fixed interval."""

    def __init__(self, cache: CacheStore, interval: float | None = None) -> None:
        self._cache = cache
        self._interval = settings.sweep_interval if interval is None else interval
        if self._interval <= 0:
            raise ValueError("Sweep interval must be positive")
        self._task: asyncio.Task | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the sweep loop. Does nothing if it is already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info("Cache sweeper started (interval: %ss)", self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Cache sweeper stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            removed = self._cache.sweep()
            if removed:
                logger.info("Swept %d expired cache entries", removed)
