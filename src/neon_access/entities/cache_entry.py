"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached API response.

    Attributes:
        value: The decoded response payload
        stored_at: Clock reading (seconds) when the entry was written
        ttl: Time-to-live in seconds
    """

    value: Any
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        """An entry stays valid while ``now - stored_at <= ttl``."""
        return now - self.stored_at <= self.ttl
