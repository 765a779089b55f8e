"""Cache storage protocol.

Defines the interface for the response cache: a mapping from request
fingerprint to a timestamped value with an expiry.

Implementations can include:
- In-process dictionary guarded by a lock (default)
- Any other store honouring lazy expiry and explicit sweep
"""

from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for response cache backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        from neon_access.protocols import CacheStore

        store: CacheStore = InMemoryCacheRepository()
        store.set("get_site:abc", {"siteCode": "SRER"}, ttl=60)
        site = store.get("get_site:abc", dict)
        ```
    """

    def get(self, key: str, expected: type[T] | None = None) -> T | None:
        """Return the cached value if present and unexpired.

        An entry found expired is deleted as a side effect. When
        ``expected`` is given, a value of any other type counts as a miss.

        Args:
            key: The cache key
            expected: Type the caller expects the value to have

        Returns:
            The cached value, or None
        """
        ...

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value, overwriting any entry under the same key.

        Args:
            key: The cache key
            value: The value to cache
            ttl: Time-to-live in seconds. Defaults to the store default.
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete a specific entry.

        Returns:
            True if an entry was removed, False otherwise
        """
        ...

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed
        """
        ...

    def sweep(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        ...

    def size(self) -> int:
        """Count stored entries, expired or not."""
        ...

    def get_stats(self) -> dict:
        """Get store statistics.

        Returns:
            Dictionary with stats (implementation-specific)
        """
        ...
