"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - decoded
remote resources live in ``neon_access.models`` and request shapes
in the dto package.
"""

from .cache_entry import CacheEntryEntity
from .request_descriptor import HttpMethod, RequestDescriptor

__all__ = ["CacheEntryEntity", "HttpMethod", "RequestDescriptor"]
