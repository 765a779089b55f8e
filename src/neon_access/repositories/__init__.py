"""Repository layer for data access.

This layer hides external dependencies (the remote NEON API, the
response store) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (in-memory store, fake executors, etc.)
- Unit testing with mock implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from neon_access.protocols import CacheStore, RequestExecutor

from .http_executor import HttpRequestExecutor
from .memory_repository import InMemoryCacheRepository

__all__ = [
    "CacheStore",
    "RequestExecutor",
    "HttpRequestExecutor",
    "InMemoryCacheRepository",
]
