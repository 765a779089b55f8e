"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (in-memory store, fake executors, etc.)
- Unit testing with mock implementations
- Clear separation of concerns

Usage:
    ```python
    from neon_access.protocols import CacheStore, RequestExecutor

    store: CacheStore = InMemoryCacheRepository()
    executor: RequestExecutor = HttpRequestExecutor.create()
    ```
"""

from .cache_store import CacheStore
from .request_executor import RequestExecutor

__all__ = [
    "CacheStore",
    "RequestExecutor",
]
