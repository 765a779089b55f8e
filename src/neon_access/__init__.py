"""NEON Access - cached, retrying access to the NEON ecological data portal.

This package provides a layered architecture around the NEON REST API:

Layers:
    - protocols: Interface contracts (CacheStore, RequestExecutor)
    - repositories: In-memory response cache and HTTP request executor
    - services: Query planning, location resolution, cache sweeping
    - handlers: HTTP endpoint handlers
    - dto: Request parameter objects and response envelopes
    - models: Decoded remote resources
    - entities: Internal records (cache entries, request descriptors)

Usage:
    ```python
    from neon_access.repositories import HttpRequestExecutor, InMemoryCacheRepository
    from neon_access.services import LocationResolver, NeonQueryPlanner

    planner = NeonQueryPlanner.create(
        executor=HttpRequestExecutor.create(),
        cache=InMemoryCacheRepository.create(),
    )
    towers = await LocationResolver.create(planner).find_towers("SRER")
    ```

For HTTP API:
    ```python
    from neon_access.api.app import app
    ```
"""

from neon_access.config import get_settings, settings
from neon_access.dto import DataQueryParams, LocationSearchRequest, TowerSearchRequest
from neon_access.entities import CacheEntryEntity, RequestDescriptor
from neon_access.errors import ClientError, ExhaustedRetriesError, NeonApiError, TransientError
from neon_access.handlers import NeonHandler
from neon_access.protocols import CacheStore, RequestExecutor
from neon_access.repositories import HttpRequestExecutor, InMemoryCacheRepository
from neon_access.services import CacheSweeper, LocationResolver, NeonQueryPlanner

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Errors
    "NeonApiError",
    "ClientError",
    "TransientError",
    "ExhaustedRetriesError",
    # Protocols (interfaces)
    "CacheStore",
    "RequestExecutor",
    # Services (business logic)
    "NeonQueryPlanner",
    "LocationResolver",
    "CacheSweeper",
    # Handlers (HTTP)
    "NeonHandler",
    # Repositories (data access)
    "HttpRequestExecutor",
    "InMemoryCacheRepository",
    # Entities (internal records)
    "CacheEntryEntity",
    "RequestDescriptor",
    # DTOs (parameter objects)
    "DataQueryParams",
    "LocationSearchRequest",
    "TowerSearchRequest",
]
