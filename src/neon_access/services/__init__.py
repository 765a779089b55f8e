"""Service layer for business logic.

This layer contains the core orchestration: planning and dispatching
remote calls, resolving structures at sites, and sweeping the cache.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Planning/Resolution) -> (Cache/Remote API)

Usage:
    ```python
    from neon_access.services import LocationResolver, NeonQueryPlanner

    planner = NeonQueryPlanner.create(executor=executor, cache=cache)
    resolver = LocationResolver.create(planner)
    ```
"""

from .cache_sweeper import CacheSweeper
from .location_resolver import LocationResolver
from .query_planner import NeonQueryPlanner

__all__ = [
    "CacheSweeper",
    "LocationResolver",
    "NeonQueryPlanner",
]
