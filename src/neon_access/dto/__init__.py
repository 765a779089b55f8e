"""Data Transfer Objects for API contracts.

These Pydantic models define the parameter objects collaborators pass
into the core and the small envelopes the HTTP surface returns.

Decoded remote resources live in ``neon_access.models``; internal state
uses entities from the entities package.
"""

from .requests import (
    DataQueryParams,
    DownloadRequest,
    LocationSearchRequest,
    SampleQuery,
    TaxonomyQuery,
    TowerSearchRequest,
)
from .responses import CacheClearResponse, CacheStatsResponse, HealthCheckResponse

__all__ = [
    "DataQueryParams",
    "DownloadRequest",
    "LocationSearchRequest",
    "SampleQuery",
    "TaxonomyQuery",
    "TowerSearchRequest",
    "CacheClearResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
]
