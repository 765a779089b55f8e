"""Response DTOs for the HTTP surface."""

from pydantic import BaseModel, Field


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    total_entries: int = Field(..., description="Number of stored entries, expired or not")
    hits: int = Field(..., description="Reads served from cache")
    misses: int = Field(..., description="Reads that fell through to the remote API")
    hit_rate: float = Field(..., ge=0.0, le=1.0)
    default_ttl: float = Field(..., description="Default TTL in seconds")


class CacheClearResponse(BaseModel):
    """Response DTO for clearing the cache."""

    success: bool
    deleted_count: int
    message: str


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status")
    base_url: str = Field(..., description="Remote API base URL")
    cache_entries: int = Field(..., description="Number of cached responses")
    sweeper_running: bool = Field(..., description="Whether the cache sweep task is alive")
