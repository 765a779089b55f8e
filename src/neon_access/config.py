import os
from dataclasses import dataclass, field
from functools import lru_cache

import httpx
from dotenv import load_dotenv

load_dotenv()


def _parse_mapping(raw: str) -> dict[str, str]:
    """Parse ``KEY=VALUE,KEY=VALUE`` into a dict, skipping blank items."""
    mapping: dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep or not key.strip() or not value.strip():
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        mapping[key.strip()] = value.strip()
    return mapping


def _parse_list(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Remote service
    base_url: str = os.getenv("NEON_BASE_URL", "https://data.neonscience.org")
    request_timeout: float = float(os.getenv("NEON_REQUEST_TIMEOUT", "30.0"))

    # Cache
    cache_ttl: float = float(os.getenv("NEON_CACHE_TTL", "3600"))  # 1 hour default
    data_query_ttl: float = float(os.getenv("NEON_DATA_QUERY_TTL", "1800"))
    ttl_overrides: dict[str, str] = field(
        default_factory=lambda: _parse_mapping(os.getenv("NEON_TTL_OVERRIDES", ""))
    )
    sweep_interval: float = float(os.getenv("NEON_SWEEP_INTERVAL", "600"))  # 10 minutes

    # Retry
    retry_attempts: int = int(os.getenv("NEON_RETRY_ATTEMPTS", "3"))
    retry_base_delay: float = float(os.getenv("NEON_RETRY_BASE_DELAY", "1.0"))

    # Location resolution
    cross_site_cap: int = int(os.getenv("NEON_CROSS_SITE_CAP", "10"))
    hierarchy_child_cap: int = int(os.getenv("NEON_HIERARCHY_CHILD_CAP", "20"))
    hierarchy_max_depth: int = int(os.getenv("NEON_HIERARCHY_MAX_DEPTH", "3"))
    known_structures: dict[str, str] = field(
        default_factory=lambda: _parse_mapping(
            os.getenv("NEON_KNOWN_STRUCTURES", "SRER=TOWER104454")
        )
    )
    recurring_structures: tuple[str, ...] = field(
        default_factory=lambda: _parse_list(
            os.getenv("NEON_RECURRING_STRUCTURES", "TOWER104454,TOWER103029,TOWER102755")
        )
    )

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    def ttl_for(self, operation: str, default: float | None = None) -> float:
        """Resolve the cache TTL for an operation.

        Args:
            operation: Logical operation name (e.g. ``"query_data"``)
            default: TTL to use when no override exists. Defaults to ``cache_ttl``.

        Returns:
            TTL in seconds
        """
        if operation in self.ttl_overrides:
            return float(self.ttl_overrides[operation])
        return default if default is not None else self.cache_ttl

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.retry_attempts < 1:
            raise ValueError("NEON_RETRY_ATTEMPTS must be at least 1")

        if self.retry_base_delay < 0:
            raise ValueError("NEON_RETRY_BASE_DELAY must not be negative")

        if self.cache_ttl <= 0 or self.data_query_ttl <= 0:
            raise ValueError("Cache TTLs must be positive")

        if self.sweep_interval <= 0:
            raise ValueError("NEON_SWEEP_INTERVAL must be positive")

        if self.cross_site_cap < 1 or self.hierarchy_child_cap < 1:
            raise ValueError("Search caps must be at least 1")

        if not 1 <= self.hierarchy_max_depth <= 5:
            raise ValueError(
                f"NEON_HIERARCHY_MAX_DEPTH must be between 1 and 5, "
                f"got {self.hierarchy_max_depth}"
            )

        for operation, ttl in self.ttl_overrides.items():
            if float(ttl) <= 0:
                raise ValueError(f"TTL override for {operation} must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_http_client(
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared async HTTP client for the remote service."""
    return httpx.AsyncClient(
        base_url=settings.base_url,
        timeout=settings.request_timeout,
        transport=transport,
        headers={"Accept": "application/json"},
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )
