"""Utility modules for neon_access."""

from .geo import haversine_km
from .keys import build_cache_key

__all__ = [
    "build_cache_key",
    "haversine_km",
]
