"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Planning/Resolution) -> (Cache/Remote API)
"""

from .neon_handler import NeonHandler

__all__ = [
    "NeonHandler",
]
