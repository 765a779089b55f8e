"""Request descriptor domain entity."""

from dataclasses import dataclass, field
from typing import Any, Literal

HttpMethod = Literal["GET", "POST", "HEAD"]


@dataclass(frozen=True)
class RequestDescriptor:
    """One planned call against the remote service.

    Built by the query planner for every call and handed to the request
    executor. Never persisted.

    Attributes:
        operation: Logical operation name (e.g. "get_site")
        endpoint: Path relative to the base URL
        method: HTTP method
        params: Query-string parameters; list values repeat the key
        body: JSON body (POST only)
        cacheable: Whether a successful result may be cached
        ttl: Cache TTL in seconds, or None to use the store default
        cache_key: Fingerprint of operation + parameters
        unwrap: Whether to strip the ``{"data": ...}`` response envelope
    """

    operation: str
    endpoint: str
    method: HttpMethod = "GET"
    params: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] | None = None
    cacheable: bool = True
    ttl: float | None = None
    cache_key: str = ""
    unwrap: bool = True

    def query_items(self) -> list[tuple[str, str]]:
        """Flatten params into query-string pairs.

        None values are dropped, list values repeat the key once per element
        and booleans are rendered lowercase.
        """
        items: list[tuple[str, str]] = []
        for key, value in self.params.items():
            if value is None:
                continue
            values = value if isinstance(value, (list, tuple)) else [value]
            for item in values:
                if item is None:
                    continue
                if isinstance(item, bool):
                    items.append((key, "true" if item else "false"))
                else:
                    items.append((key, str(item)))
        return items
