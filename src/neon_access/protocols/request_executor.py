"""Request executor protocol.

Defines the interface for anything that can carry a planned request to
the remote service and hand back the decoded payload.

Implementations can include:
- httpx over the network (default)
- In-memory fakes for tests
"""

from typing import Any, Protocol, runtime_checkable

from neon_access.entities import RequestDescriptor


@runtime_checkable
class RequestExecutor(Protocol):
    """Protocol for request executors.

    Implementations raise ``ClientError`` for 4xx responses without
    retrying, and ``ExhaustedRetriesError`` when every attempt ended in a
    transient failure.
    """

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        """Perform the call and return the unwrapped ``data`` payload.

        Args:
            descriptor: The planned request

        Returns:
            The decoded payload
        """
        ...

    async def probe(self, descriptor: RequestDescriptor) -> dict[str, Any]:
        """Check that a resource exists without fetching its body.

        Args:
            descriptor: The planned HEAD request

        Returns:
            Dict with ``url``, ``size`` and ``checksum``
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
