"""httpx-based request executor.

Carries planned requests to the NEON data portal API and classifies the
outcome:

- 2xx: success. The ``{"data": ...}`` envelope is unwrapped.
- 4xx: ``ClientError`` carrying the remote ``detail`` message. Never retried.
- 5xx, network failure, timeout, undecodable body: ``TransientError``.
  Retried with linear backoff (``base_delay * attempt``) until the attempt
  budget runs out, then ``ExhaustedRetriesError``.

The status code decides, never a flag inside the body.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from neon_access.config import get_http_client, settings
from neon_access.entities import RequestDescriptor
from neon_access.errors import ClientError, ExhaustedRetriesError, TransientError

logger = logging.getLogger(__name__)


class HttpRequestExecutor:
    """httpx implementation of the RequestExecutor protocol.

    This class satisfies the RequestExecutor protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        executor = HttpRequestExecutor.create()
        sites = await executor.execute(
            RequestDescriptor(operation="list_sites", endpoint="/api/v0/sites")
        )
        await executor.close()
        ```
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        attempts: int | None = None,
        base_delay: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            client: Pre-built async client. If None, one is created lazily.
            attempts: Maximum attempts per request. Defaults to settings.
            base_delay: Backoff base delay in seconds. Defaults to settings.
            sleep: Coroutine used to wait between attempts.
            transport: httpx transport for the lazily created client.
        """
        self._client = client
        self._transport = transport
        self._attempts = settings.retry_attempts if attempts is None else attempts
        if self._attempts < 1:
            raise ValueError("attempts must be at least 1")
        self._base_delay = settings.retry_base_delay if base_delay is None else base_delay
        self._sleep = sleep

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = get_http_client(transport=self._transport)
        return self._client

    @classmethod
    def create(
        cls,
        attempts: int | None = None,
        base_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpRequestExecutor":
        """Factory method to create HttpRequestExecutor with defaults.

        Args:
            attempts: Maximum attempts. If None, uses settings.
            base_delay: Backoff base delay. If None, uses settings.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``).

        Returns:
            Configured HttpRequestExecutor
        """
        return cls(attempts=attempts, base_delay=base_delay, transport=transport)

    @property
    def attempts(self) -> int:
        return self._attempts

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        """Perform a GET or POST and return the decoded payload.

        Raises:
            ClientError: The remote service answered 4xx
            ExhaustedRetriesError: Every attempt failed transiently
        """
        return await self._with_retry(descriptor, self._send)

    async def probe(self, descriptor: RequestDescriptor) -> dict[str, Any]:
        """HEAD a resource and report its final URL, size and checksum.

        Raises:
            ClientError: The resource does not exist
            ExhaustedRetriesError: Every attempt failed transiently
        """
        return await self._with_retry(descriptor, self._head)

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _with_retry(
        self,
        descriptor: RequestDescriptor,
        call: Callable[[RequestDescriptor], Awaitable[Any]],
    ) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_incrementing(start=self._base_delay, increment=self._base_delay),
            retry=retry_if_exception_type(TransientError),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )

        try:
            return await retrying(call, descriptor)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                "%s %s failed after %d attempts: %s",
                descriptor.method,
                descriptor.endpoint,
                self._attempts,
                last_error,
            )
            raise ExhaustedRetriesError(last_error, self._attempts) from last_error

    async def _send(self, descriptor: RequestDescriptor) -> Any:
        try:
            response = await self.client.request(
                descriptor.method,
                descriptor.endpoint,
                params=descriptor.query_items() or None,
                json=descriptor.body if descriptor.method == "POST" else None,
            )
        except httpx.HTTPError as e:
            raise TransientError(f"NEON API request failed: {e}") from e

        self._raise_for_status(response)

        try:
            payload = response.json()
        except ValueError as e:
            raise TransientError(
                "NEON API returned an undecodable body",
                status=response.status_code,
            ) from e

        if descriptor.unwrap and isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    async def _head(self, descriptor: RequestDescriptor) -> dict[str, Any]:
        try:
            response = await self.client.request(
                "HEAD",
                descriptor.endpoint,
                params=descriptor.query_items() or None,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            raise TransientError(f"NEON API request failed: {e}") from e

        if response.status_code == 404:
            filename = descriptor.endpoint.rsplit("/", 1)[-1]
            raise ClientError(f"File not found: {filename}", status=404)
        self._raise_for_status(response)

        try:
            size = int(response.headers.get("content-length", "0"))
        except ValueError:
            size = 0

        return {
            "url": str(response.url),
            "size": size,
            "checksum": response.headers.get("etag", ""),
        }

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return

        detail = _error_detail(response)
        message = f"NEON API Error: {detail} (Status: {status})"
        if 400 <= status < 500:
            raise ClientError(message, status=status, details={"detail": detail})
        raise TransientError(message, status=status, details={"detail": detail})


def _error_detail(response: httpx.Response) -> str:
    """Pull the ``detail`` field out of an error body, falling back to text."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.text.strip() or response.reason_phrase or "Unknown error"
