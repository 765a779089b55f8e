"""Error taxonomy for calls against the remote NEON API.

Callers only need to tell two families apart:

- ``ClientError``: the request is malformed or names a resource that does
  not exist. Retrying cannot help, so it is raised after a single attempt.
- ``TransientError``: a network failure, timeout or server-side fault that
  may clear on its own. ``ExhaustedRetriesError`` is raised once every
  attempt has failed this way.

"Nothing found" is never an error; resolution code returns an empty list.
"""

from typing import Any


class NeonApiError(Exception):
    """Base exception for remote API failures."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)


class ClientError(NeonApiError):
    """The remote service rejected the request (4xx)."""


class TransientError(NeonApiError):
    """Network failure, timeout or a 5xx response."""


class ExhaustedRetriesError(TransientError):
    """Every retry attempt ended in a transient failure."""

    def __init__(self, last_error: TransientError, attempts: int) -> None:
        super().__init__(
            f"Request failed after {attempts} attempts: {last_error.message}",
            status=last_error.status,
            details=last_error.details,
        )
        self.last_error = last_error
        self.attempts = attempts
