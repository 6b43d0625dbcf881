"""
Exception hierarchy for the Woovi client.

All client-specific exceptions inherit from WooviError so call sites
(tool handlers, resource readers) can catch one type and turn it into
a user-facing message.
"""

from __future__ import annotations

from typing import Any


class WooviError(Exception):
    """
    Base exception for all Woovi client errors.

    Example:
        >>> try:
        ...     await client.get_charge("order-1")
        ... except WooviError as e:
        ...     print(f"Woovi error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(WooviError):
    """
    Configuration is missing or invalid.

    Raised when:
    - WOOVI_APP_ID is not set
    - A numeric setting cannot be parsed
    """

    pass


class ValidationError(WooviError):
    """
    Input validation error.

    Raised when:
    - A tool argument fails validation (e.g. malformed tax ID)
    - A required path parameter is empty
    """

    pass


class ApiError(WooviError):
    """
    The Woovi API answered with a non-success status.

    Carries the status code and the decoded error body (None when the
    body was not valid JSON) so callers can decide how to react.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: Any = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.body = body
        self.url = url

    def __str__(self) -> str:
        return self.message

    def is_server_error(self) -> bool:
        """Check if this is a server-side error."""
        return 500 <= self.status_code < 600


class AuthError(ApiError):
    """
    Authentication or authorization failed (HTTP 401 / 403).

    Never retried: a bad or under-privileged app ID stays bad.
    """

    pass


class RateLimitError(ApiError):
    """
    HTTP 429 that outlived the attempt budget.

    While attempts remain the executor retries internally; this only
    reaches callers once the budget is spent.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 429,
        body: Any = None,
        url: str | None = None,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, body=body, url=url, details=details)
        self.retry_after = retry_after


class RequestTimeoutError(WooviError):
    """
    A request did not settle within the configured timeout.

    Terminal: the executor does not retry timeouts.
    """

    def __init__(
        self,
        message: str,
        timeout_seconds: float,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.timeout_seconds = timeout_seconds
        self.url = url


class NetworkError(WooviError):
    """
    Transport-level failure below HTTP.

    Raised when:
    - The connection is refused or reset
    - DNS resolution fails
    - The server speaks broken HTTP
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url
