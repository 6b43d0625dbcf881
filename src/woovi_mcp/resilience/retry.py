"""
Retry policy using Tenacity.

Only HTTP 429 is retried. The delay before each retry prefers the
upstream ``Retry-After`` hint and otherwise walks a fixed escalating
schedule indexed by attempt number.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from woovi_mcp.core.exceptions import RateLimitError
from woovi_mcp.core.logging import get_logger

logger = get_logger("retry")

# Seconds to wait after attempt 0, 1, 2. Later attempts reuse the last value.
DEFAULT_RETRY_DELAYS: tuple[float, ...] = (1.0, 2.0, 5.0)

RETRY_AFTER_HEADER = "Retry-After"


def parse_retry_after(headers: Mapping[str, str]) -> float | None:
    """
    Read the upstream retry hint in seconds.

    Returns None when the header is absent, not a number, or negative.
    HTTP-date values are not supported.
    """
    raw = headers.get(RETRY_AFTER_HEADER)
    if raw is None:
        return None
    try:
        seconds = float(raw.strip())
    except ValueError:
        return None
    if seconds < 0:
        return None
    return seconds


class BackoffSchedule:
    """
    Tenacity wait strategy for rate-limited calls.

    Usable directly as the ``wait=`` argument of ``AsyncRetrying``.
    """

    def __init__(self, delays: Sequence[float] = DEFAULT_RETRY_DELAYS) -> None:
        if not delays:
            raise ValueError("delays cannot be empty")
        self.delays = tuple(delays)

    def delay_for(self, attempt: int, retry_after: float | None = None) -> float:
        """Seconds to sleep after the given 0-based attempt."""
        if retry_after is not None:
            return retry_after
        index = min(attempt, len(self.delays) - 1)
        return self.delays[index]

    def __call__(self, retry_state: RetryCallState) -> float:
        retry_after = None
        if retry_state.outcome is not None and retry_state.outcome.failed:
            exc = retry_state.outcome.exception()
            if isinstance(exc, RateLimitError):
                retry_after = exc.retry_after
        # tenacity counts attempts from 1
        return self.delay_for(retry_state.attempt_number - 1, retry_after)


def build_rate_limit_retrying(
    attempt_budget: int,
    schedule: BackoffSchedule,
    sleep: Callable[[float], Awaitable[Any]],
    before_sleep: Callable[[RetryCallState], Any] | None = None,
) -> AsyncRetrying:
    """
    Build the retry controller for one invocation.

    ``attempt_budget`` counts retries, so at most ``attempt_budget + 1``
    requests are made. The last RateLimitError is re-raised unchanged
    when the budget runs out.
    """
    return AsyncRetrying(
        retry=retry_if_exception_type(RateLimitError),
        wait=schedule,
        stop=stop_after_attempt(attempt_budget + 1),
        sleep=sleep,
        reraise=True,
        before_sleep=before_sleep,
    )
