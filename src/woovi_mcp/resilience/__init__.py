"""
Resilience layer for the Woovi client.

Provides the rate-limit retry policy used by the request executor.
"""

from .retry import (
    DEFAULT_RETRY_DELAYS,
    BackoffSchedule,
    build_rate_limit_retrying,
    parse_retry_after,
)

__all__ = [
    "DEFAULT_RETRY_DELAYS",
    "BackoffSchedule",
    "build_rate_limit_retrying",
    "parse_retry_after",
]
