"""
Request executor for the Woovi API.

Turns one bound operation into HTTP requests and classifies the outcome:

- 2xx                -> decoded JSON payload
- 401 / 403          -> AuthError, never retried
- 429, budget left   -> sleep, then retry
- 429, budget spent  -> RateLimitError (an ApiError)
- other non-2xx      -> ApiError with the best-effort decoded body
- deadline exceeded  -> RequestTimeoutError, never retried
- transport failure  -> NetworkError, never retried
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from tenacity import RetryCallState

from woovi_mcp.core.exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
)
from woovi_mcp.core.logging import get_logger
from woovi_mcp.core.types import (
    AttemptOutcome,
    InvocationState,
    JSONValue,
    OperationCall,
)
from woovi_mcp.resilience.retry import (
    BackoffSchedule,
    build_rate_limit_retrying,
    parse_retry_after,
)

AUTH_FAILURE_STATUSES = (401, 403)
RATE_LIMIT_STATUS = 429


def _join_messages(items: list[Any]) -> str:
    parts = []
    for item in items:
        if isinstance(item, dict) and "message" in item:
            parts.append(str(item["message"]))
        elif isinstance(item, str):
            parts.append(item)
        else:
            parts.append(json.dumps(item))
    return "; ".join(parts)


def extract_error_message(body: Any) -> str | None:
    """
    Pull a human-readable message out of a Woovi error body.

    Recognised shapes, first match wins:
        {"error": "text"}
        {"error": [{"message": ...}, ...]}
        {"errors": [{"message": ...}, ...]}

    Returns None when the body matches none of them.
    """
    if not isinstance(body, dict):
        return None

    error = body.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, list) and error:
        return _join_messages(error)

    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        return _join_messages(errors)

    return None


def _decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, returning None when it is empty or invalid."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class RequestExecutor:
    """
    Executes bound operations against a single upstream host.

    The executor holds no per-call state between invocations, so one
    instance can serve many concurrent calls, each with its own retry
    timeline.

    Example:
        >>> executor = RequestExecutor(http_client, base_url, app_id)
        >>> payload = await executor.execute(call, attempt_budget=3, timeout=30.0)
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        app_id: str,
        schedule: BackoffSchedule | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            http_client: Shared async HTTP client
            base_url: Upstream host, e.g. https://api.openpix.com.br
            app_id: Woovi application ID, sent verbatim as Authorization
            schedule: Backoff schedule for rate-limited calls
            sleep: Coroutine used for backoff sleeps (injectable for tests)
        """
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._app_id = app_id
        self._schedule = schedule or BackoffSchedule()
        self._sleep = sleep or asyncio.sleep
        self._logger = get_logger("executor")

    def _headers(self, call: OperationCall) -> dict[str, str]:
        headers = {
            "Authorization": self._app_id,
            "Accept": "application/json",
        }
        if call.has_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def execute(
        self,
        call: OperationCall,
        attempt_budget: int,
        timeout: float,
    ) -> JSONValue:
        """
        Run one operation to a terminal outcome.

        Args:
            call: The bound operation
            attempt_budget: Retries allowed for HTTP 429
            timeout: Seconds allowed for each network call

        Returns:
            Decoded JSON payload (None for an empty success body)

        Raises:
            AuthError, RateLimitError, ApiError, RequestTimeoutError, NetworkError
        """
        state = InvocationState(call=call, attempt_budget=attempt_budget, timeout=timeout)

        def before_sleep(retry_state: RetryCallState) -> None:
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            state.record_backoff(delay)
            self._logger.warning(
                f"Rate limited on {call.describe()}. "
                f"Retrying in {delay:.2f}s (retry {state.attempt}/{attempt_budget})"
            )

        retrying = build_rate_limit_retrying(
            attempt_budget, self._schedule, self._sleep, before_sleep=before_sleep
        )
        async for attempt in retrying:
            with attempt:
                return await self._attempt(state)

    async def _attempt(self, state: InvocationState) -> JSONValue:
        call = state.call
        record = state.begin_attempt()
        url = f"{self._base_url}{call.path}"
        content = json.dumps(call.body).encode() if call.has_body else None

        self._logger.debug(f"{call.method.value} {url} (attempt {record.number})")

        try:
            response = await asyncio.wait_for(
                self._http.request(
                    call.method.value,
                    url,
                    params=call.query or None,
                    content=content,
                    headers=self._headers(call),
                ),
                timeout=state.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            record.outcome = AttemptOutcome.TERMINAL
            raise RequestTimeoutError(
                f"Request timed out after {state.timeout}s: {call.describe()}",
                timeout_seconds=state.timeout,
                url=url,
            ) from e
        except httpx.HTTPError as e:
            record.outcome = AttemptOutcome.TERMINAL
            raise NetworkError(f"Network error on {call.describe()}: {e}", url=url) from e

        status = response.status_code
        record.status_code = status

        if response.is_success:
            record.outcome = AttemptOutcome.SUCCESS
            return self._decode_success(response, url)

        body = _decode_body(response)
        message = extract_error_message(body)

        if status in AUTH_FAILURE_STATUSES:
            record.outcome = AttemptOutcome.TERMINAL
            summary = f"Authentication failed with status {status}"
            raise AuthError(
                f"{summary}: {message}" if message else summary,
                status_code=status,
                body=body,
                url=url,
            )

        fallback = f"Request failed with status {status}"

        if status == RATE_LIMIT_STATUS:
            retryable = state.attempts_remaining > 0
            record.outcome = AttemptOutcome.RETRYABLE if retryable else AttemptOutcome.TERMINAL
            raise RateLimitError(
                message or fallback,
                body=body,
                url=url,
                retry_after=parse_retry_after(response.headers),
            )

        record.outcome = AttemptOutcome.TERMINAL
        self._logger.debug(f"{call.describe()} failed with status {status}")
        raise ApiError(message or fallback, status_code=status, body=body, url=url)

    @staticmethod
    def _decode_success(response: httpx.Response, url: str) -> JSONValue:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                f"Invalid JSON in response with status {response.status_code}",
                status_code=response.status_code,
                body=None,
                url=url,
            ) from e
