"""
Type definitions for the Woovi client.

This module contains the enums, data classes, and type aliases shared by
the request executor, the cache, and the client façade.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias, Union
from urllib.parse import quote

# A decoded JSON document
JSONValue: TypeAlias = Union[
    None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]
]


class HttpMethod(str, Enum):
    """HTTP verbs used against the Woovi API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    def is_read(self) -> bool:
        return self == HttpMethod.GET


@dataclass(frozen=True)
class Operation:
    """
    Endpoint definition for one logical API call.

    Path and cache-key templates use ``str.format`` placeholders. Path
    parameters are URL-encoded when the operation is bound.
    """

    name: str
    method: HttpMethod
    path_template: str
    cacheable: bool = False
    cache_key_template: str | None = None

    def __post_init__(self) -> None:
        if self.cacheable and not self.method.is_read():
            raise ValueError(f"Operation {self.name} mutates state and cannot be cacheable")
        if self.cacheable and not self.cache_key_template:
            raise ValueError(f"Operation {self.name} is cacheable but has no cache key template")

    def bind(
        self,
        path_params: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
        body: JSONValue = None,
        cache_params: dict[str, str] | None = None,
    ) -> OperationCall:
        """Render templates into a concrete call."""
        encoded = {k: quote(str(v), safe="") for k, v in (path_params or {}).items()}
        path = self.path_template.format(**encoded)

        cache_key = None
        if self.cacheable and self.cache_key_template:
            cache_key = self.cache_key_template.format(**(cache_params or path_params or {}))

        return OperationCall(
            operation=self,
            path=path,
            query=dict(query or {}),
            body=body,
            cache_key=cache_key,
        )


@dataclass(frozen=True)
class OperationCall:
    """An Operation bound to concrete parameters, ready to execute."""

    operation: Operation
    path: str
    query: dict[str, str] = field(default_factory=dict)
    body: JSONValue = None
    cache_key: str | None = None

    @property
    def method(self) -> HttpMethod:
        return self.operation.method

    @property
    def has_body(self) -> bool:
        return self.body is not None

    def describe(self) -> str:
        return f"{self.method.value} {self.path}"


class AttemptOutcome(str, Enum):
    """How a single network try ended."""

    SUCCESS = "success"
    RETRYABLE = "retryable"  # 429 with budget left
    TERMINAL = "terminal"


@dataclass
class Attempt:
    """One network try within an executor invocation."""

    number: int  # 0-based
    waited: float  # backoff slept before this try, seconds
    outcome: AttemptOutcome | None = None
    status_code: int | None = None


@dataclass
class InvocationState:
    """
    Inspectable state of one executor invocation.

    Lives only for the duration of ``RequestExecutor.execute``.
    """

    call: OperationCall
    attempt_budget: int
    timeout: float
    attempt: int = 0
    elapsed_backoff: float = 0.0
    pending_wait: float = 0.0
    attempts: list[Attempt] = field(default_factory=list)

    @property
    def attempts_remaining(self) -> int:
        return max(self.attempt_budget - self.attempt, 0)

    def begin_attempt(self) -> Attempt:
        record = Attempt(number=self.attempt, waited=self.pending_wait)
        self.attempts.append(record)
        self.pending_wait = 0.0
        return record

    def record_backoff(self, seconds: float) -> None:
        self.pending_wait = seconds
        self.elapsed_backoff += seconds
        self.attempt += 1


@dataclass
class PageInfo:
    """Offset pagination metadata."""

    skip: int
    limit: int
    total_count: int = 0
    has_previous_page: bool = False
    has_next_page: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any], skip: int, limit: int) -> PageInfo:
        return cls(
            skip=int(data.get("skip", skip)),
            limit=int(data.get("limit", limit)),
            total_count=int(data.get("totalCount", 0) or 0),
            has_previous_page=bool(data.get("hasPreviousPage", skip > 0)),
            has_next_page=bool(data.get("hasNextPage", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "skip": self.skip,
            "limit": self.limit,
            "totalCount": self.total_count,
            "hasPreviousPage": self.has_previous_page,
            "hasNextPage": self.has_next_page,
        }


@dataclass
class PaginatedResult:
    """A page of items plus its pagination metadata."""

    items: list[Any]
    page_info: PageInfo

    def to_dict(self) -> dict[str, Any]:
        return {"items": self.items, "pageInfo": self.page_info.to_dict()}
