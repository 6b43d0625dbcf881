"""WooviClient - async façade over the Woovi (OpenPix) REST API."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import Any

import httpx

from woovi_mcp import operations as ops
from woovi_mcp.core.cache import ResponseCache
from woovi_mcp.core.config import DEFAULT_BASE_URL, Config
from woovi_mcp.core.exceptions import ValidationError
from woovi_mcp.core.executor import RequestExecutor
from woovi_mcp.core.logging import get_logger
from woovi_mcp.core.types import JSONValue, OperationCall, PageInfo, PaginatedResult
from woovi_mcp.resilience.retry import BackoffSchedule
from woovi_mcp.utils.masking import mask_sensitive_data

DEFAULT_PAGE_SIZE = 10

DateLike = datetime | date | str


def _format_date(value: DateLike) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _require(value: str | None, name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required and cannot be empty")
    return value


class WooviClient:
    """
    Client for the Woovi Pix API.

    Each instance owns its HTTP client, request executor and response
    cache. Balance and customer lookups are cached; writes never
    invalidate cached reads, so a lookup can be stale for up to its TTL.

    Example:
        >>> async with WooviClient("my-app-id") as client:
        ...     charge = await client.create_charge(
        ...         {"value": 5000, "correlationID": "order-1"}
        ...     )
        ...     balance = await client.get_balance()
    """

    def __init__(
        self,
        app_id: str | None = None,
        base_url: str | None = None,
        *,
        config: Config | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the client.

        Args:
            app_id: Woovi application ID (ignored when ``config`` is given)
            base_url: API host (default https://api.openpix.com.br)
            config: Full configuration; takes precedence over app_id/base_url
            http_client: Pre-built httpx client (the caller keeps ownership)
            sleep: Backoff sleep coroutine, injectable for tests
            clock: Monotonic clock for the response cache
        """
        if config is None:
            config = Config(app_id=app_id or "", base_url=base_url or DEFAULT_BASE_URL)
        self._config = config
        self._logger = get_logger("client")

        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=config.request_timeout)
        self._cache = ResponseCache(clock=clock)
        self._executor = RequestExecutor(
            self._http_client,
            base_url=config.base_url,
            app_id=config.app_id,
            schedule=BackoffSchedule(config.retry_delays),
            sleep=sleep,
        )
        self._logger.debug(
            f"WooviClient ready (base_url={config.base_url}, app_id={config.masked_app_id()})"
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> WooviClient:
        """Build a client from WOOVI_* environment variables."""
        return cls(config=Config.from_env(**overrides))

    @property
    def config(self) -> Config:
        return self._config

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> WooviClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    async def _execute(self, call: OperationCall) -> JSONValue:
        if call.has_body:
            self._logger.debug(
                f"{call.operation.name}: {call.describe()} body={mask_sensitive_data(call.body)}"
            )
        else:
            self._logger.debug(f"{call.operation.name}: {call.describe()}")

        payload = await self._executor.execute(
            call,
            attempt_budget=self._config.max_retries,
            timeout=self._config.request_timeout,
        )
        self._logger.debug(f"{call.operation.name} -> {mask_sensitive_data(payload)}")
        return payload

    async def _cached(self, call: OperationCall, ttl: float, extract=None) -> Any:
        async def fetch() -> Any:
            payload = await self._execute(call)
            return extract(payload) if extract else payload

        key = call.cache_key or call.describe()
        value, hit = await self._cache.get_or_fetch(key, fetch, ttl)
        if hit:
            self._logger.debug(f"{call.operation.name}: cache hit for {key}")
        return value

    async def _paginate(
        self, call: OperationCall, skip: int, limit: int, items_key: str
    ) -> PaginatedResult:
        data = await self._execute(call)
        if not isinstance(data, dict):
            data = {}

        items = data.get("items")
        if items is None:
            items = data.get(items_key) or []

        page_info = data.get("pageInfo")
        source = page_info if isinstance(page_info, dict) else data
        return PaginatedResult(items=list(items), page_info=PageInfo.from_api(source, skip, limit))

    @staticmethod
    def _page_query(skip: int | None, limit: int | None) -> tuple[int, int, dict[str, str]]:
        skip = 0 if skip is None else skip
        limit = DEFAULT_PAGE_SIZE if limit is None else limit
        if skip < 0 or limit < 1:
            raise ValidationError(f"Invalid pagination: skip={skip}, limit={limit}")
        return skip, limit, {"skip": str(skip), "limit": str(limit)}

    # -------------------------------------------------------------------------
    # Charges
    # -------------------------------------------------------------------------

    async def create_charge(self, data: dict[str, Any]) -> Any:
        """Create a Pix charge. ``value`` is in centavos."""
        return await self._execute(ops.CREATE_CHARGE.bind(body=data))

    async def get_charge(self, correlation_id: str) -> Any:
        """Get a charge by correlation ID or charge ID."""
        _require(correlation_id, "correlation_id")
        return await self._execute(ops.GET_CHARGE.bind({"id": correlation_id}))

    async def list_charges(
        self,
        skip: int | None = None,
        limit: int | None = None,
        status: str | None = None,
        start_date: DateLike | None = None,
        end_date: DateLike | None = None,
    ) -> PaginatedResult:
        """List charges, optionally filtered by status and date range."""
        skip, limit, query = self._page_query(skip, limit)
        if status:
            query["status"] = status
        if start_date:
            query["startDate"] = _format_date(start_date)
        if end_date:
            query["endDate"] = _format_date(end_date)
        return await self._paginate(ops.LIST_CHARGES.bind(query=query), skip, limit, "charges")

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    async def create_customer(self, data: dict[str, Any]) -> Any:
        """Create a customer."""
        return await self._execute(ops.CREATE_CUSTOMER.bind(body=data))

    async def get_customer(self, id_or_email: str) -> Any:
        """
        Get a customer by ID or email.

        Inputs containing "@" are looked up by email, anything else by ID.
        Results are cached under ``customer:<idOrEmail>``.
        """
        _require(id_or_email, "id_or_email")
        cache_params = {"key": id_or_email}
        if "@" in id_or_email:
            call = ops.FIND_CUSTOMER_BY_EMAIL.bind(
                query={"email": id_or_email}, cache_params=cache_params
            )
        else:
            call = ops.GET_CUSTOMER.bind({"id": id_or_email}, cache_params=cache_params)
        return await self._cached(call, self._config.customer_cache_ttl)

    async def list_customers(
        self,
        skip: int | None = None,
        limit: int | None = None,
        search: str | None = None,
    ) -> PaginatedResult:
        """List customers, optionally filtered by a search term."""
        skip, limit, query = self._page_query(skip, limit)
        if search:
            query["search"] = search
        return await self._paginate(ops.LIST_CUSTOMERS.bind(query=query), skip, limit, "customers")

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        skip: int | None = None,
        limit: int | None = None,
        start_date: DateLike | None = None,
        end_date: DateLike | None = None,
        charge: str | None = None,
    ) -> PaginatedResult:
        """List Pix transactions, optionally filtered by date range or charge."""
        skip, limit, query = self._page_query(skip, limit)
        if start_date:
            query["startDate"] = _format_date(start_date)
        if end_date:
            query["endDate"] = _format_date(end_date)
        if charge:
            query["charge"] = charge
        return await self._paginate(
            ops.LIST_TRANSACTIONS.bind(query=query), skip, limit, "transactions"
        )

    async def get_transaction(self, transaction_id: str) -> Any:
        """Get a transaction by ID or end-to-end ID."""
        _require(transaction_id, "transaction_id")
        return await self._execute(ops.GET_TRANSACTION.bind({"id": transaction_id}))

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    async def get_balance(self, account_id: str | None = None) -> Any:
        """
        Get the account balance snapshot.

        Cached under ``balance:<accountId-or-default>``.
        """
        cache_params = {"key": account_id or "default"}
        if account_id:
            call = ops.GET_ACCOUNT_BALANCE.bind({"id": account_id}, cache_params=cache_params)
        else:
            call = ops.GET_DEFAULT_BALANCE.bind(cache_params=cache_params)

        def extract(payload: Any) -> Any:
            if isinstance(payload, dict) and "balance" in payload:
                return payload["balance"]
            return payload

        return await self._cached(call, self._config.balance_cache_ttl, extract)

    # -------------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------------

    async def create_refund(self, charge_id: str, data: dict[str, Any]) -> Any:
        """Refund a charge, fully or partially."""
        _require(charge_id, "charge_id")
        return await self._execute(ops.CREATE_REFUND.bind({"id": charge_id}, body=data))

    async def get_refund(self, refund_id: str) -> Any:
        """Get a refund by ID or correlation ID."""
        _require(refund_id, "refund_id")
        return await self._execute(ops.GET_REFUND.bind({"id": refund_id}))
