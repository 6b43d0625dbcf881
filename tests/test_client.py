"""Tests for the WooviClient façade."""

import json
import logging
from datetime import date

import httpx
import pytest

from conftest import APP_ID, BASE_URL, ScriptedUpstream
from woovi_mcp.client import WooviClient
from woovi_mcp.core.config import DEFAULT_BASE_URL, Config
from woovi_mcp.core.exceptions import ApiError, ConfigurationError, ValidationError
from woovi_mcp.core.types import PaginatedResult


def ok(payload) -> httpx.Response:
    return httpx.Response(200, json=payload)


class TestConstruction:
    """Tests for client setup."""

    def test_empty_app_id_rejected(self):
        with pytest.raises(ConfigurationError):
            WooviClient("")

    def test_missing_app_id_rejected(self):
        with pytest.raises(ConfigurationError):
            WooviClient()

    @pytest.mark.asyncio
    async def test_default_base_url(self):
        async with WooviClient("some-app-id") as client:
            assert client.config.base_url == DEFAULT_BASE_URL

    @pytest.mark.asyncio
    async def test_owned_http_client_uses_configured_timeout(self):
        config = Config(app_id=APP_ID, request_timeout=42.0)

        async with WooviClient(config=config) as client:
            timeout = client._http_client.timeout
            assert timeout.read == 42.0
            assert timeout.connect == 42.0

    @pytest.mark.asyncio
    async def test_borrowed_http_client_left_open(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(ScriptedUpstream(ok({}))))
        async with WooviClient(APP_ID, http_client=http_client):
            pass
        assert http_client.is_closed is False
        await http_client.aclose()


class TestCharges:
    """Tests for charge operations."""

    @pytest.mark.asyncio
    async def test_create_charge(self, make_client):
        upstream = ScriptedUpstream(ok({"charge": {"correlationID": "order-1", "status": "ACTIVE"}}))
        client = make_client(upstream)

        result = await client.create_charge({"value": 5000, "correlationID": "order-1"})

        request = upstream.last_request
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/api/openpix/v1/charge"
        assert json.loads(request.content) == {"value": 5000, "correlationID": "order-1"}
        assert result["charge"]["status"] == "ACTIVE"

    @pytest.mark.asyncio
    async def test_get_charge(self, make_client):
        upstream = ScriptedUpstream(ok({"charge": {"correlationID": "order-1"}}))
        client = make_client(upstream)

        await client.get_charge("order-1")

        assert upstream.last_request.method == "GET"
        assert upstream.last_request.url.path == "/api/v1/charge/order-1"

    @pytest.mark.asyncio
    async def test_get_charge_requires_id(self, make_client):
        upstream = ScriptedUpstream(ok({}))
        client = make_client(upstream)

        with pytest.raises(ValidationError):
            await client.get_charge("  ")
        assert upstream.calls == 0

    @pytest.mark.asyncio
    async def test_list_charges_query(self, make_client):
        upstream = ScriptedUpstream(ok({"charges": [], "pageInfo": {}}))
        client = make_client(upstream)

        await client.list_charges(
            skip=20, limit=5, status="COMPLETED", start_date=date(2024, 1, 1), end_date="2024-01-31"
        )

        params = upstream.last_request.url.params
        assert params["skip"] == "20"
        assert params["limit"] == "5"
        assert params["status"] == "COMPLETED"
        assert params["startDate"] == "2024-01-01"
        assert params["endDate"] == "2024-01-31"

    @pytest.mark.asyncio
    async def test_list_charges_defaults(self, make_client):
        upstream = ScriptedUpstream(ok({"charges": []}))
        client = make_client(upstream)

        await client.list_charges()

        params = upstream.last_request.url.params
        assert params["skip"] == "0"
        assert params["limit"] == "10"
        assert "status" not in params

    @pytest.mark.asyncio
    async def test_invalid_pagination(self, make_client):
        client = make_client(ScriptedUpstream(ok({})))

        with pytest.raises(ValidationError):
            await client.list_charges(skip=-1)
        with pytest.raises(ValidationError):
            await client.list_charges(limit=0)


class TestPagination:
    """Tests for list response normalization."""

    @pytest.mark.asyncio
    async def test_collection_key_and_page_info(self, make_client):
        upstream = ScriptedUpstream(
            ok(
                {
                    "charges": [{"correlationID": "a"}, {"correlationID": "b"}],
                    "pageInfo": {"skip": 0, "limit": 2, "totalCount": 7, "hasNextPage": True},
                }
            )
        )
        client = make_client(upstream)

        result = await client.list_charges(limit=2)

        assert isinstance(result, PaginatedResult)
        assert [c["correlationID"] for c in result.items] == ["a", "b"]
        assert result.page_info.total_count == 7
        assert result.page_info.has_next_page is True

    @pytest.mark.asyncio
    async def test_items_key_preferred(self, make_client):
        upstream = ScriptedUpstream(ok({"items": [{"id": 1}], "customers": [{"id": 2}]}))
        client = make_client(upstream)

        result = await client.list_customers()

        assert result.items == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_top_level_page_fields(self, make_client):
        upstream = ScriptedUpstream(
            ok({"transactions": [{"endToEndId": "E1"}], "totalCount": 1, "hasNextPage": False})
        )
        client = make_client(upstream)

        result = await client.list_transactions(skip=0, limit=10)

        assert result.items == [{"endToEndId": "E1"}]
        assert result.page_info.total_count == 1

    @pytest.mark.asyncio
    async def test_empty_body(self, make_client):
        upstream = ScriptedUpstream(httpx.Response(200))
        client = make_client(upstream)

        result = await client.list_customers(skip=10)

        assert result.items == []
        assert result.page_info.skip == 10
        assert result.page_info.has_previous_page is True


class TestCustomers:
    """Tests for customer operations."""

    @pytest.mark.asyncio
    async def test_create_customer(self, make_client):
        upstream = ScriptedUpstream(ok({"customer": {"name": "Maria"}}))
        client = make_client(upstream)

        await client.create_customer({"name": "Maria", "email": "maria@example.com"})

        assert upstream.last_request.method == "POST"
        assert upstream.last_request.url.path == "/api/v1/customer"

    @pytest.mark.asyncio
    async def test_lookup_by_id(self, make_client):
        upstream = ScriptedUpstream(ok({"customer": {"correlationID": "cus-1"}}))
        client = make_client(upstream)

        await client.get_customer("cus-1")

        assert upstream.last_request.url.path == "/api/v1/customer/cus-1"
        assert client.cache.get("customer:cus-1") is not None

    @pytest.mark.asyncio
    async def test_lookup_by_email(self, make_client):
        upstream = ScriptedUpstream(ok({"customers": [{"email": "maria@example.com"}]}))
        client = make_client(upstream)

        await client.get_customer("maria@example.com")

        request = upstream.last_request
        assert request.url.path == "/api/v1/customer/"
        assert request.url.params["email"] == "maria@example.com"
        assert client.cache.get("customer:maria@example.com") is not None

    @pytest.mark.asyncio
    async def test_lookup_is_cached_until_ttl(self, make_client, clock):
        upstream = ScriptedUpstream(ok({"customer": {"correlationID": "cus-1"}}))
        client = make_client(upstream)

        await client.get_customer("cus-1")
        clock.advance(299)
        await client.get_customer("cus-1")
        assert upstream.calls == 1

        clock.advance(1)
        await client.get_customer("cus-1")
        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_create_does_not_invalidate_lookup(self, make_client):
        upstream = ScriptedUpstream(
            ok({"customer": {"correlationID": "cus-1", "name": "Old"}}),
            ok({"customer": {"correlationID": "cus-1", "name": "New"}}),
        )
        client = make_client(upstream)

        await client.get_customer("cus-1")
        await client.create_customer({"name": "New", "correlationID": "cus-1"})
        cached = await client.get_customer("cus-1")

        assert cached["customer"]["name"] == "Old"
        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_list_customers_search(self, make_client):
        upstream = ScriptedUpstream(ok({"customers": []}))
        client = make_client(upstream)

        await client.list_customers(search="maria")

        assert upstream.last_request.url.params["search"] == "maria"

    @pytest.mark.asyncio
    async def test_failed_lookup_not_cached(self, make_client):
        upstream = ScriptedUpstream(
            httpx.Response(404, json={"error": "Customer not found"}),
            ok({"customer": {"correlationID": "cus-1"}}),
        )
        client = make_client(upstream)

        with pytest.raises(ApiError, match="Customer not found"):
            await client.get_customer("cus-1")
        await client.get_customer("cus-1")

        assert upstream.calls == 2


class TestTransactions:
    """Tests for transaction operations."""

    @pytest.mark.asyncio
    async def test_list_transactions_filters(self, make_client):
        upstream = ScriptedUpstream(ok({"transactions": []}))
        client = make_client(upstream)

        await client.list_transactions(start_date="2024-01-01", charge="charge-1")

        params = upstream.last_request.url.params
        assert upstream.last_request.url.path == "/api/v1/transaction/"
        assert params["startDate"] == "2024-01-01"
        assert params["charge"] == "charge-1"
        assert "endDate" not in params

    @pytest.mark.asyncio
    async def test_get_transaction(self, make_client):
        upstream = ScriptedUpstream(ok({"transaction": {"endToEndId": "E1"}}))
        client = make_client(upstream)

        await client.get_transaction("E1")

        assert upstream.last_request.url.path == "/api/v1/transaction/E1"


class TestBalance:
    """Tests for balance lookups."""

    @pytest.mark.asyncio
    async def test_balance_extracted(self, make_client):
        upstream = ScriptedUpstream(ok({"balance": {"total": 1000, "blocked": 0, "available": 1000}}))
        client = make_client(upstream)

        balance = await client.get_balance()

        assert balance == {"total": 1000, "blocked": 0, "available": 1000}
        assert upstream.last_request.url.path == "/api/v1/account/"
        assert client.cache.get("balance:default") == balance

    @pytest.mark.asyncio
    async def test_payload_without_balance_key(self, make_client):
        upstream = ScriptedUpstream(ok({"accounts": []}))
        client = make_client(upstream)

        assert await client.get_balance() == {"accounts": []}

    @pytest.mark.asyncio
    async def test_balance_cached_for_ttl(self, make_client, clock):
        upstream = ScriptedUpstream(
            ok({"balance": {"total": 1000}}),
            ok({"balance": {"total": 2000}}),
        )
        client = make_client(upstream)

        assert await client.get_balance() == {"total": 1000}
        clock.advance(30)
        assert await client.get_balance() == {"total": 1000}
        assert upstream.calls == 1

        clock.advance(31)
        assert await client.get_balance() == {"total": 2000}
        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_per_account_keys(self, make_client):
        upstream = ScriptedUpstream(ok({"balance": {"total": 1}}))
        client = make_client(upstream)

        await client.get_balance()
        await client.get_balance("acc-1")

        assert upstream.calls == 2
        assert upstream.last_request.url.path == "/api/v1/account/acc-1"
        assert client.cache.get("balance:acc-1") == {"total": 1}

    @pytest.mark.asyncio
    async def test_refund_does_not_invalidate_balance(self, make_client):
        upstream = ScriptedUpstream(
            ok({"balance": {"total": 1000}}),
            ok({"refund": {"status": "IN_PROCESSING"}}),
        )
        client = make_client(upstream)

        await client.get_balance()
        await client.create_refund("charge-1", {"value": 500, "correlationID": "ref-1"})

        assert await client.get_balance() == {"total": 1000}
        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_clients_do_not_share_cache(self, make_client):
        first_upstream = ScriptedUpstream(ok({"balance": {"total": 1}}))
        second_upstream = ScriptedUpstream(ok({"balance": {"total": 2}}))

        assert await make_client(first_upstream).get_balance() == {"total": 1}
        assert await make_client(second_upstream).get_balance() == {"total": 2}


class TestRefunds:
    """Tests for refund operations."""

    @pytest.mark.asyncio
    async def test_create_refund(self, make_client):
        upstream = ScriptedUpstream(ok({"refund": {"value": 500}}))
        client = make_client(upstream)

        await client.create_refund("charge-1", {"value": 500, "correlationID": "ref-1"})

        request = upstream.last_request
        assert request.method == "POST"
        assert request.url.path == "/api/v1/charge/charge-1/refund"
        assert json.loads(request.content)["value"] == 500

    @pytest.mark.asyncio
    async def test_get_refund(self, make_client):
        upstream = ScriptedUpstream(ok({"refund": {"correlationID": "ref-1"}}))
        client = make_client(upstream)

        await client.get_refund("ref-1")

        assert upstream.last_request.url.path == "/api/v1/refund/ref-1"

    @pytest.mark.asyncio
    async def test_create_refund_requires_charge(self, make_client):
        client = make_client(ScriptedUpstream(ok({})))

        with pytest.raises(ValidationError):
            await client.create_refund("", {"value": 1})


class TestRetryBudgetFromConfig:
    """Tests that config reaches the executor."""

    @pytest.mark.asyncio
    async def test_max_retries_applies(self, make_client, sleeper):
        upstream = ScriptedUpstream(httpx.Response(429))
        client = make_client(upstream, max_retries=1)

        with pytest.raises(ApiError):
            await client.get_charge("order-1")

        assert upstream.calls == 2
        assert sleeper.delays == [1.0]


class TestLoggingIsMasked:
    """Tests that debug logs never carry raw personal data."""

    @pytest.mark.asyncio
    async def test_tax_id_not_logged(self, make_client, caplog):
        upstream = ScriptedUpstream(
            ok({"customer": {"name": "Maria", "taxID": {"taxID": "12345678901", "type": "BR:CPF"}}})
        )
        client = make_client(upstream)

        logger = logging.getLogger("woovi_mcp")
        logger.addHandler(caplog.handler)
        previous = logger.level
        logger.setLevel(logging.DEBUG)
        try:
            await client.create_customer(
                {"name": "Maria", "taxID": "12345678901", "phone": "+5511999998888"}
            )
        finally:
            logger.removeHandler(caplog.handler)
            logger.setLevel(previous)

        assert "12345678901" not in caplog.text
        assert "+5511999998888" not in caplog.text
        assert "8901" in caplog.text
