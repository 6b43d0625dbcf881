"""
MCP resources: live balance plus static API and webhook reference.

Resource reads never raise into the host; failures become an
``{"error": ...}`` JSON document.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from woovi_mcp.core.exceptions import WooviError
from woovi_mcp.core.logging import get_logger
from woovi_mcp.utils.masking import mask_sensitive_data

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from woovi_mcp.client import WooviClient

logger = get_logger("resources")

BALANCE_URI = "woovi://balance/current"
ENDPOINTS_URI = "woovi://docs/endpoints"
WEBHOOKS_URI = "woovi://webhooks/schemas"

ENDPOINTS_DOCUMENTATION = """# Woovi API Endpoints

| Method | Endpoint | Description |
|--------|----------|-------------|
| POST | /api/openpix/v1/charge | Create a new charge (Pix payment request) |
| GET | /api/v1/charge/{id} | Get a charge by correlation ID |
| GET | /api/v1/charge/ | List charges |
| POST | /api/v1/customer | Create a customer |
| GET | /api/v1/customer/{id} | Get a customer by ID |
| GET | /api/v1/customer/?email= | Find a customer by email |
| GET | /api/v1/customer/ | List customers |
| GET | /api/v1/transaction/ | List transactions |
| GET | /api/v1/transaction/{id} | Get a transaction |
| GET | /api/v1/account/ | Get the account balance |
| POST | /api/v1/charge/{id}/refund | Refund a charge |
| GET | /api/v1/refund/{id} | Get a refund |

## Amounts

All amounts are integers in centavos (5000 = R$ 50.00).

## Authentication

Every request carries the application ID verbatim in the Authorization header:

```
Authorization: <appID>
```

## Pagination

List endpoints take `skip` and `limit` (default 0 and 10) and return
`items` plus `pageInfo` (`skip`, `limit`, `totalCount`, `hasPreviousPage`,
`hasNextPage`).

## Rate Limiting

HTTP 429 responses are retried up to 3 times, honouring `Retry-After`
when present and otherwise waiting 1s, 2s and 5s. Authentication errors
(401/403) and all other failures are returned immediately.

## Caching

Balance lookups are cached for 60 seconds and customer lookups for
5 minutes. Writes do not invalidate cached lookups.
"""

WEBHOOK_EVENTS = (
    "OPENPIX:CHARGE_CREATED",
    "OPENPIX:CHARGE_COMPLETED",
    "OPENPIX:CHARGE_EXPIRED",
    "OPENPIX:TRANSACTION_RECEIVED",
    "OPENPIX:TRANSACTION_REFUND_RECEIVED",
    "OPENPIX:MOVEMENT_CONFIRMED",
)

_CUSTOMER_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "email": {"type": "string"},
        "phone": {"type": "string"},
        "taxID": {"type": "string"},
    },
}

WEBHOOK_SCHEMAS = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Woovi Webhook Events",
    "description": "JSON Schema for Woovi webhook event payloads",
    "type": "object",
    "required": ["event", "data"],
    "properties": {
        "event": {
            "type": "string",
            "enum": list(WEBHOOK_EVENTS),
            "description": "The type of webhook event",
        },
        "data": {
            "type": "object",
            "description": "Event-specific data payload",
            "oneOf": [
                {
                    "title": "Charge Event Data",
                    "properties": {
                        "charge": {
                            "type": "object",
                            "properties": {
                                "correlationID": {"type": "string"},
                                "value": {"type": "number", "description": "Centavos"},
                                "comment": {"type": "string"},
                                "status": {
                                    "type": "string",
                                    "enum": ["ACTIVE", "COMPLETED", "EXPIRED"],
                                },
                                "customer": _CUSTOMER_SCHEMA,
                                "brCode": {"type": "string"},
                                "createdAt": {"type": "string", "format": "date-time"},
                                "updatedAt": {"type": "string", "format": "date-time"},
                            },
                        }
                    },
                },
                {
                    "title": "Transaction Event Data",
                    "properties": {
                        "pix": {
                            "type": "object",
                            "properties": {
                                "endToEndId": {"type": "string"},
                                "transactionID": {"type": "string"},
                                "value": {"type": "number", "description": "Centavos"},
                                "time": {"type": "string", "format": "date-time"},
                                "customer": _CUSTOMER_SCHEMA,
                            },
                        }
                    },
                },
            ],
        },
    },
}


async def read_balance(client: WooviClient) -> str:
    """Current balance as JSON, or an error document."""
    try:
        balance = await client.get_balance()
    except WooviError as e:
        logger.warning(f"Balance resource unavailable: {e.message}")
        return json.dumps({"error": e.message}, indent=2)
    return json.dumps(mask_sensitive_data(balance), indent=2)


def register_resources(mcp: FastMCP, client: WooviClient) -> None:
    """Register balance, endpoint docs and webhook schema resources."""

    @mcp.resource(
        BALANCE_URI,
        name="balance",
        description="Current Woovi account balance. Cached for 60 seconds.",
        mime_type="application/json",
    )
    async def balance() -> str:
        return await read_balance(client)

    @mcp.resource(
        ENDPOINTS_URI,
        name="endpoints",
        description="Reference of the Woovi API endpoints exposed as tools",
        mime_type="text/markdown",
    )
    def endpoints() -> str:
        return ENDPOINTS_DOCUMENTATION

    @mcp.resource(
        WEBHOOKS_URI,
        name="webhook_schemas",
        description="JSON Schema for Woovi webhook event payloads",
        mime_type="application/json",
    )
    def webhook_schemas() -> str:
        return json.dumps(WEBHOOK_SCHEMAS, indent=2)
