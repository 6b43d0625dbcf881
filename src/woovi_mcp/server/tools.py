"""
MCP tool handlers for the Woovi client.

``ToolHandlers`` holds the behavior (argument shaping, masking, error
conversion) and is independent of the MCP server library;
``register_tools`` only wires it onto a FastMCP instance.
"""

from __future__ import annotations

import json
import re
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Literal

from fastmcp.exceptions import ToolError
from pydantic import Field

from woovi_mcp.core.exceptions import ValidationError, WooviError
from woovi_mcp.core.logging import get_logger
from woovi_mcp.core.types import PaginatedResult
from woovi_mcp.utils.masking import mask_sensitive_data

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from woovi_mcp.client import WooviClient

logger = get_logger("tools")

CPF_LENGTH = 11
CNPJ_LENGTH = 14
TAX_ID_PATTERN = re.compile(r"^(\d{11}|\d{14})$")

ChargeType = Literal["DYNAMIC", "OVERDUE", "BOLETO"]
ChargeStatus = Literal["ACTIVE", "COMPLETED", "EXPIRED"]


@dataclass
class ToolResult:
    """Text returned to the agent, flagged when it describes a failure."""

    text: str
    is_error: bool = False


def to_json_text(payload: Any) -> str:
    """Serialize a payload for the agent with PII masked."""
    if isinstance(payload, PaginatedResult):
        payload = payload.to_dict()
    if payload is None:
        return "{}"
    return json.dumps(mask_sensitive_data(payload), indent=2, ensure_ascii=False, default=str)


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop unset optional fields."""
    return {k: v for k, v in values.items() if v is not None}


def build_tax_id(tax_id: str) -> dict[str, str]:
    """Wrap a CPF/CNPJ as the structured tax ID the API expects."""
    if not TAX_ID_PATTERN.match(tax_id):
        raise ValidationError("Invalid CPF or CNPJ format (must be 11 or 14 digits)")
    tax_type = "BR:CPF" if len(tax_id) == CPF_LENGTH else "BR:CNPJ"
    return {"taxID": tax_id, "type": tax_type}


async def run_tool(name: str, action: Callable[[], Awaitable[Any]]) -> ToolResult:
    """
    Run a tool body and turn any failure into an error result.

    Tool calls never raise into the host: the agent gets
    ``"Error: <message>"`` instead.
    """
    try:
        payload = await action()
    except WooviError as e:
        logger.warning(f"Tool {name} failed: {e.message}")
        return ToolResult(f"Error: {e.message}", is_error=True)
    except Exception as e:
        logger.exception(f"Tool {name} crashed")
        return ToolResult(f"Error: {e}", is_error=True)
    return ToolResult(to_json_text(payload))


class ToolHandlers:
    """Tool implementations bound to one WooviClient."""

    def __init__(self, client: WooviClient) -> None:
        self._client = client

    # Charges

    async def create_charge(
        self,
        value: int,
        correlation_id: str,
        charge_type: str | None = None,
        comment: str | None = None,
        customer: dict[str, Any] | None = None,
        expires_in: int | None = None,
        additional_info: list[dict[str, str]] | None = None,
        redirect_url: str | None = None,
        ensure_same_tax_id: bool | None = None,
        discount_settings: dict[str, Any] | None = None,
        splits: list[dict[str, Any]] | None = None,
    ) -> ToolResult:
        body = _compact(
            {
                "value": value,
                "correlationID": correlation_id,
                "type": charge_type,
                "comment": comment,
                "customer": customer,
                "expiresIn": expires_in,
                "additionalInfo": additional_info,
                "redirectUrl": redirect_url,
                "ensureSameTaxID": ensure_same_tax_id,
                "discountSettings": discount_settings,
                "splits": splits,
            }
        )
        return await run_tool("create_charge", lambda: self._client.create_charge(body))

    async def get_charge(self, correlation_id: str) -> ToolResult:
        return await run_tool("get_charge", lambda: self._client.get_charge(correlation_id))

    async def list_charges(
        self,
        status: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> ToolResult:
        return await run_tool(
            "list_charges",
            lambda: self._client.list_charges(
                skip=skip, limit=limit, status=status, start_date=start_date, end_date=end_date
            ),
        )

    # Customers

    async def create_customer(
        self,
        name: str,
        tax_id: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        correlation_id: str | None = None,
    ) -> ToolResult:
        async def action() -> Any:
            if not (tax_id or email or phone):
                raise ValidationError("Provide at least one of tax_id, email or phone")
            body = _compact(
                {
                    "name": name,
                    "email": email,
                    "phone": phone,
                    "correlationID": correlation_id,
                    "taxID": build_tax_id(tax_id) if tax_id else None,
                }
            )
            return await self._client.create_customer(body)

        return await run_tool("create_customer", action)

    async def get_customer(self, id_or_email: str) -> ToolResult:
        return await run_tool("get_customer", lambda: self._client.get_customer(id_or_email))

    async def list_customers(
        self,
        search: str | None = None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> ToolResult:
        return await run_tool(
            "list_customers",
            lambda: self._client.list_customers(skip=skip, limit=limit, search=search),
        )

    # Transactions

    async def list_transactions(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        charge: str | None = None,
        skip: int | None = None,
        limit: int | None = None,
    ) -> ToolResult:
        return await run_tool(
            "list_transactions",
            lambda: self._client.list_transactions(
                skip=skip, limit=limit, start_date=start_date, end_date=end_date, charge=charge
            ),
        )

    async def get_transaction(self, transaction_id: str) -> ToolResult:
        return await run_tool(
            "get_transaction", lambda: self._client.get_transaction(transaction_id)
        )

    # Account

    async def get_balance(self) -> ToolResult:
        return await run_tool("get_balance", self._client.get_balance)

    # Refunds

    async def create_refund(
        self,
        charge_id: str,
        amount: int | None = None,
        comment: str | None = None,
        correlation_id: str | None = None,
    ) -> ToolResult:
        # A correlation ID makes the write safe to replay upstream
        body = _compact(
            {
                "correlationID": correlation_id or str(uuid.uuid4()),
                "value": amount,
                "description": comment,
            }
        )
        return await run_tool(
            "create_refund", lambda: self._client.create_refund(charge_id, body)
        )

    async def get_refund(self, refund_id: str) -> ToolResult:
        return await run_tool("get_refund", lambda: self._client.get_refund(refund_id))


def _unwrap(result: ToolResult) -> str:
    if result.is_error:
        raise ToolError(result.text)
    return result.text


def register_tools(mcp: FastMCP, handlers: ToolHandlers) -> None:
    """Register every Woovi tool on the server."""

    @mcp.tool(
        name="create_charge",
        description=(
            "Create a new Pix charge. Value is in centavos (5000 = R$ 50.00). "
            "correlation_id must be unique per charge. Returns charge details including "
            "brCode (Pix copy-paste), QR code image URL, and payment link."
        ),
    )
    async def create_charge(
        value: Annotated[int, Field(description="Charge value in centavos (5000 = R$ 50.00)")],
        correlation_id: Annotated[str, Field(description="Unique identifier for this charge")],
        type: Annotated[ChargeType | None, Field(description="Charge type")] = None,
        comment: Annotated[str | None, Field(description="Internal comment")] = None,
        customer: Annotated[
            dict[str, Any] | None,
            Field(description="Customer: name plus optional email, phone, taxID"),
        ] = None,
        expires_in: Annotated[int | None, Field(description="Expiration in seconds")] = None,
        additional_info: Annotated[
            list[dict[str, str]] | None,
            Field(description="Key/value pairs shown on the payment page"),
        ] = None,
        redirect_url: Annotated[str | None, Field(description="Redirect after payment")] = None,
        ensure_same_tax_id: Annotated[
            bool | None, Field(description="Require payment from the same tax ID")
        ] = None,
        discount_settings: Annotated[
            dict[str, Any] | None, Field(description="{modality: fixed|percentage, amount}")
        ] = None,
        splits: Annotated[
            list[dict[str, Any]] | None, Field(description="[{pixKey, splitType, amount}]")
        ] = None,
    ) -> str:
        return _unwrap(
            await handlers.create_charge(
                value,
                correlation_id,
                charge_type=type,
                comment=comment,
                customer=customer,
                expires_in=expires_in,
                additional_info=additional_info,
                redirect_url=redirect_url,
                ensure_same_tax_id=ensure_same_tax_id,
                discount_settings=discount_settings,
                splits=splits,
            )
        )

    @mcp.tool(
        name="get_charge",
        description="Retrieve charge details (status, value, brCode, QR code, payment link).",
    )
    async def get_charge(
        correlation_id: Annotated[str, Field(description="Charge correlation ID")],
    ) -> str:
        return _unwrap(await handlers.get_charge(correlation_id))

    @mcp.tool(
        name="list_charges",
        description=(
            "List charges with pagination (skip/limit), optional status filter "
            "(ACTIVE/COMPLETED/EXPIRED) and date range (ISO 8601)."
        ),
    )
    async def list_charges(
        status: Annotated[ChargeStatus | None, Field(description="Filter by status")] = None,
        start_date: Annotated[str | None, Field(description="Start date (ISO 8601)")] = None,
        end_date: Annotated[str | None, Field(description="End date (ISO 8601)")] = None,
        skip: Annotated[int | None, Field(description="Records to skip", ge=0)] = None,
        limit: Annotated[int | None, Field(description="Max records", ge=1)] = None,
    ) -> str:
        return _unwrap(await handlers.list_charges(status, start_date, end_date, skip, limit))

    @mcp.tool(
        name="create_customer",
        description=(
            "Create a customer. Requires name and at least one of tax_id, email or phone. "
            "tax_id must be a CPF (11 digits) or CNPJ (14 digits)."
        ),
    )
    async def create_customer(
        name: Annotated[str, Field(description="Customer full name")],
        tax_id: Annotated[str | None, Field(description="CPF (11) or CNPJ (14 digits)")] = None,
        email: Annotated[str | None, Field(description="Email address")] = None,
        phone: Annotated[str | None, Field(description="Phone number")] = None,
        correlation_id: Annotated[str | None, Field(description="Your identifier")] = None,
    ) -> str:
        return _unwrap(await handlers.create_customer(name, tax_id, email, phone, correlation_id))

    @mcp.tool(
        name="get_customer",
        description=(
            "Retrieve a customer by ID or email (inputs containing '@' are treated as email). "
            "Tax IDs and phone numbers are masked."
        ),
    )
    async def get_customer(
        id_or_email: Annotated[str, Field(description="Customer ID or email address")],
    ) -> str:
        return _unwrap(await handlers.get_customer(id_or_email))

    @mcp.tool(
        name="list_customers",
        description="List customers with optional search and skip/limit pagination.",
    )
    async def list_customers(
        search: Annotated[str | None, Field(description="Name, email or tax ID")] = None,
        skip: Annotated[int | None, Field(description="Records to skip", ge=0)] = None,
        limit: Annotated[int | None, Field(description="Max records", ge=1)] = None,
    ) -> str:
        return _unwrap(await handlers.list_customers(search, skip, limit))

    @mcp.tool(
        name="list_transactions",
        description=(
            "List Pix transactions with optional date range (ISO 8601), charge filter "
            "and skip/limit pagination. Amounts are in centavos."
        ),
    )
    async def list_transactions(
        start_date: Annotated[str | None, Field(description="Start date (ISO 8601)")] = None,
        end_date: Annotated[str | None, Field(description="End date (ISO 8601)")] = None,
        charge: Annotated[str | None, Field(description="Charge ID or correlation ID")] = None,
        skip: Annotated[int | None, Field(description="Records to skip", ge=0)] = None,
        limit: Annotated[int | None, Field(description="Max records", ge=1)] = None,
    ) -> str:
        return _unwrap(await handlers.list_transactions(start_date, end_date, charge, skip, limit))

    @mcp.tool(
        name="get_transaction",
        description="Retrieve one Pix transaction by ID or end-to-end ID.",
    )
    async def get_transaction(
        transaction_id: Annotated[str, Field(description="Transaction ID")],
    ) -> str:
        return _unwrap(await handlers.get_transaction(transaction_id))

    @mcp.tool(
        name="get_balance",
        description=(
            "Retrieve the current account balance in centavos. "
            "Cached for 60 seconds."
        ),
    )
    async def get_balance() -> str:
        return _unwrap(await handlers.get_balance())

    @mcp.tool(
        name="create_refund",
        description=(
            "Refund a charge. Omit amount to refund the full charge. Amount is in centavos."
        ),
    )
    async def create_refund(
        charge_id: Annotated[str, Field(description="Charge ID or correlation ID")],
        amount: Annotated[int | None, Field(description="Refund amount in centavos", ge=1)] = None,
        comment: Annotated[str | None, Field(description="Reason for the refund")] = None,
        correlation_id: Annotated[
            str | None, Field(description="Idempotency key; generated when omitted")
        ] = None,
    ) -> str:
        return _unwrap(await handlers.create_refund(charge_id, amount, comment, correlation_id))

    @mcp.tool(
        name="get_refund",
        description="Retrieve refund details by refund ID.",
    )
    async def get_refund(
        refund_id: Annotated[str, Field(description="Refund ID")],
    ) -> str:
        return _unwrap(await handlers.get_refund(refund_id))
