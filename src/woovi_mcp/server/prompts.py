"""MCP prompt templates for common account workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from pydantic import Field

if TYPE_CHECKING:
    from fastmcp import FastMCP


def daily_summary_prompt() -> str:
    return (
        "Fetch the current account balance using the get_balance tool, then list the "
        "last 10 transactions using the list_transactions tool with limit=10. Summarize "
        "the account activity for today, highlighting any significant changes or patterns."
    )


def customer_report_prompt(customer_id: str) -> str:
    return (
        f'Fetch customer details for customer ID "{customer_id}" using the get_customer '
        "tool, then list the last 5 charges for this customer using the list_charges tool. "
        "Provide a complete customer activity report including customer information and "
        "recent payment activity."
    )


def reconciliation_check_prompt() -> str:
    return (
        "Fetch recent transactions using the list_transactions tool, then fetch charges "
        "using the list_charges tool. Compare the transactions against the charges to "
        "identify discrepancies, unmatched payments, or other reconciliation issues. "
        "Provide a detailed reconciliation report highlighting any mismatches."
    )


def register_prompts(mcp: FastMCP) -> None:
    """Register the prompt templates."""

    @mcp.prompt(
        name="daily_summary",
        description="Daily summary of balance and recent transactions",
    )
    def daily_summary() -> str:
        return daily_summary_prompt()

    @mcp.prompt(
        name="customer_report",
        description="Activity report for one customer including recent charges",
    )
    def customer_report(
        customer_id: Annotated[str, Field(description="Customer ID to report on")],
    ) -> str:
        return customer_report_prompt(customer_id)

    @mcp.prompt(
        name="reconciliation_check",
        description="Compare transactions against charges to find discrepancies",
    )
    def reconciliation_check() -> str:
        return reconciliation_check_prompt()
