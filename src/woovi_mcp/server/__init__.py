"""
MCP server exposing the Woovi client as tools, resources and prompts.
"""

from __future__ import annotations

from fastmcp import FastMCP

from woovi_mcp.client import WooviClient
from woovi_mcp.server.prompts import register_prompts
from woovi_mcp.server.resources import register_resources
from woovi_mcp.server.tools import ToolHandlers, ToolResult, register_tools

SERVER_NAME = "woovi-mcp-server"

INSTRUCTIONS = (
    "Tools for the Woovi Pix payment API. All amounts are integers in centavos "
    "(5000 = R$ 50.00). Tax IDs and phone numbers in responses are masked."
)


def create_server(client: WooviClient) -> FastMCP:
    """Build a FastMCP server bound to one client."""
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)
    register_tools(mcp, ToolHandlers(client))
    register_resources(mcp, client)
    register_prompts(mcp)
    return mcp


__all__ = ["SERVER_NAME", "ToolHandlers", "ToolResult", "create_server"]
