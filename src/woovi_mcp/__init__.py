"""
woovi-mcp - Woovi (OpenPix) Pix payments for AI agents.

Usage:
    >>> from woovi_mcp import WooviClient
    >>>
    >>> async with WooviClient("YOUR_APP_ID") as client:
    ...     charge = await client.create_charge(
    ...         {"value": 5000, "correlationID": "order-1"}
    ...     )
"""

from woovi_mcp.client import WooviClient
from woovi_mcp.core.cache import ResponseCache
from woovi_mcp.core.config import Config
from woovi_mcp.core.exceptions import (
    ApiError,
    AuthError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ValidationError,
    WooviError,
)
from woovi_mcp.core.executor import RequestExecutor
from woovi_mcp.core.types import (
    HttpMethod,
    Operation,
    OperationCall,
    PageInfo,
    PaginatedResult,
)
from woovi_mcp.utils.masking import mask_sensitive_data

__version__ = "1.0.0"
__all__ = [
    # Main Client
    "WooviClient",
    # Core
    "RequestExecutor",
    "ResponseCache",
    "mask_sensitive_data",
    # Types
    "HttpMethod",
    "Operation",
    "OperationCall",
    "PageInfo",
    "PaginatedResult",
    # Config
    "Config",
    # Exceptions
    "WooviError",
    "ConfigurationError",
    "ValidationError",
    "ApiError",
    "AuthError",
    "RateLimitError",
    "RequestTimeoutError",
    "NetworkError",
]
