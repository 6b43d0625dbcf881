"""
Configuration management for the Woovi MCP server.

Handles loading configuration from environment variables and validation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from woovi_mcp.core.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://api.openpix.com.br"


def _get_env_var(name: str, default: str | None = None, required: bool = False) -> str | None:
    """Get environment variable with optional default."""
    value = os.environ.get(name, default)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {name} is not set")
    return value


def _parse_number(name: str, raw: str | None, cast: type) -> Any:
    if raw is None or raw == "":
        return None
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from e


def _parse_bool(raw: str | None) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Client and server configuration."""

    app_id: str
    base_url: str = DEFAULT_BASE_URL

    # Request policy
    request_timeout: float = 30.0  # seconds per network call
    max_retries: int = 3  # retries for HTTP 429 only
    retry_delays: tuple[float, ...] = (1.0, 2.0, 5.0)  # seconds, indexed by attempt

    # Cache TTLs (seconds)
    balance_cache_ttl: float = 60.0
    customer_cache_ttl: float = 300.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Transport
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 3000

    def __post_init__(self) -> None:
        if not self.app_id or not self.app_id.strip():
            raise ConfigurationError("app_id is required and cannot be empty")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries cannot be negative")
        if not self.retry_delays:
            raise ConfigurationError("retry_delays cannot be empty")
        if self.transport not in ("stdio", "http"):
            raise ConfigurationError(f"Unknown transport: {self.transport}")

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """Load configuration from environment variables."""
        app_id = overrides.pop("app_id", None) or _get_env_var("WOOVI_APP_ID", required=True)

        env_values: dict[str, Any] = {
            "base_url": _get_env_var("WOOVI_API_URL"),
            "request_timeout": _parse_number(
                "WOOVI_REQUEST_TIMEOUT", _get_env_var("WOOVI_REQUEST_TIMEOUT"), float
            ),
            "max_retries": _parse_number(
                "WOOVI_MAX_RETRIES", _get_env_var("WOOVI_MAX_RETRIES"), int
            ),
            "log_level": _get_env_var("WOOVI_LOG_LEVEL"),
            "transport": _get_env_var("WOOVI_TRANSPORT"),
            "host": _get_env_var("HOST"),
            "port": _parse_number("PORT", _get_env_var("PORT"), int),
        }
        log_json = _get_env_var("WOOVI_LOG_JSON")
        if log_json is not None:
            env_values["log_json"] = _parse_bool(log_json)

        values = {k: v for k, v in env_values.items() if v is not None}
        values.update(overrides)
        return cls(app_id=app_id, **values)  # type: ignore[arg-type]

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(updates)
        return Config(**current)

    def masked_app_id(self) -> str:
        """Return the app ID with most characters masked for safe logging."""
        if len(self.app_id) <= 8:
            return "****"
        return self.app_id[:4] + "..." + self.app_id[-4:]
