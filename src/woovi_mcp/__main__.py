"""
Entry point: ``python -m woovi_mcp`` or ``woovi-mcp``.

Runs the MCP server over stdio (default) or HTTP.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from dotenv import load_dotenv

from woovi_mcp.client import WooviClient
from woovi_mcp.core.config import Config
from woovi_mcp.core.exceptions import ConfigurationError
from woovi_mcp.core.logging import configure_logging, get_logger
from woovi_mcp.server import create_server


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="woovi-mcp", description="Woovi Pix MCP server")
    parser.add_argument("--transport", choices=("stdio", "http"), help="Transport to serve on")
    parser.add_argument("--host", help="HTTP bind address")
    parser.add_argument("--port", type=int, help="HTTP port")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser.parse_args(argv)


async def serve(config: Config) -> None:
    client = WooviClient(config=config)
    server = create_server(client)
    logger = get_logger("server")

    async with client:
        if config.transport == "http":
            logger.info(f"Listening on http://{config.host}:{config.port}/mcp")
            await server.run_async(transport="http", host=config.host, port=config.port)
        else:
            logger.info("Serving over stdio")
            await server.run_async(transport="stdio")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    overrides = {
        "transport": args.transport,
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    try:
        config = Config.from_env(**overrides)
    except ConfigurationError as e:
        configure_logging()
        get_logger().critical(f"FATAL: {e.message}")
        return 1

    configure_logging(level=config.log_level.upper(), json_format=config.log_json)
    logger = get_logger()
    logger.info(f"Starting Woovi MCP server (app_id={config.masked_app_id()})")

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception:
        logger.exception("Fatal error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
