"""MCP server entry point exposing every backend's tools over stdio."""

import argparse
import asyncio
import json
import os
import signal
import sys
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from polydb_mcp import __version__
from polydb_mcp.lib.logging_config import get_logger, setup_logging
from polydb_mcp.lib.registry import BACKENDS, AdapterRegistry, create_default_registry
from polydb_mcp.models.error_types import MCPError
from polydb_mcp.services.health_api import HealthAPI

logger = get_logger(__name__)

SERVER_NAME = "polydb-mcp-server"


def create_server(registry: AdapterRegistry) -> Server:
    """Build the MCP server for a registry.

    Tool results are returned as JSON text. A raised ``MCPError`` becomes a
    tool error result carrying its message.
    """
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema())
            for tool in registry.tools.values()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        try:
            result = await registry.call_tool(name, arguments or {})
        except MCPError as e:
            logger.error(f"Tool {name} failed: {e.message}")
            raise
        except Exception as e:
            logger.error(f"Unexpected error in {name}: {e}")
            raise MCPError(f"Unexpected error: {e}", recoverable=False) from e
        return [types.TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    return server


async def serve(registry: AdapterRegistry, health_api: Optional[HealthAPI] = None) -> None:
    """Run the MCP server on stdio until the client disconnects.

    When a health API is given it is served on the same event loop, over the
    same registry, so every backend keeps a single client.
    """
    server = create_server(registry)
    status = await registry.connect_all()
    logger.info(f"Backends: {', '.join(f'{n}={ok}' for n, ok in status.items())}")

    health_task = asyncio.create_task(health_api.serve()) if health_api else None
    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info(f"Serving {len(registry.tools)} tools over stdio")
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        if health_task is not None:
            health_api.stop()
            await health_task
        await cleanup_resources(registry)


def shutdown_handler(signum, frame):
    """Turn SIGTERM into a normal exit so cleanup runs."""
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    sys.exit(0)


async def cleanup_resources(registry: AdapterRegistry) -> None:
    """Disconnect every backend."""
    logger.info("Cleaning up resources...")
    await registry.disconnect_all()
    logger.info("Cleanup complete")


def parse_backends(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [name.strip() for name in value.split(",") if name.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PolyDB MCP Server")
    parser.add_argument(
        "--backends",
        help=f"Comma-separated backends to enable (default: all of {', '.join(BACKENDS)})"
    )
    parser.add_argument(
        "--health-host",
        default="0.0.0.0",
        help="Host for health API (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--health-port",
        type=int,
        default=8080,
        help="Port for health API (default: 8080)"
    )
    parser.add_argument(
        "--no-health-api",
        action="store_true",
        help="Disable health API service"
    )
    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point for the MCP server."""
    signal.signal(signal.SIGTERM, shutdown_handler)

    args = build_parser().parse_args(argv)

    setup_logging(
        level=os.getenv('LOG_LEVEL', 'INFO'),
        json_format=os.getenv('LOG_JSON', 'false').lower() == 'true',
        log_file=os.getenv('LOG_FILE')
    )

    try:
        backends = parse_backends(args.backends)
        registry = create_default_registry(backends)

        health_api = None
        if not args.no_health_api:
            health_api = HealthAPI(registry, host=args.health_host, port=args.health_port)

        logger.info("Starting PolyDB MCP Server in stdio mode...")
        asyncio.run(serve(registry, health_api))

    except KeyboardInterrupt:
        logger.info("Server shutdown requested via keyboard interrupt")
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
