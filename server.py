"""
MCP Server Entry Point for the Toolify MCP Server
Exposes the views and functions of one PostgreSQL schema as MCP tools.
Run with: python server.py [--http] [--config config.json]
"""

import asyncio
import logging
import os
import sys
from typing import Any, Optional

from mcp.server.models import InitializationOptions
from mcp.server import NotificationOptions, Server
from mcp.server.stdio import stdio_server
from mcp import types

from config import SERVER_NAME, SERVER_VERSION, AppConfig, load_config
from container import RepositoryContainer
from database import DatabaseConnection
from errors import CatalogUnreachableError, ConfigError, ToolCallError
from handlers import get_handler
from lifecycle import ToolLifecycle, create_lifecycle

__version__ = SERVER_VERSION

# Initialize logging. stdout carries the protocol in stdio mode, so logs go to stderr.
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    stream=sys.stderr,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize server
app = Server(SERVER_NAME)
db: Optional[DatabaseConnection] = None
repos: Optional[RepositoryContainer] = None
lifecycle: Optional[ToolLifecycle] = None


@app.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """List the built-in tools followed by every tool discovered in the scanned schema."""
    registry = await lifecycle.get_registry()
    return [tool.to_mcp_tool() for tool in registry.values()]


@app.call_tool(validate_input=False)
async def handle_call_tool(
    name: str, arguments: dict[str, Any]
) -> list[types.TextContent]:
    """
    Handle tool execution.

    Input validation is done by each tool's argument model rather than the
    SDK. Tool-level errors are raised so the SDK reports them as isError results.
    """
    registry = await lifecycle.get_registry()
    tool = get_handler(registry, name)
    if tool is None:
        raise ToolCallError(f"Unknown tool: {name}")

    result = await tool.invoke(arguments)
    if result.isError:
        raise ToolCallError("\n".join(item.text for item in result.content if item.type == "text"))
    return result.content


async def main(config: AppConfig):
    """Main entry point for MCP server (stdio transport)"""
    global db, repos, lifecycle

    try:
        db = DatabaseConnection(config.database)
        await db.connect()

        repos = RepositoryContainer(db, config.server.schema_to_scan)
        lifecycle = create_lifecycle(config.server, repos)

        logger.info(f"{SERVER_NAME} starting...")
        logger.info(f"Environment: {os.getenv('APP_ENV', 'development')}")
        logger.info(f"Connected to database: {config.database.database} at {config.database.host}")
        logger.info(f"Scanning schema: {config.server.schema_to_scan}")

        await lifecycle.start()

        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=app.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={}
                    )
                )
            )
    except Exception as e:
        logger.error(f"Failed to start MCP server: {e}", exc_info=True)
        raise
    finally:
        if db:
            await db.disconnect()
            logger.info("Database connection closed")


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(description="Toolify MCP Server")
    parser.add_argument('--version', '-v', action='store_true', help='Show version')
    parser.add_argument('--config', '-c', type=str, help='Path to a JSON configuration file')
    parser.add_argument('--http', action='store_true', help='Run in HTTP mode (Streamable HTTP transport)')
    parser.add_argument('--port', type=int, help='Port for HTTP mode (default: 3123)')
    parser.add_argument('--host', type=str, help='Host for HTTP mode (default: 127.0.0.1)')
    parser.add_argument('--schema', type=str, help='Schema whose views and functions become tools (default: mcp_tools)')
    parser.add_argument(
        '--lifecycle', choices=['persistent', 'per_call'],
        help='Discover tools once (persistent) or for every request (per_call)'
    )
    return parser


def cli_overrides(args) -> dict[str, Any]:
    """Server settings given explicitly on the command line"""
    return {
        "transport": "http" if args.http else None,
        "http_host": args.host,
        "http_port": args.port,
        "schema_to_scan": args.schema,
        "lifecycle": args.lifecycle,
    }


def cli_entry(argv=None):
    """Entry point for console script - wraps async main()"""
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"{SERVER_NAME} version {__version__}")
        sys.exit(0)

    try:
        config = load_config(config_path=args.config, overrides=cli_overrides(args))
    except (ConfigError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        if config.server.transport == "http":
            logger.info(
                f"Starting in HTTP mode (Streamable HTTP) on "
                f"{config.server.http_host}:{config.server.http_port}/mcp"
            )
            from transport.http import run_http_server
            run_http_server(config)
        else:
            logger.info("Starting in stdio mode...")
            asyncio.run(main(config))
    except CatalogUnreachableError as e:
        logger.error(f"Tool discovery failed, cannot serve: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception as e:
        logger.error(f"Server terminated: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli_entry()
