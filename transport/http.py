"""
Streamable HTTP transport for MCP (Model Context Protocol).

- Single /mcp endpoint for all JSON-RPC communication
- POST /mcp: accepts JSON-RPC requests, responds with JSON
- GET /mcp and DELETE /mcp: 405, no server-initiated stream or sessions
- /healthz: health check endpoint (separate from /mcp)

Tool lookups go through the configured lifecycle, so a per-call lifecycle
rediscovers the schema for every request.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, Response, Header
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.status import (
    HTTP_202_ACCEPTED,
    HTTP_400_BAD_REQUEST,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
import uvicorn

from config import SERVER_NAME, SERVER_VERSION, AppConfig
from container import RepositoryContainer
from database import DatabaseConnection
from handlers import get_handler
from lifecycle import ToolLifecycle, create_lifecycle
from utils.jsonrpc import (
    is_valid_jsonrpc, is_notification,
    create_success_response, create_error_response,
    validate_mcp_protocol_version, negotiate_protocol_version, JsonRpcError
)

logger = logging.getLogger(__name__)


# Global state (initialized at startup)
db: Optional[DatabaseConnection] = None
repos: Optional[RepositoryContainer] = None
lifecycle: Optional[ToolLifecycle] = None
app = FastAPI(title="Toolify MCP Server - Streamable HTTP")

# Add CORS middleware to handle OPTIONS preflight requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["MCP-Protocol-Version"],
)


def _require_lifecycle() -> ToolLifecycle:
    if lifecycle is None:
        raise RuntimeError("Server components not ready")
    return lifecycle


async def get_tools_list() -> list[dict[str, Any]]:
    """Advertised tools, serialized for JSON"""
    registry = await _require_lifecycle().get_registry()
    return [
        tool.to_mcp_tool().model_dump(mode="json", by_alias=True, exclude_none=True)
        for tool in registry.values()
    ]


async def call_tool_handler(name: str, arguments: Any) -> dict[str, Any]:
    """Invoke a tool and return its CallToolResult as a dict"""
    registry = await _require_lifecycle().get_registry()
    tool = get_handler(registry, name)
    if tool is None:
        raise LookupError(f"Unknown tool: {name}")

    result = await tool.invoke(arguments)
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)


async def handle_mcp_request(request_data: dict) -> Optional[dict]:
    """
    Handle a single MCP JSON-RPC request.
    Routes to appropriate handler based on method.

    Returns JSON-RPC response dict, or None for notifications.
    """
    method = request_data.get("method")
    params = request_data.get("params") or {}
    request_id = request_data.get("id")

    try:
        if method == "initialize":
            result = {
                "protocolVersion": negotiate_protocol_version(params.get("protocolVersion")),
                "capabilities": {
                    "tools": {}
                },
                "serverInfo": {
                    "name": SERVER_NAME,
                    "version": SERVER_VERSION
                }
            }
            return create_success_response(request_id, result)

        elif method == "ping":
            return create_success_response(request_id, {})

        elif method == "tools/list":
            tools = await get_tools_list()
            return create_success_response(request_id, {"tools": tools})

        elif method == "tools/call":
            tool_name = params.get("name")
            tool_args = params.get("arguments") or {}

            if not tool_name:
                return create_error_response(
                    request_id, JsonRpcError.INVALID_PARAMS, "Missing tool name"
                )

            try:
                result = await call_tool_handler(tool_name, tool_args)
            except LookupError as e:
                return create_error_response(request_id, JsonRpcError.INVALID_PARAMS, str(e))

            return create_success_response(request_id, result)

        elif method.startswith("notifications/"):
            # Client notifications (initialized, cancelled, ...) need no response
            return None

        else:
            return create_error_response(
                request_id, JsonRpcError.METHOD_NOT_FOUND, f"Unknown method: {method}"
            )

    except Exception as e:
        logger.error(f"Error handling method {method}: {e}", exc_info=True)
        return create_error_response(
            request_id, JsonRpcError.INTERNAL_ERROR, f"Internal server error: {e}"
        )


@app.post("/mcp")
async def mcp_post_endpoint(
    request: Request,
    mcp_protocol_version: Optional[str] = Header(None, alias="MCP-Protocol-Version")
):
    """
    POST /mcp - Main MCP endpoint for JSON-RPC requests.

    Returns:
    - 202 Accepted (for notifications - no response body)
    - 200 OK with Content-Type: application/json
    - 400 for unparseable or non JSON-RPC bodies and unsupported protocol versions
    """
    if mcp_protocol_version and not validate_mcp_protocol_version(mcp_protocol_version):
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                None, JsonRpcError.INVALID_REQUEST,
                f"Unsupported MCP protocol version: {mcp_protocol_version}"
            )
        )

    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                None, JsonRpcError.PARSE_ERROR, f"Invalid JSON: {str(e)}"
            )
        )

    if not is_valid_jsonrpc(body):
        request_id = body.get("id") if isinstance(body, dict) else None
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                request_id, JsonRpcError.INVALID_REQUEST, "Invalid JSON-RPC request"
            )
        )

    logger.info(f"Received POST /mcp request (ID: {body.get('id')}, method: {body['method']})")

    if is_notification(body):
        # Handle notification asynchronously, return 202 immediately
        asyncio.create_task(handle_mcp_request(body))
        return Response(status_code=HTTP_202_ACCEPTED)

    response = await handle_mcp_request(body)

    if response is None:
        return Response(status_code=HTTP_202_ACCEPTED)

    return JSONResponse(content=response)


def _method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_405_METHOD_NOT_ALLOWED,
        content=create_error_response(None, JsonRpcError.METHOD_NOT_FOUND, "Method Not Allowed")
    )


@app.get("/mcp")
async def mcp_get_endpoint():
    """GET /mcp - no server-initiated SSE stream is offered"""
    logger.info("Received GET /mcp request (Method Not Allowed)")
    return _method_not_allowed()


@app.delete("/mcp")
async def mcp_delete_endpoint():
    """DELETE /mcp - the transport is stateless, there are no sessions to end"""
    logger.info("Received DELETE /mcp request (Method Not Allowed)")
    return _method_not_allowed()


@app.get("/healthz")
async def health_check():
    """Health check endpoint (separate from /mcp)"""
    if db is None or db.pool is None:
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "unhealthy", "error": "Database not initialized"}
        )

    if not await db.check_connection():
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "unhealthy", "error": "Database connection check failed"}
        )

    return JSONResponse(content={
        "status": "healthy",
        "database": "connected",
        "pool": await db.get_pool_stats(),
        "lifecycle": lifecycle.name if lifecycle else None,
    })


async def initialize_server(config: AppConfig):
    """Initialize database, repositories and the tool lifecycle"""
    global db, repos, lifecycle

    db = DatabaseConnection(config.database)
    await db.connect()
    repos = RepositoryContainer(db, config.server.schema_to_scan)
    lifecycle = create_lifecycle(config.server, repos)
    await lifecycle.start()

    logger.info(f"Connected to database: {config.database.database} at {config.database.host}")


async def shutdown_server():
    """Cleanup on shutdown"""
    global db, repos, lifecycle
    if db:
        await db.disconnect()
        logger.info("Database connection closed")
    db = None
    repos = None
    lifecycle = None


async def serve_http(config: AppConfig):
    """
    Initialize, then serve until stopped.

    Initialization happens before uvicorn starts so that a fatal discovery
    failure surfaces to the caller instead of inside uvicorn's lifespan.
    """
    host = config.server.http_host
    port = config.server.http_port
    await initialize_server(config)
    try:
        logger.info(f"{SERVER_NAME} (HTTP) starting on http://{host}:{port}/mcp")
        server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level="info"))
        await server.serve()
    finally:
        await shutdown_server()


def run_http_server(config: AppConfig):
    """
    Run the MCP server with Streamable HTTP transport.

    Args:
        config: Effective application configuration (host/port from config.server)
    """
    asyncio.run(serve_http(config))
