"""
JSON-RPC 2.0 validation and utility functions for the MCP HTTP transport.

Handles:
- Request/notification validation
- Error code constants
- Response formatting
- MCP protocol version negotiation
"""

from typing import Any, Optional


# Newest first
SUPPORTED_PROTOCOL_VERSIONS = ["2025-06-18", "2025-03-26", "2024-11-05"]
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]


class JsonRpcError:
    """Standard JSON-RPC 2.0 error codes"""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


def is_valid_jsonrpc(data: Any) -> bool:
    """
    Validate basic JSON-RPC 2.0 structure.

    Args:
        data: Parsed JSON object

    Returns:
        True if valid JSON-RPC request/notification
    """
    if not isinstance(data, dict):
        return False

    if data.get("jsonrpc") != "2.0":
        return False

    if "method" not in data or not isinstance(data["method"], str):
        return False

    return True


def is_notification(data: dict) -> bool:
    """True if the message carries no "id" (no response expected)"""
    return "id" not in data


def create_success_response(request_id: Any, result: Any) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "result": result
    }


def create_error_response(request_id: Any, code: int, message: str, data: Any = None) -> dict:
    """
    Create a JSON-RPC error response.

    Args:
        request_id: ID from original request (can be None)
        code: Error code
        message: Error message
        data: Optional additional error data
    """
    error = {
        "code": code,
        "message": message
    }

    if data is not None:
        error["data"] = data

    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": error
    }


def validate_mcp_protocol_version(version: Optional[str]) -> bool:
    """Validate the MCP-Protocol-Version header value"""
    if not version:
        return False
    return version in SUPPORTED_PROTOCOL_VERSIONS


def negotiate_protocol_version(requested: Optional[str]) -> str:
    """Answer initialize with the client's version when supported, else the latest we speak"""
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return LATEST_PROTOCOL_VERSION
