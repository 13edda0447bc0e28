"""
Tests for JSON-RPC helpers
"""

from utils.jsonrpc import (
    LATEST_PROTOCOL_VERSION,
    JsonRpcError,
    create_error_response,
    create_success_response,
    is_notification,
    is_valid_jsonrpc,
    negotiate_protocol_version,
    validate_mcp_protocol_version,
)


class TestValidation:

    def test_valid_request(self):
        assert is_valid_jsonrpc({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})

    def test_wrong_version(self):
        assert not is_valid_jsonrpc({"jsonrpc": "1.0", "id": 1, "method": "tools/list"})

    def test_missing_method(self):
        assert not is_valid_jsonrpc({"jsonrpc": "2.0", "id": 1})

    def test_not_an_object(self):
        assert not is_valid_jsonrpc([{"jsonrpc": "2.0", "method": "ping"}])

    def test_notification(self):
        assert is_notification({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert not is_notification({"jsonrpc": "2.0", "id": 0, "method": "ping"})


class TestResponses:

    def test_success(self):
        assert create_success_response(3, {"tools": []}) == {"jsonrpc": "2.0", "id": 3, "result": {"tools": []}}

    def test_error_without_data(self):
        response = create_error_response(None, JsonRpcError.METHOD_NOT_FOUND, "Method Not Allowed")
        assert response == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32601, "message": "Method Not Allowed"},
        }

    def test_error_with_data(self):
        response = create_error_response(1, JsonRpcError.INVALID_PARAMS, "bad", data={"field": "name"})
        assert response["error"]["data"] == {"field": "name"}


class TestProtocolVersion:

    def test_known_versions(self):
        assert validate_mcp_protocol_version("2024-11-05")
        assert validate_mcp_protocol_version("2025-06-18")

    def test_unknown_version(self):
        assert not validate_mcp_protocol_version("1999-01-01")
        assert not validate_mcp_protocol_version(None)

    def test_negotiation(self):
        assert negotiate_protocol_version("2025-03-26") == "2025-03-26"
        assert negotiate_protocol_version("2030-01-01") == LATEST_PROTOCOL_VERSION
        assert negotiate_protocol_version(None) == LATEST_PROTOCOL_VERSION
