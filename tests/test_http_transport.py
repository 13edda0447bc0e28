"""
Tests for the Streamable HTTP transport routing
Uses FastAPI's TestClient with a lifecycle over fake repositories.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

import transport.http as http_transport
from lifecycle import PerCallLifecycle, PersistentLifecycle


@pytest.fixture
def client(monkeypatch, scenario_catalog, objects):
    repos = SimpleNamespace(catalog=scenario_catalog, objects=objects)
    monkeypatch.setattr(http_transport, "lifecycle", PersistentLifecycle(repos))
    monkeypatch.setattr(http_transport, "db", None)
    return TestClient(http_transport.app)


def rpc(method, params=None, request_id=1):
    message = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


class TestMcpEndpoint:

    def test_initialize(self, client):
        response = client.post("/mcp", json=rpc("initialize", {"protocolVersion": "2024-11-05"}))

        body = response.json()
        assert response.status_code == 200
        assert body["result"]["protocolVersion"] == "2024-11-05"
        assert body["result"]["serverInfo"]["name"] == "toolify-mcp-server"
        assert "tools" in body["result"]["capabilities"]

    def test_ping(self, client):
        assert client.post("/mcp", json=rpc("ping")).json()["result"] == {}

    def test_tools_list(self, client):
        body = client.post("/mcp", json=rpc("tools/list")).json()

        tools = {tool["name"]: tool for tool in body["result"]["tools"]}
        assert list(tools) == ["getInfo", "activeUserProfiles", "addNoteToUser"]
        assert tools["addNoteToUser"]["inputSchema"]["required"] == ["pUserId", "pNoteText"]
        assert tools["activeUserProfiles"]["description"] == "Lists all active user profiles."

    def test_tools_call_success(self, client, objects):
        objects.call.return_value = {"note_id": 1}

        body = client.post("/mcp", json=rpc("tools/call", {
            "name": "addNoteToUser",
            "arguments": {"pUserId": "a3bb189e-8bf9-3888-9912-ace4e6543002", "pNoteText": "hi"},
        })).json()

        assert body["result"]["isError"] is False
        assert body["result"]["content"][0]["type"] == "text"
        assert '"note_id": 1' in body["result"]["content"][0]["text"]

    def test_tools_call_validation_error_is_tool_result(self, client, objects):
        body = client.post("/mcp", json=rpc("tools/call", {"name": "addNoteToUser", "arguments": {}})).json()

        assert "error" not in body
        assert body["result"]["isError"] is True
        objects.call.assert_not_awaited()

    def test_unknown_tool(self, client):
        body = client.post("/mcp", json=rpc("tools/call", {"name": "nope", "arguments": {}})).json()

        assert body["error"]["code"] == -32602
        assert "Unknown tool: nope" in body["error"]["message"]

    def test_missing_tool_name(self, client):
        body = client.post("/mcp", json=rpc("tools/call", {"arguments": {}})).json()
        assert body["error"]["code"] == -32602

    def test_unknown_method(self, client):
        body = client.post("/mcp", json=rpc("resources/list")).json()
        assert body["error"]["code"] == -32601

    def test_notification_accepted(self, client):
        response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert response.status_code == 202

    def test_invalid_json(self, client):
        response = client.post("/mcp", content=b"{oops", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32700

    def test_invalid_jsonrpc(self, client):
        response = client.post("/mcp", json={"id": 1, "method": "ping"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32600

    def test_unsupported_protocol_header(self, client):
        response = client.post("/mcp", json=rpc("ping"), headers={"MCP-Protocol-Version": "1999-01-01"})
        assert response.status_code == 400

    def test_discovery_failure_is_internal_error(self, monkeypatch, make_catalog, objects):
        catalog = make_catalog({})
        catalog.list_objects = AsyncMock(side_effect=OSError("down"))
        repos = SimpleNamespace(catalog=catalog, objects=objects)
        monkeypatch.setattr(http_transport, "lifecycle", PerCallLifecycle(repos))

        body = TestClient(http_transport.app).post("/mcp", json=rpc("tools/list")).json()

        assert body["error"]["code"] == -32603


class TestPerCallOverHttp:

    def test_each_request_rediscovers(self, monkeypatch, scenario_catalog, objects):
        repos = SimpleNamespace(catalog=scenario_catalog, objects=objects)
        monkeypatch.setattr(http_transport, "lifecycle", PerCallLifecycle(repos))
        client = TestClient(http_transport.app)

        client.post("/mcp", json=rpc("tools/list"))
        client.post("/mcp", json=rpc("tools/call", {"name": "getInfo", "arguments": {}}))

        assert scenario_catalog.list_objects.await_count == 2


class TestOtherRoutes:

    @pytest.mark.parametrize("method", ["get", "delete"])
    def test_get_and_delete_not_allowed(self, client, method):
        response = getattr(client, method)("/mcp")

        assert response.status_code == 405
        assert response.json() == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32601, "message": "Method Not Allowed"},
        }

    def test_healthz_without_database(self, client):
        response = client.get("/healthz")
        assert response.status_code == 500
        assert response.json()["status"] == "unhealthy"

    def test_healthz_connected(self, client, monkeypatch):
        fake_db = SimpleNamespace(
            pool=object(),
            check_connection=AsyncMock(return_value=True),
            get_pool_stats=AsyncMock(return_value={"status": "connected", "size": 2, "freesize": 2}),
        )
        monkeypatch.setattr(http_transport, "db", fake_db)

        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["lifecycle"] == "persistent"
