"""
Tests for the stdio server handlers and the command line entry point
"""

from pathlib import Path
from types import SimpleNamespace

import pytest

import server
from errors import CatalogUnreachableError, ConfigError, ToolCallError
from lifecycle import PersistentLifecycle


@pytest.fixture
def stdio_lifecycle(monkeypatch, scenario_catalog, objects):
    lifecycle = PersistentLifecycle(SimpleNamespace(catalog=scenario_catalog, objects=objects))
    monkeypatch.setattr(server, "lifecycle", lifecycle)
    return lifecycle


class TestStdioHandlers:

    @pytest.mark.asyncio
    async def test_list_tools(self, stdio_lifecycle):
        tools = await server.handle_list_tools()

        assert [tool.name for tool in tools] == ["getInfo", "activeUserProfiles", "addNoteToUser"]

    @pytest.mark.asyncio
    async def test_call_tool_success(self, stdio_lifecycle):
        content = await server.handle_call_tool("getInfo", {"infoType": "version"})

        assert content[0].text == f"Server Version: {server.__version__} (toolify-mcp-server)"

    @pytest.mark.asyncio
    async def test_tool_error_raised_for_sdk(self, stdio_lifecycle, objects):
        with pytest.raises(ToolCallError, match="Invalid arguments for addNoteToUser"):
            await server.handle_call_tool("addNoteToUser", {})

        objects.call.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_tool(self, stdio_lifecycle):
        with pytest.raises(ToolCallError, match="Unknown tool: nope"):
            await server.handle_call_tool("nope", {})


class TestCliEntry:

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            server.cli_entry(["--version"])

        assert exc_info.value.code == 0
        assert "toolify-mcp-server version" in capsys.readouterr().out

    def test_overrides_from_flags(self):
        args = server.build_parser().parse_args(["--http", "--port", "9000", "--schema", "api", "--lifecycle", "per_call"])

        assert server.cli_overrides(args) == {
            "transport": "http",
            "http_host": None,
            "http_port": 9000,
            "schema_to_scan": "api",
            "lifecycle": "per_call",
        }

    def test_no_flags_override_nothing(self):
        args = server.build_parser().parse_args([])
        assert all(value is None for value in server.cli_overrides(args).values())

    def test_config_error_exits_1(self, monkeypatch):
        def broken(**kwargs):
            raise ConfigError("Configuration file not found at /nowhere.json")

        monkeypatch.setattr(server, "load_config", broken)

        with pytest.raises(SystemExit) as exc_info:
            server.cli_entry(["--config", "/nowhere.json"])

        assert exc_info.value.code == 1

    def test_fatal_discovery_exits_1(self, monkeypatch):
        async def failing_main(config):
            raise CatalogUnreachableError("Failed to list catalog objects: connection refused")

        monkeypatch.setattr(server, "main", failing_main)

        with pytest.raises(SystemExit) as exc_info:
            server.cli_entry([])

        assert exc_info.value.code == 1


class TestRequirements:

    def test_mcp_pinned_below_next_major(self):
        """Tool and result field names used by the handlers are those of mcp 1.x"""
        requirements = (Path(__file__).parent.parent / "requirements.txt").read_text(encoding="utf-8")
        mcp_line = next(line for line in requirements.splitlines() if line.startswith("mcp"))

        assert mcp_line == "mcp>=1.10.0,<2"
