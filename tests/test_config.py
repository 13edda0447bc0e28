"""
Tests for configuration loading: environment, JSON config file and CLI overrides
"""

import json

import pytest

from config import DatabaseConfig, ServerConfig, load_config, read_config_file
from errors import ConfigError


@pytest.fixture
def clean_server_env(monkeypatch):
    for name in ("SCHEMA_TO_SCAN", "MCP_TRANSPORT", "HTTP_HOST", "HTTP_PORT", "TOOL_LIFECYCLE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_config(tmp_path):
    def _write(content):
        path = tmp_path / "config.json"
        path.write_text(content if isinstance(content, str) else json.dumps(content), encoding="utf-8")
        return str(path)
    return _write


class TestServerConfig:

    def test_defaults(self, clean_server_env):
        config = ServerConfig.from_environment()

        assert config.schema_to_scan == "mcp_tools"
        assert config.transport == "stdio"
        assert config.http_port == 3123
        assert config.lifecycle == "persistent"

    def test_environment(self, clean_server_env, monkeypatch):
        monkeypatch.setenv("SCHEMA_TO_SCAN", "api")
        monkeypatch.setenv("MCP_TRANSPORT", "HTTP")
        monkeypatch.setenv("HTTP_PORT", "8080")
        monkeypatch.setenv("TOOL_LIFECYCLE", "per_call")

        config = ServerConfig.from_environment()

        assert (config.schema_to_scan, config.transport, config.http_port, config.lifecycle) == (
            "api", "http", 8080, "per_call"
        )

    def test_invalid_transport(self):
        with pytest.raises(ValueError, match="Invalid transport"):
            ServerConfig(transport="websocket")

    def test_invalid_lifecycle(self):
        with pytest.raises(ValueError, match="Invalid lifecycle"):
            ServerConfig(lifecycle="sometimes")


class TestDatabaseConfig:

    def test_test_mode_requires_test_database(self, monkeypatch):
        monkeypatch.setenv("DB_NAME", "analytics")

        with pytest.raises(ValueError, match="SAFETY ERROR"):
            DatabaseConfig.from_environment(mode="test")


class TestConfigFile:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            read_config_file(str(tmp_path / "absent.json"))

    def test_invalid_json(self, write_config):
        with pytest.raises(ConfigError, match="Invalid JSON"):
            read_config_file(write_config("{not json"))

    def test_unknown_keys_rejected(self, write_config):
        with pytest.raises(ConfigError, match="supabaseUrl"):
            read_config_file(write_config({"supabaseUrl": "https://example.supabase.co"}))

    def test_invalid_enum_value_named(self, write_config):
        with pytest.raises(ConfigError, match="transport"):
            read_config_file(write_config({"transport": "carrier-pigeon"}))


class TestLoadConfig:

    def test_file_overrides_environment(self, clean_server_env, monkeypatch, write_config):
        monkeypatch.setenv("SCHEMA_TO_SCAN", "from_env")
        path = write_config({"schema_to_scan": "from_file", "database": {"host": "db.internal", "port": 6543}})

        config = load_config(config_path=path)

        assert config.server.schema_to_scan == "from_file"
        assert config.database.host == "db.internal"
        assert config.database.port == 6543

    def test_cli_overrides_file(self, clean_server_env, write_config):
        path = write_config({"transport": "stdio", "http_port": 4000})

        config = load_config(config_path=path, overrides={"transport": "http", "http_port": None})

        assert config.server.transport == "http"
        assert config.server.http_port == 4000

    def test_invalid_override_rejected(self, clean_server_env):
        with pytest.raises(ValueError):
            load_config(overrides={"lifecycle": "never"})
