"""
Configuration for the Toolify MCP Server
Database connection settings plus server settings (schema, transport, lifecycle)
Environment-aware configuration based on APP_ENV, optional JSON config file
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from errors import ConfigError

SERVER_NAME = "toolify-mcp-server"
SERVER_VERSION = "1.0.0"

# Environment modes
EnvironmentMode = Literal["development", "test", "production"]

TRANSPORTS = ("stdio", "http")
LIFECYCLES = ("persistent", "per_call")

DEFAULT_SCHEMA = "mcp_tools"
DEFAULT_HTTP_PORT = 3123


def load_app_environment(mode: Optional[str] = None) -> str:
    """
    Load environment variables from the appropriate .env file.

    Priority:
    1. Explicit 'mode' argument
    2. APP_ENV environment variable
    3. Default to 'development'

    Loads .env.{mode} if it exists. Variables already present in the host
    environment take precedence over file values.
    """
    if not mode:
        mode = os.getenv('APP_ENV', 'development')

    env_file = Path(__file__).parent / f'.env.{mode}'
    if env_file.exists():
        load_dotenv(env_file, override=False)

    return mode


@dataclass
class DatabaseConfig:
    """PostgreSQL database configuration"""

    host: str
    port: int
    database: str
    user: str
    password: str

    # Connection pool settings
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: Optional[float] = None

    ssl_mode: str = "prefer"

    @classmethod
    def from_environment(cls, mode: Optional[EnvironmentMode] = None) -> 'DatabaseConfig':
        """
        Load configuration from environment variables

        Environment variables:
        - APP_ENV: Environment mode (development, test, production)
        - DB_HOST: Database host (default: localhost)
        - DB_PORT: Database port (default: 5432)
        - DB_NAME: Database name (default: postgres)
        - DB_USER: Database user (default: postgres)
        - DB_PASSWORD: Database password
        - DB_SSL_MODE: SSL mode (default: prefer in development, require otherwise)
        - DB_MIN_POOL_SIZE / DB_MAX_POOL_SIZE: Pool bounds
        - DB_COMMAND_TIMEOUT: Per-statement timeout in seconds (default: none)
        """
        mode = load_app_environment(mode)

        timeout = os.getenv('DB_COMMAND_TIMEOUT')
        config = cls(
            host=os.getenv('DB_HOST', 'localhost'),
            port=int(os.getenv('DB_PORT', '5432')),
            database=os.getenv('DB_NAME', 'postgres'),
            user=os.getenv('DB_USER', 'postgres'),
            password=os.getenv('DB_PASSWORD', ''),
            ssl_mode=os.getenv('DB_SSL_MODE', 'prefer' if mode in ('development', 'test') else 'require'),
            min_pool_size=int(os.getenv('DB_MIN_POOL_SIZE', '2')),
            max_pool_size=int(os.getenv('DB_MAX_POOL_SIZE', '10')),
            command_timeout=float(timeout) if timeout else None,
        )

        config.validate_safety(mode)
        return config

    def validate_safety(self, mode: str):
        """Ensure configuration is safe for the requested mode"""
        if mode == 'test':
            if 'test' not in self.database:
                raise ValueError(
                    f"SAFETY ERROR: Test mode requested but database is '{self.database}'. "
                    "Test database must contain 'test'."
                )
            if 'prod' in self.database:
                raise ValueError(
                    f"SAFETY ERROR: Test mode requested but database '{self.database}' appears to be production."
                )


@dataclass
class ServerConfig:
    """What to scan and how to serve it"""

    schema_to_scan: str = DEFAULT_SCHEMA
    transport: str = "stdio"
    http_host: str = "127.0.0.1"
    http_port: int = DEFAULT_HTTP_PORT
    lifecycle: str = "persistent"

    def __post_init__(self):
        if self.transport not in TRANSPORTS:
            raise ValueError(f"Invalid transport '{self.transport}'. Must be one of: {', '.join(TRANSPORTS)}")
        if self.lifecycle not in LIFECYCLES:
            raise ValueError(f"Invalid lifecycle '{self.lifecycle}'. Must be one of: {', '.join(LIFECYCLES)}")
        if not self.schema_to_scan:
            raise ValueError("Schema to scan cannot be empty")

    @classmethod
    def from_environment(cls) -> 'ServerConfig':
        """
        Environment variables:
        - SCHEMA_TO_SCAN: Schema whose views/functions become tools (default: mcp_tools)
        - MCP_TRANSPORT: stdio or http (default: stdio)
        - HTTP_HOST / HTTP_PORT: Bind address for http transport
        - TOOL_LIFECYCLE: persistent (discover once) or per_call (discover per request)
        """
        return cls(
            schema_to_scan=os.getenv('SCHEMA_TO_SCAN', DEFAULT_SCHEMA),
            transport=os.getenv('MCP_TRANSPORT', 'stdio').lower(),
            http_host=os.getenv('HTTP_HOST', '127.0.0.1'),
            http_port=int(os.getenv('HTTP_PORT', str(DEFAULT_HTTP_PORT))),
            lifecycle=os.getenv('TOOL_LIFECYCLE', 'persistent').lower(),
        )


@dataclass
class AppConfig:
    """Combined configuration handed to the server entry points"""

    database: DatabaseConfig
    server: ServerConfig = field(default_factory=ServerConfig)


# ============================================================================
# JSON configuration file
# ============================================================================

class DatabaseFileSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: Optional[str] = None
    port: Optional[int] = Field(default=None, gt=0)
    database: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    ssl_mode: Optional[str] = None
    min_pool_size: Optional[int] = Field(default=None, gt=0)
    max_pool_size: Optional[int] = Field(default=None, gt=0)
    command_timeout: Optional[float] = Field(default=None, gt=0)


class ConfigFile(BaseModel):
    """Shape of the --config JSON file. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    database: DatabaseFileSection = Field(default_factory=DatabaseFileSection)
    schema_to_scan: Optional[str] = Field(default=None, min_length=1)
    transport: Optional[Literal["stdio", "http"]] = None
    http_host: Optional[str] = None
    http_port: Optional[int] = Field(default=None, gt=0)
    lifecycle: Optional[Literal["persistent", "per_call"]] = None


def _format_validation_error(error: ValidationError) -> str:
    issues = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue["loc"]) or "(root)"
        issues.append(f"{location} - {issue['msg']}")
    return "; ".join(issues)


def read_config_file(config_path: str) -> ConfigFile:
    """Read and validate a JSON configuration file."""
    absolute_path = Path(config_path).resolve()

    try:
        raw = json.loads(absolute_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found at {absolute_path}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON format in configuration file {absolute_path}: {e}")

    try:
        return ConfigFile.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(
            f"Configuration validation failed: {_format_validation_error(e)} in {absolute_path}"
        )


def _overlay(target: Any, values: dict[str, Any]) -> None:
    for key, value in values.items():
        if value is not None:
            setattr(target, key, value)


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[dict[str, Any]] = None,
    mode: Optional[EnvironmentMode] = None,
) -> AppConfig:
    """
    Build the effective configuration.

    Precedence: overrides (CLI flags) > JSON config file > environment > defaults.
    """
    database = DatabaseConfig.from_environment(mode)
    server = ServerConfig.from_environment()

    if config_path:
        file_config = read_config_file(config_path)
        _overlay(database, file_config.database.model_dump())
        _overlay(server, file_config.model_dump(exclude={"database"}))

    if overrides:
        _overlay(server, overrides)

    # Re-run validation after overlaying values
    server.__post_init__()
    return AppConfig(database=database, server=server)


def get_environment_mode() -> EnvironmentMode:
    """Get current environment mode from APP_ENV variable"""
    mode = os.getenv('APP_ENV', 'development').lower()
    if mode not in ('development', 'test', 'production'):
        mode = 'development'
    return mode  # type: ignore


# Example .env file content
ENV_TEMPLATE = """
# Application Environment
# Options: development, test, production
APP_ENV=development

# Database Configuration
DB_HOST=localhost
DB_PORT=5432
DB_NAME=postgres
DB_USER=postgres
DB_PASSWORD=your_password_here
DB_SSL_MODE=prefer

# Connection Pool Settings
DB_MIN_POOL_SIZE=2
DB_MAX_POOL_SIZE=10

# Server
SCHEMA_TO_SCAN=mcp_tools
MCP_TRANSPORT=stdio
HTTP_HOST=127.0.0.1
HTTP_PORT=3123
TOOL_LIFECYCLE=persistent
"""


def create_env_file(filepath: str = ".env.development"):
    """Create a template .env file"""
    with open(filepath, 'w') as f:
        f.write(ENV_TEMPLATE)
    print(f"Created template .env file at {filepath}")
