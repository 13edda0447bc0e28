#!/usr/bin/env python3
"""
Show the effective configuration based on APP_ENV and an optional config file
Useful for verifying configuration before running the server
"""

import argparse
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import AppConfig, get_environment_mode, load_config


def mask_password(password: str) -> str:
    return "****" if password else "(empty)"


def format_config(config: AppConfig) -> str:
    """Human-readable summary with the password masked"""
    database = config.database
    server = config.server
    lines = [
        "Database:",
        f"  Host:     {database.host}",
        f"  Port:     {database.port}",
        f"  Database: {database.database}",
        f"  User:     {database.user}",
        f"  Password: {mask_password(database.password)}",
        f"  SSL Mode: {database.ssl_mode}",
        f"  Min Pool: {database.min_pool_size}",
        f"  Max Pool: {database.max_pool_size}",
        "",
        "Server:",
        f"  Schema:    {server.schema_to_scan}",
        f"  Transport: {server.transport}",
        f"  Lifecycle: {server.lifecycle}",
    ]
    if server.transport == "http":
        lines.append(f"  Endpoint:  http://{server.http_host}:{server.http_port}/mcp")
    return "\n".join(lines)


def main(argv=None):
    """Display current configuration"""
    parser = argparse.ArgumentParser(description="Show effective Toolify MCP Server configuration")
    parser.add_argument('--config', '-c', help='Path to a JSON configuration file')
    args = parser.parse_args(argv)

    print("=" * 70)
    print("  Toolify MCP Server Configuration")
    print("=" * 70)
    print()
    print(f"Environment Mode: {get_environment_mode().upper()}")
    print(f"APP_ENV variable: {os.getenv('APP_ENV', '(not set)')}")
    print()

    config = load_config(config_path=args.config)
    print(format_config(config))
    print()


if __name__ == "__main__":
    main()
