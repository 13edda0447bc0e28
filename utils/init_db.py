"""
Database initialization script
Creates the schema whose views and functions are exposed as tools, and grants
a role access to it.

Usage:
    python utils/init_db.py init [--role ROLE]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import load_config
from database import DatabaseConnection, quote_ident

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_init_statements(schema: str, role: str = None) -> list[str]:
    """SQL statements that prepare the scanned schema"""
    statements = [f"CREATE SCHEMA IF NOT EXISTS {quote_ident(schema)}"]
    if role:
        statements.append(f"GRANT USAGE ON SCHEMA {quote_ident(schema)} TO {quote_ident(role)}")
    return statements


async def initialize_schema(db: DatabaseConnection, schema: str, role: str = None):
    """Create the scanned schema (idempotent) and optionally grant USAGE on it"""
    logger.info(f"Initializing schema {schema}...")
    for statement in build_init_statements(schema, role):
        logger.info(f"  {statement}")
        await db.execute(statement)
    logger.info("Schema ready. Views and functions created in it will be exposed as tools.")


async def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Prepare the database for the Toolify MCP Server")
    parser.add_argument('command', choices=['init'], help='init - create the scanned schema')
    parser.add_argument('--role', help='Role to grant USAGE on the schema')
    parser.add_argument('--config', '-c', help='Path to a JSON configuration file')
    args = parser.parse_args(argv)

    try:
        config = load_config(config_path=args.config)
        logger.info(f"Connecting to: {config.database.host}:{config.database.port}/{config.database.database}")
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        logger.info("Make sure you have a .env file or environment variables set.")
        sys.exit(1)

    db = DatabaseConnection(config.database)
    await db.connect()
    try:
        await initialize_schema(db, config.server.schema_to_scan, args.role)
    except Exception as e:
        logger.error(f"Initialization failed: {e}")
        raise
    finally:
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
