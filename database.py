"""
Database connection management and utilities
Async PostgreSQL operations using asyncpg
"""

import asyncpg
import json
import logging
from typing import Optional, List, Dict, Any
from contextlib import asynccontextmanager

from config import DatabaseConfig

logger = logging.getLogger(__name__)


def quote_ident(identifier: str) -> str:
    """Quote a PostgreSQL identifier (schema, view, function or parameter name)."""
    return '"' + identifier.replace('"', '""') + '"'


async def _init_connection(conn):
    """Decode json/jsonb into Python structures instead of raw text."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class DatabaseConnection:
    """
    Manages PostgreSQL connection pool and provides database operations
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        """Initialize connection pool"""
        if self.pool is not None:
            logger.warning("Connection pool already initialized")
            return

        try:
            # asyncpg expects: True (require SSL), False (disable SSL), or 'prefer'
            if self.config.ssl_mode == 'require':
                ssl_setting = True
            elif self.config.ssl_mode == 'disable':
                ssl_setting = False
            else:
                ssl_setting = 'prefer'

            self.pool = await asyncpg.create_pool(
                host=self.config.host,
                port=self.config.port,
                database=self.config.database,
                user=self.config.user,
                password=self.config.password,
                min_size=self.config.min_pool_size,
                max_size=self.config.max_pool_size,
                command_timeout=self.config.command_timeout,
                ssl=ssl_setting,
                init=_init_connection,
            )

            logger.info(f"Connected to PostgreSQL at {self.config.host}:{self.config.port}")

        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    async def disconnect(self):
        """Close connection pool"""
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            logger.info("Database connection pool closed")

    @asynccontextmanager
    async def acquire(self):
        """
        Acquire a connection from the pool.

        Usage:
            async with db.acquire() as conn:
                result = await conn.fetch("SELECT * FROM mcp_tools.active_users")

        The connection goes back to the pool even if an exception occurs.
        """
        if self.pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self.pool.acquire() as connection:
            yield connection

    async def execute(self, query: str, *args, timeout: Optional[float] = None) -> str:
        """Execute a query without returning results"""
        async with self.acquire() as conn:
            return await conn.execute(query, *args, timeout=timeout)

    async def fetch(
        self,
        query: str,
        *args,
        timeout: Optional[float] = None
    ) -> List[asyncpg.Record]:
        """
        Fetch multiple rows

        Args:
            query: SQL query
            *args: Query parameters
            timeout: Query timeout in seconds

        Returns:
            List of records
        """
        async with self.acquire() as conn:
            return await conn.fetch(query, *args, timeout=timeout)

    async def fetchval(
        self,
        query: str,
        *args,
        column: int = 0,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Fetch a single value

        Args:
            query: SQL query
            *args: Query parameters
            column: Column index to return
            timeout: Query timeout in seconds

        Returns:
            Single value
        """
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, column=column, timeout=timeout)

    async def check_connection(self) -> bool:
        """
        Check if database connection is healthy

        Returns:
            True if connection is healthy
        """
        try:
            result = await self.fetchval("SELECT 1")
            return result == 1
        except Exception as e:
            logger.error(f"Connection check failed: {e}")
            return False

    async def get_pool_stats(self) -> Dict[str, Any]:
        """Connection pool statistics for the health endpoint"""
        if self.pool is None:
            return {
                'status': 'disconnected',
                'size': 0,
                'freesize': 0
            }

        return {
            'status': 'connected',
            'size': self.pool.get_size(),
            'freesize': self.pool.get_idle_size(),
            'min_size': self.config.min_pool_size,
            'max_size': self.config.max_pool_size
        }
