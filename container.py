"""
Repository Container - Centralized dependency injection container

This module provides a single source of truth for repository initialization,
ensuring consistency across all transport modes (stdio, HTTP, etc.).
"""

from config import DEFAULT_SCHEMA
from repositories import CatalogRepository, ObjectRepository


class RepositoryContainer:
    """
    Container for repository instances with attribute access.

    Used by both stdio (server.py) and HTTP (transport/http.py) modes.
    """
    def __init__(self, db, schema: str = DEFAULT_SCHEMA):
        self.db = db
        self.schema = schema
        self.catalog = CatalogRepository(db, schema)
        self.objects = ObjectRepository(db, schema)
