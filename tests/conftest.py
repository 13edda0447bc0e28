"""
Pytest configuration and shared fixtures for Toolify MCP Server tests

APPROACH: Fake the repositories, not the database
- The catalog client and the object repository are AsyncMocks
- Catalog payloads are built by CatalogPayloadFactory in the exact shape the
  catalog queries return
- No PostgreSQL instance is needed to run the suite
"""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """
    Pytest hook called before test collection.
    """
    os.environ['PYTEST_RUNNING'] = '1'
    os.environ['APP_ENV'] = 'test'
    # DatabaseConfig refuses test mode unless the database name contains 'test'
    os.environ['DB_NAME'] = 'toolify_test'


class CatalogPayloadFactory:
    """Builds catalog payloads shaped like the output of the catalog queries"""

    @staticmethod
    def listed(name, kind, comment=None):
        return {"object_name": name, "object_type": kind, "comment": comment}

    @staticmethod
    def column(name, data_type, nullable=False, comment=None):
        return {"column_name": name, "data_type": data_type, "is_nullable": nullable, "comment": comment}

    @staticmethod
    def parameter(name, data_type, position):
        return {"parameter_name": name, "data_type": data_type, "position": position}

    @staticmethod
    def view(name, columns, comment=None):
        return {"object_name": name, "object_type": "VIEW", "comment": comment, "columns": columns}

    @staticmethod
    def function(name, parameters, return_type, returns_set=False, comment=None):
        return {
            "object_name": name,
            "object_type": "FUNCTION",
            "comment": comment,
            "parameters": parameters,
            "return_type": return_type,
            "returns_set": returns_set,
        }

    @classmethod
    def active_user_profiles(cls):
        """VIEW from the end-to-end scenario with a nullable, commented timestamp column"""
        return cls.view(
            "active_user_profiles",
            [
                cls.column("id", "uuid"),
                cls.column("username", "text", comment="The unique username."),
                cls.column("email", "text"),
                cls.column("last_login", "timestamptz", nullable=True, comment="Timestamp of the last login."),
            ],
            comment="Lists all active user profiles.",
        )

    @classmethod
    def add_note_to_user(cls):
        """FUNCTION from the end-to-end scenario returning jsonb"""
        return cls.function(
            "add_note_to_user",
            [cls.parameter("p_user_id", "uuid", 1), cls.parameter("p_note_text", "text", 2)],
            "jsonb",
            comment="Adds a note to a user.",
        )


class FakeCatalog:
    """
    Catalog client backed by a dict of detail payloads.

    list_objects and fetch_details are AsyncMocks so tests can assert on calls
    or swap in side effects.
    """

    def __init__(self, details=None, listing=None):
        self.details = dict(details or {})
        if listing is None:
            listing = [
                CatalogPayloadFactory.listed(name, payload["object_type"], payload.get("comment"))
                for name, payload in self.details.items()
            ]
        self.list_objects = AsyncMock(return_value=listing)
        self.fetch_details = AsyncMock(side_effect=self._fetch)

    async def _fetch(self, name, kind):
        return self.details.get(name)


@pytest.fixture
def payloads():
    return CatalogPayloadFactory


@pytest.fixture
def make_catalog():
    """Factory fixture: make_catalog({name: payload}, listing=None) -> FakeCatalog"""
    return FakeCatalog


@pytest.fixture
def scenario_catalog():
    """Catalog holding the VIEW and FUNCTION end-to-end scenarios"""
    return FakeCatalog({
        "active_user_profiles": CatalogPayloadFactory.active_user_profiles(),
        "add_note_to_user": CatalogPayloadFactory.add_note_to_user(),
    })


@pytest.fixture
def objects():
    """Object repository fake: read_all / call"""
    repo = AsyncMock()
    repo.read_all = AsyncMock(return_value=[])
    repo.call = AsyncMock(return_value=None)
    return repo
