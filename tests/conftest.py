"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- Stub connection and repository fixtures
- An in-memory SQLite connection for integration tests
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# procmap.core.config builds its global Settings at import time
os.environ["PROCMAP_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["PROCMAP_BATCH_FAILURE_POLICY"] = "continue"
os.environ["PROCMAP_LOG_JSON"] = "false"

# Make tests/fakes.py importable as "fakes"
tests_dir = Path(__file__).parent
sys.path.insert(0, str(tests_dir))


@pytest.fixture
def test_settings():
    """Settings isolated from the environment's .env file."""
    from procmap.core.config import Settings

    return Settings(_env_file=None)


@pytest.fixture
def stub_connection():
    """StubConnection with no rows and no failures."""
    from fakes import StubConnection

    return StubConnection()


@pytest.fixture
def repository(stub_connection, test_settings):
    """ProcedureRepository with fresh caches over the stub connection."""
    from procmap.repositories.procedure import ProcedureRepository

    return ProcedureRepository(stub_connection, settings=test_settings)


@pytest.fixture
def sqlite_connection():
    """
    SqlAlchemyConnection on a private in-memory SQLite database.

    Creates a users table before the test and disposes the engine after.
    """
    from procmap.core.config import Settings
    from procmap.core.database import SqlAlchemyConnection

    conn = SqlAlchemyConnection.from_settings(
        Settings(_env_file=None, database_url="sqlite:///:memory:")
    )
    conn.execute(
        "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT UNIQUE, email TEXT, age INTEGER)",
        [],
    )

    yield conn

    conn.dispose()
