"""
Pytest configuration for social-seed.

Provides fixtures for:
- In-memory fakes (see tests/fakes.py) so pool and seed behaviour can be
  tested without PostgreSQL
- Settings isolation (the cached Settings instance is reset around each test)
- Database availability checks that skip integration tests when no database
  is reachable
"""

from __future__ import annotations

import os
from typing import Generator

import psycopg
import pytest

from socialseed.config import DEFAULT_DB_ADDR, get_settings
from socialseed.infrastructure.pool import ConnectionPool
from tests.fakes import FakeClock, FakeConnector, FakeDatabase


# --------------------------------------------------------------------------- fixtures


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def connector(fake_db: FakeDatabase) -> FakeConnector:
    return FakeConnector(fake_db)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_pool(connector: FakeConnector) -> Generator[ConnectionPool, None, None]:
    pool = ConnectionPool(connector, max_open=3, max_idle=3, name="test-pool")
    yield pool
    pool.close()


# --------------------------------------------------------------------------- integration


@pytest.fixture(scope="session")
def test_addr() -> str:
    """Database address for integration tests, overridable via TEST_DB_ADDR."""
    return os.getenv("TEST_DB_ADDR", os.getenv("DB_ADDR", DEFAULT_DB_ADDR))


@pytest.fixture(scope="session")
def db_connection_available(test_addr: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_addr, connect_timeout=3) as conn:
            conn.execute("SELECT 1")
        return True
    except psycopg.Error:
        return False


@pytest.fixture
def require_db(db_connection_available: bool) -> None:
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")
