"""
Shared fixtures for adversarial tests.

Provides common infrastructure for the concurrency attack simulations.
Requires PostgreSQL to be running; the suite is skipped otherwise.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from firstslot.adapters.repository.postgres import PostgresUserRepository
from tests.postgres import open_test_pool, reset_database

pytestmark = pytest.mark.adversarial


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresUserRepository:
    """Create repository instance for each test."""
    return PostgresUserRepository(pool)


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean users and reset the slot counter before each test."""
    reset_database(pool)
    yield
