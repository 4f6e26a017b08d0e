"""
Pytest configuration for the AKIBEKS data-access layer.

Provides fixtures for:
- Mock-mode settings and isolated in-memory stores
- Database connection management for integration tests
- Schema bootstrap and per-test table cleanup
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import psycopg
import pytest

from akibeks_data.backends.mock import MockStore
from akibeks_data.client import DataAccessLayer
from akibeks_data.config import Settings
from akibeks_data.domain.tables import Table


@pytest.fixture
def mock_settings() -> Settings:
    """
    Settings that never touch a database and start from an empty store.
    """
    return Settings(data_backend="mock", seed_mock_data=False, strict_filters=False)


@pytest.fixture
def store() -> MockStore:
    return MockStore()


@pytest.fixture
def dal(mock_settings: Settings, store: MockStore) -> DataAccessLayer:
    """Facade over an empty, test-owned mock store."""
    return DataAccessLayer(mock_settings, store=store)


@pytest.fixture
def seeded_dal(mock_settings: Settings) -> DataAccessLayer:
    """Facade over the fixture records the site ships with."""
    return DataAccessLayer(mock_settings, store=MockStore.seeded())


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture for integration tests.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "akibeks_test"),
        data_backend="postgres",
        seed_mock_data=False,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the schema from db/init.sql exists (the script is idempotent).
    """
    init_sql_path = Path(__file__).parent.parent / "db" / "init.sql"
    with db_connection.cursor() as cur:
        cur.execute(init_sql_path.read_text(encoding="utf-8"))
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_tables(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Truncate every table before and after each test function.
    """
    names = ", ".join(f"public.{table.sql_name}" for table in Table)

    def _truncate() -> None:
        with db_connection.cursor() as cur:
            cur.execute(f"TRUNCATE TABLE {names} RESTART IDENTITY CASCADE;")
        db_connection.commit()

    _truncate()
    yield
    _truncate()
