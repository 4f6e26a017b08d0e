"""
Database connection factory utilities for the AKIBEKS data-access layer.

Builds DSNs from settings, opens the async connection pool used by the
PostgreSQL backend, and provides a retrying one-off sync connection for
maintenance tasks (schema bootstrap, data generation).

The facade never goes through the retrying path: a failed probe there must
downgrade to mock mode on the first attempt.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import Connection
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from akibeks_data.config import Settings, get_settings


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings; DATABASE_URL wins when set."""
    settings = settings or get_settings()
    if settings.database_url:
        return settings.database_url
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host or 'localhost'}:{settings.db_port}/{settings.db_name}"
    )


async def open_async_pool(settings: Optional[Settings] = None) -> AsyncConnectionPool:
    """
    Create and open an async pool, waiting until it holds `min_size` connections.

    Raises
    ------
    psycopg_pool.PoolTimeout
        If no connection could be established within DB_CONNECT_TIMEOUT.
    """
    settings = settings or get_settings()
    pool = AsyncConnectionPool(
        conninfo=build_dsn(settings),
        min_size=settings.db_pool_min,
        max_size=max(settings.db_pool_max, settings.db_pool_min),
        kwargs={"row_factory": dict_row, "autocommit": True},
        timeout=settings.db_connect_timeout,
        open=False,
    )
    try:
        await pool.open(wait=True, timeout=settings.db_connect_timeout)
    except BaseException:
        await pool.close()
        raise
    return pool


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors. Meant for maintenance commands, not for request handling.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


__all__ = [
    "build_dsn",
    "get_sync_connection",
    "open_async_pool",
]
