"""
Infrastructure package for the data-access layer.

Centralizes database connectivity concerns (DSNs, async pool, maintenance
connections). Keep this layer focused on I/O and resource management,
decoupled from query semantics.
"""

from akibeks_data.infrastructure.db_factory import (
    build_dsn,
    get_sync_connection,
    open_async_pool,
)

__all__ = [
    "build_dsn",
    "get_sync_connection",
    "open_async_pool",
]
