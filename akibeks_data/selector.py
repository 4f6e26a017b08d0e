"""
Backend selection: decide once per `DataAccessLayer` whether a real database
is usable, and cache the decision.

State machine:
    UNINITIALIZED -> INITIALIZING -> SERVER_BACKED | MOCK_BACKED

The probe runs lazily on first use. Any failure lands permanently in
MOCK_BACKED; there is no retry or reconnect for the life of the instance.
"""

from __future__ import annotations

import asyncio
import enum
from typing import Awaitable, Callable, Optional

from akibeks_data.backends.base import Backend
from akibeks_data.backends.mock import MockBackend, MockStore
from akibeks_data.config import Settings
from akibeks_data.utils.logging import get_logger

log = get_logger(__name__)

BackendFactory = Callable[[Settings], Awaitable[Backend]]


class BackendState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    SERVER_BACKED = "server_backed"
    MOCK_BACKED = "mock_backed"


async def connect_postgres(settings: Settings) -> Backend:
    """Open the pool and prove it works with one round trip."""
    # Deferred: psycopg_pool is only needed once a probe actually runs.
    from akibeks_data.backends.postgres import PostgresBackend
    from akibeks_data.infrastructure.db_factory import open_async_pool

    backend = PostgresBackend(await open_async_pool(settings))
    healthy, error = await backend.ping()
    if not healthy:
        await backend.close()
        raise ConnectionError(error or "database probe failed")
    return backend


class BackendSelector:
    """
    Resolves the single backend a `DataAccessLayer` talks to.

    Parameters
    ----------
    settings : Settings
        `data_backend` decides whether a probe is attempted at all.
    store : MockStore
        Store used if (or once) the instance runs in mock mode.
    backend_factory : callable, optional
        Coroutine building the real backend; defaults to `connect_postgres`.
    """

    def __init__(
        self,
        settings: Settings,
        store: MockStore,
        backend_factory: Optional[BackendFactory] = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._factory = backend_factory or connect_postgres
        self._backend: Optional[Backend] = None
        self._lock = asyncio.Lock()
        self.state = BackendState.UNINITIALIZED

    @property
    def backend(self) -> Optional[Backend]:
        return self._backend

    def server_capable(self) -> bool:
        mode = self._settings.data_backend
        if mode == "mock":
            return False
        if mode == "postgres":
            return True
        return self._settings.database_configured

    async def resolve(self) -> Backend:
        if self._backend is not None:
            return self._backend
        async with self._lock:
            if self._backend is None:
                self._backend = await self._initialize()
        return self._backend

    async def _initialize(self) -> Backend:
        self.state = BackendState.INITIALIZING
        if self.server_capable():
            try:
                backend = await self._factory(self._settings)
            except Exception as exc:  # noqa: BLE001 - any probe failure means mock mode
                log.warning(
                    f"Failed to initialize database connection, using mock data: {type(exc).__name__}",
                    extra={"error": str(exc)},
                )
            else:
                self.state = BackendState.SERVER_BACKED
                log.info("Data access layer initialized with PostgreSQL connection")
                return backend

        self.state = BackendState.MOCK_BACKED
        log.info("Data access layer initialized with mock data", extra={"records": len(self._store)})
        return MockBackend(self._store)


__all__ = ["BackendFactory", "BackendSelector", "BackendState", "connect_postgres"]
