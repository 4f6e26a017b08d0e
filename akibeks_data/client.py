"""
DataAccessLayer: the single entry point pages and back-office tools use to
read and write site data.

Usage:
    from akibeks_data import DataAccessLayer, Table

    async with DataAccessLayer() as dal:
        result = await dal.select(Table.PROJECTS, {"orderBy": "createdAt", "orderDirection": "desc"})
        if result.ok:
            render(result.data)

Every method returns a `Result` (or `PaginatedResult`) and never raises: the
caller branches on `result.error`. Whether data came from PostgreSQL or the
in-memory store is decided once, lazily, by `BackendSelector`.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

from akibeks_data.backends.base import Backend
from akibeks_data.backends.mock import MockStore
from akibeks_data.config import Settings, get_settings
from akibeks_data.domain.models import PROJECT_STATUSES
from akibeks_data.domain.query import (
    FilterInput,
    FilterOption,
    OptionsInput,
    PaginatedResult,
    QueryOptions,
    Record,
    Result,
    coerce_filters,
    coerce_options,
)
from akibeks_data.domain.tables import Table, TableName, normalize_payload, resolve_table
from akibeks_data.errors import DataAccessError, InvalidFilterError, InvalidRecordError
from akibeks_data.selector import BackendFactory, BackendSelector, BackendState
from akibeks_data.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class DataAccessLayer:
    """
    Table-oriented CRUD facade over PostgreSQL with an in-memory fallback.

    Parameters
    ----------
    settings : Settings, optional
        Defaults to the cached environment settings.
    store : MockStore, optional
        In-memory store for mock mode. Defaults to the seeded fixtures when
        `SEED_MOCK_DATA` is true, otherwise an empty store.
    backend_factory : callable, optional
        Override for building the real backend (tests, alternative drivers).
    strict_filters : bool, optional
        Fail calls that carry unsupported filter operators instead of
        ignoring those filters. Defaults to `Settings.strict_filters`.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[MockStore] = None,
        backend_factory: Optional[BackendFactory] = None,
        strict_filters: Optional[bool] = None,
    ) -> None:
        self.settings = settings or get_settings()
        if store is None:
            store = MockStore.seeded() if self.settings.seed_mock_data else MockStore()
        self.store = store
        self.strict_filters = self.settings.strict_filters if strict_filters is None else strict_filters
        self._selector = BackendSelector(self.settings, store, backend_factory)

    # -- lifecycle ---------------------------------------------------------

    @property
    def state(self) -> BackendState:
        return self._selector.state

    @property
    def mode(self) -> Optional[str]:
        """"postgres" or "mock" once resolved, None before first use."""
        backend = self._selector.backend
        return backend.name if backend is not None else None

    async def close(self) -> None:
        backend = self._selector.backend
        if backend is not None:
            await backend.close()

    async def __aenter__(self) -> "DataAccessLayer":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _guarded(
        self,
        operation: str,
        table: TableName | None,
        call: Callable[[Backend], Awaitable[T]],
        fallback: Any,
    ) -> Result:
        try:
            backend = await self._selector.resolve()
            return Result(data=await call(backend))
        except DataAccessError as exc:
            log.warning(f"{operation} failed: {exc}", extra={"operation": operation, "table": str(table)})
            return Result(data=fallback, error=str(exc))
        except Exception as exc:  # noqa: BLE001 - nothing crosses the facade boundary
            log.exception(f"{operation} error for table {table}", extra={"operation": operation})
            return Result(data=fallback, error=f"Backend operation failed ({type(exc).__name__})")

    # -- reads -------------------------------------------------------------

    async def select(self, table: TableName, options: OptionsInput = None) -> Result[List[Record]]:
        async def call(backend: Backend) -> List[Record]:
            return await backend.fetch_rows(resolve_table(table), coerce_options(options), self.strict_filters)

        return await self._guarded("select", table, call, [])

    async def count(self, table: TableName, filters: Optional[Sequence[FilterInput]] = None) -> Result[int]:
        async def call(backend: Backend) -> int:
            return await backend.count_rows(resolve_table(table), coerce_filters(filters), self.strict_filters)

        return await self._guarded("count", table, call, 0)

    async def select_paginated(
        self,
        table: TableName,
        page: int = 1,
        page_size: int = 10,
        options: OptionsInput = None,
    ) -> PaginatedResult[Record]:
        """
        One 1-based page of `select`, with the pre-pagination total.

        `page` and `page_size` below 1 are clamped to 1. Any `limit`/`offset`
        in `options` is replaced by the page window.
        """
        try:
            page = max(int(page), 1)
            page_size = max(int(page_size), 1)
        except (TypeError, ValueError):
            return PaginatedResult(error=f"Invalid pagination: page={page!r}, page_size={page_size!r}")
        try:
            base = coerce_options(options)
        except InvalidFilterError as exc:
            return PaginatedResult(page=page, page_size=page_size, error=str(exc))

        windowed = base.model_copy(update={"limit": page_size, "offset": (page - 1) * page_size})
        rows = await self.select(table, windowed)
        if not rows.ok:
            return PaginatedResult(page=page, page_size=page_size, error=rows.error)
        total = await self.count(table, base.filters)
        if not total.ok:
            return PaginatedResult(page=page, page_size=page_size, error=total.error)
        return PaginatedResult.build(rows.data, total.data, page, page_size)

    async def find_one(self, table: TableName, filters: Mapping[str, Any]) -> Result[Optional[Record]]:
        """First record whose fields equal every entry of `filters`; `data=None` if none."""

        async def call(backend: Backend) -> Optional[Record]:
            if not isinstance(filters, Mapping):
                raise InvalidFilterError("find_one filters must be a mapping of column -> value")
            options = coerce_options(
                {
                    "filters": [FilterOption(column=k, operator="eq", value=v) for k, v in filters.items()],
                    "limit": 1,
                }
            )
            rows = await backend.fetch_rows(resolve_table(table), options, self.strict_filters)
            return rows[0] if rows else None

        return await self._guarded("find_one", table, call, None)

    # -- writes ------------------------------------------------------------

    async def insert(self, table: TableName, data: Mapping[str, Any]) -> Result[Optional[Record]]:
        """Create a record; `id`, `createdAt` and `updatedAt` are assigned here."""

        async def call(backend: Backend) -> Record:
            target = resolve_table(table)
            return await backend.insert_row(target, normalize_payload(target, data))

        return await self._guarded("insert", table, call, None)

    async def batch_insert(
        self,
        table: TableName,
        rows: Iterable[Mapping[str, Any]],
        batch_size: int = 100,
    ) -> Result[List[Record]]:
        """
        Insert many records, `batch_size` at a time.

        Every row is validated before anything is written. On PostgreSQL each
        batch commits atomically; batches committed before a failure stay.
        """

        async def call(backend: Backend) -> List[Record]:
            target = resolve_table(table)
            if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
                raise InvalidRecordError("batch_insert expects a list of records")
            try:
                size = max(int(batch_size), 1)
            except (TypeError, ValueError):
                raise InvalidRecordError(f"Invalid batch size {batch_size!r}") from None

            payloads = [normalize_payload(target, row) for row in rows]
            inserted: List[Record] = []
            for start in range(0, len(payloads), size):
                inserted.extend(await backend.insert_rows(target, payloads[start : start + size]))
            log.info(
                f"Inserted {len(inserted)} rows into {target}",
                extra={"table": str(target), "batch_size": size},
            )
            return inserted

        return await self._guarded("batch_insert", table, call, [])

    async def update(self, table: TableName, record_id: str, partial: Mapping[str, Any]) -> Result[Optional[Record]]:
        """Shallow-merge `partial` into the record and bump `updatedAt`."""

        async def call(backend: Backend) -> Record:
            target = resolve_table(table)
            if record_id is None or str(record_id) == "":
                raise InvalidRecordError("update requires a record id")
            return await backend.update_row(target, str(record_id), normalize_payload(target, partial))

        return await self._guarded("update", table, call, None)

    async def delete(self, table: TableName, record_id: str) -> Result[bool]:
        async def call(backend: Backend) -> bool:
            await backend.delete_row(resolve_table(table), str(record_id))
            return True

        return await self._guarded("delete", table, call, False)

    # -- misc --------------------------------------------------------------

    async def health_check(self) -> Result[bool]:
        try:
            backend = await self._selector.resolve()
            healthy, error = await backend.ping()
        except Exception as exc:  # noqa: BLE001 - health checks report, never raise
            log.exception("Health check error")
            return Result(data=False, error=f"Health check failed ({type(exc).__name__})")
        return Result(data=healthy, error=None if healthy else error or "Database connection failed")

    async def health_report(self) -> Result[Dict[str, Any]]:
        """
        Liveness plus details: backend mode, server time and version, and
        connection pool statistics on PostgreSQL.
        """
        report: Dict[str, Any] = {"status": "unhealthy", "mode": self.mode}
        try:
            backend = await self._selector.resolve()
            report["mode"] = backend.name
            healthy, error = await backend.ping()
            if healthy:
                report.update(await backend.describe())
        except Exception as exc:  # noqa: BLE001 - health checks report, never raise
            log.exception("Health report error")
            return Result(data=report, error=f"Health check failed ({type(exc).__name__})")
        report["status"] = "healthy" if healthy else "unhealthy"
        return Result(data=report, error=None if healthy else error or "Database connection failed")

    async def dashboard_stats(self, recent: int = 5) -> Result[Optional[Dict[str, Any]]]:
        """Project, service and user counts for the admin overview."""

        async def call(backend: Backend) -> Dict[str, Any]:
            by_status: Dict[str, int] = {}
            for status in PROJECT_STATUSES:
                status_filter = [FilterOption(column="status", operator="eq", value=status)]
                by_status[status] = await backend.count_rows(Table.PROJECTS, status_filter)
            newest = QueryOptions(order_by="createdAt", order_direction="desc", limit=max(int(recent), 0))
            return {
                "totalProjects": await backend.count_rows(Table.PROJECTS, []),
                "activeProjects": by_status["in_progress"],
                "totalServices": await backend.count_rows(Table.SERVICES, []),
                "totalUsers": await backend.count_rows(Table.USERS, []),
                "recentProjects": await backend.fetch_rows(Table.PROJECTS, newest),
                "projectsByStatus": by_status,
            }

        return await self._guarded("dashboard_stats", Table.PROJECTS, call, None)

    async def log_activity(
        self,
        user_id: Optional[str],
        action: str,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> Result[Optional[Record]]:
        """Append an audit entry to `activityLogs`."""
        return await self.insert(
            Table.ACTIVITY_LOGS,
            {
                "userId": user_id,
                "action": action,
                "resource": resource,
                "resourceId": resource_id,
                "details": dict(details or {}),
            },
        )


__all__ = ["DataAccessLayer"]
