"""
Backend capability interface.

The facade talks to exactly one object implementing `Backend`, chosen once by
the selector. Implementations raise `akibeks_data.errors` exceptions for
expected failures (unknown record, invalid filter); anything else is treated
as a backend failure by the facade.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Protocol, Sequence, Tuple, runtime_checkable

from akibeks_data.domain.query import FilterOption, QueryOptions, Record
from akibeks_data.domain.tables import Table

BackendName = Literal["postgres", "mock"]


@runtime_checkable
class Backend(Protocol):
    """
    Common interface for the mock store and the PostgreSQL backend.

    Attributes
    ----------
    name : str
        "postgres" or "mock"; reported by `DataAccessLayer.mode`.
    """

    name: BackendName

    async def fetch_rows(self, table: Table, options: QueryOptions, strict: bool = False) -> List[Record]:
        """Return the filtered, ordered and windowed rows."""
        ...

    async def count_rows(self, table: Table, filters: Sequence[FilterOption], strict: bool = False) -> int:
        ...

    async def insert_row(self, table: Table, data: Dict[str, Any]) -> Record:
        """Persist a new row; the backend assigns `id`, `createdAt` and `updatedAt`."""
        ...

    async def insert_rows(self, table: Table, rows: Sequence[Dict[str, Any]]) -> List[Record]:
        """Persist one batch; PostgreSQL commits the batch as a single transaction."""
        ...

    async def update_row(self, table: Table, record_id: str, partial: Dict[str, Any]) -> Record:
        """Shallow-merge `partial` into the row and bump `updatedAt`."""
        ...

    async def delete_row(self, table: Table, record_id: str) -> None:
        ...

    async def ping(self) -> Tuple[bool, str | None]:
        """Lightweight liveness probe: (healthy, error message)."""
        ...

    async def describe(self) -> Dict[str, Any]:
        """Server time, version and connection statistics for health reports."""
        ...

    async def close(self) -> None:
        ...


__all__ = ["Backend", "BackendName"]
