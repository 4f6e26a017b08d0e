"""
In-memory backend used when no database is reachable.

`MockStore` holds one list of records per registered table and is owned by a
single `DataAccessLayer` (pass one in to share or pre-seed it). Mutation is
in place with no locking or snapshot isolation.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from akibeks_data.backends.fixtures import seed_records
from akibeks_data.domain.query import FilterOption, QueryOptions, Record
from akibeks_data.domain.tables import Table, resolve_table
from akibeks_data.engine import apply_query, filter_records
from akibeks_data.errors import RecordNotFoundError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MockStore:
    """
    Table name -> list of records, plus every id ever issued per table.
    """

    def __init__(self, records: Optional[Mapping[Any, Iterable[Record]]] = None) -> None:
        self._tables: Dict[Table, List[Record]] = {table: [] for table in Table}
        self._issued_ids: Dict[Table, Set[str]] = {table: set() for table in Table}
        for name, rows in (records or {}).items():
            table = resolve_table(name)
            for row in rows:
                row = copy.deepcopy(dict(row))
                self._tables[table].append(row)
                if row.get("id") is not None:
                    self._issued_ids[table].add(str(row["id"]))

    @classmethod
    def seeded(cls) -> "MockStore":
        """Store pre-loaded with the marketing-site fixture records."""
        return cls(seed_records())

    def rows(self, table: Table) -> List[Record]:
        """The live list backing `table` (not a copy)."""
        return self._tables[table]

    def new_id(self, table: Table) -> str:
        while True:
            candidate = str(uuid.uuid4())
            if candidate not in self._issued_ids[table]:
                self._issued_ids[table].add(candidate)
                return candidate

    def index_of(self, table: Table, record_id: str) -> int:
        for index, row in enumerate(self._tables[table]):
            if str(row.get("id")) == str(record_id):
                return index
        raise RecordNotFoundError(table.value, record_id)

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._tables.values())


class MockBackend:
    """
    `Backend` implementation over a `MockStore`, using the in-memory engine.

    Records are deep-copied in both directions, so nested JSON values are
    never shared between callers and the store.
    """

    name = "mock"

    def __init__(self, store: Optional[MockStore] = None) -> None:
        self.store = store if store is not None else MockStore()

    async def fetch_rows(self, table: Table, options: QueryOptions, strict: bool = False) -> List[Record]:
        page, _ = apply_query(self.store.rows(table), options, strict=strict)
        return [copy.deepcopy(row) for row in page]

    async def count_rows(self, table: Table, filters: Sequence[FilterOption], strict: bool = False) -> int:
        return len(filter_records(self.store.rows(table), filters, strict=strict))

    async def insert_row(self, table: Table, data: Dict[str, Any]) -> Record:
        now = _utcnow()
        row = {**copy.deepcopy(data), "id": self.store.new_id(table), "createdAt": now, "updatedAt": now}
        self.store.rows(table).append(row)
        return copy.deepcopy(row)

    async def update_row(self, table: Table, record_id: str, partial: Dict[str, Any]) -> Record:
        rows = self.store.rows(table)
        index = self.store.index_of(table, record_id)
        current = rows[index]
        updated = {
            **current,
            **copy.deepcopy(partial),
            "id": current["id"],
            "updatedAt": self._bump(current.get("updatedAt")),
        }
        if "createdAt" in current:
            updated["createdAt"] = current["createdAt"]
        rows[index] = updated
        return copy.deepcopy(updated)

    async def insert_rows(self, table: Table, rows: Sequence[Dict[str, Any]]) -> List[Record]:
        return [await self.insert_row(table, row) for row in rows]

    async def delete_row(self, table: Table, record_id: str) -> None:
        index = self.store.index_of(table, record_id)
        del self.store.rows(table)[index]

    async def ping(self) -> Tuple[bool, Optional[str]]:
        return True, None

    async def describe(self) -> Dict[str, Any]:
        return {"timestamp": _utcnow(), "version": "in-memory", "records": len(self.store)}

    async def close(self) -> None:
        return None

    @staticmethod
    def _bump(previous: Any) -> datetime:
        """Current time, nudged forward if the clock has not moved past `previous`."""
        now = _utcnow()
        if isinstance(previous, datetime) and previous.tzinfo is not None and now <= previous:
            return previous + timedelta(microseconds=1)
        return now


__all__ = ["MockBackend", "MockStore"]
