"""
PostgreSQL backend over a psycopg async connection pool.

Rows travel as snake_case columns and are exposed as camelCase records;
UUID ids are returned as strings. Queries are composed with `psycopg.sql` so
table and column names are always quoted identifiers.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from psycopg import sql
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from akibeks_data.domain.query import FilterOption, QueryOptions, Record
from akibeks_data.domain.tables import SYSTEM_FIELDS, Table, column_name, field_name
from akibeks_data.engine import build_count, build_select
from akibeks_data.errors import RecordNotFoundError
from akibeks_data.utils.logging import get_logger

log = get_logger(__name__)


def _to_record(row: Dict[str, Any]) -> Record:
    record = {field_name(key): value for key, value in row.items()}
    for key, value in record.items():
        if isinstance(value, uuid.UUID):
            record[key] = str(value)
    return record


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _adapt(value: Any) -> Any:
    """Wrap JSON-shaped values so psycopg sends them as jsonb."""
    if isinstance(value, (dict, list)):
        return Jsonb(value)
    return value


def _assignments(data: Dict[str, Any]) -> Tuple[List[sql.Composable], List[Any]]:
    columns: List[sql.Composable] = []
    params: List[Any] = []
    for key, value in data.items():
        if key in SYSTEM_FIELDS:
            continue
        columns.append(sql.Identifier(column_name(key)))
        params.append(_adapt(value))
    return columns, params


def _insert_statement(table: Table, data: Dict[str, Any]) -> Tuple[sql.Composable, List[Any]]:
    columns, params = _assignments(data)
    stamps = [sql.Identifier("created_at"), sql.Identifier("updated_at")]
    values = [sql.Placeholder()] * len(columns) + [sql.SQL("now()"), sql.SQL("now()")]
    query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
        sql.Identifier(table.sql_name),
        sql.SQL(", ").join(columns + stamps),
        sql.SQL(", ").join(values),
    )
    return query, params


class PostgresBackend:
    """
    `Backend` implementation backed by PostgreSQL.

    The pool is opened by the selector's probe and handed in ready to use.
    """

    name = "postgres"

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def _fetchall(self, query: sql.Composable, params: Sequence[Any]) -> List[Dict[str, Any]]:
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return list(await cur.fetchall())

    async def fetch_rows(self, table: Table, options: QueryOptions, strict: bool = False) -> List[Record]:
        query, params = build_select(table, options, strict=strict)
        return [_to_record(row) for row in await self._fetchall(query, params)]

    async def count_rows(self, table: Table, filters: Sequence[FilterOption], strict: bool = False) -> int:
        query, params = build_count(table, filters, strict=strict)
        rows = await self._fetchall(query, params)
        return int(rows[0]["total"]) if rows else 0

    async def insert_row(self, table: Table, data: Dict[str, Any]) -> Record:
        query, params = _insert_statement(table, data)
        rows = await self._fetchall(query, params)
        return _to_record(rows[0])

    async def insert_rows(self, table: Table, rows: Sequence[Dict[str, Any]]) -> List[Record]:
        inserted: List[Record] = []
        async with self._pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    for data in rows:
                        query, params = _insert_statement(table, data)
                        await cur.execute(query, params)
                        inserted.append(_to_record(await cur.fetchone()))
        return inserted

    async def update_row(self, table: Table, record_id: str, partial: Dict[str, Any]) -> Record:
        if not _is_uuid(record_id):
            raise RecordNotFoundError(table.value, record_id)
        columns, params = _assignments(partial)
        sets = [sql.SQL("{} = %s").format(col) for col in columns]
        # clock_timestamp() advances within a transaction, unlike now()
        sets.append(
            sql.SQL("{col} = GREATEST(clock_timestamp(), {col} + interval '1 microsecond')").format(
                col=sql.Identifier("updated_at")
            )
        )
        query = sql.SQL("UPDATE {} SET {} WHERE {} = %s RETURNING *").format(
            sql.Identifier(table.sql_name),
            sql.SQL(", ").join(sets),
            sql.Identifier("id"),
        )
        rows = await self._fetchall(query, [*params, record_id])
        if not rows:
            raise RecordNotFoundError(table.value, record_id)
        return _to_record(rows[0])

    async def delete_row(self, table: Table, record_id: str) -> None:
        if not _is_uuid(record_id):
            raise RecordNotFoundError(table.value, record_id)
        query = sql.SQL("DELETE FROM {} WHERE {} = %s RETURNING {}").format(
            sql.Identifier(table.sql_name), sql.Identifier("id"), sql.Identifier("id")
        )
        if not await self._fetchall(query, [record_id]):
            raise RecordNotFoundError(table.value, record_id)

    async def ping(self) -> Tuple[bool, Optional[str]]:
        try:
            await self._fetchall(sql.SQL("SELECT 1 AS ok"), [])
        except Exception as exc:  # noqa: BLE001 - health probe reports instead of raising
            log.error("Database health check failed", extra={"error_type": type(exc).__name__})
            return False, f"Database health check failed ({type(exc).__name__})"
        return True, None

    async def describe(self) -> Dict[str, Any]:
        rows = await self._fetchall(sql.SQL("SELECT now() AS timestamp, version() AS version"), [])
        details = dict(rows[0]) if rows else {}
        details["pool"] = self._pool.get_stats()
        return details

    async def close(self) -> None:
        await self._pool.close()


__all__ = ["PostgresBackend"]
