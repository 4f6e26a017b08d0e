"""
Filter / order / paginate engine.

Two renderings of the same `QueryOptions` contract:

- in-memory evaluation over lists of records (mock backend);
- `psycopg.sql` compositions for PostgreSQL (real backend).

Both must agree: filters are ANDed, `like`/`ilike` are literal substring
matches, null/missing values sort as the minimum, ties keep insertion order
(SQL approximates this with `created_at, id`), and the page window is applied
after filtering and ordering.
"""

from __future__ import annotations

import operator as op
from collections.abc import Collection
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from psycopg import sql

from akibeks_data.domain.query import FilterOption, QueryOptions, Record
from akibeks_data.domain.tables import Table, column_name
from akibeks_data.errors import InvalidFilterError
from akibeks_data.utils.logging import get_logger

log = get_logger(__name__)

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "gt": op.gt,
    "gte": op.ge,
    "lt": op.lt,
    "lte": op.le,
}

_SQL_COMPARATORS = {"eq": "=", "ne": "<>", "gt": ">", "gte": ">=", "lt": "<", "lte": "<="}


def _is_collection(value: Any) -> bool:
    return isinstance(value, Collection) and not isinstance(value, (str, bytes, dict))


def active_filters(filters: Iterable[FilterOption], strict: bool = False) -> List[FilterOption]:
    """
    Drop filters that cannot be applied.

    Lenient mode logs and skips unsupported operators (and `in` filters whose
    value is not a collection); strict mode raises InvalidFilterError instead.
    """
    usable: List[FilterOption] = []
    for f in filters:
        problem: Optional[str] = None
        if not f.supported:
            problem = f"Unsupported filter operator '{f.operator}' on column '{f.column}'"
        elif f.operator == "in" and not _is_collection(f.value):
            problem = f"Filter 'in' on column '{f.column}' expects a list value"

        if problem is None:
            usable.append(f)
        elif strict:
            raise InvalidFilterError(problem)
        else:
            log.warning(f"{problem}; ignoring filter", extra={"column": f.column, "operator": f.operator})
    return usable


# ---------------------------------------------------------------------------
# In-memory evaluation
# ---------------------------------------------------------------------------


def matches(record: Record, f: FilterOption) -> bool:
    """Evaluate one supported filter against a record."""
    current = record.get(f.column)

    if f.operator == "eq":
        return current == f.value
    if f.operator == "ne":
        if f.value is None:
            return current is not None
        # SQL semantics: NULL <> x is never true
        return current is not None and current != f.value
    if f.operator == "in":
        return current is not None and current in list(f.value)
    if current is None or f.value is None:
        return False
    if f.operator in ("like", "ilike"):
        haystack, needle = str(current), str(f.value)
        if f.operator == "ilike":
            haystack, needle = haystack.casefold(), needle.casefold()
        return needle in haystack
    try:
        return _COMPARATORS[f.operator](current, f.value)
    except TypeError:
        return False


def filter_records(
    records: Iterable[Record], filters: Sequence[FilterOption], strict: bool = False
) -> List[Record]:
    usable = active_filters(filters, strict=strict)
    return [r for r in records if all(matches(r, f) for f in usable)]


def _type_rank(value: Any) -> Tuple[int, Any]:
    """Group values by kind so a mixed-type column still has a total order."""
    if isinstance(value, (bool, int, float, Decimal)):
        return 1, value
    if isinstance(value, str):
        return 2, value
    if isinstance(value, datetime):
        return 3, value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return 4, value
    return 5, str(value)


def _sort_key(column: str) -> Callable[[Record], Tuple[int, int, Any]]:
    def key(record: Record) -> Tuple[int, int, Any]:
        value = record.get(column)
        if value is None:
            return (0, 0, 0)
        rank, comparable = _type_rank(value)
        return (1, rank, comparable)

    return key


def order_records(records: List[Record], order_by: Optional[str], direction: str = "asc") -> List[Record]:
    """
    Stable sort on one column. Missing and None values are the minimum.
    Mixed value types order by kind (numbers, strings, datetimes, dates,
    anything else by its text). Without `order_by` the input (insertion)
    order is kept.
    """
    if not order_by:
        return list(records)
    # sorted() stays stable with reverse=True, so ties keep insertion order.
    return sorted(records, key=_sort_key(order_by), reverse=direction == "desc")


def window_records(records: List[Record], limit: Optional[int], offset: Optional[int]) -> List[Record]:
    start = max(offset or 0, 0)
    if limit is None or limit < 0:
        return records[start:]
    return records[start : start + limit]


def apply_query(
    records: Iterable[Record], options: QueryOptions, strict: bool = False
) -> Tuple[List[Record], int]:
    """
    Run the full pipeline over an in-memory record set.

    Returns the page of records and the number of matches before windowing.
    """
    filtered = filter_records(records, options.filters, strict=strict)
    ordered = order_records(filtered, options.order_by, options.order_direction)
    return window_records(ordered, options.limit, options.offset), len(filtered)


# ---------------------------------------------------------------------------
# SQL translation
# ---------------------------------------------------------------------------


def _escape_like(value: Any) -> str:
    text = str(value)
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _condition(f: FilterOption) -> Tuple[sql.Composable, List[Any]]:
    col = sql.Identifier(column_name(f.column))

    if f.operator in ("eq", "ne") and f.value is None:
        check = "IS NULL" if f.operator == "eq" else "IS NOT NULL"
        return sql.SQL("{} " + check).format(col), []
    if f.operator in _SQL_COMPARATORS:
        return sql.SQL("{} " + _SQL_COMPARATORS[f.operator] + " %s").format(col), [f.value]
    if f.operator in ("like", "ilike"):
        keyword = "LIKE" if f.operator == "like" else "ILIKE"
        return (
            sql.SQL("CAST({} AS TEXT) " + keyword + " %s").format(col),
            [f"%{_escape_like(f.value)}%"],
        )
    # "in": one placeholder per member so each value is typed by its column
    values = list(f.value)
    if not values:
        return sql.SQL("FALSE"), []
    placeholders = sql.SQL(", ").join([sql.Placeholder()] * len(values))
    return sql.SQL("{} IN ({})").format(col, placeholders), values


def build_where(filters: Sequence[FilterOption], strict: bool = False) -> Tuple[sql.Composable, List[Any]]:
    """Render the AND-ed WHERE clause (empty when no filter applies)."""
    usable = active_filters(filters, strict=strict)
    if not usable:
        return sql.SQL(""), []
    parts: List[sql.Composable] = []
    params: List[Any] = []
    for f in usable:
        clause, values = _condition(f)
        parts.append(clause)
        params.extend(values)
    return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(parts), params


def build_order(options: QueryOptions) -> sql.Composable:
    tiebreak = sql.SQL("{} ASC, {} ASC").format(sql.Identifier("created_at"), sql.Identifier("id"))
    if not options.order_by:
        return sql.SQL(" ORDER BY ") + tiebreak
    direction = "DESC NULLS LAST" if options.order_direction == "desc" else "ASC NULLS FIRST"
    return sql.SQL(" ORDER BY {} " + direction + ", {}").format(
        sql.Identifier(column_name(options.order_by)), tiebreak
    )


def build_select(table: Table, options: QueryOptions, strict: bool = False) -> Tuple[sql.Composable, List[Any]]:
    where, params = build_where(options.filters, strict=strict)
    query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(table.sql_name)) + where + build_order(options)
    if options.limit is not None and options.limit >= 0:
        query += sql.SQL(" LIMIT %s")
        params.append(options.limit)
    if options.offset:
        query += sql.SQL(" OFFSET %s")
        params.append(max(options.offset, 0))
    return query, params


def build_count(
    table: Table, filters: Sequence[FilterOption], strict: bool = False
) -> Tuple[sql.Composable, List[Any]]:
    where, params = build_where(filters, strict=strict)
    return sql.SQL("SELECT count(*) AS total FROM {}").format(sql.Identifier(table.sql_name)) + where, params


__all__ = [
    "active_filters",
    "apply_query",
    "build_count",
    "build_order",
    "build_select",
    "build_where",
    "filter_records",
    "matches",
    "order_records",
    "window_records",
]
