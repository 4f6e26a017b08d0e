"""
Exception taxonomy for the data-access layer.

These exceptions are raised by backends and the query engine and are caught
at the `DataAccessLayer` boundary, where they become `Result.error` strings.
"""

from __future__ import annotations


class DataAccessError(Exception):
    """Base class for errors whose message is safe to show to callers."""


class UnknownTableError(DataAccessError):
    def __init__(self, table: object) -> None:
        super().__init__(f"Table {table} not found")
        self.table = table


class RecordNotFoundError(DataAccessError):
    def __init__(self, table: str, record_id: str) -> None:
        super().__init__(f"Item with id {record_id} not found in {table}")
        self.table = table
        self.record_id = record_id


class InvalidFilterError(DataAccessError):
    """A filter could not be applied (strict mode or structurally malformed)."""


class InvalidRecordError(DataAccessError):
    """A payload does not fit the record shape registered for its table."""


__all__ = [
    "DataAccessError",
    "InvalidFilterError",
    "InvalidRecordError",
    "RecordNotFoundError",
    "UnknownTableError",
]
