"""
Domain package for the data-access layer.

Exports the table registry, record shapes and the query/result contracts.
Keep this package focused on data definitions and validation concerns.
"""

from akibeks_data.domain.models import RecordModel
from akibeks_data.domain.query import FilterOption, PaginatedResult, QueryOptions, Record, Result
from akibeks_data.domain.tables import TABLE_MODELS, Table, resolve_table

__all__ = [
    "FilterOption",
    "PaginatedResult",
    "QueryOptions",
    "Record",
    "RecordModel",
    "Result",
    "TABLE_MODELS",
    "Table",
    "resolve_table",
]
