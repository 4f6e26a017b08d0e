"""
akibeks-data - data-access layer for the AKIBEKS Engineering website and back office.

This package provides a generic, table-oriented CRUD facade that:

- routes queries to PostgreSQL when a database is configured and reachable
- falls back to an in-memory store seeded with fixture data otherwise
- applies one filter / order / paginate contract regardless of backend

Every facade method returns a `Result` envelope instead of raising, so page
components can branch on `result.error` alone.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from akibeks_data.backends.mock import MockBackend, MockStore
from akibeks_data.client import DataAccessLayer
from akibeks_data.config import Settings, get_settings
from akibeks_data.domain.query import FilterOption, PaginatedResult, QueryOptions, Result
from akibeks_data.domain.tables import Table, available_tables
from akibeks_data.selector import BackendState
from akibeks_data.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Facade
    "DataAccessLayer",
    "BackendState",
    "MockBackend",
    "MockStore",
    # Query contract
    "FilterOption",
    "PaginatedResult",
    "QueryOptions",
    "Result",
    "Table",
    "available_tables",
    # Logging
    "configure_logging",
    "get_logger",
]
