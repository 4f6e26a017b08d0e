"""
Backends package for the data-access layer.

`MockBackend` is always importable; `PostgresBackend` lives in
`akibeks_data.backends.postgres` and is imported only when a real database
is probed.
"""

from akibeks_data.backends.base import Backend, BackendName
from akibeks_data.backends.mock import MockBackend, MockStore

__all__ = [
    "Backend",
    "BackendName",
    "MockBackend",
    "MockStore",
]
