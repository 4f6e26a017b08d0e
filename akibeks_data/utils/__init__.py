"""
Utilities package for the data-access layer.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of domain-specific logic.
"""

from akibeks_data.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
