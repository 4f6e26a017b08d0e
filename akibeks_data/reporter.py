from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table as RichTable

from akibeks_data.domain.query import PaginatedResult, Record

# Shown first when present; remaining columns follow in first-seen order.
_LEADING_COLUMNS = ("id", "title", "name", "email", "status")
_TRAILING_COLUMNS = ("createdAt", "updatedAt")


def _columns(records: Sequence[Record], only: Optional[Sequence[str]] = None) -> List[str]:
    if only:
        return list(only)
    seen: Dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    leading = [c for c in _LEADING_COLUMNS if c in seen]
    trailing = [c for c in _TRAILING_COLUMNS if c in seen]
    middle = [c for c in seen if c not in leading and c not in trailing]
    return leading + middle + trailing


def format_value(value: Any) -> str:
    """Render a record value for a terminal cell."""
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, Decimal):
        return f"{value:,.2f}"
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    return str(value)


def print_records(
    records: Sequence[Record],
    title: str,
    columns: Optional[Sequence[str]] = None,
    caption: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render records as a rich table.
    """
    console = console or Console()

    if not records:
        console.print(f"[yellow]No records in {title}.[/yellow]")
        return

    table = RichTable(title=title, box=box.ROUNDED, caption=caption)
    names = _columns(records, columns)
    for name in names:
        style = "cyan" if name == "id" else None
        table.add_column(name, style=style, no_wrap=name == "id", overflow="fold")

    for record in records:
        table.add_row(*(format_value(record.get(name)) for name in names))

    console.print(table)


def print_page(
    result: PaginatedResult[Record],
    title: str,
    columns: Optional[Sequence[str]] = None,
    console: Optional[Console] = None,
) -> None:
    """Render one page with a caption describing where it sits in the result set."""
    caption = (
        f"Page {result.page}/{max(result.total_pages, 1)} | {result.total} matching | "
        f"page size {result.page_size}"
    )
    print_records(result.data, title=title, columns=columns, caption=caption, console=console)


__all__ = ["format_value", "print_page", "print_records"]
