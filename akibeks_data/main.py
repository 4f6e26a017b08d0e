from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

import typer

from akibeks_data.client import DataAccessLayer
from akibeks_data.config import get_settings
from akibeks_data.domain.query import FilterOption
from akibeks_data.domain.tables import available_tables
from akibeks_data.infrastructure.db_factory import build_dsn, get_sync_connection
from akibeks_data.reporter import print_page, print_records
from akibeks_data.utils.logging import configure_logging

app = typer.Typer(help="AKIBEKS data-access layer CLI.")


def _parse_value(raw: str, operator: str) -> Any:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    if operator == "in" and not isinstance(value, list):
        value = [part.strip() for part in raw.split(",") if part.strip()]
    return value


def parse_filter(expression: str) -> FilterOption:
    """
    Parse `column:operator:value` (or `column:value` for equality).

    Values are read as JSON when possible, so `budgetKes:gt:1000000` compares
    numbers and `featured:eq:true` compares booleans.
    """
    parts = expression.split(":", 2)
    if len(parts) == 2:
        column, operator, raw = parts[0], "eq", parts[1]
    elif len(parts) == 3:
        column, operator, raw = parts
    else:
        raise typer.BadParameter(f"Expected column:operator:value, got '{expression}'")
    operator = operator.strip().lower()
    return FilterOption(column=column.strip(), operator=operator, value=_parse_value(raw, operator))


def _setup() -> DataAccessLayer:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return DataAccessLayer(settings)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    target = (
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        if settings.database_configured
        else "DB=<not configured>"
    )
    typer.echo(
        f"{target} | backend={settings.data_backend} strict_filters={settings.strict_filters} "
        f"pool=({settings.db_pool_min},{settings.db_pool_max}) env={settings.app_env}"
    )


@app.command()
def tables() -> None:
    """
    List the table names the data-access layer accepts.
    """
    for name in available_tables():
        typer.echo(name)


@app.command()
def health() -> None:
    """
    Resolve the backend and run its liveness probe.
    """

    async def _run() -> int:
        async with _setup() as dal:
            result = await dal.health_report()
        report = result.data
        healthy = report["status"] == "healthy"
        typer.echo(f"mode={report['mode']} healthy={healthy}" + (f" error={result.error}" if result.error else ""))
        for key, value in report.items():
            if key not in ("status", "mode"):
                typer.echo(f"  {key}: {value}")
        return 0 if healthy else 1

    raise typer.Exit(code=asyncio.run(_run()))


@app.command()
def query(
    table: str = typer.Argument(..., help="Table name (see `tables`)."),
    filters: Optional[List[str]] = typer.Option(
        None,
        "--filter",
        "-f",
        help="Filter as column:operator:value; repeat to AND several.",
    ),
    order_by: Optional[str] = typer.Option(None, "--order-by", "-o", help="Column to sort on."),
    desc: bool = typer.Option(False, "--desc", help="Sort descending."),
    page: int = typer.Option(1, "--page", "-p", help="1-based page number."),
    page_size: int = typer.Option(10, "--page-size", "-n", help="Rows per page."),
    columns: Optional[List[str]] = typer.Option(None, "--column", "-c", help="Columns to display."),
    as_json: bool = typer.Option(False, "--json", help="Emit the page as JSON instead of a table."),
) -> None:
    """
    Run a filtered, ordered, paginated select and print the page.
    """
    options = {
        "filters": [parse_filter(f) for f in filters or []],
        "orderBy": order_by,
        "orderDirection": "desc" if desc else "asc",
    }

    async def _run():
        async with _setup() as dal:
            return await dal.select_paginated(table, page=page, page_size=page_size, options=options)

    result = asyncio.run(_run())
    if result.error:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(code=1)
    if as_json:
        payload = {
            "data": result.data,
            "total": result.total,
            "page": result.page,
            "pageSize": result.page_size,
            "totalPages": result.total_pages,
            "hasNext": result.has_next,
            "hasPrev": result.has_prev,
        }
        typer.echo(json.dumps(payload, indent=2, default=str))
        return
    print_page(result, title=table, columns=columns)


@app.command()
def count(
    table: str = typer.Argument(..., help="Table name (see `tables`)."),
    filters: Optional[List[str]] = typer.Option(None, "--filter", "-f", help="Filter as column:operator:value."),
) -> None:
    """
    Count records matching the given filters.
    """

    async def _run():
        async with _setup() as dal:
            return await dal.count(table, [parse_filter(f) for f in filters or []])

    result = asyncio.run(_run())
    if result.error:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(result.data))


@app.command()
def stats(
    recent: int = typer.Option(5, "--recent", "-r", help="Number of newest projects to list."),
) -> None:
    """
    Show the admin overview: project counts by status, services, users.
    """

    async def _run():
        async with _setup() as dal:
            return await dal.dashboard_stats(recent=recent)

    result = asyncio.run(_run())
    if result.error:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(code=1)
    summary = result.data
    typer.echo(
        f"projects={summary['totalProjects']} active={summary['activeProjects']} "
        f"services={summary['totalServices']} users={summary['totalUsers']}"
    )
    for status, total in summary["projectsByStatus"].items():
        typer.echo(f"  {status}: {total}")
    print_records(summary["recentProjects"], title="Recent projects", columns=["id", "title", "status", "createdAt"])


@app.command("init-db")
def init_db(
    schema: Path = typer.Option(Path("db/init.sql"), "--schema", help="SQL file creating the tables."),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
) -> None:
    """
    Create the tables in PostgreSQL (idempotent).
    """
    if not schema.exists():
        typer.echo(f"Schema file not found: {schema}", err=True)
        raise typer.Exit(code=1)
    with get_sync_connection(dsn or build_dsn()) as conn:
        conn.execute(schema.read_text(encoding="utf-8"))
        conn.commit()
    typer.echo(f"Schema applied from {schema}.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
