"""
Synthetic data generation for the AKIBEKS data-access layer.

Produces deterministic fake records (projects, testimonials, contact
submissions) and either writes them to JSON or loads them into PostgreSQL.
"""

from __future__ import annotations

import json
import random
import sys
import time
from pathlib import Path
from typing import Any, Callable, Dict, List

import typer
from faker import Faker
from psycopg import sql
from psycopg.types.json import Jsonb

from akibeks_data.domain.models import PROJECT_STATUSES
from akibeks_data.domain.tables import Table, column_name
from akibeks_data.infrastructure.db_factory import build_dsn, get_sync_connection

app = typer.Typer(help="Generate synthetic site data and optionally load it into Postgres.")

COUNTIES = ["Nairobi", "Mombasa", "Kiambu", "Nakuru", "Kisumu", "Machakos", "Uasin Gishu"]
PROJECT_TYPES = ["residential", "commercial", "industrial", "infrastructure"]
PRIORITIES = ["low", "medium", "high"]


def _project(fake: Faker, rng: random.Random) -> Dict[str, Any]:
    county = rng.choice(COUNTIES)
    kind = rng.choice(PROJECT_TYPES)
    status = rng.choice(PROJECT_STATUSES)
    return {
        "title": f"{fake.last_name()} {kind.title()} {rng.choice(['Complex', 'Estate', 'Park', 'Works'])}",
        "description": fake.sentence(nb_words=10),
        "projectType": kind,
        "status": status,
        "priority": rng.choice(PRIORITIES),
        "budgetKes": round(rng.uniform(1_000_000, 50_000_000), 2),
        "location": f"{fake.street_name()}, {county}",
        "county": county,
        "completionPercentage": 100 if status == "completed" else rng.randint(0, 95),
        "featured": rng.random() < 0.2,
    }


def _testimonial(fake: Faker, rng: random.Random) -> Dict[str, Any]:
    return {
        "name": fake.name(),
        "company": fake.company(),
        "position": fake.job(),
        "message": fake.paragraph(nb_sentences=2),
        "rating": rng.choice([3, 4, 4, 5, 5, 5]),
        "projectType": rng.choice(PROJECT_TYPES),
        "location": rng.choice(COUNTIES),
        "approved": rng.random() < 0.7,
        "featured": rng.random() < 0.2,
    }


def _contact_submission(fake: Faker, rng: random.Random) -> Dict[str, Any]:
    return {
        "name": fake.name(),
        "email": fake.email(),
        "phoneNumber": f"+2547{rng.randint(10_000_000, 99_999_999)}",
        "company": fake.company(),
        "serviceInterest": rng.choice(["design", "construction", "renovation", "consulting"]),
        "message": fake.paragraph(nb_sentences=3),
        "source": "website",
        "status": rng.choice(["new", "contacted", "closed"]),
    }


GENERATORS: Dict[Table, Callable[[Faker, random.Random], Dict[str, Any]]] = {
    Table.PROJECTS: _project,
    Table.TESTIMONIALS: _testimonial,
    Table.CONTACT_SUBMISSIONS: _contact_submission,
}


def _generate_rows(table: Table, rows: int, seed: int) -> List[Dict[str, Any]]:
    if table not in GENERATORS:
        raise typer.BadParameter(
            f"No generator for '{table.value}'. Available: {', '.join(t.value for t in GENERATORS)}"
        )
    fake = Faker("en_GB")
    fake.seed_instance(seed)
    rng = random.Random(seed)
    return [GENERATORS[table](fake, rng) for _ in range(rows)]


def _write_json(path: Path, table: Table, rows: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump({table.value: rows}, f, indent=2)


def _load_into_db(dsn: str, table: Table, rows: List[Dict[str, Any]]) -> int:
    if not rows:
        return 0
    fields = list(rows[0].keys())
    query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
        sql.Identifier(table.sql_name),
        sql.SQL(", ").join(sql.Identifier(column_name(f)) for f in fields),
        sql.SQL(", ").join([sql.Placeholder()] * len(fields)),
    )
    params = [
        [Jsonb(row[f]) if isinstance(row[f], (dict, list)) else row[f] for f in fields] for row in rows
    ]
    with get_sync_connection(dsn) as conn:
        with conn.cursor() as cur:
            cur.executemany(query, params)
        conn.commit()
    return len(rows)


@app.command()
def main(
    table: str = typer.Option("projects", "--table", "-t", help="Table to generate rows for."),
    rows: int = typer.Option(25, "--rows", "-r", help="Number of rows to generate."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write rows to this JSON file (keyed by table name).",
    ),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
    no_load: bool = typer.Option(False, "--no-load", help="Only generate; skip loading into Postgres."),
) -> None:
    """
    Generate synthetic rows and optionally load them into Postgres.
    """
    start = time.perf_counter()
    try:
        target = Table(table)
    except ValueError:
        raise typer.BadParameter(f"Unknown table '{table}'") from None
    generated = _generate_rows(target, rows=rows, seed=seed)
    typer.echo(f"Generated {len(generated):,} {target.value} rows in {time.perf_counter() - start:.2f}s (seed={seed})")

    if output:
        _write_json(output, target, generated)
        typer.echo(f"Wrote {output}")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    loaded = _load_into_db(dsn or build_dsn(), target, generated)
    typer.echo(f"Loaded {loaded:,} rows into {target.sql_name}.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
