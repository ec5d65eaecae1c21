#!/usr/bin/env python3
"""
Apply the SQL files in migrations/ to the DATABASE_URL database.

Each applied file is recorded with a checksum in ``schema_migrations``;
files whose contents change after being applied are reported, not rerun.

Usage:
    python run_migrations.py              # Apply pending migrations
    python run_migrations.py --status     # Show applied and pending files
    python run_migrations.py --dry-run    # List what would be applied
"""

import argparse
import hashlib
import sys
from pathlib import Path
from typing import NamedTuple

import psycopg2
from rich.console import Console
from rich.table import Table

from shared.config import get_settings

console = Console()

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
TRACKING_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        name TEXT PRIMARY KEY,
        checksum TEXT NOT NULL,
        applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""


class Migration(NamedTuple):
    name: str
    path: Path
    checksum: str


def load_migrations(directory: Path = MIGRATIONS_DIR) -> list[Migration]:
    """Every ``*.sql`` file in name order, with a short content checksum."""
    if not directory.is_dir():
        console.print(f"[yellow]No migrations directory at {directory}[/yellow]")
        return []
    return [
        Migration(path.name, path, hashlib.sha256(path.read_bytes()).hexdigest()[:16])
        for path in sorted(directory.glob("*.sql"))
    ]


def connect():
    settings = get_settings()
    if not settings.database_url:
        console.print("[red]DATABASE_URL is not set.[/red] Add it to .env or the environment.")
        sys.exit(1)
    try:
        return psycopg2.connect(settings.database_url)
    except psycopg2.Error as e:
        console.print(f"[red]Could not connect:[/red] {e}")
        sys.exit(1)


def applied_checksums(conn) -> dict[str, tuple[str, object]]:
    with conn.cursor() as cur:
        cur.execute(TRACKING_TABLE_DDL)
        cur.execute("SELECT name, checksum, applied_at FROM schema_migrations ORDER BY name")
        rows = cur.fetchall()
    conn.commit()
    return {name: (checksum, applied_at) for name, checksum, applied_at in rows}


def pending_migrations(migrations: list[Migration], applied: dict) -> list[Migration]:
    pending = []
    for migration in migrations:
        if migration.name not in applied:
            pending.append(migration)
        elif applied[migration.name][0] != migration.checksum:
            console.print(f"[yellow]{migration.name} changed after it was applied[/yellow]")
    return pending


def apply(conn, migration: Migration) -> None:
    """Run one file and record it, in a single transaction."""
    console.print(f"[blue]Applying[/blue] {migration.name}")
    try:
        with conn.cursor() as cur:
            cur.execute(migration.path.read_text(encoding="utf-8"))
            cur.execute(
                "INSERT INTO schema_migrations (name, checksum) VALUES (%s, %s)",
                (migration.name, migration.checksum),
            )
        conn.commit()
    except psycopg2.Error as e:
        conn.rollback()
        console.print(f"[red]{migration.name} failed:[/red] {e}")
        raise
    console.print(f"[green]Applied[/green] {migration.name}")


def print_status(migrations: list[Migration], applied: dict) -> None:
    table = Table(title="Migrations")
    table.add_column("File", style="cyan")
    table.add_column("Status")
    table.add_column("Applied at")
    table.add_column("Checksum")

    for migration in migrations:
        if migration.name in applied:
            _, applied_at = applied[migration.name]
            table.add_row(migration.name, "[green]applied[/green]", f"{applied_at:%Y-%m-%d %H:%M:%S}", migration.checksum)
        else:
            table.add_row(migration.name, "[yellow]pending[/yellow]", "", migration.checksum)
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Apply ModelCompare database migrations")
    parser.add_argument("--status", action="store_true", help="Show migration status and exit")
    parser.add_argument("--dry-run", action="store_true", help="List pending migrations without applying")
    args = parser.parse_args()

    migrations = load_migrations()
    conn = connect()
    try:
        applied = applied_checksums(conn)
        if args.status:
            print_status(migrations, applied)
            return

        pending = pending_migrations(migrations, applied)
        if not pending:
            console.print("[green]Database is up to date.[/green]")
            return

        for migration in pending:
            if args.dry_run:
                console.print(f"[cyan]Would apply[/cyan] {migration.name}")
            else:
                apply(conn, migration)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
