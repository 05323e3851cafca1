#!/usr/bin/env python3
"""
Database migration runner for the Supabase user store.

Connects directly to the PostgreSQL database behind Supabase and applies
the SQL files in migrations/ that have not been recorded yet.

Usage:
    python run_migrations.py             # Apply pending migrations
    python run_migrations.py --status    # Show applied and pending migrations
    python run_migrations.py --dry-run   # List what would be applied

Configuration:
    TURNSTILE_SUPABASE_DB_URL=postgresql://postgres.[project-ref]:[password]@[host]:6543/postgres
"""

import argparse
import hashlib
import sys
from pathlib import Path

import psycopg2
from psycopg2 import sql
from rich.console import Console
from rich.table import Table

from shared.config import get_settings

console = Console()

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
MIGRATIONS_TABLE = "_migrations"


def checksum(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()[:16]


def connect():
    """Open a connection using TURNSTILE_SUPABASE_DB_URL, or exit."""
    settings = get_settings()
    if not settings.supabase_db_url:
        console.print("[red]Error:[/red] TURNSTILE_SUPABASE_DB_URL is not set.")
        sys.exit(1)
    try:
        return psycopg2.connect(settings.supabase_db_url)
    except psycopg2.Error as e:
        console.print(f"[red]Database connection failed:[/red] {e}")
        sys.exit(1)


def ensure_migrations_table(conn) -> None:
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL(
                """
                CREATE TABLE IF NOT EXISTS {} (
                    name VARCHAR(255) PRIMARY KEY,
                    checksum VARCHAR(16) NOT NULL,
                    applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
                """
            ).format(sql.Identifier(MIGRATIONS_TABLE))
        )
    conn.commit()


def applied_migrations(conn) -> dict[str, tuple[str, object]]:
    """Map migration name to (checksum, applied_at)."""
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL("SELECT name, checksum, applied_at FROM {} ORDER BY name").format(
                sql.Identifier(MIGRATIONS_TABLE)
            )
        )
        return {row[0]: (row[1], row[2]) for row in cur.fetchall()}


def pending_migrations(applied: dict[str, tuple[str, object]]) -> list[Path]:
    pending = []
    for path in sorted(MIGRATIONS_DIR.glob("*.sql")):
        if path.name not in applied:
            pending.append(path)
        elif applied[path.name][0] != checksum(path):
            console.print(f"[yellow]Warning:[/yellow] {path.name} changed after it was applied")
    return pending


def apply_migration(conn, path: Path) -> None:
    """Run one migration and record it in the same transaction."""
    console.print(f"[blue]Running:[/blue] {path.name}...")
    try:
        with conn.cursor() as cur:
            cur.execute(path.read_text())
            cur.execute(
                sql.SQL("INSERT INTO {} (name, checksum) VALUES (%s, %s)").format(
                    sql.Identifier(MIGRATIONS_TABLE)
                ),
                (path.name, checksum(path)),
            )
        conn.commit()
    except psycopg2.Error as e:
        conn.rollback()
        console.print(f"[red]✗[/red] {path.name} failed: {e}")
        raise
    console.print(f"[green]✓[/green] {path.name} applied")


def show_status(applied: dict[str, tuple[str, object]], pending: list[Path]) -> None:
    table = Table(title="Migration Status")
    table.add_column("Migration", style="cyan")
    table.add_column("Status")
    table.add_column("Applied At")

    for name, (_, applied_at) in applied.items():
        table.add_row(name, "[green]Applied[/green]", str(applied_at or ""))
    for path in pending:
        table.add_row(path.name, "[yellow]Pending[/yellow]", "")
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Apply user store migrations")
    parser.add_argument("--status", action="store_true", help="Show migration status only")
    parser.add_argument("--dry-run", action="store_true", help="List pending migrations only")
    args = parser.parse_args()

    conn = connect()
    try:
        ensure_migrations_table(conn)
        applied = applied_migrations(conn)
        pending = pending_migrations(applied)

        if args.status:
            show_status(applied, pending)
            return
        if not pending:
            console.print("[green]All migrations are up to date.[/green]")
            return
        for path in pending:
            if args.dry_run:
                console.print(f"[cyan]Would run:[/cyan] {path.name}")
            else:
                apply_migration(conn, path)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
