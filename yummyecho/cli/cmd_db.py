"""Database management commands."""

import click

from . import cli
from .shared import console, run_with_db


@cli.group()
def db():
    """Database management commands."""
    pass


@db.command("init")
def db_init():
    """Initialize database schema."""
    async def _init(pool):
        from yummyecho.db.connection import read_schema

        async with pool.acquire() as conn:
            await conn.execute(read_schema())
        console.print("[green]✓ Database schema initialized[/green]")

    run_with_db(_init)


@db.command("reset")
@click.confirmation_option(prompt="This will DELETE ALL DATA. Are you sure?")
def db_reset():
    """Reset database (DROP ALL + re-init)."""
    async def _reset(pool):
        from yummyecho.db.connection import read_schema

        async with pool.acquire() as conn:
            await conn.execute("""
                DROP TABLE IF EXISTS settings CASCADE;
                DROP TABLE IF EXISTS groups CASCADE;
                DROP TABLE IF EXISTS users CASCADE;
            """)
        console.print("[yellow]Tables dropped.[/yellow]")

        async with pool.acquire() as conn:
            await conn.execute(read_schema())
        console.print("[green]✓ Database re-initialized[/green]")

    run_with_db(_reset)
