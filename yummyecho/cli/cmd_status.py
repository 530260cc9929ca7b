"""Status command."""

import asyncpg
import click

from . import cli
from .shared import console, run_with_db

from rich.table import Table


def _fmt_ts(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "[dim]—[/dim]"


def build_records_table(title: str, id_column: str, rows: list[dict]) -> Table:
    """Rich table of group or user records."""
    table = Table(title=title)
    table.add_column(id_column, style="bold")
    table.add_column("Activated")
    table.add_column("Registered")
    table.add_column("Activated at")
    for row in rows:
        table.add_row(
            str(row[id_column]),
            "[green]yes[/green]" if row["is_activated"] else "[yellow]no[/yellow]",
            _fmt_ts(row.get("registered_at")),
            _fmt_ts(row.get("activated_at")),
        )
    return table


@cli.command()
def status():
    """Show registered groups, users and the report destination."""
    async def _status(pool):
        from yummyecho import __version__
        from yummyecho.db.models import list_groups, list_users, get_setting
        from yummyecho.db.store import REPORT_GROUP_KEY

        groups = await list_groups()
        users = await list_users()
        report_group = await get_setting(REPORT_GROUP_KEY)

        summary = Table(title=f"YummyEcho Status v{__version__}", show_header=False, padding=(0, 2))
        summary.add_column("Key", style="bold")
        summary.add_column("Value")
        summary.add_row("Database", "[green]Connected[/green]")
        summary.add_row("Groups", f"{sum(1 for g in groups if g['is_activated'])} activated / {len(groups)}")
        summary.add_row("Users", f"{sum(1 for u in users if u['is_activated'])} activated / {len(users)}")
        summary.add_row("Report group", report_group or "[red]none[/red]")
        console.print(summary)

        if groups:
            console.print(build_records_table("Groups", "group_id", groups))
        if users:
            console.print(build_records_table("Users", "user_id", users))

    try:
        run_with_db(_status)
    except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        console.print(f"[red]Database error: {e}[/red]")
        raise click.exceptions.Exit(1)
