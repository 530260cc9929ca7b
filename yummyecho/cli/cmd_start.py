"""Start command."""

import asyncio
import click

from . import cli
from .shared import console


@cli.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def start(debug):
    """Start the YummyEcho bot."""
    from yummyecho.main import run
    console.print("[bold blue]Starting YummyEcho...[/bold blue]")
    try:
        asyncio.run(run(debug=debug))
    except KeyboardInterrupt:
        console.print("[yellow]Stopped.[/yellow]")
