"""Shared utilities for YummyEcho CLI commands."""

import asyncio

from rich.console import Console

console = Console()


def run_with_db(coro_fn):
    """Run ``coro_fn(pool)`` with the database pool open, closing it afterwards."""
    async def _runner():
        from yummyecho.config import load_settings
        from yummyecho.db.connection import init_db, close_db

        settings = load_settings()
        pool = await init_db(settings.database_url)
        try:
            return await coro_fn(pool)
        finally:
            await close_db()

    return asyncio.run(_runner())
