"""Database query helpers for YummyEcho tables."""

from typing import Optional
from .connection import get_connection


# ============================================================
# GROUPS
# ============================================================

async def get_group(group_id: int) -> Optional[dict]:
    """Find a group by its Telegram chat id."""
    async with get_connection() as conn:
        row = await conn.fetchrow("""
            SELECT group_id, is_activated, registered_at, activated_at
            FROM groups WHERE group_id = $1
        """, group_id)
        return dict(row) if row else None


async def register_group(group_id: int):
    """Insert a group row if missing. Never touches the activation flag."""
    async with get_connection() as conn:
        await conn.execute("""
            INSERT INTO groups (group_id) VALUES ($1)
            ON CONFLICT (group_id) DO NOTHING
        """, group_id)


async def activate_group(group_id: int):
    """Mark a group as activated (upsert)."""
    async with get_connection() as conn:
        await conn.execute("""
            INSERT INTO groups (group_id, is_activated, activated_at) VALUES ($1, true, NOW())
            ON CONFLICT (group_id) DO UPDATE SET is_activated = true, activated_at = NOW()
        """, group_id)


async def list_groups(activated_only: bool = False) -> list[dict]:
    """List groups, oldest first."""
    async with get_connection() as conn:
        query = "SELECT group_id, is_activated, registered_at, activated_at FROM groups"
        if activated_only:
            query += " WHERE is_activated = true"
        query += " ORDER BY registered_at"
        rows = await conn.fetch(query)
        return [dict(row) for row in rows]


# ============================================================
# USERS
# ============================================================

async def get_user(user_id: int) -> Optional[dict]:
    """Find a private user by Telegram user id."""
    async with get_connection() as conn:
        row = await conn.fetchrow("""
            SELECT user_id, is_activated, registered_at, activated_at
            FROM users WHERE user_id = $1
        """, user_id)
        return dict(row) if row else None


async def register_user(user_id: int) -> bool:
    """Insert a user row if missing.

    Returns:
        True if the user was new, False if already registered.
    """
    async with get_connection() as conn:
        result = await conn.execute("""
            INSERT INTO users (user_id) VALUES ($1)
            ON CONFLICT (user_id) DO NOTHING
        """, user_id)
        return result == "INSERT 0 1"


async def activate_user(user_id: int):
    """Mark a user as activated (upsert)."""
    async with get_connection() as conn:
        await conn.execute("""
            INSERT INTO users (user_id, is_activated, activated_at) VALUES ($1, true, NOW())
            ON CONFLICT (user_id) DO UPDATE SET is_activated = true, activated_at = NOW()
        """, user_id)


async def list_users(activated_only: bool = False) -> list[dict]:
    """List private users, oldest first."""
    async with get_connection() as conn:
        query = "SELECT user_id, is_activated, registered_at, activated_at FROM users"
        if activated_only:
            query += " WHERE is_activated = true"
        query += " ORDER BY registered_at"
        rows = await conn.fetch(query)
        return [dict(row) for row in rows]


# ============================================================
# SETTINGS
# ============================================================

async def get_setting(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get a setting value by key."""
    async with get_connection() as conn:
        row = await conn.fetchrow("SELECT value FROM settings WHERE key = $1", key)
        return row["value"] if row else default


async def set_setting(key: str, value: str):
    """Set a setting value (upsert)."""
    async with get_connection() as conn:
        await conn.execute("""
            INSERT INTO settings (key, value) VALUES ($1, $2)
            ON CONFLICT (key) DO UPDATE SET value = $2, updated_at = NOW()
        """, key, value)
