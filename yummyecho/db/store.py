"""Activation store — the durable source of truth for activation flags.

The in-memory mirror in ``registry.py`` is advisory only; anything that
decides access reads through this interface.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Optional

import asyncpg

from ..errors import StoreError
from . import models

logger = logging.getLogger("yummyecho.store")

REPORT_GROUP_KEY = "report_group_id"


class ActivationStore(ABC):
    """Read/write activation records for groups and private users."""

    @abstractmethod
    async def get_group_activated(self, group_id: int) -> bool:
        """Authoritative read of a group's activation flag (False if unknown)."""
        ...

    @abstractmethod
    async def activate_group(self, group_id: int) -> None:
        """Persist ``activated = true`` for a group."""
        ...

    @abstractmethod
    async def register_group(self, group_id: int) -> None:
        """Create the group record (inactive) if it does not exist."""
        ...

    @abstractmethod
    async def list_activated_group_ids(self) -> list[int]:
        ...

    @abstractmethod
    async def get_user_activated(self, user_id: int) -> bool:
        """Authoritative read of a user's activation flag (False if unknown)."""
        ...

    @abstractmethod
    async def activate_user(self, user_id: int) -> None:
        ...

    @abstractmethod
    async def register_user(self, user_id: int) -> bool:
        """Create the user record (inactive). Returns True if it was new."""
        ...

    @abstractmethod
    async def list_user_ids(self) -> list[int]:
        """All registered private users, activated or not."""
        ...

    @abstractmethod
    async def get_report_group(self) -> Optional[int]:
        """The group reports are relayed to, or None if none registered."""
        ...

    @abstractmethod
    async def set_report_group(self, group_id: int) -> None:
        ...


@asynccontextmanager
async def _store_call(operation: str):
    """Convert driver failures into StoreError."""
    try:
        yield
    except (OSError, RuntimeError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        logger.error(f"Store operation '{operation}' failed: {type(e).__name__}: {e}")
        raise StoreError(f"{operation} failed: {e}") from e


class PostgresActivationStore(ActivationStore):
    """ActivationStore backed by the asyncpg pool in ``db.connection``."""

    async def get_group_activated(self, group_id: int) -> bool:
        async with _store_call("get_group_activated"):
            group = await models.get_group(group_id)
        return bool(group and group["is_activated"])

    async def activate_group(self, group_id: int) -> None:
        async with _store_call("activate_group"):
            await models.activate_group(group_id)
        logger.info(f"Group {group_id} activated")

    async def register_group(self, group_id: int) -> None:
        async with _store_call("register_group"):
            await models.register_group(group_id)

    async def list_activated_group_ids(self) -> list[int]:
        async with _store_call("list_activated_group_ids"):
            rows = await models.list_groups(activated_only=True)
        return [row["group_id"] for row in rows]

    async def get_user_activated(self, user_id: int) -> bool:
        async with _store_call("get_user_activated"):
            user = await models.get_user(user_id)
        return bool(user and user["is_activated"])

    async def activate_user(self, user_id: int) -> None:
        async with _store_call("activate_user"):
            await models.activate_user(user_id)
        logger.info(f"User {user_id} activated")

    async def register_user(self, user_id: int) -> bool:
        async with _store_call("register_user"):
            created = await models.register_user(user_id)
        if created:
            logger.info(f"Registered private user {user_id}")
        return created

    async def list_user_ids(self) -> list[int]:
        async with _store_call("list_user_ids"):
            rows = await models.list_users()
        return [row["user_id"] for row in rows]

    async def get_report_group(self) -> Optional[int]:
        async with _store_call("get_report_group"):
            value = await models.get_setting(REPORT_GROUP_KEY)
        return int(value) if value else None

    async def set_report_group(self, group_id: int) -> None:
        async with _store_call("set_report_group"):
            await models.set_setting(REPORT_GROUP_KEY, str(group_id))
        logger.info(f"Report destination set to group {group_id}")
