"""Process-wide registries keyed by chat id.

``KeyedLocks`` serializes work per key (per group id). ``ActivationMirror``
is the read-optimized, advisory copy of group activation flags; the gate
never trusts it for access decisions.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Hashable, Iterable

logger = logging.getLogger("yummyecho.registry")


class KeyedLocks:
    """One ``asyncio.Lock`` per key, created on first use."""

    def __init__(self):
        self._locks: dict[Hashable, asyncio.Lock] = {}

    def get(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable):
        """Hold the lock for ``key`` for the duration of the block."""
        async with self.get(key):
            yield


class ActivationMirror:
    """In-memory set of activated group ids.

    Loaded from the store at startup and refreshed best-effort by the gate
    and by successful activations. Writes for one group are serialized.
    """

    def __init__(self):
        self._activated: set[int] = set()
        self._locks = KeyedLocks()

    def load(self, group_ids: Iterable[int]):
        """Replace the mirror contents with a fresh read from the store."""
        self._activated = set(group_ids)
        logger.info(f"Activation mirror loaded: {len(self._activated)} activated group(s)")

    @asynccontextmanager
    async def transition(self, group_id: int):
        """Hold the group's lock across a read-check-write activation sequence.

        Inside the block use ``record_activated``; ``mark_activated`` would
        wait on the same lock.
        """
        async with self._locks.hold(group_id):
            yield

    def record_activated(self, group_id: int):
        """Mirror an activation. Caller holds ``transition(group_id)``."""
        self._activated.add(group_id)

    async def mark_activated(self, group_id: int):
        async with self.transition(group_id):
            self.record_activated(group_id)

    def is_activated(self, group_id: int) -> bool:
        """Advisory only — use ActivationStore for access decisions."""
        return group_id in self._activated

    def __len__(self) -> int:
        return len(self._activated)
