"""Authorization gate — runs ahead of every command handler.

Two stages, evaluated in fixed order:

1. Private-chat stage: the user must be activated, except for a small
   allow-list of commands that a brand-new user needs.
2. Group-chat stage: the group must be activated, except for the
   password command and /start.

Each stage performs exactly one authoritative store read per event. The
in-memory mirror is refreshed after a successful group read but never
consulted for the decision itself.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .communication import messages
from .db.store import ActivationStore
from .errors import StoreError
from .registry import ActivationMirror
from .security import is_group_chat

logger = logging.getLogger("yummyecho.gate")

# Every command the bot answers; anything else is not gated
KNOWN_COMMANDS = frozenset({
    "start", "help", "solicitar_activacion", "clave", "activar",
    "eco", "eco_stop", "cadena", "reporte",
})
PRIVATE_EXEMPT_COMMANDS = frozenset({"start", "help", "solicitar_activacion"})
GROUP_EXEMPT_COMMANDS = frozenset({"start", "clave"})


@dataclass
class InboundEvent:
    """The parts of an inbound update the gate needs."""

    chat_type: str
    chat_id: int
    user_id: Optional[int]
    command: Optional[str] = None   # lower-case, no slash, no @botname


@dataclass
class GateDecision:
    allowed: bool
    reply: Optional[str] = None
    stage: Optional[str] = None     # 'private' | 'group' when denied

    @classmethod
    def allow(cls) -> "GateDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, stage: str, reply: str) -> "GateDecision":
        return cls(allowed=False, reply=reply, stage=stage)


def extract_command(text: Optional[str], bot_username: Optional[str] = None) -> Optional[str]:
    """Return the command name of a '/command@bot args' text, or None.

    A command addressed to another bot ('/cmd@OtherBot') is not ours
    and yields None. Without a known bot username any suffix is accepted.
    """
    if not text or not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0][1:]
    name, _, target = head.partition("@")
    if target and bot_username and target.lower() != bot_username.lower():
        return None
    return name.lower() or None


def command_tail(text: Optional[str]) -> str:
    """Everything after the command word, newlines and spacing intact."""
    parts = (text or "").split(maxsplit=1)
    return parts[1] if len(parts) > 1 else ""


class AuthorizationGate:
    """Allow/deny decision for an inbound event, before any handler runs."""

    def __init__(self, store: ActivationStore, mirror: ActivationMirror):
        self._store = store
        self._mirror = mirror

    async def check(self, event: InboundEvent) -> GateDecision:
        """Decide whether the event may reach its handler.

        Never raises: store failures become a denial carrying the
        operational-failure reply.
        """
        # Plain messages and unknown commands have no handler to protect
        if event.command not in KNOWN_COMMANDS:
            return GateDecision.allow()

        try:
            if event.chat_type == "private":
                return await self._private_stage(event)
            if is_group_chat(event.chat_type):
                return await self._group_stage(event)
        except StoreError as e:
            logger.error(f"Gate store read failed for chat {event.chat_id}: {e}")
            return GateDecision.deny("store", e.reply)

        return GateDecision.allow()

    async def _private_stage(self, event: InboundEvent) -> GateDecision:
        if event.command in PRIVATE_EXEMPT_COMMANDS:
            return GateDecision.allow()
        if event.user_id is None:
            return GateDecision.deny("private", messages.USER_NOT_ACTIVATED)

        if await self._store.get_user_activated(event.user_id):
            return GateDecision.allow()

        logger.info(f"Gate: /{event.command} denied for unactivated user {event.user_id}")
        return GateDecision.deny("private", messages.USER_NOT_ACTIVATED)

    async def _group_stage(self, event: InboundEvent) -> GateDecision:
        if event.command in GROUP_EXEMPT_COMMANDS:
            return GateDecision.allow()

        if await self._store.get_group_activated(event.chat_id):
            await self._mirror.mark_activated(event.chat_id)
            return GateDecision.allow()

        logger.info(f"Gate: /{event.command} denied in unactivated group {event.chat_id}")
        return GateDecision.deny("group", messages.GROUP_NOT_ACTIVATED)
