"""Pytest configuration and shared fixtures.

Core logic runs against in-memory fakes of the activation store and the
messaging platform, so no database or network is needed.
"""

import itertools
from dataclasses import dataclass, field
from typing import Optional

import pytest

from yummyecho.communication.platform import MessagingPlatform
from yummyecho.db.store import ActivationStore
from yummyecho.errors import DeliveryError, StoreError
from yummyecho.registry import ActivationMirror


class FakeStore(ActivationStore):
    """Dict-backed ActivationStore that counts writes and can be made to fail."""

    def __init__(self):
        self.groups: dict[int, bool] = {}
        self.users: dict[int, bool] = {}
        self.report_group: Optional[int] = None
        self.writes: list[tuple[str, int]] = []
        self.reads = 0
        self.fail_reads = False
        self.fail_writes = False

    def _read(self):
        self.reads += 1
        if self.fail_reads:
            raise StoreError("read failed")

    def _write(self, op: str, key: int):
        if self.fail_writes:
            raise StoreError(f"{op} failed")
        self.writes.append((op, key))

    async def get_group_activated(self, group_id: int) -> bool:
        self._read()
        return self.groups.get(group_id, False)

    async def activate_group(self, group_id: int) -> None:
        self._write("activate_group", group_id)
        self.groups[group_id] = True

    async def register_group(self, group_id: int) -> None:
        self._write("register_group", group_id)
        self.groups.setdefault(group_id, False)

    async def list_activated_group_ids(self) -> list[int]:
        self._read()
        return [gid for gid, active in self.groups.items() if active]

    async def get_user_activated(self, user_id: int) -> bool:
        self._read()
        return self.users.get(user_id, False)

    async def activate_user(self, user_id: int) -> None:
        self._write("activate_user", user_id)
        self.users[user_id] = True

    async def register_user(self, user_id: int) -> bool:
        self._write("register_user", user_id)
        if user_id in self.users:
            return False
        self.users[user_id] = False
        return True

    async def list_user_ids(self) -> list[int]:
        self._read()
        return list(self.users)

    async def get_report_group(self) -> Optional[int]:
        self._read()
        return self.report_group

    async def set_report_group(self, group_id: int) -> None:
        self._write("set_report_group", group_id)
        self.report_group = group_id


@dataclass
class Sent:
    kind: str
    chat_id: int
    payload: str
    caption: Optional[str] = None
    reply_to: Optional[int] = None
    message_id: int = 0


@dataclass
class FakePlatform(MessagingPlatform):
    """Records every outbound call. Chats in ``unreachable`` raise DeliveryError."""

    roles: dict[tuple[int, int], str] = field(default_factory=dict)
    sent: list[Sent] = field(default_factory=list)
    deleted: list[tuple[int, int]] = field(default_factory=list)
    unreachable: set[int] = field(default_factory=set)
    undeletable: set[int] = field(default_factory=set)
    role_query_fails: bool = False
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1000))

    def _record(self, kind, chat_id, payload, caption=None, reply_to=None) -> int:
        if chat_id in self.unreachable:
            raise DeliveryError(f"chat {chat_id} unreachable")
        message_id = next(self._ids)
        self.sent.append(Sent(kind, chat_id, payload, caption, reply_to, message_id))
        return message_id

    async def send_text(self, chat_id, text, reply_to_message_id=None) -> int:
        return self._record("text", chat_id, text, reply_to=reply_to_message_id)

    async def send_photo(self, chat_id, file_id, caption=None) -> int:
        return self._record("photo", chat_id, file_id, caption=caption)

    async def send_video(self, chat_id, file_id, caption=None) -> int:
        return self._record("video", chat_id, file_id, caption=caption)

    async def delete_message(self, chat_id, message_id) -> None:
        if message_id in self.undeletable:
            raise DeliveryError(f"message {message_id} cannot be deleted")
        self.deleted.append((chat_id, message_id))

    async def get_member_role(self, chat_id, user_id) -> str:
        if self.role_query_fails:
            raise DeliveryError("getChatMember failed")
        return self.roles.get((chat_id, user_id), "member")

    def texts_to(self, chat_id: int) -> list[str]:
        return [s.payload for s in self.sent if s.chat_id == chat_id and s.kind == "text"]


GROUP_ID = -100123
ADMIN_ID = 11
MEMBER_ID = 22
USER_ID = 33


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def platform():
    p = FakePlatform()
    p.roles[(GROUP_ID, ADMIN_ID)] = "administrator"
    return p


@pytest.fixture
def mirror():
    return ActivationMirror()
