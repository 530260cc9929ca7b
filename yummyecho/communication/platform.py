"""Messaging platform interface and its Telegram implementation.

Core logic (gate, echo, reports, broadcast) only talks to
``MessagingPlatform`` so it can run against fakes in tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from telegram import Bot
from telegram.error import TelegramError

from ..errors import DeliveryError

logger = logging.getLogger("yummyecho.platform")


class MessagingPlatform(ABC):
    """Outbound side of the chat platform."""

    @abstractmethod
    async def send_text(self, chat_id: int, text: str, reply_to_message_id: Optional[int] = None) -> int:
        """Send a text message. Returns the new message id."""
        ...

    @abstractmethod
    async def send_photo(self, chat_id: int, file_id: str, caption: Optional[str] = None) -> int:
        ...

    @abstractmethod
    async def send_video(self, chat_id: int, file_id: str, caption: Optional[str] = None) -> int:
        ...

    @abstractmethod
    async def delete_message(self, chat_id: int, message_id: int) -> None:
        ...

    @abstractmethod
    async def get_member_role(self, chat_id: int, user_id: int) -> str:
        """Membership status of a user in a chat ('creator', 'administrator', 'member', ...)."""
        ...


class TelegramPlatform(MessagingPlatform):
    """MessagingPlatform over a python-telegram-bot ``Bot``.

    Every ``TelegramError`` is re-raised as ``DeliveryError`` so callers
    never depend on telegram exception classes.
    """

    def __init__(self, bot: Bot):
        self._bot = bot

    async def send_text(self, chat_id: int, text: str, reply_to_message_id: Optional[int] = None) -> int:
        try:
            message = await self._bot.send_message(
                chat_id=chat_id,
                text=text,
                reply_to_message_id=reply_to_message_id,
            )
        except TelegramError as e:
            raise DeliveryError(f"send_message to {chat_id} failed: {e}") from e
        return message.message_id

    async def send_photo(self, chat_id: int, file_id: str, caption: Optional[str] = None) -> int:
        try:
            message = await self._bot.send_photo(chat_id=chat_id, photo=file_id, caption=caption)
        except TelegramError as e:
            raise DeliveryError(f"send_photo to {chat_id} failed: {e}") from e
        return message.message_id

    async def send_video(self, chat_id: int, file_id: str, caption: Optional[str] = None) -> int:
        try:
            message = await self._bot.send_video(chat_id=chat_id, video=file_id, caption=caption)
        except TelegramError as e:
            raise DeliveryError(f"send_video to {chat_id} failed: {e}") from e
        return message.message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self._bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramError as e:
            raise DeliveryError(f"delete_message {chat_id}/{message_id} failed: {e}") from e

    async def get_member_role(self, chat_id: int, user_id: int) -> str:
        try:
            member = await self._bot.get_chat_member(chat_id=chat_id, user_id=user_id)
        except TelegramError as e:
            raise DeliveryError(f"get_chat_member {chat_id}/{user_id} failed: {e}") from e
        return str(member.status)
