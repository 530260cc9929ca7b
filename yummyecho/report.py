"""Report relay — private submissions forwarded to the registered group.

A report is either '/reporte <text>' or a photo/video whose caption starts
with the report keyword. After the relay and the confirmation reply
succeed, one cleanup task is scheduled that deletes the user's message and
the confirmation after a fixed delay. Cleanup tasks are fire-once and
independent of each other; deletion failures are only logged.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .communication import messages
from .communication.platform import MessagingPlatform
from .db.store import ActivationStore
from .errors import AuthorizationDenied, DeliveryError, ValidationError

logger = logging.getLogger("yummyecho.report")

# Fixed delay before a relayed report and its confirmation are removed
CLEANUP_DELAY_SECONDS = 60.0

# Caption form: optional slash, keyword, optional @botname, optional body
REPORT_CAPTION_RE = re.compile(
    r"^\s*/?reporte(?:@\w+)?(?:\s+(?P<body>.*?))?\s*$",
    re.IGNORECASE | re.DOTALL,
)


@dataclass
class ReportTicket:
    source_chat_id: int
    source_message_id: int
    confirmation_message_id: int
    delete_at: datetime


def match_report_caption(caption: Optional[str]) -> Optional[str]:
    """Return the report body of a caption, or None if it is not a report.

    The body may be an empty string ('/reporte' alone).
    """
    if not caption:
        return None
    match = REPORT_CAPTION_RE.match(caption)
    if not match:
        return None
    return (match.group("body") or "").strip()


def format_report(sender_name: str, body: str) -> str:
    """Attributed text/caption posted in the moderation group."""
    header = messages.REPORT_HEADER.format(user=sender_name)
    return f"{header}\n{body}" if body else header


class ReportRelay:
    """Forwards reports into the registered group and cleans up afterwards."""

    def __init__(
        self,
        store: ActivationStore,
        platform: MessagingPlatform,
        cleanup_delay: float = CLEANUP_DELAY_SECONDS,
    ):
        self._store = store
        self._platform = platform
        self._cleanup_delay = cleanup_delay
        self._pending: set[asyncio.Task] = set()

    @property
    def pending_cleanups(self) -> int:
        return len(self._pending)

    async def _destination(self, chat_type: str) -> int:
        if chat_type != "private":
            raise AuthorizationDenied("report outside private chat", reply=messages.PRIVATE_ONLY)
        group_id = await self._store.get_report_group()
        if group_id is None:
            raise ValidationError("no report group registered", reply=messages.NO_GROUP_REGISTERED)
        return group_id

    async def relay_text(
        self,
        *,
        chat_type: str,
        chat_id: int,
        message_id: int,
        sender_name: str,
        body: str,
    ) -> ReportTicket:
        """Relay a text report.

        Raises:
            AuthorizationDenied: Not a private chat.
            ValidationError: No registered group, or empty body.
            StoreError: Destination lookup failed.
            DeliveryError: Relay or confirmation failed (no cleanup scheduled).
        """
        group_id = await self._destination(chat_type)
        body = (body or "").strip()
        if not body:
            raise ValidationError("empty text report", reply=messages.REPORT_USAGE)

        await self._platform.send_text(group_id, format_report(sender_name, body))
        logger.info(f"Text report from chat {chat_id} relayed to group {group_id}")
        return await self._confirm(chat_id, message_id, messages.REPORT_TEXT_SENT)

    async def relay_media(
        self,
        *,
        chat_type: str,
        chat_id: int,
        message_id: int,
        sender_name: str,
        caption: Optional[str],
        kind: str,
        file_id: str,
    ) -> ReportTicket:
        """Relay a captioned photo or video report.

        Args:
            kind: 'photo' or 'video'
            file_id: Platform file id (largest photo size for photos)

        Raises:
            Same as relay_text, plus ValidationError for a caption that is
            not a report or an unknown media kind.
        """
        group_id = await self._destination(chat_type)
        body = match_report_caption(caption)
        if body is None:
            raise ValidationError(f"caption is not a report: {caption!r}", reply=messages.REPORT_USAGE)

        text = format_report(sender_name, body)
        if kind == "photo":
            await self._platform.send_photo(group_id, file_id, caption=text)
            confirmation = messages.REPORT_PHOTO_SENT
        elif kind == "video":
            await self._platform.send_video(group_id, file_id, caption=text)
            confirmation = messages.REPORT_VIDEO_SENT
        else:
            raise ValidationError(f"unsupported media kind {kind!r}", reply=messages.REPORT_USAGE)

        logger.info(f"{kind.capitalize()} report from chat {chat_id} relayed to group {group_id}")
        return await self._confirm(chat_id, message_id, confirmation)

    async def _confirm(self, chat_id: int, message_id: int, text: str) -> ReportTicket:
        confirmation_id = await self._platform.send_text(chat_id, text, reply_to_message_id=message_id)
        ticket = ReportTicket(
            source_chat_id=chat_id,
            source_message_id=message_id,
            confirmation_message_id=confirmation_id,
            delete_at=datetime.now(timezone.utc) + timedelta(seconds=self._cleanup_delay),
        )
        task = asyncio.create_task(self._cleanup(ticket), name=f"report-cleanup:{chat_id}:{message_id}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return ticket

    async def _cleanup(self, ticket: ReportTicket):
        await asyncio.sleep(self._cleanup_delay)
        for message_id in (ticket.source_message_id, ticket.confirmation_message_id):
            try:
                await self._platform.delete_message(ticket.source_chat_id, message_id)
            except DeliveryError as e:
                logger.warning(f"Report cleanup: could not delete {ticket.source_chat_id}/{message_id}: {e}")
            except Exception as e:
                logger.error(f"Report cleanup error for {ticket.source_chat_id}/{message_id}: {e}", exc_info=True)
        logger.debug(f"Report cleanup done for chat {ticket.source_chat_id}")
