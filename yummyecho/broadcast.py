"""Broadcast fan-out — one message to every registered private user."""

import logging

from .communication import messages
from .communication.platform import MessagingPlatform
from .db.store import ActivationStore
from .errors import DeliveryError, ValidationError
from .security import require_privileged

logger = logging.getLogger("yummyecho.broadcast")


async def broadcast(
    store: ActivationStore,
    platform: MessagingPlatform,
    *,
    chat_type: str,
    chat_id: int,
    caller_id: int,
    message: str,
) -> int:
    """Deliver a message to all registered private users, one at a time.

    Recipients that fail (blocked the bot, deleted account, ...) are
    skipped silently.

    Returns:
        Number of successful deliveries

    Raises:
        AuthorizationDenied: Caller is not a group administrator/owner.
        ValidationError: Empty message.
        StoreError: The user list could not be read.
    """
    await require_privileged(platform, chat_type, chat_id, caller_id)
    message = (message or "").strip()
    if not message:
        raise ValidationError("empty broadcast", reply=messages.BROADCAST_USAGE)

    user_ids = await store.list_user_ids()
    text = messages.BROADCAST_BODY.format(message=message)

    delivered = 0
    for user_id in user_ids:
        try:
            await platform.send_text(user_id, text)
            delivered += 1
        except DeliveryError as e:
            logger.debug(f"Broadcast to {user_id} failed: {e}")

    logger.info(f"Broadcast from group {chat_id}: {delivered}/{len(user_ids)} delivered")
    return delivered
