"""Privilege check — who counts as a group administrator.

Privileged means holding the administrator or owner role in the group
where the command was issued. The check fails closed outside groups and
never guesses when the platform cannot be asked.
"""

import logging

from .communication import messages
from .communication.platform import MessagingPlatform
from .errors import AuthorizationDenied, DeliveryError

logger = logging.getLogger("yummyecho.security")

GROUP_CHAT_TYPES = frozenset({"group", "supergroup"})

# "creator" is Telegram's wire name for the owner role
PRIVILEGED_ROLES = frozenset({"administrator", "creator", "owner"})


def is_group_chat(chat_type: str) -> bool:
    return chat_type in GROUP_CHAT_TYPES


async def is_privileged(
    platform: MessagingPlatform,
    chat_type: str,
    chat_id: int,
    user_id: int,
) -> bool:
    """Check whether a user is an administrator or owner of a group chat.

    Args:
        platform: Platform used to query the membership role
        chat_type: Type of the chat the command came from
        chat_id: Chat the command came from
        user_id: Caller

    Returns:
        True for administrator/owner in a group, False otherwise.

    Raises:
        DeliveryError: The role query failed. Callers must report this
            separately from a plain "not privileged" answer.
    """
    if not is_group_chat(chat_type):
        return False
    role = await platform.get_member_role(chat_id, user_id)
    privileged = role in PRIVILEGED_ROLES
    logger.debug(f"Privilege check chat={chat_id} user={user_id} role={role} -> {privileged}")
    return privileged


async def require_privileged(
    platform: MessagingPlatform,
    chat_type: str,
    chat_id: int,
    user_id: int,
) -> None:
    """Raise unless the caller is privileged in this group.

    Raises:
        AuthorizationDenied: Caller is not an administrator/owner, or the
            chat is not a group.
        DeliveryError: The role could not be fetched.
    """
    try:
        privileged = await is_privileged(platform, chat_type, chat_id, user_id)
    except DeliveryError as e:
        logger.warning(f"Privilege check failed for user {user_id} in chat {chat_id}: {e}")
        raise DeliveryError(str(e), reply=messages.PRIVILEGE_CHECK_FAILED) from e
    if not privileged:
        logger.info(f"Privileged command refused: user {user_id} in chat {chat_id} ({chat_type})")
        raise AuthorizationDenied(reply=messages.ADMINS_ONLY)
