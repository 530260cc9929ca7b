"""Group and user activation state machines.

Both are one-way: INACTIVE/PENDING -> ACTIVE. There is no deactivation
path.
"""

import hmac
import logging
from enum import Enum
from typing import Optional

from .communication import messages
from .communication.platform import MessagingPlatform
from .db.store import ActivationStore
from .errors import DeliveryError, StoreError, ValidationError, YummyEchoError
from .registry import ActivationMirror
from .security import require_privileged

logger = logging.getLogger("yummyecho.activation")


class GroupActivation(str, Enum):
    ACTIVATED = "activated"
    ALREADY_ACTIVE = "already_active"
    WRONG_PASSWORD = "wrong_password"


class UserActivation(str, Enum):
    ACTIVATED = "activated"
    ALREADY_ACTIVE = "already_active"
    ACTIVATED_NOT_NOTIFIED = "activated_not_notified"


def parse_user_id(raw: Optional[str]) -> int:
    """Parse a target user id argument.

    Raises:
        ValidationError: Missing or not a positive integer.
    """
    value = (raw or "").strip()
    if not value.isdigit():
        raise ValidationError(f"invalid user id: {raw!r}", reply=messages.ACTIVATE_USAGE)
    try:
        user_id = int(value)
    except ValueError:
        # isdigit() also accepts superscripts and other non-decimal digits
        raise ValidationError(f"invalid user id: {raw!r}", reply=messages.ACTIVATE_USAGE)
    if user_id <= 0:
        raise ValidationError(f"invalid user id: {raw!r}", reply=messages.ACTIVATE_USAGE)
    return user_id


async def enter_password(
    store: ActivationStore,
    mirror: ActivationMirror,
    platform: MessagingPlatform,
    *,
    chat_type: str,
    chat_id: int,
    user_id: int,
    secret: Optional[str],
    expected: Optional[str],
) -> GroupActivation:
    """Handle the group activation password command.

    The privilege check runs before the password is looked at. On a
    correct password for an inactive group the flag is written to the
    store first and only then mirrored in memory.

    Raises:
        AuthorizationDenied: Caller is not a group administrator/owner.
        ValidationError: No password supplied.
        StoreError: Read or write failed (reply distinct from wrong password).
    """
    await require_privileged(platform, chat_type, chat_id, user_id)

    supplied = (secret or "").strip()
    if not supplied:
        raise ValidationError("missing password", reply=messages.PASSWORD_USAGE)
    if not expected:
        logger.error("Activation password is not configured; refusing to activate")
        raise YummyEchoError("activation password not configured", reply=messages.PASSWORD_NOT_CONFIGURED)

    if not hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        logger.info(f"Wrong activation password for group {chat_id} from user {user_id}")
        return GroupActivation.WRONG_PASSWORD

    # Concurrent correct passwords for one group: one write, one ACTIVATED
    async with mirror.transition(chat_id):
        if await store.get_group_activated(chat_id):
            mirror.record_activated(chat_id)
            return GroupActivation.ALREADY_ACTIVE

        try:
            await store.activate_group(chat_id)
        except StoreError as e:
            raise StoreError(str(e), reply=messages.ACTIVATION_STORE_FAILED) from e
        mirror.record_activated(chat_id)

    # Report destination follows the most recently activated group.
    try:
        await store.set_report_group(chat_id)
    except StoreError as e:
        logger.warning(f"Group {chat_id} activated but report destination not updated: {e}")

    logger.info(f"Group {chat_id} activated by user {user_id}")
    return GroupActivation.ACTIVATED


async def activate_user(
    store: ActivationStore,
    platform: MessagingPlatform,
    *,
    chat_type: str,
    chat_id: int,
    caller_id: int,
    raw_target: Optional[str],
) -> tuple[UserActivation, int]:
    """Activate a private user on behalf of a group administrator.

    The congratulation DM is best-effort: if it fails the activation stays
    and the outcome tells the caller the user was not notified.

    Returns:
        Tuple of (outcome, target user id)

    Raises:
        AuthorizationDenied: Caller is not a group administrator/owner.
        ValidationError: Target id malformed (no store access happens).
        StoreError: Read or write failed.
    """
    await require_privileged(platform, chat_type, chat_id, caller_id)
    target_id = parse_user_id(raw_target)

    if await store.get_user_activated(target_id):
        return UserActivation.ALREADY_ACTIVE, target_id

    try:
        await store.activate_user(target_id)
    except StoreError as e:
        raise StoreError(str(e), reply=messages.ACTIVATION_STORE_FAILED) from e
    logger.info(f"User {target_id} activated by {caller_id} in group {chat_id}")

    try:
        await platform.send_text(target_id, messages.USER_CONGRATS)
    except DeliveryError as e:
        logger.warning(f"Activated user {target_id} could not be notified: {e}")
        return UserActivation.ACTIVATED_NOT_NOTIFIED, target_id

    return UserActivation.ACTIVATED, target_id
