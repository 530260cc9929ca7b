"""Tests for the group privilege check."""

import pytest

from conftest import ADMIN_ID, GROUP_ID, MEMBER_ID
from yummyecho.communication import messages
from yummyecho.errors import AuthorizationDenied, DeliveryError
from yummyecho.security import is_privileged, require_privileged


class TestIsPrivileged:
    async def test_administrator(self, platform):
        assert await is_privileged(platform, "supergroup", GROUP_ID, ADMIN_ID)

    async def test_owner_roles(self, platform):
        platform.roles[(GROUP_ID, 5)] = "creator"
        platform.roles[(GROUP_ID, 6)] = "owner"
        assert await is_privileged(platform, "group", GROUP_ID, 5)
        assert await is_privileged(platform, "group", GROUP_ID, 6)

    async def test_member_not_privileged(self, platform):
        assert not await is_privileged(platform, "group", GROUP_ID, MEMBER_ID)

    async def test_private_chat_fails_closed(self, platform):
        """Outside groups the platform is not even asked."""
        platform.role_query_fails = True
        assert not await is_privileged(platform, "private", ADMIN_ID, ADMIN_ID)
        assert not await is_privileged(platform, "channel", GROUP_ID, ADMIN_ID)

    async def test_query_error_propagates(self, platform):
        platform.role_query_fails = True
        with pytest.raises(DeliveryError):
            await is_privileged(platform, "group", GROUP_ID, ADMIN_ID)


class TestRequirePrivileged:
    async def test_admin_passes(self, platform):
        await require_privileged(platform, "group", GROUP_ID, ADMIN_ID)

    async def test_member_denied(self, platform):
        with pytest.raises(AuthorizationDenied) as exc:
            await require_privileged(platform, "group", GROUP_ID, MEMBER_ID)
        assert exc.value.reply == messages.ADMINS_ONLY

    async def test_query_error_distinct_from_denial(self, platform):
        platform.role_query_fails = True
        with pytest.raises(DeliveryError) as exc:
            await require_privileged(platform, "group", GROUP_ID, ADMIN_ID)
        assert exc.value.reply == messages.PRIVILEGE_CHECK_FAILED
        assert not isinstance(exc.value, AuthorizationDenied)
