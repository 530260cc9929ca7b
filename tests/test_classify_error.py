"""Tests for classify_error()."""

import asyncio

import asyncpg
import pytest
from telegram.error import BadRequest, Forbidden, NetworkError, RetryAfter, TelegramError, TimedOut

from yummyecho.communication import messages
from yummyecho.communication.errors import classify_error
from yummyecho.errors import (
    AuthorizationDenied,
    DeliveryError,
    StoreError,
    ValidationError,
    YummyEchoError,
)


# ── Own taxonomy ─────────────────────────────────────────────

class TestOwnErrors:
    def test_default_replies_per_class(self):
        replies = {
            cls: classify_error(cls("x"))
            for cls in (YummyEchoError, ValidationError, AuthorizationDenied, StoreError, DeliveryError)
        }
        assert len(set(replies.values())) == len(replies)

    def test_explicit_reply_wins(self):
        assert classify_error(ValidationError("bad", reply=messages.ECHO_USAGE)) == messages.ECHO_USAGE

    def test_store_and_wrong_password_are_distinct(self):
        assert classify_error(StoreError("down")) != messages.PASSWORD_WRONG

    def test_message_defaults_to_reply(self):
        assert str(AuthorizationDenied()) == AuthorizationDenied.reply


# ── Telegram errors ──────────────────────────────────────────

class TestTelegramErrors:
    def test_retry_after(self):
        assert "limitando" in classify_error(RetryAfter(5))

    def test_forbidden(self):
        assert "permisos" in classify_error(Forbidden("bot was blocked"))

    def test_bad_request(self):
        assert "rechazó" in classify_error(BadRequest("message not found"))

    def test_timeouts(self):
        assert "demasiado" in classify_error(TimedOut())
        assert "demasiado" in classify_error(asyncio.TimeoutError())

    def test_network(self):
        assert "conectar" in classify_error(NetworkError("reset"))

    def test_generic_telegram(self):
        assert "Telegram" in classify_error(TelegramError("weird"))


# ── Fallbacks ────────────────────────────────────────────────

class TestFallbacks:
    def test_database(self):
        assert "base de datos" in classify_error(asyncpg.InterfaceError("pool closed"))

    @pytest.mark.parametrize("exc", [ValueError("x"), KeyError("k")])
    def test_unknown_includes_type(self, exc):
        assert type(exc).__name__ in classify_error(exc)
