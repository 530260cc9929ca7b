"""Channel-agnostic error classification for user-facing messages."""

import asyncio

import asyncpg
from telegram.error import BadRequest, Forbidden, NetworkError, RetryAfter, TelegramError, TimedOut

from ..errors import YummyEchoError


def classify_error(e: Exception) -> str:
    """Classify any exception into a user-friendly message.

    Returns a short string suitable for sending directly to the chat
    that triggered the failing update.
    """
    # 1: Our own taxonomy carries its reply text
    if isinstance(e, YummyEchoError):
        return e.reply

    # 2-5: Telegram API errors that escaped the platform adapter
    if isinstance(e, RetryAfter):
        return "Telegram está limitando los mensajes. Espera un momento e inténtalo de nuevo."
    if isinstance(e, Forbidden):
        return "No tengo permisos suficientes para hacer eso en este chat."
    if isinstance(e, BadRequest):
        return "Telegram rechazó la solicitud."
    if isinstance(e, (TimedOut, asyncio.TimeoutError)):
        return "La solicitud tardó demasiado. Inténtalo de nuevo."
    if isinstance(e, NetworkError):
        return "No se pudo conectar con Telegram. Inténtalo de nuevo más tarde."
    if isinstance(e, TelegramError):
        return "Error de Telegram. Inténtalo de nuevo más tarde."

    # 6: Database errors that escaped the store adapter
    if isinstance(e, (asyncpg.PostgresError, asyncpg.InterfaceError)):
        return "No se pudo acceder a la base de datos. Inténtalo de nuevo más tarde."

    # 7: Fallback, type name kept for the logs
    type_name = type(e).__name__
    return f"Algo salió mal ({type_name}). Revisa los registros."
