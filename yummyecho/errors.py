"""Error taxonomy shared by the gate, the command handlers and the adapters.

Callers match on the exception type instead of inspecting message strings.
Every error carries a ``reply``: the short Spanish text sent back to the
chat that triggered the failing event.
"""

from typing import Optional


class YummyEchoError(Exception):
    """Base class for all YummyEcho errors."""

    reply = "Ocurrió un error inesperado. Inténtalo de nuevo más tarde."

    def __init__(self, message: str = "", reply: Optional[str] = None):
        super().__init__(message or self.reply)
        if reply is not None:
            self.reply = reply


class ValidationError(YummyEchoError):
    """Bad user input — reported inline, never retried."""

    reply = "Entrada no válida."


class AuthorizationDenied(YummyEchoError):
    """The gate or the privilege check rejected the caller."""

    reply = "Solo administradores o propietarios pueden usar este comando."


class StoreError(YummyEchoError):
    """Persistence I/O failed. State is left unchanged."""

    reply = "No se pudo acceder a la base de datos. Inténtalo de nuevo más tarde."


class DeliveryError(YummyEchoError):
    """A platform send/delete/role query failed."""

    reply = "No se pudo completar la operación en Telegram. Inténtalo de nuevo más tarde."
