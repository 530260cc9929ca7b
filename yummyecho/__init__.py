"""YummyEcho — group moderation and echo bot for Telegram."""

__version__ = "0.3.0"
