"""YummyEcho — Main entry point."""

import asyncio
import logging
import os

from .config import load_settings
from .communication.telegram import TelegramChannel
from .db.connection import close_db, init_db
from .db.store import PostgresActivationStore
from .registry import ActivationMirror

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("yummyecho")


def setup_logging(log_file: str, debug: bool = False):
    """Log to stderr and to the configured file."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=_log_format,
        handlers=[
            logging.StreamHandler(),                                          # stderr (console)
            logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"),
        ],
    )
    # httpx logs every Telegram poll at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run(debug: bool = False):
    """Main run loop."""
    settings = load_settings()
    if debug:
        settings.debug = True
    setup_logging(settings.log_file, settings.debug)

    if not settings.telegram_bot_token:
        logger.error("No Telegram bot token configured. Set YUMMYECHO_TELEGRAM_BOT_TOKEN in .env.")
        return

    channel = None
    pool = None
    try:
        pool = await init_db(settings.database_url)
        store = PostgresActivationStore()

        mirror = ActivationMirror()
        mirror.load(await store.list_activated_group_ids())

        channel = TelegramChannel(
            settings.telegram_bot_token,
            store,
            mirror,
            activation_password=settings.activation_password,
            report_cleanup_seconds=settings.report_cleanup_seconds,
        )
        await channel.start()

        # Keep alive
        logger.info("YummyEcho is running. Press Ctrl+C to stop.")
        while True:
            await asyncio.sleep(1)

    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    except Exception as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}", exc_info=True)
    finally:
        if channel:
            await channel.stop()
        if pool:
            await close_db()
        logger.info("YummyEcho stopped.")


def main():
    """Entry point."""
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
