"""Telegram channel adapter."""

import functools
import logging
from typing import Optional

from telegram import BotCommand, Update
from telegram.ext import (
    Application,
    ApplicationHandlerStop,
    ChatMemberHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    TypeHandler,
    filters,
)

from ..activation import GroupActivation, UserActivation, activate_user, enter_password
from ..broadcast import broadcast
from ..db.store import ActivationStore
from ..errors import DeliveryError, StoreError, YummyEchoError
from ..gate import AuthorizationGate, InboundEvent, command_tail, extract_command
from ..registry import ActivationMirror
from ..report import CLEANUP_DELAY_SECONDS, REPORT_CAPTION_RE, ReportRelay, match_report_caption
from ..scheduler import EchoScheduler, parse_echo_args
from ..security import is_group_chat, require_privileged
from . import messages
from .errors import classify_error
from .platform import MessagingPlatform, TelegramPlatform

logger = logging.getLogger("yummyecho.telegram")

BOT_COMMANDS = [
    ("start", "Registrarte con el bot"),
    ("help", "Lista de comandos"),
    ("solicitar_activacion", "Obtener tu ID para activación"),
    ("reporte", "Enviar un reporte al grupo"),
    ("clave", "Activar el grupo (administradores)"),
    ("activar", "Activar un usuario (administradores)"),
    ("eco", "Repetir un mensaje cada N minutos (administradores)"),
    ("eco_stop", "Detener el eco (administradores)"),
    ("cadena", "Mensaje privado a todos los usuarios (administradores)"),
]


def _replies_errors(handler):
    """Turn YummyEchoError raised by a handler into a reply to the chat."""

    @functools.wraps(handler)
    async def wrapper(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        try:
            await handler(self, update, context)
        except YummyEchoError as e:
            if isinstance(e, StoreError):
                logger.error(f"{handler.__name__}: {e}")
            else:
                logger.info(f"{handler.__name__}: {type(e).__name__}: {e}")
            await self._reply(update, classify_error(e))

    return wrapper


class TelegramChannel:
    """Telegram bot adapter for YummyEcho."""

    def __init__(
        self,
        bot_token: str,
        store: ActivationStore,
        mirror: ActivationMirror,
        activation_password: Optional[str] = None,
        report_cleanup_seconds: float = CLEANUP_DELAY_SECONDS,
    ):
        self.bot_token = bot_token
        self.store = store
        self.mirror = mirror
        self.activation_password = activation_password
        self.report_cleanup_seconds = report_cleanup_seconds
        self.app: Optional[Application] = None
        self.platform: Optional[MessagingPlatform] = None
        self.gate = AuthorizationGate(store, mirror)
        self.echoes: Optional[EchoScheduler] = None
        self.reports: Optional[ReportRelay] = None

    def attach(self, platform: MessagingPlatform):
        """Bind the outbound platform and build the components that use it."""
        self.platform = platform
        self.echoes = EchoScheduler(platform)
        self.reports = ReportRelay(self.store, platform, cleanup_delay=self.report_cleanup_seconds)

    def register_handlers(self, app: Application):
        # Gate runs first for every update; denial stops later groups
        app.add_handler(TypeHandler(Update, self._gate), group=-1)

        app.add_handler(CommandHandler("start", self._cmd_start))
        app.add_handler(CommandHandler("help", self._cmd_help))
        app.add_handler(CommandHandler("solicitar_activacion", self._cmd_request_activation))
        app.add_handler(CommandHandler("clave", self._cmd_password))
        app.add_handler(CommandHandler("activar", self._cmd_activate))
        app.add_handler(CommandHandler("eco", self._cmd_echo))
        app.add_handler(CommandHandler("eco_stop", self._cmd_echo_stop))
        app.add_handler(CommandHandler("cadena", self._cmd_broadcast))
        app.add_handler(CommandHandler("reporte", self._cmd_report))

        # Captioned photo/video reports in private chats
        app.add_handler(MessageHandler(
            filters.ChatType.PRIVATE
            & (filters.PHOTO | filters.VIDEO)
            & filters.CaptionRegex(REPORT_CAPTION_RE),
            self._handle_media_report,
        ))

        # Bot added to a group
        app.add_handler(ChatMemberHandler(
            self._handle_my_chat_member,
            ChatMemberHandler.MY_CHAT_MEMBER,
        ))

        app.add_error_handler(self._handle_error)

    async def start(self):
        """Start the Telegram bot."""
        self.app = (
            Application.builder()
            .token(self.bot_token)
            .build()
        )
        self.attach(TelegramPlatform(self.app.bot))
        self.register_handlers(self.app)

        logger.info("Starting Telegram bot...")
        await self.app.initialize()
        await self.app.start()
        await self.app.updater.start_polling(
            drop_pending_updates=True,
            allowed_updates=[Update.MESSAGE, Update.MY_CHAT_MEMBER],
        )

        # Register bot commands menu (the "/" button in Telegram)
        await self.app.bot.set_my_commands([BotCommand(name, desc) for name, desc in BOT_COMMANDS])
        logger.info("Telegram bot started.")

    async def stop(self):
        """Stop the Telegram bot and every echo timer."""
        if self.echoes:
            await self.echoes.stop_all()
        if self.reports and self.reports.pending_cleanups:
            logger.info(f"{self.reports.pending_cleanups} report cleanup(s) still pending at shutdown")
        if self.app:
            await self.app.updater.stop()
            await self.app.stop()
            await self.app.shutdown()
            logger.info("Telegram bot stopped.")

    # ── Gate ─────────────────────────────────────────────

    @staticmethod
    def build_event(update: Update, bot_username: Optional[str] = None) -> Optional[InboundEvent]:
        """Extract the gate's view of an update, or None for non-message updates."""
        message = update.effective_message
        chat = update.effective_chat
        if message is None or chat is None:
            return None
        user = update.effective_user

        command = extract_command(message.text, bot_username)
        # Captioned media reports are gated like the /reporte command
        if command is None and chat.type == "private" and (message.photo or message.video):
            if match_report_caption(message.caption) is not None:
                command = "reporte"

        return InboundEvent(
            chat_type=chat.type,
            chat_id=chat.id,
            user_id=user.id if user else None,
            command=command,
        )

    async def _gate(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        event = self.build_event(update, context.bot.username)
        if event is None:
            return
        decision = await self.gate.check(event)
        if decision.allowed:
            return
        await self._reply(update, decision.reply)
        raise ApplicationHandlerStop

    # ── Commands ─────────────────────────────────────────

    @_replies_errors
    async def _cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /start: register the user or the group."""
        chat = update.effective_chat
        user = update.effective_user
        if chat.type == "private" and user:
            if await self.store.register_user(user.id):
                logger.info(f"New user registered: {user.id}")
        elif is_group_chat(chat.type):
            await self.store.register_group(chat.id)
        await self._reply(update, messages.WELCOME)

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /help command."""
        await self._reply(update, messages.HELP)

    async def _cmd_request_activation(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        user = update.effective_user
        if user is None:
            return
        await self._reply(update, messages.ACTIVATION_REQUEST.format(user_id=user.id))

    @_replies_errors
    async def _cmd_password(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat = update.effective_chat
        outcome = await enter_password(
            self.store,
            self.mirror,
            self.platform,
            chat_type=chat.type,
            chat_id=chat.id,
            user_id=update.effective_user.id,
            secret=" ".join(context.args or []),
            expected=self.activation_password,
        )
        replies = {
            GroupActivation.ACTIVATED: messages.GROUP_ACTIVATED,
            GroupActivation.ALREADY_ACTIVE: messages.GROUP_ALREADY_ACTIVE,
            GroupActivation.WRONG_PASSWORD: messages.PASSWORD_WRONG,
        }
        await self._reply(update, replies[outcome])

    @_replies_errors
    async def _cmd_activate(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat = update.effective_chat
        args = context.args or []
        outcome, target_id = await activate_user(
            self.store,
            self.platform,
            chat_type=chat.type,
            chat_id=chat.id,
            caller_id=update.effective_user.id,
            raw_target=args[0] if args else None,
        )
        replies = {
            UserActivation.ACTIVATED: messages.USER_ACTIVATED,
            UserActivation.ALREADY_ACTIVE: messages.USER_ALREADY_ACTIVE,
            UserActivation.ACTIVATED_NOT_NOTIFIED: messages.USER_ACTIVATED_NOT_NOTIFIED,
        }
        await self._reply(update, replies[outcome].format(user_id=target_id))

    @_replies_errors
    async def _cmd_echo(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat = update.effective_chat
        await require_privileged(self.platform, chat.type, chat.id, update.effective_user.id)
        minutes, message = parse_echo_args(command_tail(update.effective_message.text))
        await self.echoes.start(chat.id, minutes, message)
        await self._reply(update, messages.ECHO_STARTED.format(minutes=minutes, message=message))

    @_replies_errors
    async def _cmd_echo_stop(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat = update.effective_chat
        await require_privileged(self.platform, chat.type, chat.id, update.effective_user.id)
        stopped = await self.echoes.stop(chat.id)
        await self._reply(update, messages.ECHO_STOPPED if stopped else messages.ECHO_NONE)

    @_replies_errors
    async def _cmd_broadcast(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat = update.effective_chat
        count = await broadcast(
            self.store,
            self.platform,
            chat_type=chat.type,
            chat_id=chat.id,
            caller_id=update.effective_user.id,
            message=command_tail(update.effective_message.text),
        )
        await self._reply(update, messages.BROADCAST_DONE.format(count=count))

    @_replies_errors
    async def _cmd_report(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        message = update.effective_message
        await self.reports.relay_text(
            chat_type=update.effective_chat.type,
            chat_id=update.effective_chat.id,
            message_id=message.message_id,
            sender_name=self._get_display_name(update.effective_user),
            body=command_tail(message.text),
        )

    @_replies_errors
    async def _handle_media_report(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        message = update.effective_message
        if message.photo:
            # Sizes are ordered smallest to largest
            kind, file_id = "photo", message.photo[-1].file_id
        else:
            kind, file_id = "video", message.video.file_id
        await self.reports.relay_media(
            chat_type=update.effective_chat.type,
            chat_id=update.effective_chat.id,
            message_id=message.message_id,
            sender_name=self._get_display_name(update.effective_user),
            caption=message.caption,
            kind=kind,
            file_id=file_id,
        )

    # ── Membership ───────────────────────────────────────

    async def _handle_my_chat_member(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Register a group as report destination when the bot is added to it."""
        member_update = update.my_chat_member
        if not member_update:
            return

        chat = member_update.chat
        if not is_group_chat(chat.type):
            return
        new_status = member_update.new_chat_member.status
        old_status = member_update.old_chat_member.status
        if new_status not in ("member", "administrator") or old_status not in ("left", "kicked"):
            return

        logger.info(f"Bot added to group: {chat.title} ({chat.id})")
        try:
            await self.store.register_group(chat.id)
            await self.store.set_report_group(chat.id)
        except StoreError as e:
            logger.error(f"Could not register group {chat.id}: {e}")
            return

        try:
            await self.platform.send_text(chat.id, messages.GROUP_REGISTERED)
        except DeliveryError as e:
            logger.warning(f"Greeting to group {chat.id} failed: {e}")

    # ── Helpers ──────────────────────────────────────────

    @staticmethod
    def _get_display_name(user) -> str:
        """Name shown in relayed reports."""
        if user is None:
            return "desconocido"
        return user.username or user.first_name or str(user.id)

    async def _reply(self, update: Update, text: str):
        message = update.effective_message
        chat = update.effective_chat
        if chat is None:
            return
        try:
            await self.platform.send_text(
                chat.id,
                text,
                reply_to_message_id=message.message_id if message else None,
            )
        except DeliveryError as e:
            logger.warning(f"Reply to chat {chat.id} failed: {e}")

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors."""
        logger.error(f"Telegram error: {context.error}", exc_info=context.error)
        if isinstance(update, Update) and update.effective_chat:
            await self._reply(update, classify_error(context.error))
