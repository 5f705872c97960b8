"""Telegram messenger adapter using python-telegram-bot v21+."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from telegram import ReplyKeyboardMarkup, Update
from telegram.error import TelegramError
from telegram.ext import Application, MessageHandler as TGMessageHandler, filters

from taskmaster_bot.core.errors import TransportError
from taskmaster_bot.core.types import Platform
from taskmaster_bot.log import get_logger
from taskmaster_bot.messenger.base import MessengerAdapter
from taskmaster_bot.messenger.models import IncomingMessage, OutgoingMessage

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 4000


class TelegramAdapter(MessengerAdapter):
    """Telegram bot adapter using python-telegram-bot long polling."""

    def __init__(self, bot_id: str, config: dict):
        super().__init__(bot_id, config)
        self._app: Application | None = None  # type: ignore[type-arg]

    @property
    def platform_name(self) -> str:
        return Platform.TELEGRAM

    async def connect(self) -> None:
        """Initialize the bot for sending only (no update polling)."""
        token = self.config.get("token", "")
        if not token:
            raise ValueError(f"Telegram bot token not configured for bot '{self.bot_id}'")

        # Updates from different chats may run concurrently; the engine
        # serializes updates of the same chat.
        self._app = Application.builder().token(token).concurrent_updates(True).build()

        # Commands (/start, /cancel, /complete ...) and plain text share one handler.
        self._app.add_handler(TGMessageHandler(filters.TEXT, self._on_telegram_message))
        await self._app.initialize()

    async def start(self) -> None:
        await self.connect()
        await self._app.start()  # type: ignore[union-attr]
        await self._app.updater.start_polling(drop_pending_updates=True)  # type: ignore[union-attr]
        logger.info("telegram_adapter_started", bot_id=self.bot_id)

    async def stop(self) -> None:
        if not self._app:
            return
        if self._app.updater and self._app.updater.running:
            await self._app.updater.stop()
        if self._app.running:
            await self._app.stop()
        await self._app.shutdown()
        self._app = None
        logger.info("telegram_adapter_stopped", bot_id=self.bot_id)

    async def send_message(self, message: OutgoingMessage) -> None:
        if not self._app or not self._app.bot:
            raise TransportError("Telegram adapter is not started")

        try:
            chat_id = int(message.chat_id)
        except ValueError as e:
            raise TransportError(f"Invalid Telegram chat id: {message.chat_id!r}") from e

        reply_markup: ReplyKeyboardMarkup | None = None
        if message.keyboard:
            reply_markup = ReplyKeyboardMarkup(
                [list(row) for row in message.keyboard],
                resize_keyboard=True,
                selective=True,
            )

        chunks = split_message(message.text)
        try:
            for i, chunk in enumerate(chunks):
                # Keyboard goes with the last chunk so it shows under the full reply.
                await self._app.bot.send_message(
                    chat_id=chat_id,
                    text=chunk,
                    reply_markup=reply_markup if i == len(chunks) - 1 else None,
                )
        except TelegramError as e:
            raise TransportError(f"Telegram send failed: {e}") from e

    async def _on_telegram_message(self, update: Update, context: Any) -> None:
        """Handle an incoming Telegram text message."""
        if not update.message or not update.message.text:
            return
        if not self._message_callback:
            return

        msg = update.message
        incoming = IncomingMessage(
            platform=Platform.TELEGRAM,
            bot_id=self.bot_id,
            chat_id=str(msg.chat_id),
            user_id=str(msg.from_user.id) if msg.from_user else str(msg.chat_id),
            user_display_name=(
                msg.from_user.full_name if msg.from_user else "Unknown"
            ),
            text=msg.text,
            timestamp=msg.date or datetime.now(timezone.utc),
        )

        try:
            await self._message_callback(incoming)
        except Exception as e:
            logger.error("telegram_handler_error", error=str(e), chat_id=str(msg.chat_id))


def split_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split a message into chunks that fit within Telegram's limit."""
    if len(text) <= max_length:
        return [text]

    chunks = []
    while text:
        if len(text) <= max_length:
            chunks.append(text)
            break
        # Prefer splitting at a newline
        split_pos = text.rfind("\n", 0, max_length)
        if split_pos <= 0:
            split_pos = max_length
        chunks.append(text[:split_pos])
        text = text[split_pos:].lstrip("\n")
    return chunks
