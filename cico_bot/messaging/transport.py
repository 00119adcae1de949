# cico_bot/messaging/transport.py
"""
Messaging transport interface and Bot API adapter.

The adapter translates python-telegram-bot errors into the cico-bot taxonomy
so the sender never depends on library exception types:

    RetryAfter               -> Throttled(retry_after)
    BadRequest (entities)    -> MarkupRejected
    any other TelegramError  -> TransportError
"""

import logging
from abc import ABC, abstractmethod
from datetime import timedelta

from telegram import Bot, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.error import BadRequest, RetryAfter, TelegramError

from cico_bot.errors import MarkupRejected, Throttled, TransportError

logger = logging.getLogger(__name__)

MARKDOWN_V2 = ParseMode.MARKDOWN_V2
MARKDOWN = ParseMode.MARKDOWN

# BadRequest descriptions that mean "your markup is broken"
_MARKUP_ERRORS = ("can't parse entities", "can't find end of")


class MessagingTransport(ABC):
    """Outbound messaging operations used by the core."""

    @abstractmethod
    async def send_text(
        self,
        chat_id: int | str,
        text: str,
        parse_mode: str | None = None,
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> int:
        """
        Send a text message.

        Returns:
            Message id of the sent message

        Raises:
            Throttled, MarkupRejected, TransportError
        """

    @abstractmethod
    async def send_photo(
        self,
        chat_id: int | str,
        photo: bytes | str,
        caption: str | None = None,
        parse_mode: str | None = None,
    ) -> int:
        """
        Send a photo from raw bytes or a URL.

        Returns:
            Message id of the sent message

        Raises:
            Throttled, MarkupRejected, TransportError
        """

    @abstractmethod
    async def edit_message(
        self,
        chat_id: int | str,
        message_id: int,
        text: str,
        parse_mode: str | None = None,
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> None:
        """
        Replace the text of an existing message.

        Raises:
            Throttled, MarkupRejected, TransportError
        """


def _retry_after_seconds(value: int | float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def translate_error(error: TelegramError) -> Exception:
    """Map a python-telegram-bot error onto the cico-bot taxonomy."""
    if isinstance(error, RetryAfter):
        return Throttled(_retry_after_seconds(error.retry_after), error.message)
    if isinstance(error, BadRequest) and any(
        marker in error.message.lower() for marker in _MARKUP_ERRORS
    ):
        return MarkupRejected(error.message)
    return TransportError(f"{type(error).__name__}: {error.message}")


class TelegramTransport(MessagingTransport):
    """
    MessagingTransport backed by a python-telegram-bot Bot.

    Request timeouts are configured on the Bot's HTTPXRequest.
    """

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send_text(self, chat_id, text, parse_mode=None, reply_markup=None) -> int:
        try:
            message = await self._bot.send_message(
                chat_id=chat_id, text=text, parse_mode=parse_mode, reply_markup=reply_markup
            )
        except TelegramError as e:
            raise translate_error(e) from e
        return message.message_id

    async def send_photo(self, chat_id, photo, caption=None, parse_mode=None) -> int:
        try:
            message = await self._bot.send_photo(
                chat_id=chat_id, photo=photo, caption=caption, parse_mode=parse_mode
            )
        except TelegramError as e:
            raise translate_error(e) from e
        return message.message_id

    async def edit_message(
        self, chat_id, message_id, text, parse_mode=None, reply_markup=None
    ) -> None:
        try:
            await self._bot.edit_message_text(
                text=text,
                chat_id=chat_id,
                message_id=message_id,
                parse_mode=parse_mode,
                reply_markup=reply_markup,
            )
        except TelegramError as e:
            raise translate_error(e) from e
