# cico_bot/messaging/sender.py
"""
Rate-limited outbound sending.

Wraps each transport call with bounded retry on provider throttling, and
falls back to plain text when the provider rejects message markup.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from cico_bot.errors import (
    DeliveryFailed,
    MarkupRejected,
    RateLimitExceeded,
    Throttled,
    TransportError,
)

from .markdown import strip_markup
from .transport import MARKDOWN_V2, MessagingTransport

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class TextPayload:
    """A text message, MarkdownV2 unless told otherwise."""

    text: str
    parse_mode: str | None = MARKDOWN_V2


@dataclass(frozen=True)
class PhotoPayload:
    """A photo as processed bytes or the original URL."""

    data: bytes | str
    caption: str | None = None


class wait_retry_after(wait_base):
    """Wait for the provider's suggested retry-after plus padding."""

    def __init__(self, padding: float = 1.0, default: float = 10.0) -> None:
        self.padding = padding
        self.default = default

    def __call__(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        retry_after = getattr(exc, "retry_after", None) or self.default
        return retry_after + self.padding


class RateLimitedSender:
    """
    Sends text and photo payloads through a MessagingTransport.

    Failure modes:
        - Throttled on every attempt -> RateLimitExceeded
        - Markup rejected, plain-text fallback also fails -> DeliveryFailed
        - Any other transport error -> TransportError (propagated unchanged)
    """

    def __init__(
        self,
        transport: MessagingTransport,
        max_attempts: int = 3,
        padding: float = 1.0,
        default_retry_after: float = 10.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize sender.

        Args:
            transport: Outbound transport
            max_attempts: Total attempts per payload while throttled
            padding: Seconds added to the provider's retry-after
            default_retry_after: Wait used when the provider gives none
            sleep: Awaitable sleep (injected by tests)
        """
        self._transport = transport
        self._max_attempts = max_attempts
        self._padding = padding
        self._default_retry_after = default_retry_after
        self._sleep = sleep

    async def _with_throttle_retry(
        self, call: Callable[[], Awaitable[int]], label: str
    ) -> int:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_retry_after(self._padding, self._default_retry_after),
            retry=retry_if_exception_type(Throttled),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await call()
        except RetryError as e:
            last = e.last_attempt.exception()
            logger.error(f"Giving up on {label} after {self._max_attempts} throttled attempts")
            raise RateLimitExceeded(
                self._max_attempts, getattr(last, "retry_after", None)
            ) from last

    async def send(self, destination: int | str, payload: TextPayload | PhotoPayload) -> int:
        """
        Send one payload.

        Returns:
            Message id of the delivered message
        """
        if isinstance(payload, PhotoPayload):
            return await self.send_photo(destination, payload.data, payload.caption)
        return await self.send_text(destination, payload.text, payload.parse_mode)

    async def send_photo(
        self, destination: int | str, photo: bytes | str, caption: str | None = None
    ) -> int:
        try:
            return await self._with_throttle_retry(
                lambda: self._transport.send_photo(destination, photo, caption=caption),
                "photo",
            )
        except MarkupRejected as e:
            raise DeliveryFailed(f"Photo caption rejected: {e}") from e

    async def send_text(
        self,
        destination: int | str,
        text: str,
        parse_mode: str | None = MARKDOWN_V2,
    ) -> int:
        try:
            return await self._with_throttle_retry(
                lambda: self._transport.send_text(destination, text, parse_mode=parse_mode),
                "message",
            )
        except MarkupRejected as e:
            if parse_mode is None:
                raise DeliveryFailed(f"Plain message rejected: {e}") from e
            logger.warning(f"Markup rejected ({e}), falling back to plain text")

        plain = strip_markup(text)
        try:
            return await self._with_throttle_retry(
                lambda: self._transport.send_text(destination, plain, parse_mode=None),
                "plain message",
            )
        except (MarkupRejected, TransportError) as e:
            raise DeliveryFailed(f"Plain-text fallback failed: {e}") from e
