# tests/unit/test_sender.py
"""
Tests for RateLimitedSender and Bot API error translation.

Tests cover:
    - Throttle back-off (retry-after + padding) and attempt budget
    - Plain-text fallback on markup rejection
    - Non-retryable transport errors propagate unchanged
    - python-telegram-bot error mapping
"""

import pytest
from telegram.error import BadRequest, NetworkError, RetryAfter

from cico_bot.errors import (
    DeliveryFailed,
    MarkupRejected,
    RateLimitExceeded,
    Throttled,
    TransportError,
)
from cico_bot.messaging.sender import PhotoPayload, RateLimitedSender, TextPayload
from cico_bot.messaging.transport import MARKDOWN_V2, MessagingTransport, translate_error


class ScriptedTransport(MessagingTransport):
    """Raises queued exceptions in order, then succeeds."""

    def __init__(self, *failures):
        self.failures = list(failures)
        self.calls = []

    def _next(self, call):
        self.calls.append(call)
        if self.failures:
            raise self.failures.pop(0)
        return len(self.calls)

    async def send_text(self, chat_id, text, parse_mode=None, reply_markup=None):
        return self._next(("text", chat_id, text, parse_mode))

    async def send_photo(self, chat_id, photo, caption=None, parse_mode=None):
        return self._next(("photo", chat_id, photo, caption))

    async def edit_message(self, chat_id, message_id, text, parse_mode=None, reply_markup=None):
        self._next(("edit", chat_id, message_id, text))


class RecordingSleep:
    """Collects requested delays instead of sleeping."""

    def __init__(self):
        self.delays = []

    async def sleep(self, seconds):
        self.delays.append(seconds)


def _sender(transport, **kwargs):
    recorder = RecordingSleep()
    return RateLimitedSender(transport, sleep=recorder.sleep, **kwargs), recorder


@pytest.mark.asyncio
async def test_send_text_success_first_try():
    transport = ScriptedTransport()
    sender, sleep = _sender(transport)

    message_id = await sender.send_text("chan", "hello")

    assert message_id == 1
    assert transport.calls == [("text", "chan", "hello", MARKDOWN_V2)]
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_throttled_once_waits_retry_after_plus_padding():
    transport = ScriptedTransport(Throttled(2))
    sender, sleep = _sender(transport)

    await sender.send_text("chan", "hello")

    assert len(transport.calls) == 2
    assert sleep.delays == [3.0]


@pytest.mark.asyncio
async def test_throttled_without_retry_after_uses_default():
    transport = ScriptedTransport(Throttled(0))
    sender, sleep = _sender(transport, padding=1.0, default_retry_after=10.0)

    await sender.send_text("chan", "hello")

    assert sleep.delays == [11.0]


@pytest.mark.asyncio
async def test_throttled_every_attempt_raises_rate_limit_exceeded():
    transport = ScriptedTransport(Throttled(1), Throttled(1), Throttled(4))
    sender, sleep = _sender(transport, max_attempts=3)

    with pytest.raises(RateLimitExceeded) as exc_info:
        await sender.send_text("chan", "hello")

    assert exc_info.value.attempts == 3
    assert exc_info.value.retry_after == 4
    assert len(transport.calls) == 3
    # No sleep after the final attempt
    assert sleep.delays == [2.0, 2.0]


@pytest.mark.asyncio
async def test_photo_throttled_then_sent():
    transport = ScriptedTransport(Throttled(5))
    sender, sleep = _sender(transport)

    await sender.send("chan", PhotoPayload(data=b"img", caption="Check-In Image"))

    assert [c[0] for c in transport.calls] == ["photo", "photo"]
    assert sleep.delays == [6.0]


@pytest.mark.asyncio
async def test_markup_rejected_falls_back_to_plain_text():
    transport = ScriptedTransport(MarkupRejected("can't parse entities"))
    sender, _ = _sender(transport)

    await sender.send("chan", TextPayload("*Date:* 2024\\-01\\-05"))

    assert transport.calls[0] == ("text", "chan", "*Date:* 2024\\-01\\-05", MARKDOWN_V2)
    assert transport.calls[1] == ("text", "chan", "Date: 20240105", None)


@pytest.mark.asyncio
async def test_fallback_failure_raises_delivery_failed():
    transport = ScriptedTransport(MarkupRejected("bad"), TransportError("boom"))
    sender, _ = _sender(transport)

    with pytest.raises(DeliveryFailed):
        await sender.send_text("chan", "*x*")

    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_plain_text_rejected_raises_delivery_failed():
    transport = ScriptedTransport(MarkupRejected("bad"))
    sender, _ = _sender(transport)

    with pytest.raises(DeliveryFailed):
        await sender.send_text("chan", "x", parse_mode=None)

    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_photo_caption_rejected_raises_delivery_failed():
    transport = ScriptedTransport(MarkupRejected("bad caption"))
    sender, _ = _sender(transport)

    with pytest.raises(DeliveryFailed):
        await sender.send_photo("chan", b"img", caption="x")


@pytest.mark.asyncio
async def test_transport_error_propagates_without_retry():
    transport = ScriptedTransport(TransportError("chat not found"))
    sender, sleep = _sender(transport)

    with pytest.raises(TransportError):
        await sender.send_text("chan", "hello")

    assert len(transport.calls) == 1
    assert sleep.delays == []


def test_translate_retry_after():
    error = translate_error(RetryAfter(7))
    assert isinstance(error, Throttled)
    assert error.retry_after == 7.0


def test_translate_markup_bad_request():
    error = translate_error(BadRequest("Can't parse entities: can't find end of bold entity"))
    assert isinstance(error, MarkupRejected)


def test_translate_other_bad_request():
    error = translate_error(BadRequest("Chat not found"))
    assert isinstance(error, TransportError)
    assert "Chat not found" in str(error)


def test_translate_network_error():
    assert isinstance(translate_error(NetworkError("connection reset")), TransportError)
