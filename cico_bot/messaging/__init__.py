"""Outbound messaging: transport adapter, markup escaping and rate-limited sending."""

from .markdown import escape_markdown, escape_markdown_v2, strip_markup
from .sender import PhotoPayload, RateLimitedSender, TextPayload
from .transport import MessagingTransport, TelegramTransport, translate_error

__all__ = [
    "MessagingTransport",
    "TelegramTransport",
    "translate_error",
    "RateLimitedSender",
    "TextPayload",
    "PhotoPayload",
    "escape_markdown",
    "escape_markdown_v2",
    "strip_markup",
]
