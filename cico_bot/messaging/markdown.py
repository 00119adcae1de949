# cico_bot/messaging/markdown.py
"""Escaping helpers for the Bot API markup dialects."""

import re

# MarkdownV2 reserved characters
MARKDOWN_V2_SPECIAL = r"_*[]()~`>#+-=|{}.!"
_MARKDOWN_V2_RE = re.compile(f"([{re.escape(MARKDOWN_V2_SPECIAL)}])")
# Backslash escaping a reserved character
_ESCAPE_RE = re.compile(f"\\\\(?=[{re.escape(MARKDOWN_V2_SPECIAL)}])")

# Legacy Markdown reserved characters
_MARKDOWN_V1_RE = re.compile(r"([_*`\[])")


def escape_markdown_v2(text: object) -> str:
    """Backslash-escape every MarkdownV2 reserved character."""
    if text is None or text == "":
        return ""
    return _MARKDOWN_V2_RE.sub(r"\\\1", str(text))


def escape_markdown(text: object) -> str:
    """Backslash-escape legacy Markdown reserved characters."""
    if text is None or text == "":
        return ""
    return _MARKDOWN_V1_RE.sub(r"\\\1", str(text))


def strip_markup(text: str) -> str:
    """Plain-text rendering: drop escapes and every reserved character.

    Only backslashes that escape a reserved character are removed; any other
    backslash is part of the text.
    """
    return _MARKDOWN_V2_RE.sub("", _ESCAPE_RE.sub("", text))
