"""cico-bot: attendance portal reports and bulk channel export over Telegram."""

__version__ = "0.3.0"
