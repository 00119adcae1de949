"""Bot command surface and application wiring."""

from .app import create_application, create_store, run_bot
from .handlers import BotHandlers, LoginSession, LoginStep, ProgressMessage

__all__ = [
    "create_application",
    "create_store",
    "run_bot",
    "BotHandlers",
    "LoginSession",
    "LoginStep",
    "ProgressMessage",
]
