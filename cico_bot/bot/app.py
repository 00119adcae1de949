# cico_bot/bot/app.py
"""
Application wiring.

Builds the python-telegram-bot Application and every service it needs,
and ties their startup/shutdown to the Application lifecycle.
"""

import logging

from telegram.ext import Application, ApplicationBuilder

from cico_bot.config.loader import default_db_path
from cico_bot.config.schema import CicoBotConfig
from cico_bot.export.controller import ExportController
from cico_bot.messaging.sender import RateLimitedSender
from cico_bot.messaging.transport import TelegramTransport
from cico_bot.models.sqlite_store import SQLiteSettingsStore
from cico_bot.models.store import SettingsStore
from cico_bot.portal.client import PortalClient
from cico_bot.reports.delivery import ReportDelivery
from cico_bot.reports.formatter import RecordFormatter
from cico_bot.reports.images import ImageProcessor

from .handlers import BotHandlers

logger = logging.getLogger(__name__)


def create_store(config: CicoBotConfig) -> SQLiteSettingsStore:
    """Settings store at the configured (or default) path."""
    db_path = config.storage.db_path or str(default_db_path())
    return SQLiteSettingsStore(db_path)


def create_application(
    config: CicoBotConfig, store: SettingsStore | None = None
) -> Application:
    """
    Build a ready-to-run Application.

    Args:
        config: Root configuration (bot token and portal URL required)
        store: Optional settings store (defaults to SQLite)

    Raises:
        ValueError: If the bot token or portal base URL is missing
    """
    if not config.telegram.bot_token:
        raise ValueError("Bot token not configured (set BOT_TOKEN or telegram.bot_token)")
    if not config.portal.base_url:
        raise ValueError("Portal URL not configured (set BASE_URL or portal.base_url)")

    timeout = config.telegram.request_timeout
    settings_store = store or create_store(config)
    portal = PortalClient(config.portal.base_url, timeout=config.portal.timeout)
    images = ImageProcessor(
        timeout=config.images.download_timeout,
        stretch_factor=config.images.stretch_factor,
    )

    async def _post_init(application: Application) -> None:
        await settings_store.initialize()
        logger.info("Settings store initialized")

    async def _post_shutdown(application: Application) -> None:
        await portal.aclose()
        await images.aclose()
        await settings_store.close()
        logger.info("Shutdown complete")

    application = (
        ApplicationBuilder()
        .token(config.telegram.bot_token)
        .connect_timeout(timeout)
        .read_timeout(timeout)
        .write_timeout(timeout)
        .post_init(_post_init)
        .post_shutdown(_post_shutdown)
        .build()
    )

    transport = TelegramTransport(application.bot)
    sender = RateLimitedSender(
        transport,
        max_attempts=config.export.max_send_attempts,
        padding=config.export.throttle_padding,
        default_retry_after=config.export.default_retry_after,
    )
    delivery = ReportDelivery(sender, RecordFormatter(images))
    exports = ExportController(
        delivery,
        progress_every=config.export.progress_every,
        inter_record_delay=config.export.inter_record_delay,
    )

    BotHandlers(
        store=settings_store,
        portal=portal,
        images=images,
        delivery=delivery,
        exports=exports,
        transport=transport,
        export_config=config.export,
    ).register(application)

    return application


def run_bot(config: CicoBotConfig) -> None:
    """Run long polling until SIGINT/SIGTERM."""
    application = create_application(config)
    logger.info("🤖 CICO Bot is running!")
    application.run_polling()
