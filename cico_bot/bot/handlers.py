# cico_bot/bot/handlers.py
"""
Bot command and callback handlers.

Thin presentation layer: every handler resolves the user's settings, calls
the portal / delivery / export services, and turns taxonomy errors into
fixed user-facing replies. Provider details only ever reach the logs.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from telegram import Update
from telegram.constants import ChatAction
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from cico_bot.config.schema import ExportConfig
from cico_bot.errors import (
    AlreadyRunning,
    AuthExpired,
    CicoBotError,
    EmptyInput,
    ExportFailed,
    LoginFailed,
)
from cico_bot.export.controller import ExportController
from cico_bot.export.progress import render_progress, snapshot
from cico_bot.export.registry import UserRegistry
from cico_bot.messaging.transport import MARKDOWN, MessagingTransport
from cico_bot.models.jobs import CancelResult, ExportStatus
from cico_bot.models.store import SettingsStore
from cico_bot.portal.client import PortalClient
from cico_bot.reports.delivery import ReportDelivery
from cico_bot.reports.images import ImageProcessor
from cico_bot.reports.profile import render_profile

from . import keyboards

logger = logging.getLogger(__name__)

LOGIN_FIRST = "⚠️ Please /login first."
SESSION_EXPIRED = "❌ Session expired. Please login again using /login."
NO_RECORDS = "ℹ️ No records found."

HELP_TEXT = (
    "👋 *CICO Bot*\n\n"
    "/login - Sign in to the attendance portal\n"
    "/profile - Show your student profile\n"
    "/check - Latest check-in/check-out report\n"
    "/attendance - Reports menu (today, last 10, export all)\n"
    "/settings - Image stretching\n"
    "/dump <channel\\_id> - Channel for \"Get All Data\" uploads\n"
    "/logout - Forget your session"
)


class LoginStep(Enum):
    EMAIL = "email"
    PASSWORD = "password"


@dataclass
class LoginSession:
    """Pending /login wizard state for one user."""

    step: LoginStep = LoginStep.EMAIL
    email: str = ""


class ProgressMessage:
    """StatusSink that edits a progress message, keeping its cancel button."""

    def __init__(self, transport: MessagingTransport, chat_id: int, message_id: int) -> None:
        self._transport = transport
        self.chat_id = chat_id
        self.message_id = message_id

    async def update(self, text: str) -> None:
        await self._transport.edit_message(
            self.chat_id,
            self.message_id,
            text,
            parse_mode=MARKDOWN,
            reply_markup=keyboards.cancel_upload(),
        )

    async def finish(self, text: str) -> bool:
        """Final edit without the cancel button. Best-effort."""
        try:
            await self._transport.edit_message(
                self.chat_id, self.message_id, text, parse_mode=MARKDOWN
            )
        except CicoBotError as e:
            logger.debug(f"Final progress edit failed: {e}")
            return False
        return True


class BotHandlers:
    """
    Command surface of the bot.

    Owns the login wizard registry; running exports are owned by the
    ExportController.
    """

    def __init__(
        self,
        store: SettingsStore,
        portal: PortalClient,
        images: ImageProcessor,
        delivery: ReportDelivery,
        exports: ExportController,
        transport: MessagingTransport,
        export_config: ExportConfig | None = None,
    ) -> None:
        self._store = store
        self._portal = portal
        self._images = images
        self._delivery = delivery
        self._exports = exports
        self._transport = transport
        self._export_config = export_config or ExportConfig()
        self._logins: UserRegistry[LoginSession] = UserRegistry("logins")

    def register(self, application: Application) -> None:
        """Attach all handlers to an Application."""
        application.add_handler(CommandHandler(["start", "help"], self.help))
        application.add_handler(CommandHandler("login", self.login))
        application.add_handler(CommandHandler("logout", self.logout))
        application.add_handler(CommandHandler("profile", self.profile))
        application.add_handler(CommandHandler("check", self.check))
        application.add_handler(CommandHandler("attendance", self.attendance_menu))
        application.add_handler(CommandHandler("settings", self.settings))
        application.add_handler(CommandHandler("dump", self.dump))
        application.add_handler(
            CallbackQueryHandler(self.today_report, pattern=f"^{keyboards.TODAY_REPORT}$")
        )
        # Long-running actions must not block the update queue (cancel has to get through)
        application.add_handler(
            CallbackQueryHandler(
                self.last_reports, pattern=f"^{keyboards.LAST_REPORTS}$", block=False
            )
        )
        application.add_handler(
            CallbackQueryHandler(
                self.get_all_data, pattern=f"^{keyboards.GET_ALL_DATA}$", block=False
            )
        )
        application.add_handler(
            CallbackQueryHandler(self.cancel_dump, pattern=f"^{keyboards.CANCEL_DUMP}$")
        )
        application.add_handler(
            CallbackQueryHandler(
                self.set_stretch, pattern=f"^({keyboards.STRETCH_ON}|{keyboards.STRETCH_OFF})$"
            )
        )
        application.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self.login_wizard_text)
        )
        logger.info("Registered bot handlers")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _reply(self, update: Update, text: str, **kwargs) -> None:
        await update.effective_message.reply_text(text, **kwargs)

    async def _reply_error(self, update: Update, error: Exception, fallback: str) -> None:
        if isinstance(error, AuthExpired):
            await self._reply(update, SESSION_EXPIRED)
            return
        logger.error(
            f"Handler failed for user {update.effective_user.id}: {type(error).__name__}: {error}",
            exc_info=error,
        )
        await self._reply(update, fallback)

    async def _require_token(self, update: Update) -> str | None:
        settings = await self._store.get(update.effective_user.id)
        if not settings.auth_token:
            await self._reply(update, LOGIN_FIRST)
            return None
        return settings.auth_token

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._reply(update, HELP_TEXT, parse_mode=MARKDOWN)

    async def login(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        self._logins.set(update.effective_user.id, LoginSession())
        await self._reply(update, "📧 Please enter your email address:")

    async def login_wizard_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Collect email then password for a pending /login."""
        user_id = update.effective_user.id
        session = self._logins.get(user_id)
        if session is None:
            return

        text = (update.effective_message.text or "").strip()
        if session.step is LoginStep.EMAIL:
            session.email = text
            session.step = LoginStep.PASSWORD
            await self._reply(update, "🔑 Now please enter your password:")
            return

        self._logins.release(user_id)
        await self._reply(update, "🔄 Logging in...")

        # Don't leave the password in the chat history
        try:
            await update.effective_message.delete()
        except TelegramError as e:
            logger.debug(f"Could not delete password message: {e}")

        try:
            token = await self._portal.login(session.email, text)
        except LoginFailed as e:
            if e.invalid_credentials:
                await self._reply(update, "❌ Login failed: Invalid email or password.")
            else:
                logger.warning(f"Login failed for user {user_id}: {e.reason}")
                await self._reply(update, "❌ Login failed. Unexpected response.")
            return
        except Exception as e:
            await self._reply_error(update, e, "❌ An error occurred during login. Please try again.")
            return

        await self._store.save_token(user_id, token)
        logger.info(f"User {user_id} logged in")
        await self._reply(update, "✅ Login successful! You can now use /check and /attendance.")
        await self._send_profile(update, token)

    async def logout(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._store.save_token(update.effective_user.id, None)
        await self._reply(update, "👋 Logged out. Use /login to sign in again.")

    async def profile(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        token = await self._require_token(update)
        if token:
            await self._send_profile(update, token)

    async def _send_profile(self, update: Update, token: str) -> None:
        chat_id = update.effective_chat.id
        try:
            await update.get_bot().send_chat_action(chat_id, ChatAction.TYPING)
            profile = await self._portal.get_profile(token)
            caption = render_profile(profile)

            if profile.profile_pic:
                # Profile pictures have a normal aspect ratio: never stretch
                image = await self._images.process(profile.profile_pic, stretch=False)
                await self._transport.send_photo(chat_id, image, caption=caption, parse_mode=MARKDOWN)
            else:
                await self._transport.send_text(chat_id, caption, parse_mode=MARKDOWN)
        except Exception as e:
            await self._reply_error(update, e, "❌ Failed to load profile details.")

    async def check(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        token = await self._require_token(update)
        if not token:
            return
        try:
            await self._reply(update, "🔄 Fetching latest attendance...")
            records = await self._portal.get_attendance(token, 1)
            if not records:
                await self._reply(update, "ℹ️ No attendance records found for the last 30 days.")
                return
            await self._deliver_to_chat(update, records[:1])
        except Exception as e:
            await self._reply_error(update, e, "❌ An error occurred while fetching data.")

    async def attendance_menu(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._reply(
            update, "📊 *Attendance Menu*", parse_mode=MARKDOWN, reply_markup=keyboards.attendance_menu()
        )

    async def settings(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        settings = await self._store.get(update.effective_user.id)
        await self._reply(
            update,
            keyboards.settings_text(settings.stretch_images),
            parse_mode=MARKDOWN,
            reply_markup=keyboards.stretch_settings(),
        )

    async def dump(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """/dump <channel_id>: where 'Get All Data' uploads go."""
        args = context.args or []
        if len(args) != 1:
            await self._reply(
                update,
                "⚠️ Usage: /dump <channel_id>\nExample: /dump -1001234567890\n\n"
                'This sets the channel where "Get All Data" will upload files.',
            )
            return

        channel_id = args[0]
        try:
            await self._store.set_dump_destination(update.effective_user.id, channel_id)
        except Exception as e:
            await self._reply_error(update, e, "❌ Error saving dump channel.")
            return
        await self._reply(
            update,
            f"✅ Dump channel set to: `{channel_id}`\n\n"
            'Now use "Get All Data" in /attendance menu to upload records there.',
            parse_mode=MARKDOWN,
        )

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    async def set_stretch(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        enabled = query.data == keyboards.STRETCH_ON
        await self._store.set_stretch(update.effective_user.id, enabled)
        await query.answer("Image stretching enabled!" if enabled else "Image stretching disabled!")
        try:
            await query.edit_message_text(
                keyboards.settings_text(enabled),
                parse_mode=MARKDOWN,
                reply_markup=keyboards.stretch_settings(),
            )
        except TelegramError as e:
            # "message is not modified" when the same button is pressed twice
            logger.debug(f"Settings edit skipped: {e}")

    async def today_report(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.callback_query.answer()
        token = await self._require_token(update)
        if not token:
            return
        try:
            await self._reply(update, "🔄 Fetching today's report...")
            records = await self._portal.get_attendance(token, 1)
            if not records:
                await self._reply(update, NO_RECORDS)
                return
            await self._deliver_to_chat(update, records[:1])
        except Exception as e:
            await self._reply_error(update, e, "❌ Error fetching data.")

    async def last_reports(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.callback_query.answer()
        token = await self._require_token(update)
        if not token:
            return
        batch_size = self._export_config.batch_size
        try:
            await self._reply(update, f"🔄 Fetching last {batch_size} reports...")
            records = await self._portal.get_attendance(token, batch_size)
            if not records:
                await self._reply(update, NO_RECORDS)
                return
            await self._deliver_to_chat(update, records)
            await self._reply(update, "✅ All reports sent.")
        except Exception as e:
            await self._reply_error(update, e, "❌ Error fetching data.")

    async def _deliver_to_chat(self, update: Update, records: list) -> None:
        settings = await self._store.get(update.effective_user.id)
        chat_id = update.effective_chat.id
        for record in records:
            if record.check_in_image or record.check_out_image:
                await update.get_bot().send_chat_action(chat_id, ChatAction.UPLOAD_PHOTO)
            await self._delivery.deliver(record, chat_id, settings.stretch_images)

    async def get_all_data(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Export every record, oldest first, to the user's dump channel."""
        await update.callback_query.answer()
        user_id = update.effective_user.id
        chat_id = update.effective_chat.id
        settings = await self._store.get(user_id)

        if not settings.auth_token:
            await self._reply(update, LOGIN_FIRST)
            return
        if not settings.dump_destination:
            await self._reply(
                update, "⚠️ No dump channel set. Use /dump <channel_id> to configure it first."
            )
            return

        reservation = self._exports.reserve(user_id)
        if reservation is None:
            await self._reply(update, "⚠️ A dump process is already running. Please wait or cancel it.")
            return

        try:
            await self._reply(update, "🔄 Fetching all records (Last 10 Years)...")
            records = await self._portal.get_attendance(
                settings.auth_token, self._export_config.bulk_record_limit
            )
            if not records:
                await self._reply(update, NO_RECORDS)
                return

            # Portal returns newest first; channels read best oldest first
            ordered = list(reversed(records))
            initial = render_progress(snapshot(0, len(ordered), 0.0, 0.0))
            message_id = await self._transport.send_text(
                chat_id, initial, parse_mode=MARKDOWN, reply_markup=keyboards.cancel_upload()
            )
            progress = ProgressMessage(self._transport, chat_id, message_id)

            result = await self._exports.start_export(
                user_id,
                ordered,
                settings.dump_destination,
                status_sink=progress,
                stretch_images=settings.stretch_images,
                reservation=reservation,
            )
        except AlreadyRunning:
            await self._reply(update, "⚠️ A dump process is already running. Please wait or cancel it.")
            return
        except EmptyInput:
            await self._reply(update, NO_RECORDS)
            return
        except ExportFailed as e:
            logger.error(f"Bulk upload failed for user {user_id}: {e}")
            await progress.finish(f"❌ *Upload Failed*\n\nCompleted: {e.completed}/{e.total}")
            try:
                await self._reply(update, "❌ Error during bulk upload.")
            except TelegramError as notice_error:
                logger.warning(f"Failure notice failed for user {user_id}: {notice_error}")
            return
        except Exception as e:
            await self._reply_error(update, e, "❌ Error during bulk upload.")
            return
        finally:
            self._exports.release(user_id, reservation)

        if result.status is ExportStatus.CANCELLED:
            await progress.finish(
                f"🚫 *Upload Cancelled*\n\nCompleted: {result.completed}/{result.total}"
            )
            return

        await progress.finish(
            render_progress(snapshot(result.total, result.total, 0.0, result.elapsed))
            + "\n\n✅ *Done!*"
        )
        try:
            await self._reply(update, "✅ Bulk upload complete!")
        except TelegramError as e:
            logger.warning(f"Completion notice failed for user {user_id}: {e}")

    async def cancel_dump(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        if self._exports.cancel(update.effective_user.id) is CancelResult.CANCELLED:
            await query.answer("Stopping upload...")
        else:
            await query.answer("No active upload found.")
