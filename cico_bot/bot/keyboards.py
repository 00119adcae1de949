# cico_bot/bot/keyboards.py
"""Inline keyboards and their callback data."""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

TODAY_REPORT = "today_report"
LAST_REPORTS = "last_10_reports"
GET_ALL_DATA = "get_all_data"
CANCEL_DUMP = "cancel_dump"
STRETCH_ON = "set_stretch_on"
STRETCH_OFF = "set_stretch_off"


def attendance_menu() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton("📅 Today's Report", callback_data=TODAY_REPORT)],
            [InlineKeyboardButton("🔟 Last 10 Reports", callback_data=LAST_REPORTS)],
            [InlineKeyboardButton("📥 Get All Data", callback_data=GET_ALL_DATA)],
        ]
    )


def cancel_upload() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton("❌ Cancel Upload", callback_data=CANCEL_DUMP)]]
    )


def stretch_settings() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton("✅ Enable Stretching", callback_data=STRETCH_ON)],
            [InlineKeyboardButton("❌ Disable Stretching", callback_data=STRETCH_OFF)],
        ]
    )


def settings_text(stretch_enabled: bool) -> str:
    status = "✅ Enabled (x2.0 Vertical)" if stretch_enabled else "❌ Disabled (Original)"
    return f"⚙️ *Image Settings*\n\nVertical Stretching: {status}"
