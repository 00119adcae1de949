"""
Data models for cico-bot.

Provides portal value types, per-user settings storage, and export job tracking.
"""

from cico_bot.models.jobs import CancelResult, ExportJob, ExportResult, ExportStatus
from cico_bot.models.records import AttendanceRecord, CourseInfo, StudentProfile
from cico_bot.models.settings import InMemorySettingsStore, UserSettings
from cico_bot.models.sqlite_store import SQLiteSettingsStore, import_json_database
from cico_bot.models.store import SettingsStore

__all__ = [
    # Portal values
    "AttendanceRecord",
    "CourseInfo",
    "StudentProfile",
    # Settings
    "UserSettings",
    "SettingsStore",
    "InMemorySettingsStore",
    "SQLiteSettingsStore",
    "import_json_database",
    # Export tracking
    "ExportJob",
    "ExportResult",
    "ExportStatus",
    "CancelResult",
]
