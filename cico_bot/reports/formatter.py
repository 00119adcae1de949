# cico_bot/reports/formatter.py
"""Attendance record -> MarkdownV2 text plus processed images."""

import logging
from dataclasses import dataclass, field

from cico_bot.messaging.markdown import escape_markdown_v2
from cico_bot.messaging.sender import PhotoPayload
from cico_bot.models.records import AttendanceRecord

from .images import ImageProcessor

logger = logging.getLogger(__name__)

MAX_REPORT_CHARS = 900
ELLIPSIS = "..."

CHECK_IN_CAPTION = "Check-In Image"
CHECK_OUT_CAPTION = "Check-Out Image"


@dataclass(frozen=True)
class FormattedReport:
    """Everything needed to deliver one record."""

    text: str
    media: list[PhotoPayload] = field(default_factory=list)


def format_duration(seconds: float) -> str:
    """5400 -> '1h 30m'."""
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def truncate_report(text: str, limit: int = MAX_REPORT_CHARS) -> str:
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def render_record_text(record: AttendanceRecord) -> str:
    """
    Build the MarkdownV2 message body.

    Timeline lines are a block quote; the work report is a monospace span.
    """
    lines = [
        f">📅 *Date:* {escape_markdown_v2(record.date)}",
        f">⏰ *Check\\-In:* {escape_markdown_v2(record.check_in_time)}",
    ]
    if record.check_out_time:
        lines.append(f">🛑 *Check\\-Out:* {escape_markdown_v2(record.check_out_time)}")
    if record.working_hour_seconds is not None:
        lines.append(f">⏳ *Duration:* {format_duration(record.working_hour_seconds)}")

    text = "\n".join(lines) + "\n"
    if record.work_report:
        report = escape_markdown_v2(truncate_report(record.work_report))
        text += f"\n📝 *Work Report:*\n\n`{report}`"
    return text


class RecordFormatter:
    """Turns an AttendanceRecord into a FormattedReport."""

    def __init__(self, images: ImageProcessor) -> None:
        self._images = images

    async def format(self, record: AttendanceRecord, stretch_images: bool = True) -> FormattedReport:
        """
        Format a record and process its images.

        Args:
            record: Record to render
            stretch_images: Apply the vertical stretch to images

        Returns:
            FormattedReport with check-in image first, then check-out
        """
        media: list[PhotoPayload] = []
        for ref, caption in (
            (record.check_in_image, CHECK_IN_CAPTION),
            (record.check_out_image, CHECK_OUT_CAPTION),
        ):
            if ref:
                data = await self._images.process(ref, stretch_images)
                media.append(PhotoPayload(data=data, caption=caption))

        return FormattedReport(text=render_record_text(record), media=media)
