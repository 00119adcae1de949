"""Record and profile rendering, image processing, and delivery."""

from .delivery import ReportDelivery
from .formatter import (
    FormattedReport,
    RecordFormatter,
    format_duration,
    render_record_text,
    truncate_report,
)
from .images import ImageProcessor, stretch_image
from .profile import render_profile

__all__ = [
    "ImageProcessor",
    "stretch_image",
    "RecordFormatter",
    "FormattedReport",
    "format_duration",
    "truncate_report",
    "render_record_text",
    "ReportDelivery",
    "render_profile",
]
