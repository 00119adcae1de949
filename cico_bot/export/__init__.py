"""Bulk export pipeline: progress tracking, per-user registry and the controller."""

from .controller import ExportController, StatusSink
from .progress import ProgressSnapshot, format_time, render_progress, snapshot
from .registry import UserRegistry

__all__ = [
    "ExportController",
    "StatusSink",
    "ProgressSnapshot",
    "snapshot",
    "format_time",
    "render_progress",
    "UserRegistry",
]
