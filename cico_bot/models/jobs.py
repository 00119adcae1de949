# cico_bot/models/jobs.py
"""
Export job tracking models.

Internal models (NOT persisted): an ExportJob lives only as long as its
export loop.
"""

import time
from dataclasses import dataclass, field
from enum import Enum

from cico_bot.models.records import AttendanceRecord


class ExportStatus(Enum):
    """Terminal states an export can report without raising."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CancelResult(Enum):
    """Outcome of a cancellation request."""

    CANCELLED = "cancelled"
    NOT_FOUND = "not_found"


@dataclass
class ExportJob:
    """
    Mutable state of one user's running export.

    Owned by ExportController; at most one per user_id.
    """

    user_id: int
    records: tuple[AttendanceRecord, ...]
    destination: str
    started_at: float = field(default_factory=time.monotonic)
    completed: int = 0
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class ExportResult:
    """Summary returned by a finished export."""

    status: ExportStatus
    completed: int
    total: int
    elapsed: float = 0.0
