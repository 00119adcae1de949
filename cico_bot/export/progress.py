# cico_bot/export/progress.py
"""
Export progress: percentage, 10-cell bar, elapsed time and ETA.

All values are recomputed from (completed, total, started_at, now); nothing
is stored between updates.
"""

import math
from dataclasses import dataclass

BAR_CELLS = 10
FILLED = "▓"
EMPTY = "░"
CALCULATING = "Calculating..."


@dataclass(frozen=True)
class ProgressSnapshot:
    """Derived progress view."""

    completed: int
    total: int
    percent: int
    bar: str
    elapsed: float
    eta: float

    @property
    def remaining(self) -> int:
        return self.total - self.completed


def percent_complete(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return math.floor(100 * completed / total)


def progress_bar(percent: int) -> str:
    filled = min(BAR_CELLS, max(0, percent // 10))
    return FILLED * filled + EMPTY * (BAR_CELLS - filled)


def snapshot(completed: int, total: int, started_at: float, now: float) -> ProgressSnapshot:
    """
    Compute a progress snapshot.

    Args:
        completed: Records finished so far
        total: Records in the export
        started_at: Clock reading when the export began (seconds)
        now: Current clock reading (seconds)
    """
    percent = percent_complete(completed, total)
    elapsed = now - started_at
    rate = elapsed / completed if completed > 0 else 0.0
    eta = rate * (total - completed)
    return ProgressSnapshot(
        completed=completed,
        total=total,
        percent=percent,
        bar=progress_bar(percent),
        elapsed=elapsed,
        eta=eta,
    )


def format_time(seconds: float) -> str:
    """75.4 -> '1m 15s'; negative or non-finite -> placeholder."""
    if not math.isfinite(seconds) or seconds < 0:
        return CALCULATING
    whole = math.floor(seconds)
    return f"{whole // 60}m {whole % 60}s"


def render_progress(snap: ProgressSnapshot) -> str:
    """Status message body (legacy Markdown)."""
    return (
        "📥 *Uploading Attendance Data*\n\n"
        f"{snap.bar} *{snap.percent}%*\n\n"
        f"✅ *Completed:* {snap.completed}/{snap.total}\n"
        f"⏳ *Left:* {snap.remaining}\n"
        f"⏱ *Time Taken:* {format_time(snap.elapsed)}\n"
        f"🚀 *ETA:* {format_time(snap.eta)}"
    )
