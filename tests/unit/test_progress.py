# tests/unit/test_progress.py
"""
Tests for export progress rendering.

Tests cover:
    - Percentage bounds and monotonicity
    - 10-cell bar
    - Time formatting and the ETA placeholder
"""

import math

import pytest

from cico_bot.export.progress import (
    BAR_CELLS,
    CALCULATING,
    EMPTY,
    FILLED,
    format_time,
    percent_complete,
    progress_bar,
    render_progress,
    snapshot,
)


def test_percent_is_floored():
    assert percent_complete(1, 3) == 33
    assert percent_complete(2, 3) == 66
    assert percent_complete(3, 3) == 100


def test_percent_monotonic_and_bounded():
    total = 37
    values = [percent_complete(done, total) for done in range(total + 1)]
    assert values[0] == 0
    assert values[-1] == 100
    assert values == sorted(values)
    assert all(0 <= v <= 100 for v in values)


def test_percent_zero_total():
    assert percent_complete(0, 0) == 0


@pytest.mark.parametrize("percent,filled", [(0, 0), (9, 0), (10, 1), (55, 5), (100, 10)])
def test_progress_bar_cells(percent, filled):
    bar = progress_bar(percent)
    assert len(bar) == BAR_CELLS
    assert bar == FILLED * filled + EMPTY * (BAR_CELLS - filled)


def test_progress_bar_clamped():
    assert progress_bar(150) == FILLED * BAR_CELLS
    assert progress_bar(-5) == EMPTY * BAR_CELLS


def test_format_time():
    assert format_time(0) == "0m 0s"
    assert format_time(75.9) == "1m 15s"
    assert format_time(3600) == "60m 0s"


@pytest.mark.parametrize("value", [-1.0, math.inf, math.nan])
def test_format_time_placeholder(value):
    assert format_time(value) == CALCULATING


def test_snapshot_eta_from_average_rate():
    snap = snapshot(completed=5, total=20, started_at=100.0, now=110.0)
    assert snap.percent == 25
    assert snap.elapsed == pytest.approx(10.0)
    # 2s per record, 15 left
    assert snap.eta == pytest.approx(30.0)
    assert snap.remaining == 15


def test_snapshot_nothing_completed():
    snap = snapshot(completed=0, total=4, started_at=0.0, now=0.0)
    assert snap.percent == 0
    assert snap.eta == 0.0
    assert snap.bar == EMPTY * BAR_CELLS


def test_render_progress_contents():
    text = render_progress(snapshot(5, 10, 0.0, 50.0))
    assert "Uploading Attendance Data" in text
    assert "*50%*" in text
    assert "5/10" in text
    assert "*Left:* 5" in text
    assert "0m 50s" in text
