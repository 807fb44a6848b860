# resthours/rolling.py
"""
Worst-case watch load in any 24h window, not only calendar days.

The load as a function of window start is piecewise linear and can only turn
downwards where the window start meets an interval start or the window end
meets an interval end, so those are the only anchors tried. For logs that do
not overlap each other the interval starts alone already reach the maximum.
O(n^2) in the number of intervals, fine for per-cadet volumes.
"""

from typing import Iterable, List, Sequence
import datetime

from .models import DutyCategory, DutyLogEntry, Interval
from .normalizer import normalize_all
from .timeutils import ONE_DAY, floor_minutes

ROLLING_WINDOW = ONE_DAY


def watch_seconds_in_window(intervals: Iterable[Interval],
                            window_start: datetime.datetime,
                            window_end: datetime.datetime) -> datetime.timedelta:
    """Summed overlap of every interval with [window_start, window_end)."""
    total = datetime.timedelta(0)
    for interval in intervals:
        total += interval.overlap_with(window_start, window_end)
    return total


def window_anchors(intervals: Sequence[Interval],
                   window: datetime.timedelta = ROLLING_WINDOW) -> List[datetime.datetime]:
    """Window starts worth trying: each interval start, and each interval end minus the window."""
    anchors = {i.start for i in intervals}
    anchors.update(i.end - window for i in intervals)
    return sorted(anchors)


def max_watch_in_window(intervals: Sequence[Interval],
                        window: datetime.timedelta = ROLLING_WINDOW) -> datetime.timedelta:
    best = datetime.timedelta(0)
    for anchor in window_anchors(intervals, window):
        load = watch_seconds_in_window(intervals, anchor, anchor + window)
        if load > best:
            best = load
    return best


def max_watch_minutes_24h(entries: Iterable[DutyLogEntry]) -> int:
    """
    Maximum whole watch minutes inside any 24h window.
    Bridge, engine and port watches count; daily work does not. No intervals -> 0.
    """
    intervals = sorted(normalize_all(entries, exclude=(DutyCategory.DAILY,)), key=lambda i: i.start)
    if not intervals:
        return 0
    return floor_minutes(max_watch_in_window(intervals))
