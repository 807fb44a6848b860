# resthours/logbook.py
"""Read-only logbook summaries for the dashboard."""

from typing import Iterable, Optional
import datetime

from .models import DutyLogEntry, LogbookStatus


def has_any_logs(entries: Optional[Iterable[DutyLogEntry]]) -> bool:
    if entries is None:
        return False
    return any(True for _ in entries)


def last_log_date(entries: Optional[Iterable[DutyLogEntry]]) -> Optional[datetime.date]:
    """Most recent nominal date, or None for an empty logbook."""
    if entries is None:
        return None
    return max((e.date for e in entries), default=None)


def logbook_status(entries: Optional[Iterable[DutyLogEntry]]) -> LogbookStatus:
    # logging is continuous; there is no COMPLETED state
    if not has_any_logs(entries):
        return LogbookStatus.NOT_STARTED
    return LogbookStatus.IN_PROGRESS
