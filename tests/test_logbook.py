# tests/test_logbook.py
import datetime

from resthours.logbook import has_any_logs, last_log_date, logbook_status
from resthours.models import BridgeWatchEntry, DailyWorkEntry, LogbookStatus


def test_empty_logbook():
    assert has_any_logs([]) is False
    assert has_any_logs(None) is False
    assert last_log_date([]) is None
    assert logbook_status(None) == LogbookStatus.NOT_STARTED


def test_logbook_in_progress():
    entries = [
        DailyWorkEntry(id="a", date="2025-03-02"),
        BridgeWatchEntry(id="b", date="2025-03-09"),
        DailyWorkEntry(id="c", date="2025-03-05"),
    ]
    assert has_any_logs(entries)
    assert last_log_date(entries) == datetime.date(2025, 3, 9)
    assert logbook_status(entries) == LogbookStatus.IN_PROGRESS


def test_status_accepts_generator():
    entries = (DailyWorkEntry(id=str(n), date="2025-03-01") for n in range(2))
    assert logbook_status(entries) == LogbookStatus.IN_PROGRESS
