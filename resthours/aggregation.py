# resthours/aggregation.py
"""
Per-day and rolling 7-day watch totals.

Only bridge and engine watches are bucketed. Daily work never counts here and
port watches are left to the rolling 24h maximum.
"""

from typing import Dict, Iterable, List, Union
import datetime
import logging

from .models import DailyWatchTotal, DutyCategory, DutyLogEntry, TOTALLED_CATEGORIES, WeeklyWatchTotal
from .normalizer import duration_minutes, normalize
from .timeutils import date_key

log = logging.getLogger("resthours.aggregation")

WEEK_SPAN_DAYS = 6  # end date plus the six days before it


def aggregate_daily(entries: Iterable[DutyLogEntry]) -> List[DailyWatchTotal]:
    """
    Bridge / engine minutes per nominal date, newest first.
    Days with no bridge or engine interval are absent.
    """
    buckets: Dict[str, Dict[str, int]] = {}

    for entry in entries:
        if entry.category not in TOTALLED_CATEGORIES:
            continue
        interval = normalize(entry)
        if interval is None:
            continue

        bucket = buckets.setdefault(entry.date_key, {"bridge": 0, "engine": 0})
        if entry.category == DutyCategory.BRIDGE:
            bucket["bridge"] += duration_minutes(interval)
        else:
            bucket["engine"] += duration_minutes(interval)

    totals = [
        DailyWatchTotal(
            date_key=key,
            bridge_minutes=b["bridge"],
            engine_minutes=b["engine"],
            total_minutes=b["bridge"] + b["engine"],
        )
        for key, b in buckets.items()
    ]
    totals.sort(key=lambda t: t.date_key, reverse=True)
    return totals


def aggregate_weekly(entries: Iterable[DutyLogEntry],
                     end_date: Union[datetime.date, datetime.datetime]) -> WeeklyWatchTotal:
    """
    Rolling 7-day totals over [end_date - 6 days, end_date], inclusive.
    Not a calendar week: any reference date may be used.
    """
    if isinstance(end_date, datetime.datetime):
        end_date = end_date.date()
    start_date = end_date - datetime.timedelta(days=WEEK_SPAN_DAYS)
    start_key = date_key(start_date)
    end_key = date_key(end_date)

    bridge = 0
    engine = 0
    for day in aggregate_daily(entries):
        # YYYY-MM-DD keys order lexicographically
        if start_key <= day.date_key <= end_key:
            bridge += day.bridge_minutes
            engine += day.engine_minutes

    log.debug("Weekly window %s..%s: bridge %d min, engine %d min", start_key, end_key, bridge, engine)
    return WeeklyWatchTotal(
        start_date_key=start_key,
        end_date_key=end_key,
        bridge_minutes=bridge,
        engine_minutes=engine,
        total_minutes=bridge + engine,
    )
