# resthours/timeutils.py
"""
Time helpers shared by the rest-hours engine.

 - Parsing is timezone-aware; naive inputs fall back to UTC.
 - Internally everything is minutes / timedeltas; HH:MM strings are for traces only.
"""

from typing import Any, Optional, Union
import datetime

from dateutil import parser as _du_parser

ONE_DAY = datetime.timedelta(hours=24)


def ensure_dt_with_tz(dt: Optional[datetime.datetime], tz: Optional[datetime.tzinfo] = None) -> Optional[datetime.datetime]:
    """
    Ensure dt is timezone-aware. If dt.tzinfo is None, attach tz if provided,
    else attach UTC. Returns a tz-aware datetime or None if dt is None.
    """
    if dt is None:
        return None
    if dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=tz or datetime.timezone.utc)


def parse_iso(value: Any, tz: Optional[datetime.tzinfo] = None) -> Optional[datetime.datetime]:
    """
    Robust instant parsing returning a timezone-aware datetime, or None.

    Accepts:
      - ISO strings with offsets or a trailing 'Z'
      - naive 'YYYY-MM-DDTHH:MM:SS' (tz or UTC attached)
      - epoch numeric strings / numbers (seconds)
      - datetime objects
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return ensure_dt_with_tz(value, tz)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.datetime.fromtimestamp(float(value), tz=datetime.timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    s = str(value).strip()
    if not s:
        return None
    try:
        return ensure_dt_with_tz(_du_parser.isoparse(s), tz)
    except (ValueError, OverflowError):
        pass
    # epoch seconds as text
    try:
        return datetime.datetime.fromtimestamp(float(s), tz=datetime.timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def parse_calendar_date(value: Any) -> Optional[datetime.date]:
    """
    Calendar date from 'YYYY-MM-DD', a full ISO datetime string, or a date/datetime.
    A full datetime keeps its own calendar date; no timezone shifting is applied.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    s = str(value).strip()
    try:
        if len(s) == 10:
            return datetime.date.fromisoformat(s)
        return _du_parser.isoparse(s).date()
    except ValueError:
        return None


def date_key(d: Union[datetime.date, datetime.datetime]) -> str:
    """Canonical YYYY-MM-DD key; lexicographic order equals calendar order."""
    if isinstance(d, datetime.datetime):
        d = d.date()
    return d.isoformat()


def floor_minutes(delta: datetime.timedelta) -> int:
    """Whole minutes in delta, floored. Negative deltas clamp to 0."""
    seconds = delta.total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def minutes_to_hhmm(minutes: Optional[int]) -> Optional[str]:
    """
    Convert integer minutes to HH:MM string.
    - Accepts negative (exceeded) -> prefix '-' then HH:MM part
    - Returns None if input is None
    """
    if minutes is None:
        return None
    try:
        m = int(minutes)
    except (TypeError, ValueError):
        return None
    sign = "-" if m < 0 else ""
    m = abs(m)
    return f"{sign}{m // 60:02d}:{m % 60:02d}"
