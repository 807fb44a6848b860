# resthours/normalizer.py
"""
Duty period normalizer: raw log timing -> half-open Interval.

A period whose end is not after its start is read as crossing midnight and
gets 24h added to the end, once. Anything still invalid is dropped. Nothing
here raises; a dropped entry simply contributes no time.
"""

from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Sequence
import logging

from .models import Interval
from .timeutils import ONE_DAY, date_key, floor_minutes

log = logging.getLogger("resthours.normalizer")


def normalize(entry: Any) -> Optional[Interval]:
    """
    Interval for a log entry (or candidate), or None when timing is absent/invalid.
    Works on anything exposing ``start``/``end`` and optionally ``id``/``category``/``date``.
    """
    start = getattr(entry, "start", None)
    end = getattr(entry, "end", None)
    if start is None or end is None:
        return None
    try:
        if end <= start:
            end = end + ONE_DAY
        if end <= start:
            log.debug("Dropping entry %s: end %s not after start %s even after midnight correction",
                      getattr(entry, "id", None), end, start)
            return None
    except TypeError:
        # naive vs aware instants from a caller bypassing model validation
        log.debug("Dropping entry %s: incomparable start/end", getattr(entry, "id", None))
        return None

    nominal = getattr(entry, "date", None)
    category = getattr(entry, "category", None)
    if isinstance(category, Enum):
        category = category.value
    return Interval(
        start=start,
        end=end,
        entry_id=getattr(entry, "id", None),
        category=category,
        date_key=date_key(nominal) if nominal is not None else None,
    )


def normalize_all(entries: Iterable[Any], exclude: Sequence[str] = ()) -> Iterator[Interval]:
    """Intervals for every entry that normalizes, skipping categories in ``exclude``."""
    for entry in entries:
        if exclude and getattr(entry, "category", None) in exclude:
            continue
        interval = normalize(entry)
        if interval is not None:
            yield interval


def duration_minutes(interval: Optional[Interval]) -> int:
    """Floored whole minutes; 0 for a dropped entry."""
    if interval is None:
        return 0
    return floor_minutes(interval.duration)
