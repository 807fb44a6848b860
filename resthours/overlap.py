# resthours/overlap.py
"""
Same-day overlap detection used to reject a save.

Entries are compared only with others filed under the same nominal date,
whatever calendar day their instants land on after midnight correction.
"""

from typing import Iterable, Optional
import datetime
import logging

from .models import CandidateInterval, DutyLogEntry
from .normalizer import normalize

log = logging.getLogger("resthours.overlap")


def ranges_overlap(a_start: datetime.datetime, a_end: datetime.datetime,
                   b_start: datetime.datetime, b_end: datetime.datetime) -> bool:
    """Strict half-open test: periods sharing only a boundary instant do not overlap."""
    return a_start < b_end and b_start < a_end


def _conflicts(existing: DutyLogEntry, candidate: CandidateInterval) -> bool:
    a = normalize(candidate)
    b = normalize(existing)
    # missing start or end claims the whole day against any valid timed entry
    if not candidate.is_timed:
        return b is not None
    if not existing.is_timed:
        return a is not None
    if a is None or b is None:
        return False
    return a.overlaps(b)


def find_overlap(existing: Iterable[DutyLogEntry], candidate: CandidateInterval) -> Optional[DutyLogEntry]:
    """
    First existing entry that conflicts with ``candidate`` on the same nominal
    date, or None. The entry being edited (same id) is never compared with itself.
    """
    for entry in existing:
        if candidate.id is not None and entry.id == candidate.id:
            continue
        if entry.date != candidate.date:
            continue
        if _conflicts(entry, candidate):
            log.debug("Candidate %s overlaps entry %s on %s", candidate.id, entry.id, candidate.date_key)
            return entry
    return None
