# resthours/compliance.py
"""
STCW rest-hours compliance evaluator.

Rules applied:
 - at least 10 hours rest in any rolling 24-hour period (worst-case window)
 - at least 77 hours rest in the rolling 7 days ending on the reference date

Results carry raw minutes; rest may go negative under severe violations.
``build_trace`` renders the audit view with HH:MM strings.
"""

from typing import Any, Dict, Iterable, List, Optional, Union
import datetime
import hashlib
import json
import logging

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .aggregation import aggregate_weekly
from .models import ComplianceResult, ComplianceStatus, DutyLogEntry, RestWindowResult
from .rolling import max_watch_minutes_24h
from .timeutils import ensure_dt_with_tz, minutes_to_hhmm

log = logging.getLogger("resthours.compliance")

# ---------------- STCW limits ----------------
MINUTES_24H = 24 * 60       # 1440
MIN_REST_24H = 10 * 60      # 600
MINUTES_7D = 7 * 24 * 60    # 10080
MIN_REST_7D = 77 * 60       # 4620
# ---------------------------------------------


class RestLimit(BaseModel):
    model_config = ConfigDict(frozen=True)

    window_minutes: int = Field(gt=0)
    min_rest_minutes: int = Field(ge=0)

    @model_validator(mode="after")
    def _rest_fits_window(self) -> "RestLimit":
        if self.min_rest_minutes > self.window_minutes:
            raise ValueError("min_rest_minutes cannot exceed window_minutes")
        return self


class RestRuleset(BaseModel):
    model_config = ConfigDict(frozen=True)

    rest_24h: RestLimit = RestLimit(window_minutes=MINUTES_24H, min_rest_minutes=MIN_REST_24H)
    rest_7d: RestLimit = RestLimit(window_minutes=MINUTES_7D, min_rest_minutes=MIN_REST_7D)
    version: Optional[str] = None
    source_files: List[str] = Field(default_factory=list)


STCW_DEFAULTS = RestRuleset(version="stcw-default")


def _rest_window(watch_minutes: int, limit: RestLimit) -> RestWindowResult:
    rest = limit.window_minutes - watch_minutes
    return RestWindowResult(
        compliant=rest >= limit.min_rest_minutes,
        watch_minutes=watch_minutes,
        rest_minutes=rest,
    )


def check_24h_rest(entries: Iterable[DutyLogEntry], ruleset: Optional[RestRuleset] = None) -> RestWindowResult:
    """Rest in the worst rolling 24h window."""
    rules = ruleset or STCW_DEFAULTS
    return _rest_window(max_watch_minutes_24h(entries), rules.rest_24h)


def check_7d_rest(entries: Iterable[DutyLogEntry],
                  end_date: Union[datetime.date, datetime.datetime],
                  ruleset: Optional[RestRuleset] = None) -> RestWindowResult:
    """Rest in the 7 days ending on end_date (bridge + engine watch only)."""
    rules = ruleset or STCW_DEFAULTS
    return _rest_window(aggregate_weekly(entries, end_date).total_minutes, rules.rest_7d)


def evaluate(entries: Iterable[DutyLogEntry], now: datetime.datetime,
             ruleset: Optional[RestRuleset] = None) -> ComplianceResult:
    """
    Structured 24h / 7d verdict. Total over any finite entry set; empty input
    is fully compliant.
    """
    entries = list(entries)
    if isinstance(now, datetime.datetime):
        now = ensure_dt_with_tz(now)
    result = ComplianceResult(
        rest_24h=check_24h_rest(entries, ruleset),
        rest_7d=check_7d_rest(entries, now, ruleset),
    )
    log.debug("Evaluated %d entries at %s: 24h rest %d min, 7d rest %d min",
              len(entries), now, result.rest_24h.rest_minutes, result.rest_7d.rest_minutes)
    return result


def compliance_status(result: ComplianceResult) -> ComplianceStatus:
    """24h breach dominates; a 7d breach alone is AT_RISK."""
    if not result.rest_24h.compliant:
        return ComplianceStatus.NON_COMPLIANT
    if not result.rest_7d.compliant:
        return ComplianceStatus.AT_RISK
    return ComplianceStatus.COMPLIANT


def evaluate_status(entries: Iterable[DutyLogEntry], now: datetime.datetime,
                    ruleset: Optional[RestRuleset] = None) -> ComplianceStatus:
    return compliance_status(evaluate(entries, now, ruleset))


# ---------- Audit trace ----------
def compute_ruleset_provenance(ruleset: RestRuleset) -> Dict[str, Any]:
    """Deterministic provenance: version, sha256 of the limits, and source files."""
    limits = {
        "rest_24h": ruleset.rest_24h.model_dump(),
        "rest_7d": ruleset.rest_7d.model_dump(),
    }
    serial = json.dumps(limits, sort_keys=True)
    return {
        "ruleset_hash_sha256": hashlib.sha256(serial.encode("utf-8")).hexdigest(),
        "ruleset_version": ruleset.version,
        "source_files": list(ruleset.source_files),
    }


def _window_trace(window: RestWindowResult, limit: RestLimit) -> Dict[str, Any]:
    return {
        "compliant": window.compliant,
        "window": minutes_to_hhmm(limit.window_minutes),
        "watch": minutes_to_hhmm(window.watch_minutes),
        "rest": minutes_to_hhmm(window.rest_minutes),
        "min_rest": minutes_to_hhmm(limit.min_rest_minutes),
        "shortfall": minutes_to_hhmm(max(0, limit.min_rest_minutes - window.rest_minutes)),
    }


def build_trace(result: ComplianceResult, ruleset: Optional[RestRuleset] = None) -> Dict[str, Any]:
    """Audit view of a verdict: all durations as HH:MM (negative rest as -HH:MM)."""
    rules = ruleset or STCW_DEFAULTS
    return {
        "status": compliance_status(result).value,
        "rest_24h": _window_trace(result.rest_24h, rules.rest_24h),
        "rest_7d": _window_trace(result.rest_7d, rules.rest_7d),
        "provenance": compute_ruleset_provenance(rules),
    }
