# resthours/models.py
"""
Typed shapes for the rest-hours engine.

Log entries are a closed variant type discriminated by ``category``; fields that
only make sense for one category (bridge position, engine machinery, port watch
type) live on that variant only. Derived structures (intervals, totals, results)
are frozen and rebuilt on every call.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .timeutils import date_key as _date_key, floor_minutes, parse_calendar_date, parse_iso


# ---------- Enumerations ----------
class DutyCategory(str, Enum):
    DAILY = "DAILY"
    BRIDGE = "BRIDGE"
    ENGINE = "ENGINE"
    PORT = "PORT"


# per-day / per-week buckets are bridge + engine only
TOTALLED_CATEGORIES = (DutyCategory.BRIDGE, DutyCategory.ENGINE)


class EngineWatchType(str, Enum):
    UMS = "UMS"
    MANNED = "MANNED"
    STANDBY = "STANDBY"


class PortWatchType(str, Enum):
    CARGO = "CARGO"
    ANCHOR = "ANCHOR"
    GANGWAY = "GANGWAY"
    BUNKERING = "BUNKERING"


class CadetDiscipline(str, Enum):
    DECK = "DECK"
    ENGINE = "ENGINE"


class ComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    AT_RISK = "AT_RISK"
    NON_COMPLIANT = "NON_COMPLIANT"


class LogbookStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"


# ---------- Log entries ----------
class _TimedRecord(BaseModel):
    """Nominal date plus optional start/end instants (tz-aware, naive -> UTC)."""

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    start: Optional[datetime.datetime] = None
    end: Optional[datetime.datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> datetime.date:
        d = parse_calendar_date(v)
        if d is None:
            raise ValueError(f"invalid calendar date: {v!r}")
        return d

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_instant(cls, v: Any) -> Optional[datetime.datetime]:
        if v is None or v == "":
            return None
        dt = parse_iso(v)
        if dt is None:
            raise ValueError(f"invalid instant: {v!r}")
        return dt

    @property
    def date_key(self) -> str:
        return _date_key(self.date)

    @property
    def is_timed(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def is_untimed(self) -> bool:
        return self.start is None and self.end is None


class _LogEntryBase(_TimedRecord):
    id: str
    summary: str = ""
    remarks: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_not_empty(cls, v: Any) -> str:
        if v is None or str(v).strip() == "":
            raise ValueError("id must be non-empty")
        return str(v)


class DailyWorkEntry(_LogEntryBase):
    category: Literal["DAILY"] = "DAILY"
    work_categories: List[str] = Field(default_factory=list)


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat_deg: Optional[int] = Field(default=None, ge=0, le=90)
    lat_min: Optional[float] = Field(default=None, ge=0, lt=60)
    lat_dir: Optional[Literal["N", "S"]] = None
    lon_deg: Optional[int] = Field(default=None, ge=0, le=180)
    lon_min: Optional[float] = Field(default=None, ge=0, lt=60)
    lon_dir: Optional[Literal["E", "W"]] = None


class BridgeWatchEntry(_LogEntryBase):
    category: Literal["BRIDGE"] = "BRIDGE"
    position: Optional[Position] = None
    course_deg: Optional[float] = Field(default=None, ge=0, le=360)
    speed_kn: Optional[float] = Field(default=None, ge=0)
    weather: Optional[str] = None
    steering_minutes: Optional[int] = Field(default=None, ge=0)
    is_lookout: Optional[bool] = None


class EngineWatchDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    engine_watch_type: Optional[EngineWatchType] = None
    engine_running: bool = False
    manoeuvring: bool = False
    generators_running: Dict[str, bool] = Field(default_factory=dict)
    engine_load_percent: Optional[float] = Field(default=None, ge=0, le=100)
    fuel_type: Optional[str] = None

    def qualifies_as_watch(self, discipline: CadetDiscipline) -> bool:
        """
        Deck cadets: an engine watch always counts as watchkeeping.
        Engine cadets: MANNED, or engine running while manoeuvring,
        or STANDBY while manoeuvring.
        """
        if discipline == CadetDiscipline.DECK:
            return True
        if self.engine_watch_type == EngineWatchType.MANNED:
            return True
        if self.engine_running and self.manoeuvring:
            return True
        return self.engine_watch_type == EngineWatchType.STANDBY and self.manoeuvring


class EngineWatchEntry(_LogEntryBase):
    category: Literal["ENGINE"] = "ENGINE"
    machinery: EngineWatchDetails = Field(default_factory=EngineWatchDetails)


class PortWatchEntry(_LogEntryBase):
    category: Literal["PORT"] = "PORT"
    port_watch_type: Optional[PortWatchType] = None

    @field_validator("port_watch_type", mode="before")
    @classmethod
    def _security_is_gangway(cls, v: Any) -> Any:
        # the logbook UI labels gangway watches "SECURITY"
        if isinstance(v, str) and v.strip().upper() == "SECURITY":
            return PortWatchType.GANGWAY
        return v

    @property
    def counts_as_watchkeeping(self) -> bool:
        """Only anchor watches are previewed as watchkeeping; others are work."""
        return self.port_watch_type == PortWatchType.ANCHOR


DutyLogEntry = Annotated[
    Union[DailyWorkEntry, BridgeWatchEntry, EngineWatchEntry, PortWatchEntry],
    Field(discriminator="category"),
]


class CandidateInterval(_TimedRecord):
    """A period about to be saved; ``id`` is set when editing an existing entry."""

    id: Optional[str] = None


# ---------- Derived structures ----------
class Interval(BaseModel):
    """Half-open [start, end) duty period with end > start."""

    model_config = ConfigDict(frozen=True)

    start: datetime.datetime
    end: datetime.datetime
    entry_id: Optional[str] = None
    category: Optional[str] = None
    date_key: Optional[str] = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "Interval":
        if self.end <= self.start:
            raise ValueError("interval end must be after start")
        return self

    @property
    def duration(self) -> datetime.timedelta:
        return self.end - self.start

    @property
    def minutes(self) -> int:
        return floor_minutes(self.duration)

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end

    def overlap_with(self, window_start: datetime.datetime, window_end: datetime.datetime) -> datetime.timedelta:
        lo = max(self.start, window_start)
        hi = min(self.end, window_end)
        if hi <= lo:
            return datetime.timedelta(0)
        return hi - lo


class DailyWatchTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    date_key: str
    bridge_minutes: int = 0
    engine_minutes: int = 0
    total_minutes: int = 0


class WeeklyWatchTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_date_key: str
    end_date_key: str
    bridge_minutes: int = 0
    engine_minutes: int = 0
    total_minutes: int = 0


class RestWindowResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    compliant: bool
    watch_minutes: int
    # may be negative under severe violations
    rest_minutes: int


class ComplianceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    rest_24h: RestWindowResult
    rest_7d: RestWindowResult
