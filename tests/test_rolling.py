# tests/test_rolling.py
import datetime
import random

from resthours.models import BridgeWatchEntry, DailyWorkEntry, EngineWatchEntry, PortWatchEntry
from resthours.normalizer import normalize
from resthours.rolling import max_watch_minutes_24h, watch_seconds_in_window

UTC = datetime.timezone.utc
BASE = datetime.datetime(2025, 3, 1, 0, 0, tzinfo=UTC)


def watch(entry_id, start_minute, length_minutes, kind=BridgeWatchEntry):
    start = BASE + datetime.timedelta(minutes=start_minute)
    return kind(id=entry_id, date=start.date(), start=start, end=start + datetime.timedelta(minutes=length_minutes))


def test_no_watches_is_zero():
    assert max_watch_minutes_24h([]) == 0
    assert max_watch_minutes_24h([DailyWorkEntry(id="d", date="2025-03-01")]) == 0


def test_daily_work_does_not_count():
    entries = [watch("d", 0, 600, DailyWorkEntry), watch("b", 600, 120)]
    assert max_watch_minutes_24h(entries) == 120


def test_port_watch_counts():
    entries = [watch("p", 0, 360, PortWatchEntry), watch("e", 480, 240, EngineWatchEntry)]
    assert max_watch_minutes_24h(entries) == 600


def test_window_is_not_calendar_aligned():
    # 18:00-24:00 on day 1 then 00:00-08:00 on day 2: 14h inside one rolling window,
    # while neither calendar day alone holds more than 8h
    entries = [watch("late", 18 * 60, 6 * 60), watch("early", 24 * 60, 8 * 60)]
    assert max_watch_minutes_24h(entries) == 14 * 60


def test_watches_further_apart_than_a_day_do_not_combine():
    entries = [watch("a", 0, 300), watch("b", 24 * 60, 300)]
    assert max_watch_minutes_24h(entries) == 300


def test_midnight_crossover_contributes_full_duration():
    start = datetime.datetime(2025, 3, 1, 23, 0, tzinfo=UTC)
    entry = BridgeWatchEntry(id="n", date="2025-03-01", start=start, end=start.replace(hour=3))
    assert max_watch_minutes_24h([entry]) == 240


def test_window_clips_long_watch():
    assert max_watch_minutes_24h([watch("long", 0, 30 * 60)]) == 24 * 60


def test_overlapping_logs_are_summed():
    entries = [watch("a", 0, 600), watch("b", 300, 600)]
    assert max_watch_minutes_24h(entries) == 1200


def test_watch_seconds_in_window_helper():
    intervals = [normalize(watch("a", 0, 120)), normalize(watch("b", 180, 60))]
    total = watch_seconds_in_window(intervals, BASE + datetime.timedelta(minutes=60), BASE + datetime.timedelta(minutes=200))
    assert total == datetime.timedelta(minutes=80)


def test_adding_non_overlapping_watch_never_decreases_maximum():
    rng = random.Random(11)
    for trial in range(40):
        entries = []
        cursor = rng.randint(0, 300)
        for n in range(rng.randint(1, 6)):
            length = rng.randint(30, 480)
            entries.append(watch(f"t{trial}-{n}", cursor, length))
            cursor += length + rng.randint(0, 600)
        before = max_watch_minutes_24h(entries)
        extra = watch(f"t{trial}-extra", cursor + rng.randint(0, 900), rng.randint(30, 480))
        assert max_watch_minutes_24h(entries + [extra]) >= before


def _brute_force_max(spans):
    # spans are (start_minute, end_minute); try every minute as a window start
    lo = min(s for s, _ in spans) - 1440
    hi = max(e for _, e in spans)
    best = 0
    for anchor in range(lo, hi + 1):
        load = sum(max(0, min(e, anchor + 1440) - max(s, anchor)) for s, e in spans)
        best = max(best, load)
    return best


def test_no_window_beats_the_interval_start_anchors():
    rng = random.Random(2025)
    for trial in range(25):
        spans = []
        entries = []
        for n in range(rng.randint(1, 6)):
            start = rng.randint(0, 3 * 1440)
            length = rng.randint(15, 720)
            spans.append((start, start + length))
            entries.append(watch(f"r{trial}-{n}", start, length, rng.choice([BridgeWatchEntry, EngineWatchEntry, PortWatchEntry])))
        assert max_watch_minutes_24h(entries) == _brute_force_max(spans)


def test_overlapping_logs_can_peak_on_a_window_ending_at_a_watch_end():
    # two logs over the same hour pull the best window to end at 1500
    entries = [watch("a", 0, 1000), watch("b", 1400, 100), watch("c", 1400, 100, EngineWatchEntry)]
    assert max_watch_minutes_24h(entries) == 1140


def test_start_anchors_suffice_for_non_overlapping_logs():
    rng = random.Random(77)
    for trial in range(25):
        entries = []
        cursor = 0
        for n in range(rng.randint(1, 7)):
            cursor += rng.randint(0, 900)
            length = rng.randint(15, 720)
            entries.append(watch(f"n{trial}-{n}", cursor, length))
            cursor += length
        intervals = [normalize(e) for e in entries]
        best_from_starts = max(
            watch_seconds_in_window(intervals, i.start, i.start + datetime.timedelta(hours=24)) for i in intervals
        )
        assert max_watch_minutes_24h(entries) == best_from_starts.total_seconds() // 60
