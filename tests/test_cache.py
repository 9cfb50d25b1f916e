"""Tests for the timed cache and the sync cache gate."""

from conftest import FEED_A, FEED_B
from holiday_calendars.models.calendar import Calendar
from holiday_calendars.sync.cache import SyncCache
from holiday_calendars.utils.cache import TimedCache, get_cache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire():
    clock = FakeClock()
    cache = TimedCache(name="test", ttl_seconds=60, clock=clock)
    cache.set("key", {"ip": None})

    clock.now += 59
    assert cache.get("key") == {"ip": None}
    clock.now += 1
    assert cache.get("key") is None
    assert len(cache) == 0


def test_values_are_copied():
    cache = TimedCache()
    value = {"holidays": {"2025-12-25": {}}}
    cache.set("key", value)

    cache.get("key")["holidays"].clear()
    value["holidays"]["2026-01-01"] = {}

    assert cache.get("key") == {"holidays": {"2025-12-25": {}}}


def test_process_cache_is_shared():
    assert get_cache() is get_cache()


def test_sync_cache_gate():
    gate = SyncCache(backend=TimedCache(), ttl=60)
    calendar = Calendar(id=7, name="Germany", ical_url=FEED_A)

    assert not gate.should_skip(calendar)
    gate.remember(calendar)
    assert gate.should_skip(calendar)

    calendar.last_log = "404 Client Error"
    assert not gate.should_skip(calendar)

    calendar.last_log = None
    calendar.ical_url = FEED_B
    assert not gate.should_skip(calendar)


def test_sync_cache_key_uses_calendar_id():
    assert SyncCache.key(Calendar(id=42, name="x")) == "CalendarIcal::42"
