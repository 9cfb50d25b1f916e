"""Shared fixtures for holiday_calendars tests."""

from datetime import datetime
from typing import Callable, Optional, Union

import pytest
import pytz

from holiday_calendars.readers.base import FeedReader
from holiday_calendars.readers.ical_parser import EventExtractor
from holiday_calendars.services.calendar_service import CalendarService
from holiday_calendars.services.defaults import DefaultCalendarEnforcer
from holiday_calendars.store.memory import InMemoryStore
from holiday_calendars.sync.cache import SyncCache
from holiday_calendars.sync.engine import HolidaySyncEngine
from holiday_calendars.utils.cache import TimedCache, reset_cache
from holiday_calendars.utils.exceptions import FeedFetchError

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=pytz.utc)

FEED_A = "https://calendars.example.com/feed-a.ics"
FEED_B = "https://calendars.example.com/feed-b.ics"


def build_ics(*events: tuple[str, str], extra: str = "") -> bytes:
    """Render ``(YYYY-MM-DD, summary)`` pairs as an all-day iCalendar feed."""
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//tests//holidays//EN"]
    for index, (day, summary) in enumerate(events):
        lines += [
            "BEGIN:VEVENT",
            f"UID:holiday-{index}@tests",
            f"DTSTART;VALUE=DATE:{day.replace('-', '')}",
            f"SUMMARY:{summary}",
            "END:VEVENT",
        ]
    if extra:
        lines.append(extra.strip())
    lines.append("END:VCALENDAR")
    return ("\r\n".join(lines) + "\r\n").encode("utf-8")


class FakeFeedReader(FeedReader):
    """Serves feeds from a dict; unknown locations fail like a 404."""

    def __init__(self, feeds: Optional[dict[str, Union[bytes, Exception]]] = None):
        self.feeds = dict(feeds or {})
        self.calls: list[str] = []
        # One-shot callbacks run when a location is fetched, to simulate work during I/O.
        self.during_fetch: dict[str, Callable[[], None]] = {}

    def fetch(self, location: str) -> bytes:
        self.calls.append(location)
        callback = self.during_fetch.pop(location, None)
        if callback is not None:
            callback()
        content = self.feeds.get(location)
        if content is None:
            raise FeedFetchError(f"404 Client Error: Not Found for url: {location}")
        if isinstance(content, Exception):
            raise content
        return content


@pytest.fixture(autouse=True)
def _clean_process_cache():
    reset_cache()
    yield
    reset_cache()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def reader() -> FakeFeedReader:
    return FakeFeedReader()


@pytest.fixture
def sync_cache() -> SyncCache:
    return SyncCache(backend=TimedCache(name="test"), ttl=5 * 24 * 60 * 60)


@pytest.fixture
def engine(store, reader, sync_cache, clock) -> HolidaySyncEngine:
    return HolidaySyncEngine(
        store,
        extractor=EventExtractor(reader),
        cache=sync_cache,
        clock=clock,
    )


@pytest.fixture
def service(store, engine) -> CalendarService:
    return CalendarService(store, engine=engine, enforcer=DefaultCalendarEnforcer(store))
