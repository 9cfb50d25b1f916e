"""Tests for the holiday sync engine."""

from conftest import FEED_A, FEED_B, NOW, build_ics
from holiday_calendars.models.calendar import Calendar, HolidayEntry
from holiday_calendars.readers.ical_parser import EventExtractor
from holiday_calendars.store.memory import InMemoryStore
from holiday_calendars.sync.engine import (
    STATUS_CACHED,
    STATUS_DELETED,
    STATUS_DISABLED,
    STATUS_FAILED,
    STATUS_SYNCED,
    HolidaySyncEngine,
)
from holiday_calendars.sync.merger import feed_fingerprint
from holiday_calendars.utils.exceptions import FeedParseError


def stored_calendar(store, **attributes) -> Calendar:
    return store.create(Calendar(name=attributes.pop("name", "Germany"), **attributes))


def test_first_sync_adds_feed_holidays(store, reader, engine):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    calendar = stored_calendar(store, ical_url=FEED_A)

    result = engine.sync(calendar)

    assert result.status == STATUS_SYNCED
    assert result.holidays_added == 1
    saved = store.get(calendar.id)
    assert saved.public_holidays == {
        "2025-12-25": HolidayEntry(active=True, summary="Christmas", feed=feed_fingerprint(FEED_A))
    }
    assert saved.last_log is None
    assert saved.last_sync == NOW


def test_user_deactivation_survives_resync(store, reader, engine, sync_cache):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    calendar = stored_calendar(store, ical_url=FEED_A)
    engine.sync(calendar)
    calendar.public_holidays["2025-12-25"].active = False
    store.update(calendar)
    sync_cache.forget(calendar)

    result = engine.sync(calendar)

    assert result.status == STATUS_SYNCED
    assert store.get(calendar.id).public_holidays["2025-12-25"].active is False
    assert len(reader.calls) == 2


def test_feed_url_change_replaces_feed_entries(store, reader, engine):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"), ("2025-05-01", "Labour Day"))
    reader.feeds[FEED_B] = build_ics(("2025-12-25", "Weihnachten"), ("2025-10-03", "Einheit"))
    calendar = stored_calendar(store, ical_url=FEED_A)
    calendar.public_holidays["2025-08-15"] = HolidayEntry(active=True, summary="Company day")
    engine.sync(calendar)

    calendar.ical_url = FEED_B
    result = engine.sync(calendar)

    holidays = store.get(calendar.id).public_holidays
    assert result.holidays_pruned == 2
    assert sorted(holidays) == ["2025-08-15", "2025-10-03", "2025-12-25"]
    assert holidays["2025-12-25"].feed == feed_fingerprint(FEED_B)
    assert holidays["2025-08-15"].feed is None


def test_fetch_failure_keeps_holidays(store, engine):
    calendar = stored_calendar(
        store,
        ical_url=FEED_A,
        public_holidays={"2025-12-25": {"active": True, "summary": "Christmas"}},
    )

    result = engine.sync(calendar)

    saved = store.get(calendar.id)
    assert result.status == STATUS_FAILED
    assert saved.last_log == f"404 Client Error: Not Found for url: {FEED_A}"
    assert saved.last_sync == NOW
    assert saved.public_holidays == {
        "2025-12-25": HolidayEntry(active=True, summary="Christmas")
    }


def test_parse_failure_is_recorded(store, reader, engine):
    reader.feeds[FEED_A] = FeedParseError("Unable to parse calendar feed: bad data")
    calendar = stored_calendar(store, ical_url=FEED_A)

    result = engine.sync(calendar)

    assert not result.ok
    assert store.get(calendar.id).last_log == "Unable to parse calendar feed: bad data"


def test_recent_sync_is_skipped(store, reader, engine):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    calendar = stored_calendar(store, ical_url=FEED_A)
    engine.sync(calendar)

    result = engine.sync(calendar)

    assert result.status == STATUS_CACHED
    assert reader.calls == [FEED_A]


def test_error_forces_retry(store, reader, engine):
    calendar = stored_calendar(store, ical_url=FEED_A)
    engine.sync(calendar)
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))

    result = engine.sync(calendar)

    assert result.status == STATUS_SYNCED
    assert calendar.last_log is None
    assert len(reader.calls) == 2


def test_calendar_without_feed_is_untouched(store, reader, engine):
    calendar = stored_calendar(store)

    result = engine.sync(calendar)

    assert result.status == STATUS_DISABLED
    assert store.get(calendar.id).last_sync is None
    assert reader.calls == []


def test_in_memory_sync_does_not_persist(store, reader, engine):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    calendar = stored_calendar(store, ical_url=FEED_A)

    engine.sync(calendar, persist=False)

    assert "2025-12-25" in calendar.public_holidays
    assert store.get(calendar.id).public_holidays == {}


def test_unsaved_calendar_bypasses_cache(reader, engine, sync_cache):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    calendar = Calendar(name="Draft", ical_url=FEED_A)

    engine.sync(calendar, persist=False)
    engine.sync(calendar, persist=False)

    assert len(reader.calls) == 2
    assert len(sync_cache.backend) == 0


def test_sync_all_runs_every_calendar(store, reader, engine):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    ok = stored_calendar(store, name="Germany", ical_url=FEED_A)
    broken = stored_calendar(store, name="Broken", ical_url=FEED_B)
    plain = stored_calendar(store, name="Plain")

    results = engine.sync_all(max_workers=2)

    by_id = {r.calendar_id: r.status for r in results}
    assert by_id == {ok.id: STATUS_SYNCED, broken.id: STATUS_FAILED, plain.id: STATUS_DISABLED}
    assert store.get(broken.id).last_log


def test_default_change_during_fetch_is_not_reverted(store, reader, engine, service):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    a = service.create({"name": "A", "default": True}).calendar
    b = service.create({"name": "B", "ical_url": FEED_A}).calendar
    stale_b = store.get(b.id)
    reader.during_fetch[FEED_A] = lambda: service.update(b.id, {"default": True})

    result = engine.sync(stale_b)

    assert result.status == STATUS_SYNCED
    assert [c.id for c in store.all() if c.default] == [b.id]
    assert store.get(a.id).default is False
    saved = store.get(b.id)
    assert saved.last_sync == NOW
    assert "2025-12-25" in saved.public_holidays


def test_rename_during_fetch_is_kept(store, reader, engine):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    calendar = stored_calendar(store, ical_url=FEED_A)
    reader.during_fetch[FEED_A] = lambda: store.update_fields(calendar.id, name="Renamed")

    engine.sync(calendar)

    saved = store.get(calendar.id)
    assert saved.name == "Renamed"
    assert "2025-12-25" in saved.public_holidays


def test_calendar_deleted_during_fetch(store, reader, engine, sync_cache):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    calendar = stored_calendar(store, ical_url=FEED_A)
    reader.during_fetch[FEED_A] = lambda: store.destroy(calendar.id)

    result = engine.sync(calendar)

    assert result.status == STATUS_DELETED
    assert result.ok
    assert store.get(calendar.id) is None
    assert len(sync_cache.backend) == 0


def test_sync_all_survives_deletion_mid_pass(store, reader, engine, service):
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    reader.feeds[FEED_B] = build_ics(("2025-10-03", "Einheit"))
    a = service.create({"name": "A", "ical_url": FEED_A}).calendar
    b = service.create({"name": "B", "ical_url": FEED_B}).calendar
    reader.during_fetch[FEED_B] = lambda: service.destroy(b.id)

    results = engine.sync_all(max_workers=2)

    by_id = {r.calendar_id: r.status for r in results}
    assert by_id == {a.id: STATUS_SYNCED, b.id: STATUS_DELETED}
    assert [c.id for c in store.all()] == [a.id]


class BrokenWriteStore(InMemoryStore):
    """Fails sync-state writes for one calendar id."""

    def __init__(self, broken_id: int):
        super().__init__()
        self.broken_id = broken_id

    def update_fields(self, calendar_id, **fields):
        if calendar_id == self.broken_id:
            raise RuntimeError("disk full")
        return super().update_fields(calendar_id, **fields)


def test_sync_all_keeps_other_results_when_one_calendar_errors(reader, sync_cache, clock):
    store = BrokenWriteStore(broken_id=2)
    reader.feeds[FEED_A] = build_ics(("2025-12-25", "Christmas"))
    ok = store.create(Calendar(name="Fine", ical_url=FEED_A))
    broken = store.create(Calendar(name="Broken", ical_url=FEED_A))
    engine = HolidaySyncEngine(
        store, extractor=EventExtractor(reader), cache=sync_cache, clock=clock
    )

    results = engine.sync_all(max_workers=2)

    by_id = {r.calendar_id: r for r in results}
    assert by_id[ok.id].status == STATUS_SYNCED
    assert by_id[broken.id].status == STATUS_FAILED
    assert by_id[broken.id].error == "RuntimeError: disk full"
