"""Calendar mutation pipeline and calendar-level queries."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

import pytz

from ..config import HolidayFeedCatalog, config
from ..models.calendar import Calendar
from ..store.base import CalendarStore
from ..sync.engine import HolidaySyncEngine, SyncResult
from ..utils.exceptions import RecordNotFoundError
from .defaults import DefaultCalendarEnforcer, EnforcementResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineStep:
    """One named stage of a calendar mutation."""

    name: str
    detail: Optional[str] = None


@dataclass
class PipelineResult:
    """Result of create, update or destroy."""

    calendar: Optional[Calendar] = None
    steps: list[PipelineStep] = field(default_factory=list)
    sync: Optional[SyncResult] = None
    enforcement: Optional[EnforcementResult] = None

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self.steps]

    def record(self, name: str, detail: Optional[str] = None) -> None:
        self.steps.append(PipelineStep(name=name, detail=detail))


def validate_holidays(calendar: Calendar, previous: Optional[Calendar] = None) -> None:
    """
    Normalize holiday entries before a calendar is saved.

    Every ``active`` flag becomes a real boolean, and entries whose
    previous version came from a feed keep that feed fingerprint.

    Args:
        calendar: Calendar about to be saved (modified in place)
        previous: Stored version of the calendar, if any
    """
    before = previous.public_holidays if previous else {}
    for day, entry in calendar.public_holidays.items():
        old = before.get(day)
        if old is not None and old.feed:
            entry.feed = old.feed
        entry.active = bool(entry.active)


class CalendarService:
    """Entry point for calendar mutations.

    Create and update run validate_holidays -> sync_feed -> persist ->
    enforce_defaults; destroy runs delete -> enforce_defaults.
    """

    def __init__(
        self,
        store: CalendarStore,
        engine: Optional[HolidaySyncEngine] = None,
        enforcer: Optional[DefaultCalendarEnforcer] = None,
        catalog: Optional[HolidayFeedCatalog] = None,
    ):
        self.store = store
        self.engine = engine or HolidaySyncEngine(store)
        self.enforcer = enforcer or DefaultCalendarEnforcer(store)
        self._catalog = catalog

    # Mutations

    def create(self, data: Union[Calendar, dict[str, Any]]) -> PipelineResult:
        """
        Create a calendar, syncing its feed before it is first saved.

        Args:
            data: Calendar or attribute dict (``id`` is ignored)

        Returns:
            PipelineResult with the stored calendar
        """
        calendar = data.model_copy(deep=True) if isinstance(data, Calendar) else Calendar.model_validate(data)
        calendar.id = None
        return self._save(calendar, previous=None)

    def update(self, calendar_id: int, changes: dict[str, Any]) -> PipelineResult:
        """
        Apply ``changes`` to a stored calendar.

        Raises:
            RecordNotFoundError: If the calendar does not exist
        """
        previous = self.get(calendar_id)
        changes = {key: value for key, value in changes.items() if key != "id"}
        calendar = Calendar.model_validate({**previous.model_dump(), **changes})
        return self._save(calendar, previous=previous)

    def save(self, calendar: Calendar) -> PipelineResult:
        """Create or update ``calendar`` depending on whether it has an id."""
        if calendar.id is None:
            return self.create(calendar)
        previous = self.get(calendar.id)
        return self._save(calendar.model_copy(deep=True), previous=previous)

    def destroy(self, calendar_id: int) -> PipelineResult:
        """
        Delete a calendar and repair the default invariant. No re-sync.

        Raises:
            RecordNotFoundError: If the calendar does not exist
        """
        result = PipelineResult()
        deleted = self.store.destroy(calendar_id)
        self.engine.cache.forget(deleted)
        result.record("delete", f"calendar {calendar_id}")
        logger.info(f"Deleted calendar {calendar_id} ({deleted.name})")

        result.enforcement = self.enforcer.enforce(changed=None)
        result.record("enforce_defaults")
        return result

    def _save(self, calendar: Calendar, previous: Optional[Calendar]) -> PipelineResult:
        result = PipelineResult()

        validate_holidays(calendar, previous)
        result.record("validate_holidays")

        result.sync = self.engine.sync(calendar, persist=False)
        result.record("sync_feed", result.sync.status)

        if previous is None:
            stored = self.store.create(calendar)
            logger.info(f"Created calendar {stored.id} ({stored.name})")
        else:
            stored = self.store.update(calendar)
            logger.info(f"Updated calendar {stored.id} ({stored.name})")
        result.record("persist", f"calendar {stored.id}")

        result.enforcement = self.enforcer.enforce(changed=stored)
        result.record("enforce_defaults")

        # Enforcement may have flipped this calendar's default flag.
        result.calendar = self.store.get(stored.id)
        return result

    # Queries

    def get(self, calendar_id: int) -> Calendar:
        calendar = self.store.get(calendar_id)
        if calendar is None:
            raise RecordNotFoundError(f"Calendar {calendar_id} not found")
        return calendar

    def default(self) -> Optional[Calendar]:
        """Return the default calendar, or None for an empty collection."""
        return self.store.find_by(default=True)

    def sync(self, calendar_id: int) -> SyncResult:
        return self.engine.sync(self.get(calendar_id))

    def sync_all(self, max_workers: Optional[int] = None) -> list[SyncResult]:
        return self.engine.sync_all(max_workers=max_workers)

    @property
    def catalog(self) -> HolidayFeedCatalog:
        if self._catalog is None:
            self._catalog = HolidayFeedCatalog(config.holiday_feeds_file)
        return self._catalog

    def ical_feeds(self) -> dict[str, str]:
        """
        Preset public holiday feeds.

        Returns:
            ``{feed_url: country}``
        """
        return self.catalog.feeds()

    @staticmethod
    def timezones(at: Optional[datetime] = None) -> dict[str, int]:
        """
        Country timezones with their current UTC offset in whole hours.

        Returns:
            ``{"America/Los_Angeles": -7, ...}``
        """
        at = at or datetime.now(pytz.utc)
        zones: dict[str, int] = {}
        for country_zones in pytz.country_timezones.values():
            for name in country_zones:
                offset = at.astimezone(pytz.timezone(name)).utcoffset()
                zones[name] = int(offset.total_seconds() // 3600)
        return dict(sorted(zones.items()))
