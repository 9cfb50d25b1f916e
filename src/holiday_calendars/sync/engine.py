"""Holiday feed synchronization engine."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..config import config
from ..models.calendar import Calendar
from ..readers.ical_parser import EventExtractor
from ..store.base import CalendarStore
from ..utils.date_utils import utc_now
from ..utils.exceptions import CalendarSyncError, RecordNotFoundError
from .cache import SyncCache
from .merger import feed_fingerprint, merge_holidays

logger = logging.getLogger(__name__)

STATUS_SYNCED = "synced"
STATUS_CACHED = "cached"
STATUS_DISABLED = "disabled"
STATUS_FAILED = "failed"
STATUS_DELETED = "deleted"


@dataclass
class SyncResult:
    """Result of syncing one calendar."""

    calendar_id: Optional[int]
    status: str
    holidays_added: int = 0
    holidays_pruned: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED


class HolidaySyncEngine:
    """Fetch, extract and merge public holidays for calendars with a feed."""

    def __init__(
        self,
        store: CalendarStore,
        extractor: Optional[EventExtractor] = None,
        cache: Optional[SyncCache] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize sync engine.

        Args:
            store: Persistence collaborator for calendars
            extractor: Feed extractor (defaults to HTTP/file fetching)
            cache: Sync cache gate (defaults to the process-wide cache)
            clock: Source of the current time
        """
        self.store = store
        self.extractor = extractor or EventExtractor()
        self.cache = cache or SyncCache()
        self.clock = clock

    def sync(self, calendar: Calendar, persist: bool = True) -> SyncResult:
        """
        Synchronize one calendar's public holidays with its feed.

        ``calendar`` is updated in place. On failure the holiday map is left
        exactly as it was and the error is stored in ``last_log``. Either way
        ``last_sync`` is set and, unless ``persist`` is False, the sync-owned
        fields (holidays, ``last_log``, ``last_sync``) are written to the store.

        Args:
            calendar: Calendar to sync
            persist: Save the calendar through the store afterwards

        Returns:
            SyncResult describing what happened
        """
        if not calendar.ical_url:
            return SyncResult(calendar_id=calendar.id, status=STATUS_DISABLED)

        # Unsaved calendars have no identity to key the cache on.
        use_cache = calendar.id is not None
        if use_cache and self.cache.should_skip(calendar):
            logger.debug(f"Calendar {calendar.id}: feed synced recently, skipping")
            return SyncResult(calendar_id=calendar.id, status=STATUS_CACHED)

        result = SyncResult(calendar_id=calendar.id, status=STATUS_SYNCED)
        try:
            extracted = self.extractor.extract(calendar.ical_url, now=self.clock())
            merged = merge_holidays(
                calendar.public_holidays,
                extracted,
                feed_fingerprint(calendar.ical_url),
            )
            calendar.public_holidays = merged.holidays
            calendar.last_log = None
            result.holidays_added = merged.added
            result.holidays_pruned = merged.pruned
            if use_cache:
                self.cache.remember(calendar)
            logger.info(
                f"Calendar {calendar.id} ({calendar.name}): {merged.added} holiday(s) added, "
                f"{merged.pruned} pruned, {merged.kept} kept"
            )
        except CalendarSyncError as e:
            calendar.last_log = str(e)
            result.status = STATUS_FAILED
            result.error = calendar.last_log
            logger.warning(f"Calendar {calendar.id} ({calendar.name}): feed sync failed: {e}")
        except Exception as e:
            calendar.last_log = f"{type(e).__name__}: {e}"
            result.status = STATUS_FAILED
            result.error = calendar.last_log
            logger.exception(f"Calendar {calendar.id} ({calendar.name}): unexpected sync error")

        calendar.last_sync = self.clock()
        if persist:
            self._persist_sync_state(calendar, result)
        return result

    def _persist_sync_state(self, calendar: Calendar, result: SyncResult) -> None:
        # Only sync-owned fields; default and the rest may have changed during the fetch.
        try:
            self.store.update_fields(
                calendar.id,
                public_holidays=calendar.public_holidays,
                last_log=calendar.last_log,
                last_sync=calendar.last_sync,
            )
        except RecordNotFoundError:
            logger.info(f"Calendar {calendar.id} was deleted during sync, discarding result")
            self.cache.forget(calendar)
            result.status = STATUS_DELETED

    def sync_all(self, max_workers: Optional[int] = None) -> list[SyncResult]:
        """
        Sync every calendar concurrently.

        Args:
            max_workers: Thread pool size (defaults to SYNC_MAX_WORKERS)

        Returns:
            One SyncResult per calendar, in id order
        """
        calendars = self.store.all()
        if not calendars:
            return []

        workers = max_workers or config.sync_max_workers
        logger.info(f"Syncing {len(calendars)} calendar(s) with {workers} worker(s)")
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [(calendar, pool.submit(self.sync, calendar)) for calendar in calendars]
            results = [self._collect(calendar, future) for calendar, future in futures]

        failed = [r for r in results if not r.ok]
        logger.info(
            f"Sync complete: {len(results) - len(failed)} ok, {len(failed)} failed"
        )
        return results

    @staticmethod
    def _collect(calendar: Calendar, future) -> SyncResult:
        """Result of one calendar's sync; an error stays with that calendar."""
        try:
            return future.result()
        except Exception as e:
            logger.exception(f"Calendar {calendar.id} ({calendar.name}): sync aborted")
            return SyncResult(
                calendar_id=calendar.id,
                status=STATUS_FAILED,
                error=f"{type(e).__name__}: {e}",
            )
