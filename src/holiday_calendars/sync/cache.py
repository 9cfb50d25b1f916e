"""Cache gate that limits how often a calendar's feed is fetched."""

import logging
from typing import Optional

from ..config import config
from ..models.calendar import Calendar
from ..utils.cache import CacheBackend, get_cache

logger = logging.getLogger(__name__)


class SyncCache:
    """Remembers successful syncs so a feed is fetched at most once per TTL.

    A calendar with a pending ``last_log`` error is always retried.
    """

    def __init__(self, backend: Optional[CacheBackend] = None, ttl: Optional[float] = None):
        self.backend = backend or get_cache()
        self.ttl = ttl if ttl is not None else config.sync_cache_ttl_seconds

    @staticmethod
    def key(calendar: Calendar) -> str:
        return f"CalendarIcal::{calendar.id}"

    def should_skip(self, calendar: Calendar) -> bool:
        if calendar.last_log:
            return False
        cached = self.backend.get(self.key(calendar))
        return bool(cached) and cached.get("ical_url") == calendar.ical_url

    def remember(self, calendar: Calendar) -> None:
        self.backend.set(
            self.key(calendar),
            {
                "public_holidays": calendar.holidays_dict(),
                "ical_url": calendar.ical_url,
            },
            self.ttl,
        )
        logger.debug(f"Cached sync of calendar {calendar.id} for {self.ttl}s")

    def forget(self, calendar: Calendar) -> None:
        self.backend.delete(self.key(calendar))
