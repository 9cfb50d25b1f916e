"""One-shot creation of the initial default calendar from a geo suggestion."""

import logging
import threading
from typing import Any, Optional

from ..config import config
from ..models.calendar import SYSTEM_USER_ID, Calendar
from ..utils.cache import CacheBackend, get_cache
from ..utils.net import public_ip_or_none
from .calendar_service import CalendarService
from .geo import GeoCalendarClient, GeoCalendarLookup
from .naming import UniqueNameGenerator

logger = logging.getLogger(__name__)

INIT_SETUP_CACHE_KEY = "Calendar.init_setup.done"

SUGGESTION_FIELDS = ("name", "timezone", "business_hours", "ical_url", "public_holidays", "note")

_init_setup_lock = threading.Lock()


class Bootstrapper:
    """Set up the initial default calendar, at most once per hour per client IP."""

    def __init__(
        self,
        service: CalendarService,
        geo: Optional[GeoCalendarLookup] = None,
        namer: Optional[UniqueNameGenerator] = None,
        cache: Optional[CacheBackend] = None,
        ttl: Optional[float] = None,
    ):
        self.service = service
        self.geo = geo or GeoCalendarClient()
        self.namer = namer or UniqueNameGenerator(service.store)
        self.cache = cache or get_cache()
        self.ttl = ttl if ttl is not None else config.init_setup_ttl_seconds

    def init_setup(self, ip: Optional[str] = None) -> Optional[Calendar]:
        """
        Create or refresh the system-owned default calendar.

        Args:
            ip: Client IP; private and loopback addresses are ignored

        Returns:
            The created or updated calendar, or None if nothing was done
        """
        ip = public_ip_or_none(ip)

        with _init_setup_lock:
            done = self.cache.get(INIT_SETUP_CACHE_KEY)
            if done is not None and done.get("ip") == ip:
                logger.debug("Initial calendar setup already done for this client")
                return None
            self.cache.set(INIT_SETUP_CACHE_KEY, {"ip": ip}, self.ttl)

        suggestion = self.geo.suggest(ip)
        if not suggestion or not suggestion.get("name"):
            logger.info("No calendar suggestion available, skipping initial setup")
            return None

        details: dict[str, Any] = {
            key: value for key, value in suggestion.items() if key in SUGGESTION_FIELDS
        }
        details["name"] = self.namer.uniquify(details["name"])
        details["default"] = True
        details["created_by_id"] = SYSTEM_USER_ID
        details["updated_by_id"] = SYSTEM_USER_ID

        existing = self.service.store.find_by(
            default=True, created_by_id=SYSTEM_USER_ID, updated_by_id=SYSTEM_USER_ID
        )
        if existing is not None:
            logger.info(f"Updating initial calendar {existing.id} to {details['name']}")
            return self.service.update(existing.id, details).calendar

        logger.info(f"Creating initial calendar {details['name']}")
        return self.service.create(details).calendar
