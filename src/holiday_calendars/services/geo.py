"""Geo-IP based calendar suggestions."""

import logging
from typing import Any, Optional, Protocol

import requests

from ..config import config

logger = logging.getLogger(__name__)


class GeoCalendarLookup(Protocol):
    """Protocol for the geo-lookup collaborator."""

    def suggest(self, ip: Optional[str]) -> Optional[dict[str, Any]]:
        """
        Suggest calendar attributes for a client location.

        Args:
            ip: Public client IP, or None to let the service decide

        Returns:
            Calendar attributes (name, timezone, business_hours, ical_url)
            or None if nothing can be suggested
        """
        ...


class GeoCalendarClient:
    """Ask an HTTP geo calendar service for a suggestion."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url if base_url is not None else config.geo_calendar_url
        self.timeout = timeout if timeout is not None else config.feed_fetch_timeout

    def suggest(self, ip: Optional[str]) -> Optional[dict[str, Any]]:
        if not self.base_url:
            logger.debug("No geo calendar service configured")
            return None

        params = {"ip": ip} if ip else {}
        try:
            response = requests.get(
                self.base_url,
                params=params,
                headers={"User-Agent": config.feed_user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Geo calendar lookup failed: {e}")
            return None

        if not isinstance(data, dict) or not data.get("name"):
            logger.info("Geo calendar service returned no suggestion")
            return None
        return data
