"""Holiday feed retrieval over HTTP or from the local filesystem."""

import logging
import re
from pathlib import Path
from typing import Optional

import requests

from ..config import config
from ..utils.exceptions import FeedFetchError
from .base import FeedReader

logger = logging.getLogger(__name__)

_REMOTE_LOCATION = re.compile(r"^http", re.IGNORECASE)


def is_remote_location(location: str) -> bool:
    """True if ``location`` is fetched over HTTP rather than read from disk."""
    return bool(_REMOTE_LOCATION.match(location))


class FeedFetcher(FeedReader):
    """Fetch feeds with ``requests``; anything not starting with http is a path."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize feed fetcher.

        Args:
            timeout: Request timeout in seconds (defaults to FEED_FETCH_TIMEOUT)
            user_agent: User-Agent header value (defaults to FEED_USER_AGENT)
            session: Optional requests session to reuse connections
        """
        self.timeout = timeout if timeout is not None else config.feed_fetch_timeout
        self.user_agent = user_agent or config.feed_user_agent
        self.session = session

    def fetch(self, location: str) -> bytes:
        if is_remote_location(location):
            return self._fetch_remote(location)
        return self._fetch_local(location)

    def _fetch_remote(self, url: str) -> bytes:
        logger.debug(f"Fetching holiday feed {url}")
        getter = self.session.get if self.session else requests.get
        try:
            response = getter(
                url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FeedFetchError(str(e)) from e

        logger.debug(f"Fetched {len(response.content)} bytes from {url}")
        return response.content

    def _fetch_local(self, location: str) -> bytes:
        path = Path(location).expanduser()
        try:
            return path.read_bytes()
        except OSError as e:
            raise FeedFetchError(f"Unable to read feed file {path}: {e.strerror or e}") from e
