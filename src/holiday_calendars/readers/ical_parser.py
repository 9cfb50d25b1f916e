"""iCalendar holiday feed parsing and event extraction."""

import codecs
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from icalendar import Calendar as ICalendar

from ..utils.date_utils import ensure_utc, format_day, get_holiday_window
from ..utils.exceptions import FeedParseError
from .base import FeedReader
from .feed_fetcher import FeedFetcher

logger = logging.getLogger(__name__)

PLACEHOLDER = "?"

# Clock-change pseudo events published by many holiday feeds.
DAYLIGHT_SAVING_PATTERN = re.compile(r"(daylight saving|sommerzeit|summertime)", re.IGNORECASE)


def _placeholder_errors(error: UnicodeError) -> tuple[str, int]:
    return PLACEHOLDER, error.end


codecs.register_error("holiday_placeholder", _placeholder_errors)


@dataclass
class FeedEvent:
    """A single VEVENT reduced to what holiday extraction needs."""

    start: Union[date, datetime]
    summary: Optional[str] = None
    description: Optional[str] = None


def normalize_text(value: Union[str, bytes, None]) -> str:
    """
    Normalize feed text to valid UTF-8.

    Invalid byte sequences and unpaired surrogates are replaced with
    ``PLACEHOLDER`` instead of failing.

    Args:
        value: Raw text or bytes

    Returns:
        Clean text (empty for None)
    """
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8-sig", errors="holiday_placeholder")
    return str(value).encode("utf-8", errors="holiday_placeholder").decode("utf-8")


def is_daylight_saving_entry(text: str) -> bool:
    return bool(DAYLIGHT_SAVING_PATTERN.search(text))


def parse_feed(content: Union[str, bytes]) -> list[FeedEvent]:
    """
    Parse iCalendar content into feed events.

    Only the first calendar of the stream is read. Events without a
    usable DTSTART are skipped.

    Args:
        content: Raw feed bytes or text

    Returns:
        Events in feed order

    Raises:
        FeedParseError: If the content is not iCalendar data
    """
    text = normalize_text(content)
    try:
        components = ICalendar.from_ical(text, multiple=True)
    except Exception as e:
        raise FeedParseError(f"Unable to parse calendar feed: {e}") from e

    calendars = [c for c in components if c.name == "VCALENDAR"]
    if not calendars:
        raise FeedParseError("Unable to parse calendar feed: no VCALENDAR found")

    events = []
    for component in calendars[0].walk("VEVENT"):
        try:
            start = component.decoded("DTSTART")
        except (KeyError, ValueError) as e:
            logger.warning(f"Skipping feed event without usable DTSTART: {e}")
            continue
        if not isinstance(start, date):
            logger.warning(f"Skipping feed event with unparsable DTSTART: {start!r}")
            continue
        summary = component.get("SUMMARY")
        description = component.get("DESCRIPTION")
        events.append(
            FeedEvent(
                start=start,
                summary=str(summary) if summary is not None else None,
                description=str(description) if description is not None else None,
            )
        )
    return events


class EventExtractor:
    """Turn a holiday feed into a ``{YYYY-MM-DD: description}`` map."""

    def __init__(self, reader: Optional[FeedReader] = None):
        self.reader = reader or FeedFetcher()

    def extract(self, location: str, now: Optional[datetime] = None) -> dict[str, str]:
        """
        Fetch and parse a feed, keeping events between one year back and
        three years ahead of ``now``.

        Args:
            location: Feed URL or local path
            now: Reference time (defaults to the current time)

        Returns:
            Date to description map sorted by date

        Raises:
            FeedFetchError: If the feed cannot be retrieved
            FeedParseError: If the feed is not calendar data
        """
        content = self.reader.fetch(location)
        return self.extract_from_content(content, now=now)

    def extract_from_content(
        self, content: Union[str, bytes], now: Optional[datetime] = None
    ) -> dict[str, str]:
        window_start, window_end = get_holiday_window(now)

        days: dict[str, str] = {}
        skipped = 0
        for event in parse_feed(content):
            start = ensure_utc(event.start)
            if start < window_start or start > window_end:
                skipped += 1
                continue

            comment = normalize_text(event.summary or event.description)
            if is_daylight_saving_entry(comment):
                skipped += 1
                continue

            # Later events for the same day overwrite earlier ones.
            days[format_day(event.start)] = comment

        logger.debug(f"Extracted {len(days)} holiday(s), skipped {skipped} event(s)")
        return dict(sorted(days.items()))
