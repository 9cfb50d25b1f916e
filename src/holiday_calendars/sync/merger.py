"""Reconcile extracted feed holidays with a calendar's local holiday store."""

import hashlib
from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..models.calendar import HolidayEntry


def feed_fingerprint(url: str) -> str:
    """MD5 hex digest of the feed url string (not of the feed content)."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()


@dataclass
class MergeResult:
    """Outcome of merging one extraction into a holiday map."""

    holidays: dict[str, HolidayEntry] = field(default_factory=dict)
    added: int = 0
    pruned: int = 0
    kept: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.pruned)


def merge_holidays(
    existing: Optional[Mapping[str, HolidayEntry]],
    extracted: Mapping[str, str],
    fingerprint: str,
) -> MergeResult:
    """
    Merge extracted ``{day: summary}`` facts into ``existing``.

    ``existing`` is left untouched; the merged map is returned. Entries from
    another feed fingerprint are dropped first. A day whose entry already
    carries an explicit ``active`` flag is never overwritten, so user edits
    survive every later sync. Entries without a fingerprint are user-created
    and are never pruned.

    Args:
        existing: Current public holidays of the calendar (may be None)
        extracted: Output of EventExtractor
        fingerprint: feed_fingerprint() of the current feed url

    Returns:
        MergeResult with the new holiday map and change counters
    """
    result = MergeResult()
    holidays = {day: entry.model_copy() for day, entry in (existing or {}).items()}

    for day in list(holidays):
        entry = holidays[day]
        if entry.feed and entry.feed != fingerprint:
            del holidays[day]
            result.pruned += 1

    for day, summary in extracted.items():
        entry = holidays.get(day)
        if entry is not None and entry.has_explicit_active:
            result.kept += 1
            continue
        holidays[day] = HolidayEntry(active=True, summary=summary, feed=fingerprint)
        result.added += 1

    result.holidays = holidays
    return result
