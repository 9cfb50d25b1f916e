"""Custom exceptions for Holiday Calendars application."""


class CalendarSyncError(Exception):
    """Base exception for calendar sync errors."""


class FeedFetchError(CalendarSyncError):
    """Raised when a holiday feed cannot be retrieved."""


class FeedParseError(CalendarSyncError):
    """Raised when a holiday feed is not valid calendar data."""


class RecordNotFoundError(CalendarSyncError):
    """Raised when a calendar or SLA record does not exist."""


class ConfigurationError(CalendarSyncError):
    """Raised when configuration is invalid."""


class InvariantRepairError(CalendarSyncError):
    """Raised when one or more SLA references could not be repaired.

    ``failures`` holds ``(sla_id, error)`` pairs, one per failed write.
    """

    def __init__(self, failures: list[tuple[int, Exception]]):
        self.failures = failures
        details = ", ".join(f"sla {sla_id}: {error}" for sla_id, error in failures)
        super().__init__(f"Failed to repair {len(failures)} SLA reference(s): {details}")
