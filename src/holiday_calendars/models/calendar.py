"""Calendar and public holiday data models."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..utils.date_utils import utc_now

SYSTEM_USER_ID = 1


class HolidayEntry(BaseModel):
    """One public holiday, keyed by its ``YYYY-MM-DD`` date on the calendar."""

    active: Optional[bool] = None
    summary: Optional[str] = None
    feed: Optional[str] = None  # fingerprint of the feed url that produced it

    @property
    def has_explicit_active(self) -> bool:
        """True once any code path has set ``active``; such dates are user-owned."""
        return self.active is not None


class Calendar(BaseModel):
    """Business-hours calendar used by SLA deadline calculation."""

    id: Optional[int] = None
    name: str
    timezone: str = "UTC"
    business_hours: dict[str, Any] = Field(default_factory=dict)
    public_holidays: dict[str, HolidayEntry] = Field(default_factory=dict)
    ical_url: Optional[str] = None
    default: bool = False
    note: Optional[str] = None

    # Sync state
    last_sync: Optional[datetime] = None
    last_log: Optional[str] = None

    # Bookkeeping
    created_by_id: Optional[int] = None
    updated_by_id: Optional[int] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_system_owned(self) -> bool:
        return self.created_by_id == SYSTEM_USER_ID and self.updated_by_id == SYSTEM_USER_ID

    def holidays_dict(self) -> dict[str, dict[str, Any]]:
        """Plain-dict view of ``public_holidays`` without unset keys."""
        return {
            day: entry.model_dump(exclude_none=True)
            for day, entry in self.public_holidays.items()
        }
