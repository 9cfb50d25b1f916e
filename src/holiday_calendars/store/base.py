"""Abstract base class for calendar persistence."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..models.calendar import Calendar
from ..models.sla import Sla


class CalendarStore(ABC):
    """Persistence collaborator for Calendar and SLA records.

    Single-record writes are atomic; nothing spans several records.
    Returned models are copies, so callers persist changes via ``update``.
    """

    @abstractmethod
    def create(self, calendar: Calendar) -> Calendar:
        """
        Persist a new calendar.

        Args:
            calendar: Calendar without an id

        Returns:
            Stored calendar with ``id`` and ``created_at`` assigned
        """

    @abstractmethod
    def update(self, calendar: Calendar) -> Calendar:
        """
        Overwrite an existing calendar.

        Raises:
            RecordNotFoundError: If no calendar has ``calendar.id``
        """

    @abstractmethod
    def update_fields(self, calendar_id: int, **fields: Any) -> Calendar:
        """
        Set only ``fields`` on the currently stored calendar.

        Other attributes keep whatever value the store holds at write time,
        so concurrent writers owning different fields do not revert each
        other.

        Returns:
            The stored calendar after the write

        Raises:
            RecordNotFoundError: If no calendar has ``calendar_id``
            ValueError: If a field is unknown or is ``id``
        """

    @abstractmethod
    def get(self, calendar_id: int) -> Optional[Calendar]:
        """Return the calendar with ``calendar_id``, or None."""

    @abstractmethod
    def find_by(self, **attributes: Any) -> Optional[Calendar]:
        """Return the lowest-id calendar whose attributes all match, or None."""

    @abstractmethod
    def all(self) -> list[Calendar]:
        """Return every calendar ordered by id."""

    @abstractmethod
    def destroy(self, calendar_id: int) -> Calendar:
        """
        Delete a calendar.

        Returns:
            The deleted calendar

        Raises:
            RecordNotFoundError: If no calendar has ``calendar_id``
        """

    @abstractmethod
    def all_slas(self) -> list[Sla]:
        """Return every SLA ordered by id."""

    @abstractmethod
    def get_sla(self, sla_id: int) -> Optional[Sla]:
        """Return the SLA with ``sla_id``, or None."""

    @abstractmethod
    def create_sla(self, sla: Sla) -> Sla:
        """Persist a new SLA and return it with ``id`` assigned."""

    @abstractmethod
    def update_sla(self, sla: Sla) -> Sla:
        """
        Overwrite an existing SLA.

        Raises:
            RecordNotFoundError: If no SLA has ``sla.id``
        """
