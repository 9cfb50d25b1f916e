"""Keeps exactly one default calendar and SLA references pointing at real calendars."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from ..models.calendar import Calendar
from ..store.base import CalendarStore
from ..utils.exceptions import InvariantRepairError

logger = logging.getLogger(__name__)

# Enforcement reads and rewrites the whole collection; one pass at a time per process.
_enforcement_lock = threading.Lock()


@dataclass
class EnforcementResult:
    """What one enforcement pass changed."""

    default_calendar_id: Optional[int] = None
    demoted: list[int] = field(default_factory=list)
    promoted: Optional[int] = None
    repaired_slas: list[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.demoted or self.promoted is not None or self.repaired_slas)


class DefaultCalendarEnforcer:
    """Run after every calendar create, update or destroy."""

    def __init__(self, store: CalendarStore, lock: Optional[threading.Lock] = None):
        self.store = store
        self._lock = lock or _enforcement_lock

    def enforce(self, changed: Optional[Calendar] = None) -> EnforcementResult:
        """
        Restore the default-calendar invariant.

        Args:
            changed: Calendar just created or updated (None after a destroy)

        Returns:
            EnforcementResult

        Raises:
            InvariantRepairError: If some SLA could not be repaired. Every
                other SLA has still been processed.
        """
        result = EnforcementResult()
        with self._lock:
            if changed is not None and changed.default:
                self._propagate_default(changed, result)

            default_calendar = self._ensure_single_default(result)
            if default_calendar is None:
                logger.debug("No calendars left, nothing to enforce")
                return result
            result.default_calendar_id = default_calendar.id

            failures = self._repair_slas(default_calendar, result)

        if result.changed:
            logger.info(
                f"Default calendar is {result.default_calendar_id}: "
                f"demoted {result.demoted}, promoted {result.promoted}, "
                f"repaired {len(result.repaired_slas)} SLA(s)"
            )
        if failures:
            raise InvariantRepairError(failures)
        return result

    def _propagate_default(self, changed: Calendar, result: EnforcementResult) -> None:
        for calendar in self.store.all():
            if calendar.id == changed.id or not calendar.default:
                continue
            calendar.default = False
            self.store.update_fields(calendar.id, default=False)
            result.demoted.append(calendar.id)

    def _ensure_single_default(self, result: EnforcementResult) -> Optional[Calendar]:
        calendars = sorted(self.store.all(), key=lambda c: (c.created_at, c.id))
        if not calendars:
            return None

        defaults = [c for c in calendars if c.default]
        if not defaults:
            first = calendars[0]
            first.default = True
            self.store.update_fields(first.id, default=True)
            result.promoted = first.id
            logger.info(f"Promoted calendar {first.id} ({first.name}) to default")
            return first

        # Only reachable when records were written outside this pass.
        for extra in defaults[1:]:
            extra.default = False
            self.store.update_fields(extra.id, default=False)
            result.demoted.append(extra.id)
        return defaults[0]

    def _repair_slas(
        self, default_calendar: Calendar, result: EnforcementResult
    ) -> list[tuple[int, Exception]]:
        calendar_ids = {c.id for c in self.store.all()}
        failures: list[tuple[int, Exception]] = []

        for sla in self.store.all_slas():
            if sla.calendar_id is not None and sla.calendar_id in calendar_ids:
                continue
            previous = sla.calendar_id
            sla.calendar_id = default_calendar.id
            try:
                self.store.update_sla(sla)
            except Exception as e:
                logger.error(f"Failed to point SLA {sla.id} at calendar {default_calendar.id}: {e}")
                failures.append((sla.id, e))
                continue
            result.repaired_slas.append(sla.id)
            logger.debug(f"SLA {sla.id}: calendar {previous} -> {default_calendar.id}")

        return failures
