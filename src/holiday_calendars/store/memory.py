"""In-memory and JSON-file calendar stores."""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional

from ..models.calendar import Calendar
from ..models.sla import Sla
from ..utils.date_utils import utc_now
from ..utils.exceptions import RecordNotFoundError
from .base import CalendarStore

logger = logging.getLogger(__name__)


class InMemoryStore(CalendarStore):
    """Dictionary-backed store; each write is serialized by a lock."""

    def __init__(self):
        self._calendars: dict[int, Calendar] = {}
        self._slas: dict[int, Sla] = {}
        self._next_calendar_id = 1
        self._next_sla_id = 1
        self._lock = threading.RLock()

    # Calendars

    def create(self, calendar: Calendar) -> Calendar:
        with self._lock:
            stored = calendar.model_copy(deep=True)
            stored.id = self._next_calendar_id
            self._next_calendar_id += 1
            now = utc_now()
            stored.created_at = now
            stored.updated_at = now
            self._calendars[stored.id] = stored
            self._after_write()
            logger.debug(f"Created calendar {stored.id} ({stored.name})")
            return stored.model_copy(deep=True)

    def update(self, calendar: Calendar) -> Calendar:
        with self._lock:
            if calendar.id not in self._calendars:
                raise RecordNotFoundError(f"Calendar {calendar.id} not found")
            stored = calendar.model_copy(deep=True)
            stored.updated_at = utc_now()
            self._calendars[stored.id] = stored
            self._after_write()
            return stored.model_copy(deep=True)

    def update_fields(self, calendar_id: int, **fields: Any) -> Calendar:
        unknown = [key for key in fields if key == "id" or key not in Calendar.model_fields]
        if unknown:
            raise ValueError(f"Cannot update calendar field(s): {', '.join(unknown)}")

        with self._lock:
            current = self._calendars.get(calendar_id)
            if current is None:
                raise RecordNotFoundError(f"Calendar {calendar_id} not found")
            stored = Calendar.model_validate(
                {**current.model_dump(), **fields, "updated_at": utc_now()}
            ).model_copy(deep=True)
            self._calendars[calendar_id] = stored
            self._after_write()
            return stored.model_copy(deep=True)

    def get(self, calendar_id: int) -> Optional[Calendar]:
        with self._lock:
            calendar = self._calendars.get(calendar_id)
            return calendar.model_copy(deep=True) if calendar else None

    def find_by(self, **attributes: Any) -> Optional[Calendar]:
        with self._lock:
            for calendar_id in sorted(self._calendars):
                calendar = self._calendars[calendar_id]
                if all(getattr(calendar, key) == value for key, value in attributes.items()):
                    return calendar.model_copy(deep=True)
            return None

    def all(self) -> list[Calendar]:
        with self._lock:
            return [
                self._calendars[calendar_id].model_copy(deep=True)
                for calendar_id in sorted(self._calendars)
            ]

    def destroy(self, calendar_id: int) -> Calendar:
        with self._lock:
            calendar = self._calendars.pop(calendar_id, None)
            if calendar is None:
                raise RecordNotFoundError(f"Calendar {calendar_id} not found")
            self._after_write()
            logger.debug(f"Destroyed calendar {calendar_id}")
            return calendar

    # SLAs

    def all_slas(self) -> list[Sla]:
        with self._lock:
            return [self._slas[sla_id].model_copy() for sla_id in sorted(self._slas)]

    def get_sla(self, sla_id: int) -> Optional[Sla]:
        with self._lock:
            sla = self._slas.get(sla_id)
            return sla.model_copy() if sla else None

    def create_sla(self, sla: Sla) -> Sla:
        with self._lock:
            stored = sla.model_copy()
            stored.id = self._next_sla_id
            self._next_sla_id += 1
            self._slas[stored.id] = stored
            self._after_write()
            return stored.model_copy()

    def update_sla(self, sla: Sla) -> Sla:
        with self._lock:
            if sla.id not in self._slas:
                raise RecordNotFoundError(f"SLA {sla.id} not found")
            self._slas[sla.id] = sla.model_copy()
            self._after_write()
            return sla.model_copy()

    def _after_write(self) -> None:
        """Hook run inside the lock after every successful write."""


class JsonFileStore(InMemoryStore):
    """InMemoryStore that mirrors its content to a JSON file after each write."""

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)

        for raw in data.get("calendars", []):
            calendar = Calendar.model_validate(raw)
            self._calendars[calendar.id] = calendar
        for raw in data.get("slas", []):
            sla = Sla.model_validate(raw)
            self._slas[sla.id] = sla

        self._next_calendar_id = max(self._calendars, default=0) + 1
        self._next_sla_id = max(self._slas, default=0) + 1
        logger.info(
            f"Loaded {len(self._calendars)} calendar(s) and {len(self._slas)} SLA(s) from {self.path}"
        )

    def _after_write(self) -> None:
        data = {
            "calendars": [
                self._calendars[calendar_id].model_dump(mode="json", exclude_none=True)
                for calendar_id in sorted(self._calendars)
            ],
            "slas": [
                self._slas[sla_id].model_dump(mode="json")
                for sla_id in sorted(self._slas)
            ],
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)
