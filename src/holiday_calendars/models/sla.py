"""SLA record model (only the calendar reference is used here)."""

from typing import Optional

from pydantic import BaseModel


class Sla(BaseModel):
    """SLA policy pointing at the calendar its deadlines are computed with."""

    id: Optional[int] = None
    name: str
    calendar_id: Optional[int] = None
