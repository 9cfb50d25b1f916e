"""Collection-unique calendar names."""

from ..store.base import CalendarStore


class UniqueNameGenerator:
    """Append ``_1``, ``_2``, ... until no calendar uses the name."""

    def __init__(self, store: CalendarStore, max_attempts: int = 100):
        self.store = store
        self.max_attempts = max_attempts

    def uniquify(self, name: str) -> str:
        if self.store.find_by(name=name) is None:
            return name
        for counter in range(1, self.max_attempts + 1):
            candidate = f"{name}_{counter}"
            if self.store.find_by(name=candidate) is None:
                return candidate
        raise ValueError(f"Unable to find a unique calendar name for {name!r}")
