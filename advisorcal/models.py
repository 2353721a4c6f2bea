"""Event data model."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace as dc_replace
from datetime import date, datetime
from enum import Enum
from typing import Optional

# Duration used by the event form when none is given.
DEFAULT_DURATION = 30

TIME_FORMAT = "%H:%M"


class Granularity(str, Enum):
    """Calendar view mode."""

    MONTH = "month"
    WEEK = "week"
    DAY = "day"


class Direction(str, Enum):
    """Navigation direction."""

    PREVIOUS = "prev"
    NEXT = "next"

    @property
    def step(self) -> int:
        return 1 if self is Direction.NEXT else -1


def parse_date(value: object) -> date:
    """Coerce an ISO string or date-like value into a naive ``date``.

    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Accept full ISO timestamps ("2024-02-20T00:00:00.000Z") by keeping the day part.
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"not a date: {value!r}")


def parse_minutes(time_str: Optional[str]) -> Optional[int]:
    """Convert '14:30' to minutes since midnight (870). None if missing or invalid."""
    if not time_str or not isinstance(time_str, str):
        return None
    try:
        dt = datetime.strptime(time_str.strip(), TIME_FORMAT)
    except ValueError:
        return None
    return dt.hour * 60 + dt.minute


@dataclass
class Event:
    """A single scheduled appointment."""

    id: str
    title: str
    date: date
    time: Optional[str] = None  # 24-hr time: "14:00"
    duration: int = DEFAULT_DURATION  # minutes
    type: str = ""
    client: Optional[str] = None  # CRM reference, not validated here
    description: Optional[str] = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> dict:
        """Serialize to a plain dict with an ISO date."""
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Event:
        """Deserialize from a plain dict.

        Accepts records as the REST backend returns them: Mongo-style ``_id``
        (which wins over any ``id`` echoed back from a request body), ISO
        timestamps for ``date`` and string durations such as ``"45"``.
        Unknown keys (``userId``, ``__v``...) are dropped.
        """
        data = dict(data)
        if "_id" in data:
            data["id"] = data["_id"]
        known = {k: v for k, v in data.items() if k in cls.field_names()}
        known["id"] = str(known["id"])
        known["date"] = parse_date(known["date"])
        if known.get("duration") in (None, ""):
            known.pop("duration", None)
        else:
            known["duration"] = int(known["duration"])
        return cls(**known)

    def replace(self, **changes) -> Event:
        """Return a copy with *changes* applied. The id never changes."""
        changes.pop("id", None)
        return dc_replace(self, **changes)

    @property
    def minutes_of_day(self) -> Optional[int]:
        return parse_minutes(self.time)

    @property
    def sort_key(self) -> tuple:
        """Key for chronological sorting; untimed events go last in a day."""
        minutes = self.minutes_of_day
        return (self.date, minutes is None, minutes or 0, self.title.lower())

    def __repr__(self) -> str:
        time_str = f" {self.time}" if self.time else ""
        client = f" with {self.client}" if self.client else ""
        return f"<Event {self.id} '{self.title}' on {self.date.isoformat()}{time_str}{client}>"
