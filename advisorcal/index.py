"""Day-keyed lookup over the event collection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import date
from typing import Optional

from advisorcal.models import Event

logger = logging.getLogger(__name__)


def _time_order(event: Event) -> tuple[bool, int]:
    """Sort key within a day: timed events by minute, untimed/invalid last."""
    minutes = event.minutes_of_day
    return (minutes is None, minutes or 0)


class EventIndex:
    """Read-only projection of events grouped by date.

    Within a day, events are ordered by ``time`` ascending. Events with a
    missing or unparsable time go last. ``sorted`` is stable, so ties keep
    the order of the source collection.
    """

    def __init__(self, buckets: dict[date, list[Event]]) -> None:
        self._buckets = buckets

    @classmethod
    def build(cls, events: Iterable[Event]) -> EventIndex:
        buckets: dict[date, list[Event]] = {}
        for event in events:
            buckets.setdefault(event.date, []).append(event)
        for day in buckets:
            buckets[day] = sorted(buckets[day], key=_time_order)
        return cls(buckets)

    def events_on(self, day: date) -> list[Event]:
        """Events scheduled on *day*; empty list for a free day."""
        return list(self._buckets.get(day, ()))

    def dates(self) -> list[date]:
        return sorted(self._buckets)

    def as_dict(self) -> dict[date, list[Event]]:
        return {day: list(events) for day, events in self._buckets.items()}

    def __len__(self) -> int:
        return sum(len(v) for v in self._buckets.values())


class EventCollection:
    """Ordered, id-unique set of events owned by a view session.

    The index is dropped on every mutation and rebuilt on the next read, so
    readers never see a stale projection.
    """

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._events: list[Event] = []
        self._index: Optional[EventIndex] = None
        for event in events:
            self.append(event)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @property
    def index(self) -> EventIndex:
        if self._index is None:
            self._index = EventIndex.build(self._events)
            logger.debug("Rebuilt event index (%d event(s))", len(self._events))
        return self._index

    def events_on(self, day: date) -> list[Event]:
        return self.index.events_on(day)

    def get(self, event_id: str) -> Optional[Event]:
        for event in self._events:
            if event.id == event_id:
                return event
        return None

    def ids(self) -> set[str]:
        return {e.id for e in self._events}

    def snapshot(self) -> list[Event]:
        return list(self._events)

    def __contains__(self, event_id: object) -> bool:
        return any(e.id == event_id for e in self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def append(self, event: Event) -> None:
        if event.id in self:
            raise ValueError(f"duplicate event id: {event.id!r}")
        self._events.append(event)
        self._invalidate()

    def replace(self, event: Event, event_id: Optional[str] = None) -> bool:
        """Swap in *event* for the stored record with *event_id*, in place.

        *event_id* defaults to ``event.id``; pass the old id when the backend
        has re-keyed the record.
        """
        target = event.id if event_id is None else event_id
        for i, existing in enumerate(self._events):
            if existing.id == target:
                self._events[i] = event
                self._invalidate()
                return True
        return False

    def remove(self, event_id: str) -> bool:
        """Drop the event with *event_id*. Returns False if it was not there."""
        for i, existing in enumerate(self._events):
            if existing.id == event_id:
                del self._events[i]
                self._invalidate()
                return True
        return False

    def restore(self, events: Iterable[Event]) -> None:
        """Reset the contents wholesale (reload or rollback)."""
        self._events = []
        self._invalidate()
        for event in events:
            self.append(event)

    def _invalidate(self) -> None:
        self._index = None
