"""Combine a date window with the event index into a renderable agenda."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date
from typing import NamedTuple

from advisorcal.models import Event


class DayAgenda(NamedTuple):
    """One visible day and its events, in display order."""

    date: date
    events: list[Event]


def compose(
    visible_dates: Iterable[date],
    events_on: Callable[[date], list[Event]],
) -> list[DayAgenda]:
    """Return one ``DayAgenda`` per visible date, in the same order.

    *events_on* is queried afresh for every date on every call.
    """
    return [DayAgenda(day, list(events_on(day))) for day in visible_dates]
