"""advisorcal: calendar scheduling views for advisor appointments."""

from advisorcal.composer import DayAgenda, compose
from advisorcal.lifecycle import CommitPolicy, EventLifecycle, ModalMode
from advisorcal.models import Direction, Event, Granularity
from advisorcal.navigation import navigate
from advisorcal.session import CalendarSession
from advisorcal.window import compute

__all__ = [
    "CalendarSession",
    "CommitPolicy",
    "DayAgenda",
    "Direction",
    "Event",
    "EventLifecycle",
    "Granularity",
    "ModalMode",
    "compose",
    "compute",
    "navigate",
]
