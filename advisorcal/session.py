"""A calendar view session: view state, event collection and lifecycle together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from advisorcal.composer import DayAgenda, compose
from advisorcal.errors import InvalidTransitionError
from advisorcal.index import EventCollection
from advisorcal.lifecycle import CommitPolicy, EventLifecycle, Idle
from advisorcal.models import Direction, Event, Granularity
from advisorcal.navigation import navigate
from advisorcal.renderer import format_header
from advisorcal.store import EventRepository
from advisorcal.window import compute

logger = logging.getLogger(__name__)

DEFAULT_GRANULARITY = Granularity.WEEK


@dataclass
class CalendarViewState:
    """Granularity plus anchor; the visible dates are derived on every read."""

    anchor_date: date = field(default_factory=date.today)
    granularity: Granularity = DEFAULT_GRANULARITY

    @property
    def visible_dates(self) -> list[date]:
        return compute(self.anchor_date, self.granularity)


class CalendarSession:
    """Everything one open calendar screen needs.

    The initial events come from *repository*; afterwards the lifecycle
    controller is the only writer of ``events``.
    """

    def __init__(
        self,
        repository: EventRepository,
        today: Optional[date] = None,
        granularity: Granularity = DEFAULT_GRANULARITY,
        policy: CommitPolicy = CommitPolicy.CONFIRM,
    ) -> None:
        self.repository = repository
        self._today = today
        self.view = CalendarViewState(anchor_date=self.today, granularity=granularity)
        self.events = EventCollection(repository.list())
        self.lifecycle = EventLifecycle(self.events, repository, policy=policy)
        logger.debug("Session opened with %d event(s), %s view", len(self.events), granularity.value)

    @property
    def today(self) -> date:
        return self._today or date.today()

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    @property
    def visible_dates(self) -> list[date]:
        return self.view.visible_dates

    def set_granularity(self, granularity: Granularity) -> None:
        """Switch view mode; the anchor stays where it is."""
        self.view.granularity = Granularity(granularity)

    def navigate(self, direction: Direction) -> date:
        self.view.anchor_date = navigate(self.view.anchor_date, self.view.granularity, direction)
        return self.view.anchor_date

    def next(self) -> date:
        return self.navigate(Direction.NEXT)

    def previous(self) -> date:
        return self.navigate(Direction.PREVIOUS)

    def go_to(self, anchor: date) -> None:
        self.view.anchor_date = anchor

    def go_to_today(self) -> None:
        self.go_to(self.today)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def events_on(self, day: date) -> list[Event]:
        return self.events.events_on(day)

    def render(self) -> list[DayAgenda]:
        """Compose the visible window against the current collection."""
        return compose(self.visible_dates, self.events.events_on)

    def title(self) -> str:
        return format_header(self.view.anchor_date, self.view.granularity)

    def reload(self) -> None:
        """Re-read the collection from the repository. Only allowed while idle."""
        if not isinstance(self.lifecycle.state, Idle):
            raise InvalidTransitionError("cannot reload while an event is open")
        self.events.restore(self.repository.list())
        logger.info("Reloaded %d event(s)", len(self.events))
