"""Exceptions raised by the calendar engine and its collaborators."""

from __future__ import annotations


class CalendarError(Exception):
    """Base class for every error raised by advisorcal."""


class ValidationError(CalendarError):
    """A submitted event is missing a required field or has a malformed one."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class NotFoundError(CalendarError):
    """No event with the given id exists."""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"event {event_id!r} not found")


class CollaboratorFailure(CalendarError):
    """The persistence layer failed to store or fetch events."""


class InvalidTransitionError(CalendarError):
    """An action is not allowed in the lifecycle's current state."""
