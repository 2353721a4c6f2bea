"""Create / view / edit / delete workflow for a single event.

The selection and the open dialog are one tagged value::

    Idle  --open-->  ViewingDetails(event)  --edit-->  Editing(event)
    Idle  --new_event-->  Editing(None)

``submit`` leaves ``Editing`` for ``Idle`` after persisting, ``close`` and
``cancel`` drop the selection without touching anything, and ``delete``
removes the event under inspection.

Persistence goes through an ``EventRepository``. Under the default
``CommitPolicy.CONFIRM`` the local collection is only changed once the
repository call has returned. ``CommitPolicy.OPTIMISTIC`` applies the
change first and rolls both the collection and the selection back if the
repository raises.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from advisorcal.errors import (
    CollaboratorFailure,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from advisorcal.index import EventCollection
from advisorcal.models import Event, parse_date
from advisorcal.store import EventRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "date")


class ModalMode(str, Enum):
    NONE = "none"
    DETAILS = "details"
    EDIT = "edit"


class CommitPolicy(str, Enum):
    CONFIRM = "confirm"
    OPTIMISTIC = "optimistic"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ViewingDetails:
    event: Event


@dataclass(frozen=True)
class Editing:
    event: Optional[Event] = None  # None while creating a new event

    @property
    def creating(self) -> bool:
        return self.event is None


LifecycleState = Union[Idle, ViewingDetails, Editing]

IDLE = Idle()


def new_event_id(existing: set[str]) -> str:
    """Return a random id not present in *existing*."""
    while True:
        candidate = uuid.uuid4().hex[:12]
        if candidate not in existing:
            return candidate


def clean_fields(submitted: dict) -> dict:
    """Normalize submitted form values, or raise ``ValidationError``.

    Only fields that were submitted are returned, so the result can be laid
    over an existing record.
    """
    errors: list[str] = []
    known = set(Event.field_names())
    cleaned: dict = {}

    for key, value in submitted.items():
        if key == "id":
            logger.debug("Ignoring submitted id %r", value)
            continue
        if key not in known:
            errors.append(f"Unknown field '{key}'")
            continue
        cleaned[key] = value

    if "title" in cleaned:
        title = cleaned["title"]
        if not isinstance(title, str) or not title.strip():
            errors.append("Title is required")
        else:
            cleaned["title"] = title.strip()

    if "date" in cleaned:
        if cleaned["date"] in (None, ""):
            errors.append("Date is required")
        else:
            try:
                cleaned["date"] = parse_date(cleaned["date"])
            except ValueError:
                errors.append(f"Invalid date '{cleaned['date']}'")

    if "duration" in cleaned:
        try:
            duration = int(cleaned["duration"])
        except (TypeError, ValueError):
            errors.append(f"Invalid duration '{cleaned['duration']}'")
        else:
            if duration < 0:
                errors.append("Duration cannot be negative")
            cleaned["duration"] = duration

    if "time" in cleaned and not isinstance(cleaned["time"], (str, type(None))):
        errors.append(f"Invalid time '{cleaned['time']}'")

    for key in ("time", "client", "description"):
        if key in cleaned and cleaned[key] == "":
            cleaned[key] = None
    if "type" in cleaned and cleaned["type"] is None:
        cleaned["type"] = ""

    if errors:
        raise ValidationError(errors)
    return cleaned


class EventLifecycle:
    """State machine over ``Idle | ViewingDetails | Editing``.

    The controller is the only thing that mutates *collection*.
    """

    def __init__(
        self,
        collection: EventCollection,
        repository: EventRepository,
        policy: CommitPolicy = CommitPolicy.CONFIRM,
        id_factory: Callable[[set[str]], str] = new_event_id,
    ) -> None:
        self.collection = collection
        self.repository = repository
        self.policy = policy
        self._new_id = id_factory
        self._state: LifecycleState = IDLE

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def selected_event(self) -> Optional[Event]:
        if isinstance(self._state, (ViewingDetails, Editing)):
            return self._state.event
        return None

    @property
    def modal_mode(self) -> ModalMode:
        if isinstance(self._state, ViewingDetails):
            return ModalMode.DETAILS
        if isinstance(self._state, Editing):
            return ModalMode.EDIT
        return ModalMode.NONE

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def open(self, event: Event) -> None:
        """Show the quick-view details for *event*, replacing any selection.

        An edit form that is still open is abandoned unsaved.
        """
        if isinstance(self._state, Editing):
            logger.debug("Abandoning open edit form to show %s", event.id)
        self._set(ViewingDetails(event))

    def edit(self) -> None:
        """Move from the details view to the edit form for the same event."""
        state = self._require(ViewingDetails, "edit")
        self._set(Editing(state.event))

    def new_event(self) -> None:
        """Open an empty edit form."""
        self._require(Idle, "new_event")
        self._set(Editing(None))

    def close(self) -> None:
        self._require(ViewingDetails, "close")
        self._set(IDLE)

    def cancel(self) -> None:
        self._require(Editing, "cancel")
        self._set(IDLE)

    def submit(self, fields: dict) -> Optional[Event]:
        """Persist the edit form and return to ``Idle``.

        Returns the stored event, or None when the event being edited no
        longer exists (a logged no-op). Raises ``ValidationError`` (nothing
        changed, still ``Editing``) or ``CollaboratorFailure``.
        """
        state = self._require(Editing, "submit")
        cleaned = clean_fields(fields)

        if state.creating:
            missing = [f for f in REQUIRED_FIELDS if f not in cleaned]
            if missing:
                raise ValidationError([f"{name.capitalize()} is required" for name in missing])
            event = Event(id=self._new_id(self.collection.ids()), **cleaned)
            stored = self._commit(
                persist=lambda: self.repository.create(event),
                apply=lambda ev: self.collection.append(ev),
                local=event,
            )
            logger.info("Created event %s (%s on %s)", stored.id, stored.title, stored.date)
            self._set(IDLE)
            return stored

        current = self.collection.get(state.event.id)
        if current is None:
            logger.warning("Edit target %s is no longer in the collection; nothing saved", state.event.id)
            self._set(IDLE)
            return None
        event = current.replace(**cleaned)
        try:
            stored = self._commit(
                persist=lambda: self.repository.update(event),
                apply=lambda ev: self.collection.replace(ev),
                local=event,
            )
        except NotFoundError:
            logger.warning("Repository has no event %s; edit dropped", event.id)
            self._set(IDLE)
            return None
        logger.info("Updated event %s (%s)", stored.id, ", ".join(sorted(cleaned)) or "no changes")
        self._set(IDLE)
        return stored

    def delete(self) -> None:
        """Delete the event shown in the details view.

        A second call after the first has completed (double click) or a target
        that is already gone is a logged no-op.
        """
        if isinstance(self._state, Idle):
            logger.debug("delete() while idle ignored")
            return
        state = self._require(ViewingDetails, "delete")
        event_id = state.event.id

        if event_id not in self.collection:
            logger.warning("Delete target %s not found; nothing to do", event_id)
            self._set(IDLE)
            return

        def persist() -> None:
            try:
                self.repository.delete(event_id)
            except NotFoundError:
                logger.warning("Repository has no event %s; removing locally", event_id)

        self._commit(persist=persist, apply=lambda _ev: self.collection.remove(event_id), local=None)
        logger.info("Deleted event %s", event_id)
        self._set(IDLE)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _commit(
        self,
        persist: Callable[[], Optional[Event]],
        apply: Callable[[Optional[Event]], object],
        local: Optional[Event],
    ) -> Optional[Event]:
        """Run *persist* and *apply* in the order the commit policy dictates."""
        if self.policy is CommitPolicy.CONFIRM:
            try:
                result = persist()
            except CollaboratorFailure:
                logger.error("Persistence failed; local state left unchanged")
                raise
            stored = result if isinstance(result, Event) else local
            apply(stored)
            return stored

        saved_events = self.collection.snapshot()
        saved_state = self._state
        apply(local)
        try:
            result = persist()
        except (CollaboratorFailure, NotFoundError) as exc:
            logger.error("Persistence failed (%s); rolling back optimistic change", exc)
            self.collection.restore(saved_events)
            self._state = saved_state
            raise
        if isinstance(result, Event) and result != local:
            self.collection.replace(result, local.id)
            return result
        return local

    def _require(self, kind: type, action: str):
        if not isinstance(self._state, kind):
            raise InvalidTransitionError(
                f"{action}() not allowed in state {type(self._state).__name__}"
            )
        return self._state

    def _set(self, state: LifecycleState) -> None:
        logger.debug("Lifecycle %s -> %s", type(self._state).__name__, type(state).__name__)
        self._state = state
