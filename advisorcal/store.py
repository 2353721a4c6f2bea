"""Event repositories: the persistence boundary of the calendar engine."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from advisorcal.errors import CollaboratorFailure, NotFoundError
from advisorcal.models import Event

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("data")
EVENTS_FILE = "events.json"


class EventRepository(Protocol):
    """Interface every persistence backend implements.

    Implementations raise ``CollaboratorFailure`` when the backend cannot
    complete a call, and ``NotFoundError`` when ``update``/``delete`` target
    an unknown id.
    """

    def list(self) -> list[Event]:
        ...

    def create(self, event: Event) -> Event:
        ...

    def update(self, event: Event) -> Event:
        ...

    def delete(self, event_id: str) -> None:
        ...


class InMemoryEventRepository:
    """Dict-backed repository, used as a fake in tests and for scratch sessions.

    Pass operation names in *fail_on* (``{"create", "delete"}``...) to make
    those calls raise ``CollaboratorFailure``.
    """

    def __init__(self, events: Optional[list[Event]] = None, fail_on: Optional[set[str]] = None) -> None:
        self._events: dict[str, Event] = {e.id: e for e in events or []}
        self.fail_on: set[str] = set(fail_on or ())
        self.calls: list[tuple[str, str]] = []

    def _check(self, op: str, target: str) -> None:
        self.calls.append((op, target))
        if op in self.fail_on:
            raise CollaboratorFailure(f"{op} failed for {target}")

    def list(self) -> list[Event]:
        self._check("list", "*")
        return list(self._events.values())

    def create(self, event: Event) -> Event:
        self._check("create", event.id)
        self._events[event.id] = event
        return event

    def update(self, event: Event) -> Event:
        self._check("update", event.id)
        if event.id not in self._events:
            raise NotFoundError(event.id)
        self._events[event.id] = event
        return event

    def delete(self, event_id: str) -> None:
        self._check("delete", event_id)
        if self._events.pop(event_id, None) is None:
            raise NotFoundError(event_id)


class JsonEventStore:
    """Keeps events in a single JSON file.

    File layout:
        data/
            events.json   every event, sorted chronologically
    """

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self.data_dir = data_dir or DEFAULT_DATA_DIR
        self._events_path = self.data_dir / EVENTS_FILE

    @property
    def path(self) -> Path:
        return self._events_path

    # ------------------------------------------------------------------
    # Repository interface
    # ------------------------------------------------------------------

    def list(self) -> list[Event]:
        """Load all events from disk."""
        return self._load()

    def create(self, event: Event) -> Event:
        events = self._load()
        events.append(event)
        self._save(events)
        logger.info("Stored new event %s in %s", event.id, self._events_path)
        return event

    def update(self, event: Event) -> Event:
        events = self._load()
        for i, existing in enumerate(events):
            if existing.id == event.id:
                events[i] = event
                break
        else:
            raise NotFoundError(event.id)
        self._save(events)
        logger.info("Updated event %s in %s", event.id, self._events_path)
        return event

    def delete(self, event_id: str) -> None:
        events = self._load()
        remaining = [e for e in events if e.id != event_id]
        if len(remaining) == len(events):
            raise NotFoundError(event_id)
        self._save(remaining)
        logger.info("Deleted event %s from %s", event_id, self._events_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load(self) -> list[Event]:
        if not self._events_path.exists():
            return []
        try:
            with open(self._events_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [Event.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise CollaboratorFailure(f"cannot read {self._events_path}: {exc}") from exc

    def _save(self, events: list[Event]) -> None:
        events = sorted(events, key=lambda e: e.sort_key)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self._events_path, "w", encoding="utf-8") as f:
                json.dump([e.to_dict() for e in events], f, indent=2, ensure_ascii=False)
        except OSError as exc:
            raise CollaboratorFailure(f"cannot write {self._events_path}: {exc}") from exc
