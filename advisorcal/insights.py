"""Client insights shown beside the calendar."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from advisorcal.models import Event


@dataclass(frozen=True)
class ClientSummary:
    """Meetings booked with one client."""

    client: str
    meetings: int
    minutes: int
    next_meeting: date | None = None


def upcoming(events: Iterable[Event], today: date, limit: int = 5) -> list[Event]:
    """Return the next *limit* events on or after *today*, soonest first."""
    future = [e for e in events if e.date >= today]
    return sorted(future, key=lambda e: e.sort_key)[:limit]


def client_summary(events: Iterable[Event], today: date | None = None) -> list[ClientSummary]:
    """Count meetings and booked minutes per client.

    Events without a client are skipped. Ordered by meeting count (desc),
    then client name.
    """
    counts: Counter[str] = Counter()
    minutes: Counter[str] = Counter()
    next_dates: dict[str, date] = {}

    for event in events:
        if not event.client:
            continue
        counts[event.client] += 1
        minutes[event.client] += event.duration
        if today is not None and event.date >= today:
            current = next_dates.get(event.client)
            if current is None or event.date < current:
                next_dates[event.client] = event.date

    summaries = [
        ClientSummary(client, counts[client], minutes[client], next_dates.get(client))
        for client in counts
    ]
    return sorted(summaries, key=lambda s: (-s.meetings, s.client.lower()))


def type_breakdown(events: Iterable[Event]) -> dict[str, int]:
    """Count events per type, most common first. Untyped events count as 'Other'."""
    counts = Counter(e.type or "Other" for e in events)
    return dict(counts.most_common())
