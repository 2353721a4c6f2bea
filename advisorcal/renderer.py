"""Render composed calendar views as Markdown."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from advisorcal.composer import DayAgenda
from advisorcal.models import Event, Granularity, parse_minutes
from advisorcal.window import window_bounds

logger = logging.getLogger(__name__)


def _strip_day_padding(text: str) -> str:
    """'February 05, 2024' -> 'February 5, 2024'."""
    return text.replace(" 0", " ")


def format_date_heading(day: date) -> str:
    """Convert 2024-02-20 to 'Tuesday, February 20, 2024'."""
    return _strip_day_padding(day.strftime("%A, %B %d, %Y"))


def format_time(time_24: Optional[str]) -> str:
    """Convert '14:00' to '2:00 PM'; missing or invalid times read 'All day'."""
    minutes = parse_minutes(time_24)
    if minutes is None:
        return "All day"
    dt = datetime(2000, 1, 1) + timedelta(minutes=minutes)
    return dt.strftime("%I:%M %p").lstrip("0")


def format_duration(minutes: int) -> str:
    """Convert 90 to '1h 30m'."""
    hours, mins = divmod(minutes, 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


def format_header(anchor: date, granularity: Granularity) -> str:
    """Title shown above the grid for the current view.

    Month: 'February 2024'. Week: 'Feb 19 - Feb 25, 2024' (both years shown
    when the week straddles New Year). Day: 'Tuesday, February 20, 2024'.
    """
    if granularity is Granularity.MONTH:
        return anchor.strftime("%B %Y")
    if granularity is Granularity.DAY:
        return format_date_heading(anchor)
    first, last = window_bounds(anchor, granularity)
    if first.year != last.year:
        return _strip_day_padding(f"{first.strftime('%b %d, %Y')} - {last.strftime('%b %d, %Y')}")
    return _strip_day_padding(f"{first.strftime('%b %d')} - {last.strftime('%b %d, %Y')}")


# ------------------------------------------------------------------
# Event entry
# ------------------------------------------------------------------

def _render_event_line(event: Event) -> str:
    """One agenda bullet: '- **2:00 PM** Portfolio Review (30m, with John Smith)'."""
    extras = [format_duration(event.duration)]
    if event.client:
        extras.append(f"with {event.client}")
    return f"- **{format_time(event.time)}** {event.title} ({', '.join(extras)}) `{event.id}`"


def render_event_details(event: Event) -> str:
    """Render the quick-view details of a single event as a Markdown block."""
    lines: list[str] = [f"### {event.title}", ""]
    lines.append(f"- **Date:** {format_date_heading(event.date)}")
    lines.append(f"- **Time:** {format_time(event.time)}")
    lines.append(f"- **Duration:** {format_duration(event.duration)}")
    if event.type:
        lines.append(f"- **Type:** {event.type}")
    if event.client:
        lines.append(f"- **Client:** {event.client}")
    if event.description:
        lines.append(f"- **Description:** {event.description}")
    lines.append(f"- **ID:** `{event.id}`")
    return "\n".join(lines)


# ------------------------------------------------------------------
# Full document renderer
# ------------------------------------------------------------------

def render_agenda(days: list[DayAgenda], title: str, show_empty: bool = True) -> str:
    """Render a composed view as a Markdown agenda, one section per day."""
    total = sum(len(day.events) for day in days)
    lines: list[str] = [
        f"# {title}",
        "",
        f"*{total} event(s) over {len(days)} day(s)*",
        "",
    ]

    for day in days:
        if not day.events and not show_empty:
            continue
        lines.append(f"## {format_date_heading(day.date)}")
        lines.append("")
        if not day.events:
            lines.append("*No events scheduled*")
        for event in day.events:
            lines.append(_render_event_line(event))
        lines.append("")

    logger.debug("Rendered agenda '%s' (%d events)", title, total)
    return "\n".join(lines)
