"""Render a composed calendar view as a standalone HTML page."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from advisorcal.composer import DayAgenda
from advisorcal.models import Event, Granularity
from advisorcal.renderer import format_date_heading, format_duration, format_time

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("output")
CALENDAR_FILE = "calendar.html"

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

STYLE = """
        * { margin: 0; padding: 0; box-sizing: border-box; }

        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #f3f4f6;
            padding: 20px;
            color: #333;
        }

        .container { max-width: 1200px; margin: 0 auto; }

        .header {
            background: #1e3a8a;
            color: white;
            padding: 20px;
            border-radius: 12px 12px 0 0;
            font-size: 1.5em;
            font-weight: 600;
        }

        .weekday-header, .day-grid {
            display: grid;
            grid-template-columns: repeat(var(--columns), 1fr);
            gap: 1px;
            background: #e0e0e0;
            padding: 1px;
        }

        .weekday {
            background: #f5f5f5;
            padding: 10px;
            text-align: center;
            font-weight: 600;
            font-size: 0.9em;
            color: #666;
        }

        .day-cell { background: white; min-height: 110px; padding: 8px; }
        .day-cell.empty { background: #fafafa; }
        .day-cell.today { border-top: 3px solid #1e3a8a; }

        .day-number { font-weight: 600; margin-bottom: 6px; }

        .event-card {
            border-left: 4px solid #2563eb;
            background: #eff6ff;
            border-radius: 4px;
            padding: 4px 6px;
            margin-bottom: 4px;
            font-size: 0.8em;
            cursor: pointer;
        }

        .event-time { color: #2563eb; font-weight: 600; }

        .details-panel {
            position: fixed;
            top: 0;
            right: -420px;
            width: 420px;
            height: 100vh;
            background: white;
            box-shadow: -5px 0 20px rgba(0,0,0,0.2);
            padding: 20px;
            transition: right 0.3s ease;
        }

        .details-panel.open { right: 0; }
        .details-panel dt { font-weight: 600; margin-top: 10px; }
"""

SCRIPT = """
        function showEvent(id) {
            const e = eventsById[id];
            const panel = document.getElementById('detailsPanel');
            const rows = [['When', e.when], ['Duration', e.duration], ['Type', e.type],
                          ['Client', e.client], ['Description', e.description]];
            panel.innerHTML = '<h2></h2><dl></dl><p><button>Close</button></p>';
            panel.querySelector('h2').textContent = e.title;
            const dl = panel.querySelector('dl');
            rows.filter(r => r[1]).forEach(r => {
                const dt = document.createElement('dt');
                const dd = document.createElement('dd');
                dt.textContent = r[0];
                dd.textContent = r[1];
                dl.append(dt, dd);
            });
            panel.querySelector('button').onclick = () => panel.classList.remove('open');
            panel.classList.add('open');
        }
"""


def _escape_html(text: str) -> str:
    """Basic HTML escape."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def _pad_to_weeks(days: list[DayAgenda]) -> list[Optional[DayAgenda]]:
    """Pad a month to whole Monday-first weeks with empty (None) cells."""
    if not days:
        return []
    leading = days[0].date.weekday()
    trailing = (7 - (leading + len(days)) % 7) % 7
    return [None] * leading + list(days) + [None] * trailing


def _render_event_card(event: Event) -> str:
    """Render a single clickable event card for a day cell."""
    return (
        f'<div class="event-card" data-id="{_escape_html(event.id)}" onclick="showEvent(this.dataset.id)">'
        f'<span class="event-time">{format_time(event.time)}</span> '
        f"{_escape_html(event.title)}</div>"
    )


def _event_payload(event: Event) -> dict:
    return {
        "title": event.title,
        "when": f"{format_date_heading(event.date)}, {format_time(event.time)}",
        "duration": format_duration(event.duration),
        "type": event.type,
        "client": event.client or "",
        "description": event.description or "",
    }


def render_calendar_html(
    days: list[DayAgenda],
    granularity: Granularity,
    title: str,
    today: Optional[date] = None,
) -> str:
    """Render the composed view as a grid page with a click-through details panel."""
    if granularity is Granularity.DAY:
        columns = 1
        cells: list[Optional[DayAgenda]] = list(days)
        headers = [days[0].date.strftime("%A")] if days else []
    else:
        columns = 7
        cells = _pad_to_weeks(days) if granularity is Granularity.MONTH else list(days)
        headers = list(WEEKDAYS)

    html_parts: list[str] = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '    <meta charset="UTF-8">',
        f"    <title>{_escape_html(title)}</title>",
        f"    <style>{STYLE}    </style>",
        "</head>",
        "<body>",
        f'    <div class="container" style="--columns: {columns}">',
        f'        <div class="header">{_escape_html(title)}</div>',
        '        <div class="weekday-header">',
    ]
    html_parts.extend(f'            <div class="weekday">{h}</div>' for h in headers)
    html_parts.append("        </div>")
    html_parts.append('        <div class="day-grid">')

    events_by_id: dict[str, dict] = {}
    for cell in cells:
        if cell is None:
            html_parts.append('            <div class="day-cell empty"></div>')
            continue
        classes = "day-cell today" if today is not None and cell.date == today else "day-cell"
        cards = "".join(_render_event_card(e) for e in cell.events)
        html_parts.append(
            f'            <div class="{classes}" data-date="{cell.date.isoformat()}">'
            f'<div class="day-number">{cell.date.day}</div>{cards}</div>'
        )
        for event in cell.events:
            events_by_id[event.id] = _event_payload(event)

    payload = json.dumps(events_by_id).replace("</", "<\\/")
    html_parts.extend([
        "        </div>",
        "    </div>",
        '    <aside class="details-panel" id="detailsPanel"></aside>',
        "    <script>",
        f"        const eventsById = {payload};",
        SCRIPT,
        "    </script>",
        "</body>",
        "</html>",
    ])
    return "\n".join(html_parts)


def publish(
    days: list[DayAgenda],
    granularity: Granularity,
    title: str,
    output_dir: Optional[Path] = None,
    today: Optional[date] = None,
) -> Path:
    """Write calendar.html to the output directory and return its path."""
    out = output_dir or DEFAULT_OUTPUT_DIR
    out.mkdir(parents=True, exist_ok=True)
    calendar_path = out / CALENDAR_FILE
    calendar_path.write_text(render_calendar_html(days, granularity, title, today=today), encoding="utf-8")
    logger.info("Wrote %s (%d day(s))", calendar_path, len(days))
    return calendar_path
