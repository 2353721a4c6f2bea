"""Tests for the Markdown and HTML renderers and the client insights."""

from datetime import date

import pytest

from advisorcal.composer import compose
from advisorcal.html_calendar import publish, render_calendar_html
from advisorcal.index import EventIndex
from advisorcal.insights import client_summary, type_breakdown, upcoming
from advisorcal.models import Event, Granularity
from advisorcal.renderer import (
    format_duration,
    format_header,
    format_time,
    render_agenda,
    render_event_details,
)
from advisorcal.window import compute


@pytest.mark.parametrize(
    "value, expected",
    [("14:00", "2:00 PM"), ("09:05", "9:05 AM"), ("00:30", "12:30 AM"), (None, "All day"), ("noon", "All day")],
)
def test_format_time(value, expected):
    assert format_time(value) == expected


def test_format_duration():
    assert format_duration(30) == "30m"
    assert format_duration(60) == "1h"
    assert format_duration(90) == "1h 30m"


def test_format_header():
    anchor = date(2024, 2, 20)

    assert format_header(anchor, Granularity.MONTH) == "February 2024"
    assert format_header(anchor, Granularity.WEEK) == "Feb 19 - Feb 25, 2024"
    assert format_header(anchor, Granularity.DAY) == "Tuesday, February 20, 2024"
    assert format_header(date(2024, 3, 6), Granularity.WEEK) == "Mar 4 - Mar 10, 2024"
    assert format_header(date(2025, 1, 1), Granularity.WEEK) == "Dec 30, 2024 - Jan 5, 2025"


def _week(events):
    index = EventIndex.build(events)
    return compose(compute(date(2024, 2, 20), Granularity.WEEK), index.events_on)


def test_render_agenda(sample_events):
    text = render_agenda(_week(sample_events), "Feb 19 - Feb 25, 2024")

    assert text.startswith("# Feb 19 - Feb 25, 2024")
    assert "*2 event(s) over 7 day(s)*" in text
    assert text.index("Portfolio Review") < text.index("Market Update")
    assert "- **2:00 PM** Portfolio Review (30m, with John Smith) `1`" in text
    assert "*No events scheduled*" in text


def test_render_agenda_hide_empty(sample_events):
    text = render_agenda(_week(sample_events), "Week", show_empty=False)

    assert "## Tuesday, February 20, 2024" in text
    assert "Monday" not in text


def test_render_event_details(portfolio_review):
    text = render_event_details(portfolio_review)

    assert text.splitlines()[0] == "### Portfolio Review"
    assert "- **Client:** John Smith" in text
    assert "- **Duration:** 30m" in text


def test_month_html_is_padded_to_whole_weeks(sample_events):
    index = EventIndex.build(sample_events)
    days = compose(compute(date(2024, 2, 20), Granularity.MONTH), index.events_on)

    html = render_calendar_html(days, Granularity.MONTH, "February 2024", today=date(2024, 2, 20))

    # Feb 2024 starts on a Thursday: 3 leading blanks, 29 days, 3 trailing blanks.
    assert html.count('class="day-cell empty"') == 6
    assert html.count('data-date="2024-02-') == 29
    assert 'class="day-cell today" data-date="2024-02-20"' in html
    assert "Portfolio Review" in html


def test_html_escapes_titles():
    event = Event(id="x", title="<script>alert(1)</script>", date=date(2024, 2, 20))
    days = compose([date(2024, 2, 20)], EventIndex.build([event]).events_on)

    html = render_calendar_html(days, Granularity.DAY, "Day")

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


def test_html_event_ids_are_passed_through_data_attributes():
    event = Event(id="a'b\"c", title="Quoted", date=date(2024, 2, 20))
    days = compose([date(2024, 2, 20)], EventIndex.build([event]).events_on)

    html = render_calendar_html(days, Granularity.DAY, "Day")

    assert 'data-id="a&#39;b&quot;c" onclick="showEvent(this.dataset.id)"' in html
    assert "showEvent('" not in html


def test_publish_writes_file(tmp_path, sample_events):
    path = publish(_week(sample_events), Granularity.WEEK, "Week", output_dir=tmp_path)

    assert path == tmp_path / "calendar.html"
    assert "Market Update" in path.read_text(encoding="utf-8")


def test_upcoming(sample_events):
    past = Event(id="p", title="Old", date=date(2024, 1, 5))
    later = Event(id="l", title="Later", date=date(2024, 3, 1))

    result = upcoming(sample_events + [past, later], today=date(2024, 2, 20), limit=2)

    assert [e.id for e in result] == ["1", "2"]


def test_client_summary():
    events = [
        Event(id="a", title="A", date=date(2024, 2, 1), client="John Smith", duration=30),
        Event(id="b", title="B", date=date(2024, 3, 1), client="John Smith", duration=60),
        Event(id="c", title="C", date=date(2024, 2, 25), client="Ann Lee", duration=45),
        Event(id="d", title="D", date=date(2024, 2, 25)),
    ]

    summaries = client_summary(events, today=date(2024, 2, 20))

    assert [(s.client, s.meetings, s.minutes) for s in summaries] == [
        ("John Smith", 2, 90),
        ("Ann Lee", 1, 45),
    ]
    assert summaries[0].next_meeting == date(2024, 3, 1)


def test_type_breakdown(sample_events):
    extra = Event(id="x", title="X", date=date(2024, 2, 21), type="Team Meeting")
    untyped = Event(id="y", title="Y", date=date(2024, 2, 21))

    assert type_breakdown(sample_events + [extra, untyped]) == {
        "Team Meeting": 2,
        "Investment Strategy": 1,
        "Other": 1,
    }
