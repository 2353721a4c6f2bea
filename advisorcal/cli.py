"""Command-line interface for advisorcal."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click

from advisorcal import config
from advisorcal.api import EventsApiClient
from advisorcal.errors import CollaboratorFailure, ValidationError
from advisorcal.html_calendar import publish
from advisorcal.insights import client_summary, type_breakdown, upcoming
from advisorcal.models import Direction, Event, Granularity
from advisorcal.renderer import format_duration, format_time, render_agenda, render_event_details
from advisorcal.session import CalendarSession
from advisorcal.store import JsonEventStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(format=config.LOG_FORMAT, level=level)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

VIEW_CHOICE = click.Choice([g.value for g in Granularity], case_sensitive=False)
DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


def _view_options(func):
    """Options shared by the commands that render a window."""
    func = click.option(
        "--offset", type=int, default=0,
        help="Navigate this many views forward (negative: backward).",
    )(func)
    func = click.option(
        "--date", "anchor", type=DATE_TYPE, default=None,
        help="Anchor date, YYYY-MM-DD (default: today).",
    )(func)
    func = click.option(
        "--view", type=VIEW_CHOICE, default=config.DEFAULT_VIEW, envvar=config.ENV_DEFAULT_VIEW,
        show_default=True, help="Calendar granularity.",
    )(func)
    return func


def _event_field_options(func):
    """Options for the editable event fields. Unset options are not submitted."""
    for name, kwargs in reversed([
        ("--title", {"help": "Event title."}),
        ("--date", {"type": DATE_TYPE, "help": "Event date, YYYY-MM-DD."}),
        ("--time", {"help": "Start time, HH:MM (24h)."}),
        ("--duration", {"type": int, "help": "Duration in minutes."}),
        ("--type", {"help": "Event category."}),
        ("--client", {"help": "Client name."}),
        ("--description", {"help": "Free-form notes."}),
    ]):
        func = click.option(name, default=None, **kwargs)(func)
    return func


def _submitted_fields(**options) -> dict:
    """Map CLI options to form fields, dropping the ones not given."""
    fields = {}
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, datetime):
            value = value.date()
        fields[key] = value
    return fields


def _open_session(ctx: click.Context, view: str = config.DEFAULT_VIEW, anchor: Optional[datetime] = None) -> CalendarSession:
    try:
        session = CalendarSession(ctx.obj["repository"], granularity=Granularity(view.lower()))
    except CollaboratorFailure as exc:
        _fail(f"ERROR: {exc}")
    if anchor is not None:
        session.go_to(anchor.date())
    return session


def _apply_offset(session: CalendarSession, offset: int) -> None:
    direction = Direction.NEXT if offset >= 0 else Direction.PREVIOUS
    for _ in range(abs(offset)):
        session.navigate(direction)


def _find(session: CalendarSession, event_id: str) -> Optional[Event]:
    return session.events.get(event_id)


def _fail(message: str) -> None:
    click.echo(message, err=True)
    raise SystemExit(1)


def _submit(session: CalendarSession, fields: dict) -> Optional[Event]:
    """Submit the open edit form, reporting errors the way the CLI does."""
    try:
        return session.lifecycle.submit(fields)
    except ValidationError as exc:
        for message in exc.errors:
            click.echo(f"Invalid: {message}", err=True)
        session.lifecycle.cancel()
        raise SystemExit(1)
    except CollaboratorFailure as exc:
        session.lifecycle.cancel()
        _fail(f"ERROR: {exc}")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--data-dir",
    type=click.Path(path_type=Path),
    default=config.DATA_DIR,
    envvar=config.ENV_DATA_DIR,
    help="Directory for the JSON event store (default: ./data).",
)
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path),
    default=config.OUTPUT_DIR,
    envvar=config.ENV_OUTPUT_DIR,
    help="Directory for HTML output (default: ./output).",
)
@click.option("--api-url", default=config.API_URL, envvar=config.ENV_API_URL,
              help="Backend base URL; when set, events are read from and written to the API.")
@click.option("--token", default=config.API_TOKEN, envvar=config.ENV_API_TOKEN, help="Bearer token for the API.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    data_dir: Path,
    output_dir: Path,
    api_url: str,
    token: str,
) -> None:
    """advisorcal: month, week and day views of advisor appointments."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    if api_url:
        client = EventsApiClient(api_url, token=token or None, timeout=config.API_TIMEOUT)
        ctx.call_on_close(client.close)
        ctx.obj["repository"] = client
    else:
        ctx.obj["repository"] = JsonEventStore(data_dir=data_dir)
    ctx.obj["output_dir"] = output_dir


@cli.command()
@_view_options
@click.option("--hide-empty", is_flag=True, help="Skip days without events.")
@click.pass_context
def show(ctx: click.Context, view: str, anchor: Optional[datetime], offset: int, hide_empty: bool) -> None:
    """Print the agenda for a month, week or day."""
    session = _open_session(ctx, view, anchor)
    _apply_offset(session, offset)
    click.echo(render_agenda(session.render(), session.title(), show_empty=not hide_empty))


@cli.command("html")
@_view_options
@click.pass_context
def html_cmd(ctx: click.Context, view: str, anchor: Optional[datetime], offset: int) -> None:
    """Write the calendar view to calendar.html."""
    session = _open_session(ctx, view, anchor)
    _apply_offset(session, offset)
    path = publish(
        session.render(),
        session.view.granularity,
        session.title(),
        output_dir=ctx.obj["output_dir"],
        today=session.today,
    )
    click.echo(f"Published: {path}")


@cli.command()
@_event_field_options
@click.pass_context
def add(ctx: click.Context, **options) -> None:
    """Schedule a new event."""
    session = _open_session(ctx)
    session.lifecycle.new_event()
    event = _submit(session, _submitted_fields(**options))
    click.echo(f"Created {event.id}: {event.title} on {event.date.isoformat()} at {format_time(event.time)}")


@cli.command()
@click.argument("event_id")
@_event_field_options
@click.pass_context
def edit(ctx: click.Context, event_id: str, **options) -> None:
    """Change fields of an existing event; unspecified fields keep their values."""
    session = _open_session(ctx)
    event = _find(session, event_id)
    if event is None:
        _fail(f"No event with id {event_id}.")
    session.lifecycle.open(event)
    session.lifecycle.edit()
    updated = _submit(session, _submitted_fields(**options))
    if updated is None:
        click.echo(f"Event {event_id} no longer exists; nothing saved.")
        return
    click.echo(f"Updated {updated.id}: {updated.title} on {updated.date.isoformat()}")


@cli.command()
@click.argument("event_id")
@click.pass_context
def delete(ctx: click.Context, event_id: str) -> None:
    """Delete an event. Deleting an unknown id does nothing."""
    session = _open_session(ctx)
    event = _find(session, event_id)
    if event is None:
        click.echo(f"No event with id {event_id}; nothing deleted.")
        return
    session.lifecycle.open(event)
    try:
        session.lifecycle.delete()
    except CollaboratorFailure as exc:
        session.lifecycle.close()
        _fail(f"ERROR: {exc}")
    click.echo(f"Deleted {event_id}: {event.title}")


@cli.command()
@click.argument("event_id")
@click.pass_context
def details(ctx: click.Context, event_id: str) -> None:
    """Show the details of one event."""
    session = _open_session(ctx)
    event = _find(session, event_id)
    if event is None:
        _fail(f"No event with id {event_id}.")
    session.lifecycle.open(event)
    click.echo(render_event_details(event))
    session.lifecycle.close()


@cli.command()
@click.option("--limit", type=int, default=5, show_default=True, help="How many upcoming events to list.")
@click.option("--today", "today", type=DATE_TYPE, default=None, help="Reference date (default: today).")
@click.pass_context
def insights(ctx: click.Context, limit: int, today: Optional[datetime]) -> None:
    """Show upcoming appointments and per-client totals."""
    session = _open_session(ctx)
    ref: date = today.date() if today else session.today
    events = list(session.events)

    click.echo("Upcoming:")
    for event in upcoming(events, ref, limit=limit):
        click.echo(f"  {event.date.isoformat()} {format_time(event.time):>8}  {event.title}")

    click.echo("\nClients:")
    for summary in client_summary(events, today=ref):
        next_str = summary.next_meeting.isoformat() if summary.next_meeting else "-"
        click.echo(
            f"  {summary.client:<20} {summary.meetings:>3} meeting(s) "
            f"{format_duration(summary.minutes):>8}  next: {next_str}"
        )

    click.echo("\nBy type:")
    for name, count in type_breakdown(events).items():
        click.echo(f"  {name:<20} {count:>3}")


@cli.command()
@click.option("--email", required=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def login(ctx: click.Context, email: str, password: str) -> None:
    """Log in to the backend API and print a bearer token."""
    repository = ctx.obj["repository"]
    if not isinstance(repository, EventsApiClient):
        _fail("login needs --api-url (or ADVISORCAL_API_URL).")
    try:
        token = repository.login(email, password)
    except CollaboratorFailure as exc:
        _fail(f"ERROR: {exc}")
    click.echo(token)


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show event counts."""
    session = _open_session(ctx)
    events = list(session.events)
    click.echo(f"Events:           {len(events)}")
    click.echo(f"Days with events: {len({e.date for e in events})}")
    click.echo(f"Upcoming:         {len([e for e in events if e.date >= session.today])}")
