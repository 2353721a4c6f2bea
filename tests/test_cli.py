"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from advisorcal.cli import cli
from advisorcal.store import EVENTS_FILE, JsonEventStore


@pytest.fixture
def data_dir(tmp_path, sample_events):
    store = JsonEventStore(tmp_path / "data")
    for event in sample_events:
        store.create(event)
    return tmp_path / "data"


@pytest.fixture
def run(data_dir, tmp_path, monkeypatch):
    monkeypatch.delenv("ADVISORCAL_API_URL", raising=False)
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(
            cli,
            ["--data-dir", str(data_dir), "--output-dir", str(tmp_path / "out"), *args],
        )

    return invoke


def _stored(data_dir):
    return json.loads((data_dir / EVENTS_FILE).read_text(encoding="utf-8"))


def test_show_week(run):
    result = run("show", "--view", "week", "--date", "2024-02-20")

    assert result.exit_code == 0, result.output
    assert "# Feb 19 - Feb 25, 2024" in result.output
    assert result.output.index("Portfolio Review") < result.output.index("Market Update")


def test_show_with_offset(run):
    result = run("show", "--view", "month", "--date", "2024-01-31", "--offset", "1", "--hide-empty")

    assert result.exit_code == 0, result.output
    assert "# February 2024" in result.output
    assert "Portfolio Review" in result.output


def test_html(run, tmp_path):
    result = run("html", "--view", "month", "--date", "2024-02-01")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "calendar.html").exists()


def test_add(run, data_dir):
    result = run("add", "--title", "Tax Planning", "--date", "2024-02-22", "--time", "11:00", "--client", "Jane Doe")

    assert result.exit_code == 0, result.output
    assert "Created " in result.output
    assert len(_stored(data_dir)) == 3


def test_add_without_title_fails_and_writes_nothing(run, data_dir):
    result = run("add", "--date", "2024-02-22")

    assert result.exit_code == 1
    assert "Title is required" in result.output
    assert len(_stored(data_dir)) == 2


def test_edit_changes_only_given_fields(run, data_dir):
    result = run("edit", "1", "--time", "15:30")

    assert result.exit_code == 0, result.output
    record = next(r for r in _stored(data_dir) if r["id"] == "1")
    assert record["time"] == "15:30"
    assert record["title"] == "Portfolio Review"
    assert record["client"] == "John Smith"


def test_edit_unknown_id(run):
    result = run("edit", "nope", "--title", "x")

    assert result.exit_code == 1
    assert "No event with id nope" in result.output


def test_delete_twice(run, data_dir):
    first = run("delete", "2")
    second = run("delete", "2")

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert "nothing deleted" in second.output
    assert [r["id"] for r in _stored(data_dir)] == ["1"]


def test_details(run):
    result = run("details", "1")

    assert result.exit_code == 0, result.output
    assert "### Portfolio Review" in result.output


def test_insights(run):
    result = run("insights", "--today", "2024-02-01")

    assert result.exit_code == 0, result.output
    assert "John Smith" in result.output
    assert "Team Meeting" in result.output


def test_stats(run):
    result = run("stats")

    assert result.exit_code == 0, result.output
    assert "Events:           2" in result.output


def test_login_requires_api_url(run):
    result = run("login", "--email", "a@b.c", "--password", "pw")

    assert result.exit_code == 1
    assert "--api-url" in result.output


def test_corrupt_store_reports_error(run, data_dir):
    (data_dir / EVENTS_FILE).write_text("garbage", encoding="utf-8")

    result = run("show")

    assert result.exit_code == 1
    assert "ERROR:" in result.output
