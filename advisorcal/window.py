"""Visible date windows for the month, week and day views."""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from advisorcal.models import Granularity

DAYS_IN_WEEK = 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def start_of_month(anchor: date) -> date:
    return anchor.replace(day=1)


def end_of_month(anchor: date) -> date:
    return anchor.replace(day=days_in_month(anchor.year, anchor.month))


def start_of_week(anchor: date) -> date:
    """Return the Monday on or before *anchor*."""
    return anchor - timedelta(days=anchor.weekday())


def window_bounds(anchor: date, granularity: Granularity) -> tuple[date, date]:
    """Return the first and last visible dates (inclusive)."""
    if granularity is Granularity.MONTH:
        return start_of_month(anchor), end_of_month(anchor)
    if granularity is Granularity.WEEK:
        first = start_of_week(anchor)
        return first, first + timedelta(days=DAYS_IN_WEEK - 1)
    if granularity is Granularity.DAY:
        return anchor, anchor
    raise ValueError(f"unknown granularity: {granularity!r}")


def compute(anchor: date, granularity: Granularity) -> list[date]:
    """Return the ordered dates to render for *anchor* in *granularity*.

    Month views cover only the anchor's own month (28-31 days); padding the
    grid out to whole weeks is left to the renderers.
    """
    first, last = window_bounds(anchor, granularity)
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]
