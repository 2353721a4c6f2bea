"""Move the anchor date one view-unit backwards or forwards."""

from __future__ import annotations

from datetime import date, timedelta

from advisorcal.models import Direction, Granularity
from advisorcal.window import DAYS_IN_WEEK, days_in_month


def add_months(anchor: date, months: int) -> date:
    """Shift *anchor* by whole calendar months.

    The day of month is clamped to the target month's last day, so
    2024-01-31 + 1 month is 2024-02-29, never 2024-03-02.
    """
    index = anchor.year * 12 + (anchor.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(anchor.day, days_in_month(year, month)))


def navigate(anchor: date, granularity: Granularity, direction: Direction) -> date:
    """Return the anchor one step away from *anchor* in *direction*."""
    step = direction.step
    if granularity is Granularity.MONTH:
        return add_months(anchor, step)
    if granularity is Granularity.WEEK:
        return anchor + timedelta(days=DAYS_IN_WEEK * step)
    if granularity is Granularity.DAY:
        return anchor + timedelta(days=step)
    raise ValueError(f"unknown granularity: {granularity!r}")
