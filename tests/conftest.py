"""
Pytest configuration and shared fixtures.
"""

from datetime import date

import pytest

from advisorcal.models import Event
from advisorcal.session import CalendarSession
from advisorcal.store import InMemoryEventRepository

ANCHOR = date(2024, 2, 20)  # a Tuesday


@pytest.fixture
def portfolio_review():
    return Event(
        id="1",
        title="Portfolio Review",
        date=ANCHOR,
        time="14:00",
        duration=30,
        type="Investment Strategy",
        client="John Smith",
        description="Quarterly portfolio review and rebalancing discussion",
    )


@pytest.fixture
def market_update():
    return Event(
        id="2",
        title="Market Update",
        date=ANCHOR,
        time="16:00",
        duration=45,
        type="Team Meeting",
        description="Weekly market analysis and strategy alignment",
    )


@pytest.fixture
def sample_events(portfolio_review, market_update):
    """The two seed appointments, later one first to exercise time ordering."""
    return [market_update, portfolio_review]


@pytest.fixture
def repository(sample_events):
    return InMemoryEventRepository(sample_events)


@pytest.fixture
def session(repository):
    return CalendarSession(repository, today=ANCHOR)
