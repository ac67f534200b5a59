from datetime import date

import pytest

from agents.timeline_analyzer_agent import TimelineAnalyzerAgent
from agents.trip_planner_agent import TripPlannerAgent
from stores.leg_store import LegStore

TODAY = date(2024, 1, 15)
TRIP = "trip-1"


@pytest.fixture
def analyzer():
    return TimelineAnalyzerAgent(max_range_years=10, today=lambda: TODAY)


@pytest.fixture
def store(analyzer):
    return LegStore(analyzer)


@pytest.fixture
def planner(store):
    return TripPlannerAgent(store, today=lambda: TODAY)


@pytest.fixture
def europe(store):
    """France 03-01 -> 03-05 and Italy 03-10 -> 03-15."""
    france = store.create(TRIP, {"country": "France", "startDate": "2024-03-01", "endDate": "2024-03-05"})
    italy = store.create(TRIP, {"country": "Italy", "startDate": "2024-03-10", "endDate": "2024-03-15"})
    return france, italy
