from datetime import date

from agents.leg_flow_agent import FlowState

from conftest import TRIP


def test_inbound_round_trip(planner):
    leg = planner.create_leg(TRIP, {"country": "Japan", "startDate": "2024-04-01", "endDate": "2024-04-10"})
    assert leg in planner.get_legs_by_trip(TRIP)
    planner.delete_leg(leg.id)
    assert planner.get_legs_by_trip(TRIP) == ()


def test_validate_reports_ok(planner, europe):
    assert planner.validate(TRIP, {"country": "Spain", "startDate": "2024-03-20", "endDate": "2024-03-25"}) == [
        {"ok": True}
    ]


def test_validate_reports_block(planner, europe):
    results = planner.validate(TRIP, {"country": "Spain", "startDate": "2024-03-04", "endDate": "2024-03-07"})
    assert results == [{"blocked": "This leg overlaps with France (Mar 1 - Mar 5)", "kind": "overlap"}]


def test_validate_reports_advisories(planner, europe):
    results = planner.validate(TRIP, {"country": "Spain", "startDate": "2024-03-06", "endDate": "2024-03-09"})
    assert [r["advisory"] for r in results] == ["gap", "order"]
    assert results[1]["suggestedStart"] == "2024-03-16"


def test_validate_duplicate_count(planner):
    planner.create_leg(TRIP, {"country": "Japan"})
    results = planner.validate(TRIP, {"country": "JAPAN"})
    assert results == [{"advisory": "duplicate", "message": "You already have a leg in Japan", "count": 1}]


def test_validate_bad_wire_date(planner):
    results = planner.validate(TRIP, {"country": "Spain", "startDate": "2024-02-30"})
    assert "blocked" in results[0]


def test_timeline_is_chronological(planner):
    planner.create_leg(TRIP, {"country": "Peru"})
    planner.create_leg(TRIP, {"country": "Italy", "startDate": "2024-05-01", "endDate": "2024-05-03"})
    planner.create_leg(TRIP, {"country": "France", "startDate": "2024-04-01", "endDate": "2024-04-03"})
    assert [leg.country for leg in planner.timeline(TRIP)] == ["France", "Italy", "Peru"]


def test_delete_trip_legs(planner, europe):
    assert planner.delete_trip_legs(TRIP) == 2
    assert planner.get_legs_by_trip(TRIP) == ()


def test_flow_and_calendar_share_the_store(planner, europe):
    flow = planner.new_flow()
    flow.begin_create(TRIP)
    flow.set_country("Spain")
    flow.set_dates("2024-03-20", "2024-03-25")
    assert flow.save() is FlowState.SAVED

    cal = planner.calendar(TRIP)
    assert [leg.country for leg in cal.legs_on(date(2024, 3, 22))] == ["Spain"]


def test_validate_reports_missing_country_before_bad_date(planner):
    results = planner.validate(TRIP, {"country": "", "startDate": "bad"})
    assert results == [{"blocked": "Please select a country", "kind": "country"}]
