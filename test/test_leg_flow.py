from datetime import date

import pytest

from agents.leg_flow_agent import FlowState, LegFlowAgent
from models.errors import FlowStateError
from models.validation import CheckKind

from conftest import TRIP


@pytest.fixture
def flow(store):
    f = LegFlowAgent(store)
    f.begin_create(TRIP)
    return f


def fill(flow, country, start="", end=""):
    flow.set_country(country)
    flow.set_dates(start, end)


def test_missing_country_blocks_before_store(flow, store):
    fill(flow, "", "2024-03-20", "2024-03-25")
    assert flow.save() is FlowState.BLOCKED
    assert flow.result.kind is CheckKind.COUNTRY
    assert store.get_legs_by_trip(TRIP) == ()


def test_unparseable_date_blocks(flow):
    fill(flow, "Spain", "2024-13-45", "")
    assert flow.save() is FlowState.BLOCKED
    assert flow.result.kind is CheckKind.RANGE


def test_free_form_dates_are_normalized(flow, store):
    fill(flow, "Spain", "20/03/2024", "2024/03/25")
    assert flow.start_input == "2024-03-20"
    assert flow.end_input == "2024-03-25"
    assert flow.save() is FlowState.SAVED
    assert flow.saved_leg.start_date == date(2024, 3, 20)


def test_same_day_range_is_blocked(flow):
    fill(flow, "Spain", "2024-03-10", "2024-03-10")
    assert flow.save() is FlowState.BLOCKED
    assert flow.result.kind is CheckKind.DURATION


def test_overlap_blocks_and_later_checks_do_not_run(flow, europe, store):
    fill(flow, "France", "2024-03-04", "2024-03-07")
    assert flow.save() is FlowState.BLOCKED
    assert flow.result.kind is CheckKind.OVERLAP
    assert flow.result.message == "This leg overlaps with France (Mar 1 - Mar 5)"
    assert len(store.get_legs_by_trip(TRIP)) == 2


def test_blocked_candidate_can_be_fixed_and_saved(flow, europe):
    fill(flow, "Spain", "2024-03-04", "2024-03-07")
    assert flow.save() is FlowState.BLOCKED
    flow.set_dates("2024-03-20", "2024-03-25")
    assert flow.save() is FlowState.SAVED


def test_gap_then_order_acknowledgments(flow, europe, store):
    fill(flow, "Spain", "2024-03-06", "2024-03-09")

    assert flow.save() is FlowState.AWAITING_GAP_ACKNOWLEDGMENT
    assert "France" in flow.result.message and "Italy" in flow.result.message

    assert flow.proceed() is FlowState.AWAITING_ORDER_ACKNOWLEDGMENT
    assert flow.result.suggested_start == date(2024, 3, 16)

    assert flow.proceed() is FlowState.SAVED
    assert flow.saved_leg in store.get_legs_by_trip(TRIP)
    assert [a.kind for a in flow.advisories] == [CheckKind.GAP, CheckKind.ORDER]


def test_saved_clears_candidate(flow, europe):
    fill(flow, "Spain", "2024-03-20", "2024-03-25")
    assert flow.save() is FlowState.SAVED
    assert flow.country == ""
    assert flow.start_input == "" and flow.end_input == ""
    assert flow.trip_id == TRIP


def test_cancel_returns_to_idle_without_writing(flow, europe, store):
    fill(flow, "Spain", "2024-03-06", "2024-03-09")
    flow.save()
    assert flow.cancel() is FlowState.IDLE
    assert len(store.get_legs_by_trip(TRIP)) == 2
    # the candidate survives a cancel
    assert flow.country == "Spain"


def test_duplicate_requires_confirmation(flow, store):
    store.create(TRIP, {"country": "Japan", "startDate": "2024-04-01", "endDate": "2024-04-10"})
    fill(flow, "japan", "2024-05-01", "2024-05-05")

    assert flow.save() is FlowState.AWAITING_DUPLICATE_CONFIRMATION
    assert flow.result.count == 1
    assert flow.proceed() is FlowState.SAVED
    assert len(store.get_legs_by_trip(TRIP)) == 2


def test_bypass_accepts_advisories_and_skips_overlap(flow, europe, store):
    fill(flow, "Spain", "2024-03-07", "2024-03-12")
    assert flow.save(bypass=True) is FlowState.SAVED
    assert flow.saved_leg in store.get_legs_by_trip(TRIP)
    assert [a.kind for a in flow.advisories] == [CheckKind.ORDER]


def test_bypass_still_blocks_duplicates(flow, europe):
    fill(flow, "ITALY", "2024-03-20", "2024-03-25")
    assert flow.save(bypass=True) is FlowState.BLOCKED
    assert flow.result.kind is CheckKind.DUPLICATE


def test_edit_updates_existing_leg(store, europe):
    france = europe[0]
    flow = LegFlowAgent(store)
    flow.begin_edit(france)
    assert flow.start_input == "2024-03-01"

    flow.set_dates("2024-03-01", "2024-03-08")
    assert flow.save() is FlowState.AWAITING_ORDER_ACKNOWLEDGMENT
    assert flow.proceed() is FlowState.SAVED
    assert store.get_leg(france.id).end_date == date(2024, 3, 8)
    assert len(store.get_legs_by_trip(TRIP)) == 2


def test_store_error_moves_to_failed(store, europe):
    italy = europe[1]
    flow = LegFlowAgent(store)
    flow.begin_edit(italy)
    flow.set_country("Greece")
    store.delete(italy.id)

    assert flow.save() is FlowState.FAILED
    assert flow.error == f"Leg {italy.id} not found"


def test_invalid_transitions_raise(store):
    flow = LegFlowAgent(store)
    with pytest.raises(FlowStateError):
        flow.save()
    flow.begin_create(TRIP)
    with pytest.raises(FlowStateError):
        flow.proceed()
    with pytest.raises(FlowStateError):
        flow.cancel()


def test_edit_without_date_change_skips_overlap(store, europe):
    spain = store.create(TRIP, {"country": "Spain", "startDate": "2024-03-07", "endDate": "2024-03-12"}, bypass=True)
    flow = LegFlowAgent(store)
    flow.begin_edit(spain)
    flow.set_country("Portugal")
    assert flow.save() is FlowState.AWAITING_ORDER_ACKNOWLEDGMENT
    assert flow.proceed() is FlowState.SAVED
    assert store.get_leg(spain.id).country == "Portugal"
