from __future__ import annotations
from datetime import date

from agents.leg_flow_agent import FlowState
from agents.trip_planner_agent import TripPlannerAgent

if __name__ == "__main__":
    planner = TripPlannerAgent()
    trip_id = "demo-trip"

    planner.create_leg(trip_id, {"country": "France", "startDate": "2026-03-01", "endDate": "2026-03-05"})
    planner.create_leg(trip_id, {"country": "Italy", "startDate": "2026-03-10", "endDate": "2026-03-15"})

    # modal flow: acknowledge every advisory
    flow = planner.new_flow()
    flow.begin_create(trip_id)
    flow.set_country("Spain")
    flow.set_dates("6 March 2026", "2026-03-09")
    state = flow.save()
    while flow.is_awaiting:
        print(f"{state.value}: {flow.result.message}")
        state = flow.proceed()

    if state is FlowState.SAVED:
        print(f"saved: {flow.saved_leg.describe()}")
    elif state is FlowState.FAILED:
        print(f"failed: {flow.error}")
    else:
        print(f"blocked: {flow.result.message}")

    # calendar: pick a range on the grid
    cal = planner.calendar(trip_id)
    cal.toggle_mode()
    cal.tap(date(2026, 3, 20))
    cal.tap(date(2026, 3, 24))
    cal.choose_country("Greece")
    cal.commit()
    print(cal.message)

    for leg in planner.timeline(trip_id):
        print(leg.describe())
