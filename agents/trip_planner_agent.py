# agents/trip_planner_agent.py
from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from agents.calendar_planner_agent import CalendarPlannerAgent
from agents.leg_flow_agent import LegFlowAgent
from agents.leg_input_agent import LegInputAgent
from agents.timeline_analyzer_agent import TimelineAnalyzerAgent
from models.leg import Leg
from models.span import span_sort_key
from models.validation import CheckKind, CheckResult
from stores.leg_store import LegStore


def _raw_country(leg_data: Any) -> str:
    if isinstance(leg_data, dict):
        return str(leg_data.get("country") or "")
    return getattr(leg_data, "country", "") or ""


class TripPlannerAgent:
    """
    Orchestrator for a trip's itinerary timeline: one store, shared by the
    add/edit flow and the calendar planner.
    """

    def __init__(
        self,
        store: Optional[LegStore] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self._today = today
        self.analyzer = store.analyzer if store else TimelineAnalyzerAgent(today=today)
        self.store = store or LegStore(self.analyzer)
        self.input_agent = LegInputAgent()

    # inbound
    def create_leg(self, trip_id: str, leg_data: Any, bypass: bool = False) -> Leg:
        return self.store.create(trip_id, leg_data, bypass=bypass)

    def update_leg(self, leg: Leg, bypass: bool = False) -> Leg:
        return self.store.update(leg, bypass=bypass)

    def delete_leg(self, leg_id: str) -> None:
        self.store.delete(leg_id)

    def delete_trip_legs(self, trip_id: str) -> int:
        return self.store.delete_legs_by_trip(trip_id)

    def get_legs_by_trip(self, trip_id: str) -> Tuple[Leg, ...]:
        return self.store.get_legs_by_trip(trip_id)

    def timeline(self, trip_id: str) -> List[Leg]:
        """Chronological order, legs without dates last."""
        return sorted(self.get_legs_by_trip(trip_id), key=lambda leg: span_sort_key(leg.span))

    # outbound
    def validate(
        self,
        trip_id: str,
        leg_data: Any,
        editing_leg_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        try:
            candidate = self.input_agent.normalize(leg_data, trip_id=trip_id)
        except ValueError as e:
            # the country check still comes first
            country = self.analyzer.check_country(_raw_country(leg_data))
            if country.is_blocked:
                return [country.to_dict()]
            return [CheckResult.blocked(CheckKind.RANGE, str(e)).to_dict()]

        findings = self.analyzer.run(self.get_legs_by_trip(trip_id), candidate, editing_leg_id)
        if not findings:
            return [CheckResult.ok().to_dict()]
        return [finding.to_dict() for finding in findings]

    # interaction models
    def new_flow(self) -> LegFlowAgent:
        return LegFlowAgent(self.store, self.analyzer, self.input_agent)

    def calendar(self, trip_id: str) -> CalendarPlannerAgent:
        return CalendarPlannerAgent(self.store, trip_id, flow=self.new_flow(), today=self._today)
