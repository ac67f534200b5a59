# stores/leg_store.py
from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from agents.leg_input_agent import LegInputAgent
from agents.timeline_analyzer_agent import TimelineAnalyzerAgent
from models.errors import LegNotFoundError, LegValidationError
from models.leg import Leg, LegDraft
from models.validation import CheckKind, CheckResult
from utils.logger import setup_logger

logger = setup_logger(__name__)


class LegStore:
    """
    In-memory owner of every trip's legs and the only place they change.

    Per-leg invariants (a country, a start before the end) hold on every
    write. Overlap and duplicate-destination are refused too unless the
    caller passes bypass=True.
    """

    def __init__(self, analyzer: Optional[TimelineAnalyzerAgent] = None):
        self.analyzer = analyzer or TimelineAnalyzerAgent()
        self.input_agent = LegInputAgent()
        self._legs: Dict[str, List[Leg]] = {}

    def create(self, trip_id: str, leg_data: Any, bypass: bool = False) -> Leg:
        try:
            draft = self.input_agent.normalize(leg_data, trip_id=trip_id)
        except ValueError as e:
            raise LegValidationError(str(e), CheckKind.RANGE.value) from e

        self._enforce_structure(draft)
        existing = self._legs.get(trip_id, [])
        if bypass:
            logger.warning("Creating %s leg in trip %s without timeline checks", draft.country, trip_id)
        else:
            self._enforce_timeline(existing, draft)

        leg = Leg(
            id=self._new_id(),
            trip_id=trip_id,
            country=draft.country,
            start_date=draft.start_date,
            end_date=draft.end_date,
            budget=draft.budget,
        )
        self._legs.setdefault(trip_id, []).append(leg)
        logger.info("Created leg %s (%s) in trip %s", leg.id, leg.describe(), trip_id)
        return leg

    def update(self, leg: Leg, bypass: bool = False) -> Leg:
        current = self.get_leg(leg.id)
        if current is None:
            raise LegNotFoundError(f"Leg {leg.id} not found")
        if leg.trip_id != current.trip_id:
            raise LegValidationError("A leg cannot be moved to another trip", "trip")

        draft = self.input_agent.normalize(
            LegDraft(
                trip_id=current.trip_id,
                country=leg.country,
                start_date=leg.start_date,
                end_date=leg.end_date,
                budget=leg.budget,
            )
        )
        self._enforce_structure(draft)
        trip_legs = self._legs[current.trip_id]
        if bypass:
            logger.warning("Updating leg %s without timeline checks", leg.id)
        else:
            # a rename keeps the stored dates, so it is not re-checked for overlap
            dates_changed = (draft.start_date, draft.end_date) != (current.start_date, current.end_date)
            self._enforce_timeline(trip_legs, draft, editing_leg_id=leg.id, check_overlap=dates_changed)

        updated = replace(
            current,
            country=draft.country,
            start_date=draft.start_date,
            end_date=draft.end_date,
            budget=draft.budget,
        )
        trip_legs[trip_legs.index(current)] = updated
        logger.info("Updated leg %s (%s)", updated.id, updated.describe())
        return updated

    def delete(self, leg_id: str) -> None:
        for trip_id, legs in self._legs.items():
            for leg in legs:
                if leg.id == leg_id:
                    legs.remove(leg)
                    logger.info("Deleted leg %s from trip %s", leg_id, trip_id)
                    return
        logger.debug("Delete of unknown leg %s ignored", leg_id)

    def delete_legs_by_trip(self, trip_id: str) -> int:
        removed = self._legs.pop(trip_id, [])
        if removed:
            logger.info("Deleted %d legs of trip %s", len(removed), trip_id)
        return len(removed)

    def get_leg(self, leg_id: str) -> Optional[Leg]:
        for legs in self._legs.values():
            for leg in legs:
                if leg.id == leg_id:
                    return leg
        return None

    def get_legs_by_trip(self, trip_id: str) -> Tuple[Leg, ...]:
        return tuple(self._legs.get(trip_id, ()))

    # ----------------------
    # helpers
    # ----------------------

    def _new_id(self) -> str:
        while True:
            leg_id = str(uuid.uuid4())
            if self.get_leg(leg_id) is None:
                return leg_id

    def _enforce_structure(self, draft: LegDraft) -> None:
        self._raise_if_blocked(self.analyzer.check_country(draft.country))
        if draft.end_date and not draft.start_date:
            raise LegValidationError("A leg cannot have an end date without a start date", CheckKind.RANGE.value)
        self._raise_if_blocked(self.analyzer.check_minimum_duration(draft.span))

    def _enforce_timeline(
        self,
        legs: List[Leg],
        draft: LegDraft,
        editing_leg_id: Optional[str] = None,
        check_overlap: bool = True,
    ) -> None:
        if check_overlap:
            self._raise_if_blocked(self.analyzer.find_overlap(legs, draft, editing_leg_id))
        duplicates = self.analyzer.find_duplicates(legs, draft, editing_leg_id)
        if not duplicates.is_ok:
            logger.warning("Rejected leg write: %s", duplicates.message)
            raise LegValidationError(duplicates.message, CheckKind.DUPLICATE.value)

    def _raise_if_blocked(self, result: CheckResult) -> None:
        if result.is_blocked:
            logger.warning("Rejected leg write: %s", result.message)
            raise LegValidationError(result.message, result.kind.value)
