# agents/leg_flow_agent.py
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from agents.leg_input_agent import LegInputAgent
from agents.timeline_analyzer_agent import CHECK_ORDER, TimelineAnalyzerAgent
from models.errors import FlowStateError, LegNotFoundError, LegValidationError
from models.leg import Leg, LegDraft
from models.span import DateInput, parse_day
from models.validation import CheckKind, CheckResult
from stores.leg_store import LegStore
from utils.logger import setup_logger

logger = setup_logger(__name__)


class FlowState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    BLOCKED = "blocked"
    AWAITING_DUPLICATE_CONFIRMATION = "awaiting_duplicate_confirmation"
    AWAITING_GAP_ACKNOWLEDGMENT = "awaiting_gap_acknowledgment"
    AWAITING_ORDER_ACKNOWLEDGMENT = "awaiting_order_acknowledgment"
    COMMITTING = "committing"
    SAVED = "saved"
    FAILED = "failed"


AWAITING_STATES = {
    CheckKind.DUPLICATE: FlowState.AWAITING_DUPLICATE_CONFIRMATION,
    CheckKind.GAP: FlowState.AWAITING_GAP_ACKNOWLEDGMENT,
    CheckKind.ORDER: FlowState.AWAITING_ORDER_ACKNOWLEDGMENT,
}

_SAVEABLE = {FlowState.IDLE, FlowState.BLOCKED, FlowState.FAILED, FlowState.SAVED}


class LegFlowAgent:
    """
    One add/edit leg attempt, from typed input to a committed leg.

    save() walks the timeline checks in order. A hard failure stops in
    BLOCKED; an advisory stops in one of the AWAITING_* states until the
    user calls proceed() (continue, carrying bypass to the store) or
    cancel() (back to IDLE, nothing written). Once every check has been
    passed or accepted the leg is written through the store.

    save(bypass=True) is the calendar path: overlap is not checked, a
    duplicate destination blocks, and gap/order advisories are accepted
    up front and collected in `advisories`.
    """

    def __init__(
        self,
        store: LegStore,
        analyzer: Optional[TimelineAnalyzerAgent] = None,
        input_agent: Optional[LegInputAgent] = None,
    ):
        self.store = store
        self.analyzer = analyzer or store.analyzer
        self.input_agent = input_agent or LegInputAgent()
        self.trip_id: Optional[str] = None
        self.state = FlowState.IDLE
        self.saved_leg: Optional[Leg] = None
        self._clear_candidate()
        self._clear_outcome()

    @property
    def is_editing(self) -> bool:
        return self.editing_leg_id is not None

    @property
    def is_awaiting(self) -> bool:
        return self.state in AWAITING_STATES.values()

    # ----------------------
    # candidate
    # ----------------------

    def begin_create(self, trip_id: str) -> None:
        self.reset()
        self.trip_id = trip_id

    def begin_edit(self, leg: Leg) -> None:
        self.reset()
        self.trip_id = leg.trip_id
        self.editing_leg_id = leg.id
        self.country = leg.country
        self.start_input = leg.start_date.isoformat() if leg.start_date else ""
        self.end_input = leg.end_date.isoformat() if leg.end_date else ""
        self.budget = leg.budget
        self._edited_dates = (leg.start_date, leg.end_date)

    def set_country(self, country: Optional[str]) -> None:
        self.country = country or ""

    def set_dates(self, start: DateInput, end: DateInput) -> None:
        self.start_input, self.end_input = self.input_agent.read_dates(start, end)

    def set_budget(self, budget: float) -> None:
        self.budget = budget

    # ----------------------
    # transitions
    # ----------------------

    def save(self, bypass: bool = False) -> FlowState:
        if self.state not in _SAVEABLE:
            raise FlowStateError(f"Cannot save while {self.state.value}")
        if self.trip_id is None:
            raise FlowStateError("No trip selected; call begin_create() or begin_edit() first")

        self._clear_outcome()
        self.saved_leg = None
        self._preaccepted = bypass
        self._bypass = bypass
        self.state = FlowState.VALIDATING
        return self._advance()

    def proceed(self) -> FlowState:
        if not self.is_awaiting:
            raise FlowStateError(f"Nothing to continue from while {self.state.value}")
        self.advisories.append(self.result)
        self._bypass = True
        self._step += 1
        self.state = FlowState.VALIDATING
        return self._advance()

    def cancel(self) -> FlowState:
        if not self.is_awaiting:
            raise FlowStateError(f"Nothing to cancel while {self.state.value}")
        logger.debug("Leg save cancelled at %s", self.state.value)
        self._clear_outcome()
        self.state = FlowState.IDLE
        return self.state

    def reset(self) -> None:
        self._clear_candidate()
        self._clear_outcome()
        self.saved_leg = None
        self.state = FlowState.IDLE

    # ----------------------
    # helpers
    # ----------------------

    def _clear_candidate(self) -> None:
        self.country = ""
        self.start_input = ""
        self.end_input = ""
        self.budget = 0.0
        self.editing_leg_id: Optional[str] = None
        self._edited_dates: Optional[Tuple[Optional[date], Optional[date]]] = None

    def _clear_outcome(self) -> None:
        self.result: Optional[CheckResult] = None
        self.error: Optional[str] = None
        self.advisories: List[CheckResult] = []
        self._candidate: Optional[LegDraft] = None
        self._step = 0
        self._bypass = False
        self._preaccepted = False

    def _advance(self) -> FlowState:
        legs = self.store.get_legs_by_trip(self.trip_id)
        while self._step < len(CHECK_ORDER):
            kind = CHECK_ORDER[self._step]
            result = self._evaluate(kind, legs)

            if result.is_blocked:
                return self._block(result)

            if not result.is_ok:
                if not self._preaccepted:
                    self.result = result
                    self.state = AWAITING_STATES[kind]
                    logger.debug("Leg save waiting on %s: %s", kind.value, result.message)
                    return self.state
                if kind is CheckKind.DUPLICATE:
                    return self._block(
                        CheckResult.blocked(CheckKind.DUPLICATE, result.message, legs=result.legs)
                    )
                self.advisories.append(result)

            self._step += 1

        return self._commit()

    def _evaluate(self, kind: CheckKind, legs: Sequence[Leg]) -> CheckResult:
        if kind is CheckKind.COUNTRY:
            return self.analyzer.check_country(self.country)
        if kind is CheckKind.RANGE:
            result = self.analyzer.check_range_validity(self.start_input, self.end_input)
            if result.is_ok:
                self._candidate = self._build_candidate()
            return result
        if kind is CheckKind.OVERLAP and (self._preaccepted or self._keeps_dates()):
            return CheckResult.ok()
        return self.analyzer.check(kind, legs, self._candidate, self.editing_leg_id)

    def _keeps_dates(self) -> bool:
        # renaming a leg leaves its range alone, so overlap is not re-checked
        candidate = self._candidate
        return self._edited_dates is not None and (candidate.start_date, candidate.end_date) == self._edited_dates

    def _build_candidate(self) -> LegDraft:
        return self.input_agent.normalize(
            LegDraft(
                trip_id=self.trip_id,
                country=self.country,
                start_date=parse_day(self.start_input),
                end_date=parse_day(self.end_input),
                budget=self.budget,
            )
        )

    def _block(self, result: CheckResult) -> FlowState:
        self.result = result
        self.state = FlowState.BLOCKED
        logger.info("Leg save blocked (%s): %s", result.kind.value, result.message)
        return self.state

    def _commit(self) -> FlowState:
        self.state = FlowState.COMMITTING
        candidate = self._candidate
        try:
            if self.is_editing:
                saved = self.store.update(
                    Leg(
                        id=self.editing_leg_id,
                        trip_id=self.trip_id,
                        country=candidate.country,
                        start_date=candidate.start_date,
                        end_date=candidate.end_date,
                        budget=candidate.budget,
                    ),
                    bypass=self._bypass,
                )
            else:
                saved = self.store.create(self.trip_id, candidate, bypass=self._bypass)
        except (LegValidationError, LegNotFoundError) as e:
            self.error = str(e)
            self.state = FlowState.FAILED
            logger.warning("Leg save failed: %s", self.error)
            return self.state

        self.saved_leg = saved
        self._clear_candidate()
        self.result = None
        self.state = FlowState.SAVED
        logger.info("Leg saved: %s", saved.describe())
        return self.state
