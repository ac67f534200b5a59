# agents/calendar_planner_agent.py
from __future__ import annotations

import calendar
from dataclasses import replace
from datetime import date, timedelta
from enum import Enum
from typing import Callable, List, Optional, Tuple

from agents.leg_flow_agent import FlowState, LegFlowAgent
from models.errors import FlowStateError, LegNotFoundError, LegValidationError
from models.leg import Leg
from stores.leg_store import LegStore
from utils.logger import setup_logger

logger = setup_logger(__name__)

PREVIEW_DAYS = 14


class CalendarMode(str, Enum):
    VIEW = "view"
    EDIT = "edit"


class SelectionMode(str, Enum):
    VIEWING = "viewing"
    SELECTING_DATES = "selecting_dates"
    SELECTING_COUNTRY = "selecting_country"


def _add_months(first_of_month: date, months: int) -> date:
    index = first_of_month.year * 12 + (first_of_month.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


class CalendarPlannerAgent:
    """
    Month-grid planner for one trip's legs.

    In VIEW mode taps do nothing. In EDIT mode a tap on a day covered by a
    leg opens that leg for editing; a tap on a free day starts a new range,
    the next tap on or after it closes the range, and the user then picks a
    country and commits. New legs go through LegFlowAgent with bypass;
    a country change on an existing leg is a plain store update.
    """

    def __init__(
        self,
        store: LegStore,
        trip_id: str,
        flow: Optional[LegFlowAgent] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.store = store
        self.trip_id = trip_id
        self.flow = flow or LegFlowAgent(store)
        self._today = today or date.today
        self.mode = CalendarMode.VIEW
        self.displayed_month = self._today().replace(day=1)
        # last success/error text for the caller to show
        self.message: Optional[str] = None
        self.saved_leg: Optional[Leg] = None
        self._clear_selection()

    @property
    def legs(self) -> Tuple[Leg, ...]:
        return self.store.get_legs_by_trip(self.trip_id)

    @property
    def is_create(self) -> bool:
        return self.selection is SelectionMode.SELECTING_COUNTRY and self.editing_leg is None

    @property
    def can_commit(self) -> bool:
        return self.selection is SelectionMode.SELECTING_COUNTRY and bool(self.selected_country.strip())

    # ----------------------
    # mode and navigation
    # ----------------------

    def set_mode(self, mode: CalendarMode) -> None:
        self.mode = CalendarMode(mode)
        if self.mode is CalendarMode.VIEW:
            self.reset()

    def toggle_mode(self) -> CalendarMode:
        self.set_mode(CalendarMode.EDIT if self.mode is CalendarMode.VIEW else CalendarMode.VIEW)
        return self.mode

    def prev_month(self) -> date:
        self.displayed_month = _add_months(self.displayed_month, -1)
        return self.displayed_month

    def next_month(self) -> date:
        self.displayed_month = _add_months(self.displayed_month, 1)
        return self.displayed_month

    # ----------------------
    # selection
    # ----------------------

    def tap(self, day: date) -> bool:
        """Returns True when the tap changed the selection."""
        if self.mode is CalendarMode.VIEW:
            return False

        if self.selection is SelectionMode.VIEWING:
            covering = self.legs_on(day)
            if covering:
                self.editing_leg = covering[0]
                self.selected_country = covering[0].country
                self.selection = SelectionMode.SELECTING_COUNTRY
            else:
                self.selected_start = day
                self.selected_end = None
                self.selection = SelectionMode.SELECTING_DATES
        elif self.selection is SelectionMode.SELECTING_DATES:
            if self.selected_start is None:
                self.selected_start = day
            elif self.selected_end is not None or day < self.selected_start:
                self.selected_start = day
                self.selected_end = None
            else:
                self.selected_end = day
                self.selection = SelectionMode.SELECTING_COUNTRY
        else:
            return False

        logger.debug("Calendar tap %s -> %s", day, self.selection.value)
        return True

    def choose_country(self, country: str) -> None:
        if self.selection is not SelectionMode.SELECTING_COUNTRY:
            raise FlowStateError("Pick the dates before choosing a country")
        self.selected_country = country or ""

    def commit(self) -> FlowState:
        if not self.can_commit:
            raise FlowStateError("Choose a country before saving")

        if self.editing_leg is not None:
            return self._update_country()

        self.flow.begin_create(self.trip_id)
        self.flow.set_country(self.selected_country)
        self.flow.set_dates(self.selected_start, self.selected_end or self.selected_start)
        # picking days on the grid is deliberate: advisories are pre-accepted
        return self._settle(self.flow.save(bypass=True))

    def cancel(self) -> None:
        self.reset()

    def request_delete(self) -> str:
        if self.editing_leg is None:
            raise FlowStateError("Only an existing leg can be deleted")
        self.pending_delete = True
        return f"Are you sure you want to delete the {self.editing_leg.country} leg?"

    def confirm_delete(self) -> None:
        if not self.pending_delete or self.editing_leg is None:
            raise FlowStateError("Deletion was not requested")
        self.store.delete(self.editing_leg.id)
        self.reset()
        self.message = "Leg deleted successfully!"

    def cancel_delete(self) -> None:
        self.pending_delete = False

    def reset(self) -> None:
        self._clear_selection()
        self.flow.reset()

    # ----------------------
    # day predicates
    # ----------------------

    def is_selected(self, day: date) -> bool:
        if self.selected_start is None:
            return False
        if self.selected_end is None:
            return day == self.selected_start
        return self.selected_start <= day <= self.selected_end

    def is_in_selection_range(self, day: date) -> bool:
        if self.selected_start is None or self.selected_end is None:
            return False
        return self.selected_start <= day <= self.selected_end

    def is_selection_boundary(self, day: date) -> bool:
        return day in (self.selected_start, self.selected_end)

    def is_today(self, day: date) -> bool:
        return day == self._today()

    def legs_on(self, day: date) -> List[Leg]:
        return [leg for leg in self.legs if leg.span.covers(day)]

    # ----------------------
    # grid data
    # ----------------------

    def month_days(self, month: Optional[date] = None) -> List[date]:
        first = (month or self.displayed_month).replace(day=1)
        _, days = calendar.monthrange(first.year, first.month)
        return [first.replace(day=n) for n in range(1, days + 1)]

    def month_weeks(self, month: Optional[date] = None) -> List[List[Optional[date]]]:
        """Sunday-first weeks; slots outside the month are None."""
        first = (month or self.displayed_month).replace(day=1)
        weeks = calendar.Calendar(firstweekday=calendar.SUNDAY).monthdayscalendar(first.year, first.month)
        return [[first.replace(day=n) if n else None for n in week] for week in weeks]

    def preview_window(self) -> Tuple[date, date]:
        """The two weeks starting on this week's Sunday."""
        today = self._today()
        # date.weekday(): Monday == 0, Sunday == 6
        sunday = today - timedelta(days=(today.weekday() + 1) % 7)
        return sunday, sunday + timedelta(days=PREVIEW_DAYS - 1)

    def legs_in_window(self, first: date, last: date) -> List[Leg]:
        return [leg for leg in self.legs if leg.span.intersects_window(first, last)]

    # ----------------------
    # helpers
    # ----------------------

    def _clear_selection(self) -> None:
        self.selection = SelectionMode.VIEWING
        self.selected_start: Optional[date] = None
        self.selected_end: Optional[date] = None
        self.selected_country = ""
        self.editing_leg: Optional[Leg] = None
        self.pending_delete = False

    def _update_country(self) -> FlowState:
        leg = replace(self.editing_leg, country=self.selected_country.strip())
        try:
            saved = self.store.update(leg)
        except (LegValidationError, LegNotFoundError) as e:
            self.message = str(e)
            logger.warning("Calendar update of leg %s failed: %s", leg.id, e)
            return FlowState.FAILED
        self.saved_leg = saved
        self.reset()
        self.message = "Leg updated successfully!"
        return FlowState.SAVED

    def _settle(self, state: FlowState) -> FlowState:
        if state is FlowState.SAVED:
            self.saved_leg = self.flow.saved_leg
            self.reset()
            self.message = "Leg added successfully!"
        elif state is FlowState.FAILED:
            self.message = self.flow.error
        else:
            # blocked: selection stays so the user can fix it
            self.message = self.flow.result.message if self.flow.result else None
        return state
