# agents/leg_input_agent.py
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from models.leg import LegDraft, pick_field
from models.span import DateInput, parse_day
from utils.date_parser import to_iso
from utils.money import normalize_budget


class LegInputAgent:
    """
    Validates/normalizes leg input into LegDraft.
    Works with either a raw wire dict OR an already built LegDraft.
    """

    def normalize(self, raw: Any, trip_id: Optional[str] = None) -> LegDraft:
        if isinstance(raw, LegDraft):
            draft = LegDraft(
                trip_id=raw.trip_id,
                country=raw.country,
                start_date=raw.start_date,
                end_date=raw.end_date,
                budget=raw.budget,
            )
        elif isinstance(raw, dict):
            draft = self._from_dict(raw, trip_id)
        else:
            raise TypeError("LegInputAgent.normalize expects LegDraft or dict")

        if trip_id is not None:
            draft.trip_id = trip_id
        draft.country = (draft.country or "").strip()
        draft.budget = normalize_budget(draft.budget)
        return draft

    def read_dates(self, start: DateInput, end: DateInput) -> Tuple[str, str]:
        """
        Turns typed date entries ("2025-03-05", "05/03/2025", "5 March 2025")
        into ISO strings. Unreadable text comes back as typed.
        """
        return to_iso(start), to_iso(end)

    def _from_dict(self, d: Dict[str, Any], trip_id: Optional[str]) -> LegDraft:
        # wire dates are strict ISO; "" and a missing key both mean no date
        return LegDraft(
            trip_id=str(trip_id or pick_field(d, "tripId", "trip_id", "")),
            country=str(d.get("country") or ""),
            start_date=parse_day(pick_field(d, "startDate", "start_date")),
            end_date=parse_day(pick_field(d, "endDate", "end_date")),
            budget=d.get("budget") or 0.0,
        )
