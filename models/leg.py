# models/leg.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from models.span import DateSpan, format_range, parse_day


def pick_field(d: Dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in d:
        return d[camel]
    return d.get(snake, default)


@dataclass
class LegDraft:
    """A candidate leg that has not been through the store yet."""
    trip_id: str
    country: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: float = 0.0

    @property
    def span(self) -> DateSpan:
        return DateSpan(self.start_date, self.end_date)


@dataclass(frozen=True)
class Leg:
    id: str
    trip_id: str
    country: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: float = 0.0

    @property
    def span(self) -> DateSpan:
        return DateSpan(self.start_date, self.end_date)

    def describe(self) -> str:
        return f"{self.country} ({format_range(self.span)})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tripId": self.trip_id,
            "country": self.country,
            "startDate": self.start_date.isoformat() if self.start_date else "",
            "endDate": self.end_date.isoformat() if self.end_date else "",
            "budget": self.budget,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Leg":
        return cls(
            id=str(d["id"]),
            trip_id=str(pick_field(d, "tripId", "trip_id")),
            country=str(d.get("country") or "").strip(),
            start_date=parse_day(pick_field(d, "startDate", "start_date")),
            end_date=parse_day(pick_field(d, "endDate", "end_date")),
            budget=float(d.get("budget") or 0.0),
        )
