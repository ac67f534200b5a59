# models/span.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple, Union

DateInput = Union[str, date, None]


class SpanKind(str, Enum):
    UNSCHEDULED = "unscheduled"
    OPEN = "open"
    CLOSED = "closed"


def parse_day(value: DateInput) -> Optional[date]:
    """
    Strict ISO (YYYY-MM-DD) parsing for stored and wire dates.
    None and "" mean "no date"; anything else that is not a real
    calendar day raises ValueError.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None


def format_day(d: date) -> str:
    return f"{d:%b} {d.day}"


@dataclass(frozen=True)
class DateSpan:
    """
    A leg's date range. An open span (start, no end) has two readings:
    overlaps() treats it as running forward without limit, while covers()
    draws it on its start day only. Both are intended.
    """

    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def parse(cls, start: DateInput, end: DateInput) -> "DateSpan":
        return cls(parse_day(start), parse_day(end))

    @property
    def kind(self) -> SpanKind:
        if self.start is None:
            return SpanKind.UNSCHEDULED
        if self.end is None:
            return SpanKind.OPEN
        return SpanKind.CLOSED

    @property
    def is_dated(self) -> bool:
        return self.kind is not SpanKind.UNSCHEDULED

    def covers(self, day: date) -> bool:
        """Calendar coverage: both ends inclusive, an open span covers its start day only."""
        if self.start is None:
            return False
        last = self.end or self.start
        return self.start <= day <= last

    def intersects_window(self, first: date, last: date) -> bool:
        if self.start is None:
            return False
        end = self.end or self.start
        return self.start <= last and end >= first


def overlaps(a: DateSpan, b: DateSpan) -> bool:
    """
    Strict-inequality overlap: a.start < b.end and a.end > b.start.
    A shared boundary day is not an overlap. An open span runs forward
    without limit against a closed one; two open spans never overlap.
    """
    kinds = {a.kind, b.kind}
    if SpanKind.UNSCHEDULED in kinds or kinds == {SpanKind.OPEN}:
        return False
    if a.kind is SpanKind.OPEN:
        return a.start < b.end
    if b.kind is SpanKind.OPEN:
        return b.start < a.end
    return a.start < b.end and a.end > b.start


def duration_days(span: DateSpan) -> Optional[int]:
    if span.kind is not SpanKind.CLOSED:
        return None
    # whole dates, so the ceiling of the day difference is the difference itself
    return (span.end - span.start).days


def span_sort_key(span: DateSpan) -> Tuple[int, date]:
    """Ascending by start; unscheduled spans sort last."""
    if span.start is None:
        return (1, date.max)
    return (0, span.start)


def format_range(span: DateSpan) -> str:
    if span.kind is SpanKind.UNSCHEDULED:
        return "No dates"
    if span.kind is SpanKind.OPEN:
        return f"From {format_day(span.start)}"
    return f"{format_day(span.start)} - {format_day(span.end)}"
