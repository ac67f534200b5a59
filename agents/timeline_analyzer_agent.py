# agents/timeline_analyzer_agent.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence

from models.leg import Leg, LegDraft
from models.span import (
    DateInput,
    DateSpan,
    duration_days,
    format_day,
    format_range,
    overlaps,
    parse_day,
    span_sort_key,
)
from models.validation import CheckKind, CheckResult
from utils.logger import setup_logger
from utils.settings import MAX_RANGE_YEARS

logger = setup_logger(__name__)

# Order in which a save attempt evaluates the checks.
CHECK_ORDER = (
    CheckKind.COUNTRY,
    CheckKind.RANGE,
    CheckKind.DURATION,
    CheckKind.OVERLAP,
    CheckKind.DUPLICATE,
    CheckKind.GAP,
    CheckKind.ORDER,
)

ONE_DAY = timedelta(days=1)


def _shift_years(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        # Feb 29 into a non-leap year
        return d.replace(year=d.year + years, day=28)


def _country_key(country: str) -> str:
    return " ".join((country or "").split()).casefold()


class TimelineAnalyzerAgent:
    """
    Checks a candidate leg against the legs already in its trip.

    Every check is side-effect free and returns a CheckResult: ok, blocked
    (hard rule, the save cannot go ahead) or advisory (the user may continue).
    The legs passed in are read, never modified.
    """

    def __init__(
        self,
        max_range_years: Optional[int] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.max_range_years = max_range_years if max_range_years is not None else MAX_RANGE_YEARS
        self._today = today or date.today

    # ----------------------
    # hard rules
    # ----------------------

    def check_country(self, country: Optional[str]) -> CheckResult:
        if not (country or "").strip():
            return CheckResult.blocked(CheckKind.COUNTRY, "Please select a country")
        return CheckResult.ok()

    def check_range_validity(self, start: DateInput, end: DateInput) -> CheckResult:
        try:
            start_day = parse_day(start)
        except ValueError:
            return CheckResult.blocked(CheckKind.RANGE, f"Start date {start!r} is not a valid date")
        try:
            end_day = parse_day(end)
        except ValueError:
            return CheckResult.blocked(CheckKind.RANGE, f"End date {end!r} is not a valid date")

        if end_day and not start_day:
            return CheckResult.blocked(CheckKind.RANGE, "Please choose a start date for this end date")
        if start_day and end_day and end_day < start_day:
            return CheckResult.blocked(CheckKind.RANGE, "End date must be after start date")

        today = self._today()
        earliest = _shift_years(today, -self.max_range_years)
        latest = _shift_years(today, self.max_range_years)
        for d in (start_day, end_day):
            if d and not (earliest <= d <= latest):
                return CheckResult.blocked(
                    CheckKind.RANGE,
                    f"Dates must be within {self.max_range_years} years of today",
                )
        return CheckResult.ok()

    def check_minimum_duration(self, span: DateSpan) -> CheckResult:
        days = duration_days(span)
        if days is not None and days < 1:
            return CheckResult.blocked(CheckKind.DURATION, "A leg must last at least 1 day")
        return CheckResult.ok()

    def find_overlap(
        self,
        legs: Sequence[Leg],
        candidate: LegDraft,
        editing_leg_id: Optional[str] = None,
    ) -> CheckResult:
        span = candidate.span
        if not span.is_dated:
            return CheckResult.ok()
        for leg in legs:
            if leg.id == editing_leg_id:
                continue
            if overlaps(span, leg.span):
                return CheckResult.blocked(
                    CheckKind.OVERLAP,
                    f"This leg overlaps with {leg.describe()}",
                    legs=[leg],
                )
        return CheckResult.ok()

    # ----------------------
    # advisories
    # ----------------------

    def find_duplicates(
        self,
        legs: Sequence[Leg],
        candidate: LegDraft,
        editing_leg_id: Optional[str] = None,
    ) -> CheckResult:
        key = _country_key(candidate.country)
        if not key:
            return CheckResult.ok()
        matches = [
            leg for leg in legs
            if leg.id != editing_leg_id and _country_key(leg.country) == key
        ]
        if not matches:
            return CheckResult.ok()

        country = matches[0].country
        if len(matches) == 1:
            message = f"You already have a leg in {country}"
        else:
            message = f"You already have {len(matches)} legs in {country}"
        ranges = [format_range(leg.span) for leg in matches if leg.span.is_dated]
        if ranges:
            message += f" ({', '.join(ranges)})"
        return CheckResult.advisory(CheckKind.DUPLICATE, message, legs=matches)

    def find_gap(
        self,
        legs: Sequence[Leg],
        candidate: LegDraft,
        editing_leg_id: Optional[str] = None,
    ) -> CheckResult:
        start, end = candidate.start_date, candidate.end_date
        if start is None:
            return CheckResult.ok()
        ordered = self.dated_legs(legs, editing_leg_id)
        for current, nxt in zip(ordered, ordered[1:]):
            if current.end_date is None:
                continue
            if start == current.end_date + ONE_DAY and (end is None or end < nxt.start_date):
                return CheckResult.advisory(
                    CheckKind.GAP,
                    f"This leg fills the gap between {current.country} and {nxt.country}",
                    legs=[current, nxt],
                )
        return CheckResult.ok()

    def suggest_chronological_order(
        self,
        legs: Sequence[Leg],
        candidate: LegDraft,
        editing_leg_id: Optional[str] = None,
    ) -> CheckResult:
        if candidate.start_date is None:
            return CheckResult.ok()
        ordered = self.dated_legs(legs, editing_leg_id)
        if not ordered:
            return CheckResult.ok()

        last = ordered[-1]
        last_day = last.end_date or last.start_date
        if candidate.start_date > last_day:
            return CheckResult.ok()

        suggested = last_day + ONE_DAY
        return CheckResult.advisory(
            CheckKind.ORDER,
            f"Your last leg, {last.country}, ends {format_day(last_day)}. "
            f"Consider starting this leg on {format_day(suggested)}.",
            legs=[last],
            suggested_start=suggested,
        )

    # ----------------------
    # chain
    # ----------------------

    def check(
        self,
        kind: CheckKind,
        legs: Sequence[Leg],
        candidate: LegDraft,
        editing_leg_id: Optional[str] = None,
    ) -> CheckResult:
        if kind is CheckKind.COUNTRY:
            result = self.check_country(candidate.country)
        elif kind is CheckKind.RANGE:
            result = self.check_range_validity(candidate.start_date, candidate.end_date)
        elif kind is CheckKind.DURATION:
            result = self.check_minimum_duration(candidate.span)
        elif kind is CheckKind.OVERLAP:
            result = self.find_overlap(legs, candidate, editing_leg_id)
        elif kind is CheckKind.DUPLICATE:
            result = self.find_duplicates(legs, candidate, editing_leg_id)
        elif kind is CheckKind.GAP:
            result = self.find_gap(legs, candidate, editing_leg_id)
        elif kind is CheckKind.ORDER:
            result = self.suggest_chronological_order(legs, candidate, editing_leg_id)
        else:
            raise ValueError(f"Unknown check: {kind!r}")
        logger.debug("check %s -> %s %s", kind.value, result.status.value, result.message)
        return result

    def run(
        self,
        legs: Sequence[Leg],
        candidate: LegDraft,
        editing_leg_id: Optional[str] = None,
    ) -> List[CheckResult]:
        """
        Evaluates every check in CHECK_ORDER. Returns the non-ok results;
        the first blocked result ends the chain.
        """
        findings: List[CheckResult] = []
        for kind in CHECK_ORDER:
            result = self.check(kind, legs, candidate, editing_leg_id)
            if result.is_ok:
                continue
            findings.append(result)
            if result.is_blocked:
                break
        return findings

    def dated_legs(self, legs: Sequence[Leg], editing_leg_id: Optional[str] = None) -> List[Leg]:
        dated = [leg for leg in legs if leg.id != editing_leg_id and leg.span.is_dated]
        return sorted(dated, key=lambda leg: span_sort_key(leg.span))
