# utils/date_parser.py
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Union

import dateparser

PREFERRED_LANGS = ["en"]
_ISO_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Parses what a user types into a date field. Supports:
    - YYYY-MM-DD
    - YYYY/MM/DD
    - DD.MM.YYYY
    - DD/MM/YYYY
    - Natural language dates (e.g., "5 March 2025", "March 5") via dateparser
    If parsing fails, returns None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    v = str(value).strip()
    if not v:
        return None

    fmts = ["%Y-%m-%d", "%Y/%m/%d", "%d.%m.%Y", "%d/%m/%Y"]
    for fmt in fmts:
        try:
            return datetime.strptime(v, fmt).date()
        except ValueError:
            pass

    # ISO-shaped but not a real day (e.g. 2024-02-30): don't let dateparser guess
    if _ISO_SHAPE.match(v):
        return None

    parsed = dateparser.parse(
        v,
        languages=PREFERRED_LANGS,
        settings={"PREFER_DATES_FROM": "future", "STRICT_PARSING": False},
    )
    if parsed:
        return parsed.date()

    return None


def to_iso(value: Union[str, date, None]) -> str:
    """
    Normalizes a date entry to YYYY-MM-DD. Empty input gives "", and text that
    cannot be parsed is returned unchanged so validation can report it.
    """
    if value is None:
        return ""
    if isinstance(value, str) and not value.strip():
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return str(value).strip()
    return parsed.isoformat()
