# utils/money.py
from __future__ import annotations

from typing import Any


def clamp_non_negative(x: float) -> float:
    return max(0.0, float(x))


def normalize_budget(value: Any) -> float:
    """Leg budgets default to zero; blanks and junk count as zero too."""
    if value is None or value == "":
        return 0.0
    try:
        return clamp_non_negative(float(value))
    except (TypeError, ValueError):
        return 0.0
